from __future__ import annotations


class LedgerError(Exception):
    """Base class for every failure the ledger reports to its callers."""

    code = "ledger_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransferError(LedgerError):
    """A transfer was rejected before any balance changed."""

    code = "transfer_error"


class InvalidArgumentError(TransferError):
    code = "invalid_argument"


class AccountNotFoundError(TransferError):
    code = "account_not_found"


class InsufficientFundsError(TransferError):
    code = "insufficient_funds"


class CapExceededError(TransferError):
    code = "cap_exceeded"


class DuplicateAccountError(LedgerError):
    code = "duplicate_account"


class AuthenticationError(LedgerError):
    code = "authentication_failed"


class NotAuthenticatedError(LedgerError):
    """The caller has no logged-in account on its channel."""

    code = "not_authenticated"
