from __future__ import annotations

import hashlib
import hmac
import logging
import math
import secrets
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from domain.errors import (
    AccountNotFoundError,
    AuthenticationError,
    CapExceededError,
    DuplicateAccountError,
    InsufficientFundsError,
    InvalidArgumentError,
    NotAuthenticatedError,
    TransferError,
)
from domain.models import Account, Amount, TransferRecord
from domain.repositories import AccountDirectory, IdentityRepository, TransferHistory

logger = logging.getLogger(__name__)

# Transfers at or above this amount need a favored recipient.
TRANSFER_CAP = 5000
DEFAULT_INITIAL_BALANCE = 10000

TRANSFER_FIELDS_MESSAGE = "required fields: from, to, amount(number)"
CREDENTIAL_FIELDS_MESSAGE = "username and password are required"

_PBKDF2_ITERATIONS = 100_000


@dataclass
class ExternalContext:
    """
    Information about the caller from a particular channel (Telegram, Discord).

    The application layer never depends on concrete SDK types; it only sees
    this small context object.
    """

    provider: str
    provider_user_id: str
    display_name: str = ""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_valid_amount(amount: object) -> bool:
    # bool is an int subclass but never a meaningful amount.
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        return False
    if isinstance(amount, Decimal):
        return amount.is_finite() and amount > 0
    return math.isfinite(amount) and amount > 0


def _is_non_empty_str(value: object) -> bool:
    return isinstance(value, str) and value != ""


def _mixes_decimal_and_float(*values: object) -> bool:
    # Decimal and float do not support arithmetic with each other.
    return any(isinstance(v, Decimal) for v in values) and any(
        isinstance(v, float) for v in values
    )


class TransferEngine:
    """
    The single authority deciding whether a transfer executes.

    Validation runs in a fixed order and the first failing rule wins:

    1. shape of the arguments
    2. both accounts exist, and their balances can be combined with the
       amount (Decimal and float never mix)
    3. the sender can cover the amount
    4. amounts at or above `TRANSFER_CAP` go to favored recipients only

    Only after all checks pass are balances mutated and the record appended,
    so a rejected transfer leaves every balance and the history untouched.
    Steps 3 to 5 run while holding both account locks.
    """

    def __init__(
        self,
        directory: AccountDirectory,
        history: TransferHistory,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._directory = directory
        self._history = history
        self._clock = clock or _utc_now

    def transfer(self, sender: str, recipient: str, amount: Amount) -> TransferRecord:
        try:
            record = self._transfer(sender, recipient, amount)
        except TransferError as exc:
            logger.info(
                "Transfer %r -> %r of %r rejected: %s",
                sender,
                recipient,
                amount,
                type(exc).__name__,
            )
            raise

        logger.info("Transfer %s -> %s of %s committed", sender, recipient, amount)
        return record

    def _transfer(self, sender: str, recipient: str, amount: Amount) -> TransferRecord:
        if not (
            _is_non_empty_str(sender)
            and _is_non_empty_str(recipient)
            and _is_valid_amount(amount)
        ):
            raise InvalidArgumentError(TRANSFER_FIELDS_MESSAGE)

        source = self._directory.find_by_username(sender)
        target = self._directory.find_by_username(recipient)
        if source is None or target is None:
            raise AccountNotFoundError("account not found")

        with self._directory.lock_accounts(sender, recipient):
            if _mixes_decimal_and_float(source.balance, target.balance, amount):
                raise InvalidArgumentError(TRANSFER_FIELDS_MESSAGE)

            if source.balance < amount:
                raise InsufficientFundsError("insufficient funds")

            if amount >= TRANSFER_CAP and recipient not in source.favored_recipients:
                raise CapExceededError(
                    f"transfers >= {TRANSFER_CAP} only permitted to favored recipients"
                )

            self._directory.apply_debit(source, amount)
            self._directory.apply_credit(target, amount)

            record = TransferRecord(
                sender=sender,
                recipient=recipient,
                amount=amount,
                timestamp=self._clock(),
            )
            self._history.append(record)

        return record

    def list_transfers(self) -> List[TransferRecord]:
        """Return every committed transfer, oldest first."""

        return self._history.list_all()


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    """Return a `salt$digest` PBKDF2-SHA256 hash of `password`."""

    if salt is None:
        salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS
    )
    return f"{salt.hex()}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        salt_hex, _ = password_hash.split("$", 1)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    return hmac.compare_digest(hash_password(password, salt), password_hash)


def _require_credentials(username: object, password: object) -> None:
    if not (_is_non_empty_str(username) and _is_non_empty_str(password)):
        raise InvalidArgumentError(CREDENTIAL_FIELDS_MESSAGE)


def register_account(
    directory: AccountDirectory,
    username: str,
    password: str,
    favored_recipients: Optional[Iterable[str]] = None,
    initial_balance: Amount = DEFAULT_INITIAL_BALANCE,
) -> Account:
    """
    Create a new account with the starting balance.

    Favored recipients do not need to exist yet; they are plain usernames.
    """

    _require_credentials(username, password)

    favored = list(favored_recipients or [])
    if isinstance(favored_recipients, str) or not all(
        _is_non_empty_str(name) for name in favored
    ):
        raise InvalidArgumentError("favored recipients must be a list of usernames")

    account = Account(
        username=username,
        password_hash=hash_password(password),
        balance=initial_balance,
        favored_recipients=set(favored),
    )
    if not directory.create_if_absent(account):
        raise DuplicateAccountError("username already exists")

    logger.info("Registered account %s", username)
    return account


def authenticate(directory: AccountDirectory, username: str, password: str) -> Account:
    _require_credentials(username, password)

    account = directory.find_by_username(username)
    if account is None or not verify_password(password, account.password_hash):
        raise AuthenticationError("invalid credentials")
    return account


def _snapshot(account: Account) -> Account:
    return replace(account, favored_recipients=set(account.favored_recipients))


def get_account(directory: AccountDirectory, username: str) -> Account:
    """
    Return a copy of the account taken while holding its lock.

    Raises AccountNotFoundError if no account has this username.
    """

    account = directory.find_by_username(username)
    if account is None:
        raise AccountNotFoundError("account not found")
    with directory.lock_accounts(username):
        return _snapshot(account)


def list_accounts(directory: AccountDirectory) -> List[Account]:
    """Return copies of every account, read under all account locks."""

    accounts = directory.get_all_accounts()
    with directory.lock_accounts(*(a.username for a in accounts)):
        return [_snapshot(a) for a in accounts]


def login(
    external_ctx: ExternalContext,
    username: str,
    password: str,
    directory: AccountDirectory,
    identity_repo: IdentityRepository,
) -> Account:
    """
    Authenticate and bind the caller's channel identity to the account.

    A later `resolve_session` for the same identity returns this username.
    """

    account = authenticate(directory, username, password)
    identity_repo.set_external_identity(
        external_ctx.provider, external_ctx.provider_user_id, account.username
    )
    logger.info(
        "%s user %s (%s) logged in as %s",
        external_ctx.provider,
        external_ctx.provider_user_id,
        external_ctx.display_name,
        account.username,
    )
    return account


def logout(external_ctx: ExternalContext, identity_repo: IdentityRepository) -> None:
    identity_repo.clear_external_identity(
        external_ctx.provider, external_ctx.provider_user_id
    )


def resolve_session(
    external_ctx: ExternalContext,
    identity_repo: IdentityRepository,
) -> str:
    username = identity_repo.find_username_by_external(
        external_ctx.provider, external_ctx.provider_user_id
    )
    if username is None:
        raise NotAuthenticatedError("login required")
    return username
