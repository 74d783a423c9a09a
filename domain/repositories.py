from __future__ import annotations

from typing import ContextManager, List, Optional, Protocol

from .models import Account, Amount, TransferRecord


class AccountDirectory(Protocol):
    """
    Abstraction over account storage.

    Implementations are a pure store: they perform no business validation.
    The Transfer Engine is responsible for checking invariants before it
    calls `apply_debit` / `apply_credit`.
    """

    def find_by_username(self, username: str) -> Optional[Account]:
        """Return the account with exactly this username, or None."""

        ...

    def get_all_accounts(self) -> List[Account]:
        """Return all accounts in registration order."""

        ...

    def create_if_absent(self, account: Account) -> bool:
        """
        Atomically add `account` unless its username is taken.

        Returns True if the account was created, False otherwise.
        """

        ...

    def apply_debit(self, account: Account, amount: Amount) -> None:
        ...

    def apply_credit(self, account: Account, amount: Amount) -> None:
        ...

    def lock_accounts(self, *usernames: str) -> ContextManager[None]:
        """
        Hold exclusive access to the named accounts for the `with` block.

        All acquired locks are released when the block exits, whether it
        returns normally or raises.
        """

        ...


class TransferHistory(Protocol):
    """Append-only, ordered log of committed transfers."""

    def append(self, record: TransferRecord) -> None:
        ...

    def list_all(self) -> List[TransferRecord]:
        """Return a snapshot of every record in insertion order."""

        ...


class IdentityRepository(Protocol):
    """
    Maps external identities (Telegram/Discord) to logged-in usernames.

    The application layer trusts whatever username this mapping returns
    as the sender of a transfer.
    """

    def find_username_by_external(
        self,
        provider: str,
        provider_user_id: str,
    ) -> Optional[str]:
        """Return the username bound to the given external identity, if any."""

        ...

    def set_external_identity(
        self,
        provider: str,
        provider_user_id: str,
        username: str,
    ) -> None:
        """Bind an external identity to a username (login)."""

        ...

    def clear_external_identity(
        self,
        provider: str,
        provider_user_id: str,
    ) -> None:
        """Remove any binding for the given external identity (logout)."""

        ...
