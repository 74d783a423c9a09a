from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from domain.models import Account, Amount
from domain.repositories import AccountDirectory


class InMemoryAccountDirectory(AccountDirectory):
    """
    Process-local implementation of `AccountDirectory`.

    Accounts live in a dict keyed by username (insertion order is
    registration order). Each account gets its own lock; `_registry_lock`
    only guards the dicts themselves.
    """

    def __init__(self) -> None:
        self._accounts: Dict[str, Account] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def find_by_username(self, username: str) -> Optional[Account]:
        with self._registry_lock:
            return self._accounts.get(username)

    def get_all_accounts(self) -> List[Account]:
        with self._registry_lock:
            return list(self._accounts.values())

    def create_if_absent(self, account: Account) -> bool:
        with self._registry_lock:
            if account.username in self._accounts:
                return False
            self._accounts[account.username] = account
            self._locks[account.username] = threading.Lock()
            return True

    def apply_debit(self, account: Account, amount: Amount) -> None:
        account.balance -= amount

    def apply_credit(self, account: Account, amount: Amount) -> None:
        account.balance += amount

    @contextmanager
    def lock_accounts(self, *usernames: str) -> Iterator[None]:
        # Sorted order so that A->B and B->A transfers cannot deadlock.
        names = sorted(set(usernames))
        with self._registry_lock:
            locks = [self._locks[name] for name in names]

        acquired: List[threading.Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
