from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple

from domain.repositories import IdentityRepository


class InMemoryIdentityRepository(IdentityRepository):
    """
    In-memory implementation of `IdentityRepository`.

    Stores mappings from (provider, provider_user_id) to the username that
    identity is logged in as. Sessions do not survive a restart.
    """

    def __init__(self) -> None:
        self._mapping: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def find_username_by_external(
        self,
        provider: str,
        provider_user_id: str,
    ) -> Optional[str]:
        with self._lock:
            return self._mapping.get((provider, provider_user_id))

    def set_external_identity(
        self,
        provider: str,
        provider_user_id: str,
        username: str,
    ) -> None:
        """
        Upsert a mapping from external identity to username.
        """

        with self._lock:
            self._mapping[(provider, provider_user_id)] = username

    def clear_external_identity(
        self,
        provider: str,
        provider_user_id: str,
    ) -> None:
        with self._lock:
            self._mapping.pop((provider, provider_user_id), None)
