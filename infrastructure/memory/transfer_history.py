from __future__ import annotations

import threading
from typing import List

from domain.models import TransferRecord
from domain.repositories import TransferHistory


class InMemoryTransferHistory(TransferHistory):
    """Append-only list of `TransferRecord`s kept for the process lifetime."""

    def __init__(self) -> None:
        self._records: List[TransferRecord] = []
        self._lock = threading.Lock()

    def append(self, record: TransferRecord) -> None:
        with self._lock:
            self._records.append(record)

    def list_all(self) -> List[TransferRecord]:
        with self._lock:
            return list(self._records)
