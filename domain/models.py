from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Set, Union

Amount = Union[int, float, Decimal]


@dataclass
class Account:
    """
    Domain representation of a ledger account.

    This model is intentionally simple and independent of any
    particular transport (Telegram, Discord, web) or storage backend.
    Only the Transfer Engine mutates `balance`.
    """

    username: str
    password_hash: str
    balance: Amount = 0
    favored_recipients: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class TransferRecord:
    """
    A committed transfer between two accounts.

    Records are created once per successful transfer and never changed.
    """

    sender: str
    recipient: str
    amount: Amount
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "from": self.sender,
            "to": self.recipient,
            "amount": self.amount,
            "date": self.timestamp.isoformat(),
        }
