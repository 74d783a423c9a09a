from __future__ import annotations

import math
from typing import Iterable, List

from application.services import TRANSFER_FIELDS_MESSAGE
from domain.errors import InvalidArgumentError
from domain.models import Account, Amount, TransferRecord


def parse_amount(text: str) -> Amount:
    """
    Parse a chat argument into an amount.

    Integral text gives an int, anything else a float. Sign and range are
    left to the Transfer Engine; only unparsable or non-finite input is
    rejected here.
    """

    try:
        return int(text)
    except ValueError:
        pass

    try:
        value = float(text)
    except ValueError:
        raise InvalidArgumentError(TRANSFER_FIELDS_MESSAGE)

    if not math.isfinite(value):
        raise InvalidArgumentError(TRANSFER_FIELDS_MESSAGE)
    return value


def format_favorites(account: Account) -> str:
    if not account.favored_recipients:
        return "none"
    return ", ".join(sorted(account.favored_recipients))


def format_account(account: Account) -> str:
    return f"{account.username}: {account.balance} (favorites: {format_favorites(account)})"


def format_accounts(accounts: Iterable[Account]) -> str:
    lines = [format_account(a) for a in accounts]
    if not lines:
        return "No accounts registered yet."
    return "\n".join(lines)


def format_transfer(record: TransferRecord) -> str:
    when = record.timestamp.strftime("%Y-%m-%d %H:%M:%S")
    return f"[{when}] {record.sender} -> {record.recipient}: {record.amount}"


def format_transfers(records: List[TransferRecord]) -> str:
    if not records:
        return "No transfers yet."
    return "\n".join(format_transfer(r) for r in records)


def help_text(prefix: str) -> str:
    return (
        f"{prefix}register <user> <password> [favorite ...] - create an account\n"
        f"{prefix}login <user> <password>                 - log in on this chat\n"
        f"{prefix}logout                                  - log out\n"
        f"{prefix}balance                                 - show your balance\n"
        f"{prefix}transfer <user> <amount>                - send money\n"
        f"{prefix}transfers                               - list all transfers\n"
        f"{prefix}users                                   - list all accounts\n"
    )
