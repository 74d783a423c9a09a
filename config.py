from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from application.services import DEFAULT_INITIAL_BALANCE


@dataclass(frozen=True)
class Settings:
    discord_token: Optional[str]
    telegram_token: Optional[str]
    initial_balance: int
    log_level: str
    log_file: Optional[str]


def load_settings() -> Settings:
    """
    Read settings from the environment, after loading a `.env` file if present.

    Raises ValueError if INITIAL_BALANCE is not a non-negative integer.
    """

    load_dotenv()

    raw_balance = os.environ.get("INITIAL_BALANCE", str(DEFAULT_INITIAL_BALANCE))
    try:
        initial_balance = int(raw_balance)
    except ValueError:
        raise ValueError(f"INITIAL_BALANCE must be an integer, got {raw_balance!r}")
    if initial_balance < 0:
        raise ValueError("INITIAL_BALANCE must not be negative.")

    return Settings(
        discord_token=os.environ.get("DISCORD_TOKEN") or None,
        telegram_token=os.environ.get("TELEGRAM_TOKEN") or None,
        initial_balance=initial_balance,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        log_file=os.environ.get("LOG_FILE") or None,
    )
