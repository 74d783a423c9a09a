from __future__ import annotations

from typing import Callable, List

import telebot

from application.services import (
    ExternalContext,
    TransferEngine,
    get_account,
    list_accounts,
    login,
    logout,
    register_account,
    resolve_session,
)
from domain.errors import LedgerError
from domain.models import Amount
from domain.repositories import AccountDirectory, IdentityRepository
from interfaces.formatting import (
    format_accounts,
    format_favorites,
    format_transfer,
    format_transfers,
    help_text,
    parse_amount,
)


def _build_external_context(message) -> ExternalContext:
    """Extract a channel-agnostic context object from a Telegram message."""

    user = message.from_user
    return ExternalContext(
        provider="telegram",
        provider_user_id=str(user.id),
        display_name=" ".join(p for p in (user.first_name, user.last_name) if p),
    )


def _command_args(message) -> List[str]:
    # Drop the leading "/command" token.
    return message.text.split()[1:]


def create_telegram_bot(
    bot_token: str,
    engine: TransferEngine,
    directory: AccountDirectory,
    identity_repo: IdentityRepository,
    initial_balance: Amount,
) -> telebot.TeleBot:
    """
    Configure and return a TeleBot instance wired to the application layer.

    This module contains only Telegram-specific concerns: parsing Telegram
    messages and mapping them to/from application services.
    """

    bot = telebot.TeleBot(bot_token)

    def reply(message, text: str) -> None:
        bot.send_message(message.chat.id, text)

    def run(message, action: Callable[[], str]) -> None:
        """Send the text `action` returns, or the ledger error it raised."""

        try:
            text = action()
        except LedgerError as exc:
            text = exc.message
        reply(message, text)

    @bot.message_handler(commands=["start", "hello"])
    def handle_start(message):
        reply(
            message,
            "Welcome to the ledger bot!\n"
            "Use /register and /login to get started.\n"
            "Type /help to see available commands.",
        )

    @bot.message_handler(commands=["help"])
    def handle_help(message):
        reply(message, help_text("/"))

    @bot.message_handler(commands=["register"])
    def handle_register(message):
        args = _command_args(message)
        if len(args) < 2:
            reply(message, "Usage: /register <user> <password> [favorite ...]")
            return

        def action() -> str:
            account = register_account(
                directory,
                args[0],
                args[1],
                favored_recipients=args[2:],
                initial_balance=initial_balance,
            )
            return (
                f"Account {account.username} created "
                f"(favorites: {format_favorites(account)})."
            )

        run(message, action)

    @bot.message_handler(commands=["login"])
    def handle_login(message):
        args = _command_args(message)
        if len(args) != 2:
            reply(message, "Usage: /login <user> <password>")
            return

        def action() -> str:
            account = login(
                _build_external_context(message),
                args[0],
                args[1],
                directory,
                identity_repo,
            )
            return f"Logged in as {account.username}. Balance: {account.balance}"

        run(message, action)

    @bot.message_handler(commands=["logout"])
    def handle_logout(message):
        logout(_build_external_context(message), identity_repo)
        reply(message, "Logged out.")

    @bot.message_handler(commands=["balance"])
    def handle_balance(message):
        def action() -> str:
            username = resolve_session(_build_external_context(message), identity_repo)
            account = get_account(directory, username)
            return (
                f"{account.username}: {account.balance} "
                f"(favorites: {format_favorites(account)})"
            )

        run(message, action)

    @bot.message_handler(commands=["transfer"])
    def handle_transfer(message):
        args = _command_args(message)
        if len(args) != 2:
            reply(message, "Usage: /transfer <user> <amount>")
            return

        def action() -> str:
            sender = resolve_session(_build_external_context(message), identity_repo)
            record = engine.transfer(sender, args[0], parse_amount(args[1]))
            return f"Transfer done: {format_transfer(record)}"

        run(message, action)

    @bot.message_handler(commands=["transfers"])
    def handle_transfers(message):
        def action() -> str:
            resolve_session(_build_external_context(message), identity_repo)
            return format_transfers(engine.list_transfers())

        run(message, action)

    @bot.message_handler(commands=["users"])
    def handle_users(message):
        reply(message, format_accounts(list_accounts(directory)))

    return bot
