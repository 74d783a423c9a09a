from __future__ import annotations

import logging

import discord
from discord.ext import commands

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

logger = logging.getLogger(__name__)


def _build_external_context(user: discord.abc.User) -> ExternalContext:
    """Create an `ExternalContext` from a Discord user."""

    return ExternalContext(
        provider="discord",
        provider_user_id=str(user.id),
        display_name=user.display_name or user.name,
    )


def create_discord_bot(
    engine: TransferEngine,
    directory: AccountDirectory,
    identity_repo: IdentityRepository,
    initial_balance: Amount,
) -> commands.Bot:
    """
    Configure and return a Discord bot with behaviour analogous to
    the Telegram interface: register/login, balance, transfer and listings.
    """

    intents = discord.Intents.default()
    intents.message_content = True

    # Disable the default help command so we can provide our own `!help`.
    bot = commands.Bot(command_prefix="!", intents=intents, help_command=None)

    @bot.event
    async def on_ready():
        logger.info("Discord bot logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.event
    async def on_command_error(ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, commands.CommandInvokeError) and isinstance(
            error.original, LedgerError
        ):
            await ctx.send(error.original.message)
            return
        if isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
            await ctx.send(f"{error}\nType !help to see available commands.")
            return
        if isinstance(error, commands.CommandNotFound):
            return
        raise error

    @bot.command(name="start")
    async def start_cmd(ctx: commands.Context):
        await ctx.send(
            "Welcome to the ledger bot (Discord)!\n"
            "Use !register and !login to get started.\n"
            "Type !help to see available commands."
        )

    @bot.command(name="help")
    async def help_cmd(ctx: commands.Context):
        await ctx.send(help_text("!"))

    @bot.command(name="register")
    async def register_cmd(
        ctx: commands.Context,
        username: str,
        password: str,
        *favorites: str,
    ):
        account = register_account(
            directory,
            username,
            password,
            favored_recipients=favorites,
            initial_balance=initial_balance,
        )
        await ctx.send(
            f"Account {account.username} created "
            f"(favorites: {format_favorites(account)})."
        )

    @bot.command(name="login")
    async def login_cmd(ctx: commands.Context, username: str, password: str):
        account = login(
            _build_external_context(ctx.author),
            username,
            password,
            directory,
            identity_repo,
        )
        await ctx.send(
            f"Logged in as {account.username}. Balance: {account.balance}"
        )

    @bot.command(name="logout")
    async def logout_cmd(ctx: commands.Context):
        logout(_build_external_context(ctx.author), identity_repo)
        await ctx.send("Logged out.")

    @bot.command(name="balance")
    async def balance_cmd(ctx: commands.Context):
        username = resolve_session(_build_external_context(ctx.author), identity_repo)
        account = get_account(directory, username)
        await ctx.send(
            f"{account.username}: {account.balance} "
            f"(favorites: {format_favorites(account)})"
        )

    @bot.command(name="transfer")
    async def transfer_cmd(ctx: commands.Context, recipient: str, amount: str):
        """
        !transfer <user> <amount>  -> send <amount> from the logged-in account
        """

        sender = resolve_session(_build_external_context(ctx.author), identity_repo)
        record = engine.transfer(sender, recipient, parse_amount(amount))
        await ctx.send(f"Transfer done: {format_transfer(record)}")

    @bot.command(name="transfers")
    async def transfers_cmd(ctx: commands.Context):
        resolve_session(_build_external_context(ctx.author), identity_repo)
        await ctx.send(format_transfers(engine.list_transfers()))

    @bot.command(name="users")
    async def users_cmd(ctx: commands.Context):
        await ctx.send(format_accounts(list_accounts(directory)))

    return bot
