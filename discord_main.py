from application.services import TransferEngine
from config import load_settings
from infrastructure.memory.account_directory import InMemoryAccountDirectory
from infrastructure.memory.identity_repository import InMemoryIdentityRepository
from infrastructure.memory.transfer_history import InMemoryTransferHistory
from interfaces.discord.handlers import create_discord_bot
from logging_config import setup_logging


def main() -> None:
    settings = load_settings()
    if not settings.discord_token:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set.")

    setup_logging(settings.log_level, settings.log_file)

    directory = InMemoryAccountDirectory()
    history = InMemoryTransferHistory()
    engine = TransferEngine(directory, history)
    identity_repo = InMemoryIdentityRepository()

    bot = create_discord_bot(engine, directory, identity_repo, settings.initial_balance)
    # discord.py installs its own log handler unless told otherwise.
    bot.run(settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
