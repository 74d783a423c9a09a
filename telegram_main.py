import logging

from application.services import TransferEngine
from config import load_settings
from infrastructure.memory.account_directory import InMemoryAccountDirectory
from infrastructure.memory.identity_repository import InMemoryIdentityRepository
from infrastructure.memory.transfer_history import InMemoryTransferHistory
from interfaces.telegram.handlers import create_telegram_bot
from logging_config import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings()
    if not settings.telegram_token:
        raise RuntimeError("TELEGRAM_TOKEN environment variable is not set.")

    setup_logging(settings.log_level, settings.log_file)

    directory = InMemoryAccountDirectory()
    history = InMemoryTransferHistory()
    engine = TransferEngine(directory, history)
    identity_repo = InMemoryIdentityRepository()

    bot = create_telegram_bot(
        settings.telegram_token,
        engine,
        directory,
        identity_repo,
        settings.initial_balance,
    )
    logger.info("Telegram bot polling")
    bot.infinity_polling()


if __name__ == "__main__":
    main()
