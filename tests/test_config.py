import logging
import os
import tempfile
import unittest
from logging.handlers import RotatingFileHandler
from unittest import mock

from config import load_settings
from logging_config import setup_logging


class LoadSettingsTests(unittest.TestCase):
    def load(self, env):
        with mock.patch("config.load_dotenv"), mock.patch.dict(os.environ, env, clear=True):
            return load_settings()

    def test_defaults(self):
        settings = self.load({})

        self.assertIsNone(settings.discord_token)
        self.assertIsNone(settings.telegram_token)
        self.assertEqual(settings.initial_balance, 10000)
        self.assertEqual(settings.log_level, "INFO")
        self.assertIsNone(settings.log_file)

    def test_reads_environment(self):
        settings = self.load(
            {
                "DISCORD_TOKEN": "d",
                "TELEGRAM_TOKEN": "t",
                "INITIAL_BALANCE": "250",
                "LOG_LEVEL": "debug",
                "LOG_FILE": "ledger.log",
            }
        )

        self.assertEqual(settings.discord_token, "d")
        self.assertEqual(settings.telegram_token, "t")
        self.assertEqual(settings.initial_balance, 250)
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertEqual(settings.log_file, "ledger.log")

    def test_invalid_initial_balance(self):
        with self.assertRaises(ValueError):
            self.load({"INITIAL_BALANCE": "lots"})
        with self.assertRaises(ValueError):
            self.load({"INITIAL_BALANCE": "-1"})


class SetupLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self._saved = (root.level, root.handlers[:])
        # Keep the runner's own handlers out of reach of setup_logging.
        root.handlers = []

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        root.setLevel(self._saved[0])
        root.handlers = self._saved[1]

    def test_idempotent_console_setup(self):
        setup_logging("WARNING")
        setup_logging("WARNING")

        root = logging.getLogger()
        self.assertEqual(root.level, logging.WARNING)
        self.assertEqual(len(root.handlers), 1)

    def test_repeated_setup_closes_previous_file_handler(self):
        with tempfile.TemporaryDirectory() as tmp:
            setup_logging("INFO", os.path.join(tmp, "ledger.log"))
            first = [
                h for h in logging.getLogger().handlers
                if isinstance(h, RotatingFileHandler)
            ]
            self.assertEqual(len(first), 1)
            self.assertIsNotNone(first[0].stream)

            setup_logging("INFO")

            self.assertIsNone(first[0].stream)
            self.assertNotIn(first[0], logging.getLogger().handlers)
            self.assertEqual(len(logging.getLogger().handlers), 1)


if __name__ == "__main__":
    unittest.main()
