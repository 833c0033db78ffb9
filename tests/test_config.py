import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from config import AppConfig, Environment, LogLevel, StorageKind, config
from utils.logger import setup_logger


def make_config(**env) -> AppConfig:
    with mock.patch.dict(os.environ, env):
        return AppConfig()


class TestAppConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            cfg = AppConfig()
        self.assertEqual(cfg.environment, Environment.DEVELOPMENT)
        self.assertEqual(cfg.storage.kind, StorageKind.FILE)
        self.assertEqual(cfg.storage.data_file, Path("data") / "rocky.json")
        self.assertEqual(cfg.storage.backup_dir, Path("data") / "backups")
        self.assertEqual(cfg.storage.save_debounce_ms, 500)
        self.assertEqual(cfg.server.port, 8787)
        self.assertIsNone(cfg.timezone)
        self.assertTrue(cfg.is_development())

    def test_environment_overrides(self) -> None:
        cfg = make_config(ENVIRONMENT="production", DATA_DIR="/srv/rocky", STORAGE_BACKEND="http",
                          API_URL="http://example.test:9000", PORT="9000", TIMEZONE="Europe/Berlin",
                          LOG_LEVEL="DEBUG", BACKUP_KEEP="3")
        self.assertTrue(cfg.is_production())
        self.assertEqual(cfg.storage.data_file, Path("/srv/rocky/rocky.json"))
        self.assertEqual(cfg.storage.kind, StorageKind.HTTP)
        self.assertEqual(cfg.storage.api_url, "http://example.test:9000")
        self.assertEqual(cfg.storage.backup_keep, 3)
        self.assertEqual(cfg.log_level, LogLevel.DEBUG)
        self.assertEqual(cfg.to_dict()["timezone"], "Europe/Berlin")

    def test_invalid_values_are_reported_together(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            make_config(TIMEZONE="Mars/Olympus", PORT="80", BACKUP_KEEP="0")
        message = str(ctx.exception)
        self.assertIn("Mars/Olympus", message)
        self.assertIn("80", message)
        self.assertIn("BACKUP_KEEP", message)

    def test_logging_config_adds_file_handler(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cfg = make_config(LOG_TO_FILE="true", LOG_DIR=tmp)
            logging_config = cfg.get_logging_config()
        self.assertIn("file", logging_config["handlers"])
        self.assertIn("file", logging_config["loggers"][""]["handlers"])
        self.assertNotIn("file", make_config(LOG_TO_FILE="false").get_logging_config()["handlers"])

    def test_ensure_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cfg = make_config(DATA_DIR=str(Path(tmp) / "data"))
            cfg.ensure_directories()
            self.assertTrue(cfg.data_dir.is_dir())
            self.assertTrue(cfg.backup_dir.is_dir())


class TestSetupLogger(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.log_file = Path(tmp.name) / "logs" / "rocky.log"
        root = logging.getLogger()
        self.addCleanup(root.setLevel, root.level)
        self.handlers_before = list(root.handlers)

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            if handler not in self.handlers_before:
                root.removeHandler(handler)
                handler.close()

    def test_explicit_level_is_kept(self) -> None:
        root = setup_logger(str(self.log_file), level="DEBUG")
        self.assertEqual(root.level, logging.DEBUG)
        added = [h for h in root.handlers if h not in self.handlers_before]
        self.assertEqual(len(added), 1)
        self.assertEqual(added[0].level, logging.DEBUG)
        self.assertTrue(self.log_file.parent.is_dir())

    def test_level_defaults_to_configured_log_level(self) -> None:
        with mock.patch.object(config, "log_level", LogLevel.DEBUG):
            root = setup_logger(str(self.log_file))
        self.assertEqual(root.level, logging.DEBUG)
        logging.getLogger("rocky.test").debug("debug line")
        for handler in root.handlers:
            handler.flush()
        self.assertIn("debug line", self.log_file.read_text(encoding="utf-8"))



if __name__ == "__main__":
    unittest.main(verbosity=2)
