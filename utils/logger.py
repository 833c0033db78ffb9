import logging
import logging.config
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config import AppConfig, config


def setup_logger(log_file: str = "logs/rocky.log", max_bytes: int = 10_000_000, backup_count: int = 5,
                 level: Optional[str] = None):
    """Дополнительный файловый лог; уровень берется из LOG_LEVEL, если не задан явно"""
    Path(log_file).parent.mkdir(exist_ok=True, parents=True)
    level = level or config.log_level.value
    logger = logging.getLogger()
    logger.setLevel(level)
    handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setLevel(level)
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


def setup_logging(cfg: Optional[AppConfig] = None) -> logging.Logger:
    """Применение конфигурации логирования из AppConfig через dictConfig"""
    cfg = cfg or config
    if cfg.log_to_file:
        cfg.log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(cfg.get_logging_config())
    return logging.getLogger("rocky")
