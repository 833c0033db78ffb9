#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rocky Tracker - Configuration
Централизованная конфигурация с валидацией

Все параметры читаются из переменных окружения.
"""

import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz


class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StorageKind(Enum):
    """Доступные бэкенды хранения"""
    FILE = "file"
    MEMORY = "memory"
    HTTP = "http"


@dataclass
class StorageConfig:
    """Конфигурация хранилища документа"""
    kind: StorageKind
    data_file: Path
    backup_dir: Path
    api_url: str = "http://localhost:8787"
    backup_keep: int = 7
    backup_interval_hours: float = 23.5
    save_debounce_ms: int = 500


@dataclass
class ServerConfig:
    """Конфигурация локального HTTP API"""
    host: str = "127.0.0.1"
    port: int = 8787
    debug_mode: bool = False


class AppConfig:
    """Главный класс конфигурации"""

    def __init__(self):
        self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""

        # Директории
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.backup_dir = Path(os.getenv('BACKUP_DIR', str(self.data_dir / 'backups')))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        # Часовой пояс: пустое значение означает локальные часы процесса
        self.timezone: Optional[str] = os.getenv('TIMEZONE') or None

        # Хранилище
        self.storage = StorageConfig(
            kind=StorageKind(os.getenv('STORAGE_BACKEND', 'file')),
            data_file=self.data_dir / "rocky.json",
            backup_dir=self.backup_dir,
            api_url=os.getenv('API_URL', 'http://localhost:8787'),
            backup_keep=int(os.getenv('BACKUP_KEEP', 7)),
            backup_interval_hours=float(os.getenv('BACKUP_INTERVAL_HOURS', 23.5)),
            save_debounce_ms=int(os.getenv('SAVE_DEBOUNCE_MS', 500))
        )

        # Сервер
        self.server = ServerConfig(
            host=os.getenv('HOST', '127.0.0.1'),
            port=int(os.getenv('PORT', 8787)),
            debug_mode=os.getenv('DEBUG_MODE', 'false').lower() == 'true'
        )

        # Логирование
        self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO'))
        self.log_to_file = os.getenv('LOG_TO_FILE', 'false').lower() == 'true'
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = []

        if self.timezone is not None and self.timezone not in pytz.all_timezones_set:
            errors.append(f"TIMEZONE '{self.timezone}' не является зоной pytz")

        if not 1024 <= self.server.port <= 65535:
            errors.append(f"Порт {self.server.port} вне допустимого диапазона (1024-65535)")

        if self.storage.backup_keep < 1:
            errors.append("BACKUP_KEEP должен быть положительным числом")

        if self.storage.backup_interval_hours < 0:
            errors.append("BACKUP_INTERVAL_HOURS не может быть отрицательным")

        if self.storage.save_debounce_ms < 0:
            errors.append("SAVE_DEBOUNCE_MS не может быть отрицательным")

        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    def ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [self.data_dir, self.backup_dir]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        logging_config = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'stream': sys.stdout
                }
            },
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'uvicorn.access': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
                'aiohttp': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.log_to_file:
            logging_config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"rocky_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return logging_config

    def is_development(self) -> bool:
        """Проверка режима разработки"""
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        """Проверка продакшн режима"""
        return self.environment == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь"""
        return {
            'environment': self.environment.value,
            'timezone': self.timezone or 'local',
            'storage': {
                'kind': self.storage.kind.value,
                'data_file': str(self.storage.data_file),
                'backup_dir': str(self.storage.backup_dir),
                'api_url': self.storage.api_url,
                'save_debounce_ms': self.storage.save_debounce_ms
            },
            'server': {
                'host': self.server.host,
                'port': self.server.port,
                'debug_mode': self.server.debug_mode
            },
            'log_level': self.log_level.value
        }


# Глобальный экземпляр конфигурации
config = AppConfig()

__all__ = [
    'config',
    'AppConfig',
    'Environment',
    'LogLevel',
    'StorageKind',
    'StorageConfig',
    'ServerConfig'
]
