#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rocky Tracker - Data API Configuration
Настройки локального HTTP API (переменные окружения с префиксом ROCKY_)
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from config import config


class DashboardSettings(BaseSettings):
    """Настройки локального API сохранения данных"""

    model_config = SettingsConfigDict(env_prefix="ROCKY_", env_file=".env", extra="ignore")

    # ===== ОСНОВНЫЕ НАСТРОЙКИ =====

    APP_NAME: str = Field(
        default="Rocky Tracker Data API",
        description="Название приложения"
    )

    VERSION: str = Field(
        default="1.0.0",
        description="Версия API"
    )

    DEBUG: bool = Field(
        default=False,
        description="Режим отладки (включает /api/docs)"
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Уровень логирования"
    )

    # ===== СЕТЕВЫЕ НАСТРОЙКИ =====

    HOST: str = Field(
        default="127.0.0.1",
        description="Хост для запуска API"
    )

    PORT: int = Field(
        default=8787,
        description="Порт для запуска API"
    )

    # ===== CORS НАСТРОЙКИ =====

    ALLOWED_ORIGINS: List[str] = Field(
        default=["*"],
        description="Разрешенные источники для CORS"
    )

    # ===== ПУТИ И ФАЙЛЫ =====

    DATA_DIR: Path = Field(
        default_factory=lambda: config.data_dir,
        description="Директория с файлом данных (по умолчанию DATA_DIR из config)"
    )

    DATA_FILE_NAME: str = Field(
        default="rocky.json",
        description="Имя файла документа"
    )

    BACKUP_DIR: Optional[Path] = Field(
        default=None,
        description="Директория бэкапов (по умолчанию BACKUP_DIR из config для DATA_DIR из config, иначе DATA_DIR/backups)"
    )

    BACKUP_KEEP: int = Field(
        default=7,
        ge=1,
        description="Сколько бэкапов хранить"
    )

    BACKUP_INTERVAL_HOURS: float = Field(
        default=23.5,
        ge=0,
        description="Минимальный интервал между бэкапами"
    )

    @field_validator('PORT')
    @classmethod
    def validate_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError(f'Порт {v} вне допустимого диапазона')
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if v not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f'Неизвестный уровень логирования: {v}')
        return v

    @property
    def data_file(self) -> Path:
        return self.DATA_DIR / self.DATA_FILE_NAME

    @property
    def backup_path(self) -> Path:
        if self.BACKUP_DIR is not None:
            return self.BACKUP_DIR
        if self.DATA_DIR == config.data_dir:
            return config.backup_dir
        return self.DATA_DIR / "backups"


settings = DashboardSettings()
