# database/manager.py

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from config import AppConfig, StorageKind, config
from core.models import create_empty_app_data
from database.backups import BACKUP_KEEP, ensure_periodic_backup, latest_backup
from database.storage import HttpApiStorage, LocalStorageBackend, StorageBackend, StorageError

logger = logging.getLogger(__name__)


def default_document() -> dict:
    return create_empty_app_data().to_dict()


def safe_write(path: Path, contents: str) -> None:
    """Атомарная запись через временный файл .json.tmp"""
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(contents)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, path)


class JsonFileStorage(StorageBackend):
    """
    Файловое хранилище документа с периодическими бэкапами.

    - файла нет: создается и возвращается пустой документ;
    - файл поврежден: читается последний бэкап, иначе пустой документ;
    - перед записью раз в ~23.5 часа делается копия в backup_dir.
    """

    name = "file"

    def __init__(self, data_file: Path, backup_dir: Optional[Path] = None,
                 backup_keep: int = BACKUP_KEEP, backup_interval_hours: float = 23.5):
        self.data_file = Path(data_file)
        self.backup_dir = Path(backup_dir) if backup_dir else self.data_file.parent / "backups"
        self.backup_keep = backup_keep
        self.backup_interval_seconds = backup_interval_hours * 3600

    # ===== СИНХРОННЫЙ API =====

    def read(self) -> Any:
        try:
            if not self.data_file.exists():
                logger.info(f"📂 Файл данных не найден, создаем пустой документ: {self.data_file}")
                document = default_document()
                self.data_file.parent.mkdir(parents=True, exist_ok=True)
                safe_write(self.data_file, json.dumps(document, ensure_ascii=False, indent=2))
                return document

            content = self.data_file.read_bytes()
        except OSError as e:
            raise StorageError(f"Не удалось прочитать {self.data_file}: {e}") from e

        try:
            return json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"❌ Ошибка парсинга JSON в {self.data_file}: {e}")
            return self._read_latest_backup()

    def _read_latest_backup(self) -> Any:
        latest = latest_backup(self.backup_dir)
        if latest is not None:
            path = latest[0]
            try:
                data = json.loads(path.read_bytes().decode("utf-8"))
                logger.warning(f"⚠️ Документ восстановлен из бэкапа {path.name}")
                return data
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.error(f"❌ Бэкап {path.name} тоже не читается: {e}")
        return default_document()

    def write(self, payload: Any) -> None:
        contents = json.dumps(payload, ensure_ascii=False, indent=2)
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            ensure_periodic_backup(self.data_file, self.backup_dir, keep=self.backup_keep,
                                   min_interval_seconds=self.backup_interval_seconds)
            safe_write(self.data_file, contents)
        except OSError as e:
            raise StorageError(f"Не удалось записать {self.data_file}: {e}") from e
        logger.debug(f"💾 Сохранено {len(contents)} байт в {self.data_file}")

    # ===== АСИНХРОННЫЙ API =====

    async def load(self) -> Optional[Any]:
        try:
            return await asyncio.to_thread(self.read)
        except StorageError as e:
            logger.error(f"❌ {e}")
            return None

    async def save(self, payload: Any) -> bool:
        try:
            await asyncio.to_thread(self.write, payload)
        except (StorageError, TypeError, ValueError) as e:
            logger.error(f"❌ Ошибка сохранения: {e}")
            return False
        return True


def create_storage(cfg: Optional[AppConfig] = None) -> StorageBackend:
    """Бэкенд хранения по STORAGE_BACKEND"""
    cfg = cfg or config
    storage_cfg = cfg.storage

    if storage_cfg.kind == StorageKind.MEMORY:
        backend = LocalStorageBackend()
    elif storage_cfg.kind == StorageKind.HTTP:
        backend = HttpApiStorage(storage_cfg.api_url)
    else:
        backend = JsonFileStorage(
            storage_cfg.data_file,
            backup_dir=storage_cfg.backup_dir,
            backup_keep=storage_cfg.backup_keep,
            backup_interval_hours=storage_cfg.backup_interval_hours,
        )

    logger.info(f"🗄️ Хранилище: {backend.name}")
    return backend
