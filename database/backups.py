# database/backups.py

import logging
import os
import shutil
import time
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "rocky-"
BACKUP_KEEP = 7
BACKUP_MIN_INTERVAL_SECONDS = 24 * 60 * 60 - 30 * 60  # ~23.5 часа


def list_backups(backup_dir: Path) -> List[Path]:
    if not backup_dir.is_dir():
        return []
    return [p for p in backup_dir.iterdir() if p.is_file() and p.suffix == ".json"]


def _newest_first(paths: List[Path]) -> List[Path]:
    return sorted(paths, key=lambda p: (p.stat().st_mtime, p.name), reverse=True)


def latest_backup(backup_dir: Path) -> Optional[Tuple[Path, float]]:
    """Самый свежий бэкап и время его изменения"""
    backups = _newest_first(list_backups(backup_dir))
    if not backups:
        return None
    return backups[0], backups[0].stat().st_mtime


def rotate_backups(backup_dir: Path, keep: int = BACKUP_KEEP) -> List[Path]:
    """Удаляет все бэкапы, кроме ``keep`` самых новых"""
    removed = []
    for path in _newest_first(list_backups(backup_dir))[keep:]:
        try:
            path.unlink()
            removed.append(path)
        except OSError as e:
            logger.warning(f"⚠️ Не удалось удалить бэкап {path}: {e}")
    return removed


def ensure_periodic_backup(
    data_file: Path,
    backup_dir: Path,
    keep: int = BACKUP_KEEP,
    min_interval_seconds: float = BACKUP_MIN_INTERVAL_SECONDS,
    now: Optional[float] = None,
) -> Optional[Path]:
    """
    Копирует текущий файл данных в backup_dir, если последний бэкап
    старше min_interval_seconds. Возвращает путь нового бэкапа или None.
    """
    if not data_file.exists():
        return None

    now = time.time() if now is None else now
    latest = latest_backup(backup_dir)
    if latest is not None and now - latest[1] < min_interval_seconds:
        return None

    backup_dir.mkdir(parents=True, exist_ok=True)
    target = backup_dir / f"{BACKUP_PREFIX}{int(now)}.json"
    counter = 1
    while target.exists():
        target = backup_dir / f"{BACKUP_PREFIX}{int(now)}-{counter}.json"
        counter += 1

    shutil.copyfile(data_file, target)
    os.utime(target, (now, now))
    logger.info(f"💾 Создан бэкап: {target.name}")
    rotate_backups(backup_dir, keep)
    return target
