# services/data_service.py

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Optional

from config import config
from core import operations
from core.models import AppData, create_empty_app_data
from core.schema import SchemaVersionPolicy
from core.validation import ValidationResult, validate_app_data
from database.storage import StorageBackend
from services.notifications import NotificationLevel, NotificationService

logger = logging.getLogger(__name__)


class SaveStatus(Enum):
    """Статус сохранения, отображаемый пользователю"""
    READY = "Ready"
    SAVING = "Saving…"
    SAVED = "Saved"
    ERROR = "Error saving"


class DiarySession:
    """
    Сессия дневника: текущий документ, статус сохранения и флаг
    сохранения "в полете".

    Возможности:
    - Загрузка с валидацией и откатом к пустому документу
    - Изменения документа через core.operations
    - Автосохранение с debounce (500 мс по умолчанию)
    - Не более одного сохранения одновременно, повторный запрос ставится в очередь
    - Уведомление пользователя об ошибке сохранения
    """

    FLUSH_POLL_SECONDS = 0.01

    def __init__(self, storage: StorageBackend, notifier: Optional[NotificationService] = None,
                 debounce_seconds: Optional[float] = None,
                 version_policy: Optional[SchemaVersionPolicy] = None):
        self.storage = storage
        self.notifier = notifier or NotificationService()
        if debounce_seconds is None:
            debounce_seconds = config.storage.save_debounce_ms / 1000
        self.debounce_seconds = debounce_seconds
        self.version_policy = version_policy

        self.data: AppData = create_empty_app_data()
        self.status = SaveStatus.READY
        self.saving = False
        self.last_validation: Optional[ValidationResult] = None

        # Метрики
        self.save_count = 0
        self.error_count = 0

        self._revision = 0
        self._saved_revision = 0
        self._resave_requested = False
        self._has_persisted = False  # в хранилище уже есть непустой документ
        self._debounce_task: Optional[asyncio.Task] = None

    @property
    def is_dirty(self) -> bool:
        return self._revision != self._saved_revision

    # ===== ЗАГРУЗКА =====

    async def load(self) -> AppData:
        """Загрузка документа; при любой проблеме - пустой документ"""
        logger.info(f"📂 Загрузка данных из {self.storage.name}...")
        self._reset(create_empty_app_data())
        try:
            raw = await self.storage.load()
        except Exception as e:
            logger.error(f"❌ Ошибка загрузки из {self.storage.name}: {e}")
            self.notifier.show(
                "Could not load data",
                "Storage is unavailable; starting with an empty diary",
                level=NotificationLevel.ERROR,
            )
            return self.data

        if raw is None:
            logger.info("📂 Данных нет, начинаем с пустого документа")
            return self.data

        if _is_legacy_demo(raw):
            self.notifier.show(
                "Migrated to new format",
                "Existing demo note kept only in memory this session",
                level=NotificationLevel.INFO,
                auto_close_ms=2500,
            )
            return self.data

        result = validate_app_data(raw, self.version_policy)
        self.last_validation = result
        if not result.ok:
            for error in result.errors:
                logger.error(f"❌ {error}")
            self.notifier.show(
                "Could not load data",
                f"{len(result.errors)} problem(s) found; starting with an empty diary",
                level=NotificationLevel.ERROR,
            )
            return self.data

        for warning in result.warnings:
            logger.warning(f"⚠️ {warning}")
        self._reset(result.data)
        self._has_persisted = not self.data.is_empty()
        logger.info(f"✅ Загружено: дней {len(self.data.days)}, целей {len(self.data.goals)}")
        return self.data

    def _reset(self, app_data: AppData) -> None:
        self.data = app_data
        self._revision = self._saved_revision = 0
        self.status = SaveStatus.READY

    # ===== ИЗМЕНЕНИЯ =====

    def apply(self, operation: Callable[..., AppData], *args: Any, **kwargs: Any) -> AppData:
        """Применить операцию к документу и запланировать сохранение"""
        self.data = operation(self.data, *args, **kwargs)
        self._revision += 1
        if not self.saving:
            self.status = SaveStatus.SAVING
        self.schedule_save()
        return self.data

    def replace_data(self, app_data: AppData) -> AppData:
        return self.apply(lambda _current: app_data)

    def upsert_day(self, date_key: str, **changes: Any) -> AppData:
        return self.apply(operations.upsert_day, date_key, **changes)

    def toggle_goal(self, date_key: str, goal_id: str) -> AppData:
        return self.apply(operations.toggle_goal_completion, date_key, goal_id)

    def add_goal(self, title: str, start_date: str, **fields: Any) -> AppData:
        return self.apply(operations.add_goal, title, start_date, **fields)

    def update_goal(self, goal_id: str, **changes: Any) -> AppData:
        return self.apply(operations.update_goal, goal_id, **changes)

    def archive_goal(self, goal_id: str, completed_at: str) -> AppData:
        return self.apply(operations.archive_goal, goal_id, completed_at)

    def delete_goal(self, goal_id: str) -> AppData:
        return self.apply(operations.delete_goal, goal_id)

    # ===== СОХРАНЕНИЕ =====

    def schedule_save(self) -> None:
        """Перезапуск debounce-таймера автосохранения"""
        self._cancel_debounce()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("Нет event loop, сохранение отложено до flush()")
            return
        self._debounce_task = loop.create_task(self._debounced_save())

    async def _debounced_save(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        await self.save()

    def _cancel_debounce(self) -> None:
        task = self._debounce_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        self._debounce_task = None

    async def save(self) -> bool:
        """
        Сохранение текущего документа. Если другое сохранение еще идет,
        запрос ставится в очередь и выполнится после него.
        """
        if self.saving:
            logger.debug("Сохранение уже выполняется, запрос поставлен в очередь")
            self._resave_requested = True
            return False

        if self.data.is_empty() and not self._has_persisted:
            logger.debug("Автосохранение пропущено: пустой документ")
            self.status = SaveStatus.READY
            return False

        self.saving = True
        self.status = SaveStatus.SAVING
        revision = self._revision
        snapshot = self.data.to_dict()
        try:
            ok = await self.storage.save(snapshot)
        except Exception as e:
            logger.error(f"❌ Автосохранение упало: {e}")
            ok = False
        finally:
            self.saving = False

        if ok:
            self.save_count += 1
            self._saved_revision = revision
            self._has_persisted = True
            self.status = SaveStatus.SAVED
            logger.debug(f"💾 Сохранено (ревизия {revision})")
        else:
            self.error_count += 1
            self.status = SaveStatus.ERROR
            self.notifier.show(
                "Save failed ❌",
                "Could not save your changes",
                level=NotificationLevel.ERROR,
            )

        if self._resave_requested:
            self._resave_requested = False
            if self.is_dirty:
                self.schedule_save()
        return ok

    async def flush(self) -> bool:
        """Немедленное сохранение (например, перед выходом)"""
        self._cancel_debounce()
        while self.saving:
            await asyncio.sleep(self.FLUSH_POLL_SECONDS)
        if not self.is_dirty:
            return True
        return await self.save()

    async def close(self) -> None:
        self._cancel_debounce()
        await self.storage.close()

    def stats(self) -> dict:
        return {
            "status": self.status.value,
            "days": len(self.data.days),
            "goals": len(self.data.goals),
            "dirty": self.is_dirty,
            "save_count": self.save_count,
            "error_count": self.error_count,
        }


def _is_legacy_demo(raw: Any) -> bool:
    """Старый демо-формат {version, message, updatedAt}"""
    return (
        isinstance(raw, dict)
        and isinstance(raw.get("message"), str)
        and "days" not in raw
        and "goals" not in raw
        and "habits" not in raw
    )
