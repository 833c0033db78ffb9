"""
Сервис уведомлений
"""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    """Уровни уведомлений"""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Notification:
    title: str
    message: str
    level: NotificationLevel = NotificationLevel.INFO
    auto_close_ms: Optional[int] = 4000


Listener = Callable[[Notification], None]


class NotificationService:
    """Уведомления пользователю: логируются, хранятся в истории и рассылаются подписчикам"""

    def __init__(self, history_size: int = 50):
        self.history: Deque[Notification] = deque(maxlen=history_size)
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Подписка на уведомления; возвращает функцию отписки"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def show(self, title: str, message: str, level: NotificationLevel = NotificationLevel.INFO,
             auto_close_ms: Optional[int] = 4000) -> Notification:
        notification = Notification(title=title, message=message, level=level, auto_close_ms=auto_close_ms)
        self.history.append(notification)

        log = logger.error if level == NotificationLevel.ERROR else logger.info
        log(f"🔔 {title}: {message}")

        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception as e:
                logger.error(f"❌ Ошибка обработчика уведомлений: {e}")
        return notification

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None
