# services/__init__.py

"""
Сервисы Rocky Tracker: сессия дневника с автосохранением и уведомления.
"""

from .data_service import DiarySession, SaveStatus
from .notifications import Notification, NotificationLevel, NotificationService

__all__ = [
    'DiarySession',
    'SaveStatus',
    'Notification',
    'NotificationLevel',
    'NotificationService',
]
