#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rocky Tracker - Data API Dependencies
Провайдеры хранилища и метрик для FastAPI приложения
"""

import time
import logging
from typing import Any, Dict

from fastapi import Request

from database.manager import JsonFileStorage

logger = logging.getLogger(__name__)


# ===== МОНИТОРИНГ И МЕТРИКИ =====

class MetricsCollector:
    """Сборщик метрик запросов"""

    def __init__(self):
        self.metrics: Dict[str, Any] = {
            'requests_total': 0,
            'requests_by_endpoint': {},
            'errors_total': 0,
            'saves_total': 0,
        }
        self.start_time = time.time()

    def record_request(self, endpoint: str, status_code: int):
        """Записать метрику запроса"""
        self.metrics['requests_total'] += 1

        if endpoint not in self.metrics['requests_by_endpoint']:
            self.metrics['requests_by_endpoint'][endpoint] = 0
        self.metrics['requests_by_endpoint'][endpoint] += 1

        if status_code >= 400:
            self.metrics['errors_total'] += 1

    def record_save(self):
        self.metrics['saves_total'] += 1

    @property
    def uptime_seconds(self) -> float:
        return time.time() - self.start_time

    def get_metrics(self) -> Dict[str, Any]:
        """Получить все метрики"""
        return {**self.metrics, 'uptime_seconds': self.uptime_seconds}


# ===== ПРОВАЙДЕРЫ =====

def get_storage(request: Request) -> JsonFileStorage:
    """Файловое хранилище текущего приложения"""
    return request.app.state.storage


def get_metrics_collector(request: Request) -> MetricsCollector:
    return request.app.state.metrics


# ===== УТИЛИТЫ =====

def get_client_ip(request: Request) -> str:
    """Получить IP адрес клиента"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    if request.client is None:
        return "unknown"
    return request.client.host
