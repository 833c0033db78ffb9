#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rocky Tracker - Storage Backends
Загрузка и сохранение документа: load() -> Optional[raw], save(raw) -> bool

Ядро не знает, какой бэкенд активен; ошибки ввода-вывода логируются
и возвращаются как None/False.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, MutableMapping, Optional

import aiohttp

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class StorageError(Exception):
    """Базовое исключение хранилища"""
    pass

# ===== BASE =====

class StorageBackend(ABC):
    """Абстрактное хранилище одного JSON-документа"""

    name = "abstract"

    @abstractmethod
    async def load(self) -> Optional[Any]:
        """Сырое значение документа или None, если данных нет/ошибка"""

    @abstractmethod
    async def save(self, payload: Any) -> bool:
        """True при успешной записи"""

    async def close(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


class LocalStorageBackend(StorageBackend):
    """
    Локальное key-value хранилище (аналог localStorage браузера):
    документ хранится сериализованной строкой под ключом ``rocky``.
    """

    name = "memory"
    STORAGE_KEY = "rocky"

    def __init__(self, store: Optional[MutableMapping[str, str]] = None, key: str = STORAGE_KEY):
        self.store: MutableMapping[str, str] = store if store is not None else {}
        self.key = key

    async def load(self) -> Optional[Any]:
        raw = self.store.get(self.key)
        if not raw:
            logger.debug("📂 Локальное хранилище пусто")
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"❌ Ошибка парсинга JSON из локального хранилища: {e}")
            return None
        logger.debug(f"📂 Загружено из локального хранилища: {len(raw)} байт")
        return data

    async def save(self, payload: Any) -> bool:
        try:
            self.store[self.key] = json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"❌ Не удалось сериализовать документ: {e}")
            return False
        return True


class HttpApiStorage(StorageBackend):
    """Клиент локального HTTP API: GET /api/load, POST /api/save"""

    name = "http"

    def __init__(self, base_url: str, timeout: float = 10.0,
                 session: Optional[aiohttp.ClientSession] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def load(self) -> Optional[Any]:
        url = f"{self.base_url}/api/load"
        try:
            session = await self._get_session()
            async with session.get(url) as resp:
                if resp.status == 404:
                    logger.info("📂 Документ на сервере отсутствует")
                    return None
                if resp.status != 200:
                    logger.error(f"❌ GET {url} вернул {resp.status}")
                    return None
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"❌ Ошибка загрузки с {url}: {e}")
            return None

    async def save(self, payload: Any) -> bool:
        url = f"{self.base_url}/api/save"
        try:
            session = await self._get_session()
            async with session.post(url, json=payload) as resp:
                if resp.status in (200, 204):
                    return True
                body = await resp.text()
                logger.error(f"❌ POST {url} вернул {resp.status}: {body[:200]}")
                return False
        except (aiohttp.ClientError, asyncio.TimeoutError, TypeError, ValueError) as e:
            logger.error(f"❌ Ошибка сохранения на {url}: {e}")
            return False

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
