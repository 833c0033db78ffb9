#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rocky Tracker - Data API (FastAPI Application)
Локальный HTTP API для загрузки и сохранения документа дневника

Эндпоинты:
    GET     /api/load    - текущий документ (создается пустой, если файла нет)
    POST    /api/save    - запись документа, тело - JSON
    OPTIONS /api/*       - preflight, 204
    GET     /api/health  - состояние сервиса

Модульный app использует DashboardSettings: пути берутся из ROCKY_DATA_DIR /
ROCKY_BACKUP_DIR, а без них из DATA_DIR / BACKUP_DIR основного config.
"""

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from dashboard.config import DashboardSettings, settings
from dashboard.dependencies import MetricsCollector, get_client_ip, get_metrics_collector, get_storage
from database.backups import latest_backup, list_backups
from database.manager import JsonFileStorage
from database.storage import StorageError
from shared.models import ErrorResponse, HealthCheck, SaveResponse, ServiceStatus

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def create_app(app_settings: Optional[DashboardSettings] = None) -> FastAPI:
    """Создание FastAPI приложения поверх файлового хранилища"""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Запуск Rocky Tracker Data API...")
        logger.info(f"📂 Файл данных: {app_settings.data_file}")
        logger.info(f"🌐 API доступен на: http://{app_settings.HOST}:{app_settings.PORT}")
        yield
        logger.info(f"🛑 Остановка API, метрики: {app.state.metrics.get_metrics()}")

    app = FastAPI(
        title=app_settings.APP_NAME,
        description="Локальное хранилище документа Rocky Tracker",
        version=app_settings.VERSION,
        docs_url="/api/docs" if app_settings.DEBUG else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if app_settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.storage = JsonFileStorage(
        app_settings.data_file,
        backup_dir=app_settings.backup_path,
        backup_keep=app_settings.BACKUP_KEEP,
        backup_interval_hours=app_settings.BACKUP_INTERVAL_HOURS,
    )
    app.state.metrics = MetricsCollector()

    # ===== MIDDLEWARE =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Логирование запросов и сбор метрик"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            f"{request.method} {request.url.path} "
            f"- {response.status_code} "
            f"- {process_time:.3f}s "
            f"- {get_client_ip(request)}"
        )
        request.app.state.metrics.record_request(request.url.path, response.status_code)
        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        return response

    # OPTIONS на любой /api/* отвечает 204, в том числе для несуществующих путей
    @app.middleware("http")
    async def preflight_middleware(request: Request, call_next):
        if request.method == "OPTIONS" and request.url.path.startswith("/api/"):
            return Response(status_code=204, headers=CORS_HEADERS)
        return await call_next(request)

    # ===== ОБРАБОТЧИКИ ОШИБОК =====

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(f"❌ Необработанная ошибка {request.method} {request.url.path}: {exc}")
        return _error(500, str(exc) or "Internal Server Error")

    # ===== API =====

    @app.get("/api/load")
    async def load_data(storage: JsonFileStorage = Depends(get_storage)):
        """Текущий документ как есть, без валидации"""
        try:
            document = await run_in_threadpool(storage.read)
        except StorageError as e:
            logger.error(f"❌ {e}")
            return _error(500, str(e))
        return JSONResponse(content=document)

    @app.post("/api/save", response_model=SaveResponse, responses={500: {"model": ErrorResponse}})
    async def save_data(request: Request,
                        storage: JsonFileStorage = Depends(get_storage),
                        metrics: MetricsCollector = Depends(get_metrics_collector)):
        body = (await request.body()).decode("utf-8", errors="replace")
        try:
            payload = json.loads(body or "{}")
        except json.JSONDecodeError as e:
            logger.warning(f"⚠️ Некорректный JSON в /api/save: {e}")
            return _error(500, str(e))

        try:
            await run_in_threadpool(storage.write, payload)
        except StorageError as e:
            logger.error(f"❌ {e}")
            return _error(500, str(e))

        metrics.record_save()
        return SaveResponse(ok=True)

    @app.get("/api/health", response_model=HealthCheck)
    async def health_check(storage: JsonFileStorage = Depends(get_storage),
                           metrics: MetricsCollector = Depends(get_metrics_collector)):
        data_file_exists = storage.data_file.exists()
        backups = list_backups(storage.backup_dir)
        latest = latest_backup(storage.backup_dir)

        return HealthCheck(
            status=ServiceStatus.OK if data_file_exists else ServiceStatus.DEGRADED,
            service=app_settings.APP_NAME,
            version=app_settings.VERSION,
            timestamp=time.time(),
            uptime_seconds=metrics.uptime_seconds,
            data_file=str(storage.data_file),
            data_file_exists=data_file_exists,
            backups=len(backups),
            last_backup=latest[0].name if latest else None,
        )

    return app


app = create_app()
