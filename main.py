#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rocky Tracker - Командная строка

Команды:
    serve                 - запуск локального Data API (uvicorn)
    validate FILE         - проверка документа, код выхода 1 при ошибках
    sample [--out FILE]   - демонстрационный документ
    progress [--year Y]   - прогресс года и сводка по документу
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config import config
from core.sample_data import make_sample_app_data
from core.stats import summary
from core.validation import validate_app_data
from database.manager import JsonFileStorage, safe_write
from database.storage import StorageError
from utils.datetime_utils import clamp_year, current_year, get_total_weeks_in_year, get_year_progress
from utils.logger import setup_logger, setup_logging

logger = logging.getLogger(__name__)


# ===== КОМАНДЫ =====

def cmd_serve(args: argparse.Namespace) -> int:
    """Запуск Data API"""
    import uvicorn

    from dashboard.app import create_app
    from dashboard.config import DashboardSettings

    if args.log_file:
        setup_logger(args.log_file, level=config.log_level.value)

    app_settings = DashboardSettings(
        HOST=args.host,
        PORT=args.port,
        DATA_DIR=config.data_dir,
        BACKUP_DIR=config.storage.backup_dir,
        BACKUP_KEEP=config.storage.backup_keep,
        BACKUP_INTERVAL_HOURS=config.storage.backup_interval_hours,
        DEBUG=config.server.debug_mode,
        LOG_LEVEL=config.log_level.value,
    )
    logger.info(f"🌐 Запуск Data API на http://{args.host}:{args.port}")
    uvicorn.run(
        create_app(app_settings),
        host=args.host,
        port=args.port,
        log_level=config.log_level.value.lower(),
    )
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Проверка JSON-документа"""
    path = Path(args.file)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        print(f"❌ Не удалось прочитать {path}: {e}")
        return 1
    except json.JSONDecodeError as e:
        print(f"❌ Некорректный JSON в {path}: {e}")
        return 1

    result = validate_app_data(raw)
    for warning in result.warnings:
        print(f"⚠️ {warning}")
    for error in result.errors:
        print(f"❌ {error}")

    if not result.ok:
        return 1

    print(f"✅ OK: дней {len(result.data.days)}, целей {len(result.data.goals)}")
    return 0


def cmd_sample(args: argparse.Namespace) -> int:
    """Демонстрационный документ в stdout или файл"""
    contents = json.dumps(make_sample_app_data().to_dict(), ensure_ascii=False, indent=2)
    if not args.out:
        print(contents)
        return 0

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    safe_write(out, contents)
    print(f"💾 Сохранено в {out}")
    return 0


def cmd_progress(args: argparse.Namespace) -> int:
    """Прогресс года и сводка по файлу данных"""
    year = clamp_year(args.year if args.year is not None else current_year())
    print(f"📅 {year}: {get_year_progress(year):.1f}% года, недель {get_total_weeks_in_year(year)}")

    data_file = Path(args.data_file) if args.data_file else config.storage.data_file
    if not data_file.exists():
        return 0

    try:
        raw = JsonFileStorage(data_file, backup_dir=config.storage.backup_dir).read()
    except StorageError as e:
        print(f"❌ {e}")
        return 1

    result = validate_app_data(raw)
    if not result.ok:
        for error in result.errors:
            print(f"❌ {error}")
        return 1

    info = summary(result.data, year)
    colors = info["colors"]
    print(f"📝 Записей: {info['entries']}, пропущено дней: {info['missing_days']}")
    print(f"🟢 {colors['green']}  🟡 {colors['yellow']}  🔴 {colors['red']}")
    print(f"🎯 Целей: текущих {info['current_goals']}, в архиве {info['archived_goals']}")
    return 0


# ===== ПАРСЕР =====

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rocky", description="Rocky Tracker - дневник и цели")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Запуск локального Data API")
    serve.add_argument("--host", default=config.server.host, help="Хост сервера")
    serve.add_argument("--port", type=int, default=config.server.port, help="Порт сервера")
    serve.add_argument("--log-file", help="Дополнительный лог-файл с ротацией")
    serve.set_defaults(func=cmd_serve)

    validate = subparsers.add_parser("validate", help="Проверка JSON-документа")
    validate.add_argument("file", help="Путь к документу")
    validate.set_defaults(func=cmd_validate)

    sample = subparsers.add_parser("sample", help="Демонстрационный документ")
    sample.add_argument("--out", help="Файл для записи (по умолчанию stdout)")
    sample.set_defaults(func=cmd_sample)

    progress = subparsers.add_parser("progress", help="Прогресс года")
    progress.add_argument("--year", type=int, help="Год (по умолчанию текущий)")
    progress.add_argument("--data-file", help="Файл данных (по умолчанию DATA_DIR/rocky.json)")
    progress.set_defaults(func=cmd_progress)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    return args.func(args)


# ===== ТОЧКА ВХОДА =====

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("👋 Остановлено пользователем")
