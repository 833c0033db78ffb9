"""
Календарные утилиты: ключи дней, месяцы года, номера недель, прогресс года.

Ключ дня (date key) - строка YYYY-MM-DD, обозначающая локальный календарный
день. Все функции детерминированы при переданном ``now``.
"""

import calendar
import math
import re
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Dict, List, Optional, Union

import pytz

from config import config

if TYPE_CHECKING:
    from core.models import AppData

MIN_YEAR = 2025
MIN_DATE_KEY = "2025-01-01"
DATE_KEY_FORMAT = "%Y-%m-%d"

_DATE_KEY_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)

DateLike = Union[date, datetime]


def get_timezone() -> Optional[pytz.BaseTzInfo]:
    """Часовой пояс из конфигурации, None - локальные часы процесса"""
    if not config.timezone:
        return None
    return pytz.timezone(config.timezone)


def now_local() -> datetime:
    tz = get_timezone()
    return datetime.now(tz) if tz else datetime.now()


def _localize(now: Optional[datetime]) -> datetime:
    """Приводит ``now`` к настроенному часовому поясу"""
    tz = get_timezone()
    if now is None:
        return now_local()
    if tz is not None:
        return tz.localize(now) if now.tzinfo is None else now.astimezone(tz)
    if now.tzinfo is not None:
        return now.astimezone().replace(tzinfo=None)
    return now


def _local_midnight(year: int, month: int = 1, day: int = 1) -> datetime:
    tz = get_timezone()
    midnight = datetime(year, month, day)
    return tz.localize(midnight) if tz else midnight


def current_year(now: Optional[datetime] = None) -> int:
    return _localize(now).year


def to_date_key(d: DateLike) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def today_key(now: Optional[datetime] = None) -> str:
    """Ключ сегодняшнего локального дня"""
    return to_date_key(_localize(now))


def from_date_key(key: str) -> Optional[date]:
    """
    Обратная к to_date_key функция.

    Для некорректного ключа возвращает None вместо исключения;
    проверяйте ключ через is_date_key заранее.
    """
    try:
        year, month, day = (int(part) for part in key.split("-"))
        return date(year, month, day)
    except (ValueError, TypeError, AttributeError):
        return None


def is_date_key(value: object) -> bool:
    """Строка в каноническом виде YYYY-MM-DD, обозначающая реальный день"""
    if not isinstance(value, str):
        return False
    if not _DATE_KEY_RE.fullmatch(value):
        return False
    parsed = from_date_key(value)
    return parsed is not None and to_date_key(parsed) == value


def clamp_to_min_year(year: int) -> int:
    return MIN_YEAR if year < MIN_YEAR else year


def clamp_year(year: int, now: Optional[datetime] = None) -> int:
    return min(max(year, MIN_YEAR), current_year(now))


def format_date(d: DateLike, fmt: str = "%d.%m.%Y") -> str:
    return d.strftime(fmt)


def add_days(d: DateLike, days: int) -> DateLike:
    return d + timedelta(days=days)


def weekday_name(key: str) -> str:
    """Название дня недели для ключа (например, Monday)"""
    parsed = from_date_key(key)
    if parsed is None:
        raise ValueError(f"Неверный ключ дня: {key}")
    return parsed.strftime("%A")


# ===== МЕСЯЦЫ И ГОД =====

def month_label(year: int, month: int) -> str:
    """Короткая подпись месяца, например 'Jan 2025'"""
    return date(year, month, 1).strftime("%b %Y")


def get_month_length(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def get_month_days(year: int, month: int) -> List[str]:
    return [to_date_key(date(year, month, day)) for day in range(1, get_month_length(year, month) + 1)]


def get_year_months(year: int) -> List[Dict[str, object]]:
    """Двенадцать месяцев года: номер, подпись и ключи всех дней"""
    return [
        {"month": month, "label": month_label(year, month), "days": get_month_days(year, month)}
        for month in range(1, 13)
    ]


def get_year_months_clamped(year: int, min_key: str, max_key: str) -> List[Dict[str, object]]:
    """Как get_year_months, но дни ограничены диапазоном [min_key, max_key]; пустые месяцы отбрасываются"""
    months = []
    for month in get_year_months(year):
        days = [key for key in month["days"] if min_key <= key <= max_key]
        if days:
            months.append({**month, "days": days})
    return months


# ===== НЕДЕЛИ =====

def get_week_number(d: DateLike) -> int:
    """
    Номер недели с понедельника: день года сдвигается на день недели 1 января,
    неделя 1 - та, что содержит 1 января.
    """
    if isinstance(d, datetime):
        d = d.date()
    jan1 = date(d.year, 1, 1)
    day_of_year = (d - jan1).days + 1
    return math.ceil((day_of_year + jan1.weekday()) / 7)


def get_total_weeks_in_year(year: int) -> int:
    """
    Количество недель в году.

    Упрощение: 53-я неделя ISO никогда не сообщается, как и перенос
    31 декабря в неделю 1 следующего года - в обоих случаях 52.
    """
    week = date(year, 12, 31).isocalendar()[1]
    if week == 1 or week > 52:
        return 52
    return week


# ===== ПРОГРЕСС И ПРОПУСКИ =====

def get_year_progress(year: int, now: Optional[datetime] = None) -> float:
    """Доля прошедшего времени года в процентах (0..100)"""
    now = _localize(now)
    if year < now.year:
        return 100.0
    if year > now.year:
        return 0.0

    start = _local_midnight(year)
    end = _local_midnight(year + 1)
    elapsed = (now - start).total_seconds()
    total = (end - start).total_seconds()
    return max(0.0, min(100.0, elapsed / total * 100))


def is_date_missing_entry(
    date_key: str,
    app_data: "AppData",
    now: Optional[datetime] = None,
    min_key: str = MIN_DATE_KEY,
) -> bool:
    """
    День в диапазоне [min_key, сегодня) без записи или с пустым текстом.
    Сегодняшний день пропущенным не считается.
    """
    if not min_key <= date_key < today_key(now):
        return False
    day = app_data.find_day(date_key)
    return day is None or not day.text.strip()
