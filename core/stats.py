"""Статистика по документу: цвета дней, активные цели, пропуски"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from core.models import AppData, DayColor, DayEntry, Goal
from utils.datetime_utils import MIN_DATE_KEY, from_date_key, get_month_days, is_date_missing_entry, today_key


def count_colors(days: Iterable[DayEntry]) -> Dict[str, int]:
    counts = {"red": 0, "yellow": 0, "green": 0}
    for day in days:
        if day.color != DayColor.NEUTRAL:
            counts[day.color.value] += 1
    return counts


def year_entries(app_data: AppData, year: int) -> List[DayEntry]:
    prefix = f"{year:04d}-"
    return [day for day in app_data.days if day.date.startswith(prefix)]


def current_goals(app_data: AppData, today: str) -> List[Goal]:
    """Цели без архивации или с completed_at не раньше сегодняшнего дня"""
    return [goal for goal in app_data.goals if not goal.is_archived(today)]


def archived_goals(app_data: AppData, today: str) -> List[Goal]:
    return [goal for goal in app_data.goals if goal.is_archived(today)]


def active_goals_on(app_data: AppData, date_key: str) -> List[Goal]:
    return [goal for goal in app_data.goals if goal.is_active_on(date_key)]


def missing_entry_dates(app_data: AppData, year: int, now: Optional[datetime] = None,
                        min_key: str = MIN_DATE_KEY) -> List[str]:
    """Дни года без записи (или с пустым текстом) до сегодняшнего дня"""
    missing = []
    for month in range(1, 13):
        for key in get_month_days(year, month):
            if is_date_missing_entry(key, app_data, now=now, min_key=min_key):
                missing.append(key)
    return missing


def goal_completion_rate(app_data: AppData, goal_id: str, today: str) -> float:
    """
    Процент дней, в которые цель выполнена, среди дней ее активности
    до сегодняшнего дня включительно.
    """
    goal = app_data.find_goal(goal_id)
    if goal is None:
        return 0.0

    end = min(today, goal.completed_at) if goal.completed_at else today
    if end < goal.start_date:
        return 0.0

    completed = sum(
        1 for day in app_data.days
        if goal.start_date <= day.date <= end and day.has_completed(goal_id)
    )
    active_days = _days_between(goal.start_date, end)
    return round(completed / active_days * 100, 2)


def _days_between(start_key: str, end_key: str) -> int:
    return (from_date_key(end_key) - from_date_key(start_key)).days + 1


def summary(app_data: AppData, year: int, now: Optional[datetime] = None) -> Dict[str, object]:
    """Сводка за год для отображения в заголовке"""
    today = today_key(now)
    entries = year_entries(app_data, year)
    return {
        "year": year,
        "entries": len(entries),
        "colors": count_colors(entries),
        "current_goals": len(current_goals(app_data, today)),
        "archived_goals": len(archived_goals(app_data, today)),
        "missing_days": len(missing_entry_dates(app_data, year, now=now)),
    }
