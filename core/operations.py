"""
Изменения документа: записи дней и цели/привычки.

Каждая операция возвращает новый AppData и не трогает исходный.
"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional, Union

import pytz

from core.models import AppData, DayColor, DayEntry, Goal, ValidationError, validate_text
from utils.datetime_utils import is_date_key

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000

_UNSET = object()


class GoalNotFoundError(KeyError):
    """Цель с указанным id отсутствует в документе"""
    pass


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-время в UTC для createdAt/updatedAt"""
    now = now or datetime.now(pytz.utc)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    return now.astimezone(pytz.utc).isoformat().replace("+00:00", "Z")


def _require_date_key(value: str, field_name: str) -> str:
    if not is_date_key(value):
        raise ValidationError(f"{field_name} должен быть датой в формате YYYY-MM-DD: {value!r}")
    return value


def _coerce_color(color: Union[DayColor, str]) -> DayColor:
    try:
        return DayColor(color)
    except ValueError:
        valid_values = [c.value for c in DayColor]
        raise ValidationError(f"color должен быть одним из: {valid_values}")


def _replace_day(app_data: AppData, day: DayEntry) -> AppData:
    days = [d for d in app_data.days if d.date != day.date]
    days.append(day)
    days.sort(key=lambda d: d.date)
    return replace(app_data, days=days)


def _get_goal(app_data: AppData, goal_id: str) -> Goal:
    goal = app_data.find_goal(goal_id)
    if goal is None:
        raise GoalNotFoundError(goal_id)
    return goal

# ===== ДНИ =====

def upsert_day(
    app_data: AppData,
    date_key: str,
    text: Optional[str] = None,
    color: Optional[Union[DayColor, str]] = None,
    diary_entry: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AppData:
    """Создать или обновить запись дня; None означает "не менять поле" """
    _require_date_key(date_key, "date")
    stamp = utc_timestamp(now)
    existing = app_data.find_day(date_key)

    if existing is None:
        day = DayEntry(
            date=date_key,
            text=text or "",
            color=_coerce_color(color) if color is not None else DayColor.YELLOW,
            diary_entry=diary_entry,
            created_at=stamp,
            updated_at=stamp,
        )
    else:
        day = replace(
            existing,
            text=existing.text if text is None else text,
            color=existing.color if color is None else _coerce_color(color),
            diary_entry=existing.diary_entry if diary_entry is None else diary_entry,
            updated_at=stamp,
        )
    return _replace_day(app_data, day)


def toggle_goal_completion(
    app_data: AppData,
    date_key: str,
    goal_id: str,
    now: Optional[datetime] = None,
) -> AppData:
    """Отметить/снять выполнение цели в день; новый день создается зеленым"""
    _require_date_key(date_key, "date")
    _get_goal(app_data, goal_id)
    stamp = utc_timestamp(now)
    existing = app_data.find_day(date_key)

    if existing is None:
        day = DayEntry(
            date=date_key,
            text="",
            color=DayColor.GREEN,
            completed_goals=[goal_id],
            created_at=stamp,
            updated_at=stamp,
        )
    else:
        completed = existing.completed_goal_ids
        if goal_id in completed:
            completed.remove(goal_id)
        else:
            completed.append(goal_id)
        day = replace(existing, completed_goals=completed or None, updated_at=stamp)
    return _replace_day(app_data, day)

# ===== ЦЕЛИ =====

def add_goal(
    app_data: AppData,
    title: str,
    start_date: str,
    description: Optional[str] = None,
    completed_at: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AppData:
    title = validate_text(title, min_length=1, max_length=TITLE_MAX_LENGTH, field_name="title")
    _require_date_key(start_date, "startDate")
    if completed_at is not None:
        _require_date_key(completed_at, "completedAt")
    if description is not None:
        description = validate_text(description, min_length=0, max_length=DESCRIPTION_MAX_LENGTH,
                                    field_name="description")

    stamp = utc_timestamp(now)
    goal = Goal(
        id=f"g_{uuid.uuid4().hex[:12]}",
        title=title,
        start_date=start_date,
        completed_at=completed_at,
        description=description,
        created_at=stamp,
        updated_at=stamp,
    )
    return replace(app_data, goals=[*app_data.goals, goal])


def update_goal(
    app_data: AppData,
    goal_id: str,
    title=_UNSET,
    start_date=_UNSET,
    completed_at=_UNSET,
    description=_UNSET,
    now: Optional[datetime] = None,
) -> AppData:
    """
    Частичное обновление цели. completed_at=None снимает архивацию,
    description=None удаляет описание.
    """
    goal = _get_goal(app_data, goal_id)
    changes = {}
    if title is not _UNSET:
        changes["title"] = validate_text(title, min_length=1, max_length=TITLE_MAX_LENGTH, field_name="title")
    if start_date is not _UNSET:
        changes["start_date"] = _require_date_key(start_date, "startDate")
    if completed_at is not _UNSET:
        changes["completed_at"] = None if completed_at is None else _require_date_key(completed_at, "completedAt")
    if description is not _UNSET:
        changes["description"] = None if description is None else validate_text(
            description, min_length=0, max_length=DESCRIPTION_MAX_LENGTH, field_name="description")

    updated = replace(goal, updated_at=utc_timestamp(now), **changes)
    return replace(app_data, goals=[updated if g.id == goal_id else g for g in app_data.goals])


def archive_goal(app_data: AppData, goal_id: str, completed_at: str, now: Optional[datetime] = None) -> AppData:
    return update_goal(app_data, goal_id, completed_at=completed_at, now=now)


def delete_goal(app_data: AppData, goal_id: str) -> AppData:
    """Удалить цель и убрать ее id из completed_goals всех дней"""
    _get_goal(app_data, goal_id)
    days = []
    for day in app_data.days:
        if day.has_completed(goal_id):
            remaining = [g for g in day.completed_goal_ids if g != goal_id]
            day = replace(day, completed_goals=remaining or None)
        days.append(day)
    return replace(app_data, days=days, goals=[g for g in app_data.goals if g.id != goal_id])
