#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rocky Tracker - Core Data Models
Модели документа (схема v1): дни дневника и цели/привычки

Документ хранится как один JSON-объект:
    {"version": 1, "days": [...], "goals": [...]}
Атрибуты моделей в snake_case, сериализация в camelCase.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

SCHEMA_VERSION = 1

# ===== ENUMS =====

class DayColor(str, Enum):
    """Цветовая метка настроения дня"""
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    NEUTRAL = "neutral"


DEFAULT_DAY_COLOR = DayColor.YELLOW

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass


def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Валидация текстовых полей"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} должен быть строкой")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} должен содержать минимум {min_length} символов")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} должен содержать максимум {max_length} символов")

    return text


def _put_optional(out: Dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        out[key] = value

# ===== CORE MODELS =====

@dataclass
class DayEntry:
    """Запись одного календарного дня"""
    date: str  # ключ дня YYYY-MM-DD
    text: str = ""
    color: DayColor = DEFAULT_DAY_COLOR
    diary_entry: Optional[str] = None  # markdown, ядром не разбирается
    completed_goals: Optional[List[str]] = None  # None равносильно пустому набору
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.color, DayColor):
            self.color = DayColor(self.color)

    @property
    def completed_goal_ids(self) -> List[str]:
        return list(self.completed_goals or [])

    def has_completed(self, goal_id: str) -> bool:
        return goal_id in (self.completed_goals or ())

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"date": self.date, "text": self.text}
        _put_optional(out, "diaryEntry", self.diary_entry)
        out["color"] = self.color.value
        if self.completed_goals:
            out["completedGoals"] = list(self.completed_goals)
        _put_optional(out, "createdAt", self.created_at)
        _put_optional(out, "updatedAt", self.updated_at)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DayEntry":
        """Построение из уже провалидированного словаря"""
        return cls(
            date=data["date"],
            text=data.get("text", ""),
            color=DayColor(data.get("color", DEFAULT_DAY_COLOR.value)),
            diary_entry=data.get("diaryEntry"),
            completed_goals=list(data["completedGoals"]) if data.get("completedGoals") else None,
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class Goal:
    """Цель/привычка с периодом активности [start_date, completed_at]"""
    id: str
    title: str
    start_date: str
    completed_at: Optional[str] = None  # после этой даты цель в архиве
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def is_active_on(self, date_key: str) -> bool:
        """Активна ли цель в указанный день (включая сам completed_at)"""
        if date_key < self.start_date:
            return False
        return self.completed_at is None or date_key <= self.completed_at

    def is_archived(self, today: str) -> bool:
        return self.completed_at is not None and self.completed_at < today

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "title": self.title, "startDate": self.start_date}
        _put_optional(out, "completedAt", self.completed_at)
        _put_optional(out, "description", self.description)
        _put_optional(out, "createdAt", self.created_at)
        _put_optional(out, "updatedAt", self.updated_at)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        """Построение из уже провалидированного словаря"""
        return cls(
            id=data["id"],
            title=data["title"],
            start_date=data["startDate"],
            completed_at=data.get("completedAt"),
            description=data.get("description"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class AppData:
    """Корневой документ приложения"""
    version: int = SCHEMA_VERSION
    days: List[DayEntry] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)

    def find_day(self, date_key: str) -> Optional[DayEntry]:
        for day in self.days:
            if day.date == date_key:
                return day
        return None

    def find_goal(self, goal_id: str) -> Optional[Goal]:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        return None

    def is_empty(self) -> bool:
        return not self.days and not self.goals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "days": [day.to_dict() for day in self.days],
            "goals": [goal.to_dict() for goal in self.goals],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppData":
        """Построение из уже провалидированного словаря (см. core.validation)"""
        return cls(
            version=data.get("version", SCHEMA_VERSION),
            days=[DayEntry.from_dict(d) for d in data.get("days", [])],
            goals=[Goal.from_dict(g) for g in data.get("goals", [])],
        )


def create_empty_app_data() -> AppData:
    return AppData(version=SCHEMA_VERSION, days=[], goals=[])
