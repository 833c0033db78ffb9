"""
Валидация и нормализация документа (схема v1).

Любое входное значение классифицируется: либо нормализованный документ
плюс список предупреждений, либо список ошибок. Исключения для неверных
форм данных не выбрасываются, входные данные не изменяются.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from core.models import DEFAULT_DAY_COLOR, AppData, DayColor, DayEntry, Goal, ValidationError
from core.schema import DEFAULT_VERSION_POLICY, SchemaVersionPolicy
from utils.datetime_utils import is_date_key

logger = logging.getLogger(__name__)

DAY_COLORS = frozenset(color.value for color in DayColor)


@dataclass
class ValidationResult:
    """Результат валидации: ok + data + warnings, либо errors"""
    ok: bool
    data: Any = None
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, data: Any, warnings: Optional[List[str]] = None) -> "ValidationResult":
        return cls(ok=True, data=data, warnings=list(warnings or []))

    @classmethod
    def failure(cls, errors: List[str]) -> "ValidationResult":
        return cls(ok=False, errors=list(errors))


class AppDataValidationError(ValidationError):
    """Документ не прошел валидацию"""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid document")


def _as_mapping(raw: Any) -> Mapping[str, Any]:
    return raw if isinstance(raw, Mapping) else {}


def _optional_str(obj: Mapping[str, Any], key: str) -> Optional[str]:
    value = obj.get(key)
    return value if isinstance(value, str) else None


def _required_trimmed(obj: Mapping[str, Any], key: str) -> str:
    value = obj.get(key)
    return value.strip() if isinstance(value, str) else ""


def _first_list(obj: Mapping[str, Any], *keys: str) -> Any:
    """Первое присутствующее поле из списка синонимов (goals/habits)"""
    for key in keys:
        if key in obj:
            return obj[key]
    return None


def is_day_color(value: Any) -> bool:
    return isinstance(value, str) and value in DAY_COLORS


def unique_strings(values: Any) -> List[str]:
    """Строки без повторов в порядке первого появления; прочие элементы отбрасываются"""
    if not isinstance(values, (list, tuple)):
        return []
    out: List[str] = []
    seen: Set[str] = set()
    for value in values:
        if not isinstance(value, str) or value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out


def validate_goal(raw: Any) -> ValidationResult:
    """Проверка одной цели; все ошибки собираются за один проход"""
    errors: List[str] = []
    obj = _as_mapping(raw)

    goal_id = _required_trimmed(obj, "id")
    if not goal_id:
        errors.append("goal.id missing")

    title = _required_trimmed(obj, "title")
    if not title:
        errors.append("goal.title missing")

    start_date = obj.get("startDate")
    if not is_date_key(start_date):
        errors.append("goal.startDate invalid")

    completed_at = None
    if obj.get("completedAt") is not None:
        if is_date_key(obj["completedAt"]):
            completed_at = obj["completedAt"]
        else:
            errors.append("goal.completedAt invalid")

    if errors:
        return ValidationResult.failure(errors)

    return ValidationResult.success(Goal(
        id=goal_id,
        title=title,
        start_date=start_date,
        completed_at=completed_at,
        description=_optional_str(obj, "description"),
        created_at=_optional_str(obj, "createdAt"),
        updated_at=_optional_str(obj, "updatedAt"),
    ))


def validate_day(raw: Any, known_goal_ids: Optional[Iterable[str]] = None) -> ValidationResult:
    """
    Проверка записи дня.

    Неизвестный цвет заменяется на цвет по умолчанию, неизвестные id целей
    отбрасываются - оба случая дают предупреждение, а не ошибку.
    """
    warnings: List[str] = []
    obj = _as_mapping(raw)

    date_key = obj.get("date")
    if not is_date_key(date_key):
        return ValidationResult.failure(["day.date invalid"])

    text = obj.get("text")
    if not isinstance(text, str):
        text = ""

    color = obj.get("color")
    if is_day_color(color):
        color = DayColor(color)
    else:
        color = DEFAULT_DAY_COLOR
        warnings.append(f"day.color normalized to {DEFAULT_DAY_COLOR.value}")

    completed_goals = unique_strings(_first_list(obj, "completedGoals", "completedHabits"))
    if known_goal_ids is not None:
        known = known_goal_ids if isinstance(known_goal_ids, (set, frozenset)) else set(known_goal_ids)
        filtered = [goal_id for goal_id in completed_goals if goal_id in known]
        if len(filtered) != len(completed_goals):
            warnings.append("day.completedGoals contained unknown goal ids")
        completed_goals = filtered

    return ValidationResult.success(DayEntry(
        date=date_key,
        text=text,
        color=color,
        diary_entry=_optional_str(obj, "diaryEntry"),
        completed_goals=completed_goals or None,
        created_at=_optional_str(obj, "createdAt"),
        updated_at=_optional_str(obj, "updatedAt"),
    ), warnings)


def validate_app_data(raw: Any, version_policy: Optional[SchemaVersionPolicy] = None) -> ValidationResult:
    """
    Проверка всего документа по принципу "все или ничего".

    Все цели и дни проверяются целиком; если хотя бы один элемент содержит
    ошибку, возвращается только список ошибок с индексами, без документа.
    Цели дедуплицируются по id (остается первая), дни - по дате
    (остается последняя), дни сортируются по ключу даты.
    """
    errors: List[str] = []
    policy = version_policy or DEFAULT_VERSION_POLICY
    obj, warnings = policy.apply(dict(_as_mapping(raw)))

    raw_goals = _first_list(obj, "goals", "habits")
    if not isinstance(raw_goals, list):
        raw_goals = []

    goals: List[Goal] = []
    known_goal_ids: Set[str] = set()
    for index, raw_goal in enumerate(raw_goals):
        result = validate_goal(raw_goal)
        if not result.ok:
            errors.extend(f"goals[{index}]: {error}" for error in result.errors)
            continue
        goal = result.data
        if goal.id in known_goal_ids:
            warnings.append(f"duplicate goal.id {goal.id}; keeping first")
            continue
        known_goal_ids.add(goal.id)
        goals.append(goal)

    raw_days = obj.get("days")
    if not isinstance(raw_days, list):
        raw_days = []

    by_date: Dict[str, DayEntry] = {}
    for index, raw_day in enumerate(raw_days):
        result = validate_day(raw_day, known_goal_ids)
        if not result.ok:
            errors.extend(f"days[{index}]: {error}" for error in result.errors)
            continue
        warnings.extend(result.warnings)
        day = result.data
        if day.date in by_date:
            warnings.append(f"duplicate day {day.date}; keeping last occurrence")
        by_date[day.date] = day

    if errors:
        logger.debug(f"Документ отклонен: {len(errors)} ошибок")
        return ValidationResult.failure(errors)

    days = sorted(by_date.values(), key=lambda day: day.date)
    return ValidationResult.success(AppData(version=policy.current, days=days, goals=goals), warnings)


def assert_valid_app_data(raw: Any, version_policy: Optional[SchemaVersionPolicy] = None) -> AppData:
    """Вариант validate_app_data, выбрасывающий AppDataValidationError"""
    result = validate_app_data(raw, version_policy)
    if not result.ok:
        raise AppDataValidationError(result.errors)
    for warning in result.warnings:
        logger.warning(f"⚠️ {warning}")
    return result.data
