"""
Политика версий схемы документа.

Документ с незнакомой версией не отклоняется: известные версии проходят
через зарегистрированные миграции, остальные приводятся к текущей версии
с предупреждением.
"""

import copy
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.models import SCHEMA_VERSION

logger = logging.getLogger(__name__)

Migration = Callable[[Dict[str, Any]], Dict[str, Any]]


class SchemaVersionPolicy:
    """Приведение сырого документа к текущей версии схемы"""

    def __init__(self, current: int = SCHEMA_VERSION, migrations: Optional[Dict[int, Migration]] = None):
        self.current = current
        # версия -> функция, поднимающая документ на следующую версию
        self.migrations: Dict[int, Migration] = dict(migrations or {})

    def register(self, from_version: int, migration: Migration) -> None:
        if from_version >= self.current:
            raise ValueError(f"Миграция с версии {from_version} не ведет к версии {self.current}")
        self.migrations[from_version] = migration

    def apply(self, obj: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
        """
        Возвращает (документ, предупреждения). Входной словарь не изменяется;
        миграции работают с глубокой копией.
        """
        warnings: List[str] = []
        version = obj.get("version")
        if version is None:
            return obj, warnings

        if _is_int(version) and version in self.migrations:
            migrated = copy.deepcopy(obj)
            applied = set()
            while _is_int(version) and version != self.current and version in self.migrations:
                if version in applied:
                    raise ValueError(f"Цикл миграций на версии {version}")
                applied.add(version)
                logger.info(f"🔄 Миграция документа v{version}")
                migrated = self.migrations[version](migrated)
                version = migrated.get("version", version + 1)
            obj = migrated

        if not _is_int(version) or version != self.current:
            warnings.append(f"unexpected version {_format_version(version)}; parsed as v{self.current}")
        return obj, warnings


def _is_int(value: Any) -> bool:
    # bool - подкласс int, но версией не считается
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _format_version(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


DEFAULT_VERSION_POLICY = SchemaVersionPolicy()
