#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rocky Tracker - Core Package
Модели документа, валидатор схемы и операции над документом
"""

from .models import (
    SCHEMA_VERSION,
    AppData,
    DayColor,
    DayEntry,
    Goal,
    ValidationError,
    create_empty_app_data,
)

from .validation import (
    AppDataValidationError,
    ValidationResult,
    assert_valid_app_data,
    validate_app_data,
    validate_day,
    validate_goal,
)

from .schema import SchemaVersionPolicy

__all__ = [
    'SCHEMA_VERSION',
    'AppData',
    'DayColor',
    'DayEntry',
    'Goal',
    'ValidationError',
    'create_empty_app_data',
    'AppDataValidationError',
    'ValidationResult',
    'assert_valid_app_data',
    'validate_app_data',
    'validate_day',
    'validate_goal',
    'SchemaVersionPolicy',
]
