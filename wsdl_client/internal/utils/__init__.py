"""Утилиты для генератора"""

import logging

from .validator import (
    is_primitive,
    python_annotation,
    validate_class_name,
    validate_naming_convention,
    validate_or_custom,
    validate_type_name,
)

__all__ = [
    "is_primitive",
    "python_annotation",
    "validate_class_name",
    "validate_naming_convention",
    "validate_or_custom",
    "validate_type_name",
    "log_step",
]


def log_step(logger: logging.Logger, config, message: str, *args) -> None:
    """Шаг генерации: INFO в подробном режиме, иначе DEBUG"""
    logger.log(logging.INFO if config.verbose else logging.DEBUG, message, *args)
