"""
Общие модули для системы инвентаризации оборудования
"""
from .util import (
    FieldResult,
    FieldStatus,
    clean_str,
    format_bytes,
    is_blank,
    parse_int,
    parse_wmi_datetime,
)

__all__ = [
    'FieldResult',
    'FieldStatus',
    'clean_str',
    'format_bytes',
    'is_blank',
    'parse_int',
    'parse_wmi_datetime',
]
