"""
Вспомогательные функции разбора значений WMI.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

_BYTE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB")


class FieldStatus(Enum):
    OK = "ok"
    ABSENT = "absent"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class FieldResult:
    """Результат извлечения поля: значение, отсутствие или ошибка разбора"""

    status: FieldStatus
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any) -> "FieldResult":
        return cls(FieldStatus.OK, value)

    @classmethod
    def absent(cls) -> "FieldResult":
        return cls(FieldStatus.ABSENT)

    @classmethod
    def malformed(cls, error: str) -> "FieldResult":
        return cls(FieldStatus.MALFORMED, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status is FieldStatus.OK


def is_blank(value: Any) -> bool:
    if isinstance(value, (list, tuple)):
        return not value
    return value is None or (isinstance(value, str) and not value.strip())


def format_bytes(size: int) -> str:
    """Человекочитаемый размер в двоичных единицах (1.50 GiB)."""
    value = float(size)
    unit = _BYTE_UNITS[0]
    for unit in _BYTE_UNITS:
        if abs(value) < 1024 or unit == _BYTE_UNITS[-1]:
            break
        value /= 1024
    return f"{value:.2f} {unit}"


def parse_wmi_datetime(value: Optional[str]) -> FieldResult:
    """
    Разбор даты WMI в формате YYYYMMDDHHmmss.ffffff+UUU.

    Используются только первые 14 символов, смещение часового пояса
    отбрасывается.
    """
    if is_blank(value):
        return FieldResult.absent()

    text = str(value).strip()
    stamp = text[:14]
    if len(stamp) < 14 or not stamp.isdigit():
        return FieldResult.malformed(f"некорректная дата WMI: {text!r}")

    try:
        parsed = datetime(
            int(stamp[0:4]),
            int(stamp[4:6]),
            int(stamp[6:8]),
            int(stamp[8:10]),
            int(stamp[10:12]),
            int(stamp[12:14]),
        )
    except ValueError as e:
        return FieldResult.malformed(f"некорректная дата WMI: {text!r} ({e})")
    return FieldResult.ok(parsed)


def parse_int(value: Any) -> FieldResult:
    """Разбор целого числа из значения WMI (часто приходит строкой)."""
    if is_blank(value):
        return FieldResult.absent()
    try:
        return FieldResult.ok(int(str(value).strip()))
    except ValueError:
        return FieldResult.malformed(f"не число: {value!r}")


def clean_str(value: Any) -> Optional[str]:
    """Строка без пробелов по краям или None для пустых значений."""
    if is_blank(value):
        return None
    return str(value).strip()
