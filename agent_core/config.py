"""
Конфигурация прохода инвентаризации.
"""

import json
import logging
import os
from typing import Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class InventoryConfig:
    """Настройки по умолчанию, затем переменные окружения, затем JSON-файл"""

    def __init__(self, config_file: Optional[str] = None):
        """
        Args:
            config_file: Путь к файлу конфигурации (опционально)
        """
        self.device_prefix = os.getenv("HWINV_DEVICE_PREFIX", "USB")
        self.usb_ids_path = os.getenv("HWINV_USB_IDS", None)
        self.log_level = os.getenv("HWINV_LOG_LEVEL", "INFO").upper()
        # Пустая строка отключает запись лога в файл
        self.log_file = os.getenv("HWINV_LOG_FILE", "hw_inventory.log")

        if config_file:
            self._load_from_file(config_file)

        self._validate()

    def _load_from_file(self, config_file: str):
        """Загрузка конфигурации из файла"""
        if not os.path.exists(config_file):
            raise ValueError(f"Файл конфигурации не найден: {config_file}")

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Ошибка загрузки конфигурации {config_file}: {e}") from e

        if not isinstance(config, dict):
            raise ValueError(f"Конфигурация {config_file} должна быть JSON-объектом")

        self.device_prefix = config.get("device_prefix", self.device_prefix)
        self.usb_ids_path = config.get("usb_ids_path", self.usb_ids_path)
        self.log_level = str(config.get("log_level", self.log_level)).upper()
        self.log_file = config.get("log_file", self.log_file)
        logging.getLogger(__name__).debug(f"Конфигурация загружена из {config_file}")

    def _validate(self):
        """Базовая валидация конфигурации."""
        errors = []

        if not self.device_prefix:
            errors.append("device_prefix не задан")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"log_level должен быть одним из {', '.join(LOG_LEVELS)}")

        if self.usb_ids_path and not os.path.exists(self.usb_ids_path):
            errors.append(f"usb_ids_path не найден: {self.usb_ids_path}")

        if errors:
            raise ValueError(f"Некорректная конфигурация: {', '.join(errors)}")
