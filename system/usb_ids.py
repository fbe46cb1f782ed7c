"""
Справочник имён производителей и продуктов USB (формат usb.ids).

В пакет входит подмножество списка linux-usb.org; полный список
загружается функцией download_usb_ids (hw-inventory --update-usb-ids).
"""

import logging
import os
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_USB_IDS_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "datasets", "usb.ids")
USB_IDS_URL = "http://www.linux-usb.org/usb.ids"

_ID_LINE = re.compile(r"^([0-9A-Fa-f]{4})\s+(.+)$")


class UsbIdDatabase:
    """Поиск имён по паре VID/PID. Неизвестные ID дают None без ошибок."""

    def __init__(self, vendors: Optional[Dict[str, dict]] = None):
        # {"046D": {"name": "Logitech, Inc.", "devices": {"C52B": "Unifying Receiver"}}}
        self.vendors = vendors or {}

    @classmethod
    def load(cls, path: Optional[str] = None) -> "UsbIdDatabase":
        path = path or DEFAULT_USB_IDS_PATH
        if not os.path.exists(path):
            logger.warning(f"Файл usb.ids не найден: {path}, имена устройств определяться не будут")
            return cls()

        with open(path, "rb") as f:
            lines = f.read().decode("utf-8", errors="replace").splitlines()
        database = cls(cls.parse(lines))
        logger.debug(f"Загружено производителей USB: {len(database.vendors)} ({path})")
        return database

    @staticmethod
    def parse(lines: Iterable[str]) -> Dict[str, dict]:
        vendors: Dict[str, dict] = {}
        current_vendor = None

        for line in lines:
            if not line.strip() or line.startswith("#"):
                continue

            if not line.startswith("\t"):
                match = _ID_LINE.match(line.rstrip())
                if match:
                    current_vendor = match.group(1).upper()
                    vendors[current_vendor] = {"name": match.group(2).strip(), "devices": {}}
                else:
                    # Секции классов (C, AT, HID, ...) идут после списка производителей
                    current_vendor = None
            elif current_vendor and not line.startswith("\t\t"):
                match = _ID_LINE.match(line.strip())
                if match:
                    vendors[current_vendor]["devices"][match.group(1).upper()] = match.group(2).strip()

        return vendors

    def resolve(self, vendor_id: Optional[str], product_id: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        if not vendor_id:
            return None, None

        vendor = self.vendors.get(vendor_id.strip().upper())
        if vendor is None:
            return None, None

        product_name = None
        if product_id:
            product_name = vendor["devices"].get(product_id.strip().upper())
        return vendor["name"], product_name


def download_usb_ids(path: Optional[str] = None, url: str = USB_IDS_URL, timeout: int = 60) -> bool:
    """
    Обновить файл usb.ids с linux-usb.org.

    Файл перезаписывается, только если сервер вернул новую версию и в ней
    есть хотя бы один производитель. Возвращает True, если файл обновлён.
    """
    path = path or DEFAULT_USB_IDS_PATH
    headers = {}
    if os.path.exists(path):
        mtime = datetime.fromtimestamp(os.path.getmtime(path), tz=timezone.utc)
        headers["If-Modified-Since"] = mtime.strftime("%a, %d %b %Y %H:%M:%S GMT")

    response = requests.get(url, headers=headers, timeout=timeout)
    if response.status_code == 304:
        logger.info(f"{path} не изменился")
        return False
    response.raise_for_status()

    vendors = UsbIdDatabase.parse(response.content.decode("utf-8", errors="replace").splitlines())
    if not vendors:
        raise ValueError(f"Ответ {url} не похож на usb.ids")

    tmp_path = path + ".tmp"
    with open(tmp_path, "wb") as f:
        f.write(response.content)
    os.replace(tmp_path, path)
    logger.info(f"usb.ids обновлён: производителей {len(vendors)} ({path})")
    return True
