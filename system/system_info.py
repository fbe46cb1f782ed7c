import logging
from typing import Optional

from common.util import clean_str
from domain.models import OsCapabilities, OsInfo


def parse_major_version(version: Optional[str]) -> Optional[int]:
    """Старшая часть версии Windows: '10.0.19045' -> 10."""
    if not version:
        return None
    major = version.strip().split(".")[0]
    return int(major) if major.isdigit() else None


def detect_os_info(wmi_conn) -> OsInfo:
    """
    Определить версию ОС один раз за проход.

    Если определить не удалось, считаем ОС старше Windows 10: запросы
    к свойствам, появившимся в Windows 10, тогда не выполняются.
    """
    try:
        os_info = wmi_conn.Win32_OperatingSystem(["Caption", "Version", "BuildNumber"])[0]
        version = clean_str(os_info.Version)
        major = parse_major_version(version)
        return OsInfo(
            name=clean_str(os_info.Caption),
            version=version,
            build=clean_str(os_info.BuildNumber),
            capabilities=OsCapabilities(win10=major is not None and major >= 10),
        )
    except Exception as e:
        logging.error(f"Ошибка определения версии ОС: {e}")
        return OsInfo()
