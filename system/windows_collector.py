"""
Слой взаимодействия с операционной системой (Windows/WMI).

Содержит классы и функции, которые знают, как получить информацию
из ОС и WMI, но ничего не знают про Kafka и форматы сообщений.
"""

import logging
import socket
from contextlib import ExitStack
from typing import Optional, Tuple

from domain.models import (
    MachineInformation,
    OsCapabilities,
    Display,
    UsbDevice,
)
from system import hardware
from system.system_info import detect_os_info
from system.usb_devices import USB_PREFIX, WmiDeviceEnumerator, WmiPropertyFetcher, gather_usb_devices
from system.usb_ids import UsbIdDatabase
from system.wmi_session import wmi_session

try:
    from __version__ import __version__ as AGENT_VERSION
except ImportError:
    AGENT_VERSION = "unknown"

MONITOR_NAMESPACE = "root\\wmi"


class WindowsHardwareCollector:
    """Класс для сбора информации о комплектующих и USB-периферии в Windows"""

    def __init__(self, usb_ids: Optional[UsbIdDatabase] = None, device_prefix: str = USB_PREFIX,
                 wmi_conn=None, wmi_monitor_conn=None):
        """
        Args:
            usb_ids: Справочник имён USB (по умолчанию встроенный usb.ids)
            device_prefix: Префикс DeviceID перечисляемых устройств
            wmi_conn: Готовое подключение root\\cimv2 (иначе открывается на время прохода)
            wmi_monitor_conn: Готовое подключение root\\wmi для мониторов
        """
        self.usb_ids = usb_ids or UsbIdDatabase.load()
        self.device_prefix = device_prefix
        self.wmi_conn = wmi_conn
        self.wmi_monitor_conn = wmi_monitor_conn
        self.hostname = socket.gethostname()
        self.logger = logging.getLogger(__name__)

    def get_usb_devices(self, wmi_conn, capabilities: OsCapabilities) -> Tuple[UsbDevice, ...]:
        try:
            return gather_usb_devices(
                WmiDeviceEnumerator(wmi_conn),
                WmiPropertyFetcher(),
                self.usb_ids,
                capabilities,
                self.device_prefix,
            )
        except Exception as e:
            self.logger.error(f"Ошибка получения информации об USB-устройствах: {e}")
            return ()

    def get_displays(self) -> Tuple[Display, ...]:
        if self.wmi_monitor_conn is not None:
            return hardware.get_displays(self.wmi_monitor_conn)
        try:
            with wmi_session(MONITOR_NAMESPACE) as monitor_conn:
                return hardware.get_displays(monitor_conn)
        except Exception as e:
            self.logger.error(f"Не удалось подключиться к {MONITOR_NAMESPACE}: {e}")
            return ()

    def collect_machine_information(self) -> MachineInformation:
        """Собрать снимок конфигурации (один проход, только чтение)."""
        with ExitStack() as stack:
            wmi_conn = self.wmi_conn
            if wmi_conn is None:
                wmi_conn = stack.enter_context(wmi_session())

            os_info = detect_os_info(wmi_conn)
            capabilities = os_info.capabilities
            self.logger.info(f"ОС: {os_info.name} {os_info.version} (Windows 10+: {capabilities.win10})")

            return MachineInformation(
                hostname=self.hostname,
                agent_version=AGENT_VERSION,
                os=os_info,
                cpu=hardware.get_cpu(wmi_conn, capabilities),
                ram_sticks=hardware.get_ram_sticks(wmi_conn, capabilities),
                disks=hardware.get_disks(wmi_conn),
                gpus=hardware.get_gpus(wmi_conn),
                displays=self.get_displays(),
                smbios=hardware.get_smbios(wmi_conn),
                usb_devices=self.get_usb_devices(wmi_conn, capabilities),
            )
