"""
Доменные модели данных для инвентаризации оборудования.
"""

from dataclasses import dataclass, asdict, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple
import json


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class HardwareComponent:
    """Базовый класс для компонента оборудования"""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OsCapabilities:
    """Возможности ОС, определяемые один раз за проход"""

    win10: bool = False


@dataclass
class OsInfo(HardwareComponent):
    """Операционная система"""

    name: Optional[str] = None
    version: Optional[str] = None
    build: Optional[str] = None
    capabilities: OsCapabilities = field(default_factory=OsCapabilities)


@dataclass
class Cpu(HardwareComponent):
    """Процессор"""

    name: Optional[str] = None
    physical_cores: Optional[int] = None
    logical_cores: Optional[int] = None
    socket: Optional[str] = None
    normal_clock_speed: Optional[int] = None  # МГц


class RamFormFactor(Enum):
    """Коды FormFactor из Win32_PhysicalMemory"""

    UNKNOWN = 0
    OTHER = 1
    SIP = 2
    DIP = 3
    ZIP = 4
    SOJ = 5
    PROPRIETARY = 6
    SIMM = 7
    DIMM = 8
    TSOP = 9
    PGA = 10
    RIMM = 11
    SODIMM = 12
    SRIMM = 13
    SMD = 14
    SSMP = 15
    QFP = 16
    TQFP = 17
    SOIC = 18
    LCC = 19
    PLCC = 20
    BGA = 21
    FPBGA = 22
    LGA = 23
    FB_DIMM = 24


@dataclass
class RamStick(HardwareComponent):
    """Модуль оперативной памяти"""

    name: Optional[str] = None  # PartNumber
    manufacturer: Optional[str] = None
    capacity: int = 0
    capacity_hrf: Optional[str] = None
    speed: Optional[int] = None
    device_locator: Optional[str] = None
    bank_label: Optional[str] = None
    tag: Optional[str] = None
    form_factor: RamFormFactor = RamFormFactor.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["form_factor"] = self.form_factor.name
        return result


@dataclass
class Disk(HardwareComponent):
    """Накопитель (HDD/SSD)"""

    vendor: Optional[str] = None
    model: Optional[str] = None
    caption: Optional[str] = None
    capacity: int = 0
    capacity_hrf: Optional[str] = None
    device_id: Optional[str] = None
    drive_index: Optional[int] = None
    interface_type: Optional[str] = None
    serial_number: Optional[str] = None


@dataclass
class Gpu(HardwareComponent):
    """Видеокарта"""

    vendor: Optional[str] = None
    name: Optional[str] = None
    caption: Optional[str] = None
    description: Optional[str] = None
    driver_date: Optional[str] = None
    driver_version: Optional[str] = None
    status: Optional[str] = None
    device_id: Optional[str] = None


@dataclass
class Display(HardwareComponent):
    """Монитор (WmiMonitorID)"""

    manufacturer: Optional[str] = None
    name: Optional[str] = None
    serial_number: Optional[str] = None


@dataclass
class SmBios(HardwareComponent):
    """Материнская плата и BIOS"""

    board_name: Optional[str] = None
    board_vendor: Optional[str] = None
    board_version: Optional[str] = None
    bios_codename: Optional[str] = None
    bios_vendor: Optional[str] = None
    bios_version: Optional[str] = None


@dataclass(frozen=True)
class VendorProductKey:
    """Пара VID/PID из DeviceID"""

    vendor_id: Optional[str] = None
    product_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.vendor_id is None and self.product_id is None


@dataclass(frozen=True)
class DevicePropertySet:
    """Восемь свойств экземпляра USB-устройства из Win32_PnPDeviceProperty"""

    device_id: str
    bus_reported_description: str
    driver_description: str
    driver_version: Optional[str] = None
    driver_date: Optional[datetime] = None
    device_class: Optional[str] = None
    driver_provider: Optional[str] = None
    friendly_name: Optional[str] = None
    manufacturer: Optional[str] = None


@dataclass(frozen=True)
class UsbDevice:
    """
    Итоговое USB-устройство после слияния экземпляров.

    Ключ логической идентичности - bus_reported_name.
    """

    bus_reported_name: str
    driver_name: str
    name: Optional[str] = None
    driver_version: Optional[str] = None
    driver_date: Optional[datetime] = None
    device_class: Optional[str] = None
    driver_provider: Optional[str] = None
    manufacturer: Optional[str] = None
    device_id: Optional[str] = None
    vendor_id: Optional[str] = None
    product_id: Optional[str] = None
    vendor_name: Optional[str] = None
    product_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["driver_date"] = _iso(self.driver_date)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UsbDevice":
        data = dict(data)
        data["driver_date"] = _from_iso(data.get("driver_date"))
        return cls(**data)


@dataclass
class MachineInformation:
    """Снимок конфигурации машины за один проход"""

    hostname: str
    agent_version: Optional[str] = None
    os: Optional[OsInfo] = None
    cpu: Optional[Cpu] = None
    ram_sticks: Tuple[RamStick, ...] = ()
    disks: Tuple[Disk, ...] = ()
    gpus: Tuple[Gpu, ...] = ()
    displays: Tuple[Display, ...] = ()
    smbios: Optional[SmBios] = None
    usb_devices: Tuple[UsbDevice, ...] = ()
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь для вывода и отправки"""
        result = {
            "hostname": self.hostname,
            "agent_version": self.agent_version,
            "timestamp": _iso(self.timestamp),
        }

        if self.os:
            result["os"] = self.os.to_dict()
        if self.cpu:
            result["cpu"] = self.cpu.to_dict()
        if self.smbios:
            result["smbios"] = self.smbios.to_dict()
        result["ram_sticks"] = [r.to_dict() for r in self.ram_sticks]
        result["disks"] = [d.to_dict() for d in self.disks]
        result["gpus"] = [g.to_dict() for g in self.gpus]
        result["displays"] = [d.to_dict() for d in self.displays]
        result["usb_devices"] = [u.to_dict() for u in self.usb_devices]

        return result

    def to_json(self) -> str:
        """Преобразование в JSON строку"""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MachineInformation":
        """Создание из словаря"""
        info = cls(
            hostname=data.get("hostname"),
            agent_version=data.get("agent_version"),
            timestamp=_from_iso(data.get("timestamp")),
        )

        if data.get("os"):
            os_data = dict(data["os"])
            os_data["capabilities"] = OsCapabilities(**(os_data.get("capabilities") or {}))
            info.os = OsInfo(**os_data)
        if data.get("cpu"):
            info.cpu = Cpu(**data["cpu"])
        if data.get("smbios"):
            info.smbios = SmBios(**data["smbios"])
        if data.get("ram_sticks"):
            sticks = []
            for r in data["ram_sticks"]:
                r = dict(r)
                r["form_factor"] = RamFormFactor[r.get("form_factor") or "UNKNOWN"]
                sticks.append(RamStick(**r))
            info.ram_sticks = tuple(sticks)
        if data.get("disks"):
            info.disks = tuple(Disk(**d) for d in data["disks"])
        if data.get("gpus"):
            info.gpus = tuple(Gpu(**g) for g in data["gpus"])
        if data.get("displays"):
            info.displays = tuple(Display(**d) for d in data["displays"])
        if data.get("usb_devices"):
            info.usb_devices = tuple(UsbDevice.from_dict(u) for u in data["usb_devices"])

        return info
