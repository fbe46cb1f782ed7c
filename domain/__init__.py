"""
Доменный слой: модели и структуры данных, не зависящие от ОС и Kafka.
"""

from .models import (  # noqa: F401
    HardwareComponent,
    OsCapabilities,
    OsInfo,
    Cpu,
    RamFormFactor,
    RamStick,
    Disk,
    Gpu,
    Display,
    SmBios,
    VendorProductKey,
    DevicePropertySet,
    UsbDevice,
    MachineInformation,
)
