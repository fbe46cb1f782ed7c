from typing import Optional

from domain.models import VendorProductKey

VID_MARKER = "VID_"
PID_MARKER = "PID_"

# Имена драйверов Windows по умолчанию
COMPOSITE_DEVICE = "USB Composite Device"
INPUT_DEVICE = "USB Input Device"
OUTPUT_DEVICE = "USB Output Device"
AUDIO_DEVICE = "USB Audio Device"
MASS_STORAGE_DEVICE = "USB Mass Storage Device"
DISK_DRIVE = "Disk Drive"
UAS_MASS_STORAGE_DEVICE = "USB Attached SCSI (UAS) Mass Storage Device"

GENERIC_DRIVER_NAMES = frozenset({
    INPUT_DEVICE,
    COMPOSITE_DEVICE,
    OUTPUT_DEVICE,
    AUDIO_DEVICE,
    MASS_STORAGE_DEVICE,
    DISK_DRIVE,
    UAS_MASS_STORAGE_DEVICE,
})
GENERIC_DRIVER_PREFIX = "Generic"

# Поставщик/производитель драйверов ОС по умолчанию
OS_DEFAULT_VENDOR = "Microsoft"


def is_generic_driver(driver_name: Optional[str]) -> bool:
    """Драйвер из стандартного набора Windows (Composite, Input, ...)."""
    if driver_name is None:
        return True
    return driver_name in GENERIC_DRIVER_NAMES or driver_name.startswith(GENERIC_DRIVER_PREFIX)


def parse_vid_pid(device_id: Optional[str]) -> VendorProductKey:
    """
    Извлечь VID/PID из DeviceID вида USB\\VID_046D&PID_C52B\\5&2A1B...

    Некорректные идентификаторы - ожидаемый вход, поэтому функция
    никогда не бросает исключений и возвращает пустой ключ.
    """
    if not device_id:
        return VendorProductKey()

    parts = device_id.split("\\")
    if len(parts) < 2:
        return VendorProductKey()

    ids = parts[1].split("&")
    if len(ids) < 2 or not ids[0].startswith(VID_MARKER):
        return VendorProductKey()

    vendor_id = ids[0][len(VID_MARKER):]
    product_id = ids[1]
    if product_id.startswith(PID_MARKER):
        product_id = product_id[len(PID_MARKER):]
    return VendorProductKey(vendor_id=vendor_id or None, product_id=product_id or None)
