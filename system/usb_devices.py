"""
Перечисление USB-устройств через Win32_PnPEntity и чтение их свойств
через GetDeviceProperties (Win32_PnPDeviceProperty, только Windows 10+).
"""

import logging
from collections import deque
from typing import Any, Callable, Dict, List, Optional, Tuple

from common.util import FieldResult, FieldStatus, is_blank, parse_wmi_datetime
from domain.models import DevicePropertySet, OsCapabilities, UsbDevice
from system.usb_reconciler import reconcile

logger = logging.getLogger(__name__)

USB_PREFIX = "USB"

DEVPKEY_BUS_REPORTED_DESC = "DEVPKEY_Device_BusReportedDeviceDesc"
DEVPKEY_DRIVER_DESC = "DEVPKEY_Device_DriverDesc"
DEVPKEY_DRIVER_VERSION = "DEVPKEY_Device_DriverVersion"
DEVPKEY_DRIVER_DATE = "DEVPKEY_Device_DriverDate"
DEVPKEY_CLASS = "DEVPKEY_Device_Class"
DEVPKEY_DRIVER_PROVIDER = "DEVPKEY_Device_DriverProvider"
DEVPKEY_NAME = "DEVPKEY_NAME"
DEVPKEY_MANUFACTURER = "DEVPKEY_Device_Manufacturer"
DEVPKEY_CHILDREN = "DEVPKEY_Device_Children"


def _parse_text(value: Any) -> FieldResult:
    if isinstance(value, (list, tuple)):
        return FieldResult.malformed(f"ожидалась строка, получен массив: {value!r}")
    return FieldResult.ok(str(value).strip())


# поле DevicePropertySet -> (ключ DEVPKEY, функция разбора)
PROPERTY_FIELDS: Dict[str, Tuple[str, Callable[[Any], FieldResult]]] = {
    "bus_reported_description": (DEVPKEY_BUS_REPORTED_DESC, _parse_text),
    "driver_description": (DEVPKEY_DRIVER_DESC, _parse_text),
    "driver_version": (DEVPKEY_DRIVER_VERSION, _parse_text),
    "driver_date": (DEVPKEY_DRIVER_DATE, parse_wmi_datetime),
    "device_class": (DEVPKEY_CLASS, _parse_text),
    "driver_provider": (DEVPKEY_DRIVER_PROVIDER, _parse_text),
    "friendly_name": (DEVPKEY_NAME, _parse_text),
    "manufacturer": (DEVPKEY_MANUFACTURER, _parse_text),
}

PROPERTY_KEYS = [key for key, _ in PROPERTY_FIELDS.values()] + [DEVPKEY_CHILDREN]


class WmiDeviceEnumerator:
    """Запросы к Win32_PnPEntity"""

    def __init__(self, wmi_conn):
        self.wmi_conn = wmi_conn

    def enumerate(self, prefix: str = USB_PREFIX) -> List[Any]:
        return [
            entry for entry in self.wmi_conn.Win32_PnPEntity()
            if (getattr(entry, "DeviceID", None) or "").startswith(prefix)
        ]

    def lookup(self, device_id: str) -> List[Any]:
        return list(self.wmi_conn.Win32_PnPEntity(DeviceID=device_id))


class WmiPropertyFetcher:
    """Свойства устройства через метод GetDeviceProperties"""

    def __init__(self, keys: Optional[List[str]] = None):
        self.keys = keys or PROPERTY_KEYS

    def get_properties(self, entry) -> Dict[str, Any]:
        device_id = getattr(entry, "DeviceID", None)
        result = entry.GetDeviceProperties(self.keys)
        properties = result[0] if result else None

        bag: Dict[str, Any] = {}
        for prop in properties or ():
            key_name = getattr(prop, "KeyName", None)
            data = getattr(prop, "Data", None)
            if is_blank(key_name) or is_blank(data):
                logger.debug(f"KeyName {key_name} или Data {data} пусты для устройства {device_id}")
                continue
            bag[key_name] = data
        return bag


def extract_field(bag: Dict[str, Any], key: str, parser: Callable[[Any], FieldResult] = _parse_text) -> FieldResult:
    value = bag.get(key)
    if is_blank(value):
        return FieldResult.absent()
    return parser(value)


def extract_property_set(device_id: str, bag: Dict[str, Any]) -> Optional[DevicePropertySet]:
    """
    Восемь свойств устройства из набора DEVPKEY.

    Без BusReportedDeviceDesc или DriverDesc устройство не учитывается:
    для неполных записей это нормально и ошибкой не считается.
    """
    fields = {}
    for attr, (key, parser) in PROPERTY_FIELDS.items():
        result = extract_field(bag, key, parser)
        if result.status is FieldStatus.MALFORMED:
            logger.warning(f"Свойство {key} устройства {device_id} пропущено: {result.error}")
        fields[attr] = result.value

    if fields["bus_reported_description"] is None or fields["driver_description"] is None:
        return None
    return DevicePropertySet(device_id=device_id, **fields)


def child_device_ids(bag: Dict[str, Any]) -> List[str]:
    children = bag.get(DEVPKEY_CHILDREN)
    if is_blank(children):
        return []
    if isinstance(children, str):
        children = [children]
    return [str(child).strip() for child in children if not is_blank(child)]


def collect_usb_property_sets(enumerator, fetcher, prefix: str = USB_PREFIX) -> Dict[str, DevicePropertySet]:
    """
    Обойти устройства и их дочерние устройства.

    Каждый DeviceID запрашивается не более одного раза, поэтому циклические
    ссылки на дочерние устройства не приводят к зацикливанию.
    """
    queue = deque(enumerator.enumerate(prefix))
    seen = set()
    requested = set()
    property_sets: Dict[str, DevicePropertySet] = {}

    while queue:
        entry = queue.popleft()
        device_id = getattr(entry, "DeviceID", None)
        if not device_id or not device_id.startswith(prefix) or device_id in seen:
            continue
        seen.add(device_id)

        bag = fetcher.get_properties(entry)

        for child_id in child_device_ids(bag):
            if child_id in seen or child_id in requested:
                continue
            requested.add(child_id)
            children = enumerator.lookup(child_id)
            logger.debug(f"Дочернее устройство {child_id} ({device_id}): найдено {len(children)}")
            queue.extend(children)

        property_set = extract_property_set(device_id, bag)
        if property_set is not None:
            property_sets[device_id] = property_set

    return property_sets


def gather_usb_devices(enumerator, fetcher, resolver, capabilities: OsCapabilities,
                       prefix: str = USB_PREFIX) -> Tuple[UsbDevice, ...]:
    # Win32_PnPDeviceProperty доступен только начиная с Windows 10
    if not capabilities.win10:
        logger.info("Свойства USB-устройств недоступны до Windows 10, список USB пуст")
        return ()

    property_sets = collect_usb_property_sets(enumerator, fetcher, prefix)
    devices = reconcile(property_sets, resolver)
    logger.info(f"USB: экземпляров {len(property_sets)}, устройств после слияния {len(devices)}")
    return devices
