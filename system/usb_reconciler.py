"""
Слияние экземпляров USB-устройств в одно логическое устройство.

Экземпляры группируются по BusReportedDeviceDesc. Для каждой группы
выбирается запись с наиболее информативным драйвером, VID/PID и имена
из usb.ids дополняются, но не перезаписываются.
"""

import logging
from dataclasses import replace
from typing import Dict, Mapping, Optional, Tuple

from domain.models import DevicePropertySet, UsbDevice, VendorProductKey
from system.pnp_utils import (
    AUDIO_DEVICE,
    COMPOSITE_DEVICE,
    INPUT_DEVICE,
    OS_DEFAULT_VENDOR,
    OUTPUT_DEVICE,
    is_generic_driver,
    parse_vid_pid,
)

logger = logging.getLogger(__name__)

# Составное устройство предпочтительнее любого из его интерфейсов
_COMPOSITE_BEATS = (INPUT_DEVICE, OUTPUT_DEVICE, AUDIO_DEVICE)


def should_replace(existing: UsbDevice, candidate: DevicePropertySet) -> bool:
    """Правила приоритета проверяются по порядку, срабатывает первое."""
    new_driver = candidate.driver_description

    for interface_driver in _COMPOSITE_BEATS:
        if existing.driver_name == interface_driver and new_driver == COMPOSITE_DEVICE:
            return True

    # Любой именованный поставщик драйвера лучше стандартного Microsoft
    if existing.driver_provider == OS_DEFAULT_VENDOR and candidate.driver_provider not in (None, OS_DEFAULT_VENDOR):
        return True

    if existing.manufacturer in (None, OS_DEFAULT_VENDOR) and candidate.manufacturer not in (None, OS_DEFAULT_VENDOR):
        return True

    # Собственное описание драйвера лучше стандартного Windows
    return not is_generic_driver(new_driver)


def create_device(property_set: DevicePropertySet, resolver) -> UsbDevice:
    key = parse_vid_pid(property_set.device_id)
    vendor_name, product_name = resolver.resolve(key.vendor_id, key.product_id)
    return UsbDevice(
        name=property_set.friendly_name,
        bus_reported_name=property_set.bus_reported_description,
        driver_name=property_set.driver_description,
        driver_version=property_set.driver_version,
        driver_date=property_set.driver_date,
        device_class=property_set.device_class,
        driver_provider=property_set.driver_provider,
        manufacturer=property_set.manufacturer,
        device_id=property_set.device_id,
        vendor_id=key.vendor_id,
        product_id=key.product_id,
        vendor_name=vendor_name,
        product_name=product_name,
    )


def _is_redundant(key: VendorProductKey, device: UsbDevice) -> bool:
    if key.is_empty:
        return True
    return ((key.vendor_id is None or key.vendor_id == device.vendor_id) and
            (key.product_id is None or key.product_id == device.product_id))


def _keep(current: Optional[str], fallback: Optional[str]) -> Optional[str]:
    return current if current is not None else fallback


def propose_merge(existing: UsbDevice, candidate: DevicePropertySet, resolver) -> UsbDevice:
    """
    Вернуть existing без изменений или новую запись с полями кандидата.

    VendorID/ProductID/VendorName/ProductName только дополняются:
    однажды заданное значение не перезаписывается.
    """
    if not should_replace(existing, candidate):
        return existing

    logger.debug(
        f"USB '{existing.bus_reported_name}': '{existing.driver_name}' заменён на "
        f"'{candidate.driver_description}' ({candidate.device_id})"
    )
    merged = replace(
        existing,
        name=candidate.friendly_name,
        bus_reported_name=candidate.bus_reported_description,
        driver_name=candidate.driver_description,
        driver_version=candidate.driver_version,
        driver_date=candidate.driver_date,
        device_class=candidate.device_class,
        driver_provider=candidate.driver_provider,
        manufacturer=candidate.manufacturer,
    )

    if candidate.device_id == existing.device_id:
        return merged

    key = parse_vid_pid(candidate.device_id)
    if _is_redundant(key, existing):
        return merged

    vendor_name, product_name = resolver.resolve(key.vendor_id, key.product_id)
    return replace(
        merged,
        vendor_id=_keep(existing.vendor_id, key.vendor_id),
        product_id=_keep(existing.product_id, key.product_id),
        vendor_name=_keep(existing.vendor_name, vendor_name),
        product_name=_keep(existing.product_name, product_name),
    )


def reconcile(property_sets: Mapping[str, DevicePropertySet], resolver) -> Tuple[UsbDevice, ...]:
    """
    Одна запись на каждый BusReportedDeviceDesc в порядке первого появления.

    Функция чистая: повторный вызов на тех же данных даёт тот же результат.
    """
    devices: Dict[str, UsbDevice] = {}

    for property_set in property_sets.values():
        key = property_set.bus_reported_description
        existing = devices.get(key)
        if existing is None:
            devices[key] = create_device(property_set, resolver)
        else:
            devices[key] = propose_merge(existing, property_set, resolver)

    return tuple(devices.values())
