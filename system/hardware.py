import logging
from typing import Optional, Tuple

from common.util import FieldResult, FieldStatus, clean_str, format_bytes, parse_int
from domain.models import (
    OsCapabilities,
    Cpu,
    RamFormFactor,
    RamStick,
    Disk,
    Gpu,
    Display,
    SmBios,
)


def _int_field(result: FieldResult, source: str, field_name: str) -> Optional[int]:
    if result.status is FieldStatus.MALFORMED:
        logging.warning(f"{source}: поле {field_name} пропущено ({result.error})")
    return result.value


def get_cpu(wmi_conn, capabilities: OsCapabilities) -> Optional[Cpu]:
    fields = ["Name", "NumberOfLogicalProcessors", "SocketDesignation", "MaxClockSpeed"]
    # NumberOfEnabledCore появился в Windows 10
    if capabilities.win10:
        fields.append("NumberOfEnabledCore")

    try:
        processors = wmi_conn.Win32_Processor(fields)
        if not processors:
            return None
        cpu = processors[0]
        physical_cores = None
        if capabilities.win10:
            physical_cores = _int_field(parse_int(cpu.NumberOfEnabledCore), "Win32_Processor", "NumberOfEnabledCore")
        return Cpu(
            name=clean_str(cpu.Name),
            physical_cores=physical_cores,
            logical_cores=_int_field(parse_int(cpu.NumberOfLogicalProcessors), "Win32_Processor", "NumberOfLogicalProcessors"),
            socket=clean_str(cpu.SocketDesignation),
            normal_clock_speed=_int_field(parse_int(cpu.MaxClockSpeed), "Win32_Processor", "MaxClockSpeed"),
        )
    except Exception as e:
        logging.error(f"Ошибка получения информации о процессоре: {e}")
        return None


def parse_form_factor(value) -> RamFormFactor:
    result = parse_int(value)
    if not result.is_ok:
        return RamFormFactor.UNKNOWN
    try:
        return RamFormFactor(result.value)
    except ValueError:
        logging.warning(f"Win32_PhysicalMemory: неизвестный FormFactor {value}")
        return RamFormFactor.UNKNOWN


def get_ram_sticks(wmi_conn, capabilities: OsCapabilities) -> Tuple[RamStick, ...]:
    fields = ["Manufacturer", "Capacity", "DeviceLocator", "PartNumber", "FormFactor"]
    if capabilities.win10:
        fields += ["ConfiguredClockSpeed", "BankLabel", "Tag"]

    sticks = []
    try:
        for ram in wmi_conn.Win32_PhysicalMemory(fields):
            capacity = _int_field(parse_int(ram.Capacity), "Win32_PhysicalMemory", "Capacity") or 0
            stick = RamStick(
                name=clean_str(ram.PartNumber),
                manufacturer=clean_str(ram.Manufacturer),
                capacity=capacity,
                capacity_hrf=format_bytes(capacity),
                device_locator=clean_str(ram.DeviceLocator),
                form_factor=parse_form_factor(ram.FormFactor),
            )
            if capabilities.win10:
                stick.speed = _int_field(parse_int(ram.ConfiguredClockSpeed), "Win32_PhysicalMemory", "ConfiguredClockSpeed")
                stick.bank_label = clean_str(ram.BankLabel)
                stick.tag = clean_str(ram.Tag)
            sticks.append(stick)
    except Exception as e:
        logging.error(f"Ошибка получения информации о RAM: {e}")
        return ()
    return tuple(sticks)


def get_disks(wmi_conn) -> Tuple[Disk, ...]:
    fields = ["Model", "Manufacturer", "Size", "Caption", "DeviceID", "Index", "InterfaceType", "SerialNumber"]
    disks = []
    try:
        for disk in wmi_conn.Win32_DiskDrive(fields):
            capacity = _int_field(parse_int(disk.Size), "Win32_DiskDrive", "Size") or 0
            vendor = clean_str(disk.Manufacturer)
            # "(Standard disk drives)" - заглушка Windows, а не производитель
            if vendor and vendor.startswith("("):
                vendor = None
            disks.append(Disk(
                vendor=vendor,
                model=clean_str(disk.Model),
                caption=clean_str(disk.Caption),
                capacity=capacity,
                capacity_hrf=format_bytes(capacity),
                device_id=clean_str(disk.DeviceID),
                drive_index=_int_field(parse_int(disk.Index), "Win32_DiskDrive", "Index"),
                interface_type=clean_str(disk.InterfaceType),
                serial_number=clean_str(disk.SerialNumber),
            ))
    except Exception as e:
        logging.error(f"Ошибка получения информации о накопителях: {e}")
        return ()
    return tuple(disks)


def get_gpus(wmi_conn) -> Tuple[Gpu, ...]:
    fields = ["AdapterCompatibility", "Caption", "Description", "DriverDate",
              "DriverVersion", "Name", "Status", "DeviceID"]
    gpus = []
    try:
        for gpu in wmi_conn.Win32_VideoController(fields):
            gpus.append(Gpu(
                vendor=clean_str(gpu.AdapterCompatibility),
                name=clean_str(gpu.Name),
                caption=clean_str(gpu.Caption),
                description=clean_str(gpu.Description),
                driver_date=clean_str(gpu.DriverDate),
                driver_version=clean_str(gpu.DriverVersion),
                status=clean_str(gpu.Status),
                device_id=clean_str(gpu.DeviceID),
            ))
    except Exception as e:
        logging.error(f"Ошибка получения информации о видеокартах: {e}")
        return ()
    return tuple(gpus)


def decode_wmi_string(codes) -> Optional[str]:
    """Массив кодов UTF-16 из WmiMonitorID в строку без NUL."""
    if not codes:
        return None
    text = "".join(chr(code) for code in codes if code)
    return text.strip() or None


def get_displays(wmi_monitor_conn) -> Tuple[Display, ...]:
    """Мониторы из WmiMonitorID (пространство имён root\\wmi)."""
    displays = []
    try:
        monitors = wmi_monitor_conn.WmiMonitorID(["ManufacturerName", "UserFriendlyName", "SerialNumberID"])
    except Exception as e:
        logging.error(f"Ошибка получения информации о мониторах: {e}")
        return ()

    for monitor in monitors:
        try:
            displays.append(Display(
                manufacturer=decode_wmi_string(monitor.ManufacturerName),
                name=decode_wmi_string(monitor.UserFriendlyName),
                serial_number=decode_wmi_string(monitor.SerialNumberID),
            ))
        except Exception as e:
            logging.warning(f"Монитор пропущен: {e}")
    return tuple(displays)


def get_smbios(wmi_conn) -> Optional[SmBios]:
    smbios = SmBios()
    try:
        boards = wmi_conn.Win32_BaseBoard(["Product", "Manufacturer", "Version"])
        if boards:
            smbios.board_name = clean_str(boards[0].Product)
            smbios.board_vendor = clean_str(boards[0].Manufacturer)
            smbios.board_version = clean_str(boards[0].Version)
    except Exception as e:
        logging.error(f"Ошибка получения информации о материнской плате: {e}")

    try:
        bios_list = wmi_conn.Win32_BIOS(["Name", "Manufacturer", "Version"])
        if bios_list:
            smbios.bios_codename = clean_str(bios_list[0].Name)
            smbios.bios_vendor = clean_str(bios_list[0].Manufacturer)
            smbios.bios_version = clean_str(bios_list[0].Version)
    except Exception as e:
        logging.error(f"Ошибка получения информации о BIOS: {e}")

    if smbios == SmBios():
        return None
    return smbios
