from .windows_collector import WindowsHardwareCollector  # noqa: F401
