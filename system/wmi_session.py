"""
Сессия WMI с гарантированным освобождением COM.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

DEFAULT_NAMESPACE = "root\\cimv2"


@contextmanager
def wmi_session(namespace: Optional[str] = None) -> Iterator[object]:
    """
    Открыть подключение WMI в текущем потоке.

    CoUninitialize вызывается на любом пути выхода, включая исключения.
    """
    import pythoncom
    import wmi

    namespace = namespace or DEFAULT_NAMESPACE
    pythoncom.CoInitialize()
    try:
        yield wmi.WMI(namespace=namespace)
    finally:
        pythoncom.CoUninitialize()
        logging.getLogger(__name__).debug(f"Сессия WMI закрыта: {namespace}")
