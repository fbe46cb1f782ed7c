"""Общие настройки pytest и фикстуры."""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from system.usb_ids import UsbIdDatabase  # noqa: E402


def pytest_addoption(parser):
    parser.addoption(
        "--run-windows",
        action="store_true",
        default=False,
        help="Run tests that query the live Windows WMI service",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-windows"):
        return

    skip_windows = pytest.mark.skip(reason="Need --run-windows option to run")
    for item in items:
        if "windows" in item.keywords:
            item.add_marker(skip_windows)


USB_IDS_SAMPLE = """\
# sample
046d  Logitech, Inc.
\tc52b  Unifying Receiver
\t\t00  Keyboard
1532  Razer USA, Ltd
\t0084  DeathAdder V2
C 03  Human Interface Device
\t01  Boot Interface Subclass
"""


@pytest.fixture
def usb_ids():
    return UsbIdDatabase(UsbIdDatabase.parse(USB_IDS_SAMPLE.splitlines()))


@pytest.fixture
def empty_usb_ids():
    return UsbIdDatabase()
