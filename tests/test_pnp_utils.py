import pytest

from domain.models import VendorProductKey
from system.pnp_utils import is_generic_driver, parse_vid_pid


class TestParseVidPid:

    def test_standard_usb_id(self):
        key = parse_vid_pid("USB\\VID_046D&PID_C52B\\5&2A1B3C4D&0&2")
        assert key == VendorProductKey("046D", "C52B")

    def test_interface_id(self):
        key = parse_vid_pid("USB\\VID_046D&PID_C52B&MI_01\\6&1F2E3D&0&0001")
        assert key == VendorProductKey("046D", "C52B")

    @pytest.mark.parametrize("device_id", [
        "USB\\ROOT_HUB30\\4&1B2C3D4E&0&0",
        "USB\\CLASS_09&SUBCLASS_00\\5&1",
        "HID\\ABC&DEF\\1",
    ])
    def test_without_vendor_marker(self, device_id):
        key = parse_vid_pid(device_id)
        assert key.vendor_id is None
        assert key.product_id is None
        assert key.is_empty

    @pytest.mark.parametrize("device_id", [
        None,
        "",
        "USB",
        "USB\\VID_046D",
        "USB\\\\",
    ])
    def test_malformed_ids_fail_soft(self, device_id):
        assert parse_vid_pid(device_id) == VendorProductKey()


@pytest.mark.parametrize("name, generic", [
    ("USB Composite Device", True),
    ("USB Input Device", True),
    ("USB Output Device", True),
    ("USB Audio Device", True),
    ("USB Mass Storage Device", True),
    ("Disk Drive", True),
    ("USB Attached SCSI (UAS) Mass Storage Device", True),
    ("Generic USB Hub", True),
    ("Logitech Unifying Receiver", False),
    ("Razer DeathAdder V2", False),
])
def test_is_generic_driver(name, generic):
    assert is_generic_driver(name) is generic
