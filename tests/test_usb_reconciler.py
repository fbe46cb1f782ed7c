from datetime import datetime

import pytest

from domain.models import DevicePropertySet, UsbDevice
from system.usb_reconciler import create_device, propose_merge, reconcile, should_replace

LOGITECH_ID = "USB\\VID_046D&PID_C52B\\5&2A1B3C4D&0&2"
LOGITECH_MI_ID = "USB\\VID_046D&PID_C52B&MI_01\\6&1F2E3D&0&0001"
RAZER_ID = "USB\\VID_1532&PID_0084\\5&3C2B1A&0&3"
HUB_ID = "USB\\ROOT_HUB30\\4&1B2C3D4E&0&0"


def props(device_id, bus_desc="Generic USB Hub", driver_desc="USB Input Device",
          provider="Microsoft", manufacturer=None, **extra) -> DevicePropertySet:
    return DevicePropertySet(
        device_id=device_id,
        bus_reported_description=bus_desc,
        driver_description=driver_desc,
        driver_provider=provider,
        manufacturer=manufacturer,
        **extra,
    )


def as_map(*property_sets):
    return {p.device_id: p for p in property_sets}


def device(driver_name="USB Input Device", provider="Microsoft", manufacturer=None, **extra) -> UsbDevice:
    return UsbDevice(
        bus_reported_name="Generic USB Hub",
        driver_name=driver_name,
        driver_provider=provider,
        manufacturer=manufacturer,
        **extra,
    )


class TestShouldReplace:

    @pytest.mark.parametrize("interface_driver", ["USB Input Device", "USB Output Device", "USB Audio Device"])
    def test_composite_beats_interface(self, interface_driver):
        assert should_replace(device(interface_driver), props(LOGITECH_ID, driver_desc="USB Composite Device"))

    def test_interface_does_not_beat_composite(self):
        existing = device("USB Composite Device")
        assert not should_replace(existing, props(LOGITECH_ID, driver_desc="USB Input Device"))

    def test_named_provider_beats_microsoft(self):
        existing = device("USB Mass Storage Device")
        candidate = props(LOGITECH_ID, driver_desc="USB Mass Storage Device", provider="Logitech")
        assert should_replace(existing, candidate)

    def test_missing_provider_does_not_beat_microsoft(self):
        existing = device("USB Mass Storage Device", manufacturer="Microsoft")
        candidate = props(LOGITECH_ID, driver_desc="USB Mass Storage Device", provider=None)
        assert not should_replace(existing, candidate)

    @pytest.mark.parametrize("existing_manufacturer", [None, "Microsoft"])
    def test_named_manufacturer_beats_default(self, existing_manufacturer):
        existing = device("USB Mass Storage Device", provider="Acme", manufacturer=existing_manufacturer)
        candidate = props(LOGITECH_ID, driver_desc="Disk Drive", provider="Acme", manufacturer="Logitech")
        assert should_replace(existing, candidate)

    def test_default_manufacturer_does_not_beat_named(self):
        existing = device("USB Mass Storage Device", provider="Acme", manufacturer="Kingston")
        candidate = props(LOGITECH_ID, driver_desc="Disk Drive", provider="Acme", manufacturer="Microsoft")
        assert not should_replace(existing, candidate)

    def test_specific_driver_name_beats_generic(self):
        existing = device("USB Input Device", provider="Acme", manufacturer="Acme")
        candidate = props(LOGITECH_ID, driver_desc="Logitech Unifying Receiver", provider="Acme", manufacturer="Acme")
        assert should_replace(existing, candidate)

    @pytest.mark.parametrize("generic", [
        "USB Input Device",
        "USB Output Device",
        "USB Audio Device",
        "USB Mass Storage Device",
        "Disk Drive",
        "USB Attached SCSI (UAS) Mass Storage Device",
        "Generic SuperSpeed USB Hub",
    ])
    def test_generic_driver_name_never_wins_alone(self, generic):
        existing = device("Logitech Unifying Receiver", provider="Acme", manufacturer="Acme")
        candidate = props(LOGITECH_ID, driver_desc=generic, provider="Acme", manufacturer="Acme")
        assert not should_replace(existing, candidate)


class TestProposeMerge:

    def test_no_rule_returns_existing_instance(self, usb_ids):
        existing = device("USB Composite Device")
        assert propose_merge(existing, props(LOGITECH_ID), usb_ids) is existing

    def test_replace_overwrites_driver_fields(self, usb_ids):
        existing = create_device(props(HUB_ID, driver_desc="USB Input Device"), usb_ids)
        candidate = props(
            HUB_ID,
            driver_desc="USB Composite Device",
            provider="Generic Co",
            manufacturer="Generic Co",
            driver_version="2.1",
            driver_date=datetime(2020, 1, 2, 3, 4, 5),
            device_class="USB",
            friendly_name="Hub",
        )
        merged = propose_merge(existing, candidate, usb_ids)
        assert merged is not existing
        assert existing.driver_name == "USB Input Device"
        assert merged.driver_name == "USB Composite Device"
        assert merged.driver_provider == "Generic Co"
        assert merged.manufacturer == "Generic Co"
        assert merged.driver_version == "2.1"
        assert merged.driver_date == datetime(2020, 1, 2, 3, 4, 5)
        assert merged.device_class == "USB"
        assert merged.name == "Hub"
        assert merged.device_id == HUB_ID

    def test_backfills_ids_when_missing(self, usb_ids):
        existing = create_device(props(HUB_ID), usb_ids)
        assert existing.vendor_id is None
        merged = propose_merge(existing, props(LOGITECH_ID, driver_desc="USB Composite Device"), usb_ids)
        assert merged.device_id == HUB_ID
        assert (merged.vendor_id, merged.product_id) == ("046D", "C52B")
        assert (merged.vendor_name, merged.product_name) == ("Logitech, Inc.", "Unifying Receiver")

    def test_populated_ids_are_never_overwritten(self, usb_ids):
        existing = create_device(props(LOGITECH_ID), usb_ids)
        merged = propose_merge(existing, props(RAZER_ID, driver_desc="USB Composite Device"), usb_ids)
        assert merged.driver_name == "USB Composite Device"
        assert (merged.vendor_id, merged.product_id) == ("046D", "C52B")
        assert (merged.vendor_name, merged.product_name) == ("Logitech, Inc.", "Unifying Receiver")

    def test_redundant_key_skips_resolver(self, usb_ids):
        class CountingResolver:
            calls = 0

            def resolve(self, vendor_id, product_id):
                CountingResolver.calls += 1
                return usb_ids.resolve(vendor_id, product_id)

        resolver = CountingResolver()
        existing = create_device(props(LOGITECH_MI_ID), resolver)
        propose_merge(existing, props(LOGITECH_ID, driver_desc="USB Composite Device"), resolver)
        propose_merge(existing, props(HUB_ID, driver_desc="USB Composite Device"), resolver)
        assert CountingResolver.calls == 1

    def test_names_backfilled_independently_of_ids(self, empty_usb_ids, usb_ids):
        # Первое появление без справочника: ID есть, имён нет
        existing = create_device(props(RAZER_ID), empty_usb_ids)
        assert existing.vendor_name is None
        merged = propose_merge(existing, props(LOGITECH_ID, driver_desc="USB Composite Device"), usb_ids)
        assert (merged.vendor_id, merged.product_id) == ("1532", "0084")
        assert (merged.vendor_name, merged.product_name) == ("Logitech, Inc.", "Unifying Receiver")


class TestReconcile:

    def test_one_entry_per_bus_reported_description(self, usb_ids):
        result = reconcile(as_map(
            props(LOGITECH_MI_ID, bus_desc="USB Receiver"),
            props(RAZER_ID, bus_desc="Razer DeathAdder V2", driver_desc="USB Composite Device"),
            props(LOGITECH_ID, bus_desc="USB Receiver", driver_desc="USB Composite Device"),
        ), usb_ids)
        assert [d.bus_reported_name for d in result] == ["USB Receiver", "Razer DeathAdder V2"]
        assert isinstance(result, tuple)

    def test_order_sensitivity(self, usb_ids):
        input_first = reconcile(as_map(
            props(LOGITECH_MI_ID, driver_desc="USB Input Device"),
            props(LOGITECH_ID, driver_desc="USB Composite Device"),
        ), usb_ids)
        composite_first = reconcile(as_map(
            props(LOGITECH_ID, driver_desc="USB Composite Device"),
            props(LOGITECH_MI_ID, driver_desc="USB Input Device"),
        ), usb_ids)
        assert input_first[0].driver_name == "USB Composite Device"
        assert composite_first[0].driver_name == "USB Composite Device"
        assert input_first[0].device_id == LOGITECH_MI_ID
        assert composite_first[0].device_id == LOGITECH_ID

    def test_ids_stable_across_multiple_replacements(self, usb_ids):
        result = reconcile(as_map(
            props(LOGITECH_ID, driver_desc="USB Input Device"),
            props(RAZER_ID, driver_desc="USB Composite Device"),
            props(HUB_ID, driver_desc="Vendor Hub Driver", provider="Vendor", manufacturer="Vendor"),
        ), usb_ids)
        assert result[0].driver_name == "Vendor Hub Driver"
        assert (result[0].vendor_id, result[0].product_id) == ("046D", "C52B")
        assert result[0].vendor_name == "Logitech, Inc."

    def test_generic_hub_scenario(self, usb_ids):
        result = reconcile(as_map(
            props(HUB_ID, driver_desc="USB Input Device", provider="Microsoft", manufacturer=None),
            props(LOGITECH_ID, driver_desc="USB Composite Device", provider="Generic Co", manufacturer="Generic Co"),
        ), usb_ids)
        assert len(result) == 1
        hub = result[0]
        assert hub.bus_reported_name == "Generic USB Hub"
        assert hub.driver_name == "USB Composite Device"
        assert hub.driver_provider == "Generic Co"
        assert hub.manufacturer == "Generic Co"

    def test_same_input_twice_gives_same_output(self, usb_ids):
        data = as_map(
            props(LOGITECH_MI_ID, bus_desc="USB Receiver"),
            props(LOGITECH_ID, bus_desc="USB Receiver", driver_desc="USB Composite Device"),
            props(RAZER_ID, bus_desc="Razer DeathAdder V2", driver_desc="Razer Mouse Driver"),
            props(HUB_ID, driver_desc="USB Composite Device"),
        )
        assert reconcile(data, usb_ids) == reconcile(data, usb_ids)

    def test_empty_input(self, usb_ids):
        assert reconcile({}, usb_ids) == ()


def test_key_without_ids_never_reaches_resolver(usb_ids):
    class StrictResolver:
        def resolve(self, vendor_id, product_id):
            raise AssertionError(f"unexpected lookup {vendor_id}:{product_id}")

    existing = create_device(props(LOGITECH_ID), usb_ids)
    merged = propose_merge(existing, props(HUB_ID, driver_desc="USB Composite Device"), StrictResolver())
    assert merged.driver_name == "USB Composite Device"
    assert (merged.vendor_id, merged.product_id) == ("046D", "C52B")
