from __future__ import annotations

from proxiscan.core.classifier import RULES, classify, matching_rules
from proxiscan.core.model import DecodedVendorPayload, DeviceCategory

FIND_SERVICE = "7DFC9000-7D1C-4951-86AA-8D9728F8D66C"
HANDOFF_SERVICE = "D0611E78-BBB4-4591-A5F8-487910AE4366"
PEER_TRANSFER_SERVICE = "7BA94D80-5DAD-4544-8CF4-370E39BB1CA0"
AUDIO_SINK = "0000110B-0000-1000-8000-00805F9B34FB"


def _apple(payload_hex: str = "4c001005") -> DecodedVendorPayload:
    return DecodedVendorPayload(vendor_id=0x004C, payload_hex=payload_hex)


def test_type_marker_after_vendor_id_is_tracker() -> None:
    decoded = DecodedVendorPayload(vendor_id=0x004C, payload_hex="004c1219aabb")
    assert classify(None, decoded, set()) is DeviceCategory.TRACKER


def test_find_service_is_tracker() -> None:
    assert classify("", _apple(), {FIND_SERVICE}) is DeviceCategory.TRACKER


def test_tracker_wins_over_ios_phone() -> None:
    decoded = _apple("4c001219")
    assert classify("John's iPhone", decoded, {HANDOFF_SERVICE}) is DeviceCategory.TRACKER
    assert matching_rules("John's iPhone", decoded, {HANDOFF_SERVICE})[:2] == ("tracker", "phone_ios")


def test_iphone_by_name() -> None:
    assert classify("John's iPhone", _apple(), set()) is DeviceCategory.PHONE_IOS


def test_ios_phone_by_service() -> None:
    assert classify(None, _apple(), {HANDOFF_SERVICE.lower()}) is DeviceCategory.PHONE_IOS
    assert classify(None, _apple(), {PEER_TRANSFER_SERVICE}) is DeviceCategory.PHONE_IOS


def test_iphone_name_without_apple_vendor_is_not_ios() -> None:
    assert classify("John's iPhone", None, set()) is DeviceCategory.UNKNOWN


def test_apple_vendor_without_ios_hints_falls_through_to_audio() -> None:
    assert classify("AirPods Pro", _apple(), set()) is DeviceCategory.AUDIO_ACCESSORY


def test_audio_service_substring_match() -> None:
    advertised = "{" + AUDIO_SINK.lower() + "}"
    assert classify(None, None, {advertised}) is DeviceCategory.AUDIO_ACCESSORY


def test_audio_beats_android_keyword() -> None:
    assert classify("Samsung Speaker", None, set()) is DeviceCategory.AUDIO_ACCESSORY


def test_android_by_vendor_id() -> None:
    decoded = DecodedVendorPayload(vendor_id=0x00E0, payload_hex="e0000102")
    assert classify(None, decoded, set()) is DeviceCategory.PHONE_ANDROID


def test_android_by_name() -> None:
    assert classify("Pixel 8", None, set()) is DeviceCategory.PHONE_ANDROID
    assert classify("GALAXY-android", None, None) is DeviceCategory.PHONE_ANDROID


def test_nothing_matches_is_unknown() -> None:
    decoded = DecodedVendorPayload(vendor_id=0x0059, payload_hex="5900")
    assert classify("sensor-42", decoded, {"180f"}) is DeviceCategory.UNKNOWN
    assert classify(None, None, None) is DeviceCategory.UNKNOWN
    assert matching_rules(None, None, None) == ()


def test_rule_order_is_fixed() -> None:
    assert [rule.category for rule in RULES] == [
        DeviceCategory.TRACKER,
        DeviceCategory.PHONE_IOS,
        DeviceCategory.AUDIO_ACCESSORY,
        DeviceCategory.PHONE_ANDROID,
    ]
