from __future__ import annotations

import asyncio

from proxiscan.api import DeviceCategory, RawAdvertisement, ScanService, SessionRegistry, Settings, classify_advertisement


class MemoryStorage:
    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.data[key] = value


class ReplayRadio:
    def __init__(self, advertisements: list[RawAdvertisement]) -> None:
        self.advertisements = advertisements

    async def start_scan(self, service_filter=()) -> None:
        return None

    async def stop_scan(self) -> None:
        return None

    async def events(self):
        for advertisement in self.advertisements:
            yield advertisement


def test_classify_advertisement_decodes_payload() -> None:
    assert classify_advertisement(None, bytes.fromhex("4c001219")) is DeviceCategory.TRACKER
    assert classify_advertisement("Pixel 7") is DeviceCategory.PHONE_ANDROID
    assert classify_advertisement(None, b"\x4c") is DeviceCategory.UNKNOWN


def test_public_registry_scenario() -> None:
    registry = SessionRegistry(MemoryStorage())
    registry.observe(RawAdvertisement(device_id="A", signal_strength=-70))
    registry.observe(RawAdvertisement(device_id="A", signal_strength=-50))

    snapshot = registry.snapshot()
    assert len(snapshot) == 1
    assert snapshot[0].signal_strength == -50


def test_public_scan_service_with_replayed_radio() -> None:
    radio = ReplayRadio([RawAdvertisement(device_id="spk", advertised_name="Kitchen Speaker", signal_strength=-60)])
    service = ScanService(radio=radio, storage=MemoryStorage(), connector=object(), settings=Settings())

    snapshot = asyncio.run(service.scan(timeout_s=0))
    assert snapshot[0].category is DeviceCategory.AUDIO_ACCESSORY
