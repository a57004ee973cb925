"""Core data models used across the engine, service, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from proxiscan.core.proximity import signal_quality


def as_utc(moment: datetime) -> datetime:
    """Naive timestamps are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class DeviceCategory(str, Enum):
    TRACKER = "tracker"
    PHONE_IOS = "phone_ios"
    PHONE_ANDROID = "phone_android"
    AUDIO_ACCESSORY = "audio_accessory"
    UNKNOWN = "unknown"


class SessionState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    ERROR = "error"


@dataclass(frozen=True)
class RawAdvertisement:
    device_id: str
    advertised_name: str | None = None
    signal_strength: int = 0
    service_identifiers: frozenset[str] = field(default_factory=frozenset)
    vendor_payload: bytes | None = None
    received_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.received_at is not None:
            object.__setattr__(self, "received_at", as_utc(self.received_at))


@dataclass(frozen=True)
class DecodedVendorPayload:
    vendor_id: int
    payload_hex: str


@dataclass(frozen=True)
class DeviceRecord:
    id: str
    display_name: str
    category: DeviceCategory
    estimated_distance_m: float
    signal_strength: int
    last_seen_at: datetime
    service_identifiers: frozenset[str] = field(default_factory=frozenset)
    vendor_id: int | None = None
    vendor_name: str | None = None
    is_connected: bool = False
    is_favorite: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "last_seen_at", as_utc(self.last_seen_at))

    @property
    def signal_quality(self) -> str:
        return signal_quality(self.signal_strength)

    def is_live(self, now: datetime, window_s: float = 10.0) -> bool:
        """True when the device advertised within ``window_s`` seconds of ``now``."""
        return as_utc(now) - self.last_seen_at < timedelta(seconds=window_s)


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float
    accuracy_m: float = 0.0


@dataclass(frozen=True)
class Signatures:
    """Lookup tables consumed by the classifier and decoder."""

    platform_vendor_id: int
    find_service_uuid: str
    tracker_type_marker: str
    handoff_service_uuid: str
    peer_transfer_service_uuid: str
    ios_name_keywords: tuple[str, ...]
    audio_service_uuids: tuple[str, ...]
    audio_name_keywords: tuple[str, ...]
    android_vendor_ids: frozenset[int]
    android_name_keywords: tuple[str, ...]
    vendor_names: dict[int, str]


@dataclass(frozen=True)
class Settings:
    reference_rssi: int = -59
    live_window_s: float = 10.0
    scan_timeout_s: float = 10.0
    favorites_key: str = "ble_favorites"
    service_filter: tuple[str, ...] = ()
