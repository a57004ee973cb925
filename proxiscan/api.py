"""Stable public API for building tooling on top of proxiscan.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable

from proxiscan.adapters.base import Connector, KeyValueStore, Positioning, Radio
from proxiscan.core.classifier import RULES, ClassificationRule, classify, matching_rules
from proxiscan.core.decoder import decode, payload_from_text, vendor_name
from proxiscan.core.errors import (
    AdapterUnavailableError,
    ConnectorError,
    DeviceNotFoundError,
    ProxiscanError,
    RadioError,
    SessionStateError,
    SettingsValidationError,
    SignatureLoadError,
    SignatureValidationError,
    StorageError,
)
from proxiscan.core.model import (
    DecodedVendorPayload,
    DeviceCategory,
    DeviceRecord,
    GeoPoint,
    RawAdvertisement,
    SessionState,
    Settings,
    Signatures,
)
from proxiscan.core.proximity import estimate_distance, signal_quality
from proxiscan.core.registry import SessionRegistry
from proxiscan.core.service import ScanService

__all__ = [
    "ProxiscanError",
    "AdapterUnavailableError",
    "ConnectorError",
    "DeviceNotFoundError",
    "RadioError",
    "SessionStateError",
    "SettingsValidationError",
    "SignatureLoadError",
    "SignatureValidationError",
    "StorageError",
    "Connector",
    "KeyValueStore",
    "Positioning",
    "Radio",
    "ClassificationRule",
    "DecodedVendorPayload",
    "DeviceCategory",
    "DeviceRecord",
    "GeoPoint",
    "RawAdvertisement",
    "SessionState",
    "Settings",
    "Signatures",
    "RULES",
    "SessionRegistry",
    "ScanService",
    "classify",
    "classify_advertisement",
    "decode",
    "estimate_distance",
    "matching_rules",
    "payload_from_text",
    "signal_quality",
    "vendor_name",
]


def classify_advertisement(
    name: str | None,
    vendor_payload: bytes | None = None,
    service_ids: Iterable[str] = (),
    *,
    signatures: Signatures | None = None,
) -> DeviceCategory:
    """Decode and classify in one call, for callers without a registry."""
    return classify(name, decode(vendor_payload), service_ids, signatures=signatures)
