"""Heuristic device classification from advertisement contents.

Rules are evaluated in order and the first match wins. The order is the
tie-break policy: an advertisement that looks like both a tracker and an
iPhone is a tracker, and an iPhone named "speaker" is still an iPhone.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from proxiscan.core.model import DecodedVendorPayload, DeviceCategory, Signatures
from proxiscan.core.signatures import default_signatures


@dataclass(frozen=True)
class Evidence:
    name: str
    decoded: DecodedVendorPayload | None
    service_ids: tuple[str, ...]
    signatures: Signatures


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    category: DeviceCategory
    predicate: Callable[[Evidence], bool]


def _has_service(evidence: Evidence, canonical: str) -> bool:
    return any(canonical in advertised for advertised in evidence.service_ids)


def _name_contains(evidence: Evidence, keywords: Iterable[str]) -> bool:
    return any(keyword in evidence.name for keyword in keywords)


def _is_platform_vendor(evidence: Evidence) -> bool:
    return (
        evidence.decoded is not None
        and evidence.decoded.vendor_id == evidence.signatures.platform_vendor_id
    )


def _is_tracker(evidence: Evidence) -> bool:
    decoded = evidence.decoded
    if decoded is None or decoded.vendor_id != evidence.signatures.platform_vendor_id:
        return False
    # Type byte follows the two vendor id bytes.
    type_marker = decoded.payload_hex[4:].startswith(evidence.signatures.tracker_type_marker)
    return type_marker or _has_service(evidence, evidence.signatures.find_service_uuid)


def _is_ios_phone(evidence: Evidence) -> bool:
    if not _is_platform_vendor(evidence):
        return False
    sigs = evidence.signatures
    return (
        _has_service(evidence, sigs.handoff_service_uuid)
        or _has_service(evidence, sigs.peer_transfer_service_uuid)
        or _name_contains(evidence, sigs.ios_name_keywords)
    )


def _is_audio_accessory(evidence: Evidence) -> bool:
    sigs = evidence.signatures
    return any(_has_service(evidence, uuid) for uuid in sigs.audio_service_uuids) or _name_contains(
        evidence, sigs.audio_name_keywords
    )


def _is_android_phone(evidence: Evidence) -> bool:
    sigs = evidence.signatures
    vendor_match = evidence.decoded is not None and evidence.decoded.vendor_id in sigs.android_vendor_ids
    return vendor_match or _name_contains(evidence, sigs.android_name_keywords)


RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("tracker", DeviceCategory.TRACKER, _is_tracker),
    ClassificationRule("phone_ios", DeviceCategory.PHONE_IOS, _is_ios_phone),
    ClassificationRule("audio_accessory", DeviceCategory.AUDIO_ACCESSORY, _is_audio_accessory),
    ClassificationRule("phone_android", DeviceCategory.PHONE_ANDROID, _is_android_phone),
)


def _evidence(
    name: str | None,
    decoded: DecodedVendorPayload | None,
    service_ids: Iterable[str] | None,
    signatures: Signatures | None,
) -> Evidence:
    return Evidence(
        name=(name or "").lower(),
        decoded=decoded,
        service_ids=tuple(sorted(s.lower() for s in (service_ids or ()))),
        signatures=signatures or default_signatures(),
    )


def classify(
    name: str | None,
    decoded: DecodedVendorPayload | None,
    service_ids: Iterable[str] | None,
    *,
    signatures: Signatures | None = None,
    rules: tuple[ClassificationRule, ...] = RULES,
) -> DeviceCategory:
    evidence = _evidence(name, decoded, service_ids, signatures)
    for rule in rules:
        if rule.predicate(evidence):
            return rule.category
    return DeviceCategory.UNKNOWN


def matching_rules(
    name: str | None,
    decoded: DecodedVendorPayload | None,
    service_ids: Iterable[str] | None,
    *,
    signatures: Signatures | None = None,
) -> tuple[str, ...]:
    """Names of every rule that matches, in priority order. Diagnostic only."""
    evidence = _evidence(name, decoded, service_ids, signatures)
    return tuple(rule.name for rule in RULES if rule.predicate(evidence))
