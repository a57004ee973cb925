"""Vendor payload decoding."""

from __future__ import annotations

import base64
import binascii
import re

from proxiscan.core.model import DecodedVendorPayload, Signatures
from proxiscan.core.signatures import default_signatures

_HEX_RE = re.compile(r"^[0-9a-f]+$")
_HEX_SEPARATORS = re.compile(r"[\s:\-]")


def decode(vendor_payload: bytes | None) -> DecodedVendorPayload | None:
    """Split a manufacturer-specific payload into vendor id and hex body.

    Returns None for an absent payload or one too short to carry a vendor id.
    """
    if not vendor_payload or len(vendor_payload) < 2:
        return None
    vendor_id = int.from_bytes(vendor_payload[:2], "little")
    return DecodedVendorPayload(vendor_id=vendor_id, payload_hex=vendor_payload.hex())


def payload_from_text(text: str | None) -> bytes | None:
    """Parse hex or base64 payload text as delivered by a radio boundary.

    Hex is tried first (``0x`` prefix, spaces, colons and dashes tolerated).
    Returns None when the text is empty or neither encoding parses.
    """
    if text is None:
        return None
    stripped = text.strip()
    if not stripped:
        return None

    candidate = _HEX_SEPARATORS.sub("", stripped.lower())
    if candidate.startswith("0x"):
        candidate = candidate[2:]
    if candidate and len(candidate) % 2 == 0 and _HEX_RE.match(candidate):
        return bytes.fromhex(candidate)

    try:
        decoded = base64.b64decode(stripped, validate=True)
    except (binascii.Error, ValueError):
        return None
    return decoded or None


def vendor_name(vendor_id: int | None, signatures: Signatures | None = None) -> str | None:
    if vendor_id is None:
        return None
    signatures = signatures or default_signatures()
    return signatures.vendor_names.get(vendor_id)
