from __future__ import annotations

from pathlib import Path

import pytest

from proxiscan.core.classifier import classify
from proxiscan.core.errors import SignatureValidationError
from proxiscan.core.model import DeviceCategory
from proxiscan.core.signatures import default_signatures, load_signatures


def _write_signatures(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_load_packaged_signatures() -> None:
    loaded = load_signatures()
    sigs = loaded.signatures
    assert loaded.warnings == ()
    assert sigs.platform_vendor_id == 0x004C
    assert sigs.tracker_type_marker == "12"
    assert sigs.android_vendor_ids == frozenset({0x00E0, 0x0075, 0x001D})
    assert "0000111e-0000-1000-8000-00805f9b34fb" in sigs.audio_service_uuids
    assert sigs.vendor_names[0x004C] == "Apple"
    assert sigs == default_signatures()


def test_user_table_overrides_packaged(isolated_xdg: Path) -> None:
    _write_signatures(
        isolated_xdg / "cfg" / "proxiscan" / "signatures.yaml",
        """
audio_accessory:
  service_uuids: []
  name_keywords: ["soundbar"]
""",
    )

    loaded = load_signatures()
    assert loaded.warnings == ("User signatures override packaged table 'audio_accessory'",)
    assert loaded.signatures.audio_name_keywords == ("soundbar",)
    assert loaded.signatures.ios_name_keywords == ("iphone", "ios")
    assert classify("Living Room Soundbar", None, set(), signatures=loaded.signatures) is (
        DeviceCategory.AUDIO_ACCESSORY
    )
    assert classify("Speaker", None, set(), signatures=loaded.signatures) is DeviceCategory.UNKNOWN


def test_invalid_vendor_id_rejected(isolated_xdg: Path) -> None:
    _write_signatures(
        isolated_xdg / "cfg" / "proxiscan" / "signatures.yaml",
        "platform_vendor_id: 0x1FFFF\n",
    )

    with pytest.raises(SignatureValidationError):
        load_signatures()


def test_unknown_table_rejected(isolated_xdg: Path) -> None:
    _write_signatures(
        isolated_xdg / "cfg" / "proxiscan" / "signatures.yaml",
        "smartwatch:\n  name_keywords: [watch]\n",
    )

    with pytest.raises(SignatureValidationError):
        load_signatures()


def test_duplicate_keys_rejected(isolated_xdg: Path) -> None:
    _write_signatures(
        isolated_xdg / "cfg" / "proxiscan" / "signatures.yaml",
        "platform_vendor_id: 0x004C\nplatform_vendor_id: 0x0075\n",
    )

    with pytest.raises(SignatureValidationError):
        load_signatures()


def test_duplicate_vendor_names_rejected(isolated_xdg: Path) -> None:
    _write_signatures(
        isolated_xdg / "cfg" / "proxiscan" / "signatures.yaml",
        """
vendor_names:
  - {id: 0x004C, name: Apple}
  - {id: 76, name: Also Apple}
""",
    )

    with pytest.raises(SignatureValidationError):
        load_signatures()
