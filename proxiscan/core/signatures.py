"""Loading and validation of the classifier's YAML signature tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from proxiscan.core.documents import config_dir, load_mapping, validate
from proxiscan.core.errors import SignatureLoadError, SignatureValidationError
from proxiscan.core.model import Signatures

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedSignatures:
    signatures: Signatures
    warnings: tuple[str, ...]


def _read_tables(path: Path | Traversable) -> dict[str, Any]:
    return load_mapping(path, invalid=SignatureValidationError, unreadable=SignatureLoadError)


def _normalize_uuid(value: str) -> str:
    return value.strip().lower()


def _normalize_keywords(values: list[str]) -> tuple[str, ...]:
    return tuple(v.strip().lower() for v in values)


def _build_signatures(doc: dict[str, Any], source: str) -> Signatures:
    validate(doc, "signatures.schema.json", source=source, error=SignatureValidationError)

    vendor_names: dict[int, str] = {}
    for entry in doc["vendor_names"]:
        if entry["id"] in vendor_names:
            raise SignatureValidationError(
                f"Vendor id 0x{entry['id']:04X} listed twice in {source}"
            )
        vendor_names[entry["id"]] = entry["name"]

    return Signatures(
        platform_vendor_id=doc["platform_vendor_id"],
        find_service_uuid=_normalize_uuid(doc["tracker"]["find_service_uuid"]),
        tracker_type_marker=doc["tracker"]["type_marker"].lower(),
        handoff_service_uuid=_normalize_uuid(doc["phone_ios"]["handoff_service_uuid"]),
        peer_transfer_service_uuid=_normalize_uuid(doc["phone_ios"]["peer_transfer_service_uuid"]),
        ios_name_keywords=_normalize_keywords(doc["phone_ios"]["name_keywords"]),
        audio_service_uuids=tuple(_normalize_uuid(u) for u in doc["audio_accessory"]["service_uuids"]),
        audio_name_keywords=_normalize_keywords(doc["audio_accessory"]["name_keywords"]),
        android_vendor_ids=frozenset(doc["phone_android"]["vendor_ids"]),
        android_name_keywords=_normalize_keywords(doc["phone_android"]["name_keywords"]),
        vendor_names=vendor_names,
    )


def _packaged_path() -> Traversable:
    return resources.files("proxiscan.signatures").joinpath("default.yaml")


def _user_path() -> Path:
    return config_dir() / "signatures.yaml"


def load_signatures() -> LoadedSignatures:
    """Load packaged tables, letting the user file replace whole top-level tables."""
    doc = _read_tables(_packaged_path())
    warnings: list[str] = []
    sources = ["packaged default.yaml"]

    user_path = _user_path()
    if user_path.is_file():
        overrides = _read_tables(user_path)
        for key in sorted(overrides):
            if key in doc:
                warning = f"User signatures override packaged table '{key}'"
                LOGGER.warning(warning)
                warnings.append(warning)
            doc[key] = overrides[key]
        sources.append(str(user_path))

    signatures = _build_signatures(doc, " + ".join(sources))
    return LoadedSignatures(signatures=signatures, warnings=tuple(warnings))


@lru_cache(maxsize=1)
def default_signatures() -> Signatures:
    """Packaged tables only; used as the classifier's default argument."""
    return _build_signatures(_read_tables(_packaged_path()), "packaged default.yaml")
