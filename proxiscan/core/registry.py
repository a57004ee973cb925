"""Session registry: the single owner of merged device records."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from proxiscan.adapters.base import KeyValueStore
from proxiscan.core.classifier import classify
from proxiscan.core.decoder import decode, vendor_name
from proxiscan.core.errors import DeviceNotFoundError, SessionStateError, StorageError
from proxiscan.core.model import (
    DeviceRecord,
    RawAdvertisement,
    SessionState,
    Settings,
    Signatures,
    as_utc,
)
from proxiscan.core.proximity import MAX_DISTANCE_M, estimate_distance

LOGGER = logging.getLogger(__name__)

UNNAMED_DEVICE = "Unknown Device"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionRegistry:
    """Owns at most one ``DeviceRecord`` per device id for a scan session.

    Records are immutable; every change goes through ``observe``,
    ``toggle_favorite``, ``mark_connected`` or one of the eviction methods,
    which replace the stored value. The favorites set is overlay data read
    from storage and survives ``clear`` and adapter loss.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        *,
        settings: Settings | None = None,
        signatures: Signatures | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._storage = storage
        self._settings = settings or Settings()
        self._signatures = signatures
        self._clock = clock
        self._devices: dict[str, DeviceRecord] = {}
        self._favorites: set[str] = set()
        self._favorites_readable = True
        self._unsaved_favorites: dict[str, bool] = {}
        self._storage_warnings: list[str] = []
        self.state = SessionState.IDLE
        self.reload_favorites()

    @property
    def storage_warnings(self) -> tuple[str, ...]:
        return tuple(self._storage_warnings)

    @property
    def favorites(self) -> frozenset[str]:
        return frozenset(self._favorites)

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._devices

    def __iter__(self) -> Iterator[DeviceRecord]:
        return iter(self.snapshot())

    def get(self, device_id: str) -> DeviceRecord | None:
        return self._devices.get(device_id)

    def start_session(self, *, clear: bool = True) -> None:
        if self.state is not SessionState.IDLE:
            raise SessionStateError(f"Cannot start a scan session while {self.state.value}")
        if clear:
            self.clear()
        self.state = SessionState.SCANNING
        LOGGER.debug("Session state idle -> scanning")

    def stop_session(self) -> None:
        if self.state is SessionState.SCANNING:
            self.state = SessionState.IDLE
            LOGGER.debug("Session state scanning -> idle")

    def adapter_off(self) -> None:
        """Enter ERROR, dropping per-session records but keeping favorites."""
        LOGGER.warning("Bluetooth adapter unavailable; discarding %d session records", len(self._devices))
        self._devices.clear()
        self.state = SessionState.ERROR

    def acknowledge_error(self) -> None:
        if self.state is not SessionState.ERROR:
            raise SessionStateError(f"No adapter error to acknowledge (state is {self.state.value})")
        self.state = SessionState.IDLE
        LOGGER.debug("Session state error -> idle")

    def observe(self, raw: RawAdvertisement) -> DeviceRecord:
        if self.state is SessionState.ERROR:
            raise SessionStateError("Adapter is unavailable; acknowledge the error before observing")

        previous = self._devices.get(raw.device_id)
        decoded = decode(raw.vendor_payload)
        category = classify(
            raw.advertised_name,
            decoded,
            raw.service_identifiers,
            signatures=self._signatures,
        )

        distance = estimate_distance(raw.signal_strength, self._settings.reference_rssi)
        if distance is None:
            distance = previous.estimated_distance_m if previous else MAX_DISTANCE_M

        seen_at = raw.received_at or as_utc(self._clock())
        if previous is not None and seen_at < previous.last_seen_at:
            seen_at = previous.last_seen_at

        vendor_id = decoded.vendor_id if decoded else None
        record = DeviceRecord(
            id=raw.device_id,
            display_name=(raw.advertised_name or "").strip() or UNNAMED_DEVICE,
            category=category,
            estimated_distance_m=distance,
            signal_strength=raw.signal_strength,
            last_seen_at=seen_at,
            service_identifiers=frozenset(raw.service_identifiers),
            vendor_id=vendor_id,
            vendor_name=vendor_name(vendor_id, self._signatures),
            is_connected=previous.is_connected if previous else False,
            is_favorite=raw.device_id in self._favorites,
        )
        self._devices[raw.device_id] = record
        LOGGER.debug(
            "Merged %s as %s at %.2fm (rssi=%d)",
            record.id,
            record.category.value,
            record.estimated_distance_m,
            record.signal_strength,
        )
        return record

    def mark_connected(self, device_id: str, connected: bool) -> DeviceRecord:
        record = self._require(device_id)
        updated = replace(record, is_connected=connected)
        self._devices[device_id] = updated
        return updated

    def toggle_favorite(self, device_id: str) -> DeviceRecord:
        """Flip the favorite flag and persist the favorites set.

        A failed write is logged and added to ``storage_warnings``; the
        in-memory toggle stands for the rest of the session. While the stored
        set cannot be read, toggles are held back and merged into it on the
        next successful read instead of replacing it.
        """
        record = self._require(device_id)
        wanted = device_id not in self._favorites
        if wanted:
            self._favorites.add(device_id)
        else:
            self._favorites.discard(device_id)
        if not self._favorites_readable:
            self._unsaved_favorites[device_id] = wanted

        self._devices[device_id] = replace(record, is_favorite=wanted)
        self._persist_favorites()
        return self._devices[device_id]

    def reload_favorites(self) -> frozenset[str]:
        stored = self._read_favorites()
        self._favorites_readable = stored is not None
        self._favorites = set(stored or ())
        for device_id, wanted in self._unsaved_favorites.items():
            if wanted:
                self._favorites.add(device_id)
            else:
                self._favorites.discard(device_id)

        for device_id, record in self._devices.items():
            flag = device_id in self._favorites
            if record.is_favorite != flag:
                self._devices[device_id] = replace(record, is_favorite=flag)
        return frozenset(self._favorites)

    def _read_favorites(self) -> list[str] | None:
        """Stored favorite ids; None when the store itself failed."""
        key = self._settings.favorites_key
        try:
            raw = self._storage.get(key)
        except StorageError as exc:
            self._warn(f"Could not read favorites '{key}': {exc}")
            return None
        if raw is None:
            return []
        try:
            ids = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            self._warn(f"Ignoring unreadable favorites '{key}': {exc}")
            return []
        if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
            self._warn(f"Ignoring favorites '{key}': expected a JSON array of strings")
            return []
        return ids

    def _persist_favorites(self) -> None:
        key = self._settings.favorites_key
        if not self._favorites_readable:
            self.reload_favorites()
            if not self._favorites_readable:
                self._warn(f"Not writing favorites '{key}' until the stored set can be read")
                return

        payload = json.dumps(sorted(self._favorites)).encode("utf-8")
        try:
            self._storage.set(key, payload)
        except StorageError as exc:
            self._warn(f"Could not persist favorites '{key}': {exc}")
            return
        self._unsaved_favorites.clear()

    def _warn(self, message: str) -> None:
        LOGGER.warning(message)
        self._storage_warnings.append(message)

    def snapshot(self) -> list[DeviceRecord]:
        return sorted(self._devices.values(), key=lambda r: (r.estimated_distance_m, r.id))

    def favorites_snapshot(self) -> list[DeviceRecord]:
        return [record for record in self.snapshot() if record.is_favorite]

    def clear(self) -> None:
        self._devices.clear()

    def evict(self, device_id: str) -> DeviceRecord:
        record = self._require(device_id)
        del self._devices[device_id]
        return record

    def evict_stale(self, max_age_s: float, now: datetime | None = None) -> list[str]:
        """Drop records not seen within ``max_age_s`` seconds; returns evicted ids."""
        cutoff = as_utc(now or self._clock()) - timedelta(seconds=max_age_s)
        stale = sorted(i for i, r in self._devices.items() if r.last_seen_at < cutoff)
        for device_id in stale:
            del self._devices[device_id]
        if stale:
            LOGGER.debug("Evicted %d stale devices", len(stale))
        return stale

    def _require(self, device_id: str) -> DeviceRecord:
        record = self._devices.get(device_id)
        if record is None:
            raise DeviceNotFoundError(f"No device '{device_id}' in the current session")
        return record
