"""Collaborator interfaces the engine is wired against."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Protocol

from proxiscan.core.model import GeoPoint, RawAdvertisement


class Radio(Protocol):
    async def start_scan(self, service_filter: Sequence[str] = ()) -> None:
        """Begin scanning. Raises AdapterUnavailableError when the adapter is off."""

    async def stop_scan(self) -> None:
        """Stop scanning; safe to call when not scanning."""

    def events(self) -> AsyncIterator[RawAdvertisement]:
        """Yield advertisements until the scan stops.

        Raises AdapterUnavailableError if the adapter powers off mid-scan.
        """


class KeyValueStore(Protocol):
    def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None when the key is absent."""

    def set(self, key: str, value: bytes) -> None:
        """Store bytes under key. Raises StorageError on failure."""


class Positioning(Protocol):
    def current_position(self) -> GeoPoint | None:
        """Return the observer's position, or None when unknown."""


class Connector(Protocol):
    async def connect(self, device_id: str) -> bool:
        """Connect to a device; returns whether the link came up."""

    async def disconnect(self, device_id: str) -> None:
        """Tear down a connection."""
