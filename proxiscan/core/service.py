"""Service layer used by the CLI and future UI frontends."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from proxiscan.adapters.base import Connector, KeyValueStore, Positioning, Radio
from proxiscan.core.errors import AdapterUnavailableError, DeviceNotFoundError
from proxiscan.core.geo import bearing_for, project
from proxiscan.core.model import DeviceRecord, GeoPoint, Settings
from proxiscan.core.registry import SessionRegistry
from proxiscan.core.settings import load_settings
from proxiscan.core.signatures import load_signatures

LOGGER = logging.getLogger(__name__)


class ScanService:
    def __init__(
        self,
        *,
        radio: Radio | None = None,
        storage: KeyValueStore | None = None,
        positioning: Positioning | None = None,
        connector: Connector | None = None,
        settings: Settings | None = None,
    ) -> None:
        loaded = load_signatures()
        self.signatures = loaded.signatures
        self.load_warnings = loaded.warnings
        self.settings = settings or load_settings()

        if radio is None or connector is None:
            from proxiscan.adapters.ble_radio import BleakConnector, BleakRadio

            radio = radio or BleakRadio()
            connector = connector or BleakConnector()
        if storage is None:
            from proxiscan.adapters.file_store import FileStore

            storage = FileStore()

        self.radio = radio
        self.connector = connector
        self.positioning = positioning
        self.registry = SessionRegistry(storage, settings=self.settings, signatures=self.signatures)

    @property
    def storage_warnings(self) -> tuple[str, ...]:
        return self.registry.storage_warnings

    async def scan(
        self,
        *,
        timeout_s: float | None = None,
        on_record: Callable[[DeviceRecord], None] | None = None,
        clear: bool = True,
    ) -> list[DeviceRecord]:
        """Run one scan session and return the final snapshot.

        ``timeout_s=None`` uses the configured timeout; ``0`` scans until the
        radio's event stream ends. Adapter loss moves the registry to ERROR and
        re-raises ``AdapterUnavailableError``.
        """
        if timeout_s is None:
            timeout_s = self.settings.scan_timeout_s

        self.registry.start_session(clear=clear)
        try:
            await self.radio.start_scan(self.settings.service_filter)
        except AdapterUnavailableError:
            self.registry.adapter_off()
            raise
        except BaseException:
            self.registry.stop_session()
            raise

        consumer = asyncio.ensure_future(self._consume(on_record))
        try:
            if timeout_s > 0:
                done, _ = await asyncio.wait({consumer}, timeout=timeout_s)
                if consumer in done:
                    consumer.result()
            else:
                await consumer
        except AdapterUnavailableError:
            self.registry.adapter_off()
            raise
        finally:
            if not consumer.done():
                consumer.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await consumer
            await self.radio.stop_scan()
            self.registry.stop_session()

        return self.registry.snapshot()

    async def _consume(self, on_record: Callable[[DeviceRecord], None] | None) -> None:
        async for raw in self.radio.events():
            record = self.registry.observe(raw)
            if on_record is not None:
                on_record(record)

    def toggle_favorite(self, device_id: str) -> DeviceRecord:
        return self.registry.toggle_favorite(device_id)

    async def connect(self, device_id: str) -> DeviceRecord:
        if device_id not in self.registry:
            raise DeviceNotFoundError(f"No device '{device_id}' in the current session")
        connected = await self.connector.connect(device_id)
        return self.registry.mark_connected(device_id, connected)

    async def disconnect(self, device_id: str) -> DeviceRecord:
        if device_id not in self.registry:
            raise DeviceNotFoundError(f"No device '{device_id}' in the current session")
        await self.connector.disconnect(device_id)
        return self.registry.mark_connected(device_id, False)

    def locate(self, device_id: str) -> GeoPoint | None:
        """Approximate device position around the observer, or None without a fix."""
        record = self.registry.get(device_id)
        if record is None:
            raise DeviceNotFoundError(f"No device '{device_id}' in the current session")
        if self.positioning is None:
            return None
        origin = self.positioning.current_position()
        if origin is None:
            return None
        return project(origin, record.estimated_distance_m, bearing_for(device_id))
