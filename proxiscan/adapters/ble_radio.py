"""bleak-backed radio and connector."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from datetime import datetime, timezone
from typing import Any

from proxiscan.core.errors import AdapterUnavailableError, ConnectorError, RadioError
from proxiscan.core.model import RawAdvertisement

LOGGER = logging.getLogger(__name__)

_STOP = object()


def advertisement_from_bleak(device: Any, advertisement_data: Any) -> RawAdvertisement:
    """Map a bleak detection callback pair onto a ``RawAdvertisement``.

    bleak strips the company id from manufacturer data and keys the dict by it,
    so the raw vendor payload is rebuilt as little-endian id + data.
    """
    vendor_payload: bytes | None = None
    manufacturer_data = getattr(advertisement_data, "manufacturer_data", None) or {}
    for company_id, data in manufacturer_data.items():
        vendor_payload = int(company_id).to_bytes(2, "little") + bytes(data)
        break

    rssi = getattr(advertisement_data, "rssi", None)
    if rssi is None:
        rssi = getattr(device, "rssi", None)

    name = getattr(advertisement_data, "local_name", None) or getattr(device, "name", None)
    return RawAdvertisement(
        device_id=device.address,
        advertised_name=name,
        signal_strength=int(rssi) if rssi is not None else 0,
        service_identifiers=frozenset(getattr(advertisement_data, "service_uuids", None) or ()),
        vendor_payload=vendor_payload,
        received_at=datetime.now(timezone.utc),
    )


class BleakRadio:
    """Scanner that turns bleak detection callbacks into an async event stream.

    bleak has no portable notification for an adapter being powered off while
    a scan runs; the stream then just goes quiet. Hosts that learn about it
    (a D-Bus property watch, an OS power event) call ``adapter_lost`` from the
    event loop thread so ``events`` raises ``AdapterUnavailableError``.
    """

    def __init__(self) -> None:
        self._scanner: Any = None
        self._queue: asyncio.Queue[Any] = asyncio.Queue()

    def _on_detection(self, device: Any, advertisement_data: Any) -> None:
        self._queue.put_nowait(advertisement_from_bleak(device, advertisement_data))

    async def start_scan(self, service_filter: Sequence[str] = ()) -> None:
        try:
            from bleak import BleakScanner  # type: ignore
            from bleak.exc import BleakError  # type: ignore
        except Exception as exc:  # pragma: no cover - import failure path
            raise RadioError("Scanning requires 'bleak'. Install dependency and retry.") from exc

        if self._scanner is not None:
            return

        self._queue = asyncio.Queue()
        scanner = BleakScanner(
            detection_callback=self._on_detection,
            service_uuids=list(service_filter) or None,
        )
        try:
            await scanner.start()
        except BleakError as exc:
            raise AdapterUnavailableError(f"Bluetooth adapter unavailable: {exc}") from exc
        except OSError as exc:
            raise AdapterUnavailableError(f"Bluetooth adapter unavailable: {exc}") from exc
        self._scanner = scanner
        LOGGER.debug("BLE scan started (filter=%s)", list(service_filter))

    def adapter_lost(self, reason: str = "adapter powered off") -> None:
        LOGGER.warning("Bluetooth adapter lost during scan: %s", reason)
        self._queue.put_nowait(AdapterUnavailableError(f"Bluetooth adapter unavailable: {reason}"))

    async def stop_scan(self) -> None:
        scanner, self._scanner = self._scanner, None
        if scanner is None:
            return
        try:
            await scanner.stop()
        finally:
            self._queue.put_nowait(_STOP)
            LOGGER.debug("BLE scan stopped")

    async def events(self) -> AsyncIterator[RawAdvertisement]:
        while True:
            item = await self._queue.get()
            if item is _STOP:
                return
            if isinstance(item, AdapterUnavailableError):
                raise item
            yield item


class BleakConnector:
    def __init__(self, *, timeout_s: float = 10.0) -> None:
        self.timeout_s = timeout_s
        self._clients: dict[str, Any] = {}

    async def connect(self, device_id: str) -> bool:
        try:
            from bleak import BleakClient  # type: ignore
        except Exception as exc:  # pragma: no cover - import failure path
            raise ConnectorError("Connecting requires 'bleak'. Install dependency and retry.") from exc

        client = BleakClient(device_id, timeout=self.timeout_s)
        try:
            await client.connect()
        except Exception as exc:
            raise ConnectorError(f"BLE connect failed for {device_id}: {exc}") from exc
        if not client.is_connected:
            return False
        self._clients[device_id] = client
        return True

    async def disconnect(self, device_id: str) -> None:
        client = self._clients.pop(device_id, None)
        if client is None:
            return
        try:
            await client.disconnect()
        except Exception as exc:
            raise ConnectorError(f"BLE disconnect failed for {device_id}: {exc}") from exc
