"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import typer

from proxiscan.adapters.positioning import StaticPositioning
from proxiscan.core.classifier import classify, matching_rules
from proxiscan.core.decoder import decode, payload_from_text, vendor_name
from proxiscan.core.errors import ProxiscanError
from proxiscan.core.model import DeviceRecord, GeoPoint, RawAdvertisement
from proxiscan.core.proximity import DEFAULT_REFERENCE_RSSI, estimate_distance, signal_quality
from proxiscan.core.service import ScanService

app = typer.Typer(help="Classify nearby BLE devices and estimate their distance")


def _build_service(**kwargs) -> ScanService:
    service = ScanService(**kwargs)
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _echo_storage_warnings(service: ScanService) -> None:
    for warning in getattr(service, "storage_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)


def _format_record(record: DeviceRecord, now: datetime, live_window_s: float) -> str:
    star = " *" if record.is_favorite else ""
    live = " live" if record.is_live(now, live_window_s) else ""
    vendor = f" [{record.vendor_name}]" if record.vendor_name else ""
    return (
        f"{record.id} {record.display_name}{vendor} {record.category.value} "
        f"{record.estimated_distance_m:.1f}m {record.signal_strength}dBm ({record.signal_quality}){live}{star}"
    )


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("scan")
def scan(
    timeout: float | None = typer.Option(None, "--timeout", help="Seconds to scan (default from config)"),
    favorites_only: bool = typer.Option(False, "--favorites-only", help="Only print favorite devices"),
    latitude: float | None = typer.Option(None, "--lat", help="Observer latitude for position estimates"),
    longitude: float | None = typer.Option(None, "--lon", help="Observer longitude for position estimates"),
) -> None:
    """Scan for advertisements and list devices nearest first."""
    try:
        position = None
        if latitude is not None and longitude is not None:
            position = GeoPoint(latitude=latitude, longitude=longitude)
        service = _build_service(positioning=StaticPositioning(position))
        asyncio.run(service.scan(timeout_s=timeout))
        _echo_storage_warnings(service)
        records = (
            service.registry.favorites_snapshot() if favorites_only else service.registry.snapshot()
        )
        if not records:
            typer.echo("No devices found")
            return
        now = datetime.now(timezone.utc)
        for record in records:
            line = _format_record(record, now, service.settings.live_window_s)
            located = service.locate(record.id)
            if located is not None:
                line += f" @ {located.latitude:.6f},{located.longitude:.6f}"
            typer.echo(line)
    except ProxiscanError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("classify")
def classify_command(
    name: str | None = typer.Option(None, "--name", help="Advertised name"),
    payload: str | None = typer.Option(None, "--payload", help="Vendor payload as hex or base64"),
    uuid: list[str] = typer.Option([], "--uuid", help="Advertised service UUID (repeatable)"),
) -> None:
    """Classify a single advertisement without scanning."""
    vendor_payload = payload_from_text(payload)
    if payload and vendor_payload is None:
        typer.echo(f"Warning: could not parse payload '{payload}' as hex or base64", err=True)
    decoded = decode(vendor_payload)
    category = classify(name, decoded, uuid)

    typer.echo(f"category: {category.value}")
    if decoded is not None:
        vendor = vendor_name(decoded.vendor_id) or "unknown vendor"
        typer.echo(f"vendor: 0x{decoded.vendor_id:04X} ({vendor})")
    rules = matching_rules(name, decoded, uuid)
    typer.echo(f"matched rules: {', '.join(rules) if rules else '<none>'}")


@app.command("distance")
def distance(
    rssi: int = typer.Argument(..., help="Received signal strength in dBm"),
    reference: int = typer.Option(DEFAULT_REFERENCE_RSSI, "--reference", help="RSSI measured at 1m"),
) -> None:
    """Estimate distance for an RSSI reading."""
    estimate = estimate_distance(rssi, reference)
    if estimate is None:
        typer.echo("distance: unavailable")
        return
    typer.echo(f"distance: {estimate:.2f}m ({signal_quality(rssi)})")


@app.command("favorites")
def list_favorites() -> None:
    """List stored favorite device ids."""
    try:
        service = _build_service()
        _echo_storage_warnings(service)
        favorites = sorted(service.registry.favorites)
        if not favorites:
            typer.echo("No favorites stored")
            return
        for device_id in favorites:
            typer.echo(device_id)
    except ProxiscanError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("favorite")
def toggle_favorite(device_id: str) -> None:
    """Toggle a device id in the stored favorites set."""
    try:
        service = _build_service()
        registry = service.registry
        if device_id not in registry:
            # Outside a scan the registry is empty; seed a placeholder to toggle against.
            registry.observe(RawAdvertisement(device_id=device_id))
        record = service.toggle_favorite(device_id)
        _echo_storage_warnings(service)
        state = "added to" if record.is_favorite else "removed from"
        typer.echo(f"{device_id} {state} favorites")
    except ProxiscanError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
