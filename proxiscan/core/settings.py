"""User settings from ``$XDG_CONFIG_HOME/proxiscan/config.yaml``."""

from __future__ import annotations

import logging

from proxiscan.core.documents import config_dir, load_mapping, validate
from proxiscan.core.errors import SettingsValidationError
from proxiscan.core.model import Settings

LOGGER = logging.getLogger(__name__)


def load_settings() -> Settings:
    path = config_dir() / "config.yaml"
    if not path.is_file():
        return Settings()

    doc = load_mapping(path, invalid=SettingsValidationError, unreadable=SettingsValidationError)
    validate(doc, "settings.schema.json", source=str(path), error=SettingsValidationError)

    defaults = Settings()
    settings = Settings(
        reference_rssi=int(doc.get("reference_rssi", defaults.reference_rssi)),
        live_window_s=float(doc.get("live_window_s", defaults.live_window_s)),
        scan_timeout_s=float(doc.get("scan_timeout_s", defaults.scan_timeout_s)),
        favorites_key=doc.get("favorites_key", defaults.favorites_key),
        service_filter=tuple(u.strip().lower() for u in doc.get("service_filter", [])),
    )
    LOGGER.debug("Loaded settings from %s: %s", path, settings)
    return settings
