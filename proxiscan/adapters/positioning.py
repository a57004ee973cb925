"""Fixed observer position, for hosts without a location source."""

from __future__ import annotations

from proxiscan.core.model import GeoPoint


class StaticPositioning:
    def __init__(self, position: GeoPoint | None = None) -> None:
        self.position = position

    def current_position(self) -> GeoPoint | None:
        return self.position
