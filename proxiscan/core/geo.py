"""Great-circle helpers for placing devices around the observer."""

from __future__ import annotations

import hashlib
import math

from proxiscan.core.model import GeoPoint

EARTH_RADIUS_M = 6371e3


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def bearing_for(device_id: str) -> float:
    """Stable pseudo-bearing in degrees; a single observer cannot measure direction."""
    digest = hashlib.sha1(device_id.encode("utf-8")).digest()
    return int.from_bytes(digest[:2], "big") % 360


def project(origin: GeoPoint, distance_m: float, bearing_deg: float) -> GeoPoint:
    """Destination point ``distance_m`` from ``origin`` along ``bearing_deg``."""
    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    phi1 = math.radians(origin.latitude)
    lambda1 = math.radians(origin.longitude)

    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    longitude = (math.degrees(lambda2) + 540) % 360 - 180
    return GeoPoint(
        latitude=math.degrees(phi2),
        longitude=longitude,
        accuracy_m=origin.accuracy_m + distance_m,
    )
