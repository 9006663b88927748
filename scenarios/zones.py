"""
Zone metadata — trust zones a device can be placed into.
Zones carry no behaviour; all zone semantics live in the scoring rules.
"""

from __future__ import annotations

from dataclasses import dataclass

MAIN = "main"
GUEST = "guest"
IOT = "iot"
INVESTIGATE = "investigate"     # Review pseudo-zone, not a real network

NETWORK_ZONES = (MAIN, GUEST, IOT)
ALL_ZONES = NETWORK_ZONES + (INVESTIGATE,)


@dataclass(frozen=True)
class ZoneInfo:
    id: str
    label: str
    description: str


ZONES = {
    MAIN: ZoneInfo(MAIN, "Main Network", "Trusted personal devices with full access"),
    GUEST: ZoneInfo(GUEST, "Guest Network", "Visitor devices with internet-only access"),
    IOT: ZoneInfo(IOT, "IoT Network", "Smart devices isolated from main network"),
    INVESTIGATE: ZoneInfo(INVESTIGATE, "Investigate", "Unknown or suspicious devices for review"),
}


def zone_label(zone_id: str) -> str:
    info = ZONES.get(zone_id)
    return info.label if info else zone_id
