"""Scenario package — device/network models, zones, linting, and goals."""

from .models import Device, Network, Scenario, ScenarioFormatError, WinConditions
from .registry import ControlDefinition, ControlsRegistry
from .zones import ALL_ZONES, NETWORK_ZONES, ZONES, zone_label

__all__ = [
    "Device",
    "Network",
    "Scenario",
    "ScenarioFormatError",
    "WinConditions",
    "ControlDefinition",
    "ControlsRegistry",
    "ALL_ZONES",
    "NETWORK_ZONES",
    "ZONES",
    "zone_label",
]
