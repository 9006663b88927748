"""
Rule evaluation primitives — side-effect-free predicates.

Three families:
  - zone conditions over one device and its current placement
  - control conditions over one control value
  - synergy conditions over the controls plus the whole device population
"""

from __future__ import annotations

from typing import Collection, Mapping, Optional, Sequence

from ..scenarios.models import ControlValue, Device
from .rules import (
    ControlCondition,
    CountDevicesWithFlag,
    CountDevicesWithFlagInZone,
    CountUnflaggedDevicesWithFlag,
    PctOfDevicesWithFlagInZone,
    SynergyAtom,
    SynergyCondition,
    UnrecognizedCondition,
    ZoneCondition,
)


def zone_condition_matches(
    condition: ZoneCondition,
    device: Device,
    zone: str,
    is_flagged: bool,
) -> bool:
    """True when every atom set on *condition* holds for the device."""
    if condition.device_has_flag is not None and not device.has_flag(condition.device_has_flag):
        return False
    if condition.device_type_is is not None and device.type != condition.device_type_is:
        return False
    if condition.zone_is is not None and zone != condition.zone_is:
        return False
    if condition.zone_not is not None and zone == condition.zone_not:
        return False
    if condition.zone_in is not None and zone not in condition.zone_in:
        return False
    if condition.flagged_for_investigation is True and not is_flagged:
        return False
    if condition.not_flagged_for_investigation is True and is_flagged:
        return False
    return True


def control_value_equals(actual: Optional[ControlValue], expected: Optional[ControlValue]) -> bool:
    """Strict equality: a bool never equals a str or an int."""
    if actual is None or expected is None:
        return False
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return type(actual) is type(expected) and actual == expected


def control_condition_matches(
    condition: ControlCondition,
    controls: Mapping[str, ControlValue],
) -> bool:
    if condition.control is None:
        return False
    return control_value_equals(controls.get(condition.control), condition.value)


# ---------------------------------------------------------------------------
# Population aggregates
# ---------------------------------------------------------------------------

def devices_with_flag(devices: Sequence[Device], flag: str) -> list[Device]:
    return [d for d in devices if d.has_flag(flag)]


def pct_with_flag_in_zone(
    devices: Sequence[Device],
    device_zones: Mapping[str, str],
    flag: str,
    zone: str,
) -> Optional[float]:
    """Fraction of flagged devices placed in *zone*; None when no device has the flag."""
    flagged = devices_with_flag(devices, flag)
    if not flagged:
        return None
    in_zone = [d for d in flagged if device_zones.get(d.id) == zone]
    return len(in_zone) / len(flagged)


def count_with_flag_in_zone(
    devices: Sequence[Device],
    device_zones: Mapping[str, str],
    flag: str,
    zone: str,
) -> int:
    return sum(1 for d in devices if d.has_flag(flag) and device_zones.get(d.id) == zone)


def count_unflagged_with_flag(
    devices: Sequence[Device],
    flagged_devices: Collection[str],
    flag: str,
) -> int:
    """Devices carrying *flag* that have not been marked for investigation."""
    return sum(1 for d in devices if d.has_flag(flag) and d.id not in flagged_devices)


def synergy_atom_holds(
    atom: SynergyAtom,
    controls: Mapping[str, ControlValue],
    devices: Sequence[Device],
    device_zones: Mapping[str, str],
    flagged_devices: Collection[str],
) -> bool:
    if isinstance(atom, ControlCondition):
        return control_condition_matches(atom, controls)

    if isinstance(atom, PctOfDevicesWithFlagInZone):
        pct = pct_with_flag_in_zone(devices, device_zones, atom.flag, atom.zone)
        return pct is not None and pct >= atom.pct

    if isinstance(atom, CountDevicesWithFlagInZone):
        return count_with_flag_in_zone(devices, device_zones, atom.flag, atom.zone) >= atom.count

    if isinstance(atom, CountDevicesWithFlag):
        return len(devices_with_flag(devices, atom.flag)) >= atom.count

    if isinstance(atom, CountUnflaggedDevicesWithFlag):
        return count_unflagged_with_flag(devices, flagged_devices, atom.flag) >= atom.count

    if isinstance(atom, UnrecognizedCondition):
        return True

    raise TypeError(f"Unsupported synergy condition: {type(atom).__name__}")


def synergy_condition_holds(
    condition: SynergyCondition,
    controls: Mapping[str, ControlValue],
    devices: Sequence[Device],
    device_zones: Mapping[str, str],
    flagged_devices: Collection[str],
) -> bool:
    """Every atom must hold. A rule without an ``all`` list never matches."""
    if condition.all_of is None:
        return False
    return all(
        synergy_atom_holds(atom, controls, devices, device_zones, flagged_devices)
        for atom in condition.all_of
    )
