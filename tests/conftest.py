import copy

import pytest

from triage_planner.scoring.rules import ScoringRules


TEST_RULES = {
    "version": "1.0",
    "scoreModel": {
        "subscores": ["exposure", "credentialAccount", "hygiene"],
        "weights": {"exposure": 0.5, "credentialAccount": 0.3, "hygiene": 0.2},
        "caps": {
            "exposure": {"min": 0, "max": 100},
            "credentialAccount": {"min": 0, "max": 100},
            "hygiene": {"min": 0, "max": 100},
            "total": {"min": 0, "max": 100},
        },
    },
    "defaults": {
        "baseline": {"exposure": 25, "credentialAccount": 15, "hygiene": 15},
        "allowedZones": ["main", "guest", "iot", "investigate"],
    },
    "zoneRules": [
        {
            "id": "unknown_not_in_investigate",
            "when": {"deviceHasFlag": "unknown_device", "zoneNot": "investigate"},
            "add": {"exposure": 35},
            "explain": "Unknown device is not quarantined for investigation.",
        },
        {
            "id": "unknown_in_investigate",
            "when": {"deviceHasFlag": "unknown_device", "zoneIs": "investigate"},
            "add": {"exposure": -15},
            "explain": "Unknown device quarantined for investigation reduces immediate exposure.",
        },
        {
            "id": "iot_on_main",
            "when": {"deviceHasFlag": "iot_device", "zoneIs": "main"},
            "add": {"exposure": 12},
            "explain": "IoT device placed on main network increases blast radius.",
        },
        {
            "id": "visitor_on_main",
            "when": {"deviceHasFlag": "visitor_device", "zoneIs": "main"},
            "add": {"exposure": 10},
            "explain": "Visitor device on main network increases exposure.",
        },
    ],
    "controlRules": [
        {
            "id": "wifi_security_open",
            "when": {"controlIs": "wifiSecurity", "valueIs": "OPEN"},
            "add": {"exposure": 25, "hygiene": 10},
            "explain": "Open Wi-Fi removes link-layer protection.",
        },
        {
            "id": "wifi_security_wpa3",
            "when": {"controlIs": "wifiSecurity", "valueIs": "WPA3"},
            "add": {"exposure": -2},
            "explain": "WPA3 provides stronger Wi-Fi protections.",
        },
        {
            "id": "strong_wifi_password_on",
            "when": {"controlIs": "strongWifiPassword", "valueIs": True},
            "add": {"hygiene": -10},
            "explain": "Strong Wi-Fi password reduces opportunistic access.",
        },
        {
            "id": "strong_wifi_password_off",
            "when": {"controlIs": "strongWifiPassword", "valueIs": False},
            "add": {"hygiene": 10},
            "explain": "Weak Wi-Fi passwords increase risk.",
        },
        {
            "id": "mfa_on",
            "when": {"controlIs": "mfaEnabled", "valueIs": True},
            "add": {"credentialAccount": -12},
            "explain": "MFA reduces account takeover risk.",
        },
        {
            "id": "mfa_off",
            "when": {"controlIs": "mfaEnabled", "valueIs": False},
            "add": {"credentialAccount": 12},
            "explain": "No MFA increases account takeover risk.",
        },
    ],
    "synergyRules": [
        {
            "id": "iot_isolation_bonus",
            "when": {
                "all": [
                    {"controlIs": "iotNetworkEnabled", "valueIs": True},
                    {"pctOfDevicesWithFlagInZoneAtLeast": {"flag": "iot_device", "zone": "iot", "pct": 0.7}},
                ]
            },
            "add": {"exposure": -10},
            "explain": "Most IoT devices isolated into IoT zone reduces blast radius.",
        },
        {
            "id": "guest_network_used_bonus",
            "when": {
                "all": [
                    {"controlIs": "guestNetworkEnabled", "valueIs": True},
                    {"countDevicesWithFlagInZoneAtLeast": {"flag": "visitor_device", "zone": "guest", "count": 1}},
                ]
            },
            "add": {"exposure": -6},
            "explain": "Visitor devices on guest network reduces main exposure.",
        },
    ],
    "explainPanel": {
        "maxItems": 8,
        "sortOrder": "largestAbsoluteImpactFirst",
        "include": ["baseline", "zoneRules", "controlRules", "synergyRules"],
    },
}

DEFAULT_CONTROLS = {
    "wifiSecurity": "WPA2",
    "strongWifiPassword": False,
    "guestNetworkEnabled": False,
    "iotNetworkEnabled": False,
    "mfaEnabled": False,
    "autoUpdatesEnabled": False,
    "defaultPasswordsAddressed": False,
}


@pytest.fixture
def rules_data():
    """A fresh copy of the test rule document, safe to mutate."""
    return copy.deepcopy(TEST_RULES)


@pytest.fixture
def rules(rules_data):
    return ScoringRules.from_dict(rules_data)


@pytest.fixture
def controls():
    return dict(DEFAULT_CONTROLS)
