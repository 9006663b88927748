import pytest

from triage_planner.scenarios.models import Device
from triage_planner.scoring import ScoringRules, calculate_score
from triage_planner.scoring.engine import DEFAULT_WEIGHTS, weighted_total
from triage_planner.scoring.models import BASELINE_RULE_ID


def make_device(device_id, *flags, device_type="laptop", label=None, network_id="main"):
    return Device(
        id=device_id,
        type=device_type,
        label=label or device_id.replace("_", " ").title(),
        network_id=network_id,
        risk_flags=frozenset(flags),
    )


def rule_ids(result):
    return [e.rule_id for e in result.explanations]


def test_baseline_only_with_no_devices(rules):
    result = calculate_score(rules, [], {}, {})
    assert result.subscores == {"exposure": 25, "credentialAccount": 15, "hygiene": 15}
    assert result.total == pytest.approx(25 * 0.5 + 15 * 0.3 + 15 * 0.2)
    assert rule_ids(result) == [BASELINE_RULE_ID]
    assert result.explanations[0].explain == "Starting baseline risk scores"


def test_repeated_calls_are_identical(rules, controls):
    devices = [
        make_device("tv", "iot_device"),
        make_device("mystery", "unknown_device"),
        make_device("guest_phone", "visitor_device"),
    ]
    zones = {"tv": "main", "mystery": "investigate", "guest_phone": "guest"}
    controls.update(guestNetworkEnabled=True, wifiSecurity="WPA3")

    first = calculate_score(rules, devices, zones, controls, {"mystery"})
    for _ in range(5):
        again = calculate_score(rules, devices, zones, controls, {"mystery"})
        assert again.subscores == first.subscores
        assert again.total == first.total
        assert again.explanations == first.explanations


def test_baseline_present_exactly_once_even_when_zero(rules_data, controls):
    rules_data["defaults"]["baseline"] = {"exposure": 0, "credentialAccount": 0, "hygiene": 0}
    rules = ScoringRules.from_dict(rules_data)

    result = calculate_score(rules, [make_device("tv", "iot_device")], {"tv": "main"}, controls)

    baselines = [e for e in result.explanations if e.rule_id == BASELINE_RULE_ID]
    assert len(baselines) == 1
    assert baselines[0].delta == {"exposure": 0, "credentialAccount": 0, "hygiene": 0}
    assert result.explanations[0].rule_id == BASELINE_RULE_ID


def test_baseline_delta_is_a_copy(rules):
    result = calculate_score(rules, [], {}, {})
    assert result.explanations[0].delta == rules.baseline
    assert result.explanations[0].delta is not rules.baseline


def test_zero_sum_explanations_are_dropped(rules_data):
    rules_data["zoneRules"].append({
        "id": "balanced",
        "when": {"zoneIs": "main"},
        "add": {"exposure": 5, "hygiene": -5},
        "explain": "Cancels out.",
    })
    rules_data["controlRules"].append({
        "id": "empty_add",
        "when": {"controlIs": "mfaEnabled", "valueIs": True},
        "add": {},
        "explain": "Does nothing.",
    })
    rules = ScoringRules.from_dict(rules_data)

    result = calculate_score(rules, [make_device("laptop")], {"laptop": "main"}, {"mfaEnabled": True})

    ids = rule_ids(result)
    assert "balanced_laptop" not in ids
    assert "empty_add" not in ids
    for exp in result.explanations:
        if exp.rule_id != BASELINE_RULE_ID:
            assert sum(exp.delta.values()) != 0


def test_worst_case_is_clamped_to_caps(rules):
    devices = [make_device(f"unknown_{i}", "unknown_device") for i in range(10)]
    zones = {d.id: "main" for d in devices}
    controls = {"wifiSecurity": "OPEN", "strongWifiPassword": False, "mfaEnabled": False}

    result = calculate_score(rules, devices, zones, controls)

    assert result.subscores["exposure"] == 100
    for value in result.subscores.values():
        assert 0 <= value <= 100
    assert 0 <= result.total <= 100


def test_best_case_is_clamped_to_caps(rules):
    devices = [make_device(f"unknown_{i}", "unknown_device") for i in range(10)]
    zones = {d.id: "investigate" for d in devices}
    controls = {
        "wifiSecurity": "WPA3",
        "strongWifiPassword": True,
        "mfaEnabled": True,
        "iotNetworkEnabled": True,
        "guestNetworkEnabled": True,
    }

    result = calculate_score(rules, devices, zones, controls, {d.id for d in devices})

    assert result.subscores["exposure"] == 0
    assert result.subscores["credentialAccount"] == 3
    assert result.subscores["hygiene"] == 5
    assert 0 <= result.total <= 100


def test_total_cap_is_applied(rules_data):
    rules_data["scoreModel"]["caps"]["total"] = {"min": 0, "max": 10}
    rules = ScoringRules.from_dict(rules_data)
    result = calculate_score(rules, [], {}, {})
    assert result.total == 10


def test_missing_cap_leaves_subscore_unclamped(rules_data):
    del rules_data["scoreModel"]["caps"]["hygiene"]
    rules_data["defaults"]["baseline"]["hygiene"] = -40
    rules = ScoringRules.from_dict(rules_data)
    result = calculate_score(rules, [], {}, {})
    assert result.subscores["hygiene"] == -40


def test_total_is_weighted_sum(rules, controls):
    devices = [make_device("tv", "iot_device"), make_device("visitor", "visitor_device")]
    result = calculate_score(rules, devices, {"tv": "main", "visitor": "main"}, controls)
    expected = (
        result.subscores["exposure"] * 0.5
        + result.subscores["credentialAccount"] * 0.3
        + result.subscores["hygiene"] * 0.2
    )
    assert result.total == pytest.approx(expected)


def test_configured_weights_are_used(rules_data):
    rules_data["scoreModel"]["weights"] = {"exposure": 1.0, "credentialAccount": 0.5, "hygiene": 0.25}
    rules = ScoringRules.from_dict(rules_data)
    result = calculate_score(rules, [], {}, {})
    assert result.total == pytest.approx(25 * 1.0 + 15 * 0.5 + 15 * 0.25)


def test_missing_or_zero_weight_falls_back_to_default():
    subscores = {"exposure": 10, "credentialAccount": 10, "hygiene": 10}
    assert weighted_total(subscores, {"exposure": 0.5, "credentialAccount": 0.3}) == pytest.approx(
        10 * 0.5 + 10 * 0.3 + 10 * DEFAULT_WEIGHTS["hygiene"]
    )
    assert weighted_total(subscores, {"exposure": 0, "credentialAccount": 0.3, "hygiene": 0.2}) == pytest.approx(
        10 * DEFAULT_WEIGHTS["exposure"] + 10 * 0.3 + 10 * 0.2
    )


# ---------------------------------------------------------------------------
# Control effects
# ---------------------------------------------------------------------------

def test_wpa3_exposure_not_above_wpa2(rules, controls):
    wpa2 = calculate_score(rules, [], {}, {**controls, "wifiSecurity": "WPA2"})
    wpa3 = calculate_score(rules, [], {}, {**controls, "wifiSecurity": "WPA3"})
    assert wpa3.subscores["exposure"] <= wpa2.subscores["exposure"]
    assert "wifi_security_wpa3" in rule_ids(wpa3)


def test_open_wifi_raises_exposure_and_hygiene(rules, controls):
    wpa2 = calculate_score(rules, [], {}, {**controls, "wifiSecurity": "WPA2"})
    open_ = calculate_score(rules, [], {}, {**controls, "wifiSecurity": "OPEN"})
    assert open_.subscores["exposure"] > wpa2.subscores["exposure"]
    assert open_.subscores["hygiene"] > wpa2.subscores["hygiene"]


def test_mfa_lowers_credential_risk(rules, controls):
    off = calculate_score(rules, [], {}, {**controls, "mfaEnabled": False})
    on = calculate_score(rules, [], {}, {**controls, "mfaEnabled": True})
    assert on.subscores["credentialAccount"] < off.subscores["credentialAccount"]


def test_absent_control_matches_nothing(rules):
    result = calculate_score(rules, [], {}, {"wifiSecurity": "WPA2"})
    assert "mfa_on" not in rule_ids(result)
    assert "mfa_off" not in rule_ids(result)


def test_control_values_compare_strictly(rules):
    result = calculate_score(rules, [], {}, {"mfaEnabled": "true", "wifiSecurity": "open"})
    assert rule_ids(result) == [BASELINE_RULE_ID]


# ---------------------------------------------------------------------------
# Zone effects
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("flag,worse,better", [
    ("unknown_device", "main", "investigate"),
    ("iot_device", "main", "iot"),
    ("visitor_device", "main", "guest"),
])
def test_placement_changes_exposure(rules, controls, flag, worse, better):
    device = make_device("dev", flag)
    bad = calculate_score(rules, [device], {"dev": worse}, controls)
    good = calculate_score(rules, [device], {"dev": better}, controls)
    assert bad.subscores["exposure"] > good.subscores["exposure"]


def test_zone_explanation_names_the_device(rules, controls):
    tv = make_device("tv", "iot_device", device_type="tv", label="Smart TV")
    result = calculate_score(rules, [tv], {"tv": "main"}, controls)

    zone_exp = next(e for e in result.explanations if e.rule_id == "iot_on_main_tv")
    assert "Smart TV" in zone_exp.explain
    assert zone_exp.explain_params == {"device": "Smart TV", "zone": "main"}


def test_each_matching_device_gets_its_own_explanation(rules, controls):
    devices = [make_device("tv", "iot_device"), make_device("speaker", "iot_device")]
    result = calculate_score(rules, devices, {"tv": "main", "speaker": "main"}, controls)
    assert "iot_on_main_tv" in rule_ids(result)
    assert "iot_on_main_speaker" in rule_ids(result)
    assert result.subscores["exposure"] == 25 + 12 + 12


def test_unplaced_device_contributes_nothing(rules, controls):
    placed = calculate_score(rules, [], {}, controls)
    unplaced = calculate_score(rules, [make_device("mystery", "unknown_device")], {}, controls)
    assert unplaced.subscores == placed.subscores
    assert rule_ids(unplaced) == rule_ids(placed)


def test_unknown_subscore_keys_are_ignored(rules_data):
    rules_data["zoneRules"].append({
        "id": "typo",
        "when": {"zoneIs": "main"},
        "add": {"exposur": 50, "exposure": 1},
        "explain": "Typo in key.",
    })
    rules = ScoringRules.from_dict(rules_data)
    result = calculate_score(rules, [make_device("laptop")], {"laptop": "main"}, {})
    assert result.subscores["exposure"] == 26
    assert "exposur" not in result.subscores


def test_flagged_for_investigation_condition(rules_data):
    rules_data["zoneRules"].append({
        "id": "unknown_flagged",
        "when": {"deviceHasFlag": "unknown_device", "flaggedForInvestigation": True},
        "add": {"hygiene": -3},
        "explain": "Flagged for review.",
    })
    rules = ScoringRules.from_dict(rules_data)
    device = make_device("mystery", "unknown_device")

    unflagged = calculate_score(rules, [device], {"mystery": "main"}, {})
    flagged = calculate_score(rules, [device], {"mystery": "main"}, {}, {"mystery"})

    assert "unknown_flagged_mystery" not in rule_ids(unflagged)
    assert "unknown_flagged_mystery" in rule_ids(flagged)
    assert flagged.subscores["hygiene"] == unflagged.subscores["hygiene"] - 3


# ---------------------------------------------------------------------------
# Synergy
# ---------------------------------------------------------------------------

def iot_devices():
    return [make_device(f"iot_{i}", "iot_device") for i in range(3)]


def test_iot_isolation_bonus_below_threshold(rules, controls):
    controls["iotNetworkEnabled"] = True
    zones = {"iot_0": "iot", "iot_1": "main", "iot_2": "main"}
    result = calculate_score(rules, iot_devices(), zones, controls)
    assert "iot_isolation_bonus" not in rule_ids(result)


def test_iot_isolation_bonus_at_full_isolation(rules, controls):
    controls["iotNetworkEnabled"] = True
    partial = calculate_score(
        rules, iot_devices(), {"iot_0": "iot", "iot_1": "main", "iot_2": "main"}, controls,
    )
    isolated = calculate_score(
        rules, iot_devices(), {"iot_0": "iot", "iot_1": "iot", "iot_2": "iot"}, controls,
    )
    assert "iot_isolation_bonus" in rule_ids(isolated)
    assert isolated.subscores["exposure"] < partial.subscores["exposure"]


def test_iot_isolation_needs_the_control(rules, controls):
    zones = {"iot_0": "iot", "iot_1": "iot", "iot_2": "iot"}
    result = calculate_score(rules, iot_devices(), zones, controls)
    assert "iot_isolation_bonus" not in rule_ids(result)


def test_pct_condition_fails_without_any_flagged_devices(rules, controls):
    controls["iotNetworkEnabled"] = True
    result = calculate_score(rules, [make_device("laptop")], {"laptop": "iot"}, controls)
    assert "iot_isolation_bonus" not in rule_ids(result)


def test_guest_network_bonus(rules, controls):
    controls["guestNetworkEnabled"] = True
    visitor = make_device("phone", "visitor_device")
    result = calculate_score(rules, [visitor], {"phone": "guest"}, controls)
    assert "guest_network_used_bonus" in rule_ids(result)


def test_synergy_rule_without_all_never_matches(rules_data):
    rules_data["synergyRules"].append({
        "id": "no_all",
        "when": {},
        "add": {"exposure": -5},
        "explain": "Never fires.",
    })
    rules = ScoringRules.from_dict(rules_data)
    result = calculate_score(rules, [], {}, {})
    assert "no_all" not in rule_ids(result)


def test_unrecognized_synergy_entry_counts_as_true(rules_data):
    rules_data["synergyRules"].append({
        "id": "loose",
        "when": {"all": [{"controlIs": "mfaEnabled", "valueIs": True}, {"somethingNew": 1}]},
        "add": {"credentialAccount": -2},
        "explain": "Permissive entry.",
    })
    rules = ScoringRules.from_dict(rules_data)
    result = calculate_score(rules, [], {}, {"mfaEnabled": True})
    assert "loose" in rule_ids(result)


def test_explanations_follow_group_order(rules, controls):
    controls.update(iotNetworkEnabled=True, wifiSecurity="OPEN")
    tv = make_device("tv", "iot_device")
    result = calculate_score(rules, [tv], {"tv": "iot"}, controls)
    assert rule_ids(result) == [
        BASELINE_RULE_ID,
        "wifi_security_open",
        "strong_wifi_password_off",
        "mfa_off",
        "iot_isolation_bonus",
    ]
