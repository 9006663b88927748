import asyncio

from triage_planner.__main__ import main_async, parse_control_value


def run_cli(*argv):
    return asyncio.run(main_async(list(argv)))


def test_parse_control_value():
    assert parse_control_value("true") is True
    assert parse_control_value("Off") is False
    assert parse_control_value("WPA3") == "WPA3"


def test_lists_scenarios(capsys):
    assert run_cli("scenarios") == 0
    out = capsys.readouterr().out
    assert "family_home" in out
    assert "small_office" in out


def test_scores_without_reports(capsys):
    code = run_cli(
        "score", "family_home",
        "--move", "smart_tv=iot",
        "--flag", "mystery_device",
        "--set", "mfaEnabled=true",
        "--no-reports",
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "Total Risk" in out
    assert "Living Room TV" in out


def test_score_writes_reports(tmp_path):
    code = run_cli("score", "small_office", "--formats", "json", "html", "--output-dir", str(tmp_path))
    assert code == 0
    assert len(list(tmp_path.glob("*.json"))) == 1
    assert len(list(tmp_path.glob("*.html"))) == 1


def test_bad_move_exits_with_error(capsys):
    assert run_cli("score", "family_home", "--move", "smart_tv=attic", "--no-reports") == 1
    assert "Unknown zone" in capsys.readouterr().out


def test_unknown_scenario_exits_with_error():
    assert run_cli("score", "moon_base", "--no-reports") == 1


def test_lint_bundled_content(capsys):
    assert run_cli("lint") == 0
    assert "0 warning(s)" in capsys.readouterr().out


def test_invalid_rules_exit_with_error(tmp_path, capsys):
    (tmp_path / "scoringRules.json").write_text("{}", encoding="utf-8")
    assert run_cli("--content-dir", str(tmp_path), "lint") == 1
    assert "Invalid content" in capsys.readouterr().out
