"""Tests for roster validation."""

import json

import pytest

from src.league_math import Player
from src.validation import (
    CLEAN,
    ROSTER_SIZE,
    SHARED_TEAM,
    UNKNOWN_TEAM,
    print_validation_report,
    run_validation,
    save_validation_report,
    validate_roster,
)


@pytest.fixture
def players():
    return {
        "alex": Player("alex", "Alex", ["KC", "DET", "BUF", "NE"]),
        "blair": Player("blair", "Blair", ["NYG", "CAR", "TEN", "CLE"]),
    }


def _statuses(report, pid):
    return {r["team"]: r["status"] for r in report["all_results"] if r["player_id"] == pid}


class TestValidateRoster:
    def test_clean_roster(self, players):
        report = validate_roster(players)
        summary = report["summary"]
        assert summary["total_players"] == 2
        assert summary["total_teams_checked"] == 8
        assert summary["counts"][CLEAN] == 8
        assert summary["clean_pct"] == 100.0
        assert report["issues"] == []
        assert len(summary["undrafted_teams"]) == 24
        assert "KC" not in summary["undrafted_teams"]

    def test_unknown_team(self, players):
        players["alex"].teams[3] = "XYZ"
        report = validate_roster(players)
        assert _statuses(report, "alex")["XYZ"] == UNKNOWN_TEAM
        assert report["summary"]["counts"][UNKNOWN_TEAM] == 1
        assert report["summary"]["clean_pct"] == 87.5

    def test_empty_known_teams_is_respected(self, players):
        report = validate_roster(players, known_teams=set())
        assert report["summary"]["counts"][UNKNOWN_TEAM] == 8
        assert report["summary"]["undrafted_teams"] == []

    def test_aliases_normalized(self, players):
        players["alex"].teams[3] = "WSH"
        report = validate_roster(players)
        assert _statuses(report, "alex")["WAS"] == CLEAN

    def test_shared_team(self, players):
        players["blair"].teams[0] = "KC"
        report = validate_roster(players)
        assert _statuses(report, "alex")["KC"] == SHARED_TEAM
        assert _statuses(report, "blair")["KC"] == SHARED_TEAM
        issue = next(i for i in report["issues"] if i["player_id"] == "alex")
        assert issue["detail"] == "Also owned by blair"

    def test_roster_size(self, players):
        players["blair"] = Player("blair", "Blair", ["NYG", "CAR"])
        report = validate_roster(players)
        size = [i for i in report["issues"] if i["status"] == ROSTER_SIZE]
        assert len(size) == 1
        assert size[0]["team"] is None
        assert size[0]["detail"] == "2 teams drafted, expected 4"
        assert report["summary"]["total_teams_checked"] == 6

    def test_known_teams_override(self, players):
        report = validate_roster(players, known_teams={"kc", "DET"})
        assert _statuses(report, "alex")["KC"] == CLEAN
        assert _statuses(report, "alex")["BUF"] == UNKNOWN_TEAM

    def test_no_players(self):
        report = validate_roster({})
        assert report["summary"]["clean_pct"] == 0
        assert report["all_results"] == []


class TestReport:
    def test_print_goes_to_log(self, players):
        players["alex"].teams[3] = "XYZ"
        lines = []
        print_validation_report(validate_roster(players), log=lines.append)
        text = "\n".join(lines)
        assert "ROSTER VALIDATION REPORT" in text
        assert "UNKNOWN_TEAM (1):" in text
        assert "Alex XYZ: 'XYZ' is not on the scoreboard" in text

    def test_print_no_issues(self, players):
        lines = []
        print_validation_report(validate_roster(players), log=lines.append)
        assert any("No issues found!" in line for line in lines)

    def test_save(self, players, tmp_path):
        path = save_validation_report(validate_roster(players), tmp_path)
        assert path == tmp_path / "validation_report.json"
        assert json.loads(path.read_text())["summary"]["counts"][CLEAN] == 8

    def test_run_validation(self, players, tmp_path):
        lines = []
        report = run_validation(players, log=lines.append, data_dir=tmp_path)
        assert report["summary"]["total_players"] == 2
        assert (tmp_path / "validation_report.json").exists()
        assert lines[-1].startswith("\nSaved validation report to")

    def test_run_validation_uses_configured_players(self, tmp_path):
        report = run_validation(log=lambda *_: None, data_dir=tmp_path)
        assert report["summary"]["total_players"] == 8
        assert report["summary"]["total_teams_checked"] == 32

    def test_run_validation_against_scoreboard_teams(self, players, tmp_path):
        scoreboard = {"KC", "DET", "BUF", "NE", "NYG", "CAR", "TEN", "CLE", "MIA"}
        report = run_validation(
            players, log=lambda *_: None, data_dir=tmp_path, known_teams=scoreboard,
        )
        assert report["summary"]["counts"][CLEAN] == 8
        assert report["summary"]["undrafted_teams"] == ["MIA"]
