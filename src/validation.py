"""Roster validation against the scoreboard's team set (or the 32 NFL abbreviations).

Flags drafted teams that the scoreboard does not know (typos, stale
abbreviations), teams owned by more than one player, and rosters that do
not hold exactly four teams.
"""

import json
from pathlib import Path

from src.config import get_players
from src.espn_client import NFL_TEAMS, normalize_team
from src.league_math import TEAMS_PER_PLAYER, Player
from src.snapshots import DATA_DIR

# Validation result statuses
CLEAN = "CLEAN"
UNKNOWN_TEAM = "UNKNOWN_TEAM"
SHARED_TEAM = "SHARED_TEAM"
ROSTER_SIZE = "ROSTER_SIZE"

STATUSES = (CLEAN, UNKNOWN_TEAM, SHARED_TEAM, ROSTER_SIZE)


def _owners_by_team(players: dict[str, Player]) -> dict[str, list[str]]:
    owners: dict[str, list[str]] = {}
    for pid, player in players.items():
        for abbr in player.teams:
            owners.setdefault(normalize_team(abbr), []).append(pid)
    return owners


def validate_roster(
    players: dict[str, Player],
    known_teams: set[str] | None = None,
) -> dict:
    """Check every player's roster.

    ``known_teams`` defaults to the 32 NFL abbreviations; pass the keys of a
    scoreboard snapshot to validate against live data instead. Shared teams
    are allowed by the pool but reported so nobody is surprised by double
    counting.
    """
    if known_teams is None:
        known_teams = NFL_TEAMS
    known = {normalize_team(t) for t in known_teams}
    owners = _owners_by_team(players)

    results = []
    counts = dict.fromkeys(STATUSES, 0)

    for pid, player in players.items():
        if len(player.teams) != TEAMS_PER_PLAYER:
            results.append({
                "player_id": pid,
                "player_name": player.name,
                "team": None,
                "status": ROSTER_SIZE,
                "detail": f"{len(player.teams)} teams drafted, expected {TEAMS_PER_PLAYER}",
            })
            counts[ROSTER_SIZE] += 1

        for abbr in player.teams:
            team = normalize_team(abbr)
            if team not in known:
                status, detail = UNKNOWN_TEAM, f"'{abbr}' is not on the scoreboard"
            elif len(owners[team]) > 1:
                others = [o for o in owners[team] if o != pid]
                status, detail = SHARED_TEAM, f"Also owned by {', '.join(others)}"
            else:
                status, detail = CLEAN, "OK"
            results.append({
                "player_id": pid,
                "player_name": player.name,
                "team": team,
                "status": status,
                "detail": detail,
            })
            counts[status] += 1

    undrafted = sorted(known - set(owners))
    team_checks = sum(1 for r in results if r["team"] is not None)
    return {
        "summary": {
            "total_players": len(players),
            "total_teams_checked": team_checks,
            "counts": counts,
            "undrafted_teams": undrafted,
            "clean_pct": round(counts[CLEAN] / team_checks * 100, 1) if team_checks else 0,
        },
        "issues": [r for r in results if r["status"] != CLEAN],
        "all_results": results,
    }


def print_validation_report(report: dict, log=print) -> None:
    """Print a human-readable validation report."""
    summary = report["summary"]
    counts = summary["counts"]

    log("\n" + "=" * 60)
    log("ROSTER VALIDATION REPORT")
    log("=" * 60)
    log(f"Players checked: {summary['total_players']}")
    log(f"Teams checked:   {summary['total_teams_checked']}")
    for status in STATUSES:
        log(f"  {status + ':':<14}{counts[status]}")
    log(f"  Clean rate:   {summary['clean_pct']}%")

    if summary["undrafted_teams"]:
        log(f"\nUndrafted teams: {', '.join(summary['undrafted_teams'])}")

    issues = report["issues"]
    if issues:
        log(f"\n--- Issues ({len(issues)}) ---")
        for status in (UNKNOWN_TEAM, SHARED_TEAM, ROSTER_SIZE):
            matching = [i for i in issues if i["status"] == status]
            if matching:
                log(f"\n{status} ({len(matching)}):")
                for m in matching:
                    team = f" {m['team']}" if m["team"] else ""
                    log(f"  {m['player_name']}{team}: {m['detail']}")
    else:
        log("\nNo issues found!")

    log("=" * 60)


def save_validation_report(report: dict, data_dir: Path = DATA_DIR) -> Path:
    """Save the validation report to disk."""
    data_dir.mkdir(parents=True, exist_ok=True)
    path = data_dir / "validation_report.json"
    with open(path, "w") as f:
        json.dump(report, f, indent=2, default=str)
    return path


def run_validation(
    players: dict[str, Player] | None = None,
    log=print,
    data_dir: Path = DATA_DIR,
    known_teams: set[str] | None = None,
) -> dict:
    """Validate the configured roster and print/save the results.

    Without ``known_teams`` the roster is checked against the 32 NFL
    abbreviations.
    """
    if players is None:
        players = get_players()
    report = validate_roster(players, known_teams)
    print_validation_report(report, log=log)
    path = save_validation_report(report, data_dir)
    log(f"\nSaved validation report to {path}")
    return report


if __name__ == "__main__":
    run_validation()
