"""Client for the public ESPN NFL site API.

``get_scoreboard`` returns the raw JSON; ``parse_scoreboard`` is the only
place that knows its shape and turns it into TeamRecords.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import requests

from src.league_math import LastGame, TeamRecord, win_fraction

BASE_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"

NFL_TEAMS = {
    "ARI", "ATL", "BAL", "BUF", "CAR", "CHI", "CIN", "CLE",
    "DAL", "DEN", "DET", "GB", "HOU", "IND", "JAX", "KC",
    "LAC", "LAR", "LV", "MIA", "MIN", "NE", "NO", "NYG",
    "NYJ", "PHI", "PIT", "SEA", "SF", "TB", "TEN", "WAS",
}

# ESPN (and other feeds) spell a few teams differently
TEAM_ALIASES = {
    "WSH": "WAS",
    "JAC": "JAX",
    "LA": "LAR",
    "OAK": "LV",
    "SD": "LAC",
}

# Abbreviation -> ESPN team ID
TEAM_ID_MAP: dict[str, str] = {
    "ARI": "22", "ATL": "1", "BAL": "33", "BUF": "2",
    "CAR": "29", "CHI": "3", "CIN": "4", "CLE": "5",
    "DAL": "6", "DEN": "7", "DET": "8", "GB": "9",
    "HOU": "34", "IND": "11", "JAX": "30", "KC": "12",
    "LAC": "24", "LAR": "14", "LV": "13", "MIA": "15",
    "MIN": "16", "NE": "17", "NO": "18", "NYG": "19",
    "NYJ": "20", "PHI": "21", "PIT": "23", "SEA": "26",
    "SF": "25", "TB": "27", "TEN": "10", "WAS": "28",
}


class ScoreboardParseError(ValueError):
    """The scoreboard payload did not have the expected shape."""


@dataclass
class ScoreboardSnapshot:
    week: int
    teams: dict[str, TeamRecord]
    games_in_progress: list[str] = field(default_factory=list)


def normalize_team(abbr: str) -> str:
    t = abbr.strip().upper()
    return TEAM_ALIASES.get(t, t)


def team_logo_url(abbr: str) -> str:
    """ESPN CDN logo URL, or '' for an unknown team."""
    abbr = normalize_team(abbr)
    if abbr not in TEAM_ID_MAP:
        return ""
    return f"https://a.espncdn.com/i/teamlogos/nfl/500/{abbr.lower()}.png"


def _get(path: str, params: dict | None = None) -> dict:
    """Make a GET request to the ESPN API."""
    resp = requests.get(f"{BASE_URL}{path}", params=params, timeout=30)
    resp.raise_for_status()
    return resp.json()


def get_scoreboard(week: int | None = None) -> dict:
    """Get the raw scoreboard for the current (or a given) week."""
    params = {"week": week} if week is not None else None
    return _get("/scoreboard", params=params)


def get_team_schedule(abbr: str) -> dict:
    """Get the raw season schedule for one team."""
    team_id = TEAM_ID_MAP.get(normalize_team(abbr))
    if team_id is None:
        raise ValueError(f"Unknown NFL team: {abbr}")
    return _get(f"/teams/{team_id}/schedule")


def parse_record_summary(summary: str) -> tuple[int, int, int]:
    """Parse "W-L" or "W-L-T" into ints."""
    parts = summary.strip().split("-")
    if len(parts) not in (2, 3):
        raise ScoreboardParseError(f"Bad record summary: {summary!r}")
    try:
        nums = [int(p) for p in parts]
    except ValueError as e:
        raise ScoreboardParseError(f"Bad record summary: {summary!r}") from e
    if len(nums) == 2:
        nums.append(0)
    return nums[0], nums[1], nums[2]


def _overall_record(competitor: dict) -> tuple[int, int, int]:
    records = competitor.get("records") or competitor.get("record") or []
    if not isinstance(records, list):
        raise ScoreboardParseError("Competitor records must be a list")
    for rec in records:
        if rec.get("name", "overall") in ("overall", "All Splits") or rec.get("type") == "total":
            return parse_record_summary(rec.get("summary", "0-0"))
    if records:
        return parse_record_summary(records[0].get("summary", "0-0"))
    return 0, 0, 0


def _game_result(own: dict, other: dict) -> str:
    if own.get("winner") is True:
        return "W"
    if other.get("winner") is True:
        return "L"
    try:
        ours, theirs = int(own.get("score", 0)), int(other.get("score", 0))
    except (TypeError, ValueError):
        return "T"
    if ours > theirs:
        return "W"
    if ours < theirs:
        return "L"
    return "T"


def parse_scoreboard(payload: dict) -> ScoreboardSnapshot:
    """Convert a scoreboard payload into TeamRecords.

    Raises ScoreboardParseError if the payload is not a scoreboard.
    """
    if not isinstance(payload, dict):
        raise ScoreboardParseError("Scoreboard payload must be an object")
    events = payload.get("events")
    if not isinstance(events, list):
        raise ScoreboardParseError("Scoreboard payload has no events list")

    week = (payload.get("week") or {}).get("number") or 1
    teams: dict[str, TeamRecord] = {}
    in_progress: list[str] = []

    for event in events:
        competitions = event.get("competitions") or []
        if not competitions:
            continue
        comp = competitions[0]
        competitors = comp.get("competitors") or []
        if len(competitors) != 2:
            raise ScoreboardParseError(f"Event {event.get('id')} does not have two competitors")

        status = (comp.get("status") or {}).get("type") or {}
        completed = bool(status.get("completed"))
        if status.get("state") == "in":
            in_progress.append(event.get("shortName") or event.get("name", ""))

        for i, competitor in enumerate(competitors):
            team_info = competitor.get("team") or {}
            abbr = team_info.get("abbreviation")
            if not abbr:
                raise ScoreboardParseError("Competitor has no team abbreviation")
            abbr = normalize_team(abbr)
            other = competitors[1 - i]
            opponent = normalize_team((other.get("team") or {}).get("abbreviation", ""))

            wins, losses, ties = _overall_record(competitor)
            last_game = None
            if completed:
                last_game = LastGame(
                    date=(comp.get("date") or event.get("date", ""))[:10],
                    opponent=opponent,
                    result=_game_result(competitor, other),
                    score=f"{competitor.get('score', '0')}-{other.get('score', '0')}",
                    was_home=competitor.get("homeAway") == "home",
                )
            next_game = None
            if status.get("state") == "pre":
                next_game = {
                    "date": (comp.get("date") or event.get("date", ""))[:10],
                    "opponent": opponent,
                    "is_home": competitor.get("homeAway") == "home",
                }

            teams[abbr] = TeamRecord(
                abbreviation=abbr,
                name=team_info.get("displayName", abbr),
                wins=wins,
                losses=losses,
                ties=ties,
                win_pct=win_fraction(wins, losses, ties),
                last_game=last_game,
                next_game=next_game,
            )

    return ScoreboardSnapshot(week=int(week), teams=teams, games_in_progress=in_progress)


def get_scoreboard_snapshot(week: int | None = None) -> ScoreboardSnapshot:
    """Fetch and parse the scoreboard in one call."""
    return parse_scoreboard(get_scoreboard(week))
