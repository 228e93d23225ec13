"""Shared computation logic for the NFL win pool.

Provides the league data model, the two leaderboards, the Monte Carlo
season projector, Elo helpers, weekly history, and data quality checks.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TOTAL_WEEKS = 18  # NFL regular season
DEFAULT_TRIALS = 1000
TEAMS_PER_PLAYER = 4

DEFAULT_ELO = 1500
ELO_K = 32
ELO_K_PLAYOFFS = 40

TREND_UP = "up"
TREND_DOWN = "down"
TREND_SAME = "same"


# ── Data model ──────────────────────────────────────────────────────────

@dataclass
class Player:
    """A pool member and the NFL teams they drafted."""
    player_id: str
    name: str
    teams: list[str] = field(default_factory=list)
    join_date: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "teams": list(self.teams), "join_date": self.join_date}

    @classmethod
    def from_dict(cls, player_id: str, d: dict) -> "Player":
        return cls(
            player_id=player_id,
            name=d.get("name", player_id),
            teams=list(d.get("teams", [])),
            join_date=d.get("join_date", ""),
        )


@dataclass
class LastGame:
    date: str
    opponent: str
    result: str  # "W", "L" or "T"
    score: str
    was_home: bool

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "opponent": self.opponent,
            "result": self.result,
            "score": self.score,
            "was_home": self.was_home,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "LastGame":
        return cls(
            date=d.get("date", ""),
            opponent=d.get("opponent", ""),
            result=d.get("result", ""),
            score=d.get("score", ""),
            was_home=bool(d.get("was_home", False)),
        )


@dataclass
class TeamRecord:
    """Season record for one NFL team. Read-only input to the pool math."""
    abbreviation: str
    name: str
    wins: int = 0
    losses: int = 0
    ties: int = 0
    win_pct: float = 0.0
    elo: int = DEFAULT_ELO
    previous_elo: int = DEFAULT_ELO
    last_game: Optional[LastGame] = None
    next_game: Optional[dict] = None
    remaining_schedule: list[str] = field(default_factory=list)
    strength_of_schedule: float = 0.5

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    def to_dict(self) -> dict:
        return {
            "abbreviation": self.abbreviation,
            "name": self.name,
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "win_pct": self.win_pct,
            "elo": self.elo,
            "previous_elo": self.previous_elo,
            "last_game": self.last_game.to_dict() if self.last_game else None,
            "next_game": self.next_game,
            "remaining_schedule": list(self.remaining_schedule),
            "strength_of_schedule": self.strength_of_schedule,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TeamRecord":
        last_game = d.get("last_game")
        return cls(
            abbreviation=d.get("abbreviation", ""),
            name=d.get("name", ""),
            wins=int(d.get("wins", 0) or 0),
            losses=int(d.get("losses", 0) or 0),
            ties=int(d.get("ties", 0) or 0),
            win_pct=float(d.get("win_pct", 0.0) or 0.0),
            elo=int(d.get("elo", DEFAULT_ELO) or DEFAULT_ELO),
            previous_elo=int(d.get("previous_elo", DEFAULT_ELO) or DEFAULT_ELO),
            last_game=LastGame.from_dict(last_game) if last_game else None,
            next_game=d.get("next_game"),
            remaining_schedule=list(d.get("remaining_schedule", [])),
            strength_of_schedule=float(d.get("strength_of_schedule", 0.5)),
        )


@dataclass
class LeagueConfig:
    league_name: str
    season: str
    players: dict[str, Player]
    season_start: str = ""
    season_end: str = ""
    playoff_start: str = ""
    total_weeks: int = TOTAL_WEEKS


@dataclass
class PlayerStanding:
    """A player's aggregate record and rank within one leaderboard."""
    player_id: str
    player_name: str
    total_wins: int
    total_losses: int
    total_ties: int
    win_percentage: float
    teams: list[str]
    current_rank: int = 0
    previous_rank: int | None = None
    trend: str = TREND_SAME
    achievements: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "total_wins": self.total_wins,
            "total_losses": self.total_losses,
            "total_ties": self.total_ties,
            "win_percentage": self.win_percentage,
            "teams": list(self.teams),
            "current_rank": self.current_rank,
            "previous_rank": self.previous_rank,
            "trend": self.trend,
            "achievements": list(self.achievements),
        }


@dataclass
class Leaderboards:
    """The two independently ranked boards."""
    wins: list[PlayerStanding]
    losses: list[PlayerStanding]

    def to_dict(self) -> dict:
        return {
            "wins": [s.to_dict() for s in self.wins],
            "losses": [s.to_dict() for s in self.losses],
        }


@dataclass
class CompetitionOutlook:
    """Projected outcome for one player in one competition.

    ``confidence_interval`` is the (min, max) of the simulated totals across
    trials, not a percentile band.
    """
    current_rank: int
    probability_to_win: float
    probability_top3: float
    expected_final: float
    confidence_interval: tuple[int, int]

    def to_dict(self) -> dict:
        return {
            "current_rank": self.current_rank,
            "probability_to_win": self.probability_to_win,
            "probability_top3": self.probability_top3,
            "expected_final": self.expected_final,
            "confidence_interval": list(self.confidence_interval),
        }


@dataclass
class ProbabilityModel:
    player_id: str
    player: str
    simulations: int
    wins: CompetitionOutlook
    losses: CompetitionOutlook
    wins_to_guarantee_wins_title: int = 0
    losses_to_guarantee_losses_title: int = 0

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "player": self.player,
            "simulations": self.simulations,
            "wins_competition": self.wins.to_dict(),
            "losses_competition": self.losses.to_dict(),
            "magic_numbers": {
                "wins_to_guarantee_wins_title": self.wins_to_guarantee_wins_title,
                "losses_to_guarantee_losses_title": self.losses_to_guarantee_losses_title,
            },
        }


@dataclass
class Results:
    """A scoreboard snapshot as served to the dashboard."""
    last_updated: str
    current_week: int
    teams: dict[str, TeamRecord]
    games_in_progress: list[str] = field(default_factory=list)
    next_update: str = ""
    is_live_data: bool = True

    def to_dict(self) -> dict:
        return {
            "last_updated": self.last_updated,
            "current_week": self.current_week,
            "games_in_progress": list(self.games_in_progress),
            "next_update": self.next_update,
            "is_live_data": self.is_live_data,
            "teams": {abbr: t.to_dict() for abbr, t in self.teams.items()},
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Results":
        return cls(
            last_updated=d.get("last_updated", ""),
            current_week=int(d.get("current_week", 0) or 0),
            teams={abbr: TeamRecord.from_dict(t) for abbr, t in d.get("teams", {}).items()},
            games_in_progress=list(d.get("games_in_progress", [])),
            next_update=d.get("next_update", ""),
            is_live_data=bool(d.get("is_live_data", True)),
        )


# ── Record math ─────────────────────────────────────────────────────────

def win_fraction(wins: int, losses: int, ties: int = 0) -> float:
    """Wins over all games played, 0.0 when nothing has been played."""
    total = wins + losses + ties
    if total == 0:
        return 0.0
    return wins / total


def player_totals(player: Player, teams: dict[str, TeamRecord]) -> tuple[int, int, int]:
    """Sum (wins, losses, ties) over a player's teams. Unknown teams add nothing."""
    wins = losses = ties = 0
    for abbr in player.teams:
        team = teams.get(abbr)
        if team is None:
            continue
        wins += team.wins
        losses += team.losses
        ties += team.ties
    return wins, losses, ties


def summed_team_wins(players: dict[str, Player], teams: dict[str, TeamRecord]) -> int:
    """Team wins summed once per owning player (shared teams count twice)."""
    return sum(
        teams[abbr].wins
        for p in players.values()
        for abbr in p.teams
        if abbr in teams
    )


# ── Standings ───────────────────────────────────────────────────────────

def _trend(current: int, previous: int | None) -> str:
    if previous is None:
        return TREND_SAME
    if current < previous:
        return TREND_UP
    if current > previous:
        return TREND_DOWN
    return TREND_SAME


def _rank_board(
    base: list[PlayerStanding],
    key: Callable[[PlayerStanding], tuple],
    previous_board: list[PlayerStanding] | None,
) -> list[PlayerStanding]:
    previous_ranks = {s.player_id: s.current_rank for s in previous_board or []}
    board = []
    for rank, standing in enumerate(sorted(base, key=key), 1):
        prev = previous_ranks.get(standing.player_id)
        board.append(replace(
            standing,
            teams=list(standing.teams),
            achievements=list(standing.achievements),
            current_rank=rank,
            previous_rank=prev,
            trend=_trend(rank, prev),
        ))
    return board


def calculate_standings(
    players: dict[str, Player],
    teams: dict[str, TeamRecord],
    previous: Leaderboards | None = None,
) -> Leaderboards:
    """Build the wins and losses leaderboards.

    Wins board: most wins first, fewer losses breaks ties.
    Losses board: most losses first, more wins breaks ties.
    Fully tied players keep roster order. Each board is ranked, and its
    trend computed against the matching board in ``previous``, on its own.
    """
    base = []
    for player_id, player in players.items():
        wins, losses, ties = player_totals(player, teams)
        base.append(PlayerStanding(
            player_id=player_id,
            player_name=player.name,
            total_wins=wins,
            total_losses=losses,
            total_ties=ties,
            win_percentage=win_fraction(wins, losses, ties),
            teams=list(player.teams),
        ))

    wins_board = _rank_board(
        base,
        key=lambda s: (-s.total_wins, s.total_losses),
        previous_board=previous.wins if previous else None,
    )
    losses_board = _rank_board(
        base,
        key=lambda s: (-s.total_losses, -s.total_wins),
        previous_board=previous.losses if previous else None,
    )
    return Leaderboards(wins=wins_board, losses=losses_board)


def leaderboards_from_dict(d: dict) -> Leaderboards:
    """Rebuild Leaderboards from ``Leaderboards.to_dict()`` output."""
    def _board(rows: list[dict]) -> list[PlayerStanding]:
        return [
            PlayerStanding(
                player_id=r["player_id"],
                player_name=r.get("player_name", r["player_id"]),
                total_wins=r.get("total_wins", 0),
                total_losses=r.get("total_losses", 0),
                total_ties=r.get("total_ties", 0),
                win_percentage=r.get("win_percentage", 0.0),
                teams=list(r.get("teams", [])),
                current_rank=r.get("current_rank", 0),
                previous_rank=r.get("previous_rank"),
                trend=r.get("trend", TREND_SAME),
                achievements=list(r.get("achievements", [])),
            )
            for r in rows
        ]
    return Leaderboards(wins=_board(d.get("wins", [])), losses=_board(d.get("losses", [])))


# ── Season projection (Monte Carlo) ─────────────────────────────────────

def team_win_probability(team: TeamRecord) -> float:
    """Per-game win probability used for every remaining week.

    The team's current win fraction, or a coin flip before its first game.
    """
    if team.games_played == 0:
        return 0.5
    return win_fraction(team.wins, team.losses, team.ties)


def _top_index(values: list[int]) -> list[int]:
    """Indices ordered by value descending; ties keep the original order."""
    return sorted(range(len(values)), key=lambda i: -values[i])


def run_monte_carlo(
    players: dict[str, Player],
    teams: dict[str, TeamRecord],
    current_week: int,
    trials: int = DEFAULT_TRIALS,
    *,
    rng=None,
    total_weeks: int = TOTAL_WEEKS,
    win_probability: Callable[[TeamRecord], float] = team_win_probability,
) -> dict[str, ProbabilityModel]:
    """Project both competitions by simulating the rest of the season.

    Each trial starts every team from its current record and draws one
    win/loss per remaining week with a fixed per-team probability from
    ``win_probability``. The model ignores opponents and the real schedule.
    Within a trial players are ranked by simulated wins (and, separately,
    losses); ties go to the player listed first in the roster, so exactly
    one player takes first place per trial.

    ``rng`` only needs a ``random()`` method; pass a seeded ``random.Random``
    or a stub for reproducible runs.
    """
    if trials < 1:
        raise ValueError(f"trials must be positive, got {trials}")
    rng = rng or random.Random()
    remaining_weeks = max(0, total_weeks - current_week)

    player_ids = list(players)
    current = {pid: player_totals(players[pid], teams) for pid in player_ids}
    roster_teams = {
        pid: [teams[abbr] for abbr in players[pid].teams if abbr in teams]
        for pid in player_ids
    }
    probabilities = {
        pid: [win_probability(t) for t in roster_teams[pid]] for pid in player_ids
    }

    win_samples: dict[str, list[int]] = {pid: [] for pid in player_ids}
    loss_samples: dict[str, list[int]] = {pid: [] for pid in player_ids}
    wins_first = dict.fromkeys(player_ids, 0)
    wins_top3 = dict.fromkeys(player_ids, 0)
    losses_first = dict.fromkeys(player_ids, 0)
    losses_top3 = dict.fromkeys(player_ids, 0)

    for _ in range(trials):
        sim_wins = []
        sim_losses = []
        for pid in player_ids:
            w, l, _ties = current[pid]
            for p in probabilities[pid]:
                for _week in range(remaining_weeks):
                    if rng.random() < p:
                        w += 1
                    else:
                        l += 1
            sim_wins.append(w)
            sim_losses.append(l)
            win_samples[pid].append(w)
            loss_samples[pid].append(l)

        for pos, idx in enumerate(_top_index(sim_wins)):
            pid = player_ids[idx]
            if pos == 0:
                wins_first[pid] += 1
            if pos < 3:
                wins_top3[pid] += 1
        for pos, idx in enumerate(_top_index(sim_losses)):
            pid = player_ids[idx]
            if pos == 0:
                losses_first[pid] += 1
            if pos < 3:
                losses_top3[pid] += 1

    boards = calculate_standings(players, teams)
    win_ranks = {s.player_id: s.current_rank for s in boards.wins}
    loss_ranks = {s.player_id: s.current_rank for s in boards.losses}
    leader_wins = boards.wins[0].total_wins if boards.wins else 0
    leader_losses = boards.losses[0].total_losses if boards.losses else 0

    results = {}
    for pid in player_ids:
        ws = win_samples[pid]
        ls = loss_samples[pid]
        results[pid] = ProbabilityModel(
            player_id=pid,
            player=players[pid].name,
            simulations=trials,
            wins=CompetitionOutlook(
                current_rank=win_ranks[pid],
                probability_to_win=wins_first[pid] / trials,
                probability_top3=wins_top3[pid] / trials,
                expected_final=sum(ws) / trials,
                confidence_interval=(min(ws), max(ws)),
            ),
            losses=CompetitionOutlook(
                current_rank=loss_ranks[pid],
                probability_to_win=losses_first[pid] / trials,
                probability_top3=losses_top3[pid] / trials,
                expected_final=sum(ls) / trials,
                confidence_interval=(min(ls), max(ls)),
            ),
            wins_to_guarantee_wins_title=max(0, max(ws) - leader_wins + 1),
            losses_to_guarantee_losses_title=max(0, max(ls) - leader_losses + 1),
        )
    return results


def uniform_probabilities(
    players: dict[str, Player],
    teams: dict[str, TeamRecord],
) -> dict[str, ProbabilityModel]:
    """Fallback projection: every player equally likely, totals frozen."""
    n = len(players)
    if n == 0:
        return {}
    p_win = 1 / n
    p_top3 = min(3, n) / n
    boards = calculate_standings(players, teams)
    win_ranks = {s.player_id: s.current_rank for s in boards.wins}
    loss_ranks = {s.player_id: s.current_rank for s in boards.losses}

    results = {}
    for pid, player in players.items():
        wins, losses, _ = player_totals(player, teams)
        results[pid] = ProbabilityModel(
            player_id=pid,
            player=player.name,
            simulations=0,
            wins=CompetitionOutlook(win_ranks[pid], p_win, p_top3, float(wins), (wins, wins)),
            losses=CompetitionOutlook(loss_ranks[pid], p_win, p_top3, float(losses), (losses, losses)),
        )
    return results


def project_season(
    players: dict[str, Player],
    teams: dict[str, TeamRecord],
    current_week: int,
    trials: int = DEFAULT_TRIALS,
    **kwargs,
) -> dict[str, ProbabilityModel]:
    """Run the Monte Carlo projection, falling back to uniform odds on error."""
    try:
        return run_monte_carlo(players, teams, current_week, trials, **kwargs)
    except Exception as exc:
        logger.warning("Monte Carlo projection failed, using uniform odds: %s", exc)
        return uniform_probabilities(players, teams)


# ── Elo ─────────────────────────────────────────────────────────────────

def calculate_elo(
    current_elo: float,
    opponent_elo: float,
    won: bool,
    is_playoffs: bool = False,
) -> int:
    """Standard Elo update (K=32, 40 in the playoffs)."""
    k = ELO_K_PLAYOFFS if is_playoffs else ELO_K
    expected = 1 / (1 + 10 ** ((opponent_elo - current_elo) / 400))
    actual = 1 if won else 0
    return round(current_elo + k * (actual - expected))


def calculate_strength_of_schedule(
    schedule: list[str],
    teams: dict[str, TeamRecord],
) -> float:
    """Mean opponent Elo scaled so 1500 maps to 1.0, clamped to [0, 1].

    Returns 0.5 when no opponent in the schedule has a known record.
    """
    elos = [teams[opp].elo for opp in schedule if opp in teams]
    if not elos:
        return 0.5
    return min(1.0, max(0.0, sum(elos) / len(elos) / DEFAULT_ELO))


# ── Weekly history ──────────────────────────────────────────────────────

def record_week(
    history: dict,
    week: int,
    leaderboards: Leaderboards,
    teams: dict[str, TeamRecord],
    players: dict[str, Player],
) -> dict:
    """Store (or overwrite) a week's leaderboard snapshot in ``history``."""
    weeks = history.setdefault("weeks", {})
    loss_ranks = {s.player_id: s.current_rank for s in leaderboards.losses}

    player_stats = {}
    for s in leaderboards.wins:
        player = players.get(s.player_id)
        team_results = {}
        for abbr in (player.teams if player else []):
            team = teams.get(abbr)
            if team and team.last_game:
                team_results[abbr] = {
                    "result": team.last_game.result,
                    "score": team.last_game.score,
                }
        player_stats[s.player_id] = {
            "total_wins": s.total_wins,
            "total_losses": s.total_losses,
            "win_rank": s.current_rank,
            "loss_rank": loss_ranks.get(s.player_id),
            "teams": team_results,
        }

    weeks[str(week)] = {
        "player_stats": player_stats,
        "leaderboards": leaderboards.to_dict(),
        "most_wins": [
            {"player": s.player_id, "wins": s.total_wins, "rank": s.current_rank}
            for s in leaderboards.wins
        ],
        "most_losses": [
            {"player": s.player_id, "losses": s.total_losses, "rank": s.current_rank}
            for s in leaderboards.losses
        ],
    }
    return history


def previous_leaderboards(history: dict, week: int) -> Leaderboards | None:
    """Latest stored leaderboards strictly before ``week``, if any."""
    weeks = history.get("weeks", {})
    earlier = sorted((int(k) for k in weeks if int(k) < week), reverse=True)
    if not earlier:
        return None
    entry = weeks[str(earlier[0])]
    if "leaderboards" not in entry:
        return None
    return leaderboards_from_dict(entry["leaderboards"])


# ── Data quality ────────────────────────────────────────────────────────

@dataclass
class DataQualityReport:
    """Summary of data quality checks."""
    checks: list[dict] = field(default_factory=list)

    def add(self, name: str, passed: bool, detail: str = ""):
        self.checks.append({"name": name, "passed": passed, "detail": detail})

    @property
    def all_passed(self) -> bool:
        return all(c["passed"] for c in self.checks)

    @property
    def summary(self) -> str:
        passed = sum(1 for c in self.checks if c["passed"])
        return f"{passed}/{len(self.checks)} checks passed"


def run_standings_data_quality(
    players: dict[str, Player],
    teams: dict[str, TeamRecord],
    leaderboards: Leaderboards,
) -> DataQualityReport:
    """Sanity checks on the scoreboard and the derived leaderboards."""
    report = DataQualityReport()

    report.add(
        "All 32 NFL teams have records",
        len(teams) >= 32,
        f"{len(teams)} teams loaded",
    )

    missing = sorted({a for p in players.values() for a in p.teams if a not in teams})
    report.add(
        "Every drafted team has a record",
        not missing,
        f"Missing: {missing}" if missing else "Clean",
    )

    bad_pct = [t.abbreviation for t in teams.values() if not 0.0 <= t.win_pct <= 1.0]
    report.add(
        "Win fraction within [0, 1]",
        not bad_pct,
        f"Out of range: {bad_pct}" if bad_pct else "Clean",
    )

    board_wins = sum(s.total_wins for s in leaderboards.wins)
    expected = summed_team_wins(players, teams)
    report.add(
        "Leaderboard wins equal summed team wins",
        board_wins == expected,
        f"{board_wins} vs {expected}",
    )

    n = len(players)
    for label, board in (("Wins", leaderboards.wins), ("Losses", leaderboards.losses)):
        ranks = sorted(s.current_rank for s in board)
        report.add(
            f"{label} ranks are 1..{n}",
            ranks == list(range(1, n + 1)),
            f"Ranks: {ranks}",
        )

    return report
