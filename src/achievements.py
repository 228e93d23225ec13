"""Badge-style achievements awarded from simple rule checks.

Re-running the rules on the same data never awards a badge twice: anything
already in the previous AchievementsData is carried forward as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from src.league_math import (
    Leaderboards,
    Player,
    TeamRecord,
    TREND_UP,
)

RARITIES = ["legendary", "epic", "rare", "uncommon", "common"]


@dataclass
class Achievement:
    name: str
    description: str
    icon: str
    rarity: str
    holders: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "rarity": self.rarity,
            "holders": list(self.holders),
        }


@dataclass
class PlayerAchievement:
    achievement: str
    earned_date: str
    context: str

    def to_dict(self) -> dict:
        return {"achievement": self.achievement, "earned_date": self.earned_date, "context": self.context}

    @classmethod
    def from_dict(cls, d: dict) -> "PlayerAchievement":
        return cls(
            achievement=d["achievement"],
            earned_date=d.get("earned_date", ""),
            context=d.get("context", ""),
        )


@dataclass
class AchievementsData:
    last_calculated: str
    achievements: dict[str, Achievement]
    player_achievements: dict[str, list[PlayerAchievement]]

    def earned_keys(self, player_id: str) -> list[str]:
        return [a.achievement for a in self.player_achievements.get(player_id, [])]

    def to_dict(self) -> dict:
        return {
            "last_calculated": self.last_calculated,
            "achievements": {k: a.to_dict() for k, a in self.achievements.items()},
            "player_achievements": {
                pid: {"total": len(earned), "earned": [e.to_dict() for e in earned]}
                for pid, earned in self.player_achievements.items()
            },
        }

    @classmethod
    def from_dict(cls, d: dict) -> "AchievementsData":
        player_achievements = {
            pid: [PlayerAchievement.from_dict(e) for e in data.get("earned", [])]
            for pid, data in d.get("player_achievements", {}).items()
        }
        return cls(
            last_calculated=d.get("last_calculated", ""),
            achievements=_definitions_with_holders(player_achievements),
            player_achievements=player_achievements,
        )


# key: (name, description, icon, rarity)
ACHIEVEMENT_DEFINITIONS: dict[str, tuple[str, str, str, str]] = {
    "first_win": ("First Victory", "Achieve your first team win of the season", "🏆", "common"),
    "perfect_week": ("Perfect Week", "All 4 of your teams win in the same week", "💎", "legendary"),
    "disaster_week": ("Disaster Week", "All 4 of your teams lose in the same week", "💀", "epic"),
    "comeback_kid": ("Comeback Kid", "Climb into first place in the wins race", "🚀", "rare"),
    "early_leader": ("Early Leader", "Lead the wins competition after week 1", "⚡", "uncommon"),
    "win_streak": ("Win Streak", "Have 5 consecutive team wins", "🔥", "rare"),
    "loss_streak": ("Loss Streak", "Have 5 consecutive team losses (sympathy badge)", "❄️", "rare"),
    "underdog_victory": ("Underdog Victory", "Your team with the worst record beats a top team", "🐶", "uncommon"),
    "consistency_king": ("Consistency King", "Maintain a win rate between 40-60% all season", "⚖️", "rare"),
    "domination": ("Total Domination", "Lead both wins and losses competitions simultaneously", "👑", "legendary"),
    "balanced_portfolio": ("Balanced Portfolio", "Each of your 4 teams has at least 1 win and 1 loss", "📊", "common"),
    "rivalry_master": ("Rivalry Master", "Your teams beat division rivals", "⚔️", "epic"),
}

DIVISIONS: dict[str, list[str]] = {
    "AFC_EAST": ["BUF", "MIA", "NE", "NYJ"],
    "AFC_NORTH": ["BAL", "CIN", "CLE", "PIT"],
    "AFC_SOUTH": ["HOU", "IND", "JAX", "TEN"],
    "AFC_WEST": ["DEN", "KC", "LAC", "LV"],
    "NFC_EAST": ["DAL", "NYG", "PHI", "WAS"],
    "NFC_NORTH": ["CHI", "DET", "GB", "MIN"],
    "NFC_SOUTH": ["ATL", "CAR", "NO", "TB"],
    "NFC_WEST": ["ARI", "LAR", "SEA", "SF"],
}

STREAK_THRESHOLD = 5
RIVALRY_WINS_NEEDED = 2
TOP_TEAM_WIN_PCT = 0.6


def _fresh_definitions() -> dict[str, Achievement]:
    return {
        key: Achievement(name, desc, icon, rarity)
        for key, (name, desc, icon, rarity) in ACHIEVEMENT_DEFINITIONS.items()
    }


def _definitions_with_holders(
    player_achievements: dict[str, list[PlayerAchievement]],
) -> dict[str, Achievement]:
    definitions = _fresh_definitions()
    for pid, earned in player_achievements.items():
        for a in earned:
            if a.achievement in definitions:
                definitions[a.achievement].holders.append(pid)
    return definitions


def team_division(team: str) -> str | None:
    for division, members in DIVISIONS.items():
        if team in members:
            return division
    return None


def is_divisional_rival(team_a: str, team_b: str) -> bool:
    div = team_division(team_a)
    return div is not None and team_a != team_b and div == team_division(team_b)


def _last_results(player_teams: list[TeamRecord]) -> list[str | None]:
    return [t.last_game.result if t.last_game else None for t in player_teams]


def _player_rules(
    player_teams: list[TeamRecord],
    teams: dict[str, TeamRecord],
    standing,
    current_week: int,
) -> list[tuple[str, str]]:
    """Return (achievement_key, context) pairs one player qualifies for."""
    earned = []
    results = _last_results(player_teams)
    full_roster = len(player_teams) == 4

    if standing.total_wins >= 1:
        earned.append(("first_win", f"First win achieved with {standing.total_wins} total wins"))

    if full_roster and current_week >= 1 and all(r == "W" for r in results):
        earned.append(("perfect_week", f"All 4 teams won in week {current_week}"))

    if full_roster and current_week >= 1 and all(r == "L" for r in results):
        earned.append(("disaster_week", f"All 4 teams lost in week {current_week}"))

    if current_week >= 1 and standing.current_rank == 1:
        earned.append(("early_leader", f"Leading wins competition after week {current_week}"))

    win_run = sum(t.wins for t in player_teams if t.last_game and t.last_game.result == "W")
    if win_run >= STREAK_THRESHOLD:
        earned.append(("win_streak", f"{win_run} wins across teams coming off a win"))

    loss_run = sum(t.losses for t in player_teams if t.last_game and t.last_game.result == "L")
    if loss_run >= STREAK_THRESHOLD:
        earned.append(("loss_streak", f"{loss_run} losses across teams coming off a loss"))

    if (
        player_teams
        and current_week >= 4
        and all(t.wins >= 1 and t.losses >= 1 for t in player_teams)
    ):
        earned.append(("balanced_portfolio", "All teams have both wins and losses"))

    if current_week >= 8 and 0.4 <= standing.win_percentage <= 0.6:
        earned.append((
            "consistency_king",
            f"Maintained {standing.win_percentage * 100:.1f}% win rate",
        ))

    rivalry_wins = sum(
        1 for t in player_teams
        if t.last_game
        and t.last_game.result == "W"
        and is_divisional_rival(t.abbreviation, t.last_game.opponent)
    )
    if rivalry_wins >= RIVALRY_WINS_NEEDED:
        earned.append(("rivalry_master", f"{rivalry_wins} divisional rivalry victories"))

    if len(player_teams) > 1:
        worst = min(player_teams, key=lambda t: t.win_pct)
        if worst.last_game and worst.last_game.result == "W":
            opponent = teams.get(worst.last_game.opponent)
            if opponent and opponent.win_pct >= TOP_TEAM_WIN_PCT:
                earned.append((
                    "underdog_victory",
                    f"{worst.abbreviation} ({worst.wins}-{worst.losses}) beat "
                    f"{opponent.abbreviation} ({opponent.wins}-{opponent.losses})",
                ))

    return earned


def calculate_achievements(
    players: dict[str, Player],
    teams: dict[str, TeamRecord],
    leaderboards: Leaderboards,
    current_week: int,
    previous: AchievementsData | None = None,
    today: date | None = None,
) -> AchievementsData:
    """Evaluate every rule and merge new badges into ``previous``."""
    earned_date = (today or date.today()).isoformat()
    player_achievements: dict[str, list[PlayerAchievement]] = {
        pid: list(previous.player_achievements.get(pid, [])) if previous else []
        for pid in players
    }

    def award(pid: str, key: str, context: str) -> None:
        if any(a.achievement == key for a in player_achievements[pid]):
            return
        player_achievements[pid].append(PlayerAchievement(key, earned_date, context))

    by_id = {s.player_id: s for s in leaderboards.wins}
    for pid, player in players.items():
        standing = by_id.get(pid)
        if standing is None:
            continue
        player_teams = [teams[a] for a in player.teams if a in teams]
        for key, context in _player_rules(player_teams, teams, standing, current_week):
            award(pid, key, context)

    if leaderboards.wins and leaderboards.losses:
        wins_leader = leaderboards.wins[0].player_id
        if wins_leader == leaderboards.losses[0].player_id and wins_leader in players:
            award(wins_leader, "domination", "Leading both wins and losses competitions")

    if current_week >= 4:
        for s in leaderboards.wins:
            if s.trend == TREND_UP and s.current_rank == 1 and s.player_id in players:
                award(s.player_id, "comeback_kid", f"Rose to 1st place in week {current_week}")

    return AchievementsData(
        last_calculated=datetime.now().isoformat(timespec="seconds"),
        achievements=_definitions_with_holders(player_achievements),
        player_achievements=player_achievements,
    )


def player_achievement_summary(player_id: str, data: AchievementsData) -> dict:
    """Total badges, counts by rarity, and the three most recent."""
    earned = data.player_achievements.get(player_id, [])
    by_rarity = {r: 0 for r in RARITIES}
    for a in earned:
        definition = data.achievements.get(a.achievement)
        if definition:
            by_rarity[definition.rarity] += 1
    recent = sorted(earned, key=lambda a: a.earned_date, reverse=True)[:3]
    return {"total": len(earned), "by_rarity": by_rarity, "recent": recent}
