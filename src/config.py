"""Load pool configuration from config.toml with hardcoded fallbacks."""

from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11

from src.league_math import DEFAULT_TRIALS, TOTAL_WEEKS, LeagueConfig, Player

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.toml"

_FALLBACK_LEAGUE_NAME = "NFL Win Pool"
_FALLBACK_SEASON = "2025"
_FALLBACK_CACHE_TTL_MINUTES = 60

_FALLBACK_NARRATIVE = {
    "endpoint": "https://api.x.ai/v1/chat/completions",
    "model": "grok-beta",
    "max_tokens": 800,
    "temperature": 0.7,
}

# Eight players, four teams each, every NFL team drafted exactly once.
_FALLBACK_PLAYERS: dict[str, dict] = {
    "alex": {"name": "Alex", "teams": ["KC", "DET", "CAR", "NYG"]},
    "blair": {"name": "Blair", "teams": ["PHI", "BAL", "NE", "TEN"]},
    "casey": {"name": "Casey", "teams": ["BUF", "SF", "CLE", "LV"]},
    "devon": {"name": "Devon", "teams": ["GB", "CIN", "NYJ", "JAX"]},
    "emery": {"name": "Emery", "teams": ["HOU", "LAR", "DEN", "NO"]},
    "finley": {"name": "Finley", "teams": ["PIT", "TB", "MIA", "IND"]},
    "gray": {"name": "Gray", "teams": ["MIN", "LAC", "ARI", "CHI"]},
    "harper": {"name": "Harper", "teams": ["WAS", "SEA", "ATL", "DAL"]},
}


def _load_config() -> dict:
    """Load and return the parsed config.toml, or empty dict if missing."""
    try:
        with open(_CONFIG_PATH, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}


def get_league_name() -> str:
    cfg = _load_config()
    return cfg.get("league", {}).get("name", _FALLBACK_LEAGUE_NAME)


def get_season() -> str:
    cfg = _load_config()
    return str(cfg.get("league", {}).get("season", _FALLBACK_SEASON))


def get_total_weeks() -> int:
    """Return the number of regular-season weeks."""
    cfg = _load_config()
    return cfg.get("league", {}).get("total_weeks", TOTAL_WEEKS)


def get_simulation_trials() -> int:
    """Return the Monte Carlo trial count."""
    cfg = _load_config()
    return cfg.get("simulation", {}).get("trials", DEFAULT_TRIALS)


def get_cache_ttl_minutes() -> int:
    cfg = _load_config()
    return cfg.get("cache", {}).get("ttl_minutes", _FALLBACK_CACHE_TTL_MINUTES)


def get_narrative_settings() -> dict:
    """Return endpoint/model/max_tokens/temperature for the recap writer."""
    cfg = _load_config()
    return {**_FALLBACK_NARRATIVE, **cfg.get("narrative", {})}


def get_players() -> dict[str, Player]:
    """Return player_id -> Player in roster order."""
    cfg = _load_config()
    players_cfg = cfg.get("players", {}) or _FALLBACK_PLAYERS
    return {pid: Player.from_dict(pid, val) for pid, val in players_cfg.items()}


def get_league_config() -> LeagueConfig:
    """Return the full league configuration."""
    cfg = _load_config()
    league = cfg.get("league", {})
    return LeagueConfig(
        league_name=get_league_name(),
        season=get_season(),
        players=get_players(),
        season_start=league.get("season_start", ""),
        season_end=league.get("season_end", ""),
        playoff_start=league.get("playoff_start", ""),
        total_weeks=get_total_weeks(),
    )
