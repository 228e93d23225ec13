"""Best-effort JSON snapshots under data/."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"

RESULTS_FILE = "results.json"
CACHED_RESULTS_FILE = "cached_results.json"
HISTORY_FILE = "history.json"
ACHIEVEMENTS_FILE = "achievements.json"
NARRATIVES_FILE = "narratives.json"


def load_json(filename: str, default=None, data_dir: Path = DATA_DIR):
    """Load a snapshot, or return ``default`` if it is missing or corrupt."""
    path = data_dir / filename
    if not path.exists():
        return default
    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring corrupt snapshot %s: %s", path, e)
        return default


def save_json(data, filename: str, data_dir: Path = DATA_DIR) -> Path | None:
    """Write a snapshot. Failures are logged, not raised."""
    path = data_dir / filename
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2, default=str)
    except OSError as e:
        logger.warning("Could not write snapshot %s: %s", path, e)
        return None
    return path
