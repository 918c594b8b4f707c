"""
Configuration constants for the form coach backend.

Centralizes environment variable loading, storage locations and the runtime
tunables read from ``config/coach.yaml``.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

from src.utils.io_utils import load_config

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_PATH = PROJECT_ROOT / ".env"
load_dotenv(_ENV_PATH)

COACH_CONFIG_PATH = Path(
    os.environ.get("COACH_CONFIG_PATH", str(PROJECT_ROOT / "config" / "coach.yaml"))
)
WORKOUT_STORE_DIR = Path(
    os.environ.get("WORKOUT_STORE_DIR", str(PROJECT_ROOT / "workouts"))
)

# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
# Sessions recorded for the demo user are never required to persist: a failed
# save is reported as success with a placeholder ID.
DEMO_USER_ID: str = os.environ.get("COACH_DEMO_USER_ID", "demo-user")
DEMO_WORKOUT_ID: str = "demo-workout-id"
DEFAULT_USER_ID: str = os.environ.get("COACH_USER_ID", DEMO_USER_ID)

# ---------------------------------------------------------------------------
# Runtime tunables (overridable from YAML)
# ---------------------------------------------------------------------------
_DEFAULTS: dict = {
    "announcer": {
        "feedback_cooldown_s": 2.0,
        "motivational_cooldown_s": 15.0,
        "motivational_interval_s": [20.0, 30.0],
    },
    "voice": {
        "enabled": True,
        "score_alert_below": 70,
        "score_change_threshold": 10,
    },
    "timed_tick_s": 1.0,
}


def _merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(config_path: Path = COACH_CONFIG_PATH) -> dict:
    """Return the code defaults overlaid with the YAML file, if present."""
    if not config_path.exists():
        return _merge(_DEFAULTS, {})
    return _merge(_DEFAULTS, load_config(str(config_path)) or {})


SETTINGS: dict = load_settings()

FEEDBACK_COOLDOWN_S: float = float(SETTINGS["announcer"]["feedback_cooldown_s"])
MOTIVATIONAL_COOLDOWN_S: float = float(SETTINGS["announcer"]["motivational_cooldown_s"])
MOTIVATIONAL_INTERVAL_S: tuple[float, float] = tuple(
    float(v) for v in SETTINGS["announcer"]["motivational_interval_s"]
)
VOICE_ENABLED: bool = bool(SETTINGS["voice"]["enabled"])
SCORE_ALERT_BELOW: int = int(SETTINGS["voice"]["score_alert_below"])
SCORE_CHANGE_THRESHOLD: int = int(SETTINGS["voice"]["score_change_threshold"])
TIMED_TICK_S: float = float(SETTINGS["timed_tick_s"])
