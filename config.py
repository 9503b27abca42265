# config.py
# Environment-driven settings. Library modules read these as defaults only.
from __future__ import annotations

import os
from pathlib import Path
from zoneinfo import ZoneInfo


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _pick_data_dir() -> Path:
    candidates = []
    env = os.getenv("DATA_DIR")
    if env:
        candidates.append(Path(env))
    candidates += [Path("/data"), Path.cwd() / "data"]

    for p in candidates:
        try:
            p.mkdir(parents=True, exist_ok=True)
            t = p / ".rwtest"
            t.write_text("ok")
            t.unlink(missing_ok=True)
            return p
        except OSError:
            continue
    return Path.cwd()


def database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return f"sqlite:///{(_pick_data_dir() / 'timecards.db').as_posix()}"


TZ = ZoneInfo(os.getenv("TIMECARD_TZ", "UTC"))
MANAGER_RECENT_LIMIT = int(os.getenv("MANAGER_RECENT_LIMIT", "3"))
EMPLOYEE_CAN_DELETE_COMPLETED = _env_bool("EMPLOYEE_CAN_DELETE_COMPLETED", False)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

__all__ = [
    "TZ",
    "MANAGER_RECENT_LIMIT",
    "EMPLOYEE_CAN_DELETE_COMPLETED",
    "LOG_LEVEL",
    "database_url",
]
