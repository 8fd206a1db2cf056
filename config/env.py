"""Settings helpers: dotenv seeding and typed environment lookups.

`.env` always applies; `.env.dev` is added when DJANGO_ENV is dev/development/local.
Variables already present in the process environment win over both files.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

DEV_ENVIRONMENTS = {"dev", "development", "local"}
TRUE_VALUES = {"1", "true", "yes", "on"}


def env_files(base_dir: Path = BASE_DIR) -> list[Path]:
    """Dotenv files for the current DJANGO_ENV, in load order."""
    files = [base_dir / ".env"]
    if os.environ.get("DJANGO_ENV", "").lower() in DEV_ENVIRONMENTS:
        files.append(base_dir / ".env.dev")
    return files


def load_env(base_dir: Path | None = None) -> list[Path]:
    """Seed os.environ from the dotenv files that exist; returns those files."""
    loaded = []
    for path in env_files(base_dir or BASE_DIR):
        if path.is_file():
            load_dotenv(path, override=False)
            loaded.append(path)
    return loaded


def env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in TRUE_VALUES


def env_int(name: str, default: int) -> int:
    """Integer variable; unparsable values fall back to `default`."""
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def env_list(name: str, default: str = "") -> list[str]:
    """Comma-separated variable, blanks dropped."""
    return [item.strip() for item in os.environ.get(name, default).split(",") if item.strip()]
