"""
db/config.py

Environment-driven database configuration for the inspection store.
"""

from __future__ import annotations

import os
from pathlib import Path

_ENV_FILES: tuple[str, ...] = (".env", ".env.local")


def load_env_files() -> None:
    """
    Load KEY=VALUE pairs from the project `.env` files without overriding
    variables already present in the process environment.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in _ENV_FILES:
        env_path = project_root / filename
        if not env_path.is_file():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if line.startswith("export "):
                line = line[len("export "):].lstrip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key:
                os.environ.setdefault(key, value)


def normalize_postgres_url(url: str) -> str:
    """
    Rewrite bare postgres URLs to the psycopg 3 driver form.
    """

    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def resolve_database_url() -> str:
    """
    Resolve the inspection database URL.

    Priority:
    1) INSPECTIONS_DATABASE_URL
    2) DATABASE_URL
    """

    load_env_files()

    for name in ("INSPECTIONS_DATABASE_URL", "DATABASE_URL"):
        url = (os.getenv(name) or "").strip()
        if url:
            return normalize_postgres_url(url)

    raise RuntimeError(
        "No database URL configured. Set INSPECTIONS_DATABASE_URL or DATABASE_URL."
    )
