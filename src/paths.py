"""Filesystem locations used by configuration loading."""

from pathlib import Path

# src/paths.py -> repository root, where .env and alembic.ini live
PROJECT_ROOT = Path(__file__).resolve().parent.parent

ENV_FILE = PROJECT_ROOT / ".env"
