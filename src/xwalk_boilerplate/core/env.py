"""Centralized environment variable helpers."""

from __future__ import annotations

import os

_TRUE_VALUES = {"1", "true", "yes", "on"}


def getenv(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name, default)


def getenv_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


def action_input(name: str) -> str:
    """Read a CI action input the way GitHub Actions exposes it (`INPUT_<NAME>`)."""
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return os.environ.get(key, "").strip()
