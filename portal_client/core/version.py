"""Package version and the User-Agent sent with backend requests."""

from __future__ import annotations

import platform
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Final

import tomllib

DISTRIBUTION_NAME: Final[str] = "portal-client"
_PYPROJECT_PATH: Final[Path] = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _read_pyproject_version() -> str | None:
    """Read ``[project].version`` from a source checkout."""
    if not _PYPROJECT_PATH.exists():
        return None

    with _PYPROJECT_PATH.open("rb") as fp:
        project_data = tomllib.load(fp).get("project")

    if isinstance(project_data, dict) and isinstance(project_data.get("version"), str):
        return project_data["version"]
    return None


def _resolve_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return _read_pyproject_version() or "0.0.0"


def build_user_agent(app_version: str) -> str:
    return f"{DISTRIBUTION_NAME}/{app_version} python/{platform.python_version()}"


APP_VERSION: Final[str] = _resolve_version()

USER_AGENT: Final[str] = build_user_agent(APP_VERSION)

__all__ = ["APP_VERSION", "USER_AGENT", "build_user_agent"]
