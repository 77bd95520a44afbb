from __future__ import annotations

from importlib.metadata import PackageNotFoundError

import pytest

from portal_client.core import version as version_module


def test_user_agent_carries_version() -> None:
    assert version_module.USER_AGENT.startswith(f"portal-client/{version_module.APP_VERSION} ")
    assert version_module.build_user_agent("1.2.3").startswith("portal-client/1.2.3 python/")


def test_falls_back_to_pyproject_when_not_installed(monkeypatch: pytest.MonkeyPatch) -> None:
    def missing(name: str) -> str:
        raise PackageNotFoundError(name)

    monkeypatch.setattr(version_module, "version", missing)

    assert version_module._resolve_version() == "0.1.0"


def test_falls_back_to_zero_version(monkeypatch: pytest.MonkeyPatch) -> None:
    def missing(name: str) -> str:
        raise PackageNotFoundError(name)

    monkeypatch.setattr(version_module, "version", missing)
    monkeypatch.setattr(version_module, "_read_pyproject_version", lambda: None)

    assert version_module._resolve_version() == "0.0.0"
