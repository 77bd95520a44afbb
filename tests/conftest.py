from __future__ import annotations

import os
from collections.abc import Iterator
from typing import Final

import pytest

_TEST_ENV_VARS: Final[dict[str, str]] = {
    "APP_ENV": "test",
    "API_BASE_URL": "http://collector.test",
    "PREFERENCE_STORE_URL": "memory://",
    "LOG_LEVEL": "DEBUG",
}

for key, value in _TEST_ENV_VARS.items():
    os.environ.setdefault(key, value)

from portal_client.core.storage import InMemoryPreferenceStore  # noqa: E402
from portal_client.i18n.translator import reset_localization  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_shared_localizer() -> Iterator[None]:
    reset_localization()
    yield
    reset_localization()


@pytest.fixture()
def memory_store() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()
