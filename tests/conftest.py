from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from devtools_check.config import get_settings


@pytest.fixture(autouse=True)
def _test_env(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("DEVTOOLS_"):
            monkeypatch.delenv(key, raising=False)
    # Keep a stray .env in the working tree out of the settings.
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
