from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolated_api_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ANESTHESIA_API_BASE_URL", "ANESTHESIA_API_TOKEN", "ANESTHESIA_API_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
