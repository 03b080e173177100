from __future__ import annotations

import pytest

from request_background.config import get_settings


@pytest.fixture(autouse=True)
def _test_env(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = tmp_path_factory.mktemp("bg_test")
    (root / "logs").mkdir(parents=True, exist_ok=True)

    monkeypatch.chdir(root)
    monkeypatch.setenv("BACKGROUND_LOG_DIR", str(root / "logs"))
    monkeypatch.setenv("BACKGROUND_SHUTDOWN_TIMEOUT_SEC", "5")
    monkeypatch.setenv("BACKGROUND_DEMO_EMAIL_DELAY_SEC", "0")
    monkeypatch.setenv("BACKGROUND_DEMO_ACTIVITY_DELAY_SEC", "0")
    get_settings.cache_clear()
