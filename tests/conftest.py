"""Shared test fixtures."""

from pathlib import Path

import pytest
import structlog

import lb.settings as settings_module
from lb.models import RawConfig

INSTANCE = "gitlab.example.com"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point the config store at tmp_path and reset cached settings and structlog."""
    monkeypatch.setenv("LB_CONFIG_DIR", str(tmp_path))
    monkeypatch.delenv("LB_LOG_LEVEL", raising=False)
    settings_module.get_settings.cache_clear()
    yield tmp_path
    settings_module.get_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture
def complete_raw() -> RawConfig:
    return RawConfig(gl_instance=INSTANCE, gl_token="tok123", project=7, issue=42)


@pytest.fixture
def issue_node() -> dict:
    return {
        "id": 90001,
        "iid": 42,
        "project_id": 7,
        "title": "Nightly build log",
        "state": "opened",
        "description": "Collects CI output.",
    }
