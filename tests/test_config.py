"""Tests for settings loaded from the environment."""

import pytest
from pydantic import ValidationError

from azure_pim_tool import config
from azure_pim_tool.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: False)
    for name in (config.ENV_USERID, config.ENV_TIMEOUT, config.ENV_DEFAULT_DURATION):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()

    assert settings.principal_id is None
    assert settings.timeout == 30
    assert settings.default_duration == "60m"


def test_from_env(monkeypatch):
    monkeypatch.setenv(config.ENV_USERID, "principal-1")
    monkeypatch.setenv(config.ENV_TIMEOUT, "45")
    monkeypatch.setenv(config.ENV_DEFAULT_DURATION, "2h")

    settings = Settings.from_env()

    assert settings.principal_id == "principal-1"
    assert settings.timeout == 45.0
    assert settings.default_duration == "2h"


@pytest.mark.parametrize("value", ["0", "-3", "soon"])
def test_invalid_timeout(monkeypatch, value):
    monkeypatch.setenv(config.ENV_TIMEOUT, value)

    with pytest.raises(ValidationError):
        Settings.from_env()
