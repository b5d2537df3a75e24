"""Shared pytest fixtures for chatbridge tests.

Every test starts from a clean backend environment: provider variables are
removed, no ``.env`` or external config file is read, and the config cache
is reset before and after the test.
"""
import pytest

from chatbridge.base.logging import get_logger
from chatbridge.config import reset_config_cache
from chatbridge.config.env import ENV_MAP

_SERVICE_VARS = ("CODE", "HIDE_USER_API_KEY", "CHATBRIDGE_CONFIG_FILE", "CHATBRIDGE_CORS_ORIGINS")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for fields in ENV_MAP.values():
        for names in fields.values():
            for name in names:
                monkeypatch.delenv(name, raising=False)
    for name in _SERVICE_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "absent.env"))
    reset_config_cache()
    get_logger()  # initialize the shared logger before caplog adjusts levels
    yield
    reset_config_cache()


@pytest.fixture
def bedrock_config():
    return {
        "enabled": True,
        "access_key_id": "AKIDEXAMPLE",
        "secret_access_key": "secret",
        "region": "us-east-1",
    }


@pytest.fixture
def anthropic_config():
    return {"enabled": True, "api_key": "sk-ant-test"}


@pytest.fixture
def openai_config():
    return {"enabled": True, "api_key": "sk-test"}
