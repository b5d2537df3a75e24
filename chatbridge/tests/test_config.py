"""Config layering: defaults, config file, env, overrides."""
import json
import os

import pytest

from chatbridge.base.errors import ConfigurationError
from chatbridge.config import (
    get_provider_config,
    is_enabled,
    missing_fields,
    require_backend_config,
    reset_config_cache,
)
from chatbridge.config.env import env_list, is_truthy, resolve_env


def test_defaults_without_env():
    cfg = get_provider_config("bedrock")
    assert cfg == {"enabled": False, "region": "us-east-1"}  # nosec B101
    assert not is_enabled("openai")  # nosec B101


def test_env_enables_bedrock(monkeypatch):
    monkeypatch.setenv("ENABLE_AWS_BEDROCK", "true")
    monkeypatch.setenv("AWS_BEDROCK_ACCESS_KEY_ID", "AKID")
    monkeypatch.setenv("AWS_BEDROCK_SECRET_ACCESS_KEY", "secret")
    monkeypatch.setenv("AWS_BEDROCK_REGION", "eu-west-1")
    cfg = require_backend_config("bedrock")
    assert cfg["enabled"] is True  # nosec B101
    assert cfg["region"] == "eu-west-1"  # nosec B101
    assert cfg["access_key_id"] == "AKID"  # nosec B101


def test_disabled_backend_raises():
    with pytest.raises(ConfigurationError) as ei:
        require_backend_config("anthropic")
    assert ei.value.message == "anthropic is not enabled"  # nosec B101
    assert ei.value.http_status == 500  # nosec B101


def test_missing_credentials_are_named(monkeypatch):
    monkeypatch.setenv("ENABLE_AWS_BEDROCK", "1")
    monkeypatch.setenv("AWS_BEDROCK_ACCESS_KEY_ID", "AKID")
    with pytest.raises(ConfigurationError) as ei:
        require_backend_config("bedrock")
    assert ei.value.message == "bedrock is missing credentials: secret_access_key"  # nosec B101
    assert missing_fields("openai", {"api_key": "  "}) == ["api_key"]  # nosec B101


def test_base_url_alias(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_URL", "https://proxy.example/anthropic")
    assert get_provider_config("anthropic")["base_url"] == "https://proxy.example/anthropic"  # nosec B101
    monkeypatch.setenv("ANTHROPIC_BASE_URL", "https://primary.example")
    assert resolve_env("anthropic", "base_url") == ("https://primary.example", "ANTHROPIC_BASE_URL")  # nosec B101


def test_overrides_win_and_none_is_ignored(monkeypatch):
    monkeypatch.setenv("ENABLE_OPENAI", "yes")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    cfg = get_provider_config("openai", {"api_key": "sk-user", "base_url": None})
    assert cfg["api_key"] == "sk-user"  # nosec B101
    assert "base_url" not in cfg  # nosec B101


def test_yaml_config_file_below_env(monkeypatch, tmp_path):
    path = tmp_path / "chatbridge.yaml"
    path.write_text("bedrock:\n  enabled: true\n  region: ap-south-1\n  access_key_id: FILEKEY\n", encoding="utf-8")
    monkeypatch.setenv("CHATBRIDGE_CONFIG_FILE", str(path))
    monkeypatch.setenv("AWS_BEDROCK_ACCESS_KEY_ID", "ENVKEY")
    reset_config_cache()
    cfg = get_provider_config("bedrock")
    assert cfg["enabled"] is True  # nosec B101
    assert cfg["region"] == "ap-south-1"  # nosec B101
    assert cfg["access_key_id"] == "ENVKEY"  # nosec B101


def test_json_config_file(monkeypatch, tmp_path):
    path = tmp_path / "chatbridge.json"
    path.write_text(json.dumps({"openai": {"enabled": "on", "api_key": "sk-file"}}), encoding="utf-8")
    monkeypatch.setenv("CHATBRIDGE_CONFIG_FILE", str(path))
    reset_config_cache()
    assert require_backend_config("openai")["api_key"] == "sk-file"  # nosec B101


def test_dotenv_does_not_override_process_env(monkeypatch, tmp_path):
    dotenv = tmp_path / ".env"
    dotenv.write_text(
        "# local settings\nexport ENABLE_OPENAI=1\nOPENAI_API_KEY='sk-dotenv'\nOPENAI_ORG_ID=org-dotenv\n",
        encoding="utf-8",
    )
    # register the variables with monkeypatch so values written by the loader are undone
    for name in ("ENABLE_OPENAI", "OPENAI_API_KEY"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("OPENAI_ORG_ID", "org-process")
    monkeypatch.setenv("DOTENV_FILE", str(dotenv))
    reset_config_cache()
    cfg = get_provider_config("openai")
    assert cfg["enabled"] is True  # nosec B101
    assert cfg["api_key"] == "sk-dotenv"  # nosec B101
    assert cfg["organization"] == "org-process"  # nosec B101
    assert os.environ["OPENAI_ORG_ID"] == "org-process"  # nosec B101


@pytest.mark.parametrize("value,expected", [("1", True), ("TRUE", True), (" on ", True), ("0", False), (None, False), (True, True)])
def test_is_truthy(value, expected):
    assert is_truthy(value) is expected  # nosec B101


def test_env_list(monkeypatch):
    monkeypatch.setenv("CODE", " a, ,b,")
    assert env_list("CODE") == ["a", "b"]  # nosec B101
