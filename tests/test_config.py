"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from config import Config, apply_env_credentials, load_config


def _write(tmp_path: Path, text: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    path = _write(tmp_path, """
database_path: /tmp/opps.db
http:
  timeout: 5
runner:
  max_workers: 2
  default_limit: 20
credentials:
  producthunt_api_key: ph-key
""")

    config = load_config(path, env={})

    assert config.database_path == "/tmp/opps.db"
    assert config.http.timeout == 5
    assert config.http.user_agent == "arbitrage-engine/1.0"
    assert config.runner.max_workers == 2
    assert config.runner.default_limit == 20
    assert config.credentials.producthunt_api_key == "ph-key"
    assert config.credentials.twitter_bearer_token is None


def test_environment_overrides_credentials(tmp_path: Path) -> None:
    path = _write(tmp_path, "credentials:\n  twitter_bearer_token: from-file\n")

    config = load_config(path, env={"TWITTER_BEARER_TOKEN": "from-env", "MOLTBOOK_API_KEY": ""})

    assert config.credentials.twitter_bearer_token == "from-env"
    assert config.credentials.moltbook_api_key is None


def test_apply_env_credentials_reads_os_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MOLTBOOK_API_KEY", "mk")

    config = apply_env_credentials(Config())

    assert config.credentials.moltbook_api_key == "mk"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="config.example.yaml"):
        load_config(str(tmp_path / "nope.yaml"))


def test_empty_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="empty"):
        load_config(_write(tmp_path, ""))


def test_invalid_yaml(tmp_path: Path) -> None:
    with pytest.raises(yaml.YAMLError):
        load_config(_write(tmp_path, "runner: [unclosed"))


def test_invalid_structure(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Invalid configuration structure"):
        load_config(_write(tmp_path, "runner:\n  max_workers: 0\n"))
