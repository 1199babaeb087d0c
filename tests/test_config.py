"""Tests for configuration loading and the credentials store."""

import math
import os
import stat
import tempfile
from pathlib import Path

import pytest

from nimauth.core.config import (
    Config,
    ProviderConfig,
    _resolve_env_vars,
    load_config,
    load_credentials,
    save_credentials,
)
from nimauth.oauth.base import Credentials


def test_resolve_env_vars():
    """Test environment variable resolution."""
    os.environ["TEST_VAR"] = "test_value"

    result = _resolve_env_vars("Hello ${TEST_VAR}")
    assert result == "Hello test_value"

    result = _resolve_env_vars({"key": ["${TEST_VAR}"]})
    assert result == {"key": ["test_value"]}

    del os.environ["TEST_VAR"]


def test_provider_config_to_credentials():
    config = ProviderConfig(name="nvidia-nim", api_key="  nvapi-k  ", base_url="https://host/v1")
    creds = config.to_credentials()

    assert creds.access == "nvapi-k"
    assert creds.refresh == "manual"
    assert math.isinf(creds.expires)
    assert creds.base_url == "https://host/v1"


def test_provider_config_without_key():
    assert ProviderConfig(name="nvidia-nim").to_credentials() is None
    assert ProviderConfig(name="nvidia-nim", api_key="   ").to_credentials() is None


def test_load_config_empty(monkeypatch):
    """Test loading config when no file exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.chdir(tmpdir)
        monkeypatch.setenv("HOME", tmpdir)
        config = load_config(Path(tmpdir) / "missing.yaml")

        assert isinstance(config, Config)
        assert len(config.providers) == 0
        assert config.request_timeout == 15.0


def test_load_config_from_yaml(monkeypatch):
    """Test loading config from YAML file with a key from .env."""
    yaml_content = """
request_timeout: 7
providers:
  default: nvidia-nim
  nvidia-nim:
    api_key: ${NIMAUTH_TEST_KEY}
    base_url: http://localhost:8000/v1
    label: local
"""
    monkeypatch.delenv("NIMAUTH_TEST_KEY", raising=False)
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "nimauth.yaml"
        config_path.write_text(yaml_content)
        (Path(tmpdir) / ".env").write_text("NIMAUTH_TEST_KEY=nvapi-from-env\n")

        config = load_config(config_path)

        assert config.default_provider == "nvidia-nim"
        assert config.request_timeout == 7.0
        nim = config.get_provider()
        assert nim.api_key == "nvapi-from-env"
        assert nim.base_url == "http://localhost:8000/v1"
        assert nim.extra == {"label": "local"}
    monkeypatch.delenv("NIMAUTH_TEST_KEY", raising=False)


def test_unresolved_api_key_is_dropped(monkeypatch):
    monkeypatch.delenv("NIMAUTH_MISSING_KEY", raising=False)
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "nimauth.yaml"
        config_path.write_text("providers:\n  nvidia-nim:\n    api_key: ${NIMAUTH_MISSING_KEY}\n")
        config = load_config(config_path, env_path=Path(tmpdir) / "none.env")

    assert config.providers["nvidia-nim"].api_key is None


def test_config_get_provider():
    config = Config(
        providers={
            "a": ProviderConfig("a"),
            "b": ProviderConfig("b"),
        },
        default_provider="a",
    )

    assert config.get_provider("b").name == "b"
    assert config.get_provider().name == "a"
    assert config.list_providers() == ["a", "b"]

    with pytest.raises(ValueError):
        config.get_provider("nonexistent")


# --- credentials store ---


def test_credentials_store_roundtrip(tmp_path):
    path = tmp_path / "auth" / "auth.json"
    store = {
        "nvidia-nim": Credentials(refresh="manual", access="nvapi-k", expires=math.inf,
                                  base_url="https://integrate.api.nvidia.com/v1"),
    }
    save_credentials(store, path)

    loaded = load_credentials(path)
    assert loaded == store
    assert math.isinf(loaded["nvidia-nim"].expires)


def test_credentials_store_missing_and_corrupt(tmp_path):
    assert load_credentials(tmp_path / "missing.json") == {}

    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    assert load_credentials(bad) == {}


def test_credentials_store_skips_bad_entries(tmp_path):
    path = tmp_path / "auth.json"
    path.write_text('{"nvidia-nim": {"access": "k"}, "other": {"refresh": "r", "access": "a", "expires": 1}}')
    loaded = load_credentials(path)
    assert list(loaded) == ["other"]
    assert loaded["other"].base_url is None


@pytest.mark.parametrize("content", ["[]", '"text"', "null", "3"])
def test_credentials_store_non_object_root(tmp_path, content):
    path = tmp_path / "auth.json"
    path.write_text(content)
    assert load_credentials(path) == {}


@pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
def test_credentials_store_is_owner_only(tmp_path):
    path = tmp_path / "auth.json"
    store = {"nvidia-nim": Credentials(refresh="manual", access="nvapi-k", expires=math.inf)}

    old_umask = os.umask(0)
    try:
        save_credentials(store, path)
    finally:
        os.umask(old_umask)
    assert stat.S_IMODE(path.stat().st_mode) == 0o600

    # An existing world-readable file is tightened on rewrite
    path.chmod(0o644)
    save_credentials(store, path)
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert load_credentials(path) == store
