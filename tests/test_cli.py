"""Tests for the nimauth command line."""

import math
import urllib.error
from unittest.mock import patch

import pytest

from nimauth.cli.login import resolve_credentials, run
from nimauth.core.config import Config, ProviderConfig, load_credentials, save_credentials
from nimauth.oauth.base import Credentials

URLOPEN = "nimauth.api.model_discovery.urllib.request.urlopen"


@pytest.fixture
def config(tmp_path):
    return Config(credentials_file=tmp_path / "auth.json")


def test_login_stores_credentials(config, capsys):
    with patch("builtins.input", side_effect=["  nvapi-abc123  ", ""]):
        assert run(["login"], config=config) == 0

    stored = load_credentials(config.credentials_file)["nvidia-nim"]
    assert stored.access == "nvapi-abc123"
    assert stored.base_url == "https://integrate.api.nvidia.com/v1"
    assert math.isinf(stored.expires)
    assert "Logged in to NVIDIA NIM" in capsys.readouterr().out


def test_login_reprompts_empty_key(config):
    with patch("builtins.input", side_effect=["", "nvapi-k", "http://localhost:8000"]) as mock_input:
        assert run(["login", "nvidia-nim"], config=config) == 0
    assert mock_input.call_count == 3
    assert load_credentials(config.credentials_file)["nvidia-nim"].base_url == "http://localhost:8000"


def test_login_invalid_url(config, capsys):
    with patch("builtins.input", side_effect=["nvapi-k", "not a url"]):
        assert run(["login"], config=config) == 1
    assert "Invalid base URL format" in capsys.readouterr().err
    assert not config.credentials_file.exists()


def test_login_ctrl_c_cancels(config, capsys):
    with patch("builtins.input", side_effect=["nvapi-k", KeyboardInterrupt()]):
        assert run(["login"], config=config) == 1
    assert "Login cancelled" in capsys.readouterr().err
    assert not config.credentials_file.exists()


def test_models_lists_table(config, capsys, fake_response, nim_listing):
    save_credentials(
        {"nvidia-nim": Credentials(refresh="manual", access="nvapi-k", expires=math.inf, base_url="https://host/v1")},
        config.credentials_file,
    )
    with patch(URLOPEN, return_value=fake_response(nim_listing)) as mock_open:
        assert run(["models"], config=config) == 0

    out = capsys.readouterr().out
    assert "meta/llama-3.1-70b-instruct" in out
    assert "3 models" in out
    assert mock_open.call_args[0][0].full_url == "https://host/v1/models"
    assert mock_open.call_args[1]["timeout"] == config.request_timeout


def test_models_without_credentials(config, capsys):
    assert run(["models"], config=config) == 1
    assert "nimauth login nvidia-nim" in capsys.readouterr().err


def test_resolve_credentials_falls_back_to_config(tmp_path):
    config = Config(
        providers={"nvidia-nim": ProviderConfig("nvidia-nim", api_key="nvapi-cfg")},
        credentials_file=tmp_path / "auth.json",
    )
    creds = resolve_credentials("nvidia-nim", config)
    assert creds.access == "nvapi-cfg"
    assert creds.base_url is None


def test_logout(config, capsys):
    save_credentials(
        {"nvidia-nim": Credentials(refresh="manual", access="k", expires=math.inf)},
        config.credentials_file,
    )
    assert run(["logout"], config=config) == 0
    assert load_credentials(config.credentials_file) == {}

    assert run(["logout"], config=config) == 0
    assert "No stored credentials" in capsys.readouterr().out


def test_models_unreachable_endpoint(config, capsys):
    save_credentials(
        {"nvidia-nim": Credentials(refresh="manual", access="k", expires=math.inf, base_url="http://localhost:9/v1")},
        config.credentials_file,
    )
    with patch(URLOPEN, side_effect=urllib.error.URLError("Connection refused")):
        assert run(["models"], config=config) == 1
    assert "Could not reach NVIDIA NIM: Connection refused" in capsys.readouterr().err
