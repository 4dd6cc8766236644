"""Tests for Config"""
import os
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from git_plugin_keeper.config import Config


class TestConfigValidation:
    """Test validation in __post_init__."""

    def test_defaults(self, temp_dir):
        config = Config(plugin_root=str(temp_dir))

        assert config.plugin_root == str(temp_dir)
        assert config.check_updates_on_startup is False
        assert config.auto_check_updates is False
        assert config.update_check_interval_minutes == 60
        assert config.credential_helper == ["git", "credential", "fill"]
        assert config.fallback_remote == "origin"
        assert config.workers is None

    def test_root_is_made_absolute(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        assert Config(plugin_root="plugins").plugin_root == os.path.join(os.getcwd(), "plugins")

    def test_root_expands_user(self):
        assert Config(plugin_root="~/plugins").plugin_root == os.path.expanduser("~/plugins")

    @pytest.mark.parametrize("kwargs", [
        {"plugin_root": ""},
        {"plugin_root": "   "},
        {"plugin_root": "/tmp", "update_check_interval_minutes": 0},
        {"plugin_root": "/tmp", "credential_helper": []},
        {"plugin_root": "/tmp", "credential_timeout": 0},
        {"plugin_root": "/tmp", "restart_timeout": -1},
        {"plugin_root": "/tmp", "workers": 0},
        {"plugin_root": "/tmp", "fallback_remote": " "},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            Config(**kwargs)

    @patch.dict("os.environ", {"GITHUB_TOKEN": "env_token"})
    def test_token_from_environment(self):
        assert Config(plugin_root="/tmp").github_token == "env_token"

    @patch.dict("os.environ", {"GITHUB_TOKEN": "env_token"})
    def test_explicit_token_wins(self):
        assert Config(plugin_root="/tmp", github_token="mine").github_token == "mine"


class TestPeriodicCheck:
    """Test the automatic update check schedule."""

    def test_disabled(self):
        config = Config(plugin_root="/tmp", last_update_check=datetime(2020, 1, 1))
        assert config.should_perform_periodic_check() is False

    def test_due_after_interval(self):
        last = datetime(2024, 5, 1, 12, 0)
        config = Config(
            plugin_root="/tmp", auto_check_updates=True, update_check_interval_minutes=30, last_update_check=last
        )

        assert config.should_perform_periodic_check(now=last + timedelta(minutes=29)) is False
        assert config.should_perform_periodic_check(now=last + timedelta(minutes=30)) is True

    def test_mark_checked(self):
        config = Config(plugin_root="/tmp", auto_check_updates=True, last_update_check=datetime(2020, 1, 1))
        now = datetime(2024, 5, 1)

        config.mark_checked(now)

        assert config.last_update_check == now
        assert config.should_perform_periodic_check(now=now) is False


class TestConfigSerialization:
    """Test dictionary conversion."""

    def test_to_dict_omits_token(self):
        data = Config(plugin_root="/tmp", github_token="secret").to_dict()
        assert "github_token" not in data
        assert "secret" not in str(data)
        assert data["plugin_root"] == "/tmp"

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"plugin_root": "/tmp", "workers": 3, "colour": "blue"})
        assert config.workers == 3
        assert config.get("colour", "none") == "none"

    def test_get(self):
        config = Config(plugin_root="/tmp", restart_timeout=1.5)
        assert config.get("restart_timeout") == 1.5
