# Copyright 2026 Cisco Systems, Inc.
# SPDX-License-Identifier: Apache-2.0

"""Tests for runtime settings and constants."""

from pathlib import Path

from rubberband.config.config import Config
from rubberband.config.constants import RubberbandConstants


class TestConfigDefaults:
    """Defaults with an empty environment."""

    def test_default_paths(self):
        config = Config(environ={})
        assert config.state_dir == Path.home() / ".openclaw"
        assert config.config_path == Path.home() / ".openclaw" / "openclaw.json"
        assert config.waiver_path == Path.home() / ".openclaw" / "rubberband" / "waivers.json"

    def test_default_flags(self):
        config = Config(environ={})
        assert config.version_override is None
        assert config.env_version is None
        assert config.disable_version_detect is False
        assert config.policy_path is None
        assert config.log_level == "WARNING"


class TestConfigEnvironment:
    """Environment variables fill unset fields."""

    def test_state_dir_moves_config_path(self, tmp_path):
        config = Config(environ={"OPENCLAW_STATE_DIR": str(tmp_path)})
        assert config.state_dir == tmp_path
        assert config.config_path == tmp_path / "openclaw.json"

    def test_config_path_override(self, tmp_path):
        config = Config(environ={"OPENCLAW_CONFIG_PATH": str(tmp_path / "custom.json")})
        assert config.config_path == tmp_path / "custom.json"

    def test_explicit_arguments_win(self, tmp_path):
        env = {"OPENCLAW_CONFIG_PATH": "/elsewhere.json", "RUBBERBAND_LOG_LEVEL": "debug"}
        config = Config(config_path=tmp_path / "mine.json", log_level="ERROR", environ=env)
        assert config.config_path == tmp_path / "mine.json"
        assert config.log_level == "ERROR"

    def test_version_and_flags(self):
        env = {
            "OPENCLAW_VERSION": "2026.1.5",
            "RUBBERBAND_DISABLE_VERSION_DETECT": "true",
            "RUBBERBAND_POLICY": "/etc/rubberband.yaml",
            "RUBBERBAND_LOG_LEVEL": "debug",
        }
        config = Config(environ=env)
        assert config.env_version == "2026.1.5"
        assert config.disable_version_detect is True
        assert config.policy_path == Path("/etc/rubberband.yaml")
        assert config.log_level == "DEBUG"

    def test_disable_flag_values(self):
        assert Config(environ={"RUBBERBAND_DISABLE_VERSION_DETECT": "1"}).disable_version_detect is True
        assert Config(environ={"RUBBERBAND_DISABLE_VERSION_DETECT": "no"}).disable_version_detect is False

    def test_tilde_is_expanded(self):
        config = Config(environ={"OPENCLAW_STATE_DIR": "~/claw"})
        assert config.state_dir == Path.home() / "claw"


class TestConfigFromFile:
    """.env files loaded with python-dotenv."""

    def test_values_from_dotenv(self, tmp_path, monkeypatch):
        monkeypatch.delenv("OPENCLAW_CONFIG_PATH", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text(f"OPENCLAW_STATE_DIR={tmp_path / 'state'}\nOPENCLAW_VERSION=1.9.0\n")
        config = Config.from_file(env_file)
        assert config.state_dir == tmp_path / "state"
        assert config.env_version == "1.9.0"

    def test_missing_file_uses_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENCLAW_STATE_DIR", str(tmp_path))
        config = Config.from_file(tmp_path / "missing.env")
        assert config.state_dir == tmp_path


class TestConstants:
    """Sanity checks on shared constants."""

    def test_data_paths_exist(self):
        assert RubberbandConstants.DEFAULT_POLICY_PATH.is_file()
        assert (RubberbandConstants.PACKS_DIR / "core" / "pack.yaml").is_file()

    def test_weights_match_default_policy(self):
        assert RubberbandConstants.DEFAULT_SEVERITY_WEIGHTS == {"critical": 25, "high": 15, "medium": 8, "low": 3}
