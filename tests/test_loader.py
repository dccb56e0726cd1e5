# Copyright 2026 Cisco Systems, Inc.
# SPDX-License-Identifier: Apache-2.0

"""Tests for loading and saving OpenClaw configuration files."""

import json
import os

import pytest

from rubberband.core.exceptions import ConfigLoadError
from rubberband.core.loader import DEMO_CONFIG, ConfigLoader, demo_config, load_config


class TestLoad:
    """JSON5 parsing and error codes."""

    def test_strict_json(self, write_config):
        path = write_config({"gateway": {"host": "127.0.0.1"}})
        loaded = load_config(path)
        assert loaded.config == {"gateway": {"host": "127.0.0.1"}}
        assert loaded.path == path
        assert '"gateway"' in loaded.raw

    def test_json5_features(self, write_config):
        path = write_config("{\n  // comment\n  gateway: {host: '0.0.0.0', port: 18789,},\n}\n")
        assert ConfigLoader().load(path).config == {"gateway": {"host": "0.0.0.0", "port": 18789}}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(tmp_path / "nope.json")
        assert exc_info.value.code == ConfigLoadError.NOT_FOUND
        assert "Config file not found" in str(exc_info.value)

    def test_parse_error(self, write_config):
        path = write_config("{gateway: ")
        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(path)
        assert exc_info.value.code == ConfigLoadError.PARSE_ERROR

    def test_invalid_utf8_is_a_parse_error(self, tmp_path):
        path = tmp_path / "openclaw.json"
        path.write_bytes(b'{"gateway": {"host": "\xff\xfe"}}')
        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(path)
        assert exc_info.value.code == ConfigLoadError.PARSE_ERROR
        assert "not valid UTF-8" in str(exc_info.value)

    @pytest.mark.parametrize("text", ["[1, 2]", '"text"', "null"])
    def test_non_object_top_level(self, write_config, text):
        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(write_config(text))
        assert exc_info.value.code == ConfigLoadError.PARSE_ERROR

    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores file permissions")
    def test_permission_denied(self, write_config):
        path = write_config({}, mode=0o000)
        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(path)
        assert exc_info.value.code == ConfigLoadError.PERMISSION_DENIED


class TestSave:
    """Saving writes indented JSON."""

    def test_round_trip(self, tmp_path):
        path = tmp_path / "openclaw.json"
        ConfigLoader().save({"logging": {"level": "info"}}, path)
        assert path.read_text() == json.dumps({"logging": {"level": "info"}}, indent=2)
        assert load_config(path).config == {"logging": {"level": "info"}}


class TestDemoConfig:
    """The bundled insecure example."""

    def test_returns_a_copy(self):
        config = demo_config()
        config["gateway"]["host"] = "127.0.0.1"
        assert DEMO_CONFIG["gateway"]["host"] == "0.0.0.0"
