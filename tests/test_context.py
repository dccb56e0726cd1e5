# Copyright 2026 Cisco Systems, Inc.
# SPDX-License-Identifier: Apache-2.0

"""Tests for version detection and scan-context construction."""

import json
import subprocess
from datetime import datetime, timedelta, timezone

import pytest

from rubberband.config.config import Config
from rubberband.core import probes
from rubberband.core.context import build_scan_context, detect_version, format_version_banner
from rubberband.core.models import SchemaDialect, VersionSource, Waiver
from rubberband.core.waivers import WaiverStore


@pytest.fixture
def settings(state_dir):
    """Settings isolated from the real environment and home directory."""

    def _make(**kwargs) -> Config:
        return Config(state_dir=state_dir, environ=kwargs.pop("environ", {}), **kwargs)

    return _make


@pytest.fixture
def no_binary(monkeypatch):
    """Pretend the ``openclaw`` binary is not installed."""
    monkeypatch.setattr(probes, "run_command", lambda args, timeout: None)


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep ``node_modules`` lookups away from the real working directory."""
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    monkeypatch.chdir(cwd)
    return cwd


class TestDetectVersion:
    """Detection order and sources."""

    def test_override_wins(self, settings, no_binary):
        version, source = detect_version({"version": "1.0.0"}, settings(version_override="2026.2.1"))
        assert version is not None and version.raw == "2026.2.1"
        assert source == VersionSource.CLI

    def test_env_version(self, settings, no_binary):
        version, source = detect_version({}, settings(environ={"OPENCLAW_VERSION": "v1.5.0"}))
        assert version is not None and version.major == 1
        assert source == VersionSource.ENV

    def test_cli_probe(self, settings, monkeypatch):
        def fake_run(args, timeout):
            assert args == ["openclaw", "--version"]
            assert timeout == 1.5
            return subprocess.CompletedProcess(args, 0, stdout="OpenClaw 2026.1.29 (abc123)\n", stderr="")

        monkeypatch.setattr(probes, "run_command", fake_run)
        version, source = detect_version({}, settings())
        assert version is not None and version.raw == "2026.1.29"
        assert source == VersionSource.CLI

    def test_cli_probe_falls_back_to_version_subcommand(self, settings, monkeypatch):
        def fake_run(args, timeout):
            if args[1] == "--version":
                return subprocess.CompletedProcess(args, 1, stdout="", stderr="unknown option")
            return subprocess.CompletedProcess(args, 0, stdout="1.9.0\n", stderr="")

        monkeypatch.setattr(probes, "run_command", fake_run)
        version, source = detect_version({}, settings())
        assert version is not None and version.raw == "1.9.0"

    def test_config_field(self, settings, no_binary):
        version, source = detect_version({"openclawVersion": "2026.1.0"}, settings())
        assert version is not None and version.major == 2026
        assert source == VersionSource.CONFIG

    def test_state_file(self, settings, no_binary, state_dir):
        (state_dir / "version").write_text("2025.11.3\n")
        version, source = detect_version({}, settings())
        assert version is not None and version.raw == "2025.11.3"
        assert source == VersionSource.STATE

    def test_state_json_file(self, settings, no_binary, state_dir):
        (state_dir / "about.json").write_text(json.dumps({"appVersion": "2.1.0"}))
        version, source = detect_version({}, settings())
        assert version is not None and version.major == 2
        assert source == VersionSource.STATE

    def test_package_json(self, settings, no_binary, isolated_cwd):
        pkg = isolated_cwd / "node_modules" / "openclaw"
        pkg.mkdir(parents=True)
        (pkg / "package.json").write_text(json.dumps({"name": "openclaw", "version": "2026.3.0"}))
        version, source = detect_version({}, settings())
        assert version is not None and version.raw == "2026.3.0"
        assert source == VersionSource.PACKAGE

    def test_disabled_detection_skips_probes(self, settings, monkeypatch, state_dir):
        def fail(*args, **kwargs):
            raise AssertionError("probe should not run")

        monkeypatch.setattr(probes, "run_command", fail)
        (state_dir / "version").write_text("2025.11.3\n")
        version, source = detect_version({}, settings(disable_version_detect=True))
        assert version is None
        assert source == VersionSource.UNKNOWN

        version, source = detect_version({"version": "1.2.3"}, settings(disable_version_detect=True))
        assert source == VersionSource.CONFIG

    def test_nothing_found(self, settings, no_binary):
        assert detect_version({}, settings()) == (None, VersionSource.UNKNOWN)


class TestBuildScanContext:
    """Context assembly."""

    def test_paths_schema_and_text(self, settings, no_binary, state_dir):
        ctx = build_scan_context({"gateway": {"bind": "loopback"}}, settings(), config_text="{}", waivers=())
        assert ctx.state_dir == state_dir
        assert ctx.config_path == state_dir / "openclaw.json"
        assert ctx.schema == SchemaDialect.CURRENT
        assert ctx.config_text == "{}"

    def test_version_drives_schema_when_fields_are_silent(self, settings, no_binary):
        ctx = build_scan_context({}, settings(version_override="1.4.0"), waivers=())
        assert ctx.schema == SchemaDialect.LEGACY

    def test_waivers_loaded_from_store(self, settings, no_binary):
        s = settings()
        WaiverStore(s.waiver_path).add("NET002", "VPN", datetime.now(timezone.utc) + timedelta(days=1))
        ctx = build_scan_context({}, s)
        assert [w.code for w in ctx.waivers] == ["NET002"]

    def test_explicit_waivers(self, settings, no_binary):
        waiver = Waiver(code="RUN001", reason="r", expires_at=datetime.now(timezone.utc) + timedelta(days=1))
        ctx = build_scan_context({}, settings(), waivers=[waiver])
        assert ctx.waivers == (waiver,)


class TestVersionBanner:
    """Banner text shared by reporters."""

    def test_known_version(self, settings, no_binary):
        ctx = build_scan_context({}, settings(version_override="2026.1.5"), waivers=())
        assert format_version_banner(ctx) == "OpenClaw: 2026.1.5 (schema: current, source: cli)"

    def test_unknown_version(self, make_context):
        assert format_version_banner(make_context()) == "OpenClaw: unknown (schema: unknown)"
