# Copyright 2026 Cisco Systems, Inc.
# SPDX-License-Identifier: Apache-2.0

"""Tests for dialect detection, version parsing and field resolvers."""

import pytest

from rubberband.core.models import SchemaDialect
from rubberband.core.schema import (
    dm_policy_field,
    get_path,
    parse_version,
    resolve_auth_token,
    resolve_dialect,
    resolve_dm_policy,
    resolve_webhook_config,
    set_dm_policy,
)


class TestParseVersion:
    """Version strings from the CLI, env and package files."""

    def test_calendar_version(self):
        info = parse_version("2026.1.5")
        assert info is not None
        assert (info.major, info.minor, info.patch) == (2026, 1, 5)
        assert info.format == "date"

    def test_semver_with_prefix(self):
        info = parse_version("v1.9.0")
        assert info is not None
        assert info.major == 1
        assert info.format == "semver"

    def test_package_style_prefix(self):
        info = parse_version("openclaw@2.0.1-beta.3")
        assert info is not None
        assert (info.major, info.minor, info.patch) == (2, 0, 1)

    def test_raw_is_trimmed(self):
        info = parse_version("  2026.2.0\n")
        assert info is not None
        assert info.raw == "2026.2.0"

    @pytest.mark.parametrize("raw", [None, "", "   ", "latest"])
    def test_unparseable(self, raw):
        assert parse_version(raw) is None


class TestResolveDialect:
    """Field evidence first, then version evidence."""

    def test_empty_config_is_unknown(self):
        assert resolve_dialect({}) == SchemaDialect.UNKNOWN

    def test_current_fields(self):
        assert resolve_dialect({"gateway": {"bind": "loopback"}}) == SchemaDialect.CURRENT
        assert resolve_dialect({"gateway": {"auth": {"token": "t"}}}) == SchemaDialect.CURRENT
        assert resolve_dialect({"channels": {"a": {"dmPolicy": "open"}}}) == SchemaDialect.CURRENT
        assert resolve_dialect({"hooks": {}}) == SchemaDialect.CURRENT

    def test_legacy_fields(self):
        assert resolve_dialect({"gateway": {"authToken": "t"}}) == SchemaDialect.LEGACY
        assert resolve_dialect({"channels": {"a": {"dm": {"policy": "open"}}}}) == SchemaDialect.LEGACY
        assert resolve_dialect({"webhooks": {"enabled": True}}) == SchemaDialect.LEGACY

    def test_current_fields_win_over_legacy(self):
        config = {"gateway": {"authToken": "t", "bind": "lan"}}
        assert resolve_dialect(config) == SchemaDialect.CURRENT

    def test_fields_win_over_version(self):
        assert resolve_dialect({"webhooks": {}}, parse_version("2026.1.0")) == SchemaDialect.LEGACY

    def test_version_fallback(self):
        assert resolve_dialect({}, parse_version("2026.1.0")) == SchemaDialect.CURRENT
        assert resolve_dialect({}, parse_version("2025.12.1")) == SchemaDialect.LEGACY
        assert resolve_dialect({}, parse_version("2.0.0")) == SchemaDialect.CURRENT
        assert resolve_dialect({}, parse_version("1.4.2")) == SchemaDialect.LEGACY


class TestFieldResolvers:
    """Dialect-aware readers and writers."""

    def test_auth_token_prefers_dialect_field(self):
        gateway = {"authToken": "legacy", "auth": {"token": "current"}}
        assert resolve_auth_token(gateway, SchemaDialect.LEGACY) == "legacy"
        assert resolve_auth_token(gateway, SchemaDialect.CURRENT) == "current"
        assert resolve_auth_token(gateway, SchemaDialect.UNKNOWN) == "current"

    def test_auth_token_falls_back_to_other_dialect(self):
        assert resolve_auth_token({"authToken": "x"}, SchemaDialect.CURRENT) == "x"
        assert resolve_auth_token({}, SchemaDialect.CURRENT) is None

    def test_dm_policy_resolution(self):
        channel = {"dmPolicy": "pairing", "dm": {"policy": "open"}}
        assert resolve_dm_policy(channel, SchemaDialect.LEGACY) == "open"
        assert resolve_dm_policy(channel, SchemaDialect.UNKNOWN) == "pairing"

    def test_dm_policy_field_follows_populated_field(self):
        assert dm_policy_field({"dm": {"policy": "open"}}, SchemaDialect.UNKNOWN) == "dm.policy"
        assert dm_policy_field({}, SchemaDialect.LEGACY) == "dm.policy"
        assert dm_policy_field({}, SchemaDialect.CURRENT) == "dmPolicy"

    def test_set_dm_policy_writes_the_field_that_is_read(self):
        channel = {"dm": {"policy": "open"}}
        set_dm_policy(channel, SchemaDialect.UNKNOWN, "pairing")
        assert channel == {"dm": {"policy": "pairing"}}
        assert resolve_dm_policy(channel, SchemaDialect.UNKNOWN) == "pairing"

    def test_set_dm_policy_creates_legacy_block(self):
        channel: dict = {}
        set_dm_policy(channel, SchemaDialect.LEGACY, "pairing")
        assert channel == {"dm": {"policy": "pairing"}}

    def test_webhook_config_by_dialect(self):
        config = {"hooks": {"enabled": True}, "webhooks": {"enabled": True, "requireAuth": True}}
        current = resolve_webhook_config(config, SchemaDialect.CURRENT)
        legacy = resolve_webhook_config(config, SchemaDialect.LEGACY)
        assert current is not None and current.path == "hooks.token" and not current.has_auth
        assert legacy is not None and legacy.path == "webhooks.requireAuth" and legacy.has_auth

    def test_webhook_config_absent(self):
        assert resolve_webhook_config({}, SchemaDialect.UNKNOWN) is None
        assert resolve_webhook_config({"hooks": {}}, SchemaDialect.LEGACY) is None

    def test_get_path_tolerates_partial_trees(self):
        assert get_path({"a": {"b": 1}}, "a.b") == 1
        assert get_path({"a": 1}, "a.b") is None
        assert get_path({}, "a.b.c") is None
