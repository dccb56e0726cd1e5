# Copyright 2026 Cisco Systems, Inc.
# SPDX-License-Identifier: Apache-2.0

"""Tests for configuration consistency issues (CFG001-CFG008)."""

from rubberband.core.models import SchemaDialect
from rubberband.core.validator import validate_config


def _codes(issues):
    return [i.code for i in issues]


class TestDialectMixing:
    """Warnings for fields from the other dialect."""

    def test_clean_current_config(self, make_context):
        config = {"gateway": {"bind": "loopback", "auth": {"token": "t"}}, "channels": {"a": {"dmPolicy": "pairing"}}}
        assert validate_config(config, make_context(schema=SchemaDialect.CURRENT)) == []

    def test_legacy_dm_in_current_schema(self, make_context):
        config = {"channels": {"a": {"dm": {"policy": "open"}}}}
        issues = validate_config(config, make_context(schema=SchemaDialect.CURRENT))
        assert _codes(issues) == ["CFG001"]
        assert issues[0].level == "warning"

    def test_current_dm_in_legacy_schema(self, make_context):
        config = {"channels": {"a": {"dmPolicy": "open"}}}
        assert _codes(validate_config(config, make_context(schema=SchemaDialect.LEGACY))) == ["CFG002"]

    def test_both_dm_forms(self, make_context):
        config = {"channels": {"a": {"dmPolicy": "open"}, "b": {"dm": {"policy": "open"}}}}
        assert _codes(validate_config(config, make_context())) == ["CFG003"]

    def test_webhooks_and_hooks(self, make_context):
        assert _codes(validate_config({"webhooks": {}}, make_context(schema=SchemaDialect.CURRENT))) == ["CFG004"]
        assert _codes(validate_config({"hooks": {}}, make_context(schema=SchemaDialect.LEGACY))) == ["CFG005"]

    def test_auth_token_forms(self, make_context):
        current = validate_config({"gateway": {"authToken": "t"}}, make_context(schema=SchemaDialect.CURRENT))
        legacy = validate_config({"gateway": {"auth": {"token": "t"}}}, make_context(schema=SchemaDialect.LEGACY))
        assert _codes(current) == ["CFG006"]
        assert _codes(legacy) == ["CFG007"]


class TestHooksToken:
    """CFG008 is the only error-level issue."""

    def test_enabled_hooks_without_token(self, make_context):
        issues = validate_config({"hooks": {"enabled": True}}, make_context(schema=SchemaDialect.CURRENT))
        assert _codes(issues) == ["CFG008"]
        assert issues[0].level == "error"
        assert issues[0].path == "hooks.token"


class TestLineNumbers:
    """Line hints come from the raw text."""

    def test_line_of_last_path_segment(self, make_context):
        raw = '{\n  "gateway": {\n    "authToken": "t"\n  }\n}\n'
        issues = validate_config({"gateway": {"authToken": "t"}}, make_context(schema=SchemaDialect.CURRENT), raw)
        assert issues[0].line == 3

    def test_unquoted_json5_key(self, make_context):
        raw = "{\n  // legacy\n  webhooks: {enabled: true},\n}\n"
        issues = validate_config({"webhooks": {"enabled": True}}, make_context(schema=SchemaDialect.CURRENT), raw)
        assert issues[0].line == 3

    def test_falls_back_to_context_text(self, make_context):
        raw = '{"webhooks": {}}'
        ctx = make_context(schema=SchemaDialect.CURRENT, config_text=raw)
        assert validate_config({"webhooks": {}}, ctx)[0].line == 1

    def test_no_text_no_line(self, make_context):
        issues = validate_config({"webhooks": {}}, make_context(schema=SchemaDialect.CURRENT))
        assert issues[0].line is None


def test_empty_config(make_context):
    for schema in SchemaDialect:
        assert validate_config({}, make_context(schema=schema)) == []
