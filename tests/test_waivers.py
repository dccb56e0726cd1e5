# Copyright 2026 Cisco Systems, Inc.
# SPDX-License-Identifier: Apache-2.0

"""Tests for the waiver filter, expiry parsing and the waiver store."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from rubberband.core.exceptions import WaiverError
from rubberband.core.models import Finding, Severity, Waiver
from rubberband.core.waivers import WaiverStore, apply_waivers, parse_expiry

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
LATER = NOW + timedelta(days=7)


def _finding(code: str, path: str | None = None) -> Finding:
    return Finding(code=code, severity=Severity.MEDIUM, title=code, detail="", recommendation="", path=path)


class TestApplyWaivers:
    """Matching by code and optional path."""

    def test_no_waivers(self):
        findings = [_finding("NET002")]
        assert apply_waivers(findings, []) == (findings, 0)

    def test_code_match_without_path_matches_any_path(self):
        findings = [_finding("ACCESS002", "channels.a.allowFrom"), _finding("ACCESS002", "channels.b.allowFrom")]
        kept, waived = apply_waivers(findings, [Waiver(code="ACCESS002", reason="r", expires_at=LATER)])
        assert kept == []
        assert waived == 2

    def test_path_scoped_waiver(self):
        a = _finding("ACCESS002", "channels.a.allowFrom")
        b = _finding("ACCESS002", "channels.b.allowFrom")
        waiver = Waiver(code="ACCESS002", reason="r", expires_at=LATER, path="channels.a.allowFrom")
        assert apply_waivers([a, b], [waiver]) == ([b], 1)

    def test_order_is_preserved(self):
        findings = [_finding("A"), _finding("B"), _finding("C"), _finding("D")]
        kept, waived = apply_waivers(findings, [Waiver(code="B", reason="r", expires_at=LATER)])
        assert [f.code for f in kept] == ["A", "C", "D"]
        assert waived == 1

    def test_filter_does_no_time_comparison(self):
        expired = Waiver(code="A", reason="r", expires_at=NOW - timedelta(days=365))
        assert apply_waivers([_finding("A")], [expired]) == ([], 1)


class TestParseExpiry:
    """Relative durations and ISO dates."""

    @pytest.mark.parametrize(
        ("value", "delta"),
        [("12h", timedelta(hours=12)), ("7d", timedelta(days=7)), ("2w", timedelta(weeks=2)), (" 3D ", timedelta(days=3))],
    )
    def test_relative(self, value, delta):
        assert parse_expiry(value, now=NOW) == NOW + delta

    def test_iso_date(self):
        assert parse_expiry("2026-04-01", now=NOW) == datetime(2026, 4, 1, tzinfo=timezone.utc)

    def test_iso_datetime_with_z(self):
        assert parse_expiry("2026-04-01T10:30:00Z", now=NOW) == datetime(2026, 4, 1, 10, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["", "soon", "7x", "2026-13-01"])
    def test_invalid(self, value):
        with pytest.raises(WaiverError):
            parse_expiry(value, now=NOW)

    @pytest.mark.parametrize("value", ["99999999d", "9999999999999999999999w"])
    def test_out_of_range_relative_expiry(self, value):
        with pytest.raises(WaiverError, match="Invalid expiry"):
            parse_expiry(value, now=NOW)


class TestWaiverStore:
    """CRUD on ``waivers.json``."""

    def test_missing_store_is_empty(self, tmp_path):
        assert WaiverStore(tmp_path / "rubberband" / "waivers.json").load() == []

    def test_add_list_remove(self, tmp_path):
        store = WaiverStore(tmp_path / "rubberband" / "waivers.json")
        future = datetime.now(timezone.utc) + timedelta(days=30)

        waiver = store.add("net002", "VPN only", future)
        assert waiver.code == "NET002"
        store.add("ACCESS002", "family group", future, path="channels.a.allowFrom")
        store.add("ACCESS002", "work group", future, path="channels.b.allowFrom")

        assert [w.code for w in store.list()] == ["NET002", "ACCESS002", "ACCESS002"]

        assert store.remove("ACCESS002", path="channels.a.allowFrom") == 1
        assert [w.path for w in store.list()] == [None, "channels.b.allowFrom"]

        assert store.remove("access002") == 1
        assert store.remove("ACCESS002") == 0
        assert [w.code for w in store.list()] == ["NET002"]

    def test_file_format(self, tmp_path):
        path = tmp_path / "waivers.json"
        store = WaiverStore(path)
        store.add("NET002", "VPN only", datetime(2099, 1, 1, tzinfo=timezone.utc))
        data = json.loads(path.read_text())
        assert list(data) == ["waivers"]
        record = data["waivers"][0]
        assert record["code"] == "NET002"
        assert record["reason"] == "VPN only"
        assert record["expiresAt"] == "2099-01-01T00:00:00+00:00"
        assert "createdAt" in record
        assert "path" not in record

    def test_expired_and_invalid_records_are_dropped(self, tmp_path):
        path = tmp_path / "waivers.json"
        path.write_text(
            json.dumps(
                {
                    "waivers": [
                        {"code": "A", "reason": "r", "expiresAt": "2099-01-01T00:00:00Z"},
                        {"code": "B", "reason": "r", "expiresAt": "2000-01-01T00:00:00Z"},
                        {"code": "C", "reason": "r", "expiresAt": "not a date"},
                        {"reason": "no code", "expiresAt": "2099-01-01T00:00:00Z"},
                    ]
                }
            )
        )
        assert [w.code for w in WaiverStore(path).load()] == ["A"]

    @pytest.mark.parametrize("created", ["not-a-date", 42, ""])
    def test_unreadable_created_at_falls_back_to_expiry(self, tmp_path, created):
        path = tmp_path / "waivers.json"
        record = {"code": "NET002", "reason": "vpn", "createdAt": created, "expiresAt": "2099-01-01T00:00:00Z"}
        path.write_text(json.dumps({"waivers": [record]}))
        [waiver] = WaiverStore(path).load()
        assert waiver.code == "NET002"
        assert waiver.created_at == waiver.expires_at

    def test_expired_waiver_has_no_effect_after_load(self, tmp_path):
        path = tmp_path / "waivers.json"
        path.write_text(json.dumps({"waivers": [{"code": "A", "reason": "r", "expiresAt": "2000-01-01"}]}))
        assert apply_waivers([_finding("A")], WaiverStore(path).load()) == ([_finding("A")], 0)

    def test_mutation_drops_expired_records(self, tmp_path):
        path = tmp_path / "waivers.json"
        path.write_text(json.dumps({"waivers": [{"code": "OLD", "reason": "r", "expiresAt": "2000-01-01"}]}))
        store = WaiverStore(path)
        store.add("NEW", "r", datetime(2099, 1, 1, tzinfo=timezone.utc))
        assert [r["code"] for r in json.loads(path.read_text())["waivers"]] == ["NEW"]

    @pytest.mark.parametrize("content", ["{broken", "[]", '{"waivers": "x"}'])
    def test_malformed_store_is_empty(self, tmp_path, content):
        path = tmp_path / "waivers.json"
        path.write_text(content)
        assert WaiverStore(path).load() == []

    @pytest.mark.parametrize(("code", "reason"), [("", "r"), ("NET002", "  ")])
    def test_add_requires_code_and_reason(self, tmp_path, code, reason):
        with pytest.raises(WaiverError):
            WaiverStore(tmp_path / "w.json").add(code, reason, LATER)
