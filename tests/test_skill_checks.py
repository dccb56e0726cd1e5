# Copyright 2026 Cisco Systems, Inc.
# SPDX-License-Identifier: Apache-2.0

"""Tests for installed skill checks (SKILL001-SKILL006)."""

from rubberband.core.models import Severity
from rubberband.data.packs.core.python.skill_checks import check_skills


def _codes(findings):
    return [f.code for f in findings]


class TestKnownSkills:
    """SKILL001/SKILL002: known malicious and risky skills."""

    def test_malicious_skill_is_the_only_finding(self, make_context, policy):
        config = {"skills": [{"name": "crypto-miner-helper", "source": "community"}]}
        findings = check_skills(config, make_context(), policy)
        assert _codes(findings) == ["SKILL001"]
        assert findings[0].severity == Severity.CRITICAL
        assert findings[0].path == "skills.crypto-miner-helper"

    def test_risky_skill(self, make_context, policy):
        config = {"skills": [{"name": "moltbook-skill", "source": "official:moltbook"}]}
        findings = check_skills(config, make_context(), policy)
        assert _codes(findings) == ["SKILL002"]
        assert findings[0].severity == Severity.HIGH


class TestProvenance:
    """SKILL003/SKILL005: community skills without verification or checksum."""

    def test_unverified_skills_are_aggregated(self, make_context, policy):
        config = {
            "skills": [
                {"name": "alpha", "source": "community:a", "checksum": "sha256:1"},
                {"name": "beta", "source": "community:b", "checksum": "sha256:2"},
            ]
        }
        findings = check_skills(config, make_context(), policy)
        assert _codes(findings) == ["SKILL003"]
        assert findings[0].title == "2 skills installed from community sources"
        assert findings[0].detail == "Unverified skills: alpha, beta"
        assert findings[0].path == "skills"

    def test_missing_checksum(self, make_context, policy):
        config = {"skills": [{"name": "alpha", "source": "community:a", "verified": True}]}
        findings = check_skills(config, make_context(), policy)
        assert _codes(findings) == ["SKILL005"]
        assert findings[0].severity == Severity.LOW

    def test_official_skills_are_trusted(self, make_context, policy):
        config = {"skills": [{"name": "calendar", "source": "official:calendar"}]}
        assert check_skills(config, make_context(), policy) == []

    def test_skill_without_source_is_not_third_party(self, make_context, policy):
        assert check_skills({"skills": [{"name": "local"}]}, make_context(), policy) == []


class TestPermissionsAndHeartbeat:
    """SKILL004/SKILL006."""

    def test_dangerous_permissions(self, make_context, policy):
        config = {"skills": [{"name": "fs", "permissions": ["filesystem:read", "filesystem:delete", "shell:execute"]}]}
        findings = check_skills(config, make_context(), policy)
        assert _codes(findings) == ["SKILL004"]
        assert findings[0].detail == "Permissions: filesystem:delete, shell:execute"

    def test_repeated_skill_name_reported_once(self, make_context, policy):
        config = {
            "skills": [
                {"name": "dup", "permissions": ["shell:execute"]},
                {"name": "other", "permissions": ["shell:execute"]},
                {"name": "dup", "permissions": ["filesystem:delete"]},
            ]
        }
        findings = [f for f in check_skills(config, make_context(), policy) if f.code == "SKILL004"]
        assert [f.path for f in findings] == ["skills.dup", "skills.other"]
        assert findings[0].detail == "Permissions: filesystem:delete"

    def test_heartbeat_fetchers(self, make_context, policy):
        config = {
            "skills": [
                {"name": "a", "heartbeat": {"url": "https://example.com/a"}},
                {"name": "b", "heartbeat": {"intervalMinutes": 5}},
            ]
        }
        findings = check_skills(config, make_context(), policy)
        assert _codes(findings) == ["SKILL006"]
        assert findings[0].detail == "Skills with external heartbeat: a"


def test_skills_not_a_list(make_context, policy):
    assert check_skills({"skills": {"name": "x"}}, make_context(), policy) == []
    assert check_skills({"skills": ["x", 3, None]}, make_context(), policy) == []


def test_empty_config(make_context, policy):
    assert check_skills({}, make_context(), policy) == []
