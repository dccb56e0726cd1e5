# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Installed-extension risk checks (SKILL001–SKILL006).

Per-extension findings carry ``skills.<name>`` as their path; the two
aggregated findings (SKILL003, SKILL006) carry ``skills``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rubberband.core.models import Finding, Severity
from rubberband.core.schema import as_dict, as_list

if TYPE_CHECKING:
    from rubberband.core.models import ScanContext
    from rubberband.core.scan_policy import ScanPolicy


def _is_third_party(skill: dict[str, Any], policy: ScanPolicy) -> bool:
    source = skill.get("source")
    return isinstance(source, str) and bool(source) and not source.startswith(policy.skills.official_source_prefix)


def check_skills(config: dict[str, Any], context: ScanContext, policy: ScanPolicy) -> list[Finding]:
    """Check installed skills against known-bad lists, permissions and provenance."""
    findings: list[Finding] = []

    unverified: list[str] = []
    # Keyed by name: a repeated skill keeps its first position and its last permissions
    dangerous: dict[str, list[str]] = {}
    heartbeat_fetchers: list[str] = []

    for skill in as_list(config.get("skills")):
        if not isinstance(skill, dict):
            continue
        name = str(skill.get("name") or "<unnamed>")
        path = f"skills.{name}"

        if name in policy.skills.known_malicious:
            findings.append(
                Finding(
                    code="SKILL001",
                    severity=Severity.CRITICAL,
                    title=f"Malicious skill detected: {name}",
                    detail=f'The skill "{name}" is on the known malicious skills list.',
                    recommendation="Remove this skill immediately",
                    fixable=False,
                    path=path,
                )
            )
            # A malicious entry gets no further per-skill findings
            continue

        if name in policy.skills.known_risky:
            findings.append(
                Finding(
                    code="SKILL002",
                    severity=Severity.HIGH,
                    title=f"Risky skill installed: {name}",
                    detail=(
                        f'The skill "{name}" fetches external instructions periodically, '
                        "which could be used for injection."
                    ),
                    recommendation="Review this skill carefully or remove it",
                    fixable=False,
                    path=path,
                )
            )

        third_party = _is_third_party(skill, policy)
        if third_party and not skill.get("verified"):
            unverified.append(name)

        declared = [p for p in as_list(skill.get("permissions")) if isinstance(p, str)]
        risky_permissions = [p for p in declared if p in policy.skills.dangerous_permissions]
        if risky_permissions:
            dangerous[name] = risky_permissions

        if as_dict(skill.get("heartbeat")).get("url"):
            heartbeat_fetchers.append(name)

        if third_party and not skill.get("checksum"):
            findings.append(
                Finding(
                    code="SKILL005",
                    severity=Severity.LOW,
                    title=f'Skill "{name}" has no checksum',
                    detail="Cannot verify skill integrity without checksum.",
                    recommendation="Add checksum verification for this skill",
                    fixable=False,
                    path=path,
                )
            )

    if unverified:
        findings.append(
            Finding(
                code="SKILL003",
                severity=Severity.MEDIUM,
                title=f"{len(unverified)} skills installed from community sources",
                detail=f"Unverified skills: {', '.join(unverified)}",
                recommendation=f"Review: {', '.join(unverified)}",
                fixable=False,
                path="skills",
            )
        )

    for name, permissions in dangerous.items():
        findings.append(
            Finding(
                code="SKILL004",
                severity=Severity.HIGH,
                title=f'Skill "{name}" has dangerous permissions',
                detail=f"Permissions: {', '.join(permissions)}",
                recommendation="Review if these permissions are necessary",
                fixable=False,
                path=f"skills.{name}",
            )
        )

    if heartbeat_fetchers:
        findings.append(
            Finding(
                code="SKILL006",
                severity=Severity.MEDIUM,
                title="Skills fetch external URLs via heartbeat",
                detail=f"Skills with external heartbeat: {', '.join(heartbeat_fetchers)}",
                recommendation="Review heartbeat URLs for safety",
                fixable=False,
                path="skills",
            )
        )

    return findings
