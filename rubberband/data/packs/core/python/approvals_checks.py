# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Execution-approval checks (APPROVALS001–APPROVALS006).

The approvals record lives at ``<state dir>/exec-approvals.json`` and is
owned by the product, not by this tool::

    {
      defaults: {security: "allowlist", ask: "on-miss", askFallback: "deny", safeBins: []},
      agents: {main: {security: "full"}},
    }
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import json5

from rubberband.config.constants import RubberbandConstants
from rubberband.core import probes
from rubberband.core.models import Finding, SchemaDialect, Severity
from rubberband.core.schema import as_dict, as_list

if TYPE_CHECKING:
    from pathlib import Path

    from rubberband.core.models import ScanContext
    from rubberband.core.scan_policy import ScanPolicy

logger = logging.getLogger(__name__)


def is_exec_allowed(config: dict[str, Any], policy: ScanPolicy) -> bool:
    """Return True when the exec tool is effectively enabled and not explicitly denied."""
    tools = as_dict(config.get("tools"))
    deny = as_list(tools.get("deny"))
    if any(marker in deny for marker in policy.approvals.deny_markers):
        return False

    security = as_dict(tools.get("exec")).get("security")
    if security == "deny":
        return False
    if security in ("allowlist", "full"):
        return True

    if "exec" in as_list(tools.get("allow")):
        return True

    return bool(as_dict(config.get("shell")).get("enabled"))


def _is_set(value: Any) -> bool:
    # An empty block still counts as configured; only null, false, 0 and "" do not
    return isinstance(value, (dict, list)) or bool(value)


def _has_exec_signals(config: dict[str, Any], context: ScanContext) -> bool:
    return (
        context.schema == SchemaDialect.CURRENT
        or _is_set(as_dict(config.get("approvals")).get("exec"))
        or _is_set(as_dict(config.get("tools")).get("exec"))
        or bool(as_dict(config.get("shell")).get("enabled"))
    )


def check_approvals(config: dict[str, Any], context: ScanContext, policy: ScanPolicy) -> list[Finding]:
    """Check the exec approvals record and the approvals.exec config block."""
    findings: list[Finding] = []
    if not _has_exec_signals(config, context):
        return findings

    approvals_path = context.state_dir / RubberbandConstants.APPROVALS_FILENAME
    approvals_exists = probes.file_exists(approvals_path)

    if not approvals_exists:
        if is_exec_allowed(config, policy):
            findings.append(
                Finding(
                    code="APPROVALS001",
                    severity=Severity.HIGH,
                    title="Exec approvals file missing",
                    detail="Exec tool appears enabled but no approvals file was found.",
                    recommendation=f'Create {approvals_path} or set tools.exec.security to "deny"',
                    fixable=False,
                    path=str(approvals_path),
                )
            )
    else:
        findings.extend(_check_approvals_file(approvals_path, policy))

    findings.extend(_check_exec_targets(config))
    return findings


def _check_approvals_file(approvals_path: Path, policy: ScanPolicy) -> list[Finding]:
    text = probes.read_text(approvals_path)
    approvals: Any = None
    if text is not None:
        try:
            approvals = json5.loads(text)
        except ValueError as e:
            logger.debug("Could not parse %s: %s", approvals_path, e)

    if not isinstance(approvals, dict):
        return [
            Finding(
                code="APPROVALS005",
                severity=Severity.MEDIUM,
                title="Exec approvals file could not be parsed",
                detail=f"Rubberband could not parse {approvals_path.name}.",
                recommendation=f"Validate {approvals_path} for JSON5 syntax errors",
                fixable=False,
                path=str(approvals_path),
            )
        ]

    findings: list[Finding] = []
    unrestricted = policy.approvals.unrestricted_modes
    defaults = as_dict(approvals.get("defaults"))

    security = defaults.get("security")
    if isinstance(security, str) and security in unrestricted:
        findings.append(
            Finding(
                code="APPROVALS002",
                severity=Severity.HIGH,
                title="Exec approvals allow unrestricted execution",
                detail=f'Default exec approvals security is set to "{security}".',
                recommendation='Set defaults.security to "allowlist" or "deny"',
                fixable=False,
                path=f"{approvals_path}:defaults.security",
            )
        )

    fallback = defaults.get("askFallback")
    if isinstance(fallback, str) and fallback in unrestricted:
        findings.append(
            Finding(
                code="APPROVALS003",
                severity=Severity.MEDIUM,
                title="Exec approvals fallback is unrestricted",
                detail=f'Default exec approvals askFallback is set to "{fallback}".',
                recommendation='Set defaults.askFallback to "deny" or "allowlist"',
                fixable=False,
                path=f"{approvals_path}:defaults.askFallback",
            )
        )

    for agent, agent_config in as_dict(approvals.get("agents")).items():
        agent_security = as_dict(agent_config).get("security")
        if isinstance(agent_security, str) and agent_security in unrestricted:
            findings.append(
                Finding(
                    code="APPROVALS004",
                    severity=Severity.MEDIUM,
                    title=f"Agent {agent} has unrestricted exec approvals",
                    detail=f'Exec approvals for agent "{agent}" are set to "{agent_security}".',
                    recommendation='Set agent security to "allowlist" or "deny"',
                    fixable=False,
                    path=f"{approvals_path}:agents.{agent}.security",
                )
            )

    return findings


def _check_exec_targets(config: dict[str, Any]) -> list[Finding]:
    exec_approval = as_dict(as_dict(config.get("approvals")).get("exec"))
    if not exec_approval.get("enabled"):
        return []
    mode = exec_approval.get("mode") or "session"
    if mode in ("targets", "both") and not as_list(exec_approval.get("targets")):
        return [
            Finding(
                code="APPROVALS006",
                severity=Severity.LOW,
                title="Exec approvals enabled without targets",
                detail=f'Exec approvals are enabled in "{mode}" mode but no targets are configured.',
                recommendation='Set approvals.exec.targets or switch mode to "session"',
                fixable=False,
                path="approvals.exec.targets",
            )
        ]
    return []
