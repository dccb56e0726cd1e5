# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Runtime hardening checks (RUN001–RUN009).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rubberband.core import probes
from rubberband.core.models import Finding, Severity
from rubberband.core.schema import as_dict

if TYPE_CHECKING:
    from rubberband.core.models import ScanContext
    from rubberband.core.scan_policy import ScanPolicy


def check_runtime(config: dict[str, Any], context: ScanContext, policy: ScanPolicy) -> list[Finding]:
    """Check logging, rate limiting, browser, shell, memory and update settings."""
    findings: list[Finding] = []

    logging_cfg = as_dict(config.get("logging"))
    level = logging_cfg.get("level")
    if isinstance(level, str) and level in policy.runtime.verbose_log_levels:
        findings.append(
            Finding(
                code="RUN001",
                severity=Severity.LOW,
                title="Verbose logging may expose message content",
                detail=f'Logging level is set to "{level}", which may log sensitive data.',
                recommendation='Set logging.level to "info" in production',
                fixable=True,
                path="logging.level",
            )
        )

    log_file = logging_cfg.get("file")
    if isinstance(log_file, str) and log_file:
        log_mode = probes.get_file_mode(log_file)
        if log_mode and log_mode not in policy.runtime.allowed_log_modes:
            findings.append(
                Finding(
                    code="RUN002",
                    severity=Severity.MEDIUM,
                    title="Log file has weak permissions",
                    detail=f"Log file {log_file} has permissions {log_mode}.",
                    recommendation=f"Run: chmod 600 {log_file}",
                    fixable=True,
                    path="logging.file",
                )
            )

    rate_limit = as_dict(config.get("rateLimit"))
    if rate_limit.get("enabled") is False:
        findings.append(
            Finding(
                code="RUN003",
                severity=Severity.MEDIUM,
                title="Rate limiting disabled",
                detail="No rate limiting allows resource exhaustion and abuse.",
                recommendation="Set rateLimit.enabled to true",
                fixable=True,
                path="rateLimit.enabled",
            )
        )

    browser = as_dict(config.get("browser"))
    if browser.get("enabled"):
        if not browser.get("sandbox"):
            findings.append(
                Finding(
                    code="RUN004",
                    severity=Severity.HIGH,
                    title="Browser sandbox disabled",
                    detail="Browser runs without sandboxing, increasing risk of escape.",
                    recommendation="Set browser.sandbox to true",
                    fixable=True,
                    path="browser.sandbox",
                )
            )
        if browser.get("headless") is False:
            findings.append(
                Finding(
                    code="RUN005",
                    severity=Severity.LOW,
                    title="Browser running in headed mode",
                    detail="Headed browser mode is typically only needed for debugging.",
                    recommendation="Set browser.headless to true in production",
                    fixable=True,
                    path="browser.headless",
                )
            )

    shell = as_dict(config.get("shell"))
    if shell.get("enabled"):
        allowed = shell.get("allowedCommands")
        if not isinstance(allowed, list) or not allowed:
            findings.append(
                Finding(
                    code="RUN006",
                    severity=Severity.CRITICAL,
                    title="Shell execution enabled without restrictions",
                    detail="Shell access is enabled with no command allowlist.",
                    recommendation="Configure shell.allowedCommands or disable shell.enabled",
                    fixable=True,
                    path="shell.allowedCommands",
                )
            )
        else:
            findings.append(
                Finding(
                    code="RUN007",
                    severity=Severity.MEDIUM,
                    title="Shell execution enabled",
                    detail=f"Shell is enabled with {len(allowed)} allowed commands.",
                    recommendation=f"Review allowed commands: {', '.join(str(c) for c in allowed)}",
                    fixable=False,
                    path="shell.allowedCommands",
                )
            )

    memory = as_dict(config.get("memory"))
    if memory.get("persistent") and not memory.get("encrypted"):
        findings.append(
            Finding(
                code="RUN008",
                severity=Severity.MEDIUM,
                title="Persistent memory not encrypted",
                detail="Memory is persisted without encryption.",
                recommendation="Set memory.encrypted to true",
                fixable=True,
                path="memory.encrypted",
            )
        )

    if as_dict(config.get("updates")).get("autoInstall"):
        findings.append(
            Finding(
                code="RUN009",
                severity=Severity.LOW,
                title="Auto-update enabled",
                detail="Automatic updates may introduce untested changes.",
                recommendation="Consider manual updates for production deployments",
                fixable=False,
                path="updates.autoInstall",
            )
        )

    return findings
