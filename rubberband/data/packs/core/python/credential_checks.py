# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Credential hygiene checks (CRED001–CRED004).

File modes come from :mod:`rubberband.core.probes`; a path that cannot be
stat'ed simply produces no finding.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rubberband.config.constants import RubberbandConstants
from rubberband.core import probes
from rubberband.core.models import Finding, Severity

from ._helpers import line_of_offset

if TYPE_CHECKING:
    from rubberband.core.models import ScanContext
    from rubberband.core.scan_policy import ScanPolicy


def check_credentials(config: dict[str, Any], context: ScanContext, policy: ScanPolicy) -> list[Finding]:
    """Check config/.env/state-dir permissions and plaintext API keys."""
    findings: list[Finding] = []
    required = policy.credentials.required_file_mode
    config_path = context.config_path
    state_dir = context.state_dir

    config_mode = probes.get_file_mode(config_path)
    if config_mode and config_mode != required:
        findings.append(
            Finding(
                code="CRED001",
                severity=Severity.HIGH,
                title="Config file has weak permissions",
                detail=f"{config_path} has permissions {config_mode}, should be {required}.",
                recommendation=f"Run: chmod {required} {config_path}",
                fixable=True,
                path=str(config_path),
            )
        )

    findings.extend(_check_plaintext_keys(context, policy))

    env_path = state_dir / RubberbandConstants.ENV_FILENAME
    env_mode = probes.get_file_mode(env_path)
    if env_mode and env_mode != required:
        findings.append(
            Finding(
                code="CRED003",
                severity=Severity.HIGH,
                title=".env file has weak permissions",
                detail=f"{env_path} has permissions {env_mode}, should be {required}.",
                recommendation=f"Run: chmod {required} {env_path}",
                fixable=True,
                path=str(env_path),
            )
        )

    state_mode = probes.get_file_mode(state_dir)
    if state_mode and state_mode[-1] != "0":
        findings.append(
            Finding(
                code="CRED004",
                severity=Severity.MEDIUM,
                title="State directory accessible by others",
                detail=f"{state_dir} has permissions {state_mode}, allowing access to other users.",
                recommendation=f"Run: chmod 700 {state_dir}",
                fixable=True,
                path=str(state_dir),
            )
        )

    return findings


def _check_plaintext_keys(context: ScanContext, policy: ScanPolicy) -> list[Finding]:
    text = context.config_text
    if text is None:
        text = probes.read_text(context.config_path)
    if not text:
        return []

    findings: list[Finding] = []
    for name, pattern in policy.compiled_api_key_patterns:
        match = pattern.search(text)
        if match is None:
            continue
        line = line_of_offset(text, match.start())
        findings.append(
            Finding(
                code="CRED002",
                severity=Severity.HIGH,
                title=f"{name} API key found in config",
                detail=f"Plaintext {name} API key detected in {context.config_path.name} (line {line}).",
                recommendation="Use environment variables or a secrets manager instead",
                fixable=False,
                path=str(context.config_path),
            )
        )
    return findings
