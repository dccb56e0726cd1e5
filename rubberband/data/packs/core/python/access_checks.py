# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Per-channel access-control checks (ACCESS001–ACCESS003).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rubberband.core.models import Finding, Severity
from rubberband.core.schema import as_dict, dm_policy_field, resolve_dm_policy

if TYPE_CHECKING:
    from rubberband.core.models import ScanContext
    from rubberband.core.scan_policy import ScanPolicy


def dm_policy_path(channel_name: str, channel: dict[str, Any], context: ScanContext) -> str:
    return f"channels.{channel_name}.{dm_policy_field(channel, context.schema)}"


def mention_path(channel_name: str, group_name: str) -> str:
    return f"channels.{channel_name}.groups.{group_name}.requireMention"


def check_access(config: dict[str, Any], context: ScanContext, policy: ScanPolicy) -> list[Finding]:
    """Check DM policies, allowFrom lists and group mention requirements."""
    findings: list[Finding] = []

    for channel_name, channel in as_dict(config.get("channels")).items():
        if not isinstance(channel, dict):
            continue

        dm_policy = resolve_dm_policy(channel, context.schema)
        if dm_policy == "open":
            path = dm_policy_path(channel_name, channel, context)
            findings.append(
                Finding(
                    code="ACCESS001",
                    severity=Severity.HIGH,
                    title=f"{channel_name}: DM policy allows unknown senders",
                    detail=f'Channel {channel_name} has its DM policy set to "open", allowing anyone to send commands.',
                    recommendation=f'Set {path} to "pairing" or "allowlist"',
                    fixable=True,
                    path=path,
                )
            )

        allow_from = channel.get("allowFrom")
        has_allow_list = isinstance(allow_from, list) and len(allow_from) > 0
        if not has_allow_list and dm_policy != "allowlist":
            findings.append(
                Finding(
                    code="ACCESS002",
                    severity=Severity.MEDIUM,
                    title=f"{channel_name}: No allowFrom restrictions",
                    detail=f"Channel {channel_name} has no allowFrom list configured.",
                    recommendation=f"Configure channels.{channel_name}.allowFrom with trusted identifiers",
                    fixable=False,
                    path=f"channels.{channel_name}.allowFrom",
                )
            )

        for group_name, group in as_dict(channel.get("groups")).items():
            if not isinstance(group, dict) or group.get("requireMention"):
                continue
            path = mention_path(channel_name, group_name)
            findings.append(
                Finding(
                    code="ACCESS003",
                    severity=Severity.MEDIUM,
                    title=f"{channel_name}/{group_name}: Mention not required",
                    detail=(
                        f"Group {group_name} in {channel_name} does not require @mention, "
                        "bot responds to all messages."
                    ),
                    recommendation=f"Set {path} to true",
                    fixable=True,
                    path=path,
                )
            )

    return findings
