# Copyright 2026 Cisco Systems, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""
Remediation plan reporter (``rubberband plan``).

Shows what ``harden`` would change: findings grouped by severity, a unified
diff of the configuration before and after the config fixes, and the
filesystem fixes that would run alongside them.
"""

from __future__ import annotations

import difflib
import json
from typing import Any

from ...core.context import format_version_banner
from ...core.hardener import preview_changes
from ...core.models import SEVERITY_ORDER, ScanResult, ValidationIssue


def format_validation(issues: list[ValidationIssue]) -> list[str]:
    """Render config validation issues as console lines."""
    lines = ["Config validation", ""]
    for issue in issues:
        label = "ERROR" if issue.level == "error" else "WARN"
        line_info = f" (line {issue.line})" if issue.line else ""
        lines.append(f"{label} {issue.message}{line_info}")
        if issue.path:
            lines.append(f"  → {issue.path}")
        if issue.recommendation:
            lines.append(f"  → {issue.recommendation}")
        lines.append("")
    return lines


def unified_config_diff(before: dict[str, Any], after: dict[str, Any], filename: str) -> str:
    """Return a unified diff of two configurations rendered as indented JSON."""
    before_lines = json.dumps(before, indent=2).splitlines(keepends=True)
    after_lines = json.dumps(after, indent=2).splitlines(keepends=True)
    diff = difflib.unified_diff(before_lines, after_lines, fromfile=filename, tofile=filename, n=3)
    return "".join(line if line.endswith("\n") else line + "\n" for line in diff)


class PlanReporter:
    """Generates the ``plan`` console report."""

    def __init__(self, strict: bool = False):
        """
        Initialize plan reporter.

        Args:
            strict: Include strict-only fixes in the diff preview
        """
        self.strict = strict

    def generate_report(self, result: ScanResult, config: dict[str, Any]) -> str:
        """
        Generate the plan.

        Args:
            result: ScanResult for *config*
            config: The configuration the result was computed from

        Returns:
            Plain-text report
        """
        lines = ["rubberband plan", "", format_version_banner(result.context), ""]

        if result.validation:
            lines.extend(format_validation(result.validation))

        if not result.findings:
            lines.append("No issues found. Nothing to plan.")
            return "\n".join(lines)

        for severity in SEVERITY_ORDER:
            entries = result.get_findings_by_severity(severity)
            if not entries:
                continue
            lines.append(f"{severity.value.upper()} ({len(entries)})")
            for finding in entries:
                path_info = f" [{finding.path}]" if finding.path else ""
                lines.append(f"- {finding.code}: {finding.title}{path_info}")
                lines.append(f"  → {finding.recommendation}")
            lines.append("")

        if result.waived_count:
            lines.append(f"Waived findings: {result.waived_count}")
            lines.append("")

        preview = preview_changes(config, result.findings, result.context, strict=self.strict)
        diff = unified_config_diff(config, preview.updated, str(result.context.config_path))
        if diff:
            lines.append("Config diff preview")
            lines.append("")
            lines.append(diff.rstrip("\n"))
            lines.append("")
        else:
            lines.append("No config changes to preview.")
            lines.append("")

        if preview.non_config:
            lines.append("Non-config fixes")
            for item in preview.non_config:
                lines.append(f"- {item}")
            lines.append("")

        return "\n".join(lines)
