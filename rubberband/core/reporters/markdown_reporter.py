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
Markdown format reporter for scan results.
"""

from ...core.context import format_version_banner
from ...core.models import SEVERITY_ORDER, Finding, ScanResult, Severity


class MarkdownReporter:
    """Generates Markdown format reports."""

    def __init__(self, detailed: bool = True):
        """
        Initialize Markdown reporter.

        Args:
            detailed: If True, include detail and path for every finding
        """
        self.detailed = detailed

    def generate_report(self, result: ScanResult) -> str:
        """
        Generate Markdown report.

        Args:
            result: ScanResult object

        Returns:
            Markdown string
        """
        lines = []

        # Header
        lines.append("# OpenClaw Security Audit Report")
        lines.append("")
        lines.append(f"**Config:** {result.context.config_path}")
        lines.append(f"**{format_version_banner(result.context)}**")
        lines.append(f"**Score:** {result.score}/100")
        lines.append(f"**Timestamp:** {result.timestamp.isoformat()}")
        lines.append("")

        # Summary
        counts = result.severity_counts()
        lines.append("## Summary")
        lines.append("")
        lines.append(f"- **Total Findings:** {len(result.findings)}")
        lines.append(f"- **Critical:** {counts['critical']}")
        lines.append(f"- **High:** {counts['high']}")
        lines.append(f"- **Medium:** {counts['medium']}")
        lines.append(f"- **Low:** {counts['low']}")
        if result.waived_count:
            lines.append(f"- **Waived:** {result.waived_count}")
        lines.append("")

        if result.validation:
            lines.append("## Config Validation")
            lines.append("")
            for issue in result.validation:
                line_info = f" (line {issue.line})" if issue.line else ""
                lines.append(f"- **{issue.level.upper()}** `{issue.code}`: {issue.message}{line_info}")
                if issue.recommendation:
                    lines.append(f"  - {issue.recommendation}")
            lines.append("")

        # Findings
        if result.findings:
            lines.append("## Findings")
            lines.append("")

            for severity in SEVERITY_ORDER:
                findings = result.get_findings_by_severity(severity)
                if findings:
                    lines.append(f"### {severity.value} Severity")
                    lines.append("")

                    for finding in findings:
                        lines.extend(self._format_finding(finding))
                        lines.append("")
        else:
            lines.append("## [OK] No Issues Found")
            lines.append("")
            lines.append("This configuration passed all security checks.")
            lines.append("")

        return "\n".join(lines)

    def _format_finding(self, finding: Finding) -> list:
        """Format a single finding as markdown lines."""
        lines = []

        severity_prefix = {
            Severity.CRITICAL: "[CRITICAL]",
            Severity.HIGH: "[HIGH]",
            Severity.MEDIUM: "[MEDIUM]",
            Severity.LOW: "[LOW]",
        }
        prefix = severity_prefix.get(finding.severity, "[LOW]")

        lines.append(f"#### {prefix} {finding.title}")
        lines.append("")
        lines.append(f"**Code:** {finding.code}")
        lines.append(f"**Fixable:** {'yes' if finding.fixable else 'no'}")

        if self.detailed:
            if finding.path:
                lines.append(f"**Location:** `{finding.path}`")
            lines.append("")
            lines.append(f"**Detail:** {finding.detail}")

        lines.append("")
        lines.append(f"**Recommendation:** {finding.recommendation}")

        return lines

    def save_report(self, result: ScanResult, output_path: str):
        """
        Save Markdown report to file.

        Args:
            result: ScanResult object
            output_path: Path to save file
        """
        report_md = self.generate_report(result)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(report_md)
