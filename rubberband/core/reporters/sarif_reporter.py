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
SARIF format reporter for GitHub Code Scanning integration.

Implements SARIF 2.1.0 specification for configuration audit results.
https://docs.oasis-open.org/sarif/sarif/v2.1.0/sarif-v2.1.0.html

Config findings point at the configuration file; file findings
(permissions, approvals) point at the file named in their path.
"""

import json
from pathlib import Path
from typing import Any

from ...config.constants import RubberbandConstants
from ...core.models import Finding, ScanResult, Severity


class SARIFReporter:
    """Generates SARIF 2.1.0 format reports for GitHub Code Scanning."""

    SARIF_VERSION = "2.1.0"
    SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"

    # Map severity to SARIF levels
    SEVERITY_TO_LEVEL = {
        Severity.CRITICAL: "error",
        Severity.HIGH: "error",
        Severity.MEDIUM: "warning",
        Severity.LOW: "note",
    }

    def __init__(self, tool_name: str = "rubberband", tool_version: str = RubberbandConstants.VERSION):
        """
        Initialize SARIF reporter.

        Args:
            tool_name: Name of the scanning tool
            tool_version: Version of the scanning tool
        """
        self.tool_name = tool_name
        self.tool_version = tool_version

    def generate_report(self, result: ScanResult) -> str:
        """
        Generate SARIF report.

        Args:
            result: ScanResult object

        Returns:
            SARIF JSON string
        """
        rules = self._extract_rules(result.findings)
        results = self._convert_findings(result.findings, result.context.config_path)

        sarif = {
            "$schema": self.SARIF_SCHEMA,
            "version": self.SARIF_VERSION,
            "runs": [
                {
                    "tool": self._create_tool_component(rules),
                    "results": results,
                    "invocations": [
                        {
                            "executionSuccessful": True,
                            "endTimeUtc": result.timestamp.isoformat(),
                        }
                    ],
                    "properties": {
                        "score": result.score,
                        "waived": result.waived_count,
                        "schema": result.context.schema.value,
                    },
                }
            ],
        }
        return json.dumps(sarif, indent=2, default=str)

    def _create_tool_component(self, rules: list[dict[str, Any]]) -> dict[str, Any]:
        """Create the tool component with rules."""
        return {
            "driver": {
                "name": self.tool_name,
                "version": self.tool_version,
                "rules": rules,
            }
        }

    def _extract_rules(self, findings: list[Finding]) -> list[dict[str, Any]]:
        """Extract unique rules from findings."""
        seen_rules: set[str] = set()
        rules = []

        for finding in findings:
            if finding.code in seen_rules:
                continue
            seen_rules.add(finding.code)

            rules.append(
                {
                    "id": finding.code,
                    "name": finding.code,
                    "shortDescription": {
                        "text": finding.title,
                    },
                    "fullDescription": {
                        "text": finding.detail,
                    },
                    "defaultConfiguration": {
                        "level": self.SEVERITY_TO_LEVEL.get(finding.severity, "warning"),
                    },
                    "help": {
                        "text": finding.recommendation,
                        "markdown": f"**Remediation**: {finding.recommendation}",
                    },
                    "properties": {
                        "severity": finding.severity.value,
                        "tags": ["security", "configuration"],
                    },
                }
            )

        return rules

    @staticmethod
    def _artifact_uri(finding: Finding, config_path: Path) -> str:
        if finding.path and finding.path.startswith(("/", "~")):
            return finding.path.split(":", 1)[0]
        return str(config_path)

    def _convert_findings(self, findings: list[Finding], config_path: Path) -> list[dict[str, Any]]:
        """Convert findings to SARIF results."""
        results = []

        for finding in findings:
            result: dict[str, Any] = {
                "ruleId": finding.code,
                "level": self.SEVERITY_TO_LEVEL.get(finding.severity, "warning"),
                "message": {
                    "text": finding.detail,
                },
                "properties": {
                    "severity": finding.severity.value,
                    "fixable": finding.fixable,
                },
                "locations": [
                    {
                        "physicalLocation": {
                            "artifactLocation": {
                                "uri": self._artifact_uri(finding, config_path),
                            },
                        },
                    }
                ],
            }
            if finding.path:
                result["locations"][0]["logicalLocations"] = [{"fullyQualifiedName": finding.path}]

            results.append(result)

        return results

    def save_report(self, result: ScanResult, output_path: str):
        """
        Save SARIF report to file.

        Args:
            result: ScanResult object
            output_path: Path to save file
        """
        report_json = self.generate_report(result)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(report_json)
