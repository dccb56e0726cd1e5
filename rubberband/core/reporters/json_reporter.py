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
JSON format reporter for scan results (CI/CD pipelines).
"""

import json
from typing import Any

from ...config.constants import RubberbandConstants
from ...core.models import ScanResult


class JSONReporter:
    """Generates JSON format reports."""

    def __init__(self, pretty: bool = True):
        """
        Initialize JSON reporter.

        Args:
            pretty: If True, indent the output
        """
        self.pretty = pretty

    def to_dict(self, result: ScanResult) -> dict[str, Any]:
        data = result.to_dict()
        report: dict[str, Any] = {
            "version": RubberbandConstants.VERSION,
            "timestamp": data["timestamp"],
            "openclaw": data["openclaw"],
        }
        if result.validation:
            report["validation"] = data["validation"]
        report["score"] = data["score"]
        report["waived"] = data["waived"]
        report["summary"] = data["summary"]
        report["findings"] = data["findings"]
        return report

    def generate_report(self, result: ScanResult) -> str:
        """
        Generate JSON report.

        Args:
            result: ScanResult object

        Returns:
            JSON string
        """
        if self.pretty:
            return json.dumps(self.to_dict(result), indent=2, default=str)
        return json.dumps(self.to_dict(result), default=str)

    def save_report(self, result: ScanResult, output_path: str):
        """
        Save JSON report to file.

        Args:
            result: ScanResult object
            output_path: Path to save file
        """
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(self.generate_report(result))
