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
Base analyzer interface for configuration audits.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..models import Finding, ScanContext
from ..scan_policy import ScanPolicy


class BaseAnalyzer(ABC):
    """Abstract base class for all configuration analyzers."""

    def __init__(self, name: str, policy: ScanPolicy | None = None):
        """
        Initialize analyzer.

        Args:
            name: Name of the analyzer
            policy: Scan policy with rule lists, thresholds and toggles.
                If None, loads built-in defaults.
        """
        self.name = name
        self.policy = policy or ScanPolicy.default()

    @abstractmethod
    def analyze(self, config: dict[str, Any], context: ScanContext) -> list[Finding]:
        """
        Analyze one configuration snapshot.

        Args:
            config: The parsed configuration (never mutated)
            context: Resolved schema, version and paths

        Returns:
            List of findings
        """
        pass

    def get_name(self) -> str:
        """Get the analyzer name."""
        return self.name
