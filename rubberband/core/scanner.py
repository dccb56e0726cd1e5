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
Core scanner engine for orchestrating configuration audits.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..config.constants import RubberbandConstants
from .analyzer_factory import build_core_analyzers
from .analyzers.base import BaseAnalyzer
from .models import SEVERITY_ORDER, Finding, ScanContext, ScanResult, ValidationIssue
from .scan_policy import ScanPolicy
from .waivers import apply_waivers

logger = logging.getLogger(__name__)


def count_by_severity(findings: Iterable[Finding]) -> dict[str, int]:
    """Return ``{critical, high, medium, low}`` counts for *findings*."""
    counts = {severity.value: 0 for severity in SEVERITY_ORDER}
    for finding in findings:
        counts[finding.severity.value] += 1
    return counts


def compute_score(findings: Iterable[Finding], weights: Mapping[str, int] | None = None) -> int:
    """Start at 100, subtract a per-severity weight for each finding, floor at 0."""
    weights = weights if weights is not None else RubberbandConstants.DEFAULT_SEVERITY_WEIGHTS
    score = RubberbandConstants.MAX_SCORE
    for finding in findings:
        score -= weights.get(finding.severity.value, 0)
    return max(0, score)


class ConfigScanner:
    """Main scanner that runs every analyzer over one configuration snapshot."""

    def __init__(
        self,
        analyzers: list[BaseAnalyzer] | None = None,
        policy: ScanPolicy | None = None,
    ):
        """
        Initialize scanner with analyzers.

        Args:
            analyzers: List of analyzers to use. If None, builds the core set.
            policy: Scan policy with rule lists, weights and disabled rules.
                If None, loads built-in defaults.
        """
        self.policy = policy or ScanPolicy.default()

        if analyzers is None:
            self.analyzers: list[BaseAnalyzer] = build_core_analyzers(self.policy)
        else:
            self.analyzers = analyzers

    def scan(
        self,
        config: dict[str, Any],
        context: ScanContext,
        validation: list[ValidationIssue] | None = None,
    ) -> ScanResult:
        """
        Audit a configuration.

        Args:
            config: The parsed configuration (never mutated)
            context: Resolved schema, version, paths and active waivers
            validation: Consistency issues to pass through to the result

        Returns:
            ScanResult with surviving findings, score and waived count
        """
        all_findings: list[Finding] = []
        analyzer_names: list[str] = []

        for analyzer in self.analyzers:
            all_findings.extend(analyzer.analyze(config, context))
            analyzer_names.append(analyzer.get_name())

        if self.policy.disabled_rules:
            all_findings = [f for f in all_findings if self.policy.is_rule_enabled(f.code)]

        findings, waived = apply_waivers(all_findings, context.waivers)
        if waived:
            logger.debug("Suppressed %d finding(s) by waiver", waived)

        return ScanResult(
            findings=findings,
            score=compute_score(findings, self.policy.scoring.severity_weights),
            context=context,
            waived_count=waived,
            validation=list(validation or []),
            analyzers_used=analyzer_names,
        )

    def list_analyzers(self) -> list[str]:
        """Get names of all configured analyzers."""
        return [analyzer.get_name() for analyzer in self.analyzers]


def run_scan(
    config: dict[str, Any],
    context: ScanContext,
    policy: ScanPolicy | None = None,
    validation: list[ValidationIssue] | None = None,
) -> ScanResult:
    """
    Convenience function to audit a configuration with the core analyzers.

    Args:
        config: Parsed configuration
        context: Scan context
        policy: Optional scan policy

    Returns:
        ScanResult
    """
    return ConfigScanner(policy=policy).scan(config, context, validation=validation)
