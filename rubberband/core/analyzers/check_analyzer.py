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
Analyzer that runs one core-pack check function.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..models import Finding, ScanContext
from ..scan_policy import ScanPolicy
from .base import BaseAnalyzer

logger = logging.getLogger(__name__)

CheckFunction = Callable[[dict[str, Any], ScanContext, ScanPolicy], list[Finding]]


class CheckAnalyzer(BaseAnalyzer):
    """Wraps a ``check_*`` function from ``data/packs/core/python``."""

    def __init__(self, name: str, check: CheckFunction, policy: ScanPolicy | None = None):
        super().__init__(name, policy)
        self.check = check

    def analyze(self, config: dict[str, Any], context: ScanContext) -> list[Finding]:
        findings = self.check(config, context, self.policy)
        logger.debug("%s analyzer produced %d finding(s)", self.name, len(findings))
        return findings
