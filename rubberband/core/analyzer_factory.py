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
Builds the analyzer list for a scan.

The CLI and :class:`~rubberband.core.scanner.ConfigScanner` both go through
:func:`build_core_analyzers`, so the ``analyzers.*`` toggles in the policy
apply to every entry point.
"""

from __future__ import annotations

import logging

from ..data.packs.core.python.access_checks import check_access
from ..data.packs.core.python.approvals_checks import check_approvals
from ..data.packs.core.python.credential_checks import check_credentials
from ..data.packs.core.python.memory_checks import check_memory_backend
from ..data.packs.core.python.network_checks import check_network
from ..data.packs.core.python.runtime_checks import check_runtime
from ..data.packs.core.python.skill_checks import check_skills
from ..data.packs.core.python.web_checks import check_web_tools
from .analyzers.base import BaseAnalyzer
from .analyzers.check_analyzer import CheckAnalyzer, CheckFunction
from .scan_policy import ScanPolicy

logger = logging.getLogger(__name__)

# (analyzer name, check function); the name doubles as the policy toggle
CORE_CHECKS: tuple[tuple[str, CheckFunction], ...] = (
    ("network", check_network),
    ("credentials", check_credentials),
    ("access", check_access),
    ("skills", check_skills),
    ("runtime", check_runtime),
    ("approvals", check_approvals),
    ("web", check_web_tools),
    ("memory", check_memory_backend),
)


def build_core_analyzers(policy: ScanPolicy) -> list[BaseAnalyzer]:
    """Build the eight core analyzers in evaluation order, skipping disabled ones.

    Args:
        policy: The active scan policy.

    Returns:
        A list of core analyzer instances with *policy* attached.
    """
    analyzers: list[BaseAnalyzer] = []
    for name, check in CORE_CHECKS:
        if not getattr(policy.analyzers, name, True):
            logger.debug("Analyzer %s disabled by policy", name)
            continue
        analyzers.append(CheckAnalyzer(name, check, policy=policy))
    return analyzers
