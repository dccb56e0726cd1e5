# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Outbound web-tool checks (WEB001).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rubberband.core.models import Finding, Severity
from rubberband.core.schema import get_path

if TYPE_CHECKING:
    from rubberband.core.models import ScanContext
    from rubberband.core.scan_policy import ScanPolicy


def check_web_tools(config: dict[str, Any], context: ScanContext, policy: ScanPolicy) -> list[Finding]:
    """Flag web_fetch redirect limits above the policy ceiling."""
    fetch = get_path(config, "tools.web.fetch")
    if not isinstance(fetch, dict) or fetch.get("enabled") is False:
        return []

    ceiling = policy.web.max_redirects
    max_redirects = fetch.get("maxRedirects")
    # bool is an int subclass; true/false is not a redirect count
    if isinstance(max_redirects, bool) or not isinstance(max_redirects, (int, float)):
        return []
    # NaN is not above any ceiling
    if not max_redirects > ceiling:
        return []

    return [
        Finding(
            code="WEB001",
            severity=Severity.MEDIUM,
            title="web_fetch allows long redirect chains",
            detail=(
                f"tools.web.fetch.maxRedirects is set to {max_redirects}, "
                "increasing redirect-based SSRF surface."
            ),
            recommendation=f"Keep tools.web.fetch.maxRedirects at {ceiling} or lower",
            fixable=False,
            path="tools.web.fetch.maxRedirects",
        )
    ]
