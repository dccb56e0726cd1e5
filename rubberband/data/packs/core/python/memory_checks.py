# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Memory-backend availability checks (MEM001).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rubberband.core import probes
from rubberband.core.models import Finding, Severity
from rubberband.core.schema import as_dict

if TYPE_CHECKING:
    from rubberband.core.models import ScanContext
    from rubberband.core.scan_policy import ScanPolicy


def check_memory_backend(config: dict[str, Any], context: ScanContext, policy: ScanPolicy) -> list[Finding]:
    """Verify the binary behind an external memory backend is installed."""
    memory = as_dict(config.get("memory"))
    backend = memory.get("backend")
    expected = policy.memory.external_backend
    if not isinstance(backend, str) or backend.lower() != expected.lower():
        return []

    command = as_dict(memory.get(expected)).get("command")
    if not isinstance(command, str) or not command:
        command = policy.memory.default_command

    if probes.command_exists(command, timeout=policy.memory.probe_timeout_seconds):
        return []

    return [
        Finding(
            code="MEM001",
            severity=Severity.MEDIUM,
            title=f"{expected.upper()} memory backend not available",
            detail=f'memory.backend is set to "{backend}" but "{command}" was not found.',
            recommendation=f"Install {expected} or set memory.{expected}.command to the correct path",
            fixable=False,
            path=f"memory.{expected}.command",
        )
    ]
