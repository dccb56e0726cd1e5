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
Configuration consistency checks (CFG001–CFG008).

These flag configurations that mix field dialects.  They are reported
alongside findings but never affect the score.
"""

from __future__ import annotations

from typing import Any

from ..data.packs.core.python._helpers import find_line_for_key
from .models import ScanContext, SchemaDialect, ValidationIssue
from .schema import as_dict


def _issue(
    level: str,
    code: str,
    message: str,
    path: str,
    recommendation: str,
    raw: str | None,
) -> ValidationIssue:
    key = path.split(".")[-1]
    return ValidationIssue(
        level=level,
        code=code,
        message=message,
        path=path,
        recommendation=recommendation,
        line=find_line_for_key(raw, key),
    )


def validate_config(config: dict[str, Any], context: ScanContext, raw: str | None = None) -> list[ValidationIssue]:
    """Return dialect-consistency issues for *config* under ``context.schema``."""
    issues: list[ValidationIssue] = []
    schema = context.schema
    raw = raw if raw is not None else context.config_text

    channels = [c for c in as_dict(config.get("channels")).values() if isinstance(c, dict)]
    has_legacy_dm = any(as_dict(c.get("dm")).get("policy") is not None for c in channels)
    has_current_dm = any(c.get("dmPolicy") is not None for c in channels)
    gateway = as_dict(config.get("gateway"))
    hooks = config.get("hooks")

    if schema == SchemaDialect.CURRENT and has_legacy_dm:
        issues.append(
            _issue(
                "warning",
                "CFG001",
                "Legacy dm.policy detected in current schema.",
                "channels.<channel>.dm.policy",
                "Use channels.<channel>.dmPolicy instead.",
                raw,
            )
        )

    if schema == SchemaDialect.LEGACY and has_current_dm:
        issues.append(
            _issue(
                "warning",
                "CFG002",
                "dmPolicy detected in legacy schema.",
                "channels.<channel>.dmPolicy",
                "Use channels.<channel>.dm.policy instead.",
                raw,
            )
        )

    if has_legacy_dm and has_current_dm:
        issues.append(
            _issue(
                "warning",
                "CFG003",
                "Both dmPolicy and dm.policy are present. This can cause ambiguity.",
                "channels",
                "Use one DM policy format consistently.",
                raw,
            )
        )

    if schema == SchemaDialect.CURRENT and config.get("webhooks") is not None:
        issues.append(
            _issue(
                "warning",
                "CFG004",
                "Legacy webhooks config detected in current schema.",
                "webhooks",
                "Use hooks.* for incoming webhooks.",
                raw,
            )
        )

    if schema == SchemaDialect.LEGACY and hooks is not None:
        issues.append(
            _issue(
                "warning",
                "CFG005",
                "hooks config detected in legacy schema.",
                "hooks",
                "Use webhooks.* for incoming webhooks.",
                raw,
            )
        )

    if schema == SchemaDialect.CURRENT and gateway.get("authToken"):
        issues.append(
            _issue(
                "warning",
                "CFG006",
                "Legacy gateway.authToken detected in current schema.",
                "gateway.authToken",
                "Use gateway.auth.token instead.",
                raw,
            )
        )

    if schema == SchemaDialect.LEGACY and as_dict(gateway.get("auth")).get("token"):
        issues.append(
            _issue(
                "warning",
                "CFG007",
                "gateway.auth.token detected in legacy schema.",
                "gateway.auth.token",
                "Use gateway.authToken instead.",
                raw,
            )
        )

    hooks_cfg = as_dict(hooks)
    if hooks_cfg.get("enabled") and not hooks_cfg.get("token"):
        issues.append(
            _issue(
                "error",
                "CFG008",
                "hooks.enabled is true but hooks.token is missing.",
                "hooks.token",
                "Set hooks.token or disable hooks.enabled.",
                raw,
            )
        )

    return issues
