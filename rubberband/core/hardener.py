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
Automatic remediation of fixable findings.

Each finding code maps to at most one :class:`FixAction` in the static
:data:`FIX_ACTIONS` table.  An action is either a ``config`` fix, which
edits a copy of the configuration, or a ``filesystem`` fix, which changes
file modes.  ``strict_only`` actions are applied only with ``--strict``.

Every action re-checks its own precondition and returns ``False`` when
there is nothing to change, so applying a fix twice is a no-op.
"""

from __future__ import annotations

import copy
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ..config.constants import RubberbandConstants
from ..data.packs.core.python.access_checks import dm_policy_path, mention_path
from . import probes
from .loader import ConfigLoader
from .models import Finding, ScanContext, SchemaDialect
from .schema import as_dict, get_path, resolve_dm_policy, set_dm_policy

logger = logging.getLogger(__name__)


class FixKind(str, Enum):
    """What a remediation touches."""

    CONFIG = "config"
    FILESYSTEM = "filesystem"


FixFunction = Callable[[dict[str, Any], ScanContext, Finding], bool]


@dataclass(frozen=True)
class FixAction:
    """The remediation for one finding code."""

    code: str
    kind: FixKind
    description: str
    apply: FixFunction
    strict_only: bool = False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _same(current: Any, value: Any) -> bool:
    return type(current) is type(value) and current == value


def _assign(config: dict[str, Any], dotted: str, value: Any) -> bool:
    """Set *dotted* to *value*, creating parent blocks; return False if already set."""
    if _same(get_path(config, dotted), value):
        return False
    *parents, leaf = dotted.split(".")
    node = config
    for part in parents:
        child = node.get(part)
        if child is None:
            child = {}
            node[part] = child
        elif not isinstance(child, dict):
            raise TypeError(f"Cannot set {dotted}: {part} is not an object")
        node = child
    node[leaf] = value
    return True


def _chmod(path: Path, mode: int) -> bool:
    current = probes.get_file_mode(path)
    if current is None or current == format(mode, "03o"):
        return False
    os.chmod(path, mode)
    return True


# ---------------------------------------------------------------------------
# Config fixes
# ---------------------------------------------------------------------------


def _bind_gateway_to_localhost(config: dict[str, Any], context: ScanContext, finding: Finding) -> bool:
    changed = _assign(config, "gateway.host", "127.0.0.1")
    if context.schema == SchemaDialect.CURRENT or "bind" in as_dict(config.get("gateway")):
        changed = _assign(config, "gateway.bind", "loopback") or changed
    return changed


def _disable_auth_bypass(config: dict[str, Any], context: ScanContext, finding: Finding) -> bool:
    return _assign(config, "controlUI.dangerousDeviceAuthBypass", False)


def _require_webhook_auth(config: dict[str, Any], context: ScanContext, finding: Finding) -> bool:
    # A hook token must be chosen by the operator
    if context.schema == SchemaDialect.CURRENT or finding.path == "hooks.token":
        return False
    return _assign(config, "webhooks.requireAuth", True)


def _set_dm_policy_pairing(config: dict[str, Any], context: ScanContext, finding: Finding) -> bool:
    changed = False
    for name, channel in as_dict(config.get("channels")).items():
        if not isinstance(channel, dict) or resolve_dm_policy(channel, context.schema) != "open":
            continue
        if finding.path is not None and dm_policy_path(name, channel, context) != finding.path:
            continue
        set_dm_policy(channel, context.schema, "pairing")
        changed = True
    return changed


def _require_group_mentions(config: dict[str, Any], context: ScanContext, finding: Finding) -> bool:
    changed = False
    for channel_name, channel in as_dict(config.get("channels")).items():
        if not isinstance(channel, dict):
            continue
        for group_name, group in as_dict(channel.get("groups")).items():
            if not isinstance(group, dict) or group.get("requireMention"):
                continue
            if finding.path is not None and mention_path(channel_name, group_name) != finding.path:
                continue
            group["requireMention"] = True
            changed = True
    return changed


def _setter(dotted: str, value: Any) -> FixFunction:
    def fix(config: dict[str, Any], context: ScanContext, finding: Finding) -> bool:
        return _assign(config, dotted, value)

    return fix


# ---------------------------------------------------------------------------
# Filesystem fixes
# ---------------------------------------------------------------------------


def _chmod_config(config: dict[str, Any], context: ScanContext, finding: Finding) -> bool:
    return _chmod(context.config_path, RubberbandConstants.SECURE_FILE_MODE)


def _chmod_env(config: dict[str, Any], context: ScanContext, finding: Finding) -> bool:
    return _chmod(context.state_dir / RubberbandConstants.ENV_FILENAME, RubberbandConstants.SECURE_FILE_MODE)


def _chmod_state_dir(config: dict[str, Any], context: ScanContext, finding: Finding) -> bool:
    return _chmod(context.state_dir, RubberbandConstants.SECURE_DIR_MODE)


def _chmod_log_file(config: dict[str, Any], context: ScanContext, finding: Finding) -> bool:
    log_file = get_path(config, "logging.file")
    if not isinstance(log_file, str) or not log_file:
        return False
    return _chmod(Path(log_file), RubberbandConstants.SECURE_FILE_MODE)


# ---------------------------------------------------------------------------
# The fix table
# ---------------------------------------------------------------------------

FIX_ACTIONS: dict[str, FixAction] = {
    action.code: action
    for action in (
        FixAction("NET001", FixKind.CONFIG, "Bind gateway to localhost", _bind_gateway_to_localhost),
        FixAction("NET003", FixKind.CONFIG, "Disable control UI auth bypass", _disable_auth_bypass),
        FixAction("NET004", FixKind.CONFIG, "Enable webhook authentication (legacy)", _require_webhook_auth),
        FixAction("CRED001", FixKind.FILESYSTEM, "Fix config file permissions (chmod 600)", _chmod_config),
        FixAction("CRED003", FixKind.FILESYSTEM, "Fix .env file permissions (chmod 600)", _chmod_env),
        FixAction("CRED004", FixKind.FILESYSTEM, "Fix state directory permissions (chmod 700)", _chmod_state_dir),
        FixAction("ACCESS001", FixKind.CONFIG, "Set DM policy to pairing", _set_dm_policy_pairing),
        FixAction("ACCESS003", FixKind.CONFIG, "Require mentions in groups", _require_group_mentions),
        FixAction("RUN001", FixKind.CONFIG, "Set logging level to info", _setter("logging.level", "info")),
        FixAction("RUN002", FixKind.FILESYSTEM, "Fix log file permissions (chmod 600)", _chmod_log_file),
        FixAction("RUN003", FixKind.CONFIG, "Enable rate limiting", _setter("rateLimit.enabled", True)),
        FixAction(
            "RUN004",
            FixKind.CONFIG,
            "Enable browser sandbox (strict)",
            _setter("browser.sandbox", True),
            strict_only=True,
        ),
        FixAction("RUN005", FixKind.CONFIG, "Enable headless browser mode", _setter("browser.headless", True)),
        FixAction(
            "RUN006",
            FixKind.CONFIG,
            "Disable shell execution (strict)",
            _setter("shell.enabled", False),
            strict_only=True,
        ),
        FixAction("RUN008", FixKind.CONFIG, "Enable memory encryption", _setter("memory.encrypted", True)),
    )
}


def get_fix_action(code: str) -> FixAction | None:
    """Return the remediation for *code*, if any."""
    return FIX_ACTIONS.get(code)


# ---------------------------------------------------------------------------
# Preview and apply
# ---------------------------------------------------------------------------


@dataclass
class PreviewResult:
    """Outcome of running config fixes against a copy of the configuration."""

    updated: dict[str, Any]
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    non_config: list[str] = field(default_factory=list)


@dataclass
class HardenResult:
    """Outcome of ``rubberband harden``."""

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    updated: dict[str, Any] = field(default_factory=dict)


def _gate(finding: Finding, strict: bool) -> tuple[FixAction | None, str | None]:
    """Return the action to run, or the reason the finding is skipped."""
    action = FIX_ACTIONS.get(finding.code)
    if action is None:
        return None, f"{finding.code}: No automatic fix available"
    if action.strict_only and not strict:
        return None, f"{finding.code}: Requires --strict mode"
    return action, None


def preview_changes(
    config: dict[str, Any],
    findings: list[Finding],
    context: ScanContext,
    *,
    strict: bool = False,
) -> PreviewResult:
    """
    Apply config fixes to a copy of *config* without touching disk.

    Filesystem fixes are listed in ``non_config`` and not executed.
    *config* itself is never modified.
    """
    result = PreviewResult(updated=copy.deepcopy(config))

    for finding in findings:
        if not finding.fixable:
            continue
        action, reason = _gate(finding, strict)
        if action is None:
            result.skipped.append(reason or finding.code)
            continue
        if action.kind != FixKind.CONFIG:
            result.non_config.append(f"{finding.code}: {action.description}")
            continue
        try:
            if action.apply(result.updated, context, finding):
                result.applied.append(f"{finding.code}: {action.description}")
            else:
                result.skipped.append(f"{finding.code}: Condition not met")
        except Exception as e:
            logger.debug("Preview of %s failed: %s", finding.code, e)
            result.skipped.append(f"{finding.code}: {e}")

    return result


def apply_fixes(
    config: dict[str, Any],
    findings: list[Finding],
    context: ScanContext,
    *,
    strict: bool = False,
    dry_run: bool = False,
    persist: bool = True,
) -> HardenResult:
    """
    Apply fixes for every fixable finding.

    Config fixes edit a copy of *config* which is written back to
    ``context.config_path`` when *persist* is set and at least one config
    fix applied.  Filesystem fixes run immediately.  With *dry_run* nothing
    is executed; the fixes that would run are listed with a ``(dry run)``
    suffix.

    A failing fix is recorded in ``errors`` and does not stop the others.
    """
    result = HardenResult(updated=copy.deepcopy(config))
    config_changed = False

    for finding in findings:
        if not finding.fixable:
            continue
        action, reason = _gate(finding, strict)
        if action is None:
            result.skipped.append(reason or finding.code)
            continue
        if dry_run:
            result.applied.append(f"{finding.code}: {action.description} (dry run)")
            continue
        try:
            success = action.apply(result.updated, context, finding)
        except Exception as e:
            logger.warning("Fix for %s failed: %s", finding.code, e)
            result.errors.append(f"{finding.code}: {e}")
            continue
        if success:
            result.applied.append(f"{finding.code}: {action.description}")
            config_changed = config_changed or action.kind == FixKind.CONFIG
        else:
            result.skipped.append(f"{finding.code}: Condition not met")

    if config_changed and persist and not dry_run:
        try:
            ConfigLoader().save(result.updated, context.config_path)
        except OSError as e:
            logger.warning("Failed to save config to %s: %s", context.config_path, e)
            result.errors.append(f"Failed to save config: {e}")

    return result
