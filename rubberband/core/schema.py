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
Schema dialect resolution.

OpenClaw renamed several configuration fields between releases:

================  ========================  ======================
Concern           legacy                    current
================  ========================  ======================
Gateway auth      ``gateway.authToken``     ``gateway.auth.token``
DM policy         ``channels.X.dm.policy``  ``channels.X.dmPolicy``
Inbound hooks     ``webhooks.*``            ``hooks.*``
================  ========================  ======================

Every evaluator reads these fields through the resolvers below so that no
check ever branches on the dialect itself.  When both spellings are
populated the dialect's own field wins; for ``unknown`` the current
spelling wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .models import SchemaDialect, VersionInfo

_VERSION_PREFIX_RE = re.compile(r"^(?:v|openclaw@)", re.IGNORECASE)
_VERSION_SPLIT_RE = re.compile(r"[.\-+]")
_DIGITS_RE = re.compile(r"\d+")

# Calendar versions start at this year for the current dialect
CURRENT_SCHEMA_YEAR = 2026
CURRENT_SCHEMA_SEMVER_MAJOR = 2


def as_dict(value: Any) -> dict[str, Any]:
    """Return *value* if it is a mapping, else an empty dict."""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    """Return *value* if it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def get_path(config: Any, dotted: str) -> Any:
    """Look up a dotted path, returning ``None`` for any missing segment."""
    node = config
    for part in dotted.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------


def parse_version(raw: str | None) -> VersionInfo | None:
    """Parse a product version string such as ``v2026.1.5`` or ``openclaw@1.9.0``.

    Returns ``None`` when the string contains no digits at all.
    """
    if not raw:
        return None
    trimmed = raw.strip()
    if not trimmed:
        return None

    normalized = _VERSION_PREFIX_RE.sub("", trimmed, count=1)
    numbers: list[int] = []
    for part in _VERSION_SPLIT_RE.split(normalized):
        match = _DIGITS_RE.search(part)
        if match:
            numbers.append(int(match.group(0)))
    if not numbers:
        return None

    major = numbers[0]
    minor = numbers[1] if len(numbers) > 1 else None
    patch = numbers[2] if len(numbers) > 2 else None
    fmt = "date" if major >= 2000 else "semver"
    return VersionInfo(raw=trimmed, major=major, minor=minor, patch=patch, format=fmt)


# ---------------------------------------------------------------------------
# Dialect detection
# ---------------------------------------------------------------------------


def resolve_dialect(config: dict[str, Any], version: VersionInfo | None = None) -> SchemaDialect:
    """Decide which field dialect *config* speaks.

    Field evidence wins over version evidence; current-dialect fields win
    over legacy ones.
    """
    channels = [c for c in as_dict(config.get("channels")).values() if isinstance(c, dict)]
    gateway = as_dict(config.get("gateway"))
    gateway_auth = as_dict(gateway.get("auth"))

    has_current_dm = any(isinstance(c.get("dmPolicy"), str) for c in channels)
    has_current_auth = isinstance(gateway_auth.get("token"), str) or isinstance(gateway_auth.get("mode"), str)
    has_hooks = isinstance(config.get("hooks"), dict)
    has_bind = isinstance(gateway.get("bind"), str)
    if has_current_dm or has_current_auth or has_hooks or has_bind:
        return SchemaDialect.CURRENT

    has_legacy_dm = any(isinstance(as_dict(c.get("dm")).get("policy"), str) for c in channels)
    has_legacy_auth = isinstance(gateway.get("authToken"), str)
    has_webhooks = isinstance(config.get("webhooks"), dict)
    if has_legacy_dm or has_legacy_auth or has_webhooks:
        return SchemaDialect.LEGACY

    if version is not None and version.major is not None:
        if version.format == "date":
            return SchemaDialect.CURRENT if version.major >= CURRENT_SCHEMA_YEAR else SchemaDialect.LEGACY
        if version.format == "semver":
            return SchemaDialect.CURRENT if version.major >= CURRENT_SCHEMA_SEMVER_MAJOR else SchemaDialect.LEGACY

    return SchemaDialect.UNKNOWN


# ---------------------------------------------------------------------------
# Field resolvers
# ---------------------------------------------------------------------------


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def resolve_auth_token(gateway: dict[str, Any], schema: SchemaDialect) -> Any:
    """Return the gateway auth token for *schema*, or ``None``."""
    gateway = as_dict(gateway)
    current = as_dict(gateway.get("auth")).get("token")
    legacy = gateway.get("authToken")
    if schema == SchemaDialect.LEGACY:
        return _first_present(legacy, current)
    return _first_present(current, legacy)


def _dm_policy_fields(schema: SchemaDialect) -> tuple[str, str]:
    if schema == SchemaDialect.LEGACY:
        return ("dm.policy", "dmPolicy")
    return ("dmPolicy", "dm.policy")


def _read_dm_field(channel: dict[str, Any], name: str) -> Any:
    if name == "dmPolicy":
        return channel.get("dmPolicy")
    return as_dict(channel.get("dm")).get("policy")


def resolve_dm_policy(channel: dict[str, Any], schema: SchemaDialect) -> Any:
    """Return the effective DM policy of one channel, or ``None``."""
    channel = as_dict(channel)
    return _first_present(*(_read_dm_field(channel, name) for name in _dm_policy_fields(schema)))


def dm_policy_field(channel: dict[str, Any], schema: SchemaDialect) -> str:
    """Return the relative field name the DM policy is read from.

    When neither field is populated this is the dialect's preferred field.
    """
    channel = as_dict(channel)
    fields = _dm_policy_fields(schema)
    for name in fields:
        if _read_dm_field(channel, name) is not None:
            return name
    return fields[0]


def set_dm_policy(channel: dict[str, Any], schema: SchemaDialect, value: str) -> None:
    """Write *value* to the field :func:`resolve_dm_policy` reads for *schema*."""
    if dm_policy_field(channel, schema) == "dmPolicy":
        channel["dmPolicy"] = value
        return
    dm = channel.get("dm")
    if not isinstance(dm, dict):
        dm = {}
        channel["dm"] = dm
    dm["policy"] = value


@dataclass(frozen=True)
class WebhookConfig:
    """Normalised view of inbound webhook delivery."""

    enabled: bool
    has_auth: bool
    path: str  # The config field that carries the auth setting

    @property
    def uses_hook_token(self) -> bool:
        return self.path == "hooks.token"


def _from_hooks(hooks: dict[str, Any]) -> WebhookConfig:
    token = hooks.get("token")
    return WebhookConfig(
        enabled=hooks.get("enabled") is True,
        has_auth=isinstance(token, str) and len(token) > 0,
        path="hooks.token",
    )


def _from_webhooks(webhooks: dict[str, Any]) -> WebhookConfig:
    return WebhookConfig(
        enabled=webhooks.get("enabled") is True,
        has_auth=webhooks.get("requireAuth") is True,
        path="webhooks.requireAuth",
    )


def resolve_webhook_config(config: dict[str, Any], schema: SchemaDialect) -> WebhookConfig | None:
    """Return the inbound webhook settings for *schema*, or ``None`` if absent."""
    hooks = config.get("hooks")
    webhooks = config.get("webhooks")
    if schema == SchemaDialect.LEGACY:
        return _from_webhooks(webhooks) if isinstance(webhooks, dict) else None
    if schema == SchemaDialect.CURRENT:
        return _from_hooks(hooks) if isinstance(hooks, dict) else None
    if isinstance(hooks, dict):
        return _from_hooks(hooks)
    if isinstance(webhooks, dict):
        return _from_webhooks(webhooks)
    return None
