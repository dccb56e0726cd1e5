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
OpenClaw version detection and scan-context construction.

Detection order (first version that parses wins):

1. ``--openclaw-version`` (source ``cli``) or ``OPENCLAW_VERSION`` (``env``)
2. ``openclaw --version`` / ``openclaw version`` (``cli``)
3. ``openclawVersion`` / ``version`` / ``appVersion`` in the config (``config``)
4. version files in the state directory (``state``)
5. ``node_modules/openclaw/package.json`` in the cwd or state dir (``package``)

With version detection disabled, steps 2, 4 and 5 are skipped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import json5

from ..config.config import Config
from ..config.constants import RubberbandConstants
from . import probes
from .models import ScanContext, VersionInfo, VersionSource, Waiver
from .schema import parse_version, resolve_dialect
from .waivers import WaiverStore

logger = logging.getLogger(__name__)

_CLI_VERSION_RE = re.compile(r"v?\d{4}\.\d+\.\d+|v?\d+\.\d+\.\d+")
_CLI_VERSION_ARGS = (["--version"], ["version"])


def _read_version_from_cli() -> str | None:
    for args in _CLI_VERSION_ARGS:
        result = probes.run_command(
            [RubberbandConstants.PRODUCT_BINARY, *args], RubberbandConstants.PROBE_TIMEOUT_SECONDS
        )
        if result is None or result.returncode != 0:
            continue
        output = f"{result.stdout or ''}\n{result.stderr or ''}".strip()
        if not output:
            continue
        match = _CLI_VERSION_RE.search(output)
        if match:
            return match.group(0)
        return output.split()[0]
    return None


def _version_field(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    for name in RubberbandConstants.VERSION_FIELD_CANDIDATES:
        value = data.get(name)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _read_version_from_state(state_dir: Path) -> str | None:
    for filename in RubberbandConstants.STATE_VERSION_FILES:
        text = probes.read_text(state_dir / filename)
        if text is None or not text.strip():
            continue
        if filename.endswith(".json"):
            try:
                value = _version_field(json5.loads(text))
            except ValueError:
                continue
            if value:
                return value
        else:
            return text.split()[0]
    return None


def _read_version_from_package(state_dir: Path) -> str | None:
    for base in (Path.cwd(), state_dir):
        text = probes.read_text(base / "node_modules" / RubberbandConstants.PRODUCT_BINARY / "package.json")
        if text is None:
            continue
        try:
            data = json5.loads(text)
        except ValueError:
            continue
        version = data.get("version") if isinstance(data, dict) else None
        if isinstance(version, str) and version.strip():
            return version
    return None


def detect_version(config: dict[str, Any], settings: Config) -> tuple[VersionInfo | None, VersionSource]:
    """Detect the installed OpenClaw version.

    Returns:
        The parsed version (or ``None``) and where it came from.
    """
    override = settings.version_override or settings.env_version
    if override:
        parsed = parse_version(override)
        if parsed:
            source = VersionSource.CLI if settings.version_override else VersionSource.ENV
            return parsed, source

    if not settings.disable_version_detect:
        parsed = parse_version(_read_version_from_cli())
        if parsed:
            return parsed, VersionSource.CLI

    parsed = parse_version(_version_field(config))
    if parsed:
        return parsed, VersionSource.CONFIG

    if settings.disable_version_detect:
        return None, VersionSource.UNKNOWN

    assert settings.state_dir is not None
    parsed = parse_version(_read_version_from_state(settings.state_dir))
    if parsed:
        return parsed, VersionSource.STATE

    parsed = parse_version(_read_version_from_package(settings.state_dir))
    if parsed:
        return parsed, VersionSource.PACKAGE

    return None, VersionSource.UNKNOWN


def build_scan_context(
    config: dict[str, Any],
    settings: Config | None = None,
    *,
    config_text: str | None = None,
    waivers: Iterable[Waiver] | None = None,
) -> ScanContext:
    """
    Resolve everything the evaluators need besides the configuration.

    Args:
        config: Parsed configuration
        settings: Runtime settings; defaults to :meth:`Config.from_env`
        config_text: Raw configuration text, if it was read from disk
        waivers: Active waivers; loaded from the store when omitted

    Returns:
        An immutable ScanContext
    """
    settings = settings or Config.from_env()
    assert settings.config_path is not None and settings.state_dir is not None

    version, source = detect_version(config, settings)
    schema = resolve_dialect(config, version)
    logger.debug(
        "OpenClaw version %s (source: %s), schema %s",
        version.raw if version else "unknown",
        source.value,
        schema.value,
    )

    if waivers is None:
        waivers = WaiverStore(settings.waiver_path).load()

    return ScanContext(
        config_path=settings.config_path,
        state_dir=settings.state_dir,
        schema=schema,
        version=version,
        version_source=source,
        waivers=tuple(waivers),
        config_text=config_text,
    )


def format_version_banner(context: ScanContext) -> str:
    """Return ``OpenClaw: <version> (schema: <schema>[, source: <source>])``."""
    version = context.version.raw if context.version else "unknown"
    source = f", source: {context.version_source.value}" if context.version_source != VersionSource.UNKNOWN else ""
    return f"OpenClaw: {version} (schema: {context.schema.value}{source})"
