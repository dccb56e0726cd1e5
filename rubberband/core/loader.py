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
OpenClaw configuration loader.

``openclaw.json`` is JSON5 (comments, unquoted keys, trailing commas), so
it is parsed with :mod:`json5`.  Saving writes strict JSON, which every
JSON5 reader accepts.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import json5

from .exceptions import ConfigLoadError

logger = logging.getLogger(__name__)

# Example insecure configuration for ``rubberband scan --demo``
DEMO_CONFIG: dict[str, Any] = {
    "gateway": {
        "host": "0.0.0.0",
        "port": 18789,
    },
    "controlUI": {
        "enabled": True,
        "dangerousDeviceAuthBypass": True,
    },
    "webhooks": {
        "enabled": True,
        "requireAuth": False,
    },
    "channels": {
        "whatsapp": {
            "dm": {"policy": "open"},
            "groups": {
                "family": {"requireMention": False},
            },
        },
    },
    "shell": {"enabled": True},
    "browser": {"enabled": True, "sandbox": False},
    "logging": {"level": "debug"},
    "rateLimit": {"enabled": False},
    "memory": {"persistent": True, "encrypted": False},
    "skills": [
        {
            "name": "moltbook-skill",
            "source": "community:moltbook",
            "verified": False,
            "permissions": ["filesystem:write"],
        },
    ],
}


@dataclass
class LoadedConfig:
    """A parsed configuration plus the text it came from."""

    config: dict[str, Any]
    raw: str
    path: Path


class ConfigLoader:
    """Loads and saves OpenClaw configuration files."""

    def load(self, config_path: str | Path) -> LoadedConfig:
        """
        Load a configuration file.

        Args:
            config_path: Path to ``openclaw.json``

        Returns:
            The parsed configuration and its raw text

        Raises:
            ConfigLoadError: With code ``NOT_FOUND``, ``PERMISSION_DENIED``
                or ``PARSE_ERROR``
        """
        path = Path(config_path).expanduser()

        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigLoadError(f"Config file not found: {path}", ConfigLoadError.NOT_FOUND) from e
        except PermissionError as e:
            raise ConfigLoadError(
                f"Permission denied reading config: {path}", ConfigLoadError.PERMISSION_DENIED
            ) from e
        except UnicodeDecodeError as e:
            raise ConfigLoadError(f"Config file is not valid UTF-8: {path}", ConfigLoadError.PARSE_ERROR) from e
        except OSError as e:
            raise ConfigLoadError(f"Failed to read config file: {path}", ConfigLoadError.NOT_FOUND) from e

        try:
            config = json5.loads(raw)
        except ValueError as e:
            raise ConfigLoadError(f"Failed to parse config file: {e}", ConfigLoadError.PARSE_ERROR) from e

        if not isinstance(config, dict):
            raise ConfigLoadError(f"Config file is not a valid JSON object: {path}", ConfigLoadError.PARSE_ERROR)

        logger.debug("Loaded config from %s (%d top-level keys)", path, len(config))
        return LoadedConfig(config=config, raw=raw, path=path)

    def save(self, config: dict[str, Any], config_path: str | Path) -> None:
        """Write *config* to *config_path* as indented JSON."""
        path = Path(config_path).expanduser()
        path.write_text(json.dumps(config, indent=2), encoding="utf-8")
        logger.debug("Saved config to %s", path)


def load_config(config_path: str | Path) -> LoadedConfig:
    """
    Convenience function to load a configuration file.

    Args:
        config_path: Path to the configuration file

    Returns:
        LoadedConfig
    """
    return ConfigLoader().load(config_path)


def demo_config() -> dict[str, Any]:
    """Return a fresh copy of :data:`DEMO_CONFIG`."""
    return copy.deepcopy(DEMO_CONFIG)
