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
Runtime settings for Rubberband.

This is the only place that reads the process environment.  The resolved
values are copied into the :class:`~rubberband.core.models.ScanContext`
so the audit core never consults ``os.environ`` itself.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

from .constants import RubberbandConstants


@dataclass
class Config:
    """
    Configuration for Rubberband.

    Explicit constructor arguments win over environment variables.
    """

    # Installation paths
    config_path: Path | None = None
    state_dir: Path | None = None

    # Version detection
    version_override: str | None = None
    env_version: str | None = None
    disable_version_detect: bool = False

    # Scan options
    policy_path: Path | None = None
    log_level: str = "WARNING"

    # Environment snapshot used by __post_init__; defaults to os.environ
    environ: Mapping[str, str] | None = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        """Load configuration from environment variables if not provided."""
        env = self.environ if self.environ is not None else os.environ

        if self.state_dir is None:
            if env_state := env.get(RubberbandConstants.ENV_STATE_DIR):
                self.state_dir = Path(env_state)
            else:
                self.state_dir = Path.home() / RubberbandConstants.DEFAULT_STATE_DIR_NAME
        self.state_dir = Path(self.state_dir).expanduser()

        if self.config_path is None:
            if env_config := env.get(RubberbandConstants.ENV_CONFIG_PATH):
                self.config_path = Path(env_config)
            else:
                self.config_path = self.state_dir / RubberbandConstants.CONFIG_FILENAME
        self.config_path = Path(self.config_path).expanduser()

        if self.env_version is None:
            self.env_version = env.get(RubberbandConstants.ENV_VERSION) or None

        if env.get(RubberbandConstants.ENV_DISABLE_VERSION_DETECT, "").lower() in ("true", "1"):
            self.disable_version_detect = True

        if self.policy_path is None:
            if env_policy := env.get(RubberbandConstants.ENV_POLICY):
                self.policy_path = Path(env_policy)

        if self.log_level == "WARNING":
            if env_level := env.get(RubberbandConstants.ENV_LOG_LEVEL):
                self.log_level = env_level.upper()

    @property
    def waiver_path(self) -> Path:
        """Location of the waiver store under the state directory."""
        assert self.state_dir is not None
        return self.state_dir / RubberbandConstants.WAIVER_DIR_NAME / RubberbandConstants.WAIVER_FILENAME

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from environment variables.

        Returns:
            Config instance with values from environment
        """
        return cls()

    @classmethod
    def from_file(cls, config_file: Path) -> "Config":
        """
        Load configuration from a .env file.

        Values in the file take precedence over the process environment,
        which is left untouched.

        Args:
            config_file: Path to .env file

        Returns:
            Config instance
        """
        merged: dict[str, str] = dict(os.environ)
        if Path(config_file).exists():
            for key, value in dotenv_values(config_file).items():
                if value is not None:
                    merged[key] = value
        return cls(environ=merged)
