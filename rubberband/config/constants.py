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
Constants for Rubberband.
"""

from pathlib import Path

from .._version import __version__ as PACKAGE_VERSION


class RubberbandConstants:
    """Constants used throughout the auditor."""

    # Single source: rubberband/_version.py
    VERSION = PACKAGE_VERSION

    # Project paths
    PACKAGE_ROOT = Path(__file__).parent.parent

    # Resource paths
    DATA_DIR = PACKAGE_ROOT / "data"
    PACKS_DIR = DATA_DIR / "packs"
    DEFAULT_POLICY_PATH = DATA_DIR / "default_policy.yaml"

    # Installation layout
    DEFAULT_STATE_DIR_NAME = ".openclaw"
    CONFIG_FILENAME = "openclaw.json"
    ENV_FILENAME = ".env"
    APPROVALS_FILENAME = "exec-approvals.json"
    WAIVER_DIR_NAME = "rubberband"
    WAIVER_FILENAME = "waivers.json"

    # Environment variables
    ENV_CONFIG_PATH = "OPENCLAW_CONFIG_PATH"
    ENV_STATE_DIR = "OPENCLAW_STATE_DIR"
    ENV_VERSION = "OPENCLAW_VERSION"
    ENV_DISABLE_VERSION_DETECT = "RUBBERBAND_DISABLE_VERSION_DETECT"
    ENV_POLICY = "RUBBERBAND_POLICY"
    ENV_LOG_LEVEL = "RUBBERBAND_LOG_LEVEL"

    # Version detection
    PRODUCT_BINARY = "openclaw"
    PROBE_TIMEOUT_SECONDS = 1.5
    VERSION_FIELD_CANDIDATES = ("openclawVersion", "version", "appVersion")
    STATE_VERSION_FILES = ("version", "openclaw.version", "openclaw-version", "version.json", "about.json")

    # Scoring
    MAX_SCORE = 100
    DEFAULT_SEVERITY_WEIGHTS = {"critical": 25, "high": 15, "medium": 8, "low": 3}

    # Hardening targets
    SECURE_FILE_MODE = 0o600
    SECURE_DIR_MODE = 0o700