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

"""Rubberband exceptions.

This module defines custom exceptions for Rubberband operations.
All exceptions inherit from RubberbandError for easy catching.

Example:
    >>> from rubberband.core.loader import ConfigLoader
    >>> from rubberband.core.exceptions import ConfigLoadError
    >>>
    >>> try:
    ...     loaded = ConfigLoader().load("~/.openclaw/openclaw.json")
    ... except ConfigLoadError as e:
    ...     print(f"Failed to load config ({e.code}): {e}")
"""


class RubberbandError(Exception):
    """Base exception for all Rubberband errors."""

    pass


class ConfigLoadError(RubberbandError):
    """Raised when the target configuration cannot be loaded.

    ``code`` is one of:
    - ``NOT_FOUND``: the file does not exist or cannot be read
    - ``PARSE_ERROR``: the file is not a valid JSON5 object
    - ``PERMISSION_DENIED``: the file exists but is not readable
    """

    NOT_FOUND = "NOT_FOUND"
    PARSE_ERROR = "PARSE_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    def __init__(self, message: str, code: str = NOT_FOUND):
        super().__init__(message)
        self.code = code


class WaiverError(RubberbandError):
    """Raised when a waiver cannot be created.

    This typically indicates:
    - Empty finding code or reason
    - Unparseable expiry value
    """

    pass


class PolicyError(RubberbandError):
    """Raised when a scan policy file is invalid."""

    pass
