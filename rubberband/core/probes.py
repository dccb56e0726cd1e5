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
Read-only filesystem and process probes.

Every probe folds failure into "absent": a missing file, an unreadable
directory, a path with an embedded NUL, a command that times out or exits
non-zero.  None of them raise.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def get_file_mode(path: str | Path) -> str | None:
    """Return the permission bits of *path* as a 3-digit octal string (``"644"``)."""
    try:
        mode = os.stat(path).st_mode & 0o777
    except (OSError, ValueError):
        return None
    return format(mode, "03o")


def file_exists(path: str | Path) -> bool:
    try:
        os.stat(path)
    except (OSError, ValueError):
        return False
    return True


def read_text(path: str | Path) -> str | None:
    """Return the UTF-8 contents of *path*, or ``None`` if it cannot be read."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, ValueError):
        return None


def run_command(args: list[str], timeout: float) -> subprocess.CompletedProcess[str] | None:
    """Run *args* and return the completed process, or ``None`` if it could not run."""
    try:
        return subprocess.run(args, capture_output=True, text=True, timeout=timeout, check=False)
    except subprocess.TimeoutExpired:
        logger.debug("Probe timed out after %.1fs: %s", timeout, " ".join(args))
    except (OSError, ValueError) as e:
        # ValueError: an embedded NUL in the command line
        logger.debug("Probe failed to start %r: %s", args[0], e)
    return None


def command_exists(command: str, timeout: float = 1.5) -> bool:
    """Return True if *command* resolves to something runnable.

    Commands containing a path separator are checked by existence.  Bare
    names are probed with ``<command> --version`` and must exit 0.
    """
    if not command:
        return False
    if "/" in command or "\\" in command:
        return file_exists(command)
    result = run_command([command, "--version"], timeout)
    return result is not None and result.returncode == 0
