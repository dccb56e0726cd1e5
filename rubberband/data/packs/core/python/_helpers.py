# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Shared helpers for core-pack check functions.
"""

from __future__ import annotations

import re

_KEY_CACHE: dict[str, re.Pattern] = {}


def line_of_offset(text: str, offset: int) -> int:
    """Return the 1-based line number containing character *offset*."""
    return text.count("\n", 0, offset) + 1


def find_line_for_key(text: str | None, key: str) -> int | None:
    """Return the 1-based line of the first ``key:`` occurrence in *text*.

    Matches both bare JSON5 keys (``token:``) and quoted ones (``"token":``).
    """
    if not text or not key:
        return None
    pattern = _KEY_CACHE.get(key)
    if pattern is None:
        pattern = re.compile(r"(?:^|[^\w])(" + re.escape(key) + r")[\"']?\s*:", re.MULTILINE)
        _KEY_CACHE[key] = pattern
    match = pattern.search(text)
    if match is None:
        return None
    return line_of_offset(text, match.start(1))

