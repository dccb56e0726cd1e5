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
Waivers: time-boxed suppression of known findings.

The store lives at ``<state dir>/rubberband/waivers.json``::

    {
      "waivers": [
        {"code": "NET002", "reason": "VPN only", "createdAt": "...", "expiresAt": "..."}
      ]
    }

Expired records stay on disk until removed but never reach the filter:
:meth:`WaiverStore.load` only returns active waivers, and
:func:`apply_waivers` does no time comparison of its own.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import json5

from .exceptions import WaiverError
from .models import Finding, Waiver

logger = logging.getLogger(__name__)

_RELATIVE_EXPIRY_RE = re.compile(r"^\s*(\d+)\s*([hdw])\s*$", re.IGNORECASE)
_EXPIRY_UNITS = {"h": "hours", "d": "days", "w": "weeks"}


def apply_waivers(findings: list[Finding], waivers: Iterable[Waiver]) -> tuple[list[Finding], int]:
    """Drop findings matched by any waiver.

    Returns:
        The surviving findings in their original order and the number removed.
    """
    waivers = list(waivers)
    if not waivers:
        return list(findings), 0

    kept: list[Finding] = []
    waived = 0
    for finding in findings:
        if any(waiver.matches(finding) for waiver in waivers):
            waived += 1
            continue
        kept.append(finding)
    return kept, waived


def parse_expiry(value: str, now: datetime | None = None) -> datetime:
    """
    Parse a waiver expiry.

    Accepts a relative duration (``12h``, ``7d``, ``2w``) or an ISO-8601
    date or datetime.  Naive values are taken as UTC.

    Raises:
        WaiverError: If *value* is neither.
    """
    now = now or datetime.now(timezone.utc)
    if not value or not value.strip():
        raise WaiverError("Expiry is required")

    match = _RELATIVE_EXPIRY_RE.match(value)
    if match:
        amount, unit = int(match.group(1)), match.group(2).lower()
        try:
            return now + timedelta(**{_EXPIRY_UNITS[unit]: amount})
        except OverflowError as e:
            raise WaiverError(f"Invalid expiry '{value}': too far in the future") from e

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            day = date.fromisoformat(text)
        except ValueError as e:
            raise WaiverError(f"Invalid expiry '{value}': use e.g. 7d, 12h, 2w or an ISO date") from e
        parsed = datetime(day.year, day.month, day.day)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class WaiverStore:
    """Reads and rewrites the waiver file.

    Every mutation loads the active set, changes it and rewrites the whole
    file; there is no partial update.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_records(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            parsed = json5.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning("Could not read waiver store %s: %s", self.path, e)
            return []
        if not isinstance(parsed, dict) or not isinstance(parsed.get("waivers", []), list):
            logger.warning("Ignoring malformed waiver store %s", self.path)
            return []
        return [r for r in parsed.get("waivers", []) if isinstance(r, dict)]

    def load(self, now: datetime | None = None) -> list[Waiver]:
        """Return the active (non-expired, parseable) waivers."""
        now = now or datetime.now(timezone.utc)
        active: list[Waiver] = []
        for record in self._read_records():
            try:
                waiver = Waiver.from_dict(record)
            except ValueError as e:
                logger.warning("Dropping waiver with invalid data %r: %s", record.get("code"), e)
                continue
            if waiver.is_expired(now):
                logger.debug("Skipping expired waiver for %s", waiver.code)
                continue
            active.append(waiver)
        logger.debug("Loaded %d active waiver(s) from %s", len(active), self.path)
        return active

    def list(self) -> list[Waiver]:
        """Alias for :meth:`load`; listed waivers are always the active set."""
        return self.load()

    def save(self, waivers: Iterable[Waiver]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"waivers": [w.to_dict() for w in waivers]}
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def add(self, code: str, reason: str, expires_at: datetime, path: str | None = None) -> Waiver:
        """
        Add a waiver and persist the store.

        Raises:
            WaiverError: If *code* or *reason* is empty.
        """
        code = (code or "").strip().upper()
        reason = (reason or "").strip()
        if not code:
            raise WaiverError("Waiver code is required")
        if not reason:
            raise WaiverError("Waiver reason is required")

        waiver = Waiver(code=code, reason=reason, expires_at=expires_at, path=path or None)
        waivers = self.load()
        waivers.append(waiver)
        self.save(waivers)
        return waiver

    def remove(self, code: str, path: str | None = None) -> int:
        """Remove waivers for *code* (narrowed to *path* if given); return the count removed."""
        code = (code or "").strip().upper()
        waivers = self.load()
        kept = [w for w in waivers if w.code != code or (path is not None and w.path != path)]
        removed = len(waivers) - len(kept)
        self.save(kept)
        return removed
