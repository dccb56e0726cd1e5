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
Data models for configuration audits, findings, and waivers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any


class Severity(str, Enum):
    """Severity levels for audit findings."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Highest first; used for sorting and grouping in reports.
SEVERITY_ORDER: tuple[Severity, ...] = (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW)


class SchemaDialect(str, Enum):
    """Which generation of field names a configuration uses."""

    LEGACY = "legacy"
    CURRENT = "current"
    UNKNOWN = "unknown"


class VersionSource(str, Enum):
    """Where the detected product version came from."""

    CLI = "cli"
    ENV = "env"
    CONFIG = "config"
    STATE = "state"
    PACKAGE = "package"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class VersionInfo:
    """A parsed product version.

    ``format`` is ``"date"`` for calendar versions (``2026.1.5``) and
    ``"semver"`` for ordinary semantic versions.
    """

    raw: str
    major: int | None = None
    minor: int | None = None
    patch: int | None = None
    format: str = "unknown"


@dataclass(frozen=True)
class Finding:
    """A single rule violation discovered in a configuration snapshot."""

    code: str  # Evaluator prefix + 3-digit sequence, e.g. NET001
    severity: Severity
    title: str
    detail: str
    recommendation: str
    fixable: bool = False
    path: str | None = None  # Dotted config path or filesystem path

    def to_dict(self) -> dict[str, Any]:
        """Convert finding to dictionary."""
        data: dict[str, Any] = {
            "code": self.code,
            "severity": self.severity.value,
            "title": self.title,
            "detail": self.detail,
            "recommendation": self.recommendation,
            "fixable": self.fixable,
        }
        if self.path is not None:
            data["path"] = self.path
        return data


@dataclass(frozen=True)
class Waiver:
    """A time-boxed suppression of one finding code, optionally scoped to a path."""

    code: str
    reason: str
    expires_at: datetime
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    path: str | None = None

    def matches(self, finding: Finding) -> bool:
        """Return True when this waiver suppresses *finding*."""
        if finding.code != self.code:
            return False
        if self.path:
            return finding.path == self.path
        return True

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.expires_at < now

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code}
        if self.path:
            data["path"] = self.path
        data["reason"] = self.reason
        data["createdAt"] = self.created_at.isoformat()
        data["expiresAt"] = self.expires_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Waiver:
        """Build a waiver from its stored form.

        Raises:
            ValueError: If ``code`` is missing or ``expiresAt`` cannot be parsed.
                An unreadable ``createdAt`` falls back to the expiry.
        """
        code = data.get("code")
        if not isinstance(code, str) or not code:
            raise ValueError("waiver is missing a code")
        expires_at = _parse_timestamp(data.get("expiresAt"))
        try:
            created_at = _parse_timestamp(data.get("createdAt"))
        except ValueError:
            created_at = expires_at
        path = data.get("path")
        return cls(
            code=code,
            reason=str(data.get("reason", "")),
            expires_at=expires_at,
            created_at=created_at,
            path=path if isinstance(path, str) and path else None,
        )


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"invalid timestamp: {value!r}")
    text = value.strip()
    # fromisoformat() only accepts a trailing "Z" from Python 3.11 on
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class ValidationIssue:
    """A schema-consistency problem found in the configuration."""

    level: str  # "warning" or "error"
    code: str
    message: str
    path: str | None = None
    recommendation: str | None = None
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"level": self.level, "code": self.code, "message": self.message}
        if self.path is not None:
            data["path"] = self.path
        if self.line is not None:
            data["line"] = self.line
        if self.recommendation is not None:
            data["recommendation"] = self.recommendation
        return data


@dataclass(frozen=True)
class ScanContext:
    """Resolved facts about the installation that are not in the configuration itself.

    Built once per scan by :func:`rubberband.core.context.build_scan_context`
    and never mutated afterwards.  Environment overrides are already folded
    in, so evaluators can stay pure functions of ``(config, context)``.
    """

    config_path: Path
    state_dir: Path
    schema: SchemaDialect = SchemaDialect.UNKNOWN
    version: VersionInfo | None = None
    version_source: VersionSource = VersionSource.UNKNOWN
    waivers: tuple[Waiver, ...] = ()
    config_text: str | None = None  # Raw source text for secret scanning and line hints


@dataclass
class ScanResult:
    """Results from auditing one configuration snapshot."""

    findings: list[Finding]
    score: int
    context: ScanContext
    waived_count: int = 0
    validation: list[ValidationIssue] = field(default_factory=list)
    analyzers_used: list[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_critical(self) -> bool:
        return any(f.severity == Severity.CRITICAL for f in self.findings)

    def get_findings_by_severity(self, severity: Severity) -> list[Finding]:
        """Get all findings of a specific severity."""
        return [f for f in self.findings if f.severity == severity]

    def severity_counts(self) -> dict[str, int]:
        counts = {sev.value: 0 for sev in SEVERITY_ORDER}
        for finding in self.findings:
            counts[finding.severity.value] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        """Convert scan result to dictionary."""
        version = self.context.version
        return {
            "openclaw": {
                "version": version.raw if version else None,
                "schema": self.context.schema.value,
                "source": self.context.version_source.value,
            },
            "validation": [issue.to_dict() for issue in self.validation],
            "score": self.score,
            "waived": self.waived_count,
            "summary": {**self.severity_counts(), "total": len(self.findings)},
            "findings": [f.to_dict() for f in self.findings],
            "timestamp": self.timestamp.isoformat(),
        }
