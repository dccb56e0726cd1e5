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
Scan policy: the tunable lists, thresholds and weights behind every rule.

A ``ScanPolicy`` captures what counts as an exposed bind address, which
extensions are known-bad, how much each severity costs, and which rules an
organisation has switched off.

Usage
-----
    from rubberband.core.scan_policy import ScanPolicy

    # Load built-in defaults
    policy = ScanPolicy.default()

    # Load an org policy (merges on top of defaults)
    policy = ScanPolicy.from_yaml("my_policy.yaml")

    # Dump the current (including default) policy for editing
    policy.to_yaml("generated_policy.yaml")

Evaluators receive the policy as an argument and use it in place of
hardcoded sets/lists.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..config.constants import RubberbandConstants
from .exceptions import PolicyError

logger = logging.getLogger(__name__)

_DEFAULT_POLICY_PATH = RubberbandConstants.DEFAULT_POLICY_PATH


# ---------------------------------------------------------------------------
# Data classes for each policy section
# ---------------------------------------------------------------------------


@dataclass
class NetworkPolicy:
    """Controls what counts as an exposed gateway."""

    exposed_binds: set[str] = field(default_factory=lambda: {"lan", "tailnet", "public", "0.0.0.0", "::", "all"})
    exposed_hosts: set[str] = field(default_factory=lambda: {"0.0.0.0", "::"})
    default_port: int = 18789


@dataclass
class ApiKeyPattern:
    """A named regex for a provider's API key format."""

    name: str
    pattern: str


def _default_api_key_patterns() -> list[ApiKeyPattern]:
    return [
        ApiKeyPattern("OpenAI", r"sk-[a-zA-Z0-9]{48}"),
        ApiKeyPattern("Anthropic", r"sk-ant-[a-zA-Z0-9-]{95}"),
        ApiKeyPattern("GitHub", r"gh[ps]_[a-zA-Z0-9]{36}"),
        ApiKeyPattern("Slack", r"xox[baprs]-[a-zA-Z0-9-]+"),
    ]


@dataclass
class CredentialPolicy:
    """Controls plaintext secret detection and required file modes."""

    api_key_patterns: list[ApiKeyPattern] = field(default_factory=_default_api_key_patterns)
    required_file_mode: str = "600"


@dataclass
class SkillPolicy:
    """Controls installed-extension risk checks."""

    known_malicious: set[str] = field(default_factory=lambda: {"crypto-miner-helper", "free-tokens-generator"})
    known_risky: set[str] = field(default_factory=lambda: {"moltbook-skill"})
    dangerous_permissions: set[str] = field(
        default_factory=lambda: {
            "filesystem:write",
            "filesystem:delete",
            "shell:execute",
            "network:unrestricted",
            "credentials:read",
        }
    )
    official_source_prefix: str = "official:"


@dataclass
class RuntimePolicy:
    """Controls runtime hardening checks."""

    verbose_log_levels: set[str] = field(default_factory=lambda: {"debug", "trace"})
    allowed_log_modes: set[str] = field(default_factory=lambda: {"600", "640"})


@dataclass
class ApprovalsPolicy:
    """Controls execution-approval checks."""

    unrestricted_modes: set[str] = field(default_factory=lambda: {"full"})
    deny_markers: set[str] = field(default_factory=lambda: {"exec", "all", "*"})


@dataclass
class WebPolicy:
    """Controls outbound web-tool checks."""

    max_redirects: int = 3


@dataclass
class MemoryPolicy:
    """Controls memory-backend availability checks."""

    external_backend: str = "qmd"
    default_command: str = "qmd"
    probe_timeout_seconds: float = 1.5


@dataclass
class ScoringPolicy:
    """Per-severity score deductions."""

    severity_weights: dict[str, int] = field(
        default_factory=lambda: {"critical": 25, "high": 15, "medium": 8, "low": 3}
    )

    def weight_for(self, severity: str) -> int:
        return self.severity_weights.get(severity, 0)


@dataclass
class AnalyzersPolicy:
    """Toggle each evaluator on or off."""

    network: bool = True
    credentials: bool = True
    access: bool = True
    skills: bool = True
    runtime: bool = True
    approvals: bool = True
    web: bool = True
    memory: bool = True


# ---------------------------------------------------------------------------
# The top-level policy object
# ---------------------------------------------------------------------------


@dataclass
class ScanPolicy:
    """Every knob the evaluators and the scorer read, plus the disabled rule list."""

    # Metadata
    policy_name: str = "default"
    policy_version: str = "1.0"

    # Sections
    network: NetworkPolicy = field(default_factory=NetworkPolicy)
    credentials: CredentialPolicy = field(default_factory=CredentialPolicy)
    skills: SkillPolicy = field(default_factory=SkillPolicy)
    runtime: RuntimePolicy = field(default_factory=RuntimePolicy)
    approvals: ApprovalsPolicy = field(default_factory=ApprovalsPolicy)
    web: WebPolicy = field(default_factory=WebPolicy)
    memory: MemoryPolicy = field(default_factory=MemoryPolicy)
    scoring: ScoringPolicy = field(default_factory=ScoringPolicy)
    analyzers: AnalyzersPolicy = field(default_factory=AnalyzersPolicy)
    disabled_rules: set[str] = field(default_factory=set)

    # -----------------------------------------------------------------------
    # Convenience helpers
    # -----------------------------------------------------------------------

    def is_rule_enabled(self, code: str) -> bool:
        return code not in self.disabled_rules

    @property
    def compiled_api_key_patterns(self) -> list[tuple[str, re.Pattern]]:
        """Lazy-compiled ``(name, regex)`` pairs from ``credentials.api_key_patterns``."""
        if not hasattr(self, "_api_key_re_cache"):
            compiled = [(p.name, re.compile(p.pattern)) for p in self.credentials.api_key_patterns]
            object.__setattr__(self, "_api_key_re_cache", compiled)
        return self._api_key_re_cache  # type: ignore[attr-defined, no-any-return]

    # -----------------------------------------------------------------------
    # Construction helpers
    # -----------------------------------------------------------------------

    @classmethod
    def default(cls) -> ScanPolicy:
        """Return the policy bundled as ``data/default_policy.yaml``."""
        if not _DEFAULT_POLICY_PATH.exists():
            logger.warning("Built-in policy missing at %s; using dataclass defaults", _DEFAULT_POLICY_PATH)
            return cls()
        return cls.from_yaml(_DEFAULT_POLICY_PATH)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ScanPolicy:
        """
        Load *path* merged over the bundled defaults.

        A user file only lists what it changes; every other section keeps
        its default.

        Raises:
            FileNotFoundError: If *path* does not exist.
            PolicyError: If the file is not valid YAML or has the wrong shape.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Policy file not found: {path}")

        try:
            with open(path, encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise PolicyError(f"Invalid YAML in policy file {path}: {e}") from e
        if not isinstance(raw, dict):
            raise PolicyError(f"Policy file {path} must contain a mapping at the top level")

        # If this IS the default file, just parse directly
        is_default = path.resolve() == _DEFAULT_POLICY_PATH.resolve()
        if is_default:
            data = raw
        else:
            # Otherwise, load defaults first, then overlay the user's file
            data = cls._deep_merge(cls._load_default_raw(), raw)

        try:
            return cls._from_dict(data)
        except (TypeError, ValueError, AttributeError, re.error) as e:
            raise PolicyError(f"Invalid policy file {path}: {e}") from e

    def to_yaml(self, path: str | Path) -> None:
        """Write the effective policy, defaults included, as YAML."""
        data = self._to_dict()
        with open(path, "w", encoding="utf-8") as fh:
            fh.write("# Rubberband scan policy\n")
            fh.write("# Pass with: rubberband scan --policy <file>\n")
            fh.write("# Sections you delete fall back to the bundled defaults.\n\n")
            yaml.dump(data, fh, default_flow_style=False, sort_keys=False, width=120)

    # -----------------------------------------------------------------------
    # Internal parsing
    # -----------------------------------------------------------------------

    @classmethod
    def _load_default_raw(cls) -> dict[str, Any]:
        if _DEFAULT_POLICY_PATH.exists():
            with open(_DEFAULT_POLICY_PATH, encoding="utf-8") as fh:
                return yaml.safe_load(fh) or {}
        return {}

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Merge *override* into a copy of *base*; mappings recurse, lists replace."""
        result = dict(base)
        for key, val in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(val, dict):
                result[key] = ScanPolicy._deep_merge(result[key], val)
            else:
                result[key] = val
        return result

    @classmethod
    def _from_dict(cls, d: dict[str, Any]) -> ScanPolicy:
        nw = d.get("network") or {}
        cr = d.get("credentials") or {}
        sk = d.get("skills") or {}
        rt = d.get("runtime") or {}
        ap = d.get("approvals") or {}
        wb = d.get("web") or {}
        mm = d.get("memory") or {}
        sc = d.get("scoring") or {}
        az = d.get("analyzers") or {}

        defaults = cls()

        if "api_key_patterns" in cr:
            patterns = [ApiKeyPattern(name=str(p["name"]), pattern=str(p["pattern"])) for p in cr["api_key_patterns"]]
        else:
            patterns = defaults.credentials.api_key_patterns

        weights = dict(defaults.scoring.severity_weights)
        weights.update({str(k).lower(): int(v) for k, v in (sc.get("severity_weights") or {}).items()})

        policy = cls(
            policy_name=d.get("policy_name", "default"),
            policy_version=str(d.get("policy_version", "1.0")),
            network=NetworkPolicy(
                exposed_binds=set(nw.get("exposed_binds", defaults.network.exposed_binds)),
                exposed_hosts=set(nw.get("exposed_hosts", defaults.network.exposed_hosts)),
                default_port=int(nw.get("default_port", defaults.network.default_port)),
            ),
            credentials=CredentialPolicy(
                api_key_patterns=patterns,
                required_file_mode=str(cr.get("required_file_mode", defaults.credentials.required_file_mode)),
            ),
            skills=SkillPolicy(
                known_malicious=set(sk.get("known_malicious", defaults.skills.known_malicious)),
                known_risky=set(sk.get("known_risky", defaults.skills.known_risky)),
                dangerous_permissions=set(sk.get("dangerous_permissions", defaults.skills.dangerous_permissions)),
                official_source_prefix=sk.get("official_source_prefix", defaults.skills.official_source_prefix),
            ),
            runtime=RuntimePolicy(
                verbose_log_levels=set(rt.get("verbose_log_levels", defaults.runtime.verbose_log_levels)),
                allowed_log_modes={str(m) for m in rt.get("allowed_log_modes", defaults.runtime.allowed_log_modes)},
            ),
            approvals=ApprovalsPolicy(
                unrestricted_modes=set(ap.get("unrestricted_modes", defaults.approvals.unrestricted_modes)),
                deny_markers=set(ap.get("deny_markers", defaults.approvals.deny_markers)),
            ),
            web=WebPolicy(
                max_redirects=int(wb.get("max_redirects", defaults.web.max_redirects)),
            ),
            memory=MemoryPolicy(
                external_backend=mm.get("external_backend", defaults.memory.external_backend),
                default_command=mm.get("default_command", defaults.memory.default_command),
                probe_timeout_seconds=float(mm.get("probe_timeout_seconds", defaults.memory.probe_timeout_seconds)),
            ),
            scoring=ScoringPolicy(severity_weights=weights),
            analyzers=AnalyzersPolicy(
                network=az.get("network", True),
                credentials=az.get("credentials", True),
                access=az.get("access", True),
                skills=az.get("skills", True),
                runtime=az.get("runtime", True),
                approvals=az.get("approvals", True),
                web=az.get("web", True),
                memory=az.get("memory", True),
            ),
            disabled_rules=set(d.get("disabled_rules") or []),
        )
        # Fail fast on bad regexes rather than mid-scan
        _ = policy.compiled_api_key_patterns
        return policy

    def _to_dict(self) -> dict[str, Any]:
        return {
            "policy_name": self.policy_name,
            "policy_version": self.policy_version,
            "network": {
                "exposed_binds": sorted(self.network.exposed_binds),
                "exposed_hosts": sorted(self.network.exposed_hosts),
                "default_port": self.network.default_port,
            },
            "credentials": {
                "api_key_patterns": [{"name": p.name, "pattern": p.pattern} for p in self.credentials.api_key_patterns],
                "required_file_mode": self.credentials.required_file_mode,
            },
            "skills": {
                "known_malicious": sorted(self.skills.known_malicious),
                "known_risky": sorted(self.skills.known_risky),
                "dangerous_permissions": sorted(self.skills.dangerous_permissions),
                "official_source_prefix": self.skills.official_source_prefix,
            },
            "runtime": {
                "verbose_log_levels": sorted(self.runtime.verbose_log_levels),
                "allowed_log_modes": sorted(self.runtime.allowed_log_modes),
            },
            "approvals": {
                "unrestricted_modes": sorted(self.approvals.unrestricted_modes),
                "deny_markers": sorted(self.approvals.deny_markers),
            },
            "web": {
                "max_redirects": self.web.max_redirects,
            },
            "memory": {
                "external_backend": self.memory.external_backend,
                "default_command": self.memory.default_command,
                "probe_timeout_seconds": self.memory.probe_timeout_seconds,
            },
            "scoring": {
                "severity_weights": dict(self.scoring.severity_weights),
            },
            "analyzers": {
                "network": self.analyzers.network,
                "credentials": self.analyzers.credentials,
                "access": self.analyzers.access,
                "skills": self.analyzers.skills,
                "runtime": self.analyzers.runtime,
                "approvals": self.analyzers.approvals,
                "web": self.analyzers.web,
                "memory": self.analyzers.memory,
            },
            "disabled_rules": sorted(self.disabled_rules),
        }
