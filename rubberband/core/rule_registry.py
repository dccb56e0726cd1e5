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
Finding-code catalog.

Evaluators under ``data/packs/<pack>/python/`` decide *when* a code fires;
the pack's ``pack.yaml`` declares *what* the code is: severity, category,
and which remediation the hardener has for it.  ``list-rules`` prints the
catalog and the test suite checks it against the hardener's fix table.

Extra packs (an organisation's own codes, for example) are directories
with their own ``pack.yaml``; codes must be unique across packs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..config.constants import RubberbandConstants

logger = logging.getLogger(__name__)

MANIFEST_NAME = "pack.yaml"
FIX_KINDS = ("config", "filesystem", "none")


@dataclass(frozen=True)
class RuleDefinition:
    """Catalog entry for one finding code."""

    id: str
    pack_name: str
    description: str = ""
    category: str = ""
    default_severity: str = ""
    analyzer: str = ""
    fixable: bool = False
    # One of FIX_KINDS
    fix: str = "none"
    strict_only: bool = False

    @classmethod
    def from_manifest(cls, rule_id: str, pack_name: str, data: dict[str, Any]) -> RuleDefinition:
        fix = str(data.get("fix", "none")).lower()
        if fix not in FIX_KINDS:
            raise ValueError(f"{pack_name}/{rule_id}: unknown fix kind '{fix}'")
        return cls(
            id=rule_id,
            pack_name=pack_name,
            description=str(data.get("description", "")),
            category=str(data.get("category", "")),
            default_severity=str(data.get("severity", "")).lower(),
            analyzer=str(data.get("analyzer", "")),
            fixable=bool(data.get("fixable", False)),
            fix=fix,
            strict_only=bool(data.get("strict_only", False)),
        )


@dataclass
class RulePack:
    """The rules declared by one ``pack.yaml``."""

    name: str
    version: str
    description: str
    path: Path
    rules: dict[str, RuleDefinition] = field(default_factory=dict)


class RuleRegistry:
    """Read-only view over every loaded pack, keyed by finding code."""

    def __init__(self) -> None:
        self._rules: dict[str, RuleDefinition] = {}
        self._packs: dict[str, RulePack] = {}

    def register_pack(self, pack: RulePack) -> None:
        """
        Add every rule of *pack*.

        Raises:
            ValueError: If a code is already owned by another pack.
        """
        clashes = sorted(
            code for code in pack.rules if code in self._rules and self._rules[code].pack_name != pack.name
        )
        if clashes:
            owner = self._rules[clashes[0]].pack_name
            raise ValueError(f"Pack '{pack.name}' redefines codes owned by '{owner}': {', '.join(clashes)}")
        self._rules.update(pack.rules)
        self._packs[pack.name] = pack
        logger.debug("Registered pack %s (%d rules)", pack.name, len(pack.rules))

    def get(self, rule_id: str) -> RuleDefinition | None:
        return self._rules.get(rule_id)

    def all_rules(self) -> dict[str, RuleDefinition]:
        return dict(self._rules)

    def all_packs(self) -> dict[str, RulePack]:
        return dict(self._packs)

    def rules_for_category(self, category: str) -> list[RuleDefinition]:
        return [r for r in self._rules.values() if r.category == category]

    def rule_ids(self) -> set[str]:
        return set(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._rules


class PackLoader:
    """Reads ``pack.yaml`` manifests from the built-in and extra pack directories."""

    def load_pack(self, path: Path | str) -> RulePack:
        """
        Load the pack rooted at *path*.

        Raises:
            FileNotFoundError: If *path* has no ``pack.yaml``.
            ValueError: If a rule declares an unknown fix kind.
        """
        path = Path(path)
        manifest = path / MANIFEST_NAME
        if not manifest.is_file():
            raise FileNotFoundError(f"Pack manifest not found: {manifest}")

        data = yaml.safe_load(manifest.read_text(encoding="utf-8")) or {}
        name = str(data.get("name") or path.name)

        rules: dict[str, RuleDefinition] = {}
        for rule_id, rule_data in (data.get("rules") or {}).items():
            if not isinstance(rule_data, dict):
                logger.warning("Ignoring malformed entry %s in pack %s", rule_id, name)
                continue
            rules[str(rule_id)] = RuleDefinition.from_manifest(str(rule_id), name, rule_data)

        return RulePack(
            name=name,
            version=str(data.get("version", "0.0")),
            description=str(data.get("description", "")),
            path=path,
            rules=rules,
        )

    def _pack_dirs(self, built_in_dir: Path, extra_dirs: Iterable[Path | str]) -> Iterator[Path]:
        if built_in_dir.is_dir():
            yield from (child for child in sorted(built_in_dir.iterdir()) if (child / MANIFEST_NAME).is_file())
        for extra in map(Path, extra_dirs):
            if (extra / MANIFEST_NAME).is_file():
                yield extra
            elif extra.is_dir():
                yield from (child for child in sorted(extra.iterdir()) if (child / MANIFEST_NAME).is_file())
            else:
                logger.warning("Rule pack path is not a directory: %s", extra)

    def discover_packs(
        self,
        built_in_dir: Path | None = None,
        extra_dirs: Iterable[Path | str] = (),
    ) -> list[RulePack]:
        """Load built-in packs, then each extra pack; unreadable packs are logged and skipped."""
        packs: list[RulePack] = []
        for pack_dir in self._pack_dirs(built_in_dir or RubberbandConstants.PACKS_DIR, extra_dirs):
            try:
                packs.append(self.load_pack(pack_dir))
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Failed to load rule pack %s: %s", pack_dir, e)
        return packs

    def build_registry(
        self,
        built_in_dir: Path | None = None,
        extra_dirs: Iterable[Path | str] = (),
    ) -> RuleRegistry:
        registry = RuleRegistry()
        for pack in self.discover_packs(built_in_dir, extra_dirs):
            registry.register_pack(pack)
        return registry
