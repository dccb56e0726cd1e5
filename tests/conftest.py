# Copyright 2026 Cisco Systems, Inc. and its affiliates
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
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest before running tests.
All fixtures defined here are available to every test module without
explicit imports.
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest
from dotenv import load_dotenv

from rubberband.core.models import ScanContext, SchemaDialect, Waiver
from rubberband.core.scan_policy import ScanPolicy

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

project_root = Path(__file__).parent.parent
env_file = project_root / ".env"

if env_file.exists():
    load_dotenv(env_file)


# ---------------------------------------------------------------------------
# Installation fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    """An empty OpenClaw state directory with owner-only permissions."""
    d = tmp_path / ".openclaw"
    d.mkdir()
    d.chmod(0o700)
    return d


@pytest.fixture
def write_config(state_dir: Path):
    """Factory fixture that writes ``openclaw.json`` into the state dir.

    Usage::

        path = write_config({"gateway": {"host": "0.0.0.0"}})
        path = write_config("{gateway: {host: '0.0.0.0'},}")  # raw JSON5
    """

    def _write(config: dict | str, mode: int = 0o600) -> Path:
        path = state_dir / "openclaw.json"
        text = config if isinstance(config, str) else json.dumps(config, indent=2)
        path.write_text(text, encoding="utf-8")
        path.chmod(mode)
        return path

    return _write


@pytest.fixture
def make_context(tmp_path: Path):
    """Factory fixture for :class:`ScanContext` objects.

    By default the paths point at locations that do not exist, so the
    filesystem probes report nothing.

    Usage::

        ctx = make_context(schema=SchemaDialect.CURRENT)
        ctx = make_context(state_dir=state_dir, config_text=raw)
    """

    def _make(
        schema: SchemaDialect = SchemaDialect.UNKNOWN,
        config_path: Path | None = None,
        state_dir: Path | None = None,
        waivers: tuple[Waiver, ...] = (),
        config_text: str | None = None,
    ) -> ScanContext:
        missing = tmp_path / "missing-state"
        return ScanContext(
            config_path=config_path or missing / "openclaw.json",
            state_dir=state_dir or missing,
            schema=schema,
            waivers=tuple(waivers),
            config_text=config_text,
        )

    return _make


@pytest.fixture
def policy() -> ScanPolicy:
    """The built-in default policy."""
    return ScanPolicy.default()


@pytest.fixture
def make_policy(tmp_path: Path):
    """Factory fixture for creating :class:`ScanPolicy` from a YAML string.

    Usage::

        policy = make_policy('''
            disabled_rules:
              - RUN001
        ''')
    """
    _counter = [0]

    def _make(yaml_str: str) -> ScanPolicy:
        _counter[0] += 1
        p = tmp_path / f"policy-{_counter[0]}.yaml"
        p.write_text(textwrap.dedent(yaml_str))
        return ScanPolicy.from_yaml(str(p))

    return _make
