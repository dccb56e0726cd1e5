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
Rubberband - Security auditor for OpenClaw configurations.
"""

from ._version import __version__

__author__ = "Cisco Systems, Inc."


def __getattr__(name: str):
    """Lazy-load public API symbols on first access.

    ``import rubberband`` stays cheap; the evaluators load on first use.
    """
    _lazy_map = {
        "Config": (".config.config", "Config"),
        "RubberbandConstants": (".config.constants", "RubberbandConstants"),
        "ConfigLoader": (".core.loader", "ConfigLoader"),
        "load_config": (".core.loader", "load_config"),
        "Finding": (".core.models", "Finding"),
        "ScanContext": (".core.models", "ScanContext"),
        "ScanResult": (".core.models", "ScanResult"),
        "SchemaDialect": (".core.models", "SchemaDialect"),
        "Severity": (".core.models", "Severity"),
        "Waiver": (".core.models", "Waiver"),
        "ConfigScanner": (".core.scanner", "ConfigScanner"),
        "run_scan": (".core.scanner", "run_scan"),
        "count_by_severity": (".core.scanner", "count_by_severity"),
        "build_scan_context": (".core.context", "build_scan_context"),
        "apply_waivers": (".core.waivers", "apply_waivers"),
        "WaiverStore": (".core.waivers", "WaiverStore"),
        "preview_changes": (".core.hardener", "preview_changes"),
        "apply_fixes": (".core.hardener", "apply_fixes"),
        "validate_config": (".core.validator", "validate_config"),
    }
    if name in _lazy_map:
        module_path, attr = _lazy_map[name]
        import importlib

        mod = importlib.import_module(module_path, __package__)
        val = getattr(mod, attr)
        # Cache on the module so __getattr__ is only called once per symbol
        globals()[name] = val
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ConfigScanner",
    "run_scan",
    "count_by_severity",
    "build_scan_context",
    "Finding",
    "ScanContext",
    "ScanResult",
    "SchemaDialect",
    "Severity",
    "Waiver",
    "WaiverStore",
    "apply_waivers",
    "preview_changes",
    "apply_fixes",
    "validate_config",
    "ConfigLoader",
    "load_config",
    "Config",
    "RubberbandConstants",
]
