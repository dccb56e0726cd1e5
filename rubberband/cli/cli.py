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

"""Command-line interface for Rubberband."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from ..config.config import Config
from ..config.constants import RubberbandConstants
from ..core.context import build_scan_context, format_version_banner
from ..core.exceptions import ConfigLoadError, PolicyError, WaiverError
from ..core.hardener import HardenResult, apply_fixes
from ..core.loader import ConfigLoader, LoadedConfig, demo_config
from ..core.models import SEVERITY_ORDER, ScanResult
from ..core.reporters.json_reporter import JSONReporter
from ..core.reporters.markdown_reporter import MarkdownReporter
from ..core.reporters.plan_reporter import PlanReporter, format_validation
from ..core.reporters.sarif_reporter import SARIFReporter
from ..core.rule_registry import PackLoader
from ..core.scan_policy import ScanPolicy
from ..core.scanner import ConfigScanner, count_by_severity
from ..core.validator import validate_config
from ..core.waivers import WaiverStore, parse_expiry

logger = logging.getLogger("rubberband.cli")

_SEPARATOR = "─" * 40


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _configure_logging(args: argparse.Namespace, settings: Config) -> None:
    """Set up the root handler from ``--debug``/``--verbose`` or ``RUBBERBAND_LOG_LEVEL``."""
    if getattr(args, "debug", False):
        level = logging.DEBUG
    elif getattr(args, "verbose", False):
        level = logging.INFO
    else:
        level = getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _load_settings(args: argparse.Namespace) -> Config:
    """Build runtime settings from CLI flags on top of the environment."""
    config_path = getattr(args, "config", None)
    policy_path = getattr(args, "policy", None)
    return Config(
        config_path=Path(config_path) if config_path else None,
        version_override=getattr(args, "openclaw_version", None),
        disable_version_detect=getattr(args, "no_version_detect", False),
        policy_path=Path(policy_path) if policy_path else None,
    )


def _load_policy(settings: Config) -> ScanPolicy:
    """Load scan policy from ``--policy``/``RUBBERBAND_POLICY`` or return the default."""
    if settings.policy_path:
        try:
            policy = ScanPolicy.from_yaml(settings.policy_path)
            logger.info("Using scan policy: %s (%s)", settings.policy_path, policy.policy_name)
            return policy
        except FileNotFoundError:
            print(f"Error: Policy file not found: {settings.policy_path}", file=sys.stderr)
            sys.exit(1)
        except PolicyError as e:
            print(f"Error loading policy file: {e}", file=sys.stderr)
            sys.exit(1)
    return ScanPolicy.default()


def _print_config_error(error: ConfigLoadError, json_mode: bool) -> None:
    if json_mode:
        print(json.dumps({"error": str(error), "code": error.code}))
        return

    print(f"\nError: {error}", file=sys.stderr)
    if error.code == ConfigLoadError.NOT_FOUND:
        print("\nMake sure OpenClaw is installed, or specify a config path:", file=sys.stderr)
        print("  rubberband scan --config /path/to/openclaw.json", file=sys.stderr)
        print(f"  {RubberbandConstants.ENV_CONFIG_PATH}=/path/to/config.json rubberband scan", file=sys.stderr)
        print("\nOr try the demo mode to see example output:", file=sys.stderr)
        print("  rubberband scan --demo\n", file=sys.stderr)
    elif error.code == ConfigLoadError.PARSE_ERROR:
        print("\nThe config file contains invalid JSON5. Check for:", file=sys.stderr)
        print("  - Missing or extra commas", file=sys.stderr)
        print("  - Unquoted keys or strings", file=sys.stderr)
        print("  - Trailing commas\n", file=sys.stderr)
    elif error.code == ConfigLoadError.PERMISSION_DENIED:
        print("\nCheck file permissions or run with appropriate access.\n", file=sys.stderr)


def _load_target(settings: Config, json_mode: bool = False) -> LoadedConfig | None:
    assert settings.config_path is not None
    try:
        return ConfigLoader().load(settings.config_path)
    except ConfigLoadError as e:
        _print_config_error(e, json_mode)
        return None


def _run_scan(
    config: dict, settings: Config, policy: ScanPolicy, raw: str | None, *, waivers=None
) -> ScanResult:
    context = build_scan_context(config, settings, config_text=raw, waivers=waivers)
    validation = validate_config(config, context, raw)
    return ConfigScanner(policy=policy).scan(config, context, validation=validation)


def _format_output(args: argparse.Namespace, result: ScanResult) -> str:
    """Generate the formatted output string for a scan result."""
    fmt = getattr(args, "format", "summary")
    if fmt == "json":
        return JSONReporter().generate_report(result)
    if fmt == "markdown":
        return MarkdownReporter().generate_report(result)
    if fmt == "sarif":
        return SARIFReporter().generate_report(result)
    # summary (default)
    return _generate_summary(result)


def _write_output(args: argparse.Namespace, output: str) -> None:
    """Write *output* to a file or stdout."""
    if getattr(args, "output", None):
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(output)
        print(f"Report saved to: {args.output}")
    else:
        print(output)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def scan_command(args: argparse.Namespace) -> int:
    """Handle the ``scan`` command."""
    settings = _load_settings(args)
    policy = _load_policy(settings)
    json_mode = args.format == "json"

    if args.demo:
        if args.format == "summary":
            print("\n[Demo mode] Using example insecure configuration\n")
        config, raw, waivers = demo_config(), None, ()
    else:
        loaded = _load_target(settings, json_mode)
        if loaded is None:
            return 1
        config, raw, waivers = loaded.config, loaded.raw, None

    result = _run_scan(config, settings, policy, raw, waivers=waivers)
    _write_output(args, _format_output(args, result))

    # Critical findings fail the run, except for the demo
    if not args.demo and result.has_critical:
        return 2
    return 0


def plan_command(args: argparse.Namespace) -> int:
    """Handle the ``plan`` command."""
    settings = _load_settings(args)
    policy = _load_policy(settings)
    loaded = _load_target(settings)
    if loaded is None:
        return 1

    result = _run_scan(loaded.config, settings, policy, loaded.raw)
    print(PlanReporter(strict=args.strict).generate_report(result, loaded.config))
    return 0


def harden_command(args: argparse.Namespace) -> int:
    """Handle the ``harden`` command."""
    settings = _load_settings(args)
    policy = _load_policy(settings)
    loaded = _load_target(settings)
    if loaded is None:
        return 1

    result = _run_scan(loaded.config, settings, policy, loaded.raw)
    harden_result = apply_fixes(
        loaded.config,
        result.findings,
        result.context,
        strict=args.strict,
        dry_run=args.dry_run,
    )
    print(_format_harden(harden_result, args.dry_run))
    return 1 if harden_result.errors else 0


def waive_command(args: argparse.Namespace) -> int:
    """Handle ``waive add|list|remove``."""
    settings = _load_settings(args)
    store = WaiverStore(settings.waiver_path)

    if args.waive_command == "add":
        try:
            expires_at = parse_expiry(args.expires)
            waiver = store.add(args.code, args.reason, expires_at, path=args.path)
        except WaiverError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except OSError as e:
            print(f"Error writing waiver store {store.path}: {e}", file=sys.stderr)
            return 1
        scope = f" at {waiver.path}" if waiver.path else ""
        print(f"Waived {waiver.code}{scope} until {waiver.expires_at.isoformat()}")
        return 0

    if args.waive_command == "list":
        waivers = store.list()
        if not waivers:
            print("No active waivers.")
            return 0
        for waiver in waivers:
            scope = f" [{waiver.path}]" if waiver.path else ""
            print(f"{waiver.code}{scope} expires {waiver.expires_at.isoformat()}")
            print(f"  → {waiver.reason}")
        return 0

    if args.waive_command == "remove":
        try:
            removed = store.remove(args.code, path=args.path)
        except OSError as e:
            print(f"Error writing waiver store {store.path}: {e}", file=sys.stderr)
            return 1
        print(f"Removed {removed} waiver(s) for {args.code.upper()}")
        return 0

    print("Usage: rubberband waive {add,list,remove}", file=sys.stderr)
    return 1


def list_rules_command(_args: argparse.Namespace) -> int:
    """Handle the ``list-rules`` command."""
    registry = PackLoader().build_registry()
    print(f"{'CODE':<13} {'SEVERITY':<9} {'FIX':<11} DESCRIPTION")
    for rule_id in sorted(registry.rule_ids()):
        rule = registry.get(rule_id)
        assert rule is not None
        fix = rule.fix if rule.fixable else "-"
        if rule.strict_only:
            fix += "*"
        print(f"{rule.id:<13} {rule.default_severity:<9} {fix:<11} {rule.description}")
    print("\n* applied only with --strict")
    return 0


def generate_policy_command(args: argparse.Namespace) -> int:
    """Handle the ``generate-policy`` command."""
    output_path = Path(args.output)
    try:
        ScanPolicy.default().to_yaml(output_path)
    except (OSError, PolicyError) as e:
        print(f"Error generating policy: {e}", file=sys.stderr)
        return 1
    print(f"Generated scan policy: {output_path}\n")
    print("Edit the file to customise, then use:")
    print(f"  rubberband scan --policy {output_path}")
    return 0


# ---------------------------------------------------------------------------
# Summary formatters
# ---------------------------------------------------------------------------


def _generate_summary(result: ScanResult) -> str:
    lines = [f"rubberband v{RubberbandConstants.VERSION}", "", format_version_banner(result.context), ""]

    if result.validation:
        lines.extend(format_validation(result.validation))

    if not result.findings:
        lines.append("No issues found. Your OpenClaw installation looks secure.")
        lines.append("")

    order = {severity: rank for rank, severity in enumerate(SEVERITY_ORDER)}
    for finding in sorted(result.findings, key=lambda f: order[f.severity]):
        lines.append(f"[{finding.severity.value.upper()}] {finding.title}")
        lines.append(f"  → {finding.recommendation}")
        lines.append("")

    counts = count_by_severity(result.findings)
    lines.append(_SEPARATOR)
    lines.append(f"Score: {result.score}/100")
    parts = [f"{sev.value.capitalize()}: {counts[sev.value]}" for sev in SEVERITY_ORDER if counts[sev.value]]
    if parts:
        lines.append(" | ".join(parts))
    if result.waived_count:
        lines.append(f"Waived: {result.waived_count}")
    lines.append(_SEPARATOR)
    return "\n".join(lines)


def _format_harden(result: HardenResult, dry_run: bool) -> str:
    lines = [f"rubberband harden{' --dry-run' if dry_run else ''}", ""]

    if result.applied:
        lines.append("Would apply:" if dry_run else "Applied:")
        lines.extend(f"  ✓ {item}" for item in result.applied)
        lines.append("")

    if result.skipped:
        lines.append("Skipped:")
        lines.extend(f"  - {item}" for item in result.skipped)
        lines.append("")

    if result.errors:
        lines.append("Errors:")
        lines.extend(f"  ✗ {item}" for item in result.errors)
        lines.append("")

    if not result.applied and not result.skipped and not result.errors:
        lines.append("No fixable issues found.")

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Shared argparse helpers
# ---------------------------------------------------------------------------


def _add_target_flags(parser: argparse.ArgumentParser) -> None:
    """Add flags shared between ``scan``, ``plan`` and ``harden``."""
    parser.add_argument("--config", metavar="PATH", help="Path to OpenClaw config file")
    parser.add_argument("--policy", metavar="PATH", help="Path to a custom scan policy YAML")
    parser.add_argument(
        "--openclaw-version",
        metavar="VERSION",
        help=f"Assume this OpenClaw version (overrides {RubberbandConstants.ENV_VERSION})",
    )
    parser.add_argument(
        "--no-version-detect",
        action="store_true",
        help="Do not probe the openclaw binary or state files for a version",
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="rubberband",
        description=(
            "Rubberband - Security auditor for OpenClaw installations.\n\n"
            "Checks your OpenClaw config for common security misconfigurations\n"
            "and provides a security score from 0-100."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rubberband scan
  rubberband scan --config ~/.openclaw/openclaw.json --format json
  rubberband scan --demo
  rubberband plan --strict
  rubberband harden --dry-run
  rubberband waive add NET002 --reason "VPN only" --expires 30d
  rubberband list-rules

Exit codes (scan):
  0  No critical issues
  1  Error (config not found, parse error)
  2  Critical security issues found
        """,
    )
    parser.add_argument("--version", action="version", version=f"rubberband {RubberbandConstants.VERSION}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress to stderr")
    parser.add_argument("--debug", action="store_true", help="Log debug details to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # -- scan --------------------------------------------------------------
    scan_p = subparsers.add_parser("scan", help="Run all security checks and output a report")
    _add_target_flags(scan_p)
    scan_p.add_argument(
        "--format",
        choices=["summary", "json", "markdown", "sarif"],
        default="summary",
        help="Output format (default: summary). Use 'sarif' for GitHub Code Scanning.",
    )
    scan_p.add_argument("--json", dest="format", action="store_const", const="json", help="Shorthand for --format json")
    scan_p.add_argument("--output", "-o", help="Output file path")
    scan_p.add_argument("--demo", action="store_true", help="Run with an example insecure config")

    # -- plan --------------------------------------------------------------
    plan_p = subparsers.add_parser("plan", help="Preview fixes as a config diff")
    _add_target_flags(plan_p)
    plan_p.add_argument("--strict", action="store_true", help="Include strict-only fixes")

    # -- harden ------------------------------------------------------------
    harden_p = subparsers.add_parser("harden", help="Apply security fixes automatically")
    _add_target_flags(harden_p)
    harden_p.add_argument("--dry-run", action="store_true", help="Preview fixes without applying them")
    harden_p.add_argument(
        "--strict", action="store_true", help="Apply maximum lockdown (disables shell, enables sandbox)"
    )

    # -- waive -------------------------------------------------------------
    waive_p = subparsers.add_parser("waive", help="Manage time-boxed finding waivers")
    waive_sub = waive_p.add_subparsers(dest="waive_command", help="Waiver action")
    waive_add = waive_sub.add_parser("add", help="Waive a finding code")
    waive_add.add_argument("code", help="Finding code, e.g. NET002")
    waive_add.add_argument("--reason", required=True, help="Why the finding is accepted")
    waive_add.add_argument("--expires", required=True, help="Expiry: 12h, 7d, 2w or an ISO date")
    waive_add.add_argument("--path", help="Only waive findings at this path")
    waive_sub.add_parser("list", help="List active waivers")
    waive_rm = waive_sub.add_parser("remove", help="Remove waivers for a finding code")
    waive_rm.add_argument("code", help="Finding code")
    waive_rm.add_argument("--path", help="Only remove the waiver for this path")

    # -- list-rules --------------------------------------------------------
    subparsers.add_parser("list-rules", help="List every finding code")

    # -- generate-policy ---------------------------------------------------
    gp_p = subparsers.add_parser("generate-policy", help="Generate a default scan policy YAML")
    gp_p.add_argument("--output", "-o", default="rubberband_policy.yaml", help="Output file path")

    # -- dispatch ----------------------------------------------------------
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    _configure_logging(args, Config())

    dispatch = {
        "scan": scan_command,
        "plan": plan_command,
        "harden": harden_command,
        "waive": waive_command,
        "list-rules": list_rules_command,
        "generate-policy": generate_policy_command,
    }
    handler = dispatch.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
