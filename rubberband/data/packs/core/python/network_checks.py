# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Network exposure checks (NET001–NET004).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rubberband.core.models import Finding, Severity
from rubberband.core.schema import as_dict, resolve_auth_token, resolve_webhook_config

if TYPE_CHECKING:
    from rubberband.core.models import ScanContext
    from rubberband.core.scan_policy import ScanPolicy


def gateway_exposure(gateway: dict[str, Any], policy: ScanPolicy) -> tuple[str, str] | None:
    """Return ``(field, value)`` for the setting that exposes the gateway, or ``None``."""
    bind = gateway.get("bind")
    if isinstance(bind, str) and bind in policy.network.exposed_binds:
        return "gateway.bind", bind
    host = gateway.get("host")
    if isinstance(host, str) and host in policy.network.exposed_hosts:
        return "gateway.host", host
    return None


def check_network(config: dict[str, Any], context: ScanContext, policy: ScanPolicy) -> list[Finding]:
    """Check gateway binding, control-UI auth bypass, and inbound webhook auth."""
    findings: list[Finding] = []

    gateway = as_dict(config.get("gateway"))
    exposure = gateway_exposure(gateway, policy)
    if exposure is not None:
        field_path, value = exposure
        port = gateway.get("port") or policy.network.default_port
        if not resolve_auth_token(gateway, context.schema):
            findings.append(
                Finding(
                    code="NET001",
                    severity=Severity.CRITICAL,
                    title=f"Gateway exposed on {value}:{port} without auth",
                    detail="The gateway listens beyond loopback and has no authentication token configured.",
                    recommendation="Bind the gateway to 127.0.0.1 (gateway.bind: loopback) or configure an auth token",
                    fixable=True,
                    path=field_path,
                )
            )
        else:
            findings.append(
                Finding(
                    code="NET002",
                    severity=Severity.MEDIUM,
                    title=f"Gateway exposed on {value}:{port}",
                    detail=(
                        "The gateway listens beyond loopback. Auth is configured but exposure "
                        "increases attack surface."
                    ),
                    recommendation="Consider binding to 127.0.0.1 if remote access is not needed",
                    fixable=True,
                    path=field_path,
                )
            )

    control_ui = as_dict(config.get("controlUI"))
    if control_ui.get("enabled") and control_ui.get("dangerousDeviceAuthBypass"):
        findings.append(
            Finding(
                code="NET003",
                severity=Severity.HIGH,
                title="Control UI auth bypass enabled",
                detail="dangerousDeviceAuthBypass allows unauthenticated access to the control panel.",
                recommendation="Set controlUI.dangerousDeviceAuthBypass to false",
                fixable=True,
                path="controlUI.dangerousDeviceAuthBypass",
            )
        )

    webhook = resolve_webhook_config(config, context.schema)
    if webhook is not None and webhook.enabled and not webhook.has_auth:
        if webhook.uses_hook_token:
            recommendation = "Set hooks.token to a strong shared secret"
        else:
            recommendation = "Set webhooks.requireAuth to true"
        findings.append(
            Finding(
                code="NET004",
                severity=Severity.HIGH,
                title="Webhooks enabled without authentication",
                detail="Incoming webhooks do not require authentication, allowing injection of commands.",
                recommendation=recommendation,
                # A hook token has to be chosen by the operator
                fixable=not webhook.uses_hook_token,
                path=webhook.path,
            )
        )

    return findings
