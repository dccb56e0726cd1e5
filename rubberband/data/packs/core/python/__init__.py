# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""
Evaluators for the core rule pack.

One module per finding-code prefix (``NET*``, ``CRED*``, ``ACCESS*`` ...).
Each exposes a single entry point that
:class:`~rubberband.core.analyzers.check_analyzer.CheckAnalyzer` wraps::

    def check_<family>(
        config: dict[str, Any],
        context: ScanContext,
        policy: ScanPolicy,
    ) -> list[Finding]:
        ...

Evaluators treat *config* as read-only and tolerate missing or oddly-typed
fields.  Filesystem and binary lookups go through :mod:`rubberband.core.probes`
so tests can replace them.
"""
