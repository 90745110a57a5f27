# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
sipprobe package entrypoint.

A liveness probe for SIP endpoints: one OPTIONS request over TCP, UDP, TLS or
WebSocket, one response, and an exit code a monitoring runner can act on.
Transports are interchangeable strategies selected by URL scheme, and the
orchestrator races the probe against a fixed timeout and a cancel signal.
"""

from .config import EXIT_FATAL, EXIT_NOT_OK, EXIT_OK, ProbeSettings, load_probe_settings
from .errors import ConfigurationError, ErrorCategory, SipProbeError, TransportError, UnknownSchemeError
from .models import ProbeError, ProbeRequest, ProbeResponse, ProbeResult, ProbeState
from .probe import ProbeOrchestrator, run_probe
from .runtime import SipProbe
from .target import Target, parse_target
from .version import __version__

__all__ = [
    "EXIT_FATAL",
    "EXIT_NOT_OK",
    "EXIT_OK",
    "ConfigurationError",
    "ErrorCategory",
    "ProbeError",
    "ProbeOrchestrator",
    "ProbeRequest",
    "ProbeResponse",
    "ProbeResult",
    "ProbeSettings",
    "ProbeState",
    "SipProbe",
    "SipProbeError",
    "Target",
    "TransportError",
    "UnknownSchemeError",
    "__version__",
    "load_probe_settings",
    "parse_target",
    "run_probe",
]
