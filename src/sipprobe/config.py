# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for sipprobe."""

import os
from dataclasses import dataclass

# Process exit codes understood by monitoring runners.
EXIT_OK = 0
EXIT_NOT_OK = 1
EXIT_FATAL = 5


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ProbeSettings:
    """Probe defaults."""

    timeout: float = 15.0
    connect_timeout: float = 5.0
    max_response_bytes: int = 65536
    read_chunk_bytes: int = 4096
    verify_tls: bool = True

    @classmethod
    def from_env(cls) -> "ProbeSettings":
        """Create settings from environment variables (evaluated at call time)."""
        timeout = _float_env("SIPPROBE_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        connect_timeout = _float_env("SIPPROBE_CONNECT_TIMEOUT", cls.connect_timeout)
        if connect_timeout <= 0:
            connect_timeout = cls.connect_timeout
        max_response_bytes = _int_env("SIPPROBE_MAX_RESPONSE_BYTES", cls.max_response_bytes)
        if max_response_bytes <= 0:
            max_response_bytes = cls.max_response_bytes
        read_chunk_bytes = _int_env("SIPPROBE_READ_CHUNK_BYTES", cls.read_chunk_bytes)
        if read_chunk_bytes <= 0:
            read_chunk_bytes = cls.read_chunk_bytes
        return cls(
            timeout=timeout,
            connect_timeout=connect_timeout,
            max_response_bytes=max_response_bytes,
            read_chunk_bytes=read_chunk_bytes,
            verify_tls=_bool_env("SIPPROBE_VERIFY_TLS", cls.verify_tls),
        )


def load_probe_settings() -> ProbeSettings:
    """Load probe settings from environment with sensible defaults."""
    return ProbeSettings.from_env()
