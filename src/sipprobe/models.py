# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe request, outcome and result models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .config import EXIT_FATAL, EXIT_NOT_OK, EXIT_OK


class ProbeState(str, Enum):
    IDLE = "IDLE"
    PROBING = "PROBING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self not in (ProbeState.IDLE, ProbeState.PROBING)


@dataclass(frozen=True)
class ProbeRequest:
    """The rendered wire request and the monotonic time it was written."""

    payload: str
    sent_at: float


@dataclass(frozen=True)
class ProbeResponse:
    body: str
    elapsed: float

    @property
    def elapsed_ms(self) -> float:
        return round(self.elapsed * 1000, 2)


@dataclass(frozen=True)
class ProbeError:
    cause: BaseException


ProbeOutcome = Union[ProbeResponse, ProbeError]
ProbeEvent = Union[ProbeRequest, ProbeResponse, ProbeError]


@dataclass
class ProbeResult:
    """Terminal result of one probe."""

    state: ProbeState
    message: str
    request: ProbeRequest | None = None
    response: ProbeResponse | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.state == ProbeState.SUCCEEDED

    @property
    def exit_code(self) -> int:
        if self.state == ProbeState.SUCCEEDED:
            return EXIT_OK
        # A well-formed negative answer is not fatal.
        if self.state == ProbeState.FAILED and self.response is not None:
            return EXIT_NOT_OK
        return EXIT_FATAL


__all__ = [
    "ProbeError",
    "ProbeEvent",
    "ProbeOutcome",
    "ProbeRequest",
    "ProbeResponse",
    "ProbeResult",
    "ProbeState",
]
