from __future__ import annotations

import time
from dataclasses import dataclass, field

from bpm_sdk.contracts.runtime import PhaseTimeoutError


@dataclass(slots=True)
class Deadline:
    """
    Time budget shared by every runtime call of one lifecycle phase.

    The budget is checked before each call. A call already in flight is bounded by
    the client's request timeout, except container waits, which receive `remaining()`.
    """

    seconds: float
    phase: str = "phase"
    started_at: float = field(default_factory=time.monotonic)

    def remaining(self) -> float:
        return max(0.0, self.seconds - (time.monotonic() - self.started_at))

    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def check(self, operation: str) -> None:
        if self.expired():
            raise PhaseTimeoutError(
                f"{self.phase} exceeded its time budget of {self.seconds:g}s before {operation}"
            )
