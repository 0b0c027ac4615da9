# chore/run_result.py
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class InstanceState(Enum):
    """Lifecycle of a task instance within one plan run."""

    PENDING = "pending"
    EVALUATING = "evaluating"
    SKIPPED = "skipped"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset(
    {InstanceState.SKIPPED, InstanceState.DONE, InstanceState.FAILED, InstanceState.CANCELLED}
)


@dataclass
class InstanceResult:
    """
    Outcome of one task instance.

    Transitions: pending -> evaluating -> (skipped | running) -> done | failed,
    or running -> cancelled when interrupted.
    Terminal states are final.
    """

    # ------------------------------------------------------------------ #
    # Identification
    # ------------------------------------------------------------------ #
    index: int
    """Position of the instance in the plan."""

    task_name: str

    state: InstanceState = InstanceState.PENDING

    skip_reason: str | None = None
    """Description of the first unmet run condition, for skipped instances."""

    error: Exception | None = None
    """Error that failed the instance."""

    commands_run: int = 0

    # ------------------------------------------------------------------ #
    # Timing
    # ------------------------------------------------------------------ #
    start_time: datetime.datetime | None = None
    end_time: datetime.datetime | None = None
    duration: datetime.timedelta | None = None

    # ------------------------------------------------------------------ #
    # State transitions
    # ------------------------------------------------------------------ #
    def _transition(self, new_state: InstanceState, allowed_from: set[InstanceState]) -> None:
        if self.state not in allowed_from:
            raise RuntimeError(
                f"Task instance #{self.index} ('{self.task_name}') cannot go from "
                f"{self.state.value} to {new_state.value}"
            )
        self.state = new_state

    def mark_evaluating(self) -> None:
        self._transition(InstanceState.EVALUATING, {InstanceState.PENDING})

    def mark_skipped(self, reason: str) -> None:
        """Run conditions were not met. Not an error."""
        self._transition(InstanceState.SKIPPED, {InstanceState.EVALUATING})
        self.skip_reason = reason
        self._finalize()
        logger.debug(f"Task instance #{self.index} ('{self.task_name}') skipped: {reason}")

    def mark_running(self) -> None:
        """Transition to RUNNING and record start time."""
        self._transition(InstanceState.RUNNING, {InstanceState.EVALUATING})
        self.start_time = datetime.datetime.now()
        logger.debug(f"Task instance #{self.index} ('{self.task_name}') started")

    def mark_done(self) -> None:
        """Mark as successfully completed."""
        self._transition(InstanceState.DONE, {InstanceState.RUNNING})
        self._finalize()
        logger.debug(
            f"Task instance #{self.index} ('{self.task_name}') done in {self.duration_str}"
        )

    def mark_failed(self, error: Exception) -> None:
        """Mark as failed."""
        self._transition(InstanceState.FAILED, {InstanceState.RUNNING})
        self.error = error
        self._finalize()
        logger.debug(f"Task instance #{self.index} ('{self.task_name}') failed: {error}")

    def mark_cancelled(self) -> None:
        """Mark as interrupted while running."""
        self._transition(InstanceState.CANCELLED, {InstanceState.RUNNING})
        self._finalize()
        logger.debug(f"Task instance #{self.index} ('{self.task_name}') cancelled")

    # ------------------------------------------------------------------ #
    # Finalization
    # ------------------------------------------------------------------ #
    def _finalize(self) -> None:
        """Record end time and compute duration."""
        self.end_time = datetime.datetime.now()
        if self.start_time:
            self.duration = self.end_time - self.start_time
        else:
            self.duration = datetime.timedelta(0)

    # ------------------------------------------------------------------ #
    # Timing properties
    # ------------------------------------------------------------------ #
    @property
    def duration_secs(self) -> float | None:
        return self.duration.total_seconds() if self.duration is not None else None

    @property
    def duration_str(self) -> str:
        """Human-readable duration (e.g. '452ms', '2.4s', '1m 23s', '2h 5m')."""
        secs = self.duration_secs
        if secs is None:
            return "—"
        if secs < 1:
            return f"{secs * 1000:.0f}ms"
        if secs < 60:
            return f"{secs:.1f}s"
        mins, secs = divmod(secs, 60)
        if mins < 60:
            return f"{int(mins)}m {secs:.0f}s"
        hrs, mins = divmod(mins, 60)
        return f"{int(hrs)}h {int(mins)}m"

    @property
    def is_finished(self) -> bool:
        return self.state in TERMINAL_STATES

    # ------------------------------------------------------------------ #
    # Representation & serialization
    # ------------------------------------------------------------------ #
    def __repr__(self) -> str:
        return (
            f"InstanceResult(#{self.index}, task='{self.task_name}', "
            f"state={self.state.value}, dur={self.duration_str})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "index": self.index,
            "task_name": self.task_name,
            "state": self.state.value,
            "skip_reason": self.skip_reason,
            "error": str(self.error) if self.error else None,
            "commands_run": self.commands_run,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_str": self.duration_str,
        }
