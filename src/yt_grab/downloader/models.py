"""Domain models for download requests and subprocess attempts."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class DownloadMode(str, Enum):
    """Which kind of resource the download tool is pointed at."""

    SINGLE = "single"
    PLAYLIST = "playlist"


class ExitOutcome(str, Enum):
    """Normalized exit-code classes used by retry policy."""

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    RETRYABLE_FAILURE = "retryable_failure"


@dataclass(slots=True, frozen=True)
class DownloadRequest:
    """One URL to hand to the download tool."""

    resource_url: str
    height_cap: int | None = None
    # None resolves to the per-mode base directory from settings
    destination_directory: Path | None = None


@dataclass(slots=True, frozen=True)
class ExecutionResult:
    """Outcome of a single subprocess launch."""

    succeeded: bool
    exit_code: int
    combined_stderr: str


@dataclass(slots=True)
class RetryState:
    """Attempt bookkeeping owned by one orchestrator call."""

    max_attempts: int
    backoff: Callable[[int], float]
    attempts_made: int = 0

    @property
    def exhausted(self) -> bool:
        return self.attempts_made >= self.max_attempts

    def next_delay(self) -> float:
        return self.backoff(self.attempts_made)
