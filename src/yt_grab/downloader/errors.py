"""Error types raised by the download orchestrator."""

from __future__ import annotations


class DownloadError(RuntimeError):
    """Base class for every failure surfaced by yt-grab."""


class ValidationError(DownloadError):
    """Required input is missing or malformed; never retried."""


class DependencyError(DownloadError):
    """An external tool is missing or could not be queried."""


class SubprocessExecutionError(DownloadError):
    """External process exited with a code the caller does not accept."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int,
        stderr: str = "",
        attempts: int = 1,
        transient: bool = True,
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr
        self.attempts = attempts
        self.transient = transient


class BatchItemError(DownloadError):
    """Final failure of one batch member, reported but never escalated."""

    def __init__(self, *, index: int, url: str, cause: BaseException) -> None:
        super().__init__(f"Item {index + 1} ({url}) failed: {cause}")
        self.index = index
        self.url = url
        self.cause = cause
