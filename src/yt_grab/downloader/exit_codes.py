"""Exit-code classification for download tool runs."""

from __future__ import annotations

from dataclasses import dataclass

from yt_grab.downloader.models import ExitOutcome

# yt-dlp exits 1 when --ignore-errors skipped some items of a multi-item job
PARTIAL_SUCCESS_EXIT_CODE = 1


@dataclass(slots=True, frozen=True)
class ExitCodePolicy:
    """Decides which exit codes settle a download."""

    accept_partial: bool = False

    def classify(self, exit_code: int) -> ExitOutcome:
        if exit_code == 0:
            return ExitOutcome.SUCCESS
        if exit_code == PARTIAL_SUCCESS_EXIT_CODE and self.accept_partial:
            return ExitOutcome.PARTIAL_SUCCESS
        return ExitOutcome.RETRYABLE_FAILURE


STRICT = ExitCodePolicy(accept_partial=False)
LENIENT = ExitCodePolicy(accept_partial=True)
