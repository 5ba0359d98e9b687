"""Validate, launch, classify and retry one download."""

from __future__ import annotations

import asyncio
import logging

from yt_grab.downloader.commands import CommandBuilder
from yt_grab.downloader.errors import SubprocessExecutionError, ValidationError
from yt_grab.downloader.exit_codes import STRICT, ExitCodePolicy
from yt_grab.downloader.launcher import OutputSink, ProcessLauncher
from yt_grab.downloader.models import DownloadMode, DownloadRequest, ExitOutcome
from yt_grab.downloader.retry import RetryPolicy, Sleep, retry_async

logger = logging.getLogger(__name__)

_SUCCESS_MESSAGES = {
    DownloadMode.SINGLE: "Video download completed successfully",
    DownloadMode.PLAYLIST: "Playlist download completed successfully",
}


class DownloadOrchestrator:
    """Run the download tool for one request with a fixed retry budget.

    The argv is built once per call and reused verbatim on every attempt.
    Directory creation is the caller's job (see ``Settings.ensure_directories``).
    """

    def __init__(
        self,
        launcher: ProcessLauncher,
        *,
        retry_policy: RetryPolicy | None = None,
        sink: OutputSink | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.launcher = launcher
        self.retry_policy = retry_policy or RetryPolicy()
        self.sink = sink
        self._sleep = sleep

    async def run_with_retry(
        self,
        request: DownloadRequest,
        command_builder: CommandBuilder,
        *,
        exit_policy: ExitCodePolicy = STRICT,
    ) -> str:
        if not request.resource_url or not request.resource_url.strip():
            raise ValidationError("Video URL is required")

        argv = command_builder.build(request)
        max_attempts = self.retry_policy.max_attempts
        logger.info("Starting %s download: %s", command_builder.mode.value, request.resource_url)
        logger.debug("Command: %s", argv)

        async def _attempt(attempt: int) -> ExitOutcome:
            result = await self.launcher.run(argv, sink=self.sink)
            outcome = exit_policy.classify(result.exit_code)
            if outcome is ExitOutcome.RETRYABLE_FAILURE:
                raise SubprocessExecutionError(
                    f"Download failed (attempt {attempt}/{max_attempts}):\n"
                    f"Exit code: {result.exit_code}\n"
                    f"Error log: {result.combined_stderr}",
                    exit_code=result.exit_code,
                    stderr=result.combined_stderr,
                    attempts=attempt,
                )
            if result.combined_stderr:
                logger.debug("stderr of successful run:\n%s", result.combined_stderr)
            return outcome

        outcome = await retry_async(_attempt, self.retry_policy, sleep=self._sleep)
        message = _SUCCESS_MESSAGES[command_builder.mode]
        if outcome is ExitOutcome.PARTIAL_SUCCESS:
            message += " (some items failed)"
        return message
