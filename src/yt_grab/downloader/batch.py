"""Concurrent fan-out of independent downloads."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from yt_grab.downloader.commands import CommandBuilder
from yt_grab.downloader.errors import BatchItemError, DownloadError, ValidationError
from yt_grab.downloader.exit_codes import LENIENT, ExitCodePolicy
from yt_grab.downloader.models import DownloadRequest
from yt_grab.downloader.orchestrator import DownloadOrchestrator

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class BatchItemOutcome:
    """Settled state of one batch member."""

    index: int
    url: str
    message: str | None = None
    error: BatchItemError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class BatchReport:
    """Per-item outcomes in request order."""

    outcomes: list[BatchItemOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[BatchItemOutcome]:
        return [outcome for outcome in self.outcomes if outcome.succeeded]

    @property
    def failed(self) -> list[BatchItemOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]


class BatchRunner:
    """Run many downloads at once without letting one failure stop the rest.

    ``concurrency`` caps how many download processes run simultaneously;
    ``0`` or ``None`` lets every request start immediately.
    """

    def __init__(
        self,
        orchestrator: DownloadOrchestrator,
        *,
        concurrency: int | None = None,
    ) -> None:
        if concurrency is not None and concurrency < 0:
            raise ValueError(f"concurrency must be >= 0, got {concurrency}")
        self.orchestrator = orchestrator
        self.concurrency = concurrency or None

    async def run_batch(
        self,
        requests: Sequence[DownloadRequest],
        command_builder: CommandBuilder,
        *,
        exit_policy: ExitCodePolicy = LENIENT,
    ) -> BatchReport:
        if isinstance(requests, (str, bytes)) or not isinstance(requests, Sequence):
            raise ValidationError("Please provide a sequence of download requests")
        if not requests:
            raise ValidationError("Please provide at least one download request")

        logger.info("Starting download of %d items...", len(requests))
        limiter = asyncio.Semaphore(self.concurrency) if self.concurrency else None

        async def _settle(index: int, request: DownloadRequest) -> BatchItemOutcome:
            async with limiter if limiter is not None else contextlib.nullcontext():
                try:
                    message = await self.orchestrator.run_with_retry(
                        request,
                        command_builder,
                        exit_policy=exit_policy,
                    )
                except DownloadError as error:
                    item_error = BatchItemError(index=index, url=request.resource_url, cause=error)
                    logger.error("Item %d failed: %s", index + 1, error)
                    return BatchItemOutcome(index=index, url=request.resource_url, error=item_error)
            logger.info("Item %d completed successfully", index + 1)
            return BatchItemOutcome(index=index, url=request.resource_url, message=message)

        outcomes = await asyncio.gather(
            *(_settle(index, request) for index, request in enumerate(requests)),
        )
        report = BatchReport(outcomes=list(outcomes))
        logger.info(
            "All downloads completed: %d succeeded, %d failed",
            len(report.succeeded),
            len(report.failed),
        )
        return report
