"""Controllers for download CLI commands."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from yt_grab.config import Settings
from yt_grab.downloader.batch import BatchReport, BatchRunner
from yt_grab.downloader.commands import build_command
from yt_grab.downloader.errors import DownloadError
from yt_grab.downloader.launcher import AsyncProcessLauncher, OutputSink, ProcessLauncher
from yt_grab.downloader.models import DownloadMode, DownloadRequest
from yt_grab.downloader.orchestrator import DownloadOrchestrator
from yt_grab.downloader.preflight import check_dependencies
from yt_grab.downloader.retry import Sleep

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DownloadCommand:
    """CLI input for the single and playlist commands."""

    urls: tuple[str, ...]
    max_height: int | None = None
    output_dir: Path | None = None
    skip_checks: bool = False


@dataclass(slots=True)
class CommandResult:
    """Rendered outcome of one CLI command."""

    success: bool
    lines: list[str] = field(default_factory=list)


class DownloadCliController:
    """Wire settings, launcher and orchestrator for each CLI command."""

    def __init__(
        self,
        *,
        launcher: ProcessLauncher | None = None,
        sink: OutputSink | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._launcher = launcher or AsyncProcessLauncher()
        self._sink = sink
        self._sleep = sleep

    def single(self, command: DownloadCommand) -> CommandResult:
        return asyncio.run(self._download(DownloadMode.SINGLE, command))

    def playlist(self, command: DownloadCommand) -> CommandResult:
        return asyncio.run(self._download(DownloadMode.PLAYLIST, command))

    def check(self) -> CommandResult:
        settings = self._load_settings()
        ok = asyncio.run(
            check_dependencies(
                self._launcher,
                downloader=settings.downloader,
                muxer=settings.muxer,
            ),
        )
        if ok:
            return CommandResult(
                success=True,
                lines=[f"{settings.downloader} and {settings.muxer} are available."],
            )
        return CommandResult(
            success=False,
            lines=["Please install required dependencies and try again."],
        )

    def _load_settings(self) -> Settings:
        settings = Settings.from_env()
        settings.validate()
        return settings

    async def _download(self, mode: DownloadMode, command: DownloadCommand) -> CommandResult:
        settings = self._load_settings()
        if not command.skip_checks:
            available = await check_dependencies(
                self._launcher,
                downloader=settings.downloader,
                muxer=settings.muxer,
            )
            if not available:
                return CommandResult(
                    success=False,
                    lines=["Please install required dependencies and try again."],
                )

        settings.ensure_directories()
        if command.output_dir is not None:
            command.output_dir.mkdir(parents=True, exist_ok=True)

        requests = [
            DownloadRequest(
                resource_url=url,
                height_cap=command.max_height,
                destination_directory=command.output_dir,
            )
            for url in command.urls
        ]
        builder = build_command(mode, settings)
        orchestrator = DownloadOrchestrator(
            self._launcher,
            retry_policy=settings.retry_policy(),
            sink=self._sink,
            sleep=self._sleep,
        )

        try:
            if mode is DownloadMode.SINGLE and len(requests) == 1:
                message = await orchestrator.run_with_retry(
                    requests[0],
                    builder,
                    exit_policy=settings.single_exit_policy(batch=False),
                )
                return CommandResult(success=True, lines=[message])

            exit_policy = (
                settings.playlist_exit_policy()
                if mode is DownloadMode.PLAYLIST
                else settings.single_exit_policy(batch=True)
            )
            runner = BatchRunner(orchestrator, concurrency=settings.batch_concurrency)
            report = await runner.run_batch(requests, builder, exit_policy=exit_policy)
        except DownloadError as error:
            logger.debug("Download aborted", exc_info=True)
            return CommandResult(success=False, lines=[f"Download failed with details: {error}"])

        return CommandResult(success=True, lines=_render_report(report))


def _render_report(report: BatchReport) -> list[str]:
    lines: list[str] = []
    for outcome in report.outcomes:
        if outcome.succeeded:
            lines.append(f"[ok] {outcome.index + 1}. {outcome.url}: {outcome.message}")
        else:
            lines.append(f"[failed] {outcome.index + 1}. {outcome.url}: {outcome.error.cause}")
    lines.append(
        f"All downloads completed: {len(report.succeeded)} succeeded, {len(report.failed)} failed.",
    )
    return lines
