"""Presence check for the external download and mux tools."""

from __future__ import annotations

import asyncio
import logging

from yt_grab.downloader.errors import DependencyError
from yt_grab.downloader.launcher import ProcessLauncher

logger = logging.getLogger(__name__)


def _discard(_stream: str, _line: str) -> None:
    return None


async def _probe(launcher: ProcessLauncher, argv: list[str]) -> None:
    try:
        result = await launcher.run(argv, sink=_discard)
    except Exception as error:
        raise DependencyError(f"{argv[0]}: {error}") from error
    if result.exit_code != 0:
        raise DependencyError(f"{argv[0]} exited with code {result.exit_code}")


async def check_dependencies(
    launcher: ProcessLauncher,
    *,
    downloader: str = "yt-dlp",
    muxer: str = "ffmpeg",
) -> bool:
    """Return True only when both tools answer their version query.

    Failures are logged once and reported as False; nothing is raised.
    """

    results = await asyncio.gather(
        _probe(launcher, [downloader, "--version"]),
        _probe(launcher, [muxer, "-version"]),
        return_exceptions=True,
    )
    failures = [str(result) for result in results if isinstance(result, BaseException)]
    if failures:
        logger.error(
            "Missing dependencies. Please install %s and %s (%s)",
            downloader,
            muxer,
            "; ".join(failures),
        )
        return False
    return True
