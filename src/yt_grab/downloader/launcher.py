"""Async subprocess launcher that relays output while the process runs."""

from __future__ import annotations

import asyncio
import codecs
import logging
import re
from collections.abc import Callable, Sequence
from typing import Protocol

from yt_grab.downloader.errors import SubprocessExecutionError
from yt_grab.downloader.models import ExecutionResult

logger = logging.getLogger(__name__)
output_logger = logging.getLogger("yt_grab.output")

OutputSink = Callable[[str, str], None]

COMMAND_NOT_FOUND_EXIT_CODE = 127
_READ_CHUNK_BYTES = 4096
_TERMINATE_GRACE_SECONDS = 2.0
# progress bars redraw with a bare carriage return
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def log_output(stream: str, line: str) -> None:
    """Default sink: stdout lines at INFO, stderr lines at WARNING."""

    if stream == "stderr":
        output_logger.warning("%s", line)
    else:
        output_logger.info("%s", line)


class ProcessLauncher(Protocol):
    """Runs one argv to completion."""

    async def run(
        self,
        argv: Sequence[str],
        *,
        sink: OutputSink | None = None,
    ) -> ExecutionResult:
        """Launch ``argv``, relay output to ``sink`` and return the exit status."""


class AsyncProcessLauncher:
    """Launch processes with ``asyncio.create_subprocess_exec``.

    The argv is passed straight to the OS, never through a shell, so URLs and
    templates need no quoting.
    """

    async def run(
        self,
        argv: Sequence[str],
        *,
        sink: OutputSink | None = None,
    ) -> ExecutionResult:
        if not argv:
            raise SubprocessExecutionError(
                "Refusing to launch an empty command.",
                exit_code=COMMAND_NOT_FOUND_EXIT_CODE,
                transient=False,
            )
        relay = sink or log_output
        logger.debug("Launching: %s", " ".join(argv))

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as error:
            raise SubprocessExecutionError(
                f"Command not found: {argv[0]}",
                exit_code=COMMAND_NOT_FOUND_EXIT_CODE,
                transient=False,
            ) from error
        except OSError as error:
            raise SubprocessExecutionError(
                f"Failed to start {argv[0]}: {error}",
                exit_code=COMMAND_NOT_FOUND_EXIT_CODE,
                transient=True,
            ) from error

        stderr_lines: list[str] = []
        try:
            await asyncio.gather(
                _pump(process.stdout, "stdout", relay, None),
                _pump(process.stderr, "stderr", relay, stderr_lines),
            )
            exit_code = await process.wait()
        except BaseException:
            if process.returncode is None:
                await _terminate_process(process)
            raise
        return ExecutionResult(
            succeeded=exit_code == 0,
            exit_code=exit_code,
            combined_stderr="\n".join(stderr_lines),
        )


async def _pump(
    stream: asyncio.StreamReader | None,
    name: str,
    relay: OutputSink,
    collected: list[str] | None,
) -> None:
    if stream is None:
        return

    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    pending = ""
    while True:
        chunk = await stream.read(_READ_CHUNK_BYTES)
        if not chunk:
            break
        pending += decoder.decode(chunk)
        *complete, pending = _LINE_BREAK.split(pending)
        for line in complete:
            _emit(line, name, relay, collected)

    pending += decoder.decode(b"", final=True)
    for line in _LINE_BREAK.split(pending):
        _emit(line, name, relay, collected)


def _emit(line: str, name: str, relay: OutputSink, collected: list[str] | None) -> None:
    text = line.rstrip()
    if not text:
        return
    if collected is not None:
        collected.append(text)
    relay(name, text)


async def _terminate_process(process: asyncio.subprocess.Process) -> None:
    logger.warning("Stopping process %d after an interrupted run", process.pid)
    try:
        process.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(process.wait(), _TERMINATE_GRACE_SECONDS)
    except asyncio.TimeoutError:
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()
