"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import pytest

from yt_grab.downloader.models import ExecutionResult

YT_GRAB_ENV_VARS = (
    "YT_GRAB_BASE_DIR",
    "YT_GRAB_DOWNLOADER",
    "YT_GRAB_MUXER",
    "YT_GRAB_PROFILE",
    "YT_GRAB_MAX_ATTEMPTS",
    "YT_GRAB_BATCH_CONCURRENCY",
    "YT_GRAB_ACCEPT_PARTIAL_SINGLE",
    "YT_GRAB_ACCEPT_PARTIAL_BATCH",
    "YT_GRAB_ACCEPT_PARTIAL_PLAYLIST",
    "YT_GRAB_COOKIES_BROWSER",
    "YT_GRAB_USER_AGENT",
    "YT_GRAB_ACCEPT_LANGUAGE",
    "YT_GRAB_EXTRA_ARGS",
)


class _FakeLauncher:
    """Launcher double that records argv and answers with scripted exit codes."""

    def __init__(
        self,
        exit_code: int | Callable[[list[str]], int] = 0,
        *,
        stderr: str = "",
        error: Callable[[list[str]], Exception] | None = None,
    ) -> None:
        self._exit_code = exit_code
        self._stderr = stderr
        self._error = error
        self.calls: list[list[str]] = []

    async def run(self, argv: Sequence[str], *, sink=None) -> ExecutionResult:
        recorded = list(argv)
        self.calls.append(recorded)
        if self._error is not None:
            raise self._error(recorded)
        code = self._exit_code(recorded) if callable(self._exit_code) else self._exit_code
        if sink is not None:
            sink("stdout", f"[fake] {recorded[-1]}")
            if self._stderr:
                sink("stderr", self._stderr)
        return ExecutionResult(
            succeeded=code == 0,
            exit_code=code,
            combined_stderr=self._stderr,
        )


class _SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that only remembers the delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def _clean_yt_grab_env(monkeypatch):
    for name in YT_GRAB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def fake_launcher():
    """Factory for launcher doubles: ``fake_launcher(exit_code, stderr=..., error=...)``."""
    return _FakeLauncher


@pytest.fixture()
def sleep_recorder() -> _SleepRecorder:
    return _SleepRecorder()
