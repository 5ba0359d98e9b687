"""Subprocess orchestration for the external download tool."""

from yt_grab.downloader.batch import BatchReport, BatchRunner
from yt_grab.downloader.commands import CommandBuilder, PlaylistCommand, SingleVideoCommand
from yt_grab.downloader.errors import (
    BatchItemError,
    DependencyError,
    DownloadError,
    SubprocessExecutionError,
    ValidationError,
)
from yt_grab.downloader.launcher import AsyncProcessLauncher, ProcessLauncher
from yt_grab.downloader.models import DownloadMode, DownloadRequest, ExecutionResult
from yt_grab.downloader.orchestrator import DownloadOrchestrator
from yt_grab.downloader.preflight import check_dependencies

__all__ = [
    "AsyncProcessLauncher",
    "BatchItemError",
    "BatchReport",
    "BatchRunner",
    "CommandBuilder",
    "DependencyError",
    "DownloadError",
    "DownloadMode",
    "DownloadOrchestrator",
    "DownloadRequest",
    "ExecutionResult",
    "PlaylistCommand",
    "ProcessLauncher",
    "SingleVideoCommand",
    "SubprocessExecutionError",
    "ValidationError",
    "check_dependencies",
]
