"""Argument-vector builders for the external download tool.

Each download mode is a small strategy object that turns a ``DownloadRequest``
into a complete argv. Nothing here touches the filesystem or spawns anything;
the orchestrator decides when the argv is executed.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from yt_grab.downloader.errors import ValidationError
from yt_grab.downloader.models import DownloadMode, DownloadRequest

if TYPE_CHECKING:
    from yt_grab.config import Settings

STANDARD_PROFILE = "standard"
HARDENED_PROFILE = "hardened"
SUPPORTED_PROFILES = (STANDARD_PROFILE, HARDENED_PROFILE)

UNCAPPED_FORMAT = "bestvideo+bestaudio/best"
SINGLE_OUTPUT_TEMPLATE = "%(title)s.%(ext)s"
PLAYLIST_OUTPUT_TEMPLATE = "%(playlist_title)s/%(playlist_index)s - %(title)s.%(ext)s"

_STANDARD_FLAGS: tuple[str, ...] = (
    "--no-check-certificates",
    "--geo-bypass",
    "--format-sort-force",
    "--ignore-errors",
    "--no-warnings",
    "--extractor-retries",
    "3",
)


def format_selector(height_cap: int | None) -> str:
    """Return the ``-f`` expression for an optional maximum height."""

    if height_cap is None:
        return UNCAPPED_FORMAT
    return f"bestvideo[height<={height_cap}]+bestaudio/best[height<={height_cap}]/best"


def default_flags(  # noqa: PLR0913
    *,
    profile: str,
    mode: DownloadMode,
    cookies_browser: str,
    user_agent: str,
    accept_language: str,
) -> tuple[str, ...]:
    """Passthrough flags prepended to every download command."""

    if profile == STANDARD_PROFILE:
        return _STANDARD_FLAGS
    if profile != HARDENED_PROFILE:
        raise ValidationError(f"Unsupported download profile: {profile!r}")

    flags = [
        *_STANDARD_FLAGS,
        "--cookies-from-browser",
        cookies_browser,
        "--user-agent",
        user_agent,
        "--add-header",
        f"Accept-Language:{accept_language}",
        "--sleep-interval",
        "1",
        "--max-sleep-interval",
        "5",
        "--fragment-retries",
        "10",
        "--force-ipv4",
        "--merge-output-format",
        "mp4",
    ]
    if mode is DownloadMode.SINGLE:
        flags.append("--no-playlist")
    return tuple(flags)


class CommandBuilder(Protocol):
    """Strategy that renders one request into an argv."""

    mode: DownloadMode

    def build(self, request: DownloadRequest) -> list[str]:
        """Return the argv for ``request``."""


@dataclass(slots=True, frozen=True)
class _TemplateCommand:
    executable: str
    default_directory: Path
    flags: tuple[str, ...] = ()
    extra_args: tuple[str, ...] = ()
    output_template: str = SINGLE_OUTPUT_TEMPLATE

    def build(self, request: DownloadRequest) -> list[str]:
        if request.height_cap is not None and request.height_cap <= 0:
            raise ValidationError(f"Height cap must be positive, got {request.height_cap}")
        directory = Path(request.destination_directory or self.default_directory)
        return [
            self.executable,
            *self.flags,
            "-f",
            format_selector(request.height_cap),
            "-o",
            str(directory / self.output_template),
            *self.extra_args,
            request.resource_url,
        ]


@dataclass(slots=True, frozen=True)
class SingleVideoCommand(_TemplateCommand):
    """One video per URL, saved as ``<dir>/<title>.<ext>``."""

    mode: DownloadMode = DownloadMode.SINGLE


@dataclass(slots=True, frozen=True)
class PlaylistCommand(_TemplateCommand):
    """Whole playlist, saved as ``<dir>/<playlist>/<index> - <title>.<ext>``."""

    output_template: str = PLAYLIST_OUTPUT_TEMPLATE
    mode: DownloadMode = DownloadMode.PLAYLIST


def build_command(mode: DownloadMode, settings: Settings) -> CommandBuilder:
    """Create the command builder for ``mode`` from application settings."""

    flags = default_flags(
        profile=settings.profile,
        mode=mode,
        cookies_browser=settings.cookies_browser,
        user_agent=settings.user_agent,
        accept_language=settings.accept_language,
    )
    if mode is DownloadMode.PLAYLIST:
        return PlaylistCommand(
            executable=settings.downloader,
            default_directory=settings.playlist_dir,
            flags=flags,
            extra_args=settings.extra_args,
        )
    return SingleVideoCommand(
        executable=settings.downloader,
        default_directory=settings.video_dir,
        flags=flags,
        extra_args=settings.extra_args,
    )
