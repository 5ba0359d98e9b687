"""Runtime configuration for the download wrapper."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from pathlib import Path

from yt_grab.downloader.commands import STANDARD_PROFILE, SUPPORTED_PROFILES
from yt_grab.downloader.exit_codes import ExitCodePolicy
from yt_grab.downloader.retry import DEFAULT_MAX_ATTEMPTS, RetryPolicy, backoff_for_profile

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(slots=True, frozen=True)
class Settings:
    """Process-wide, read-only settings established at startup."""

    video_dir: Path
    playlist_dir: Path
    downloader: str = "yt-dlp"
    muxer: str = "ffmpeg"
    profile: str = STANDARD_PROFILE
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    batch_concurrency: int = 4
    accept_partial_single: bool = False
    accept_partial_batch: bool = True
    accept_partial_playlist: bool = True
    cookies_browser: str = "chrome"
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"
    extra_args: tuple[str, ...] = ()

    @classmethod
    def from_env(cls, base_dir: Path | None = None) -> Settings:
        """Load settings from ``YT_GRAB_*`` environment variables."""

        root = base_dir or _resolve_base_dir()
        return cls(
            video_dir=root / "youtube-downloads",
            playlist_dir=root / "playlists",
            downloader=os.getenv("YT_GRAB_DOWNLOADER", "yt-dlp"),
            muxer=os.getenv("YT_GRAB_MUXER", "ffmpeg"),
            profile=os.getenv("YT_GRAB_PROFILE", STANDARD_PROFILE).strip().lower(),
            max_attempts=_env_int("YT_GRAB_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
            batch_concurrency=_env_int("YT_GRAB_BATCH_CONCURRENCY", 4),
            accept_partial_single=_env_bool("YT_GRAB_ACCEPT_PARTIAL_SINGLE", default=False),
            accept_partial_batch=_env_bool("YT_GRAB_ACCEPT_PARTIAL_BATCH", default=True),
            accept_partial_playlist=_env_bool("YT_GRAB_ACCEPT_PARTIAL_PLAYLIST", default=True),
            cookies_browser=os.getenv("YT_GRAB_COOKIES_BROWSER", "chrome"),
            user_agent=os.getenv("YT_GRAB_USER_AGENT", DEFAULT_USER_AGENT),
            accept_language=os.getenv("YT_GRAB_ACCEPT_LANGUAGE", "en-US,en;q=0.9"),
            extra_args=tuple(shlex.split(os.getenv("YT_GRAB_EXTRA_ARGS", ""))),
        )

    def validate(self) -> None:
        """Raise configuration error for values the downloader cannot use."""

        if self.profile not in SUPPORTED_PROFILES:
            raise ValueError(
                f"YT_GRAB_PROFILE must be one of {', '.join(SUPPORTED_PROFILES)}, "
                f"got {self.profile!r}.",
            )
        if self.max_attempts < 1:
            raise ValueError("YT_GRAB_MAX_ATTEMPTS must be >= 1.")
        if self.batch_concurrency < 0:
            raise ValueError("YT_GRAB_BATCH_CONCURRENCY must be >= 0.")
        if not self.downloader.strip():
            raise ValueError("YT_GRAB_DOWNLOADER must not be empty.")
        if not self.muxer.strip():
            raise ValueError("YT_GRAB_MUXER must not be empty.")

    def ensure_directories(self) -> None:
        """Create default download directories; safe to call repeatedly."""

        self.video_dir.mkdir(parents=True, exist_ok=True)
        self.playlist_dir.mkdir(parents=True, exist_ok=True)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            backoff=backoff_for_profile(self.profile),
        )

    def single_exit_policy(self, *, batch: bool) -> ExitCodePolicy:
        accept = self.accept_partial_batch if batch else self.accept_partial_single
        return ExitCodePolicy(accept_partial=accept)

    def playlist_exit_policy(self) -> ExitCodePolicy:
        return ExitCodePolicy(accept_partial=self.accept_partial_playlist)


def _resolve_base_dir() -> Path:
    explicit = os.getenv("YT_GRAB_BASE_DIR", "").strip()
    if explicit:
        return Path(explicit).expanduser()
    home = os.getenv("USERPROFILE") or os.getenv("HOME")
    return (Path(home) if home else Path.home()) / "Downloads"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {raw!r}") from error


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
