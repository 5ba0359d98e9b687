from __future__ import annotations

import json
import os
import stat
import sys
from pathlib import Path

import allure
import pytest
from click.testing import CliRunner

from yt_grab import main as cli_main
from yt_grab.controllers import DownloadCliController
from yt_grab.main import yt_grab

pytestmark = [
    allure.epic("Downloads"),
    allure.feature("CLI"),
]

_FAKE_DOWNLOADER = """
import json
import os
import sys

if "--version" in sys.argv:
    print("2025.01.01")
    raise SystemExit(0)

with open(os.environ["FAKE_YTDLP_LOG"], "a", encoding="utf-8") as handle:
    handle.write(json.dumps(sys.argv[1:]) + "\\n")

url = sys.argv[-1]
print(f"[download] {url}")
if "fail" in url:
    sys.stderr.write("ERROR: unable to download video data\\n")
    raise SystemExit(2)
if "partial" in url:
    sys.stderr.write("ERROR: some playlist entries are unavailable\\n")
    raise SystemExit(1)
"""

_FAKE_MUXER = """
print("ffmpeg version 7.0")
"""


def _write_fake_tool(bin_dir: Path, name: str, source: str) -> Path:
    implementation = bin_dir / f"{name}_impl.py"
    implementation.write_text(source.strip() + "\n", "utf-8")
    if os.name == "nt":
        launcher = bin_dir / f"{name}.cmd"
        launcher.write_text(f'@echo off\r\n"{sys.executable}" "{implementation}" %*\r\n', "utf-8")
        return launcher
    launcher = bin_dir / name
    launcher.write_text(
        f'#!/usr/bin/env sh\nexec "{sys.executable}" "{implementation}" "$@"\n',
        "utf-8",
    )
    launcher.chmod(launcher.stat().st_mode | stat.S_IXUSR)
    return launcher


@pytest.fixture()
def fake_tools(tmp_path: Path, monkeypatch, sleep_recorder) -> Path:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    downloader = _write_fake_tool(bin_dir, "yt-dlp", _FAKE_DOWNLOADER)
    muxer = _write_fake_tool(bin_dir, "ffmpeg", _FAKE_MUXER)
    log_path = tmp_path / "yt-dlp.log"

    monkeypatch.setenv("YT_GRAB_DOWNLOADER", str(downloader))
    monkeypatch.setenv("YT_GRAB_MUXER", str(muxer))
    monkeypatch.setenv("YT_GRAB_BASE_DIR", str(tmp_path / "Downloads"))
    monkeypatch.setenv("FAKE_YTDLP_LOG", str(log_path))
    monkeypatch.setattr(cli_main, "CONTROLLER", DownloadCliController(sleep=sleep_recorder))
    return log_path


def _logged_calls(log_path: Path) -> list[list[str]]:
    if not log_path.exists():
        return []
    return [json.loads(line) for line in log_path.read_text("utf-8").splitlines()]


def test_single_downloads_video_into_default_directory(fake_tools: Path, tmp_path: Path) -> None:
    result = CliRunner().invoke(
        yt_grab,
        ["single", "https://www.youtube.com/watch?v=ok1", "--max-height", "720"],
    )

    assert result.exit_code == 0, result.output
    assert "Video download completed successfully" in result.output
    calls = _logged_calls(fake_tools)
    assert len(calls) == 1
    argv = calls[0]
    assert argv[argv.index("-f") + 1] == "bestvideo[height<=720]+bestaudio/best[height<=720]/best"
    video_dir = tmp_path / "Downloads" / "youtube-downloads"
    assert argv[argv.index("-o") + 1] == str(video_dir / "%(title)s.%(ext)s")
    assert video_dir.is_dir()
    assert (tmp_path / "Downloads" / "playlists").is_dir()


def test_single_failure_exits_non_zero_after_retries(fake_tools: Path) -> None:
    result = CliRunner().invoke(yt_grab, ["single", "https://www.youtube.com/watch?v=fail"])

    assert result.exit_code == 1
    assert "Exit code: 2" in result.output
    assert "unable to download video data" in result.output
    assert len(_logged_calls(fake_tools)) == 3


def test_single_strict_mode_rejects_partial_exit_code(fake_tools: Path) -> None:
    result = CliRunner().invoke(yt_grab, ["single", "https://www.youtube.com/watch?v=partial"])

    assert result.exit_code == 1
    assert "Exit code: 1" in result.output


def test_several_single_videos_run_as_batch(fake_tools: Path) -> None:
    result = CliRunner().invoke(
        yt_grab,
        [
            "single",
            "https://www.youtube.com/watch?v=ok1",
            "https://www.youtube.com/watch?v=fail",
            "https://www.youtube.com/watch?v=partial",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "All downloads completed: 2 succeeded, 1 failed." in result.output
    assert "[failed] 2. https://www.youtube.com/watch?v=fail" in result.output
    assert len(_logged_calls(fake_tools)) == 5


def test_playlist_uses_playlist_template_and_output_dir(fake_tools: Path, tmp_path: Path) -> None:
    target = tmp_path / "lists"
    result = CliRunner().invoke(
        yt_grab,
        ["playlist", "https://www.youtube.com/playlist?list=PL1", "--output-dir", str(target)],
    )

    assert result.exit_code == 0, result.output
    assert "Playlist download completed successfully" in result.output
    argv = _logged_calls(fake_tools)[0]
    assert argv[argv.index("-o") + 1] == str(
        target / "%(playlist_title)s/%(playlist_index)s - %(title)s.%(ext)s",
    )
    assert target.is_dir()


def test_missing_dependency_aborts_before_download(fake_tools: Path, monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("YT_GRAB_MUXER", str(tmp_path / "bin" / "missing-ffmpeg"))

    result = CliRunner().invoke(yt_grab, ["single", "https://www.youtube.com/watch?v=ok1"])

    assert result.exit_code == 1
    assert "Please install required dependencies and try again." in result.output
    assert _logged_calls(fake_tools) == []


def test_skip_checks_bypasses_preflight(fake_tools: Path, monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("YT_GRAB_MUXER", str(tmp_path / "bin" / "missing-ffmpeg"))

    result = CliRunner().invoke(
        yt_grab,
        ["single", "--skip-checks", "https://www.youtube.com/watch?v=ok1"],
    )

    assert result.exit_code == 0, result.output
    assert len(_logged_calls(fake_tools)) == 1


def test_check_command_reports_available_tools(fake_tools: Path) -> None:
    result = CliRunner().invoke(yt_grab, ["check"])

    assert result.exit_code == 0, result.output
    assert "are available." in result.output


def test_invalid_configuration_is_reported(fake_tools: Path, monkeypatch) -> None:
    monkeypatch.setenv("YT_GRAB_PROFILE", "turbo")

    result = CliRunner().invoke(yt_grab, ["check"])

    assert result.exit_code == 1
    assert "YT_GRAB_PROFILE" in result.output


def test_urls_are_required() -> None:
    result = CliRunner().invoke(yt_grab, ["single"])

    assert result.exit_code != 0
