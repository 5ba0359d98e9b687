"""CLI entrypoint for yt-grab."""

import logging
from collections.abc import Callable
from pathlib import Path

import rich_click as click

from yt_grab import __version__
from yt_grab.controllers import CommandResult, DownloadCliController, DownloadCommand

click.rich_click.USE_MARKDOWN = True
CONTROLLER = DownloadCliController()


@click.group()
@click.version_option(version=__version__, prog_name="yt-grab")
@click.option("--verbose", is_flag=True, default=False, help="Log debug details.")
def yt_grab(verbose: bool) -> None:
    """Download videos and playlists with yt-dlp, retrying failed runs."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _download_options(func: Callable[..., None]) -> Callable[..., None]:
    func = click.option(
        "--skip-checks",
        is_flag=True,
        default=False,
        help="Do not verify that yt-dlp and ffmpeg are installed.",
    )(func)
    func = click.option(
        "--output-dir",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Destination directory. Defaults to the configured base directory.",
    )(func)
    func = click.option(
        "--max-height",
        type=click.IntRange(min=1),
        default=None,
        help="Maximum video height, for example 720 or 1080.",
    )(func)
    return click.argument("urls", nargs=-1, required=True)(func)


@yt_grab.command("single")
@_download_options
def single(
    urls: tuple[str, ...],
    max_height: int | None,
    output_dir: Path | None,
    skip_checks: bool,
) -> None:
    """Download one or more single videos."""

    _finish(
        _run(
            CONTROLLER.single,
            DownloadCommand(
                urls=urls,
                max_height=max_height,
                output_dir=output_dir,
                skip_checks=skip_checks,
            ),
        ),
    )


@yt_grab.command("playlist")
@_download_options
def playlist(
    urls: tuple[str, ...],
    max_height: int | None,
    output_dir: Path | None,
    skip_checks: bool,
) -> None:
    """Download one or more playlists concurrently."""

    _finish(
        _run(
            CONTROLLER.playlist,
            DownloadCommand(
                urls=urls,
                max_height=max_height,
                output_dir=output_dir,
                skip_checks=skip_checks,
            ),
        ),
    )


@yt_grab.command("check")
def check() -> None:
    """Verify that yt-dlp and ffmpeg are installed."""

    _finish(_run(CONTROLLER.check), failure_message="Dependency check failed.")


def _run(handler: Callable[..., CommandResult], *args: DownloadCommand) -> CommandResult:
    try:
        return handler(*args)
    except ValueError as error:
        raise click.ClickException(str(error)) from error


def _finish(result: CommandResult, failure_message: str = "Download failed.") -> None:
    _emit_lines(result.lines)
    if not result.success:
        raise click.ClickException(failure_message)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    yt_grab()
