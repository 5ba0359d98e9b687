"""yt-grab: retrying command-line wrapper around yt-dlp."""

__version__ = "0.1.0"
