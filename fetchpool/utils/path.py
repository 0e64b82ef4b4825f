"""
Utilities for handling file paths, URL-derived filenames and URL lists.
"""

import uuid
from pathlib import Path
from urllib.parse import unquote, urlsplit

from pathvalidate import sanitize_filename


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def random_filename(extension: str) -> str:
    """Synthesizes a unique filename for URLs that do not name a file."""
    return f"{uuid.uuid4().hex}.{extension.lstrip('.')}"


def derive_filename(url: str, fallback_extension: str = "bin") -> str:
    """
    Derives a local filename from the last segment of a URL's path.

    The segment is percent-decoded and sanitized for the local filesystem. When
    the path is empty or ends in '/', or nothing usable survives sanitizing, a
    random name with `fallback_extension` is returned instead.
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        path = ""

    segment = path.rsplit("/", 1)[-1] if path else ""
    name = sanitize_filename(unquote(segment), platform="auto") if segment else ""
    if not name or name in (".", ".."):
        return random_filename(fallback_extension)
    return name


def parse_url_lines(text: str) -> list[str]:
    """
    Splits newline-separated text into URLs, trimming each line and dropping
    blank ones. Order and duplicates are preserved.
    """
    return [line.strip() for line in text.splitlines() if line.strip()]
