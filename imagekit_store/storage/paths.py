"""
Path helpers shared by storage backends.

Remote stores always use forward slashes, whatever the host platform.
"""

import posixpath
import re
from datetime import date
from typing import Optional

import httpx

_UNSAFE_CHARS = re.compile(r"[^\w@.]", re.ASCII)


def sanitize_file_name(file_name: str) -> str:
    """
    Replace every character outside ``[A-Za-z0-9_@.]`` with ``-``.

    Dots are kept, so the extension survives. Collisions are not handled
    here; the upload's unique-file-name option takes care of them.
    """
    return _UNSAFE_CHARS.sub("-", file_name)


def to_posix(path: str) -> str:
    """Convert backslash separators to forward slashes."""
    return path.replace("\\", "/")


def strip_leading_slash(path: str) -> str:
    return path.lstrip("/")


def join_path(target_dir: Optional[str], file_name: str) -> str:
    """Join and normalize a directory and file name into a relative remote path."""
    joined = posixpath.join(to_posix(target_dir or ""), to_posix(file_name))
    normalized = posixpath.normpath(joined) if joined else joined
    if normalized == ".":
        normalized = ""
    return strip_leading_slash(normalized)


def get_target_dir(base_dir: str = "/", today: Optional[date] = None) -> str:
    """
    Build the dated folder for an upload: ``<base_dir>/YYYY/MM``.

    Args:
        base_dir: Configured base folder
        today: Date to stamp with (defaults to the local date)

    Returns:
        Normalized folder path using forward slashes
    """
    today = today or date.today()
    folder = posixpath.join(
        to_posix(base_dir or "/"), f"{today:%Y}", f"{today:%m}")
    return posixpath.normpath(folder)


def build_url(endpoint: str, path: str) -> str:
    """
    Resolve a relative path under the configured URL endpoint.

    The endpoint is treated as a directory, so any path segment it carries
    (e.g. an ImageKit ID) is preserved.

    Raises:
        httpx.InvalidURL: If the result cannot be encoded as a URL
            (e.g. a name carrying lone surrogates from a non-UTF-8 filename)
    """
    base = endpoint if endpoint.endswith("/") else endpoint + "/"
    try:
        return str(httpx.URL(base).join(strip_leading_slash(to_posix(path))))
    except UnicodeError as e:
        raise httpx.InvalidURL(f"Cannot encode URL for path {path!r}") from e
