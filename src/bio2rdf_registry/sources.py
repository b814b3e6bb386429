"""Fetching and caching of the remote registry.

The local copy of the registry is refreshed based on its age, counted in
whole days between the file's modification date and today:

1. If there is no local copy, it is downloaded
2. If the cache time is zero, the local copy is never replaced
3. If the local copy is at least as old as the cache time, it is downloaded again
4. Otherwise, the local copy is kept

.. warning::

    The local copy isn't locked. Two processes refreshing the same file at the
    same time can race, so only one process should write to a given path.
"""

from __future__ import annotations

import datetime
import logging
import os
import stat
import tempfile
from pathlib import Path

import requests

from .api import CacheWriteError, FetchError

__all__ = [
    "REGISTRY_FILE_NAME",
    "REMOTE_REGISTRY_URL",
    "download",
    "ensure_fresh",
    "get_cache_age",
    "is_stale",
]

logger = logging.getLogger(__name__)

#: The published CSV export of the Bio2RDF dataset registry
REMOTE_REGISTRY_URL = (
    "https://docs.google.com/spreadsheet/pub"
    "?key=0AmzqhEUDpIPvdFR0UFhDUTZJdnNYdnJwdHdvNVlJR1E&single=true&gid=0&output=csv"
)
#: The name of the local copy inside the cache directory
REGISTRY_FILE_NAME = "registry.csv"


def get_cache_age(path: str | Path, today: datetime.date | None = None) -> int:
    """Get the age of a file in whole days, comparing dates rather than timestamps."""
    if today is None:
        today = datetime.date.today()
    modified = datetime.date.fromtimestamp(Path(path).stat().st_mtime)
    return abs((today - modified).days)


def is_stale(path: str | Path, cache_days: int, today: datetime.date | None = None) -> bool:
    """Check if a local copy of the registry should be downloaded again.

    :param path: The location of the local copy
    :param cache_days: The number of days a local copy stays fresh. If zero,
        an existing local copy is never considered stale.
    :param today: The date to compare against. Defaults to today.
    :returns: If the file should be (re-)downloaded
    """
    path = Path(path)
    if not path.is_file():
        logger.warning("no local copy of registry at %s", path)
        return True
    days = get_cache_age(path, today=today)
    if cache_days == 0:
        logger.warning("registry at %s is %d days old, but updates are disabled", path, days)
        return False
    if days >= cache_days:
        logger.debug("registry at %s is %d days old and is set to be updated", path, days)
        return True
    logger.debug("registry at %s is up to date", path)
    return False


def _get_mode(path: Path) -> int:
    """Get the permissions of the existing local copy, or the umask default for a new file."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def download(url: str, path: str | Path, *, timeout: float | None = 60) -> Path:
    """Download the remote registry and replace the local copy.

    :param url: The URL of the remote registry
    :param path: The location of the local copy
    :param timeout: The number of seconds to wait for the server. If none, waits forever.
    :returns: The path to the local copy
    :raises FetchError: if the remote registry can't be reached or is empty
    :raises CacheWriteError: if the local copy can't be written
    """
    path = Path(path)
    logger.info("downloading dataset registry from %s", url)
    try:
        res = requests.get(url, timeout=timeout)
        res.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(url, str(e)) from e
    if not res.content.strip():
        raise FetchError(url, "empty response")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temporary = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as file:
                file.write(res.content)
            os.chmod(temporary, _get_mode(path))
            os.replace(temporary, path)
        except BaseException:
            Path(temporary).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise CacheWriteError(path) from e
    logger.info("download complete: %s", path)
    return path


def ensure_fresh(
    path: str | Path,
    url: str = REMOTE_REGISTRY_URL,
    cache_days: int = 1,
    *,
    timeout: float | None = 60,
) -> bool:
    """Make sure the local copy of the registry exists and isn't stale.

    :returns: If the registry was downloaded
    :raises FetchError: if a download was necessary but the remote registry
        can't be reached or is empty
    :raises CacheWriteError: if the local copy can't be written
    """
    if not is_stale(path, cache_days):
        return False
    download(url, path, timeout=timeout)
    return True
