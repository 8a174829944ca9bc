import logging
import os
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Generator, Union

from cached_path import cached_path

from .aliases import PathOrStr

log = logging.getLogger(__name__)


def normalize_path(path: PathOrStr) -> str:
    """
    Normalize a path/URL.

    :param path: The path/URL to normalize.
    """
    return str(path).rstrip("/").replace("file://", "")


def is_url(path: PathOrStr) -> bool:
    """
    Check if a path is a URL.

    :param path: Path-like object to check.
    """
    path = normalize_path(path)
    return re.match(r"[a-z0-9]+://.*", str(path)) is not None


def file_exists(path: PathOrStr) -> bool:
    """
    Check if a local file exists.

    :param path: Path to a file.
    """
    path = normalize_path(path)
    if is_url(path):
        raise NotImplementedError(f"file_exists not implemented for remote files ('{path}')")
    return Path(path).exists()


def _format_bytes(num: Union[int, float], suffix="B") -> str:
    for unit in ("", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei", "Zi"):
        if abs(num) < 1024.0:
            return f"{num:3.1f}{unit}{suffix}"
        num /= 1024.0
    return f"{num:.1f}Yi{suffix}"


@contextmanager
def open_input(path: PathOrStr) -> Generator[BinaryIO, None, None]:
    """
    Open a local or remote file for binary reading. Remote files are downloaded to
    the local ``cached_path`` cache first.

    :param path: The path/URL to read.

    :raises FileNotFoundError: If the file doesn't exist.
    """
    local_path = cached_path(normalize_path(path), quiet=True)
    log.debug(f"Reading {_format_bytes(os.path.getsize(local_path))} from '{path}'")
    with open(local_path, "rb") as f:
        yield f


@contextmanager
def atomic_output(path: PathOrStr, save_overwrite: bool = False) -> Generator[BinaryIO, None, None]:
    """
    Open a local file for binary writing such that ``path`` only ever holds complete output.
    Data goes to a temporary sibling file which is moved over ``path`` when the block exits
    cleanly, and removed if the block raises.

    :param path: The target path.
    :param save_overwrite: Overwrite any existing file.

    :raises FileExistsError: If the ``path`` already exists and ``save_overwrite=False``.
    """
    path = normalize_path(path)
    if is_url(path):
        raise NotImplementedError(f"Writing to remote files is not supported ('{path}')")

    target = Path(path)
    if file_exists(target) and not save_overwrite:
        raise FileExistsError(target)
    target.parent.mkdir(exist_ok=True, parents=True)

    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    log.debug(f"Wrote {_format_bytes(target.stat().st_size)} to '{target}'")
