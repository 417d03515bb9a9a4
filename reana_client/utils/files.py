"""Local file helpers used by ``upload``, ``download`` and the listing commands."""

from __future__ import annotations

import io
import os
import stat
import zipfile
from email.message import Message
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List, Optional, Sequence

import structlog

from ..config import FILES_BLACKLIST
from ..errors import ValidationError
from .display import INFO, display_message

__all__ = [
    "is_blacklisted",
    "validate_input_paths",
    "collect_upload_files",
    "filename_from_disposition",
    "write_zip_entries",
    "store_file",
]

log = structlog.get_logger()

DEFAULT_DOWNLOAD_NAME = "downloaded_file"


def is_blacklisted(name: str, prefixes: Sequence[str] = FILES_BLACKLIST) -> bool:
    """Return ``True`` when *name* starts with any of *prefixes*."""
    return any(name.startswith(prefix) for prefix in prefixes)


# --------------------------------------------------------------------------- #
# Upload                                                                      #
# --------------------------------------------------------------------------- #
def _stat(path: str) -> os.stat_result:
    try:
        return os.stat(path)
    except FileNotFoundError:
        raise ValidationError(f"path '{path}' does not exist") from None


def validate_input_paths(files: Iterable[str], directories: Iterable[str]) -> None:
    """Check that each declared input exists with the declared kind.

    Raises:
        ValidationError: For a missing path, a directory listed under
            ``inputs.files`` or a file listed under ``inputs.directories``.
    """
    for path in files:
        if stat.S_ISDIR(_stat(path).st_mode):
            raise ValidationError(f"found directory in `inputs.files`: {path}")
    for path in directories:
        if not stat.S_ISDIR(_stat(path).st_mode):
            raise ValidationError(f"found file in `inputs.directories`: {path}")


def _walk(path: str) -> Iterator[str]:
    """Yield the regular files below *path* in lexical order, skipping symlinks."""
    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError:
        raise ValidationError(f"path '{path}' does not exist") from None

    if stat.S_ISDIR(mode):
        for entry in sorted(os.listdir(path)):
            yield from _walk(os.path.join(path, entry))
    elif stat.S_ISREG(mode):
        yield path
    elif stat.S_ISLNK(mode):
        display_message(f"Ignoring symlink {path}", INFO)


def collect_upload_files(paths: Iterable[str]) -> List[str]:
    """Return every regular file under *paths*, each listed once."""
    paths = list(paths)
    log.debug("collecting files to upload", paths=paths)
    files: List[str] = []
    for root in paths:
        for path in _walk(root):
            if path not in files:
                files.append(path)
    log.debug("collected files", files=files)
    return files


# --------------------------------------------------------------------------- #
# Download                                                                    #
# --------------------------------------------------------------------------- #
def filename_from_disposition(header: Optional[str]) -> str:
    """Return the ``filename`` parameter of a ``Content-Disposition`` header."""
    if not header:
        return DEFAULT_DOWNLOAD_NAME
    msg = Message()
    msg["content-disposition"] = header
    return msg.get_param("filename", header="content-disposition") or DEFAULT_DOWNLOAD_NAME


def write_zip_entries(content: bytes, out: BinaryIO) -> None:
    """Write the entries of the ZIP archive *content* to *out*, back to back."""
    with zipfile.ZipFile(io.BytesIO(content)) as archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            with archive.open(info) as entry:
                out.write(entry.read())


def store_file(directory: str, name: str, content: bytes) -> Path:
    """Write *content* to ``directory/name``, creating parent directories.

    Raises:
        ValidationError: If *name* resolves outside *directory*.
    """
    base = Path(directory or ".").resolve()
    target = (base / name).resolve()
    if base not in target.parents:
        raise ValidationError(f"refusing to write '{name}' outside '{directory or '.'}'")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    return target
