"""Download of analyst listed files through a remote copier."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List

from ...core.catalog import read_command_file
from ...core.errors import CommandError, TransferError
from ...remote.base import RemoteCopier
from ...utils.hashing import compute_hash
from ...utils.paths import create_report_file

LOGGER = logging.getLogger("remote_forensics.acquisition.files")

FALLBACK_EXTENSION = "bin"

_BASENAME = re.compile(r"[^\\/]*$")


def split_remote_path(remote_path: str) -> tuple[str, str]:
    """Split a remote path into (label source, extension).

    Both ``\\`` and ``/`` separate components so Windows and POSIX targets
    are handled alike. ``C:\\Windows\\win.ini`` gives ``("C:\\Windows\\win", "ini")``.
    """

    basename = _BASENAME.search(remote_path).group(0)
    stem, dot, extension = basename.rpartition(".")
    if not dot or not stem or not extension:
        return remote_path, FALLBACK_EXTENSION
    return remote_path[: -(len(extension) + 1)], extension


def download_files(
    file_list: Path, local_store_directory: Path, remote_copier: RemoteCopier
) -> List[Path]:
    """Copy every path listed in ``file_list`` from the target.

    All listed files are attempted. A :class:`TransferError` naming the
    failed paths is raised once the whole list has been processed. Reading
    ``file_list`` itself is local I/O and its errors propagate.
    """

    remote_paths = read_command_file(file_list)
    method = remote_copier.method_name()
    computer = remote_copier.computer
    LOGGER.info(
        "Downloading %d file(s) from %s using %s", len(remote_paths), computer.address, method
    )

    downloaded: List[Path] = []
    failed: List[str] = []
    for remote_path in remote_paths:
        prefix, extension = split_remote_path(remote_path)
        local_path = create_report_file(
            computer, local_store_directory, prefix, method, extension
        )
        try:
            remote_copier.copy_from_remote(remote_path, local_path)
        except CommandError as exc:
            LOGGER.error("%s: could not download %s: %s", method, remote_path, exc)
            failed.append(remote_path)
            continue
        LOGGER.info(
            "%s: %s stored in %s (sha256 %s)",
            method,
            remote_path,
            local_path,
            compute_hash(local_path),
        )
        downloaded.append(local_path)

    if failed:
        raise TransferError(
            f"{method}: {len(failed)} of {len(remote_paths)} file(s) not downloaded: "
            + ", ".join(failed)
        )
    return downloaded


__all__ = ["download_files", "split_remote_path"]
