"""Path related helper utilities."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path, PureWindowsPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..core.target import TargetIdentity

DEFAULT_EXTENSION = "txt"

# Longest label kept verbatim in a report file name.
MAX_LABEL_LENGTH = 96
_DIGEST_LENGTH = 12

_UNSAFE_CHARS = re.compile(r"[^0-9A-Za-z._]+")


def ensure_directory(path: Path) -> Path:
    """Ensure ``path`` exists and return it."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def report_label(text: str) -> str:
    """Reduce ``text`` to a filesystem-safe label (``process list`` -> ``process-list``).

    Labels longer than :data:`MAX_LABEL_LENGTH` are cut and suffixed with a
    digest of the full text, so long command lines and deep remote paths
    still map to distinct, valid file names.
    """

    label = _UNSAFE_CHARS.sub("-", text).strip("-.") or "command"
    if len(label) <= MAX_LABEL_LENGTH:
        return label
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]
    head = label[: MAX_LABEL_LENGTH - _DIGEST_LENGTH - 1].rstrip("-.")
    return f"{head}-{digest}"


def create_report_path(
    target: "TargetIdentity",
    store_directory: Path,
    prefix: str,
    method_name: str,
    extension: str = DEFAULT_EXTENSION,
) -> Path:
    """Return the deterministic report path for one (target, job, method) triple."""

    extension = extension.lstrip(".") or DEFAULT_EXTENSION
    filename = (
        f"{report_label(target.address)}-{report_label(prefix)}-{report_label(method_name)}"
        f".{extension}"
    )
    return Path(store_directory) / filename


def ensure_unique_path(path: Path) -> Path:
    """Return a unique path by appending a numeric suffix if necessary."""

    candidate = path
    counter = 1
    while candidate.exists():
        candidate = candidate.with_name(f"{path.stem}_{counter}{path.suffix}")
        counter += 1
    return candidate


def create_report_file(
    target: "TargetIdentity",
    store_directory: Path,
    prefix: str,
    method_name: str,
    extension: str = DEFAULT_EXTENSION,
) -> Path:
    """Reserve and pre-create (empty) the report file for a job.

    The file exists before the remote process starts so a failed or hung
    acquisition still leaves a visible, possibly empty, report behind.
    """

    path = ensure_unique_path(
        create_report_path(target, store_directory, prefix, method_name, extension)
    )
    path.open("wb").close()
    return path


def canonicalize(path: Path) -> str:
    """Return the absolute canonical form of an existing ``path``."""

    return str(Path(path).resolve(strict=True))


def to_tsclient_path(path: Path | str) -> str:
    """Express a local path as seen from inside an RDP session with drive redirection.

    ``C:\\cases\\out.txt`` becomes ``\\\\tsclient\\C\\cases\\out.txt``.
    """

    windows_path = PureWindowsPath(str(path))
    parts = list(windows_path.parts[1:]) if windows_path.anchor else list(windows_path.parts)
    drive = windows_path.drive.rstrip(":")
    if drive:
        parts.insert(0, drive)
    return "\\\\tsclient\\" + "\\".join(parts)


def to_admin_share_path(address: str, path: Path | str) -> str:
    """Express a remote local path through its administrative share.

    ``C:\\Windows\\Temp\\x.reg`` on ``10.0.0.5`` becomes
    ``\\\\10.0.0.5\\C$\\Windows\\Temp\\x.reg``.
    """

    windows_path = PureWindowsPath(str(path))
    drive = windows_path.drive.rstrip(":") or "C"
    rest = windows_path.parts[1:] if windows_path.anchor else windows_path.parts
    return "\\".join([f"\\\\{address}", f"{drive}$", *rest])


__all__ = [
    "DEFAULT_EXTENSION",
    "MAX_LABEL_LENGTH",
    "canonicalize",
    "create_report_file",
    "create_report_path",
    "ensure_directory",
    "ensure_unique_path",
    "report_label",
    "to_admin_share_path",
    "to_tsclient_path",
]
