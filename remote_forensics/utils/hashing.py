"""Hash helper utilities."""

from __future__ import annotations

import hashlib
from pathlib import Path

_DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1 MiB


def compute_hash(path: Path, *, chunk_size: int = _DEFAULT_CHUNK_SIZE) -> str:
    """Compute the SHA-256 of an acquired artefact at ``path``."""

    if chunk_size <= 0:
        raise ValueError("chunk_size must be a positive integer")

    hasher = hashlib.sha256()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


__all__ = ["compute_hash"]
