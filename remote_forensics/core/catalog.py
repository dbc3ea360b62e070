"""Command catalog loading.

The catalog is plain data: every job is a display name plus an argument
template. Evidence templates are executed verbatim, registry and memory
templates carry ``{output}``/``{tool}`` placeholders that are filled in
right before execution.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .config import load_yaml
from .errors import CatalogError

DEFAULT_CATALOG = Path(__file__).resolve().parents[1] / "config" / "catalog.yaml"


@dataclass(frozen=True)
class AcquisitionJob:
    """A named command template."""

    name: str
    command: tuple[str, ...]
    elevated: bool | frozenset[str] = False

    def requires_elevation(self, method: str) -> bool:
        if isinstance(self.elevated, frozenset):
            return method.lower() in self.elevated
        return bool(self.elevated)

    def render(self, **placeholders: str) -> list[str]:
        rendered = []
        for arg in self.command:
            for key, value in placeholders.items():
                arg = arg.replace("{" + key + "}", str(value))
            rendered.append(arg)
        return rendered

    @classmethod
    def from_mapping(cls, data: Any) -> "AcquisitionJob":
        if not isinstance(data, Mapping):
            raise CatalogError(f"Catalog entry must be a mapping: {data!r}")

        name = str(data.get("name") or "").strip()
        if not name:
            raise CatalogError(f"Catalog entry without a name: {dict(data)!r}")

        command = data.get("command")
        if isinstance(command, str):
            command = command.split()
        if not isinstance(command, list | tuple) or not command:
            raise CatalogError(f"Catalog entry '{name}' has no command")

        elevated = data.get("elevated", False)
        if isinstance(elevated, list | tuple | set):
            elevated = frozenset(str(method).lower() for method in elevated)
        else:
            elevated = bool(elevated)

        return cls(
            name=name,
            command=tuple(str(arg) for arg in command),
            elevated=elevated,
        )


@dataclass(frozen=True)
class Catalog:
    """All job templates known to one run."""

    windows: tuple[AcquisitionJob, ...]
    linux: tuple[AcquisitionJob, ...]
    registry: tuple[AcquisitionJob, ...]
    memory: Optional[AcquisitionJob] = None


def _jobs(section: Any, label: str) -> tuple[AcquisitionJob, ...]:
    if section is None:
        return ()
    if not isinstance(section, list):
        raise CatalogError(f"Catalog section '{label}' must be a list")
    return tuple(AcquisitionJob.from_mapping(entry) for entry in section)


def load_catalog(path: Optional[Path] = None) -> Catalog:
    """Load the job catalog from ``path`` (defaults to the bundled catalog)."""

    path = Path(path) if path else DEFAULT_CATALOG
    if not path.exists():
        raise CatalogError(f"Catalog not found: {path}")

    try:
        data = load_yaml(path)
    except TypeError as exc:
        raise CatalogError(str(exc)) from exc

    evidence = data.get("evidence") or {}
    if not isinstance(evidence, Mapping):
        raise CatalogError("Catalog section 'evidence' must be a mapping")

    memory = data.get("memory")
    return Catalog(
        windows=_jobs(evidence.get("windows"), "evidence.windows"),
        linux=_jobs(evidence.get("linux"), "evidence.linux"),
        registry=_jobs(data.get("registry"), "registry"),
        memory=AcquisitionJob.from_mapping(memory) if memory else None,
    )


def read_command_file(path: Path) -> list[str]:
    """Return the command lines of a user supplied command file.

    Blank lines and lines starting with ``#`` are skipped. Read errors
    propagate to the caller.
    """

    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return [
        line.strip()
        for line in lines
        if line.strip() and not line.lstrip().startswith("#")
    ]


__all__ = [
    "AcquisitionJob",
    "Catalog",
    "DEFAULT_CATALOG",
    "load_catalog",
    "read_command_file",
]
