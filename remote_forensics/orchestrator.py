#!/usr/bin/env python3
"""
Acquisition Orchestrator
Builds pipelines from the selected access methods and drives one full run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from .core.catalog import Catalog, load_catalog
from .core.config import AcquisitionConfig
from .core.errors import CommandError, ConfigurationError
from .core.logger import AuditLogger, get_module_logger
from .core.target import TargetIdentity
from .modules.acquisition.base import JobResult
from .modules.acquisition.commands import CommandRunner
from .modules.acquisition.evidence import EvidenceAcquirer
from .modules.acquisition.files import download_files
from .modules.acquisition.memory import MemoryAcquirer
from .modules.acquisition.registry import RegistryAcquirer
from .remote import factory
from .remote.base import RemoteCopier
from .utils.paths import ensure_directory

# Fixed priority order of the access methods.
METHOD_ORDER = ("local", "psexec", "wmi", "psremote", "rdp", "ssh")

# Methods switched on by ``--all``. Local and SSH are explicit opt-ins.
ALL_METHODS = frozenset({"psexec", "wmi", "psremote", "rdp"})

EVIDENCE_METHODS = METHOD_ORDER
COMMAND_METHODS = METHOD_ORDER
REGISTRY_METHODS = ("psexec", "psremote", "rdp")
FILE_METHODS = ("psexec", "wmi", "psremote", "rdp", "ssh")
MEMORY_METHODS = ("psexec", "psremote", "rdp")

AUDIT_LOG_NAME = "audit.log"

LOGGER = get_module_logger("orchestrator")

T = TypeVar("T")


@dataclass(frozen=True)
class MethodSelection:
    """Access methods requested for one run"""

    all: bool = False
    local: bool = False
    psexec: bool = False
    wmi: bool = False
    psremote: bool = False
    rdp: bool = False
    ssh: bool = False
    nla: bool = False

    def is_selected(self, method: str) -> bool:
        return bool(getattr(self, method)) or (self.all and method in ALL_METHODS)

    def requested(self, supported: Iterable[str] = METHOD_ORDER) -> tuple[str, ...]:
        """Selected methods a pipeline kind supports, in priority order."""

        supported = set(supported)
        return tuple(
            method
            for method in METHOD_ORDER
            if method in supported and self.is_selected(method)
        )

    @property
    def any_selected(self) -> bool:
        return bool(self.requested())

@dataclass
class AcquisitionSettings:
    """Everything one acquisition run needs, resolved by the CLI"""

    target: TargetIdentity
    store_directory: Path
    selection: MethodSelection
    config: AcquisitionConfig = field(default_factory=AcquisitionConfig)
    key_file: Optional[Path] = None
    custom_commands: Optional[Path] = None
    search_files: Optional[Path] = None
    image_memory: Optional[str] = None
    catalog: Optional[Catalog] = None


@dataclass
class AcquisitionSummary:
    """Outcome of a full run"""

    target: str
    methods: List[str]
    results: List[JobResult] = field(default_factory=list)
    files: Optional[List[Path]] = None
    files_succeeded: Optional[bool] = None
    memory_succeeded: Optional[bool] = None

    @property
    def failed(self) -> List[JobResult]:
        return [result for result in self.results if not result.succeeded]

    @property
    def succeeded(self) -> bool:
        return (
            not self.failed
            and self.files_succeeded is not False
            and self.memory_succeeded is not False
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "methods": list(self.methods),
            "results": [result.as_dict() for result in self.results],
            "files": [str(path) for path in self.files] if self.files is not None else None,
            "files_succeeded": self.files_succeeded,
            "memory_succeeded": self.memory_succeeded,
        }


def first_success(
    candidates: Sequence[T],
    attempt: Callable[[T], Any],
    label: Callable[[T], str] = repr,
) -> Optional[T]:
    """Try ``attempt`` on each candidate in order and return the first that works.

    An attempt fails when it raises :class:`CommandError` or returns
    ``False``. Every failure is logged. Later candidates are never tried
    once one succeeds. Returns ``None`` when all candidates failed.
    """

    for candidate in candidates:
        try:
            outcome = attempt(candidate)
        except CommandError as exc:
            LOGGER.warning("%s failed: %s", label(candidate), exc)
            continue
        if outcome is False:
            LOGGER.warning("%s failed", label(candidate))
            continue
        LOGGER.info("%s succeeded", label(candidate))
        return candidate
    if candidates:
        LOGGER.error("All %d method(s) failed", len(candidates))
    return None


# Builders, one per pipeline kind.


def create_evidence_acquirers(
    computer: TargetIdentity,
    local_store_directory: Path,
    selection: MethodSelection,
    config: Optional[AcquisitionConfig] = None,
    catalog: Optional[Catalog] = None,
    key_file: Optional[Path] = None,
    audit: Optional[AuditLogger] = None,
) -> List[EvidenceAcquirer]:
    config = config or AcquisitionConfig()
    catalog = catalog or load_catalog(config.catalog_path)
    common = dict(config=config, catalog=catalog, audit=audit)
    builders = {
        "local": lambda: EvidenceAcquirer.local(computer, local_store_directory, **common),
        "psexec": lambda: EvidenceAcquirer.psexec(computer, local_store_directory, **common),
        "wmi": lambda: EvidenceAcquirer.wmi(computer, local_store_directory, **common),
        "psremote": lambda: EvidenceAcquirer.psremote(
            computer, local_store_directory, **common
        ),
        "rdp": lambda: EvidenceAcquirer.rdp(
            computer, local_store_directory, selection.nla, **common
        ),
        "ssh": lambda: EvidenceAcquirer.ssh(
            computer, local_store_directory, key_file, **common
        ),
    }
    return [builders[method]() for method in selection.requested(EVIDENCE_METHODS)]


def create_registry_acquirers(
    computer: TargetIdentity,
    local_store_directory: Path,
    selection: MethodSelection,
    config: Optional[AcquisitionConfig] = None,
    catalog: Optional[Catalog] = None,
    audit: Optional[AuditLogger] = None,
) -> List[RegistryAcquirer]:
    config = config or AcquisitionConfig()
    catalog = catalog or load_catalog(config.catalog_path)
    common = dict(config=config, catalog=catalog, audit=audit)
    builders = {
        "psexec": lambda: RegistryAcquirer.psexec(computer, local_store_directory, **common),
        "psremote": lambda: RegistryAcquirer.psremote(
            computer, local_store_directory, **common
        ),
        "rdp": lambda: RegistryAcquirer.rdp(
            computer, local_store_directory, selection.nla, **common
        ),
    }
    return [builders[method]() for method in selection.requested(REGISTRY_METHODS)]


def create_memory_acquirers(
    computer: TargetIdentity,
    local_store_directory: Path,
    selection: MethodSelection,
    config: Optional[AcquisitionConfig] = None,
    catalog: Optional[Catalog] = None,
    audit: Optional[AuditLogger] = None,
) -> List[MemoryAcquirer]:
    config = config or AcquisitionConfig()
    catalog = catalog or load_catalog(config.catalog_path)
    common = dict(config=config, catalog=catalog, audit=audit)
    builders = {
        "psexec": lambda: MemoryAcquirer.psexec(computer, local_store_directory, **common),
        "psremote": lambda: MemoryAcquirer.psremote(
            computer, local_store_directory, **common
        ),
        "rdp": lambda: MemoryAcquirer.rdp(
            computer, local_store_directory, selection.nla, **common
        ),
    }
    return [builders[method]() for method in selection.requested(MEMORY_METHODS)]


def create_command_runners(
    computer: TargetIdentity,
    local_store_directory: Path,
    selection: MethodSelection,
    config: Optional[AcquisitionConfig] = None,
    key_file: Optional[Path] = None,
    audit: Optional[AuditLogger] = None,
) -> List[CommandRunner]:
    common = dict(config=config, audit=audit)
    builders = {
        "local": lambda: CommandRunner.local(computer, local_store_directory, **common),
        "psexec": lambda: CommandRunner.psexec(computer, local_store_directory, **common),
        "wmi": lambda: CommandRunner.wmi(computer, local_store_directory, **common),
        "psremote": lambda: CommandRunner.psremote(computer, local_store_directory, **common),
        "rdp": lambda: CommandRunner.rdp(
            computer, local_store_directory, selection.nla, **common
        ),
        "ssh": lambda: CommandRunner.ssh(
            computer, local_store_directory, key_file, **common
        ),
    }
    return [builders[method]() for method in selection.requested(COMMAND_METHODS)]


def create_windows_file_copiers(
    computer: TargetIdentity,
    selection: MethodSelection,
    config: Optional[AcquisitionConfig] = None,
) -> List[RemoteCopier]:
    """SMB based copiers for the selected Windows methods, RDP excluded.

    PsExec and WMI both reach the administrative share through XCopy, so
    either one selects it once. PowerShell remoting uses PsCopy.
    """

    copiers: List[RemoteCopier] = []
    if selection.is_selected("psexec") or selection.is_selected("wmi"):
        copiers.append(factory.xcopy_remote(computer, config))
    if selection.is_selected("psremote"):
        copiers.append(factory.pscopy_remote(computer, config))
    return copiers


# Drivers.


def acquire_files(
    computer: TargetIdentity,
    local_store_directory: Path,
    file_list: Path,
    selection: MethodSelection,
    config: Optional[AcquisitionConfig] = None,
    key_file: Optional[Path] = None,
) -> Optional[List[Path]]:
    """Download the listed files with the first copier that transfers all of them.

    SSH selects SCP exclusively. Otherwise the SMB copiers are tried in
    priority order and RDP drive redirection is the last resort.
    Returns the downloaded paths, or ``None`` when every copier failed.
    """

    if selection.is_selected("ssh"):
        candidates: List[RemoteCopier] = [factory.scp(computer, config, key_file)]
    else:
        candidates = create_windows_file_copiers(computer, selection, config)
        if selection.is_selected("rdp"):
            candidates.append(factory.rdp_copy(computer, config, selection.nla))
    if not candidates:
        LOGGER.warning("No selected method can transfer files; skipping %s", file_list)
        return None

    downloaded: Dict[str, List[Path]] = {}

    def attempt(copier: RemoteCopier) -> List[Path]:
        LOGGER.info("Downloading files listed in %s using %s", file_list, copier.method_name())
        downloaded["paths"] = download_files(file_list, local_store_directory, copier)
        return downloaded["paths"]

    winner = first_success(
        candidates, attempt, label=lambda copier: f"File download via {copier.method_name()}"
    )
    if winner is None:
        return None
    LOGGER.info("Files in %s successfully transferred", file_list)
    return downloaded["paths"]


def image_memory(
    acquirers: Sequence[MemoryAcquirer], remote_directory: str
) -> bool:
    """Image memory with the first acquirer that succeeds; no retries."""

    winner = first_success(
        acquirers,
        lambda acquirer: acquirer.image_memory(remote_directory),
        label=lambda acquirer: f"Memory acquisition via {acquirer.method_name}",
    )
    return winner is not None


def run_acquisition(settings: AcquisitionSettings) -> AcquisitionSummary:
    """Run one full acquisition.

    Order: evidence, registry, custom commands, files, memory. The catalog
    is loaded before any remote contact so a broken catalog aborts early.
    """

    config = settings.config
    selection = settings.selection
    if not selection.any_selected:
        raise ConfigurationError("No access method selected")
    store = ensure_directory(Path(settings.store_directory))
    computer = settings.target
    catalog = settings.catalog or load_catalog(config.catalog_path)

    summary = AcquisitionSummary(
        target=computer.address, methods=list(selection.requested())
    )
    audit = AuditLogger(store / AUDIT_LOG_NAME)
    audit.log(
        "RUN_START",
        {
            "target": computer.address,
            "methods": summary.methods,
            "store": str(store),
            "config": config.as_dict(),
        },
    )
    LOGGER.info(
        "Acquiring from %s using %s into %s",
        computer.address,
        ", ".join(summary.methods),
        store,
    )

    try:
        for acquirer in create_evidence_acquirers(
            computer, store, selection, config, catalog, settings.key_file, audit
        ):
            summary.results.extend(acquirer.run_all())

        for acquirer in create_registry_acquirers(
            computer, store, selection, config, catalog, audit
        ):
            summary.results.extend(acquirer.acquire())

        if settings.custom_commands:
            for runner in create_command_runners(
                computer, store, selection, config, settings.key_file, audit
            ):
                LOGGER.info("Running custom commands using %s", runner.method_name)
                summary.results.extend(runner.run_commands(settings.custom_commands))

        if settings.search_files:
            if selection.requested(FILE_METHODS):
                summary.files = acquire_files(
                    computer, store, settings.search_files, selection, config, settings.key_file
                )
                summary.files_succeeded = summary.files is not None
            else:
                LOGGER.warning(
                    "No selected method can transfer files; skipping %s", settings.search_files
                )

        if settings.image_memory:
            acquirers = create_memory_acquirers(
                computer, store, selection, config, catalog, audit
            )
            if acquirers:
                summary.memory_succeeded = image_memory(acquirers, settings.image_memory)
            else:
                LOGGER.warning(
                    "No selected method can image memory (supported: %s); skipping",
                    ", ".join(MEMORY_METHODS),
                )
    finally:
        audit.log(
            "RUN_END",
            {
                "target": computer.address,
                "jobs": len(summary.results),
                "failed": len(summary.failed),
            },
        )
        audit.close()

    LOGGER.info(
        "Acquisition from %s finished: %d job(s), %d failed",
        computer.address,
        len(summary.results),
        len(summary.failed),
    )
    return summary


__all__ = [
    "ALL_METHODS",
    "AcquisitionSettings",
    "AcquisitionSummary",
    "METHOD_ORDER",
    "MethodSelection",
    "acquire_files",
    "create_command_runners",
    "create_evidence_acquirers",
    "create_memory_acquirers",
    "create_registry_acquirers",
    "create_windows_file_copiers",
    "first_success",
    "image_memory",
    "run_acquisition",
]
