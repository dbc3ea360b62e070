"""Registry hive export and retrieval."""

from __future__ import annotations

from pathlib import Path, PureWindowsPath
from typing import List, Optional, Sequence

from ...core.catalog import AcquisitionJob, Catalog, load_catalog
from ...core.config import AcquisitionConfig
from ...core.errors import CommandError
from ...core.logger import AuditLogger
from ...core.target import TargetIdentity
from ...remote import factory
from ...remote.base import Connector, RemoteCopier
from ...utils.hashing import compute_hash
from ...utils.paths import create_report_file
from .base import AcquisitionPipeline, JobResult

REGISTRY_EXTENSION = "reg"


class RegistryAcquirer(AcquisitionPipeline):
    """Exports each hive on the target, then pulls the export back.

    Per hive: ``reg export`` into a staged file under the remote temp
    directory, copy it to ``<address>-<hive>-<METHOD>.reg`` and delete the
    staged copy. Cleanup failures are logged only.
    """

    def __init__(
        self,
        connector: Connector,
        remote_copier: RemoteCopier,
        computer: TargetIdentity,
        local_store_directory: Path,
        hives: Sequence[AcquisitionJob],
        remote_temp_directory: str = "C:\\Users\\Public",
        audit: Optional[AuditLogger] = None,
    ):
        super().__init__(connector, computer, local_store_directory, audit)
        self.remote_copier = remote_copier
        self.hives = tuple(hives)
        self.remote_temp_directory = remote_temp_directory

    def acquire(self) -> List[JobResult]:
        self.logger.info(
            "Exporting %d registry hive(s) from %s using %s",
            len(self.hives),
            self.computer.address,
            self.method_name,
        )
        return [self.acquire_hive(hive) for hive in self.hives]

    def acquire_hive(self, hive: AcquisitionJob) -> JobResult:
        local_path = create_report_file(
            self.computer,
            self.local_store_directory,
            hive.name,
            self.method_name,
            REGISTRY_EXTENSION,
        )
        staged = str(PureWindowsPath(self.remote_temp_directory) / local_path.name)

        export = self.run_job(
            f"registry export {hive.name}",
            hive.render(output=staged, key=hive.name),
            elevated=hive.requires_elevation(self.method_name),
            capture=False,
            audited=False,
        )
        if not export.succeeded:
            return self.record(
                JobResult(hive.name, self.method_name, "failed", local_path, export.errors)
            )

        try:
            self.remote_copier.copy_from_remote(staged, local_path)
        except CommandError as exc:
            self.logger.error(
                "%s: could not retrieve hive %s from %s: %s",
                self.method_name,
                hive.name,
                self.computer.address,
                exc,
            )
            return self.record(
                JobResult(hive.name, self.method_name, "failed", local_path, [str(exc)])
            )

        self._cleanup(staged)
        self.logger.info(
            "%s: hive %s stored in %s (sha256 %s)",
            self.method_name,
            hive.name,
            local_path,
            compute_hash(local_path),
        )
        return self.record(JobResult(hive.name, self.method_name, "success", local_path))

    def _cleanup(self, staged: str) -> None:
        try:
            self.remote_copier.delete_remote_file(staged)
        except CommandError as exc:
            self.logger.warning("Could not delete staged export %s: %s", staged, exc)

    @classmethod
    def psexec(
        cls,
        computer: TargetIdentity,
        local_store_directory: Path,
        config: Optional[AcquisitionConfig] = None,
        catalog: Optional[Catalog] = None,
        audit: Optional[AuditLogger] = None,
    ) -> "RegistryAcquirer":
        return cls._build(
            factory.psexec(config),
            factory.xcopy_remote(computer, config),
            computer,
            local_store_directory,
            config,
            catalog,
            audit,
        )

    @classmethod
    def psremote(
        cls,
        computer: TargetIdentity,
        local_store_directory: Path,
        config: Optional[AcquisitionConfig] = None,
        catalog: Optional[Catalog] = None,
        audit: Optional[AuditLogger] = None,
    ) -> "RegistryAcquirer":
        return cls._build(
            factory.psremote(config),
            factory.pscopy_remote(computer, config),
            computer,
            local_store_directory,
            config,
            catalog,
            audit,
        )

    @classmethod
    def rdp(
        cls,
        computer: TargetIdentity,
        local_store_directory: Path,
        nla: bool = False,
        config: Optional[AcquisitionConfig] = None,
        catalog: Optional[Catalog] = None,
        audit: Optional[AuditLogger] = None,
    ) -> "RegistryAcquirer":
        return cls._build(
            factory.rdp(config, nla),
            factory.rdp_copy(computer, config, nla),
            computer,
            local_store_directory,
            config,
            catalog,
            audit,
        )

    @classmethod
    def _build(cls, connector, remote_copier, computer, local_store_directory, config, catalog, audit):
        config = config or AcquisitionConfig()
        catalog = catalog or load_catalog(config.catalog_path)
        return cls(
            connector,
            remote_copier,
            computer,
            local_store_directory,
            catalog.registry,
            remote_temp_directory=config.remote_temp_directory,
            audit=audit,
        )


__all__ = ["RegistryAcquirer"]
