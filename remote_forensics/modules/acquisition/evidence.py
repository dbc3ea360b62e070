"""Evidence collection: run the catalog's command set through one access method."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Sequence

from ...core.catalog import AcquisitionJob, Catalog, load_catalog
from ...core.config import AcquisitionConfig
from ...core.logger import AuditLogger
from ...core.target import TargetIdentity
from ...remote import factory
from ...remote.base import Connector
from .base import AcquisitionPipeline, JobResult


class EvidenceAcquirer(AcquisitionPipeline):
    """Runs every evidence job, one report file per job."""

    def __init__(
        self,
        connector: Connector,
        computer: TargetIdentity,
        local_store_directory: Path,
        jobs: Sequence[AcquisitionJob],
        audit: Optional[AuditLogger] = None,
    ):
        super().__init__(connector, computer, local_store_directory, audit)
        self.jobs = tuple(jobs)

    def run_all(self) -> List[JobResult]:
        self.logger.info(
            "Collecting %d evidence item(s) from %s using %s",
            len(self.jobs),
            self.computer.address,
            self.method_name,
        )
        results = []
        for job in self.jobs:
            results.append(
                self.run_job(
                    job.name,
                    job.command,
                    elevated=job.requires_elevation(self.method_name),
                )
            )
        failed = sum(1 for result in results if not result.succeeded)
        if failed:
            self.logger.warning(
                "%s: %d of %d evidence job(s) failed", self.method_name, failed, len(results)
            )
        return results

    # Factories, one per access method.

    @classmethod
    def local(cls, computer, local_store_directory, config=None, catalog=None, audit=None):
        catalog = catalog or _load(config)
        jobs = catalog.windows if os.name == "nt" else catalog.linux
        return cls(factory.local(config), computer, local_store_directory, jobs, audit)

    @classmethod
    def psexec(cls, computer, local_store_directory, config=None, catalog=None, audit=None):
        return cls(
            factory.psexec(config),
            computer,
            local_store_directory,
            _windows_jobs(catalog, config),
            audit,
        )

    @classmethod
    def wmi(cls, computer, local_store_directory, config=None, catalog=None, audit=None):
        return cls(
            factory.wmi(computer, config),
            computer,
            local_store_directory,
            _windows_jobs(catalog, config),
            audit,
        )

    @classmethod
    def psremote(cls, computer, local_store_directory, config=None, catalog=None, audit=None):
        return cls(
            factory.psremote(config),
            computer,
            local_store_directory,
            _windows_jobs(catalog, config),
            audit,
        )

    @classmethod
    def rdp(
        cls,
        computer,
        local_store_directory,
        nla: bool = False,
        config: Optional[AcquisitionConfig] = None,
        catalog: Optional[Catalog] = None,
        audit: Optional[AuditLogger] = None,
    ):
        return cls(
            factory.rdp(config, nla),
            computer,
            local_store_directory,
            _windows_jobs(catalog, config),
            audit,
        )

    @classmethod
    def ssh(
        cls,
        computer,
        local_store_directory,
        key_file: Optional[Path] = None,
        config: Optional[AcquisitionConfig] = None,
        catalog: Optional[Catalog] = None,
        audit: Optional[AuditLogger] = None,
    ):
        catalog = catalog or _load(config)
        return cls(
            factory.ssh(config, key_file),
            computer,
            local_store_directory,
            catalog.linux,
            audit,
        )


def _load(config: Optional[AcquisitionConfig]) -> Catalog:
    return load_catalog(config.catalog_path if config else None)


def _windows_jobs(
    catalog: Optional[Catalog], config: Optional[AcquisitionConfig]
) -> tuple[AcquisitionJob, ...]:
    return (catalog or _load(config)).windows


__all__ = ["EvidenceAcquirer"]
