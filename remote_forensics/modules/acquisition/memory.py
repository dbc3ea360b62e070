"""Remote memory imaging."""

from __future__ import annotations

import time
from pathlib import Path, PureWindowsPath
from typing import Optional

from ...core.catalog import AcquisitionJob, Catalog, load_catalog
from ...core.config import AcquisitionConfig
from ...core.errors import CommandError, ProcessTimeout
from ...core.logger import AuditLogger
from ...core.target import Command, TargetIdentity
from ...remote import factory
from ...remote.base import Connector, RemoteCopier
from ...utils.hashing import compute_hash
from ...utils.paths import create_report_file
from .base import AcquisitionPipeline, JobResult

IMAGE_EXTENSION = "raw"

DEFAULT_MEMORY_JOB = AcquisitionJob(
    name="memory", command=("{tool}", "{output}"), elevated=True
)


class MemoryAcquirer(AcquisitionPipeline):
    """Uploads an imager, runs it elevated and pulls the image back.

    The imaging run is the only operation with an explicit timeout. When it
    elapses the acquisition fails, whatever part of the image exists is
    pulled back best-effort and the remote image is left in place.

    Desktop automation only types the command into the session and returns
    at once, so its acquirer sleeps ``completion_wait`` seconds before the
    image is pulled.
    """

    def __init__(
        self,
        connector: Connector,
        remote_copier: RemoteCopier,
        computer: TargetIdentity,
        local_store_directory: Path,
        imager: Path,
        job: AcquisitionJob = DEFAULT_MEMORY_JOB,
        timeout: Optional[float] = None,
        completion_wait: float = 0,
        audit: Optional[AuditLogger] = None,
    ):
        super().__init__(connector, computer, local_store_directory, audit)
        self.remote_copier = remote_copier
        self.imager = Path(imager)
        self.job = job
        self.timeout = timeout
        self.completion_wait = completion_wait

    def image_memory(self, remote_directory: Path | str) -> bool:
        """Image the target's memory using ``remote_directory`` as scratch space.

        Returns True when a complete image was stored locally.
        """

        remote_directory = PureWindowsPath(str(remote_directory))
        remote_imager = str(remote_directory / self.imager.name)
        local_image = create_report_file(
            self.computer,
            self.local_store_directory,
            self.job.name,
            self.method_name,
            IMAGE_EXTENSION,
        )
        remote_image = str(remote_directory / local_image.name)

        self.logger.info(
            "Imaging memory of %s using %s (timeout %s)",
            self.computer.address,
            self.method_name,
            f"{self.timeout:.0f}s" if self.timeout else "none",
        )

        try:
            self.remote_copier.copy_to_remote(self.imager, remote_imager)
        except CommandError as exc:
            return self._failed(f"could not upload imager {self.imager}: {exc}", local_image)

        command = Command(
            target=self.computer,
            args=self.job.render(tool=remote_imager, output=remote_image),
            elevated=self.job.requires_elevation(self.method_name),
            timeout=self.timeout,
        )
        try:
            self.connector.connect_and_run_command(command)
        except ProcessTimeout as exc:
            self._retrieve_partial(remote_image, local_image)
            self._delete(remote_imager)
            return self._failed(f"imaging timed out: {exc}", local_image)
        except CommandError as exc:
            self._delete(remote_imager)
            return self._failed(f"imaging failed: {exc}", local_image)

        if self.completion_wait > 0:
            self.logger.info(
                "%s: waiting %.0fs for the imager to finish on %s",
                self.method_name,
                self.completion_wait,
                self.computer.address,
            )
            time.sleep(self.completion_wait)

        try:
            self.remote_copier.copy_from_remote(remote_image, local_image)
        except CommandError as exc:
            self._delete(remote_imager)
            return self._failed(f"could not retrieve image: {exc}", local_image)

        self._delete(remote_imager)
        self._delete(remote_image)

        if local_image.stat().st_size == 0:
            return self._failed("retrieved image is empty", local_image)

        self.logger.info(
            "%s: memory image stored in %s (sha256 %s)",
            self.method_name,
            local_image,
            compute_hash(local_image),
        )
        self.record(JobResult(self.job.name, self.method_name, "success", local_image))
        return True

    def _retrieve_partial(self, remote_image: str, local_image: Path) -> None:
        try:
            self.remote_copier.copy_from_remote(remote_image, local_image)
        except CommandError as exc:
            self.logger.warning("Partial image %s not retrieved: %s", remote_image, exc)
            return
        self.logger.warning(
            "Partial image kept in %s and on the target at %s", local_image, remote_image
        )

    def _delete(self, remote_path: str) -> None:
        try:
            self.remote_copier.delete_remote_file(remote_path)
        except CommandError as exc:
            self.logger.warning("Could not delete %s on target: %s", remote_path, exc)

    def _failed(self, reason: str, local_image: Path) -> bool:
        self.logger.error(
            "%s: memory acquisition of %s failed: %s",
            self.method_name,
            self.computer.address,
            reason,
        )
        self.record(
            JobResult(self.job.name, self.method_name, "failed", local_image, [reason])
        )
        return False

    @classmethod
    def psexec(
        cls,
        computer: TargetIdentity,
        local_store_directory: Path,
        config: Optional[AcquisitionConfig] = None,
        catalog: Optional[Catalog] = None,
        audit: Optional[AuditLogger] = None,
    ) -> "MemoryAcquirer":
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
    ) -> "MemoryAcquirer":
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
    ) -> "MemoryAcquirer":
        return cls._build(
            factory.rdp(config, nla),
            factory.rdp_copy(computer, config, nla),
            computer,
            local_store_directory,
            config,
            catalog,
            audit,
            wait_for_completion=True,
        )

    @classmethod
    def _build(
        cls,
        connector,
        remote_copier,
        computer,
        local_store_directory,
        config,
        catalog,
        audit,
        wait_for_completion=False,
    ):
        config = config or AcquisitionConfig()
        catalog = catalog or load_catalog(config.catalog_path)
        return cls(
            connector,
            remote_copier,
            computer,
            local_store_directory,
            Path(config.memory_tool),
            job=catalog.memory or DEFAULT_MEMORY_JOB,
            timeout=config.memory_timeout,
            completion_wait=config.memory_timeout if wait_for_completion else 0,
            audit=audit,
        )


__all__ = ["MemoryAcquirer"]
