#!/usr/bin/env python3
"""Shared pipeline plumbing for the acquisition modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ...core.errors import CommandError
from ...core.logger import AuditLogger, get_module_logger
from ...core.target import Command, TargetIdentity
from ...remote.base import Connector


@dataclass
class JobResult:
    """Outcome of one job run through one access method"""

    job: str
    method: str
    status: str  # success, failed
    report_path: Optional[Path] = None
    errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "job": self.job,
            "method": self.method,
            "status": self.status,
            "report_path": str(self.report_path) if self.report_path else None,
            "errors": list(self.errors),
        }


class AcquisitionPipeline:
    """
    Base class for all acquisition pipelines

    A pipeline owns one connector, the target, the local evidence
    directory and an ordered job list. Jobs are run in order and one
    failing job never stops the next one.
    """

    def __init__(
        self,
        connector: Connector,
        computer: TargetIdentity,
        local_store_directory: Path,
        audit: Optional[AuditLogger] = None,
    ):
        self.connector = connector
        self.computer = computer
        self.local_store_directory = Path(local_store_directory)
        self.audit = audit
        self.logger = get_module_logger(
            f"acquisition.{self.__class__.__name__.lower()}"
        )

    @property
    def method_name(self) -> str:
        return self.connector.connect_method_name()

    def run_job(
        self,
        name: str,
        args: Sequence[str],
        *,
        elevated: bool = False,
        capture: bool = True,
        timeout: Optional[float] = None,
        audited: bool = True,
    ) -> JobResult:
        """Run one command through the connector and record the outcome.

        Launch and connection failures are logged and reported as failed
        results. Local I/O errors (report file creation) propagate.
        Steps of a larger job pass ``audited=False`` and record the job
        themselves.
        """

        command = Command(
            target=self.computer,
            args=list(args),
            store_directory=self.local_store_directory if capture else None,
            report_filename_prefix=name,
            elevated=elevated,
            timeout=timeout,
        )
        try:
            report_path = self.connector.connect_and_run_command(command)
        except CommandError as exc:
            self.logger.error(
                "%s: '%s' on %s failed: %s",
                self.method_name,
                name,
                self.computer.address,
                exc,
            )
            result = JobResult(name, self.method_name, "failed", errors=[str(exc)])
            return self.record(result) if audited else result

        self.logger.info(
            "%s: '%s' on %s finished%s",
            self.method_name,
            name,
            self.computer.address,
            f" -> {report_path}" if report_path else "",
        )
        result = JobResult(name, self.method_name, "success", report_path)
        return self.record(result) if audited else result

    def record(self, result: JobResult) -> JobResult:
        if self.audit is not None:
            self.audit.log_attempt(
                result.method,
                result.job,
                self.computer.address,
                result.succeeded,
                result.report_path,
            )
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.method_name}, {self.computer.address})"


__all__ = ["AcquisitionPipeline", "JobResult"]
