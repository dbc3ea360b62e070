"""Custom command runner for analyst supplied command files."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import List, Optional

from ...core.catalog import read_command_file
from ...core.config import AcquisitionConfig
from ...core.logger import AuditLogger
from ...core.target import TargetIdentity
from ...remote import factory
from .base import AcquisitionPipeline, JobResult


class CommandRunner(AcquisitionPipeline):
    """Runs every line of a command file verbatim, one report per line."""

    def run_commands(self, command_file: Path) -> List[JobResult]:
        commands = read_command_file(command_file)
        self.logger.info(
            "Running %d custom command(s) from %s on %s using %s",
            len(commands),
            command_file,
            self.computer.address,
            self.method_name,
        )
        return [
            self.run_job(line, shlex.split(line, posix=False))
            for line in commands
        ]

    @classmethod
    def local(cls, computer, local_store_directory, config=None, audit=None):
        return cls(factory.local(config), computer, local_store_directory, audit)

    @classmethod
    def psexec(cls, computer, local_store_directory, config=None, audit=None):
        return cls(factory.psexec(config), computer, local_store_directory, audit)

    @classmethod
    def wmi(cls, computer, local_store_directory, config=None, audit=None):
        return cls(factory.wmi(computer, config), computer, local_store_directory, audit)

    @classmethod
    def psremote(cls, computer, local_store_directory, config=None, audit=None):
        return cls(factory.psremote(config), computer, local_store_directory, audit)

    @classmethod
    def rdp(
        cls,
        computer: TargetIdentity,
        local_store_directory: Path,
        nla: bool = False,
        config: Optional[AcquisitionConfig] = None,
        audit: Optional[AuditLogger] = None,
    ):
        return cls(factory.rdp(config, nla), computer, local_store_directory, audit)

    @classmethod
    def ssh(
        cls,
        computer: TargetIdentity,
        local_store_directory: Path,
        key_file: Optional[Path] = None,
        config: Optional[AcquisitionConfig] = None,
        audit: Optional[AuditLogger] = None,
    ):
        return cls(factory.ssh(config, key_file), computer, local_store_directory, audit)


__all__ = ["CommandRunner"]
