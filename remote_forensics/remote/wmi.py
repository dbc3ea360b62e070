"""Remote execution through WMI ``Win32_Process.Create``.

WMI starts the process but returns nothing it prints, so the command
redirects into a staged file on the target which is pulled back through
the administrative share once the command had time to finish.
"""

from __future__ import annotations

import time
from pathlib import Path, PureWindowsPath
from typing import Optional, Sequence

from ..core.errors import TransferError
from ..core.target import Command, TargetIdentity
from .base import Connector, RemoteCopier


class Wmi(Connector):
    def __init__(
        self,
        remote_copier: RemoteCopier,
        program: str = "wmic",
        remote_temp_directory: str = "C:\\Users\\Public",
        output_wait: float = 10,
    ) -> None:
        super().__init__()
        self.remote_copier = remote_copier
        self.program = program
        self.remote_temp_directory = remote_temp_directory
        self.output_wait = output_wait

    def connect_method_name(self) -> str:
        return "WMI"

    def prepare_command(
        self,
        remote_computer: TargetIdentity,
        command: Sequence[str],
        output_file_path: Optional[str],
        elevated: bool,
    ) -> list[str]:
        prepared = [
            self.program,
            f"/node:{remote_computer.address}",
            f"/user:{remote_computer.domain_username}",
        ]
        if remote_computer.password is not None:
            prepared.append(f"/password:{remote_computer.password}")
        remote_command = f"cmd.exe /c {' '.join(command)}"
        if output_file_path:
            remote_command += f" > {output_file_path}"
        prepared.extend(["process", "call", "create", remote_command])
        return prepared

    def connect_and_run_command(self, command: Command) -> Optional[Path]:
        report_path = self.prepare_report(command)
        staged = (
            str(PureWindowsPath(self.remote_temp_directory) / report_path.name)
            if report_path
            else None
        )

        prepared = self.prepare_command(
            command.target, list(command.args), staged, command.elevated
        )
        self.run_prepared(prepared, timeout=command.timeout)

        if staged is None:
            return None

        if self.output_wait > 0:
            time.sleep(self.output_wait)
        try:
            self.remote_copier.copy_from_remote(staged, report_path)
        except TransferError as exc:
            self.logger.warning("Could not retrieve WMI output %s: %s", staged, exc)
            return report_path
        self.remote_copier.delete_remote_file(staged)
        return report_path


__all__ = ["Wmi"]
