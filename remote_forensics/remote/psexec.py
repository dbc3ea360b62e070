"""Remote execution through Sysinternals PsExec."""

from __future__ import annotations

from typing import Optional, Sequence

from ..core.target import TargetIdentity
from ..utils.cmd import REDIRECT_TOKEN
from .base import Connector


class PsExec(Connector):
    """Runs the command as a remote service; stdout is captured locally."""

    def __init__(self, program: str = "PsExec64.exe") -> None:
        super().__init__()
        self.program = program

    def connect_method_name(self) -> str:
        return "PSEXEC"

    def prepare_command(
        self,
        remote_computer: TargetIdentity,
        command: Sequence[str],
        output_file_path: Optional[str],
        elevated: bool,
    ) -> list[str]:
        prepared = [
            self.program,
            f"\\\\{remote_computer.address}",
            "-u",
            remote_computer.domain_username,
        ]
        if remote_computer.password is not None:
            prepared.extend(["-p", remote_computer.password])
        prepared.extend(["-accepteula", "-nobanner"])
        if elevated:
            prepared.append("-h")
        prepared.extend(command)
        if output_file_path:
            prepared.extend([REDIRECT_TOKEN, output_file_path])
        return prepared


__all__ = ["PsExec"]
