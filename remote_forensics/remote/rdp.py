"""Desktop-protocol automation through SharpRDP.

SharpRDP logs on interactively and types the command into a Run dialog.
Local drives are redirected into the session, so output and copies reach
the analyst machine through ``\\\\tsclient\\<drive>`` paths.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from ..core.target import TargetIdentity
from ..utils import cmd as cmd_utils
from ..utils.paths import to_tsclient_path
from .base import Connector, Copier, RemoteCopier


def sharp_rdp_command(
    program: str,
    remote_computer: TargetIdentity,
    remote_command: str,
    *,
    nla: bool = False,
    elevated: bool = False,
) -> list[str]:
    """Return the SharpRDP argument vector running ``remote_command``."""

    prepared = [
        program,
        f"computername={remote_computer.address}",
        f"username={remote_computer.domain_username}",
    ]
    if remote_computer.password is not None:
        prepared.append(f"password={remote_computer.password}")
    if nla:
        prepared.append("nla=true")
    if elevated:
        prepared.append("elevated=taskmgr")
    prepared.extend(["connectdrive=true", "exec=cmd", f"command={remote_command}"])
    return prepared


class Rdp(Connector):
    def __init__(self, nla: bool = False, program: str = "SharpRDP.exe") -> None:
        super().__init__()
        self.nla = nla
        self.program = program

    def connect_method_name(self) -> str:
        return "RDP"

    def prepare_command(
        self,
        remote_computer: TargetIdentity,
        command: Sequence[str],
        output_file_path: Optional[str],
        elevated: bool,
    ) -> list[str]:
        remote_command = " ".join(command)
        if output_file_path:
            remote_command += f" > {to_tsclient_path(output_file_path)}"
        return sharp_rdp_command(
            self.program,
            remote_computer,
            remote_command,
            nla=self.nla,
            elevated=elevated,
        )


class RdpCopy(Copier, RemoteCopier):
    """Copies by running ``copy`` inside the RDP session.

    Paths on the target stay native; local paths become ``\\\\tsclient`` paths.
    """

    def __init__(self, computer: TargetIdentity, nla: bool = False, program: str = "SharpRDP.exe") -> None:
        self._computer = computer
        self.nla = nla
        self.program = program

    def copy_file(self, source: Path | str, target: Path | str) -> None:
        prepared = sharp_rdp_command(
            self.program,
            self._computer,
            f'copy /y "{source}" "{target}"',
            nla=self.nla,
        )
        returncode = cmd_utils.run_process_blocking(prepared[0], prepared[1:])
        self._check_transfer(returncode, source, target)

    def delete_file(self, target: Path | str) -> None:
        prepared = sharp_rdp_command(
            self.program,
            self._computer,
            f'del /f /q "{target}"',
            nla=self.nla,
        )
        cmd_utils.run_process_blocking(prepared[0], prepared[1:])

    def method_name(self) -> str:
        return "RDP"

    @property
    def computer(self) -> TargetIdentity:
        return self._computer

    @property
    def copier_impl(self) -> Copier:
        return self

    def path_to_remote_form(self, path: Path | str) -> str:
        return to_tsclient_path(path)

    def copy_from_remote(self, source: Path | str, target: Path | str) -> None:
        self.copy_file(source, self.path_to_remote_form(target))

    def copy_to_remote(self, source: Path | str, target: Path | str) -> None:
        self.copy_file(self.path_to_remote_form(source), target)

    def delete_remote_file(self, target: Path | str) -> None:
        self.delete_file(target)


__all__ = ["Rdp", "RdpCopy", "sharp_rdp_command"]
