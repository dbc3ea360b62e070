"""PowerShell remoting: ``Invoke-Command`` execution and ``Copy-Item`` transfer."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from ..core.target import TargetIdentity
from ..utils import cmd as cmd_utils
from ..utils.cmd import REDIRECT_TOKEN
from .base import Connector, Copier

POWERSHELL_FLAGS = ["-NoProfile", "-NonInteractive", "-Command"]


def ps_quote(value: str) -> str:
    """Render ``value`` as a single-quoted PowerShell string literal."""

    return "'" + str(value).replace("'", "''") + "'"


def credential_script(remote_computer: TargetIdentity) -> str:
    """Return the statements building ``$cred`` for ``remote_computer``.

    Without a password PowerShell prompts for it on the console.
    """

    user = ps_quote(remote_computer.domain_username)
    if remote_computer.password is None:
        return f"$cred = Get-Credential -UserName {user}"
    password = ps_quote(remote_computer.password)
    return (
        f"$pw = ConvertTo-SecureString -String {password} -AsPlainText -Force; "
        f"$cred = New-Object System.Management.Automation.PSCredential({user}, $pw)"
    )


class PsRemote(Connector):
    """Runs the command in a WinRM session; output is captured locally.

    Remoting sessions of administrators already carry the elevated token, so
    ``elevated`` needs no extra framing.
    """

    def __init__(self, program: str = "powershell.exe") -> None:
        super().__init__()
        self.program = program

    def connect_method_name(self) -> str:
        return "PSREMOTE"

    def prepare_command(
        self,
        remote_computer: TargetIdentity,
        command: Sequence[str],
        output_file_path: Optional[str],
        elevated: bool,
    ) -> list[str]:
        script = (
            f"{credential_script(remote_computer)}; "
            f"Invoke-Command -ComputerName {ps_quote(remote_computer.address)} "
            f"-Credential $cred -ScriptBlock {{ {' '.join(command)} }}"
        )
        prepared = [self.program, *POWERSHELL_FLAGS, script]
        if output_file_path:
            prepared.extend([REDIRECT_TOKEN, output_file_path])
        return prepared


class PsCopy(Copier):
    """Copies with ``Copy-Item`` over UNC paths."""

    def __init__(self, program: str = "powershell.exe") -> None:
        self.program = program

    def copy_file(self, source: Path | str, target: Path | str) -> None:
        script = (
            f"Copy-Item -Path {ps_quote(str(source))} "
            f"-Destination {ps_quote(str(target))} -Force -ErrorAction Stop"
        )
        returncode = cmd_utils.run_process_blocking(
            self.program, [*POWERSHELL_FLAGS, script]
        )
        self._check_transfer(returncode, source, target)

    def delete_file(self, target: Path | str) -> None:
        script = (
            f"Remove-Item -Path {ps_quote(str(target))} -Force "
            f"-ErrorAction SilentlyContinue"
        )
        cmd_utils.run_process_blocking(self.program, [*POWERSHELL_FLAGS, script])

    def method_name(self) -> str:
        return "PsCopy"


__all__ = ["PsCopy", "PsRemote", "credential_script", "ps_quote"]
