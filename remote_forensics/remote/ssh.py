"""Secure shell through PuTTY's ``plink`` and ``pscp``."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from ..core.target import TargetIdentity
from ..utils import cmd as cmd_utils
from ..utils.cmd import REDIRECT_TOKEN
from .base import Connector, Copier, RemoteCopier, priming_command


def _authentication(remote_computer: TargetIdentity, key_file: Optional[Path]) -> list[str]:
    args = ["-l", remote_computer.username]
    if remote_computer.password is not None:
        args.extend(["-pw", remote_computer.password])
    if key_file is not None:
        args.extend(["-i", str(key_file)])
    return args


class Ssh(Connector):
    """Runs commands with ``plink``; a primed ``n`` declines host-key prompts."""

    requires_priming = True

    def __init__(self, key_file: Optional[Path] = None, program: str = "plink.exe") -> None:
        super().__init__()
        self.key_file = Path(key_file) if key_file else None
        self.program = program

    def connect_method_name(self) -> str:
        return "SSH"

    def prepare_command(
        self,
        remote_computer: TargetIdentity,
        command: Sequence[str],
        output_file_path: Optional[str],
        elevated: bool,
    ) -> list[str]:
        prepared = [self.program, "-ssh", remote_computer.address]
        prepared.extend(_authentication(remote_computer, self.key_file))
        prepared.append("-no-antispoof")

        joined = " ".join(command)
        if elevated:
            if remote_computer.password is not None:
                prepared.append(f"echo {remote_computer.password} | sudo -S {joined}")
            else:
                prepared.append(f"sudo -S {joined}")
        else:
            prepared.append(joined)

        if output_file_path:
            prepared.extend([REDIRECT_TOKEN, output_file_path])
        return prepared


class Scp(Copier, RemoteCopier):
    """Copies with ``pscp`` using ``address:path`` notation for the remote side."""

    def __init__(
        self,
        computer: TargetIdentity,
        key_file: Optional[Path] = None,
        pscp_program: str = "pscp.exe",
        plink_program: str = "plink.exe",
    ) -> None:
        self._computer = computer
        self.key_file = Path(key_file) if key_file else None
        self.pscp_program = pscp_program
        self.plink_program = plink_program

    def copy_file(self, source: Path | str, target: Path | str) -> None:
        args = _authentication(self._computer, self.key_file)
        args.extend([str(source), str(target)])
        priming = priming_command()
        returncode = cmd_utils.run_piped_processes_blocking(
            priming[0], priming[1:], self.pscp_program, args
        )
        self._check_transfer(returncode, source, target)

    def delete_file(self, target: Path | str) -> None:
        args = ["-ssh", self._computer.address]
        args.extend(_authentication(self._computer, self.key_file))
        args.extend(["-no-antispoof", "rm", "-f", str(target)])
        priming = priming_command()
        cmd_utils.run_piped_processes_blocking(
            priming[0], priming[1:], self.plink_program, args
        )

    def method_name(self) -> str:
        return "SCP"

    @property
    def computer(self) -> TargetIdentity:
        return self._computer

    @property
    def copier_impl(self) -> Copier:
        return self

    def path_to_remote_form(self, path: Path | str) -> str:
        return f"{self._computer.address}:{path}"

    def delete_remote_file(self, target: Path | str) -> None:
        self.delete_file(target)


__all__ = ["Scp", "Ssh"]
