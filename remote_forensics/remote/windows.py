"""Windows-native file transfer over administrative shares."""

from __future__ import annotations

import logging
from pathlib import Path

from ..core.errors import TransferError
from ..core.target import TargetIdentity
from ..utils import cmd as cmd_utils
from ..utils.paths import to_admin_share_path
from .base import Copier, RemoteCopier, priming_command

logger = logging.getLogger("remote_forensics.remote.windows")

# xcopy asks whether an unknown destination is a File or a Directory.
XCOPY_FILE_ANSWER = "f"


class XCopy(Copier):
    """Copies through ``xcopy``; remote paths are UNC administrative shares."""

    def __init__(self, program: str = "xcopy") -> None:
        self.program = program

    def copy_file(self, source: Path | str, target: Path | str) -> None:
        priming = priming_command(XCOPY_FILE_ANSWER)
        returncode = cmd_utils.run_piped_processes_blocking(
            priming[0],
            priming[1:],
            self.program,
            ["/y", "/h", "/c", str(source), str(target)],
        )
        self._check_transfer(returncode, source, target)

    def delete_file(self, target: Path | str) -> None:
        # del reports success for files that are already gone
        cmd_utils.run_process_blocking("cmd", ["/c", "del", "/f", "/q", str(target)])

    def method_name(self) -> str:
        return "XCopy"


class WindowsRemoteCopier(RemoteCopier):
    """Pairs a Windows copier with a target reached through ``\\\\host\\C$``.

    The SMB session is opened once with the target's credentials so that
    copies and deletes share the same authentication context.
    """

    def __init__(self, computer: TargetIdentity, copier: Copier, net_program: str = "net") -> None:
        self._computer = computer
        self._copier = copier
        self.net_program = net_program
        self._authenticated = False

    @property
    def computer(self) -> TargetIdentity:
        return self._computer

    @property
    def copier_impl(self) -> Copier:
        return self._copier

    def path_to_remote_form(self, path: Path | str) -> str:
        return to_admin_share_path(self._computer.address, path)

    def session_command(self) -> list[str]:
        """Return the ``net use`` invocation authenticating the SMB session."""

        command = [self.net_program, "use", f"\\\\{self._computer.address}\\IPC$"]
        if self._computer.password is not None:
            command.append(self._computer.password)
        command.append(f"/user:{self._computer.domain_username}")
        return command

    def authenticate(self) -> None:
        if self._authenticated:
            return
        session = self.session_command()
        logger.debug("Opening SMB session to %s", self._computer.address)
        returncode = cmd_utils.run_process_blocking(session[0], session[1:])
        if returncode != 0:
            raise TransferError(
                f"Could not open SMB session to {self._computer.address} "
                f"(exit code {returncode})"
            )
        self._authenticated = True

    def copy_from_remote(self, source: Path | str, target: Path | str) -> None:
        self.authenticate()
        super().copy_from_remote(source, target)

    def copy_to_remote(self, source: Path | str, target: Path | str) -> None:
        self.authenticate()
        super().copy_to_remote(source, target)

    def delete_remote_file(self, target: Path | str) -> None:
        self.authenticate()
        super().delete_remote_file(target)


__all__ = ["WindowsRemoteCopier", "XCopy"]
