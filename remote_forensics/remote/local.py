"""Direct execution on the analyst's own machine."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from ..core.target import LOCALHOST, Command, TargetIdentity
from ..utils import cmd as cmd_utils
from .base import Connector, Copier, RemoteCopier
from .windows import XCopy


class Local(Connector, Copier, RemoteCopier):
    """Pass-through connector and copier for the local host."""

    def __init__(self, xcopy: Optional[XCopy] = None) -> None:
        super().__init__()
        self.xcopy = xcopy or XCopy()

    def connect_method_name(self) -> str:
        return "LOCAL"

    def prepare_command(
        self,
        remote_computer: TargetIdentity,
        command: Sequence[str],
        output_file_path: Optional[str],
        elevated: bool,
    ) -> list[str]:
        return list(command)

    def connect_and_run_command(self, command: Command) -> Optional[Path]:
        report_path = self.prepare_report(command)
        prepared = self.prepare_command(command.target, command.args, None, command.elevated)
        self.logger.debug("Running local command %s", prepared)
        cmd_utils.run_process_blocking(
            prepared[0],
            prepared[1:],
            output_path=report_path,
            timeout=command.timeout,
        )
        return report_path

    def copy_file(self, source: Path | str, target: Path | str) -> None:
        self.xcopy.copy_file(source, target)

    def delete_file(self, target: Path | str) -> None:
        Path(target).unlink(missing_ok=True)

    def method_name(self) -> str:
        return "XCopy (local)"

    @property
    def computer(self) -> TargetIdentity:
        return LOCALHOST

    @property
    def copier_impl(self) -> Copier:
        return self

    def path_to_remote_form(self, path: Path | str) -> str:
        return str(path)


__all__ = ["Local"]
