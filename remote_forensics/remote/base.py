"""Access-method abstractions.

A :class:`Connector` runs a command on a target, a :class:`Copier` moves a
single file and deletes one, and a :class:`RemoteCopier` pairs a copier
with a target so paths can be expressed the way the transfer tool expects.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Optional, Sequence

from ..core.errors import TransferError
from ..core.target import Command, TargetIdentity
from ..utils import cmd as cmd_utils
from ..utils.paths import canonicalize, create_report_file

# Canned answer that declines first-use prompts (host keys, cache questions).
DECLINE_ANSWER = "n"


def priming_command(answer: str = DECLINE_ANSWER) -> list[str]:
    """Return the process that feeds ``answer`` to an interactive tool."""

    if os.name == "nt":
        return ["cmd", "/c", "echo", answer]
    return ["echo", answer]


class Connector(ABC):
    """Runs commands on a target through one access method."""

    requires_priming: ClassVar[bool] = False

    def __init__(self) -> None:
        self.logger = logging.getLogger(
            f"remote_forensics.remote.{self.connect_method_name().lower()}"
        )

    @abstractmethod
    def connect_method_name(self) -> str:
        """Stable label used in logs and report names."""

    @abstractmethod
    def prepare_command(
        self,
        remote_computer: TargetIdentity,
        command: Sequence[str],
        output_file_path: Optional[str],
        elevated: bool,
    ) -> list[str]:
        """Encode ``command`` as the full local argument vector for this method."""

    def prepare_report(self, command: Command) -> Optional[Path]:
        """Pre-create the report file for ``command`` if it captures output."""

        if not command.captures_output:
            return None
        return create_report_file(
            command.target,
            command.store_directory,
            command.report_filename_prefix,
            self.connect_method_name(),
            command.report_extension,
        )

    def connect_and_run_command(self, command: Command) -> Optional[Path]:
        """Run ``command`` and return the report path, if any.

        Launch failures raise :class:`CommandError`. A non-zero exit code of
        the remote command is only logged; the report file is the signal.
        """

        self.logger.debug(
            "Trying to run command %s on %s", list(command.args), command.target.address
        )
        report_path = self.prepare_report(command)
        output_file_path = canonicalize(report_path) if report_path else None

        prepared = self.prepare_command(
            command.target, list(command.args), output_file_path, command.elevated
        )
        self.run_prepared(prepared, timeout=command.timeout)
        return report_path

    def run_prepared(self, prepared: Sequence[str], *, timeout: Optional[float] = None) -> int:
        """Launch an already encoded argument vector."""

        args, output_path = cmd_utils.split_redirection(prepared)
        if self.requires_priming:
            priming = priming_command()
            return cmd_utils.run_piped_processes_blocking(
                priming[0],
                priming[1:],
                args[0],
                args[1:],
                output_path=output_path,
                timeout=timeout,
            )
        return cmd_utils.run_process_blocking(
            args[0], args[1:], output_path=output_path, timeout=timeout
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class Copier(ABC):
    """Copies and deletes single files using one transfer method."""

    @abstractmethod
    def copy_file(self, source: Path | str, target: Path | str) -> None:
        """Copy ``source`` to ``target``; raise :class:`TransferError` on failure."""

    @abstractmethod
    def delete_file(self, target: Path | str) -> None:
        """Delete ``target``. An already absent file is not an error."""

    @abstractmethod
    def method_name(self) -> str:
        """Label used in logs and report names."""

    def _check_transfer(self, returncode: int, source, target) -> None:
        if returncode != 0:
            raise TransferError(
                f"{self.method_name()} failed to copy {source} to {target} "
                f"(exit code {returncode})"
            )


class RemoteCopier(ABC):
    """A copier bound to a target, aware of the tool's remote path notation."""

    @property
    @abstractmethod
    def computer(self) -> TargetIdentity:
        """The target files are moved to and from."""

    @property
    @abstractmethod
    def copier_impl(self) -> Copier:
        """The copier doing the actual work."""

    @abstractmethod
    def path_to_remote_form(self, path: Path | str) -> str:
        """Express a path on the target the way the copier expects it."""

    def method_name(self) -> str:
        return self.copier_impl.method_name()

    def copy_from_remote(self, source: Path | str, target: Path | str) -> None:
        self.copier_impl.copy_file(self.path_to_remote_form(source), target)

    def copy_to_remote(self, source: Path | str, target: Path | str) -> None:
        self.copier_impl.copy_file(source, self.path_to_remote_form(target))

    def delete_remote_file(self, target: Path | str) -> None:
        self.copier_impl.delete_file(self.path_to_remote_form(target))


__all__ = [
    "Connector",
    "Copier",
    "DECLINE_ANSWER",
    "RemoteCopier",
    "priming_command",
]
