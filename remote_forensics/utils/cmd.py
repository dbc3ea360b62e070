"""Utilities for launching remote-access tooling as sub-processes."""

from __future__ import annotations

import logging
import shlex
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterable, Iterator, Optional, Sequence

Command = Sequence[str | Path]

REDIRECT_TOKEN = ">"

logger = logging.getLogger("remote_forensics.cmd")


class CommandError(RuntimeError):
    """Raised when an external command cannot be launched or completed."""


class ProcessTimeout(CommandError):
    """Raised when a command exceeds its explicit timeout."""


def _normalise_command(cmd: Iterable[str | Path]) -> list[str]:
    if isinstance(cmd, str | bytes):
        raise TypeError(
            "Command must be an iterable of path/str components, not a string"
        )

    normalised: list[str] = []
    for part in cmd:
        if isinstance(part, Path):
            normalised.append(str(part))
        elif isinstance(part, str | bytes):
            normalised.append(str(part))
        else:
            raise TypeError(f"Unsupported command argument type: {type(part)!r}")

    if not normalised:
        raise ValueError("Command must contain at least one argument")

    return normalised


def quote_command(command: Sequence[str]) -> str:
    """Return a printable, shell-quoted rendering of ``command``."""

    return " ".join(shlex.quote(arg) for arg in command)


def split_redirection(args: Sequence[str]) -> tuple[list[str], Optional[Path]]:
    """Separate a trailing ``> path`` pair from ``args``.

    Connectors express output capture the way a shell would. The runner
    performs the redirection itself so no shell is ever involved.
    """

    args = list(args)
    if len(args) >= 2 and args[-2] == REDIRECT_TOKEN:
        return args[:-2], Path(args[-1])
    return args, None


@contextmanager
def _output_handle(output_path: Optional[Path]) -> Iterator[Optional[IO[bytes]]]:
    if output_path is None:
        yield None
        return
    with Path(output_path).open("wb") as handle:
        yield handle


def _launch(command: list[str], **kwargs) -> subprocess.Popen:
    try:
        return subprocess.Popen(command, **kwargs)
    except OSError as exc:
        raise CommandError(f"Failed to launch {command[0]}: {exc}") from exc


def _wait(process: subprocess.Popen, command: list[str], timeout: Optional[float]) -> int:
    try:
        return process.wait(timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        process.kill()
        process.wait()
        raise ProcessTimeout(
            f"Command timed out after {timeout}s: {quote_command(command)}"
        ) from exc


def _reap(process: subprocess.Popen) -> None:
    if process.poll() is None:
        process.kill()
    process.wait()


def _report_exit(command: list[str], returncode: int) -> int:
    if returncode != 0:
        logger.warning(
            "Command exited with code %s: %s", returncode, command[0]
        )
    else:
        logger.debug("Command finished: %s", command[0])
    return returncode


def run_process_blocking(
    program: str | Path,
    args: Command = (),
    *,
    output_path: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> int:
    """Run ``program`` with ``args`` and wait for it to exit.

    Standard output is written to ``output_path`` when given, otherwise it is
    inherited from the current process. Returns the exit code.
    """

    if timeout is not None and timeout <= 0:
        raise ValueError("timeout must be greater than zero")

    command = _normalise_command([program, *args])
    logger.debug("Running %s", command[0])

    with _output_handle(output_path) as stdout:
        process = _launch(command, stdout=stdout)
        returncode = _wait(process, command, timeout)

    return _report_exit(command, returncode)


def run_piped_processes_blocking(
    first_program: str | Path,
    first_args: Command,
    second_program: str | Path,
    second_args: Command,
    *,
    output_path: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> int:
    """Pipe the output of the first process into the second and wait.

    The first process only primes the second one with canned input (for
    example a single ``n`` to decline a host-key prompt). The exit code of
    the second process is returned.
    """

    if timeout is not None and timeout <= 0:
        raise ValueError("timeout must be greater than zero")

    priming = _normalise_command([first_program, *first_args])
    command = _normalise_command([second_program, *second_args])
    logger.debug("Running %s primed by %s", command[0], priming[0])

    with _output_handle(output_path) as stdout:
        producer = _launch(priming, stdout=subprocess.PIPE)
        try:
            consumer = _launch(command, stdin=producer.stdout, stdout=stdout)
        except CommandError:
            _reap(producer)
            raise
        finally:
            producer.stdout.close()

        try:
            returncode = _wait(consumer, command, timeout)
        finally:
            _reap(producer)

    return _report_exit(command, returncode)


__all__ = [
    "Command",
    "CommandError",
    "ProcessTimeout",
    "REDIRECT_TOKEN",
    "quote_command",
    "run_piped_processes_blocking",
    "run_process_blocking",
    "split_redirection",
]
