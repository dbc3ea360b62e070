import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

import pytest

# Ensure the project root is on sys.path for package imports during tests.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from remote_forensics.core.target import TargetIdentity  # noqa: E402
from remote_forensics.utils import cmd as cmd_utils  # noqa: E402


@dataclass
class RecordedRun:
    """One launcher invocation captured instead of being executed."""

    argv: List[str]
    output_path: Optional[Path] = None
    timeout: Optional[float] = None
    priming: Optional[List[str]] = None

    @property
    def program(self) -> str:
        return self.argv[0]


@dataclass
class ProcessRecorder:
    """Stands in for the process runner; ``handler`` decides the exit code."""

    calls: List[RecordedRun] = field(default_factory=list)
    handler: Optional[Callable[[RecordedRun], int]] = None

    def _finish(self, run: RecordedRun) -> int:
        self.calls.append(run)
        if self.handler is None:
            return 0
        return self.handler(run)

    def single(self, program, args=(), *, output_path=None, timeout=None) -> int:
        return self._finish(
            RecordedRun([str(program), *(str(arg) for arg in args)], output_path, timeout)
        )

    def piped(
        self,
        first_program,
        first_args,
        second_program,
        second_args,
        *,
        output_path=None,
        timeout=None,
    ) -> int:
        return self._finish(
            RecordedRun(
                [str(second_program), *(str(arg) for arg in second_args)],
                output_path,
                timeout,
                priming=[str(first_program), *(str(arg) for arg in first_args)],
            )
        )

    @property
    def programs(self) -> List[str]:
        return [run.program for run in self.calls]


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("REMOTE_FORENSICS_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("remote_forensics")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def processes(monkeypatch: pytest.MonkeyPatch) -> ProcessRecorder:
    recorder = ProcessRecorder()
    monkeypatch.setattr(cmd_utils, "run_process_blocking", recorder.single)
    monkeypatch.setattr(cmd_utils, "run_piped_processes_blocking", recorder.piped)
    return recorder


@pytest.fixture
def target() -> TargetIdentity:
    return TargetIdentity(address="10.0.0.5", username="admin", password="p@ss")


@pytest.fixture
def store(tmp_path: Path) -> Path:
    directory = tmp_path / "evidence"
    directory.mkdir()
    return directory
