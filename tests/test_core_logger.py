from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from remote_forensics.core import logger as logger_module
from remote_forensics.core.time_utils import utc_isoformat, utc_slug


def test_setup_logging_writes_run_log(tmp_path: Path) -> None:
    root = logger_module.setup_logging(tmp_path, level="WARNING", log_to_console=False)
    child = logger_module.get_module_logger("acquisition.evidenceacquirer")

    child.debug("debug detail")
    for handler in root.handlers:
        handler.flush()

    (log_file,) = tmp_path.glob("remote_forensics_*.log")
    content = log_file.read_text()
    assert "debug detail" in content
    assert child.name == "remote_forensics.acquisition.evidenceacquirer"


def test_setup_logging_console_level(tmp_path: Path) -> None:
    root = logger_module.setup_logging(None, level="ERROR")

    (console,) = root.handlers
    assert console.level == logging.ERROR


def test_audit_logger_records_attempts(tmp_path: Path) -> None:
    audit_path = tmp_path / "audit.log"
    audit = logger_module.AuditLogger(audit_path)

    audit.log_attempt("SSH", "process list", "10.0.0.5", True, tmp_path / "r.txt")
    audit.log_attempt("PSEXEC", "HKLM", "10.0.0.5", False)
    audit.close()

    first, second = audit_path.read_text().splitlines()
    assert "AUDIT - ACQUISITION: SSH process list" in first
    details = json.loads(first.split("| Details: ", 1)[1])
    assert details["success"] is True
    assert details["report_path"] == str(tmp_path / "r.txt")
    assert '"report_path": null' in second


def test_time_helpers() -> None:
    assert re.fullmatch(r"\d{8}_\d{6}", utc_slug())
    assert utc_isoformat().endswith("Z")
