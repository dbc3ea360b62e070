from __future__ import annotations

from pathlib import Path

import pytest

from remote_forensics.core.target import Command, TargetIdentity
from remote_forensics.utils import paths


def test_report_path_layout(target: TargetIdentity, store: Path) -> None:
    path = paths.create_report_path(target, store, "process list", "SSH")

    assert path == store / "10.0.0.5-process-list-SSH.txt"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("process list", "process-list"),
        ("net localgroup administrators", "net-localgroup-administrators"),
        ("C:\\Windows\\win", "C-Windows-win"),
        ("fe80::1", "fe80-1"),
        ("XCopy (local)", "XCopy-local"),
        ("///", "command"),
    ],
)
def test_report_label(text: str, expected: str) -> None:
    assert paths.report_label(text) == expected


def test_long_label_is_capped_with_digest() -> None:
    base = "powershell -c Get-ChildItem C:\\Users -Recurse " + "x" * 300
    first = paths.report_label(base + " | Out-String")
    second = paths.report_label(base + " | Format-List")

    assert len(first) <= paths.MAX_LABEL_LENGTH
    assert first.startswith("powershell-c-Get-ChildItem-C-Users-Recurse-")
    assert first != second
    assert paths.report_label(base + " | Out-String") == first


def test_long_command_report_file_is_created(target: TargetIdentity, store: Path) -> None:
    path = paths.create_report_file(target, store, "type " + "C:\\deep\\" * 60, "PSEXEC")

    assert path.exists()
    assert len(path.name) < 255


def test_report_path_extension(target: TargetIdentity, store: Path) -> None:
    path = paths.create_report_path(target, store, "HKLM", "PSEXEC", ".reg")

    assert path.name == "10.0.0.5-HKLM-PSEXEC.reg"


def test_ensure_unique_path_appends_counter(tmp_path: Path) -> None:
    original = tmp_path / "host-job-SSH.txt"
    original.write_text("first")
    (tmp_path / "host-job-SSH_1.txt").write_text("second")

    assert paths.ensure_unique_path(original) == tmp_path / "host-job-SSH_2.txt"


def test_create_report_file_never_overwrites(target: TargetIdentity, store: Path) -> None:
    first = paths.create_report_file(target, store, "system info", "PSEXEC")
    first.write_text("evidence")

    second = paths.create_report_file(target, store, "system info", "PSEXEC")

    assert first.name == "10.0.0.5-system-info-PSEXEC.txt"
    assert second.name == "10.0.0.5-system-info-PSEXEC_1.txt"
    assert second.exists() and second.read_text() == ""
    assert first.read_text() == "evidence"


def test_canonicalize_requires_existing_path(tmp_path: Path) -> None:
    existing = tmp_path / "report.txt"
    existing.touch()

    assert paths.canonicalize(existing) == str(existing.resolve())
    with pytest.raises(FileNotFoundError):
        paths.canonicalize(tmp_path / "missing.txt")


def test_to_tsclient_path() -> None:
    assert paths.to_tsclient_path("C:\\cases\\out.txt") == "\\\\tsclient\\C\\cases\\out.txt"


def test_to_admin_share_path() -> None:
    assert (
        paths.to_admin_share_path("10.0.0.5", "C:\\Windows\\Temp\\x.reg")
        == "\\\\10.0.0.5\\C$\\Windows\\Temp\\x.reg"
    )
    assert (
        paths.to_admin_share_path("host", "D:\\data\\a.txt") == "\\\\host\\D$\\data\\a.txt"
    )


def test_target_identity_validation_and_masking() -> None:
    with pytest.raises(ValueError):
        TargetIdentity(address="  ")

    identity = TargetIdentity("host", "admin", "secret", domain="CORP")

    assert identity.domain_username == "CORP\\admin"
    assert "secret" not in repr(identity)
    assert identity.with_password("other").password == "other"


def test_command_validation(target: TargetIdentity, tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        Command(target=target, args=[])
    with pytest.raises(FileNotFoundError):
        Command(target=target, args=["hostname"], store_directory=tmp_path / "missing")

    command = Command(target=target, args=["ipconfig", "/all"], store_directory=tmp_path)

    assert command.args == ("ipconfig", "/all")
    assert command.captures_output
    assert not Command(target=target, args=["hostname"]).captures_output
