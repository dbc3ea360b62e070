from __future__ import annotations

from pathlib import Path

import pytest

from remote_forensics.core.catalog import (
    AcquisitionJob,
    load_catalog,
    read_command_file,
)
from remote_forensics.core.errors import CatalogError


def test_default_catalog_sections() -> None:
    catalog = load_catalog()

    linux = {job.name: job for job in catalog.linux}
    windows = {job.name: job for job in catalog.windows}

    assert linux["process list"].command == ("ps", "-ef")
    assert windows["system info"].command == ("systeminfo",)
    assert windows["security event log"].command[-3:] == ("/c:5000", "/rd:true", "/f:text")
    assert [hive.name for hive in catalog.registry] == ["HKLM", "HKCU", "HKCR", "HKU", "HKCC"]
    assert catalog.memory is not None and catalog.memory.requires_elevation("psexec")


def test_elevation_per_method() -> None:
    job = load_catalog().windows
    netstat = next(item for item in job if item.name == "network connections")

    assert netstat.requires_elevation("PSEXEC")
    assert netstat.requires_elevation("rdp")
    assert not netstat.requires_elevation("PSREMOTE")


def test_render_fills_placeholders() -> None:
    hive = AcquisitionJob("HKLM", ("reg", "export", "HKLM", "{output}", "/y"), True)

    assert hive.render(output="C:\\Users\\Public\\h.reg") == [
        "reg",
        "export",
        "HKLM",
        "C:\\Users\\Public\\h.reg",
        "/y",
    ]


def test_from_mapping_accepts_string_command() -> None:
    job = AcquisitionJob.from_mapping({"name": "arp", "command": "arp -a", "elevated": ["SSH"]})

    assert job.command == ("arp", "-a")
    assert job.elevated == frozenset({"ssh"})


@pytest.mark.parametrize(
    "entry",
    [
        "just a string",
        {"command": ["hostname"]},
        {"name": "empty", "command": []},
        {"name": "missing"},
    ],
)
def test_from_mapping_rejects_malformed_entries(entry) -> None:
    with pytest.raises(CatalogError):
        AcquisitionJob.from_mapping(entry)


def test_custom_catalog(tmp_path: Path) -> None:
    path = tmp_path / "catalog.yaml"
    path.write_text(
        "evidence:\n"
        "  linux:\n"
        "    - name: uptime\n"
        "      command: [uptime]\n",
        encoding="utf-8",
    )

    catalog = load_catalog(path)

    assert [job.name for job in catalog.linux] == ["uptime"]
    assert catalog.windows == ()
    assert catalog.registry == ()
    assert catalog.memory is None


def test_catalog_errors(tmp_path: Path) -> None:
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "absent.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("registry: HKLM\n", encoding="utf-8")
    with pytest.raises(CatalogError):
        load_catalog(broken)


def test_read_command_file_skips_comments_and_blanks(tmp_path: Path) -> None:
    path = tmp_path / "commands.txt"
    path.write_text("whoami\n\n# comment\n   \nipconfig /all\n", encoding="utf-8")

    assert read_command_file(path) == ["whoami", "ipconfig /all"]


def test_read_command_file_propagates_io_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_command_file(tmp_path / "missing.txt")
