from __future__ import annotations

import sys
from pathlib import Path

import pytest

from remote_forensics.core.errors import CommandError, TransferError
from remote_forensics.core.target import Command, TargetIdentity
from remote_forensics.remote import Local, PsExec, PsRemote, Rdp, Ssh, Wmi
from remote_forensics.remote.base import RemoteCopier, priming_command


class RecordingRemoteCopier(RemoteCopier):
    def __init__(self, computer: TargetIdentity, fail: bool = False):
        self._computer = computer
        self.fail = fail
        self.copied = []
        self.deleted = []

    @property
    def computer(self) -> TargetIdentity:
        return self._computer

    @property
    def copier_impl(self):
        return self

    def method_name(self) -> str:
        return "Recording"

    def path_to_remote_form(self, path) -> str:
        return str(path)

    def copy_from_remote(self, source, target) -> None:
        if self.fail:
            raise TransferError(f"cannot copy {source}")
        self.copied.append((str(source), Path(target)))
        Path(target).write_text("wmi output")

    def delete_remote_file(self, target) -> None:
        self.deleted.append(str(target))


def test_ssh_encoding_with_password(target: TargetIdentity) -> None:
    prepared = Ssh().prepare_command(target, ["ps", "-ef"], "/cases/out.txt", False)

    assert prepared == [
        "plink.exe",
        "-ssh",
        "10.0.0.5",
        "-l",
        "admin",
        "-pw",
        "p@ss",
        "-no-antispoof",
        "ps -ef",
        ">",
        "/cases/out.txt",
    ]


def test_ssh_elevation(target: TargetIdentity) -> None:
    with_password = Ssh().prepare_command(target, ["lsof", "-n"], None, True)
    without_password = Ssh().prepare_command(
        TargetIdentity("10.0.0.5", "admin"), ["lsof", "-n"], None, True
    )

    assert with_password[-1] == "echo p@ss | sudo -S lsof -n"
    assert without_password[-1] == "sudo -S lsof -n"
    assert "-pw" not in without_password


def test_ssh_key_file(target: TargetIdentity, tmp_path: Path) -> None:
    key = tmp_path / "id_rsa"
    prepared = Ssh(key_file=key).prepare_command(target, ["uname", "-a"], None, False)

    assert prepared[prepared.index("-i") + 1] == str(key)


def test_psexec_encoding(target: TargetIdentity) -> None:
    prepared = PsExec().prepare_command(target, ["netstat", "-anob"], "C:\\ev\\n.txt", True)

    assert prepared == [
        "PsExec64.exe",
        "\\\\10.0.0.5",
        "-u",
        "admin",
        "-p",
        "p@ss",
        "-accepteula",
        "-nobanner",
        "-h",
        "netstat",
        "-anob",
        ">",
        "C:\\ev\\n.txt",
    ]


def test_psexec_without_password_and_with_domain() -> None:
    computer = TargetIdentity("host", "admin", domain="CORP")
    prepared = PsExec().prepare_command(computer, ["hostname"], None, False)

    assert prepared[2:4] == ["-u", "CORP\\admin"]
    assert "-p" not in prepared
    assert "-h" not in prepared


def test_psremote_encoding(target: TargetIdentity) -> None:
    prepared = PsRemote().prepare_command(target, ["ipconfig", "/all"], "C:\\ev\\i.txt", False)

    assert prepared[:4] == ["powershell.exe", "-NoProfile", "-NonInteractive", "-Command"]
    script = prepared[4]
    assert "ConvertTo-SecureString -String 'p@ss'" in script
    assert "Invoke-Command -ComputerName '10.0.0.5' -Credential $cred" in script
    assert script.endswith("-ScriptBlock { ipconfig /all }")
    assert prepared[-2:] == [">", "C:\\ev\\i.txt"]


def test_psremote_prompts_for_missing_password() -> None:
    script = PsRemote().prepare_command(TargetIdentity("host", "o'brien"), ["hostname"], None, False)[4]

    assert "Get-Credential -UserName 'o''brien'" in script
    assert "ConvertTo-SecureString" not in script


def test_rdp_encoding(target: TargetIdentity) -> None:
    prepared = Rdp(nla=True).prepare_command(
        target, ["systeminfo"], "C:\\cases\\10.0.0.5-system-info-RDP.txt", True
    )

    assert prepared == [
        "SharpRDP.exe",
        "computername=10.0.0.5",
        "username=admin",
        "password=p@ss",
        "nla=true",
        "elevated=taskmgr",
        "connectdrive=true",
        "exec=cmd",
        "command=systeminfo > \\\\tsclient\\C\\cases\\10.0.0.5-system-info-RDP.txt",
    ]


def test_wmi_encoding(target: TargetIdentity) -> None:
    wmi = Wmi(RecordingRemoteCopier(target))
    prepared = wmi.prepare_command(target, ["ipconfig", "/all"], "C:\\Users\\Public\\o.txt", False)

    assert prepared == [
        "wmic",
        "/node:10.0.0.5",
        "/user:admin",
        "/password:p@ss",
        "process",
        "call",
        "create",
        "cmd.exe /c ipconfig /all > C:\\Users\\Public\\o.txt",
    ]


def test_local_passes_command_through(target: TargetIdentity) -> None:
    assert Local().prepare_command(target, ["hostname"], "/x", True) == ["hostname"]


@pytest.mark.parametrize(
    "connector, label",
    [
        (Local(), "LOCAL"),
        (PsExec(), "PSEXEC"),
        (PsRemote(), "PSREMOTE"),
        (Rdp(), "RDP"),
        (Ssh(), "SSH"),
    ],
)
def test_method_labels(connector, label) -> None:
    assert connector.connect_method_name() == label


def test_password_absent_from_argv_when_unset() -> None:
    computer = TargetIdentity("10.0.0.5", "admin")
    vectors = [
        PsExec().prepare_command(computer, ["hostname"], None, False),
        Rdp().prepare_command(computer, ["hostname"], None, False),
        Ssh().prepare_command(computer, ["hostname"], None, False),
        Wmi(RecordingRemoteCopier(computer)).prepare_command(computer, ["hostname"], None, False),
    ]

    for vector in vectors:
        assert not any("p@ss" in arg or arg.startswith("password=") for arg in vector)
        assert "-pw" not in vector and "-p" not in vector


def test_connect_and_run_captures_into_report(processes, target, store) -> None:
    report = PsExec().connect_and_run_command(
        Command(target, ["systeminfo"], store, "system info")
    )

    assert report == store / "10.0.0.5-system-info-PSEXEC.txt"
    assert report.exists()
    (run,) = processes.calls
    assert run.program == "PsExec64.exe"
    assert ">" not in run.argv
    assert run.output_path == report.resolve()


def test_ssh_is_primed_to_decline_prompts(processes, target, store) -> None:
    Ssh().connect_and_run_command(Command(target, ["ps", "-ef"], store, "process list"))

    (run,) = processes.calls
    assert run.priming == priming_command("n")
    assert run.argv[-1] == "ps -ef"
    assert run.output_path.name == "10.0.0.5-process-list-SSH.txt"


def test_timeout_is_forwarded(processes, target) -> None:
    PsExec().connect_and_run_command(Command(target, ["winpmem.exe"], timeout=60))

    assert processes.calls[0].timeout == 60


def test_launch_failure_propagates(processes, target, store) -> None:
    def fail(run):
        raise CommandError("Failed to launch PsExec64.exe")

    processes.handler = fail

    with pytest.raises(CommandError):
        PsExec().connect_and_run_command(Command(target, ["hostname"], store, "hostname"))


def test_non_zero_exit_is_not_escalated(processes, target, store) -> None:
    processes.handler = lambda run: 1

    report = PsExec().connect_and_run_command(Command(target, ["hostname"], store, "hostname"))

    assert report is not None and report.exists()


def test_local_runs_for_real(target, store) -> None:
    report = Local().connect_and_run_command(
        Command(target, [sys.executable, "-c", "print('local evidence')"], store, "python")
    )

    assert report.name == "10.0.0.5-python-LOCAL.txt"
    assert report.read_text().strip() == "local evidence"


def test_wmi_pulls_staged_output(processes, target, store) -> None:
    copier = RecordingRemoteCopier(target)
    wmi = Wmi(copier, output_wait=0)

    report = wmi.connect_and_run_command(Command(target, ["ipconfig"], store, "ipconfig"))

    staged = "C:\\Users\\Public\\10.0.0.5-ipconfig-WMI.txt"
    assert processes.calls[0].argv[-1] == f"cmd.exe /c ipconfig > {staged}"
    assert processes.calls[0].output_path is None
    assert copier.copied == [(staged, report)]
    assert copier.deleted == [staged]
    assert report.read_text() == "wmi output"


def test_wmi_keeps_report_when_retrieval_fails(processes, target, store) -> None:
    copier = RecordingRemoteCopier(target, fail=True)
    wmi = Wmi(copier, output_wait=0)

    report = wmi.connect_and_run_command(Command(target, ["ipconfig"], store, "ipconfig"))

    assert report.exists()
    assert copier.deleted == []
