"""Construction of connectors and copiers from the run configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..core.config import AcquisitionConfig
from ..core.target import TargetIdentity
from .local import Local
from .powershell import PsCopy, PsRemote
from .psexec import PsExec
from .rdp import Rdp, RdpCopy
from .ssh import Scp, Ssh
from .windows import WindowsRemoteCopier, XCopy
from .wmi import Wmi


def _config(config: Optional[AcquisitionConfig]) -> AcquisitionConfig:
    return config or AcquisitionConfig()


def local(config: Optional[AcquisitionConfig] = None) -> Local:
    return Local(XCopy(_config(config).tool("xcopy")))


def psexec(config: Optional[AcquisitionConfig] = None) -> PsExec:
    return PsExec(_config(config).tool("psexec"))


def psremote(config: Optional[AcquisitionConfig] = None) -> PsRemote:
    return PsRemote(_config(config).tool("powershell"))


def rdp(config: Optional[AcquisitionConfig] = None, nla: Optional[bool] = None) -> Rdp:
    config = _config(config)
    return Rdp(nla=config.nla if nla is None else nla, program=config.tool("sharprdp"))


def ssh(config: Optional[AcquisitionConfig] = None, key_file: Optional[Path] = None) -> Ssh:
    return Ssh(key_file=key_file, program=_config(config).tool("plink"))


def xcopy_remote(
    computer: TargetIdentity, config: Optional[AcquisitionConfig] = None
) -> WindowsRemoteCopier:
    config = _config(config)
    return WindowsRemoteCopier(computer, XCopy(config.tool("xcopy")), config.tool("net"))


def pscopy_remote(
    computer: TargetIdentity, config: Optional[AcquisitionConfig] = None
) -> WindowsRemoteCopier:
    config = _config(config)
    return WindowsRemoteCopier(computer, PsCopy(config.tool("powershell")), config.tool("net"))


def rdp_copy(
    computer: TargetIdentity,
    config: Optional[AcquisitionConfig] = None,
    nla: Optional[bool] = None,
) -> RdpCopy:
    config = _config(config)
    return RdpCopy(
        computer, nla=config.nla if nla is None else nla, program=config.tool("sharprdp")
    )


def scp(
    computer: TargetIdentity,
    config: Optional[AcquisitionConfig] = None,
    key_file: Optional[Path] = None,
) -> Scp:
    config = _config(config)
    return Scp(
        computer,
        key_file=key_file,
        pscp_program=config.tool("pscp"),
        plink_program=config.tool("plink"),
    )


def wmi(computer: TargetIdentity, config: Optional[AcquisitionConfig] = None) -> Wmi:
    config = _config(config)
    return Wmi(
        xcopy_remote(computer, config),
        program=config.tool("wmic"),
        remote_temp_directory=config.remote_temp_directory,
        output_wait=config.wmi_output_wait,
    )


__all__ = [
    "local",
    "pscopy_remote",
    "psexec",
    "psremote",
    "rdp",
    "rdp_copy",
    "scp",
    "ssh",
    "wmi",
    "xcopy_remote",
]
