"""Access methods: connectors, copiers and remote copiers."""

from .base import Connector, Copier, RemoteCopier
from .local import Local
from .powershell import PsCopy, PsRemote
from .psexec import PsExec
from .rdp import Rdp, RdpCopy
from .ssh import Scp, Ssh
from .windows import WindowsRemoteCopier, XCopy
from .wmi import Wmi

__all__ = [
    "Connector",
    "Copier",
    "Local",
    "PsCopy",
    "PsExec",
    "PsRemote",
    "Rdp",
    "RdpCopy",
    "RemoteCopier",
    "Scp",
    "Ssh",
    "Wmi",
    "WindowsRemoteCopier",
    "XCopy",
]
