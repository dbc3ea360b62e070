"""Remote forensic acquisition over existing remote-administration tools."""

from importlib.metadata import PackageNotFoundError, version

from .core.target import Command, TargetIdentity
from .orchestrator import AcquisitionSummary, MethodSelection, run_acquisition

__all__ = [
    "__version__",
    "AcquisitionSummary",
    "Command",
    "MethodSelection",
    "TargetIdentity",
    "run_acquisition",
]

try:  # pragma: no cover - depends on package metadata
    __version__ = version("remote-forensics")
except PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.1.0-dev"
