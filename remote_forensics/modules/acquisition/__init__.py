"""Acquisition pipelines, one class per kind of evidence."""

from .base import AcquisitionPipeline, JobResult
from .commands import CommandRunner
from .evidence import EvidenceAcquirer
from .files import download_files
from .memory import MemoryAcquirer
from .registry import RegistryAcquirer

__all__ = [
    "AcquisitionPipeline",
    "CommandRunner",
    "EvidenceAcquirer",
    "JobResult",
    "MemoryAcquirer",
    "RegistryAcquirer",
    "download_files",
]
