"""Acquisition pipelines of remote-forensics."""

__all__ = ["acquisition"]
