"""Utility helpers for remote acquisition."""

from . import cmd, hashing, paths

__all__ = [
    "cmd",
    "hashing",
    "paths",
]
