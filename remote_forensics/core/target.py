"""Target identity and command invocation value objects."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Sequence


@dataclass(frozen=True)
class TargetIdentity:
    """A reachable machine and the credentials used to reach it."""

    address: str
    username: str = ""
    password: Optional[str] = None
    domain: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.address or not self.address.strip():
            raise ValueError("Target address must not be empty")

    @property
    def domain_username(self) -> str:
        """Return ``DOMAIN\\user`` when a domain is configured."""

        if self.domain:
            return f"{self.domain}\\{self.username}"
        return self.username

    def with_password(self, password: str) -> "TargetIdentity":
        return replace(self, password=password)

    def __repr__(self) -> str:
        masked = "***" if self.password else None
        return (
            f"TargetIdentity(address={self.address!r}, username={self.username!r}, "
            f"password={masked!r}, domain={self.domain!r})"
        )


LOCALHOST = TargetIdentity(address="127.0.0.1")


@dataclass(frozen=True)
class Command:
    """One unit of remote execution.

    ``store_directory`` and ``report_filename_prefix`` request output capture;
    the connector derives the report path from them.
    """

    target: TargetIdentity
    args: Sequence[str]
    store_directory: Optional[Path] = None
    report_filename_prefix: str = ""
    elevated: bool = False
    timeout: Optional[float] = None
    report_extension: str = "txt"

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(str(arg) for arg in self.args))
        if not self.args:
            raise ValueError("Command arguments must not be empty")
        if self.store_directory is not None:
            store_directory = Path(self.store_directory)
            if not store_directory.is_dir():
                raise FileNotFoundError(
                    f"Capture directory does not exist: {store_directory}"
                )
            object.__setattr__(self, "store_directory", store_directory)

    @property
    def captures_output(self) -> bool:
        return self.store_directory is not None


__all__ = ["Command", "LOCALHOST", "TargetIdentity"]
