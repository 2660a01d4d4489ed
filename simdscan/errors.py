"""Errors surfaced to the user by the CLI."""

from __future__ import annotations


class SimdScanError(Exception):
    """Base class for expected, user-facing failures."""


class InputFormatError(SimdScanError):
    """Unsupported container format or architecture."""


class MalformedLayoutError(SimdScanError):
    """The code section does not fit inside the file or the address space."""


class NoSymbolsError(SimdScanError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "No symbols found in the '.text' section, the binary may have been stripped"
        )
