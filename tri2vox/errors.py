"""Exception types raised by tri2vox."""

from __future__ import annotations

from typing import Optional


class Tri2VoxError(Exception):
    """Base class for every error raised by this package."""


class MalformedInputError(Tri2VoxError, ValueError):
    """A triangle record could not be turned into nine finite floats.

    Attributes
    ----------
    record:
        0-based index of the offending record (line or facet), or ``None``
        when the problem is not tied to one record.
    text:
        The raw record, when available.
    """

    def __init__(self, message: str, record: Optional[int] = None, text: Optional[str] = None) -> None:
        if record is not None:
            message = f"record {record}: {message}"
        super().__init__(message)
        self.record = record
        self.text = text


class ConfigError(Tri2VoxError, ValueError):
    """An option of :class:`tri2vox.config.VoxelizerConfig` is out of range."""


class VoxelizationCancelled(Tri2VoxError):
    """The scan was stopped through its ``cancel`` event."""
