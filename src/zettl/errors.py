"""Exception hierarchy shared by the index and graph builders."""

from __future__ import annotations

from pathlib import Path


class ZettlError(Exception):
    """Base class for every failure raised by :mod:`zettl`."""


class FilesystemError(ZettlError):
    """A directory listing, metadata lookup, read or write failed."""

    def __init__(self, operation: str, path: Path | str, reason: object = None) -> None:
        self.operation = operation
        self.path = Path(path)
        message = f"Failed to {operation} {self.path}"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)


class MissingMetadata(ZettlError):
    """A path component needed to derive a title could not be computed."""


class SerializationError(ZettlError):
    """Front matter, config or graph document could not be encoded/decoded."""


class EditorError(ZettlError):
    """The configured editor could not be launched."""
