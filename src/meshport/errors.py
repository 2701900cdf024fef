"""
Exceptions raised by the meshport codecs.

Three failure kinds propagate to callers as typed errors instead of a
partial mesh:

- UnsupportedFormatError: unknown extension, binary FBX, binary PLY
- MalformedContainerError: bad top-level signature or truncated container
- EmptyResultError: an FBX scrape that found no vertices

Local anomalies inside a well-formed file (bad tokens, out-of-range face
indices, unknown chunks) are not errors; the codecs skip them.
"""

from typing import Optional


class MeshFormatError(ValueError):
    """Base exception for mesh file errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.path:
            return f"{self.path}: {message}"
        return message


class UnsupportedFormatError(MeshFormatError):
    """The file is of a format or variant meshport does not read."""
    pass


class MalformedContainerError(MeshFormatError):
    """The file's container structure is missing or inconsistent."""
    pass


class EmptyResultError(MeshFormatError):
    """Parsing finished without producing any geometry."""
    pass


__all__ = [
    "MeshFormatError",
    "UnsupportedFormatError",
    "MalformedContainerError",
    "EmptyResultError",
]
