from __future__ import annotations

"""
Virtual Filesystem Error Taxonomy.

Typed failures returned to callers of the embedded filesystem. Each error
also derives from the closest builtin OSError/ValueError family so that
host code written against the regular filesystem keeps working.
"""

from typing import Optional

# -----------------------------------------------------------------------------
# BASE
# -----------------------------------------------------------------------------

class VFSError(Exception):
    """
    Base class for every runtime failure of the embedded filesystem.

    Attributes:
        path: Embedded path the failure refers to (forward slashes).
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path

# -----------------------------------------------------------------------------
# PATH RESOLUTION
# -----------------------------------------------------------------------------

class NotFoundError(VFSError, FileNotFoundError):
    """A path segment does not match any child."""


class NotDirectoryError(VFSError, NotADirectoryError):
    """A directory operation reached a file node."""


class IsDirectoryError(VFSError, IsADirectoryError):
    """A file operation reached a directory node."""


class ListingUnavailableError(VFSError):
    """A directory exists but carries no listing metadata."""


class EndOfListingError(VFSError, EOFError):
    """A bounded readdir found no children left to return."""

# -----------------------------------------------------------------------------
# TREE CONTENT
# -----------------------------------------------------------------------------

class DecodeError(VFSError, ValueError):
    """The stored payload of a file node could not be restored."""


class NameCollisionError(VFSError, ValueError):
    """Two siblings in one directory share a name."""
