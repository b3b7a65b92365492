from __future__ import annotations

"""
Embedded filesystem runtime.

The only package a generated (dependent) resource module imports. It has
no dependencies outside the standard library and never logs.
"""

from .codec import DEFAULT_CHUNK_WIDTH, decode, encode
from .errors import (
    DecodeError,
    EndOfListingError,
    IsDirectoryError,
    ListingUnavailableError,
    NameCollisionError,
    NotDirectoryError,
    NotFoundError,
    VFSError,
)
from .fs import EmbeddedFS, Handle
from .layout import FlatLayout, flatten, from_record, to_record, unflatten
from .nodes import READ_ONLY_MODE, DirectoryNode, FileNode, Node, NodeInfo

__all__ = [
    # Filesystem
    "EmbeddedFS",
    "Handle",
    # Tree
    "Node",
    "DirectoryNode",
    "FileNode",
    "NodeInfo",
    "READ_ONLY_MODE",
    # Layouts
    "FlatLayout",
    "flatten",
    "unflatten",
    "to_record",
    "from_record",
    # Codec
    "encode",
    "decode",
    "DEFAULT_CHUNK_WIDTH",
    # Errors
    "VFSError",
    "NotFoundError",
    "NotDirectoryError",
    "IsDirectoryError",
    "ListingUnavailableError",
    "EndOfListingError",
    "DecodeError",
    "NameCollisionError",
]
