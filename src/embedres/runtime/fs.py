from __future__ import annotations

"""
Embedded Virtual Filesystem.

Read-only filesystem facade over a packed node tree. Paths always use
forward slashes and '/' is the root, whatever the host platform.

Usage:
    fs = EmbeddedFS(root)
    with fs.open("/docs/readme.txt") as handle:
        data = handle.read()
    for info in fs.open("/docs").readdir():
        print(info.name, info.size)
"""

import io
from typing import Dict, Iterator, List, Optional, Tuple, Union

from embedres.runtime.errors import (
    EndOfListingError,
    IsDirectoryError,
    NotDirectoryError,
    VFSError,
)
from embedres.runtime.layout import (
    FlatLayout,
    Record,
    flatten,
    from_record,
    iter_nodes,
    to_record,
    unflatten,
)
from embedres.runtime.nodes import DirectoryNode, FileNode, Node, NodeInfo

# -----------------------------------------------------------------------------
# HANDLE
# -----------------------------------------------------------------------------

class Handle:
    """
    Open view on a single node.

    Handles are cheap and belong to one caller: the read position and the
    listing position are per handle, while the decoded bytes are shared
    through the node. `close` releases nothing and may be called freely.
    """

    def __init__(self, node: Node) -> None:
        self._node = node
        self._cursor: Optional[io.BytesIO] = None
        self._listing_offset = 0
        self.closed = False

    def __enter__(self) -> Handle:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Handle {self._node.path!r}>"

    @property
    def node(self) -> Node:
        return self._node

    @property
    def path(self) -> str:
        return self._node.path

    def close(self) -> None:
        self.closed = True

    def stat(self) -> NodeInfo:
        """
        Return the node metadata.

        Raises:
            DecodeError: The file payload is corrupt (cached).
        """
        return self._node.info()

    # -------------------------------------------------------------------------
    # Byte access
    # -------------------------------------------------------------------------

    def _file_cursor(self) -> Optional[io.BytesIO]:
        if not isinstance(self._node, FileNode):
            raise IsDirectoryError(f"Is a directory: {self._node.path}", path=self._node.path)
        if self._cursor is None:
            self._cursor = self._node.cursor()
        return self._cursor

    def read(self, size: int = -1) -> bytes:
        """
        Read up to `size` bytes (all remaining bytes if negative).

        Returns b"" at end of data; an empty file is at end of data
        immediately.
        """
        cursor = self._file_cursor()
        if cursor is None:
            return b""
        return cursor.read(size)

    def readinto(self, buffer: Union[bytearray, memoryview]) -> int:
        """Fill `buffer` from the current position and return the count."""
        cursor = self._file_cursor()
        if cursor is None:
            return 0
        return cursor.readinto(buffer)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """
        Move the read position and return the new absolute offset.

        Empty files have no cursor and always report offset 0.
        """
        cursor = self._file_cursor()
        if cursor is None:
            if whence not in (io.SEEK_SET, io.SEEK_CUR, io.SEEK_END):
                raise ValueError(f"Invalid whence ({whence})")
            return 0
        return cursor.seek(offset, whence)

    def tell(self) -> int:
        cursor = self._file_cursor()
        if cursor is None:
            return 0
        return cursor.tell()

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def readdir(self, count: int = 0) -> List[NodeInfo]:
        """
        Return metadata for the next children of a directory.

        Args:
            count: Maximum number of entries; 0 or less returns every
                remaining entry (an empty list when none remain).

        Returns:
            List[NodeInfo]: Entries in the directory's fixed name order.

        Raises:
            NotDirectoryError: The handle points to a file.
            ListingUnavailableError: No listing metadata was embedded.
            EndOfListingError: `count` > 0 and no entries remain.
        """
        if not isinstance(self._node, DirectoryNode):
            raise NotDirectoryError(f"Not a directory: {self._node.path}", path=self._node.path)

        entries = self._node.entries()
        remaining = entries[self._listing_offset:]

        if count > 0:
            if not remaining:
                raise EndOfListingError(
                    f"No more entries in '{self._node.path}'", path=self._node.path
                )
            remaining = remaining[:count]

        self._listing_offset += len(remaining)
        return [_listing_info(child) for child in remaining]

# -----------------------------------------------------------------------------
# FILESYSTEM
# -----------------------------------------------------------------------------

class EmbeddedFS:
    """
    Read-only filesystem over an embedded tree.

    The filesystem owns the tree for its lifetime and can be shared by any
    number of threads; the only mutation is the per-node lazy preparation.
    """

    def __init__(self, root: DirectoryNode) -> None:
        if not isinstance(root, DirectoryNode):
            raise TypeError(f"Root must be a DirectoryNode, got {type(root).__name__}")
        self._root = root

    @classmethod
    def from_records(cls, record: Record) -> EmbeddedFS:
        """Build from the nested record shape."""
        root = from_record(record)
        if not isinstance(root, DirectoryNode):
            raise TypeError("Root record must describe a directory")
        return cls(root)

    @classmethod
    def from_flat(cls, dirs: List[Record], files: Dict[str, List[Record]]) -> EmbeddedFS:
        """Build from the flat directory-list / file-map shape."""
        return cls(unflatten(dirs, files))

    @property
    def root(self) -> DirectoryNode:
        return self._root

    def __repr__(self) -> str:
        return f"<EmbeddedFS root={self._root.path!r}>"

    # -------------------------------------------------------------------------
    # Core contract
    # -------------------------------------------------------------------------

    def open(self, path: str = "/") -> Handle:
        """
        Resolve `path` and return a handle on the node.

        Raises:
            NotFoundError: A segment matches no child.
            NotDirectoryError: The path descends through a file.
        """
        return Handle(self._root.lookup(path))

    def stat(self, path: str) -> NodeInfo:
        return self._root.lookup(path).info()

    # -------------------------------------------------------------------------
    # Convenience queries
    # -------------------------------------------------------------------------

    def read_bytes(self, path: str) -> bytes:
        node = self._root.lookup(path)
        if not isinstance(node, FileNode):
            raise IsDirectoryError(f"Is a directory: {node.path}", path=node.path)
        return node.read_bytes()

    def read_text(self, path: str, encoding: str = "utf-8", errors: str = "strict") -> str:
        return self.read_bytes(path).decode(encoding, errors=errors)

    def listdir(self, path: str = "/") -> List[str]:
        """Return the child names of a directory in their fixed order."""
        node = self._root.lookup(path)
        if not isinstance(node, DirectoryNode):
            raise NotDirectoryError(f"Not a directory: {node.path}", path=node.path)
        return [child.name for child in node.entries()]

    def exists(self, path: str) -> bool:
        try:
            self._root.lookup(path)
        except VFSError:
            return False
        return True

    def isdir(self, path: str) -> bool:
        try:
            return self._root.lookup(path).is_dir
        except VFSError:
            return False

    def walk(self) -> Iterator[Tuple[str, NodeInfo]]:
        """
        Yield (path, info) for every node in pre-order.

        Raises:
            DecodeError: On the first file whose payload is corrupt.
        """
        for node in iter_nodes(self._root):
            yield node.path, node.info()

    # -------------------------------------------------------------------------
    # Serialization views
    # -------------------------------------------------------------------------

    def to_records(self) -> Record:
        return to_record(self._root)

    def to_flat(self) -> FlatLayout:
        return flatten(self._root)

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _listing_info(node: Node) -> NodeInfo:
    """Metadata for a listing entry; file entries report their declared size undecoded."""
    if isinstance(node, FileNode):
        return NodeInfo(
            name=node.name,
            path=node.path,
            size=node.size,
            is_dir=False,
            mod_time=node.mod_time,
        )
    return node.info()
