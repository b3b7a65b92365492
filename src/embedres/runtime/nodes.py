from __future__ import annotations

"""
Embedded Tree Nodes.

Defines the canonical in-memory tree shared by the packer and the virtual
filesystem. A node is created once and is immutable afterwards, except for
a single lazy transition from 'unprepared' to 'prepared':

- FileNode: decodes its payload and caches the bytes (or the decode error).
- DirectoryNode: sorts its children by name and indexes them for lookup.

The transition is guarded per node by a lock with a double-checked flag,
so concurrent first access runs the work once and no caller ever observes
a half-prepared node. Preparing one node never blocks its siblings.
"""

import io
import stat
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar, Dict, Iterable, List, Optional, Set

from embedres.runtime.codec import decode
from embedres.runtime.errors import (
    DecodeError,
    ListingUnavailableError,
    NameCollisionError,
    NotDirectoryError,
    NotFoundError,
)

READ_ONLY_MODE = 0o444
SEPARATOR = "/"

# -----------------------------------------------------------------------------
# METADATA
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class NodeInfo:
    """
    Stat-like snapshot of a node.

    Attributes:
        name: Base name ("" for the root).
        path: Absolute embedded path ("/" for the root).
        size: Original byte length (0 for directories).
        is_dir: Directory flag.
        mod_time: Modification time in whole seconds since the epoch.
        mode: Permission bits, always read-only.
    """
    name: str
    path: str
    size: int
    is_dir: bool
    mod_time: int
    mode: int = READ_ONLY_MODE

    @property
    def modified(self) -> datetime:
        """Modification time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.mod_time, tz=timezone.utc)

    @property
    def st_mode(self) -> int:
        """Permission bits combined with the file type bits."""
        kind = stat.S_IFDIR if self.is_dir else stat.S_IFREG
        return kind | self.mode

# -----------------------------------------------------------------------------
# BASE NODE
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class Node:
    """
    Common part of every tree element.

    Attributes:
        name: Base name, unique among siblings.
        path: Absolute embedded path, fixed at pack time.
        mod_time: Modification time in seconds since the epoch.
    """
    name: str
    path: str = SEPARATOR
    mod_time: int = 0

    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _prepared: bool = field(default=False, init=False, repr=False)

    is_dir: ClassVar[bool] = False

    @property
    def prepared(self) -> bool:
        return self._prepared

    def prepare(self) -> None:
        """
        Run the one-shot preparation for this node.

        Safe to call any number of times from any number of threads.
        """
        if self._prepared:
            return
        with self._lock:
            if not self._prepared:
                self._prepare()
                self._prepared = True

    def _prepare(self) -> None:
        raise NotImplementedError

    def info(self) -> NodeInfo:
        """Return the metadata of this node, preparing it first."""
        raise NotImplementedError

    def lookup(self, path: str) -> Node:
        """
        Resolve a '/'-separated path relative to this node.

        Separators are trimmed at every level, so leading, trailing and
        repeated separators are ignored; an empty path resolves to the
        node itself.

        Raises:
            NotFoundError: A segment matches no child.
            NotDirectoryError: A segment would descend through a file.
        """
        return self._lookup(path.strip(SEPARATOR), path)

    def _lookup(self, rest: str, full_path: str) -> Node:
        if not rest:
            self.prepare()
            return self
        raise NotDirectoryError(f"Not a directory: {self.path}", path=self.path)

# -----------------------------------------------------------------------------
# FILE NODE
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class FileNode(Node):
    """
    Leaf node holding an encoded payload and a lazily decoded cache.

    Attributes:
        size: Original byte length; 0 means an empty file with no payload.
        payload: Compressed, base64-encoded (possibly wrapped) content.
    """
    size: int = 0
    payload: str = field(default="", repr=False)

    _data: Optional[bytes] = field(default=None, init=False, repr=False)
    _error: Optional[DecodeError] = field(default=None, init=False, repr=False)

    def _prepare(self) -> None:
        if self.size <= 0:
            self._data = b""
            return

        try:
            data = decode(self.payload)
        except DecodeError as e:
            error = DecodeError(f"Cannot decode '{self.path}': {e}", path=self.path)
            error.__cause__ = e
            self._error = error
            return

        if len(data) != self.size:
            self._error = DecodeError(
                f"Cannot decode '{self.path}': expected {self.size} bytes, got {len(data)}",
                path=self.path,
            )
            return

        self._data = data

    @property
    def error(self) -> Optional[DecodeError]:
        """The cached decode error, or None if the payload decoded cleanly."""
        self.prepare()
        return self._error

    def read_bytes(self) -> bytes:
        """
        Return the decoded content.

        Raises:
            DecodeError: The same cached error on every call if the payload
                is corrupt.
        """
        self.prepare()
        if self._error is not None:
            raise self._error.with_traceback(None)
        return self._data  # type: ignore[return-value]

    def cursor(self) -> Optional[io.BytesIO]:
        """Seekable cursor over the content, or None for an empty file."""
        data = self.read_bytes()
        if not data:
            return None
        return io.BytesIO(data)

    def info(self) -> NodeInfo:
        self.read_bytes()
        return NodeInfo(
            name=self.name,
            path=self.path,
            size=self.size,
            is_dir=False,
            mod_time=self.mod_time,
        )

# -----------------------------------------------------------------------------
# DIRECTORY NODE
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class DirectoryNode(Node):
    """
    Inner node owning its children.

    `children` is None when the directory was embedded without listing
    metadata: it still stats as a directory but cannot be listed or
    descended.
    """
    children: Optional[List[Node]] = field(default_factory=list, repr=False)

    _names: Set[str] = field(default_factory=set, init=False, repr=False)
    _index: Dict[str, int] = field(default_factory=dict, init=False, repr=False)

    is_dir: ClassVar[bool] = True

    def __post_init__(self) -> None:
        if self.children is None:
            return
        for child in self.children:
            self._claim(child.name)

    @property
    def has_listing(self) -> bool:
        return self.children is not None

    def add(self, child: Node) -> Node:
        """
        Attach a child while the tree is being built.

        Raises:
            NameCollisionError: A sibling with the same name exists.
            RuntimeError: The directory was already prepared.
        """
        if self._prepared:
            raise RuntimeError(f"Directory '{self.path}' is already prepared")
        if self.children is None:
            self.children = []
        self._claim(child.name)
        self.children.append(child)
        return child

    def extend(self, children: Iterable[Node]) -> None:
        for child in children:
            self.add(child)

    def _claim(self, name: str) -> None:
        if name in self._names:
            raise NameCollisionError(
                f"Duplicate entry '{name}' in directory '{self.path}'",
                path=child_path(self.path, name),
            )
        self._names.add(name)

    def _prepare(self) -> None:
        if self.children is None:
            return
        ordered = sorted(self.children, key=lambda n: n.name)
        self._index = {child.name: i for i, child in enumerate(ordered)}
        self.children = ordered

    def entries(self) -> List[Node]:
        """
        Return the children in their fixed name order.

        Raises:
            ListingUnavailableError: No listing metadata was embedded.
        """
        self.prepare()
        if self.children is None:
            raise ListingUnavailableError(
                f"Directory '{self.path}' has no listing information",
                path=self.path,
            )
        return list(self.children)

    def child(self, name: str) -> Node:
        """
        Return the direct child called `name`.

        Raises:
            NotFoundError: No such child, or no listing metadata.
        """
        self.prepare()
        index = self._index.get(name) if self.children is not None else None
        if index is None:
            path = child_path(self.path, name)
            raise NotFoundError(f"Not found: {path}", path=path)
        return self.children[index]  # type: ignore[index]

    def _lookup(self, rest: str, full_path: str) -> Node:
        if not rest:
            self.prepare()
            return self

        head, _, tail = rest.partition(SEPARATOR)
        self.prepare()
        index = self._index.get(head) if self.children is not None else None
        if index is None:
            raise NotFoundError(f"Not found: {full_path}", path=full_path)
        return self.children[index]._lookup(tail.strip(SEPARATOR), full_path)  # type: ignore[index]

    def info(self) -> NodeInfo:
        self.prepare()
        return NodeInfo(
            name=self.name,
            path=self.path,
            size=0,
            is_dir=True,
            mod_time=self.mod_time,
        )

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def child_path(parent: str, name: str) -> str:
    """Join an embedded directory path and a child name."""
    if parent.endswith(SEPARATOR):
        return parent + name
    return parent + SEPARATOR + name
