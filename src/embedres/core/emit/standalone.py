"""
Self-contained read-only filesystem over embedded data.

This module is copied verbatim into modules generated in the independent
shape, so it depends on the standard library only. The generated module
appends its data tables and calls `_build`.
"""

import base64
import binascii
import collections
import gzip
import io
import threading
import zlib

_SEP = "/"
_MODE = 0o444

Stat = collections.namedtuple("Stat", "name path size is_dir mod_time mode")


class DecodeError(ValueError):
    """Stored payload of a file is corrupt."""

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class ListingUnavailableError(OSError):
    """Directory was embedded without a listing."""


class EndOfListingError(EOFError):
    """Bounded readdir found nothing left."""


class _Node:

    is_dir = False

    def __init__(self, name, path, mod_time):
        self.name = name
        self.path = path
        self.mod_time = mod_time
        self._lock = threading.Lock()
        self._ready = False

    def prepare(self):
        if self._ready:
            return
        with self._lock:
            if not self._ready:
                self._load()
                self._ready = True

    def _load(self):
        raise NotImplementedError

    def _stat(self, size):
        return Stat(self.name, self.path, size, self.is_dir, self.mod_time, _MODE)


class _File(_Node):

    def __init__(self, name, path, mod_time, size, payload):
        super().__init__(name, path, mod_time)
        self.size = size
        self.payload = payload
        self._data = None
        self._error = None

    def _load(self):
        if self.size <= 0:
            self._data = b""
            return
        try:
            raw = base64.b64decode("".join(self.payload.split()), validate=True)
            data = gzip.decompress(raw)
        except (binascii.Error, ValueError, OSError, EOFError, zlib.error) as e:
            self._error = DecodeError(f"Cannot decode {self.path!r}: {e}", self.path)
            return
        if len(data) != self.size:
            self._error = DecodeError(
                f"Cannot decode {self.path!r}: expected {self.size} bytes, got {len(data)}",
                self.path,
            )
            return
        self._data = data

    def read_bytes(self):
        self.prepare()
        if self._error is not None:
            raise self._error.with_traceback(None)
        return self._data

    def stat(self):
        self.read_bytes()
        return self._stat(self.size)

    def entry(self):
        return self._stat(self.size)


class _Dir(_Node):

    is_dir = True

    def __init__(self, name, path, mod_time, listed=True):
        super().__init__(name, path, mod_time)
        self.children = [] if listed else None
        self._names = set()
        self._index = {}

    def add(self, child):
        if self.children is None:
            self.children = []
        if child.name in self._names:
            raise ValueError(f"Duplicate entry {child.name!r} in {self.path!r}")
        self._names.add(child.name)
        self.children.append(child)

    def _load(self):
        if self.children is None:
            return
        self.children.sort(key=lambda n: n.name)
        self._index = {c.name: c for c in self.children}

    def entries(self):
        self.prepare()
        if self.children is None:
            raise ListingUnavailableError(f"Directory {self.path!r} has no listing information")
        return list(self.children)

    def stat(self):
        self.prepare()
        return self._stat(0)

    entry = stat

    def lookup(self, path):
        node = self
        for part in [p for p in path.split(_SEP) if p]:
            if not node.is_dir:
                raise NotADirectoryError(f"Not a directory: {node.path}")
            node.prepare()
            child = node._index.get(part)
            if child is None:
                raise FileNotFoundError(f"Not found: {path}")
            node = child
        node.prepare()
        return node


class Handle:
    """Per-caller view on a node: read position and listing position."""

    def __init__(self, node):
        self.node = node
        self.path = node.path
        self._cursor = None
        self._offset = 0
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        self.closed = True

    def stat(self):
        return self.node.stat()

    def _file_cursor(self):
        if self.node.is_dir:
            raise IsADirectoryError(f"Is a directory: {self.node.path}")
        if self._cursor is None:
            data = self.node.read_bytes()
            if not data:
                return None
            self._cursor = io.BytesIO(data)
        return self._cursor

    def read(self, size=-1):
        cursor = self._file_cursor()
        return cursor.read(size) if cursor is not None else b""

    def seek(self, offset, whence=io.SEEK_SET):
        cursor = self._file_cursor()
        return cursor.seek(offset, whence) if cursor is not None else 0

    def tell(self):
        cursor = self._file_cursor()
        return cursor.tell() if cursor is not None else 0

    def readdir(self, count=0):
        if not self.node.is_dir:
            raise NotADirectoryError(f"Not a directory: {self.node.path}")
        remaining = self.node.entries()[self._offset:]
        if count > 0:
            if not remaining:
                raise EndOfListingError(f"No more entries in {self.node.path!r}")
            remaining = remaining[:count]
        self._offset += len(remaining)
        return [child.entry() for child in remaining]


class FileSystem:
    """Read-only filesystem rooted at '/'."""

    def __init__(self, root):
        self.root = root

    def open(self, path="/"):
        return Handle(self.root.lookup(path))

    def stat(self, path):
        return self.root.lookup(path).stat()

    def read_bytes(self, path):
        node = self.root.lookup(path)
        if node.is_dir:
            raise IsADirectoryError(f"Is a directory: {node.path}")
        return node.read_bytes()

    def read_text(self, path, encoding="utf-8", errors="strict"):
        return self.read_bytes(path).decode(encoding, errors)

    def listdir(self, path="/"):
        node = self.root.lookup(path)
        if not node.is_dir:
            raise NotADirectoryError(f"Not a directory: {node.path}")
        return [child.name for child in node.entries()]

    def exists(self, path):
        try:
            self.root.lookup(path)
        except (FileNotFoundError, NotADirectoryError):
            return False
        return True

    def walk(self):
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node.path, node.stat()
            if node.is_dir and node.children is not None:
                stack.extend(reversed(node.entries()))


def _build(dirs, files):
    by_path = {}
    for record in sorted(dirs, key=lambda r: 0 if r["path"] == _SEP else r["path"].count(_SEP)):
        path = record["path"]
        node = _Dir(record.get("name", ""), path, record.get("mod_time", 0), record.get("listed", True))
        if path != _SEP:
            parent_path = path.rsplit(_SEP, 1)[0] or _SEP
            if parent_path == _SEP:
                by_path.setdefault(_SEP, _Dir("", _SEP, 0))
            parent = by_path.get(parent_path)
            if parent is None:
                raise ListingUnavailableError(f"Directory {path!r} has undeclared parent")
            parent.add(node)
        by_path[path] = node
    root = by_path.setdefault(_SEP, _Dir("", _SEP, 0))
    for dir_path, records in files.items():
        if dir_path not in by_path:
            raise ListingUnavailableError(f"Files listed under undeclared directory {dir_path!r}")
        for r in records:
            by_path[dir_path].add(
                _File(r["name"], r["path"], r.get("mod_time", 0), r.get("size", 0), r.get("payload", ""))
            )
    return FileSystem(root)
