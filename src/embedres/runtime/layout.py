from __future__ import annotations

"""
Tree Layouts.

Two serialization views over the one canonical node tree:

- Nested records: every directory record carries its children list.
- Flat layout: a list of directory records plus a mapping from directory
  path to the file records it contains.

Both views round-trip to logically identical trees. The records are plain
dicts of str/int/bool values so they can be emitted as literals, stored
as JSON, or rebuilt at run time.
"""

import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple

from embedres.runtime.errors import ListingUnavailableError
from embedres.runtime.nodes import SEPARATOR, DirectoryNode, FileNode, Node

Record = Dict[str, Any]

# -----------------------------------------------------------------------------
# NESTED RECORDS
# -----------------------------------------------------------------------------

def to_record(node: Node) -> Record:
    """
    Serialize a node (and its subtree) into a nested record.

    Directory children are emitted in their fixed name order.
    """
    if isinstance(node, FileNode):
        return {
            "name": node.name,
            "path": node.path,
            "is_dir": False,
            "size": node.size,
            "mod_time": node.mod_time,
            "payload": node.payload,
        }

    record: Record = {
        "name": node.name,
        "path": node.path,
        "is_dir": True,
        "mod_time": node.mod_time,
    }
    if isinstance(node, DirectoryNode) and node.has_listing:
        record["children"] = [to_record(child) for child in node.entries()]
    return record


def from_record(record: Record) -> Node:
    """
    Rebuild a node tree from a nested record.

    A directory record without a 'children' key becomes a directory
    without listing metadata.

    Raises:
        NameCollisionError: Two sibling records share a name.
        KeyError: A mandatory field is missing.
    """
    if not record.get("is_dir", False):
        return _file_from_record(record)

    children = record.get("children")
    node = DirectoryNode(
        name=record["name"],
        path=record.get("path", SEPARATOR),
        mod_time=int(record.get("mod_time", 0)),
        children=None if children is None else [],
    )
    if children is not None:
        node.extend(from_record(child) for child in children)
    return node

# -----------------------------------------------------------------------------
# FLAT LAYOUT
# -----------------------------------------------------------------------------

@dataclass
class FlatLayout:
    """
    Directory list plus per-directory file lists.

    Attributes:
        dirs: Directory records in pre-order, root first.
        files: Directory path -> file records directly inside it.
    """
    dirs: List[Record] = field(default_factory=list)
    files: Dict[str, List[Record]] = field(default_factory=dict)


def flatten(root: DirectoryNode) -> FlatLayout:
    """Project a tree onto the flat layout."""
    layout = FlatLayout()
    for directory in _iter_directories(root):
        record: Record = {
            "name": directory.name,
            "path": directory.path,
            "mod_time": directory.mod_time,
        }
        if not directory.has_listing:
            record["listed"] = False
            layout.dirs.append(record)
            continue

        layout.dirs.append(record)
        file_records = [
            _file_record(child) for child in directory.entries()
            if isinstance(child, FileNode)
        ]
        if file_records:
            layout.files[directory.path] = file_records
    return layout


def unflatten(dirs: List[Record], files: Dict[str, List[Record]]) -> DirectoryNode:
    """
    Rebuild the canonical tree from the flat layout.

    Directories are attached to their parents by path; a missing root is
    synthesized.

    Raises:
        ListingUnavailableError: A directory or file refers to a parent
            directory that is not declared.
        NameCollisionError: Two siblings share a name.
    """
    by_path: Dict[str, DirectoryNode] = {}

    for record in sorted(dirs, key=_depth_key):
        path = record["path"]
        listed = record.get("listed", True)
        node = DirectoryNode(
            name=record.get("name", "") if path != SEPARATOR else "",
            path=path,
            mod_time=int(record.get("mod_time", 0)),
            children=[] if listed else None,
        )
        if path == SEPARATOR:
            by_path[path] = node
            continue
        _parent_of(path, by_path).add(node)
        by_path[path] = node

    by_path.setdefault(SEPARATOR, DirectoryNode(name="", path=SEPARATOR))

    for dir_path, records in files.items():
        parent = by_path.get(dir_path)
        if parent is None:
            raise ListingUnavailableError(
                f"Files listed under undeclared directory '{dir_path}'",
                path=dir_path,
            )
        parent.extend(_file_from_record(record) for record in records)

    return by_path[SEPARATOR]

# -----------------------------------------------------------------------------
# TRAVERSAL
# -----------------------------------------------------------------------------

def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every node in pre-order, children in name order."""
    yield root
    if isinstance(root, DirectoryNode) and root.has_listing:
        for child in root.entries():
            yield from iter_nodes(child)


def count_nodes(root: Node) -> Tuple[int, int]:
    """Return (directories, files) below and including `root`."""
    dirs = files = 0
    for node in iter_nodes(root):
        if node.is_dir:
            dirs += 1
        else:
            files += 1
    return dirs, files

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _iter_directories(root: DirectoryNode) -> Iterator[DirectoryNode]:
    for node in iter_nodes(root):
        if isinstance(node, DirectoryNode):
            yield node


def _file_record(node: FileNode) -> Record:
    return {
        "name": node.name,
        "path": node.path,
        "size": node.size,
        "mod_time": node.mod_time,
        "payload": node.payload,
    }


def _file_from_record(record: Record) -> FileNode:
    return FileNode(
        name=record["name"],
        path=record["path"],
        size=int(record.get("size", 0)),
        mod_time=int(record.get("mod_time", 0)),
        payload=record.get("payload", ""),
    )


def _depth_key(record: Record) -> int:
    path = record["path"]
    if path == SEPARATOR:
        return 0
    return path.rstrip(SEPARATOR).count(SEPARATOR)


def _parent_of(path: str, by_path: Dict[str, DirectoryNode]) -> DirectoryNode:
    parent_path = posixpath.dirname(path.rstrip(SEPARATOR)) or SEPARATOR
    if parent_path == SEPARATOR and SEPARATOR not in by_path:
        by_path[SEPARATOR] = DirectoryNode(name="", path=SEPARATOR)
    parent = by_path.get(parent_path)
    if parent is None:
        raise ListingUnavailableError(
            f"Directory '{path}' has undeclared parent '{parent_path}'",
            path=path,
        )
    return parent
