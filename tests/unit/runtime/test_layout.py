from __future__ import annotations

"""
Unit tests for the nested and flat tree layouts.

Verifies:
1. Both layouts describe the same logical tree.
2. Directories without listing metadata survive serialization.
3. Malformed flat layouts are rejected at load time.
"""

import json

import pytest

from embedres.runtime.errors import ListingUnavailableError, NameCollisionError
from embedres.runtime.layout import (
    count_nodes,
    flatten,
    from_record,
    iter_nodes,
    to_record,
    unflatten,
)
from embedres.runtime.nodes import DirectoryNode


def _snapshot(root):
    return [(n.path, n.is_dir, getattr(n, "size", 0), n.mod_time) for n in iter_nodes(root)]


def test_nested_record_shape(memory_tree: DirectoryNode) -> None:
    record = to_record(memory_tree)

    assert record["path"] == "/"
    assert record["is_dir"] is True
    assert [c["name"] for c in record["children"]] == ["a", "empty_dir", "z.txt"]
    a = record["children"][0]
    assert [c["path"] for c in a["children"]] == ["/a/b.txt", "/a/c.txt"]
    assert a["children"][0]["size"] == 2


def test_records_are_json_compatible(memory_tree: DirectoryNode) -> None:
    record = to_record(memory_tree)
    rebuilt = from_record(json.loads(json.dumps(record)))
    assert _snapshot(rebuilt) == _snapshot(memory_tree)


def test_flat_shape(memory_tree: DirectoryNode) -> None:
    layout = flatten(memory_tree)

    assert [d["path"] for d in layout.dirs] == ["/", "/a", "/empty_dir"]
    assert sorted(layout.files) == ["/", "/a"]
    assert [f["name"] for f in layout.files["/a"]] == ["b.txt", "c.txt"]
    assert "/empty_dir" not in layout.files


def test_flat_and_nested_are_equivalent(memory_tree: DirectoryNode) -> None:
    layout = flatten(memory_tree)
    from_flat = unflatten(layout.dirs, layout.files)
    from_nested = from_record(to_record(memory_tree))

    assert _snapshot(from_flat) == _snapshot(from_nested) == _snapshot(memory_tree)
    assert from_flat.lookup("/a/b.txt").read_bytes() == b"hi"


def test_unflatten_accepts_any_directory_order(memory_tree: DirectoryNode) -> None:
    layout = flatten(memory_tree)
    rebuilt = unflatten(list(reversed(layout.dirs)), layout.files)
    assert _snapshot(rebuilt) == _snapshot(memory_tree)


def test_unflatten_synthesizes_missing_root() -> None:
    root = unflatten([{"name": "a", "path": "/a", "mod_time": 1}], {})
    assert root.path == "/"
    assert [c.name for c in root.entries()] == ["a"]


def test_unflatten_rejects_files_in_undeclared_directory() -> None:
    record = {"name": "x", "path": "/ghost/x", "size": 0, "mod_time": 0, "payload": ""}
    with pytest.raises(ListingUnavailableError):
        unflatten([{"name": "", "path": "/", "mod_time": 0}], {"/ghost": [record]})


def test_unflatten_rejects_undeclared_parent() -> None:
    with pytest.raises(ListingUnavailableError):
        unflatten([{"name": "deep", "path": "/missing/deep", "mod_time": 0}], {})


def test_unflatten_rejects_duplicate_names() -> None:
    dirs = [{"name": "", "path": "/", "mod_time": 0}, {"name": "x", "path": "/x", "mod_time": 0}]
    files = {"/": [{"name": "x", "path": "/x", "size": 0, "mod_time": 0, "payload": ""}]}
    with pytest.raises(NameCollisionError):
        unflatten(dirs, files)


def test_unlisted_directory_survives_both_layouts() -> None:
    root = DirectoryNode(name="", path="/")
    root.add(DirectoryNode(name="opaque", path="/opaque", children=None))

    record = to_record(root)
    assert "children" not in record["children"][0]
    assert from_record(record).lookup("/opaque").has_listing is False

    layout = flatten(root)
    assert layout.dirs[1]["listed"] is False
    assert unflatten(layout.dirs, layout.files).lookup("/opaque").has_listing is False


def test_count_nodes(memory_tree: DirectoryNode) -> None:
    assert count_nodes(memory_tree) == (3, 3)
