from __future__ import annotations

"""
Unit tests for the embedded filesystem facade and its handles.

Verifies:
1. Path resolution (found, not-found, not-a-directory).
2. Handle reads, seeks and readdir paging.
3. Convenience queries and error kinds.
"""

import io

import pytest

from embedres.runtime import EmbeddedFS
from embedres.runtime.errors import (
    DecodeError,
    EndOfListingError,
    IsDirectoryError,
    ListingUnavailableError,
    NotDirectoryError,
    NotFoundError,
)
from embedres.runtime.nodes import DirectoryNode, FileNode


@pytest.fixture
def fs(memory_tree: DirectoryNode) -> EmbeddedFS:
    return EmbeddedFS(memory_tree)


# -----------------------------------------------------------------------------
# Path resolution
# -----------------------------------------------------------------------------

def test_open_and_read_known_file(fs: EmbeddedFS) -> None:
    with fs.open("/a/b.txt") as handle:
        assert handle.read() == b"hi"
        assert handle.read() == b""
    assert handle.closed is True


def test_open_missing_is_not_found(fs: EmbeddedFS) -> None:
    with pytest.raises(NotFoundError) as exc:
        fs.open("/a/missing.txt")
    assert exc.value.path == "/a/missing.txt"
    assert isinstance(exc.value, FileNotFoundError)


def test_open_through_file_is_not_directory(fs: EmbeddedFS) -> None:
    with pytest.raises(NotDirectoryError):
        fs.open("/a/b.txt/x")


def test_open_root_variants(fs: EmbeddedFS) -> None:
    assert fs.open("").path == "/"
    assert fs.open("/").path == "/"
    assert fs.open().stat().is_dir is True


def test_open_with_repeated_separators(fs: EmbeddedFS) -> None:
    assert fs.read_bytes("/a//b.txt") == b"hi"
    assert fs.open("//a///c.txt").path == "/a/c.txt"
    assert fs.listdir("/a//") == ["b.txt", "c.txt"]


def test_constructor_requires_directory(file_factory) -> None:
    with pytest.raises(TypeError):
        EmbeddedFS(file_factory("x", b"1"))  # type: ignore[arg-type]

# -----------------------------------------------------------------------------
# Reading & seeking
# -----------------------------------------------------------------------------

def test_partial_reads_and_seek(file_factory) -> None:
    root = DirectoryNode(name="", path="/")
    root.add(file_factory("digits", b"0123456789"))
    handle = EmbeddedFS(root).open("/digits")

    assert handle.read(3) == b"012"
    assert handle.tell() == 3
    assert handle.seek(-2, io.SEEK_END) == 8
    assert handle.read() == b"89"
    assert handle.seek(1) == 1
    assert handle.seek(2, io.SEEK_CUR) == 3

    buffer = bytearray(4)
    assert handle.readinto(buffer) == 4
    assert bytes(buffer) == b"3456"


def test_readinto_partial_buffer_and_end_of_data(file_factory) -> None:
    root = DirectoryNode(name="", path="/")
    root.add(file_factory("digits", b"0123456789"))
    root.add(FileNode(name="empty", path="/empty", size=0, payload=""))
    fs = EmbeddedFS(root)
    handle = fs.open("/digits")

    buffer = bytearray(4)
    assert handle.readinto(buffer) == 4
    assert bytes(buffer) == b"0123"
    assert handle.readinto(buffer) == 4
    assert bytes(buffer) == b"4567"

    view = memoryview(bytearray(8))
    assert handle.readinto(view) == 2
    assert bytes(view[:2]) == b"89"
    assert handle.readinto(buffer) == 0
    assert handle.tell() == 10

    assert fs.open("/empty").readinto(bytearray(3)) == 0
    with pytest.raises(IsDirectoryError):
        fs.open("/").readinto(bytearray(1))


def test_handles_have_independent_cursors(fs: EmbeddedFS) -> None:
    first = fs.open("/z.txt")
    second = fs.open("/z.txt")

    assert first.read(2) == b"la"
    assert second.read() == b"last"
    assert first.read() == b"st"


def test_empty_file_reads_and_seeks() -> None:
    root = DirectoryNode(name="", path="/")
    root.add(FileNode(name="empty", path="/empty", size=0, payload=""))
    handle = EmbeddedFS(root).open("/empty")

    assert handle.read() == b""
    assert handle.read(10) == b""
    assert handle.seek(100) == 0
    assert handle.seek(0, io.SEEK_END) == 0
    assert handle.tell() == 0
    assert handle.stat().size == 0


def test_read_on_directory_fails(fs: EmbeddedFS) -> None:
    handle = fs.open("/a")
    with pytest.raises(IsDirectoryError):
        handle.read()
    with pytest.raises(IsDirectoryError):
        handle.seek(0)
    with pytest.raises(IsDirectoryError):
        fs.read_bytes("/a")


def test_corrupt_file_opens_but_fails_on_access(file_factory) -> None:
    root = DirectoryNode(name="", path="/")
    root.add(FileNode(name="bad", path="/bad", size=5, payload="####"))
    root.add(file_factory("good", b"ok"))
    fs = EmbeddedFS(root)

    handle = fs.open("/bad")
    for access in (handle.read, handle.stat, lambda: handle.seek(0), lambda: fs.read_bytes("/bad")):
        with pytest.raises(DecodeError):
            access()
    assert fs.read_bytes("/good") == b"ok"

# -----------------------------------------------------------------------------
# Listing
# -----------------------------------------------------------------------------

def test_readdir_all(fs: EmbeddedFS) -> None:
    entries = fs.open("/").readdir(0)

    assert [e.name for e in entries] == ["a", "empty_dir", "z.txt"]
    assert [e.is_dir for e in entries] == [True, True, False]
    assert entries[2].size == 4


def test_readdir_large_count_returns_available(fs: EmbeddedFS) -> None:
    entries = fs.open("/a").readdir(100)
    names = [e.name for e in entries]

    assert names == ["b.txt", "c.txt"]
    assert len(set(names)) == len(names)


def test_readdir_paging_then_end(fs: EmbeddedFS) -> None:
    handle = fs.open("/")

    assert [e.name for e in handle.readdir(2)] == ["a", "empty_dir"]
    assert [e.name for e in handle.readdir(2)] == ["z.txt"]
    with pytest.raises(EndOfListingError):
        handle.readdir(1)
    assert handle.readdir(0) == []


def test_readdir_empty_directory(fs: EmbeddedFS) -> None:
    assert fs.open("/empty_dir").readdir(-1) == []
    with pytest.raises(EndOfListingError):
        fs.open("/empty_dir").readdir(5)


def test_readdir_on_file_is_not_directory(fs: EmbeddedFS) -> None:
    with pytest.raises(NotDirectoryError):
        fs.open("/z.txt").readdir()


def test_readdir_without_listing() -> None:
    root = DirectoryNode(name="", path="/")
    root.add(DirectoryNode(name="opaque", path="/opaque", children=None))
    fs = EmbeddedFS(root)

    with pytest.raises(ListingUnavailableError):
        fs.open("/opaque").readdir()
    with pytest.raises(NotFoundError):
        fs.open("/opaque/inner")

# -----------------------------------------------------------------------------
# Convenience queries
# -----------------------------------------------------------------------------

def test_convenience_queries(fs: EmbeddedFS) -> None:
    assert fs.read_text("/a/c.txt") == "see"
    assert fs.listdir() == ["a", "empty_dir", "z.txt"]
    assert fs.listdir("/a") == ["b.txt", "c.txt"]
    assert fs.exists("/a/b.txt") is True
    assert fs.exists("/nope") is False
    assert fs.exists("/a/b.txt/x") is False
    assert fs.isdir("/a") is True
    assert fs.isdir("/z.txt") is False
    assert fs.stat("/a/b.txt").size == 2

    with pytest.raises(NotDirectoryError):
        fs.listdir("/z.txt")


def test_walk_pre_order(fs: EmbeddedFS) -> None:
    paths = [path for path, _ in fs.walk()]
    assert paths == ["/", "/a", "/a/b.txt", "/a/c.txt", "/empty_dir", "/z.txt"]


def test_record_views_round_trip(fs: EmbeddedFS) -> None:
    rebuilt = EmbeddedFS.from_records(fs.to_records())
    flat = fs.to_flat()
    from_flat = EmbeddedFS.from_flat(flat.dirs, flat.files)

    expected = list(fs.walk())
    assert list(rebuilt.walk()) == expected
    assert list(from_flat.walk()) == expected
