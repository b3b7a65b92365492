from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Isolation of the user data directory (saved config, logs).
3. Shared source-tree and node fixtures.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from embedres.runtime.codec import encode  # noqa: E402
from embedres.runtime.nodes import DirectoryNode, FileNode  # noqa: E402


# -----------------------------------------------------------------------------
# Environment Isolation
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user data directory at a throwaway location."""
    home = tmp_path_factory.mktemp("embedres_home")
    monkeypatch.setenv("EMBEDRES_HOME", str(home))
    return home


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_config_dict(tmp_path: Path) -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Mirrors 'embedres.domain.config.get_default_config'.
    """
    return {
        "source": str(tmp_path / "src_tree"),
        "output": "-",
        "var_name": "ASSETS",
        "shape": "dependent",
        "chunk_width": 76,
        "max_depth": 10,
        "include_patterns": [],
        "exclude_patterns": [],
        "respect_gitignore": False,
    }


@pytest.fixture
def fixture_tree(tmp_path: Path) -> Path:
    """
    Minimal source tree.

    Structure:
    /tree
      /a
        b.txt   ("hi")
    """
    root = tmp_path / "tree"
    (root / "a").mkdir(parents=True)
    (root / "a" / "b.txt").write_bytes(b"hi")
    return root


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """
    Richer source tree with nesting, an empty file and binary data.

    Structure:
    /sample
      README.md
      empty.txt          (0 bytes)
      /assets
        logo.bin         (256 bytes, every byte value)
        /css
          site.css
      /docs
        /guide
          /deep
            note.txt
    """
    root = tmp_path / "sample"
    (root / "assets" / "css").mkdir(parents=True)
    (root / "docs" / "guide" / "deep").mkdir(parents=True)

    (root / "README.md").write_text("# Sample\n", encoding="utf-8")
    (root / "empty.txt").write_bytes(b"")
    (root / "assets" / "logo.bin").write_bytes(bytes(range(256)))
    (root / "assets" / "css" / "site.css").write_text("body { margin: 0; }\n", encoding="utf-8")
    (root / "docs" / "guide" / "deep" / "note.txt").write_text("deep note\n", encoding="utf-8")
    return root


def make_file(name: str, data: bytes, parent: str = "/", mod_time: int = 1700000000) -> FileNode:
    """Build a FileNode holding `data`, encoded like the packer does."""
    path = parent.rstrip("/") + "/" + name
    return FileNode(name=name, path=path, mod_time=mod_time, size=len(data), payload=encode(data))


@pytest.fixture
def memory_tree() -> DirectoryNode:
    """
    In-memory tree without touching the disk.

    Structure:
    /
      /a
        b.txt   ("hi")
        c.txt   ("see")
      /empty_dir
      z.txt     ("last")
    """
    a = DirectoryNode(name="a", path="/a", mod_time=1700000001)
    a.add(make_file("c.txt", b"see", "/a"))
    a.add(make_file("b.txt", b"hi", "/a"))

    root = DirectoryNode(name="", path="/", mod_time=1700000000)
    root.add(make_file("z.txt", b"last"))
    root.add(DirectoryNode(name="empty_dir", path="/empty_dir", mod_time=1700000002))
    root.add(a)
    return root


@pytest.fixture
def file_factory():
    """Expose `make_file` to tests."""
    return make_file
