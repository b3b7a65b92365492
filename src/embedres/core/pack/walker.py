from __future__ import annotations

"""
Source Tree Walker.

Builds the canonical node tree from a file or directory on disk. Every
accepted file is read fully and encoded immediately, so the returned tree
is self-contained. Any stat or read failure aborts the walk: a partial
tree is never returned.

Depth counts path segments below the walk root: the root's children are
at depth 1. With a positive max_depth nothing deeper is stat'ed, filtered
or read, and directories at exactly max_depth are kept but not entered.
"""

import logging
import os
import stat
import zlib
from typing import Dict, List, Optional, Tuple

from embedres.core.pack.filters import PathPredicate, accept_all
from embedres.domain.constants import DEFAULT_CHUNK_WIDTH, DEFAULT_MAX_DEPTH
from embedres.domain.pack_models import EncodeError, SourceReadError
from embedres.runtime.codec import encode
from embedres.runtime.nodes import SEPARATOR, DirectoryNode, FileNode, child_path

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def walk_source(
        source: str,
        predicate: Optional[PathPredicate] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        chunk_width: int = DEFAULT_CHUNK_WIDTH,
) -> DirectoryNode:
    """
    Pack a file or directory into a node tree.

    A single file source yields a synthetic root holding that one file;
    the predicate is not consulted for it.

    Args:
        source: Path to a regular file or a directory.
        predicate: Called with ('/rel/path', lstat result); False skips
            the file or the whole subtree. None accepts everything.
        max_depth: Depth bound; 0 or negative walks without limit.
        chunk_width: Line width of the encoded payloads.

    Returns:
        DirectoryNode: The root of the packed tree (path '/').

    Raises:
        SourceReadError: The source or an entry could not be stat'ed or read.
        EncodeError: A payload could not be compressed.
        ValueError: chunk_width is lower than 1.
    """
    if chunk_width < 1:
        raise ValueError(f"Chunk width must be >= 1, got {chunk_width}")

    check = predicate or accept_all
    source_abs = os.path.abspath(source)
    st = _stat(source_abs, follow=True)

    if stat.S_ISREG(st.st_mode):
        logger.info(f"Packing single file: {source_abs}")
        root = DirectoryNode(name="", path=SEPARATOR, mod_time=int(st.st_mtime))
        root.add(_pack_file(source_abs, SEPARATOR, os.path.basename(source_abs), st, chunk_width))
        return root

    if not stat.S_ISDIR(st.st_mode):
        raise SourceReadError(
            f"Source is neither a regular file nor a directory: {source_abs}",
            path=source_abs,
        )

    logger.info(f"Packing directory: {source_abs} (max depth: {max_depth if max_depth > 0 else 'unbounded'})")
    return _walk_directory(source_abs, int(st.st_mtime), check, max_depth, chunk_width)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _walk_directory(
        source_abs: str,
        root_mtime: int,
        check: PathPredicate,
        max_depth: int,
        chunk_width: int,
) -> DirectoryNode:
    root = DirectoryNode(name="", path=SEPARATOR, mod_time=root_mtime)
    # Absolute host path -> (node, depth)
    visited: Dict[str, Tuple[DirectoryNode, int]] = {source_abs: (root, 0)}

    for dir_abs, dirs, files in os.walk(source_abs, onerror=_raise_walk_error):
        parent, depth = visited[dir_abs]
        child_depth = depth + 1

        dirs.sort()
        files.sort()

        kept: List[str] = []
        for name in dirs:
            full = os.path.join(dir_abs, name)
            rel = child_path(parent.path, name)
            st = _stat(full)

            if stat.S_ISLNK(st.st_mode):
                logger.warning(f"Skipping symbolic link: {rel}")
                continue
            if not check(rel, st):
                logger.debug(f"Skipped directory (filtered): {rel}")
                continue

            node = DirectoryNode(name=name, path=rel, mod_time=int(st.st_mtime))
            parent.add(node)
            if max_depth > 0 and child_depth >= max_depth:
                logger.debug(f"Depth limit reached, not descending: {rel}")
                continue
            visited[full] = (node, child_depth)
            kept.append(name)

        # In-place pruning: os.walk only enters what is left
        dirs[:] = kept

        for name in files:
            full = os.path.join(dir_abs, name)
            rel = child_path(parent.path, name)
            st = _stat(full)

            if stat.S_ISLNK(st.st_mode):
                logger.warning(f"Skipping symbolic link: {rel}")
                continue
            if not stat.S_ISREG(st.st_mode):
                logger.warning(f"Skipping special file: {rel}")
                continue
            if not check(rel, st):
                logger.debug(f"Skipped file (filtered): {rel}")
                continue

            parent.add(_pack_file(full, parent.path, name, st, chunk_width))

    return root


def _pack_file(
        full: str,
        parent_path: str,
        name: str,
        st: os.stat_result,
        chunk_width: int,
) -> FileNode:
    rel = child_path(parent_path, name)
    data = _read_file(full)

    try:
        payload = encode(data, chunk_width)
    except (zlib.error, OSError, ValueError, MemoryError) as e:
        raise EncodeError(f"Cannot encode {rel}: {e}", path=full, cause=e) from e

    logger.debug(f"Packed {rel} ({len(data)} bytes -> {len(payload)} chars)")
    return FileNode(
        name=name,
        path=rel,
        mod_time=int(st.st_mtime),
        size=len(data),
        payload=payload,
    )


def _stat(path: str, follow: bool = False) -> os.stat_result:
    try:
        return os.stat(path) if follow else os.lstat(path)
    except OSError as e:
        raise SourceReadError(f"Cannot stat {path}: {e.strerror or e}", path=path, cause=e) from e


def _read_file(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise SourceReadError(f"Cannot read {path}: {e.strerror or e}", path=path, cause=e) from e


def _raise_walk_error(error: OSError) -> None:
    path = error.filename or ""
    raise SourceReadError(f"Cannot list {path}: {error.strerror or error}", path=path, cause=error) from error
