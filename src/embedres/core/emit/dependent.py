from __future__ import annotations

"""
Dependent Shape Emitter.

Renders a packed tree as a Python module that rebuilds it with the shared
`embedres.runtime` node types and binds an EmbeddedFS to a module variable.

Every directory gets its own flat statement and is attached to its parent
by index, so the generated source nests the same way whatever the depth of
the tree.
"""

import logging
from typing import List

from embedres.core.emit.literals import HEADER, check_var_name, indent, payload_literal
from embedres.domain.constants import DEFAULT_VAR_NAME
from embedres.runtime.nodes import DirectoryNode, FileNode

logger = logging.getLogger(__name__)

RUNTIME_IMPORT = "from embedres.runtime import DirectoryNode, EmbeddedFS, FileNode"
DIRS_NAME = "_DIRS"
RESERVED_NAMES = ("DirectoryNode", "EmbeddedFS", "FileNode", DIRS_NAME)


def render_dependent(root: DirectoryNode, var_name: str = DEFAULT_VAR_NAME) -> str:
    """
    Render the module text for the dependent shape.

    Args:
        root: Root of the packed tree.
        var_name: Module-level name bound to the filesystem.

    Returns:
        str: Python source, newline terminated.

    Raises:
        ValueError: If var_name cannot be bound.
    """
    check_var_name(var_name, RESERVED_NAMES)

    lines: List[str] = [HEADER, "", RUNTIME_IMPORT, "", ""]
    lines.append(f"{DIRS_NAME} = [{_directory_call(root)}]")

    # Pre-order with explicit stack; each entry is (directory, its index)
    stack = [(root, 0)]
    next_index = 1
    while stack:
        directory, index = stack.pop()
        if not directory.has_listing:
            continue
        pending = []
        for child in directory.entries():
            if isinstance(child, FileNode):
                _render_file(child, index, lines)
                continue
            assert isinstance(child, DirectoryNode)
            lines.append(f"{DIRS_NAME}.append({_directory_call(child)})")
            lines.append(f"{DIRS_NAME}[{index}].add({DIRS_NAME}[{next_index}])")
            pending.append((child, next_index))
            next_index += 1
        stack.extend(reversed(pending))

    lines.append("")
    lines.append(f"{var_name} = EmbeddedFS({DIRS_NAME}[0])")
    lines.append(f"del {DIRS_NAME}")

    text = "\n".join(lines) + "\n"
    logger.debug(f"Rendered dependent module ({next_index} directories, {len(text)} chars)")
    return text


def _directory_call(node: DirectoryNode) -> str:
    children = "[]" if node.has_listing else "None"
    return (
        f"DirectoryNode(name={node.name!r}, path={node.path!r}, "
        f"mod_time={node.mod_time}, children={children})"
    )


def _render_file(node: FileNode, parent_index: int, lines: List[str]) -> None:
    inner = indent(1)
    lines.append(f"{DIRS_NAME}[{parent_index}].add(FileNode(")
    lines.append(
        f"{inner}name={node.name!r}, path={node.path!r}, "
        f"mod_time={node.mod_time}, size={node.size},"
    )
    lines.append(f"{inner}payload={payload_literal(node.payload)},")
    lines.append("))")
