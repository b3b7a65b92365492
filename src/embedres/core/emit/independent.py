from __future__ import annotations

"""
Independent Shape Emitter.

Renders a packed tree as a self-contained Python module: a copy of the
stdlib-only runtime in `standalone.py`, the tree in the flat layout
(`_DIRS` plus `_FILES`), and a module variable bound to the filesystem.
The result imports nothing from embedres.
"""

import inspect
import logging
from typing import Any, Dict, List

from embedres.core.emit import standalone
from embedres.core.emit.literals import HEADER, check_var_name, indent, payload_literal
from embedres.domain.constants import DEFAULT_VAR_NAME
from embedres.runtime.layout import Record, flatten
from embedres.runtime.nodes import DirectoryNode

logger = logging.getLogger(__name__)

DATA_NAMES = ("_DIRS", "_FILES")


def reserved_names() -> List[str]:
    """Top-level names defined by the generated module itself."""
    runtime_names = [name for name in vars(standalone) if not name.startswith("__")]
    return sorted(set(runtime_names) | set(DATA_NAMES))


def render_independent(root: DirectoryNode, var_name: str = DEFAULT_VAR_NAME) -> str:
    """
    Render the module text for the independent shape.

    Args:
        root: Root of the packed tree.
        var_name: Module-level name bound to the filesystem.

    Returns:
        str: Python source, newline terminated.

    Raises:
        ValueError: If var_name cannot be bound.
    """
    check_var_name(var_name, reserved_names())
    layout = flatten(root)

    lines: List[str] = [HEADER, ""]
    lines.append(inspect.getsource(standalone).rstrip("\n"))
    lines.extend(["", ""])

    lines.append("_DIRS = [")
    for record in layout.dirs:
        lines.append(f"{indent(1)}{_dict_literal(record)},")
    lines.append("]")
    lines.append("")

    lines.append("_FILES = {")
    for dir_path, records in layout.files.items():
        lines.append(f"{indent(1)}{dir_path!r}: [")
        for record in records:
            _render_file_record(record, lines)
        lines.append(f"{indent(1)}],")
    lines.append("}")
    lines.extend(["", ""])

    lines.append(f"{var_name} = _build(_DIRS, _FILES)")

    text = "\n".join(lines) + "\n"
    logger.debug(f"Rendered independent module ({len(text)} chars)")
    return text


def _render_file_record(record: Record, lines: List[str]) -> None:
    meta: Dict[str, Any] = {k: v for k, v in record.items() if k != "payload"}
    lines.append(f"{indent(2)}{{")
    for key, value in meta.items():
        lines.append(f"{indent(3)}{key!r}: {value!r},")
    lines.append(f"{indent(3)}'payload': {payload_literal(record.get('payload', ''))},")
    lines.append(f"{indent(2)}}},")


def _dict_literal(record: Record) -> str:
    return "{" + ", ".join(f"{k!r}: {v!r}" for k, v in record.items()) + "}"
