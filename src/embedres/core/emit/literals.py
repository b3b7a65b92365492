from __future__ import annotations

"""
Python Literal Helpers.

Shared formatting for the generated modules: header, identifier checks
and payload literals.
"""

import keyword
from typing import Iterable

HEADER = "# Code generated by embedres. DO NOT EDIT."
INDENT = "    "


def check_var_name(var_name: str, reserved: Iterable[str] = ()) -> None:
    """
    Ensure the generated module can bind `var_name`.

    Raises:
        ValueError: Not an identifier, a keyword, or shadowing a name the
            generated module relies on.
    """
    if not var_name.isidentifier() or keyword.iskeyword(var_name):
        raise ValueError(f"Variable name {var_name!r} is not a valid Python identifier")
    if var_name in set(reserved):
        raise ValueError(f"Variable name {var_name!r} is reserved by the generated module")


def payload_literal(payload: str) -> str:
    """
    Render a payload as a string literal.

    Wrapped payloads become triple-quoted blocks; base64 text never
    contains quotes or backslashes, so no escaping is needed.
    """
    if not payload:
        return '""'
    return f'"""{payload}"""'


def indent(level: int) -> str:
    return INDENT * level
