from __future__ import annotations

"""
Configuration Validator.

Gatekeeper for the configuration dictionary passed to the pipeline:
coerces types, fills missing values with defaults and checks the
value constraints of each field, driven by a small declarative schema.
"""

import keyword
import logging
from typing import Any, Dict, List, Tuple

from embedres.domain.config import get_default_config
from embedres.domain.constants import SHAPES

logger = logging.getLogger(__name__)

_STRING_FIELDS = ("source", "output", "var_name", "shape")
_INT_FIELDS = ("max_depth", "chunk_width")
_BOOL_FIELDS = ("respect_gitignore",)
_LIST_FIELDS = ("include_patterns", "exclude_patterns")


def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the configuration dictionary.

    Args:
        config: The raw configuration dictionary (or untrusted input).
        strict: If True, raises TypeError/ValueError on invalid data
            instead of falling back to defaults.

    Returns:
        Tuple[Dict, List[str]]: (Normalized Config, List of Warnings).
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    for field in _STRING_FIELDS:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in _INT_FIELDS:
        merged[field] = _as_int(merged.get(field), defaults[field], field, warnings, strict)

    for field in _BOOL_FIELDS:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    for field in _LIST_FIELDS:
        merged[field] = _as_list_str(merged.get(field), defaults[field], field, warnings, strict)

    # Value constraints
    if merged["shape"] not in SHAPES:
        _reject(
            f"Invalid shape '{merged['shape']}': expected one of {', '.join(SHAPES)}.",
            warnings, strict,
        )
        merged["shape"] = defaults["shape"]

    var_name = merged["var_name"]
    if not var_name.isidentifier() or keyword.iskeyword(var_name):
        _reject(f"Invalid var_name '{var_name}': not a Python identifier.", warnings, strict)
        merged["var_name"] = defaults["var_name"]

    if merged["chunk_width"] < 1:
        _reject(f"Invalid chunk_width {merged['chunk_width']}: must be >= 1.", warnings, strict)
        merged["chunk_width"] = defaults["chunk_width"]

    for w in warnings:
        logger.warning(w)

    return merged, warnings


def _reject(msg: str, warnings: List[str], strict: bool) -> None:
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using default.")


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Ensure value is a non-empty string."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback
    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce value to int; bools are rejected."""
    if value is None:
        return fallback
    if isinstance(value, int) and not isinstance(value, bool):
        return value

    if not strict and isinstance(value, str):
        try:
            converted = int(value.strip())
        except ValueError:
            pass
        else:
            warnings.append(f"Field '{field}' converted from '{value}' to {converted}.")
            return converted

    msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce value to boolean."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure value is a list of strings. An explicit empty list is kept."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        warnings.append(f"Field '{field}' converted from CSV string to list.")
        return [x.strip() for x in value.split(",") if x.strip()]

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)
