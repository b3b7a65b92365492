from __future__ import annotations

from .engine import run_pack
from .validator import validate_config

__all__ = [
    "run_pack",
    "validate_config",
]
