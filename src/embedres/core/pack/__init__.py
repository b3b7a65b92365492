from __future__ import annotations

from .filters import PathPredicate, build_predicate, default_exclude_patterns
from .walker import walk_source

__all__ = [
    "PathPredicate",
    "build_predicate",
    "default_exclude_patterns",
    "walk_source",
]
