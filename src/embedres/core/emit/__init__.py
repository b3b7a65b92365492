from __future__ import annotations

from .dependent import render_dependent
from .independent import render_independent
from .writer import write_output

__all__ = [
    "render_dependent",
    "render_independent",
    "write_output",
]
