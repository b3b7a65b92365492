from __future__ import annotations

"""
Domain Constants.

Centralized defaults shared by configuration, validation, the packer and
the CLI.
"""

from typing import List

from embedres.runtime.codec import DEFAULT_CHUNK_WIDTH

APP_NAME = "embedres"
VERSION = "0.1.0"
CURRENT_CONFIG_VERSION = "1.0.0"

# Output target sentinel: emit text instead of writing a file
STDOUT_TARGET = "-"

DEFAULT_VAR_NAME = "ASSETS"
DEFAULT_MAX_DEPTH = 10

SHAPE_DEPENDENT = "dependent"
SHAPE_INDEPENDENT = "independent"
SHAPES: List[str] = [SHAPE_DEPENDENT, SHAPE_INDEPENDENT]

DEFAULT_EXCLUDE_PATTERNS: List[str] = [
    r"(^|/)(__pycache__|\.git|\.hg|\.svn|\.idea|\.vscode|node_modules)(/|$)",
    r"\.py[co]$",
    r"(^|/)\.DS_Store$",
]
