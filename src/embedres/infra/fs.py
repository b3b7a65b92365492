from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides path normalization, the per-user data directory and output
pre-flight checks, so that Windows and Unix-like systems behave the same.
"""

import os
from typing import Optional

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "Embedres"
UNIX_APP_DIR_NAME = ".embedres"
DATA_DIR_ENV = "EMBEDRES_HOME"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - $EMBEDRES_HOME when set
    - Windows: %LOCALAPPDATA%/Embedres
    - Linux/Mac: ~/.embedres

    Returns:
        str: Absolute path to the application data directory.
    """
    path = os.environ.get(DATA_DIR_ENV, "")

    if not path and os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        # Read-only home: callers handle the missing directory on write
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Expands environment variables ($VAR/%VAR%) and the user home (~/).
    Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip() or fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)

# -----------------------------------------------------------------------------
# FILESYSTEM VALIDATION API
# -----------------------------------------------------------------------------

def check_existing_output(target: str) -> Optional[str]:
    """
    Detect a collision with an existing output file.

    Args:
        target: Output file path.

    Returns:
        Optional[str]: The absolute path if something already exists there.
    """
    full = os.path.abspath(target)
    if os.path.lexists(full):
        return full
    return None


def is_inside(path: str, root: str) -> bool:
    """True if `path` is `root` or lies below it."""
    path = os.path.realpath(path)
    root = os.path.realpath(root)
    try:
        return os.path.commonpath([path, root]) == root
    except ValueError:
        # Different drives on Windows
        return False
