from __future__ import annotations

"""
Logging Handler Factories.

Builds the handlers attached behind the queue and tags them so the
bootstrap can tell its own handlers apart from ones installed by host
applications or test harnesses.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

_HANDLER_TAG_ATTR: str = "_embedres_handler"


def _tag_handler(handler: logging.Handler) -> logging.Handler:
    """Mark a handler as owned by embedres and return it."""
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _create_stderr_handler(level_int: int, formatter: logging.Formatter) -> logging.Handler:
    """
    Console handler bound to the current sys.stderr.

    Args:
        level_int: Numeric logging level.
        formatter: Formatter for terminal output.
    """
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level_int)
    sh.setFormatter(formatter)
    return _tag_handler(sh)


def _create_rotating_file_handler(
        log_file: str,
        level_int: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Initialize a RotatingFileHandler.

    A log file that cannot be opened is reported on stderr and skipped;
    packing never fails because of diagnostics.

    Returns:
        Optional[RotatingFileHandler]: Configured handler or None if I/O fails.
    """
    try:
        parent = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(parent, exist_ok=True)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Cannot open log file '{log_file}': {e}\n")
        return None

    fh.setLevel(level_int)
    fh.setFormatter(formatter)
    _tag_handler(fh)
    return fh
