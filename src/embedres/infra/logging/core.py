from __future__ import annotations

"""
Logging Bootstrap.

Idempotent set-up of the root logger. Records go through a QueueHandler to
a QueueListener thread that owns the real handlers (stderr and an optional
rotating file), so slow file I/O never stalls a pack.
"""

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from embedres.infra.fs import get_user_data_dir
from embedres.infra.logging.config import _LEVEL_MAP, LoggingConfig
from embedres.infra.logging.handlers import (
    _create_rotating_file_handler,
    _create_stderr_handler,
    _is_our_handler,
    _tag_handler,
)

_CONFIGURED_FLAG_ATTR: str = "_embedres_configured"
_QUEUE_LISTENER_ATTR: str = "_embedres_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_default_log_path(file_name: str = "embedres.log") -> str:
    """Diagnostic log location inside the user data directory."""
    return os.path.join(get_user_data_dir(), "logs", file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the root logger once.

    Subsequent calls are no-ops unless `force` is set, in which case our
    previous handlers and listener are torn down first. Handlers installed
    by others are left alone.

    Args:
        cfg: Logging settings.
        force: Re-initialize even if already configured.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()

    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    try:
        level_int = _parse_level(cfg.level)
        root.setLevel(level_int)

        _remove_our_handlers(root)
        _stop_existing_listener(root)

        handlers_list: List[logging.Handler] = []
        if cfg.console:
            handlers_list.append(
                _create_stderr_handler(level_int, logging.Formatter(cfg.console_fmt))
            )
        if cfg.log_file:
            fh = _create_rotating_file_handler(
                cfg.log_file,
                level_int,
                logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
                cfg.max_bytes,
                cfg.backup_count,
            )
            if fh:
                handlers_list.append(fh)

        if not handlers_list:
            setattr(root, _CONFIGURED_FLAG_ATTR, True)
            return root

        log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
        queue_handler = _tag_handler(QueueHandler(log_queue))

        listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
        listener.start()

        root.addHandler(queue_handler)
        setattr(root, _QUEUE_LISTENER_ATTR, listener)
        setattr(root, _CONFIGURED_FLAG_ATTR, True)

        atexit.register(_safe_stop_listener, listener)
        return root

    except (OSError, RuntimeError, ValueError) as e:
        # Emergency console: direct stderr handler, no queue
        _remove_our_handlers(root)
        _stop_existing_listener(root)
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter("CRITICAL FALLBACK | %(levelname)s | %(message)s"))
        root.addHandler(_tag_handler(sh))
        root.warning(f"Logging setup failed ({e}). Using emergency console.")
        return root


def shutdown_logging() -> None:
    """Flush pending records and detach our handlers from the root logger."""
    root = logging.getLogger()
    _stop_existing_listener(root)
    _remove_our_handlers(root)
    setattr(root, _CONFIGURED_FLAG_ATTR, False)


def get_logger(name: str) -> logging.Logger:
    """Named logger (usually __name__)."""
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _remove_our_handlers(root: logging.Logger) -> None:
    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """Stop a listener; a second stop (atexit after shutdown) is a no-op."""
    if listener is None:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
    for h in listener.handlers:
        h.close()
