from __future__ import annotations

"""
Pack Domain Models.

Result object returned by the pack pipeline and the pack-time error
family. Pack-time errors are fatal: they abort the whole run and carry the
offending path and underlying cause so the operator can fix the source
tree or the filters.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# -----------------------------------------------------------------------------
# ERRORS
# -----------------------------------------------------------------------------

class PackError(Exception):
    """
    Base class for failures that abort a pack.

    Attributes:
        path: Filesystem path involved in the failure, if any.
        cause: Underlying exception, if any.
    """

    def __init__(
            self,
            message: str,
            path: Optional[str] = None,
            cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause


class SourceReadError(PackError):
    """The source tree could not be walked, stat'ed or read."""


class EncodeError(PackError):
    """A file payload could not be compressed or encoded."""


class FilterError(PackError):
    """An include/exclude pattern is malformed."""


class OutputError(PackError):
    """The output target exists or cannot be written."""

# -----------------------------------------------------------------------------
# RESULT MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PackResult:
    """
    Unified result of a pack run.

    Attributes:
        ok: Success flag.
        error: Descriptive message on failure.
        source: Absolute source path that was packed.
        target: Output target ('-' for text emission).
        shape: 'dependent' or 'independent'.
        var_name: Name bound by the generated module.
        dry_run: Whether writing was skipped.
        dir_count: Directories in the packed tree (root included).
        file_count: Files in the packed tree.
        raw_bytes: Sum of original file sizes.
        encoded_chars: Sum of encoded payload lengths (whitespace excluded).
        text: Generated source when the target is '-'.
        summary: Extra execution details.
    """
    ok: bool
    error: str

    source: str
    target: str
    shape: str
    var_name: str
    dry_run: bool = False

    dir_count: int = 0
    file_count: int = 0
    raw_bytes: int = 0
    encoded_chars: int = 0

    text: str = ""
    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def ratio(self) -> float:
        """Encoded size relative to the original size (0.0 when empty)."""
        if not self.raw_bytes:
            return 0.0
        return self.encoded_chars / self.raw_bytes

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        cfg: Dict[str, Any],
        summary_extra: Optional[Dict[str, Any]] = None,
) -> PackResult:
    """
    Create a failed pack result.

    Args:
        error: Detailed error description.
        cfg: The configuration used during the failed run.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        PackResult: An immutable error result object.
    """
    return PackResult(
        ok=False,
        error=error,
        source=cfg.get("source", ""),
        target=cfg.get("output", ""),
        shape=cfg.get("shape", ""),
        var_name=cfg.get("var_name", ""),
        summary=summary_extra or {},
    )


def create_success_result(
        cfg: Dict[str, Any],
        *,
        dry_run: bool,
        dir_count: int,
        file_count: int,
        raw_bytes: int,
        encoded_chars: int,
        text: str = "",
        summary_extra: Optional[Dict[str, Any]] = None,
) -> PackResult:
    """
    Create a successful pack result.

    Args:
        cfg: Final configuration used during execution.
        dry_run: Whether the output was left unwritten.
        dir_count: Packed directories.
        file_count: Packed files.
        raw_bytes: Total original bytes.
        encoded_chars: Total encoded payload characters.
        text: Generated source for '-' targets.
        summary_extra: Final execution metrics.

    Returns:
        PackResult: An immutable success result object.
    """
    return PackResult(
        ok=True,
        error="",
        source=cfg.get("source", ""),
        target=cfg.get("output", ""),
        shape=cfg.get("shape", ""),
        var_name=cfg.get("var_name", ""),
        dry_run=dry_run,
        dir_count=dir_count,
        file_count=file_count,
        raw_bytes=raw_bytes,
        encoded_chars=encoded_chars,
        text=text,
        summary=summary_extra or {},
    )
