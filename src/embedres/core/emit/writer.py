from __future__ import annotations

"""
Output Target Handling.

Persists generated text. The '-' target means "do not write a file":
the text is handed back for the caller to print. File targets are
written to a temporary sibling and moved into place atomically, so a
failed run never leaves a truncated module behind.
"""

import logging
import os
import tempfile
from typing import Optional

from embedres.domain.constants import STDOUT_TARGET
from embedres.domain.pack_models import OutputError
from embedres.infra.fs import check_existing_output

logger = logging.getLogger(__name__)


def write_output(text: str, target: str, overwrite: bool = False) -> Optional[str]:
    """
    Deliver generated text to its target.

    Args:
        text: Generated module source.
        target: Output file path, or '-' for text emission.
        overwrite: Replace an existing target file.

    Returns:
        Optional[str]: The text for '-' targets, None after writing a file.

    Raises:
        OutputError: The target exists without `overwrite`, or writing failed.
    """
    if target == STDOUT_TARGET:
        return text

    target_abs = os.path.abspath(target)
    existing = check_existing_output(target_abs)
    if existing and not overwrite:
        raise OutputError(
            f"Output already exists: {existing} (use --overwrite to replace it)",
            path=existing,
        )
    if existing and os.path.isdir(existing):
        raise OutputError(f"Output path is a directory: {existing}", path=existing)

    parent = os.path.dirname(target_abs)
    tmp_path = ""
    try:
        os.makedirs(parent, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{os.path.basename(target_abs)}.", suffix=".tmp", dir=parent
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, target_abs)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise OutputError(f"Cannot write {target_abs}: {e}", path=target_abs, cause=e) from e

    logger.info(f"Wrote {len(text)} chars to {target_abs}")
    return None
