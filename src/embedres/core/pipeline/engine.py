from __future__ import annotations

"""
Pack Orchestration Pipeline.

Coordinates one pack run:
1. Validates configuration and normalizes paths.
2. Checks the output target for overwrite conflicts.
3. Builds the path predicate and walks the source tree.
4. Renders the module text in the requested shape.
5. Writes the target (unless dry run) and reports metrics.

Pack-time failures never escape: they are converted into an error
PackResult and nothing is written.
"""

import logging
import os
from typing import Any, Dict, Optional, Tuple

from embedres.core.emit import render_dependent, render_independent, write_output
from embedres.core.pack import build_predicate, walk_source
from embedres.core.pipeline.validator import validate_config
from embedres.domain.constants import SHAPE_INDEPENDENT, STDOUT_TARGET
from embedres.domain.pack_models import (
    PackError,
    PackResult,
    create_error_result,
    create_success_result,
)
from embedres.infra.fs import check_existing_output, is_inside, normalize_path
from embedres.runtime.codec import unwrap
from embedres.runtime.errors import NameCollisionError
from embedres.runtime.layout import count_nodes, iter_nodes
from embedres.runtime.nodes import DirectoryNode, FileNode

logger = logging.getLogger(__name__)

ERROR_KIND_MISSING_SOURCE = "missing_source"
ERROR_KIND_CONFIG = "config"
ERROR_KIND_PACK = "pack"


def run_pack(
        config: Optional[Dict[str, Any]],
        *,
        overwrite: bool = False,
        dry_run: bool = False,
) -> PackResult:
    """
    Execute a full pack run.

    Args:
        config: The configuration dictionary (raw or partial).
        overwrite: Replace an existing output file.
        dry_run: Walk and render, but write nothing.

    Returns:
        PackResult: Status, metrics and, for the '-' target, the text.
    """
    logger.info("Pack execution started.")

    # -------------------------------------------------------------------------
    # 1) Config & Path Normalization
    # -------------------------------------------------------------------------
    cfg, _ = validate_config(config, strict=False)

    cfg["source"] = normalize_path(cfg["source"], os.getcwd())
    if cfg["output"] != STDOUT_TARGET:
        cfg["output"] = normalize_path(cfg["output"], os.getcwd())

    if not os.path.exists(cfg["source"]):
        msg = f"Source not found: {cfg['source']}"
        logger.error(msg)
        return create_error_result(msg, cfg, {"error_kind": ERROR_KIND_MISSING_SOURCE})

    # -------------------------------------------------------------------------
    # 2) Overwrite Check
    # -------------------------------------------------------------------------
    target = cfg["output"]
    if target != STDOUT_TARGET:
        existing = check_existing_output(target)
        if existing and not overwrite and not dry_run:
            msg = f"Output already exists: {existing} (use --overwrite to replace it)"
            logger.warning(msg)
            return create_error_result(msg, cfg, {"error_kind": ERROR_KIND_PACK, "existing": existing})
        if os.path.isdir(cfg["source"]) and is_inside(target, cfg["source"]):
            logger.warning(f"Output {target} lies inside the source tree; later runs will pack it.")

    # -------------------------------------------------------------------------
    # 3) Walk, 4) Render, 5) Write
    # -------------------------------------------------------------------------
    try:
        gitignore_root = cfg["source"] if cfg["respect_gitignore"] and os.path.isdir(cfg["source"]) else None
        predicate = build_predicate(cfg["include_patterns"], cfg["exclude_patterns"], gitignore_root)

        root = walk_source(
            cfg["source"],
            predicate=predicate,
            max_depth=cfg["max_depth"],
            chunk_width=cfg["chunk_width"],
        )

        text = render(root, cfg["shape"], cfg["var_name"])

        if dry_run:
            logger.info("Dry run: skipping output write.")
        else:
            write_output(text, target, overwrite=overwrite)

    except (PackError, NameCollisionError) as e:
        logger.error(f"Pack failed: {e}")
        return create_error_result(str(e), cfg, {"error_kind": ERROR_KIND_PACK, "path": e.path})
    except ValueError as e:
        logger.error(f"Invalid pack settings: {e}")
        return create_error_result(str(e), cfg, {"error_kind": ERROR_KIND_CONFIG})

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------
    dir_count, file_count = count_nodes(root)
    raw_bytes, encoded_chars = measure(root)

    logger.info(
        f"Pack completed: {file_count} file(s) in {dir_count} dir(s), "
        f"{raw_bytes} bytes -> {encoded_chars} chars."
    )
    return create_success_result(
        cfg,
        dry_run=dry_run,
        dir_count=dir_count,
        file_count=file_count,
        raw_bytes=raw_bytes,
        encoded_chars=encoded_chars,
        text=text if target == STDOUT_TARGET else "",
        summary_extra={"text_chars": len(text)},
    )


def render(root: DirectoryNode, shape: str, var_name: str) -> str:
    """Render `root` in the requested output shape."""
    if shape == SHAPE_INDEPENDENT:
        return render_independent(root, var_name)
    return render_dependent(root, var_name)


def measure(root: DirectoryNode) -> Tuple[int, int]:
    """Return (original bytes, encoded payload characters) over all files."""
    raw = encoded = 0
    for node in iter_nodes(root):
        if isinstance(node, FileNode):
            raw += node.size
            encoded += len(unwrap(node.payload))
    return raw, encoded
