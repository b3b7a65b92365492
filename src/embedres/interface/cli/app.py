from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration
resolution (defaults, saved settings, command-line overrides), pack
execution and result rendering.

Exit codes:
    0   success
    1   pack failure (bad source tree, filters, output conflict)
    2   source path does not exist
    130 interrupted
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional, TextIO

from embedres.core.pipeline.engine import run_pack
from embedres.core.pipeline.validator import validate_config
from embedres.domain.config import get_default_config, load_config, save_config
from embedres.domain.constants import STDOUT_TARGET
from embedres.domain.pack_models import PackResult
from embedres.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    get_logger,
)
from embedres.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_MISSING_SOURCE = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # Console logs go to stderr only: stdout may carry the generated module
    log_level = "DEBUG" if args.debug else "WARNING"
    log_file = None
    if args.log_file is not None:
        log_file = args.log_file or get_default_log_path()
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=log_file))

    logger.debug("CLI execution initiated. Resolving configuration...")

    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    clean_conf, _ = validate_config(raw_conf, strict=False)

    if args.save_config:
        # The source stays relative to each invocation
        persisted = {k: v for k, v in clean_conf.items() if k != "source"}
        if save_config(persisted):
            print("Configuration saved.", file=sys.stderr)

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    source = os.path.abspath(os.path.expanduser(clean_conf["source"]))
    if not os.path.exists(source):
        msg = f"Source path does not exist: {source}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_MISSING_SOURCE

    try:
        result = run_pack(
            clean_conf,
            overwrite=bool(args.overwrite),
            dry_run=bool(args.dry_run),
        )
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
        return EXIT_OK if result.ok else EXIT_FAILURE

    if result.ok and result.target == STDOUT_TARGET and not result.dry_run:
        sys.stdout.write(result.text)
        sys.stdout.flush()

    # The module owns stdout when printed there
    stream = sys.stderr if result.target == STDOUT_TARGET else sys.stdout
    _print_human_summary(result, stream)

    return EXIT_OK if result.ok else EXIT_FAILURE

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge of override values into the base configuration.

    Only keys known to the defaults are merged.
    """
    out = dict(base)
    known = get_default_config().keys()
    for k, v in overrides.items():
        if k in known and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: PackResult, stream: TextIO) -> None:
    """
    Print a short report of the pack run.

    Errors always go to stderr.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    title = "Dry run complete." if result.dry_run else "Pack complete."
    print(title, file=stream)
    print(f"Source: {result.source}", file=stream)
    if result.target != STDOUT_TARGET:
        verb = "Would write" if result.dry_run else "Output"
        print(f"{verb}: {result.target}", file=stream)
    print(f"Shape: {result.shape} (variable '{result.var_name}')", file=stream)
    print(f"Entries: {result.file_count} file(s), {result.dir_count} dir(s)", file=stream)
    print(
        f"Size: {result.raw_bytes:,} bytes -> {result.encoded_chars:,} chars "
        f"({result.ratio:.0%})",
        file=stream,
    )

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
