from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides understood by the pipeline.
"""

import argparse
from typing import Any, Dict, List, Optional

from embedres import __version__
from embedres.domain.constants import (
    APP_NAME,
    SHAPE_INDEPENDENT,
    STDOUT_TARGET,
)

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the embedres CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        description=(
            "Pack a file or directory into a Python module that exposes it "
            "as a read-only embedded filesystem."
        ),
    )

    p.add_argument(
        "source",
        nargs="?",
        default=None,
        help="File or directory to pack (default: saved config or current directory).",
    )

    # --- Output ---
    p.add_argument(
        "-o", "--output",
        dest="output",
        default=None,
        help=f"Target .py file, or '{STDOUT_TARGET}' to print the module (default).",
    )
    p.add_argument(
        "--var",
        dest="var_name",
        default=None,
        help="Module variable bound to the filesystem (default: ASSETS).",
    )
    p.add_argument(
        "--standalone",
        action="store_true",
        help="Emit a self-contained module that does not import embedres.",
    )
    p.add_argument(
        "--chunk-width",
        dest="chunk_width",
        type=int,
        default=None,
        help="Line width of encoded payloads (default: 76).",
    )

    # --- Walking & Filtering ---
    p.add_argument(
        "--max-depth",
        dest="max_depth",
        type=int,
        default=None,
        help="Maximum directory depth; 0 walks without limit (default: 10).",
    )
    p.add_argument(
        "-i", "--include",
        dest="include_patterns",
        action="append",
        default=None,
        help="Regex forcing inclusion of matching '/rel/path' entries. Comma separated, repeatable.",
    )
    p.add_argument(
        "-e", "--exclude",
        dest="exclude_patterns",
        action="append",
        default=None,
        help="Regex excluding matching entries and their subtrees. Comma separated, repeatable.",
    )
    p.add_argument(
        "--gitignore",
        action="store_true",
        help="Also exclude names matched by the source root's .gitignore.",
    )

    # --- Runtime Constraints and Safety ---
    p.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace an existing output file.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Walk and render without writing anything.",
    )

    # --- Configuration and Diagnostics ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Store the effective settings as the new saved configuration.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the pack result as JSON.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        nargs="?",
        const="",
        default=None,
        help="Also write diagnostics to a rotating log file (default location: user data dir).",
    )
    p.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Only options given on the command line appear in the result.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    for key in ("source", "output", "var_name", "chunk_width", "max_depth"):
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value

    if args.standalone:
        overrides["shape"] = SHAPE_INDEPENDENT

    if args.include_patterns is not None:
        overrides["include_patterns"] = _split_csv_all(args.include_patterns)
    if args.exclude_patterns is not None:
        overrides["exclude_patterns"] = _split_csv_all(args.exclude_patterns)
    if args.gitignore:
        overrides["respect_gitignore"] = True

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> List[str]:
    """Convert a comma-separated string into a list of trimmed items."""
    if value is None:
        return []
    return [x.strip() for x in value.split(",") if x.strip()]


def _split_csv_all(values: List[str]) -> List[str]:
    out: List[str] = []
    for value in values:
        out.extend(_split_csv(value))
    return out

