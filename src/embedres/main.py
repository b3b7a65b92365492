from __future__ import annotations

"""
Main Entry Point and Global Supervisor.

Routes execution to the CLI and installs a global exception hook so a
crash is logged and reported on stderr with a non-zero exit code.
"""

import logging
import os
import sys
import traceback
from typing import Any, Type

# Allow running this file directly from a source checkout
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if not getattr(sys, "frozen", False):
    SRC_DIR = os.path.dirname(BASE_DIR)
    if SRC_DIR not in sys.path:
        sys.path.insert(0, SRC_DIR)


def global_exception_handler(exctype: Type[BaseException], value: BaseException, tb: Any) -> None:
    """
    Report an unhandled exception and terminate.

    Args:
        exctype: Exception class.
        value: Exception instance.
        tb: Traceback object.
    """
    if issubclass(exctype, KeyboardInterrupt):
        print("Interrupted.", file=sys.stderr)
        sys.exit(130)

    stack_trace = "".join(traceback.format_exception(exctype, value, tb))

    logger = logging.getLogger("embedres.supervisor")
    logger.critical(f"FATAL EXCEPTION DETECTED: {value}\n{stack_trace}")

    print("\n" + "=" * 80, file=sys.stderr)
    print("CRITICAL ERROR (EMBEDRES)", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(stack_trace, file=sys.stderr)
    sys.exit(1)


def main() -> int:
    """Run the CLI under the global supervisor."""
    sys.excepthook = global_exception_handler
    from embedres.interface.cli.app import main as cli_main
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
