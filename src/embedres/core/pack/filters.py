from __future__ import annotations

"""
Path Filtering.

Builds the walk predicate from include/exclude regular expressions and,
optionally, the source root's .gitignore. Patterns are searched against
the entry's path relative to the walk root, with a leading '/'
(e.g. '/docs/readme.md').

Decision order:
  1. Matches any include pattern -> accepted.
  2. Matches any exclude pattern -> rejected.
  3. Otherwise -> accepted.
"""

import fnmatch
import logging
import os
import posixpath
import re
from typing import Callable, Iterable, List, Optional

from embedres.domain.constants import DEFAULT_EXCLUDE_PATTERNS
from embedres.domain.pack_models import FilterError

logger = logging.getLogger(__name__)

PathPredicate = Callable[[str, os.stat_result], bool]

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

def default_exclude_patterns() -> List[str]:
    """
    Return default exclusion patterns.

    Excludes:
      - VCS and editor directories (.git, .hg, .svn, .idea, .vscode)
      - __pycache__ and node_modules
      - Compiled Python files and .DS_Store
    """
    return list(DEFAULT_EXCLUDE_PATTERNS)


def accept_all(path: str, info: os.stat_result) -> bool:
    return True

# -----------------------------------------------------------------------------
# Compilation & Matching
# -----------------------------------------------------------------------------

def compile_patterns(patterns: Iterable[str]) -> List[re.Pattern]:
    """
    Compile a list of regex strings into Pattern objects.

    Args:
        patterns: List of regex strings.

    Returns:
        List[re.Pattern]: Compiled patterns, in input order.

    Raises:
        FilterError: If any pattern is not a valid regular expression.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error as e:
            raise FilterError(f"Invalid pattern {p!r}: {e}", cause=e) from e
    return compiled


def matches_any(text: str, compiled_patterns: List[re.Pattern]) -> bool:
    """True if at least one pattern is found anywhere in `text`."""
    return any(rx.search(text) for rx in compiled_patterns)

# -----------------------------------------------------------------------------
# Predicate Builder
# -----------------------------------------------------------------------------

def build_predicate(
        include_patterns: Iterable[str] = (),
        exclude_patterns: Iterable[str] = (),
        gitignore_root: Optional[str] = None,
) -> PathPredicate:
    """
    Compile filter settings into a walk predicate.

    Args:
        include_patterns: Regexes that force acceptance.
        exclude_patterns: Regexes that reject an entry (and its subtree).
        gitignore_root: Directory whose .gitignore adds base-name excludes.

    Returns:
        PathPredicate: Callable taking ('/rel/path', stat_result).

    Raises:
        FilterError: If a pattern is malformed or .gitignore is unreadable.
    """
    include_rx = compile_patterns(include_patterns)
    exclude_rx = compile_patterns(exclude_patterns)
    name_rx: List[re.Pattern] = []

    if gitignore_root:
        name_rx = compile_patterns(load_gitignore_patterns(gitignore_root))
        logger.debug(f"Loaded {len(name_rx)} .gitignore rule(s) from {gitignore_root}")

    if not (include_rx or exclude_rx or name_rx):
        return accept_all

    def predicate(path: str, info: os.stat_result) -> bool:
        if matches_any(path, include_rx):
            return True
        if matches_any(path, exclude_rx):
            return False
        if name_rx and matches_any(posixpath.basename(path), name_rx):
            return False
        return True

    return predicate

# -----------------------------------------------------------------------------
# Gitignore Integration
# -----------------------------------------------------------------------------

def load_gitignore_patterns(root_path: str) -> List[str]:
    """
    Parse .gitignore at root_path into regex strings.

    Only plain glob lines are honored: comments and blank lines are
    skipped, and negations ('!') are ignored with a debug message. Each glob is
    matched against entry base names.

    Args:
        root_path: The directory containing .gitignore.

    Returns:
        List[str]: Regex strings equivalent to the gitignore rules.

    Raises:
        FilterError: If the file exists but cannot be read.
    """
    gitignore_path = os.path.join(root_path, ".gitignore")
    if not os.path.isfile(gitignore_path):
        return []

    regex_patterns: List[str] = []
    try:
        with open(gitignore_path, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise FilterError(f"Cannot read {gitignore_path}: {e}", path=gitignore_path, cause=e) from e

    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("!"):
            logger.debug(f"Ignoring unsupported .gitignore negation: {line}")
            continue
        regex = _gitignore_to_regex(line)
        if regex:
            regex_patterns.append(regex)

    return regex_patterns


def _gitignore_to_regex(glob_pattern: str) -> str:
    """Translate a gitignore glob ('*.log', 'build/') into a regex string."""
    name = posixpath.basename(glob_pattern.strip("/"))
    if not name:
        return ""
    # Anchored: matches_any searches
    return "^" + fnmatch.translate(name)
