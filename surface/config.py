"""
Configuration constants for Dart API-surface extraction.

Naming conventions of the Dart package layout plus a few env-driven options.
Element-model tokens (private prefix, setter suffix, ``dart:core``) belong to
the analyzer and live in ``semantic.handles``. Environment variables are
loaded from a .env file at module import time via python-dotenv.
"""

import os
from typing import FrozenSet, Tuple

from dotenv import load_dotenv

from semantic.handles import UNNAMED_PARAMETER

# ---------------------------------------------------------------------------
# Load .env file (idempotent; does nothing if already loaded or missing)
# ---------------------------------------------------------------------------
load_dotenv()

# ---------------------------------------------------------------------------
# Package layout conventions
# ---------------------------------------------------------------------------
PRIVATE_DIR_NAME: str = "src"          # lib/src/**, lib/foo/src/** are implementation
SOURCE_EXTENSION: str = ".dart"
GENERATED_SUFFIX: str = ".g.dart"      # build_runner output

# ---------------------------------------------------------------------------
# Output model conventions
# ---------------------------------------------------------------------------
UNNAMED_PARAMETER_NAMES: FrozenSet[str] = frozenset({"", UNNAMED_PARAMETER})
FUNCTION_TYPE_NAME: str = "Function"

# ---------------------------------------------------------------------------
# External ecosystem: types from these packages (and every dart: library)
# keep their own canonical location instead of being attributed to one of
# the package's entry libraries.
# ---------------------------------------------------------------------------
DEFAULT_EXTERNAL_PACKAGES: Tuple[str, ...] = ("flutter",)


def _parse_external_packages(raw: str) -> Tuple[str, ...]:
    """Parse a comma-separated package list, e.g. ``flutter,flutter_test``."""
    names = []
    for item in raw.split(","):
        name = item.strip()
        if name and name not in names:
            names.append(name)
    return tuple(names)


EXTERNAL_PACKAGES: Tuple[str, ...] = DEFAULT_EXTERNAL_PACKAGES + tuple(
    name
    for name in _parse_external_packages(os.getenv("API_SURFACE_EXTERNAL_PACKAGES", ""))
    if name not in DEFAULT_EXTERNAL_PACKAGES
)
