"""
Public surface discovery.

A Dart package exposes every library under ``lib/`` except implementation
files under a ``src`` directory (``lib/src/**``, ``lib/widgets/src/**``) and
build_runner output (``*.g.dart``).
"""

import logging
import os
from pathlib import Path
from typing import List

from surface.config import GENERATED_SUFFIX, PRIVATE_DIR_NAME, SOURCE_EXTENSION

logger = logging.getLogger(__name__)


def is_public_library(relative_path: str) -> bool:
    """Check a ``lib``-relative path against the public-surface policy.

    Args:
        relative_path: Path relative to ``lib/``, either separator style.

    Returns:
        True if the file is part of the public surface.
    """
    parts = relative_path.replace("\\", "/").split("/")
    file_name = parts[-1]
    if not file_name.endswith(SOURCE_EXTENSION) or file_name.endswith(GENERATED_SUFFIX):
        return False
    return PRIVATE_DIR_NAME not in parts[:-1]


def discover_public_libraries(lib_dir: str) -> List[Path]:
    """Find the entry libraries of a package.

    Args:
        lib_dir: The package's ``lib`` directory.

    Returns:
        Absolute paths, sorted lexicographically by ``lib``-relative path.
        Empty when ``lib_dir`` does not exist.

    Example:
        >>> [p.name for p in discover_public_libraries("pkg/lib")]
        ['pkg.dart', 'widgets.dart']
    """
    root = os.path.abspath(lib_dir)
    if not os.path.isdir(root):
        logger.warning("Library directory not found: %s", root)
        return []

    found = []
    for current, dirs, files in os.walk(root):
        # Nothing below a private directory can be public.
        dirs[:] = sorted(d for d in dirs if d != PRIVATE_DIR_NAME)
        for name in files:
            relative = os.path.relpath(os.path.join(current, name), root).replace(os.sep, "/")
            if is_public_library(relative):
                found.append(relative)

    found.sort()
    logger.info("Discovered %d public libraries in %s", len(found), root)
    return [Path(root, *relative.split("/")) for relative in found]
