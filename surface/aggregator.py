"""
Export namespace aggregator.

Resolves every public entry library and groups what they export by
declaration identity, collecting the ``package:`` paths each declaration can
be imported from.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence, Set

from core.uri_contract import make_package_uri
from semantic.engine import AnalysisEngine, LibraryResolutionError, ResolvedLibrary
from semantic.handles import PRIVATE_PREFIX, ElementHandle, ElementKind

logger = logging.getLogger(__name__)


@dataclass
class ExportedElement:
    """A declaration and the entry paths that export it."""

    element: ElementHandle
    importable_from: Set[str] = field(default_factory=set)

    def sorted_paths(self) -> List[str]:
        return sorted(self.importable_from)


@dataclass
class ExportAggregation:
    """Result of resolving all entry libraries.

    Attributes:
        elements: Exported declarations keyed by identity key.
        entry_libraries: Resolved entry libraries in discovery order.
        files_resolved: Number of files the engine resolved.
        files_failed: Number of files skipped after a resolution failure.
    """

    elements: Dict[str, ExportedElement] = field(default_factory=dict)
    entry_libraries: List[ResolvedLibrary] = field(default_factory=list)
    files_resolved: int = 0
    files_failed: int = 0

    def add(self, element: ElementHandle, importable_path: str) -> None:
        key = element.identity_key
        entry = self.elements.get(key)
        if entry is None:
            entry = ExportedElement(element=element)
            self.elements[key] = entry
        elif entry.element is not element:
            logger.debug("Identity key %s maps to two handles; keeping the first", key)
        entry.importable_from.add(importable_path)

    def sorted_elements(self) -> List[ExportedElement]:
        return [self.elements[key] for key in sorted(self.elements)]


def importable_path(file_path: Path, lib_dir: str, package_name: str) -> str:
    """``package:`` URI a consumer uses to import ``file_path``."""
    relative = os.path.relpath(os.path.abspath(file_path), os.path.abspath(lib_dir))
    return make_package_uri(package_name, relative)


def declaration_of(element: ElementHandle) -> ElementHandle:
    """Redirect top-level accessors to the variable they back."""
    if element.is_accessor and element.variable is not None:
        if element.variable.kind is ElementKind.TOP_LEVEL_VARIABLE:
            return element.variable
    return element


def aggregate_exports(
    files: Sequence[Path],
    engine: AnalysisEngine,
    package_name: str,
    lib_dir: str,
) -> ExportAggregation:
    """Resolve entry libraries and group their exports by identity.

    Args:
        files: Entry libraries in discovery order.
        engine: Semantic engine to resolve them with.
        package_name: Package name for ``package:`` URIs.
        lib_dir: The package's ``lib`` directory.

    Returns:
        The aggregation. Files that fail to resolve are logged and skipped.
    """
    aggregation = ExportAggregation()

    for file_path in files:
        path = importable_path(file_path, lib_dir, package_name)
        try:
            library = engine.resolve(file_path)
        except LibraryResolutionError as e:
            logger.warning("Skipping %s: %s", path, e.reason)
            aggregation.files_failed += 1
            continue
        except Exception as e:
            logger.error("Unexpected error resolving %s: %s", path, e, exc_info=True)
            aggregation.files_failed += 1
            continue

        aggregation.files_resolved += 1
        aggregation.entry_libraries.append(library)

        exported = 0
        for name, element in library.items():
            if name.startswith(PRIVATE_PREFIX):
                continue
            aggregation.add(declaration_of(element), path)
            exported += 1
        logger.debug("%s exports %d public names", path, exported)

    logger.info(
        "Aggregated %d exported declarations from %d libraries (%d failed)",
        len(aggregation.elements),
        aggregation.files_resolved,
        aggregation.files_failed,
    )
    return aggregation
