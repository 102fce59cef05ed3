"""
Semantic engine port.

Resolved element/type handles, the ``AnalysisEngine`` interface the extraction
core consumes, and a snapshot-backed engine implementation.
"""

from semantic.handles import (
    FOUNDATION_LIBRARY_URI,
    INVALID_TYPE_DISPLAY,
    ElementHandle,
    ElementKind,
    ParameterHandle,
    TypeHandle,
    TypeKind,
)
from semantic.engine import AnalysisEngine, LibraryResolutionError, ResolvedLibrary
from semantic.snapshot import SnapshotEngine, SnapshotError, load_snapshot_document

__all__ = [
    # Handles
    "FOUNDATION_LIBRARY_URI",
    "INVALID_TYPE_DISPLAY",
    "ElementHandle",
    "ElementKind",
    "ParameterHandle",
    "TypeHandle",
    "TypeKind",
    # Engine port
    "AnalysisEngine",
    "LibraryResolutionError",
    "ResolvedLibrary",
    # Snapshot engine
    "SnapshotEngine",
    "SnapshotError",
    "load_snapshot_document",
]
