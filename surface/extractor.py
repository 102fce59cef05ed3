"""
High-level orchestrator for Dart API-surface extraction.

Validates the package root, discovers the public entry libraries, aggregates
their exports through the semantic engine and extracts one element model per
exported declaration.
"""

import logging
from typing import Dict, Optional, Sequence, Tuple

from core.package_manifest import load_package_manifest, resolve_strict_manifest
from core.structured_logging import package_scope, phase_scope
from semantic.engine import AnalysisEngine
from surface.aggregator import aggregate_exports
from surface.config import EXTERNAL_PACKAGES
from surface.discovery import discover_public_libraries
from surface.elements import ElementExtractor
from surface.models import AnalysisResult
from surface.type_builder import TypeReferenceBuilder

logger = logging.getLogger(__name__)


class ExtractionError(RuntimeError):
    """Raised when extraction fails unexpectedly after input validation."""


class ExtractionStats:
    """Statistics for an extraction run."""

    def __init__(self):
        self.files_discovered = 0
        self.files_resolved = 0
        self.files_failed = 0
        self.elements_extracted = 0
        self.elements_skipped = 0
        self.type_anomalies = 0

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_discovered": self.files_discovered,
            "files_resolved": self.files_resolved,
            "files_failed": self.files_failed,
            "elements_extracted": self.elements_extracted,
            "elements_skipped": self.elements_skipped,
            "type_anomalies": self.type_anomalies,
        }

    def __str__(self) -> str:
        return (
            f"ExtractionStats(discovered={self.files_discovered}, "
            f"resolved={self.files_resolved}, failed={self.files_failed}, "
            f"elements={self.elements_extracted}, skipped={self.elements_skipped}, "
            f"type_anomalies={self.type_anomalies})"
        )


def extract_api_surface_with_stats(
    source_root: str,
    engine: AnalysisEngine,
    strict_manifest: Optional[bool] = None,
    external_packages: Sequence[str] = EXTERNAL_PACKAGES,
) -> Tuple[AnalysisResult, ExtractionStats]:
    """Extract the public API surface of a package.

    Args:
        source_root: Package root holding ``pubspec.yaml`` and ``lib/``.
        engine: Semantic engine that resolves the package's libraries.
        strict_manifest: Require a package name in the manifest. Defaults to
            ``API_SURFACE_STRICT_MANIFEST``.
        external_packages: Packages whose types keep their own URI as
            defining module.

    Returns:
        A tuple of (result, stats). Elements are ordered by identity key.

    Raises:
        InvalidPackageError: If the root or its manifest is missing or invalid.
        ExtractionError: If aggregation or extraction fails unexpectedly.

    Example:
        >>> engine = SnapshotEngine.from_file("snapshot.yaml", "path/to/pkg")
        >>> result, stats = extract_api_surface_with_stats("path/to/pkg", engine)
        >>> print(f"{stats.elements_extracted} elements from {stats.files_resolved} libraries")
    """
    strict = resolve_strict_manifest() if strict_manifest is None else strict_manifest
    manifest = load_package_manifest(source_root, strict=strict)
    stats = ExtractionStats()

    with package_scope(manifest.name):
        lib_dir = str(manifest.lib_dir)
        with phase_scope("discovery"):
            files = discover_public_libraries(lib_dir)
        stats.files_discovered = len(files)

        if not files:
            logger.warning("No public libraries found for package %s", manifest.name)
            return AnalysisResult(elements=[]), stats

        try:
            with phase_scope("aggregation"):
                aggregation = aggregate_exports(files, engine, manifest.name, lib_dir)
            stats.files_resolved = aggregation.files_resolved
            stats.files_failed = aggregation.files_failed

            with phase_scope("extraction"):
                types = TypeReferenceBuilder(aggregation.entry_libraries, external_packages)
                extractor = ElementExtractor(types)
                elements = []
                for exported in aggregation.sorted_elements():
                    element = exported.element
                    if not element.name or element.is_private:
                        stats.elements_skipped += 1
                        continue
                    model = extractor.extract(element, exported.sorted_paths())
                    if model is None:
                        stats.elements_skipped += 1
                        continue
                    elements.append(model)
                stats.elements_extracted = len(elements)
                stats.type_anomalies = types.anomalies
        except Exception as e:
            logger.error("Extraction failed for %s: %s", manifest.name, e, exc_info=True)
            raise ExtractionError(f"API surface extraction failed for {manifest.name}: {e}") from e

        logger.info("Extraction complete: %s", stats)
    return AnalysisResult(elements=elements), stats


def extract_api_surface(source_root: str, engine: AnalysisEngine) -> AnalysisResult:
    """Extract the public API surface of a package.

    See ``extract_api_surface_with_stats``.
    """
    result, _ = extract_api_surface_with_stats(source_root, engine)
    return result
