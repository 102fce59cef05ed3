"""Build throwaway Dart packages plus matching declaration snapshots for tests."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from typing import Any

from semantic.engine import ResolvedLibrary
from semantic.handles import ElementHandle
from semantic.snapshot import SnapshotEngine
from surface.extractor import ExtractionStats, extract_api_surface_with_stats
from surface.models import AnalysisResult

PACKAGE_NAME = "demo"


def library_path(library: dict[str, Any]) -> str:
    """Package-relative source path of a snapshot library entry."""
    if library.get("path"):
        return str(library["path"])
    _, _, rest = library["uri"][len("package:"):].partition("/")
    return f"lib/{rest}"


def write_package(
    root: Path,
    libraries: list[dict[str, Any]],
    name: str = PACKAGE_NAME,
    manifest: bool = True,
    extra_files: tuple[str, ...] = (),
) -> Path:
    """Create a package tree with a stub source file per library."""
    (root / "lib").mkdir(parents=True, exist_ok=True)
    if manifest:
        (root / "pubspec.yaml").write_text(
            f"name: {name}\nversion: 1.0.0\ndescription: Test package.\n",
            encoding="utf-8",
        )
    for relative in [library_path(lib) for lib in libraries] + list(extra_files):
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("// generated for tests\n", encoding="utf-8")
    return root


class PackageTestCase(unittest.TestCase):
    """Test case owning a temporary package root per test."""

    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name) / PACKAGE_NAME

    def make_package(self, libraries: list[dict[str, Any]], **kwargs: Any) -> Path:
        return write_package(self.root, libraries, **kwargs)

    def make_engine(self, libraries: list[dict[str, Any]], **kwargs: Any) -> SnapshotEngine:
        self.make_package(libraries, **kwargs)
        return SnapshotEngine({"libraries": libraries}, str(self.root))

    def resolve(self, libraries: list[dict[str, Any]], uri: str) -> ResolvedLibrary:
        """Resolve one library of a freshly written package."""
        engine = self.make_engine(libraries)
        target = next(lib for lib in libraries if lib["uri"] == uri)
        return engine.resolve(self.root / library_path(target))

    def declaration(self, libraries: list[dict[str, Any]], uri: str, name: str) -> ElementHandle:
        element = self.resolve(libraries, uri).get(name)
        self.assertIsNotNone(element, f"{name} not exported by {uri}")
        return element

    def extract(
        self,
        libraries: list[dict[str, Any]],
        **kwargs: Any,
    ) -> tuple[AnalysisResult, ExtractionStats]:
        engine = self.make_engine(libraries, **kwargs)
        return extract_api_surface_with_stats(str(self.root), engine, strict_manifest=True)
