"""
Port to the external semantic analysis engine.

The extraction core only ever talks to an ``AnalysisEngine``: it hands over a
library file and receives a resolved export namespace built from
``ElementHandle`` objects. How the engine parses and resolves source is not
the core's concern.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from semantic.handles import ElementHandle


class LibraryResolutionError(RuntimeError):
    """Raised when the engine cannot resolve a single library file."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"Cannot resolve {file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason


@dataclass
class ResolvedLibrary:
    """A fully resolved library and the names it makes visible to importers.

    Attributes:
        uri: Canonical library URI reported by the engine.
        path: Source file the library was resolved from.
        export_namespace: Name to element mapping after the engine applied its
            own export/show/hide semantics. Top-level variables appear through
            their getter (``name``) and setter (``name=``) accessors.
    """

    uri: str
    path: str
    export_namespace: Dict[str, ElementHandle] = field(default_factory=dict)

    def get(self, name: str) -> Optional[ElementHandle]:
        return self.export_namespace.get(name)

    def items(self) -> Iterator[Tuple[str, ElementHandle]]:
        return iter(self.export_namespace.items())


class AnalysisEngine(ABC):
    """Resolves library files into export namespaces."""

    @abstractmethod
    def resolve(self, file_path: Path) -> ResolvedLibrary:
        """Resolve one library file.

        Must be idempotent and must not modify the source.

        Raises:
            LibraryResolutionError: If the file cannot be resolved.
        """
