"""Package manifest (``pubspec.yaml``) validation and loading.

Provides the input checks that must pass before any extraction starts: the
package root exists, it carries a manifest, and the manifest names the
package so library URIs can be built.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "pubspec.yaml"
LIB_DIR_NAME = "lib"


class InvalidPackageError(ValueError):
    """Raised when a package root cannot be analyzed at all."""


@dataclass(frozen=True)
class PackageManifest:
    """Subset of ``pubspec.yaml`` used by the extractor."""

    name: str
    root: Path
    version: str | None = None
    description: str | None = None

    @property
    def lib_dir(self) -> Path:
        return self.root / LIB_DIR_NAME


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_manifest(default: bool = False) -> bool:
    """Resolve strict manifest mode from ``API_SURFACE_STRICT_MANIFEST`` env."""
    return _env_flag("API_SURFACE_STRICT_MANIFEST", default=default)


def _read_manifest_payload(manifest_path: Path) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise InvalidPackageError(
            f"Failed to parse {MANIFEST_FILE_NAME} at {manifest_path}: {exc}"
        ) from exc
    except OSError as exc:
        raise InvalidPackageError(
            f"Cannot read {MANIFEST_FILE_NAME} at {manifest_path}: {exc}"
        ) from exc

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidPackageError(
            f"Unexpected {MANIFEST_FILE_NAME} payload type: {type(payload).__name__}"
        )
    return payload


def load_package_manifest(package_root: str | os.PathLike, strict: bool = False) -> PackageManifest:
    """Validate a package root and load its manifest.

    In non-strict mode a manifest without a ``name`` falls back to the root
    directory name with a warning. In strict mode it is rejected.

    Raises:
        InvalidPackageError: If the root is missing, is not a directory, has no
            manifest, or the manifest cannot be parsed.
    """
    root = Path(package_root).resolve()
    if not root.exists():
        raise InvalidPackageError(f"Package path does not exist: {root}")
    if not root.is_dir():
        raise InvalidPackageError(f"Package path is not a directory: {root}")

    manifest_path = root / MANIFEST_FILE_NAME
    if not manifest_path.is_file():
        raise InvalidPackageError(
            f"Package path does not contain a {MANIFEST_FILE_NAME} file: {root}"
        )

    payload = _read_manifest_payload(manifest_path)
    name = str(payload.get("name") or "").strip()
    if not name:
        msg = f"{MANIFEST_FILE_NAME} at {manifest_path} has no package name"
        if strict:
            raise InvalidPackageError(msg)
        name = root.name
        logger.warning("%s; using directory name '%s'", msg, name)

    version = payload.get("version")
    description = payload.get("description")
    return PackageManifest(
        name=name,
        root=root,
        version=str(version) if version is not None else None,
        description=str(description) if description is not None else None,
    )
