"""Library URI and identity contract shared by the semantic and surface layers."""

from __future__ import annotations

from pathlib import PurePosixPath

IDENTITY_KEY_SEPARATOR = "::"
PACKAGE_SCHEME = "package:"
FOUNDATION_SCHEME = "dart:"


def make_package_uri(package_name: str, relative_path: str) -> str:
    """Build the importable ``package:`` URI for a file under ``lib/``.

    Args:
        package_name: Name declared in the package manifest.
        relative_path: Path of the library relative to ``lib/``. OS-specific
            separators are normalized to ``/``.

    Returns:
        URI such as ``package:my_pkg/widgets/button.dart``.

    Raises:
        ValueError: If the package name is empty or the path escapes ``lib/``.
    """
    name = package_name.strip()
    if not name:
        raise ValueError("package_name must be non-empty")

    posix = relative_path.replace("\\", "/").strip("/")
    parts = PurePosixPath(posix).parts
    if not parts or ".." in parts:
        raise ValueError(f"Invalid library path relative to lib/: {relative_path}")
    return f"{PACKAGE_SCHEME}{name}/{'/'.join(parts)}"


def package_name_of(uri: str | None) -> str | None:
    """Return the package name of a ``package:`` URI, or None for other schemes."""
    if not uri or not uri.startswith(PACKAGE_SCHEME):
        return None
    rest = uri[len(PACKAGE_SCHEME):]
    name = rest.split("/", 1)[0]
    return name or None


def is_foundation_uri(uri: str | None) -> bool:
    """True for the SDK's ``dart:`` libraries."""
    return bool(uri) and uri.startswith(FOUNDATION_SCHEME)


def build_identity_key(library_uri: str | None, name: str, kind: str) -> str:
    """Build the stable identity key for a declaration.

    The key stands in for object identity across namespaces: the same
    declaration re-exported under several names or paths always yields the
    same key.
    """
    return IDENTITY_KEY_SEPARATOR.join((library_uri or "", name, kind))

