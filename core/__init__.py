"""Core shared contracts and utilities."""

from core.uri_contract import (
    IDENTITY_KEY_SEPARATOR,
    build_identity_key,
    is_foundation_uri,
    make_package_uri,
    package_name_of,
)
from core.structured_logging import (
    configure_structured_logging,
    get_run_id,
    package_scope,
    phase_scope,
    set_run_id,
)
from core.package_manifest import (
    MANIFEST_FILE_NAME,
    InvalidPackageError,
    PackageManifest,
    load_package_manifest,
    resolve_strict_manifest,
)
from core.run_artifacts import write_json_document, write_run_report

__all__ = [
    "IDENTITY_KEY_SEPARATOR",
    "build_identity_key",
    "is_foundation_uri",
    "make_package_uri",
    "package_name_of",
    "configure_structured_logging",
    "get_run_id",
    "package_scope",
    "phase_scope",
    "set_run_id",
    "MANIFEST_FILE_NAME",
    "InvalidPackageError",
    "PackageManifest",
    "load_package_manifest",
    "resolve_strict_manifest",
    "write_json_document",
    "write_run_report",
]
