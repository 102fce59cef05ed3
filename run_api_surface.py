#!/usr/bin/env python3
"""
Dart package API-surface extraction.

Resolves a package's public libraries against a declaration snapshot,
extracts every exported class, enum, function, variable and extension, and
writes the result as pretty-printed JSON plus a run report.

Usage:
    python run_api_surface.py --package-dir ./my_pkg --snapshot ./my_pkg.snapshot.yaml
    python run_api_surface.py --package-dir ./my_pkg --snapshot snap.json --output-file out/api.json
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Any

from core.package_manifest import InvalidPackageError
from core.run_artifacts import write_json_document, write_run_report
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from semantic.snapshot import SnapshotEngine, SnapshotError
from surface.extractor import ExtractionError, extract_api_surface_with_stats

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Dart package API-surface extraction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_api_surface.py --package-dir ./my_pkg --snapshot snapshot.yaml\n"
            "  python run_api_surface.py --package-dir ./my_pkg --snapshot snapshot.json "
            "--output-file out/api.json\n"
        ),
    )
    parser.add_argument(
        "--package-dir",
        required=True,
        help="Path to the Dart package root (the directory holding pubspec.yaml).",
    )
    parser.add_argument(
        "--snapshot",
        required=True,
        help="Declaration snapshot (YAML or JSON) produced by the semantic analyzer.",
    )
    parser.add_argument(
        "--output-file",
        default="output/api_surface.json",
        help="Path for the JSON result. Default: output/api_surface.json",
    )
    parser.add_argument(
        "--report-dir",
        default="output/run_reports",
        help="Directory for run reports. Default: output/run_reports",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: INFO",
    )
    return parser.parse_args(argv)


def run(package_dir: str, snapshot_path: str, output_file: str) -> dict[str, Any]:
    """Extract a package's API surface and write it to ``output_file``.

    Returns:
        Report fields: element counts, extraction stats and output path.
    """
    with phase_scope("load"):
        engine = SnapshotEngine.from_file(snapshot_path, package_dir)

    t0 = time.time()
    result, stats = extract_api_surface_with_stats(package_dir, engine)
    elapsed = time.time() - t0

    with phase_scope("write"):
        write_json_document(result.to_dict(), output_file)

    summary = result.summary()
    logger.info("Extraction completed in %.2fs", elapsed)
    logger.info("Classes    : %d", summary["class"])
    logger.info("Enums      : %d", summary["enum"])
    logger.info("Functions  : %d", summary["function"])
    logger.info("Variables  : %d", summary["variable"])
    logger.info("Extensions : %d", summary["extension"])
    logger.info("Wrote %d elements to %s", summary["total"], output_file)

    return {
        "status": "success",
        "output_file": output_file,
        "elapsed_seconds": round(elapsed, 3),
        "summary": summary,
        "stats": stats.to_dict(),
    }


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_structured_logging(level=getattr(logging, args.log_level))
    run_id = set_run_id()

    run_report: dict[str, Any] = {
        "run_id": run_id,
        "pipeline": "api_surface",
        "package_dir": args.package_dir,
        "snapshot": args.snapshot,
        "status": "failed",
    }
    try:
        run_report.update(run(args.package_dir, args.snapshot, args.output_file))
    except (InvalidPackageError, SnapshotError, FileNotFoundError) as exc:
        run_report["error"] = str(exc)
        logger.error("Invalid input: %s", exc)
    except ExtractionError as exc:
        run_report["error"] = str(exc)
        logger.error("Extraction failed: %s", exc)
    except Exception as exc:
        run_report["error"] = str(exc)
        logger.error("API surface run failed: %s", exc, exc_info=True)

    report_path = write_run_report(run_report, run_id, output_dir=args.report_dir)
    logger.info("Run report written: %s", report_path)
    if run_report["status"] != "success":
        sys.exit(1)


if __name__ == "__main__":
    main()
