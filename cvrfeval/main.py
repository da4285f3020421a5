"""CLI entry point: evaluate CVRF documents against a target platform CPE."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from .constants import RESULTS_JSON, RESULTS_XML, VULNERABLE_TXT
from .exceptions import CvrfError
from .exporters.json_exporter import export_json
from .exporters.text_exporter import export_text
from .exporters.xml_exporter import export_index, export_model, write_tree
from .models import DocumentResult, RunReport
from .session import export_results, index_results, load_model
from .source import Source

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Cross-reference CVRF vulnerability documents against a platform CPE.",
    )
    parser.add_argument(
        "source",
        type=str,
        help="CVRF document, or with --index an Index document or manifest of document paths",
    )
    parser.add_argument(
        "--cpe",
        type=str,
        required=True,
        help="Target platform CPE, matched against product tree branch names",
    )
    parser.add_argument(
        "--index",
        action="store_true",
        help="Treat the source as an index of several documents",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="results",
        help="Output directory for generated files (default: results)",
    )
    parser.add_argument(
        "--model-out",
        type=str,
        default=None,
        metavar="PATH",
        help="Also write the parsed document (or index) back out as CVRF XML",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def _evaluate_document(source: Source, args: argparse.Namespace, output_dir: Path) -> list[DocumentResult]:
    try:
        model = load_model(source)
        result = export_results(source, output_dir / RESULTS_XML, args.cpe, model)
    except CvrfError as e:
        logger.error("Failed to evaluate %s: %s", source.readable_origin, e)
        return [DocumentResult(origin=source.readable_origin, error=str(e))]
    if args.model_out:
        export_model(model, Path(args.model_out))
    return [result]


def _evaluate_index(source: Source, args: argparse.Namespace, output_dir: Path) -> list[DocumentResult]:
    try:
        results = index_results(source, args.cpe)
    except CvrfError as e:
        logger.error("Failed to evaluate index %s: %s", source.readable_origin, e)
        return [DocumentResult(origin=source.readable_origin, error=str(e))]
    write_tree(results.element, output_dir / RESULTS_XML)
    if args.model_out:
        export_index(results.index, Path(args.model_out))
    return results.documents


def run(args: argparse.Namespace) -> int:
    """Main orchestrator. Returns exit code."""
    # Setup logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    output_dir = Path(args.output_dir)

    logger.info("Evaluating %s against %s", args.source, args.cpe)

    try:
        source = Source.from_file(args.source)
    except OSError as e:
        logger.error("Cannot read %s: %s", args.source, e)
        return 1

    if args.index:
        documents = _evaluate_index(source, args, output_dir)
    else:
        documents = _evaluate_document(source, args, output_dir)

    errors = [f"{d.origin}: {d.error}" for d in documents if d.error]
    succeeded = len(documents) - len(errors)

    report = RunReport(
        cpe=args.cpe,
        documents=documents,
        total_documents=len(documents),
        total_succeeded=succeeded,
        total_failed=len(errors),
        errors=errors,
        run_timestamp=timestamp,
    )

    logger.info(
        "Evaluation complete: %d documents evaluated, %d failed",
        succeeded, len(errors),
    )

    # Export
    export_json(report, output_dir / RESULTS_JSON)
    export_text(report, output_dir / VULNERABLE_TXT)

    logger.info("Output written to %s/", output_dir)

    # Exit code: 0 if any succeeded, 1 if all failed
    if succeeded == 0:
        logger.error("No document could be evaluated")
        return 1
    return 0


def main() -> None:
    args = parse_args()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
