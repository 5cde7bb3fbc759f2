"""Command-line interface for parsing OCR text files and CSV export.

Provides subcommands for parsing a single OCR text file to JSON and for
parsing a folder of text files into one CSV row per document.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path

from billscan.pipeline.parser import DocumentParser, DocumentType
from billscan.utils.config import load_config
from billscan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.txt",)
_META_COLUMNS = [
    "filename",
    "status",
    "processing_time_s",
    "confidence",
    "error",
]


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all OCR text files in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of text file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def _flatten(record: dict[str, object]) -> dict[str, object]:
    """Flatten a record dict into scalar CSV columns."""
    row: dict[str, object] = {}
    for key, value in record.items():
        if key == "items":
            row["item_count"] = len(value)
        elif isinstance(value, dict):
            for sub_key, sub_value in value.items():
                row[f"{key}_{sub_key}"] = sub_value
        else:
            row[key] = value
    return row


def process_folder(
    input_dir: Path,
    output_csv: Path,
    document_type: str = DocumentType.BILL,
    verbose: bool = False,
    parser: DocumentParser | None = None,
) -> dict[str, int]:
    """Parse every text file in a folder and export results to CSV.

    Args:
        input_dir: Directory containing OCR text files.
        output_csv: Path for the output CSV file.
        document_type: ``bill`` or ``receipt``.
        verbose: Whether to print per-file progress.
        parser: Parser to use, built from the default config when omitted.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    parser = parser or DocumentParser(load_config())

    files = _find_documents(input_dir)
    if not files:
        logger.warning("No text files found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d documents to process", len(files))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            result = _process_single_file(file_path, parser, document_type)
            result["processing_time_s"] = round(time.time() - start_time, 3)
            results.append(result)
            successful += 1
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            results.append(
                {
                    "filename": file_path.name,
                    "status": "failed",
                    "error": str(exc),
                }
            )
            failed += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _process_single_file(
    file_path: Path, parser: DocumentParser, document_type: str
) -> dict[str, object]:
    """Parse one OCR text file into a flat CSV row.

    Args:
        file_path: Path to the text file.
        parser: Document parser instance.
        document_type: ``bill`` or ``receipt``.

    Returns:
        Dictionary of extraction results.
    """
    text = file_path.read_text(encoding="utf-8")
    record = parser.parse(text, document_type)

    result: dict[str, object] = {
        "filename": file_path.name,
        "status": "success",
        "error": None,
    }
    result.update(_flatten(record.to_dict()))
    return result


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write extraction results to a CSV file.

    Args:
        results: List of result dictionaries.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    all_keys: set[str] = set()
    for r in results:
        all_keys.update(r.keys())

    field_columns = sorted(all_keys - set(_META_COLUMNS))
    columns = [c for c in _META_COLUMNS if c in all_keys] + field_columns

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch summary to stdout."""
    print(f"\n{'=' * 50}")
    print("Batch Parsing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def extract_single(
    file_path: Path,
    document_type: str = DocumentType.BILL,
    parser: DocumentParser | None = None,
) -> dict[str, object]:
    """Parse a single OCR text file and return structured results.

    Args:
        file_path: Path to the text file.
        document_type: ``bill`` or ``receipt``.
        parser: Parser to use, built from the default config when omitted.

    Returns:
        Dictionary with filename, document type and the parsed record.
    """
    parser = parser or DocumentParser(load_config())
    record = parser.parse(file_path.read_text(encoding="utf-8"), document_type)
    return {
        "filename": file_path.name,
        "document_type": str(DocumentType(document_type)),
        "record": record.to_dict(),
    }


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Bill and receipt OCR text parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=None, help="YAML configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    doc_types = [t.value for t in DocumentType]

    batch_parser = subparsers.add_parser("batch", help="Parse a folder of text files")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with OCR text files"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-t",
        "--type",
        choices=doc_types,
        default=DocumentType.BILL.value,
        dest="doc_type",
        help="Document type (default: bill)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    single_parser = subparsers.add_parser("extract", help="Parse a single text file")
    single_parser.add_argument("file", type=Path, help="OCR text file to parse")
    single_parser.add_argument(
        "-t",
        "--type",
        choices=doc_types,
        default=DocumentType.BILL.value,
        dest="doc_type",
        help="Document type (default: bill)",
    )
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level, stream=sys.stderr)
    document_parser = DocumentParser(config)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(
            args.input_dir,
            args.output,
            args.doc_type,
            args.verbose,
            document_parser,
        )
    elif args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        result = extract_single(args.file, args.doc_type, document_parser)
        output_str = json.dumps(result, indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
