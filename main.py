#!/usr/bin/env python3
"""
Financial Pre-Accounting Core - Main Entry Point.

Runs the document analysis pipeline over OCR text dumps and writes the
analyses as JSON.

Usage:
    Command Line:
        python main.py --input facture_0042.pdf.txt
        python main.py --input ./ocr_dumps/ --output outputs/analyses.json --rate-date 2024-03-15

    Python:
        from main import run_analysis
        batch = asyncio.run(run_analysis("ocr_dumps/"))
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from config import ConfigurationManager
from preaccounting.utils.logger import LOGGER_NAMESPACE, setup_logger_from_config, get_logger
from preaccounting.utils.helpers import ensure_directory
from preaccounting.utils.exceptions import PreAccountingError
from preaccounting.input_handler import PlainTextExtractor
from preaccounting.pipeline import BatchResult, DocumentAnalysisOrchestrator


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Financial Pre-Accounting Core",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Analyze one OCR dump:
        python main.py --input facture.pdf.txt

    Analyze a directory with historical rates:
        python main.py --input ./ocr_dumps/ --rate-date 2024-03-15
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Input text file or directory of text files"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output JSON file (default: <paths.output_dir>/analyses.json)"
    )

    parser.add_argument(
        "--rate-date",
        type=str,
        default=None,
        help="Use historical exchange rates for this date (YYYY-MM-DD)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)
    logger = setup_logger_from_config()

    if args.debug:
        logging.getLogger(LOGGER_NAMESPACE).setLevel(logging.DEBUG)
        for handler in logging.getLogger(LOGGER_NAMESPACE).handlers:
            handler.setLevel(logging.DEBUG)

    logger.info("=" * 60)
    logger.info("FINANCIAL PRE-ACCOUNTING CORE")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output or config.get('paths.output_dir')}")

    return config


def collect_inputs(input_path: str, extractor: PlainTextExtractor) -> List[Path]:
    """
    List the text files to analyze.

    Raises:
        DocumentNotFoundError: If the input path doesn't exist.
        UnsupportedDocumentTypeError: If a single input file is not text.
    """
    path = Path(input_path)
    if path.is_dir():
        return extractor.collect_files(path)
    return [extractor.validate_file(path)]


def write_results(batch: BatchResult, output_path: str) -> Path:
    """Write a batch result as UTF-8 JSON."""
    output = Path(output_path)
    ensure_directory(output.parent)

    payload: Dict[str, Any] = batch.to_dict()
    with open(output, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False, default=str)

    return output


async def run_analysis(
    input_path: str,
    output_path: Optional[str] = None,
    rate_date: Optional[str] = None
) -> BatchResult:
    """
    Run the analysis pipeline over text files.

    This is the main programmatic entry point.

    Args:
        input_path: Text file or directory of text files.
        output_path: Optional JSON output path.
        rate_date: Optional ISO date for historical exchange rates.

    Returns:
        BatchResult of the run.

    Example:
        >>> batch = asyncio.run(run_analysis("ocr_dumps/"))
        >>> for analysis in batch.results:
        ...     print(analysis.financial_data.amount)
    """
    logger = get_logger(__name__)

    extractor = PlainTextExtractor()
    files = collect_inputs(input_path, extractor)
    if not files:
        logger.warning(f"No text files found in: {input_path}")

    orchestrator = DocumentAnalysisOrchestrator(text_extractor=extractor)

    def report_progress(completed: int, total: int, failed: int) -> None:
        logger.info(f"Progress: {completed}/{total} ({failed} failed)")

    options = {'rate_date': rate_date} if rate_date else None
    batch = await orchestrator.process_batch(files, on_progress=report_progress, options=options)

    if output_path:
        written = write_results(batch, output_path)
        logger.info(f"Results written to: {written}")

    return batch


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_arguments(argv)

    try:
        config = initialize_system(args)
        logger = get_logger(__name__)

        output_path = args.output or str(Path(config.get("paths.output_dir", "outputs")) / "analyses.json")
        batch = asyncio.run(run_analysis(args.input, output_path, args.rate_date))

        logger.info("=" * 60)
        logger.info(
            f"Analysis complete. {len(batch.results)} analyzed, {len(batch.errors)} failed."
        )
        logger.info("=" * 60)

        return 0 if not batch.errors else 2

    except (PreAccountingError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
