#!/usr/bin/env python3
"""
Grain Size Analyzer - Command Line Entry Point

Recomputes and classifies saved sieve/hydrometer analyses and compares the
grain size distribution curves of several samples.
"""

import sys
import logging
import argparse
from typing import List, Optional

from grainsize.core.classification import classification_summary
from grainsize.core.curves import align_samples, alignment_to_dataframe, curve_for_analysis_file
from grainsize.core.gradation import compute_gradation, sieves_from_rows
from grainsize.core.json_export import AnalysisFileExporter
from grainsize.core.json_import import AnalysisFileImporter
from grainsize.core.models import SampleCurve
from grainsize.core.validators import validate_sieve_input
from grainsize.utils.constants import APP_NAME, APP_VERSION, ASTM_STANDARDS, LOG_FILE_NAME, LOG_FORMAT

logger = logging.getLogger(__name__)

def configure_logging(verbose: bool = False, log_file: str = LOG_FILE_NAME):
    """Configure file and console logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grain-size-analyzer",
        description=f"{APP_NAME} - sieve and hydrometer grain size analysis",
        epilog="Methods: " + "; ".join(f"{code} {title}" for code, title in ASTM_STANDARDS.items())
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default=LOG_FILE_NAME, help="Log file path")

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Recompute and classify a saved analysis")
    analyze.add_argument("file", help="Analysis file (.gsa)")
    analyze.add_argument("--export", metavar="OUTPUT", help="Write the recomputed analysis to OUTPUT")
    analyze.add_argument("--compress", action="store_true", help="Gzip the exported file")

    compare = subparsers.add_parser("compare", help="Compare the curves of several analyses")
    compare.add_argument("files", nargs="+", help="Analysis files (.gsa)")
    compare.add_argument("--extrapolate-fines", action="store_true",
                         help="Carry each sample's finest value to finer sizes")

    return parser

def run_analyze(args: argparse.Namespace) -> int:
    """Recompute the gradation of a saved analysis and print its classification."""
    importer = AnalysisFileImporter()
    analysis_file = importer.load_analysis_file(args.file)
    if analysis_file is None:
        print(f"Could not load {args.file}")
        for message in importer.last_errors:
            print(f"  {message}")
        return 1

    sieves = sieves_from_rows(analysis_file.sieve_data)
    total_mass = analysis_file.file_info.total_mass or (
        sum(s.mass_retained_g for s in sieves) + analysis_file.analysis_results.pan_mass_g
    )

    is_valid, validation_results = validate_sieve_input(sieves, total_mass)
    for result in validation_results:
        print(f"{result.severity.value.upper()}: {result.message}")
    if not is_valid:
        return 1

    analysis = compute_gradation(sieves, total_mass)

    print(f"Sample: {analysis_file.display_name}")
    print(f"{'Sieve':>10} {'Size (mm)':>10} {'Retained (g)':>13} {'Passing (%)':>12}")
    for row in analysis.rows:
        print(f"{row.label:>10} {row.sieve_size_mm:>10.3f} {row.mass_retained_g:>13.2f} "
              f"{row.percent_passing:>12.2f}")

    result = analysis.result
    print(f"D10 = {result.d10:.4f} mm, D30 = {result.d30:.4f} mm, D60 = {result.d60:.4f} mm")
    for line in classification_summary(result, analysis_file.file_info.atterberg_limits()):
        print(line)

    if args.export:
        exporter = AnalysisFileExporter()
        if not exporter.export_analysis(args.export, analysis_file.file_info, analysis.rows,
                                        result, analysis_file.temperature_data, args.compress):
            return 1

    return 0

def run_compare(args: argparse.Namespace) -> int:
    """Align and tabulate the curves of several saved analyses."""
    batch = AnalysisFileImporter().import_batch(args.files)
    for message in batch.messages:
        print(f"{message.file_name}: {message.message}")

    if not batch.files:
        print("No analysis files could be loaded")
        return 1

    samples = [
        SampleCurve(sample_id=str(index), curve=curve_for_analysis_file(f), name=f.display_name)
        for index, f in enumerate(batch.files)
    ]
    rows = align_samples(samples, extrapolate_fines=args.extrapolate_fines)

    print(alignment_to_dataframe(rows, samples).to_string(float_format=lambda v: f"{v:.2f}"))
    return 0

def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.log_file)
    logger.info(f"{APP_NAME} {APP_VERSION}: {args.command}")

    if args.command == "analyze":
        return run_analyze(args)
    return run_compare(args)

if __name__ == "__main__":
    sys.exit(main())
