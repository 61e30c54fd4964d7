#!/usr/bin/env python3
"""
Main pipeline module for the amplicon aligner.

This module provides the command line entry point and drives reading,
reconciliation and output for one sample.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config import AlignerConfig
from .core.fastq import PairedFastqReader
from .core.parser import AmpliconParser
from .core.reconcile import AmpliconReconciler, ReconcileSettings
from .core.sam import SamWriter, write_statistics
from .exceptions import AlignerError
from .models import Emitted, MappingStatistics


def setup_logging(log_level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def run_pipeline(config: AlignerConfig, command_line: str = "") -> MappingStatistics:
    """
    Align one sample's paired reads to its amplicons.

    Args:
        config: Aligner configuration
        command_line: Invocation recorded in the SAM and statistics headers

    Returns:
        Mapping statistics for the run
    """
    logger = logging.getLogger(__name__)

    logger.info("Starting amplicon aligner")
    logger.info(f"Amplicons: {config.amplicon_file}")
    logger.info(f"Reads: {config.read1_file}, {config.read2_file}")
    logger.info(f"Output prefix: {config.output_prefix}")

    try:
        parser = AmpliconParser(config.amplicon_file)
        amplicons = parser.parse()
        logger.info(f"Loaded {len(amplicons)} amplicons")

        reconciler = AmpliconReconciler(amplicons, ReconcileSettings.from_config(config))
        reader = PairedFastqReader(config.read1_file, config.read2_file, config.sync_check_reads)

        with SamWriter(config.sam_file, config.sample_name, __version__, command_line) as writer:
            for read_pair in reader:
                if not writer.header_written:
                    writer.write_header(parser.sam_headers, reader.flowcell_id)

                outcome = reconciler.process(read_pair)
                if isinstance(outcome, Emitted):
                    writer.write(outcome.record)

            if not writer.header_written:
                logger.warning("No read pairs found in FASTQ files")
                writer.write_header(parser.sam_headers, reader.flowcell_id or "unknown")

            run_id = writer.read_group

        stats = reconciler.statistics
        write_statistics(config.stats_file, stats, run_id, command_line, __version__)

        logger.info(f"Total read pairs: {stats.total_reads}")
        logger.info(f"Primer matched pairs: {stats.primer_matched}")
        logger.info(f"Usable pairs: {stats.usable}")
        logger.info(f"Unmerged pairs: {stats.not_merged} ({stats.percent_of_usable(stats.not_merged):.1f}%)")
        logger.info(f"Aligned pairs: {stats.mapped} ({stats.percent_of_usable(stats.mapped):.1f}%)")
        logger.info("Pipeline completed successfully")

        return stats

    except Exception as e:
        logger.error(f"Pipeline failed: {e}")
        raise


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="amplicon-aligner",
        description="Amplicon Aligner - Globally align paired-end amplicon reads and output SAM"
    )

    parser.add_argument(
        "amplicons",
        type=Path,
        help="Amplicon list: AmpliconID Chr Start RefSequence LeftPrimerLength RightPrimerLength Strand(+/-)"
    )

    parser.add_argument(
        "read1",
        type=Path,
        help="Read 1 FASTQ (.fastq or .fastq.gz)"
    )

    parser.add_argument(
        "read2",
        type=Path,
        help="Read 2 FASTQ (.fastq or .fastq.gz)"
    )

    parser.add_argument(
        "prefix",
        help="Output filename prefix; writes <prefix>.sam and <prefix>_MappingStats.txt"
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="YAML file with aligner settings"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def main(argv: Optional[list] = None) -> None:
    """Main entry point for command line interface."""
    args = build_parser().parse_args(argv)
    command_line = " ".join(sys.argv if argv is None else ["amplicon-aligner", *argv])

    setup_logging(args.log_level or "INFO")

    try:
        if args.config is not None:
            config = AlignerConfig.from_yaml(
                args.config,
                amplicon_file=args.amplicons,
                read1_file=args.read1,
                read2_file=args.read2,
                output_prefix=args.prefix,
                log_level=args.log_level,
            )
        else:
            config = AlignerConfig.from_args(vars(args))

        logging.getLogger().setLevel(config.log_level.upper())
        run_pipeline(config, command_line)
    except AlignerError as e:
        logging.error(f"Pipeline failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logging.info("Pipeline interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
