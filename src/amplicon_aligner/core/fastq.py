#!/usr/bin/env python3
"""
Paired FASTQ reading for the amplicon aligner.

Reads mate 1 and mate 2 files in lockstep and checks that the two files
describe the same fragments in the same order.
"""

import gzip
from pathlib import Path
from typing import IO, Iterator, Optional

from Bio.SeqIO.QualityIO import FastqGeneralIterator
from loguru import logger

from ..exceptions import ParseError, SynchronisationError
from ..models import ReadPair


def open_fastq(path: Path) -> IO[str]:
    """Open a FASTQ file for text reading, decompressing .gz files."""
    path = Path(path)
    if path.suffix == ".gz":
        return gzip.open(path, "rt")
    return open(path, "r")


def split_title(title: str):
    """Split a FASTQ title into (read ID, comment); comment is None if absent."""
    read_id, separator, comment = title.partition(" ")
    return read_id, (comment if separator else None)


def get_flowcell_id(read_id: str) -> str:
    """
    Extract the flowcell ID from an Illumina read identifier.

    The third colon-separated field holds the flowcell; any run prefix
    before the first '-' is dropped (MiSeq flowcells look like
    000000000-A1B2C).
    """
    fields = [f for f in read_id.split(":") if f]
    if len(fields) < 3:
        logger.warning(f"Could not find a flowcell ID in read header {read_id}")
        return "unknown"
    return fields[2].split("-", 1)[-1]


def get_sample_index(title: str) -> str:
    """Sample index: everything after the last ':' of the FASTQ title."""
    return title.rsplit(":", 1)[-1]


class PairedFastqReader:
    """Iterates synchronised read pairs from two FASTQ files."""

    def __init__(self, read1_file: Path, read2_file: Path, sync_check_reads: int = 14):
        """
        Initialize reader.

        Args:
            read1_file: Mate 1 FASTQ (optionally gzipped)
            read2_file: Mate 2 FASTQ (optionally gzipped)
            sync_check_reads: Number of leading pairs whose headers are validated
        """
        self.read1_file = Path(read1_file)
        self.read2_file = Path(read2_file)
        self.sync_check_reads = sync_check_reads
        self.flowcell_id: Optional[str] = None
        self.index: Optional[str] = None
        self.pairs_read = 0

        for path in (self.read1_file, self.read2_file):
            if not path.exists():
                raise ParseError(f"FASTQ file not found: {path}")

    def __iter__(self) -> Iterator[ReadPair]:
        self.pairs_read = 0

        logger.info(f"Reading paired FASTQ files: {self.read1_file}, {self.read2_file}")

        try:
            with open_fastq(self.read1_file) as handle1, open_fastq(self.read2_file) as handle2:
                records1 = FastqGeneralIterator(handle1)
                records2 = FastqGeneralIterator(handle2)

                while True:
                    record1 = next(records1, None)
                    record2 = next(records2, None)

                    if record1 is None and record2 is None:
                        break
                    if record1 is None or record2 is None:
                        shorter = self.read1_file if record1 is None else self.read2_file
                        raise SynchronisationError(
                            "FASTQ file ended before its mate file", fastq_file=str(shorter)
                        )

                    self.pairs_read += 1
                    title1, sequence1, quality1 = record1
                    title2, sequence2, quality2 = record2

                    if self.pairs_read <= self.sync_check_reads:
                        self._check_synchronised(title1, title2)

                    yield ReadPair(
                        name=split_title(title1)[0],
                        sequence1=sequence1,
                        quality1=quality1,
                        sequence2=sequence2,
                        quality2=quality2,
                    )

        except (OSError, EOFError) as e:
            raise ParseError(f"Failed to read FASTQ files: {e}") from e
        except ValueError as e:
            raise ParseError(f"Malformed FASTQ record: {e}") from e

        logger.info(f"Read {self.pairs_read} read pairs")

    def _check_synchronised(self, title1: str, title2: str) -> None:
        """Validate read IDs, mate numbers and sample index of one pair."""
        read_id1, comment1 = split_title(title1)
        read_id2, comment2 = split_title(title2)

        if read_id1 != read_id2:
            raise SynchronisationError(
                f"Read header {read_id1} does not match {read_id2}; FASTQ read headers are not synchronised"
            )

        for comment, mate, path in ((comment1, "1", self.read1_file), (comment2, "2", self.read2_file)):
            if comment is None or not comment.startswith(mate):
                found = comment[:1] if comment else "?"
                raise SynchronisationError(
                    f"Expected R{mate} reads but found R{found}", read_name=read_id1, fastq_file=str(path)
                )

        index1 = get_sample_index(title1)
        index2 = get_sample_index(title2)

        if self.index is None:
            if index1 != index2:
                raise SynchronisationError(f"Index in read headers {title1} and {title2} do not match")
            self.index = index1
            self.flowcell_id = get_flowcell_id(read_id1)
        elif index1 != self.index or index2 != self.index:
            raise SynchronisationError("Read headers contain mixed indexes", read_name=read_id1)
