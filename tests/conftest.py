#!/usr/bin/env python3
"""
Shared fixtures for amplicon aligner tests.
"""

import gzip
from pathlib import Path

import pytest

from amplicon_aligner.models import AmpliconTemplate, ReadPair, Strand
from amplicon_aligner.sequence import reverse_complement

# 100 bp amplicon; bases 0-20 and 80-100 are the primer sites
REFERENCE = (
    "GATTCGCAAGTCCTGAGTAC"
    "CTTGGAACGTAATCGGCTAT"
    "GCAGTCAACTTGCGATGGAC"
    "TAACCGTGTCAGAGCTTCAT"
    "CGGTACTAGGATCCTAGCAA"
)

ADAPTER = "AGATCGGAAGAGCACACGTC"

# period-7 tandem repeat used to build ambiguous overlaps
REPEAT_UNIT = "ACGGTCA"

_SUBSTITUTE = {"A": "C", "C": "G", "G": "T", "T": "A"}


def substitute(sequence: str, *positions: int) -> str:
    """Replace the bases at the given positions with a different base."""
    bases = list(sequence)
    for position in positions:
        bases[position] = _SUBSTITUTE[bases[position]]
    return "".join(bases)


@pytest.fixture
def substitute_bases():
    return substitute


@pytest.fixture
def reference():
    return REFERENCE


@pytest.fixture
def adapter():
    return ADAPTER


@pytest.fixture
def amplicon():
    """Forward-strand amplicon over REFERENCE with 20 bp primers."""
    return AmpliconTemplate.from_reference(
        amplicon_id="AMP1",
        chromosome="chr1",
        start=1000,
        reference=REFERENCE,
        left_primer_length=20,
        right_primer_length=20,
        strand=Strand.FORWARD,
    )


@pytest.fixture
def repeat_amplicon():
    """Tandem-repeat amplicon with 8 bp primers (too short to trigger clipping)."""
    return AmpliconTemplate.from_reference(
        amplicon_id="REPEAT",
        chromosome="chr2",
        start=5000,
        reference=(REPEAT_UNIT * 8),
        left_primer_length=8,
        right_primer_length=8,
        strand=Strand.FORWARD,
    )


@pytest.fixture
def make_pair():
    """Factory building a read pair that sequences a fragment from both ends."""

    def _make_pair(fragment, name="read1", read_length=None, tail=ADAPTER, q1="I", q2="I"):
        mate1 = fragment + tail
        mate2 = reverse_complement(fragment) + tail
        if read_length is not None:
            mate1 = mate1[:read_length]
            mate2 = mate2[:read_length]
        return ReadPair(
            name=name,
            sequence1=mate1,
            quality1=q1 * len(mate1),
            sequence2=mate2,
            quality2=q2 * len(mate2),
        )

    return _make_pair


@pytest.fixture
def ambiguous_pair():
    """
    Pair whose mates overlap almost equally well at two offsets one repeat apart.

    Mate 2 covers eight repeat units; mate 1 covers nine with a substitution
    in its first unit, so offset 0 scores 51 and offset 7 scores 56.
    """
    repeat = REPEAT_UNIT * 10
    mate1 = substitute(repeat[:63], 3)
    mate2 = reverse_complement(repeat[:56])
    return ReadPair(
        name="ambiguous",
        sequence1=mate1,
        quality1="I" * len(mate1),
        sequence2=mate2,
        quality2="I" * len(mate2),
    )


def fastq_title(read_id: str, mate: int, index: str = "3") -> str:
    return f"{read_id} {mate}:N:0:{index}"


@pytest.fixture
def write_fastq_pair(tmp_path):
    """Factory writing read pairs to gzipped R1/R2 FASTQ files."""

    def _write(read_pairs, prefix="sample", index="3", titles=None):
        read1_file = tmp_path / f"{prefix}_R1.fastq.gz"
        read2_file = tmp_path / f"{prefix}_R2.fastq.gz"

        with gzip.open(read1_file, "wt") as r1, gzip.open(read2_file, "wt") as r2:
            for i, pair in enumerate(read_pairs):
                if titles is not None:
                    title1, title2 = titles[i]
                else:
                    title1 = fastq_title(pair.name, 1, index)
                    title2 = fastq_title(pair.name, 2, index)
                r1.write(f"@{title1}\n{pair.sequence1}\n+\n{pair.quality1}\n")
                r2.write(f"@{title2}\n{pair.sequence2}\n+\n{pair.quality2}\n")

        return Path(read1_file), Path(read2_file)

    return _write


@pytest.fixture
def amplicon_file(tmp_path):
    """Amplicon list holding the forward amplicon and the tandem-repeat amplicon."""
    path = tmp_path / "amplicons.txt"
    path.write_text(
        "@HD\tVN:1.4\tSO:unsorted\n"
        "@SQ\tSN:chr1\tLN:248956422\n"
        "# AmpliconID Chr Start RefSequence LeftPrimerLength RightPrimerLength Strand\n"
        f"AMP1\tchr1\t1000\t{REFERENCE}\t20\t20\t+\n"
        f"REPEAT\tchr2\t5000\t{REPEAT_UNIT * 8}\t8\t8\t+\n"
    )
    return path
