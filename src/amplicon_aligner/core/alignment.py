#!/usr/bin/env python3
"""
Pairwise alignment module for the amplicon aligner.

Wraps Biopython's PairwiseAligner to provide the two primitives the read
reconciliation stages need: a local alignment locating a short pattern
inside a read, and a global alignment of a merged contig against its
amplicon reference returned as gapped rows.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from Bio.Align import PairwiseAligner

from ..exceptions import AlignmentError

GAP = "-"

# Smith-Waterman scoring used to find primers near the 3' end of a read
LOCAL_MATCH = 1
LOCAL_MISMATCH = -2
LOCAL_GAP = -4

# Needleman-Wunsch scoring used to place merged contigs on the reference
GLOBAL_MATCH = 1
GLOBAL_MISMATCH = -3
GLOBAL_GAP_OPEN = -8
GLOBAL_GAP_EXTEND = -1


@dataclass(frozen=True)
class GlobalAlignment:
    """Gapped reference and query rows of a global alignment."""

    reference: str
    query: str
    score: int

    def __post_init__(self):
        if len(self.reference) != len(self.query):
            raise AlignmentError(
                f"Aligned rows differ in length ({len(self.reference)} vs {len(self.query)})"
            )

    @property
    def length(self) -> int:
        return len(self.query)


@lru_cache(maxsize=None)
def build_aligner(
    mode: str,
    match: int,
    mismatch: int,
    gap_open: int,
    gap_extend: int,
) -> PairwiseAligner:
    """Configure a PairwiseAligner; identical settings share one instance."""
    aligner = PairwiseAligner()
    aligner.mode = mode
    aligner.match_score = match
    aligner.mismatch_score = mismatch
    aligner.open_gap_score = gap_open
    aligner.extend_gap_score = gap_extend
    return aligner


def alignment_to_gapped(target: str, query: str, alignment) -> Tuple[str, str]:
    """Expand an alignment's coordinate blocks into two gapped rows."""
    coords = alignment.coordinates
    target_pos = coords[0]
    query_pos = coords[1]
    target_row = []
    query_row = []

    for i in range(target_pos.size - 1):
        t0, t1 = int(target_pos[i]), int(target_pos[i + 1])
        q0, q1 = int(query_pos[i]), int(query_pos[i + 1])
        dt = t1 - t0
        dq = q1 - q0
        if dt > 0 and dq > 0:
            target_row.append(target[t0:t1])
            query_row.append(query[q0:q1])
        elif dt > 0 and dq == 0:
            target_row.append(target[t0:t1])
            query_row.append(GAP * dt)
        elif dt == 0 and dq > 0:
            target_row.append(GAP * dq)
            query_row.append(query[q0:q1])

    return "".join(target_row), "".join(query_row)


def local_alignment(
    sequence: str,
    pattern: str,
    match: int = LOCAL_MATCH,
    mismatch: int = LOCAL_MISMATCH,
    gap: int = LOCAL_GAP,
) -> Tuple[int, int]:
    """
    Locally align a pattern to a sequence.

    Args:
        sequence: Sequence searched (e.g. a read)
        pattern: Short sequence looked for (e.g. a primer)
        match: Score for identical bases
        mismatch: Score for differing bases
        gap: Score for every gap position (linear gap model)

    Returns:
        Tuple of (best score, end position in sequence). The end position is
        exclusive; it is 0 when nothing scored above zero.
    """
    if not sequence or not pattern:
        return 0, 0

    aligner = build_aligner("local", match, mismatch, gap, gap)
    alignments = aligner.align(sequence, pattern)
    score = int(alignments.score)
    if score <= 0:
        return 0, 0

    best = alignments[0]
    return score, int(best.coordinates[0][-1])


def global_alignment(
    reference: str,
    query: str,
    match: int = GLOBAL_MATCH,
    mismatch: int = GLOBAL_MISMATCH,
    gap_open: int = GLOBAL_GAP_OPEN,
    gap_extend: int = GLOBAL_GAP_EXTEND,
) -> GlobalAlignment:
    """
    Globally align a query to a reference, penalising end gaps.

    Args:
        reference: Reference sequence (row 0)
        query: Query sequence (row 1)
        match: Score for identical bases
        mismatch: Score for differing bases
        gap_open: Score for the first position of a gap
        gap_extend: Score for each further position of a gap

    Returns:
        GlobalAlignment with gapped rows and the total score

    Raises:
        AlignmentError: If either sequence is empty
    """
    if not reference or not query:
        raise AlignmentError("Cannot globally align an empty sequence")

    aligner = build_aligner("global", match, mismatch, gap_open, gap_extend)
    alignments = aligner.align(reference, query)
    best = alignments[0]
    reference_row, query_row = alignment_to_gapped(reference, query, best)

    return GlobalAlignment(reference_row, query_row, int(best.score))
