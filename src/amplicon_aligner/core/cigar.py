"""CIGAR and edit distance calculation with primer soft-clipping."""

from __future__ import annotations

from itertools import groupby
from typing import Iterator, List, Optional, Tuple

from ..models import AlignmentAnnotation
from .alignment import GAP

MATCH = "M"
INSERTION = "I"
DELETION = "D"
SOFT_CLIP = "S"

Span = Tuple[str, int]


def classify_columns(reference_row: str, query_row: str) -> Iterator[str]:
    """Yield the CIGAR operation of each alignment column."""
    for ref_base, query_base in zip(reference_row, query_row):
        if query_base == GAP:
            yield DELETION
        elif ref_base == GAP:
            yield INSERTION
        else:
            yield MATCH


def run_length_encode(operations) -> List[Span]:
    """Collapse consecutive identical operations into (operation, length) spans."""
    return [(op, sum(1 for _ in group)) for op, group in groupby(operations)]


def count_informative_mismatches(
    reference_row: str,
    query_row: str,
    left_primer_length: int,
    right_primer_length: int,
) -> int:
    """
    Count mismatching aligned bases outside the primer columns.

    Columns are numbered from 1; a mismatch counts when its column is after
    the left primer and no later than ``columns - right_primer_length``.
    """
    last_column = len(query_row) - right_primer_length
    mismatches = 0

    for column, (ref_base, query_base) in enumerate(zip(reference_row, query_row), start=1):
        if ref_base == GAP or query_base == GAP or ref_base == query_base:
            continue
        if left_primer_length < column <= last_column:
            mismatches += 1

    return mismatches


def soft_clip_primers(
    spans: List[Span],
    left_primer_length: int,
    right_primer_length: int,
) -> Optional[Tuple[List[Span], int]]:
    """
    Replace the primer ends of the alignment with soft-clips.

    Returns:
        Tuple of (clipped spans, indel bases) or None when the alignment
        has no informative sequence between the primers
    """
    primer_total = left_primer_length + right_primer_length

    if len(spans) == 1:
        op, length = spans[0]
        if op != MATCH or length <= primer_total:
            return None
        clipped = [
            (SOFT_CLIP, left_primer_length),
            (MATCH, length - primer_total),
            (SOFT_CLIP, right_primer_length),
        ]
        return clipped, 0

    if len(spans) <= 2:
        return None

    first_op, first_length = spans[0]
    last_op, last_length = spans[-1]
    if first_op != MATCH or first_length < left_primer_length:
        return None
    if last_op != MATCH or last_length < right_primer_length:
        return None

    clipped = [(SOFT_CLIP, left_primer_length)]
    if first_length > left_primer_length:
        clipped.append((MATCH, first_length - left_primer_length))

    indels = 0
    for op, length in spans[1:-1]:
        clipped.append((op, length))
        if op != MATCH:
            indels += length

    if last_length > right_primer_length:
        clipped.append((MATCH, last_length - right_primer_length))
    clipped.append((SOFT_CLIP, right_primer_length))

    return clipped, indels


def format_cigar(spans: List[Span]) -> str:
    return "".join(f"{length}{op}" for op, length in spans)


def annotate_alignment(
    reference_row: str,
    query_row: str,
    left_primer_length: int,
    right_primer_length: int,
) -> Optional[AlignmentAnnotation]:
    """
    Build the CIGAR string and edit distance for an aligned contig.

    Args:
        reference_row: Gapped reference row
        query_row: Gapped query row, same length as the reference row
        left_primer_length: Primer length at the alignment's left end
        right_primer_length: Primer length at the alignment's right end

    Returns:
        AlignmentAnnotation, or None if the alignment is rejected
    """
    spans = run_length_encode(classify_columns(reference_row, query_row))
    clipped = soft_clip_primers(spans, left_primer_length, right_primer_length)
    if clipped is None:
        return None

    clipped_spans, indels = clipped
    mismatches = count_informative_mismatches(
        reference_row, query_row, left_primer_length, right_primer_length
    )

    return AlignmentAnnotation(
        cigar=format_cigar(clipped_spans),
        edit_distance=indels + mismatches,
        mismatches=mismatches,
        spans=tuple(clipped_spans),
    )
