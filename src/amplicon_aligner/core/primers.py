"""Primer matching and primer-bounded adapter clipping."""

from __future__ import annotations

from typing import Tuple

from .alignment import local_alignment

ANCHOR_LENGTH = 3
MIN_MATCH_FRACTION = 0.8
MIN_CLIP_SCORE = 10


def match_primer(sequence: str, primer: str) -> bool:
    """
    Check whether a read begins with a primer.

    Bases are compared without gaps from position 0. Any mismatch in the
    last three primer bases rejects the read outright; otherwise the read is
    accepted when matched bases / (primer length - 3) exceeds 0.8. Positions
    beyond the end of the read count as mismatches.
    """
    primer_length = len(primer)
    anchor_start = primer_length - ANCHOR_LENGTH
    matched = 0

    for i, base in enumerate(primer):
        if i < len(sequence) and sequence[i] == base:
            matched += 1
        elif i >= anchor_start:
            return False

    denominator = primer_length - ANCHOR_LENGTH
    if denominator <= 0:
        # primer is all anchor; every base matched to get here
        return matched > 0

    return matched / denominator > MIN_MATCH_FRACTION


def clip_right_primer(sequence: str, quality: str, primer: str) -> Tuple[str, str]:
    """
    Trim a read after the primer found nearest its 3' end.

    The primer must already be in the read's orientation. When its best
    local alignment scores at least 10 the read and its qualities are cut at
    the end of that alignment, keeping the primer bases. Reads are never
    lengthened; without a qualifying hit they come back unchanged.
    """
    score, end = local_alignment(sequence, primer)
    if score >= MIN_CLIP_SCORE:
        return sequence[:end], quality[:end]
    return sequence, quality
