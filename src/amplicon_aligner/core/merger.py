"""Overlap merging of paired-end mates into a single consensus contig."""

from __future__ import annotations

from typing import Optional, Tuple

from ..models import MergedContig
from ..sequence import reverse_complement

MIN_SCORE = 15
MATCH_AWARD = 1
MISMATCH_PENALTY = 4
MISMATCH_DENOMINATOR = 20  # allow mismatches in up to 5% of the potential overlap
MAX_AMBIGUITY_RATIO = 0.9


def find_overlap(sequence1: str, sequence2: str) -> Tuple[int, int, int]:
    """
    Slide mate 2 (already in mate 1's orientation) along mate 1.

    Returns:
        Tuple of (best offset, best score, second best score). The second
        best score is the best score held just before the last improvement,
        not the runner-up over all offsets.
    """
    length1 = len(sequence1)
    length2 = len(sequence2)
    best_offset = 0
    best_score = 0
    second_best = 0

    for offset in range(length1):
        max_mismatches = (length1 - offset) // MISMATCH_DENOMINATOR
        score = 0
        mismatches = 0

        for n in range(min(length1 - offset, length2)):
            if sequence1[offset + n] == sequence2[n]:
                score += MATCH_AWARD
            else:
                score -= MISMATCH_PENALTY
                mismatches += 1

            if mismatches > max_mismatches:
                break

        if score > best_score:
            second_best = best_score
            best_score = score
            best_offset = offset

    return best_offset, best_score, second_best


def merge_reads(
    sequence1: str,
    quality1: str,
    sequence2: str,
    quality2: str,
    max_quality: int = 40,
    phred_offset: int = 33,
) -> Optional[MergedContig]:
    """
    Merge two overlapping mates into one contig.

    Mate 2 is given in its sequencing orientation and is reverse
    complemented here. Across the overlap the base with the higher quality
    wins (mate 1 on ties). Agreeing bases get the sum of both qualities,
    capped at ``max_quality``; disagreeing bases get the difference.

    Args:
        sequence1: Mate 1 bases
        quality1: Mate 1 quality string
        sequence2: Mate 2 bases as sequenced
        quality2: Mate 2 quality string as sequenced
        max_quality: Cap applied to recalibrated qualities
        phred_offset: ASCII offset of the quality encoding

    Returns:
        MergedContig, or None when no clear, full-length overlap exists
    """
    sequence2 = reverse_complement(sequence2)
    quality2 = quality2[::-1]
    length1 = len(sequence1)

    offset, best_score, second_best = find_overlap(sequence1, sequence2)

    if best_score <= MIN_SCORE:
        return None
    if second_best / best_score >= MAX_AMBIGUITY_RATIO:
        return None
    if len(sequence2) + offset < length1:
        # mate 2 stops short of mate 1's end; mate 1 runs into adapter
        return None

    bases = [sequence1[:offset]]
    qualities = [quality1[:offset]]

    for n in range(length1 - offset):
        base1 = sequence1[offset + n]
        base2 = sequence2[n]
        q1 = ord(quality1[offset + n]) - phred_offset
        q2 = ord(quality2[n]) - phred_offset

        if base1 == base2:
            bases.append(base1)
            qualities.append(chr(min(q1 + q2, max_quality) + phred_offset))
        elif q1 >= q2:
            bases.append(base1)
            qualities.append(chr(q1 - q2 + phred_offset))
        else:
            bases.append(base2)
            qualities.append(chr(q2 - q1 + phred_offset))

    bases.append(sequence2[length1 - offset:])
    qualities.append(quality2[length1 - offset:])

    return MergedContig("".join(bases), "".join(qualities))
