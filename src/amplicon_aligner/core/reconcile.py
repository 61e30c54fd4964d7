#!/usr/bin/env python3
"""
Read pair reconciliation for the amplicon aligner.

Each read pair is attributed to the first amplicon whose left primer
starts mate 1, clipped, merged into one contig, aligned to the amplicon
reference and annotated. Every stage either passes the pair on or
discards it with a reason; statistics are folded from the outcomes.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence

from ..models import (
    AlignmentRecord,
    AmpliconTemplate,
    Discarded,
    DiscardReason,
    Emitted,
    MappingStatistics,
    Outcome,
    ReadPair,
)
from ..sequence import reverse_complement
from .alignment import global_alignment
from .cigar import annotate_alignment
from .merger import merge_reads
from .primers import clip_right_primer, match_primer

logger = logging.getLogger(__name__)

FORWARD_FLAG = 0
REVERSE_FLAG = 16


@dataclass(frozen=True)
class ReconcileSettings:
    """Thresholds applied while reconciling a read pair."""

    min_insert_size: int = 5
    max_quality: int = 40
    phred_offset: int = 33
    max_mismatch_fraction: float = 0.05
    max_mapping_quality: int = 60

    @classmethod
    def from_config(cls, config) -> "ReconcileSettings":
        """Pick the reconciliation thresholds out of an AlignerConfig."""
        return cls(
            min_insert_size=config.min_insert_size,
            max_quality=config.max_quality,
            phred_offset=config.phred_offset,
            max_mismatch_fraction=config.max_mismatch_fraction,
            max_mapping_quality=config.max_mapping_quality,
        )


def find_amplicon(
    read_pair: ReadPair,
    amplicons: Sequence[AmpliconTemplate],
) -> Optional[AmpliconTemplate]:
    """Return the first amplicon whose left primer starts mate 1."""
    for amplicon in amplicons:
        if match_primer(read_pair.sequence1, amplicon.left_primer):
            return amplicon
    return None


def mapping_quality(score: int, cap: int = 60) -> int:
    """Clamp an alignment score into the SAM mapping quality range."""
    return max(0, min(score, cap))


def evaluate_amplicon(
    read_pair: ReadPair,
    amplicon: AmpliconTemplate,
    settings: ReconcileSettings = ReconcileSettings(),
) -> Outcome:
    """
    Run one read pair through every stage against a single amplicon.

    Mate 1 is assumed to carry the amplicon's left primer already.

    Args:
        read_pair: Read pair to reconcile
        amplicon: Amplicon the pair was attributed to
        settings: Reconciliation thresholds

    Returns:
        Emitted with the alignment record, or Discarded with the reason
    """
    amplicon_id = amplicon.amplicon_id

    if not match_primer(read_pair.sequence2, amplicon.right_primer):
        return Discarded(DiscardReason.RIGHT_PRIMER_MISMATCH, amplicon_id)

    # each mate may read through into the primer at the far end of the amplicon
    sequence1, quality1 = clip_right_primer(
        read_pair.sequence1, read_pair.quality1, reverse_complement(amplicon.right_primer)
    )
    sequence2, quality2 = clip_right_primer(
        read_pair.sequence2, read_pair.quality2, reverse_complement(amplicon.left_primer)
    )

    min_length = amplicon.min_read_length + settings.min_insert_size
    if len(sequence1) < min_length or len(sequence2) < min_length:
        return Discarded(DiscardReason.PRIMER_DIMER, amplicon_id)

    contig = merge_reads(
        sequence1, quality1, sequence2, quality2,
        max_quality=settings.max_quality,
        phred_offset=settings.phred_offset,
    )
    if contig is None:
        return Discarded(DiscardReason.NOT_MERGED, amplicon_id)

    if amplicon.is_forward:
        left_clip = amplicon.left_primer_length
        right_clip = amplicon.right_primer_length
        flag = FORWARD_FLAG
    else:
        contig = contig.reverse_complement()
        left_clip = amplicon.right_primer_length
        right_clip = amplicon.left_primer_length
        flag = REVERSE_FLAG

    alignment = global_alignment(amplicon.sequence, contig.sequence)
    if alignment.score < 0:
        return Discarded(DiscardReason.POOR_ALIGNMENT, amplicon_id)

    annotation = annotate_alignment(alignment.reference, alignment.query, left_clip, right_clip)
    if annotation is None:
        return Discarded(DiscardReason.CIGAR_REJECTED, amplicon_id)

    if annotation.mismatches / len(amplicon.sequence) > settings.max_mismatch_fraction:
        return Discarded(DiscardReason.EXCESS_MISMATCHES, amplicon_id)

    record = AlignmentRecord(
        name=read_pair.name,
        flag=flag,
        chromosome=amplicon.chromosome,
        position=amplicon.position,
        mapping_quality=mapping_quality(alignment.score, settings.max_mapping_quality),
        cigar=annotation.cigar,
        sequence=contig.sequence,
        quality=contig.quality,
        edit_distance=annotation.edit_distance,
        score=alignment.score,
        amplicon_id=amplicon_id,
    )
    return Emitted(record)


def reconcile_read_pair(
    read_pair: ReadPair,
    amplicons: Sequence[AmpliconTemplate],
    settings: ReconcileSettings = ReconcileSettings(),
) -> Outcome:
    """Attribute a read pair to an amplicon and reconcile it."""
    if read_pair.is_masked:
        return Discarded(DiscardReason.MASKED)

    amplicon = find_amplicon(read_pair, amplicons)
    if amplicon is None:
        return Discarded(DiscardReason.NO_PRIMER_MATCH)

    return evaluate_amplicon(read_pair, amplicon, settings)


class AmpliconReconciler:
    """Reconciles a stream of read pairs against a fixed amplicon list."""

    def __init__(
        self,
        amplicons: Sequence[AmpliconTemplate],
        settings: Optional[ReconcileSettings] = None,
    ):
        """
        Initialize reconciler.

        Args:
            amplicons: Amplicons in the order they are tried
            settings: Reconciliation thresholds (defaults if None)
        """
        self.amplicons = tuple(amplicons)
        self.settings = settings or ReconcileSettings()
        self.statistics = MappingStatistics.for_amplicons(a.amplicon_id for a in self.amplicons)

    def process(self, read_pair: ReadPair) -> Outcome:
        """Reconcile one read pair and count its outcome."""
        outcome = reconcile_read_pair(read_pair, self.amplicons, self.settings)
        self.statistics.record(outcome)

        if isinstance(outcome, Discarded):
            logger.debug(f"Discarded {read_pair.name}: {outcome.reason.value}")

        return outcome

    def run(self, read_pairs: Iterable[ReadPair]) -> Iterator[AlignmentRecord]:
        """Yield an alignment record for every read pair that survives."""
        for read_pair in read_pairs:
            outcome = self.process(read_pair)
            if isinstance(outcome, Emitted):
                yield outcome.record
