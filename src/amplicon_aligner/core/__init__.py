"""Core processing modules for the amplicon aligner."""

from .alignment import GlobalAlignment, local_alignment, global_alignment
from .primers import match_primer, clip_right_primer
from .merger import merge_reads
from .cigar import annotate_alignment
from .reconcile import (
    ReconcileSettings, AmpliconReconciler,
    evaluate_amplicon, reconcile_read_pair
)
from .parser import AmpliconParser
from .fastq import PairedFastqReader, get_flowcell_id
from .sam import SamWriter, write_statistics

__all__ = [
    "GlobalAlignment",
    "local_alignment",
    "global_alignment",
    "match_primer",
    "clip_right_primer",
    "merge_reads",
    "annotate_alignment",
    "ReconcileSettings",
    "AmpliconReconciler",
    "evaluate_amplicon",
    "reconcile_read_pair",
    "AmpliconParser",
    "PairedFastqReader",
    "get_flowcell_id",
    "SamWriter",
    "write_statistics"
]
