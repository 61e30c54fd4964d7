"""Amplicon Aligner.

Reconciles paired-end amplicon reads against their reference templates:
reads are attributed to amplicons by primer matching, trimmed, merged into
one contig per pair, globally aligned and written out as SAM records.
"""

__version__ = "2.1.0"

from .config import AlignerConfig
from .models import (
    Strand, AmpliconTemplate, ReadPair, MergedContig, AlignmentAnnotation,
    AlignmentRecord, DiscardReason, Discarded, Emitted, MappingStatistics
)
from .sequence import reverse_complement
from .core import (
    match_primer, clip_right_primer, merge_reads, annotate_alignment,
    AmpliconParser, PairedFastqReader, AmpliconReconciler, ReconcileSettings,
    SamWriter, reconcile_read_pair
)
from .main import run_pipeline

__all__ = [
    "__version__",
    "AlignerConfig",
    "Strand",
    "AmpliconTemplate",
    "ReadPair",
    "MergedContig",
    "AlignmentAnnotation",
    "AlignmentRecord",
    "DiscardReason",
    "Discarded",
    "Emitted",
    "MappingStatistics",
    "reverse_complement",
    "match_primer",
    "clip_right_primer",
    "merge_reads",
    "annotate_alignment",
    "AmpliconParser",
    "PairedFastqReader",
    "AmpliconReconciler",
    "ReconcileSettings",
    "SamWriter",
    "reconcile_read_pair",
    "run_pipeline"
]
