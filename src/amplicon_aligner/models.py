"""Data models for the amplicon aligner."""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from enum import Enum, IntEnum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .sequence import is_dna, is_n_masked, reverse_complement


class Strand(Enum):
    """Amplicon strand orientation."""
    FORWARD = "+"
    REVERSE = "-"


class PairStage(IntEnum):
    """Furthest gate a read pair passed on its way to emission."""
    UNMATCHED = 0
    PRIMER_MATCHED = 1
    LENGTH_FILTERED = 2
    MERGED = 3
    ALIGNED = 4
    ANNOTATED = 5
    EMITTED = 6


class DiscardReason(Enum):
    """Why a read pair produced no alignment record."""
    MASKED = "masked"
    NO_PRIMER_MATCH = "no_primer_match"
    RIGHT_PRIMER_MISMATCH = "right_primer_mismatch"
    PRIMER_DIMER = "primer_dimer"
    NOT_MERGED = "not_merged"
    POOR_ALIGNMENT = "poor_alignment"
    CIGAR_REJECTED = "cigar_rejected"
    EXCESS_MISMATCHES = "excess_mismatches"

    @property
    def stage(self) -> PairStage:
        """Last stage the pair reached before this rejection."""
        return _DISCARD_STAGES[self]


_DISCARD_STAGES = {
    DiscardReason.MASKED: PairStage.UNMATCHED,
    DiscardReason.NO_PRIMER_MATCH: PairStage.UNMATCHED,
    DiscardReason.RIGHT_PRIMER_MISMATCH: PairStage.UNMATCHED,
    DiscardReason.PRIMER_DIMER: PairStage.PRIMER_MATCHED,
    DiscardReason.NOT_MERGED: PairStage.LENGTH_FILTERED,
    DiscardReason.POOR_ALIGNMENT: PairStage.MERGED,
    DiscardReason.CIGAR_REJECTED: PairStage.ALIGNED,
    DiscardReason.EXCESS_MISMATCHES: PairStage.ANNOTATED,
}


@dataclass(frozen=True)
class AmpliconTemplate:
    """
    Reference context for one amplicon.

    The sequence is stored 5'->3' on the amplicon's own strand, so
    reverse-strand references hold the reverse complement of the genomic
    sequence. ``position`` is the 1-based genomic coordinate of the first
    base after the upstream primer.
    """

    amplicon_id: str
    chromosome: str
    position: int
    sequence: str
    left_primer: str
    right_primer: str
    strand: Strand = Strand.FORWARD

    def __post_init__(self):
        if not is_dna(self.sequence):
            raise ValueError(f"Amplicon {self.amplicon_id} sequence contains non-standard bases")
        if self.left_primer_length + self.right_primer_length > len(self.sequence):
            raise ValueError(
                f"Amplicon {self.amplicon_id} primers ({self.left_primer_length} + "
                f"{self.right_primer_length} bp) exceed reference length {len(self.sequence)}"
            )

    @classmethod
    def from_reference(
        cls,
        amplicon_id: str,
        chromosome: str,
        start: int,
        reference: str,
        left_primer_length: int,
        right_primer_length: int,
        strand: Strand = Strand.FORWARD,
    ) -> "AmpliconTemplate":
        """Derive primers, stored sequence and reported position from a genomic reference."""
        reference = reference.upper()
        left_primer = reference[:left_primer_length]
        right_primer = reverse_complement(reference)[:right_primer_length]

        if strand is Strand.FORWARD:
            position = start + left_primer_length
            sequence = reference
        else:
            position = start + right_primer_length
            sequence = reverse_complement(reference)

        return cls(
            amplicon_id=amplicon_id,
            chromosome=chromosome,
            position=position,
            sequence=sequence,
            left_primer=left_primer,
            right_primer=right_primer,
            strand=strand,
        )

    @property
    def left_primer_length(self) -> int:
        return len(self.left_primer)

    @property
    def right_primer_length(self) -> int:
        return len(self.right_primer)

    @property
    def is_forward(self) -> bool:
        return self.strand is Strand.FORWARD

    @property
    def min_read_length(self) -> int:
        """Primer lengths combined; reads need this plus the minimum insert."""
        return self.left_primer_length + self.right_primer_length

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        data = asdict(self)
        data['strand'] = self.strand.value
        return data


@dataclass(frozen=True)
class ReadPair:
    """One paired-end fragment as read from the two FASTQ files."""

    name: str
    sequence1: str
    quality1: str
    sequence2: str
    quality2: str

    def __post_init__(self):
        if len(self.sequence1) != len(self.quality1) or len(self.sequence2) != len(self.quality2):
            raise ValueError(f"Read {self.name} has sequence and quality of different lengths")

    @property
    def is_masked(self) -> bool:
        """Either mate is made up entirely of N bases."""
        return is_n_masked(self.sequence1) or is_n_masked(self.sequence2)


@dataclass(frozen=True)
class MergedContig:
    """Consensus of two overlapping mates."""

    sequence: str
    quality: str

    def __len__(self) -> int:
        return len(self.sequence)

    def reverse_complement(self) -> "MergedContig":
        """Contig on the opposite strand, qualities reversed to match."""
        return MergedContig(reverse_complement(self.sequence), self.quality[::-1])


@dataclass(frozen=True)
class AlignmentAnnotation:
    """CIGAR, edit distance and informative mismatch count for one alignment."""

    cigar: str
    edit_distance: int
    mismatches: int
    spans: Tuple[Tuple[str, int], ...] = ()


@dataclass(frozen=True)
class AlignmentRecord:
    """One merged read pair aligned to its amplicon."""

    name: str
    flag: int
    chromosome: str
    position: int
    mapping_quality: int
    cigar: str
    sequence: str
    quality: str
    edit_distance: int
    score: int
    amplicon_id: str

    def to_sam(self, read_group: Optional[str] = None) -> str:
        """Render as one tab-separated SAM line without a trailing newline."""
        columns = [
            self.name,
            str(self.flag),
            self.chromosome,
            str(self.position),
            str(self.mapping_quality),
            self.cigar,
            "*",
            "0",
            "0",
            self.sequence,
            self.quality,
        ]
        if read_group is not None:
            columns.append(f"RG:Z:{read_group}")
        columns.append(f"NM:i:{self.edit_distance}")
        columns.append(f"AS:i:{self.score}")
        columns.append(f"CO:Z:{self.amplicon_id}")
        return "\t".join(columns)


@dataclass(frozen=True)
class Discarded:
    """A read pair that produced no record."""

    reason: DiscardReason
    amplicon_id: Optional[str] = None

    @property
    def stage(self) -> PairStage:
        return self.reason.stage


@dataclass(frozen=True)
class Emitted:
    """A read pair that produced an alignment record."""

    record: AlignmentRecord

    @property
    def amplicon_id(self) -> str:
        return self.record.amplicon_id

    @property
    def stage(self) -> PairStage:
        return PairStage.EMITTED


Outcome = Union[Discarded, Emitted]


@dataclass
class AmpliconStats:
    """Per-amplicon read counts."""

    usable: int = 0
    merged: int = 0
    mapped: int = 0

    def __iadd__(self, other: "AmpliconStats") -> "AmpliconStats":
        self.usable += other.usable
        self.merged += other.merged
        self.mapped += other.mapped
        return self


@dataclass
class MappingStatistics:
    """Run-level and per-amplicon counters accumulated from read pair outcomes."""

    total_reads: int = 0
    masked_reads: int = 0
    primer_matched: int = 0
    usable: int = 0
    merged: int = 0
    not_merged: int = 0
    mapped: int = 0
    amplicons: Dict[str, AmpliconStats] = field(default_factory=dict)
    discards: Counter = field(default_factory=Counter)

    @classmethod
    def for_amplicons(cls, amplicon_ids: Iterable[str]) -> "MappingStatistics":
        """Statistics with a zeroed row for every amplicon, in the given order."""
        return cls(amplicons={amplicon_id: AmpliconStats() for amplicon_id in amplicon_ids})

    def amplicon(self, amplicon_id: str) -> AmpliconStats:
        if amplicon_id not in self.amplicons:
            self.amplicons[amplicon_id] = AmpliconStats()
        return self.amplicons[amplicon_id]

    def record(self, outcome: Outcome) -> None:
        """Fold one read pair outcome into the counters."""
        self.total_reads += 1

        if isinstance(outcome, Discarded):
            self.discards[outcome.reason] += 1
            if outcome.reason is DiscardReason.MASKED:
                self.masked_reads += 1
            elif outcome.reason is DiscardReason.NOT_MERGED:
                self.not_merged += 1

        stage = outcome.stage

        if stage >= PairStage.PRIMER_MATCHED:
            self.primer_matched += 1

        if stage >= PairStage.LENGTH_FILTERED:
            self.usable += 1
            self.amplicon(outcome.amplicon_id).usable += 1

        if stage >= PairStage.MERGED:
            self.merged += 1
            self.amplicon(outcome.amplicon_id).merged += 1

        if stage is PairStage.EMITTED:
            self.mapped += 1
            self.amplicon(outcome.amplicon_id).mapped += 1

    def merge(self, other: "MappingStatistics") -> "MappingStatistics":
        """Add another accumulator's counts into this one."""
        self.total_reads += other.total_reads
        self.masked_reads += other.masked_reads
        self.primer_matched += other.primer_matched
        self.usable += other.usable
        self.merged += other.merged
        self.not_merged += other.not_merged
        self.mapped += other.mapped
        for amplicon_id, counts in other.amplicons.items():
            stats = self.amplicon(amplicon_id)
            stats += counts
        self.discards.update(other.discards)
        return self

    def percent_of_usable(self, count: int) -> float:
        """Percentage of usable pairs, 0 when nothing was usable."""
        if not self.usable:
            return 0.0
        return count / self.usable * 100

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            'total_reads': self.total_reads,
            'masked_reads': self.masked_reads,
            'primer_matched': self.primer_matched,
            'usable': self.usable,
            'merged': self.merged,
            'not_merged': self.not_merged,
            'mapped': self.mapped,
            'amplicons': {k: asdict(v) for k, v in self.amplicons.items()},
            'discards': {k.value: v for k, v in self.discards.items()},
        }

    def rows(self) -> List[Tuple[str, int, int, int]]:
        """Per-amplicon (id, usable, merged, mapped) rows in insertion order."""
        return [(k, v.usable, v.merged, v.mapped) for k, v in self.amplicons.items()]
