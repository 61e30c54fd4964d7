"""Amplicon list parser."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List

from loguru import logger

from ..exceptions import ParseError
from ..models import AmpliconTemplate, Strand
from ..sequence import is_dna

AMPLICON_COLUMNS = (
    "AmpliconID", "Chr", "Start", "RefSequence",
    "LeftPrimerLength", "RightPrimerLength", "Strand(+/-)",
)


class AmpliconParser:
    """Parser for tab-separated amplicon list files."""

    def __init__(self, amplicon_file: Path):
        """Initialize parser with amplicon file path."""
        self.amplicon_file = Path(amplicon_file)
        self.amplicons: List[AmpliconTemplate] = []
        self.sam_headers: List[str] = []

        if not self.amplicon_file.exists():
            raise ParseError(f"Amplicon file not found: {self.amplicon_file}")

    def parse(self) -> List[AmpliconTemplate]:
        """
        Parse the amplicon file.

        Blank lines and '#' comments are skipped and '@' lines are kept as
        SAM headers. Any malformed amplicon line aborts the parse.
        """
        self.amplicons = []
        self.sam_headers = []
        seen = set()

        logger.info(f"Parsing amplicon list: {self.amplicon_file}")

        try:
            with open(self.amplicon_file, 'r', encoding='utf-8') as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()

                    if not line or line.startswith('#'):
                        continue

                    if line.startswith('@'):
                        self.sam_headers.append(line)
                        continue

                    amplicon = self._parse_line(line, line_number)
                    if amplicon.amplicon_id in seen:
                        raise ParseError(
                            f"Duplicate amplicon ID {amplicon.amplicon_id}",
                            line_number=line_number,
                        )
                    seen.add(amplicon.amplicon_id)
                    self.amplicons.append(amplicon)

        except (IOError, UnicodeDecodeError) as e:
            raise ParseError(f"Failed to read amplicon file: {e}")

        if not self.amplicons:
            raise ParseError(f"No amplicons found in {self.amplicon_file}")

        if not self.sam_headers:
            logger.warning(
                "No SAM headers were provided in the amplicon file; "
                "these must be added manually to pass Picard validation"
            )

        logger.info(f"Successfully parsed {len(self.amplicons)} amplicons")
        return self.amplicons

    def _parse_line(self, line: str, line_number: int) -> AmpliconTemplate:
        """Parse a single amplicon line."""
        # consecutive tabs count as one separator
        fields = re.split(r'\t+', line)

        if len(fields) != len(AMPLICON_COLUMNS):
            raise ParseError(
                f"Expected {len(AMPLICON_COLUMNS)} tab-separated fields "
                f"({' '.join(AMPLICON_COLUMNS)}), got {len(fields)}",
                line_number=line_number,
                line_content=line,
            )

        amplicon_id, chromosome, start, reference, left_length, right_length, strand = fields
        reference = reference.upper()

        if not is_dna(reference):
            raise ParseError(
                f"{amplicon_id} sequence contains non-standard bases",
                line_number=line_number,
            )

        try:
            start = int(start)
            left_length = int(left_length)
            right_length = int(right_length)
        except ValueError as e:
            raise ParseError(
                f"{amplicon_id} has a non-integer coordinate or primer length: {e}",
                line_number=line_number,
                line_content=line,
            )

        if left_length <= 0 or right_length <= 0:
            raise ParseError(f"{amplicon_id} primer lengths must be positive", line_number=line_number)

        if left_length + right_length > len(reference):
            raise ParseError(
                f"{amplicon_id} primers ({left_length} + {right_length} bp) are longer "
                f"than the reference ({len(reference)} bp)",
                line_number=line_number,
            )

        if left_length <= 3 or right_length <= 3:
            logger.warning(f"{amplicon_id} has a primer of 3 bp or less; primer matching needs exact hits")

        try:
            strand = Strand(strand)
        except ValueError:
            raise ParseError(f"{amplicon_id} strand field must be + or -", line_number=line_number)

        return AmpliconTemplate.from_reference(
            amplicon_id=amplicon_id,
            chromosome=chromosome,
            start=start,
            reference=reference,
            left_primer_length=left_length,
            right_primer_length=right_length,
            strand=strand,
        )

    def get_amplicon_by_id(self, amplicon_id: str) -> AmpliconTemplate | None:
        """Get amplicon by ID."""
        for amplicon in self.amplicons:
            if amplicon.amplicon_id == amplicon_id:
                return amplicon
        return None
