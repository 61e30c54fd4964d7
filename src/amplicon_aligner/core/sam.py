"""SAM and mapping statistics output."""

from __future__ import annotations

from pathlib import Path
from typing import IO, List, Optional, Sequence

from loguru import logger

from ..exceptions import OutputError
from ..models import AlignmentRecord, MappingStatistics

PROGRAM_ID = "IndelAmpliconAligner"


class SamWriter:
    """Writes aligned read pairs as SAM text."""

    def __init__(self, output_file: Path, sample: str, version: str, command_line: str = ""):
        """
        Initialize writer.

        Args:
            output_file: SAM file to create
            sample: Sample name for the read group
            version: Program version written to the @PG line
            command_line: Command line written to the @PG line
        """
        self.output_file = Path(output_file)
        self.sample = sample
        self.version = version
        self.command_line = command_line
        self.read_group: Optional[str] = None
        self.records_written = 0
        self._handle: Optional[IO[str]] = None

    def __enter__(self) -> "SamWriter":
        try:
            self._handle = open(self.output_file, 'w')
        except OSError as e:
            raise OutputError(str(e), path=str(self.output_file)) from e
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def header_written(self) -> bool:
        return self.read_group is not None

    def header_lines(self, sam_headers: Sequence[str], flowcell_id: str) -> List[str]:
        """Build the header: passthrough lines, then @RG, @PG and @CO."""
        read_group = f"{self.sample}_{flowcell_id}"
        lines = list(sam_headers)
        lines.append(f"@RG\tID:{read_group}\tSM:{self.sample}\tPL:ILLUMINA\tLB:{self.sample}")
        lines.append(f"@PG\tID:{PROGRAM_ID}\tPN:{PROGRAM_ID}\tCL:{self.command_line}\tVN:{self.version}")
        lines.append("@CO\tReads were globally aligned using amplicon specific reference sequences")
        return lines

    def write_header(self, sam_headers: Sequence[str], flowcell_id: str) -> None:
        """Write the SAM header and fix the read group for later records."""
        self._write("".join(f"{line}\n" for line in self.header_lines(sam_headers, flowcell_id)))
        self.read_group = f"{self.sample}_{flowcell_id}"

    def write(self, record: AlignmentRecord) -> None:
        """Write one alignment record."""
        if not self.header_written:
            raise OutputError("SAM header must be written before records", path=str(self.output_file))
        self._write(record.to_sam(self.read_group) + "\n")
        self.records_written += 1

    def close(self) -> None:
        if self._handle is not None:
            try:
                self._handle.close()
            except OSError as e:
                raise OutputError(str(e), path=str(self.output_file)) from e
            finally:
                self._handle = None

    def _write(self, text: str) -> None:
        if self._handle is None:
            raise OutputError("SAM file is not open", path=str(self.output_file))
        try:
            self._handle.write(text)
        except OSError as e:
            raise OutputError(str(e), path=str(self.output_file)) from e


def format_statistics(
    stats: MappingStatistics,
    run_id: str,
    command_line: str,
    version: str,
) -> str:
    """Render the mapping statistics report."""
    lines = [
        f"#ID:{run_id}",
        f"#CL:{command_line}",
        f"#PG:{PROGRAM_ID} v{version}",
        f"#TotalReads:{stats.total_reads}",
        f"#PrimerMatchedPairs:{stats.primer_matched}",
        f"#UsablePairs:{stats.usable}",
        f"#UnmergedPairs:{stats.not_merged} {stats.percent_of_usable(stats.not_merged):g}%",
        f"#TotalAlignedPairs:{stats.mapped} {stats.percent_of_usable(stats.mapped):g}%",
        "#Amplicon\tUsableReads\tMergedReads\tMappedReads",
    ]
    for amplicon_id, usable, merged, mapped in stats.rows():
        lines.append(f"{amplicon_id}\t{usable}\t{merged}\t{mapped}")
    return "\n".join(lines) + "\n"


def write_statistics(
    output_file: Path,
    stats: MappingStatistics,
    run_id: str,
    command_line: str,
    version: str,
) -> Path:
    """Write the mapping statistics report to a file."""
    output_file = Path(output_file)

    try:
        with open(output_file, 'w') as f:
            f.write(format_statistics(stats, run_id, command_line, version))
    except OSError as e:
        raise OutputError(str(e), path=str(output_file)) from e

    logger.info(f"Wrote mapping statistics: {output_file}")
    return output_file
