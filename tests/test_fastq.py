"""Tests for paired FASTQ reading and header synchronisation checks."""

import pytest

from amplicon_aligner.core.fastq import (
    PairedFastqReader,
    get_flowcell_id,
    get_sample_index,
    split_title,
)
from amplicon_aligner.exceptions import ParseError, SynchronisationError
from amplicon_aligner.models import ReadPair

READ_ID = "M01234:12:000000000-ABCDE:1:1101:15589:1331"


def _pair(name, sequence="ACGTACGT"):
    return ReadPair(name, sequence, "I" * len(sequence), sequence, "5" * len(sequence))


@pytest.mark.parametrize("read_id, expected", [
    (READ_ID, "ABCDE"),
    ("NB501234:88:HGKLMBGX9:1:11101:2345:1045", "HGKLMBGX9"),
    ("SIM:1:FC01:7:1:2:3", "FC01"),
])
def test_get_flowcell_id(read_id, expected):
    assert get_flowcell_id(read_id) == expected


def test_flowcell_id_missing():
    assert get_flowcell_id("read42") == "unknown"


def test_title_helpers():
    assert split_title(f"{READ_ID} 1:N:0:ATCACG") == (READ_ID, "1:N:0:ATCACG")
    assert split_title(READ_ID) == (READ_ID, None)
    assert get_sample_index(f"{READ_ID} 1:N:0:ATCACG") == "ATCACG"


def test_reads_pairs_in_order(write_fastq_pair):
    pairs = [_pair(f"{READ_ID[:-4]}{n}", "ACGT" * (n + 1)) for n in range(3)]
    read1, read2 = write_fastq_pair(pairs, index="ATCACG")

    reader = PairedFastqReader(read1, read2)
    result = list(reader)

    assert result == pairs
    assert reader.pairs_read == 3
    assert reader.index == "ATCACG"
    assert reader.flowcell_id == "ABCDE"


def test_reads_plain_text_fastq(tmp_path):
    read1 = tmp_path / "r1.fastq"
    read2 = tmp_path / "r2.fastq"
    read1.write_text(f"@{READ_ID} 1:N:0:1\nACGT\n+\nIIII\n")
    read2.write_text(f"@{READ_ID} 2:N:0:1\nTTGA\n+\n5555\n")

    (pair,) = list(PairedFastqReader(read1, read2))

    assert pair == ReadPair(READ_ID, "ACGT", "IIII", "TTGA", "5555")


def test_mismatched_read_ids(write_fastq_pair):
    titles = [(f"{READ_ID} 1:N:0:3", f"{READ_ID[:-1]}2 2:N:0:3")]
    read1, read2 = write_fastq_pair([_pair(READ_ID)], titles=titles)

    with pytest.raises(SynchronisationError, match="not synchronised"):
        list(PairedFastqReader(read1, read2))


def test_swapped_mate_files(write_fastq_pair):
    read1, read2 = write_fastq_pair([_pair(READ_ID)])

    with pytest.raises(SynchronisationError, match="Expected R1 reads but found R2"):
        list(PairedFastqReader(read2, read1))


def test_mismatched_index(write_fastq_pair):
    titles = [(f"{READ_ID} 1:N:0:ACGT", f"{READ_ID} 2:N:0:TTTT")]
    read1, read2 = write_fastq_pair([_pair(READ_ID)], titles=titles)

    with pytest.raises(SynchronisationError, match="do not match"):
        list(PairedFastqReader(read1, read2))


def test_mixed_indexes(write_fastq_pair):
    second = READ_ID[:-1] + "2"
    titles = [
        (f"{READ_ID} 1:N:0:ACGT", f"{READ_ID} 2:N:0:ACGT"),
        (f"{second} 1:N:0:GGGG", f"{second} 2:N:0:GGGG"),
    ]
    read1, read2 = write_fastq_pair([_pair(READ_ID), _pair(second)], titles=titles)

    with pytest.raises(SynchronisationError, match="mixed indexes"):
        list(PairedFastqReader(read1, read2))


def test_headers_checked_only_for_leading_pairs(write_fastq_pair):
    names = [f"{READ_ID[:-1]}{n}" for n in range(4)]
    titles = [(f"{n} 1:N:0:3", f"{n} 2:N:0:3") for n in names[:2]]
    titles += [(f"{n} 1:N:0:3", f"other{n} 2:N:0:3") for n in names[2:]]
    read1, read2 = write_fastq_pair([_pair(n) for n in names], titles=titles)

    assert len(list(PairedFastqReader(read1, read2, sync_check_reads=2))) == 4

    with pytest.raises(SynchronisationError):
        list(PairedFastqReader(read1, read2, sync_check_reads=3))


def test_unequal_file_lengths(write_fastq_pair, tmp_path):
    read1, _ = write_fastq_pair([_pair(READ_ID), _pair(READ_ID[:-1] + "2")], prefix="long")
    _, read2 = write_fastq_pair([_pair(READ_ID)], prefix="short")

    with pytest.raises(SynchronisationError, match="ended before its mate") as excinfo:
        list(PairedFastqReader(read1, read2))
    assert excinfo.value.fastq_file == str(read2)


def test_malformed_record(tmp_path):
    read1 = tmp_path / "r1.fastq"
    read2 = tmp_path / "r2.fastq"
    read1.write_text(f"@{READ_ID} 1:N:0:1\nACGT\n+\nIII\n")
    read2.write_text(f"@{READ_ID} 2:N:0:1\nACGT\n+\nIIII\n")

    with pytest.raises(ParseError):
        list(PairedFastqReader(read1, read2))


def test_missing_file(tmp_path):
    with pytest.raises(ParseError, match="not found"):
        PairedFastqReader(tmp_path / "a.fastq", tmp_path / "b.fastq")


def test_empty_files(tmp_path):
    read1 = tmp_path / "r1.fastq"
    read2 = tmp_path / "r2.fastq"
    read1.write_text("")
    read2.write_text("")

    reader = PairedFastqReader(read1, read2)
    assert list(reader) == []
    assert reader.flowcell_id is None
