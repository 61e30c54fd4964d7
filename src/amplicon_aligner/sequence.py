"""DNA sequence helpers shared by every stage of the aligner."""

DNA_BASES = frozenset("ACGT")

_COMPLEMENT = str.maketrans("ACGTacgt", "TGCAtgca")


def reverse_complement(sequence: str) -> str:
    """
    Reverse complement a DNA sequence.

    Case is preserved and any symbol other than A, C, G or T (either case)
    is carried through unchanged at its mirrored position.
    """
    return sequence.translate(_COMPLEMENT)[::-1]


def is_dna(sequence: str) -> bool:
    """Return True if the sequence holds only upper-case A, C, G and T."""
    return all(base in DNA_BASES for base in sequence)


def is_n_masked(sequence: str) -> bool:
    """Return True if every base in the read is an N."""
    return all(base in "Nn" for base in sequence)
