"""
Overlap detection between adjacent chunks.

Overlap is the longest suffix of one chunk that is also a prefix of the
next one. Splitters that use a chunk_overlap setting repeat text across
chunk boundaries; measuring the actual repeated span tells us whether the
configured overlap was honoured.

Every candidate length is compared: a match at length L says nothing about
lengths L-1 or L+1 ("abab" / "baba" matches at 1 and 3 but not at 2), so
the scan cannot stop at the first mismatch.
"""


def longest_suffix_prefix_overlap(a: str, b: str) -> int:
    """
    Length of the longest suffix of a that is also a prefix of b.

    Scans from the largest candidate length down and returns the first
    exact match.

    Args:
        a: Preceding chunk
        b: Following chunk

    Returns:
        Overlap length in characters, 0 if none or if either string is empty

    Example:
        >>> longest_suffix_prefix_overlap("hello world", "world peace")
        5
    """
    for length in range(min(len(a), len(b)), 0, -1):
        if a[len(a) - length:] == b[:length]:
            return length
    return 0


def longest_suffix_prefix_overlap_ascending(a: str, b: str) -> int:
    """
    Same contract as longest_suffix_prefix_overlap, scanning upward.

    Checks every length from 1 and keeps the last match found. Used as a
    cross-check for the descending scan.
    """
    overlap = 0
    for length in range(1, min(len(a), len(b)) + 1):
        if a[len(a) - length:] == b[:length]:
            overlap = length
    return overlap


def adjacent_overlaps(chunks: list[str]) -> list[int]:
    """Overlap length for every adjacent pair; n-1 values for n chunks."""
    return [
        longest_suffix_prefix_overlap(prev, nxt)
        for prev, nxt in zip(chunks, chunks[1:])
    ]
