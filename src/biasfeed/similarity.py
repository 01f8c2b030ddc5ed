"""Normalized Levenshtein similarity between headlines.

    similarity(a, b) = 1 - edit_distance(a, b) / max(len(a), len(b))

Two empty strings are identical (similarity 1.0). Distances are counted in
Python code points.
"""

from rapidfuzz.distance import Levenshtein


def edit_distance(a: str, b: str) -> int:
    """Minimum number of single-character insertions, deletions and
    substitutions turning ``a`` into ``b``."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Return a closeness score in [0.0, 1.0] where 1.0 means identical."""
    return Levenshtein.normalized_similarity(a, b)


def similarity_upper_bound(a: str, b: str) -> float:
    """Upper bound on ``similarity(a, b)`` from the lengths alone.

    The edit distance is never smaller than the length difference, so a pair
    whose bound does not exceed a threshold cannot exceed it either.
    """
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    return 1.0 - abs(len(a) - len(b)) / max_length
