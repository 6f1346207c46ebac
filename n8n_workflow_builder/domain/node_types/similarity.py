"""
String similarity used to suggest node types for misspelled identifiers.

Scores are derived from the Levenshtein edit distance, normalized to the
0..1 range by the length of the longer string. Comparison is
case-insensitive; no other normalization is applied.
"""

from typing import Iterable, Optional

SUGGESTION_THRESHOLD = 0.6


def levenshtein_distance(a: str, b: str) -> int:
    """
    Minimum number of single-character insertions, deletions and
    substitutions turning ``a`` into ``b``.

    Example:
        >>> levenshtein_distance('kitten', 'sitting')
        3
    """
    matrix = [[i] + [0] * len(b) for i in range(len(a) + 1)]
    for j in range(len(b) + 1):
        matrix[0][j] = j

    for i in range(1, len(a) + 1):
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            matrix[i][j] = min(
                matrix[i - 1][j] + 1,
                matrix[i][j - 1] + 1,
                matrix[i - 1][j - 1] + cost,
            )

    return matrix[len(a)][len(b)]


def similarity(a: str, b: str) -> float:
    """
    Case-insensitive similarity score between 0.0 and 1.0.

    Two empty strings are identical and score 1.0.

    Example:
        >>> similarity('HttpRequest', 'httprequest')
        1.0
        >>> similarity('Merge', 'Merg')
        0.8
    """
    s1 = a.lower()
    s2 = b.lower()
    longest = max(len(s1), len(s2))
    if longest == 0:
        return 1.0
    return 1 - levenshtein_distance(s1, s2) / longest


def find_closest(
    query: str,
    candidates: Iterable[str],
    threshold: float = SUGGESTION_THRESHOLD,
) -> Optional[str]:
    """
    Return the candidate most similar to ``query``, or None.

    Only scores strictly above ``threshold`` qualify. On ties the first
    candidate encountered wins.
    """
    best_match = None
    best_score = 0.0

    for candidate in candidates:
        score = similarity(query, candidate)
        if score > best_score and score > threshold:
            best_score = score
            best_match = candidate

    return best_match
