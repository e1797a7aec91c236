from rapidfuzz.distance import Levenshtein

CONTAINMENT_SCORE = 0.8


def similarity(first: str, second: str) -> float:
    """
    Case-insensitive similarity between two strings, in [0, 1].

    Equal strings score 1.0. When one string contains the other the score is
    a flat 0.8 regardless of length. Otherwise the Levenshtein distance is
    normalised by the longer string.
    """
    s1 = first.lower()
    s2 = second.lower()

    if s1 == s2:
        return 1.0

    max_length = max(len(s1), len(s2))
    # Exactly one side is empty here; "" is a substring of everything.
    if min(len(s1), len(s2)) == 0:
        return 0.0

    if s1 in s2 or s2 in s1:
        return CONTAINMENT_SCORE

    distance = Levenshtein.distance(s1, s2)
    return max(0.0, 1.0 - distance / max_length)
