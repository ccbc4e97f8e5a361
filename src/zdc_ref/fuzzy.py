"""Fuzzy string matching utilities for chart lookups."""

import re

TOKEN_RE = re.compile(r"[A-Z0-9]+")


def levenshtein(s1: str, s2: str) -> int:
    """
    Calculate the Levenshtein (edit) distance between two strings.

    Returns the minimum number of single-character edits (insertions,
    deletions, or substitutions) needed to transform s1 into s2.
    """
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    if len(s2) == 0:
        return len(s1)

    previous_row = range(len(s2) + 1)
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            # Cost is 0 if characters match, 1 otherwise
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def normalized_levenshtein(s1: str, s2: str) -> float:
    """
    Edit distance scaled to a similarity between 0 and 1.

    1.0 means identical, 0.0 means nothing in common. Two empty strings
    are identical.

    Examples:
        "CNDEL FIVE", "CNDEL FIVE" -> 1.0
        "ABC", "XYZ" -> 0.0
        "ILS 12", "ILS RWY 12" -> 0.6
    """
    longest = max(len(s1), len(s2))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(s1, s2) / longest


def tokenize(text: str) -> list[str]:
    """Split upper-cased text into alphanumeric runs."""
    return TOKEN_RE.findall(text.upper())


def covers_all_tokens(query_tokens: list[str], target: str) -> bool:
    """True if every query token equals or is contained in a target token."""
    target_tokens = set(tokenize(target))
    return all(
        any(qt == tt or qt in tt for tt in target_tokens) for qt in query_tokens
    )
