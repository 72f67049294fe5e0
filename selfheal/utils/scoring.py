from __future__ import annotations

from typing import Iterable

from selfheal.core.metadata import ElementSignature

TAG_WEIGHT = 3.0
TEXT_WEIGHT = 2.0
CLASS_WEIGHT = 2.0
ID_WEIGHT = 1.0
TOTAL_WEIGHT = TAG_WEIGHT + TEXT_WEIGHT + CLASS_WEIGHT + ID_WEIGHT


def levenshtein(left: str, right: str) -> int:
    """Classic edit distance with unit insert, delete and substitute costs."""

    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            if left_char == right_char:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], current[j - 1], previous[j]) + 1)
        previous = current
    return previous[-1]


def string_similarity(left: str, right: str) -> float:
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    longest = max(len(left), len(right))
    return (longest - levenshtein(left, right)) / longest


def element_similarity(left: ElementSignature, right: ElementSignature) -> float:
    score = 0.0
    if left.tag and left.tag == right.tag:
        score += TAG_WEIGHT
    if left.text == right.text:
        score += TEXT_WEIGHT
    else:
        score += TEXT_WEIGHT * string_similarity(left.text, right.text)
    score += CLASS_WEIGHT * _class_overlap(left.classes, right.classes)
    if left.id and left.id == right.id:
        score += ID_WEIGHT
    return score / TOTAL_WEIGHT


def score_candidates(
    reference: ElementSignature,
    candidates: Iterable[ElementSignature],
) -> list[tuple[ElementSignature, float]]:
    scored = [(candidate, round(element_similarity(reference, candidate), 4)) for candidate in candidates]
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored


def _class_overlap(expected: frozenset[str], actual: frozenset[str]) -> float:
    largest = max(len(expected), len(actual))
    if not largest:
        return 0.0
    return len(expected & actual) / largest
