from __future__ import annotations

from collections.abc import Iterable

_INSERT_COST = 10
_REPLACE_COST = 11
_DELETE_COST = 10


def get_suggestion(possibilities: Iterable[str], value: str) -> str | None:
    """Return the possibility closest to ``value``, or None when nothing is similar enough.

    Distance is a weighted Levenshtein distance. The best candidate must stay
    below ``(len(value) / 4 + 1) * 10 + 0.1``, so short names tolerate about
    one typo and longer names proportionally more. Names are compared as a
    whole; accessor prefixes such as ``get_`` or ``is_`` are not stripped, as
    suggestions are only made for parameter names.

    Args:
        possibilities: Known names to choose from.
        value: Misspelled name to find an alternative for.

    """
    best: str | None = None
    minimum = (len(value) / 4 + 1) * 10 + 0.1
    for item in dict.fromkeys(possibilities):
        if item == value:
            continue
        distance = _weighted_levenshtein(item, value)
        if distance < minimum:
            minimum = distance
            best = item
    return best


def _weighted_levenshtein(source: str, target: str) -> int:
    previous = [index * _INSERT_COST for index in range(len(target) + 1)]
    for source_index, source_char in enumerate(source, start=1):
        current = [source_index * _DELETE_COST]
        for target_index, target_char in enumerate(target, start=1):
            replace = previous[target_index - 1]
            if source_char != target_char:
                replace += _REPLACE_COST
            current.append(
                min(
                    previous[target_index] + _DELETE_COST,
                    current[target_index - 1] + _INSERT_COST,
                    replace,
                ),
            )
        previous = current
    return previous[-1]


__all__ = ["get_suggestion"]
