"""Neighbor-aware sequence helpers."""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def enumerated_pairs(sequence: Sequence[T]) -> list[tuple[int, T, int, T]]:
    """Pair each element with its predecessor, wrapping around.

    Returns one (prev_index, prev_element, index, element) tuple per element,
    in input order. Element 0 is paired with the last element.
    """
    count = len(sequence)
    pairs = []
    for index, element in enumerate(sequence):
        prev_index = index - 1 if index > 0 else count - 1
        pairs.append((prev_index, sequence[prev_index], index, element))
    return pairs


def remove_adjacent_duplicates(sequence: Sequence[T]) -> list[T]:
    """Collapse runs of equal consecutive elements into one.

    Non-adjacent duplicates are kept. The input is not modified.
    """
    elements: list[T] = []
    for element in sequence:
        if not elements or elements[-1] != element:
            elements.append(element)
    return elements
