"""Sequence helpers."""

from .neighbors import enumerated_pairs, remove_adjacent_duplicates

__all__ = ["enumerated_pairs", "remove_adjacent_duplicates"]
