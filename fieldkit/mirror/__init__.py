"""Object introspection helpers."""

from .emptiness import NullableFields, is_empty, iter_fields

__all__ = ["NullableFields", "is_empty", "iter_fields"]
