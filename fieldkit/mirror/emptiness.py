"""Field-level emptiness checks for arbitrary objects."""

import dataclasses
from collections.abc import Collection, Iterable, Iterator, Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class NullableFields(Protocol):
    """Capability for types that list their own optional fields."""

    def nullable_fields(self) -> Iterable[tuple[str, Any]]:
        """Return (name, value) pairs for every field of the object."""
        ...


def iter_fields(obj: object) -> Iterator[tuple[str, Any]]:
    """Yield (name, value) for each field of obj.

    Objects implementing NullableFields are asked directly; dataclasses,
    pydantic models and named tuples report their declared fields; mappings
    report their items and other collections their elements, named by index;
    other objects report their slots and instance attributes. Scalars and
    strings have no fields.
    """
    if isinstance(obj, NullableFields) and not isinstance(obj, type):
        yield from obj.nullable_fields()
        return

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        for field in dataclasses.fields(obj):
            yield field.name, getattr(obj, field.name)
        return

    if isinstance(obj, BaseModel):
        for name in type(obj).model_fields:
            yield name, getattr(obj, name)
        return

    if isinstance(obj, tuple) and hasattr(obj, "_fields"):
        yield from zip(obj._fields, obj, strict=True)
        return

    # Collection entries are its fields
    if isinstance(obj, Mapping):
        for key, value in obj.items():
            yield str(key), value
        return

    if isinstance(obj, Collection) and not isinstance(obj, str | bytes | bytearray):
        for index, value in enumerate(obj):
            yield str(index), value
        return

    seen: set[str] = set()
    for klass in type(obj).__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__") or name in seen:
                continue
            seen.add(name)
            # Unset slots count as absent
            yield name, getattr(obj, name, None)

    instance_dict = getattr(obj, "__dict__", None)
    if isinstance(instance_dict, dict) and not isinstance(obj, type):
        for name, value in instance_dict.items():
            if name not in seen:
                yield name, value


def is_empty(obj: object) -> bool:
    """Return True if every field of obj is None (or obj has no fields)."""
    return all(value is None for _, value in iter_fields(obj))
