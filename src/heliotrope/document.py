"""
Schema-less document model.

A :class:`Document` is an ordered sequence of :class:`Field` pairs. Field
names are not unique: Solr multi-valued fields are expressed by repeating
the name, and the order of the repeats is preserved.

Every field holds a :class:`FieldValue`, a closed tagged union over the
scalar kinds the engine returns. Values never change kind implicitly;
:meth:`FieldValue.of` is the one explicit conversion from plain Python
objects.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U64_MAX = 2**64 - 1


class FieldKind(str, Enum):
    """Variant tag of a :class:`FieldValue`."""

    I64 = "i64"
    U64 = "u64"
    F64 = "f64"
    STRING = "string"
    BOOLEAN = "boolean"
    NULL = "null"


_PY_TYPES: dict[FieldKind, type | None] = {
    FieldKind.I64: int,
    FieldKind.U64: int,
    FieldKind.F64: float,
    FieldKind.STRING: str,
    FieldKind.BOOLEAN: bool,
    FieldKind.NULL: None,
}


@dataclass(frozen=True)
class FieldValue:
    """A single scalar field value.

    Build instances with the named constructors (``FieldValue.i64(5)``,
    ``FieldValue.string("x")``...) or with :meth:`of`. Direct construction
    is checked as well, so a ``FieldValue`` can never carry a payload that
    disagrees with its kind.
    """

    kind: FieldKind
    value: int | float | str | bool | None = None

    def __post_init__(self) -> None:
        expected = _PY_TYPES[self.kind]
        if expected is None:
            if self.value is not None:
                raise ValueError(f"null field value cannot carry {self.value!r}")
            return
        # bool is an int subclass; only BOOLEAN may hold one
        if type(self.value) is not expected:
            raise ValueError(
                f"{self.kind.value} field value requires {expected.__name__}, "
                f"got {type(self.value).__name__}"
            )
        if self.kind is FieldKind.I64 and not _I64_MIN <= self.value <= _I64_MAX:  # type: ignore[operator]
            raise ValueError(f"{self.value} is out of range for i64")
        if self.kind is FieldKind.U64 and not 0 <= self.value <= _U64_MAX:  # type: ignore[operator]
            raise ValueError(f"{self.value} is out of range for u64")

    # -- Named constructors --------------------------------------------------

    @classmethod
    def i64(cls, value: int) -> FieldValue:
        return cls(FieldKind.I64, value)

    @classmethod
    def u64(cls, value: int) -> FieldValue:
        return cls(FieldKind.U64, value)

    @classmethod
    def f64(cls, value: float) -> FieldValue:
        return cls(FieldKind.F64, float(value))

    @classmethod
    def string(cls, value: str) -> FieldValue:
        return cls(FieldKind.STRING, value)

    @classmethod
    def boolean(cls, value: bool) -> FieldValue:
        return cls(FieldKind.BOOLEAN, value)

    @classmethod
    def null(cls) -> FieldValue:
        return cls(FieldKind.NULL)

    @classmethod
    def of(cls, obj: Any) -> FieldValue:
        """Convert a plain Python (or decoded JSON) value to a FieldValue.

        Integers follow the wire: non-negative ones are ``u64``, negative
        ones ``i64``, and anything outside both ranges falls back to ``f64``.
        Anything that is not a supported scalar (dicts, lists, custom
        objects) becomes ``null``; this is a lossy degradation, not an error.
        """
        if isinstance(obj, FieldValue):
            return obj
        if obj is None:
            return cls.null()
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            if 0 <= obj <= _U64_MAX:
                return cls.u64(int(obj))
            if _I64_MIN <= obj < 0:
                return cls.i64(int(obj))
            return cls.f64(float(obj))
        if isinstance(obj, float):
            return cls.f64(obj)
        if isinstance(obj, str):
            return cls.string(str(obj))
        return cls.null()

    # -- Accessors -----------------------------------------------------------

    @property
    def is_null(self) -> bool:
        return self.kind is FieldKind.NULL

    def to_python(self) -> int | float | str | bool | None:
        """Return the payload as a plain Python (and JSON-serializable) value."""
        return self.value

    def __repr__(self) -> str:
        if self.is_null:
            return "FieldValue.null()"
        return f"FieldValue.{self.kind.value}({self.value!r})"


@dataclass(frozen=True)
class Field:
    """One named value within a :class:`Document`."""

    name: str
    value: FieldValue


class Document:
    """An ordered, schema-less collection of fields.

    Usage::

        doc = Document()
        doc.add_field("id", "1").add_field("city", "London")
        doc.add_field("tag", "a").add_field("tag", "b")   # multi-valued
        doc.to_json()  # {"id": "1", "city": "London", "tag": "a", "tag": "b"}
        doc.to_dict()  # {"id": "1", "city": "London", "tag": ["a", "b"]}
    """

    __slots__ = ("_fields", "_read_only")

    def __init__(self, fields: Iterable[Field] = ()) -> None:
        self._fields: list[Field] = list(fields)
        self._read_only = False

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, Any]]) -> Document:
        """Build a document from ``(name, value)`` pairs, in order."""
        doc = cls()
        for name, value in pairs:
            doc.add_field(name, value)
        return doc

    @classmethod
    def _decoded(cls, fields: list[Field]) -> Document:
        doc = cls(fields)
        doc._read_only = True
        return doc

    def add_field(self, name: str, value: Any) -> Document:
        """Append a field. Values are not checked against any schema."""
        if self._read_only:
            raise TypeError("documents returned from a Solr response are read-only")
        self._fields.append(Field(name, FieldValue.of(value)))
        return self

    # -- Read API ------------------------------------------------------------

    @property
    def fields(self) -> tuple[Field, ...]:
        return tuple(self._fields)

    @property
    def read_only(self) -> bool:
        return self._read_only

    def names(self) -> list[str]:
        """Distinct field names in first-seen order."""
        return list(dict.fromkeys(f.name for f in self._fields))

    def get(self, name: str, default: FieldValue | None = None) -> FieldValue | None:
        for f in self._fields:
            if f.name == name:
                return f.value
        return default

    def get_all(self, name: str) -> list[FieldValue]:
        return [f.value for f in self._fields if f.name == name]

    def to_json(self) -> str:
        """Serialize as a JSON object with one key per field, in order.

        Repeated names are written as repeated keys, which Solr's JSON
        update loader reads as a multi-valued field and which decoding
        turns back into the same fields. Non-finite floats are not valid
        JSON and raise ``ValueError``.
        """
        members = (
            f"{json.dumps(f.name)}: {json.dumps(f.value.to_python(), allow_nan=False)}"
            for f in self._fields
        )
        return "{" + ", ".join(members) + "}"

    def to_dict(self) -> dict[str, Any]:
        """Plain dict view, for display and JSON output.

        A repeated name becomes a list of its values in insertion order.
        """
        grouped: dict[str, list[Any]] = {}
        for f in self._fields:
            grouped.setdefault(f.name, []).append(f.value.to_python())
        return {k: v[0] if len(v) == 1 else v for k, v in grouped.items()}

    def __iter__(self) -> Iterator[Field]:
        return iter(tuple(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self._fields == other._fields

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{f.name}={f.value!r}" for f in self._fields)
        return f"Document({inner})"

