"""NBT value model — one tagged union over the thirteen tag types.

Every node of a tree is an ``NbtValue`` carrying a ``TagType`` and a plain
Python payload:

    End                      None
    Byte/Short/Int/Long      int
    Float/Double             float
    ByteArray/IntArray/...   list of int
    String                   str
    List                     list of NbtValue (one element tag throughout)
    Compound                 dict of str -> NbtValue

There is deliberately no class per tag.  The decoder and encoder dispatch on
``tag`` through tables in ``_core`` and the tag-code table in ``_constants``
is the only place the wire numbers live.
"""

from __future__ import annotations

import struct
from array import array
from enum import IntEnum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ._constants import (
    INT32_MAX,
    INT32_MIN,
    TAG_BYTE,
    TAG_BYTE_ARRAY,
    TAG_COMPOUND,
    TAG_DOUBLE,
    TAG_END,
    TAG_FLOAT,
    TAG_INT,
    TAG_INT_ARRAY,
    TAG_LIST,
    TAG_LONG,
    TAG_LONG_ARRAY,
    TAG_NAMES,
    TAG_SHORT,
    TAG_STRING,
)
from ._errors import (
    ERR_INVALID_TAG,
    ERR_VALUE_RANGE,
    CompoundAccessError,
    NbtError,
    TagAccessError,
    describe_tag,
)


class TagType(IntEnum):
    END = TAG_END
    BYTE = TAG_BYTE
    SHORT = TAG_SHORT
    INT = TAG_INT
    LONG = TAG_LONG
    FLOAT = TAG_FLOAT
    DOUBLE = TAG_DOUBLE
    BYTE_ARRAY = TAG_BYTE_ARRAY
    STRING = TAG_STRING
    LIST = TAG_LIST
    COMPOUND = TAG_COMPOUND
    INT_ARRAY = TAG_INT_ARRAY
    LONG_ARRAY = TAG_LONG_ARRAY

    @property
    def label(self) -> str:
        return TAG_NAMES[self.value]


ARRAY_TAGS = frozenset({TagType.BYTE_ARRAY, TagType.INT_ARRAY, TagType.LONG_ARRAY})

# array.array item size -> array tag, for signed typecodes only.
_ARRAY_BY_ITEMSIZE = {
    1: TagType.BYTE_ARRAY,
    4: TagType.INT_ARRAY,
    8: TagType.LONG_ARRAY,
}


def tag_type(code: int) -> TagType:
    """Map a raw tag byte to its TagType, raising ERR_INVALID_TAG if unknown."""
    try:
        return TagType(code)
    except ValueError:
        raise NbtError(ERR_INVALID_TAG,
                       "invalid tag type {}".format(describe_tag(code)),
                       tag=code) from None


def _default_payload(tag: TagType) -> Any:
    if tag == TagType.END:
        return None
    if tag in (TagType.FLOAT, TagType.DOUBLE):
        return 0.0
    if tag == TagType.STRING:
        return ""
    if tag == TagType.COMPOUND:
        return {}
    if tag == TagType.LIST or tag in ARRAY_TAGS:
        return []
    return 0


def _signed_bytes(data: bytes) -> List[int]:
    return array("b", bytes(data)).tolist()


_F32 = struct.Struct("<f")


def _float32(value: Any) -> float:
    """Round ``value`` to the nearest float32, as the wire will carry it."""
    try:
        return _F32.unpack(_F32.pack(value))[0]
    except (struct.error, OverflowError) as e:
        raise NbtError(ERR_VALUE_RANGE,
                       "Float payload {!r}: {}".format(value, e)) from e


class NbtValue:
    """A single NBT node: ``tag`` plus its payload in ``value``.

    ``NbtValue()`` is an empty Compound, ready for ``insert``.  Use the
    named constructors (``NbtValue.byte(1)``, ``NbtValue.list([...])``...)
    to build other variants, or ``from_native`` to convert plain Python
    data.

    A Float payload is rounded to float32 whenever it is set, so the tree
    holds exactly what encoding will write.

    The mapping-style methods (``get``, ``insert``, ``remove``, ``keys``,
    ``len()``, iteration...) only exist for Compounds.  On any other
    variant they raise ``CompoundAccessError``.  The typed ``as_*``
    accessors raise ``TagAccessError`` when the variant does not match.
    """

    __slots__ = ("tag", "_value")

    def __init__(self, tag: int = TagType.COMPOUND, value: Any = None) -> None:
        self.tag = tag_type(tag)
        self.value = _default_payload(self.tag) if value is None else value

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        if self.tag == TagType.FLOAT:
            value = _float32(value)
        self._value = value

    # ── equality / display ───────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NbtValue):
            return NotImplemented
        return self.tag == other.tag and self.value == other.value

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self.tag == TagType.END:
            return "NbtValue.end()"
        method = _CONSTRUCTOR_NAMES[self.tag]
        return "NbtValue.{}({!r})".format(method, self.value)

    def __str__(self) -> str:
        from ._snbt import to_snbt
        return to_snbt(self)

    # A Compound defines __len__, so without this an empty Compound (and
    # every scalar, whose __len__ raises) would misbehave under ``if v:``.
    def __bool__(self) -> bool:
        return True

    # ── tag helpers ──────────────────────────────────────────

    @property
    def element_tag(self) -> TagType:
        """Element tag of a List as written on the wire (End when empty)."""
        if self.tag != TagType.LIST:
            raise TypeError("element_tag is only defined for List values")
        if not self.value:
            return TagType.END
        return self.value[0].tag

    def to_native(self) -> Any:
        """Return the payload as plain Python data, recursively."""
        tag = self.tag
        if tag == TagType.LIST:
            return [item.to_native() for item in self.value]
        if tag == TagType.COMPOUND:
            return {k: v.to_native() for k, v in self.value.items()}
        if tag in ARRAY_TAGS:
            return list(self.value)
        return self.value

    # ── Compound-only accessors ──────────────────────────────

    def _members(self, op: str) -> Dict[str, "NbtValue"]:
        if self.tag != TagType.COMPOUND:
            raise CompoundAccessError(
                "cannot {} on non-compound NBT value ({})".format(op, self.tag.label))
        return self.value

    def insert(self, name: str, value: Any) -> None:
        """Insert or replace ``name``; native values are converted first."""
        members = self._members("insert")
        if not isinstance(name, str):
            raise TypeError("compound names must be str, not {}".format(type(name).__name__))
        members[name] = from_native(value)

    def get(self, name: str, default: Optional["NbtValue"] = None) -> Optional["NbtValue"]:
        return self._members("get").get(name, default)

    def remove(self, name: str) -> Optional["NbtValue"]:
        """Remove ``name`` and return its value, or None if it was absent."""
        return self._members("remove").pop(name, None)

    def keys(self) -> List[str]:
        return list(self._members("list keys").keys())

    def values(self) -> List["NbtValue"]:
        return list(self._members("list values").values())

    def items(self) -> List[Tuple[str, "NbtValue"]]:
        return list(self._members("list items").items())

    def is_empty(self) -> bool:
        return not self._members("check emptiness")

    def __getitem__(self, name: str) -> "NbtValue":
        return self._members("get")[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.insert(name, value)

    def __delitem__(self, name: str) -> None:
        del self._members("remove")[name]

    def __contains__(self, name: object) -> bool:
        return name in self._members("test membership")

    def __iter__(self) -> Iterator[str]:
        return iter(self._members("iterate"))

    def __len__(self) -> int:
        return len(self._members("take length"))

    # ── typed accessors ──────────────────────────────────────

    def _expect(self, tag: TagType) -> Any:
        if self.tag != tag:
            raise TagAccessError(
                "cannot read {} as {}".format(self.tag.label, tag.label))
        return self._value

    def as_byte(self) -> int:
        return self._expect(TagType.BYTE)

    def as_short(self) -> int:
        return self._expect(TagType.SHORT)

    def as_int(self) -> int:
        return self._expect(TagType.INT)

    def as_long(self) -> int:
        return self._expect(TagType.LONG)

    def as_float(self) -> float:
        return self._expect(TagType.FLOAT)

    def as_double(self) -> float:
        return self._expect(TagType.DOUBLE)

    def as_string(self) -> str:
        return self._expect(TagType.STRING)

    def as_byte_array(self) -> List[int]:
        return self._expect(TagType.BYTE_ARRAY)

    def as_int_array(self) -> List[int]:
        return self._expect(TagType.INT_ARRAY)

    def as_long_array(self) -> List[int]:
        return self._expect(TagType.LONG_ARRAY)

    def as_list(self) -> List["NbtValue"]:
        """The live element list; mutations show up in the tree."""
        return self._expect(TagType.LIST)

    def as_compound(self) -> Dict[str, "NbtValue"]:
        """The live member mapping; mutations show up in the tree."""
        return self._expect(TagType.COMPOUND)

    # ── named constructors ───────────────────────────────────

    @classmethod
    def end(cls) -> "NbtValue":
        return cls(TagType.END)

    @classmethod
    def byte(cls, value: int) -> "NbtValue":
        return cls(TagType.BYTE, value)

    @classmethod
    def short(cls, value: int) -> "NbtValue":
        return cls(TagType.SHORT, value)

    @classmethod
    def int(cls, value: int) -> "NbtValue":
        return cls(TagType.INT, value)

    @classmethod
    def long(cls, value: int) -> "NbtValue":
        return cls(TagType.LONG, value)

    @classmethod
    def float(cls, value: float) -> "NbtValue":
        return cls(TagType.FLOAT, value)

    @classmethod
    def double(cls, value: float) -> "NbtValue":
        return cls(TagType.DOUBLE, value)

    @classmethod
    def byte_array(cls, values: Iterable[int]) -> "NbtValue":
        """Build a ByteArray; ``bytes`` input is reinterpreted as signed."""
        if isinstance(values, (bytes, bytearray, memoryview)):
            return cls(TagType.BYTE_ARRAY, _signed_bytes(values))
        return cls(TagType.BYTE_ARRAY, list(values))

    @classmethod
    def string(cls, value: str) -> "NbtValue":
        return cls(TagType.STRING, value)

    @classmethod
    def list(cls, items: Iterable[Any] = ()) -> "NbtValue":
        return cls(TagType.LIST, [from_native(item) for item in items])

    @classmethod
    def compound(cls, members: Optional[Mapping[str, Any]] = None) -> "NbtValue":
        value = cls(TagType.COMPOUND)
        for name, member in (members or {}).items():
            value.insert(name, member)
        return value

    @classmethod
    def int_array(cls, values: Iterable[int]) -> "NbtValue":
        return cls(TagType.INT_ARRAY, list(values))

    @classmethod
    def long_array(cls, values: Iterable[int]) -> "NbtValue":
        return cls(TagType.LONG_ARRAY, list(values))


_CONSTRUCTOR_NAMES = {
    TagType.BYTE: "byte",
    TagType.SHORT: "short",
    TagType.INT: "int",
    TagType.LONG: "long",
    TagType.FLOAT: "float",
    TagType.DOUBLE: "double",
    TagType.BYTE_ARRAY: "byte_array",
    TagType.STRING: "string",
    TagType.LIST: "list",
    TagType.COMPOUND: "compound",
    TagType.INT_ARRAY: "int_array",
    TagType.LONG_ARRAY: "long_array",
}


def from_native(obj: Any) -> NbtValue:
    """Convert plain Python data to an NbtValue.

    bool -> Byte, int -> Int (Long when it does not fit 32 bits),
    float -> Double, str -> String, bytes -> ByteArray,
    array.array('b'/'i'/'q') -> Byte/Int/LongArray, list/tuple -> List,
    dict -> Compound.  NbtValue instances pass through untouched.
    """
    if isinstance(obj, NbtValue):
        return obj

    # bool before int: isinstance(True, int) is True.
    if isinstance(obj, bool):
        return NbtValue(TagType.BYTE, 1 if obj else 0)

    if isinstance(obj, int):
        if INT32_MIN <= obj <= INT32_MAX:
            return NbtValue(TagType.INT, obj)
        return NbtValue(TagType.LONG, obj)

    if isinstance(obj, float):
        return NbtValue(TagType.DOUBLE, obj)

    if isinstance(obj, str):
        return NbtValue(TagType.STRING, obj)

    if isinstance(obj, (bytes, bytearray)):
        return NbtValue(TagType.BYTE_ARRAY, _signed_bytes(obj))

    if isinstance(obj, array):
        tag = _ARRAY_BY_ITEMSIZE.get(obj.itemsize)
        if obj.typecode in "bhilq" and tag is not None:
            return NbtValue(tag, obj.tolist())
        raise TypeError("no NBT array type for array typecode {!r}".format(obj.typecode))

    if isinstance(obj, (list, tuple)):
        return NbtValue.list(obj)

    if isinstance(obj, dict):
        return NbtValue.compound(obj)

    raise TypeError("cannot convert {} to an NBT value".format(type(obj).__name__))


def tag_of(value: NbtValue) -> int:
    """Return the wire tag code of ``value``."""
    return int(value.tag)


def value_of(code: int) -> NbtValue:
    """Return the default value for a tag code (0, "", empty containers...)."""
    return NbtValue(tag_type(code))
