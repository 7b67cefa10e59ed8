"""NBT core — recursive-descent decoder and the mirrored encoder.

Wire layout of one root document:

    [LE only] int32le format_tag, int32le payload_length
    uint8  tag code
    if tag != End:
        uint16 name length (bytes), name bytes (UTF-8)
        payload for tag

Payloads:

    Byte/Short/Int/Long/Float/Double   fixed width in the policy byte order
    ByteArray/IntArray/LongArray       int32 count, then count elements
    String                             uint16 byte length, UTF-8 bytes
    List                               uint8 element tag, int32 count,
                                       count bare payloads (no tag bytes)
    Compound                           (tag, name, payload)* then one End

Decoding is all-or-nothing: the first problem raises ``NbtError`` and no
partial tree escapes.  Encoding builds the whole document in memory before
touching the caller's channel, so a failed encode writes nothing.
"""

from __future__ import annotations

import io
import struct
from typing import Any, BinaryIO, List, NamedTuple, Optional, Tuple

from ._constants import (
    INT8_MAX,
    INT8_MIN,
    INT16_MAX,
    INT16_MIN,
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    MAX_STRING_BYTES,
)
from ._errors import (
    ERR_INVALID_LENGTH,
    ERR_INVALID_LIST,
    ERR_INVALID_STRING,
    ERR_INVALID_TAG,
    ERR_IO,
    ERR_LIMIT_DEPTH,
    ERR_VALUE_RANGE,
    NbtError,
    describe_tag,
)
from ._model import NbtValue, TagType, from_native, tag_type
from ._policy import JAVA, NumberCodec, Policy

# Reads are issued in slices of at most this many bytes, so a corrupt
# length prefix runs into end-of-stream instead of a giant allocation.
_READ_CHUNK = 1 << 20

# TagType -> NumberCodec attribute for the fixed-width scalars.
_SCALARS = {
    TagType.BYTE: "byte",
    TagType.SHORT: "short",
    TagType.INT: "int",
    TagType.LONG: "long",
    TagType.FLOAT: "float",
    TagType.DOUBLE: "double",
}

_INT_BOUNDS = {
    TagType.BYTE: (INT8_MIN, INT8_MAX),
    TagType.SHORT: (INT16_MIN, INT16_MAX),
    TagType.INT: (INT32_MIN, INT32_MAX),
    TagType.LONG: (INT64_MIN, INT64_MAX),
}

# Array tag -> (struct code, element width in bytes).
_ARRAYS = {
    TagType.BYTE_ARRAY: ("b", 1),
    TagType.INT_ARRAY: ("i", 4),
    TagType.LONG_ARRAY: ("q", 8),
}


class Document(NamedTuple):
    """A decoded root along with the header fields it was framed with.

    ``format_tag`` and ``declared_length`` are None for unframed input.
    """

    name: str
    value: NbtValue
    format_tag: Optional[int] = None
    declared_length: Optional[int] = None


def _depth_error(max_depth: int) -> NbtError:
    return NbtError(ERR_LIMIT_DEPTH,
                    "nesting exceeds max_depth={}".format(max_depth))


# ── Decoding ──────────────────────────────────────────────────

class _Reader:
    """Sequential reads from a caller-owned binary channel."""

    __slots__ = ("channel", "num", "max_depth")

    def __init__(self, channel: BinaryIO, policy: Policy) -> None:
        self.channel = channel
        self.num: NumberCodec = policy.numbers
        self.max_depth = policy.max_depth

    def read_exact(self, n: int, what: str) -> bytes:
        chunks: List[bytes] = []
        remaining = n
        while remaining > 0:
            try:
                chunk = self.channel.read(min(remaining, _READ_CHUNK))
            except OSError as e:
                raise NbtError(ERR_IO, "error reading {}: {}".format(what, e)) from e
            if not chunk:
                raise NbtError(ERR_IO, "unexpected end of data reading {} "
                               "(needed {} more bytes)".format(what, remaining))
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def unpack(self, fmt: struct.Struct, what: str) -> Any:
        return fmt.unpack(self.read_exact(fmt.size, what))[0]

    def read_tag(self) -> TagType:
        return tag_type(self.unpack(self.num.ubyte, "tag type"))

    def read_string(self, what: str = "string") -> str:
        length = self.unpack(self.num.ushort, what + " length")
        raw = self.read_exact(length, what)
        # Lossy on purpose: bad sequences become U+FFFD instead of failing.
        return raw.decode("utf-8", errors="replace")

    def read_count(self, what: str) -> int:
        count = self.unpack(self.num.int, what + " length")
        if count < 0:
            raise NbtError(ERR_INVALID_LENGTH,
                           "negative {} length {}".format(what, count))
        return count


def _read_payload(r: _Reader, tag: TagType, depth: int) -> NbtValue:
    """Decode one payload for ``tag``.

    ``depth`` counts the List/Compound levels already entered; entering
    another one checks depth+1 against max_depth.
    """
    if tag == TagType.END:
        return NbtValue.end()

    scalar = _SCALARS.get(tag)
    if scalar is not None:
        return NbtValue(tag, r.unpack(getattr(r.num, scalar), tag.label))

    if tag == TagType.STRING:
        return NbtValue(tag, r.read_string())

    if tag in _ARRAYS:
        code, width = _ARRAYS[tag]
        count = r.read_count(tag.label)
        raw = r.read_exact(count * width, tag.label)
        return NbtValue(tag, list(r.num.array(code, count).unpack(raw)))

    if depth + 1 > r.max_depth:
        raise _depth_error(r.max_depth)

    if tag == TagType.LIST:
        elem_code = r.unpack(r.num.ubyte, "list element type")
        count = r.read_count("list")
        if count == 0:
            # Empty lists may declare any element type, even an unknown one.
            return NbtValue(TagType.LIST, [])
        elem = tag_type(elem_code)
        if elem == TagType.END:
            raise NbtError(ERR_INVALID_TAG,
                           "list of {} End elements".format(count), tag=elem_code)
        items = []
        for _ in range(count):
            items.append(_read_payload(r, elem, depth + 1))
        return NbtValue(TagType.LIST, items)

    # Compound: named triples until the End marker, which is not stored.
    members = {}
    while True:
        child = r.read_tag()
        if child == TagType.END:
            break
        name = r.read_string("name")
        members[name] = _read_payload(r, child, depth + 1)
    return NbtValue(TagType.COMPOUND, members)


def _read_root(r: _Reader, policy: Policy) -> Document:
    format_tag = declared_length = None
    frame = policy.frame
    if frame is not None:
        format_tag, declared_length = frame.unpack(r.read_exact(frame.size, "file header"))

    tag = r.read_tag()
    if tag == TagType.END:
        return Document("", NbtValue.end(), format_tag, declared_length)
    name = r.read_string("name")
    value = _read_payload(r, tag, 0)
    return Document(name, value, format_tag, declared_length)


def decode_document(channel: BinaryIO, policy: Policy = JAVA) -> Document:
    """Decode one root document, keeping the header fields if framed."""
    return _read_root(_Reader(channel, policy), policy)


def decode(channel: BinaryIO, policy: Policy = JAVA) -> Tuple[str, NbtValue]:
    """Decode one root document from ``channel`` into ``(name, value)``.

    Big-endian input starts at the root tag; little-endian input with a
    framed policy starts with the 8-byte header, which is consumed and
    otherwise ignored.  Bytes after the root are left unread.
    """
    doc = decode_document(channel, policy)
    return doc.name, doc.value


def decode_bytes(data: bytes, policy: Policy = JAVA) -> Tuple[str, NbtValue]:
    return decode(io.BytesIO(data), policy)


def decode_payload(channel: BinaryIO, tag: int, policy: Policy = JAVA) -> NbtValue:
    """Decode a bare payload of a known tag: no tag byte, name or header."""
    return _read_payload(_Reader(channel, policy), tag_type(tag), 0)


# ── Encoding ──────────────────────────────────────────────────

class _Writer:
    """Accumulates encoded parts; nothing reaches a channel from here."""

    __slots__ = ("parts", "num", "max_depth")

    def __init__(self, policy: Policy) -> None:
        self.parts: List[bytes] = []
        self.num: NumberCodec = policy.numbers
        self.max_depth = policy.max_depth

    def tag(self, tag: TagType) -> None:
        self.parts.append(self.num.ubyte.pack(tag))

    def string(self, text: Any, what: str = "string") -> None:
        if not isinstance(text, str):
            raise NbtError(ERR_INVALID_STRING,
                           "{} must be str, not {}".format(what, type(text).__name__))
        try:
            raw = text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise NbtError(ERR_INVALID_STRING,
                           "{} is not encodable as UTF-8: {}".format(what, e)) from e
        if len(raw) > MAX_STRING_BYTES:
            raise NbtError(ERR_VALUE_RANGE,
                           "{} is {} bytes, limit is {}".format(what, len(raw), MAX_STRING_BYTES))
        self.parts.append(self.num.ushort.pack(len(raw)))
        self.parts.append(raw)

    def getvalue(self) -> bytes:
        return b"".join(self.parts)


def _check_node(node: Any, where: str) -> NbtValue:
    if not isinstance(node, NbtValue):
        raise TypeError("{} must hold NbtValue instances, found {}".format(
            where, type(node).__name__))
    return node


def _write_scalar(w: _Writer, tag: TagType, v: Any) -> None:
    fmt = getattr(w.num, _SCALARS[tag])
    bounds = _INT_BOUNDS.get(tag)
    if bounds is not None:
        lo, hi = bounds
        if not isinstance(v, int) or not lo <= v <= hi:
            raise NbtError(ERR_VALUE_RANGE,
                           "{} payload {!r} outside [{}, {}]".format(tag.label, v, lo, hi))
        w.parts.append(fmt.pack(v))
        return
    try:
        w.parts.append(fmt.pack(v))
    except (struct.error, OverflowError) as e:
        raise NbtError(ERR_VALUE_RANGE,
                       "{} payload {!r}: {}".format(tag.label, v, e)) from e


def _write_payload(w: _Writer, value: NbtValue, depth: int) -> None:
    tag = value.tag
    v = value.value

    if tag == TagType.END:
        return

    if tag in _SCALARS:
        _write_scalar(w, tag, v)
        return

    if tag == TagType.STRING:
        w.string(v)
        return

    if tag in _ARRAYS:
        code, _width = _ARRAYS[tag]
        try:
            packed = w.num.array(code, len(v)).pack(*v)
        except struct.error as e:
            raise NbtError(ERR_VALUE_RANGE,
                           "{} element out of range: {}".format(tag.label, e)) from e
        w.parts.append(w.num.int.pack(len(v)))
        w.parts.append(packed)
        return

    if depth + 1 > w.max_depth:
        raise _depth_error(w.max_depth)

    if tag == TagType.LIST:
        if not v:
            # Empty lists always go out as element type End, count 0.
            w.tag(TagType.END)
            w.parts.append(w.num.int.pack(0))
            return
        elem = _check_node(v[0], "List").tag
        for item in v[1:]:
            if _check_node(item, "List").tag != elem:
                raise NbtError(ERR_INVALID_LIST,
                               "list mixes {} and {} elements".format(
                                   describe_tag(elem), describe_tag(item.tag)),
                               tag=int(item.tag))
        if elem == TagType.END:
            raise NbtError(ERR_INVALID_TAG, "list elements cannot be End", tag=int(elem))
        w.tag(elem)
        w.parts.append(w.num.int.pack(len(v)))
        for item in v:
            _write_payload(w, item, depth + 1)
        return

    for name, member in v.items():
        _check_node(member, "Compound")
        if member.tag == TagType.END:
            raise NbtError(ERR_INVALID_TAG,
                           "compound member {!r} cannot be End".format(name), tag=int(member.tag))
        w.tag(member.tag)
        w.string(name, "name")
        _write_payload(w, member, depth + 1)
    w.tag(TagType.END)


def _encode_named(name: str, value: NbtValue, policy: Policy) -> bytes:
    w = _Writer(policy)
    w.tag(value.tag)
    if value.tag != TagType.END:
        w.string(name, "name")
        _write_payload(w, value, 0)
    return w.getvalue()


def encode_bytes(name: Optional[str], value: Any, policy: Policy = JAVA) -> bytes:
    """Encode ``(name, value)`` as a root document and return the bytes.

    ``value`` may be an NbtValue or plain Python data (see from_native).
    For a framed little-endian policy the 8-byte header is prepended; its
    length field is the exact size of everything after the header.
    """
    body = _encode_named(name or "", from_native(value), policy)
    frame = policy.frame
    if frame is None:
        return body
    return frame.pack(len(body)) + body


def encode(channel: BinaryIO, name: Optional[str], value: Any, policy: Policy = JAVA) -> None:
    """Encode a root document and write it to ``channel`` in one call."""
    data = encode_bytes(name, value, policy)
    try:
        channel.write(data)
    except OSError as e:
        raise NbtError(ERR_IO, "error writing NBT data: {}".format(e)) from e


def encode_payload(value: Any, policy: Policy = JAVA) -> bytes:
    """Encode a bare payload: no tag byte, name or header."""
    w = _Writer(policy)
    _write_payload(w, from_native(value), 0)
    return w.getvalue()
