"""Edition/endian policy — numeric byte order and root framing.

Java edition files are big-endian and start directly with the root tag.
Bedrock edition files are little-endian throughout and carry an extra
8-byte header before the root:

    int32le format_tag       (conventionally 3)
    int32le payload_length   (bytes that follow the header)

Both axes are chosen at runtime through a ``Policy`` value, so the two
editions can be decoded side by side in one process.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from ._constants import DEFAULT_MAX_DEPTH, HEADER_FORMAT_TAG, HEADER_SIZE


class Endian(Enum):
    BIG = ">"
    LITTLE = "<"

    @classmethod
    def parse(cls, text: str) -> "Endian":
        """Accept ``big``/``little`` (also ``java``/``bedrock``), any case."""
        key = text.strip().lower()
        if key in ("big", "be", "java"):
            return cls.BIG
        if key in ("little", "le", "bedrock"):
            return cls.LITTLE
        raise ValueError("unknown endianness {!r}".format(text))


class NumberCodec:
    """Precompiled ``struct.Struct`` objects for one byte order.

    The byte and unsigned-byte formats ignore byte order but live here too
    so that decoder and encoder only ever talk to one strategy object.
    """

    def __init__(self, order: str) -> None:
        self.order = order
        self.byte = struct.Struct(order + "b")
        self.ubyte = struct.Struct(order + "B")
        self.short = struct.Struct(order + "h")
        self.ushort = struct.Struct(order + "H")
        self.int = struct.Struct(order + "i")
        self.long = struct.Struct(order + "q")
        self.float = struct.Struct(order + "f")
        self.double = struct.Struct(order + "d")

    def array(self, code: str, count: int) -> struct.Struct:
        """Struct for ``count`` consecutive elements of format ``code``."""
        return struct.Struct("{}{}{}".format(self.order, count, code))


_NUMBER_CODECS: Dict[Endian, NumberCodec] = {
    Endian.BIG: NumberCodec(Endian.BIG.value),
    Endian.LITTLE: NumberCodec(Endian.LITTLE.value),
}


def resolve(endian: Endian) -> NumberCodec:
    """Return the numeric read/write strategy for ``endian``."""
    return _NUMBER_CODECS[endian]


class RootFrame:
    """The little-endian file header: format tag + payload length."""

    _HEADER = struct.Struct("<ii")
    size = HEADER_SIZE

    def __init__(self, format_tag: int = HEADER_FORMAT_TAG) -> None:
        self.format_tag = format_tag

    def pack(self, payload_length: int) -> bytes:
        return self._HEADER.pack(self.format_tag, payload_length)

    def unpack(self, raw: bytes) -> Tuple[int, int]:
        """Return ``(format_tag, payload_length)`` exactly as stored."""
        return self._HEADER.unpack(raw)


def frame_root(endian: Endian, format_tag: int = HEADER_FORMAT_TAG) -> Optional[RootFrame]:
    """Framing for a root document: ``None`` for big-endian streams."""
    if endian == Endian.LITTLE:
        return RootFrame(format_tag)
    return None


@dataclass(frozen=True)
class Policy:
    """Everything that parameterizes one decode or encode call.

    ``framed`` controls the little-endian file header.  Payloads stored
    inside Bedrock world databases are little-endian but unframed, so the
    key-value reader uses ``Policy.little(framed=False)``.
    """

    endian: Endian = Endian.BIG
    max_depth: int = DEFAULT_MAX_DEPTH
    framed: bool = True
    format_tag: int = HEADER_FORMAT_TAG

    def __post_init__(self) -> None:
        if not isinstance(self.endian, Endian):
            raise TypeError("endian must be an Endian, not {}".format(type(self.endian).__name__))
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")

    @classmethod
    def big(cls, max_depth: int = DEFAULT_MAX_DEPTH) -> "Policy":
        return cls(Endian.BIG, max_depth=max_depth)

    @classmethod
    def little(cls, max_depth: int = DEFAULT_MAX_DEPTH, framed: bool = True) -> "Policy":
        return cls(Endian.LITTLE, max_depth=max_depth, framed=framed)

    @property
    def numbers(self) -> NumberCodec:
        return resolve(self.endian)

    @property
    def frame(self) -> Optional[RootFrame]:
        if not self.framed:
            return None
        return frame_root(self.endian, self.format_tag)


JAVA = Policy.big()
BEDROCK = Policy.little()
