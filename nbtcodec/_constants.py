"""NBT constants — tag codes, file header values, numeric bounds and limits.

Tag codes are the single-byte discriminators written before every named
value and once per List (as the element type).  The table is closed: any
byte outside 0x00–0x0C is an unknown tag.
"""

from __future__ import annotations

# ── Tag codes (single byte each) ──────────────────────────────
TAG_END: int = 0x00
TAG_BYTE: int = 0x01
TAG_SHORT: int = 0x02
TAG_INT: int = 0x03
TAG_LONG: int = 0x04
TAG_FLOAT: int = 0x05
TAG_DOUBLE: int = 0x06
TAG_BYTE_ARRAY: int = 0x07
TAG_STRING: int = 0x08
TAG_LIST: int = 0x09
TAG_COMPOUND: int = 0x0A
TAG_INT_ARRAY: int = 0x0B
TAG_LONG_ARRAY: int = 0x0C

TAG_NAMES = {
    TAG_END: "End",
    TAG_BYTE: "Byte",
    TAG_SHORT: "Short",
    TAG_INT: "Int",
    TAG_LONG: "Long",
    TAG_FLOAT: "Float",
    TAG_DOUBLE: "Double",
    TAG_BYTE_ARRAY: "ByteArray",
    TAG_STRING: "String",
    TAG_LIST: "List",
    TAG_COMPOUND: "Compound",
    TAG_INT_ARRAY: "IntArray",
    TAG_LONG_ARRAY: "LongArray",
}

# ── Little-endian (Bedrock) file header ───────────────────────
# Two int32le values precede the root: a format/version tag and the byte
# length of everything after the header.  Readers skip both; the length is
# never used to bound parsing.
HEADER_FORMAT_TAG: int = 3
HEADER_SIZE: int = 8

# ── Signed ranges per fixed-width payload ─────────────────────
# Python ints are unbounded, so the encoder range-checks against these.
INT8_MIN: int = -(2**7)
INT8_MAX: int = 2**7 - 1
INT16_MIN: int = -(2**15)
INT16_MAX: int = 2**15 - 1
INT32_MIN: int = -(2**31)
INT32_MAX: int = 2**31 - 1
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1

# Names and strings carry an unsigned 16-bit byte length.
MAX_STRING_BYTES: int = 0xFFFF

# ── Nesting limit ─────────────────────────────────────────────
# Each List or Compound level costs a few Python frames.  512 matches the
# limit Java edition applies to its own reads and stays well under the
# default interpreter recursion limit.
DEFAULT_MAX_DEPTH: int = 512
