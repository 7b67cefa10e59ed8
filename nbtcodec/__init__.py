"""nbtcodec — NBT (Named Binary Tag) codec for Java and Bedrock edition data.

Decode a byte stream into a tree of ``NbtValue`` nodes and encode it back,
bit-for-bit, in either edition:

    Java     big-endian, no file header          Policy.big()    / JAVA
    Bedrock  little-endian, 8-byte file header   Policy.little() / BEDROCK

Quick start:
    >>> from nbtcodec import NbtValue, encode_bytes, decode_bytes, BEDROCK
    >>> level = NbtValue()
    >>> level.insert("LevelName", "My World")
    >>> level.insert("SpawnY", 64)
    >>> data = encode_bytes("", level, BEDROCK)
    >>> data[:4]
    b'\\x03\\x00\\x00\\x00'
    >>> decode_bytes(data, BEDROCK) == ("", level)
    True
"""

from __future__ import annotations

from ._constants import (
    DEFAULT_MAX_DEPTH,
    HEADER_FORMAT_TAG,
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
    TAG_SHORT,
    TAG_STRING,
)
from ._core import (
    Document,
    decode,
    decode_bytes,
    decode_document,
    decode_payload,
    encode,
    encode_bytes,
    encode_payload,
)
from ._errors import (
    ERR_INVALID_LENGTH,
    ERR_INVALID_LIST,
    ERR_INVALID_STRING,
    ERR_INVALID_TAG,
    ERR_IO,
    ERR_LIMIT_DEPTH,
    ERR_VALUE_RANGE,
    CompoundAccessError,
    NbtError,
    TagAccessError,
)
from ._io import (
    Compression,
    open_reader,
    open_writer,
    read_file,
    read_from,
    write_file,
    write_to,
)
from ._kvstore import (
    KeyValueStore,
    MemoryStore,
    PlayerRecords,
    is_player_key,
)
from ._model import NbtValue, TagType, from_native, tag_of, value_of
from ._policy import BEDROCK, JAVA, Endian, Policy, frame_root, resolve
from ._snbt import to_snbt

__version__ = "0.3.0"

__all__ = [
    # Value model
    "NbtValue",
    "TagType",
    "from_native",
    "tag_of",
    "value_of",
    # Policy
    "Endian",
    "Policy",
    "JAVA",
    "BEDROCK",
    "resolve",
    "frame_root",
    # Codec
    "Document",
    "decode",
    "decode_bytes",
    "decode_document",
    "decode_payload",
    "encode",
    "encode_bytes",
    "encode_payload",
    # Compression and files
    "Compression",
    "open_reader",
    "open_writer",
    "read_from",
    "write_to",
    "read_file",
    "write_file",
    # Key-value stores
    "KeyValueStore",
    "MemoryStore",
    "PlayerRecords",
    "is_player_key",
    # Text rendering
    "to_snbt",
    # Exceptions
    "NbtError",
    "CompoundAccessError",
    "TagAccessError",
    # Error codes
    "ERR_IO",
    "ERR_INVALID_TAG",
    "ERR_INVALID_LIST",
    "ERR_INVALID_STRING",
    "ERR_INVALID_LENGTH",
    "ERR_VALUE_RANGE",
    "ERR_LIMIT_DEPTH",
    # Tag codes
    "TAG_END",
    "TAG_BYTE",
    "TAG_SHORT",
    "TAG_INT",
    "TAG_LONG",
    "TAG_FLOAT",
    "TAG_DOUBLE",
    "TAG_BYTE_ARRAY",
    "TAG_STRING",
    "TAG_LIST",
    "TAG_COMPOUND",
    "TAG_INT_ARRAY",
    "TAG_LONG_ARRAY",
    "DEFAULT_MAX_DEPTH",
    "HEADER_FORMAT_TAG",
]
