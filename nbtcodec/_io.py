"""Channels, compression and file helpers around the core codec.

The codec itself only needs something with ``read(n)`` or ``write(b)``.
This module produces such channels for the three compression modes found
in the wild:

    none   Bedrock level.dat, raw database payloads
    gzip   Java level.dat, player files, structure files
    zlib   region-file chunks

and wraps them in read/write helpers for readers, writers and paths.
Channel lifetime stays with the caller for ``read_from``/``write_to``;
``read_file``/``write_file`` open and close the file themselves.
"""

from __future__ import annotations

import gzip
import io
import logging
import os
import zlib
from contextlib import contextmanager
from enum import Enum
from typing import Any, BinaryIO, Iterator, Optional, Tuple, Union

from ._core import decode, encode
from ._errors import ERR_IO, NbtError
from ._model import NbtValue
from ._policy import JAVA, Policy

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class Compression(Enum):
    NONE = "none"
    GZIP = "gzip"
    ZLIB = "zlib"

    @classmethod
    def parse(cls, text: str) -> "Compression":
        key = text.strip().lower()
        if key in ("", "none", "uncompressed", "raw"):
            return cls.NONE
        for member in cls:
            if member.value == key:
                return member
        raise ValueError("unknown compression {!r}".format(text))


def open_reader(raw: BinaryIO, compression: Compression = Compression.NONE) -> BinaryIO:
    """Return a channel yielding the decompressed bytes of ``raw``."""
    if compression == Compression.NONE:
        return raw
    if compression == Compression.GZIP:
        return gzip.GzipFile(fileobj=raw, mode="rb")
    try:
        return io.BytesIO(zlib.decompress(raw.read()))
    except zlib.error as e:
        raise NbtError(ERR_IO, "invalid zlib stream: {}".format(e)) from e


@contextmanager
def open_writer(raw: BinaryIO, compression: Compression = Compression.NONE) -> Iterator[BinaryIO]:
    """Yield a channel whose bytes reach ``raw`` compressed on exit."""
    if compression == Compression.NONE:
        yield raw
        return
    if compression == Compression.GZIP:
        # mtime=0 keeps the output byte-for-byte reproducible.
        with gzip.GzipFile(fileobj=raw, mode="wb", mtime=0) as gz:
            yield gz
        return
    buf = io.BytesIO()
    yield buf
    raw.write(zlib.compress(buf.getvalue()))


def read_from(reader: BinaryIO,
              compression: Compression = Compression.NONE,
              policy: Policy = JAVA) -> Tuple[str, NbtValue]:
    """Decode one root document from an open binary reader.

    The decompressing wrapper is closed afterwards; ``reader`` is not.
    """
    channel = open_reader(reader, compression)
    try:
        return decode(channel, policy)
    except (EOFError, zlib.error) as e:
        # Truncated or corrupt gzip members surface as these, not OSError.
        raise NbtError(ERR_IO, "corrupt {} stream: {}".format(compression.value, e)) from e
    finally:
        if channel is not reader:
            channel.close()


def write_to(writer: BinaryIO, name: Optional[str], value: Any,
             compression: Compression = Compression.NONE,
             policy: Policy = JAVA) -> None:
    """Encode one root document to an open binary writer."""
    with open_writer(writer, compression) as channel:
        encode(channel, name, value, policy)


def read_file(path: PathLike,
              compression: Compression = Compression.NONE,
              policy: Policy = JAVA) -> Tuple[str, NbtValue]:
    """Read and decode an NBT file."""
    try:
        f = open(path, "rb")
    except OSError as e:
        raise NbtError(ERR_IO, "cannot open {}: {}".format(path, e)) from e
    with f:
        name, value = read_from(f, compression, policy)
    logger.debug("Read NBT %s: root %r (%s, %s, %s)", path, name, value.tag.label,
                 compression.value, policy.endian.name.lower())
    return name, value


def write_file(path: PathLike, name: Optional[str], value: Any,
               compression: Compression = Compression.NONE,
               policy: Policy = JAVA) -> None:
    """Encode and write an NBT file.

    The document is fully encoded before the file is opened, so an encode
    error leaves any existing file untouched.
    """
    buf = io.BytesIO()
    write_to(buf, name, value, compression, policy)
    data = buf.getvalue()
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise NbtError(ERR_IO, "cannot write {}: {}".format(path, e)) from e
    logger.info("Wrote NBT: %s (%d bytes, %s)", path, len(data), compression.value)
