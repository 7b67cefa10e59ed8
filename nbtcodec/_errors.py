"""NBT error codes and exception classes.

Every decode or encode failure raises ``NbtError`` with a ``.code`` from the
list below and aborts the whole call; no partial tree or partial output is
ever returned.  Malformed UTF-8 inside names and strings is not an error on
decode: it is replaced with U+FFFD.

``TagAccessError`` and its subclass ``CompoundAccessError`` are different in
kind.  They signal that a caller used a typed or Compound-only accessor on
some other variant, which is a bug in the calling code rather than bad input
data, so they derive from ``TypeError`` and not from ``NbtError``.
"""

from __future__ import annotations

from typing import Optional

from ._constants import TAG_NAMES

# ── Error codes ──────────────────────────────────────────────

ERR_IO: str = "ERR_IO"                          # short read, channel failure
ERR_INVALID_TAG: str = "ERR_INVALID_TAG"        # unknown tag code
ERR_INVALID_LIST: str = "ERR_INVALID_LIST"      # heterogeneous list on encode
ERR_INVALID_STRING: str = "ERR_INVALID_STRING"  # text not encodable as UTF-8
ERR_INVALID_LENGTH: str = "ERR_INVALID_LENGTH"  # negative length prefix
ERR_VALUE_RANGE: str = "ERR_VALUE_RANGE"        # payload outside its width
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"        # exceeds Policy.max_depth

ERROR_CODES = (
    ERR_IO,
    ERR_INVALID_TAG,
    ERR_INVALID_LIST,
    ERR_INVALID_STRING,
    ERR_INVALID_LENGTH,
    ERR_VALUE_RANGE,
    ERR_LIMIT_DEPTH,
)


def describe_tag(tag: int) -> str:
    """Return ``"Name (0xNN)"`` for a known tag, ``"0xNN"`` otherwise."""
    name = TAG_NAMES.get(tag)
    if name is None:
        return "0x{:02x}".format(tag)
    return "{} (0x{:02x})".format(name, tag)


class NbtError(Exception):
    """Exception for NBT decode/encode failures.

    ``.code`` is one of the ERR_* strings above.  ``.tag`` holds the tag
    code involved when there is one (the unknown byte for ERR_INVALID_TAG,
    the offending element tag for ERR_INVALID_LIST).
    """

    def __init__(self, code: str, msg: str = "", tag: Optional[int] = None) -> None:
        super().__init__(msg or code)
        self.code = code
        self.tag = tag


class TagAccessError(TypeError):
    """A typed accessor was called on a value of another variant."""


class CompoundAccessError(TagAccessError):
    """A Compound-only accessor was called on a non-Compound value."""
