"""Human-readable rendering of NBT trees (stringified NBT).

    {Name: "Steve", Health: 20.0f, Pos: [1.5d, 64.0d, -3.25d],
     Flags: 3b, Seed: 1234L, Heights: [I; 1, 2, 3]}

Rendering only; there is no parser for this text form.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ._model import NbtValue, TagType

_BARE_NAME = re.compile(r"^[A-Za-z0-9._+\-]+$")

_SUFFIXES = {
    TagType.BYTE: "b",
    TagType.SHORT: "s",
    TagType.INT: "",
    TagType.LONG: "L",
    TagType.FLOAT: "f",
    TagType.DOUBLE: "d",
}

_ARRAY_PREFIXES = {
    TagType.BYTE_ARRAY: ("B", "b"),
    TagType.INT_ARRAY: ("I", ""),
    TagType.LONG_ARRAY: ("L", "L"),
}


def quote(text: str) -> str:
    """Double-quote ``text``, escaping backslashes and quotes."""
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _name(name: str) -> str:
    return name if _BARE_NAME.match(name) else quote(name)


def _join(parts: List[str], open_: str, close: str,
          indent: Optional[int], level: int) -> str:
    if not parts:
        return open_ + close
    if indent is None:
        return open_ + ", ".join(parts) + close
    pad = " " * (indent * (level + 1))
    body = ",\n".join(pad + p for p in parts)
    return open_ + "\n" + body + "\n" + " " * (indent * level) + close


def _render(value: NbtValue, indent: Optional[int], level: int) -> str:
    tag = value.tag
    v = value.value

    if tag == TagType.END:
        return "END"
    if tag in _SUFFIXES:
        if tag in (TagType.FLOAT, TagType.DOUBLE):
            return repr(float(v)) + _SUFFIXES[tag]
        return str(v) + _SUFFIXES[tag]
    if tag == TagType.STRING:
        return quote(v)
    if tag in _ARRAY_PREFIXES:
        prefix, suffix = _ARRAY_PREFIXES[tag]
        if not v:
            return "[{};]".format(prefix)
        return "[{}; {}]".format(prefix, ", ".join(str(x) + suffix for x in v))
    if tag == TagType.LIST:
        parts = [_render(item, indent, level + 1) for item in v]
        return _join(parts, "[", "]", indent, level)
    parts = ["{}: {}".format(_name(k), _render(m, indent, level + 1))
             for k, m in v.items()]
    return _join(parts, "{", "}", indent, level)


def to_snbt(value: NbtValue, indent: Optional[int] = None) -> str:
    """Render ``value`` as SNBT text.

    With ``indent`` set, non-empty Lists and Compounds are broken over
    several lines, ``indent`` spaces per level.
    """
    return _render(value, indent, 0)
