#!/usr/bin/env python3
# tools/invariants_runner.py
#
# Codec invariants (property tests) over random NBT trees.
#
# This runner:
# - generates random trees (all twelve payload tags, homogeneous lists) within limits
# - encodes each tree under Java, Bedrock and unframed little-endian policies
# - checks that decoding gives the tree back and that re-encoding is byte-identical
# - checks that big- and little-endian encodings decode to the same tree
# - checks that empty lists of any element tag come back as End/0
#
# Exit code:
#   0 -> all checks passed
#   1 -> invariant violation

import os, sys, random, struct
from typing import Any, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from nbtcodec import (
    BEDROCK,
    JAVA,
    NbtValue,
    Policy,
    TagType,
    decode_bytes,
    encode_bytes,
)

SEED = int(os.environ.get("NBT_SEED", "1337"))
TRIALS = int(os.environ.get("NBT_TRIALS", "2000"))
MAX_GEN_DEPTH = int(os.environ.get("NBT_GEN_MAX_DEPTH", "6"))
MAX_KEYS = int(os.environ.get("NBT_GEN_MAX_KEYS", "6"))
MAX_LIST = int(os.environ.get("NBT_GEN_MAX_LIST", "6"))
MAX_STR = int(os.environ.get("NBT_GEN_MAX_STR", "24"))
MAX_ARRAY = int(os.environ.get("NBT_GEN_MAX_ARRAY", "16"))

LE_RAW = Policy.little(framed=False)
POLICIES = [("java", JAVA), ("bedrock", BEDROCK), ("le-raw", LE_RAW)]

SCALAR_TAGS = [
    TagType.BYTE, TagType.SHORT, TagType.INT, TagType.LONG,
    TagType.FLOAT, TagType.DOUBLE, TagType.STRING,
    TagType.BYTE_ARRAY, TagType.INT_ARRAY, TagType.LONG_ARRAY,
]
INT_BITS = {TagType.BYTE: 8, TagType.SHORT: 16, TagType.INT: 32, TagType.LONG: 64}
ARRAY_BITS = {TagType.BYTE_ARRAY: 8, TagType.INT_ARRAY: 32, TagType.LONG_ARRAY: 64}

_F32 = struct.Struct(">f")

random.seed(SEED)

def rand_signed(bits: int) -> int:
    r = random.random()
    lo, hi = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    if r < 0.10:
        return lo
    if r < 0.20:
        return hi
    return random.randint(lo, hi)

def rand_utf8_string() -> str:
    # Scalars only; surrogates cannot be encoded.
    out = []
    n = random.randint(0, MAX_STR)
    for _ in range(n):
        r = random.random()
        if r < 0.70:
            out.append(chr(random.randint(0x20, 0x7E)))
        elif r < 0.85:
            out.append(chr(random.randint(0xA0, 0xFF)))
        elif r < 0.95:
            out.append(chr(random.randint(0x0100, 0xD7FF)))
        else:
            out.append(chr(random.randint(0x10000, 0x10FFFF)))
    return "".join(out)

def rand_float32() -> float:
    # Values the wire can carry exactly.
    return _F32.unpack(_F32.pack(random.uniform(-1e6, 1e6)))[0]

def gen_scalar(tag: TagType) -> NbtValue:
    if tag in INT_BITS:
        return NbtValue(tag, rand_signed(INT_BITS[tag]))
    if tag == TagType.FLOAT:
        return NbtValue.float(rand_float32())
    if tag == TagType.DOUBLE:
        return NbtValue.double(random.uniform(-1e300, 1e300))
    if tag == TagType.STRING:
        return NbtValue.string(rand_utf8_string())
    bits = ARRAY_BITS[tag]
    return NbtValue(tag, [rand_signed(bits) for _ in range(random.randint(0, MAX_ARRAY))])

def gen_compound(depth: int) -> NbtValue:
    out = NbtValue()
    for _ in range(random.randint(0, MAX_KEYS)):
        out.insert(rand_utf8_string(), gen_value(depth + 1))
    return out

def gen_list(depth: int) -> NbtValue:
    n = random.randint(0, MAX_LIST)
    r = random.random()
    if depth + 1 >= MAX_GEN_DEPTH or r < 0.60:
        tag = random.choice(SCALAR_TAGS)
        items = [gen_scalar(tag) for _ in range(n)]
    elif r < 0.85:
        items = [gen_compound(depth + 1) for _ in range(n)]
    else:
        items = [gen_list(depth + 1) for _ in range(n)]
    return NbtValue(TagType.LIST, items)

def gen_value(depth: int) -> NbtValue:
    if depth >= MAX_GEN_DEPTH:
        return gen_scalar(random.choice(SCALAR_TAGS))
    r = random.random()
    if r < 0.30:
        return gen_compound(depth)
    if r < 0.50:
        return gen_list(depth)
    return gen_scalar(random.choice(SCALAR_TAGS))

def fail(label: str, *context: Any) -> int:
    print("INVARIANT FAIL:", label)
    for c in context:
        print("  ", repr(c)[:2000])
    return 1

def empty_list_variants() -> List[bytes]:
    # Root List, no name, count 0, every element tag a writer might have used.
    return [bytes([0x09, 0x00, 0x00, code, 0, 0, 0, 0]) for code in range(0x0D)]

def main() -> int:
    for t in range(TRIALS):
        root = gen_compound(0)
        name = rand_utf8_string() if random.random() < 0.5 else ""

        # (1) Round trip and re-encode stability under every policy
        for label, policy in POLICIES:
            b1 = encode_bytes(name, root, policy)
            b2 = encode_bytes(name, root, policy)
            if b1 != b2:
                return fail("encode stability " + label, t)
            got_name, got = decode_bytes(b1, policy)
            if (got_name, got) != (name, root):
                return fail("round trip " + label, t, root, got)
            if encode_bytes(got_name, got, policy) != b1:
                return fail("re-encode identity " + label, t)

        # (2) Endian symmetry: same tree whichever byte order carried it
        be = decode_bytes(encode_bytes(name, root, JAVA), JAVA)
        le = decode_bytes(encode_bytes(name, root, LE_RAW), LE_RAW)
        if be != le:
            return fail("endian symmetry", t)

        # (3) Framed payload is the unframed payload plus an 8-byte header
        framed = encode_bytes(name, root, BEDROCK)
        if framed[8:] != encode_bytes(name, root, LE_RAW):
            return fail("frame body", t)

    # (4) Empty-list normalization
    for raw in empty_list_variants():
        name, value = decode_bytes(raw, JAVA)
        if value != NbtValue(TagType.LIST, []):
            return fail("empty list decode", raw.hex())
        if encode_bytes(name, value, JAVA) != bytes.fromhex("0900000000000000"):
            return fail("empty list encode", raw.hex())

    print(f"OK: invariants passed for TRIALS={TRIALS} seed={SEED}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
