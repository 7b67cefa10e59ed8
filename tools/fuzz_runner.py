#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Decoder robustness fuzzing.
#
# Generates three fuzz categories:
#   A) random byte strings -> decode under every policy
#   B) valid encodings with bytes flipped, inserted or cut -> decode
#   C) adversarial headers (huge counts, deep nesting, bad element tags) -> decode
#
# The decoder must either return a tree that re-encodes without error, or
# raise NbtError.  Any other exception prints a minimal repro and exits non-zero.

import os, sys, random, traceback
from typing import Any, Dict, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from nbtcodec import (
    BEDROCK,
    JAVA,
    NbtError,
    NbtValue,
    Policy,
    decode_bytes,
    encode_bytes,
)

SEED = int(os.environ.get("NBT_SEED", "4242"))
ROUNDS = int(os.environ.get("NBT_FUZZ_ROUNDS", "5000"))
MAX_RAW = int(os.environ.get("NBT_FUZZ_MAX_RAW", "96"))

POLICIES = [
    ("java", JAVA),
    ("bedrock", BEDROCK),
    ("le-raw", Policy.little(framed=False)),
    ("java-shallow", Policy.big(max_depth=4)),
]

random.seed(SEED)

def crash(label: str, policy: str, raw: bytes, ctx: Dict[str, Any]) -> None:
    print("CRASH:", label, "policy=" + policy)
    print("INPUT:", raw.hex())
    print("CTX:", ctx)
    traceback.print_exc()
    raise SystemExit(1)

def check(label: str, raw: bytes, ctx: Dict[str, Any]) -> str:
    """Decode ``raw`` under every policy; return the outcome of the first."""
    outcome = ""
    for pname, policy in POLICIES:
        try:
            name, value = decode_bytes(raw, policy)
            encode_bytes(name, value, policy)
            result = "ok"
        except NbtError as e:
            result = e.code
        except Exception:
            crash(label, pname, raw, ctx)
        if not outcome:
            outcome = result
    return outcome

# --- generators ---

def rand_bytes(nmax: int) -> bytes:
    return bytes(random.getrandbits(8) for _ in range(random.randint(0, nmax)))

def rand_ascii(nmax: int) -> str:
    n = random.randint(0, nmax)
    return "".join(chr(random.randint(0x20, 0x7E)) for _ in range(n))

def rand_tree() -> NbtValue:
    def gen(depth: int) -> Any:
        r = random.random()
        if depth > 4 or r < 0.35:
            return random.choice([
                random.randint(-128, 127),
                random.randint(-(1 << 40), 1 << 40),
                random.uniform(-1e9, 1e9),
                rand_ascii(12),
                rand_bytes(8),
            ])
        if r < 0.70:
            return {rand_ascii(8): gen(depth + 1) for _ in range(random.randint(0, 4))}
        # Homogeneous by construction: every element is a compound.
        return [{"v": gen(depth + 1)} for _ in range(random.randint(0, 4))]
    root = NbtValue()
    for _ in range(random.randint(0, 5)):
        root.insert(rand_ascii(8), gen(1))
    return root

def mutate(raw: bytes) -> bytes:
    buf = bytearray(raw)
    for _ in range(random.randint(1, 4)):
        r = random.random()
        if r < 0.5 and buf:
            buf[random.randrange(len(buf))] = random.getrandbits(8)
        elif r < 0.75:
            buf.insert(random.randint(0, len(buf)), random.getrandbits(8))
        elif buf:
            del buf[random.randint(0, len(buf) - 1):]
    return bytes(buf)

def adversarial() -> bytes:
    choice = random.randrange(5)
    if choice == 0:
        # Byte array claiming ~2 GiB with a few bytes behind it.
        return bytes.fromhex("070000 7fffffff") + rand_bytes(8)
    if choice == 1:
        # Thousands of nested single-element list headers.
        return b"\x09\x00\x00" + b"\x09\x00\x00\x00\x01" * random.randint(100, 5000)
    if choice == 2:
        # List whose element tag is outside the table.
        return bytes([0x09, 0x00, 0x00, random.randint(0x0D, 0xFF)]) + b"\x00\x00\x00\x01"
    if choice == 3:
        # Compound with a string length running past the end.
        return bytes.fromhex("0a0000 08 ffff") + rand_bytes(16)
    # Bedrock header whose declared length disagrees with the body.
    return bytes.fromhex("03000000 ffffffff 01 0000 7f")

def main() -> int:
    outcomes: Dict[str, int] = {}
    for i in range(ROUNDS):
        r = random.random()

        if r < 0.35:
            raw = rand_bytes(MAX_RAW)
            label = "A random"
        elif r < 0.85:
            tree = rand_tree()
            base = encode_bytes(rand_ascii(6), tree, random.choice([JAVA, BEDROCK]))
            raw = mutate(base)
            label = "B mutated"
        else:
            raw = adversarial()
            label = "C adversarial"

        result = check(label, raw, {"round": i})
        outcomes[result] = outcomes.get(result, 0) + 1

    summary: List[str] = ["{}={}".format(k, outcomes[k]) for k in sorted(outcomes)]
    print(f"OK: fuzz rounds={ROUNDS} seed={SEED} (no crashes) " + " ".join(summary))
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
