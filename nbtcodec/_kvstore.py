"""Key-value store interface and the player-record reader built on it.

Bedrock worlds keep player data in an ordered key-value database.  Each
value is a little-endian NBT root document *without* the 8-byte file
header.  This module only needs two operations from the store, so any
engine binding (or the in-memory ``MemoryStore``) fits:

    get(key: bytes) -> Optional[bytes]
    iterate() -> Iterator[(key, value)]

Which keys hold player records is a naming convention of the game:
``~local_player`` for the local player and ``player_<id>`` for the others.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Iterator, Mapping, Optional, Protocol, Tuple

from ._core import decode_bytes
from ._model import NbtValue
from ._policy import Policy

logger = logging.getLogger(__name__)

LOCAL_PLAYER_KEY: bytes = b"~local_player"
REMOTE_PLAYER_PREFIX: bytes = b"player_"


class KeyValueStore(Protocol):
    def get(self, key: bytes) -> Optional[bytes]:
        ...

    def iterate(self) -> Iterator[Tuple[bytes, bytes]]:
        ...


class MemoryStore:
    """Dict-backed store; iterates in key order like an on-disk engine."""

    def __init__(self, items: Optional[Mapping[bytes, bytes]] = None) -> None:
        self._data: Dict[bytes, bytes] = dict(items or {})

    def get(self, key: bytes) -> Optional[bytes]:
        return self._data.get(bytes(key))

    def put(self, key: bytes, value: bytes) -> None:
        self._data[bytes(key)] = bytes(value)

    def iterate(self) -> Iterator[Tuple[bytes, bytes]]:
        for key in sorted(self._data):
            yield key, self._data[key]

    def __len__(self) -> int:
        return len(self._data)


def is_local_player_key(key: bytes) -> bool:
    return key.startswith(LOCAL_PLAYER_KEY)


def is_remote_player_key(key: bytes) -> bool:
    return key.startswith(REMOTE_PLAYER_PREFIX)


def is_player_key(key: bytes) -> bool:
    return is_local_player_key(key) or is_remote_player_key(key)


class PlayerRecords:
    """Decode player records out of a ``KeyValueStore``.

    Decode failures propagate as ``NbtError``; a corrupt record is never
    skipped silently.
    """

    def __init__(self, store: KeyValueStore, policy: Optional[Policy] = None) -> None:
        self.store = store
        # Database values never carry the file header.
        self.policy = dataclasses.replace(policy or Policy.little(), framed=False)

    def _decode(self, key: bytes, raw: bytes) -> NbtValue:
        _name, value = decode_bytes(raw, self.policy)
        logger.debug("Decoded player record %r (%d bytes)", key, len(raw))
        return value

    def get(self, key: bytes) -> Optional[NbtValue]:
        """Decode the record under ``key``; None if absent or not a player key."""
        if not is_player_key(key):
            return None
        raw = self.store.get(key)
        if raw is None:
            return None
        return self._decode(key, raw)

    def local_player(self) -> Optional[NbtValue]:
        return self.get(LOCAL_PLAYER_KEY)

    def remote_players(self) -> Iterator[Tuple[bytes, NbtValue]]:
        """Yield ``(key, record)`` for every ``player_`` key, in store order."""
        for key, raw in self.store.iterate():
            if is_remote_player_key(key):
                yield key, self._decode(key, raw)
