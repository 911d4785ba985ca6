"""
Deterministic wall shuffling.

A table is seeded with a hex string. Each hand played at the table derives its
own generator from SHA512(domain prefix + seed + hand number), so resetting the
table yields a fresh, reproducible wall. The generator is PCG64DXSM and the
permutation is a Fisher-Yates shuffle with rejection sampling (no modulo bias).
"""

from __future__ import annotations

import hashlib
import secrets
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shanghai.logic.tiles import Tile

SEED_BYTES = 64
_DOMAIN_PREFIX = b"shanghai-wall-v1:"

_PCG_MULTIPLIER = 0x2360ED051FC65DA44385DF649FCCF645
_PCG_DXSM_MUL = 0xDA942042E4DD58B5
_UINT128_MASK = (1 << 128) - 1
_UINT64_MASK = (1 << 64) - 1


def validate_seed_hex(seed_hex: str) -> None:
    """Raise TypeError/ValueError unless seed_hex is SEED_BYTES of hex."""
    if not isinstance(seed_hex, str):
        raise TypeError(f"Seed must be a string, got {type(seed_hex).__name__}")
    expected_length = SEED_BYTES * 2
    if len(seed_hex) != expected_length:
        raise ValueError(f"Seed must be exactly {expected_length} hex characters, got {len(seed_hex)}")
    try:
        bytes.fromhex(seed_hex)
    except ValueError:
        raise ValueError("Seed contains invalid hex characters") from None


def generate_seed() -> str:
    return secrets.token_bytes(SEED_BYTES).hex()


class PCG64DXSM:
    """128-bit LCG state with the DXSM output permutation (64-bit output)."""

    def __init__(self, state: int, increment: int) -> None:
        self._inc = ((increment << 1) | 1) & _UINT128_MASK
        self._state = (state + self._inc) & _UINT128_MASK
        for _ in range(2):
            self._advance()

    def _advance(self) -> None:
        self._state = (self._state * _PCG_MULTIPLIER + self._inc) & _UINT128_MASK

    def next_uint64(self) -> int:
        hi = (self._state >> 64) & _UINT64_MASK
        lo = (self._state & _UINT64_MASK) | 1
        hi ^= hi >> 32
        hi = (hi * _PCG_DXSM_MUL) & _UINT64_MASK
        hi ^= hi >> 48
        hi = (hi * lo) & _UINT64_MASK
        self._advance()
        return hi

    def bounded(self, bound: int) -> int:
        """Uniform integer in [0, bound) via rejection sampling."""
        if bound <= 0 or bound > (1 << 64):
            raise ValueError("bound must be in (0, 2^64]")
        limit = (1 << 64) - ((1 << 64) % bound)
        while True:
            value = self.next_uint64()
            if value < limit:
                return value % bound


def derive_hand_rng(seed_hex: str, hand_number: int) -> PCG64DXSM:
    """Derive the generator for one hand played at a seeded table."""
    if not (0 <= hand_number < 2**32):
        raise ValueError("hand_number must be in [0, 2^32)")
    validate_seed_hex(seed_hex)
    digest = hashlib.sha512(_DOMAIN_PREFIX + bytes.fromhex(seed_hex) + hand_number.to_bytes(4, "little")).digest()
    return PCG64DXSM(
        int.from_bytes(digest[:16], byteorder="little"),
        int.from_bytes(digest[16:32], byteorder="little"),
    )


def shuffle_tiles(tiles: Sequence[Tile], seed_hex: str, hand_number: int) -> list[Tile]:
    """Return a deterministic permutation of tiles for the given seed and hand."""
    pcg = derive_hand_rng(seed_hex, hand_number)
    result = list(tiles)
    n = len(result)
    for i in range(n - 1):
        j = i + pcg.bounded(n - i)
        result[i], result[j] = result[j], result[i]
    return result
