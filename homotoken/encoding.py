"""
Bounds-checked binary layouts.

The ledger exchanges opaque byte strings whose fields sit at fixed
offsets.  Instead of slicing at hard-coded positions, every layout is
read through a ``ByteReader`` that raises ``LayoutError`` on any
truncated or over-long input.

Transaction digest layout, version 1
------------------------------------
::

    version          4   uint32 LE
    hash_prevouts   32   HASH256(outpoints)
    hash_sequence   32   HASH256(sequences)
    outpoint        36   txid (reversed) ‖ vout uint32 LE
    script_code      *   CompactSize length ‖ bytes
    value            8   uint64 LE
    sequence         4   uint32 LE
    hash_outputs    32   HASH256(serialised outputs)
    locktime         4   uint32 LE
    sighash_type     4   uint32 LE

``hash_outputs`` therefore occupies the 32 bytes that start
``HASH_OUTPUTS_TAIL_OFFSET`` (40) bytes before the end.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import LayoutError

HASH_BYTES = 32
OUTPOINT_BYTES = 36
HASH_OUTPUTS_TAIL_OFFSET = 40


# ── integer encodings ───────────────────────────────────────────────────
def uint32_le(value: int) -> bytes:
    return value.to_bytes(4, "little")


def uint64_le(value: int) -> bytes:
    return value.to_bytes(8, "little")


def encode_varint(n: int) -> bytes:
    """Bitcoin CompactSize encoding."""
    if n < 0:
        raise ValueError("varint must be non-negative")
    if n < 0xFD:
        return bytes([n])
    if n <= 0xFFFF:
        return b"\xfd" + n.to_bytes(2, "little")
    if n <= 0xFFFFFFFF:
        return b"\xfe" + n.to_bytes(4, "little")
    if n <= 0xFFFFFFFFFFFFFFFF:
        return b"\xff" + n.to_bytes(8, "little")
    raise ValueError("varint too large")


def encode_var_bytes(data: bytes) -> bytes:
    return encode_varint(len(data)) + data


# ── reader ──────────────────────────────────────────────────────────────
class ByteReader:
    """Sequential reader over an immutable byte string."""

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def read(self, n: int) -> bytes:
        if n < 0:
            raise LayoutError("negative read length")
        if n > self.remaining:
            raise LayoutError(
                f"need {n} bytes at offset {self._pos}, only {self.remaining} left"
            )
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def read_uint32(self) -> int:
        return int.from_bytes(self.read(4), "little")

    def read_uint64(self) -> int:
        return int.from_bytes(self.read(8), "little")

    def read_varint(self) -> int:
        prefix = self.read(1)[0]
        if prefix < 0xFD:
            return prefix
        width = {0xFD: 2, 0xFE: 4, 0xFF: 8}[prefix]
        value = int.from_bytes(self.read(width), "little")
        if value < {2: 0xFD, 4: 0x10000, 8: 0x100000000}[width]:
            raise LayoutError("non-canonical CompactSize encoding")
        return value

    def read_var_bytes(self) -> bytes:
        return self.read(self.read_varint())

    def expect_end(self) -> None:
        if self.remaining:
            raise LayoutError(f"{self.remaining} unexpected trailing bytes")


# ── transaction digest ──────────────────────────────────────────────────
@dataclass(frozen=True)
class TransactionDigest:
    """
    Parsed canonical transaction digest (the data the owner signs).

    ``parse`` is strict: the input must be exactly one v1 digest.
    """

    version: int
    hash_prevouts: bytes
    hash_sequence: bytes
    outpoint: bytes
    script_code: bytes
    value: int
    sequence: int
    hash_outputs: bytes
    locktime: int
    sighash_type: int

    @classmethod
    def parse(cls, data: bytes) -> TransactionDigest:
        r = ByteReader(data)
        digest = cls(
            version=r.read_uint32(),
            hash_prevouts=r.read(HASH_BYTES),
            hash_sequence=r.read(HASH_BYTES),
            outpoint=r.read(OUTPOINT_BYTES),
            script_code=r.read_var_bytes(),
            value=r.read_uint64(),
            sequence=r.read_uint32(),
            hash_outputs=r.read(HASH_BYTES),
            locktime=r.read_uint32(),
            sighash_type=r.read_uint32(),
        )
        r.expect_end()
        return digest

    def to_bytes(self) -> bytes:
        return (
            uint32_le(self.version)
            + self.hash_prevouts
            + self.hash_sequence
            + self.outpoint
            + encode_var_bytes(self.script_code)
            + uint64_le(self.value)
            + uint32_le(self.sequence)
            + self.hash_outputs
            + uint32_le(self.locktime)
            + uint32_le(self.sighash_type)
        )
