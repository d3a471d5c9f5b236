"""
Minimal transaction model and the canonical signature digest.

Only what the token protocol needs is modelled: outpoints, sequence
numbers, outputs and the digest that the owner signs.  Unlocking
scripts are not serialised here; the spender's evidence travels as a
``TransitionWitness``.

The digest follows the replay-protected (FORKID) sighash algorithm; see
``encoding`` for the byte layout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .encoding import (
    ByteReader,
    TransactionDigest,
    encode_var_bytes,
    uint32_le,
    uint64_le,
)
from .hash import hash256

SIGHASH_ALL = 0x01
SIGHASH_FORKID = 0x40
DEFAULT_SEQUENCE = 0xFFFFFFFF
TXID_BYTES = 32


@dataclass(frozen=True)
class Outpoint:
    """Reference to an output:  txid (display byte order) and index."""

    txid: bytes
    index: int

    def __post_init__(self) -> None:
        if len(self.txid) != TXID_BYTES:
            raise ValueError(f"txid must be {TXID_BYTES} bytes")

    @classmethod
    def from_hex(cls, txid: str, index: int) -> Outpoint:
        return cls(bytes.fromhex(txid), index)

    def serialize(self) -> bytes:
        return self.txid[::-1] + uint32_le(self.index)


@dataclass(frozen=True)
class TxInput:
    outpoint: Outpoint
    sequence: int = DEFAULT_SEQUENCE


@dataclass(frozen=True)
class TxOutput:
    """Value-carrying output:  satoshis and locking script."""

    satoshis: int
    locking_script: bytes

    def serialize(self) -> bytes:
        return uint64_le(self.satoshis) + encode_var_bytes(self.locking_script)

    @classmethod
    def parse(cls, data: bytes) -> Tuple[TxOutput, int]:
        """
        Parse one output from the start of *data*.

        Returns ``(output, consumed)``; bytes after the first output are
        left to the caller.  Raises ``LayoutError`` on truncation.
        """
        r = ByteReader(data)
        satoshis = r.read_uint64()
        script = r.read_var_bytes()
        return cls(satoshis=satoshis, locking_script=script), r.position


@dataclass
class Transaction:
    """Unsigned transaction skeleton."""

    version: int = 1
    inputs: List[TxInput] = field(default_factory=list)
    outputs: List[TxOutput] = field(default_factory=list)
    locktime: int = 0

    def add_input(self, txin: TxInput) -> None:
        self.inputs.append(txin)

    def add_output(self, txout: TxOutput) -> None:
        self.outputs.append(txout)

    def serialize_outputs(self) -> bytes:
        return b"".join(o.serialize() for o in self.outputs)

    # digest components ------------------------------------------------------
    def hash_prevouts(self) -> bytes:
        return hash256(b"".join(i.outpoint.serialize() for i in self.inputs))

    def hash_sequence(self) -> bytes:
        return hash256(b"".join(uint32_le(i.sequence) for i in self.inputs))

    def hash_outputs(self) -> bytes:
        return hash256(self.serialize_outputs())

    def signature_digest(
        self,
        input_index: int,
        script_code: bytes,
        value: int,
        sighash_type: int = SIGHASH_ALL | SIGHASH_FORKID,
    ) -> bytes:
        """
        Canonical digest for input *input_index* spending an output
        locked by *script_code* and holding *value* satoshis.

        The signature covers  HASH256(digest).
        """
        if not 0 <= input_index < len(self.inputs):
            raise IndexError(f"no input {input_index}")
        txin = self.inputs[input_index]
        return TransactionDigest(
            version=self.version,
            hash_prevouts=self.hash_prevouts(),
            hash_sequence=self.hash_sequence(),
            outpoint=txin.outpoint.serialize(),
            script_code=script_code,
            value=value,
            sequence=txin.sequence,
            hash_outputs=self.hash_outputs(),
            locktime=self.locktime,
            sighash_type=sighash_type,
        ).to_bytes()
