"""
Token state and transition witness records.

A ``TokenState`` is committed in a value-carrying output.  Its locking
script starts with a fixed-width, offset-addressed payload followed by
the tag of the verifier program that guards it::

    token_id        32   raw
    owner_key_hash  20   raw
    slot_id         32   raw
    token_type       1   enum
    amount           8   uint64 LE
    accumulator.x   32   uint256 BE
    accumulator.y   32   uint256 BE
    ─────────────  157
    program tag      *   opaque

The payload is not self-describing, so field order and widths are part
of the consensus contract.

A ``TransitionWitness`` is what the spender supplies: authentication
material, the slope hint and claimed points, and the exact digest and
first-output bytes of the spending transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum

from .curve import Point
from .encoding import ByteReader
from .errors import LayoutError
from .field import FIELD_BYTES
from .hash import KEY_HASH_BYTES, SLOT_ID_BYTES, TOKEN_ID_BYTES, derive_slot_id

AMOUNT_BYTES = 8
STATE_PAYLOAD_BYTES = (
    TOKEN_ID_BYTES + KEY_HASH_BYTES + SLOT_ID_BYTES + 1 + AMOUNT_BYTES + 2 * FIELD_BYTES
)


class TokenType(IntEnum):
    """Asset behaviour flags.  Bit 0: non-fungible, bit 1: soulbound."""

    FUNGIBLE = 0
    NFT = 1
    SOULBOUND = 2
    SOULBOUND_NFT = 3


@dataclass(frozen=True)
class TokenState:
    """Committed state of one token thread at one output."""

    token_id: bytes
    owner_key_hash: bytes
    slot_id: bytes
    token_type: TokenType
    amount: int
    accumulator: Point

    def __post_init__(self) -> None:
        if len(self.token_id) != TOKEN_ID_BYTES:
            raise ValueError(f"token id must be {TOKEN_ID_BYTES} bytes")
        if len(self.owner_key_hash) != KEY_HASH_BYTES:
            raise ValueError(f"owner key hash must be {KEY_HASH_BYTES} bytes")
        if len(self.slot_id) != SLOT_ID_BYTES:
            raise ValueError(f"slot id must be {SLOT_ID_BYTES} bytes")
        if not 0 <= self.amount < 1 << (8 * AMOUNT_BYTES):
            raise ValueError("amount must fit in an unsigned 64-bit integer")
        # raises ValueError for unknown type bytes
        object.__setattr__(self, "token_type", TokenType(self.token_type))

    @classmethod
    def create(
        cls,
        token_id: bytes,
        owner_key_hash: bytes,
        amount: int,
        accumulator: Point,
        token_type: TokenType = TokenType.FUNGIBLE,
    ) -> TokenState:
        """Build a state, deriving the slot id from owner and token."""
        return cls(
            token_id=token_id,
            owner_key_hash=owner_key_hash,
            slot_id=derive_slot_id(owner_key_hash, token_id),
            token_type=token_type,
            amount=amount,
            accumulator=accumulator,
        )

    # serialisation ----------------------------------------------------------
    def payload(self) -> bytes:
        return (
            self.token_id
            + self.owner_key_hash
            + self.slot_id
            + bytes([self.token_type])
            + self.amount.to_bytes(AMOUNT_BYTES, "little")
            + self.accumulator.x.to_bytes(FIELD_BYTES, "big")
            + self.accumulator.y.to_bytes(FIELD_BYTES, "big")
        )

    def to_script(self, program_tag: bytes) -> bytes:
        """Locking script: state payload followed by the program tag."""
        return self.payload() + program_tag

    @classmethod
    def from_script(cls, script: bytes) -> TokenState:
        """
        Parse the payload at the start of a locking script.

        Trailing bytes (the program) are ignored.  Raises ``LayoutError``
        when the script is too short or a field is out of range.
        """
        r = ByteReader(script)
        token_id = r.read(TOKEN_ID_BYTES)
        owner = r.read(KEY_HASH_BYTES)
        slot = r.read(SLOT_ID_BYTES)
        type_byte = r.read(1)[0]
        amount = int.from_bytes(r.read(AMOUNT_BYTES), "little")
        acc_x = int.from_bytes(r.read(FIELD_BYTES), "big")
        acc_y = int.from_bytes(r.read(FIELD_BYTES), "big")
        try:
            return cls(
                token_id=token_id,
                owner_key_hash=owner,
                slot_id=slot,
                token_type=TokenType(type_byte),
                amount=amount,
                accumulator=Point(acc_x, acc_y),
            )
        except ValueError as exc:
            raise LayoutError(f"malformed state payload: {exc}") from exc

    def with_amount(self, amount: int) -> TokenState:
        return replace(self, amount=amount)


@dataclass(frozen=True)
class TransitionWitness:
    """
    Spender-supplied evidence for one state transition.

    ``slope`` is a hint: the verifier cannot divide, so it checks the
    hint against the curve equations rather than recomputing it.
    ``transaction_digest`` is the byte string the signature covers
    (after HASH256); ``committed_output_blob`` is the serialised first
    output of the spending transaction.
    """

    signature: bytes
    public_key: bytes
    slope: int
    delta: Point
    previous_accumulator: Point
    next_accumulator: Point
    transaction_digest: bytes
    committed_output_blob: bytes
