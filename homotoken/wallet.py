"""
Transfer builder: the prover side of the protocol.

``TokenWallet`` computes everything the verifier will check:

    V     = amount · H(token_id)             (delta)
    N     = P + V                            (next accumulator)
    λ     = slope(P, V)                      (hint)

then assembles a one-input transaction whose first output carries the
successor ``TokenState``, computes the canonical digest for that input,
signs it and packages the ``TransitionWitness``.

Usage
-----
::

    from homotoken import TokenWallet, Utxo, Outpoint, verify_transition

    wallet = TokenWallet(PrivateKey())
    state = wallet.mint(token_id, 1000)
    utxo = wallet.utxo(Outpoint(funding_txid, 0), state)

    bundle = wallet.build_transfer(utxo, 1000, wallet.owner_key_hash)
    assert verify_transition(state, bundle.witness)

A thread starts at a minted state rather than at the identity: the
chord identity the verifier checks has no meaning at the point at
infinity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from coincurve import PrivateKey as _SK

from .config import DEFAULT_CONFIG, LedgerConfig
from .curve import Point, hash_to_curve, multiply, slope
from .hash import hash160
from .signing import public_key_bytes, sign_digest
from .state import TokenState, TokenType, TransitionWitness
from .transaction import Outpoint, Transaction, TxInput, TxOutput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Utxo:
    """A spendable token output."""

    outpoint: Outpoint
    state: TokenState
    satoshis: int = DEFAULT_CONFIG.output_satoshis
    program_tag: bytes = DEFAULT_CONFIG.program_tag

    @property
    def locking_script(self) -> bytes:
        return self.state.to_script(self.program_tag)


@dataclass(frozen=True)
class TransferBundle:
    """Everything produced for one transfer."""

    transaction: Transaction
    witness: TransitionWitness
    successor: TokenState
    digest: bytes


def token_delta(token_id: bytes, amount: int) -> Point:
    """V = amount · H(token_id)."""
    base, _ = hash_to_curve(token_id)
    return multiply(base, amount)


class TokenWallet:
    """Holds one owner key and builds transfers for its token outputs."""

    def __init__(
        self,
        private_key: _SK,
        config: LedgerConfig = DEFAULT_CONFIG,
    ) -> None:
        self._key = private_key
        self.config = config
        self.public_key = public_key_bytes(private_key)
        self.owner_key_hash = hash160(self.public_key)

    # ── states and outputs ────────────────────────────────────────────

    def mint(
        self,
        token_id: bytes,
        amount: int,
        token_type: TokenType = TokenType.FUNGIBLE,
        owner_key_hash: Optional[bytes] = None,
    ) -> TokenState:
        """Genesis state whose accumulator is  amount · H(token_id)."""
        if amount <= 0:
            raise ValueError("mint amount must be positive")
        return TokenState.create(
            token_id=token_id,
            owner_key_hash=owner_key_hash or self.owner_key_hash,
            amount=amount,
            accumulator=token_delta(token_id, amount),
            token_type=token_type,
        )

    def state_output(
        self,
        state: TokenState,
        satoshis: Optional[int] = None,
    ) -> TxOutput:
        return TxOutput(
            satoshis=self.config.output_satoshis if satoshis is None else satoshis,
            locking_script=state.to_script(self.config.program_tag),
        )

    def utxo(self, outpoint: Outpoint, state: TokenState) -> Utxo:
        """The spendable form of an output written by ``state_output``."""
        return Utxo(
            outpoint=outpoint,
            state=state,
            satoshis=self.config.output_satoshis,
            program_tag=self.config.program_tag,
        )

    # ── transfers ─────────────────────────────────────────────────────

    def build_transfer(
        self,
        utxo: Utxo,
        amount: int,
        destination: bytes,
        token_type: Optional[TokenType] = None,
        extra_outputs: Sequence[TxOutput] = (),
    ) -> TransferBundle:
        """
        Spend *utxo*, moving *amount* units to *destination* (an owner
        key hash).

        The successor state is the first output; *extra_outputs* follow
        it and are outside the verifier's lineage guarantee.

        Raises ``ValueError`` if the accumulator would reach the point
        at infinity (no slope exists).
        """
        if amount <= 0:
            raise ValueError("transfer amount must be positive")
        locked = utxo.state
        previous = locked.accumulator
        delta = token_delta(locked.token_id, amount)
        lam = slope(previous, delta)
        next_acc = previous + delta

        successor = TokenState.create(
            token_id=locked.token_id,
            owner_key_hash=destination,
            amount=amount,
            accumulator=next_acc,
            token_type=locked.token_type if token_type is None else token_type,
        )

        tx = Transaction(version=self.config.tx_version, locktime=self.config.locktime)
        tx.add_input(TxInput(utxo.outpoint, sequence=self.config.sequence))
        first = self.state_output(successor)
        tx.add_output(first)
        for out in extra_outputs:
            tx.add_output(out)

        digest = tx.signature_digest(
            0,
            script_code=utxo.locking_script,
            value=utxo.satoshis,
            sighash_type=self.config.sighash_type,
        )

        witness = TransitionWitness(
            signature=sign_digest(self._key, digest),
            public_key=self.public_key,
            slope=lam,
            delta=delta,
            previous_accumulator=previous,
            next_accumulator=next_acc,
            transaction_digest=digest,
            committed_output_blob=first.serialize(),
        )
        logger.info(
            "built transfer of %d units of token %s (%d outputs)",
            amount, locked.token_id.hex()[:16], len(tx.outputs),
        )
        return TransferBundle(
            transaction=tx, witness=witness, successor=successor, digest=digest,
        )
