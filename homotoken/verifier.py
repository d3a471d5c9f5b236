"""
State-transition verifier.

Consumes the locked ``TokenState`` of the output being spent and the
spender's ``TransitionWitness`` and either accepts or aborts.  Three
checks run strictly in order; the first failure aborts the spend:

**(a) Authentication**

    HASH160(public_key)                       == locked.owner_key_hash
    ECDSA-verify(signature, HASH256(digest), public_key)

**(b) Physics**: previous is the locked accumulator, and
next = previous + delta without division.  With
λ the slope hint, (xP, yP) the previous accumulator, (xV, yV) the
delta and (xN, yN) the next accumulator:

    λ · (xV − xP)  ≡  yV − yP
    xN             ≡  λ² − xP − xV
    yN             ≡  λ · (xP − xN) − yP          (mod p)

Finding a λ that satisfies all three for a wrong (xN, yN) is
infeasible, so this is equivalent to checking the curve addition
without a modular inverse.

**(c) Lineage**: the proven state is the one this transaction writes:

    HASH256(committed_output_blob)  == digest.hash_outputs
    parse(committed_output_blob).token_id     == locked.token_id
    parse(committed_output_blob).accumulator  == (xN, yN)

The aggregate output hash commits to *all* outputs concatenated, so
this is only sound for single-output spends.  A blob that carries
several outputs hashes correctly and only its first output is
inspected.

The verifier is stateless: the same (locked, witness) pair always
produces the same outcome.

Not checked: the advisory ``amount`` field, ``slot_id`` and
``token_type``.  Amount consistency is the wallet's responsibility.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .encoding import TransactionDigest
from .errors import (
    AuthMismatch,
    BadSignature,
    InvalidTransition,
    LayoutError,
    LineageBroken,
    VerificationError,
)
from .field import FIELD_PRIME, FieldElement, is_canonical
from .hash import hash160, hash256
from .signing import verify_data_signature
from .state import TokenState, TransitionWitness
from .transaction import TxOutput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome reported to the ledger: accept, or abort with a tag."""

    accepted: bool
    reason: Optional[str] = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.accepted


# ── individual checks ───────────────────────────────────────────────────

def check_authentication(locked: TokenState, witness: TransitionWitness) -> None:
    """Owner key hash and data signature over the claimed digest."""
    if hash160(witness.public_key) != locked.owner_key_hash:
        raise AuthMismatch("public key does not hash to the locked owner")

    message_hash = hash256(witness.transaction_digest)
    if not verify_data_signature(witness.signature, message_hash, witness.public_key):
        raise BadSignature("signature does not cover HASH256(transaction digest)")


def _field(value: int, name: str) -> FieldElement:
    if not is_canonical(value, FIELD_PRIME):
        raise InvalidTransition(f"{name} is not a reduced field element")
    return FieldElement(value)


def check_transition(
    witness: TransitionWitness,
    locked: Optional[TokenState] = None,
) -> None:
    """
    Division-free check that  next = previous + delta.

    With *locked* given, previous must also be the accumulator the spent
    output carries.
    """
    if locked is not None and witness.previous_accumulator != locked.accumulator:
        raise InvalidTransition("previous accumulator is not the locked accumulator")

    lam = _field(witness.slope, "slope")
    xv = _field(witness.delta.x, "delta.x")
    yv = _field(witness.delta.y, "delta.y")
    xp = _field(witness.previous_accumulator.x, "previous.x")
    yp = _field(witness.previous_accumulator.y, "previous.y")
    xn = _field(witness.next_accumulator.x, "next.x")
    yn = _field(witness.next_accumulator.y, "next.y")

    if lam * (xv - xp) != yv - yp:
        raise InvalidTransition("slope does not connect previous and delta")
    if lam.square() - xp - xv != xn:
        raise InvalidTransition("next.x does not match slope² − previous.x − delta.x")
    if lam * (xp - xn) - yp != yn:
        raise InvalidTransition("next.y does not match slope·(previous.x − next.x) − previous.y")


def check_lineage(locked: TokenState, witness: TransitionWitness) -> None:
    """The committed first output carries this token and the new accumulator."""
    try:
        digest = TransactionDigest.parse(witness.transaction_digest)
    except LayoutError as exc:
        raise LineageBroken(f"transaction digest: {exc}") from exc

    if hash256(witness.committed_output_blob) != digest.hash_outputs:
        raise LineageBroken("output blob does not match the digest's hash_outputs")

    try:
        output, consumed = TxOutput.parse(witness.committed_output_blob)
        successor = TokenState.from_script(output.locking_script)
    except LayoutError as exc:
        raise LineageBroken(f"committed output: {exc}") from exc

    trailing = len(witness.committed_output_blob) - consumed
    if trailing:
        logger.warning(
            "output blob carries %d bytes beyond the first output; "
            "only the first output is bound by the lineage check",
            trailing,
        )

    if successor.token_id != locked.token_id:
        raise LineageBroken("successor output belongs to a different token")
    if successor.accumulator != witness.next_accumulator:
        raise LineageBroken("successor accumulator differs from the proven state")


# ── verifier ────────────────────────────────────────────────────────────

class StateTransitionVerifier:
    """
    Accept/abort decision for one spend of a token output.

    ``verify`` raises the first ``VerificationError``; ``evaluate`` turns
    the same decision into a ``VerificationResult``.
    """

    def verify(self, locked: TokenState, witness: TransitionWitness) -> None:
        check_authentication(locked, witness)
        logger.debug("authentication passed for owner %s", locked.owner_key_hash.hex())

        check_transition(witness, locked)
        logger.debug("accumulator transition passed")

        check_lineage(locked, witness)
        logger.info(
            "accepted transition for token %s", locked.token_id.hex()[:16]
        )

    def evaluate(
        self,
        locked: TokenState,
        witness: TransitionWitness,
    ) -> VerificationResult:
        try:
            self.verify(locked, witness)
        except VerificationError as exc:
            logger.warning("rejected transition: %s (%s)", exc.tag, exc.detail)
            return VerificationResult(accepted=False, reason=exc.tag, detail=exc.detail)
        return VerificationResult(accepted=True)


def verify_transition(
    locked: TokenState,
    witness: TransitionWitness,
) -> VerificationResult:
    """Shorthand for ``StateTransitionVerifier().evaluate(...)``."""
    return StateTransitionVerifier().evaluate(locked, witness)
