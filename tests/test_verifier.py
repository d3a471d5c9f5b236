"""Each verifier check in isolation, then the ordered pipeline."""

from __future__ import annotations

import logging
from dataclasses import replace

import pytest
from coincurve import PrivateKey

from homotoken import (
    AuthMismatch,
    BadSignature,
    InvalidTransition,
    LineageBroken,
    Point,
    StateTransitionVerifier,
    TransitionWitness,
    TxOutput,
    check_transition,
    token_delta,
    verify_transition,
)
from homotoken.curve import add, slope
from homotoken.field import FIELD_PRIME
from homotoken.signing import public_key_bytes, sign_digest


def _point(k: int) -> Point:
    return Point.from_public_key(PrivateKey(k.to_bytes(32, "big")).public_key)


def _physics_witness(a: Point, b: Point) -> TransitionWitness:
    return TransitionWitness(
        signature=b"",
        public_key=b"",
        slope=slope(a, b),
        delta=b,
        previous_accumulator=a,
        next_accumulator=add(a, b),
        transaction_digest=b"",
        committed_output_blob=b"",
    )


def _bump(p: Point, coord: str) -> Point:
    if coord == "x":
        return Point((p.x + 1) % FIELD_PRIME, p.y)
    return Point(p.x, (p.y + 1) % FIELD_PRIME)


PAIRS = [(3, 5), (0x1234, 0xABCDEF), (7, 7), (2, 0xFFFFFFFF)]


# ── physics ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize("a, b", PAIRS)
def test_physics_accepts_true_sums(a: int, b: int) -> None:
    check_transition(_physics_witness(_point(a), _point(b)))


@pytest.mark.parametrize("a, b", PAIRS)
@pytest.mark.parametrize(
    "field_name, coord",
    [
        ("delta", "x"),
        ("delta", "y"),
        ("previous_accumulator", "x"),
        ("previous_accumulator", "y"),
        ("next_accumulator", "x"),
        ("next_accumulator", "y"),
    ],
)
def test_physics_rejects_any_perturbed_coordinate(a: int, b: int, field_name: str, coord: str) -> None:
    w = _physics_witness(_point(a), _point(b))
    tampered = replace(w, **{field_name: _bump(getattr(w, field_name), coord)})
    with pytest.raises(InvalidTransition):
        check_transition(tampered)


@pytest.mark.parametrize("a, b", PAIRS)
def test_physics_rejects_slope_off_by_one(a: int, b: int) -> None:
    w = _physics_witness(_point(a), _point(b))
    with pytest.raises(InvalidTransition):
        check_transition(replace(w, slope=w.slope + 1))


def test_physics_rejects_unreduced_values() -> None:
    w = _physics_witness(_point(3), _point(5))
    with pytest.raises(InvalidTransition):
        check_transition(replace(w, slope=w.slope + FIELD_PRIME))
    with pytest.raises(InvalidTransition):
        check_transition(replace(w, slope=-1))



def test_physics_binds_previous_to_locked_accumulator(minted, transfer) -> None:
    check_transition(transfer.witness, minted)
    elsewhere = replace(minted, accumulator=transfer.witness.next_accumulator)
    with pytest.raises(InvalidTransition):
        check_transition(transfer.witness, elsewhere)


def test_claimed_history_is_invalid_transition(minted, utxo, transfer, wallet, resign) -> None:
    claimed = token_delta(minted.token_id, 1_000_000)
    delta = token_delta(minted.token_id, 1)
    forged = add(claimed, delta)
    successor = replace(transfer.successor, accumulator=forged, amount=1)
    w = replace(
        transfer.witness,
        slope=slope(claimed, delta),
        delta=delta,
        previous_accumulator=claimed,
        next_accumulator=forged,
    )
    w = resign(utxo, w, [wallet.state_output(successor)])

    check_transition(w)
    result = verify_transition(minted, w)
    assert not result.accepted
    assert result.reason == "InvalidTransition"

# ── authentication ──────────────────────────────────────────────────────

def test_honest_transfer_is_accepted(minted, transfer) -> None:
    result = verify_transition(minted, transfer.witness)
    assert result.accepted
    assert result.reason is None
    assert bool(result)


def test_foreign_public_key_is_auth_mismatch(minted, transfer, stranger_key) -> None:
    w = replace(transfer.witness, public_key=public_key_bytes(stranger_key))
    result = verify_transition(minted, w)
    assert not result.accepted
    assert result.reason == "AuthMismatch"


def test_signature_over_other_digest_is_bad_signature(minted, transfer, owner_key) -> None:
    w = replace(transfer.witness, signature=sign_digest(owner_key, b"another transaction"))
    with pytest.raises(BadSignature):
        StateTransitionVerifier().verify(minted, w)


def test_malformed_signature_is_bad_signature(minted, transfer) -> None:
    w = replace(transfer.witness, signature=b"\x00" * 71)
    assert verify_transition(minted, w).reason == "BadSignature"


def test_authentication_runs_before_physics(minted, transfer, stranger_key) -> None:
    w = replace(
        transfer.witness,
        public_key=public_key_bytes(stranger_key),
        slope=transfer.witness.slope + 1,
    )
    with pytest.raises(AuthMismatch):
        StateTransitionVerifier().verify(minted, w)


# ── lineage ─────────────────────────────────────────────────────────────

def test_garbled_digest_is_lineage_broken(minted, transfer, owner_key) -> None:
    garbled = transfer.digest[:50]
    w = replace(
        transfer.witness,
        transaction_digest=garbled,
        signature=sign_digest(owner_key, garbled),
    )
    assert verify_transition(minted, w).reason == "LineageBroken"


def test_substituted_output_blob_is_lineage_broken(minted, transfer, wallet) -> None:
    decoy = wallet.state_output(minted).serialize()
    w = replace(transfer.witness, committed_output_blob=decoy)
    assert verify_transition(minted, w).reason == "LineageBroken"


def test_output_writing_other_accumulator_is_lineage_broken(
    minted, transfer, utxo, wallet, resign,
) -> None:
    wrong = replace(transfer.successor, accumulator=minted.accumulator)
    w = resign(utxo, transfer.witness, [wallet.state_output(wrong)])
    with pytest.raises(LineageBroken):
        StateTransitionVerifier().verify(minted, w)


def test_output_without_state_payload_is_lineage_broken(
    minted, transfer, utxo, resign,
) -> None:
    w = resign(utxo, transfer.witness, [TxOutput(1000, b"\x51")])
    assert verify_transition(minted, w).reason == "LineageBroken"


# ── pipeline properties ─────────────────────────────────────────────────

def test_reverification_is_idempotent(minted, transfer) -> None:
    verifier = StateTransitionVerifier()
    good = [verifier.evaluate(minted, transfer.witness) for _ in range(2)]
    bad_w = replace(transfer.witness, slope=transfer.witness.slope + 1)
    bad = [verifier.evaluate(minted, bad_w) for _ in range(2)]
    assert good[0] == good[1]
    assert good[0].accepted
    assert bad[0] == bad[1]
    assert bad[0].reason == "InvalidTransition"


def test_rejection_is_logged(minted, transfer, caplog) -> None:
    bad_w = replace(transfer.witness, slope=transfer.witness.slope + 1)
    with caplog.at_level(logging.WARNING, logger="homotoken.verifier"):
        verify_transition(minted, bad_w)
    assert "InvalidTransition" in caplog.text
