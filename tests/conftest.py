"""Shared fixtures: a deterministic owner, a minted token thread and a transfer."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Optional, Sequence

import pytest
from coincurve import PrivateKey

from homotoken import (
    Outpoint,
    Transaction,
    TransitionWitness,
    TxInput,
    TxOutput,
    TokenWallet,
    Utxo,
)
from homotoken.hash import sha256
from homotoken.signing import sign_digest


@pytest.fixture
def owner_key() -> PrivateKey:
    return PrivateKey(bytes.fromhex("11" * 32))


@pytest.fixture
def stranger_key() -> PrivateKey:
    return PrivateKey(bytes.fromhex("22" * 32))


@pytest.fixture
def wallet(owner_key: PrivateKey) -> TokenWallet:
    return TokenWallet(owner_key)


@pytest.fixture
def token_id() -> bytes:
    return sha256(b"homotoken/tests/token-a")


@pytest.fixture
def other_token_id() -> bytes:
    return sha256(b"homotoken/tests/token-b")


@pytest.fixture
def funding_outpoint() -> Outpoint:
    return Outpoint(bytes.fromhex("ab" * 32), 0)


@pytest.fixture
def minted(wallet: TokenWallet, token_id: bytes):
    return wallet.mint(token_id, 1000)


@pytest.fixture
def utxo(funding_outpoint: Outpoint, minted) -> Utxo:
    return Utxo(funding_outpoint, minted)


@pytest.fixture
def transfer(wallet: TokenWallet, utxo: Utxo):
    return wallet.build_transfer(utxo, 100, wallet.owner_key_hash)


@pytest.fixture
def resign(owner_key: PrivateKey) -> Callable[..., TransitionWitness]:
    """
    Rebuild the spending transaction with *outputs*, re-sign its digest
    and patch the witness accordingly.  Models a spender who writes
    different outputs but signs honestly.
    """

    def _resign(
        utxo: Utxo,
        witness: TransitionWitness,
        outputs: Sequence[TxOutput],
        committed_blob: Optional[bytes] = None,
    ) -> TransitionWitness:
        tx = Transaction()
        tx.add_input(TxInput(utxo.outpoint))
        for out in outputs:
            tx.add_output(out)
        digest = tx.signature_digest(0, utxo.locking_script, utxo.satoshis)
        return replace(
            witness,
            signature=sign_digest(owner_key, digest),
            transaction_digest=digest,
            committed_output_blob=(
                outputs[0].serialize() if committed_blob is None else committed_blob
            ),
        )

    return _resign
