"""
homotoken: homomorphic token accumulators with division-free verification.

Each token output commits to an accumulator point on secp256k1, the
running sum  Σ amount_i · H(token_id)  over the thread's transfers.  A
spend is accepted only if

- the spender owns the locked output and signed the transaction digest,
- the new accumulator is the curve sum of the old one and the delta,
  proven with a slope hint and multiply/subtract/modulo only, and
- the transaction's first output really carries that new accumulator.

Quick start
-----------
::

    from coincurve import PrivateKey
    from homotoken import TokenWallet, Utxo, Outpoint, verify_transition

    wallet = TokenWallet(PrivateKey())
    state = wallet.mint(token_id, 100)
    utxo = wallet.utxo(Outpoint(funding_txid, 0), state)

    bundle = wallet.build_transfer(utxo, 100, wallet.owner_key_hash)
    result = verify_transition(state, bundle.witness)
    assert result.accepted
"""

__version__ = "0.1.0"

# ── curve arithmetic ────────────────────────────────────────────────────
from .field import FIELD_PRIME, FieldElement
from .curve import (
    ORDER,
    G,
    Point,
    add,
    double,
    multiply,
    slope,
    hash_to_curve,
)

# ── records ─────────────────────────────────────────────────────────────
from .state import TokenState, TokenType, TransitionWitness
from .transaction import Outpoint, Transaction, TxInput, TxOutput
from .encoding import TransactionDigest

# ── verifier ────────────────────────────────────────────────────────────
from .verifier import (
    StateTransitionVerifier,
    VerificationResult,
    check_authentication,
    check_lineage,
    check_transition,
    verify_transition,
)

# ── prover side ─────────────────────────────────────────────────────────
from .config import DEFAULT_CONFIG, LedgerConfig
from .wallet import TokenWallet, TransferBundle, Utxo, token_delta
from .signing import sign_digest, verify_data_signature

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    AuthMismatch,
    BadSignature,
    CurveMappingExhausted,
    InvalidTransition,
    LayoutError,
    LineageBroken,
    VerificationError,
)

# ── hashing ─────────────────────────────────────────────────────────────
from .hash import derive_slot_id, hash160, hash256

__all__ = [
    # version
    "__version__",
    # curve
    "FIELD_PRIME", "FieldElement", "ORDER", "G", "Point",
    "add", "double", "multiply", "slope", "hash_to_curve",
    # records
    "TokenState", "TokenType", "TransitionWitness",
    "Outpoint", "Transaction", "TxInput", "TxOutput", "TransactionDigest",
    # verifier
    "StateTransitionVerifier", "VerificationResult",
    "check_authentication", "check_transition", "check_lineage",
    "verify_transition",
    # prover
    "DEFAULT_CONFIG", "LedgerConfig",
    "TokenWallet", "TransferBundle", "Utxo", "token_delta",
    "sign_digest", "verify_data_signature",
    # errors
    "VerificationError", "AuthMismatch", "BadSignature",
    "InvalidTransition", "LineageBroken", "CurveMappingExhausted",
    "LayoutError",
    # hashing
    "derive_slot_id", "hash160", "hash256",
]
