"""
Hash primitives shared by the wallet and the verifier.

The ledger uses Bitcoin's conventions:

    HASH256(x) = SHA-256( SHA-256(x) )
    HASH160(x) = RIPEMD-160( SHA-256(x) )

RIPEMD-160 comes from pycryptodome because OpenSSL 3 builds of
``hashlib`` may not ship it.
"""

from __future__ import annotations

import hashlib

from Crypto.Hash import RIPEMD160

TOKEN_ID_BYTES = 32
KEY_HASH_BYTES = 20
SLOT_ID_BYTES = 32


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def hash256(data: bytes) -> bytes:
    """Double SHA-256, as used for transaction digests and output hashes."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160 of SHA-256; the owner key hash of a public key."""
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


def derive_slot_id(owner_key_hash: bytes, token_id: bytes) -> bytes:
    """
    Slot commitment  SHA-256(owner_key_hash ‖ token_id).

    Binds an owner to an asset class.  Carried in every state but never
    re-derived by the verifier.
    """
    if len(owner_key_hash) != KEY_HASH_BYTES:
        raise ValueError(f"owner key hash must be {KEY_HASH_BYTES} bytes")
    if len(token_id) != TOKEN_ID_BYTES:
        raise ValueError(f"token id must be {TOKEN_ID_BYTES} bytes")
    return sha256(owner_key_hash + token_id)


def hash_to_curve_seed(identifier: bytes, counter: int) -> bytes:
    """Candidate x-coordinate bytes  SHA-256(id ‖ BE32(counter))."""
    return sha256(identifier + counter.to_bytes(4, "big"))
