"""
Explicit data signatures over transaction digests.

The verifier cannot rely on the ledger's implicit signature check: it
needs the digest on hand as data so the lineage check can read the
aggregate output hash out of it.  The owner therefore signs

    m = HASH256(transaction_digest)

with ordinary ECDSA on secp256k1 (DER encoded, low-S), and the verifier
checks that signature against the digest the spender supplies.

Trust argument
--------------
This proves the owner signed *some* digest.  That the digest belongs to
the transaction actually being executed is enforced indirectly: a
mismatched digest makes the owner's own spend fail the lineage check,
so a rational owner has no reason to supply one.  Reusing a key across
conflicting constructions weakens this argument.

Signing is deterministic (RFC 6979), so the same key and digest always
give the same signature bytes.
"""

from __future__ import annotations

from coincurve import PrivateKey as _SK, PublicKey as _PK

from .hash import hash256

MESSAGE_HASH_BYTES = 32


def public_key_bytes(private_key: _SK) -> bytes:
    """Compressed SEC 1 encoding of the key's public point."""
    return private_key.public_key.format(compressed=True)


def sign_digest(private_key: _SK, transaction_digest: bytes) -> bytes:
    """DER ECDSA signature over  HASH256(transaction_digest)."""
    return private_key.sign(hash256(transaction_digest), hasher=None)


def verify_data_signature(
    signature: bytes,
    message_hash: bytes,
    public_key: bytes,
) -> bool:
    """
    Check a DER signature over a 32-byte message hash.

    Malformed keys or signatures verify as ``False``; the caller decides
    how to report that.
    """
    if len(message_hash) != MESSAGE_HASH_BYTES:
        return False
    try:
        pk = _PK(public_key)
        return pk.verify(signature, message_hash, hasher=None)
    except (ValueError, TypeError):
        return False
