"""
Error taxonomy for homotoken.

Verification failures are hard aborts: the first failing check rejects
the whole spend and nothing is retried inside a single verification.
The transaction builder may retry by constructing a corrected witness.

Each ``VerificationError`` subclass carries a short ``tag`` that the
ledger reports alongside the rejection.
"""

from __future__ import annotations


class VerificationError(Exception):
    """Base class for every verification-time abort."""

    tag = "VerificationError"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.tag)
        self.detail = detail


class AuthMismatch(VerificationError):
    """Supplied public key does not hash to the locked owner."""

    tag = "AuthMismatch"


class BadSignature(VerificationError):
    """Signature does not verify against the claimed digest hash."""

    tag = "BadSignature"


class InvalidTransition(VerificationError):
    """Accumulator advance fails one of the three field identities."""

    tag = "InvalidTransition"


class LineageBroken(VerificationError):
    """Successor output is not the committed one, or disagrees with it."""

    tag = "LineageBroken"


class CurveMappingExhausted(RuntimeError):
    """
    Hash-to-curve found no valid point within the counter bound.

    Off-chain only.  Fatal for the given identifier: the mapping is
    deterministic, so retrying with the same input cannot succeed.
    """

    tag = "CurveMappingExhausted"


class LayoutError(ValueError):
    """Malformed or truncated bytes for a fixed binary layout."""
