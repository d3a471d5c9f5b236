"""
Base-field arithmetic for  F_p  (p = secp256k1 field prime).

The on-ledger verifier runs on integers that are signed and never
reduced automatically, so every subtraction there is followed by a
single "add p once if negative" correction.  ``FieldElement`` folds
that correction into its subtraction operator: every value it holds or
returns lies in  [0, p).

Square roots use  p ≡ 3 (mod 4),  so  √v = v^{(p+1)/4}.
"""

from __future__ import annotations

FIELD_PRIME = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
FIELD_BYTES = 32


# ── raw-integer helpers ─────────────────────────────────────────────────
def correct_negative(value: int, modulus: int = FIELD_PRIME) -> int:
    """
    Add *modulus* once if *value* is negative.

    Mirrors the verifier's correction step.  Only valid for values in
    (-modulus, modulus); anything further out is a caller bug.
    """
    if not -modulus < value < modulus:
        raise ValueError("value outside the single-correction range")
    if value < 0:
        value += modulus
    return value


def is_canonical(value: int, modulus: int = FIELD_PRIME) -> bool:
    """True iff *value* is already reduced:  0 <= value < modulus."""
    return isinstance(value, int) and 0 <= value < modulus


def is_quadratic_residue(value: int) -> bool:
    """Euler's criterion.  Zero counts as a residue."""
    v = value % FIELD_PRIME
    if v == 0:
        return True
    return pow(v, (FIELD_PRIME - 1) // 2, FIELD_PRIME) == 1


def sqrt(value: int) -> int:
    """
    A square root of *value* mod p.

    Raises ``ValueError`` if *value* is a non-residue.
    """
    v = value % FIELD_PRIME
    root = pow(v, (FIELD_PRIME + 1) // 4, FIELD_PRIME)
    if (root * root) % FIELD_PRIME != v:
        raise ValueError("value is not a quadratic residue mod p")
    return root


# ── FieldElement ────────────────────────────────────────────────────────
class FieldElement:
    """Element of  F_p  where *p* = ``FIELD_PRIME``."""

    __slots__ = ("_v",)

    def __init__(self, value: int) -> None:
        self._v = value % FIELD_PRIME

    # constructors -----------------------------------------------------------
    @classmethod
    def zero(cls) -> FieldElement:
        return cls(0)

    @classmethod
    def one(cls) -> FieldElement:
        return cls(1)

    @property
    def value(self) -> int:
        return self._v

    def is_zero(self) -> bool:
        return self._v == 0

    # arithmetic -------------------------------------------------------------
    def __add__(self, o: FieldElement) -> FieldElement:
        if not isinstance(o, FieldElement):
            return NotImplemented
        return FieldElement(self._v + o._v)

    def __sub__(self, o: FieldElement) -> FieldElement:
        if not isinstance(o, FieldElement):
            return NotImplemented
        return FieldElement(correct_negative(self._v - o._v))

    def __mul__(self, o) -> FieldElement:
        if isinstance(o, FieldElement):
            return FieldElement(self._v * o._v)
        if isinstance(o, int):
            return FieldElement(self._v * o)
        return NotImplemented

    def __rmul__(self, o) -> FieldElement:
        if isinstance(o, int):
            return FieldElement(o * self._v)
        return NotImplemented

    def __neg__(self) -> FieldElement:
        return FieldElement.zero() - self

    def __truediv__(self, o: FieldElement) -> FieldElement:
        if not isinstance(o, FieldElement):
            return NotImplemented
        return self * o.inv()

    def __pow__(self, e: int) -> FieldElement:
        if e < 0:
            return self.inv() ** (-e)
        return FieldElement(pow(self._v, e, FIELD_PRIME))

    def inv(self) -> FieldElement:
        """Multiplicative inverse via Fermat's little theorem."""
        if self._v == 0:
            raise ZeroDivisionError("cannot invert zero field element")
        return FieldElement(pow(self._v, FIELD_PRIME - 2, FIELD_PRIME))

    def square(self) -> FieldElement:
        return self * self

    # comparison / hashing ---------------------------------------------------
    def __eq__(self, o: object) -> bool:
        if isinstance(o, FieldElement):
            return self._v == o._v
        if isinstance(o, int):
            return self._v == o % FIELD_PRIME
        return False

    def __hash__(self) -> int:
        return hash(self._v)

    def __bool__(self) -> bool:
        return self._v != 0

    def __repr__(self) -> str:
        h = hex(self._v)
        return f"FieldElement(0x{h[2:10]}…)" if len(h) > 14 else f"FieldElement({h})"
