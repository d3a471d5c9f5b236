"""
Affine elliptic-curve arithmetic on secp256k1.

This is the prover-side library: the transaction builder uses it to
compute accumulator values and slope hints that the verifier then
checks with multiplication, subtraction and modulo only.  Both sides
must agree bit-for-bit on field reduction, so all chord and tangent
formulas here go through ``FieldElement``.

Scalar multiplication is delegated to ``coincurve`` (libsecp256k1);
a 256-bit double-and-add in pure Python is roughly three orders of
magnitude slower.

Conventions
-----------
- Points are affine  (x, y)  with integer coordinates in  [0, p).
- The pair  (0, 0)  stands for the point at infinity.  It is not on
  the curve (0² ≠ 0³ + 7), so it cannot collide with a
  real point.

References
----------
- SEC 2 v2 §2.4.1  secp256k1 domain parameters
- SEC 1 v2 §2.3.3  point compression
"""

from __future__ import annotations

import logging
from typing import Tuple, Union

from coincurve import PublicKey as _PK

from .errors import CurveMappingExhausted
from .field import (
    FIELD_BYTES,
    FIELD_PRIME,
    FieldElement,
    is_quadratic_residue,
    sqrt,
)
from .hash import hash_to_curve_seed

logger = logging.getLogger(__name__)

# ── secp256k1 constants ─────────────────────────────────────────────────
ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
CURVE_B = 7
GX = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
GY = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8
COMPRESSED_BYTES = 33
HASH_TO_CURVE_ATTEMPTS = 256


# ── Point ───────────────────────────────────────────────────────────────
class Point:
    """
    Affine point on secp256k1.

    Instances are immutable.  ``Point(0, 0)`` is the identity; use
    ``Point.identity()`` to make the intent obvious.
    """

    __slots__ = ("_x", "_y")

    def __init__(self, x: int, y: int) -> None:
        if not (0 <= x < FIELD_PRIME and 0 <= y < FIELD_PRIME):
            raise ValueError("point coordinates must lie in [0, p)")
        self._x = x
        self._y = y

    # constructors -----------------------------------------------------------
    @classmethod
    def identity(cls) -> Point:
        """The (0, 0) sentinel standing in for the point at infinity."""
        return cls(0, 0)

    @classmethod
    def generator(cls) -> Point:
        """Standard base point *G*."""
        return cls(GX, GY)

    @classmethod
    def lift_x(cls, x: int) -> Point:
        """
        The point with x-coordinate *x* and even y.

        Raises ``ValueError`` if  x³ + 7  has no square root mod p.
        """
        if not 0 < x < FIELD_PRIME:
            raise ValueError("x-coordinate out of range")
        rhs = (pow(x, 3, FIELD_PRIME) + CURVE_B) % FIELD_PRIME
        y = sqrt(rhs)
        if y % 2 != 0:
            y = FIELD_PRIME - y
        return cls(x, y)

    @classmethod
    def from_bytes(cls, data: bytes) -> Point:
        """
        Deserialise SEC 1 compressed (33 B) or uncompressed (65 B).

        Exactly 33 zero bytes decode to the identity.
        """
        if data == b"\x00" * COMPRESSED_BYTES:
            return cls.identity()
        return cls.from_public_key(_PK(data))

    @classmethod
    def from_public_key(cls, pk: _PK) -> Point:
        x, y = pk.point()
        return cls(x, y)

    # accessors --------------------------------------------------------------
    @property
    def x(self) -> int:
        return self._x

    @property
    def y(self) -> int:
        return self._y

    def is_infinity(self) -> bool:
        return self._x == 0 and self._y == 0

    def is_on_curve(self) -> bool:
        if self.is_infinity():
            return False
        lhs = FieldElement(self._y).square()
        rhs = FieldElement(self._x) ** 3 + FieldElement(CURVE_B)
        return lhs == rhs

    # serialisation ----------------------------------------------------------
    def to_bytes_compressed(self) -> bytes:
        if self.is_infinity():
            return b"\x00" * COMPRESSED_BYTES
        prefix = b"\x02" if self._y % 2 == 0 else b"\x03"
        return prefix + self._x.to_bytes(FIELD_BYTES, "big")

    def to_bytes(self) -> bytes:
        return self.to_bytes_compressed()

    def to_public_key(self) -> _PK:
        if self.is_infinity():
            raise ValueError("the identity has no public-key encoding")
        return _PK.from_point(self._x, self._y)

    # group operations -------------------------------------------------------
    def __neg__(self) -> Point:
        if self.is_infinity():
            return self
        return Point(self._x, (FIELD_PRIME - self._y) % FIELD_PRIME)

    def __add__(self, o: Point) -> Point:
        if not isinstance(o, Point):
            return NotImplemented
        return add(self, o)

    def __sub__(self, o: Point) -> Point:
        if not isinstance(o, Point):
            return NotImplemented
        return add(self, -o)

    def __rmul__(self, s) -> Point:
        if isinstance(s, int):
            return multiply(self, s)
        return NotImplemented

    def double(self) -> Point:
        return double(self)

    def __eq__(self, o: object) -> bool:
        if not isinstance(o, Point):
            return False
        return self._x == o._x and self._y == o._y

    def __hash__(self) -> int:
        return hash((self._x, self._y))

    def __repr__(self) -> str:
        if self.is_infinity():
            return "Point(∞)"
        return f"Point(0x{self._x:064x})"[:42] + "…)"


# ── group law ───────────────────────────────────────────────────────────
def slope(p1: Point, p2: Point) -> int:
    r"""
    Slope of the line used to add *p2* onto *p1*.

    Secant when the points differ:

    .. math::
        \lambda = (y_2 - y_1) \cdot (x_2 - x_1)^{-1}

    Tangent when they are equal:

    .. math::
        \lambda = 3 x_1^2 \cdot (2 y_1)^{-1}

    Raises ``ValueError`` for the identity or a vertical line (the sum
    is then the identity and no slope exists).
    """
    if p1.is_infinity() or p2.is_infinity():
        raise ValueError("slope is undefined at the point at infinity")

    x1, y1 = FieldElement(p1.x), FieldElement(p1.y)
    x2, y2 = FieldElement(p2.x), FieldElement(p2.y)

    if p1 == p2:
        den = 2 * y1
        if den.is_zero():
            raise ValueError("tangent is vertical (y = 0)")
        return (3 * x1.square() / den).value

    dx = x2 - x1
    if dx.is_zero():
        raise ValueError("secant is vertical (p2 = -p1)")
    return ((y2 - y1) / dx).value


def _apply_slope(p1: Point, p2: Point, lam: int) -> Point:
    """x3 = λ² − x1 − x2,   y3 = λ·(x1 − x3) − y1."""
    s = FieldElement(lam)
    x1, y1, x2 = FieldElement(p1.x), FieldElement(p1.y), FieldElement(p2.x)
    x3 = s.square() - x1 - x2
    y3 = s * (x1 - x3) - y1
    return Point(x3.value, y3.value)


def double(p: Point) -> Point:
    """Tangent doubling  2·p."""
    if p.is_infinity() or p.y == 0:
        return Point.identity()
    return _apply_slope(p, p, slope(p, p))


def add(p1: Point, p2: Point) -> Point:
    """
    Affine addition  p1 + p2.

    Equal points are routed to ``double``; the chord formula is only
    used for distinct x-coordinates.
    """
    if p1.is_infinity():
        return p2
    if p2.is_infinity():
        return p1
    if p1.x == p2.x:
        if p1.y == p2.y:
            return double(p1)
        return Point.identity()
    return _apply_slope(p1, p2, slope(p1, p2))


def multiply(p: Point, scalar: int) -> Point:
    """Scalar multiplication  scalar · p  (C speed)."""
    k = scalar % ORDER
    if p.is_infinity() or k == 0:
        return Point.identity()
    product = p.to_public_key().multiply(k.to_bytes(32, "big"))
    return Point.from_public_key(product)


# ── hash-to-curve ───────────────────────────────────────────────────────
def hash_to_curve(token_id: Union[bytes, str]) -> Tuple[Point, int]:
    """
    Deterministic try-and-increment map from an identifier to a point.

    For counter = 0, 1, … 255:  x = SHA-256(id ‖ BE32(counter)); skip
    x outside (0, p); accept the first x for which  x³ + 7  is a
    quadratic residue, taking the even y.

    Returns ``(point, counter)``.  Hex strings are decoded first.

    Raises ``CurveMappingExhausted`` if no counter yields a point.
    """
    identifier = bytes.fromhex(token_id) if isinstance(token_id, str) else bytes(token_id)
    for counter in range(HASH_TO_CURVE_ATTEMPTS):
        x = int.from_bytes(hash_to_curve_seed(identifier, counter), "big")
        if x == 0 or x >= FIELD_PRIME:
            continue
        if not is_quadratic_residue(pow(x, 3, FIELD_PRIME) + CURVE_B):
            logger.debug("hash_to_curve: counter %d rejected (x=%.8x…)", counter, x >> 224)
            continue
        return Point.lift_x(x), counter
    raise CurveMappingExhausted(
        f"no curve point for id {identifier.hex()} within "
        f"{HASH_TO_CURVE_ATTEMPTS} attempts"
    )


# ── module-level generator ──────────────────────────────────────────────
G = Point.generator()
