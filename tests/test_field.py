from __future__ import annotations

import pytest

from homotoken.field import (
    FIELD_PRIME,
    FieldElement,
    correct_negative,
    is_canonical,
    is_quadratic_residue,
    sqrt,
)


def test_correct_negative_adds_prime_once() -> None:
    assert correct_negative(-1) == FIELD_PRIME - 1
    assert correct_negative(5) == 5
    assert correct_negative(-(FIELD_PRIME - 1)) == 1


def test_correct_negative_rejects_values_beyond_one_correction() -> None:
    with pytest.raises(ValueError):
        correct_negative(-FIELD_PRIME)
    with pytest.raises(ValueError):
        correct_negative(FIELD_PRIME)


@pytest.mark.parametrize(
    "a, b",
    [
        (0, 1),
        (1, FIELD_PRIME - 1),
        (FIELD_PRIME - 1, 0),
        (12345, 12345),
    ],
)
def test_subtraction_stays_reduced(a: int, b: int) -> None:
    diff = FieldElement(a) - FieldElement(b)
    assert 0 <= diff.value < FIELD_PRIME
    assert diff.value == (a - b) % FIELD_PRIME


def test_negation_and_inverse() -> None:
    a = FieldElement(7)
    assert (a + (-a)).is_zero()
    assert a * a.inv() == FieldElement.one()
    assert a / a == 1
    assert a ** -1 == a.inv()


def test_inverse_of_zero_raises() -> None:
    with pytest.raises(ZeroDivisionError):
        FieldElement.zero().inv()


def test_square_root_of_residue_and_non_residue() -> None:
    root = sqrt(4)
    assert root * root % FIELD_PRIME == 4
    # -1 is a non-residue because p ≡ 3 (mod 4)
    assert not is_quadratic_residue(FIELD_PRIME - 1)
    with pytest.raises(ValueError):
        sqrt(FIELD_PRIME - 1)


def test_is_canonical() -> None:
    assert is_canonical(0)
    assert is_canonical(FIELD_PRIME - 1)
    assert not is_canonical(FIELD_PRIME)
    assert not is_canonical(-1)
