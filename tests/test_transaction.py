from __future__ import annotations

import pytest

from homotoken import LayoutError, Outpoint, Transaction, TxInput, TxOutput
from homotoken.hash import hash256


def test_outpoint_serialises_reversed_txid() -> None:
    op = Outpoint.from_hex("00" * 31 + "ff", 2)
    assert op.serialize() == b"\xff" + b"\x00" * 31 + b"\x02\x00\x00\x00"


def test_output_round_trip_reports_consumed_length() -> None:
    out = TxOutput(1000, b"\xaa" * 300)
    raw = out.serialize()
    assert raw[:8] == (1000).to_bytes(8, "little")
    parsed, consumed = TxOutput.parse(raw + b"extra")
    assert parsed == out
    assert consumed == len(raw)


def test_truncated_output_is_a_layout_error() -> None:
    with pytest.raises(LayoutError):
        TxOutput.parse(TxOutput(1, b"\x01\x02").serialize()[:-1])


def test_hash_outputs_commits_to_all_outputs() -> None:
    tx = Transaction()
    tx.add_input(TxInput(Outpoint(b"\x01" * 32, 0)))
    first, second = TxOutput(1, b"a"), TxOutput(2, b"b")
    tx.add_output(first)
    assert tx.hash_outputs() == hash256(first.serialize())
    tx.add_output(second)
    assert tx.hash_outputs() == hash256(first.serialize() + second.serialize())


def test_signature_digest_requires_existing_input() -> None:
    with pytest.raises(IndexError):
        Transaction().signature_digest(0, b"", 0)


def test_digest_changes_with_spent_value() -> None:
    tx = Transaction()
    tx.add_input(TxInput(Outpoint(b"\x01" * 32, 0)))
    tx.add_output(TxOutput(1, b"a"))
    assert tx.signature_digest(0, b"s", 1000) != tx.signature_digest(0, b"s", 1001)
