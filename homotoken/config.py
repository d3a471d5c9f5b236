"""
Transaction-building parameters.

The verifier takes no configuration: it is a function of its inputs and
the field prime.  These settings only shape the transactions the wallet
assembles.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from .transaction import DEFAULT_SEQUENCE, SIGHASH_ALL, SIGHASH_FORKID

PROGRAM_TAG_V1 = b"HTK/transition/v1"


@dataclass(frozen=True)
class LedgerConfig:
    """Defaults for transactions built by ``TokenWallet``."""

    tx_version: int = 1
    locktime: int = 0
    sequence: int = DEFAULT_SEQUENCE
    sighash_type: int = SIGHASH_ALL | SIGHASH_FORKID
    output_satoshis: int = 1000
    program_tag: bytes = PROGRAM_TAG_V1

    def __post_init__(self) -> None:
        for name in ("tx_version", "locktime", "sequence", "sighash_type"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFFFFFFFF:
                raise ValueError(f"{name} must fit in 32 bits, got {value}")
        if self.output_satoshis <= 0:
            raise ValueError("output_satoshis must be positive")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> LedgerConfig:
        """Build from a plain mapping; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"unknown config keys: {sorted(unknown)}")
        kwargs = dict(values)
        tag = kwargs.get("program_tag")
        if isinstance(tag, str):
            kwargs["program_tag"] = tag.encode("utf-8")
        return cls(**kwargs)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = "HOMOTOKEN_",
    ) -> LedgerConfig:
        """
        Read overrides such as ``HOMOTOKEN_OUTPUT_SATOSHIS=546``.

        Integer fields accept decimal or ``0x`` hex.
        """
        env = os.environ if environ is None else environ
        values: dict = {}
        for f in fields(cls):
            raw = env.get(prefix + f.name.upper())
            if raw is None:
                continue
            values[f.name] = raw if f.name == "program_tag" else int(raw, 0)
        return cls.from_mapping(values)


DEFAULT_CONFIG = LedgerConfig()
