"""Unique resource names for tests."""

from __future__ import annotations

import random
from typing import Protocol


class _RandomSource(Protocol):
    def randrange(self, stop: int) -> int: ...


def generate_id(
    prefix: str,
    ledger: list[str] | None = None,
    *,
    mocked: bool,
    rng: _RandomSource | None = None,
) -> str:
    """Return a new identifier for ``prefix`` and append it to ``ledger``.

    Mocked sessions count (``prefix1``, ``prefix2``, ...) so names line up
    between recording and playback. Live sessions draw random suffixes below
    10000 until one is not already in the ledger.
    """
    if ledger is None:
        ledger = []

    if mocked:
        identifier = f"{prefix}{len(ledger) + 1}"
        ledger.append(identifier)
        return identifier

    source = rng or random
    while True:
        identifier = f"{prefix}{source.randrange(10000)}"
        if identifier not in ledger:
            ledger.append(identifier)
            return identifier
