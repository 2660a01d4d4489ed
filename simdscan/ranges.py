"""
Split the code region into one byte range per symbol.

A symbol's range runs from its own address up to the next symbol's address
(or the end of the region for the last one), so the ranges tile the region
from the first symbol onwards without gaps or overlaps.
"""

from __future__ import annotations
from typing import Iterable, NamedTuple

from .loader import SymbolEntry


class SymbolRange(NamedTuple):
    name: str
    begin: int
    end: int


def in_region(sym: SymbolEntry, address: int, size: int) -> bool:
    # address 0: defined outside the binary; outside the region: not code
    return sym.address != 0 and address <= sym.address < address + size


def symbol_ranges(
    address: int, size: int, symbols: Iterable[SymbolEntry]
) -> list[SymbolRange]:
    """
    Returns the ranges, relative to *address*, ordered by (begin, name).

    Symbols sharing an address come out as adjacent zero-width ranges; only
    the last of them reaches the next distinct address.
    """
    kept = sorted(
        {(sym.address, sym.name) for sym in symbols if in_region(sym, address, size)}
    )

    ranges: list[SymbolRange] = []
    for i, (addr, name) in enumerate(kept):
        begin = addr - address
        end = kept[i + 1][0] - address if i + 1 < len(kept) else size
        ranges.append(SymbolRange(name, begin, end))
    return ranges
