"""
Count instructions by feature group and mnemonic, in total or per symbol.

Both report shapes share the same nested mapping:

    TotalUsage.data   = {group: {mnemonic: count}}
    SymbolUsage.data  = {symbol: {group: {mnemonic: count}}}

A *group* is the comma-joined list of lower-cased CPUID features of one
instruction, in the order the decoder reports them ("" for none). It is an
opaque key: two instructions only share a group when the decoder lists the
same features in the same order.
"""

from __future__ import annotations
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Union

from .decode import ClassifiedInstruction, DecodeFn, classify
from .errors import NoSymbolsError
from .loader import Binary
from .ranges import symbol_ranges

# (context, group, mnemonic); context is None for TotalUsage
Key = tuple[Optional[str], str, str]


@dataclass
class TotalUsage:
    data: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass
class SymbolUsage:
    data: dict[str, dict[str, dict[str, int]]] = field(default_factory=dict)


FeatureUsage = Union[TotalUsage, SymbolUsage]


def feature_group(features: Iterable[str]) -> str:
    return ",".join(f.lower() for f in features)


def count_instructions(
    stream: Iterable[tuple[Optional[str], ClassifiedInstruction]],
) -> Counter[Key]:
    counts: Counter[Key] = Counter()
    for context, insn in stream:
        counts[context, feature_group(insn.features), insn.mnemonic] += 1
    return counts


# ─────────────────────────  Counter <-> report shape  ──────────────────────────
def to_counts(usage: FeatureUsage) -> Counter[Key]:
    counts: Counter[Key] = Counter()
    if isinstance(usage, TotalUsage):
        for group, mnemonics in usage.data.items():
            for mnemonic, n in mnemonics.items():
                counts[None, group, mnemonic] += n
    else:
        for symbol, groups in usage.data.items():
            for group, mnemonics in groups.items():
                for mnemonic, n in mnemonics.items():
                    counts[symbol, group, mnemonic] += n
    return counts


def from_counts(counts: Counter[Key], by_symbol: bool) -> FeatureUsage:
    """Build the nested, key-sorted report; zero counts are dropped."""
    tree: dict = defaultdict(lambda: defaultdict(dict))
    for (context, group, mnemonic), n in sorted(
        counts.items(), key=lambda kv: (kv[0][0] or "", kv[0][1], kv[0][2])
    ):
        if n > 0:
            tree[context][group][mnemonic] = n

    def plain(groups):
        return {group: dict(mnemonics) for group, mnemonics in groups.items()}

    if by_symbol:
        return SymbolUsage({symbol: plain(groups) for symbol, groups in tree.items()})
    return TotalUsage(plain(tree.get(None, {})))


def merge(*usages: FeatureUsage) -> FeatureUsage:
    """Add partial reports of the same shape together."""
    if not usages:
        return TotalUsage()
    by_symbol = isinstance(usages[0], SymbolUsage)
    if any(isinstance(u, SymbolUsage) != by_symbol for u in usages):
        raise TypeError("cannot merge total and per-symbol usage")
    counts: Counter[Key] = Counter()
    for u in usages:
        counts.update(to_counts(u))
    return from_counts(counts, by_symbol)


# ─────────────────────────────  Analysis  ──────────────────────────────────────
def count_total(binary: Binary, decode: DecodeFn = classify) -> TotalUsage:
    insns = decode(binary.code.data, binary.bitness)
    return from_counts(count_instructions((None, i) for i in insns), by_symbol=False)


def count_by_symbol(binary: Binary, decode: DecodeFn = classify) -> SymbolUsage:
    """
    Decode each symbol's range separately.

    Raises NoSymbolsError when no symbol lies inside the code region, rather
    than reporting that nothing uses any feature.
    """
    code = binary.code
    ranges = symbol_ranges(code.address, code.size, binary.symbols)
    if not ranges:
        raise NoSymbolsError()

    # one partial report per range, independent of the others
    partials = [
        from_counts(
            count_instructions(
                (r.name, i) for i in decode(code.data[r.begin : r.end], binary.bitness)
            ),
            by_symbol=True,
        )
        for r in ranges
    ]
    return merge(*partials)


def rename_symbols(usage: SymbolUsage, rename: Callable[[str], str]) -> SymbolUsage:
    """Re-key by rename(symbol); symbols that end up equal are summed."""
    counts: Counter[Key] = Counter()
    for (symbol, group, mnemonic), n in to_counts(usage).items():
        counts[rename(symbol), group, mnemonic] += n
    return from_counts(counts, by_symbol=True)


def symbol_features(usage: SymbolUsage) -> dict[str, list[str]]:
    """Sorted individual features used by each symbol."""
    return {
        symbol: sorted({f for group in groups for f in group.split(",") if f})
        for symbol, groups in usage.data.items()
    }
