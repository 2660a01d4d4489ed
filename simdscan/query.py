"""
Wildcard filters over a usage report, and the feature -> symbols index.

Feature patterns are matched against the individual features of a group
("avx*" keeps the group "avx2,fma"), never against the joined key. Symbol
patterns are matched against the raw name or, for demangled patterns,
against the demangled name.
"""

from __future__ import annotations
from fnmatch import fnmatchcase
from typing import Callable, Iterable, Optional, Sequence

from .usage import FeatureUsage, SymbolUsage, TotalUsage, symbol_features

Matcher = Callable[[str, str], bool]


def _identity(name: str) -> str:
    return name


def glob_match(pattern: str, text: str) -> bool:
    return fnmatchcase(text, pattern)


def parse_patterns(text: Optional[str]) -> list[str]:
    """Split a comma-separated pattern list; blank items are dropped."""
    if not text:
        return []
    return [p.strip() for p in text.split(",") if p.strip()]


def matches_any(
    patterns: Iterable[str], text: str, match: Matcher = glob_match
) -> bool:
    return any(match(p, text) for p in patterns)


def _keep_group(group: str, patterns: Sequence[str], match: Matcher) -> bool:
    if not patterns:
        return True
    return any(matches_any(patterns, f, match) for f in group.split(",") if f)


def _filter_groups(groups: dict, patterns: Sequence[str], match: Matcher) -> dict:
    return {
        group: dict(mnemonics)
        for group, mnemonics in groups.items()
        if _keep_group(group, patterns, match)
    }


def filter_usage(
    usage: FeatureUsage,
    features: Sequence[str] = (),
    raw_symbols: Sequence[str] = (),
    demangled_symbols: Sequence[str] = (),
    demangle: Callable[[str], str] = _identity,
    match: Matcher = glob_match,
) -> FeatureUsage:
    """
    Returns a new report holding only the matching entries.

    Empty pattern lists do not filter. Symbol patterns only apply to a
    SymbolUsage; *demangle* is called once per symbol and only when there
    are demangled patterns. Symbols with nothing left are dropped.
    """
    if isinstance(usage, TotalUsage):
        return TotalUsage(_filter_groups(usage.data, features, match))

    def keep_symbol(name: str) -> bool:
        if not raw_symbols and not demangled_symbols:
            return True
        if matches_any(raw_symbols, name, match):
            return True
        return bool(demangled_symbols) and matches_any(
            demangled_symbols, demangle(name), match
        )

    data = {}
    for symbol, groups in usage.data.items():
        if not keep_symbol(symbol):
            continue
        kept = _filter_groups(groups, features, match)
        if kept:
            data[symbol] = kept
    return SymbolUsage(data)


def feature_index(usage: SymbolUsage) -> dict[str, list[str]]:
    """Map each individual feature to the sorted symbols that use it."""
    index: dict[str, set[str]] = {}
    for symbol, feats in symbol_features(usage).items():
        for f in feats:
            index.setdefault(f, set()).add(symbol)
    return {f: sorted(index[f]) for f in sorted(index)}


def feature_names(usage: FeatureUsage) -> list[str]:
    """Sorted individual features appearing anywhere in *usage*."""
    if isinstance(usage, TotalUsage):
        groups: Iterable[str] = usage.data
    else:
        groups = (g for by_group in usage.data.values() for g in by_group)
    return sorted({f for g in groups for f in g.split(",") if f})
