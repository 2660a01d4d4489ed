"""
Render usage reports as table, list, JSON or YAML.

Renderers only write to the *out* stream they are given; keys are emitted in
the (sorted) order the report already has.
"""

from __future__ import annotations
import json
from typing import Iterable, Sequence, TextIO

import yaml

from .query import feature_names
from .usage import FeatureUsage, SymbolUsage, TotalUsage

FORMATS = ("table", "list", "json", "yaml")
NO_FEATURES = "<none>"


def _group_label(group: str) -> str:
    return group or NO_FEATURES


def _table(out: TextIO, titles: Sequence[str], rows: list[tuple], numeric: int = -1) -> None:
    """Aligned columns; column *numeric* is right-aligned."""
    widths = [
        max([len(t)] + [len(str(row[i])) for row in rows]) for i, t in enumerate(titles)
    ]
    out.write(" ".join(f"{t:^{w}}" for t, w in zip(titles, widths)) + "\n")
    out.write(" ".join("-" * w for w in widths) + "\n")
    for row in rows:
        cells = [
            f"{cell:>{w}}" if i == numeric else f"{cell:<{w}}"
            for i, (cell, w) in enumerate(zip(row, widths))
        ]
        out.write(" ".join(cells) + "\n")


def _sections(out: TextIO, sections: Iterable[tuple[str, Iterable[str]]]) -> None:
    for feature, symbols in sections:
        out.write(f"Functions that use {feature}:\n")
        for symbol in symbols:
            out.write(f"- {symbol}\n")
        out.write("\n")


def _dump(data, fmt: str, out: TextIO) -> None:
    if fmt == "yaml":
        out.write(yaml.dump(data, sort_keys=False, allow_unicode=True))
    else:
        out.write(json.dumps(data, indent=2) + "\n")


# ─────────────────────────────  Usage  ─────────────────────────────────────────
def render_usage(usage: FeatureUsage, fmt: str, out: TextIO) -> None:
    if fmt in ("json", "yaml"):
        _dump(usage.data, fmt, out)
    elif fmt == "list":
        if isinstance(usage, TotalUsage):
            for name in feature_names(usage):
                out.write(f"{name}\n")
        else:
            users: dict[str, set[str]] = {}
            for symbol, groups in usage.data.items():
                for group in groups:
                    users.setdefault(_group_label(group), set()).add(symbol)
            _sections(out, ((g, sorted(users[g])) for g in sorted(users)))
    elif fmt == "table":
        if isinstance(usage, SymbolUsage):
            rows = [
                (symbol, _group_label(group), mnemonic, count)
                for symbol, groups in usage.data.items()
                for group, mnemonics in groups.items()
                for mnemonic, count in mnemonics.items()
            ]
            _table(out, ("Function", "Extension", "Opcode", "Count"), rows, numeric=3)
        else:
            rows = [
                (_group_label(group), mnemonic, count)
                for group, mnemonics in usage.data.items()
                for mnemonic, count in mnemonics.items()
            ]
            _table(out, ("Extension", "Opcode", "Count"), rows, numeric=2)
    else:
        raise ValueError(f"unknown format: {fmt}")


# ──────────────────────────  Feature index  ────────────────────────────────────
def render_index(index: dict[str, list[str]], fmt: str, out: TextIO) -> None:
    if fmt in ("json", "yaml"):
        _dump(index, fmt, out)
    elif fmt == "list":
        _sections(out, index.items())
    elif fmt == "table":
        rows = [(feature, symbol) for feature, symbols in index.items() for symbol in symbols]
        _table(out, ("Feature", "Function"), rows)
    else:
        raise ValueError(f"unknown format: {fmt}")
