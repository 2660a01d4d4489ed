"""
simdscan – list the x86 instruction-set extensions a binary uses.

$ simdscan path/to/binary                          # extension / opcode / count
$ simdscan -s -F 'avx*' path/to/binary             # per function, AVX only
$ simdscan -g -d -f json path/to/binary            # extension -> functions

Requires: iced-x86, pyelftools, PyYAML; c++filt (binutils) for -d / -D.
"""

from __future__ import annotations
import argparse, sys
from pathlib import Path
from typing import Optional, Sequence, Union

from .demangle import CxxFilt
from .errors import SimdScanError
from .loader import Binary, load_binary
from .query import feature_index, filter_usage, parse_patterns
from .report import FORMATS, render_index, render_usage
from .usage import FeatureUsage, count_by_symbol, count_total, rename_symbols


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="simdscan",
        description="Print the x86 instruction set extensions used by a compiled binary.",
    )
    ap.add_argument("binary", type=Path, help="ELF binary (x86 or x86-64)")
    ap.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default="table",
        help="output format (default table)",
    )
    names = ap.add_mutually_exclusive_group()
    names.add_argument(
        "-s",
        "--show-symbols",
        action="store_true",
        help="break the report down by raw symbol name",
    )
    names.add_argument(
        "-d",
        "--show-demangled",
        action="store_true",
        help="break the report down by demangled symbol name",
    )
    ap.add_argument(
        "-g",
        "--group-by-feature",
        action="store_true",
        help="list the functions that use each extension",
    )
    ap.add_argument(
        "-F",
        "--feature-filter",
        metavar="PATTERNS",
        help="comma-separated extensions to include (wildcards allowed)",
    )
    ap.add_argument(
        "-S",
        "--raw-symbol-filter",
        metavar="PATTERNS",
        help="comma-separated raw symbol names to include (wildcards allowed)",
    )
    ap.add_argument(
        "-D",
        "--demangled-symbol-filter",
        metavar="PATTERNS",
        help="comma-separated demangled symbol names to include (wildcards allowed)",
    )
    ap.add_argument(
        "--demangler",
        default="c++filt",
        metavar="CMD",
        help="demangler command (default c++filt)",
    )
    return ap.parse_args(argv)


def build_report(
    binary: Binary, args: argparse.Namespace, demangle: CxxFilt
) -> Union[FeatureUsage, dict[str, list[str]]]:
    """Run the analysis selected by *args*; the result is ready to render."""
    features = parse_patterns(args.feature_filter)
    raw = parse_patterns(args.raw_symbol_filter)
    demangled = parse_patterns(args.demangled_symbol_filter)

    per_symbol = (
        args.show_symbols or args.show_demangled or args.group_by_feature or raw or demangled
    )
    if not per_symbol:
        return filter_usage(count_total(binary), features)

    usage = count_by_symbol(binary)
    if demangled:
        demangle.prime(usage.data)
    usage = filter_usage(usage, features, raw, demangled, demangle)
    if args.show_demangled:
        demangle.prime(usage.data)
        usage = rename_symbols(usage, demangle)

    if args.group_by_feature:
        return feature_index(usage)
    return usage


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    if not args.binary.exists():
        sys.exit(f"[error] {args.binary} not found")

    try:
        report = build_report(load_binary(args.binary), args, CxxFilt(args.demangler))
    except (SimdScanError, OSError) as e:
        sys.exit(f"[error] {e}")

    # Emit ----------------------------------------------------------------------
    if isinstance(report, dict):
        render_index(report, args.format, sys.stdout)
    else:
        render_usage(report, args.format, sys.stdout)


if __name__ == "__main__":
    main()
