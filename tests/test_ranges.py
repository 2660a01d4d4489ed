import random

from simdscan.loader import SymbolEntry
from simdscan.ranges import SymbolRange, symbol_ranges

BASE = 0x1000
SIZE = 0x100


def assert_tiles(ranges, size):
    """Each range ends where the next begins; the last one ends at *size*."""
    for cur, nxt in zip(ranges, ranges[1:]):
        assert cur.begin <= cur.end == nxt.begin, (cur, nxt)
    if ranges:
        assert ranges[-1].begin <= ranges[-1].end == size, ranges[-1]


def test_two_symbols_split_the_region():
    ranges = symbol_ranges(BASE, SIZE, [SymbolEntry("bar", 0x1040), SymbolEntry("foo", 0x1010)])

    assert ranges == [SymbolRange("foo", 0x10, 0x40), SymbolRange("bar", 0x40, SIZE)]


def test_external_and_out_of_region_symbols_are_dropped():
    symbols = [
        SymbolEntry("puts", 0),
        SymbolEntry("before", BASE - 1),
        SymbolEntry("at_end", BASE + SIZE),
        SymbolEntry("main", BASE),
    ]

    assert symbol_ranges(BASE, SIZE, symbols) == [SymbolRange("main", 0, SIZE)]


def test_no_usable_symbols_gives_no_ranges():
    assert symbol_ranges(BASE, SIZE, []) == []
    assert symbol_ranges(BASE, SIZE, [SymbolEntry("puts", 0)]) == []


def test_shared_address_gives_adjacent_zero_width_ranges():
    symbols = [
        SymbolEntry("memcpy", 0x1020),
        SymbolEntry("__memcpy", 0x1020),
        SymbolEntry("start", 0x1000),
    ]

    assert symbol_ranges(BASE, SIZE, symbols) == [
        SymbolRange("start", 0, 0x20),
        SymbolRange("__memcpy", 0x20, 0x20),
        SymbolRange("memcpy", 0x20, SIZE),
    ]


def test_symbol_listed_twice_is_kept_once():
    symbols = [SymbolEntry("main", 0x1010), SymbolEntry("main", 0x1010)]

    assert symbol_ranges(BASE, SIZE, symbols) == [SymbolRange("main", 0x10, SIZE)]


def test_ranges_tile_the_region_whatever_the_input_order():
    rng = random.Random(1234)
    symbols = [SymbolEntry(f"f{i}", BASE + rng.randrange(SIZE)) for i in range(40)]
    symbols += [SymbolEntry("ext", 0), SymbolEntry("data", BASE + SIZE + 8)]
    expected = symbol_ranges(BASE, SIZE, symbols)

    for _ in range(5):
        rng.shuffle(symbols)
        ranges = symbol_ranges(BASE, SIZE, symbols)
        assert ranges == expected
        assert_tiles(ranges, SIZE)
        assert [r.begin for r in ranges] == sorted(r.begin for r in ranges)
