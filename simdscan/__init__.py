"""Report the x86 instruction-set extensions used by the machine code of an ELF binary."""

from .errors import InputFormatError, MalformedLayoutError, NoSymbolsError, SimdScanError
from .loader import Binary, CodeRegion, SymbolEntry, load_binary
from .usage import SymbolUsage, TotalUsage, count_by_symbol, count_total

__version__ = "0.2.0"

__all__ = [
    "Binary",
    "CodeRegion",
    "InputFormatError",
    "MalformedLayoutError",
    "NoSymbolsError",
    "SimdScanError",
    "SymbolEntry",
    "SymbolUsage",
    "TotalUsage",
    "count_by_symbol",
    "count_total",
    "load_binary",
]
