"""
Read the executable code and the symbol table out of an ELF file.

Only the parts the analysis needs are kept: the bitness of the target, the
bytes of `.text` with its load address, and every named (symbol, address)
pair from `.symtab` and `.dynsym`.
"""

from __future__ import annotations
import io, sys
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile
from elftools.elf.sections import SymbolTableSection

from .errors import InputFormatError, MalformedLayoutError

BITNESS = {"EM_386": 32, "EM_X86_64": 64}
CODE_SECTION = ".text"
SYMBOL_SECTIONS = (".symtab", ".dynsym")


@dataclass(frozen=True)
class CodeRegion:
    data: bytes
    address: int

    @property
    def size(self) -> int:
        return len(self.data)


class SymbolEntry(NamedTuple):
    name: str
    address: int


@dataclass(frozen=True)
class Binary:
    bitness: int
    code: CodeRegion
    symbols: tuple[SymbolEntry, ...] = ()


def _fits(what: str, value: int) -> int:
    """Reject header values that do not fit the platform's address width."""
    if value > sys.maxsize:
        raise MalformedLayoutError(
            f"The '{CODE_SECTION}' section has {what} {value} which is greater "
            f"than the maximum address on this platform"
        )
    return value


def from_elf(elf: ELFFile, data: bytes) -> Binary:
    machine = elf.header["e_machine"]
    if machine not in BITNESS:
        raise InputFormatError(f"Unknown instruction set architecture: {machine}")

    text = elf.get_section_by_name(CODE_SECTION)
    if text is None:
        raise InputFormatError(f"Binary does not contain a '{CODE_SECTION}' section")

    begin = _fits("offset", text["sh_offset"])
    size = _fits("size", text["sh_size"])
    end = _fits("offset + size", begin + size)
    if end > len(data):
        raise MalformedLayoutError(
            f"Invalid offset + size: {end} which is greater than the binary size, {len(data)}"
        )
    address = _fits("virtual address", text["sh_addr"])

    return Binary(
        bitness=BITNESS[machine],
        code=CodeRegion(bytes(data[begin:end]), address),
        symbols=tuple(iter_symbols(elf)),
    )


def iter_symbols(elf: ELFFile):
    """Yield every named symbol of the static and dynamic symbol tables."""
    for sec_name in SYMBOL_SECTIONS:
        section = elf.get_section_by_name(sec_name)
        if section is None or not isinstance(section, SymbolTableSection):
            continue
        for sym in section.iter_symbols():
            if sym.name:
                yield SymbolEntry(sym.name, int(sym["st_value"]))


def load_binary(path: Path) -> Binary:
    """Parse *path* as an x86 ELF file (raises SimdScanError subclasses)."""
    data = Path(path).read_bytes()
    try:
        elf = ELFFile(io.BytesIO(data))
    except ELFError as e:
        raise InputFormatError("Only ELF binaries are supported.") from e
    try:
        return from_elf(elf, data)
    except ELFError as e:
        raise InputFormatError(f"Malformed ELF file: {e}") from e
