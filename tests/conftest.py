import struct
from pathlib import Path

import pytest

# movaps; movaps; addps; movaps; ret
ADD_ARRAYS_SSE = bytes(
    [
        0x0F, 0x28, 0x06,  # movaps xmm0,XMMWORD PTR [rsi]
        0x0F, 0x28, 0x0A,  # movaps xmm1,XMMWORD PTR [rdx]
        0x0F, 0x58, 0xC1,  # addps xmm0,xmm1
        0x0F, 0x29, 0x07,  # movaps XMMWORD PTR [rdi],xmm0
        0xC3,              # ret
    ]
)

TEXT_ADDR = 0x401000
EM_X86_64 = 62

SHT_PROGBITS, SHT_SYMTAB, SHT_STRTAB = 1, 2, 3


def _strtab(names):
    blob, offsets = b"\0", {}
    for name in names:
        offsets[name] = len(blob)
        blob += name.encode() + b"\0"
    return blob, offsets


def _align(buf, n=8):
    return buf + b"\0" * (-len(buf) % n)


def build_elf64(text, symbols=(), machine=EM_X86_64, text_addr=TEXT_ADDR, text_size=None):
    """A minimal little-endian ELF64 with .text, .symtab, .strtab, .shstrtab."""
    strtab, str_off = _strtab([name for name, _ in symbols])
    shstrtab, sh_off = _strtab([".text", ".symtab", ".strtab", ".shstrtab"])

    symtab = struct.pack("<IBBHQQ", 0, 0, 0, 0, 0, 0)
    for name, addr in symbols:
        # STB_GLOBAL | STT_FUNC, defined in section 1
        symtab += struct.pack("<IBBHQQ", str_off[name], 0x12, 0, 1, addr, 0)

    body = _align(b"\0" * 64 + text)
    text_off = 64
    strtab_off = len(body)
    body = _align(body + strtab)
    shstrtab_off = len(body)
    body = _align(body + shstrtab)
    symtab_off = len(body)
    body = _align(body + symtab)
    shoff = len(body)

    def shdr(name, sh_type, flags, addr, off, size, link=0, info=0, align=1, entsize=0):
        return struct.pack(
            "<IIQQQQIIQQ", name, sh_type, flags, addr, off, size, link, info, align, entsize
        )

    headers = b"".join(
        [
            shdr(0, 0, 0, 0, 0, 0),
            shdr(sh_off[".text"], SHT_PROGBITS, 0x6, text_addr, text_off,
                 len(text) if text_size is None else text_size, align=16),
            shdr(sh_off[".symtab"], SHT_SYMTAB, 0, 0, symtab_off, len(symtab),
                 link=3, info=1, align=8, entsize=24),
            shdr(sh_off[".strtab"], SHT_STRTAB, 0, 0, strtab_off, len(strtab)),
            shdr(sh_off[".shstrtab"], SHT_STRTAB, 0, 0, shstrtab_off, len(shstrtab)),
        ]
    )

    ident = b"\x7fELF" + bytes([2, 1, 1, 0]) + b"\0" * 8
    header = ident + struct.pack(
        "<HHIQQQIHHHHHH", 2, machine, 1, text_addr, 0, shoff, 0, 64, 56, 0, 64, 5, 4
    )
    return header + body[64:] + headers


@pytest.fixture
def make_elf(tmp_path):
    def make(text=ADD_ARRAYS_SSE, symbols=(), name="a.out", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_elf64(text, symbols, **kwargs))
        return path

    return make
