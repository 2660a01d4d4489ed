"""
Decode raw x86 machine code into (mnemonic, CPUID features) pairs.

iced-x86 does the decoding and knows, for every instruction, the CPUID
feature flags the CPU must report to execute it.
"""

from __future__ import annotations
from typing import Callable, NamedTuple, Sequence

from iced_x86 import Code, CpuidFeature, Decoder, DecoderOptions, Instruction, Mnemonic


def create_enum_dict(module) -> dict[int, str]:
    return {value: key for key, value in module.__dict__.items() if isinstance(value, int)}


MNEMONIC_NAMES = create_enum_dict(Mnemonic)
FEATURE_NAMES = create_enum_dict(CpuidFeature)

# ─────────────────────────  Baseline ISA  ──────────────────────────────────────
# Every x86 / x86-64 CPU has these; they are not extensions and are left out of
# an instruction's feature group (a plain `ret` has no features).
BASELINE: frozenset[str] = frozenset(
    {"INTEL8086", "INTEL186", "INTEL286", "INTEL386", "INTEL486", "X64"}
)

BITNESS = (32, 64)


class ClassifiedInstruction(NamedTuple):
    mnemonic: str
    features: tuple[str, ...] = ()


DecodeFn = Callable[[bytes, int], Sequence[ClassifiedInstruction]]


def features_of(instr: Instruction) -> tuple[str, ...]:
    names = (FEATURE_NAMES.get(f, str(f)) for f in instr.cpuid_features())
    return tuple(name.lower() for name in names if name not in BASELINE)


def classify(data: bytes, bitness: int) -> list[ClassifiedInstruction]:
    """Return every instruction in *data*, in address order."""
    if bitness not in BITNESS:
        raise ValueError(f"unsupported bitness: {bitness}")

    decoder = Decoder(bitness, bytes(data), DecoderOptions.NONE)
    instr = Instruction()
    result = []
    while decoder.can_decode:
        decoder.decode_out(instr)
        if instr.code == Code.INVALID:  # data or a truncated tail
            continue
        result.append(
            ClassifiedInstruction(MNEMONIC_NAMES[instr.mnemonic].lower(), features_of(instr))
        )
    return result
