"""Demangle C++ and Rust symbol names with binutils c++filt."""

from __future__ import annotations
import subprocess, sys
from typing import Iterable

# Itanium C++ (also legacy Rust) and Rust v0 manglings
MANGLED_PREFIXES = ("_Z", "_R")


def is_mangled(name: str) -> bool:
    return name.startswith(MANGLED_PREFIXES)


class CxxFilt:
    """
    Callable name -> demangled name, never raising.

    Names are demangled in batches through one c++filt run (prime()) and
    cached; a cache miss runs c++filt for that single name. If the tool is
    missing or fails, names come back unchanged after one warning.
    """

    def __init__(self, command: str = "c++filt") -> None:
        self.command = command
        self.cache: dict[str, str] = {}
        self.broken = False

    def _run(self, names: list[str]) -> list[str]:
        if self.broken:
            return names
        try:
            out = subprocess.run(
                [self.command],
                input="\n".join(names) + "\n",
                capture_output=True,
                text=True,
                check=True,
            ).stdout.splitlines()
        except (OSError, subprocess.CalledProcessError) as e:
            sys.stderr.write(f"[warn] {self.command} failed, names left mangled: {e}\n")
            self.broken = True
            return names
        if len(out) != len(names):
            sys.stderr.write(f"[warn] {self.command} returned {len(out)} names for {len(names)}\n")
            return names
        return out

    def prime(self, names: Iterable[str]) -> None:
        todo = sorted({n for n in names if is_mangled(n) and n not in self.cache})
        if todo:
            self.cache.update(zip(todo, self._run(todo)))

    def __call__(self, name: str) -> str:
        if not is_mangled(name):
            return name
        if name not in self.cache:
            self.prime([name])
        return self.cache.get(name, name)
