"""Interpreter configuration.

`InterpreterConfig` collects the knobs that change how a program runs. The
defaults match a conventional 32-bit C integer; `word_size=8` reproduces the
byte-wide machine the example programs were written for.
"""

from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional


MICROIO_HEADER = "microio.h"


@dataclass(frozen=True)
class InterpreterConfig:
    word_size: int = 32
    max_steps: Optional[int] = None
    entry_point: str = "main"
    allow_print: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.word_size, int) or self.word_size < 2:
            raise ValueError(f"word_size must be an integer >= 2, got {self.word_size!r}")
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {self.max_steps!r}")
        if not self.entry_point:
            raise ValueError("entry_point must be a non-empty function name")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> InterpreterConfig:
        """Build a config from a dict, ignoring `None` values.

        Unknown keys raise `ValueError` so typos in callers are caught early.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in values.items() if v is not None})

    def wrap(self, value: int) -> int:
        """Reduce `value` to a signed two's complement integer of `word_size` bits."""
        half = 1 << (self.word_size - 1)
        return ((value + half) % (1 << self.word_size)) - half
