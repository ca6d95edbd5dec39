"""Shadow-variable symbol table.

Every parameter and local of a function lives in exactly one slot keyed by
its *mangled name*, `<function>.<identifier>` (e.g. `my_decrement.x`). The
slot is shared by all invocations of that function for the whole run; there
is no per-call frame and no slot is ever removed.

The `SymbolTable` API provides `declare` (idempotent), `read` and `write`,
plus helpers used by the driver and tests to inspect the final state. A
pointer (`int*`) slot holds a `SlotRef` naming the slot it points at.
"""

from __future__ import annotations
import logging
from enum import Enum, auto
from dataclasses import dataclass
from typing import Dict, Iterator, Union

from errors import UnboundVariable

logger = logging.getLogger("shadowc.symbols")
logger.addHandler(logging.NullHandler())


class SymbolType(Enum):
    INT = auto()
    INT_PTR = auto()
    BOOL = auto()
    VOID = auto()

    def __str__(self) -> str:
        if self is SymbolType.INT_PTR:
            return "int*"
        return self.name.lower()


def mangle(qualifier: str, name: str) -> str:
    """Return the slot key for `name` as seen from inside function `qualifier`."""
    return f"{qualifier}.{name}"


def split_mangled(mangled_name: str) -> tuple[str, str]:
    """Inverse of `mangle`: `"f.x"` -> `("f", "x")`."""
    qualifier, _, name = mangled_name.partition(".")
    return qualifier, name


@dataclass(frozen=True)
class SlotRef:
    """A pointer value: the address of another slot, e.g. `&main.x`."""

    name: str

    def __str__(self) -> str:
        return f"&{self.name}"


@dataclass
class Slot:
    name: str
    value: Union[int, SlotRef, None] = 0
    type: SymbolType = SymbolType.INT

    def __repr__(self) -> str:
        return f"Slot({self.name}={self.value})"


class SymbolTable:
    def __init__(self) -> None:
        self.slots: Dict[str, Slot] = {}

    def declare(self, mangled_name: str, symbol_type: SymbolType = SymbolType.INT) -> Slot:
        """Create a slot if absent; return the (possibly existing) slot.

        New `int` slots start at 0, new `int*` slots start out null (`None`).
        """
        slot = self.slots.get(mangled_name)
        if slot is None:
            initial = None if symbol_type == SymbolType.INT_PTR else 0
            slot = Slot(mangled_name, initial, symbol_type)
            self.slots[mangled_name] = slot
            logger.debug("declared slot %s: %s", mangled_name, symbol_type)
        return slot

    def type_of(self, mangled_name: str) -> SymbolType:
        try:
            return self.slots[mangled_name].type
        except KeyError:
            raise UnboundVariable(mangled_name) from None

    def read(self, mangled_name: str) -> int:
        try:
            return self.slots[mangled_name].value
        except KeyError:
            raise UnboundVariable(mangled_name) from None

    def write(self, mangled_name: str, value: int) -> None:
        slot = self.slots.get(mangled_name)
        if slot is None:
            raise UnboundVariable(mangled_name)
        slot.value = value

    def exists(self, mangled_name: str) -> bool:
        return mangled_name in self.slots

    def snapshot(self) -> Dict[str, int]:
        """Copy of every slot's value, in declaration order."""
        return {name: slot.value for name, slot in self.slots.items()}

    def variables(self, qualifier: str) -> Dict[str, int]:
        """Unmangled view of the slots owned by one function."""
        out = {}
        for name, slot in self.slots.items():
            owner, ident = split_mangled(name)
            if owner == qualifier:
                out[ident] = slot.value
        return out

    def __contains__(self, mangled_name: object) -> bool:
        return mangled_name in self.slots

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[str]:
        return iter(self.slots)
