"""
gatecalc Context Stack
======================
An ordered list of frames. Each frame pairs a dialect's built-in table
with its own table of user-defined functions.

Built-ins come from the top frame only; each push may switch dialect
entirely. User definitions are searched top to bottom, so a definition
made before a dialect switch stays visible after it, and formal parameters
bound in a temporary frame shadow outer names for the length of a call.
"""
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from .builtins import CALCULATE_TABLE, NAND_TABLE, NOR_TABLE, VERILOG_TABLE, Builtin
from .errors import GateCalcError, UnknownContextError
from .nodes import UserFunctionDef, format_node


class Dialect(Enum):
    """The selectable sets of built-in semantics."""
    CALCULATE    = "calculate"
    VERILOG      = "verilog"
    VERILOG_NAND = "verilog nand"
    VERILOG_NOR  = "verilog nor"

    @classmethod
    def from_name(cls, name: str) -> "Dialect":
        """Exact dialect name; only surrounding whitespace is ignored."""
        for dialect in cls:
            if dialect.value == name.strip():
                return dialect
        raise UnknownContextError(f"No associated context found: {name.strip()!r}")

    @property
    def is_hardware(self) -> bool:
        return self is not Dialect.CALCULATE

    @property
    def table(self) -> dict[str, Builtin]:
        return DIALECT_TABLES[self]


DIALECT_TABLES: dict[Dialect, dict[str, Builtin]] = {
    Dialect.CALCULATE: CALCULATE_TABLE,
    Dialect.VERILOG: VERILOG_TABLE,
    Dialect.VERILOG_NAND: NAND_TABLE,
    Dialect.VERILOG_NOR: NOR_TABLE,
}


@dataclass
class Frame:
    """One context: a built-in table plus user definitions."""
    dialect: Dialect
    builtins: dict[str, Builtin] = field(default_factory=dict)
    user_defined: dict[str, UserFunctionDef] = field(default_factory=dict)


class ContextStack:
    """
    Stack of frames; the top frame decides the active dialect.

    Usage:
        stack = ContextStack(Dialect.CALCULATE)
        stack.push(Dialect.VERILOG_NAND)
        stack.lookup_builtin("and")
    """

    def __init__(self, dialect: Dialect | None = None):
        self.frames: list[Frame] = []
        if dialect is not None:
            self.push(dialect)

    def push(self, dialect: Dialect) -> Frame:
        frame = Frame(dialect=dialect, builtins=dialect.table)
        self.frames.append(frame)
        return frame

    def pop(self) -> Frame:
        if not self.frames:
            raise GateCalcError("Context stack is empty")
        return self.frames.pop()

    @property
    def top(self) -> Frame:
        if not self.frames:
            raise GateCalcError("Context stack is empty")
        return self.frames[-1]

    @property
    def dialect(self) -> Dialect:
        return self.top.dialect

    @property
    def depth(self) -> int:
        return len(self.frames)

    def lookup_builtin(self, name: str) -> Builtin | None:
        return self.top.builtins.get(name)

    def lookup_user_defined(self, name: str) -> UserFunctionDef | None:
        for frame in reversed(self.frames):
            if name in frame.user_defined:
                return frame.user_defined[name]
        return None

    def define(self, name: str, definition: UserFunctionDef):
        self.top.user_defined[name] = definition

    @contextmanager
    def visible(self, depth: int) -> Iterator[None]:
        """Hide every frame above `depth` for the duration of the block."""
        frames = self.frames
        self.frames = frames[:depth]
        try:
            yield
        finally:
            self.frames = frames

    def describe(self) -> list[dict]:
        """Frames bottom to top with their definitions, for display."""
        return [
            {
                "dialect": frame.dialect.value,
                "definitions": {
                    d.signature: format_node(d.body)
                    for d in frame.user_defined.values()
                },
            }
            for frame in self.frames
        ]
