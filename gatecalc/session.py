"""
gatecalc Session
================
Runs input one line at a time against a persistent context stack.

A line is either a dialect switch (`context verilog nand`) or a statement.
Each statement gets a fresh id counter shared by the tree builder, the
evaluator and the built-ins. Under a hardware dialect the evaluated tree is
lowered to a netlist.

Configuration comes from SessionConfig, optionally read from:
    GATECALC_DIALECT    initial dialect (default: calculate)
    GATECALC_TRACE      1/true to echo resolved trees
    GATECALC_MAX_DEPTH  macro expansion limit (default: 200)
"""
import os
from dataclasses import dataclass, field
from typing import Callable

from .builder import TreeBuilder
from .codegen import declare_wires, generate
from .context import ContextStack, Dialect
from .evaluator import DEFAULT_MAX_DEPTH, Evaluator
from .lexer import Lexer
from .nodes import Call, IdCounter, Node, NoValue, UserFunctionDef, format_node


CONTEXT_COMMAND = "context"
TRUTHY = ("1", "true", "yes", "on")


@dataclass
class SessionConfig:
    """Settings for a Session."""
    dialect: str = Dialect.CALCULATE.value
    trace: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    @classmethod
    def from_env(cls, environ: dict | None = None) -> "SessionConfig":
        env = os.environ if environ is None else environ
        return cls(
            dialect=env.get("GATECALC_DIALECT", Dialect.CALCULATE.value),
            trace=env.get("GATECALC_TRACE", "").strip().lower() in TRUTHY,
            max_depth=int(env.get("GATECALC_MAX_DEPTH", DEFAULT_MAX_DEPTH)),
        )


@dataclass
class StatementResult:
    """Outcome of one executed line."""
    value: Node = field(default_factory=NoValue)
    dialect: Dialect = Dialect.CALCULATE
    netlist: str | None = None
    wires: set[int] = field(default_factory=set)
    is_definition: bool = False
    switched_to: Dialect | None = None


def split_context_command(line: str) -> str | None:
    """Dialect name of a `context <name>` line, else None."""
    parts = line.strip().split(None, 1)
    if not parts or parts[0] != CONTEXT_COMMAND:
        return None
    return parts[1] if len(parts) > 1 else ""


class Session:
    """
    An evaluation session.

    Usage:
        session = Session()
        result = session.execute("2 + 11 * 4")
        print(session.render(result))
    """

    def __init__(self, config: SessionConfig | None = None,
                 output_fn: Callable[[str], None] | None = None):
        self.config = config or SessionConfig()
        self.output_fn = output_fn or (lambda s: print(s))
        self.history: list[str] = []
        self.stack = ContextStack(Dialect.from_name(self.config.dialect))

    def reset(self):
        """Drop every frame and definition; start over in the configured dialect."""
        self.history.clear()
        self.stack = ContextStack(Dialect.from_name(self.config.dialect))

    @property
    def dialect(self) -> Dialect:
        return self.stack.dialect

    # ─────────────────────────────────────────────────────────
    #  Execution
    # ─────────────────────────────────────────────────────────

    def execute(self, line: str) -> StatementResult:
        """Execute one line. Errors propagate as GateCalcError."""
        dialect_name = split_context_command(line)
        if dialect_name is not None:
            dialect = Dialect.from_name(dialect_name)
            self.stack.push(dialect)
            result = StatementResult(dialect=dialect, switched_to=dialect)
        else:
            result = self._execute_statement(line)
        self.history.append(self.render(result))
        return result

    def _execute_statement(self, line: str) -> StatementResult:
        counter = IdCounter()
        root = TreeBuilder(counter).build(Lexer(line).tokenize())
        self._trace(f"tree: {format_node(root)}")

        dialect = self.stack.dialect
        value = Evaluator(self.stack, counter, self.config.max_depth).evaluate(root)
        self._trace(f"value: {format_node(value)}")

        result = StatementResult(
            value=value,
            dialect=dialect,
            is_definition=isinstance(root, UserFunctionDef),
        )
        if dialect.is_hardware and isinstance(value, Call) and not result.is_definition:
            result.netlist, result.wires = generate(value)
        return result

    def _trace(self, message: str):
        if self.config.trace:
            self.output_fn(f"  ⋯ {message}")

    # ─────────────────────────────────────────────────────────
    #  Rendering
    # ─────────────────────────────────────────────────────────

    def render(self, result: StatementResult) -> str:
        """Text the REPL prints for a result."""
        if result.switched_to is not None:
            return f"context: {result.switched_to.value}"
        if result.is_definition:
            value = result.value
            if isinstance(value, Call) and not value.params:
                return f"defined {value.name}"
            return f"defined {format_node(value)}"
        if result.netlist is not None:
            return f"{declare_wires(result.wires)}\n{result.netlist}".rstrip("\n")
        return format_node(result.value)

    def run(self, line: str) -> str:
        """Execute a line and return its rendered output."""
        return self.render(self.execute(line))
