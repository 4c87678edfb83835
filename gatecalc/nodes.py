"""
gatecalc Expression Nodes
=========================
The closed set of node types shared by the tree builder, the evaluator and
the netlist generator, plus the operator table and the per-statement id
counter.

Node kinds:
  - Literal          concrete number, terminal
  - Symbol           free variable / wire name (or a pending function name)
  - Operator         only lives inside the builder's slot list
  - Call             function or gate application, identified by `id`
  - UserFunctionDef  macro produced by `=`
  - NoValue          nothing produced this turn
"""
import math
from dataclasses import dataclass, field
from enum import Enum

from .errors import UnresolvedOperatorBindingError


# ─────────────────────────────────────────────────────────────
#  Operators
# ─────────────────────────────────────────────────────────────

class OperatorKind(Enum):
    """Single-character operator symbols understood by the builder."""
    PLUS        = "+"
    MINUS       = "-"
    ASTERISK    = "*"
    SLASH       = "/"
    PAREN_OPEN  = "("
    PAREN_CLOSE = ")"
    CARET       = "^"
    MODULUS     = "%"
    COMMA       = ","
    AMPERSAND   = "&"
    PIPE        = "|"
    TILDE       = "~"
    EQUALS      = "="

    @property
    def binding(self) -> str:
        """Name of the built-in this operator lowers to."""
        name = OPERATOR_BINDINGS.get(self)
        if name is None:
            raise UnresolvedOperatorBindingError(
                f"No method binding for operator: {self.value!r}"
            )
        return name

    @property
    def is_unary(self) -> bool:
        return self is OperatorKind.TILDE


OPERATOR_BINDINGS: dict[OperatorKind, str] = {
    OperatorKind.PLUS: "add",
    OperatorKind.MINUS: "negate",
    OperatorKind.ASTERISK: "multiply",
    OperatorKind.SLASH: "inverse",
    OperatorKind.CARET: "power",
    OperatorKind.MODULUS: "modulus",
    OperatorKind.AMPERSAND: "and",
    OperatorKind.PIPE: "or",
    OperatorKind.TILDE: "not",
}

OPERATOR_CHARS: dict[str, OperatorKind] = {op.value: op for op in OperatorKind}


# ─────────────────────────────────────────────────────────────
#  Node Types
# ─────────────────────────────────────────────────────────────

@dataclass
class Node:
    """Base class for all expression nodes."""
    node_type: str = ""
    col: int = field(default=0, compare=False, repr=False)


@dataclass
class Literal(Node):
    """A concrete numeric value."""
    value: float = 0.0

    def __post_init__(self):
        self.node_type = "Literal"
        self.value = float(self.value)


@dataclass
class Symbol(Node):
    """An unresolved name.

    `pending_call` marks a name written directly before `(`; the builder
    turns it into a Call once the bracket is resolved.
    """
    name: str = ""
    pending_call: bool = False

    def __post_init__(self):
        self.node_type = "Symbol"


@dataclass
class Operator(Node):
    """An operator slot awaiting resolution."""
    kind: OperatorKind | None = None

    def __post_init__(self):
        self.node_type = "Operator"


@dataclass
class Call(Node):
    """A function or gate application.

    `id` is the node's identity for netlist dedup and wire naming; two
    calls with equal structure but different ids are different gates.
    """
    name: str = ""
    params: list[Node] = field(default_factory=list)
    source_operator: OperatorKind | None = None
    parenthesized: bool = False
    id: int = 0

    def __post_init__(self):
        self.node_type = "Call"

    @property
    def wire(self) -> str:
        return f"w_{self.id}"


@dataclass
class UserFunctionDef(Node):
    """A macro: name(params) = body."""
    name: str = ""
    params: list[str] = field(default_factory=list)
    body: Node | None = None
    id: int = 0
    scope: int | None = None  # formal parameter: frames its argument is evaluated against

    def __post_init__(self):
        self.node_type = "UserFunctionDef"

    @property
    def signature(self) -> str:
        if not self.params:
            return self.name
        return f"{self.name}({', '.join(self.params)})"


@dataclass
class NoValue(Node):
    """Sentinel for statements that produce nothing."""

    def __post_init__(self):
        self.node_type = "NoValue"


# ─────────────────────────────────────────────────────────────
#  Id Counter
# ─────────────────────────────────────────────────────────────

class IdCounter:
    """Monotonic id source shared by one statement's whole pass."""

    def __init__(self, start: int = 0):
        self.value = start

    def next(self) -> int:
        current = self.value
        self.value += 1
        return current


# ─────────────────────────────────────────────────────────────
#  Formatting
# ─────────────────────────────────────────────────────────────

def format_number(value: float) -> str:
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return str(value)


def format_node(node: Node | None) -> str:
    """Render a node the way the REPL prints it."""
    if node is None:
        return "∅"
    if isinstance(node, Literal):
        return format_number(node.value)
    if isinstance(node, Symbol):
        return node.name
    if isinstance(node, Operator):
        return node.kind.value if node.kind else "?"
    if isinstance(node, Call):
        return _format_call(node)
    if isinstance(node, UserFunctionDef):
        return f"{node.signature} = {format_node(node.body)}"
    return "∅"


def _format_call(node: Call) -> str:
    op = node.source_operator
    if op is not None and op.is_unary and len(node.params) == 1:
        text = f"{op.value}{format_node(node.params[0])}"
    elif op is not None and len(node.params) == 2:
        left, right = (format_node(p) for p in node.params)
        text = f"{left} {op.value} {right}"
    else:
        args = ", ".join(format_node(p) for p in node.params)
        return f"{node.name}({args})"
    return f"({text})" if node.parenthesized else text
