"""
gatecalc Built-in Tables
========================
One table of built-ins per dialect. Each built-in has a fixed arity,
folds to a Literal when every operand is a Literal, and otherwise returns
a fresh Call carrying the dialect's primitive name.

The NAND-only and NOR-only tables rewrite and/or/not into their single
universal gate at evaluation time:

    and(a, b) = nand(n, n)              n = nand(a, b)
    or(a, b)  = nand(nand(a, a), nand(b, b))
    not(a)    = nand(a, a)

    or(a, b)  = nor(n, n)               n = nor(a, b)
    and(a, b) = nor(nor(a, a), nor(b, b))
    not(a)    = nor(a, a)

`n` is one node referenced twice, so the netlist emits it once.
"""
import math
from dataclasses import dataclass
from typing import Callable

from .errors import ArityError, TypeMismatchError
from .nodes import Call, IdCounter, Literal, Node


Apply = Callable[[list[Node], IdCounter], Node]


@dataclass(frozen=True)
class Builtin:
    """A named dialect operation with a fixed parameter count."""
    name: str
    arity: int
    apply: Apply
    description: str = ""

    def __call__(self, params: list[Node], counter: IdCounter) -> Node:
        if len(params) != self.arity:
            raise ArityError(
                f"'{self.name}' takes {self.arity} parameter(s), got {len(params)}"
            )
        return self.apply(params, counter)


def all_literal(params: list[Node]) -> bool:
    return all(isinstance(p, Literal) for p in params)


def make_gate(name: str, params: list[Node], counter: IdCounter) -> Call:
    return Call(name=name, params=list(params), id=counter.next())


# ─────────────────────────────────────────────────────────────
#  Calculate
# ─────────────────────────────────────────────────────────────

def _divide(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _power(a: float, b: float) -> float:
    odd = b.is_integer() and int(b) % 2 == 1
    try:
        return math.pow(a, b)
    except ValueError:
        if a == 0.0 and b < 0:
            return math.copysign(math.inf, a) if odd else math.inf
        return math.nan
    except OverflowError:
        return math.copysign(math.inf, a) if odd else math.inf


def _modulus(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def arithmetic(name: str, fold: Callable[[float, float], float], description: str) -> Builtin:
    def apply(params: list[Node], counter: IdCounter) -> Node:
        if all_literal(params):
            return Literal(value=fold(params[0].value, params[1].value))
        return make_gate(name, params, counter)
    return Builtin(name, 2, apply, description)


CALCULATE_TABLE: dict[str, Builtin] = {
    b.name: b for b in (
        arithmetic("add", lambda a, b: a + b, "a + b"),
        arithmetic("negate", lambda a, b: a - b, "a - b"),
        arithmetic("multiply", lambda a, b: a * b, "a * b"),
        arithmetic("inverse", _divide, "a / b"),
        arithmetic("power", _power, "a ^ b"),
        arithmetic("modulus", _modulus, "a % b"),
    )
}


# ─────────────────────────────────────────────────────────────
#  Logic folding
# ─────────────────────────────────────────────────────────────

def to_bits(node: Literal) -> int:
    """Truncate a literal to an integer bit pattern."""
    if not math.isfinite(node.value):
        raise TypeMismatchError(f"Cannot use {node.value} as a bit pattern")
    return int(node.value)


LOGIC_FOLDS: dict[str, Callable[..., int]] = {
    "and": lambda a, b: a & b,
    "or": lambda a, b: a | b,
    "xor": lambda a, b: a ^ b,
    "not": lambda a: ~a,
    "nand": lambda a, b: ~(a & b),
    "nor": lambda a, b: ~(a | b),
    "xnor": lambda a, b: ~(a ^ b),
}


def fold_logic(primitive: str, params: list[Node]) -> Literal:
    bits = [to_bits(p) for p in params]
    return Literal(value=float(LOGIC_FOLDS[primitive](*bits)))


def primitive_gate(primitive: str, params: list[Node], counter: IdCounter) -> Node:
    if all_literal(params):
        return fold_logic(primitive, params)
    return make_gate(primitive, params, counter)


# ─────────────────────────────────────────────────────────────
#  Verilog (and / or / not)
# ─────────────────────────────────────────────────────────────

def direct(name: str, primitive: str, arity: int = 2) -> Builtin:
    def apply(params: list[Node], counter: IdCounter) -> Node:
        return primitive_gate(primitive, params, counter)
    return Builtin(name, arity, apply, primitive)


VERILOG_TABLE: dict[str, Builtin] = {
    b.name: b for b in (
        direct("add", "or"),
        direct("multiply", "and"),
        direct("and", "and"),
        direct("or", "or"),
        direct("not", "not", arity=1),
        direct("xor", "xor"),
        direct("nand", "nand"),
        direct("nor", "nor"),
        direct("xnor", "xnor"),
    )
}


# ─────────────────────────────────────────────────────────────
#  Universal gates
# ─────────────────────────────────────────────────────────────

def universal_table(gate: str) -> dict[str, Builtin]:
    """Build the and/or/not table for a single universal gate.

    For NAND the and-form shares its inner gate; for NOR the or-form does.
    """
    def g(a: Node, b: Node, counter: IdCounter) -> Node:
        return primitive_gate(gate, [a, b], counter)

    def shared(params: list[Node], counter: IdCounter) -> Node:
        inner = g(params[0], params[1], counter)
        return g(inner, inner, counter)

    def inverted(params: list[Node], counter: IdCounter) -> Node:
        a, b = params
        return g(g(a, a, counter), g(b, b, counter), counter)

    def invert(params: list[Node], counter: IdCounter) -> Node:
        return g(params[0], params[0], counter)

    if gate == "nand":
        and_form, or_form = shared, inverted
    else:
        and_form, or_form = inverted, shared

    return {
        "add": Builtin("add", 2, or_form, f"or via {gate}"),
        "multiply": Builtin("multiply", 2, and_form, f"and via {gate}"),
        "and": Builtin("and", 2, and_form, f"and via {gate}"),
        "or": Builtin("or", 2, or_form, f"or via {gate}"),
        "not": Builtin("not", 1, invert, f"{gate}(a, a)"),
    }


NAND_TABLE: dict[str, Builtin] = universal_table("nand")
NOR_TABLE: dict[str, Builtin] = universal_table("nor")
