"""
gatecalc Netlist Generator
==========================
Lowers an evaluated hardware-dialect tree into gate instantiations:

    wire w_1, w_2;
    nand(w_1, a, b);
    nand(w_2, w_1, w_1);

Gates are emitted depth first, inputs before the gate that reads them.
A Call whose id was already emitted is skipped, so a node referenced from
several places becomes one gate driving one wire.
"""
from .errors import ArityError, EvaluationDepthError, TypeMismatchError
from .nodes import Call, Node, Symbol


class NetlistGenerator:
    """
    Collects gate lines and wire ids for one tree.

    Usage:
        text, wires = NetlistGenerator().generate(root)
    """

    def __init__(self):
        self.lines: list[str] = []
        self.emitted: set[int] = set()

    def generate(self, node: Node) -> tuple[str, set[int]]:
        if isinstance(node, Call):
            try:
                self._emit(node)
            except RecursionError:
                raise EvaluationDepthError("Gate tree nested too deeply") from None
        text = "".join(f"{line}\n" for line in self.lines)
        return text, set(self.emitted)

    def _emit(self, node: Call):
        if node.id in self.emitted:
            return
        if len(node.params) not in (1, 2):
            raise ArityError(
                f"Gate '{node.name}' needs 1 or 2 inputs, got {len(node.params)}"
            )

        for param in node.params:
            if isinstance(param, Call):
                self._emit(param)

        operands = ", ".join(self._operand(p) for p in node.params)
        self.emitted.add(node.id)
        self.lines.append(f"{node.name}({node.wire}, {operands});")

    @staticmethod
    def _operand(node: Node) -> str:
        if isinstance(node, Symbol):
            return node.name
        if isinstance(node, Call):
            return node.wire
        raise TypeMismatchError(
            f"Type not allowed as gate input: {node.node_type}"
        )


def generate(node: Node) -> tuple[str, set[int]]:
    """Gate lines for `node` and the set of wire ids they drive."""
    return NetlistGenerator().generate(node)


def declare_wires(wire_ids: set[int]) -> str:
    if not wire_ids:
        return ""
    return "wire " + ", ".join(f"w_{i}" for i in sorted(wire_ids)) + ";"


def render_netlist(node: Node) -> str:
    """Wire declaration followed by the gate lines."""
    text, wire_ids = generate(node)
    declaration = declare_wires(wire_ids)
    if not declaration:
        return text
    return f"{declaration}\n{text}"
