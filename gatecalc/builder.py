"""
gatecalc Tree Builder
=====================
Operator-precedence resolution over a flat list of slots.

The token stream becomes a list of optional nodes. Resolution works in
place: brackets are resolved innermost first, then one sweep per
precedence level folds operator slots into Call nodes, taking the nearest
non-empty slot on each side. A taken slot is set to None. When the pass is
done the single remaining slot is the statement root.

Precedence (tightest first):
    ~   ^   /   *   %   -   +   &   |   =
"""
from dataclasses import replace

from .errors import StructuralParseError, UnresolvedOperatorBindingError
from .lexer import Lexer, Token, TokenType
from .nodes import (
    Call, IdCounter, Literal, Node, NoValue, Operator, OperatorKind, Symbol,
    UserFunctionDef,
)


BINARY_PRECEDENCE: list[OperatorKind] = [
    OperatorKind.CARET,
    OperatorKind.SLASH,
    OperatorKind.ASTERISK,
    OperatorKind.MODULUS,
    OperatorKind.MINUS,
    OperatorKind.PLUS,
    OperatorKind.AMPERSAND,
    OperatorKind.PIPE,
]

Slots = list[Node | None]


def classify_tokens(tokens: list[Token]) -> Slots:
    """Turn tokens into builder slots.

    A TEXT token directly followed by `(` is a pending function name.
    """
    slots: Slots = []
    for i, token in enumerate(tokens):
        if token.type == TokenType.EOF:
            break
        if token.type == TokenType.NUMBER:
            slots.append(Literal(value=float(token.value), col=token.col))
        elif token.type == TokenType.OPERATOR:
            slots.append(Operator(kind=token.operator, col=token.col))
        else:
            follower = tokens[i + 1] if i + 1 < len(tokens) else None
            pending = (follower is not None
                       and follower.operator is OperatorKind.PAREN_OPEN)
            slots.append(Symbol(name=token.value, pending_call=pending, col=token.col))
    return slots


def _is_operator(node: Node | None, kind: OperatorKind) -> bool:
    return isinstance(node, Operator) and node.kind is kind


def find_operator(slots: Slots, kind: OperatorKind, start: int, end: int) -> int | None:
    for i in range(start, end):
        if _is_operator(slots[i], kind):
            return i
    return None


def find_open_bracket(slots: Slots, start: int, end: int) -> int | None:
    """First `(` in range that lies before any unconsumed `)`."""
    for i in range(start, end):
        if _is_operator(slots[i], OperatorKind.PAREN_CLOSE):
            return None
        if _is_operator(slots[i], OperatorKind.PAREN_OPEN):
            return i
    return None


def find_nearest(slots: Slots, index: int, forward: bool, start: int, end: int) -> int | None:
    """Index of the nearest non-empty slot before/after `index` within [start, end)."""
    indices = range(index + 1, end) if forward else range(index - 1, start - 1, -1)
    for i in indices:
        if slots[i] is not None:
            return i
    return None


def take(slots: Slots, index: int | None) -> Node | None:
    """Move a node out of its slot."""
    if index is None:
        return None
    node = slots[index]
    slots[index] = None
    return node


class TreeBuilder:
    """
    Resolves one statement's slots into a single expression tree.

    Usage:
        builder = TreeBuilder(counter)
        root = builder.build(Lexer(source).tokenize())
    """

    def __init__(self, counter: IdCounter | None = None):
        self.counter = counter or IdCounter()

    def build(self, tokens: list[Token]) -> Node:
        """Build the statement root (NoValue for an empty statement)."""
        slots = classify_tokens(tokens)
        try:
            boundary = self.resolve(slots, 0, len(slots))
        except RecursionError:
            raise StructuralParseError("Brackets nested too deeply") from None
        if boundary < len(slots):
            raise StructuralParseError(
                f"Unmatched ')' at column {slots[boundary].col}"
            )
        return self.select_root(slots)

    def build_source(self, source: str) -> Node:
        return self.build(Lexer(source).tokenize())

    @staticmethod
    def select_root(slots: Slots) -> Node:
        survivors = [node for node in slots if node is not None]
        if not survivors:
            return NoValue()
        stray = [n for n in survivors if isinstance(n, Operator)]
        if stray:
            raise UnresolvedOperatorBindingError(
                f"No method binding for operator: {stray[0].kind.value!r} "
                f"at column {stray[0].col}"
            )
        if len(survivors) > 1:
            raise StructuralParseError(
                f"Statement does not reduce to one expression "
                f"({len(survivors)} values left)"
            )
        return survivors[0]

    # ─────────────────────────────────────────────────────────
    #  Resolution
    # ─────────────────────────────────────────────────────────

    def resolve(self, slots: Slots, start: int, end: int) -> int:
        """Resolve slots[start:end] in place.

        Returns the index of the first unconsumed `)` (the end of the
        enclosing bracket) or `end`.
        """
        while (open_index := find_open_bracket(slots, start, end)) is not None:
            self._resolve_bracket(slots, open_index, start, end)

        boundary = find_operator(slots, OperatorKind.PAREN_CLOSE, start, end)
        if boundary is None:
            boundary = end

        self._sweep_unary(slots, OperatorKind.TILDE, start, boundary)
        for kind in BINARY_PRECEDENCE:
            self._sweep_binary(slots, kind, start, boundary)
        self._resolve_assignments(slots, start, boundary)
        return boundary

    def _resolve_bracket(self, slots: Slots, open_index: int, start: int, end: int):
        close_index = self.resolve(slots, open_index + 1, end)
        if close_index >= end:
            raise StructuralParseError(
                f"Unclosed '(' at column {slots[open_index].col}"
            )

        callee_index = find_nearest(slots, open_index, False, start, end)
        callee = slots[callee_index] if callee_index is not None else None

        if isinstance(callee, Symbol) and callee.pending_call:
            params = self._collect_arguments(slots, open_index + 1, close_index)
            slots[callee_index] = Call(
                name=callee.name, params=params,
                id=self.counter.next(), col=callee.col,
            )
        else:
            inner = [i for i in range(open_index + 1, close_index) if slots[i] is not None]
            if len(inner) == 1 and isinstance(slots[inner[0]], Call):
                slots[inner[0]] = replace(slots[inner[0]], parenthesized=True)

        take(slots, open_index)
        take(slots, close_index)

    def _collect_arguments(self, slots: Slots, start: int, end: int) -> list[Node]:
        """Take `value , value , value` out of an argument list."""
        params: list[Node] = []
        expect_value = True
        for i in range(start, end):
            node = slots[i]
            if node is None:
                continue
            is_comma = _is_operator(node, OperatorKind.COMMA)
            if expect_value and is_comma:
                raise StructuralParseError(
                    f"Missing argument before ',' at column {node.col}"
                )
            if not expect_value and not is_comma:
                raise StructuralParseError(
                    f"Incorrect function call: expected ',' at column {node.col}"
                )
            taken = take(slots, i)
            if expect_value:
                params.append(taken)
            expect_value = not expect_value
        if params and expect_value:
            raise StructuralParseError("Trailing ',' in argument list")
        return params

    def _sweep_unary(self, slots: Slots, kind: OperatorKind, start: int, end: int):
        # Right to left so that `~~a` nests as not(not(a)).
        name = kind.binding
        for i in range(end - 1, start - 1, -1):
            node = slots[i]
            if not _is_operator(node, kind):
                continue
            operand = take(slots, find_nearest(slots, i, True, start, end))
            params = [operand] if operand is not None else []
            slots[i] = Call(
                name=name, params=params, source_operator=kind,
                id=self.counter.next(), col=node.col,
            )

    def _sweep_binary(self, slots: Slots, kind: OperatorKind, start: int, end: int):
        name = kind.binding
        for i in range(start, end):
            node = slots[i]
            if not _is_operator(node, kind):
                continue
            params = []
            left = take(slots, find_nearest(slots, i, False, start, end))
            if left is not None:
                params.append(left)
            right = take(slots, find_nearest(slots, i, True, start, end))
            if right is not None:
                params.append(right)
            slots[i] = Call(
                name=name, params=params, source_operator=kind,
                id=self.counter.next(), col=node.col,
            )

    def _resolve_assignments(self, slots: Slots, start: int, end: int):
        for i in range(start, end):
            node = slots[i]
            if not _is_operator(node, OperatorKind.EQUALS):
                continue
            target_index = find_nearest(slots, i, False, start, end)
            body_index = find_nearest(slots, i, True, start, end)
            if target_index is None or body_index is None:
                raise StructuralParseError(
                    f"Assignment at column {node.col} needs a name and a body"
                )
            target = slots[target_index]
            definition = self._make_definition(target, take(slots, body_index), node.col)
            slots[target_index] = definition
            take(slots, i)

    def _make_definition(self, target: Node, body: Node, col: int) -> UserFunctionDef:
        if isinstance(target, Symbol) and not target.pending_call:
            return UserFunctionDef(name=target.name, body=body, col=target.col)
        if isinstance(target, Call) and target.source_operator is None:
            names = []
            for param in target.params:
                if not isinstance(param, Symbol):
                    raise StructuralParseError(
                        f"Parameters of '{target.name}' must be names"
                    )
                names.append(param.name)
            return UserFunctionDef(name=target.name, params=names, body=body, col=target.col)
        raise StructuralParseError(
            f"Cannot assign to this expression (column {col})"
        )
