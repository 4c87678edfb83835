"""
gatecalc Evaluator
==================
Tree-walking evaluator for resolved statement trees.

  - Literals evaluate to themselves; Symbols too unless a zero-parameter
    definition of that name is visible
  - Calls dispatch to the top frame's built-in table (params evaluated
    first), then to user definitions; unknown names still evaluate their
    params, then degrade to a Symbol carrying the name
  - Macro calls bind each formal parameter to the unevaluated argument in a
    temporary frame of the current dialect, evaluate the body there and pop
    the frame. Every reference to a parameter evaluates its argument again,
    against the frames that were visible at the call site
  - Definitions install a copy into the top frame and evaluate to a
    printable Call proxy

Only macro expansion counts toward `max_depth`; plain operator nesting is
bounded by the tree itself.
"""
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import replace
from typing import Iterator

from .context import ContextStack
from .errors import (
    ArityError, EvaluationDepthError, GateCalcError, UnresolvedOperatorBindingError,
)
from .nodes import (
    Call, IdCounter, Literal, Node, NoValue, Operator, Symbol, UserFunctionDef,
)


DEFAULT_MAX_DEPTH = 200


class Evaluator:
    """
    Evaluates one statement against a context stack.

    Usage:
        evaluator = Evaluator(stack, counter)
        result = evaluator.evaluate(root)
    """

    def __init__(self, stack: ContextStack, counter: IdCounter | None = None,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        self.stack = stack
        self.counter = counter or IdCounter()
        self.max_depth = max_depth
        self._depth = 0
        self._active = False
        self._expanding: set[str] = set()

    def evaluate(self, node: Node) -> Node:
        """Evaluate a node and return the resulting node."""
        if self._active:
            return self._evaluate(node)

        frames = self.stack.frames
        base = len(frames)
        self._active = True
        try:
            return self._evaluate(node)
        except RecursionError:
            raise EvaluationDepthError("Expression nested too deeply to evaluate") from None
        finally:
            self.stack.frames = frames
            del frames[base:]
            self._active = False
            self._depth = 0
            self._expanding.clear()

    def _evaluate(self, node: Node) -> Node:
        method = f"_eval_{node.node_type.lower()}"
        evaluator = getattr(self, method, None)
        if evaluator is None:
            raise GateCalcError(f"Unknown node type: {node.node_type}")
        return evaluator(node)

    @contextmanager
    def _expansion(self) -> Iterator[None]:
        if self._depth >= self.max_depth:
            raise EvaluationDepthError(
                f"Expansion nested deeper than {self.max_depth} levels"
            )
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    # ─────────────────────────────────────────────────────────
    #  Terminals
    # ─────────────────────────────────────────────────────────

    def _eval_literal(self, node: Literal) -> Node:
        return node

    def _eval_novalue(self, node: NoValue) -> Node:
        return node

    def _eval_operator(self, node: Operator) -> Node:
        raise UnresolvedOperatorBindingError(
            f"No method binding for operator: {node.kind.value!r} at column {node.col}"
        )

    def _eval_symbol(self, node: Symbol) -> Node:
        """A name is free unless a zero-parameter definition binds it."""
        definition = self.stack.lookup_user_defined(node.name)
        if definition is None or definition.params:
            return node
        if definition.scope is not None:
            return self._argument(definition)
        if node.name in self._expanding:
            return node
        return self._expand(definition)

    # ─────────────────────────────────────────────────────────
    #  Calls & Definitions
    # ─────────────────────────────────────────────────────────

    def _eval_call(self, node: Call) -> Node:
        builtin = self.stack.lookup_builtin(node.name)
        if builtin is not None:
            params = [self._evaluate(p) for p in node.params]
            result = builtin(params, self.counter)
            if isinstance(result, Call) and result.name == node.name:
                result = replace(
                    result,
                    source_operator=node.source_operator,
                    parenthesized=node.parenthesized,
                )
            return result

        definition = self.stack.lookup_user_defined(node.name)
        if definition is not None:
            return self._invoke(definition, node.params)

        for param in node.params:
            self._evaluate(param)
        return Symbol(name=node.name, col=node.col)

    def _eval_userfunctiondef(self, node: UserFunctionDef) -> Node:
        self.stack.define(node.name, deepcopy(node))
        return Call(
            name=node.name,
            params=[Symbol(name=p) for p in node.params],
            id=self.counter.next(),
            col=node.col,
        )

    def _invoke(self, definition: UserFunctionDef, args: list[Node]) -> Node:
        template = replace(deepcopy(definition), id=self.counter.next())
        if len(args) != len(template.params):
            raise ArityError(
                f"'{template.signature}' takes {len(template.params)} "
                f"parameter(s), got {len(args)}"
            )

        if not template.params:
            if template.scope is not None:
                return self._argument(template)
            return self._expand(template)

        caller = self.stack.depth
        with self._expansion():
            self.stack.push(self.stack.dialect)
            try:
                for name, arg in zip(template.params, args):
                    self.stack.define(
                        name, UserFunctionDef(name=name, body=arg, scope=caller),
                    )
                return self._evaluate(template.body)
            finally:
                self.stack.pop()

    def _argument(self, binding: UserFunctionDef) -> Node:
        """Evaluate a bound argument as the caller would have seen it."""
        with self.stack.visible(binding.scope):
            return self._evaluate(binding.body)

    def _expand(self, definition: UserFunctionDef) -> Node:
        """Evaluate a zero-parameter definition's body in the current frames."""
        with self._expansion():
            self._expanding.add(definition.name)
            try:
                return self._evaluate(definition.body)
            finally:
                self._expanding.discard(definition.name)


def evaluate(node: Node, stack: ContextStack, counter: IdCounter | None = None,
             max_depth: int = DEFAULT_MAX_DEPTH) -> Node:
    """Evaluate `node` against `stack` with a single shared id counter."""
    return Evaluator(stack, counter, max_depth).evaluate(node)
