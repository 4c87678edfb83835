"""
gatecalc: an expression calculator that also lowers logic expressions to
gate-level netlists (AND/OR/NOT, NAND-only or NOR-only).
"""
from .errors import (
    GateCalcError, StructuralParseError, UnknownContextError,
    UnresolvedOperatorBindingError, ArityError, TypeMismatchError,
    EvaluationDepthError,
)
from .nodes import (
    Node, Literal, Symbol, Operator, OperatorKind, Call, UserFunctionDef,
    NoValue, IdCounter, format_node,
)
from .lexer import Lexer, Token, TokenType
from .builder import TreeBuilder
from .context import ContextStack, Dialect, Frame
from .evaluator import Evaluator, evaluate
from .codegen import NetlistGenerator, generate, declare_wires, render_netlist
from .session import Session, SessionConfig, StatementResult

__version__ = "0.1.0"
__all__ = [
    "GateCalcError", "StructuralParseError", "UnknownContextError",
    "UnresolvedOperatorBindingError", "ArityError", "TypeMismatchError",
    "EvaluationDepthError",
    "Node", "Literal", "Symbol", "Operator", "OperatorKind", "Call",
    "UserFunctionDef", "NoValue", "IdCounter", "format_node",
    "Lexer", "Token", "TokenType",
    "TreeBuilder",
    "ContextStack", "Dialect", "Frame",
    "Evaluator", "evaluate",
    "NetlistGenerator", "generate", "declare_wires", "render_netlist",
    "Session", "SessionConfig", "StatementResult",
]
