"""
gatecalc Errors
===============
Every failure aborts the current statement. Nothing is retried and no
partial result is returned; callers catch GateCalcError per statement.
"""


class GateCalcError(Exception):
    """Base class for all statement-level failures."""
    kind = "error"


class StructuralParseError(GateCalcError):
    """Malformed brackets, call arguments, assignments or leftover slots."""
    kind = "parse"


class UnknownContextError(GateCalcError):
    """A `context` command named a dialect that does not exist."""
    kind = "context"


class UnresolvedOperatorBindingError(GateCalcError):
    """An operator with no semantic binding reached resolution or evaluation."""
    kind = "operator"


class ArityError(GateCalcError):
    """A built-in, macro or gate received the wrong number of parameters."""
    kind = "arity"


class TypeMismatchError(GateCalcError):
    """A gate operand is neither a Symbol nor a Call."""
    kind = "type"


class EvaluationDepthError(GateCalcError):
    """Macro expansion nested deeper than the configured limit."""
    kind = "depth"
