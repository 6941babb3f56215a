# core must be imported before operations: it finishes by importing the
# operation classes its constructors build.
from .core import (
    Expression, Const, Var,
    CoefficientOverflowError, ExpressionDepthError,
)
from .operations import (
    NaryOperation, UnaryOperation,
    Sum, Prod, Neg, Pow,
    Ln, Sin, Cos, Arcsin, Arccos, Arctan,
)
from .ordering import canonical_key, sort_canonical, is_canonically_sorted
