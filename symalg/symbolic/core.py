import copy
import functools
import logging

from symalg.config import current_config
from .ordering import canonical_key

logger = logging.getLogger(__name__)

# Names like Sum, Prod, Neg and Pow used in the constructor methods below are
# imported from .operations at the bottom of this file, once Expression,
# Const and Var exist for operations.py to import in turn.


class CoefficientOverflowError(OverflowError):
    """Raised when an integer coefficient or exponent leaves the configured signed width."""


class ExpressionDepthError(RecursionError):
    """Raised when a tree is too deep to be traversed recursively."""


def check_coefficient(value):
    """
    Returns value unchanged if it fits in the configured signed integer width.
    Raises CoefficientOverflowError otherwise; values are never wrapped.
    """
    bits = current_config().COEFFICIENT_BITS
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise CoefficientOverflowError(f"Integer {value} does not fit in a signed {bits}-bit coefficient.")
    return value


def guard_depth(expr, operation):
    """
    Walks the tree without recursion and refuses trees deeper than Config.MAX_DEPTH.
    """
    max_depth = current_config().MAX_DEPTH
    stack = [(expr, 1)]
    while stack:
        node, level = stack.pop()
        if level > max_depth:
            logger.error(f"Refusing to {operation} an expression deeper than {max_depth} levels.")
            raise ExpressionDepthError(f"Expression is deeper than the configured limit of {max_depth} levels.")
        stack.extend((child, level + 1) for child in node.children())


def _as_expression(value):
    # Promote plain integers to Const; Const itself rejects anything else
    if isinstance(value, Expression):
        return value
    return Const(value)


@functools.total_ordering
class Expression:
    """
    Base class of every node in an expression tree.

    Each node exclusively owns its children. The arithmetic operators build
    new trees from clones of their operands, so no subtree is ever shared
    between two parents.
    """

    def __add__(self, other):
        other = _as_expression(other)
        terms = []
        for operand in (self, other):
            # Flatten instead of nesting a Sum inside a new Sum
            if isinstance(operand, Sum):
                terms.extend(term.clone() for term in operand.terms)
            else:
                terms.append(operand.clone())
        return Sum(terms)

    def __sub__(self, other):
        return self + (-_as_expression(other))

    def __mul__(self, other):
        other = _as_expression(other)
        factors = []
        for operand in (self, other):
            if isinstance(operand, Prod):
                factors.extend(factor.clone() for factor in operand.terms)
            else:
                factors.append(operand.clone())
        return Prod(factors)

    def __truediv__(self, other):
        return self * _as_expression(other).recip()

    def __pow__(self, other):
        return Pow(self.clone(), _as_expression(other).clone())

    def __neg__(self):
        # Double negation collapses at construction time
        if isinstance(self, Neg):
            return self.operand.clone()
        return Neg(self.clone())

    # Reflected operations for cases like int + Expression
    def __radd__(self, other):
        return _as_expression(other) + self

    def __rsub__(self, other):
        return _as_expression(other) - self

    def __rmul__(self, other):
        return _as_expression(other) * self

    def __rtruediv__(self, other):
        return _as_expression(other) / self

    def __rpow__(self, other):
        return _as_expression(other) ** self

    def recip(self):
        """Returns 1/self: Pow(a, b) becomes Pow(a, -b), anything else e becomes Pow(e, -1)."""
        if isinstance(self, Pow):
            return Pow(self.base.clone(), -self.exponent)
        return Pow(self.clone(), Const(-1))

    def ln(self):
        """Returns the natural logarithm of this expression."""
        return Ln(self.clone())

    def sin(self):
        return Sin(self.clone())

    def cos(self):
        return Cos(self.clone())

    def arcsin(self):
        return Arcsin(self.clone())

    def arccos(self):
        return Arccos(self.clone())

    def arctan(self):
        return Arctan(self.clone())

    def clone(self):
        return copy.deepcopy(self)

    def simplify(self):
        """
        Returns the canonical form of this expression as a new tree.
        The receiver is left untouched. Idempotent.
        """
        guard_depth(self, 'simplify')
        return self._simplify()

    def derivative(self):
        """
        Returns the derivative with respect to the free variable as a new,
        unsimplified tree.
        """
        guard_depth(self, 'differentiate')
        return self._derivative()

    def to_latex(self):
        """Renders the expression as a LaTeX math-mode fragment (no enclosing $...$)."""
        guard_depth(self, 'render')
        return self._latex()

    def children(self):
        raise NotImplementedError

    def _rules(self):
        """Node-local rewrite rules applied by simplification, in priority order."""
        raise NotImplementedError

    def _simplify(self):
        raise NotImplementedError(f"Simplification not implemented for {type(self).__name__}.")

    def _derivative(self):
        raise NotImplementedError(f"Differentiation not implemented for {type(self).__name__}.")

    def _latex(self):
        raise NotImplementedError(f"LaTeX rendering not implemented for {type(self).__name__}.")

    def _payload_key(self):
        raise NotImplementedError

    def __eq__(self, other):
        if not isinstance(other, Expression):
            return NotImplemented
        return canonical_key(self) == canonical_key(other)

    def __lt__(self, other):
        if not isinstance(other, Expression):
            return NotImplemented
        return canonical_key(self) < canonical_key(other)

    def __hash__(self):
        return hash(canonical_key(self))

    def __str__(self):
        return self.to_latex()


class Const(Expression):
    def __init__(self, value):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Constants must be integers, got {type(value).__name__}.")
        self.value = check_coefficient(value)

    def children(self):
        return []

    def _rules(self):
        return ()

    def _simplify(self):
        return Const(self.value)

    def _derivative(self):
        return Const(0)

    def _latex(self):
        return str(self.value)

    def _payload_key(self):
        return (self.value,)

    def __repr__(self):
        return f"Const({self.value})"


class Var(Expression):
    """The single free variable."""

    def children(self):
        return []

    def _rules(self):
        return ()

    def _simplify(self):
        return Var()

    def _derivative(self):
        return Const(1)

    def _latex(self):
        return current_config().VARIABLE_NAME

    def _payload_key(self):
        return ()

    def __repr__(self):
        return "Var()"


from .operations import (  # noqa: E402
    Sum, Prod, Neg, Pow, Ln, Sin, Cos, Arcsin, Arccos, Arctan
)
