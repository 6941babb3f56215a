import logging

from symalg.config import current_config
from .core import Expression, Const, CoefficientOverflowError
from .ordering import canonical_key, sort_canonical

logger = logging.getLogger(__name__)


def _rewrite_to_fixed_point(node):
    """
    Applies the node-local rules of whatever node is current until none fires.

    Every rule either removes a child, removes a level of nesting or replaces
    the node by a smaller one, so the loop terminates well below the
    configured pass limit on any tree reachable through the constructors.
    """
    config = current_config()
    for _ in range(config.MAX_REWRITE_PASSES):
        for rule in node._rules():
            rewritten = rule(node)
            if rewritten is not None:
                logger.debug(f"{rule.__name__}: {node!r} -> {rewritten!r}")
                node = rewritten
                break
        else:
            return node

    message = f"Rewriting {node!r} did not reach a fixed point within {config.MAX_REWRITE_PASSES} passes."
    logger.error(message)
    if config.DEBUG:
        raise RuntimeError(message)
    return node


def settle(node):
    """
    Runs the local rules on a node whose children are already simplified,
    then puts Sum/Prod children in canonical order.
    """
    node = _rewrite_to_fixed_point(node)
    if isinstance(node, NaryOperation):
        node.terms = sort_canonical(node.terms)
    return node


def _parenthesize(expr, kinds, negative_constants=False):
    text = expr._latex()
    if isinstance(expr, kinds) or (negative_constants and isinstance(expr, Const) and expr.value < 0):
        return f"({text})"
    return text


class NaryOperation(Expression):
    def __init__(self, terms):
        self.terms = list(terms)

    def children(self):
        return list(self.terms)

    def _rules(self):
        raise NotImplementedError

    def _simplify(self):
        """
        Simplifies every child first, then the node itself.
        """
        return settle(type(self)([term._simplify() for term in self.terms]))

    def _payload_key(self):
        return tuple(canonical_key(term) for term in self.terms)

    def __repr__(self):
        return f"{type(self).__name__}([{', '.join(repr(term) for term in self.terms)}])"


class Sum(NaryOperation):
    """The sum of every expression in terms."""

    def _rules(self):
        from . import algebra
        return (
            algebra.collapse_singleton,
            algebra.flatten_nested,
            algebra.drop_zero_terms,
            algebra.unify_like_terms,
        )

    def _derivative(self):
        return Sum([term._derivative() for term in self.terms])

    def _latex(self):
        if not self.terms:
            return "0"
        text = self.terms[0]._latex()
        for term in self.terms[1:]:
            # +(-y) is written as -y
            if isinstance(term, Neg) or (isinstance(term, Const) and term.value < 0):
                text += term._latex()
            else:
                text += "+" + term._latex()
        return text


class Prod(NaryOperation):
    """The product of every expression in terms."""

    def _rules(self):
        from . import algebra
        return (
            algebra.collapse_singleton,
            algebra.flatten_nested,
            algebra.annihilate_zero,
            algebra.cancel_fractions,
            algebra.fold_constants,
            algebra.consolidate_powers,
            algebra.drop_unit_factor,
        )

    def _derivative(self):
        if not self.terms:
            return Const(0)
        if len(self.terms) == 1:
            return self.terms[0]._derivative()

        # Product rule (ab)' = ab' + ba', recursing on the tail
        head = self.terms[0]
        tail = Prod(self.terms[1:])
        return head * tail._derivative() + tail * head._derivative()

    def _latex(self):
        if not self.terms:
            return "0"
        head, rest = self.terms[0], self.terms[1:]
        if rest and head == Const(1):
            text = ""
        elif rest and head == Const(-1):
            text = "-"
        else:
            text = _parenthesize(head, (Sum, Neg))
        for factor in rest:
            if isinstance(factor, Const):
                if factor.value == 1:
                    continue
                # x(5), never a run of digits
                text += f"({factor._latex()})"
            else:
                text += _parenthesize(factor, (Sum, Neg))
        return text or "1"


class Neg(Expression):
    def __init__(self, operand):
        self.operand = operand

    def children(self):
        return [self.operand]

    def _rules(self):
        return (
            self.fold_negative_constant,
            self.strip_double_negative,
            self.distribute_over_sum,
        )

    @staticmethod
    def fold_negative_constant(node):
        """-(c) becomes the constant -c."""
        if isinstance(node.operand, Const):
            return Const(-node.operand.value)
        return None

    @staticmethod
    def strip_double_negative(node):
        """Removes every pair of negations in a run of them."""
        if not isinstance(node.operand, Neg):
            return None
        while isinstance(node, Neg) and isinstance(node.operand, Neg):
            node = node.operand.operand
        return node

    @staticmethod
    def distribute_over_sum(node):
        """-(a + b) becomes -a + -b, simplified again."""
        if not isinstance(node.operand, Sum):
            return None
        return Sum([Neg(term) for term in node.operand.terms])._simplify()

    def _simplify(self):
        return settle(Neg(self.operand._simplify()))

    def _derivative(self):
        return -self.operand._derivative()

    def _latex(self):
        return "-" + _parenthesize(self.operand, (Sum, Neg), negative_constants=True)

    def _payload_key(self):
        return canonical_key(self.operand)

    def __repr__(self):
        return f"Neg({self.operand!r})"


class Pow(Expression):
    """One expression to the power of another (base^exponent)."""

    def __init__(self, base, exponent):
        self.base = base
        self.exponent = exponent

    def children(self):
        return [self.base, self.exponent]

    def _rules(self):
        return (
            self.zero_exponent,
            self.unit_exponent,
            self.fold_integer_power,
        )

    @staticmethod
    def zero_exponent(node):
        """a^0 = 1"""
        if node.exponent == Const(0):
            return Const(1)
        return None

    @staticmethod
    def unit_exponent(node):
        """a^1 = a"""
        if node.exponent == Const(1):
            return node.base
        return None

    @staticmethod
    def fold_integer_power(node):
        """Evaluates c^n for integer c and n >= 0; negative exponents stay symbolic."""
        if not (isinstance(node.base, Const) and isinstance(node.exponent, Const)):
            return None
        base, exponent = node.base.value, node.exponent.value
        if exponent < 0:
            return None
        # |base| >= 2 to a power of at least the bit width cannot fit; refuse before computing it
        bits = current_config().COEFFICIENT_BITS
        if abs(base) > 1 and exponent >= bits:
            raise CoefficientOverflowError(f"{base}^{exponent} does not fit in a signed {bits}-bit coefficient.")
        return Const(base ** exponent)

    def _simplify(self):
        return settle(Pow(self.base._simplify(), self.exponent._simplify()))

    def _derivative(self):
        base, exponent = self.base, self.exponent
        if exponent == Const(0):
            return Const(0)
        if exponent == Const(1):
            return base._derivative()
        if isinstance(exponent, Const):
            # Power rule with chain rule: (a^c)' = c a^(c-1) a'
            return Const(exponent.value) * base ** Const(exponent.value - 1) * base._derivative()
        # a^b = e^(ln(a) b), so (a^b)' = a^b (ln(a) b)'
        return self * (base.ln() * exponent)._derivative()

    def _latex(self):
        base = _parenthesize(self.base, (Sum, Neg, Prod, Pow), negative_constants=True)
        exponent = _parenthesize(self.exponent, (Sum, Neg))
        return f"{base}^{{{exponent}}}"

    def _payload_key(self):
        return (canonical_key(self.base), canonical_key(self.exponent))

    def __repr__(self):
        return f"Pow({self.base!r}, {self.exponent!r})"


class UnaryOperation(Expression):
    """A transcendental function applied to one operand."""

    NAME = None

    def __init__(self, operand):
        self.operand = operand

    def children(self):
        return [self.operand]

    def _rules(self):
        return ()

    def _simplify(self):
        return settle(type(self)(self.operand._simplify()))

    def _latex(self):
        return f"\\{self.NAME}({self.operand._latex()})"

    def _payload_key(self):
        return canonical_key(self.operand)

    def __repr__(self):
        return f"{type(self).__name__}({self.operand!r})"


def _one_minus_square(u):
    return 1 - u ** Const(2)


class Ln(UnaryOperation):
    """Represents the natural logarithm of an expression."""
    NAME = "ln"

    def _derivative(self):
        # d/dx(ln(u)) = u' u^-1
        return self.operand._derivative() * self.operand ** Const(-1)


class Sin(UnaryOperation):
    NAME = "sin"

    def _derivative(self):
        return self.operand._derivative() * self.operand.cos()


class Cos(UnaryOperation):
    NAME = "cos"

    def _derivative(self):
        return self.operand._derivative() * -self.operand.sin()


class Arcsin(UnaryOperation):
    NAME = "arcsin"

    def _derivative(self):
        # d/dx(arcsin(u)) = u' (1 - u^2)^(-1/2); -1/2 stays the integer expression -1 * 2^-1
        return self.operand._derivative() * _one_minus_square(self.operand) ** (Const(-1) / Const(2))


class Arccos(UnaryOperation):
    NAME = "arccos"

    def _derivative(self):
        return self.operand._derivative() * -(_one_minus_square(self.operand) ** (Const(-1) / Const(2)))


class Arctan(UnaryOperation):
    NAME = "arctan"

    def _derivative(self):
        # d/dx(arctan(u)) = u' (1 + u^2)^-1
        return self.operand._derivative() * (1 + self.operand ** Const(2)) ** Const(-1)
