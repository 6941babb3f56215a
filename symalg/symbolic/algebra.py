"""
Node-local rewrite rules for Sum and Prod.

Each rule takes a node whose children are already simplified and returns
either a replacement node or None when it does not apply. The caller
(operations.settle) loops over them until none fires.
"""
from .core import Const, check_coefficient
from .operations import Sum, Prod, Neg, Pow, settle
from .ordering import sort_canonical


def collapse_singleton(node):
    """Empty Sum/Prod becomes 0; a one-element Sum/Prod becomes its element."""
    if not node.terms:
        return Const(0)
    if len(node.terms) == 1:
        return node.terms[0]
    return None


def flatten_nested(node):
    """Splices children of the same kind into the parent: a + (b + c) = a + b + c."""
    cls = type(node)
    if not any(isinstance(term, cls) for term in node.terms):
        return None
    terms = []
    for term in node.terms:
        if isinstance(term, cls):
            terms.extend(term.terms)
        else:
            terms.append(term)
    return cls(terms)


def drop_zero_terms(node):
    kept = [term for term in node.terms if term != Const(0)]
    if len(kept) == len(node.terms):
        return None
    return Sum(kept)


def split_coefficient(term):
    """
    Represents term as coefficient * factors.

    Returns (coefficient, factors) where coefficient is an int and factors is
    the list of non-constant factors. Bare terms have coefficient 1 and a
    negated term carries the negated coefficient of its operand.
    """
    if isinstance(term, Const):
        return (term.value, [])
    if isinstance(term, Neg):
        coefficient, factors = split_coefficient(term.operand)
        return (check_coefficient(-coefficient), factors)
    if isinstance(term, Prod):
        coefficient = 1
        factors = []
        for factor in term.terms:
            if isinstance(factor, Const):
                coefficient = check_coefficient(coefficient * factor.value)
            else:
                factors.append(factor)
        return (coefficient, factors)
    return (1, [term])


def _same_factors(first, second):
    # Factor lists are compared as multisets
    return len(first) == len(second) and sort_canonical(first) == sort_canonical(second)


def _rebuild_term(coefficient, factors):
    if not factors:
        return Const(coefficient)
    return settle(Prod([Const(coefficient)] + factors))


def unify_like_terms(node):
    """
    Merges the first pair of like terms found: 2x + 3x = 5x, 2 + 3 = 5.
    Returns None once no two terms share the same factors.
    """
    split = [split_coefficient(term) for term in node.terms]
    for i in range(len(split)):
        for j in range(i + 1, len(split)):
            if not _same_factors(split[i][1], split[j][1]):
                continue
            coefficient = check_coefficient(split[i][0] + split[j][0])
            terms = list(node.terms)
            terms[i] = _rebuild_term(coefficient, split[i][1])
            del terms[j]
            return Sum(terms)
    return None


def annihilate_zero(node):
    if Const(0) in node.terms:
        return Const(0)
    return None


def cancel_fractions(node):
    """A factor and its reciprocal cancel to 1: x * x^-1 = 1."""
    for i, factor in enumerate(node.terms):
        reciprocal = Pow(factor, Const(-1))
        for j, other in enumerate(node.terms):
            if j != i and other == reciprocal:
                terms = [term for k, term in enumerate(node.terms) if k not in (i, j)]
                terms.append(Const(1))
                return Prod(terms)
    return None


def fold_constants(node):
    """Multiplies every Const factor into one."""
    constants = [term for term in node.terms if isinstance(term, Const)]
    if len(constants) < 2:
        return None
    product = 1
    for constant in constants:
        product = check_coefficient(product * constant.value)
    return Prod([Const(product)] + [term for term in node.terms if not isinstance(term, Const)])


def _base_and_exponent(factor):
    if isinstance(factor, Pow):
        return (factor.base, factor.exponent)
    return (factor, Const(1))


def consolidate_powers(node):
    """
    Merges non-constant factors sharing a base into one power whose exponent
    is the sum of theirs: x^2 * x = x^3, x^a * x^b = x^(a+b).
    """
    candidates = [i for i, term in enumerate(node.terms) if not isinstance(term, Const)]
    for i in candidates:
        base, _ = _base_and_exponent(node.terms[i])
        group = [k for k in candidates if _base_and_exponent(node.terms[k])[0] == base]
        if len(group) < 2:
            continue
        exponent = settle(Sum([_base_and_exponent(node.terms[k])[1] for k in group]))
        merged = settle(Pow(base, exponent))
        terms = [merged] + [term for k, term in enumerate(node.terms) if k not in group]
        return Prod(terms)
    return None


def drop_unit_factor(node):
    if len(node.terms) < 2 or Const(1) not in node.terms:
        return None
    kept = [term for term in node.terms if term != Const(1)]
    return Prod(kept) if kept else Const(1)
