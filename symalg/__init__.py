"""
symalg: expression trees in one free variable with canonical simplification,
symbolic differentiation and LaTeX rendering.

Usage:
    from symalg import Var, simplify, derivative, to_latex

    x = Var()
    e = x + x * 5
    e /= x
    simplify(e)                      # Const(6)
    to_latex(simplify(derivative(x ** 3)))   # '3x^{2}'
"""
from .config import Config, TestingConfig, configure, current_config
from .symbolic import (
    Expression, Const, Var,
    Sum, Prod, Neg, Pow,
    Ln, Sin, Cos, Arcsin, Arccos, Arctan,
    CoefficientOverflowError, ExpressionDepthError,
    canonical_key, sort_canonical, is_canonically_sorted,
)


def simplify(expr):
    """Returns the canonical form of expr as a new tree."""
    return expr.simplify()


def derivative(expr):
    """Returns the unsimplified derivative of expr with respect to the free variable."""
    return expr.derivative()


def to_latex(expr):
    return expr.to_latex()
