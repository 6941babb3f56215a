import unittest

from symalg import (
    Config, TestingConfig, configure,
    Const, Var, Sum, Prod, Neg, Pow, Ln, Sin, Cos, Arcsin, Arccos, Arctan,
    CoefficientOverflowError,
    simplify, derivative,
)


class TestDifferentiation(unittest.TestCase):

    def setUp(self):
        configure(TestingConfig)

    def tearDown(self):
        configure(Config)

    def test_basic_rules(self):
        x = Var()
        self.assertEqual(derivative(Const(5)), Const(0))
        self.assertEqual(derivative(x), Const(1))

        # Sum rule: (f+g)' = f' + g'
        self.assertEqual(derivative(x + 3), Sum([Const(1), Const(0)]))
        self.assertEqual(simplify(derivative(x + 3)), Const(1))

        # (-f)' = -(f')
        self.assertEqual(derivative(Neg(Sin(x))), Neg(Prod([Const(1), Cos(Var())])))
        self.assertEqual(simplify(derivative(-x)), Const(-1))

    def test_derivative_is_a_new_tree(self):
        expr = Sin(Var())
        result = derivative(expr)
        self.assertEqual(expr, Sin(Var()))
        self.assertIsNot(result.terms[1].operand, expr.operand)

    def test_product_rule(self):
        x = Var()
        # (x sin(x))' = x (sin x)' + sin(x) x'
        expr = Prod([x, Sin(Var())])
        self.assertEqual(derivative(expr), Sum([
            Prod([Var(), Const(1), Cos(Var())]),
            Prod([Sin(Var()), Const(1)]),
        ]))
        self.assertEqual(simplify(derivative(expr)), Sum([Prod([Var(), Cos(Var())]), Sin(Var())]))

        # Constant factors
        self.assertEqual(simplify(derivative(x * 5)), Const(5))

        # Three factors recurse on the tail: (x^3)' via x * x * x
        self.assertEqual(simplify(derivative(x * x * x)), Prod([Const(3), Pow(Var(), Const(2))]))

        # Degenerate products
        self.assertEqual(derivative(Prod([])), Const(0))
        self.assertEqual(derivative(Prod([Sin(Var())])), Prod([Const(1), Cos(Var())]))

    def test_power_rule(self):
        x = Var()
        self.assertEqual(derivative(Pow(x, Const(0))), Const(0))
        self.assertEqual(derivative(Pow(Sin(Var()), Const(1))), Prod([Const(1), Cos(Var())]))

        self.assertEqual(derivative(x ** 3), Prod([Const(3), Pow(Var(), Const(2)), Const(1)]))
        self.assertEqual(simplify(derivative(Pow(x, Const(3)))), simplify(Const(3) * Pow(x, Const(2))))

        # Chain rule: ((x+1)^2)' = 2 (x+1)
        self.assertEqual(
            simplify(derivative((x + 1) ** 2)),
            Prod([Const(2), Sum([Const(1), Var()])]),
        )

        # Negative exponents: (x^-1)' = -x^-2
        self.assertEqual(simplify(derivative(x ** -1)), Prod([Const(-1), Pow(Var(), Const(-2))]))

    def test_general_power_rule(self):
        x = Var()
        # (x^x)' = x^x (ln(x) x)' = x^x (1 + ln(x))
        self.assertEqual(
            simplify(derivative(x ** x)),
            Prod([Sum([Const(1), Ln(Var())]), Pow(Var(), Var())]),
        )
        # (2^x)' = 2^x ln(2)
        self.assertEqual(
            simplify(derivative(Const(2) ** x)),
            Prod([Pow(Const(2), Var()), Ln(Const(2))]),
        )

    def test_logarithm_and_trigonometry(self):
        x = Var()
        self.assertEqual(derivative(Ln(x)), Prod([Const(1), Pow(Var(), Const(-1))]))
        self.assertEqual(simplify(derivative(Ln(x))), Pow(Var(), Const(-1)))

        self.assertEqual(simplify(derivative(Sin(x))), Cos(Var()))
        self.assertEqual(derivative(Cos(x)), Prod([Const(1), Neg(Sin(Var()))]))
        self.assertEqual(simplify(derivative(Cos(x))), Neg(Sin(Var())))

        # Chain rule: sin(x^2)' = 2x cos(x^2)
        self.assertEqual(
            simplify(derivative(Sin(x ** 2))),
            Prod([Const(2), Var(), Cos(Pow(Var(), Const(2)))]),
        )

    def test_inverse_trigonometry(self):
        x = Var()
        # (1 - x^2)^(-1/2), with -1/2 kept as -1 * 2^-1
        inverse_sqrt = Pow(
            Sum([Const(1), Neg(Pow(Var(), Const(2)))]),
            Prod([Const(-1), Pow(Const(2), Const(-1))]),
        )
        self.assertEqual(derivative(Arcsin(x)), Prod([Const(1), inverse_sqrt]))
        self.assertEqual(simplify(derivative(Arcsin(x))), inverse_sqrt)

        self.assertEqual(derivative(Arccos(x)), Prod([Const(1), Neg(inverse_sqrt)]))
        self.assertEqual(simplify(derivative(Arccos(x))), Neg(inverse_sqrt))

        self.assertEqual(
            derivative(Arctan(x)),
            Prod([Const(1), Pow(Sum([Const(1), Pow(Var(), Const(2))]), Const(-1))]),
        )
        self.assertEqual(
            simplify(derivative(Arctan(x))),
            Pow(Sum([Const(1), Pow(Var(), Const(2))]), Const(-1)),
        )

    def test_exponent_arithmetic_overflow(self):
        lowest = -(1 << 63)
        with self.assertRaises(CoefficientOverflowError):
            derivative(Pow(Var(), Const(lowest)))


if __name__ == '__main__':
    unittest.main()
