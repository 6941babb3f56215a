import logging
import unittest

from symalg import (
    Config, TestingConfig, configure, current_config,
    Const, Var, Sin, Prod,
    CoefficientOverflowError, ExpressionDepthError,
    simplify, derivative, to_latex,
)


class NarrowCoefficientConfig(TestingConfig):
    COEFFICIENT_BITS = 8


class TestConfiguration(unittest.TestCase):

    def tearDown(self):
        configure(Config)

    def test_default_config(self):
        configure(Config)
        self.assertIs(current_config(), Config)
        self.assertEqual(Config.COEFFICIENT_BITS, 64)
        self.assertEqual(Config.VARIABLE_NAME, 'x')
        self.assertFalse(Config.TESTING)

    def test_configure_with_class_and_dotted_path(self):
        self.assertIs(configure(TestingConfig), TestingConfig)
        self.assertIs(current_config(), TestingConfig)
        self.assertTrue(current_config().TESTING)
        self.assertTrue(current_config().DEBUG)

        self.assertIs(configure('symalg.config.TestingConfig'), TestingConfig)
        self.assertIs(current_config(), TestingConfig)

    def test_configure_rejects_bad_input(self):
        with self.assertRaises(TypeError):
            configure(object)
        with self.assertRaises(ValueError):
            configure('TestingConfig')
        with self.assertRaises(AttributeError):
            configure('symalg.config.MissingConfig')

    def test_configure_applies_log_level(self):
        configure(TestingConfig)
        self.assertEqual(logging.getLogger('symalg').level, logging.DEBUG)
        configure(Config)
        self.assertEqual(logging.getLogger('symalg').level, logging.getLevelName(Config.LOG_LEVEL))

    def test_coefficient_width_is_configurable(self):
        configure(NarrowCoefficientConfig)
        self.assertEqual(Const(127).value, 127)
        with self.assertRaises(CoefficientOverflowError):
            Const(128)
        with self.assertRaises(CoefficientOverflowError):
            simplify(Prod([Const(64), Const(2), Var()]))


class TestDepthGuard(unittest.TestCase):

    def setUp(self):
        configure(TestingConfig)

    def tearDown(self):
        configure(Config)

    def _nested(self, depth):
        expr = Var()
        for _ in range(depth - 1):
            expr = Sin(expr)
        return expr

    def test_trees_within_the_limit_are_accepted(self):
        expr = self._nested(TestingConfig.MAX_DEPTH)
        self.assertEqual(simplify(expr), expr)
        self.assertTrue(to_latex(expr).endswith("(x" + ")" * (TestingConfig.MAX_DEPTH - 1)))

    def test_deeper_trees_are_refused(self):
        expr = self._nested(TestingConfig.MAX_DEPTH + 1)
        for operation in (simplify, derivative, to_latex):
            with self.assertLogs('symalg', level='ERROR'):
                with self.assertRaises(ExpressionDepthError):
                    operation(expr)
        # Callers may treat it as an ordinary recursion failure
        self.assertTrue(issubclass(ExpressionDepthError, RecursionError))


if __name__ == '__main__':
    unittest.main()
