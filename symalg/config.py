import importlib
import logging
import os


class Config:
    # Width of the signed integer type used for every coefficient and exponent
    COEFFICIENT_BITS = int(os.environ.get('SYMALG_COEFFICIENT_BITS', 64))
    # Trees deeper than this are refused before any recursion starts
    MAX_DEPTH = int(os.environ.get('SYMALG_MAX_DEPTH', 100))
    # Upper bound on rounds of node-local rewriting per node during simplify
    MAX_REWRITE_PASSES = int(os.environ.get('SYMALG_MAX_REWRITE_PASSES', 100))
    VARIABLE_NAME = os.environ.get('SYMALG_VARIABLE_NAME', 'x')
    LOG_LEVEL = os.environ.get('SYMALG_LOG_LEVEL', 'WARNING')
    DEBUG = os.environ.get('SYMALG_DEBUG', 'false').lower() in ['true', 'on', '1']
    TESTING = False


class TestingConfig(Config):
    TESTING = True
    DEBUG = True # Non-converging rewrites raise instead of being logged
    LOG_LEVEL = 'DEBUG'
    MAX_DEPTH = 64


_active_config = Config


def configure(config_class=Config):
    """
    Activates a configuration class for the whole package.

    Args:
        config_class: A Config subclass or a dotted path to one,
            e.g. 'symalg.config.TestingConfig'.

    Returns:
        The activated class.
    """
    global _active_config
    if isinstance(config_class, str):
        module_name, _, attr = config_class.rpartition('.')
        if not module_name:
            raise ValueError(f"Config path '{config_class}' must be a dotted path.")
        config_class = getattr(importlib.import_module(module_name), attr)
    if not (isinstance(config_class, type) and issubclass(config_class, Config)):
        raise TypeError("config_class must be a Config subclass or a dotted path to one.")

    _active_config = config_class
    logging.getLogger('symalg').setLevel(config_class.LOG_LEVEL)
    return config_class


def current_config():
    return _active_config
