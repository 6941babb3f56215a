"""
Canonical ordering of expression trees.

The order exists only to give Sum and Prod a deterministic representation:
it compares node kinds by their declaration rank first and payloads second,
and says nothing about numeric magnitude.
"""

# Declaration sequence of every node class. Its position is the variant rank.
VARIANT_ORDER = (
    'Const', 'Var', 'Sum', 'Prod', 'Neg', 'Pow',
    'Ln', 'Sin', 'Cos', 'Arcsin', 'Arccos', 'Arctan',
)

_RANKS = {name: rank for rank, name in enumerate(VARIANT_ORDER)}


def variant_rank(expr):
    """Returns the rank of the node's class, refusing classes outside the closed set."""
    name = type(expr).__name__
    if name not in _RANKS:
        raise TypeError(f"'{name}' is not a known expression node; cannot order it.")
    return _RANKS[name]


def canonical_key(expr):
    """
    Builds a nested tuple that sorts exactly like the canonical order.

    Tuples compare lexicographically with a proper prefix sorting first,
    which is the element-wise sequence comparison Sum and Prod need.
    """
    return (variant_rank(expr), expr._payload_key())


def sort_canonical(terms):
    return sorted(terms, key=canonical_key)


def is_canonically_sorted(terms):
    keys = [canonical_key(term) for term in terms]
    return all(keys[i] <= keys[i + 1] for i in range(len(keys) - 1))
