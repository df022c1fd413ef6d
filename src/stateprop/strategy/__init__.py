"""Leaf strategies and shrinkable value trees.

Strategies produce the individual commands a model offers; the value trees
they return are the per-command shrinkable elements stored in a generated
sequence.

Python 3.13+.
"""

from .core import (
    Strategy,
    booleans,
    builds,
    integers,
    just,
    one_of,
    sampled_from,
    tuples,
)
from .tree import IntegerTree, JustTree, MapTree, SampledTree, TupleTree, ValueTree

__all__ = [
    "IntegerTree",
    "JustTree",
    "MapTree",
    "SampledTree",
    "Strategy",
    "TupleTree",
    "ValueTree",
    "booleans",
    "builds",
    "integers",
    "just",
    "one_of",
    "sampled_from",
    "tuples",
]
