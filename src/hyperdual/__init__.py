from .function import (
    acos,
    asin,
    atan,
    cos,
    exp,
    fabs,
    log,
    max,
    min,
    pow,
    sin,
    sqrt,
    tan,
)
from .hyperdual import HyperDual

__all__ = [
    "acos",
    "asin",
    "atan",
    "cos",
    "exp",
    "fabs",
    "log",
    "max",
    "min",
    "pow",
    "sin",
    "sqrt",
    "tan",
    "HyperDual",
]
