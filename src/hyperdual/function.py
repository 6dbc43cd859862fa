"""
##################################################
Mathematical functions (:mod:`hyperdual.function`)
##################################################

.. currentmodule:: hyperdual.function

This module provides mathematical functions that accept plain scalars as well as
:class:`~hyperdual.HyperDual` numbers.

Plain :class:`float` and :class:`int` arguments are evaluated with :mod:`math`, NumPy
floating scalars with the corresponding NumPy ufunc, and mpmath numbers with
:mod:`mpmath`. Any other type may take part by defining a ``_hyperdual_overload_``
method, which is how :class:`~hyperdual.HyperDual` extends every function below.

Invalid input follows IEEE 754 rather than raising: ``log(-1.0)`` is ``nan`` and
``log(0.0)`` is ``-inf``, just as in C.

Power, exponents, and logarithmic functions
===========================================

.. autosummary::
    :toctree: generated/

    exp
    log
    pow
    sqrt

Trigonometric functions
=======================

.. autosummary::
    :toctree: generated/

    sin
    cos
    tan
    asin
    acos
    atan

Miscellaneous
=============

.. autosummary::
    :toctree: generated/

    fabs
    max
    min

"""

import math
from collections.abc import Callable
from typing import Any, overload

import mpmath
import mpmath.ctx_mp_python
import numpy as np

_NUMPY_NAMES = {
    "asin": "arcsin",
    "acos": "arccos",
    "atan": "arctan",
    "pow": "power",
}

_MPMATH_NAMES = {
    "pow": "power",
}


def _check_scalar(*args: Any) -> None:
    scalar = float | int | np.integer | np.floating | mpmath.ctx_mp_python.mpnumeric

    if not all(isinstance(x, scalar) for x in args):
        raise TypeError("arguments are not scalars")


def _evaluate(name: str, *args: Any) -> Any:
    mpnumeric = mpmath.ctx_mp_python.mpnumeric

    if any(isinstance(x, mpnumeric) for x in args):
        return getattr(mpmath, _MPMATH_NAMES.get(name, name))(*args)

    if any(isinstance(x, np.floating) for x in args):
        return getattr(np, _NUMPY_NAMES.get(name, name))(*args)

    if all(isinstance(x, float | int | np.integer) for x in args):
        try:
            return getattr(math, name)(*args)
        except (ValueError, OverflowError):
            # math raises where C returns nan or inf; recompute in binary64.
            ufunc = getattr(np, _NUMPY_NAMES.get(name, name))

            with np.errstate(all="ignore"):
                return float(ufunc(*(np.float64(x) for x in args)))

    raise TypeError(f"unsupported argument type for {name}()")


def _dispatch(fun: Callable, *args: Any) -> Any:
    linearized = args

    if len(args) == 2 and type(args[0]) is not type(args[1]):
        if issubclass(type(args[1]), type(args[0])):
            linearized = (args[1], args[0])

    for z in linearized:
        if hook := getattr(type(z), "_hyperdual_overload_", None):
            if (res := hook(z, fun, *args)) is not NotImplemented:
                return res

    return NotImplemented


@overload
def exp(x: float | int, /) -> float: ...


@overload
def exp(x: Any, /) -> Any: ...


def exp(x, /):
    """Exponential.

    Examples
    --------
    >>> from hyperdual import HyperDual
    >>> print(format(exp(2), ".6f"))
    7.389056
    >>> print(format(exp(HyperDual(0.0, 1.0, 1.0, 0.0)), ".3f"))
    1.000 + 1.000 ε1 + 1.000 ε2 + 1.000 ε1ε2
    """
    if (res := _dispatch(exp, x)) is not NotImplemented:
        return res

    return _evaluate("exp", x)


@overload
def log(x: float | int, /) -> float: ...


@overload
def log(x: Any, /) -> Any: ...


def log(x, /):
    """Natural logarithm.

    Examples
    --------
    >>> print(format(log(5), ".6f"))
    1.609438
    >>> log(-1.0)
    nan
    >>> log(0.0)
    -inf
    """
    if (res := _dispatch(log, x)) is not NotImplemented:
        return res

    return _evaluate("log", x)


@overload
def pow(x: float | int, y: float | int, /) -> float: ...


@overload
def pow(x: Any, y: Any, /) -> Any: ...


def pow(x, y, /):
    """`x` raised to the power `y`.

    If `x` is a :class:`~hyperdual.HyperDual` and `y` is a scalar, the derivative
    factor is evaluated with the base clamped away from zero, so the derivative parts
    stay finite even where the true derivative is singular.

    Examples
    --------
    >>> from hyperdual import HyperDual
    >>> print(format(pow(3.25, 1.25), ".6f"))
    4.363693
    >>> pow(HyperDual(3.0, 1.0, 1.0, 0.0), 2)
    HyperDual(real=9.0, eps1=6.0, eps2=6.0, eps1eps2=2.0)
    """
    if (res := _dispatch(pow, x, y)) is not NotImplemented:
        return res

    return _evaluate("pow", x, y)


@overload
def sqrt(x: float | int, /) -> float: ...


@overload
def sqrt(x: Any, /) -> Any: ...


def sqrt(x, /):
    """Square root.

    For a :class:`~hyperdual.HyperDual`, this is ``pow(x, 0.5)``.

    Examples
    --------
    >>> print(format(sqrt(2.0), ".6f"))
    1.414214
    """
    if (res := _dispatch(sqrt, x)) is not NotImplemented:
        return res

    return _evaluate("sqrt", x)


@overload
def sin(x: float | int, /) -> float: ...


@overload
def sin(x: Any, /) -> Any: ...


def sin(x, /):
    """Sine.

    Examples
    --------
    >>> from hyperdual import HyperDual
    >>> sin(HyperDual(0.0, 1.0, 1.0, 0.0))
    HyperDual(real=0.0, eps1=1.0, eps2=1.0, eps1eps2=0.0)
    """
    if (res := _dispatch(sin, x)) is not NotImplemented:
        return res

    return _evaluate("sin", x)


@overload
def cos(x: float | int, /) -> float: ...


@overload
def cos(x: Any, /) -> Any: ...


def cos(x, /):
    """Cosine."""
    if (res := _dispatch(cos, x)) is not NotImplemented:
        return res

    return _evaluate("cos", x)


@overload
def tan(x: float | int, /) -> float: ...


@overload
def tan(x: Any, /) -> Any: ...


def tan(x, /):
    """Tangent."""
    if (res := _dispatch(tan, x)) is not NotImplemented:
        return res

    return _evaluate("tan", x)


@overload
def asin(x: float | int, /) -> float: ...


@overload
def asin(x: Any, /) -> Any: ...


def asin(x, /):
    """Inverse sine.

    Examples
    --------
    >>> asin(2.0)
    nan
    """
    if (res := _dispatch(asin, x)) is not NotImplemented:
        return res

    return _evaluate("asin", x)


@overload
def acos(x: float | int, /) -> float: ...


@overload
def acos(x: Any, /) -> Any: ...


def acos(x, /):
    """Inverse cosine."""
    if (res := _dispatch(acos, x)) is not NotImplemented:
        return res

    return _evaluate("acos", x)


@overload
def atan(x: float | int, /) -> float: ...


@overload
def atan(x: Any, /) -> Any: ...


def atan(x, /):
    """Inverse tangent."""
    if (res := _dispatch(atan, x)) is not NotImplemented:
        return res

    return _evaluate("atan", x)


@overload
def fabs(x: float | int, /) -> float: ...


@overload
def fabs(x: Any, /) -> Any: ...


def fabs(x, /):
    """Absolute value.

    For a :class:`~hyperdual.HyperDual`, the sign of the real part decides whether
    the whole number is negated.

    Examples
    --------
    >>> from hyperdual import HyperDual
    >>> fabs(HyperDual(-2.0, 1.0, -3.0, 4.0))
    HyperDual(real=2.0, eps1=-1.0, eps2=3.0, eps1eps2=-4.0)
    """
    if (res := _dispatch(fabs, x)) is not NotImplemented:
        return res

    return _evaluate("fabs", x)


@overload
def max(x: float | int, y: float | int, /) -> float | int: ...


@overload
def max(x: Any, y: Any, /) -> Any: ...


def max(x, y, /):
    """Greater of `x` and `y`.

    If they compare equal, `x` is returned. :class:`~hyperdual.HyperDual` numbers are
    compared by their real parts only, and the selected one is returned as a copy.

    Examples
    --------
    >>> from hyperdual import HyperDual
    >>> max(HyperDual(5.0, 1.0, 1.0, 1.0), HyperDual(3.0, 9.0, 9.0, 9.0))
    HyperDual(real=5.0, eps1=1.0, eps2=1.0, eps1eps2=1.0)
    """
    if (res := _dispatch(max, x, y)) is not NotImplemented:
        return res

    _check_scalar(x, y)
    return x if x >= y else y


@overload
def min(x: float | int, y: float | int, /) -> float | int: ...


@overload
def min(x: Any, y: Any, /) -> Any: ...


def min(x, y, /):
    """Lesser of `x` and `y`.

    If they compare equal, `x` is returned. :class:`~hyperdual.HyperDual` numbers are
    compared by their real parts only, and the selected one is returned as a copy.
    """
    if (res := _dispatch(min, x, y)) is not NotImplemented:
        return res

    _check_scalar(x, y)
    return x if x <= y else y
