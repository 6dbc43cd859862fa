"""
#####################################################
Automatic differentiation (:mod:`hyperdual.autodiff`)
#####################################################

.. currentmodule:: hyperdual.autodiff

This module extracts derivatives from functions evaluated on hyper-dual numbers.

A function :math:`f` is evaluated once at :math:`(\\theta,h_1,h_2,0)`. The first
derivative is then ``eps1 / h1`` and the second derivative is
``eps1eps2 / (h1 * h2)``. Since no function values are subtracted, the result does
not depend on the magnitude of the steps.

Differential operators
======================

.. autosummary::
    :toctree: generated/

    variable
    evaluate
    deriv
    deriv2
    mixed
    hessian
    Derivatives

Context
=======

.. autosummary::
    :toctree: generated/

    Context
    getcontext
    localcontext
    setcontext

"""

import contextlib
import contextvars
import dataclasses
import logging
import math
from collections.abc import Callable
from typing import Any, Self

import mpmath.ctx_mp_python
import numpy as np

from hyperdual.hyperdual import HyperDual, _zero_like

logger = logging.getLogger(__name__)


def _check_step(value: Any) -> Any:
    if not (math.isfinite(float(value)) and value > 0):
        raise ValueError(f"step must be positive and finite, got {value!r}")

    return value


class Context:
    """Create a new context.

    Context holds the steps used to seed hyper-dual numbers.

    Parameters
    ----------
    h1 : float, default=1e-14
        Coefficient of :math:`\\varepsilon_1` in a seed.
    h2 : float, default=1e-14
        Coefficient of :math:`\\varepsilon_2` in a seed.

    Raises
    ------
    ValueError
        If a step is not positive and finite.
    """

    __slots__ = ("_h1", "_h2")
    _h1: Any
    _h2: Any

    def __init__(self, h1: Any = 1e-14, h2: Any = 1e-14):
        self._h1 = _check_step(h1)
        self._h2 = _check_step(h2)

    @property
    def h1(self) -> Any:
        return self._h1

    @property
    def h2(self) -> Any:
        return self._h2

    def copy(self) -> Self:
        return self.__class__(self._h1, self._h2)

    def __str__(self):
        return f"{type(self).__name__}(h1={self._h1!r}, h2={self._h2!r})"

    def __copy__(self) -> Self:
        return self.copy()


_var: contextvars.ContextVar[Context] = contextvars.ContextVar("hyperdual")


def getcontext() -> Context:
    """Return the current context for the active thread."""
    if context := _var.get(None):
        return context

    context = Context()
    _var.set(context)
    return context


def setcontext(ctx: Context) -> None:
    """Set the current context for the active thread to `ctx`."""
    logger.debug("set context %s", ctx)
    _var.set(ctx)


@contextlib.contextmanager
def localcontext(
    ctx: Context | None = None, *, h1: Any | None = None, h2: Any | None = None
):
    """Return a context manager that will set the current context for the active thread
    to a copy of `ctx` on entry to the with-statement and restore the previous context
    when exiting the with-statement.

    Examples
    --------
    >>> with localcontext(h1=1.0, h2=1.0) as ctx:
    ...     print(variable(0.5))
    0.5 + 1.0 ε1 + 1.0 ε2 + 0.0 ε1ε2
    """
    if ctx is None:
        ctx = getcontext()

    if h1 is None:
        h1 = ctx.h1

    if h2 is None:
        h2 = ctx.h2

    ctx = Context(h1, h2)
    logger.debug("enter local context %s", ctx)
    token = _var.set(ctx)

    try:
        yield ctx
    finally:
        _var.reset(token)


@dataclasses.dataclass(frozen=True, slots=True)
class Derivatives[T]:
    """Value and derivatives of a univariate function.

    Attributes
    ----------
    value : T
        :math:`f(\\theta)`.
    first : T
        :math:`f'(\\theta)`.
    second : T
        :math:`f''(\\theta)`.
    """

    value: T
    first: T
    second: T


def variable[T](theta: T, h1: Any | None = None, h2: Any | None = None) -> HyperDual:
    """Return the seed ``HyperDual(theta, h1, h2, 0)``.

    Parameters
    ----------
    theta : T
        Point at which a function is differentiated.
    h1 : optional
        Defaults to the `h1` of the current context.
    h2 : optional
        Defaults to the `h2` of the current context.
    """
    ctx = getcontext()
    h1 = ctx.h1 if h1 is None else _check_step(h1)
    h2 = ctx.h2 if h2 is None else _check_step(h2)
    return HyperDual(theta, h1, h2, _zero_like(theta))


def _is_scalar(value: object) -> bool:
    mpnumeric = mpmath.ctx_mp_python.mpnumeric
    return isinstance(value, float | int | np.number | mpnumeric)


def _mixed_part(result: Any, h1: Any, h2: Any) -> Any:
    if isinstance(result, HyperDual):
        return result.eps1eps2 / (h1 * h2)

    if _is_scalar(result):
        return _zero_like(result)

    raise TypeError(f"function returned {type(result).__name__}, not a number")


def evaluate[T](fun: Callable[..., Any], theta: T, *args, **kwargs) -> Derivatives[T]:
    """Evaluate a univariate function together with its first and second
    derivatives.

    Parameters
    ----------
    fun : Callable
        Differentiated function. Additional arguments are passed through.
    theta : T
        Point of evaluation.

    Returns
    -------
    Derivatives

    Warnings
    --------
    `fun` may branch on comparisons of its argument, which look only at the real
    part. The derivatives are then those of the branch taken.

    Examples
    --------
    >>> from hyperdual import function as hdf
    >>> r = evaluate(lambda x: hdf.sin(x) / x, 0.3)
    >>> print(format(r.value, ".5f"), format(r.first, ".5f"))
    0.98507 -0.09910
    """
    ctx = getcontext()
    result = fun(variable(theta), *args, **kwargs)

    if not isinstance(result, HyperDual):
        if not _is_scalar(result):
            raise TypeError(f"function returned {type(result).__name__}, not a number")

        ZERO = _zero_like(result)
        return Derivatives(result, ZERO, ZERO)

    first = result.eps1 / ctx.h1
    second = result.eps1eps2 / (ctx.h1 * ctx.h2)
    return Derivatives(result.real, first, second)


def deriv[T](fun: Callable[..., T]) -> Callable[..., T]:
    """Return a function that evaluates the derivative of the univariate scalar-valued
    function.

    Examples
    --------
    >>> from hyperdual import function as hdf
    >>> deriv(hdf.sin)(0.0)
    1.0
    """

    def result(theta, *args, **kwargs):
        return evaluate(fun, theta, *args, **kwargs).first

    return result


def deriv2[T](fun: Callable[..., T]) -> Callable[..., T]:
    """Return a function that evaluates the second derivative of the univariate
    scalar-valued function.

    Examples
    --------
    >>> ddf = deriv2(lambda x: x**3 - 2 * x)
    >>> print(format(ddf(2.0), ".6g"))
    12
    """

    def result(theta, *args, **kwargs):
        return evaluate(fun, theta, *args, **kwargs).second

    return result


def mixed[T](fun: Callable[..., T]) -> Callable[..., T]:
    """Return a function that evaluates the mixed partial derivative
    :math:`\\partial^2f/\\partial x\\partial y` of the bivariate scalar-valued function.

    The first argument is perturbed along :math:`\\varepsilon_1` and the second along
    :math:`\\varepsilon_2`.

    Examples
    --------
    >>> from hyperdual import function as hdf
    >>> fxy = mixed(lambda x, y: hdf.sin(x * y))
    >>> print(format(fxy(1.0, 2.0), ".6f"))
    -2.234742
    """

    def result(x, y, *args, **kwargs):
        ctx = getcontext()
        ZERO_X = _zero_like(x)
        ZERO_Y = _zero_like(y)
        hx = HyperDual(x, ctx.h1, ZERO_X, ZERO_X)
        hy = HyperDual(y, ZERO_Y, ctx.h2, ZERO_Y)
        return _mixed_part(fun(hx, hy, *args, **kwargs), ctx.h1, ctx.h2)

    return result


def hessian[T](fun: Callable[..., T]) -> Callable[..., tuple[tuple[T, T], ...]]:
    """Return a function that evaluates the Hessian matrix of the bivariate
    scalar-valued function.

    Three hyper-dual evaluations are performed, one for each distinct entry.

    Examples
    --------
    >>> hess = hessian(lambda x, y: x**2 * y + 3 * y**2)
    >>> [[format(v, ".6g") for v in row] for row in hess(1.0, 2.0)]
    [['4', '2'], ['2', '6']]
    """
    fxy = mixed(fun)

    def result(x, y, *args, **kwargs):
        ctx = getcontext()
        h1, h2 = ctx.h1, ctx.h2
        fxx = _mixed_part(fun(variable(x), HyperDual(y), *args, **kwargs), h1, h2)
        fyy = _mixed_part(fun(HyperDual(x), variable(y), *args, **kwargs), h1, h2)
        tmp = fxy(x, y, *args, **kwargs)
        logger.debug("hessian at (%r, %r): %r %r %r", x, y, fxx, tmp, fyy)
        return ((fxx, tmp), (tmp, fyy))

    return result
