import operator
from collections.abc import Callable
from typing import Any, Final, Self

import mpmath.ctx_mp_python
import numpy as np

from hyperdual import function as hdf
from hyperdual.typing import RealScalar, Scalar

POW_TOLERANCE: Final = 1e-15
"""Bases of smaller magnitude are clamped to this value in the derivative factor of
:func:`~hyperdual.function.pow`."""


def _zero_like(value):
    return type(value)(0)


def _quotient(lhs, rhs):
    try:
        return lhs / rhs
    except ZeroDivisionError:
        # Python raises on float division by zero; IEEE 754 yields inf or nan.
        return lhs * hdf.pow(rhs, -1)


class HyperDual[T: RealScalar](Scalar):
    r"""Hyper-dual number.

    Parameters
    ----------
    real : T, default=0.0
    eps1 : T, optional
    eps2 : T, optional
    eps1eps2 : T, optional
        The three infinitesimal parts must be given together. If they are all omitted,
        they are zeros of the same type as `real`.

    Attributes
    ----------
    real : T
        Value of the function.
    eps1 : T
        Coefficient of :math:`\varepsilon_1`.
    eps2 : T
        Coefficient of :math:`\varepsilon_2`.
    eps1eps2 : T
        Coefficient of :math:`\varepsilon_1\varepsilon_2`.

    Warnings
    --------
    All comparison operators, including ``==``, look only at `real`. Use
    :meth:`identical` to compare all four components.

    Notes
    -----
    Instances of this class behave like elements of the ring

    .. math::

        T[\varepsilon_1,\varepsilon_2]/(\varepsilon_1^2,\varepsilon_2^2).

    If :math:`x=x_0+x_1\varepsilon_1+x_2\varepsilon_2+x_{12}\varepsilon_1\varepsilon_2`
    and :math:`f` is twice differentiable at :math:`x_0`, then

    .. math::

        f(x)=f(x_0)+f'(x_0)x_1\varepsilon_1+f'(x_0)x_2\varepsilon_2
        +(f'(x_0)x_{12}+f''(x_0)x_1x_2)\varepsilon_1\varepsilon_2.

    Hence, evaluating :math:`f` at :math:`(\theta,h_1,h_2,0)` yields the first
    derivative as ``eps1 / h1`` and the second derivative as ``eps1eps2 / (h1 * h2)``,
    exactly up to rounding errors of the function evaluation itself.

    Examples
    --------
    >>> x = HyperDual(2.0, 1.0, 1.0, 0.0)
    >>> x * x
    HyperDual(real=4.0, eps1=4.0, eps2=4.0, eps1eps2=2.0)
    >>> print(3 * x + 1)
    7.0 + 3.0 ε1 + 3.0 ε2 + 0.0 ε1ε2
    >>> HyperDual(2.0) == x
    True
    """

    __slots__ = ("real", "eps1", "eps2", "eps1eps2")
    __array_ufunc__ = None
    __hash__ = None  # type: ignore
    real: T
    eps1: T
    eps2: T
    eps1eps2: T

    def __init__(
        self,
        real: T = 0.0,  # type: ignore
        eps1: T | None = None,
        eps2: T | None = None,
        eps1eps2: T | None = None,
    ):
        if isinstance(real, HyperDual):
            raise TypeError("nesting HyperDual is forbidden")

        infinitesimal = (eps1, eps2, eps1eps2)

        if all(x is None for x in infinitesimal):
            ZERO = _zero_like(real)
            eps1 = eps2 = eps1eps2 = ZERO
        elif any(x is None for x in infinitesimal):
            raise TypeError("either one or four components must be given")

        self.real = real
        self.eps1 = eps1  # type: ignore
        self.eps2 = eps2  # type: ignore
        self.eps1eps2 = eps1eps2  # type: ignore

    @classmethod
    def constant(cls, value: T) -> Self:
        """Embed `value` as a constant, i.e., with zero infinitesimal parts."""
        return cls(value)

    @classmethod
    def variable(cls, value: T, h1: T | float = 1.0, h2: T | float = 1.0) -> Self:
        """Return ``HyperDual(value, h1, h2, 0)``.

        This is the seed for differentiating a univariate function at `value`.
        """
        return cls(value, h1, h2, _zero_like(value))  # type: ignore

    def setvalues(self, real: T, eps1: T, eps2: T, eps1eps2: T) -> None:
        """Replace all four components in place."""
        self.real = real
        self.eps1 = eps1
        self.eps2 = eps2
        self.eps1eps2 = eps1eps2

    def astuple(self) -> tuple[T, T, T, T]:
        """Return ``(real, eps1, eps2, eps1eps2)``."""
        return (self.real, self.eps1, self.eps2, self.eps1eps2)

    def copy(self) -> Self:
        return self.__class__(*self.astuple())

    def identical(self, other: object) -> bool:
        """Return ``True`` if `other` is a hyper-dual number with the same four
        components.

        Examples
        --------
        >>> x = HyperDual(1.0, 2.0, 3.0, 4.0)
        >>> x == HyperDual(1.0)
        True
        >>> x.identical(HyperDual(1.0))
        False
        """
        if not isinstance(other, HyperDual):
            return False

        return all(bool(x == y) for x, y in zip(self.astuple(), other.astuple()))

    def view(self) -> None:
        """Print the four components."""
        print(self.__str__())

    def _is_acceptable(self, value: object) -> bool:
        mpnumeric = mpmath.ctx_mp_python.mpnumeric
        return isinstance(value, HyperDual | float | int | np.number | mpnumeric)

    def _chain(self, value: T, deriv1: T, deriv2: T) -> Self:
        return self.__class__(
            value,
            deriv1 * self.eps1,
            deriv1 * self.eps2,
            deriv1 * self.eps1eps2 + deriv2 * self.eps1 * self.eps2,
        )

    def _assign(self, value: Self) -> Self:
        self.setvalues(*value.astuple())
        return self

    def _compare(self, other: object, op: Callable[[Any, Any], Any]) -> bool:
        if isinstance(other, HyperDual):
            return bool(op(self.real, other.real))

        if not self._is_acceptable(other):
            return NotImplemented

        return bool(op(self.real, other))

    def _hyperdual_overload_(self, fun, *args, **kwargs):
        match fun:
            case hdf.exp:
                x0 = self.real
                value = hdf.exp(x0)
                return self._chain(value, value, value)

            case hdf.log:
                return self.__log()

            case hdf.sin:
                s = hdf.sin(self.real)
                c = hdf.cos(self.real)
                return self._chain(s, c, -s)

            case hdf.cos:
                s = hdf.sin(self.real)
                c = hdf.cos(self.real)
                return self._chain(c, -s, -c)

            case hdf.tan:
                t = hdf.tan(self.real)
                deriv1 = 1 + t * t
                return self._chain(t, deriv1, 2 * t * deriv1)

            case hdf.asin:
                x0 = self.real
                tmp = 1 - x0 * x0
                deriv1 = hdf.pow(tmp, -0.5)
                return self._chain(hdf.asin(x0), deriv1, x0 * hdf.pow(tmp, -1.5))

            case hdf.acos:
                x0 = self.real
                tmp = 1 - x0 * x0
                deriv1 = -hdf.pow(tmp, -0.5)
                return self._chain(hdf.acos(x0), deriv1, -x0 * hdf.pow(tmp, -1.5))

            case hdf.atan:
                x0 = self.real
                tmp = 1 + x0 * x0
                return self._chain(hdf.atan(x0), 1 / tmp, -2 * x0 / (tmp * tmp))

            case hdf.sqrt:
                return self.__pow(0.5)

            case hdf.fabs:
                return self.copy() if self.real >= 0 else -self

            case hdf.pow:
                return self.__pow_dispatch(*args)

            case hdf.max | hdf.min:
                return self.__select(fun, *args)

        return NotImplemented

    def __log(self) -> Self:
        x0 = self.real
        eps1 = _quotient(self.eps1, x0)
        eps2 = _quotient(self.eps2, x0)
        eps1eps2 = _quotient(self.eps1eps2, x0) - eps1 * eps2
        return self.__class__(hdf.log(x0), eps1, eps2, eps1eps2)

    def __pow(self, a) -> Self:
        x0 = self.real
        xc = x0

        if abs(x0) < POW_TOLERANCE:
            xc = -POW_TOLERANCE if x0 < 0 else POW_TOLERANCE

        deriv = a * hdf.pow(xc, a - 1)
        return self.__class__(
            hdf.pow(x0, a),
            self.eps1 * deriv,
            self.eps2 * deriv,
            self.eps1eps2 * deriv
            + a * (a - 1) * self.eps1 * self.eps2 * hdf.pow(xc, a - 2),
        )

    def __pow_dispatch(self, x, y):
        if not (self._is_acceptable(x) and self._is_acceptable(y)):
            return NotImplemented

        if isinstance(y, HyperDual):
            if not isinstance(x, HyperDual):
                x = y.constant(x)

            return hdf.exp(y * hdf.log(x))

        return x.__pow(y)

    def __select(self, fun, x, y):
        if not (self._is_acceptable(x) and self._is_acceptable(y)):
            return NotImplemented

        if fun is hdf.max:
            result = x if x >= y else y
        else:
            result = x if x <= y else y

        if isinstance(result, HyperDual):
            return result.copy()

        return self.constant(result)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(real={self.real!r}, eps1={self.eps1!r}, "
            f"eps2={self.eps2!r}, eps1eps2={self.eps1eps2!r})"
        )

    def __str__(self) -> str:
        return f"{self.real} + {self.eps1} ε1 + {self.eps2} ε2 + {self.eps1eps2} ε1ε2"

    def __format__(self, format_spec: str) -> str:
        real, eps1, eps2, eps1eps2 = (format(x, format_spec) for x in self.astuple())
        return f"{real} + {eps1} ε1 + {eps2} ε2 + {eps1eps2} ε1ε2"

    def __bool__(self) -> bool:
        return bool(self.real != 0)

    def __copy__(self) -> Self:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        return self._compare(other, operator.eq)

    def __ne__(self, other: object) -> bool:
        return self._compare(other, operator.ne)

    def __lt__(self, other: object) -> bool:
        return self._compare(other, operator.lt)

    def __le__(self, other: object) -> bool:
        return self._compare(other, operator.le)

    def __gt__(self, other: object) -> bool:
        return self._compare(other, operator.gt)

    def __ge__(self, other: object) -> bool:
        return self._compare(other, operator.ge)

    def __add__(self, rhs: Self | T | float) -> Self:
        if isinstance(rhs, HyperDual):
            return self.__class__(
                self.real + rhs.real,
                self.eps1 + rhs.eps1,
                self.eps2 + rhs.eps2,
                self.eps1eps2 + rhs.eps1eps2,
            )

        if not self._is_acceptable(rhs):
            return NotImplemented

        return self.__class__(self.real + rhs, self.eps1, self.eps2, self.eps1eps2)

    def __sub__(self, rhs: Self | T | float) -> Self:
        if isinstance(rhs, HyperDual):
            return self.__class__(
                self.real - rhs.real,
                self.eps1 - rhs.eps1,
                self.eps2 - rhs.eps2,
                self.eps1eps2 - rhs.eps1eps2,
            )

        if not self._is_acceptable(rhs):
            return NotImplemented

        return self.__class__(self.real - rhs, self.eps1, self.eps2, self.eps1eps2)

    def __mul__(self, rhs: Self | T | float) -> Self:
        if isinstance(rhs, HyperDual):
            return self.__class__(
                self.real * rhs.real,
                self.real * rhs.eps1 + self.eps1 * rhs.real,
                self.real * rhs.eps2 + self.eps2 * rhs.real,
                self.real * rhs.eps1eps2
                + self.eps1 * rhs.eps2
                + self.eps2 * rhs.eps1
                + self.eps1eps2 * rhs.real,
            )

        if not self._is_acceptable(rhs):
            return NotImplemented

        return self.__class__(*(x * rhs for x in self.astuple()))

    def __truediv__(self, rhs: Self | T | float) -> Self:
        if isinstance(rhs, HyperDual):
            return self.__mul__(rhs.__pow(-1))

        if not self._is_acceptable(rhs):
            return NotImplemented

        inv = _quotient(1, rhs)
        return self.__class__(*(x * inv for x in self.astuple()))

    def __pow__(self, rhs: Self | T | float) -> Self:
        if not self._is_acceptable(rhs):
            return NotImplemented

        return hdf.pow(self, rhs)

    def __neg__(self) -> Self:
        return self.__class__(-self.real, -self.eps1, -self.eps2, -self.eps1eps2)

    def __pos__(self) -> Self:
        return self.copy()

    def __abs__(self) -> Self:
        return hdf.fabs(self)

    def __radd__(self, lhs: T | float) -> Self:
        return self.__add__(lhs)

    def __rsub__(self, lhs: T | float) -> Self:
        if not self._is_acceptable(lhs):
            return NotImplemented

        return self.__class__(lhs - self.real, -self.eps1, -self.eps2, -self.eps1eps2)

    def __rmul__(self, lhs: T | float) -> Self:
        if not self._is_acceptable(lhs):
            return NotImplemented

        return self.__class__(*(lhs * x for x in self.astuple()))

    def __rtruediv__(self, lhs: T | float) -> Self:
        if not self._is_acceptable(lhs):
            return NotImplemented

        return self.__pow(-1).__rmul__(lhs)

    def __rpow__(self, lhs: T | float) -> Self:
        if not self._is_acceptable(lhs):
            return NotImplemented

        return hdf.pow(lhs, self)

    def __iadd__(self, rhs: Self | T | float) -> Self:
        if (result := self.__add__(rhs)) is NotImplemented:
            return NotImplemented

        return self._assign(result)

    def __isub__(self, rhs: Self | T | float) -> Self:
        if (result := self.__sub__(rhs)) is NotImplemented:
            return NotImplemented

        return self._assign(result)

    def __imul__(self, rhs: Self | T | float) -> Self:
        if (result := self.__mul__(rhs)) is NotImplemented:
            return NotImplemented

        return self._assign(result)

    def __itruediv__(self, rhs: T | float) -> Self:
        if isinstance(rhs, HyperDual):
            return NotImplemented

        if (result := self.__truediv__(rhs)) is NotImplemented:
            return NotImplemented

        return self._assign(result)
