"""
################################
Typing (:mod:`hyperdual.typing`)
################################

This module provides type definitions commonly used between modules.

.. autoclass:: Scalar
    :show-inheritance:
    :no-members:

.. autoclass:: RealScalar
    :show-inheritance:
    :no-members:

"""

from abc import abstractmethod
from typing import Protocol, Self, SupportsAbs, SupportsFloat


class Scalar(Protocol):
    """Protocol that ensures scalar-like behavior.

    Objects implementing this protocol must have four arithmetic operations and
    power defined, and four arithmetic operations must be compatible with floats.
    """

    __slots__ = ()

    @abstractmethod
    def __add__(self, rhs: Self | float) -> Self: ...

    @abstractmethod
    def __sub__(self, rhs: Self | float) -> Self: ...

    @abstractmethod
    def __mul__(self, rhs: Self | float) -> Self: ...

    @abstractmethod
    def __truediv__(self, rhs: Self | float) -> Self: ...

    @abstractmethod
    def __pow__(self, rhs: Self | float) -> Self: ...

    @abstractmethod
    def __radd__(self, lhs: Self | float) -> Self: ...

    @abstractmethod
    def __rsub__(self, lhs: Self | float) -> Self: ...

    @abstractmethod
    def __rmul__(self, lhs: Self | float) -> Self: ...

    @abstractmethod
    def __rtruediv__(self, lhs: Self | float) -> Self: ...

    @abstractmethod
    def __neg__(self) -> Self: ...

    @abstractmethod
    def __pos__(self) -> Self: ...


class RealScalar(Scalar, SupportsAbs, SupportsFloat, Protocol):
    """Protocol for a totally ordered :class:`Scalar`, like a floating-point number.

    Coefficients of :class:`~hyperdual.HyperDual` are expected to satisfy this
    protocol: :class:`float`, NumPy floating scalars, and :class:`mpmath.mpf` do.
    """

    __slots__ = ()

    @abstractmethod
    def __lt__(self, rhs: Self | float) -> bool: ...

    @abstractmethod
    def __le__(self, rhs: Self | float) -> bool: ...

    @abstractmethod
    def __gt__(self, rhs: Self | float) -> bool: ...

    @abstractmethod
    def __ge__(self, rhs: Self | float) -> bool: ...
