r"""
######################################################
Rodrigues coefficients (:mod:`hyperdual.rodrigues`)
######################################################

.. currentmodule:: hyperdual.rodrigues

This module evaluates the trigonometric coefficients of the Rodrigues rotation
formula

.. math::

    a_0(\theta)=\cos\theta,\quad
    a_1(\theta)=\frac{\sin\theta}{\theta},\quad
    a_2(\theta)=\frac{1-\cos\theta}{\theta^2},\quad
    b_i(\theta)=\frac{1}{\theta}\frac{da_i}{d\theta},

together with the derivatives of :math:`a_i`, in three ways: by closed-form
expressions, by hyper-dual numbers, and by truncated Maclaurin series. The last one
remains accurate near :math:`\theta=0`, where the closed forms cancel
catastrophically.

.. autosummary::
    :toctree: generated/

    CalculationMode
    TrigonometricCoeffs
    evaluation_points
    compare
    format_table

"""

import enum
import logging
import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Final

import numpy as np
import numpy.typing as npt

from hyperdual import function as hdf
from hyperdual.hyperdual import HyperDual, _quotient, _zero_like

logger = logging.getLogger(__name__)

COEFFICIENTS: Final = ("a0", "a1", "a2", "b0", "b1", "b2")
SERIES_THRESHOLD: Final = 0.25
"""Below this magnitude of :math:`\\theta`, the series are used."""

_N_TERMS: Final = 6
_INV_FACTORIALS: Final = tuple(1.0 / math.factorial(n) for n in range(15))
_A_SERIES: Final = tuple(
    tuple((-1) ** j * _INV_FACTORIALS[2 * j + i] for j in range(_N_TERMS))
    for i in range(3)
)
_B_SERIES: Final = tuple(
    tuple(
        (-1) ** (j + 1) * 2 * (j + 1) * _INV_FACTORIALS[2 * j + 2 + i]
        for j in range(_N_TERMS)
    )
    for i in range(3)
)
_D2A_SERIES: Final = tuple(
    tuple(
        (-1) ** (j + 1) * (2 * j + 2) * (2 * j + 1) * _INV_FACTORIALS[2 * j + 2 + i]
        for j in range(_N_TERMS)
    )
    for i in range(3)
)


class CalculationMode(enum.Enum):
    """How coefficients and their derivatives are computed."""

    DIRECT = "direct"
    """Closed-form expressions."""
    HYPERDUAL = "hyperdual"
    """Derivatives are extracted from hyper-dual evaluations of the closed forms."""
    SERIES = "series"
    """Maclaurin series near zero, closed forms elsewhere."""


def _index(name: str, prefixes: str = "ab") -> tuple[str, int]:
    if len(name) != 2 or name[0] not in prefixes or name[1] not in "012":
        raise ValueError(f"unknown coefficient {name!r}")

    return name[0], int(name[1])


def _sum_series(coeffs: Sequence[float], theta):
    theta2 = theta * theta
    result: Any = 0.0
    power: Any = 1.0

    for c in coeffs:
        result = result + c * power
        power = power * theta2

    return result


def _direct_a(i: int, theta):
    match i:
        case 0:
            return hdf.cos(theta)

        case 1:
            return _quotient(hdf.sin(theta), theta)

        case _:
            return _quotient(1 - hdf.cos(theta), hdf.pow(theta, 2))


def _direct_da(i: int, theta):
    s = hdf.sin(theta)
    c = hdf.cos(theta)

    match i:
        case 0:
            return -s

        case 1:
            return _quotient(theta * c - s, hdf.pow(theta, 2))

        case _:
            return _quotient(theta * s + 2 * c - 2, hdf.pow(theta, 3))


def _direct_d2a(i: int, theta):
    s = hdf.sin(theta)
    c = hdf.cos(theta)

    match i:
        case 0:
            return -c

        case 1:
            tmp = (hdf.pow(theta, 2) - 2) * s + 2 * theta * c
            return -_quotient(tmp, hdf.pow(theta, 3))

        case _:
            tmp = (hdf.pow(theta, 2) - 6) * c - 4 * theta * s + 6
            return _quotient(tmp, hdf.pow(theta, 4))


def _direct_b(i: int, theta):
    s = hdf.sin(theta)
    c = hdf.cos(theta)

    match i:
        case 0:
            return -_quotient(s, theta)

        case 1:
            return _quotient(theta * c - s, hdf.pow(theta, 3))

        case _:
            return _quotient(theta * s + 2 * c - 2, hdf.pow(theta, 4))


class TrigonometricCoeffs:
    """Trigonometric coefficients of the Rodrigues formula.

    Parameters
    ----------
    mode : CalculationMode, default=CalculationMode.DIRECT
    h1 : float, default=1e-10
        Step along :math:`\\varepsilon_1`, used in :attr:`CalculationMode.HYPERDUAL`.
    h2 : float, default=1e-10
        Step along :math:`\\varepsilon_2`, used in :attr:`CalculationMode.HYPERDUAL`.

    Notes
    -----
    In :attr:`CalculationMode.DIRECT` and :attr:`CalculationMode.SERIES`, the argument
    may itself be a :class:`~hyperdual.HyperDual`, in which case its derivatives are
    propagated through the chosen formula. :attr:`CalculationMode.HYPERDUAL` requires a
    plain scalar.

    Examples
    --------
    >>> coeffs = TrigonometricCoeffs(CalculationMode.HYPERDUAL)
    >>> print(format(coeffs.d("a1", 0.3), ".5f"))
    -0.09910
    >>> series = TrigonometricCoeffs(CalculationMode.SERIES)
    >>> print(format(series.b1(0.0), ".6f"))
    -0.333333
    """

    __slots__ = ("_mode", "_h1", "_h2")
    _mode: CalculationMode
    _h1: Any
    _h2: Any

    def __init__(
        self,
        mode: CalculationMode = CalculationMode.DIRECT,
        *,
        h1: Any = 1e-10,
        h2: Any = 1e-10,
    ):
        self._mode = CalculationMode(mode)
        self.set_steps(h1, h2)

    @property
    def mode(self) -> CalculationMode:
        return self._mode

    @property
    def h1(self) -> Any:
        return self._h1

    @property
    def h2(self) -> Any:
        return self._h2

    def set_steps(self, h1: Any, h2: Any) -> None:
        """Set the steps used in :attr:`CalculationMode.HYPERDUAL`.

        Raises
        ------
        ValueError
            If a step is not positive and finite.
        """
        for h in (h1, h2):
            if not (math.isfinite(float(h)) and h > 0):
                raise ValueError(f"step must be positive and finite, got {h!r}")

        self._h1 = h1
        self._h2 = h2

    def a0(self, theta):
        return self.__a(0, theta)

    def a1(self, theta):
        return self.__a(1, theta)

    def a2(self, theta):
        return self.__a(2, theta)

    def b0(self, theta):
        return self.__b(0, theta)

    def b1(self, theta):
        """Return :math:`\\theta^{-1}da_1/d\\theta`."""
        return self.__b(1, theta)

    def b2(self, theta):
        """Return :math:`\\theta^{-1}da_2/d\\theta`."""
        return self.__b(2, theta)

    def coefficient(self, name: str) -> Callable[[Any], Any]:
        """Return the method evaluating the coefficient `name`, one of
        :data:`COEFFICIENTS`."""
        _index(name)
        return getattr(self, name)

    def d(self, name: str, theta):
        """Return the first derivative of :math:`a_i` (`name` is ``"a0"``, ``"a1"``,
        or ``"a2"``)."""
        _, i = _index(name, "a")

        match self._mode:
            case CalculationMode.DIRECT:
                return _direct_da(i, theta)

            case CalculationMode.HYPERDUAL:
                return self.__seeded(i, theta).eps1 / self._h1

            case CalculationMode.SERIES:
                if i == 0 or abs(theta) > SERIES_THRESHOLD:
                    return _direct_da(i, theta)

                return theta * _sum_series(_B_SERIES[i], theta)

    def d2(self, name: str, theta):
        """Return the second derivative of :math:`a_i` (`name` is ``"a0"``, ``"a1"``,
        or ``"a2"``)."""
        _, i = _index(name, "a")

        match self._mode:
            case CalculationMode.DIRECT:
                return _direct_d2a(i, theta)

            case CalculationMode.HYPERDUAL:
                return self.__seeded(i, theta).eps1eps2 / (self._h1 * self._h2)

            case CalculationMode.SERIES:
                if i == 0 or abs(theta) > SERIES_THRESHOLD:
                    return _direct_d2a(i, theta)

                return _sum_series(_D2A_SERIES[i], theta)

    def __seeded(self, i: int, theta) -> HyperDual:
        if isinstance(theta, HyperDual):
            raise TypeError("hyper-dual mode requires a scalar argument")

        x = HyperDual(theta, self._h1, self._h2, _zero_like(theta))
        return _direct_a(i, x)

    def __a(self, i: int, theta):
        if self._mode is CalculationMode.SERIES:
            if i != 0 and abs(theta) <= SERIES_THRESHOLD:
                return _sum_series(_A_SERIES[i], theta)

        return _direct_a(i, theta)

    def __b(self, i: int, theta):
        match self._mode:
            case CalculationMode.DIRECT:
                return _direct_b(i, theta)

            case CalculationMode.HYPERDUAL:
                return _quotient(self.d(f"a{i}", theta), theta)

            case CalculationMode.SERIES:
                if abs(theta) > SERIES_THRESHOLD:
                    return _direct_b(i, theta)

                return _sum_series(_B_SERIES[i], theta)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._mode}, h1={self._h1!r}, h2={self._h2!r})"


def evaluation_points(
    step: float = 1e-2, count: int = 101, dtype: npt.DTypeLike = np.float64
) -> npt.NDArray[np.floating]:
    """Return `count` points ``m * step`` spaced symmetrically around zero.

    Examples
    --------
    >>> evaluation_points(0.5, 5).tolist()
    [-1.0, -0.5, 0.0, 0.5, 1.0]
    """
    if count < 1:
        raise ValueError("count must be positive")

    start = -(count // 2)
    return np.arange(start, start + count).astype(dtype) * np.asarray(step, dtype)


def compare(
    points: Iterable[Any],
    modes: Iterable[CalculationMode] = tuple(CalculationMode),
    names: Sequence[str] = COEFFICIENTS,
) -> dict[str, dict[str, list[Any]]]:
    """Evaluate coefficients at `points` in each of `modes`.

    Returns
    -------
    dict[str, dict[str, list]]
        ``result[mode.value][name][k]`` is the coefficient `name` at ``points[k]``.
    """
    points = list(points)
    result: dict[str, dict[str, list[Any]]] = {}

    for mode in modes:
        coeffs = TrigonometricCoeffs(mode)
        logger.debug("evaluating %d points in %s mode", len(points), coeffs.mode.value)
        # closed forms divide by zero at the origin
        with np.errstate(divide="ignore", invalid="ignore"):
            result[coeffs.mode.value] = {
                name: [coeffs.coefficient(name)(x) for x in points] for name in names
            }

    return result


def format_table(
    points: Iterable[Any],
    results: Mapping[str, Mapping[str, Sequence[Any]]],
    *,
    width: int = 14,
    precision: int = 7,
) -> str:
    """Format the output of :func:`compare` as a plain-text table.

    Each column corresponds to a point, each row to a coefficient in one mode, and
    modes are separated by dashed rules.

    Examples
    --------
    >>> pts = evaluation_points(0.5, 2)
    >>> res = compare(pts, [CalculationMode.DIRECT], ["a0"])
    >>> print(format_table(pts, res, width=10, precision=2))
                |  -5.00e-01 |   0.00e+00
    -------------------------------------
    a0 (direct) |   8.78e-01 |   1.00e+00
    -------------------------------------
    """
    points = list(points)
    labels = [f"{name} ({group})" for group in results for name in results[group]]
    label_width = max((len(x) for x in labels), default=0)
    separator = " | "
    rule = "-" * (label_width + (width + len(separator)) * len(points))

    def cells(values: Iterable[Any]) -> str:
        return "".join(f"{separator}{float(v):>{width}.{precision}e}" for v in values)

    lines = [" " * label_width + cells(points), rule]

    for group, rows in results.items():
        for name, values in rows.items():
            lines.append(f"{name + ' (' + group + ')':>{label_width}}" + cells(values))

        lines.append(rule)

    logger.debug("formatted %d groups over %d points", len(results), len(points))
    return "\n".join(lines)
