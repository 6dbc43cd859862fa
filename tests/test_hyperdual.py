import copy
import math
import operator
from concurrent.futures import ThreadPoolExecutor

import mpmath
import numpy as np
import pytest

from hyperdual import HyperDual
from hyperdual import function as hdf


def test_construction():
    assert HyperDual().astuple() == (0.0, 0.0, 0.0, 0.0)
    assert HyperDual(2.5).astuple() == (2.5, 0.0, 0.0, 0.0)
    assert HyperDual(1.0, 2.0, 3.0, 4.0).astuple() == (1.0, 2.0, 3.0, 4.0)

    with pytest.raises(TypeError):
        HyperDual(1.0, 2.0)

    with pytest.raises(TypeError):
        HyperDual(HyperDual(1.0))


def test_setvalues():
    x = HyperDual()
    x.setvalues(1.0, 2.0, 3.0, 4.0)
    assert x.identical(HyperDual(1.0, 2.0, 3.0, 4.0))


def test_identities():
    a = HyperDual(1.5, -2.0, 0.25, 7.0)
    assert a + (-a) == 0
    assert (a + 0).identical(a)
    assert (a * 1).identical(a)
    assert (-a).astuple() == (-1.5, 2.0, -0.25, -7.0)


def test_product():
    a = HyperDual(1.0, 2.0, 3.0, 4.0)
    b = HyperDual(5.0, 6.0, 7.0, 8.0)
    assert (a * b).astuple() == (5.0, 16.0, 22.0, 60.0)
    assert (a * b).identical(b * a)


def test_nilpotency():
    e1 = HyperDual(0.0, 1.0, 0.0, 0.0)
    e2 = HyperDual(0.0, 0.0, 1.0, 0.0)
    e12 = HyperDual(0.0, 0.0, 0.0, 1.0)
    zero = HyperDual()
    assert (e1 * e1).identical(zero)
    assert (e2 * e2).identical(zero)
    assert (e12 * e12).identical(zero)
    assert (e1 * e12).identical(zero)
    assert (e2 * e12).identical(zero)
    assert (e1 * e2).identical(e12)


def test_scalar_operands():
    a = HyperDual(1.0, 2.0, 3.0, 4.0)
    assert (a + 2).astuple() == (3.0, 2.0, 3.0, 4.0)
    assert (2 + a).astuple() == (3.0, 2.0, 3.0, 4.0)
    assert (a - 2).astuple() == (-1.0, 2.0, 3.0, 4.0)
    assert (2 - a).astuple() == (1.0, -2.0, -3.0, -4.0)
    assert (a * 2).astuple() == (2.0, 4.0, 6.0, 8.0)
    assert (2 * a).astuple() == (2.0, 4.0, 6.0, 8.0)
    assert (a * 2).identical(a * HyperDual(2.0))


def test_division():
    a = HyperDual(1.0, 2.0, 3.0, 4.0)
    b = HyperDual(2.0, -1.0, 0.5, 3.0)
    assert (a / b).identical(a * hdf.pow(b, -1))
    assert (1 / b).identical(hdf.pow(b, -1))
    assert (a / 4.0).astuple() == (0.25, 0.5, 0.75, 1.0)

    c = HyperDual(3.0, 1.0, 1.0, 0.0)
    r = (c / c).astuple()
    assert pytest.approx(r, abs=1e-15) == (1.0, 0.0, 0.0, 0.0)


def test_division_paths_agree():
    a = HyperDual(1.0, 2.0, 3.0, 4.0)

    for s in (3.0, -0.7, 12.5):
        assert pytest.approx((a / HyperDual(s)).astuple()) == (a / s).astuple()


def test_division_by_zero_scalar():
    r = HyperDual(1.0, -1.0, 0.0, 1.0) / 0.0
    assert r.real == math.inf
    assert r.eps1 == -math.inf
    assert math.isnan(r.eps2)


def test_compound_assignment():
    x = HyperDual(2.0, 1.0, 1.0, 0.0)
    y = x
    x += HyperDual(1.0, 1.0, 0.0, 0.0)
    assert x is y
    assert x.astuple() == (3.0, 2.0, 1.0, 0.0)

    x -= 1
    assert x is y
    assert x.astuple() == (2.0, 2.0, 1.0, 0.0)

    x *= 2
    assert x is y
    assert x.astuple() == (4.0, 4.0, 2.0, 0.0)

    x /= 4
    assert x is y
    assert x.astuple() == (1.0, 1.0, 0.5, 0.0)

    x *= x
    assert x is y
    assert x.astuple() == (1.0, 2.0, 1.0, 1.0)

    x /= HyperDual(2.0)
    assert x is not y
    assert pytest.approx(x.astuple()) == (0.5, 1.0, 0.5, 0.5)


def test_power_operator():
    x = HyperDual(3.0, 1.0, 1.0, 0.0)
    assert (x**2).identical(hdf.pow(x, 2))
    assert (x**2).astuple() == (9.0, 6.0, 6.0, 2.0)

    r = 2**x
    assert r.real == pytest.approx(8.0)
    assert r.eps1 == pytest.approx(8.0 * math.log(2.0))
    assert r.eps1eps2 == pytest.approx(8.0 * math.log(2.0) ** 2)


@pytest.mark.parametrize(
    "op", [operator.eq, operator.ne, operator.lt, operator.le, operator.gt, operator.ge]
)
@pytest.mark.parametrize("lhs, rhs", [(1.0, 1.0), (1.0, 2.0), (2.0, 1.0), (-3.0, 0.0)])
def test_comparison(op, lhs, rhs):
    x = HyperDual(lhs, 1.0, 2.0, 3.0)
    y = HyperDual(rhs, -4.0, 5.0, -6.0)
    expected = op(lhs, rhs)
    assert op(x, y) is expected
    assert op(x, rhs) is expected
    assert op(lhs, y) is expected
    assert op(x, np.float64(rhs)) is expected


def test_equality_ignores_infinitesimal():
    x = HyperDual(1.0, 2.0, 3.0, 4.0)
    y = HyperDual(1.0, -9.0, 0.0, 8.0)
    assert x == y
    assert not x != y
    assert not x.identical(y)
    assert x != "1.0"


def test_control_flow():
    def relu(x):
        return x if x > 0 else 0 * x

    assert relu(HyperDual(2.0, 1.0, 1.0, 0.0)).eps1 == 1.0
    assert relu(HyperDual(-2.0, 1.0, 1.0, 0.0)).eps1 == 0.0
    assert not HyperDual(0.0, 1.0, 1.0, 1.0)
    assert HyperDual(-1.0)


def test_unhashable():
    with pytest.raises(TypeError):
        hash(HyperDual(1.0))


def test_unsupported_operand():
    x = HyperDual(1.0)

    with pytest.raises(TypeError):
        x + "a"

    with pytest.raises(TypeError):
        [1.0] * x

    with pytest.raises(TypeError):
        x < "a"


def test_display(capsys):
    x = HyperDual(1.0, 2.0, -3.0, 4.5)
    assert str(x) == "1.0 + 2.0 ε1 + -3.0 ε2 + 4.5 ε1ε2"
    assert repr(x) == "HyperDual(real=1.0, eps1=2.0, eps2=-3.0, eps1eps2=4.5)"
    assert format(x, ".2f") == "1.00 + 2.00 ε1 + -3.00 ε2 + 4.50 ε1ε2"

    x.view()
    assert capsys.readouterr().out == "1.0 + 2.0 ε1 + -3.0 ε2 + 4.5 ε1ε2\n"


def test_copy():
    x = HyperDual(1.0, 2.0, 3.0, 4.0)
    y = copy.copy(x)
    assert y is not x
    assert y.identical(x)
    y += 1
    assert x.real == 1.0


def test_seed():
    x = HyperDual.variable(0.5, 1e-3, 1e-4)
    assert x.astuple() == (0.5, 1e-3, 1e-4, 0.0)
    assert HyperDual.constant(2.0).identical(HyperDual(2.0))


def test_numpy_coefficients():
    x = HyperDual(np.float32(1.5), np.float32(1), np.float32(1), np.float32(0))
    y = hdf.sin(x) * 2
    assert all(isinstance(v, np.float32) for v in y.astuple())
    assert y.eps1 == pytest.approx(2 * math.cos(1.5), rel=1e-6)


def test_mpmath_coefficients():
    with mpmath.workdps(50):
        x = HyperDual(mpmath.mpf(2), mpmath.mpf(1), mpmath.mpf(1), mpmath.mpf(0))
        y = hdf.exp(x) / x

        assert all(isinstance(v, mpmath.mpf) for v in y.astuple())
        # d/dx e^x / x = e^x (x - 1) / x^2
        expected = mpmath.exp(2) / 4
        assert mpmath.almosteq(y.eps1, expected, rel_eps=mpmath.mpf(10) ** -40)


def test_seeded_derivative():
    h = 1e-14
    theta = 0.3
    y = hdf.sin(HyperDual(theta, h, h, 0.0)) / HyperDual(theta, h, h, 0.0)
    closed_form = (theta * math.cos(theta) - math.sin(theta)) / theta**2
    assert y.real == pytest.approx(0.98507, abs=1e-5)
    assert y.eps1 / h == pytest.approx(closed_form, rel=1e-6)
    assert y.eps1 / h == pytest.approx(-0.099103, rel=1e-4)


def test_threads():
    def work(theta):
        x = HyperDual(theta, 1.0, 1.0, 0.0)

        for _ in range(50):
            x *= HyperDual(1.0001)
            x += hdf.sin(x) * 1e-3

        return x.astuple()

    thetas = [0.1 * k for k in range(1, 65)]
    expected = [work(t) for t in thetas]

    with ThreadPoolExecutor(max_workers=8) as executor:
        assert list(executor.map(work, thetas)) == expected
