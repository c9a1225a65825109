import numpy as np
import pytest

from qdaim.interpolation import UniformLagrangeSet, split_double


@pytest.mark.core
@pytest.mark.parametrize("order", [0, 1, 3, 5])
def test_partition_of_unity(order):
    """
    Pass criteria:
        The basis sums to one and its derivatives sum to zero everywhere.
    """
    x = np.linspace(-0.5, order + 0.5, 37)
    table = UniformLagrangeSet(order).evaluate_table(x)

    np.testing.assert_allclose(table[0].sum(axis=0), 1.0, rtol=0, atol=1e-10)
    np.testing.assert_allclose(table[1].sum(axis=0), 0.0, rtol=0, atol=1e-9)
    np.testing.assert_allclose(table[2].sum(axis=0), 0.0, rtol=0, atol=1e-8)


@pytest.mark.core
def test_basis_is_kronecker_delta_on_nodes():
    order = 4
    table = UniformLagrangeSet(order).evaluate_table(np.arange(order + 1))
    np.testing.assert_allclose(table[0], np.eye(order + 1), atol=1e-12)


@pytest.mark.core
def test_reproduces_cubic_and_its_derivatives():
    """
    Pass criteria:
        An order-3 set reproduces a cubic, its first and its second
        derivative to round-off at arbitrary offsets.
    """
    f = np.polynomial.Polynomial([0.3, -1.2, 0.7, 0.25])
    nodes = np.arange(4.0)
    interp = UniformLagrangeSet(3)

    for x in (0.0, 0.2, 0.75, 0.999, 2.4):
        ev = interp.evaluate_derivative_table_at_x(x)
        np.testing.assert_allclose(ev[0] @ f(nodes), f(x), rtol=1e-12, atol=1e-12)
        np.testing.assert_allclose(ev[1] @ f(nodes), f.deriv(1)(x), rtol=1e-11, atol=1e-11)
        np.testing.assert_allclose(ev[2] @ f(nodes), f.deriv(2)(x), rtol=1e-10, atol=1e-10)


@pytest.mark.core
def test_derivatives_scale_with_step():
    interp = UniformLagrangeSet(3)
    base = interp.evaluate_derivative_table_at_x(0.4).copy()
    scaled = interp.evaluate_derivative_table_at_x(0.4, dt=0.5)

    np.testing.assert_allclose(scaled[0], base[0])
    np.testing.assert_allclose(scaled[1], base[1] / 0.5)
    np.testing.assert_allclose(scaled[2], base[2] / 0.25)
    assert scaled is interp.evaluations


@pytest.mark.core
def test_split_double():
    assert split_double(3.25) == (3, 0.25)
    assert split_double(2.0) == (2, 0.0)
    whole, frac = split_double(-0.25)
    assert whole == -1
    assert frac == pytest.approx(0.75)


@pytest.mark.core
def test_negative_order_rejected():
    with pytest.raises(ValueError):
        UniformLagrangeSet(-1)
