import numpy as np
import pytest

from qdaim.errors import InvalidConfiguration
from qdaim.interactions import PulseInteraction
from qdaim.quantum_dot import QuantumDot, make_dots
from qdaim.tools import cosine_drive, gaussian_enveloped_cosine, gaussian_pulse


@pytest.mark.core
def test_gaussian_pulse_travels_at_c():
    """
    Pass criteria:
        The peak reaches the origin at t0 and a point a distance d downstream
        at t0 + d / c.
    """
    c = 3.0
    pulse = gaussian_pulse(amplitude=2.0, t0=1.0, sigma=0.2, direction=(0.0, 2.0, 0.0), c=c)

    assert pulse(np.zeros(3), 1.0) == pytest.approx(2.0)
    assert pulse((5.0, 6.0, -1.0), 1.0 + 6.0 / c) == pytest.approx(2.0)
    assert pulse(np.zeros(3), 1.2) == pytest.approx(2.0 * np.exp(-0.5))

    positions = np.array([[0.0, 0.0, 0.0], [0.0, 3.0, 0.0], [0.0, -3.0, 0.0]])
    values = pulse(positions, 2.0)
    assert values.shape == (3,)
    assert values[1] == pytest.approx(2.0)
    assert values[1] > values[0] > values[2]


@pytest.mark.core
def test_enveloped_cosine_and_cosine_drive():
    pos = np.array([[1.0, 0.0, 0.0], [4.0, 0.0, 0.0]])
    c, omega = 2.0, 5.0

    env = gaussian_enveloped_cosine(amplitude=1.5, t0=2.0, sigma=0.7, omega=omega, phase=0.3, c=c)
    tau = 3.1 - pos[:, 0] / c - 2.0
    np.testing.assert_allclose(
        env(pos, 3.1), 1.5 * np.exp(-0.5 * (tau / 0.7) ** 2) * np.cos(omega * tau + 0.3)
    )

    drive = cosine_drive(amplitude=0.4, omega=omega, c=c)
    np.testing.assert_allclose(drive(pos, 0.9), 0.4 * np.cos(omega * (0.9 - pos[:, 0] / c)))
    np.testing.assert_allclose(cosine_drive(amplitude=0.4, omega=0.0)(pos, 7.0), 0.4)


@pytest.mark.core
def test_zero_direction_rejected():
    with pytest.raises(ValueError):
        gaussian_pulse(direction=(0.0, 0.0, 0.0))


@pytest.mark.core
def test_pulse_interaction_projects_on_dipoles():
    """
    Pass criteria:
        Each dot sees (d . e) E(r, t) / hbar with a normalized polarization,
        and repeated calls return equal, independent arrays.
    """
    dots = [
        QuantumDot(pos=(0.0, 0.0, 0.0), dipole=(0.0, 0.0, 2.0)),
        QuantumDot(pos=(1.0, 0.0, 0.0), dipole=(1.0, 0.0, 1.0)),
    ]
    pulse = gaussian_pulse(amplitude=3.0, t0=0.5, sigma=0.25, c=10.0)
    interaction = PulseInteraction(dots, pulse, dt=0.1, polarization=(0.0, 0.0, 4.0), hbar=0.5)

    step = 6
    expected = np.array([2.0, 1.0]) / 0.5 * pulse(interaction.positions, step * 0.1)
    first = interaction.evaluate(step)
    np.testing.assert_allclose(first, expected)

    first[:] = 0.0
    np.testing.assert_allclose(interaction.evaluate(step), expected)


@pytest.mark.core
def test_pulse_interaction_validation():
    with pytest.raises(InvalidConfiguration):
        PulseInteraction(make_dots([(0, 0, 0)]), gaussian_pulse(), 0.1, polarization=(0, 0, 0))
    empty = PulseInteraction([], gaussian_pulse(), 0.1)
    assert empty.evaluate(3).shape == (0,)
