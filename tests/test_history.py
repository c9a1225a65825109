import numpy as np
import pytest

from qdaim.errors import InvalidConfiguration, UninitializedHistory
from qdaim.history import DERIVATIVE, VALUE, History


@pytest.mark.core
def test_extents_and_negative_times():
    hist = History(3, window=4, num_steps=10)

    assert hist.array.shape == (3, 14, 2, 2)
    assert (hist.min_time, hist.max_time, hist.num_time) == (-4, 10, 14)

    hist.set(1, -4, [1.0, 2.0j])
    hist.set(1, 9, [3.0, 4.0], slot=DERIVATIVE)
    np.testing.assert_array_equal(hist.array[1, 0, VALUE], [1.0, 2.0j])
    np.testing.assert_array_equal(hist.get(1, 9, DERIVATIVE), [3.0, 4.0])


@pytest.mark.core
def test_seed_fills_past_and_present():
    """
    Pass criteria:
        Rows -window..0 hold the seed (per dot when given per dot) and later
        rows stay zero.
    """
    hist = History(2, window=3, num_steps=5)
    states = np.array([[1.0, 0.5j], [0.0, 0.25]])
    hist.seed(states, derivative=[0.0, -1.0])

    for t in range(-3, 1):
        np.testing.assert_array_equal(hist.at(t), states)
        np.testing.assert_array_equal(hist.at(t, DERIVATIVE), [[0.0, -1.0], [0.0, -1.0]])
    np.testing.assert_array_equal(hist.window_slice(1, 4), 0.0)

    hist.seed([0.2, 0.0])
    np.testing.assert_array_equal(hist.at(-3, DERIVATIVE), 0.0)
    np.testing.assert_array_equal(hist.at(0)[:, 0], [0.2, 0.2])


@pytest.mark.core
def test_views_write_through():
    hist = History(2, window=1, num_steps=3)
    hist.at(2)[:] = 7.0
    assert hist.get(0, 2)[1] == 7.0

    window = hist.window_slice(-1, 2)
    assert window.shape == (2, 4, 2)
    window[:, 0] = 1.0
    np.testing.assert_array_equal(hist.at(-1), 1.0)


@pytest.mark.core
def test_out_of_range_access_raises():
    hist = History(1, window=2, num_steps=3)
    with pytest.raises(UninitializedHistory):
        hist.at(-3)
    with pytest.raises(UninitializedHistory):
        hist.get(0, 3)
    with pytest.raises(UninitializedHistory):
        hist.check_range(-1, 5)


@pytest.mark.core
def test_invalid_extents():
    with pytest.raises(InvalidConfiguration):
        History(1, window=-1, num_steps=3)
    with pytest.raises(InvalidConfiguration):
        History(1, window=2, num_steps=0)
