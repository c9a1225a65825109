import numpy as np
import pytest

from qdaim.errors import InvalidConfiguration, StencilOutOfBounds
from qdaim.grid import Grid
from qdaim.quantum_dot import QuantumDot, make_dots


@pytest.fixture
def scattered_dots():
    rng = np.random.default_rng(7)
    return make_dots(rng.uniform(-3.0, 5.0, size=(20, 3)))


@pytest.mark.core
def test_index_coordinate_bijection(scattered_dots):
    """
    Pass criteria:
        idx_to_coord and coord_to_idx are exact inverses over the whole grid.
    """
    grid = Grid(np.array([0.7, 1.1, 0.9]), scattered_dots, padding=1)

    for idx in range(grid.num_gridpoints):
        assert grid.coord_to_idx(grid.idx_to_coord(idx)) == idx

    for coord in np.ndindex(*grid.dimensions):
        np.testing.assert_array_equal(grid.idx_to_coord(grid.coord_to_idx(coord)), coord)


@pytest.mark.core
def test_row_major_convention():
    grid = Grid.from_dimensions((1.0, 1.0, 1.0), (3, 4, 5))
    assert grid.coord_to_idx((0, 0, 1)) == 1
    assert grid.coord_to_idx((0, 1, 0)) == 5
    assert grid.coord_to_idx((1, 0, 0)) == 20
    assert grid.coord_to_idx((2, 3, 4)) == np.ravel_multi_index((2, 3, 4), (3, 4, 5))


@pytest.mark.core
def test_padding_contains_every_dot(scattered_dots):
    """
    Pass criteria:
        Every dot's grid coordinate lies in [bounds.min, bounds.max) even with
        zero padding and negative coordinates.
    """
    for padding in (0, 2):
        grid = Grid((0.5, 0.5, 0.5), scattered_dots, padding=padding)
        for dot in scattered_dots:
            coord = grid.grid_coordinate(dot.position())
            assert np.all(coord >= grid.bounds[0] + padding)
            assert np.all(coord < grid.bounds[1] - padding)
            assert 0 <= grid.associated_grid_index(dot.position()) < grid.num_gridpoints


@pytest.mark.core
def test_grid_coordinate_floors_negative_positions():
    grid = Grid.from_dimensions((1.0, 1.0, 1.0), (4, 4, 4), origin=(-2, -2, -2))
    np.testing.assert_array_equal(grid.grid_coordinate((-0.5, 0.5, -1.0)), (-1, 0, -1))


@pytest.mark.core
def test_spatial_coord_of_box_inverts_associated_index(scattered_dots):
    grid = Grid((1.0, 1.0, 1.0), scattered_dots)
    for idx in range(grid.num_gridpoints):
        assert grid.associated_grid_index(grid.spatial_coord_of_box(idx)) == idx


@pytest.mark.core
def test_corner_dots_geometry():
    dots = [QuantumDot(pos=(0, 0, 0)), QuantumDot(pos=(4, 4, 4))]
    grid = Grid((1.0, 1.0, 1.0), dots)

    np.testing.assert_array_equal(grid.dimensions, (5, 5, 5))
    np.testing.assert_allclose(dots[1].position(), grid.spatial_coord_of_box(grid.num_gridpoints - 1))
    assert grid.max_transit_steps(1.0, 1.0) == int(np.ceil(5 * np.sqrt(3)))
    assert grid.circulant_shape(1.0, 1.0, 3) == (9 + 3 + 1, 10, 10, 10)
    # a huge time step still needs one step to cross
    assert grid.max_transit_steps(1.0, 1e6) == 1


@pytest.mark.core
def test_construction_sorts_dots_by_box(scattered_dots):
    """
    Pass criteria:
        The caller's list is stably sorted by box index and every box maps to
        the contiguous range of its dots.
    """
    original = list(scattered_dots)
    grid = Grid((1.5, 1.5, 1.5), scattered_dots)

    box_ids = [grid.associated_grid_index(d.position()) for d in scattered_dots]
    assert box_ids == sorted(box_ids)
    assert sorted(map(id, scattered_dots)) == sorted(map(id, original))

    for box in grid.occupied_boxes():
        contents = grid.box_contents(box)
        assert len(contents) > 0
        assert all(box_ids[i] == box for i in contents)
    assert sum(len(grid.box_contents(b)) for b in range(grid.num_gridpoints)) == len(scattered_dots)


@pytest.mark.core
def test_sort_is_stable():
    dots = make_dots([(0.1, 0.1, 0.1), (2.5, 0, 0), (0.2, 0.2, 0.2), (0.3, 0.3, 0.3)])
    first, _, third, fourth = dots
    Grid((1.0, 1.0, 1.0), dots)
    assert dots[:3] == [first, third, fourth]


@pytest.mark.core
def test_expansion_box_indices():
    dots = [QuantumDot(pos=(2.5, 2.5, 2.5))]
    grid = Grid((1.0, 1.0, 1.0), dots, padding=2)

    home = grid.associated_grid_index(dots[0].position())
    np.testing.assert_array_equal(grid.expansion_box_indices(dots[0].position(), 0), [home])

    indices = grid.expansion_box_indices(dots[0].position(), 2)
    assert indices.size == 27
    assert indices[13] == home
    coords = np.array([grid.idx_to_coord(i) for i in indices])
    origin = grid.idx_to_coord(home)
    np.testing.assert_array_equal(coords[0], origin - 1)
    np.testing.assert_array_equal(coords[-1], origin + 1)
    # lexicographic: z varies fastest
    np.testing.assert_array_equal(coords[1] - coords[0], (0, 0, 1))


@pytest.mark.core
def test_stencil_outside_grid_raises():
    dots = [QuantumDot(pos=(0.5, 0.5, 0.5)), QuantumDot(pos=(3.5, 0.5, 0.5))]
    grid = Grid((1.0, 1.0, 1.0), dots, padding=0)
    with pytest.raises(StencilOutOfBounds):
        grid.expansion_box_indices(dots[0].position(), 2)


@pytest.mark.core
def test_invalid_configuration():
    with pytest.raises(InvalidConfiguration):
        Grid((1.0, 0.0, 1.0), [QuantumDot()])
    with pytest.raises(InvalidConfiguration):
        Grid((1.0, 1.0, 1.0), [])
    with pytest.raises(InvalidConfiguration):
        Grid.from_dimensions((1.0, 1.0, 1.0), (4, 0, 4))


@pytest.mark.core
def test_dots_must_be_a_list():
    """
    Pass criteria:
        A tuple of dots is rejected with InvalidConfiguration (the grid reorders
        the list in place) and the tuple is left untouched.
    """
    dots = tuple(make_dots([(2.5, 0.5, 0.5), (0.5, 0.5, 0.5)]))
    with pytest.raises(InvalidConfiguration, match="list"):
        Grid((1.0, 1.0, 1.0), dots)
    np.testing.assert_allclose(dots[0].position(), (2.5, 0.5, 0.5))

    grid = Grid((1.0, 1.0, 1.0), list(dots))
    np.testing.assert_allclose(grid.dots[0].position(), (0.5, 0.5, 0.5))
