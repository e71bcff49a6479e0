import numpy as np
import pytest

from ldoskit.mapping import HeightDirection, map_g_sphere_to_grid
from ldoskit.matrix import Matrix


def test_single_point_a0():
    grid_sizes = (5, 3, 3)
    buf = Matrix(5, 9, dtype=np.complex128)
    buf.fill(9.0)
    map_g_sphere_to_grid(buf, np.array([[2, 1, 0]]), np.array([1.5 - 0.5j]),
                         HeightDirection.A0, grid_sizes)
    assert buf[2, 1] == 1.5 - 0.5j
    assert np.count_nonzero(buf.array) == 1


@pytest.mark.parametrize('direction, expected', [
    (HeightDirection.A0, (1, 2 + 3 * 5)),      # (g0, g1 + g2·size1)
    (HeightDirection.A1, (2, 3 + 1 * 7)),      # (g1, g2 + g0·size2)
    (HeightDirection.A2, (3, 1 + 2 * 3)),      # (g2, g0 + g1·size0)
])
def test_grid_positions(direction, expected):
    grid_sizes = (3, 5, 7)
    rows, cols = direction.grid_positions(np.array([[1, 2, 3]]), grid_sizes)
    assert (rows[0], cols[0]) == expected


@pytest.mark.parametrize('direction', list(HeightDirection))
def test_every_grid_cell_is_distinct(direction):
    grid_sizes = (3, 5, 7)
    i0, i1, i2 = np.meshgrid(*(np.arange(n) for n in grid_sizes), indexing='ij')
    gs = np.stack([i0.ravel(), i1.ravel(), i2.ravel()], axis=1)
    rows, cols = direction.grid_positions(gs, grid_sizes)
    assert rows.max() == grid_sizes[direction.axis] - 1
    assert cols.max() == direction.in_plane_size(grid_sizes) - 1
    assert len(set(zip(rows, cols))) == len(gs)


def test_in_plane_axes():
    assert HeightDirection.A0.in_plane_axes == (1, 2)
    assert HeightDirection.A1.in_plane_axes == (2, 0)
    assert HeightDirection.A2.in_plane_axes == (0, 1)


def test_empty_sphere_zeroes_buffer():
    buf = Matrix(3, 3, dtype=np.complex64)
    buf.fill(1.0)
    map_g_sphere_to_grid(buf, np.zeros((0, 3), dtype=np.intp), np.zeros(0),
                         HeightDirection.A2, (3, 1, 3))
    assert not np.any(buf.array)
