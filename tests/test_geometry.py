import numpy as np
import pytest

from ldoskit.constants import TWO_M_OVER_HBAR_SQ, TWO_PI
from ldoskit.geometry import (
    cell_lengths, cell_parameters, cell_volume, g_sphere,
    index_shift, max_g_indices, reciprocal_lattice,
)

OBLIQUE = np.array([[4.0, 0.0, 0.0],
                    [1.2, 3.8, 0.0],
                    [0.5, 0.7, 9.0]])


@pytest.mark.parametrize('i, i_max, expected', [
    (0, 5, 0),
    (5, 5, 5),
    (6, 5, -5),
    (10, 5, -1),
    (2, 2, 2),
    (3, 2, -2),
])
def test_index_shift(i, i_max, expected):
    assert index_shift(i, i_max) == expected


def test_index_shift_array_covers_signed_range():
    shifted = index_shift(np.arange(7), 3)
    assert list(shifted) == [0, 1, 2, 3, -3, -2, -1]


@pytest.mark.parametrize('cell', [np.diag([10.0, 10.0, 15.0]), OBLIQUE])
def test_reciprocal_lattice_duality(cell):
    b = reciprocal_lattice(cell)
    assert np.allclose(cell @ b.T, TWO_PI * np.eye(3))


def test_left_handed_cell_keeps_duality():
    cell = np.diag([3.0, 4.0, 5.0])
    cell[2] *= -1
    assert cell_volume(cell) == pytest.approx(-60.0)
    b = reciprocal_lattice(cell)
    assert np.allclose(cell @ b.T, TWO_PI * np.eye(3))


def test_degenerate_cell():
    cell = np.array([[1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
    with pytest.raises(ValueError):
        reciprocal_lattice(cell)


def test_cell_lengths_and_parameters():
    assert np.allclose(cell_lengths(np.diag([2.0, 3.0, 4.0])), [2.0, 3.0, 4.0])
    par = cell_parameters(np.diag([2.0, 3.0, 4.0]))
    assert np.allclose(par, [2.0, 3.0, 4.0, 90.0, 90.0, 90.0])


@pytest.mark.parametrize('cell', [np.diag([10.0, 10.0, 15.0]), OBLIQUE])
@pytest.mark.parametrize('e_cut', [1.7, 50.0, 250.0])
def test_max_g_indices(cell, e_cut):
    max_g = max_g_indices(cell, e_cut)
    g_max = np.sqrt(TWO_M_OVER_HBAR_SQ * e_cut)
    for m, length in zip(max_g, cell_lengths(cell)):
        assert m >= 1
        assert m == int(np.floor(g_max * length / TWO_PI)) + 1


def test_small_gamma_sphere():
    cell = np.diag([10.0, 10.0, 15.0])
    e_cut = 1.7
    max_g = max_g_indices(cell, e_cut)
    assert max_g == (2, 2, 2)

    gs = g_sphere(np.zeros(3), reciprocal_lattice(cell), max_g, e_cut)
    signed = {tuple(index_shift(g, m) for g, m in zip(row, max_g)) for row in gs}
    assert signed == {(0, 0, 0), (1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0),
                      (0, 0, 1), (0, 0, -1)}


def test_sphere_order_axis0_fastest():
    cell = OBLIQUE
    e_cut = 40.0
    max_g = max_g_indices(cell, e_cut)
    sizes = [2 * m + 1 for m in max_g]
    gs = g_sphere([0.1, -0.2, 0.3], reciprocal_lattice(cell), max_g, e_cut)
    flat = gs[:, 0] + sizes[0] * (gs[:, 1] + sizes[1] * gs[:, 2])
    assert np.all(np.diff(flat) > 0)


def test_sphere_respects_cutoff():
    cell = OBLIQUE
    e_cut = 40.0
    k = np.array([0.25, 0.0, -0.5])
    max_g = max_g_indices(cell, e_cut)
    b = reciprocal_lattice(cell)
    gs = g_sphere(k, b, max_g, e_cut)
    n = k + np.stack([index_shift(gs[:, i], max_g[i]) for i in range(3)], axis=1)
    norm_sq = np.sum((n @ b) ** 2, axis=1)
    assert len(gs) > 0
    assert np.all(norm_sq < TWO_M_OVER_HBAR_SQ * e_cut)
