#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
geometry.py — Lattice and plane-wave G-sphere helpers for ldoskit
=================================================================
Utilities shared by the WAVECAR reader and the LDOS pipeline to
reconstruct the plane-wave basis of a VASP calculation from the cell
geometry and the kinetic-energy cutoff.

Main functions
---------------
- reciprocal_lattice(cell)        : rows b_i = 2π (a_j × a_k) / V.
- cell_lengths(cell), cell_parameters(cell)
                                  : |a_i| and (a, b, c, α, β, γ) via ase.
- max_g_indices(cell, e_cut)      : largest G index along each axis.
- index_shift(i, i_max)           : wrap-around FFT index → signed integer.
- g_sphere(k, recip, max_g, e_cut): grid indices of every plane wave with
                                    |k + G|² below the cutoff, in WAVECAR
                                    order (axis 2 outermost, axis 0 fastest).

Notes
-----
For an oblique cell the maximal index along axis i is not Gmax/|b_i| but
Gmax·|a_i|/2π; the floor()+1 bound below is the one VASP uses when it
writes the coefficients, and the enumeration order must match the file.

License:
    MIT License (see LICENSE file)

Version:
    1.0.0
"""

from __future__ import annotations

import numpy as np
from ase.cell import Cell

from .constants import TWO_PI, TWO_M_OVER_HBAR_SQ

__all__ = [
    "cell_volume",
    "reciprocal_lattice",
    "cell_lengths",
    "cell_parameters",
    "max_g_indices",
    "index_shift",
    "g_sphere",
]


def cell_volume(cell) -> float:
    """Signed scalar triple product a0 · (a1 × a2) in Å³."""
    a = np.asarray(cell, float)
    return float(np.dot(a[0], np.cross(a[1], a[2])))


def reciprocal_lattice(cell):
    """
    Return the 3×3 matrix whose *rows* are the reciprocal-lattice vectors
    in Å⁻¹ (convention: a_i · b_j = 2π δ_ij).
    """
    a = np.asarray(cell, float)
    volume = cell_volume(a)
    if volume == 0.0:
        raise ValueError("degenerate lattice: cell volume is zero")
    return TWO_PI / volume * np.array([np.cross(a[1], a[2]),
                                       np.cross(a[2], a[0]),
                                       np.cross(a[0], a[1])])


def cell_lengths(cell):
    """Norms |a0|, |a1|, |a2| in Å."""
    return Cell(np.asarray(cell, float)).lengths()


def cell_parameters(cell):
    """(a, b, c, α, β, γ) with angles in degrees."""
    return Cell(np.asarray(cell, float)).cellpar()


def max_g_indices(cell, e_cut: float):
    """Maximal reciprocal-lattice index i_m per axis; the grid holds 2 i_m + 1 points."""
    g_max_over_2pi = np.sqrt(TWO_M_OVER_HBAR_SQ * e_cut) / TWO_PI
    return tuple(int(np.floor(g_max_over_2pi * length)) + 1 for length in cell_lengths(cell))


def index_shift(i, i_max):
    """
    Map an unsigned grid index in [0, 2 i_max] to the signed integer used
    in G = Σ n_i b_i.  Works element-wise on integer arrays.
    """
    i = np.asarray(i, dtype=np.int64)
    shifted = np.where(i > i_max, i - (2 * i_max + 1), i)
    return int(shifted) if shifted.ndim == 0 else shifted


def g_sphere(k, recip, max_g, e_cut: float) -> np.ndarray:
    """
    Enumerate the plane-wave basis of one k-point.

    Returns an (N, 3) array of unsigned grid indices (i0, i1, i2) with
    |Σ (k_j + shift(i_j)) b_j|² < 2m/ħ² · e_cut.  Rows are ordered with the
    axis-2 index outermost and the axis-0 index innermost, which is the order
    VASP stores the coefficients in.
    """
    k = np.asarray(k, float)
    b = np.asarray(recip, float)
    sizes = [2 * m + 1 for m in max_g]

    i2, i1, i0 = np.meshgrid(np.arange(sizes[2]), np.arange(sizes[1]), np.arange(sizes[0]),
                             indexing="ij")
    n0 = k[0] + index_shift(i0, max_g[0])
    n1 = k[1] + index_shift(i1, max_g[1])
    n2 = k[2] + index_shift(i2, max_g[2])

    # same accumulation order as the writer: ((G2 + G1) + G0)
    g = (n2[..., None] * b[2] + n1[..., None] * b[1]) + n0[..., None] * b[0]
    norm_sq = g[..., 0] * g[..., 0] + g[..., 1] * g[..., 1] + g[..., 2] * g[..., 2]
    inside = (norm_sq < TWO_M_OVER_HBAR_SQ * e_cut).ravel()

    gs = np.stack([i0.ravel(), i1.ravel(), i2.ravel()], axis=1)
    return gs[inside].astype(np.intp)
