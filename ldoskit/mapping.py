#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
mapping.py — Scatter G-sphere coefficients into the dense FFT buffer
=====================================================================
The depth ("height") axis of the LDOS is one of the three lattice vectors.
Its G index becomes the FFT row; the two in-plane G indices are flattened
into the column:

    A0 :  (g0, g1 + g2 · size_g1)
    A1 :  (g1, g2 + g0 · size_g2)
    A2 :  (g2, g0 + g1 · size_g0)

Grid cells outside the sphere stay zero.
"""

from __future__ import annotations

import enum

import numpy as np

from .matrix import Matrix

__all__ = ["HeightDirection", "map_g_sphere_to_grid"]


class HeightDirection(enum.IntEnum):
    A0 = 0
    A1 = 1
    A2 = 2

    @property
    def axis(self) -> int:
        return int(self)

    @property
    def in_plane_axes(self) -> tuple[int, int]:
        """(fast, slow) in-plane axes of the flattened column index."""
        return (self.axis + 1) % 3, (self.axis + 2) % 3

    def in_plane_size(self, grid_sizes) -> int:
        fast, slow = self.in_plane_axes
        return int(grid_sizes[fast]) * int(grid_sizes[slow])

    def grid_positions(self, gs, grid_sizes):
        """Row and column of every sphere point in the [depth, in-plane] buffer."""
        gs = np.asarray(gs)
        fast, slow = self.in_plane_axes
        rows = gs[:, self.axis]
        cols = gs[:, fast] + gs[:, slow] * int(grid_sizes[fast])
        return rows, cols


def map_g_sphere_to_grid(buffer: Matrix, gs, coeffs, direction: HeightDirection, grid_sizes) -> None:
    """
    Zero *buffer* and place coefficient ``coeffs[ipw]`` of sphere point
    ``gs[ipw]`` at its grid position for the chosen height direction.
    """
    buffer.zero()
    if len(gs) == 0:
        return
    rows, cols = direction.grid_positions(gs, grid_sizes)
    buffer.array[rows, cols] = coeffs
