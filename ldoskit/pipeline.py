#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pipeline.py — Depth-resolved DOS accumulation
=============================================
Drives the WAVECAR → LDOS conversion:

1. pick the depth axis as the strictly longest lattice vector;
2. for every spin and k-point, read the plane-wave coefficients;
3. for every band, scatter the G-sphere into a [depth, in-plane] grid,
   run one batched inverse FFT along the depth axis and sum |ψ|² over the
   in-plane FFT index;
4. stream one record per (spin, k-point) to the writer and finally patch
   the global energy / |ψ|² extrema.

Key functions
--------------
- choose_height_direction(norms) : depth axis, or BadSupercellError.
- fft_size(reader, direction)    : (transform length, batch count).
- supercell_height(reader, dir)  : |a| along the depth axis (Å).
- process(reader, writer, dir)   : full accumulation, returns LdosStatistics.

License:
    MIT License (see LICENSE file)

Version:
    1.0.0
"""

from __future__ import annotations

import logging
import math
import sys
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from tqdm import tqdm

from .fft import InverseFFT
from .mapping import HeightDirection, map_g_sphere_to_grid
from .matrix import Matrix

logger = logging.getLogger("ldoskit")

__all__ = [
    "BadSupercellError",
    "FftSize",
    "LdosStatistics",
    "choose_height_direction",
    "fft_size",
    "supercell_height",
    "process",
]

TQDM_KW = {"leave": False}


class BadSupercellError(RuntimeError):
    """The depth axis cannot be chosen (no strictly longest lattice vector)."""


class FftSize(NamedTuple):
    size: int
    n_transforms: int


@dataclass
class LdosStatistics:
    """Running extrema threaded through the k-point loop."""
    energy_min: float = math.inf
    energy_max: float = -math.inf
    cs_sq_max: float = -math.inf

    def update_energies(self, energies) -> None:
        energies = np.asarray(energies, float)
        if energies.size:
            self.energy_min = min(self.energy_min, float(energies.min()))
            self.energy_max = max(self.energy_max, float(energies.max()))

    def update_cs_sq(self, value: float) -> None:
        self.cs_sq_max = max(self.cs_sq_max, float(value))

    def merge(self, other: "LdosStatistics") -> "LdosStatistics":
        """Associative, order-independent combination of two partial results."""
        return LdosStatistics(
            energy_min=min(self.energy_min, other.energy_min),
            energy_max=max(self.energy_max, other.energy_max),
            cs_sq_max=max(self.cs_sq_max, other.cs_sq_max),
        )


# ────────────────────────────────────────────────────────────────────
# Geometry of the transform
# ────────────────────────────────────────────────────────────────────
def choose_height_direction(norms) -> HeightDirection:
    """Lattice axis with strictly the greatest norm; ties are rejected."""
    n0, n1, n2 = (float(x) for x in norms)
    if n0 > n1 and n0 > n2:
        return HeightDirection.A0
    if n1 > n2 and n1 > n0:
        return HeightDirection.A1
    if n2 > n0 and n2 > n1:
        return HeightDirection.A2
    raise BadSupercellError(f"Bad supercell size: no unique longest lattice vector "
                            f"(|a0|={n0:.6f}, |a1|={n1:.6f}, |a2|={n2:.6f})")


def fft_size(reader, direction: HeightDirection) -> FftSize:
    sizes = reader.grid_sizes
    return FftSize(size=int(sizes[direction.axis]),
                   n_transforms=direction.in_plane_size(sizes))


def supercell_height(reader, direction: HeightDirection) -> float:
    return float(reader.lattice_norms[direction.axis])


# ────────────────────────────────────────────────────────────────────
# Accumulation
# ────────────────────────────────────────────────────────────────────
def accumulate_kpoint(kpoint_data, buffer: Matrix, accumulator: Matrix, fft: InverseFFT,
                      direction: HeightDirection, grid_sizes,
                      stats: LdosStatistics) -> None:
    """Transform every band of one k-point and add Σ_∥ |ψ|² into *accumulator*."""
    accumulator.zero()
    acc = accumulator.array
    for ib in range(kpoint_data.coeffs.cols):
        stats.update_energies(kpoint_data.energies[ib:ib + 1])

        map_g_sphere_to_grid(buffer, kpoint_data.gs, kpoint_data.coeffs.column(ib),
                             direction, grid_sizes)
        fft.transform()

        c = buffer.array
        sq = (c.real * c.real + c.imag * c.imag).astype(np.float32)
        stats.update_cs_sq(sq.max())
        # sum over G∥
        acc[:, ib] += sq.sum(axis=1, dtype=np.float64)


def process(reader, writer, direction: HeightDirection, *,
            workers: int = 1, progress: bool = True) -> LdosStatistics:
    """
    Run the full spin × k-point loop, writing one record per pair and
    patching the summary block of *writer* at the end.
    """
    size = fft_size(reader, direction)
    grid_sizes = reader.grid_sizes
    logger.info(f"Height direction: a{direction.axis}  "
                f"(FFT length {size.size}, {size.n_transforms} transforms per band)")

    buffer = Matrix(size.size, size.n_transforms, dtype=reader.dtype)
    accumulator = Matrix(size.size, reader.n_bands, dtype=np.float32)
    kpoint_data = reader.new_kpoint_data()
    fft = InverseFFT(size.size, size.n_transforms, buffer, workers=workers)

    stats = LdosStatistics()
    pairs = [(isp, ik) for isp in range(reader.n_spins) for ik in range(reader.n_kpoints)]
    disable = not progress or not sys.stdout.isatty()

    for isp, ik in tqdm(pairs, desc="LDOS (spin, k-point)", disable=disable, **TQDM_KW):
        reader.get_kpoint_data(isp, ik, kpoint_data)
        accumulate_kpoint(kpoint_data, buffer, accumulator, fft, direction, grid_sizes, stats)
        writer.write_ldos(kpoint_data.k, kpoint_data.energies, kpoint_data.occupations, accumulator)
        logger.debug(f"[process] spin={isp} k={ik}: {kpoint_data.n_plane_waves} plane waves")

    writer.write_minmax_values(stats.energy_min, stats.energy_max, stats.cs_sq_max)
    logger.info(f"Energy range: {stats.energy_min:.4f} .. {stats.energy_max:.4f} eV; "
                f"max |psi|^2 = {stats.cs_sq_max:.6g}")
    return stats
