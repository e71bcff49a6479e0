#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
wavecar.py — Binary VASP WAVECAR reader for ldoskit
===================================================
Parses the fixed-record *WAVECAR* layout written by VASP and returns, one
(spin, k-point) at a time, the plane-wave grid indices, band energies,
occupations and the complex coefficient matrix needed by the LDOS
pipeline.

File layout
-----------
Every record is `record_length` bytes long; all metadata is stored as
float64.

    record 0            : record_length, nspin, RTAG
    record 1            : nkpts, nbands, encut, a0, a1, a2
    for spin, for k     :
      record r          : nplw, kx, ky, kz, (E, Im E, occ) × nbands
      records r+1..r+nb : nplw complex coefficients (complex64 for
                          RTAG=45200, complex128 for RTAG=45210)

with ``r = 2 + (nbands + 1) * (spin * nkpts + k)``.

The plane-wave G-vectors are *not* stored; they are rebuilt from the
lattice, cutoff and k-vector (see `geometry.g_sphere`) and their count is
checked against `nplw` on every read.

Usage
-----
```python
from ldoskit.io.wavecar import WavecarReader

with WavecarReader("WAVECAR") as wc:
    data = wc.new_kpoint_data()
    for isp in range(wc.n_spins):
        for ik in range(wc.n_kpoints):
            wc.get_kpoint_data(isp, ik, data)
```

License:
    MIT License (see LICENSE file)

Version:
    1.0.0
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import numpy as np

from ..constants import RTAG_SINGLE, RTAG_DOUBLE
from ..geometry import (
    cell_lengths, cell_parameters, g_sphere, max_g_indices, reciprocal_lattice,
)
from ..matrix import Matrix

logger = logging.getLogger("ldoskit.wavecar")
if not logger.handlers:
    logger.addHandler(logging.NullHandler())  # stay silent unless main sets a handler

__all__ = ["BadWavecarFile", "KpointData", "WavecarReader", "to_positive_int"]


class BadWavecarFile(ValueError):
    """Raised when a WAVECAR violates the expected format."""

    def __init__(self, err: str):
        super().__init__(f"Bad WAVECAR: {err}")


def to_positive_int(x: float) -> int:
    """Cast a stored float64 count to int, refusing fractional or non-positive values."""
    if not np.isfinite(x) or x <= 0 or x != int(x):
        raise BadWavecarFile(f"Positive integral value expected, got {x!r}")
    return int(x)


@dataclass
class KpointData:
    """
    Scratch structure filled by `WavecarReader.get_kpoint_data`.

    Buffers are resized in place, so one instance can be reused for every
    (spin, k-point) of a file.
    """
    dtype: np.dtype = field(default_factory=lambda: np.dtype(np.complex128))
    k: np.ndarray = field(default_factory=lambda: np.zeros(3))
    n_plane_waves: int = 0
    energies: np.ndarray = field(default_factory=lambda: np.zeros(0))
    occupations: np.ndarray = field(default_factory=lambda: np.zeros(0))
    gs: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.intp))
    coeffs: Matrix = None

    def __post_init__(self):
        self.dtype = np.dtype(self.dtype)
        if self.coeffs is None:
            self.coeffs = Matrix(dtype=self.dtype)


class WavecarReader:
    """
    Reader for VASP WAVECAR files (collinear, standard k-point layout, not gamma-only).

    wavecar : path or binary file object
    """

    def __init__(self, wavecar="WAVECAR"):
        if hasattr(wavecar, "read"):
            self.filename = getattr(wavecar, "name", "<stream>")
            self._fh = wavecar
            self._owns_fh = False
        else:
            self.filename = os.fspath(wavecar)
            self._fh = open(self.filename, "rb")   # OSError names the file
            self._owns_fh = True

        self.record_length = None   # in BYTES
        self.rtag          = None
        self.n_spins       = None
        self.n_kpoints     = None
        self.n_bands       = None
        self.e_cut         = None
        self.lattice       = None   # rows a0, a1, a2 (Å)
        self.reciprocal    = None   # rows b0, b1, b2 (Å⁻¹, with 2π)
        self.max_g         = None
        self._dtype        = None

        try:
            self._read_header()
            self._compute_reciprocal()
        except Exception:
            self.close()
            raise

        logger.debug(f"[WavecarReader] LOADED => nspin={self.n_spins}, nkpts={self.n_kpoints}, "
                     f"nbands={self.n_bands}, encut={self.e_cut:.3f}, rtag={self.rtag:.0f}")

    # ------------------------------------------------------------------
    # resource handling
    # ------------------------------------------------------------------
    def close(self):
        fh = getattr(self, "_fh", None)
        if fh is not None and self._owns_fh and not fh.closed:
            fh.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ------------------------------------------------------------------
    # header-derived properties
    # ------------------------------------------------------------------
    @property
    def is_single_precision(self) -> bool:
        return self.rtag == RTAG_SINGLE

    @property
    def is_double_precision(self) -> bool:
        return self.rtag == RTAG_DOUBLE

    @property
    def dtype(self) -> np.dtype:
        """Complex dtype of the stored coefficients."""
        return self._dtype

    @property
    def a0(self):
        return self.lattice[0]

    @property
    def a1(self):
        return self.lattice[1]

    @property
    def a2(self):
        return self.lattice[2]

    @property
    def a0_norm(self) -> float:
        return float(self._norms[0])

    @property
    def a1_norm(self) -> float:
        return float(self._norms[1])

    @property
    def a2_norm(self) -> float:
        return float(self._norms[2])

    @property
    def lattice_norms(self) -> tuple[float, float, float]:
        return self.a0_norm, self.a1_norm, self.a2_norm

    @property
    def max_g0(self) -> int:
        return self.max_g[0]

    @property
    def max_g1(self) -> int:
        return self.max_g[1]

    @property
    def max_g2(self) -> int:
        return self.max_g[2]

    @property
    def size_g0(self) -> int:
        return 2 * self.max_g[0] + 1

    @property
    def size_g1(self) -> int:
        return 2 * self.max_g[1] + 1

    @property
    def size_g2(self) -> int:
        return 2 * self.max_g[2] + 1

    @property
    def grid_sizes(self) -> tuple[int, int, int]:
        return self.size_g0, self.size_g1, self.size_g2

    # ------------------------------------------------------------------
    # low-level I/O
    # ------------------------------------------------------------------
    def _seek_record(self, irec: int) -> None:
        self._fh.seek(int(irec) * self.record_length, 0)

    def _read(self, dtype, count: int, what: str) -> np.ndarray:
        dtype = np.dtype(dtype)
        raw = self._fh.read(dtype.itemsize * count)
        if len(raw) < dtype.itemsize * count:
            raise BadWavecarFile(f"Unexpected end of file while reading {what} "
                                 f"(expected {count} values, got {len(raw) // dtype.itemsize})")
        return np.frombuffer(raw, dtype=dtype, count=count)

    # ------------------------------------------------------------------
    # header
    # ------------------------------------------------------------------
    def _read_header(self):
        """
        Record 0 => [ record_length, nspin, rtag ]
        Record 1 => [ nkpts, nbands, encut, 9-lattice ]
        """
        self._fh.seek(0)
        recl, nspin, rtag = self._read(np.float64, 3, "the first record")

        self.record_length = to_positive_int(recl)
        self.n_spins       = to_positive_int(nspin)

        if rtag == RTAG_SINGLE:
            self._dtype = np.dtype(np.complex64)
            logger.debug("[WavecarReader] Single-precision WAVECAR (RTAG=45200).")
        elif rtag == RTAG_DOUBLE:
            self._dtype = np.dtype(np.complex128)
            logger.debug("[WavecarReader] Double-precision WAVECAR (RTAG=45210).")
        else:
            raise BadWavecarFile(f"Unsupported RTAG value {rtag!r}")
        self.rtag = float(rtag)

        self._seek_record(1)
        head2 = self._read(np.float64, 12, "the second record")

        self.n_kpoints = to_positive_int(head2[0])
        self.n_bands   = to_positive_int(head2[1])
        self.e_cut     = float(head2[2])
        self.lattice   = head2[3:12].reshape(3, 3).copy()

    def _compute_reciprocal(self):
        try:
            self.reciprocal = reciprocal_lattice(self.lattice)
        except ValueError as err:
            raise BadWavecarFile(str(err)) from err
        self._norms = cell_lengths(self.lattice)
        self.max_g = max_g_indices(self.lattice, self.e_cut)

    # ------------------------------------------------------------------
    # per-k-point data
    # ------------------------------------------------------------------
    def new_kpoint_data(self) -> KpointData:
        """Empty scratch structure with this file's coefficient dtype."""
        return KpointData(dtype=self._dtype)

    def g_sphere(self, k) -> np.ndarray:
        """Plane-wave grid indices for the fractional wavevector *k*."""
        return g_sphere(k, self.reciprocal, self.max_g, self.e_cut)

    def get_kpoint_data(self, spin: int, kpoint: int, data: KpointData | None = None) -> KpointData:
        """
        Fill *data* (or a fresh `KpointData`) with the block of (spin, kpoint).

          irec = 2 + (nbands + 1) * (spin * nkpts + kpoint)
          record irec        => [ nplw, kx, ky, kz ] + 3*nbands (E, Im E, occ)
          records irec+1+ib  => nplw complex coefficients of band ib
        """
        if not (0 <= spin < self.n_spins):
            raise IndexError(f"[get_kpoint_data] spin={spin} out of range (0..{self.n_spins-1}).")
        if not (0 <= kpoint < self.n_kpoints):
            raise IndexError(f"[get_kpoint_data] kpoint={kpoint} out of range (0..{self.n_kpoints-1}).")
        if data is None:
            data = self.new_kpoint_data()
        elif data.dtype != self._dtype:
            raise TypeError(f"[get_kpoint_data] buffer dtype {data.dtype} does not match "
                            f"WAVECAR precision {self._dtype}")

        irec = 2 + (self.n_bands + 1) * (spin * self.n_kpoints + kpoint)
        self._seek_record(irec)
        block = self._read(np.float64, 4 + 3 * self.n_bands,
                           f"the k-point header (spin={spin}, kpoint={kpoint})")

        data.n_plane_waves = to_positive_int(block[0])
        data.k = block[1:4].copy()

        # each band => (energy, imaginary part of energy [skipped], occupation)
        band_data = block[4:].reshape((self.n_bands, 3))
        data.energies = band_data[:, 0].copy()
        data.occupations = band_data[:, 2].copy()

        data.gs = self.g_sphere(data.k)
        if len(data.gs) != data.n_plane_waves:
            raise BadWavecarFile(f"Inconsistent number of plane waves "
                                 f"(file: {data.n_plane_waves}, G-sphere: {len(data.gs)}; "
                                 f"spin={spin}, kpoint={kpoint})")

        data.coeffs.resize(data.n_plane_waves, self.n_bands)
        for ib in range(self.n_bands):
            self._seek_record(irec + 1 + ib)
            data.coeffs.column(ib)[:] = self._read(self._dtype, data.n_plane_waves,
                                                   f"coefficients of band {ib}")
        return data

    # ------------------------------------------------------------------
    def info(self) -> dict:
        """Summary used by the inspect-only printout."""
        return {
            "filename": self.filename,
            "precision": "single" if self.is_single_precision else "double",
            "n_spins": self.n_spins,
            "n_kpoints": self.n_kpoints,
            "n_bands": self.n_bands,
            "e_cut": self.e_cut,
            "lattice": self.lattice.copy(),
            "cellpar": cell_parameters(self.lattice),
            "grid_sizes": self.grid_sizes,
        }
