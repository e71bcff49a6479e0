#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
matrix.py — Column-major dense matrices over a reusable backing store
=====================================================================
`Matrix` keeps a flat, contiguous 1-D numpy array and exposes it as a
Fortran-ordered 2-D view, so element (row, col) sits at flat index
``row + col * rows``.  This is the layout the batched FFT consumes
(one contiguous column per transform) and the layout in which LDOS
slabs are dumped to disk.

`resize()` only reallocates when the requested size exceeds the current
capacity; otherwise it re-views the existing storage.  FFT workspaces and
coefficient buffers are therefore reused across k-points without churn.

License:
    MIT License (see LICENSE file)

Version:
    1.0.0
"""

from __future__ import annotations

import numpy as np

__all__ = ["Matrix"]


class Matrix:
    """Dense column-major 2-D buffer of a fixed numpy dtype."""

    def __init__(self, rows: int = 0, cols: int = 0, dtype=np.float64):
        self._dtype = np.dtype(dtype)
        self._store = np.zeros(0, dtype=self._dtype)
        self._rows = 0
        self._cols = 0
        if rows or cols:
            self.resize(rows, cols)

    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def size(self) -> int:
        return self._rows * self._cols

    @property
    def shape(self) -> tuple[int, int]:
        return self._rows, self._cols

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def capacity(self) -> int:
        return self._store.size

    @property
    def data(self) -> np.ndarray:
        """Flat contiguous view, column after column."""
        return self._store[: self.size]

    @property
    def array(self) -> np.ndarray:
        """2-D Fortran-ordered view sharing memory with `data`."""
        return self.data.reshape((self._rows, self._cols), order="F")

    # ------------------------------------------------------------------
    def resize(self, rows: int, cols: int) -> "Matrix":
        rows, cols = int(rows), int(cols)
        if rows <= 0 or cols <= 0:
            raise ValueError(f"[Matrix] dimensions must be positive, got {rows}x{cols}")
        needed = rows * cols
        if needed > self._store.size:
            self._store = np.zeros(needed, dtype=self._dtype)
        self._rows, self._cols = rows, cols
        return self

    def fill(self, value) -> None:
        self.data.fill(value)

    def zero(self) -> None:
        self.data.fill(0)

    def column(self, col: int) -> np.ndarray:
        start = int(col) * self._rows
        return self._store[start:start + self._rows]

    def __getitem__(self, idx):
        return self.array[idx]

    def __setitem__(self, idx, value):
        self.array[idx] = value

    def __array__(self, dtype=None, copy=None):
        arr = self.array
        return arr if dtype is None else arr.astype(dtype)

    def __repr__(self) -> str:
        return f"Matrix({self._rows}x{self._cols}, dtype={self._dtype.name})"
