#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
fft.py — Batched in-place 1-D inverse FFT over a column-major buffer
====================================================================
Thin wrapper around `scipy.fft.ifft` that mimics a planned batched
transform: constructed once for a (length, batch count, buffer) triple and
then executed repeatedly on the same buffer.

The transform is the *un-normalised* backward DFT

    x[j] = Σ_n X[n] · exp(+2πi j n / N)

applied to each contiguous column of the buffer (unit stride, distance
N between transforms).  `scipy.fft` keeps complex64 input in single
precision, so the precision of the WAVECAR is preserved.
"""

from __future__ import annotations

import numpy as np
import scipy.fft as sp_fft

from .matrix import Matrix

__all__ = ["FFTError", "InverseFFT"]


class FFTError(RuntimeError):
    """Raised when the FFT cannot be set up or executed."""


class InverseFFT:
    """In-place batched inverse transform along the rows of `buffer`."""

    def __init__(self, size: int, n_transforms: int, buffer: Matrix, *, workers: int = 1):
        if size <= 0 or n_transforms <= 0:
            raise FFTError(f"invalid FFT geometry: size={size}, n_transforms={n_transforms}")
        if buffer.shape != (size, n_transforms):
            raise FFTError(f"buffer shape {buffer.shape} does not match FFT geometry "
                           f"({size}, {n_transforms})")
        if buffer.dtype not in (np.dtype(np.complex64), np.dtype(np.complex128)):
            raise FFTError(f"complex buffer required, got {buffer.dtype}")
        if workers < 1:
            raise FFTError(f"workers must be >= 1, got {workers}")

        self.size = int(size)
        self.n_transforms = int(n_transforms)
        self.workers = int(workers)
        self._buffer = buffer

    def transform(self) -> None:
        arr = self._buffer.array
        try:
            arr[...] = sp_fft.ifft(arr, axis=0, norm="forward",
                                   overwrite_x=True, workers=self.workers)
        except (ValueError, TypeError, MemoryError) as err:
            raise FFTError(f"inverse FFT failed: {err}") from err
