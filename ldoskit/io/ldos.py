#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
ldos.py — Binary LDOS file writer and reader for ldoskit
=========================================================
Defines the on-disk layout of depth-resolved DOS files as explicit numpy
structured dtypes, shared by the streaming `LdosWriter` and by the
`read_ldos_header()` / `read_ldos()` decoders.

File layout (little-endian, packed, format version 103)
-------------------------------------------------------
Header (`HEADER_DTYPE`, 556 bytes):
    text             500 × char   human-readable description, space padded
    version          uint32       103
    n_spins          uint32
    n_kpoints        uint32
    n_bands          uint32
    n_layers         uint32       FFT grid size along the depth axis
    supercell_height float64      |a| along the depth axis (Å)
    fermi_energy     float64      eV
    energy_min       float64      ┐
    energy_max       float64      │ reserved, patched after all records
    cs_sq_max        float32      ┘

One record per (spin, k-point), spin outermost (`record_dtype()`):
    k                3 × float64
    energies         n_bands × float64
    occupations      n_bands × float64
    ldos             n_layers·n_bands × float32 (column-major slab)

Usage
-----
```python
with LdosWriter("out.ldos", n_spins=1, n_kpoints=4, n_bands=16,
                n_layers=45, supercell_height=30.0, fermi_energy=-1.2) as w:
    for ...:
        w.write_ldos(k, energies, occupations, slab)
    w.write_minmax_values(e_min, e_max, cs_sq_max)
```

License:
    MIT License (see LICENSE file)

Version:
    1.0.0
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass

import numpy as np

from ..constants import LDOS_FORMAT_VERSION, LDOS_HEADER_LENGTH, LDOS_HEADER_TITLE
from ..matrix import Matrix

logger = logging.getLogger("ldoskit.ldos")
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = [
    "HEADER_DTYPE", "MINMAX_DTYPE", "MINMAX_OFFSET", "record_dtype",
    "header_text", "LdosWriter", "LdosHeader", "LdosData",
    "read_ldos_header", "read_ldos",
]

# ---------------------------------------------------------------------
#  Schema
# ---------------------------------------------------------------------
MINMAX_DTYPE = np.dtype([
    ("energy_min", "<f8"),
    ("energy_max", "<f8"),
    ("cs_sq_max",  "<f4"),
])

HEADER_DTYPE = np.dtype([
    ("text",             f"S{LDOS_HEADER_LENGTH}"),
    ("version",          "<u4"),
    ("n_spins",          "<u4"),
    ("n_kpoints",        "<u4"),
    ("n_bands",          "<u4"),
    ("n_layers",         "<u4"),
    ("supercell_height", "<f8"),
    ("fermi_energy",     "<f8"),
    ("energy_min",       "<f8"),
    ("energy_max",       "<f8"),
    ("cs_sq_max",        "<f4"),
])

# byte offset of the reserved min/max block
MINMAX_OFFSET = HEADER_DTYPE.fields["energy_min"][1]


def record_dtype(n_bands: int, n_layers: int) -> np.dtype:
    return np.dtype([
        ("k",           "<f8", (3,)),
        ("energies",    "<f8", (n_bands,)),
        ("occupations", "<f8", (n_bands,)),
        ("ldos",        "<f4", (n_layers * n_bands,)),
    ])


def _date_time_string() -> str:
    return time.strftime("%a, %d %b %Y %H:%M:%S", time.localtime())


def header_text(n_kpoints: int, n_bands: int, n_layers: int,
                user_comment: str = "", *, created: str | None = None) -> bytes:
    """Description line, space padded (or truncated) to the fixed header width."""
    text = (f"{LDOS_HEADER_TITLE}, created on: {created or _date_time_string()}; "
            f"{n_kpoints} k points, {n_bands} bands, {n_layers} layers")
    if user_comment:
        text += f"; Comment: {user_comment}"
    raw = text.encode("utf-8")[:LDOS_HEADER_LENGTH]
    return raw.ljust(LDOS_HEADER_LENGTH, b" ")


# ---------------------------------------------------------------------
#  Writer
# ---------------------------------------------------------------------
class LdosWriter:
    """
    Streaming writer: the header is written on construction, records are
    appended by `write_ldos()`, and `write_minmax_values()` patches the
    reserved summary block in place.
    """

    def __init__(self, filename, n_spins: int, n_kpoints: int, n_bands: int, n_layers: int,
                 supercell_height: float, fermi_energy: float, user_comment: str = ""):
        for name, value in (("n_spins", n_spins), ("n_kpoints", n_kpoints),
                            ("n_bands", n_bands), ("n_layers", n_layers)):
            if int(value) <= 0:
                raise ValueError(f"[LdosWriter] {name} must be positive, got {value}")

        self.filename = os.fspath(filename)
        self.n_spins = int(n_spins)
        self.n_kpoints = int(n_kpoints)
        self.n_bands = int(n_bands)
        self.n_layers = int(n_layers)
        self.n_records = 0
        self._record_dtype = record_dtype(self.n_bands, self.n_layers)

        header = np.zeros(1, dtype=HEADER_DTYPE)
        header["text"] = header_text(self.n_kpoints, self.n_bands, self.n_layers, user_comment)
        header["version"] = LDOS_FORMAT_VERSION
        header["n_spins"] = self.n_spins
        header["n_kpoints"] = self.n_kpoints
        header["n_bands"] = self.n_bands
        header["n_layers"] = self.n_layers
        header["supercell_height"] = supercell_height
        header["fermi_energy"] = fermi_energy
        # energy_min / energy_max / cs_sq_max stay zero until patched

        self._fh = open(self.filename, "wb")
        try:
            self._write(header.tobytes())
        except Exception:
            self._fh.close()
            raise
        logger.debug(f"[LdosWriter] header written to {self.filename} "
                     f"({HEADER_DTYPE.itemsize} bytes, record size {self._record_dtype.itemsize})")

    # ------------------------------------------------------------------
    def _write(self, raw: bytes) -> None:
        written = self._fh.write(raw)
        if written != len(raw):
            raise OSError(f"[LdosWriter] short write to {self.filename}: "
                          f"{written} of {len(raw)} bytes")

    def write_ldos(self, k, energies, occupations, cs_sq) -> None:
        """Append one (spin, k-point) record; *cs_sq* is [n_layers, n_bands]."""
        energies = np.asarray(energies, dtype=np.float64)
        occupations = np.asarray(occupations, dtype=np.float64)
        slab = cs_sq.array if isinstance(cs_sq, Matrix) else np.asarray(cs_sq)

        if energies.shape != (self.n_bands,) or occupations.shape != (self.n_bands,):
            raise ValueError(f"[LdosWriter] expected {self.n_bands} energies/occupations, "
                             f"got {energies.shape} / {occupations.shape}")
        if slab.shape != (self.n_layers, self.n_bands):
            raise ValueError(f"[LdosWriter] LDOS slab must be ({self.n_layers}, {self.n_bands}), "
                             f"got {slab.shape}")

        record = np.zeros(1, dtype=self._record_dtype)
        record["k"] = np.asarray(k, dtype=np.float64).reshape(3)
        record["energies"] = energies
        record["occupations"] = occupations
        record["ldos"] = slab.astype(np.float32).ravel(order="F")
        self._write(record.tobytes())
        self.n_records += 1

    def write_minmax_values(self, energy_min: float, energy_max: float, cs_sq_max: float) -> None:
        if energy_min > energy_max:
            raise ValueError(f"[LdosWriter] energy_min={energy_min} exceeds energy_max={energy_max}")
        expected = self.n_spins * self.n_kpoints
        if self.n_records != expected:
            logger.warning(f"[LdosWriter] {self.n_records} records written, header announces {expected}")

        block = np.zeros(1, dtype=MINMAX_DTYPE)
        block["energy_min"] = energy_min
        block["energy_max"] = energy_max
        block["cs_sq_max"] = cs_sq_max

        position = self._fh.tell()
        self._fh.seek(MINMAX_OFFSET)
        self._write(block.tobytes())
        self._fh.seek(position)
        self._fh.flush()

    def close(self) -> None:
        fh = getattr(self, "_fh", None)
        if fh is not None and not fh.closed:
            fh.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


# ---------------------------------------------------------------------
#  Reader
# ---------------------------------------------------------------------
@dataclass
class LdosHeader:
    text: str
    version: int
    n_spins: int
    n_kpoints: int
    n_bands: int
    n_layers: int
    supercell_height: float
    fermi_energy: float
    energy_min: float
    energy_max: float
    cs_sq_max: float


@dataclass
class LdosData:
    header: LdosHeader
    kpoints: np.ndarray       # (n_spins, n_kpoints, 3)
    energies: np.ndarray      # (n_spins, n_kpoints, n_bands)
    occupations: np.ndarray   # (n_spins, n_kpoints, n_bands)
    ldos: np.ndarray          # (n_spins, n_kpoints, n_layers, n_bands)

    @property
    def depths(self) -> np.ndarray:
        """Position of each layer along the depth axis (Å)."""
        h = self.header
        return np.arange(h.n_layers) * (h.supercell_height / h.n_layers)


def _decode_header(raw: np.ndarray) -> LdosHeader:
    h = raw[0]
    if int(h["version"]) != LDOS_FORMAT_VERSION:
        raise ValueError(f"unsupported LDOS format version {int(h['version'])}")
    return LdosHeader(
        text=bytes(h["text"]).decode("utf-8", errors="replace").rstrip(" "),
        version=int(h["version"]),
        n_spins=int(h["n_spins"]),
        n_kpoints=int(h["n_kpoints"]),
        n_bands=int(h["n_bands"]),
        n_layers=int(h["n_layers"]),
        supercell_height=float(h["supercell_height"]),
        fermi_energy=float(h["fermi_energy"]),
        energy_min=float(h["energy_min"]),
        energy_max=float(h["energy_max"]),
        cs_sq_max=float(h["cs_sq_max"]),
    )


def read_ldos_header(filename) -> LdosHeader:
    with open(filename, "rb") as f:
        raw = f.read(HEADER_DTYPE.itemsize)
    if len(raw) < HEADER_DTYPE.itemsize:
        raise ValueError(f"{filename}: file too short for an LDOS header")
    return _decode_header(np.frombuffer(raw, dtype=HEADER_DTYPE, count=1))


def read_ldos(filename) -> LdosData:
    """Decode a complete LDOS file written by `LdosWriter`."""
    with open(filename, "rb") as f:
        raw = f.read()
    if len(raw) < HEADER_DTYPE.itemsize:
        raise ValueError(f"{filename}: file too short for an LDOS header")
    header = _decode_header(np.frombuffer(raw, dtype=HEADER_DTYPE, count=1))

    rec_dtype = record_dtype(header.n_bands, header.n_layers)
    n_records = header.n_spins * header.n_kpoints
    body = len(raw) - HEADER_DTYPE.itemsize
    if body != n_records * rec_dtype.itemsize:
        raise ValueError(f"{filename}: expected {n_records} records of {rec_dtype.itemsize} bytes, "
                         f"found {body} bytes of record data")

    records = np.frombuffer(raw, dtype=rec_dtype, count=n_records, offset=HEADER_DTYPE.itemsize)
    shape = (header.n_spins, header.n_kpoints)
    slabs = records["ldos"].reshape(n_records, header.n_bands, header.n_layers).transpose(0, 2, 1)
    return LdosData(
        header=header,
        kpoints=records["k"].reshape(shape + (3,)).copy(),
        energies=records["energies"].reshape(shape + (header.n_bands,)).copy(),
        occupations=records["occupations"].reshape(shape + (header.n_bands,)).copy(),
        ldos=slabs.reshape(shape + (header.n_layers, header.n_bands)).astype(np.float32),
    )
