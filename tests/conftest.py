"""Synthetic WAVECAR / OUTCAR builders shared by the test-suite."""
from types import SimpleNamespace

import numpy as np
import pytest

from ldoskit.constants import RTAG_DOUBLE, RTAG_SINGLE
from ldoskit.geometry import g_sphere, max_g_indices, reciprocal_lattice

# 10 x 10 x 15 Å tetragonal cell; with e_cut = 1.7 eV the Γ sphere is
# {0, ±b0, ±b1, ±b2} and every G grid is 5 points wide.
TETRAGONAL = np.diag([10.0, 10.0, 15.0])
SMALL_ECUT = 1.7


def build_wavecar(lattice, e_cut, kpoints, energies, occupations, coeffs=None, *,
                  single=False, nplw_offset=0, seed=0):
    """
    Return (raw bytes, spheres, coeffs) for a WAVECAR with
    energies/occupations shaped (n_spins, n_kpoints, n_bands).
    """
    lattice = np.asarray(lattice, float)
    kpoints = np.asarray(kpoints, float).reshape(-1, 3)
    energies = np.asarray(energies, float)
    occupations = np.asarray(occupations, float)
    n_spins, n_kpoints, n_bands = energies.shape
    ctype = np.complex64 if single else np.complex128

    recip = reciprocal_lattice(lattice)
    max_g = max_g_indices(lattice, e_cut)
    spheres = [g_sphere(k, recip, max_g, e_cut) for k in kpoints]

    if coeffs is None:
        rng = np.random.default_rng(seed)
        coeffs = [[(rng.normal(size=(len(s), n_bands)) + 1j * rng.normal(size=(len(s), n_bands)))
                   .astype(ctype) for s in spheres] for _ in range(n_spins)]

    itemsize = np.dtype(ctype).itemsize
    recl = max(24, 12 * 8, 8 * (4 + 3 * n_bands), max(len(s) for s in spheres) * itemsize)
    recl = (recl + 7) // 8 * 8

    records = [
        np.array([recl, n_spins, RTAG_SINGLE if single else RTAG_DOUBLE], float).tobytes(),
        np.concatenate([[n_kpoints, n_bands, e_cut], lattice.ravel()]).tobytes(),
    ]
    for isp in range(n_spins):
        for ik, k in enumerate(kpoints):
            band = np.zeros((n_bands, 3))
            band[:, 0] = energies[isp, ik]
            band[:, 2] = occupations[isp, ik]
            records.append(np.concatenate([[len(spheres[ik]) + nplw_offset], k, band.ravel()]).tobytes())
            for ib in range(n_bands):
                records.append(np.ascontiguousarray(coeffs[isp][ik][:, ib], dtype=ctype).tobytes())

    raw = b"".join(r.ljust(recl, b"\0") for r in records)
    return raw, spheres, coeffs


@pytest.fixture
def wavecar_factory(tmp_path):
    """Write a synthetic WAVECAR and return everything needed to check it."""
    def make(lattice=TETRAGONAL, e_cut=SMALL_ECUT, kpoints=((0.0, 0.0, 0.0),),
             energies=None, occupations=None, n_spins=1, n_bands=2, name="WAVECAR", **kw):
        n_kpoints = len(kpoints)
        if energies is None:
            energies = np.arange(n_spins * n_kpoints * n_bands, dtype=float).reshape(
                n_spins, n_kpoints, n_bands) * 0.5 - 3.0
        if occupations is None:
            occupations = np.where(np.asarray(energies) < 0.0, 1.0, 0.0)
        raw, spheres, coeffs = build_wavecar(lattice, e_cut, kpoints, energies, occupations, **kw)
        path = tmp_path / name
        path.write_bytes(raw)
        return SimpleNamespace(path=path, raw=raw, spheres=spheres, coeffs=coeffs,
                               energies=np.asarray(energies, float),
                               occupations=np.asarray(occupations, float),
                               kpoints=np.asarray(kpoints, float).reshape(-1, 3),
                               lattice=np.asarray(lattice, float), e_cut=e_cut)
    return make


@pytest.fixture
def outcar_file(tmp_path):
    path = tmp_path / "OUTCAR"
    path.write_text(
        " vasp.6.3.0 18Jan22 (build Feb 02 2022) complex\n"
        "\n"
        " executed on             LinuxIFC date 2024.01.01  12:00:00\n"
        "   E-fermi :  -1.2345     XC(G=0): -10.1234     alpha+bet : -9.8765\n"
    )
    return path
