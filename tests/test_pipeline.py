import math

import numpy as np
import pytest

from ldoskit.io.ldos import HEADER_DTYPE, LdosWriter, read_ldos
from ldoskit.io.wavecar import BadWavecarFile, WavecarReader
from ldoskit.mapping import HeightDirection
from ldoskit.pipeline import (
    BadSupercellError, LdosStatistics, choose_height_direction, fft_size,
    process, supercell_height,
)


def reference_ldos(gs, coeffs, grid_sizes, axis):
    """Direct inverse DFT along *axis*; returns (Σ_∥ |ψ|², max |ψ|²) per band."""
    n = grid_sizes[axis]
    fast, slow = (axis + 1) % 3, (axis + 2) % 3
    z = np.arange(n)
    ldos = np.zeros((n, coeffs.shape[1]))
    cs_max = 0.0
    for ib in range(coeffs.shape[1]):
        columns = {}
        for g, c in zip(gs, coeffs[:, ib]):
            col = columns.setdefault((g[fast], g[slow]), np.zeros(n, complex))
            col += c * np.exp(2j * np.pi * z * g[axis] / n)
        for col in columns.values():
            sq = np.abs(col) ** 2
            ldos[:, ib] += sq
            cs_max = max(cs_max, sq.max())
    return ldos, cs_max


@pytest.mark.parametrize('norms, expected', [
    ((10.0, 10.0, 15.0), HeightDirection.A2),
    ((10.0, 15.0, 10.0), HeightDirection.A1),
    ((15.0, 10.0, 12.0), HeightDirection.A0),
])
def test_choose_height_direction(norms, expected):
    assert choose_height_direction(norms) is expected


@pytest.mark.parametrize('norms', [(10.0, 10.0, 10.0), (12.0, 12.0, 5.0), (3.0, 8.0, 8.0)])
def test_no_unique_longest_axis(norms):
    with pytest.raises(BadSupercellError, match='Bad supercell size'):
        choose_height_direction(norms)


def test_statistics_merge():
    a = LdosStatistics()
    a.update_energies([-1.0, 2.0])
    a.update_cs_sq(0.5)
    b = LdosStatistics()
    b.update_energies([-3.0, 0.0])
    b.update_cs_sq(0.25)
    c = LdosStatistics()

    merged = a.merge(b)
    assert (merged.energy_min, merged.energy_max, merged.cs_sq_max) == (-3.0, 2.0, 0.5)
    assert b.merge(a) == merged
    assert a.merge(c) == a
    assert c.energy_min == math.inf and c.energy_max == -math.inf


@pytest.mark.parametrize('single', [False, True])
def test_end_to_end_gamma(tmp_path, wavecar_factory, single):
    wc = wavecar_factory(n_bands=2, single=single)
    out = tmp_path / 'out.ldos'

    with WavecarReader(wc.path) as reader:
        direction = choose_height_direction(reader.lattice_norms)
        assert direction is HeightDirection.A2
        size = fft_size(reader, direction)
        assert size == (5, 25)
        with LdosWriter(out, reader.n_spins, reader.n_kpoints, reader.n_bands, size.size,
                        supercell_height(reader, direction), fermi_energy=0.0) as writer:
            stats = process(reader, writer, direction, progress=False)

    expected, cs_max = reference_ldos(wc.spheres[0], wc.coeffs[0][0], (5, 5, 5), axis=2)
    data = read_ldos(out)
    assert data.header.supercell_height == pytest.approx(15.0)
    assert data.header.n_layers == 5
    assert np.allclose(data.ldos[0, 0], expected, rtol=1e-5, atol=1e-5)
    assert stats.energy_min == pytest.approx(wc.energies.min())
    assert stats.energy_max == pytest.approx(wc.energies.max())
    assert stats.cs_sq_max == pytest.approx(cs_max, rel=1e-5)
    assert data.header.cs_sq_max == pytest.approx(cs_max, rel=1e-5)
    assert data.header.energy_min == stats.energy_min


def test_end_to_end_spins_and_kpoints(tmp_path, wavecar_factory):
    kpoints = ((0.0, 0.0, 0.0), (0.25, -0.25, 0.0), (0.0, 0.5, 0.4))
    lattice = np.array([[16.0, 0.0, 0.0], [0.0, 7.0, 0.0], [1.0, 0.0, 8.0]])
    wc = wavecar_factory(lattice=lattice, e_cut=6.0, kpoints=kpoints, n_spins=2, n_bands=3)
    out = tmp_path / 'out.ldos'

    with WavecarReader(wc.path) as reader:
        direction = choose_height_direction(reader.lattice_norms)
        assert direction is HeightDirection.A0
        grid_sizes = reader.grid_sizes
        with LdosWriter(out, reader.n_spins, reader.n_kpoints, reader.n_bands,
                        fft_size(reader, direction).size,
                        supercell_height(reader, direction), fermi_energy=1.0) as writer:
            process(reader, writer, direction, progress=False)

    data = read_ldos(out)
    assert data.ldos.shape == (2, 3, grid_sizes[0], 3)
    for isp in range(2):
        for ik in range(3):
            expected, _ = reference_ldos(wc.spheres[ik], wc.coeffs[isp][ik], grid_sizes, axis=0)
            assert np.allclose(data.ldos[isp, ik], expected, rtol=1e-5, atol=1e-5)
            assert np.allclose(data.kpoints[isp, ik], kpoints[ik])
            assert np.allclose(data.energies[isp, ik], wc.energies[isp, ik])


def test_layer_sum_is_norm(tmp_path, wavecar_factory):
    # Parseval: Σ_z Σ_∥ |ψ|² = N_z · Σ_G |c_G|²
    wc = wavecar_factory(n_bands=2)
    out = tmp_path / 'out.ldos'
    with WavecarReader(wc.path) as reader:
        direction = choose_height_direction(reader.lattice_norms)
        with LdosWriter(out, 1, 1, 2, 5, 15.0, 0.0) as writer:
            process(reader, writer, direction, progress=False)
    data = read_ldos(out)
    norms = np.sum(np.abs(wc.coeffs[0][0]) ** 2, axis=0)
    assert np.allclose(data.ldos[0, 0].sum(axis=0), 5 * norms, rtol=1e-5)


def test_plane_wave_mismatch_leaves_header_only(tmp_path, wavecar_factory):
    wc = wavecar_factory(nplw_offset=1)
    out = tmp_path / 'out.ldos'
    with WavecarReader(wc.path) as reader:
        direction = choose_height_direction(reader.lattice_norms)
        with LdosWriter(out, 1, 1, 2, 5, 15.0, 0.0) as writer:
            with pytest.raises(BadWavecarFile):
                process(reader, writer, direction, progress=False)
    assert out.stat().st_size == HEADER_DTYPE.itemsize
