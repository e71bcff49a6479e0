#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
plotting.py — Tables and figures from a finished LDOS file
==========================================================
Post-processing helpers operating on `LdosData` (see `io.ldos.read_ldos`):

- band_table(data)               : pandas DataFrame, one row per (spin, k, band).
- save_band_table(data, path)    : the same table as CSV.
- layer_resolved_dos(data, E, σ) : Gaussian-broadened DOS(z, E).
- plot_layer_dos(data, filename) : colour map of DOS(z, E − E_F).
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

logger = logging.getLogger("ldoskit")

__all__ = ["band_table", "save_band_table", "layer_resolved_dos", "plot_layer_dos"]


def band_table(data) -> pd.DataFrame:
    """
    Flatten energies/occupations and the layer-summed weight of every band.
    Columns: spin, kpoint, kx, ky, kz, band, energy, occupation, weight.
    """
    h = data.header
    spin, kpt, band = np.meshgrid(np.arange(h.n_spins), np.arange(h.n_kpoints),
                                  np.arange(h.n_bands), indexing="ij")
    kvec = np.broadcast_to(data.kpoints[:, :, None, :], (h.n_spins, h.n_kpoints, h.n_bands, 3))
    weight = data.ldos.sum(axis=2, dtype=np.float64)   # sum over layers

    return pd.DataFrame({
        "spin": spin.ravel(),
        "kpoint": kpt.ravel(),
        "kx": kvec[..., 0].ravel(),
        "ky": kvec[..., 1].ravel(),
        "kz": kvec[..., 2].ravel(),
        "band": band.ravel(),
        "energy": data.energies.ravel(),
        "occupation": data.occupations.ravel(),
        "weight": weight.ravel(),
    })


def save_band_table(data, path: str) -> str:
    df = band_table(data)
    df.to_csv(path, index=False)
    logger.info(f"Band table ({len(df)} rows) → {path}")
    return path


def layer_resolved_dos(data, energy_grid, sigma: float) -> np.ndarray:
    """
    DOS(z, E) = 1/N_k Σ_{s,k,b} LDOS[s,k,z,b] · g_σ(E − ε_{s,k,b})

    with a unit-area Gaussian g_σ.  Returns shape (n_layers, len(energy_grid)).
    """
    if sigma <= 0:
        raise ValueError("sigma must be positive")
    h = data.header
    e = np.asarray(energy_grid, float)

    eps = data.energies.reshape(-1)                                        # (S·K·B,)
    weights = data.ldos.transpose(0, 1, 3, 2).reshape(-1, h.n_layers)     # (S·K·B, L)
    gauss = np.exp(-0.5 * ((e[None, :] - eps[:, None]) / sigma) ** 2) / (sigma * np.sqrt(2.0 * np.pi))
    return (weights.astype(np.float64).T @ gauss) / h.n_kpoints


def plot_layer_dos(data, filename: str = "ldos_map.png", *, sigma: float = 0.05,
                   n_energies: int = 400, cmap: str = "inferno") -> str:
    """Render DOS(z, E − E_F) and save it to *filename*."""
    h = data.header
    e_f = h.fermi_energy if np.isfinite(h.fermi_energy) else 0.0
    e_lo = float(data.energies.min()) - 3.0 * sigma
    e_hi = float(data.energies.max()) + 3.0 * sigma
    energies = np.linspace(e_lo, e_hi, int(n_energies))
    dos = layer_resolved_dos(data, energies, sigma)

    fig, ax = plt.subplots(figsize=(7, 5))
    mesh = ax.pcolormesh(energies - e_f, data.depths, dos, shading="auto", cmap=cmap)
    fig.colorbar(mesh, ax=ax, label="LDOS (arb. units)")
    ax.axvline(0.0, color="w", ls="--", lw=0.8)
    ax.set_xlabel(r"$E - E_F$ (eV)")
    ax.set_ylabel("Depth (Å)")
    ax.set_title(f"Layer-resolved DOS (σ = {sigma} eV)")
    ax.tick_params(which="both", direction="in", top=True, right=True)
    fig.tight_layout()
    fig.savefig(filename, dpi=200)
    plt.close(fig)
    logger.info(f"Layer-resolved DOS map → {filename}")
    return filename
