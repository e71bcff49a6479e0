#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
logging_utils.py — Centralized logging and runtime banners for ldoskit
======================================================================
Provides the standard logger used by the `ldoskit` command: messages are
mirrored to stdout and, unless disabled, to a timestamped UTF-8 log file.

Main functions
---------------
- **setup_logger(name='ldoskit', log_file=True)**
    Configure and return a non-propagating `logging.Logger` with a console
    handler and (optionally) a `ldos_run_YYYY-MM-DD_HHMMSS.log` file handler.
    Stale `ldos_run_*.log` files in the working directory are removed first.

- **banner(logger)**
    Display the standardized start banner.

- **log_wavecar_info(logger, info)** / **log_outcar_info(logger, reader)**
    Human-readable summaries of the input files.

Logging format
---------------
- **Message format:**   `%(asctime)s  %(levelname)8s: %(message)s`
- **Timestamp format:** `%Y-%m-%d %H:%M:%S`

License:
    MIT License (see LICENSE file)

Version:
    1.0.0
"""


from __future__ import annotations
import logging, sys, datetime, glob, os

LOG_FMT  = "%(asctime)s  %(levelname)8s: %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"

def setup_logger(name: str = "ldoskit", *, log_file: bool = True,
                 level: int = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers before touching old logs (a previous run may hold one open)
    for h in list(logger.handlers):
        h.close()
    logger.handlers.clear()

    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(logging.Formatter(LOG_FMT, DATE_FMT))
    logger.addHandler(ch)

    if log_file:
        for old in glob.glob("ldos_run_*.log"):
            try:
                os.remove(old)
            except OSError:
                pass
        stamp = datetime.datetime.now().strftime("%Y-%m-%d_%H%M%S")
        fh = logging.FileHandler(f"ldos_run_{stamp}.log", mode="w", encoding="utf-8")
        fh.setFormatter(logging.Formatter(LOG_FMT, DATE_FMT))
        logger.addHandler(fh)

    return logger

def banner(logger: logging.Logger) -> None:
    logger.info("═"*70)
    logger.info(" Depth-resolved DOS from VASP WAVECAR ")
    logger.info("═"*70)

def log_outcar_info(logger: logging.Logger, reader) -> None:
    logger.info(f"OUTCAR file  : {reader.filename}")
    logger.info(f"VASP info    : {reader.vasp_info}")
    logger.info(f"Fermi energy : {reader.fermi_energy} eV")

def log_wavecar_info(logger: logging.Logger, info: dict) -> None:
    a, b, c, alpha, beta, gamma = info["cellpar"]
    logger.info(f"WAVECAR file : {info['filename']}")
    logger.info(f"Precision    : {info['precision']}")
    logger.info(f"Number of spin components: {info['n_spins']}")
    logger.info(f"Number of k-points       : {info['n_kpoints']}")
    logger.info(f"Number of bands          : {info['n_bands']}")
    logger.info(f"Cut-off energy           : {info['e_cut']} eV")
    logger.info("Direct lattice:")
    for i, vec in enumerate(info["lattice"], start=1):
        logger.info(f" a{i} = ({vec[0]:.5f}, {vec[1]:.5f}, {vec[2]:.5f}) Ang")
    logger.info(f"Cell parameters: a={a:.5f} b={b:.5f} c={c:.5f} Ang, "
                f"alpha={alpha:.3f} beta={beta:.3f} gamma={gamma:.3f} deg")
    n0, n1, n2 = info["grid_sizes"]
    logger.info(f"G-lattice size: {n0} x {n1} x {n2}")
