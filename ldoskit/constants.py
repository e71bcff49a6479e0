#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
constants.py — Physical constants and file-format tags for ldoskit
==================================================================
Single authoritative source for the numbers that define the WAVECAR
plane-wave basis and the LDOS output layout.

Defined constants
-----------------
Physics:
    PI, TWO_PI, TWO_M_OVER_HBAR_SQ (2mₑ/ħ² in 1/(eV·Å²), VASP convention)
WAVECAR:
    RTAG_SINGLE, RTAG_DOUBLE (precision tags of the first record)
LDOS:
    LDOS_FORMAT_VERSION, LDOS_HEADER_LENGTH, LDOS_HEADER_TITLE

Usage
-----
    from ldoskit.constants import TWO_M_OVER_HBAR_SQ
    g_cut_sq = TWO_M_OVER_HBAR_SQ * e_cut

License:
    MIT License (see LICENSE file)

Version:
    1.0.0
"""


import numpy as np

# --- canonical internal values (underscore names) ---
_PI                 = np.pi
_TWO_M_OVER_HBAR_SQ = 0.262465831    # 1/(eV·Å²), = 1/HSQDTM used by VASP
_RTAG_SINGLE        = 45200.0
_RTAG_DOUBLE        = 45210.0

# --- public aliases ---
PI     = _PI
TWO_PI = 2.0 * _PI

# Kinetic energy cutoff → |G|² cutoff
TWO_M_OVER_HBAR_SQ = _TWO_M_OVER_HBAR_SQ

# WAVECAR precision tags
RTAG_SINGLE = _RTAG_SINGLE
RTAG_DOUBLE = _RTAG_DOUBLE

# LDOS output file
LDOS_FORMAT_VERSION = 103
LDOS_HEADER_LENGTH  = 500
LDOS_HEADER_TITLE   = "Depth-k resolved DOS data file"

__all__ = [
    "PI", "TWO_PI",
    "TWO_M_OVER_HBAR_SQ",
    "RTAG_SINGLE", "RTAG_DOUBLE",
    "LDOS_FORMAT_VERSION", "LDOS_HEADER_LENGTH", "LDOS_HEADER_TITLE",
]
