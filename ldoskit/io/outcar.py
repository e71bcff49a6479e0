#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
outcar.py — Minimal VASP OUTCAR reader (version string + Fermi energy)
======================================================================
Only two pieces of the OUTCAR are needed to annotate an LDOS file:

* the first non-blank line, which must start with "vasp" (any case) and is
  kept verbatim as the version string;
* the first line starting with "E-fermi", whose value after the colon is
  the Fermi energy in eV.  An unparsable value yields NaN.
"""

from __future__ import annotations

import logging
import math
import os

logger = logging.getLogger("ldoskit.outcar")
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = ["BadOutcarFile", "OutcarReader"]


class BadOutcarFile(ValueError):
    def __init__(self, err: str):
        super().__init__(f"Bad OUTCAR file: {err}")


class OutcarReader:
    """Parse `vasp_info` and `fermi_energy` from an OUTCAR file."""

    def __init__(self, filename="OUTCAR"):
        self.filename = os.fspath(filename)
        self.vasp_info = ""
        self.fermi_energy = math.nan
        self._read_file()

    def _read_file(self):
        with open(self.filename, "r", errors="replace") as f:
            lines = iter(f)

            for line in lines:
                if line.strip():
                    self.vasp_info = line.strip()
                    break
            if not self.vasp_info.lower().startswith("vasp"):
                raise BadOutcarFile("Bad header")

            for line in lines:
                line = line.lstrip()
                if not line.lower().startswith("e-fermi"):
                    continue
                _, colon, rest = line.partition(":")
                if not colon or not rest.strip():
                    continue
                self.fermi_energy = self._parse_energy(rest)
                break
            else:
                logger.warning(f"[OutcarReader] No E-fermi line found in {self.filename}")

    @staticmethod
    def _parse_energy(text: str) -> float:
        try:
            return float(text.split()[0])
        except (IndexError, ValueError):
            return math.nan
