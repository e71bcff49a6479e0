#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
cli.py — Command-line interface and configuration parser for ldoskit
====================================================================
Defines the `ldoskit` argument parser and the optional `ldos.inp`
configuration file.  Values from the `[LDOS]` section become the parser
defaults, so anything given on the command line wins.

Responsibilities
----------------
•  Parse command-line arguments (via argparse).
•  Read and normalize `ldos.inp` (inline comments, blank values ignored,
   malformed numbers fall back to the default with a warning).
•  Validate numeric options (broadening σ, FFT worker count).

Key functions
--------------
- parse_arguments(argv)              : Central parser returning a validated args object.
- _extract_input_file_from_argv()    : Detects the configuration file name on the CLI.
- read_config(path)                  : Defaults overridden by `ldos.inp`.

Typical usage
--------------
    from ldoskit.cli import parse_arguments
    args = parse_arguments(sys.argv[1:])

When `--ldos` is absent the program only prints the WAVECAR/OUTCAR
summary and exits successfully.

License:
    MIT License (see LICENSE file)

Version:
    1.0.0
"""


from __future__ import annotations

import os
import argparse
import configparser
import logging

logger = logging.getLogger("ldoskit")

DEFAULT_PARAMS = {
    'wavecar': 'WAVECAR',
    'outcar': 'OUTCAR',
    'fermi': None,
    'ldos': None,
    'comment': '',
    'bands_csv': None,
    'plot': None,
    'sigma': 0.05,
    'workers': 1,
    'input_file': 'ldos.inp',
}


def _extract_input_file_from_argv(argv, default_name="ldos.inp"):
    """
    Return the config file path specified on the command line if present,
    supporting both '--input_file foo' and '--input_file=foo'.
    """
    if argv is None:
        argv = []

    for i, tok in enumerate(argv):
        if tok.startswith("--input_file="):
            return tok.split("=", 1)[1]
        if tok == "--input_file" and i + 1 < len(argv):
            return argv[i + 1]

    return default_name


def read_config(input_file: str) -> dict:
    """Return a copy of DEFAULT_PARAMS updated from the [LDOS] section of *input_file*."""
    params = dict(DEFAULT_PARAMS)
    params['input_file'] = input_file
    if not os.path.exists(input_file):
        return params

    cfg = configparser.ConfigParser(
        inline_comment_prefixes=('#', ';'),
        allow_no_value=True,
    )
    cfg.read(input_file)

    if 'LDOS' not in cfg:
        raise ValueError("The input file must contain a [LDOS] section.")
    section = cfg['LDOS']

    def _get_clean(key, fallback=None):
        if key not in section:
            return fallback
        val = section.get(key)
        if val is None:
            return fallback
        val = val.strip()
        return val if val != "" else fallback

    def _get_typed(key, cast):
        raw = _get_clean(key)
        if raw is None:
            return params[key]
        try:
            return cast(raw)
        except ValueError:
            logger.warning(f"[config] ignoring {key} = {raw!r} (expected {cast.__name__})")
            return params[key]

    for key in ('wavecar', 'outcar', 'ldos', 'comment', 'bands_csv', 'plot'):
        params[key] = _get_clean(key, params[key])
    for key, cast in (('fermi', float), ('sigma', float), ('workers', int)):
        params[key] = _get_typed(key, cast)
    return params


def _positive_float(x: str) -> float:
    val = float(x)
    if val <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {x}")
    return val


def _positive_int(x: str) -> int:
    val = int(x)
    if val < 1:
        raise argparse.ArgumentTypeError(f"expected an integer >= 1, got {x}")
    return val


def build_parser(defaults: dict) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ldoskit",
        description="Compute the depth-resolved density of states (LDOS) from a VASP WAVECAR.",
        epilog=("If no output filename is given, WAVECAR file basic information "
                "is displayed and the program terminates."),
    )
    parser.add_argument('-w', '--wavecar', metavar='FILE', default=defaults['wavecar'],
                        help='Input WAVECAR filename (default: WAVECAR)')
    parser.add_argument('-o', '--outcar', metavar='FILE', default=defaults['outcar'],
                        help='Input OUTCAR filename used for the Fermi energy (default: OUTCAR)')
    parser.add_argument('-f', '--fermi', metavar='EV', type=float, default=defaults['fermi'],
                        help='Fermi energy in eV; when given the OUTCAR is not read')
    parser.add_argument('-l', '--ldos', metavar='FILE', default=defaults['ldos'],
                        help='Output LDOS filename (no default; omit for inspect-only mode)')
    parser.add_argument('-c', '--comment', metavar='TEXT', default=defaults['comment'],
                        help='Arbitrary text comment stored in the LDOS header')
    parser.add_argument('--input_file', type=str, default=defaults['input_file'],
                        help='Configuration file with an [LDOS] section (default: ldos.inp)')
    parser.add_argument('--bands-csv', dest='bands_csv', metavar='FILE', default=defaults['bands_csv'],
                        help='Write a per-band summary table (CSV) of the LDOS file')
    parser.add_argument('--plot', metavar='FILE', default=defaults['plot'],
                        help='Render the layer-resolved DOS map to an image file')
    parser.add_argument('--sigma', metavar='EV', type=_positive_float, default=defaults['sigma'],
                        help='Gaussian broadening (eV) used by --plot (default: 0.05)')
    parser.add_argument('--workers', metavar='N', type=_positive_int, default=defaults['workers'],
                        help='Threads used by scipy.fft for each batched transform (default: 1)')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Hide the tqdm progress bar (keep normal logging)')
    parser.add_argument('--no-log-file', dest='log_file', action='store_false',
                        help='Do not write a ldos_run_*.log file')
    return parser


def parse_arguments(argv: list[str] | None = None):
    input_file = _extract_input_file_from_argv(argv, DEFAULT_PARAMS['input_file'])
    defaults = read_config(input_file)
    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    # config-file values bypass argparse type checks
    if args.sigma is None or args.sigma <= 0:
        parser.error(f"--sigma must be positive, got {args.sigma}")
    if args.workers is None or args.workers < 1:
        parser.error(f"--workers must be >= 1, got {args.workers}")

    args.outcar_explicit = any(tok in ('-o', '--outcar') or tok.startswith('--outcar=')
                               for tok in (argv or [])) or defaults['outcar'] != DEFAULT_PARAMS['outcar']
    return args
