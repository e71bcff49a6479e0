# ldoskit/__main__.py
from __future__ import annotations

# --------------------------
# Standard library imports
# --------------------------
import os
import sys
import time
import logging

# --------------------------
# Package-local imports
# --------------------------
from .cli import parse_arguments
from .logging_utils import setup_logger, banner, log_outcar_info, log_wavecar_info
from .fft import FFTError
from .io.wavecar import WavecarReader, BadWavecarFile
from .io.outcar import OutcarReader, BadOutcarFile
from .io.ldos import LdosWriter, read_ldos
from .pipeline import (
    BadSupercellError,
    choose_height_direction,
    fft_size,
    supercell_height,
    process,
)

logger = logging.getLogger("ldoskit")

FATAL_ERRORS = (OSError, BadWavecarFile, BadOutcarFile, BadSupercellError, FFTError, ValueError)


def resolve_fermi_energy(args) -> float:
    """--fermi wins; otherwise read the OUTCAR (a missing default OUTCAR means 0 eV)."""
    if args.fermi is not None:
        logger.info(f"Fermi energy : {args.fermi} eV (command line)")
        return float(args.fermi)

    if not os.path.isfile(args.outcar) and not args.outcar_explicit:
        logger.warning(f"OUTCAR file '{args.outcar}' not found; using E_F = 0 eV. "
                       "Pass --fermi or --outcar to set it.")
        return 0.0

    outcar = OutcarReader(args.outcar)
    log_outcar_info(logger, outcar)
    return outcar.fermi_energy


def run(args) -> None:
    fermi_energy = resolve_fermi_energy(args)

    with WavecarReader(args.wavecar) as reader:
        log_wavecar_info(logger, reader.info())

        if not args.ldos:
            logger.info("No output LDOS file requested; inspect-only run.")
            return

        direction = choose_height_direction(reader.lattice_norms)
        with LdosWriter(args.ldos,
                        n_spins=reader.n_spins,
                        n_kpoints=reader.n_kpoints,
                        n_bands=reader.n_bands,
                        n_layers=fft_size(reader, direction).size,
                        supercell_height=supercell_height(reader, direction),
                        fermi_energy=fermi_energy,
                        user_comment=args.comment or "") as writer:
            process(reader, writer, direction, workers=args.workers, progress=not args.quiet)
        logger.info(f"LDOS written to {args.ldos}")

    if args.bands_csv or args.plot:
        from .plotting import save_band_table, plot_layer_dos

        data = read_ldos(args.ldos)
        if args.bands_csv:
            save_band_table(data, args.bands_csv)
        if args.plot:
            plot_layer_dos(data, args.plot, sigma=args.sigma)


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = parse_arguments(argv)

    start_t = time.perf_counter()
    setup_logger("ldoskit", log_file=args.log_file)
    banner(logger)
    logger.info(f"Run Timestamp : {time.strftime('%a %Y-%m-%d %H:%M:%S')}")

    try:
        run(args)
    except FATAL_ERRORS as err:
        logger.error(f"{err}")
        logger.error("Error!")
        return 1

    elapsed = time.perf_counter() - start_t
    logger.info(f"==== Run finished – total wall time {elapsed:,.1f} s ====")
    logger.info("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
