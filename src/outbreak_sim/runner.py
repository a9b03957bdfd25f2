#!/usr/bin/env python3
# src/outbreak_sim/runner.py: command line runner
#
#   PYTHONPATH=src python -m outbreak_sim.runner simple --seed 1 > outbreak.fasta
#   PYTHONPATH=src python -m outbreak_sim.runner binned --edges 2,10,40,180 --counts 4,3,2
#   PYTHONPATH=src python -m outbreak_sim.runner batch -N 2000 --out data/sizes.csv

import argparse
import logging
import re
import sys
import time
from typing import List, Optional

from .simulate import BinError, GrowthError
from .simulate import plot_outbreak as plot
from .simulate import simulate_paths as sim

logger = logging.getLogger(__name__)


# Parser for lists like 2,10,40 or 0.34 0.33 0.33
def parse_list(s: Optional[str], cast=float) -> List:
    if not s:
        return []
    return [cast(x) for x in re.split(r"[,\s;]+", s.strip()) if x]


def add_model_args(p):
    p.add_argument("--seed", type=int, default=None, metavar="SEED",
                   help="RNG seed for reproducibility (default: random)")
    p.add_argument("--disease", choices=sim.DISEASE_MODELS, default="simple",
                   help="Disease model (default: simple)")
    p.add_argument("--incubation-mean", type=float, default=2.0, metavar="STEPS",
                   help="Expected incubation time (default: 2)")
    p.add_argument("--reporting-mean", type=float, default=1.0, metavar="STEPS",
                   help="Expected delay from onset to report (default: 1)")
    p.add_argument("--r-shape", type=float, default=2.5,
                   help="Gamma shape of the reproduction number (default: 2.5)")
    p.add_argument("--r-scale", type=float, default=0.3,
                   help="Gamma scale of the reproduction number (default: 0.3)")
    p.add_argument("--infectiousness", type=str, default="0.34,0.33,0.33", metavar="LIST",
                   help="Infectiousness profile after onset (default: '0.34,0.33,0.33')")
    p.add_argument("--mutation-rate", type=float, default=2e-4 / 365.0 * 30000.0,
                   help="Expected mutations per time step")
    p.add_argument("--genome-width", type=int, default=64, metavar="SITES",
                   help="Number of genome sites (default: 64)")
    p.add_argument("--max-cases", type=int, default=200,
                   help="Halt a simulation above this number of cases (default: 200)")


def config_from_args(args) -> sim.SimConfig:
    cfg = sim.SimConfig(
        seed=args.seed,
        genome_width=args.genome_width,
        mutation_rate=args.mutation_rate,
        max_cases=args.max_cases,
        disease=args.disease,
        incubation_mean=args.incubation_mean,
        reporting_mean=args.reporting_mean,
        r_shape=args.r_shape,
        r_scale=args.r_scale,
        infectiousness=tuple(parse_list(args.infectiousness)),
    )
    if args.cmd == "binned":
        cfg.size_bin_edges = tuple(parse_list(args.edges, int))
        cfg.size_counts = tuple(parse_list(args.counts, int))
        cfg.latest_importation = args.latest_importation
        cfg.time_to_mrca = args.time_to_mrca
        cfg.time_to_background_mrca = args.time_to_background_mrca
        cfg.n_background = args.n_background
        cfg.bad_simulation_cap = args.bad_simulation_cap
    if args.cmd == "batch":
        cfg.N = args.N
        cfg.out_path = args.out
    return cfg


def write_fasta(outbreak, out: Optional[str]):
    if out:
        with open(out, "w") as fh:
            outbreak.write_fasta(fh)
    else:
        outbreak.write_fasta(sys.stdout)


def build_parser():
    p = argparse.ArgumentParser(description="Outbreak simulation runner")
    p.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    sub = p.add_subparsers(dest="cmd", required=True)

    # ---------- simple ----------
    simple_p = sub.add_parser("simple", help="Simulate one outbreak and write FASTA")
    add_model_args(simple_p)
    simple_p.add_argument("--out", default=None, metavar="PATH", help="FASTA path (default: stdout)")

    # ---------- combined ----------
    comb_p = sub.add_parser("combined", help="Merge two introductions and write FASTA")
    add_model_args(comb_p)
    comb_p.add_argument("--snps-apart", type=int, default=10,
                        help="SNPs between the two index genomes (default: 10)")
    comb_p.add_argument("--delay", type=int, default=30,
                        help="Time steps between the introductions (default: 30)")
    comb_p.add_argument("--out", default=None, metavar="PATH", help="FASTA path (default: stdout)")

    # ---------- binned ----------
    bin_p = sub.add_parser("binned", help="Fill outbreak size bins and write FASTA")
    add_model_args(bin_p)
    bin_p.add_argument("--edges", default="2,10,40,180", metavar="LIST", help="Size bin edges")
    bin_p.add_argument("--counts", default="4,3,2", metavar="LIST", help="Outbreaks per size bin")
    bin_p.add_argument("--latest-importation", type=int, default=45)
    bin_p.add_argument("--time-to-mrca", type=int, default=7)
    bin_p.add_argument("--time-to-background-mrca", type=int, default=7)
    bin_p.add_argument("--n-background", type=int, default=20)
    bin_p.add_argument("--bad-simulation-cap", type=int, default=200)
    bin_p.add_argument("--out", default=None, metavar="PATH", help="FASTA path (default: stdout)")

    for fasta_p in (simple_p, comb_p, bin_p):
        fasta_p.add_argument("--epi-curve", default=None, metavar="PNG",
                             help="Also plot the epidemic curve to this path")

    # ---------- batch ----------
    batch_p = sub.add_parser("batch", help="Simulate many outbreaks and record their sizes")
    add_model_args(batch_p)
    batch_p.add_argument("-N", "--num", dest="N", type=int, default=1000,
                         help="Number of outbreaks to simulate (default: 1000)")
    batch_p.add_argument("--out", default="data/outbreak_sizes.csv", metavar="PATH",
                         help="Output CSV path (default: data/outbreak_sizes.csv)")

    # ---------- plot ----------
    plot_p = sub.add_parser("plot", help="Plot a batch size distribution")
    plot_p.add_argument("--csv", default="data/outbreak_sizes.csv")
    plot_p.add_argument("--out", default="figs/outbreak_sizes.png")
    plot_p.add_argument("--bins", type=int, default=30)
    plot_p.add_argument("--edges", default=None, metavar="LIST",
                        help="Candidate size bin edges to mark")
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO),
                        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    t0 = time.perf_counter()

    if args.cmd == "plot":
        edges = parse_list(args.edges, int) or None
        path = plot.plot_size_distribution(args.csv, save_path=args.out, bins=args.bins, size_bin_edges=edges)
        logger.info("Plot written -> %s", path)
        return 0

    cfg = config_from_args(args)
    try:
        if args.cmd == "batch":
            _, csv_path = sim.run_batch(cfg)
            logger.info("Batch done -> %s", csv_path)
        else:
            if args.cmd == "simple":
                ob = sim.run_simple(cfg)
            elif args.cmd == "combined":
                ob = sim.run_combined(cfg, snps_apart=args.snps_apart, delay=args.delay)
            else:
                ob = sim.run_binned(cfg)
            write_fasta(ob, args.out)
            if args.epi_curve:
                plot.plot_epi_curve(ob, save_path=args.epi_curve)
    except GrowthError as err:
        print(f"error: {err}", file=sys.stderr)
        return 2
    except BinError as err:
        print(err, file=sys.stderr)
        return 2

    logger.info("Done in %.2fs", time.perf_counter() - t0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
