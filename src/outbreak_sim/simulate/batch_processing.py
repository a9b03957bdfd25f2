# src/outbreak_sim/simulate/batch_processing.py
#
# Purpose: call `simulate_outbreak` as many times as needed to build an empirical
# outbreak size distribution, and write one row per simulation to a CSV (or a
# Python `tempfile`). Used to choose size bin edges before running
# `binned_outbreaks`.

import csv
import logging
import tempfile
from pathlib import Path

import numpy as np
from numpy.random import default_rng

from .branching import GrowthError, simulate_outbreak

logger = logging.getLogger(__name__)

HEADER = ["sim_id", "n_cases", "end_time", "max_snps", "status"]


def default_csv_path(use_tempfile=True):
    """Define the filepath of csv"""
    if use_tempfile:
        tf = tempfile.NamedTemporaryFile(prefix="outbreak_sizes_", suffix=".csv")
        p = Path(tf.name)
        tf.close()
        return p
    else:
        return Path("outbreak_sizes.csv")


def max_snps_from_index(outbreak):
    """Largest SNP distance between the index genome and any other case."""
    genomes = outbreak.genomes()
    if not genomes:
        return 0
    return max(genomes[0].snps(g) for g in genomes)


def generate_batch(
    N,
    index_genome,
    disease_model,
    mutation_rate,
    max_size,
    out_path=None,
    use_tempfile=True,
    seed=None,
):
    """Simulate N independent outbreaks.

    Returns (sizes, csv_path), where sizes has shape (N,) and holds the case
    count of every run. Runs stopped at ``max_size`` have status "overflow"
    and report the partial case count.
    """
    if N < 1:
        raise ValueError("N must be >= 1")

    rng = default_rng(seed)

    # Do file pathing
    if out_path is None:
        csv_path = default_csv_path(use_tempfile=use_tempfile)
    else:
        csv_path = Path(out_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    sizes = np.zeros(N, dtype=int)
    n_overflow = 0

    with csv_path.open("w", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(HEADER)

        for sim_id in range(1, N + 1):
            try:
                outbreak = simulate_outbreak(index_genome, disease_model, mutation_rate, max_size, rng)
                status = "complete"
            except GrowthError as err:
                outbreak = err.outbreak
                status = "overflow"
                n_overflow += 1

            sizes[sim_id - 1] = outbreak.n_cases()
            writer.writerow([
                sim_id,
                outbreak.n_cases(),
                outbreak.end_time(),
                max_snps_from_index(outbreak),
                status,
            ])

    logger.info("Simulated %d outbreaks (%d overflowed max_size=%d)", N, n_overflow, max_size)
    return sizes, csv_path
