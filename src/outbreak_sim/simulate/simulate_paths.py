# src/outbreak_sim/simulate/simulate_paths.py
"""
Run configuration and reusable entry points for the CLI runner.

Builds disease models and genomes from a ``SimConfig`` and wraps
``simulate_outbreak``, ``binned_outbreaks`` and ``generate_batch``.
"""

from dataclasses import dataclass
import logging
import pathlib
from typing import Optional, Tuple

from numpy.random import default_rng
from scipy.stats import gamma

from ..disease import rounded_poisson
from ..disease.covid import Covid
from ..disease.simple import SimpleDisease
from ..genome.simple import GENOME_LENGTH, SimpleGenome
from .batch_processing import generate_batch
from .binned import BinnedOutbreakConfig, binned_outbreaks
from .branching import simulate_outbreak

# Start logger
logger = logging.getLogger(__name__)

DISEASE_MODELS = ("simple", "covid")


@dataclass
class SimConfig:
    seed: Optional[int] = None
    genome_width: int = GENOME_LENGTH
    # expected mutations per time step
    mutation_rate: float = 2e-4 / 365.0 * 30000.0
    max_cases: int = 200
    disease: str = "simple"
    incubation_mean: float = 2.0
    reporting_mean: float = 1.0
    r_shape: float = 2.5
    r_scale: float = 0.3
    infectiousness: Tuple[float, ...] = (0.34, 0.33, 0.33)
    # binned sampler
    size_bin_edges: Tuple[int, ...] = (2, 10, 40, 180)
    size_counts: Tuple[int, ...] = (4, 3, 2)
    latest_importation: int = 45
    time_to_mrca: int = 7
    time_to_background_mrca: int = 7
    n_background: int = 20
    bad_simulation_cap: int = 200
    # batch
    N: int = 1000
    out_path: str = "data/outbreak_sizes.csv"
    use_tempfile: bool = False


def build_disease_model(cfg: SimConfig):
    """Create the disease model named by ``cfg.disease``."""
    reproduction_number = gamma(a=cfg.r_shape, scale=cfg.r_scale)
    if cfg.disease == "simple":
        return SimpleDisease(
            incubation_time=rounded_poisson(cfg.incubation_mean),
            reporting_time=rounded_poisson(cfg.reporting_mean),
            reproduction_number=reproduction_number,
            infectiousness=list(cfg.infectiousness),
        )
    if cfg.disease == "covid":
        return Covid(
            reporting_time=rounded_poisson(cfg.reporting_mean),
            reproduction_number=reproduction_number,
        )
    raise ValueError(f"Unknown disease model: {cfg.disease} (choose from {DISEASE_MODELS})")


def build_binned_config(cfg: SimConfig) -> BinnedOutbreakConfig:
    return BinnedOutbreakConfig(
        size_bin_edges=cfg.size_bin_edges,
        size_counts=cfg.size_counts,
        latest_importation=cfg.latest_importation,
        time_to_mrca=cfg.time_to_mrca,
        time_to_background_mrca=cfg.time_to_background_mrca,
        n_background=cfg.n_background,
        bad_simulation_cap=cfg.bad_simulation_cap,
    )


def run_simple(cfg: SimConfig):
    """Simulate one outbreak from an unmutated index genome."""
    rng = default_rng(cfg.seed)
    genome = SimpleGenome(width=cfg.genome_width)
    ob = simulate_outbreak(genome, build_disease_model(cfg), cfg.mutation_rate, cfg.max_cases, rng)
    logger.info("Simulated outbreak with %d cases", ob.n_cases())
    return ob


def run_combined(cfg: SimConfig, snps_apart: int = 10, delay: int = 30):
    """Simulate two outbreaks and merge them.

    The second introduction is ``snps_apart`` SNPs from the first index genome
    and starts ``delay`` steps later.
    """
    rng = default_rng(cfg.seed)
    model = build_disease_model(cfg)

    index1 = SimpleGenome(width=cfg.genome_width)
    ob = simulate_outbreak(index1, model, cfg.mutation_rate, cfg.max_cases, rng)

    index2 = index1.mutate(snps_apart, rng)
    ob2 = simulate_outbreak(index2, model, cfg.mutation_rate, cfg.max_cases, rng)
    ob2.time_shift(delay)

    ob.extend_with(ob2)
    logger.info("Combined outbreak has %d cases", ob.n_cases())
    return ob


def run_binned(cfg: SimConfig):
    """Fill the configured size bins and add background cases."""
    rng = default_rng(cfg.seed)
    genome = SimpleGenome(width=cfg.genome_width)
    return binned_outbreaks(genome, build_disease_model(cfg), cfg.mutation_rate, build_binned_config(cfg), rng)


def run_batch(cfg: SimConfig):
    """Run the batch size-distribution simulation and return (sizes, csv_path)."""
    out_path = None
    if not cfg.use_tempfile:
        out_path = pathlib.Path(cfg.out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)

    sizes, csv_path = generate_batch(
        N=int(cfg.N),
        index_genome=SimpleGenome(width=cfg.genome_width),
        disease_model=build_disease_model(cfg),
        mutation_rate=cfg.mutation_rate,
        max_size=cfg.max_cases,
        out_path=out_path,
        use_tempfile=cfg.use_tempfile,
        seed=cfg.seed,
    )
    logger.info("CSV written to: %s", csv_path)
    return sizes, csv_path
