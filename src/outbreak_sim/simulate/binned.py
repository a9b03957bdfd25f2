# src/outbreak_sim/simulate/binned.py
"""
Generate and merge many outbreaks into a target size distribution.

Outbreaks are simulated repeatedly and kept only while the size bin they fall
into still has capacity. Kept outbreaks are shifted so that their index cases
fall uniformly on the importation window, and their index genomes diverge from
a shared ancestral genome. Unlinked background cases are added at the end.
"""

from collections import Counter, deque
from dataclasses import dataclass
import logging
from typing import List, Optional, Tuple

from .branching import GrowthError, simulate_outbreak
from .outbreak import Outbreak

# Start logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BinnedOutbreakConfig:
    """
    size_bin_edges :
        Edges of the size bins, one more than the number of bins. Bins are
        ``(edge[i], edge[i+1]]``.
    size_counts :
        Capacity of each size bin.
    latest_importation :
        Length of the index case window.
    time_to_mrca :
        Ancestral divergence time for binned outbreaks.
    time_to_background_mrca :
        Ancestral divergence time for background singletons.
    n_background :
        Number of background singletons.
    bad_simulation_cap :
        Maximum number of simulations to reject.
    """
    size_bin_edges: Tuple[int, ...]
    size_counts: Tuple[int, ...]
    latest_importation: int = 0
    time_to_mrca: int = 0
    time_to_background_mrca: int = 0
    n_background: int = 0
    bad_simulation_cap: int = 1000

    def __post_init__(self):
        # accept lists but store immutable tuples
        object.__setattr__(self, "size_bin_edges", tuple(int(x) for x in self.size_bin_edges))
        object.__setattr__(self, "size_counts", tuple(int(x) for x in self.size_counts))

    def validate(self) -> None:
        n = len(self.size_bin_edges)
        if n == 0:
            raise ValueError("At least one size bin edge is required")
        if len(self.size_counts) != n - 1:
            raise ValueError(
                f"Expected {n - 1} size counts for {n} bin edges, got {len(self.size_counts)}"
            )
        for lo, hi in zip(self.size_bin_edges, self.size_bin_edges[1:]):
            if hi <= lo:
                raise ValueError(f"Size bin edges must be strictly increasing: {self.size_bin_edges}")
        if any(c < 0 for c in self.size_counts):
            raise ValueError("Size counts must be >= 0")
        if self.latest_importation < 0 or self.n_background < 0:
            raise ValueError("latest_importation and n_background must be >= 0")

    def max_size(self) -> int:
        return self.size_bin_edges[-1]

    def size_bin(self, n_cases: int) -> Optional[int]:
        """Index of the bin holding ``n_cases``, None if outside all bins."""
        for i, (lo, hi) in enumerate(zip(self.size_bin_edges, self.size_bin_edges[1:])):
            if lo < n_cases <= hi:
                return i
        return None

    def size_bin_labels(self) -> List[str]:
        return [f"({lo},{hi}]" for lo, hi in zip(self.size_bin_edges, self.size_bin_edges[1:])]

    def size_bin_with_margins(self, n_cases: int) -> int:
        """Bin index counting an underflow bin at 0 and an overflow bin at the end."""
        if not self.size_bin_edges or n_cases <= self.size_bin_edges[0]:
            return 0
        if n_cases > self.size_bin_edges[-1]:
            return len(self.size_bin_edges)
        return self.size_bin(n_cases) + 1


class BinError(Exception):
    """Raised when the size bins are not filled within ``bad_simulation_cap`` rejections.

    discarded :
        Case counts of the rejected simulations.
    remaining :
        Unfilled capacity of each bin.
    """

    def __init__(self, discarded, remaining, config):
        self.discarded = list(discarded)
        self.remaining = list(remaining)
        self.config = config
        super().__init__(self.render())

    def render(self) -> str:
        cfg = self.config
        lines = [
            f"simulation did not fill all outbreak size bins after {cfg.bad_simulation_cap} attempts"
        ]
        labels = ["underflow"] + cfg.size_bin_labels() + ["overflow"]
        failed_bins = Counter(cfg.size_bin_with_margins(n) for n in self.discarded)

        lines.append(f"{'BIN':>15}   {'CFG':>6}   {'TODO':>6}   {'EXTRA':>6}")
        for i, label in enumerate(labels):
            if i == 0 or i == len(labels) - 1:
                configured, todo = "", ""
            else:
                configured, todo = str(cfg.size_counts[i - 1]), str(self.remaining[i - 1])
            lines.append(f"{label:>15}   {configured:>6}   {todo:>6}   {failed_bins.get(i, 0):>6}")
        return "\n".join(lines)


def accept(size_counts: List[int], size_bin: Optional[int]) -> bool:
    """Take one slot from ``size_bin`` if it has capacity."""
    if size_bin is not None and size_counts[size_bin] > 0:
        size_counts[size_bin] -= 1
        return True
    return False


def binned_outbreaks(ancestral_genome, disease_model, mutation_rate, sim_config, rng):
    """Generate outbreaks until every size bin is full, then merge them.

    Raises ``BinError`` if ``bad_simulation_cap`` simulations are rejected,
    which usually means the disease parameters produce outbreaks that are too
    big or too small for the bin configuration.
    """
    sim_config.validate()
    size_counts = list(sim_config.size_counts)
    total_signal = sum(size_counts)

    failed = []
    outbreak = Outbreak()

    importation_times = deque(
        int(x) for x in rng.integers(0, sim_config.latest_importation, size=total_signal, endpoint=True)
    )

    while sum(size_counts) > 0:
        generation_time = importation_times[0] + sim_config.time_to_mrca
        genome = ancestral_genome.mutate_time(generation_time, mutation_rate, rng)

        try:
            new_ob = simulate_outbreak(genome, disease_model, mutation_rate, sim_config.max_size(), rng)
        except GrowthError as err:
            failed.append(err.outbreak.n_cases())
        else:
            size_bin = sim_config.size_bin(new_ob.n_cases())
            if accept(size_counts, size_bin):
                new_ob.time_shift(importation_times.popleft())
                outbreak.extend_with(new_ob)
                logger.debug(
                    "Accepted outbreak of %d cases into bin %d (%d simulations left to fill)",
                    new_ob.n_cases(), size_bin, sum(size_counts),
                )
            else:
                failed.append(new_ob.n_cases())

        if len(failed) >= sim_config.bad_simulation_cap:
            logger.warning("Rejected %d simulations; remaining bin capacity %s", len(failed), size_counts)
            raise BinError(failed, size_counts, sim_config)

    logger.info(
        "Filled %d size bins with %d outbreaks (%d rejected)",
        len(size_counts), total_signal, len(failed),
    )

    last_case = outbreak.end_time() or 0
    for _ in range(sim_config.n_background):
        imported_at = int(rng.integers(0, last_case, endpoint=True))
        generation_time = imported_at + sim_config.time_to_background_mrca
        genome = ancestral_genome.mutate_time(generation_time, mutation_rate, rng)

        _, history = disease_model.generate_singleton(rng).into_case_history()
        outbreak.append(None, history, genome)

    outbreak.rezero_time()
    return outbreak
