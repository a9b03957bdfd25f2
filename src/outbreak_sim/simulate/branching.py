# src/outbreak_sim/simulate/branching.py
"""
Branching-process simulation of one outbreak.

Each time step every tracked case is advanced once. The number of new cases
is Poisson with mean equal to the summed infectivity of that step, and each
new case picks its infector with probability proportional to the infector's
infectivity in the step.
"""

import logging

import numpy as np

from .outbreak import Outbreak

# Start logger
logger = logging.getLogger(__name__)


class GrowthError(Exception):
    """Raised when an outbreak exceeds ``max_size`` cases before dying out.

    The partial outbreak is kept in ``outbreak``.
    """

    def __init__(self, outbreak, max_size):
        self.outbreak = outbreak
        self.max_size = max_size
        super().__init__(f"outbreak exceeded {max_size} cases after time step")


def draw_infector(cumulative, rng) -> int:
    """Pick an index with probability proportional to its weight.

    ``cumulative`` is the running sum of the weights; zero-weight entries are
    never selected.
    """
    total = cumulative[-1]
    u = rng.random() * total
    idx = int(np.searchsorted(cumulative, u, side="right"))
    # u can round up to total; clamp to the last entry with positive weight
    last = int(np.searchsorted(cumulative, total, side="left"))
    return min(idx, last)


def simulate_outbreak(index_genome, disease_model, mutation_rate, max_size, rng):
    """Simulate an outbreak from one index genome.

    Stops when no infectious cases remain, returning the ``Outbreak``, or
    raises ``GrowthError`` at the end of the first time step at which the
    case count exceeds ``max_size``.
    """
    dm_state = disease_model.initial_state()

    # start with the index case
    index, history = disease_model.generate_case(dm_state, rng).into_case_history()
    cases = [index]
    outbreak = Outbreak(source=[None], history=[history], genome=[index_genome])

    t = 0
    while True:
        case_infectivity = np.fromiter((case.step() for case in cases), dtype=float, count=len(cases))
        total_infectivity = float(case_infectivity.sum())

        if total_infectivity > 0.0:
            new_cases = int(rng.poisson(total_infectivity))

            if new_cases > 0:
                cumulative = np.cumsum(case_infectivity)

                for _ in range(new_cases):
                    infector = draw_infector(cumulative, rng)
                    case, history = disease_model.generate_case(dm_state, rng).into_case_history()
                    cases.append(case)
                    history.time_shift_forward(t)

                    generation_time = t - outbreak.history[infector].infected
                    parent_genome = outbreak.genome[infector]
                    if generation_time < 1:
                        new_genome = parent_genome
                    else:
                        new_genome = parent_genome.mutate_time(generation_time, mutation_rate, rng)
                    outbreak.append(infector, history, new_genome)

        if all(case.is_recovered() for case in cases):
            logger.debug("Outbreak died out at t=%d with %d cases", t, outbreak.n_cases())
            return outbreak

        if outbreak.n_cases() > max_size:
            logger.debug("Outbreak reached %d cases at t=%d (max %d)", outbreak.n_cases(), t, max_size)
            raise GrowthError(outbreak, max_size)

        t += 1
