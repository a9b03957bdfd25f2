# src/outbreak_sim/disease/__init__.py
"""
Disease model contract.

A disease model generates new cases on request, returning the minimal data
(a ``CaseHistory``) needed to reconstruct each case's timeline. It may keep
state between the cases of one outbreak; the state is created afresh for each
independent outbreak and passed in explicitly.
"""

import abc
import math

from scipy.stats import poisson

from ..case import CaseHistory


def rounded_poisson(lam):
    """Integer-valued Poisson distribution for time parameters of a model.

    Returns a frozen scipy distribution; sample it with
    ``dist.rvs(random_state=rng)``.
    """
    lam = float(lam)
    if not math.isfinite(lam) or lam <= 0.0:
        raise ValueError(f"Poisson rate must be positive and finite, got {lam}")
    return poisson(mu=lam)


def sample_time(dist, rng) -> int:
    """Draw one non-negative integer time from a frozen distribution."""
    return max(0, int(round(float(dist.rvs(random_state=rng)))))


class DiseaseModel(abc.ABC):
    """Base class for models of disease development."""

    def initial_state(self):
        """State shared by all cases of one outbreak (None for stateless models)."""
        return None

    @abc.abstractmethod
    def generate_case(self, state, rng) -> CaseHistory:
        """Generate a case infected by another case of the same outbreak."""

    def generate_singleton(self, rng) -> CaseHistory:
        """Generate an independently imported case with no infector."""
        return self.generate_case(self.initial_state(), rng)
