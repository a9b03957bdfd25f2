# src/outbreak_sim/disease/simple.py
"""
Simple outbreak model.

All cases share the same infectiousness profile. After a random incubation
time the onset of symptoms and infectiousness happen together, and reporting
follows after a random delay. Each case draws its own reproduction number,
which scales the profile.
"""

from dataclasses import dataclass, field
from typing import List

import numpy as np

from ..case import CaseHistory
from . import DiseaseModel, sample_time


@dataclass
class SimpleDisease(DiseaseModel):
    """
    incubation_time :
        Distribution of steps between infection and infectiousness/symptom onset.
    reporting_time :
        Distribution of steps between symptom onset and notification.
    reproduction_number :
        Distribution of individual reproduction numbers.
    infectiousness :
        Profile starting at onset, normally summing to one. The latent period
        comes from ``incubation_time`` so the profile should start non-zero.
    """
    incubation_time: object
    reporting_time: object
    reproduction_number: object
    infectiousness: List[float] = field(default_factory=lambda: [1.0])

    def generate_case(self, state, rng) -> CaseHistory:
        onset = sample_time(self.incubation_time, rng)
        reported = onset + sample_time(self.reporting_time, rng)
        r = float(self.reproduction_number.rvs(random_state=rng))

        infectivity = [0.0] * onset + (np.asarray(self.infectiousness, dtype=float) * r).tolist()

        return CaseHistory(
            infectivity=infectivity,
            symptom_onset=onset,
            reported=reported,
        )

    def generate_singleton(self, rng) -> CaseHistory:
        # background cases only need a reporting time
        reported = sample_time(self.incubation_time, rng)
        return CaseHistory(infectivity=[], symptom_onset=0, reported=reported)
