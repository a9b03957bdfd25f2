# src/outbreak_sim/disease/covid.py
"""
Disease model tuned for Covid-19.

Based on the model of Chang, Harding, Zachreson et al., "Modelling
transmission and control of the COVID-19 pandemic in Australia",
Nat Commun 11, 5710 (2020).
"""

from dataclasses import dataclass

import numpy as np

from ..case import CaseHistory
from . import DiseaseModel, sample_time

# baseline infectiousness normalised to unity
INFECTIOUSNESS = np.array([
    0.0, 0.0,  # latent
    0.04, 0.08, 0.16,  # exponential growth
    0.144, 0.128, 0.112, 0.096, 0.08, 0.064, 0.048, 0.032, 0.016,  # linear drop
])

# fraction of baseline infectiousness while asymptomatic/pre-symptomatic
ASYMP_INFECT = 0.3

# proportion of cases that ever become symptomatic
FRAC_SYMPTOMATIC = 0.667

# relative weight of symptom onset on each of the first days
SYMPTOMS = np.array([3, 5, 2], dtype=float)


@dataclass
class Covid(DiseaseModel):
    """Covid-19 disease model.

    From exposure there is a 2 step latent period before the onset of
    infectiousness, then a 3 step exponential rise to peak infectiousness and
    a linear decline over the following 9 steps.

    Cases without symptoms have their infectivity multiplied by 0.3. Cases
    that develop symptoms have onset within the first 3 steps, and the same
    factor applies to the pre-symptomatic period.

    reporting_time :
        Distribution of steps between symptom onset and notification.
    reproduction_number :
        Distribution of individual reproduction numbers. Asymptomatic and
        pre-symptomatic periods are discounted, so realised case counts are
        lower than this distribution alone implies.
    """
    reporting_time: object
    reproduction_number: object

    def generate_case(self, state, rng) -> CaseHistory:
        symptom_onset = None
        reported = None
        if rng.random() < FRAC_SYMPTOMATIC:
            symptom_onset = int(rng.choice(len(SYMPTOMS), p=SYMPTOMS / SYMPTOMS.sum()))
            reported = symptom_onset + sample_time(self.reporting_time, rng)

        infectivity = INFECTIOUSNESS.copy()
        end_pos = len(INFECTIOUSNESS) if symptom_onset is None else symptom_onset
        infectivity[:end_pos] *= ASYMP_INFECT

        r = float(self.reproduction_number.rvs(random_state=rng))
        infectivity *= r

        return CaseHistory(
            infectivity=infectivity.tolist(),
            symptom_onset=symptom_onset,
            reported=reported,
        )
