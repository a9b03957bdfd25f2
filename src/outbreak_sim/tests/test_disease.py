import numpy as np
import pytest
from numpy.random import default_rng

from outbreak_sim.disease import rounded_poisson, sample_time
from outbreak_sim.disease.covid import ASYMP_INFECT, INFECTIOUSNESS, Covid
from outbreak_sim.disease.simple import SimpleDisease


class Constant:
    """Distribution that always returns the same value."""

    def __init__(self, value):
        self.value = value

    def rvs(self, random_state=None):
        return self.value


@pytest.mark.parametrize("lam", [0.0, -1.0, float("nan"), float("inf")])
def test_rounded_poisson_rejects_bad_rate(lam):
    with pytest.raises(ValueError):
        rounded_poisson(lam)


def test_rounded_poisson_samples_integers():
    dist = rounded_poisson(2.0)
    rng = default_rng(1)
    draws = [sample_time(dist, rng) for _ in range(500)]
    assert all(isinstance(x, int) and x >= 0 for x in draws)
    assert 1.7 < np.mean(draws) < 2.3


def test_simple_generate_case():
    dm = SimpleDisease(
        incubation_time=Constant(2),
        reporting_time=Constant(1),
        reproduction_number=Constant(2.0),
        infectiousness=[0.5, 0.5],
    )
    ch = dm.generate_case(dm.initial_state(), default_rng(1))
    assert ch.infectivity == [0.0, 0.0, 1.0, 1.0]
    assert ch.symptom_onset == 2
    assert ch.reported == 3

    _, history = ch.into_case_history()
    assert (history.infectious_onset, history.infectious_peak, history.recovered) == (2, 2, 4)


def test_simple_generate_singleton():
    dm = SimpleDisease(
        incubation_time=Constant(4),
        reporting_time=Constant(1),
        reproduction_number=Constant(2.0),
    )
    ch = dm.generate_singleton(default_rng(1))
    assert ch.infectivity == []
    assert ch.symptom_onset == 0
    assert ch.reported == 4


def test_covid_case_shapes():
    dm = Covid(reporting_time=Constant(2), reproduction_number=Constant(1.0))
    rng = default_rng(5)
    n_symptomatic = 0
    n = 3000

    for _ in range(n):
        ch = dm.generate_case(dm.initial_state(), rng)
        infectivity = np.asarray(ch.infectivity)
        assert len(infectivity) == len(INFECTIOUSNESS)

        if ch.symptom_onset is None:
            assert ch.reported is None
            assert np.allclose(infectivity, INFECTIOUSNESS * ASYMP_INFECT)
        else:
            n_symptomatic += 1
            onset = ch.symptom_onset
            assert onset in (0, 1, 2)
            assert ch.reported == onset + 2
            assert np.allclose(infectivity[:onset], INFECTIOUSNESS[:onset] * ASYMP_INFECT)
            assert np.allclose(infectivity[onset:], INFECTIOUSNESS[onset:])

    assert 0.63 < n_symptomatic / n < 0.70


def test_covid_scales_by_reproduction_number():
    dm = Covid(reporting_time=Constant(0), reproduction_number=Constant(3.0))
    ch = dm.generate_case(None, default_rng(2))
    # the baseline curve sums to one; at most 3 after scaling
    assert 3.0 * ASYMP_INFECT - 1e-9 <= sum(ch.infectivity) <= 3.0 + 1e-9


def test_covid_singleton_uses_default_path():
    dm = Covid(reporting_time=Constant(1), reproduction_number=Constant(1.0))
    ch = dm.generate_singleton(default_rng(3))
    assert len(ch.infectivity) == len(INFECTIOUSNESS)
