import numpy as np
import pytest
from numpy.random import default_rng
from scipy.stats import gamma

from outbreak_sim.case import CaseHistory, History
from outbreak_sim.disease import DiseaseModel, rounded_poisson
from outbreak_sim.disease.simple import SimpleDisease
from outbreak_sim.genome.simple import SimpleGenome
from outbreak_sim.simulate.branching import GrowthError, draw_infector, simulate_outbreak


class ScriptedDisease(DiseaseModel):
    """Every case gets the same infectivity curve."""

    def __init__(self, curve):
        self.curve = list(curve)

    def generate_case(self, state, rng):
        return CaseHistory(infectivity=list(self.curve), symptom_onset=0, reported=1)


class Constant:
    """Distribution that always returns the same value."""

    def __init__(self, value):
        self.value = value

    def rvs(self, random_state=None):
        return self.value


class CountingDisease(ScriptedDisease):
    """Records the state object passed for every case."""

    def __init__(self, curve):
        super().__init__(curve)
        self.seen = []

    def initial_state(self):
        return {"n": 0}

    def generate_case(self, state, rng):
        state["n"] += 1
        self.seen.append(state)
        return super().generate_case(state, rng)


def gamma_model():
    return SimpleDisease(
        incubation_time=rounded_poisson(1.0),
        reporting_time=rounded_poisson(1.0),
        reproduction_number=gamma(a=1.5, scale=0.75),
        infectiousness=[0.34, 0.33, 0.33],
    )


def test_no_transmission_gives_single_case():
    ob = simulate_outbreak(SimpleGenome(), ScriptedDisease([0.0, 0.0]), 1.0, 10, default_rng(1))
    assert ob.n_cases() == 1
    assert ob.sources() == [None]
    assert ob.genomes() == [SimpleGenome()]


def test_empty_curve_terminates():
    ob = simulate_outbreak(SimpleGenome(), ScriptedDisease([]), 1.0, 10, default_rng(1))
    assert ob.n_cases() == 1


def test_zero_reproduction_number_gives_index_case_only():
    dm = SimpleDisease(
        incubation_time=Constant(1),
        reporting_time=Constant(1),
        reproduction_number=Constant(0.0),
        infectiousness=[0.34, 0.33, 0.33],
    )
    ob = simulate_outbreak(SimpleGenome(), dm, 2e-4 / 365, 100, default_rng(0))

    assert ob.sources() == [None]
    assert ob.histories() == [
        History(infected=0, infectious_onset=0, infectious_peak=0, recovered=0, reported=2, symptom_onset=1)
    ]
    assert ob.genomes() == [SimpleGenome()]


def test_gamma_model_mostly_completes():
    completed = []
    for seed in range(50):
        try:
            ob = simulate_outbreak(SimpleGenome(), gamma_model(), 2e-4 / 365, 100, default_rng(seed))
        except GrowthError:
            continue
        completed.append(seed)
        assert 1 <= ob.n_cases() <= 100
        sources = ob.sources()
        assert sources[0] is None
        assert all(s is not None and s < i for i, s in enumerate(sources[1:], start=1))

    # mean R is 1.125, so most outbreaks die out well below 100 cases
    assert len(completed) >= 30

    seed = completed[0]
    first = simulate_outbreak(SimpleGenome(), gamma_model(), 2e-4 / 365, 100, default_rng(seed))
    again = simulate_outbreak(SimpleGenome(), gamma_model(), 2e-4 / 365, 100, default_rng(seed))
    assert first.sources() == again.sources()
    assert first.histories() == again.histories()
    assert first.genomes() == again.genomes()


def test_growth_limit():
    with pytest.raises(GrowthError) as excinfo:
        simulate_outbreak(SimpleGenome(), ScriptedDisease([50.0]), 0.0, 10, default_rng(2))

    err = excinfo.value
    assert err.max_size == 10
    assert err.outbreak.n_cases() > 10
    assert err.outbreak.sources()[0] is None
    assert "exceeded 10 cases" in str(err)


def test_infectors_precede_infectees():
    for seed in range(10):
        try:
            ob = simulate_outbreak(SimpleGenome(), gamma_model(), 2e-4 / 365, 100, default_rng(seed))
        except GrowthError as err:
            ob = err.outbreak

        sources = ob.sources()
        assert sources[0] is None
        for i, source in enumerate(sources[1:], start=1):
            assert source is not None
            assert source < i
            assert ob.history[source].infected <= ob.history[i].infected


def test_history_ordering():
    for seed in range(10):
        try:
            ob = simulate_outbreak(SimpleGenome(), gamma_model(), 0.1, 100, default_rng(seed))
        except GrowthError as err:
            ob = err.outbreak
        for h in ob.histories():
            assert 0 <= h.infected <= h.infectious_onset <= h.infectious_peak <= h.recovered


def test_same_seed_same_outbreak():
    def run(seed):
        try:
            ob = simulate_outbreak(SimpleGenome(), gamma_model(), 0.5, 100, default_rng(seed))
        except GrowthError as err:
            ob = err.outbreak
        return ob.sources(), ob.genomes(), [h.infected for h in ob.histories()]

    assert run(893924) == run(893924)


def test_same_step_transmission_copies_genome():
    # the index case transmits in step 0, later cases one step after infection
    model = ScriptedDisease([0.9])
    for seed in range(20):
        try:
            ob = simulate_outbreak(SimpleGenome(), model, 10.0, 200, default_rng(seed))
        except GrowthError as err:
            ob = err.outbreak

        index_genome = ob.genomes()[0]
        for i, source in enumerate(ob.sources()):
            if source == 0:
                assert ob.history[i].infected == 0
                assert ob.genomes()[i] == index_genome
            elif source is not None:
                assert ob.history[i].infected - ob.history[source].infected == 1


def test_disease_state_is_shared_within_outbreak():
    model = CountingDisease([0.9])
    try:
        ob = simulate_outbreak(SimpleGenome(), model, 0.0, 50, default_rng(4))
    except GrowthError as err:
        ob = err.outbreak

    assert len(model.seen) == ob.n_cases()
    assert all(state is model.seen[0] for state in model.seen)
    assert model.seen[0]["n"] == ob.n_cases()

    # a new outbreak gets a fresh state
    model.seen.clear()
    try:
        simulate_outbreak(SimpleGenome(), model, 0.0, 50, default_rng(5))
    except GrowthError:
        pass
    assert model.seen[0]["n"] == len(model.seen)


def test_draw_infector_skips_zero_weights():
    cumulative = np.cumsum([0.0, 1.0, 0.0, 2.0, 0.0])
    rng = default_rng(11)
    draws = {draw_infector(cumulative, rng) for _ in range(500)}
    assert draws == {1, 3}


def test_draw_infector_proportional():
    cumulative = np.cumsum([1.0, 3.0])
    rng = default_rng(12)
    draws = np.array([draw_infector(cumulative, rng) for _ in range(4000)])
    assert 0.70 < draws.mean() < 0.80


class FixedDraw:
    """Random source whose uniform draw is always the same value."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def test_draw_infector_skips_trailing_zero_weights():
    cumulative = np.cumsum([1.0, 0.0, 2.0, 0.0, 0.0])
    # a draw at the top of the range must still land on a positive weight
    assert draw_infector(cumulative, FixedDraw(1.0)) == 2
    assert draw_infector(cumulative, FixedDraw(0.0)) == 0
