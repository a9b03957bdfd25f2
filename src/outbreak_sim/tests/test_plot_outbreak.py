import pandas as pd
import pytest

from outbreak_sim.case import History
from outbreak_sim.genome.simple import SimpleGenome
from outbreak_sim.simulate.outbreak import Outbreak
from outbreak_sim.simulate.plot_outbreak import (
    daily_incidence,
    load_batch_csv,
    plot_epi_curve,
    plot_size_distribution,
)


def make_outbreak():
    infected = [0, 1, 1, 3, 3]
    sources = [None, 0, 0, None, 3]
    histories = [History(t, t, t, t + 1) for t in infected]
    return Outbreak(source=sources, history=histories, genome=[SimpleGenome()] * 5)


def test_daily_incidence():
    counts = daily_incidence(make_outbreak())
    assert list(counts.index) == [0, 1, 2, 3]
    assert counts[0].tolist() == [1, 2, 0, 0]
    assert counts[1].tolist() == [0, 0, 0, 2]


def test_daily_incidence_empty():
    assert daily_incidence(Outbreak()).empty


def test_plot_epi_curve(tmp_path):
    path = plot_epi_curve(make_outbreak(), save_path=str(tmp_path / "figs" / "epi.png"))
    assert path.exists()


def test_plot_size_distribution(tmp_path):
    csv_path = tmp_path / "sizes.csv"
    pd.DataFrame({
        "sim_id": [1, 2, 3, 4],
        "n_cases": [1, 2, 2, 12],
        "end_time": [2, 4, 5, 9],
        "max_snps": [0, 0, 1, 3],
        "status": ["complete", "complete", "complete", "overflow"],
    }).to_csv(csv_path, index=False)

    path = plot_size_distribution(str(csv_path), save_path=str(tmp_path / "sizes.png"),
                                  bins=5, size_bin_edges=[1, 5, 10])
    assert path.exists()


def test_load_batch_csv_requires_columns(tmp_path):
    csv_path = tmp_path / "bad.csv"
    pd.DataFrame({"sim_id": [1]}).to_csv(csv_path, index=False)
    with pytest.raises(ValueError):
        load_batch_csv(str(csv_path))
