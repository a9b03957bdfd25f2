# src/outbreak_sim/simulate/plot_outbreak.py
from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

# ---------- IO and helpers ----------

def load_batch_csv(path: str) -> pd.DataFrame:
    df = pd.read_csv(path)
    missing = {"n_cases", "status"} - set(df.columns)
    if missing:
        raise ValueError(f"Batch CSV {path} is missing columns: {sorted(missing)}")
    return df

def daily_incidence(outbreak) -> pd.DataFrame:
    """Cases per infection day (rows) and outbreak cluster (columns)."""
    df = outbreak.to_dataframe()
    if df.empty:
        return pd.DataFrame()
    counts = pd.crosstab(df["infected"], df["outbreak"])
    days = np.arange(0, int(df["infected"].max()) + 1)
    return counts.reindex(days, fill_value=0)

# ---------- plotting routines ----------

def plot_epi_curve(
    outbreak,
    save_path: str = "figs/epi_curve.png",
    figsize: Tuple[int, int] = (10, 6),
    max_legend: int = 12,
):
    """
    Stacked bar chart of new infections per time step, one colour per cluster.
    """
    counts = daily_incidence(outbreak)
    fig, ax = plt.subplots(figsize=figsize)

    bottom = np.zeros(len(counts))
    for cluster in counts.columns:
        values = counts[cluster].to_numpy()
        label = f"outbreak {cluster}" if len(counts.columns) <= max_legend else None
        ax.bar(counts.index, values, bottom=bottom, width=1.0, label=label, edgecolor="none")
        bottom += values

    ax.set_xlabel("Time step of infection")
    ax.set_ylabel("New cases")
    ax.set_title(f"Simulated outbreak ({outbreak.n_cases()} cases)")
    if 0 < len(counts.columns) <= max_legend:
        ax.legend(loc="upper right", fontsize=8)
    ax.grid(alpha=0.2)

    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(save_path, dpi=150)
    plt.close(fig)
    return save_path

def plot_size_distribution(
    csv_path: str,
    save_path: str = "figs/outbreak_sizes.png",
    bins: int = 30,
    size_bin_edges: Optional[Sequence[int]] = None,
    figsize: Tuple[int, int] = (10, 6),
):
    """
    Histogram of batch outbreak sizes split by status; optional vertical lines
    mark candidate size bin edges.
    """
    df = load_batch_csv(csv_path)
    fig, ax = plt.subplots(figsize=figsize)

    edges = np.histogram_bin_edges(df["n_cases"], bins=bins)
    for status, group in df.groupby("status"):
        ax.hist(group["n_cases"], bins=edges, alpha=0.7, label=f"{status} (n={len(group)})")

    if size_bin_edges is not None:
        for edge in size_bin_edges:
            ax.axvline(edge, color="red", linestyle="--", linewidth=1)

    ax.set_xlabel("Cases per outbreak")
    ax.set_ylabel("Simulations")
    ax.set_yscale("log")
    ax.legend()

    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(save_path, dpi=150)
    plt.close(fig)
    return save_path
