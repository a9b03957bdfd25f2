# src/outbreak_sim/simulate/outbreak.py
"""
Outbreak store.

Cases are referenced by integer index into three parallel lists (source,
history, genome). ``source[i] is None`` marks a case without an infector.
"""

from __future__ import annotations

from typing import Generic, List, Optional, Sequence, TypeVar

import pandas as pd

from ..case import History

G = TypeVar("G")


class Outbreak(Generic[G]):
    """A simulated outbreak containing a number of cases."""

    def __init__(
        self,
        source: Optional[List[Optional[int]]] = None,
        history: Optional[List[History]] = None,
        genome: Optional[List[G]] = None,
    ):
        self.source: List[Optional[int]] = list(source or [])
        self.history: List[History] = list(history or [])
        self.genome: List[G] = list(genome or [])
        if not len(self.source) == len(self.history) == len(self.genome):
            raise ValueError("source, history and genome must have equal lengths")

    def __repr__(self):
        return f"Outbreak(n_cases={self.n_cases()}, clusters={self.source.count(None)})"

    def append(self, source: Optional[int], history: History, genome: G) -> int:
        """Add one case and return its index."""
        self.source.append(source)
        self.history.append(history)
        self.genome.append(genome)
        return len(self.source) - 1

    def sources(self) -> List[Optional[int]]:
        """Infector of every case.

        None for the index case of each simulation; merged outbreaks and
        background cases contribute more than one None.
        """
        return self.source

    def outbreaks(self) -> List[int]:
        """Outbreak (cluster) number of every case."""
        return get_cluster_ids(self.source)

    def histories(self) -> List[History]:
        return self.history

    def genomes(self) -> List[G]:
        return self.genome

    def n_cases(self) -> int:
        return len(self.source)

    def end_time(self) -> Optional[int]:
        """The latest time stored in the outbreak, None when empty."""
        return max((t for h in self.history for t in h.times()), default=None)

    def time_shift(self, by_amount: int) -> None:
        """Increase all times in this outbreak by a fixed amount."""
        for history in self.history:
            history.time_shift_forward(by_amount)

    def rezero_time(self) -> None:
        """Shift all times so that the earliest event occurs at time zero."""
        start_time = min((t for h in self.history for t in h.times()), default=0)
        for history in self.history:
            history.time_shift_back(start_time)

    def _id_shift(self, by_amount: int) -> None:
        self.source = [s + by_amount if s is not None else None for s in self.source]

    def extend_with(self, other: "Outbreak[G]") -> None:
        """Append all cases from ``other``, shifting its case IDs to avoid collisions.

        ``other`` is consumed and should not be used afterwards.
        """
        other._id_shift(len(self.source))
        self.source.extend(other.source)
        self.history.extend(other.history)
        self.genome.extend(other.genome)

    def write_fasta(self, writer) -> None:
        """Write one FASTA record per case."""
        clusters = self.outbreaks()
        for i, genome in enumerate(self.genome):
            history = self.history[i]
            reported = "" if history.reported is None else history.reported
            parent = "" if self.source[i] is None else f"case{self.source[i]:06d}"
            writer.write(
                f">case{i:06d} day_infected={history.infected} day_reported={reported} "
                f"outbreak={clusters[i]} parent={parent}\n"
            )
            genome.write_nucleotides(writer)
            writer.write("\n")

    def to_dataframe(self) -> pd.DataFrame:
        """Line list with one row per case."""
        rows = []
        for i, (source, cluster, history, genome) in enumerate(
            zip(self.source, self.outbreaks(), self.history, self.genome)
        ):
            rows.append({
                "case_id": i,
                "source": source,
                "outbreak": cluster,
                "infected": history.infected,
                "infectious_onset": history.infectious_onset,
                "infectious_peak": history.infectious_peak,
                "recovered": history.recovered,
                "symptom_onset": history.symptom_onset,
                "reported": history.reported,
                "genome": genome.nucleotides(),
            })
        df = pd.DataFrame(rows, columns=[
            "case_id", "source", "outbreak", "infected", "infectious_onset",
            "infectious_peak", "recovered", "symptom_onset", "reported", "genome",
        ])
        # keep missing links/times as integers
        for col in ("source", "symptom_onset", "reported"):
            df[col] = df[col].astype("Int64")
        return df


def get_cluster_ids(sources: Sequence[Optional[int]]) -> List[int]:
    """Convert a list of sources into cluster IDs.

    Assumes every linked case belongs to the cluster of the nearest preceding
    unlinked case, which holds for outbreaks built by the simulators here but
    not for arbitrary source lists.
    """
    ids = []
    cluster = -1
    for source in sources:
        if source is None:
            cluster += 1
        ids.append(cluster)
    return ids
