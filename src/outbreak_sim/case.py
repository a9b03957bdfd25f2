# src/outbreak_sim/case.py
"""
Case-level information for disease models.

A disease model produces a ``CaseHistory`` for every new case. The simulation
splits it into a transient ``Case`` (the infectivity schedule that is stepped
through time) and a persistent ``History`` (milestone times kept in the
outbreak).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple


@dataclass
class CaseHistory:
    """Information generated about a case, relative to its exposure time.

    infectivity :
        Expected transmissions per time step. ``infectivity[0]`` is the first
        step after exposure; leading zeros are the latent period. The sum of
        the curve is the expected number of infectees.
    symptom_onset :
        Time after exposure when symptoms begin, if at all.
    reported :
        Time after exposure when the case would be reported.
    """
    infectivity: List[float] = field(default_factory=list)
    symptom_onset: Optional[int] = None
    reported: Optional[int] = None

    def into_case_history(self) -> Tuple["Case", "History"]:
        """Split into the stepping state machine and the stored history."""
        onset, peak, recovered = milestones(self.infectivity)
        case = Case(list(reversed(self.infectivity)))
        history = History(
            infected=0,
            infectious_onset=onset,
            infectious_peak=peak,
            recovered=recovered,
            reported=self.reported,
            symptom_onset=self.symptom_onset,
        )
        return case, history


def milestones(infectivity: Sequence[float]) -> Tuple[int, int, int]:
    """Return (onset, peak, recovered) time indices of an infectivity curve.

    Onset is the first positive step, peak the first step reaching the
    maximum, recovered the first non-positive step after onset (or the curve
    length when the case is still infectious at the end).
    """
    ever_infectious = False
    onset = 0
    peak, peak_val = 0, 0.0
    recovered = 0

    for t, inf in enumerate(infectivity):
        if inf > peak_val:
            peak, peak_val = t, inf

        if not ever_infectious and inf > 0.0:
            ever_infectious = True
            onset = t

        if ever_infectious and inf <= 0.0:
            recovered = t
            break

        recovered = t + 1

    # an all-zero curve never becomes infectious
    if not ever_infectious:
        recovered = 0

    return onset, peak, recovered


class CaseState(enum.Enum):
    LATENT = "latent"
    ACTIVE = "active"
    RECOVERED = "recovered"


class Case:
    """Infectivity state machine for one case.

    The remaining schedule is stored reversed so that each step pops from the
    end of the list. Only latent and active cases carry a schedule.
    """

    __slots__ = ("state", "_schedule")

    def __init__(self, reversed_schedule: List[float]):
        self.state = CaseState.LATENT
        self._schedule: Optional[List[float]] = reversed_schedule

    def __repr__(self):
        return f"Case({self.state.value}, remaining={len(self._schedule or [])})"

    def is_recovered(self) -> bool:
        return self.state is CaseState.RECOVERED

    def _recover(self) -> float:
        self.state = CaseState.RECOVERED
        self._schedule = None
        return 0.0

    def step(self) -> float:
        """Advance one time step and return this step's infectivity."""
        if self.state is CaseState.RECOVERED:
            return 0.0

        if not self._schedule:
            return self._recover()
        value = self._schedule.pop()

        if self.state is CaseState.LATENT:
            if value > 0.0:
                self.state = CaseState.ACTIVE
                return value
            # still in the latent period
            return 0.0

        if value <= 0.0:
            return self._recover()
        return value


@dataclass
class History:
    """Milestone times of a case, relative to the start of the outbreak."""
    infected: int
    infectious_onset: int
    infectious_peak: int
    recovered: int
    reported: Optional[int] = None
    symptom_onset: Optional[int] = None

    def time_shift_forward(self, offset: int) -> None:
        self.infected += offset
        self.infectious_onset += offset
        self.infectious_peak += offset
        self.recovered += offset
        if self.reported is not None:
            self.reported += offset
        if self.symptom_onset is not None:
            self.symptom_onset += offset

    def time_shift_back(self, offset: int) -> None:
        self.time_shift_forward(-offset)

    def times(self) -> Iterator[int]:
        """Iterate over every event time that is set."""
        for time in (
            self.infected,
            self.infectious_onset,
            self.infectious_peak,
            self.recovered,
            self.symptom_onset,
            self.reported,
        ):
            if time is not None:
                yield time
