from dataclasses import dataclass, field, fields
from typing import Dict, Tuple

from utils.logging import log_call


@dataclass(frozen=True)
class QueueState:
    """Patients waiting for admission at each formal level."""

    q0: float = 0.0
    q1: float = 0.0
    q2: float = 0.0
    q3: float = 0.0

    @classmethod
    @log_call
    def from_sizes(cls, sizes: Tuple[float, ...]) -> "QueueState":
        return cls(*sizes)

    @log_call
    def sizes(self) -> Tuple[float, float, float, float]:
        return (self.q0, self.q1, self.q2, self.q3)

    @log_call
    def size(self, level: int) -> float:
        return self.sizes()[int(level)]

    @log_call
    def total(self) -> float:
        return self.q0 + self.q1 + self.q2 + self.q3


@dataclass(frozen=True)
class PatientDays:
    """
    Cumulative patient-days by care setting.

    Each week adds the stock left in the compartment at the end of the
    previous week, one unit per patient present, and every unit is billed
    once at the matching per-diem.
    """

    informal: float = 0.0
    l0: float = 0.0
    l1: float = 0.0
    l2: float = 0.0
    l3: float = 0.0

    @log_call
    def total(self) -> float:
        return self.informal + self.l0 + self.l1 + self.l2 + self.l3

    @log_call
    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class CompartmentState:
    """
    Snapshot of one disease's compartments at the end of a week.

    Stocks (``u``, ``i``, ``l0``..``l3`` and the queues) are current
    populations. ``r`` and ``d`` accumulate resolved cases and deaths and
    never decrease. ``cumulative_new`` counts every case that entered the
    system, so the sum of all stocks plus ``r`` and ``d`` equals it.
    """

    week: int = 0
    u: float = 0.0
    i: float = 0.0
    l0: float = 0.0
    l1: float = 0.0
    l2: float = 0.0
    l3: float = 0.0
    queues: QueueState = field(default_factory=QueueState)
    r: float = 0.0
    d: float = 0.0
    patient_days: PatientDays = field(default_factory=PatientDays)
    cumulative_new: float = 0.0
    episodes_touched: float = 0.0
    queue_deaths: float = 0.0

    @log_call
    def levels(self) -> Tuple[float, float, float, float]:
        return (self.l0, self.l1, self.l2, self.l3)

    @log_call
    def active_patients(self) -> float:
        """Everyone still sick: untreated, informal, in care or queued."""
        return (self.u + self.i + sum(self.levels())
                + self.queues.total())

    @log_call
    def population_total(self) -> float:
        return self.active_patients() + self.r + self.d

    @log_call
    def as_record(self) -> Dict[str, float]:
        """Flat mapping used for tabular export."""
        record: Dict[str, float] = {
            "week": self.week,
            "U": self.u,
            "I": self.i,
            "L0": self.l0,
            "L1": self.l1,
            "L2": self.l2,
            "L3": self.l3,
        }
        for level, size in enumerate(self.queues.sizes()):
            record[f"Q{level}"] = size
        record.update({
            "R": self.r,
            "D": self.d,
            "cumulative_new": self.cumulative_new,
            "episodes_touched": self.episodes_touched,
            "queue_deaths": self.queue_deaths,
        })
        for name, days in self.patient_days.as_dict().items():
            record[f"days_{name}"] = days
        return record
