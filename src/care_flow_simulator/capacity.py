"""
Congestion and capacity.

System congestion is an exogenous input. Scaled by a disease's competition
sensitivity it lowers the share of desired flow a level can admit and
raises the share of the remainder that waits in a queue.
"""

import math
from dataclasses import dataclass

from scipy.special import expit

from utils.logging import log_call

from .parameters import ParameterSet

# Above this congestion some new cases are deterred from arriving at all.
ARRIVAL_DETERRENCE_THRESHOLD = 0.5


@dataclass(frozen=True)
class CapacityModel:
    """
    Capacity multiplier and queue entry rate for one disease.

    ``capacity_multiplier = exp(-2 * s * kappa)`` and
    ``queue_entry_rate = 1 / (1 + exp(-2 * (s * kappa - 0.5)))``. With zero
    congestion the capacity is unconstrained and the queue subsystem is
    switched off.
    """

    system_congestion: float
    competition_sensitivity: float = 1.0

    @classmethod
    @log_call
    def from_parameters(cls, params: ParameterSet) -> "CapacityModel":
        return cls(params.system_congestion, params.competition_sensitivity)

    @log_call
    def queues_active(self) -> bool:
        return self.system_congestion > 0.0

    @log_call
    def effective_congestion(self) -> float:
        # Over-saturation beyond 1 is allowed.
        return self.system_congestion * self.competition_sensitivity

    @log_call
    def capacity_multiplier(self) -> float:
        if not self.queues_active():
            return 1.0
        return math.exp(-2.0 * self.effective_congestion())

    @log_call
    def queue_entry_rate(self) -> float:
        if not self.queues_active():
            return 0.0
        return float(expit(2.0 * (self.effective_congestion() - 0.5)))

    @log_call
    def arrival_multiplier(self) -> float:
        """Share of new cases that still present when the system is crowded."""
        if self.system_congestion <= ARRIVAL_DETERRENCE_THRESHOLD:
            return 1.0
        excess = self.system_congestion - ARRIVAL_DETERRENCE_THRESHOLD
        return max(0.0, 1.0 - 0.5 * excess)
