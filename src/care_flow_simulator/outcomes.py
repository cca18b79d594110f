"""
Health and economic outcomes.

Turns a run's final state into total cost and DALYs, and compares an
intervention result against a baseline as an incremental cost-effectiveness
ratio. Dominance is reported as a status rather than as a ratio, because a
negative-over-negative ICER reads like an ordinary trade-off.
"""

import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from core.data_structures import CompartmentState
from utils.logging import log_call

from .exceptions import MissingBaseline
from .parameters import DAYS_PER_YEAR, ParameterSet


class IcerStatus(str, Enum):
    RATIO = "ratio"
    DOMINANT = "dominant"
    DOMINATED = "dominated"
    NO_HEALTH_CHANGE = "no_health_change"


@dataclass(frozen=True)
class IcerResult:
    """
    Outcome of an ICER comparison.

    ``dalys_averted`` is baseline minus intervention DALYs, so a positive
    value is a health gain. ``value`` is only set for ``RATIO``.
    """

    status: IcerStatus
    value: Optional[float]
    cost_difference: float
    dalys_averted: float

    @log_call
    def is_dominant(self) -> bool:
        return self.status is IcerStatus.DOMINANT


class OutcomeCalculator:
    """
    Cost and DALY calculator bound to one resolved ParameterSet.

    ``TotalCost = sum(days * per_diem) + ai_fixed + ai_variable * episodes``.
    ``DALY = (deaths * max(0, LE - onset age) + sick / 365.25 * DW) * DF``
    where ``sick`` is the final untreated stock plus the accumulated
    patient-days and ``DF = 1 - discount_rate`` for a positive rate and 1
    otherwise.
    """

    def __init__(self, params: ParameterSet):
        self.params = params

    @log_call
    def discount_factor(self) -> float:
        rate = self.params.discount_rate
        return 1.0 - rate if rate > 0 else 1.0

    @log_call
    def years_of_life_lost_per_death(self) -> float:
        return max(0.0, self.params.life_expectancy
                   - self.params.mean_age_of_onset)

    @log_call
    def care_cost(self, state: CompartmentState) -> float:
        days = state.patient_days
        costs = self.params.per_diem_costs
        return (days.informal * costs.informal + days.l0 * costs.l0
                + days.l1 * costs.l1 + days.l2 * costs.l2
                + days.l3 * costs.l3)

    @log_call
    def ai_cost(self, state: CompartmentState) -> float:
        return (self.params.ai_fixed_cost
                + self.params.ai_variable_cost * state.episodes_touched)

    @log_call
    def total_cost(self, state: CompartmentState) -> float:
        return self.care_cost(state) + self.ai_cost(state)

    @log_call
    def dalys(self, state: CompartmentState) -> float:
        discount = self.discount_factor()
        yll = state.d * self.years_of_life_lost_per_death() * discount
        sick = state.u + state.patient_days.total()
        yld = (sick / DAYS_PER_YEAR
               * self.params.disability_weight * discount)
        return yll + yld

    @staticmethod
    @log_call
    def compute_icer(intervention: Any,
                     baseline: Optional[Any] = None) -> Optional[IcerResult]:
        """
        Compare two results exposing ``total_cost`` and ``dalys``.

        Returns ``None`` and emits :class:`MissingBaseline` when no baseline
        is given; the ICER is then omitted, not zero.
        """
        if baseline is None:
            warnings.warn(
                "ICER requested without a baseline result; ICER omitted",
                MissingBaseline,
                stacklevel=3,
            )
            return None
        cost_difference = intervention.total_cost - baseline.total_cost
        dalys_averted = baseline.dalys - intervention.dalys
        if dalys_averted == 0:
            status, value = IcerStatus.NO_HEALTH_CHANGE, None
        elif cost_difference < 0 and dalys_averted > 0:
            status, value = IcerStatus.DOMINANT, None
        elif cost_difference > 0 and dalys_averted < 0:
            status, value = IcerStatus.DOMINATED, None
        else:
            status, value = IcerStatus.RATIO, cost_difference / dalys_averted
        return IcerResult(status, value, cost_difference, dalys_averted)


compute_icer = OutcomeCalculator.compute_icer
