"""
Weekly update of the compartment state vector.

New cases split between formal care, informal care and no care. Untreated
and informal patients resolve or die; informal patients also move on to
formal care. Formal entries go to L0 (or, with AI direct routing on a
congested system, partly straight to L1 and L2), and every level resolves,
loses and refers a fixed share of its patients. Admission to each level
runs through the QueueEngine.

Flows out of a compartment are always computed on last week's stock, so a
new arrival spends at least one week in its compartment.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from core.data_structures import CompartmentState, PatientDays
from utils.logging import log_call

from .capacity import ARRIVAL_DETERRENCE_THRESHOLD, CapacityModel
from .exceptions import NegativeStock, NumericInstability
from .parameters import LEVELS, ParameterSet
from .queue_engine import QueueEngine, QueueStep

logger = logging.getLogger(__name__)

# Absolute float drift tolerated before a negative stock is a defect.
NEGATIVE_TOLERANCE = 1e-9

# Share of directly routed patients sent to L1; the rest go to L2.
DIRECT_ROUTING_L1_SHARE = 0.6


@dataclass(frozen=True)
class WeeklyFlows:
    """Intermediate flows of one week, kept for inspection and tests."""

    new_cases: float
    avoided_visits: float
    deterred: float
    formal_new: float
    informal_new: float
    untreated_new: float
    informal_to_formal: float
    direct_l1: float
    direct_l2: float
    queue: QueueStep


class CompartmentEngine:
    """
    Advances one disease's compartments a week at a time.

    Parameters
    ----------
    params : ParameterSet
        Fully resolved parameters; no further effects are applied here
    queue_engine : QueueEngine, optional
        Built from ``params`` when omitted
    """

    def __init__(self, params: ParameterSet,
                 queue_engine: Optional[QueueEngine] = None):
        self.params = params
        self.capacity = CapacityModel.from_parameters(params)
        self.queue_engine = queue_engine or QueueEngine(params, self.capacity)
        self.last_flows: Optional[WeeklyFlows] = None

    @log_call
    def initial_state(self) -> CompartmentState:
        return CompartmentState()

    @log_call
    def direct_routing_share(self) -> float:
        """Share of formal entries routed past L0 by AI on a congested system."""
        p = self.params
        if (p.direct_routing_improvement <= 0.0
                or p.system_congestion <= ARRIVAL_DETERRENCE_THRESHOLD):
            return 0.0
        return min(1.0, p.direct_routing_improvement * p.system_congestion)

    @log_call
    def step(self, state: CompartmentState) -> CompartmentState:
        """
        Compute the state one week after ``state``.

        Raises
        ------
        NegativeStock
            If a compartment would fall below zero by more than float drift
        NumericInstability
            If a compartment becomes NaN or infinite
        """
        p = self.params
        week = state.week + 1

        new_cases = p.weekly_new_cases()
        avoided = new_cases * p.visit_reduction
        presenting = new_cases - avoided
        arriving = presenting * self.capacity.arrival_multiplier()
        deterred = presenting - arriving

        formal_new = p.phi0 * arriving
        non_formal = arriving - formal_new
        informal_new = (1.0 - p.informal_care_ratio) * non_formal
        untreated_new = non_formal - informal_new + deterred

        u_deaths = p.delta_u * state.u
        u_resolved = p.mu_u * state.u
        i_transfer = p.sigma_i * state.i
        i_resolved = p.mu_i * state.i
        i_deaths = p.delta_i * state.i

        formal_entries = formal_new + i_transfer
        routed = formal_entries * self.direct_routing_share()
        direct_l1 = routed * DIRECT_ROUTING_L1_SHARE
        direct_l2 = routed - direct_l1

        stocks = state.levels()
        resolved = [p.mu(level) * stocks[level] for level in LEVELS]
        deaths = [p.delta(level) * stocks[level] for level in LEVELS]
        referred = [p.rho(level) * stocks[level] for level in LEVELS]

        desired = (formal_entries - routed, referred[0], referred[1],
                   referred[2])
        queue = self.queue_engine.step(state.queues, desired, week)

        levels = []
        for level in LEVELS:
            value = (stocks[level] - resolved[level] - deaths[level]
                     - referred[level] + queue.admitted[level]
                     + queue.cleared[level])
            # Referrals that were neither admitted nor queued stay put.
            if level < 3:
                value += queue.turned_away[level + 1]
            levels.append(value)
        levels[1] += direct_l1
        levels[2] += direct_l2

        u_next = (state.u - u_deaths - u_resolved + untreated_new
                  + queue.total_abandonment())
        i_next = (state.i - i_transfer - i_resolved - i_deaths + informal_new
                  + queue.total_bypass() + queue.turned_away[0])

        r_next = (state.r + u_resolved + i_resolved + sum(resolved)
                  + avoided + queue.total_self_resolved())
        queue_deaths = queue.total_mortality()
        d_next = (state.d + u_deaths + i_deaths + sum(deaths)
                  + queue_deaths)

        patient_days = self._accumulate_days(state)
        episodes = formal_new + i_transfer
        if p.self_care_active:
            episodes += state.i

        checked = {
            "U": u_next, "I": i_next,
            "L0": levels[0], "L1": levels[1],
            "L2": levels[2], "L3": levels[3],
            "R": r_next, "D": d_next,
        }
        checked = {name: self._check(name, value, week)
                   for name, value in checked.items()}
        for level, size in enumerate(queue.next_state.sizes()):
            self._check(f"Q{level}", size, week)

        self.last_flows = WeeklyFlows(
            new_cases=new_cases,
            avoided_visits=avoided,
            deterred=deterred,
            formal_new=formal_new,
            informal_new=informal_new,
            untreated_new=untreated_new,
            informal_to_formal=i_transfer,
            direct_l1=direct_l1,
            direct_l2=direct_l2,
            queue=queue,
        )

        return CompartmentState(
            week=week,
            u=checked["U"],
            i=checked["I"],
            l0=checked["L0"],
            l1=checked["L1"],
            l2=checked["L2"],
            l3=checked["L3"],
            queues=queue.next_state,
            r=checked["R"],
            d=checked["D"],
            patient_days=patient_days,
            cumulative_new=state.cumulative_new + new_cases,
            episodes_touched=state.episodes_touched + episodes,
            queue_deaths=state.queue_deaths + queue_deaths,
        )

    def _accumulate_days(self, state: CompartmentState) -> PatientDays:
        p = self.params
        days = state.patient_days
        stay = 1.0 - p.length_of_stay_reduction
        return PatientDays(
            informal=days.informal + state.i,
            l0=days.l0 + state.l0 * (1.0 - 0.5 * p.resolution_boost),
            l1=days.l1 + state.l1 * (1.0 - 0.5 * p.point_of_care_resolution),
            l2=days.l2 + state.l2 * stay,
            l3=days.l3 + state.l3 * stay,
        )

    @staticmethod
    def _check(compartment: str, value: float, week: int) -> float:
        if not math.isfinite(value):
            logger.error("Compartment %s is not finite (%s) at week %d",
                         compartment, value, week)
            raise NumericInstability(compartment, week, value)
        if value < -NEGATIVE_TOLERANCE:
            logger.error("Compartment %s went negative (%g) at week %d",
                         compartment, value, week)
            raise NegativeStock(compartment, week, value)
        return max(value, 0.0)
