"""
Admission queues in front of the four formal care levels.

Each week the engine admits ``capacity_multiplier`` of the demand at every
level, queues part of the rest and works through last week's queues. The
four competing exits (mortality, abandonment, bypass and self-resolution)
and clearance are all fractions of the same snapshot, so their order does
not matter.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from core.data_structures import QueueState
from utils.logging import log_call

from .capacity import CapacityModel
from .parameters import LEVELS, Level, ParameterSet

logger = logging.getLogger(__name__)

Flows = Tuple[float, float, float, float]

_ZERO: Flows = (0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class QueueStep:
    """
    Result of one week of queue dynamics.

    ``admitted`` is the demand that entered each level directly,
    ``queued`` the new queue inflow and ``turned_away`` the remainder that
    neither got in nor waited. Exits are per level; ``next_state`` holds
    the queue sizes for the following week.
    """

    admitted: Flows
    queued: Flows
    turned_away: Flows
    mortality: Flows
    abandonment: Flows
    bypass: Flows
    self_resolved: Flows
    cleared: Flows
    next_state: QueueState

    @log_call
    def total_mortality(self) -> float:
        return float(sum(self.mortality))

    @log_call
    def total_abandonment(self) -> float:
        return float(sum(self.abandonment))

    @log_call
    def total_bypass(self) -> float:
        return float(sum(self.bypass))

    @log_call
    def total_self_resolved(self) -> float:
        return float(sum(self.self_resolved))


class QueueEngine:
    """
    Weekly queue transitions for one disease run.

    Parameters
    ----------
    params : ParameterSet
        Resolved parameters; supplies queue rates, level mortality and AI
        throughput effects
    capacity : CapacityModel, optional
        Built from ``params`` when omitted
    """

    def __init__(self, params: ParameterSet,
                 capacity: Optional[CapacityModel] = None):
        self.params = params
        self.capacity = capacity or CapacityModel.from_parameters(params)
        self._capacity_multiplier = self.capacity.capacity_multiplier()
        self._entry_rate = self.capacity.queue_entry_rate()

    @log_call
    def ai_boost(self, level: Level) -> float:
        """Relative increase in queue clearance from AI at ``level``."""
        p = self.params
        if level == Level.L0:
            return p.resolution_boost
        if level == Level.L1:
            return p.point_of_care_resolution
        hospital = (p.length_of_stay_reduction + p.discharge_optimization
                    + p.treatment_efficiency)
        if level == Level.L2:
            return hospital
        return hospital + p.resource_utilization

    @log_call
    def admit(self, desired: Sequence[float]
              ) -> Tuple[Flows, Flows, Flows]:
        """
        Split desired flow into admitted, queued and turned-away parts.

        ``queued = (desired - admitted) * (1 - p) * queue_entry_rate`` where
        ``p`` is the queue prevention rate.
        """
        desired_arr = np.asarray(desired, dtype=float)
        if not self.capacity.queues_active():
            return tuple(desired_arr.tolist()), _ZERO, _ZERO
        admitted = desired_arr * self._capacity_multiplier
        unmet = desired_arr - admitted
        queued = (unmet * (1.0 - self.params.queue_prevention_rate)
                  * self._entry_rate)
        turned_away = unmet - queued
        return (tuple(admitted.tolist()), tuple(queued.tolist()),
                tuple(turned_away.tolist()))

    @log_call
    def step(self, queues: QueueState, desired: Sequence[float],
             week: int = 0) -> QueueStep:
        """Advance all four queues by one week."""
        admitted, queued, turned_away = self.admit(desired)
        if not self.capacity.queues_active():
            return QueueStep(admitted, queued, turned_away, _ZERO, _ZERO,
                             _ZERO, _ZERO, _ZERO, queues)

        p = self.params
        snapshot = np.asarray(queues.sizes(), dtype=float)
        level_mortality = np.array([p.delta(level) for level in LEVELS])
        mortality = (snapshot * level_mortality
                     * p.congestion_mortality_multiplier
                     * p.competition_sensitivity)
        abandonment = snapshot * p.queue_abandonment_rate
        bypass = snapshot * p.queue_bypass_rate
        self_resolved = snapshot * p.queue_self_resolve_rate

        other_exits = mortality + abandonment + bypass + self_resolved
        # Exits beyond the snapshot are scaled back pro rata.
        overflow = other_exits > snapshot
        if overflow.any():
            scale = np.ones_like(snapshot)
            scale[overflow] = snapshot[overflow] / other_exits[overflow]
            mortality = mortality * scale
            abandonment = abandonment * scale
            bypass = bypass * scale
            self_resolved = self_resolved * scale
            other_exits = other_exits * scale

        boost = np.array([self.ai_boost(level) for level in LEVELS])
        clearance_capacity = (snapshot * p.queue_clearance_rate
                              * self._capacity_multiplier * (1.0 + boost))
        cleared = np.minimum(clearance_capacity,
                             np.maximum(snapshot - other_exits, 0.0))

        next_sizes = snapshot + np.asarray(queued) - other_exits - cleared
        if (next_sizes < 0.0).any():
            logger.debug("Clamping negative queue sizes %s at week %d",
                         next_sizes.tolist(), week)
        next_sizes = np.maximum(next_sizes, 0.0)

        return QueueStep(
            admitted=admitted,
            queued=queued,
            turned_away=turned_away,
            mortality=tuple(mortality.tolist()),
            abandonment=tuple(abandonment.tolist()),
            bypass=tuple(bypass.tolist()),
            self_resolved=tuple(self_resolved.tolist()),
            cleared=tuple(cleared.tolist()),
            next_state=QueueState.from_sizes(tuple(next_sizes.tolist())),
        )
