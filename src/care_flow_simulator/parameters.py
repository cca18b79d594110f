"""
Parameter containers for the weekly care flow simulation.

A ``ParameterSet`` is the immutable, per-run configuration consumed by the
engines. All rate fields are weekly probabilities. Once a ParameterSet has
passed through :func:`care_flow_simulator.rate_resolver.resolve_parameters`
it already contains every health-system, country and AI-intervention
effect; the engines never re-apply them.
"""

import math
from dataclasses import asdict, dataclass, field, fields, replace
from enum import IntEnum
from typing import Any, Dict, Mapping, Tuple

from utils.logging import log_call

from .exceptions import InvalidParameter

WEEKS_PER_YEAR = 52
DAYS_PER_YEAR = 365.25


class Level(IntEnum):
    """Formal care levels, from community health workers to tertiary."""

    L0 = 0
    L1 = 1
    L2 = 2
    L3 = 3


LEVELS: Tuple[Level, ...] = tuple(Level)


@dataclass(frozen=True)
class PerDiemCosts:
    """Cost per patient-day (USD) in informal care and each formal level."""

    informal: float = 10.0
    l0: float = 15.0
    l1: float = 35.0
    l2: float = 100.0
    l3: float = 200.0

    @log_call
    def for_level(self, level: Level) -> float:
        return getattr(self, f"l{int(level)}")


@dataclass(frozen=True)
class HealthSystemMultipliers:
    """
    Per-level multiplicative adjustments for a health-system scenario.

    ``mu_*`` scale resolution (alpha), ``delta_*`` scale mortality (beta)
    and ``rho_*`` scale referral (gamma). They are applied exactly once,
    by the rate resolver.
    """

    mu_i: float = 1.0
    mu_l0: float = 1.0
    mu_l1: float = 1.0
    mu_l2: float = 1.0
    mu_l3: float = 1.0
    delta_u: float = 1.0
    delta_i: float = 1.0
    delta_l0: float = 1.0
    delta_l1: float = 1.0
    delta_l2: float = 1.0
    delta_l3: float = 1.0
    rho_l0: float = 1.0
    rho_l1: float = 1.0
    rho_l2: float = 1.0

    @log_call
    def is_identity(self) -> bool:
        return all(getattr(self, f.name) == 1.0 for f in fields(self))


@dataclass(frozen=True)
class ParameterSet:
    """
    Immutable configuration for one simulation run of one disease.

    Parameters
    ----------
    incidence_rate : float
        Annual incidence per person (lambda); not a weekly probability.
    population : float
        Population size the incidence applies to.
    phi0 : float
        Probability that a new case seeks formal care directly.
    informal_care_ratio : float
        Share of non-formal seekers that stay untreated (r); the rest
        enter informal care.
    sigma_i : float
        Weekly informal to formal transfer probability.
    system_congestion : float
        Exogenous congestion in [0, inf); 0 disables the queue subsystem.
    competition_sensitivity : float
        How strongly this disease feels congestion (kappa).
    """

    # Disease burden
    incidence_rate: float = 0.20
    population: float = 300000.0
    disability_weight: float = 0.20
    mean_age_of_onset: float = 30.0
    life_expectancy: float = 70.0
    discount_rate: float = 0.0

    # Care seeking
    phi0: float = 0.45
    informal_care_ratio: float = 0.20
    sigma_i: float = 0.20

    # Resolution
    mu_u: float = 0.05
    mu_i: float = 0.30
    mu_0: float = 0.50
    mu_1: float = 0.60
    mu_2: float = 0.70
    mu_3: float = 0.80

    # Mortality
    delta_u: float = 0.015
    delta_i: float = 0.012
    delta_0: float = 0.008
    delta_1: float = 0.005
    delta_2: float = 0.003
    delta_3: float = 0.002

    # Referral (L3 has none)
    rho_0: float = 0.40
    rho_1: float = 0.25
    rho_2: float = 0.15

    # Congestion and queues
    system_congestion: float = 0.0
    competition_sensitivity: float = 1.0
    queue_prevention_rate: float = 0.0
    queue_abandonment_rate: float = 0.15
    queue_bypass_rate: float = 0.20
    queue_clearance_rate: float = 0.30
    queue_self_resolve_rate: float = 0.10
    congestion_mortality_multiplier: float = 1.0

    # AI effect magnitudes (already scaled by uptake once resolved)
    resolution_boost: float = 0.0
    point_of_care_resolution: float = 0.0
    length_of_stay_reduction: float = 0.0
    discharge_optimization: float = 0.0
    treatment_efficiency: float = 0.0
    resource_utilization: float = 0.0
    visit_reduction: float = 0.0
    direct_routing_improvement: float = 0.0
    self_care_active: bool = False

    # Economics
    per_diem_costs: PerDiemCosts = field(default_factory=PerDiemCosts)
    ai_fixed_cost: float = 0.0
    ai_variable_cost: float = 0.0

    @log_call
    def mu(self, level: Level) -> float:
        return getattr(self, f"mu_{int(level)}")

    @log_call
    def delta(self, level: Level) -> float:
        return getattr(self, f"delta_{int(level)}")

    @log_call
    def rho(self, level: Level) -> float:
        """Referral probability out of ``level``; tertiary care refers nowhere."""
        if level == Level.L3:
            return 0.0
        return getattr(self, f"rho_{int(level)}")

    @log_call
    def weekly_new_cases(self) -> float:
        return self.incidence_rate * self.population / WEEKS_PER_YEAR

    @log_call
    def with_updates(self, **changes: Any) -> "ParameterSet":
        """Return a copy with ``changes`` applied; unknown names are rejected."""
        unknown = set(changes) - FIELD_NAMES
        if unknown:
            raise InvalidParameter(
                f"Unknown parameter(s): {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        if isinstance(changes.get("per_diem_costs"), Mapping):
            changes["per_diem_costs"] = PerDiemCosts(
                **changes["per_diem_costs"])
        return replace(self, **changes)

    @log_call
    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form; floats are emitted untouched."""
        return asdict(self)

    @classmethod
    @log_call
    def from_dict(cls, data: Mapping[str, Any]) -> "ParameterSet":
        """
        Rebuild a ParameterSet from :meth:`to_dict` output.

        An exported scenario mapping (``{"parameters": {...}, ...}``) is also
        accepted; only its ``parameters`` entry is read.
        """
        if "parameters" in data and isinstance(data["parameters"], Mapping):
            data = data["parameters"]
        values = dict(data)
        unknown = set(values) - FIELD_NAMES
        if unknown:
            raise InvalidParameter(
                f"Unknown parameter(s): {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        costs = values.get("per_diem_costs")
        if isinstance(costs, Mapping):
            values["per_diem_costs"] = PerDiemCosts(**costs)
        return cls(**values)


FIELD_NAMES = frozenset(f.name for f in fields(ParameterSet))

# Every field that is a weekly probability and must lie in [0, 1].
PROBABILITY_FIELDS: Tuple[str, ...] = (
    "phi0", "informal_care_ratio", "sigma_i",
    "mu_u", "mu_i", "mu_0", "mu_1", "mu_2", "mu_3",
    "delta_u", "delta_i", "delta_0", "delta_1", "delta_2", "delta_3",
    "rho_0", "rho_1", "rho_2",
    "queue_prevention_rate", "queue_abandonment_rate", "queue_bypass_rate",
    "queue_clearance_rate", "queue_self_resolve_rate",
    "resolution_boost", "point_of_care_resolution",
    "length_of_stay_reduction", "discharge_optimization",
    "treatment_efficiency", "resource_utilization",
    "visit_reduction", "direct_routing_improvement",
    "discount_rate",
)

NON_NEGATIVE_FIELDS: Tuple[str, ...] = (
    "incidence_rate", "population", "disability_weight", "mean_age_of_onset",
    "life_expectancy", "system_congestion", "competition_sensitivity",
    "congestion_mortality_multiplier", "ai_fixed_cost", "ai_variable_cost",
)

# Competing weekly exits per compartment; each group must sum to <= 1.
COMPETING_EXITS: Dict[str, Tuple[str, ...]] = {
    "U": ("mu_u", "delta_u"),
    "I": ("sigma_i", "mu_i", "delta_i"),
    "L0": ("mu_0", "delta_0", "rho_0"),
    "L1": ("mu_1", "delta_1", "rho_1"),
    "L2": ("mu_2", "delta_2", "rho_2"),
    "L3": ("mu_3", "delta_3"),
}

_EXIT_TOLERANCE = 1e-12


@log_call
def validate_parameters(params: ParameterSet) -> None:
    """
    Check ranges and competing-exit sums of a (resolved) ParameterSet.

    Raises
    ------
    InvalidParameter
        If any probability lies outside [0, 1], a non-negative field is
        negative, any value is not finite, or the competing exits of one
        compartment sum to more than 1.
    """
    for name in PROBABILITY_FIELDS + NON_NEGATIVE_FIELDS:
        value = getattr(params, name)
        if not math.isfinite(value):
            raise InvalidParameter(f"{name} is not finite ({value})", name)
    for name in PROBABILITY_FIELDS:
        value = getattr(params, name)
        if not 0.0 <= value <= 1.0:
            raise InvalidParameter(
                f"{name} must be a weekly probability in [0, 1], got {value}",
                name,
            )
    for name in NON_NEGATIVE_FIELDS:
        value = getattr(params, name)
        if value < 0.0:
            raise InvalidParameter(
                f"{name} must be non-negative, got {value}", name)
    for cost_name, cost in asdict(params.per_diem_costs).items():
        if not math.isfinite(cost) or cost < 0.0:
            raise InvalidParameter(
                f"per_diem_costs.{cost_name} must be a non-negative number, "
                f"got {cost}",
                "per_diem_costs",
            )
    for compartment, names in COMPETING_EXITS.items():
        total = sum(getattr(params, n) for n in names)
        if total > 1.0 + _EXIT_TOLERANCE:
            raise InvalidParameter(
                f"Weekly exits from {compartment} sum to {total:.6g} > 1 "
                f"({' + '.join(names)})",
                names[0],
            )
