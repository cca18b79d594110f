"""
AI intervention effects on care-flow parameters.

Every intervention kind maps to a table of effects keyed by the
ParameterSet field it touches. Resolution and care-seeking effects are
additive, mortality, referral and transfer effects are multipliers, and
the remaining operational effects (queue prevention, resolution boost,
length-of-stay reduction and friends) are assigned outright. Effects are
scaled by an optional per-effect magnitude and by the intervention's
effective uptake before they are applied.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Union

from utils.logging import log_call

from .parameters import ParameterSet


class AIIntervention(str, Enum):
    """Closed set of AI intervention kinds."""

    TRIAGE = "triage"
    CHW = "chw"
    DIAGNOSTIC = "diagnostic"
    BED_MANAGEMENT = "bed_management"
    HOSPITAL_DECISION = "hospital_decision"
    SELF_CARE = "self_care"


# Application order; later interventions see the effects of earlier ones.
INTERVENTION_ORDER = (
    AIIntervention.TRIAGE,
    AIIntervention.CHW,
    AIIntervention.DIAGNOSTIC,
    AIIntervention.BED_MANAGEMENT,
    AIIntervention.HOSPITAL_DECISION,
    AIIntervention.SELF_CARE,
)

ADDITIVE_EFFECTS = frozenset({"phi0", "mu_i", "mu_0", "mu_1", "mu_2", "mu_3"})
MULTIPLICATIVE_EFFECTS = frozenset({
    "sigma_i", "delta_i", "delta_0", "delta_1", "delta_2", "delta_3",
    "rho_0", "rho_1", "rho_2",
})
ASSIGNED_EFFECTS = frozenset({
    "queue_prevention_rate", "resolution_boost", "point_of_care_resolution",
    "length_of_stay_reduction", "discharge_optimization",
    "treatment_efficiency", "resource_utilization",
})
# Self-care effects applied once every other effect is in place.
DEFERRED_EFFECTS = frozenset({"visit_reduction", "direct_routing_improvement"})

BASE_EFFECTS: Dict[AIIntervention, Dict[str, float]] = {
    AIIntervention.TRIAGE: {
        "phi0": 0.15, "sigma_i": 1.25, "queue_prevention_rate": 0.35,
    },
    AIIntervention.CHW: {
        "mu_0": 0.15, "delta_0": 0.97, "rho_0": 0.70,
        "resolution_boost": 0.20,
    },
    AIIntervention.DIAGNOSTIC: {
        "mu_1": 0.18, "delta_1": 0.97, "rho_1": 0.65,
        "mu_2": 0.12, "delta_2": 0.98, "rho_2": 0.75,
        "point_of_care_resolution": 0.35,
    },
    AIIntervention.BED_MANAGEMENT: {
        "mu_2": 0.10, "mu_3": 0.10,
        "length_of_stay_reduction": 0.35, "discharge_optimization": 0.40,
    },
    AIIntervention.HOSPITAL_DECISION: {
        "delta_2": 0.97, "delta_3": 0.97,
        "treatment_efficiency": 0.30, "resource_utilization": 0.40,
    },
    AIIntervention.SELF_CARE: {
        "phi0": 0.12, "sigma_i": 1.20, "queue_prevention_rate": 0.40,
        "mu_i": 0.15, "delta_i": 0.96,
        "visit_reduction": 0.20, "direct_routing_improvement": 0.25,
    },
}

_T = AIIntervention

# Overrides merged over BASE_EFFECTS for the named disease.
DISEASE_EFFECTS: Dict[str, Dict[AIIntervention, Dict[str, float]]] = {
    "childhood_pneumonia": {
        _T.DIAGNOSTIC: {"mu_1": 0.30, "delta_1": 0.85, "rho_1": 0.75,
                        "mu_2": 0.15, "delta_2": 0.88, "rho_2": 0.85},
        _T.CHW: {"mu_0": 0.20, "delta_0": 0.85, "rho_0": 0.80},
        _T.SELF_CARE: {"mu_i": 0.02, "delta_i": 0.98},
    },
    "malaria": {
        _T.DIAGNOSTIC: {"mu_1": 0.30, "delta_1": 0.80, "rho_1": 0.75,
                        "mu_2": 0.12, "delta_2": 0.85, "rho_2": 0.90},
        _T.CHW: {"mu_0": 0.25, "delta_0": 0.85, "rho_0": 0.75},
        _T.SELF_CARE: {"mu_i": 0.05, "delta_i": 0.95},
    },
    "diarrhea": {
        _T.SELF_CARE: {"mu_i": 0.25, "delta_i": 0.92},
        _T.CHW: {"mu_0": 0.20, "delta_0": 0.80, "rho_0": 0.80},
        _T.DIAGNOSTIC: {"mu_1": 0.25, "delta_1": 0.85, "rho_1": 0.80,
                        "mu_2": 0.10, "delta_2": 0.90, "rho_2": 0.92},
        _T.TRIAGE: {"phi0": 0.12, "sigma_i": 1.25},
    },
    "tuberculosis": {
        _T.CHW: {"mu_0": 0.08, "delta_0": 0.90, "rho_0": 1.25},
        _T.DIAGNOSTIC: {"mu_1": 0.35, "delta_1": 0.75, "rho_1": 0.75,
                        "mu_2": 0.20, "delta_2": 0.80, "rho_2": 0.80},
        _T.HOSPITAL_DECISION: {"delta_2": 0.85, "delta_3": 0.85},
        _T.SELF_CARE: {"mu_i": 0.20, "delta_i": 0.92},
    },
    "high_risk_pregnancy_low_anc": {
        _T.CHW: {"mu_0": 0.08, "delta_0": 0.90, "rho_0": 1.30},
        _T.DIAGNOSTIC: {"mu_1": 0.15, "delta_1": 0.90, "rho_1": 1.25,
                        "mu_2": 0.12, "delta_2": 0.92, "rho_2": 1.15},
        _T.TRIAGE: {"phi0": 0.20, "sigma_i": 1.30},
        _T.HOSPITAL_DECISION: {"delta_2": 0.85, "delta_3": 0.85},
        _T.SELF_CARE: {"mu_i": 0.15, "delta_i": 0.90},
    },
    "congestive_heart_failure": {
        _T.SELF_CARE: {"mu_i": 0.015, "delta_i": 0.996,
                       "visit_reduction": 0.02,
                       "direct_routing_improvement": 0.025},
        _T.TRIAGE: {"queue_prevention_rate": 0.36, "phi0": 0.108,
                    "sigma_i": 1.18},
        _T.CHW: {"mu_0": 0.045, "delta_0": 0.97, "rho_0": 1.06},
        _T.DIAGNOSTIC: {"mu_1": 0.14, "delta_1": 0.91, "rho_1": 0.86,
                        "mu_2": 0.105, "delta_2": 0.895, "rho_2": 0.93},
        _T.BED_MANAGEMENT: {"length_of_stay_reduction": 0.18,
                            "discharge_optimization": 0.135},
        _T.HOSPITAL_DECISION: {"treatment_efficiency": 0.225,
                               "resource_utilization": 0.27,
                               "delta_2": 0.82, "delta_3": 0.77},
    },
    "hiv_management_chronic": {
        _T.SELF_CARE: {"mu_i": 0.30, "delta_i": 0.92},
        _T.CHW: {"mu_0": 0.15, "delta_0": 0.85, "rho_0": 1.05},
        _T.DIAGNOSTIC: {"mu_1": 0.10, "delta_1": 0.85, "rho_1": 0.90,
                        "mu_2": 0.12, "delta_2": 0.82, "rho_2": 0.88},
    },
    "urti": {
        _T.CHW: {"mu_0": 0.08, "delta_0": 0.98, "rho_0": 0.70},
        _T.DIAGNOSTIC: {"mu_1": 0.05, "delta_1": 0.98, "rho_1": 0.70,
                        "mu_2": 0.03, "delta_2": 0.98, "rho_2": 0.75},
        _T.SELF_CARE: {"mu_i": 0.08, "delta_i": 0.97},
    },
    "fever": {
        _T.CHW: {"mu_0": 0.12, "delta_0": 0.90, "rho_0": 0.85},
        _T.DIAGNOSTIC: {"mu_1": 0.15, "delta_1": 0.88, "rho_1": 0.85,
                        "mu_2": 0.10, "delta_2": 0.90, "rho_2": 0.87},
        _T.TRIAGE: {"phi0": 0.10, "sigma_i": 1.20},
        _T.SELF_CARE: {"mu_i": 0.10, "delta_i": 0.96},
    },
    "anemia": {
        _T.CHW: {"mu_0": 0.15, "delta_0": 0.95, "rho_0": 0.80},
        _T.DIAGNOSTIC: {"mu_1": 0.20, "delta_1": 0.90, "rho_1": 0.80,
                        "mu_2": 0.15, "delta_2": 0.85, "rho_2": 0.82},
        _T.SELF_CARE: {"mu_i": 0.08, "delta_i": 0.99},
    },
    "hiv_opportunistic": {
        _T.CHW: {"mu_0": 0.08, "delta_0": 0.90, "rho_0": 1.35},
        _T.DIAGNOSTIC: {"mu_1": 0.30, "delta_1": 0.85, "rho_1": 1.20,
                        "mu_2": 0.25, "delta_2": 0.80, "rho_2": 1.10},
        _T.TRIAGE: {"phi0": 0.15, "sigma_i": 1.30},
        _T.HOSPITAL_DECISION: {"delta_2": 0.85, "delta_3": 0.80},
    },
}


@dataclass(frozen=True)
class InterventionCost:
    """Fixed programme cost and variable cost per episode touched (USD)."""

    fixed: float
    variable: float


INTERVENTION_COSTS: Dict[AIIntervention, InterventionCost] = {
    AIIntervention.TRIAGE: InterventionCost(fixed=200000, variable=2.5),
    AIIntervention.CHW: InterventionCost(fixed=150000, variable=1.5),
    AIIntervention.DIAGNOSTIC: InterventionCost(fixed=300000, variable=1.0),
    AIIntervention.BED_MANAGEMENT: InterventionCost(fixed=250000, variable=1.5),
    AIIntervention.HOSPITAL_DECISION: InterventionCost(fixed=400000,
                                                       variable=3.0),
    AIIntervention.SELF_CARE: InterventionCost(fixed=100000, variable=0.5),
}


@dataclass(frozen=True)
class UptakeParameters:
    """
    Share of the target population reached by each intervention.

    Patient-facing tools (triage, self-care) start lower than
    provider-facing ones. The effective uptake of an intervention is its
    base uptake times ``global_uptake`` times the urban or rural
    multiplier, clamped to [0, 1].
    """

    triage: float = 0.33
    chw: float = 0.66
    diagnostic: float = 0.66
    bed_management: float = 0.66
    hospital_decision: float = 0.66
    self_care: float = 0.33
    global_uptake: float = 1.0
    urban_multiplier: float = 1.2
    rural_multiplier: float = 0.7

    @log_call
    def effective_uptake(self, intervention: AIIntervention,
                         is_urban: bool = True) -> float:
        setting = self.urban_multiplier if is_urban else self.rural_multiplier
        uptake = getattr(self, intervention.value) * self.global_uptake * setting
        return max(0.0, min(1.0, uptake))


InterventionsLike = Union[Iterable[Union[AIIntervention, str]],
                          Mapping[str, bool]]


@log_call
def parse_interventions(interventions: Optional[InterventionsLike]
                        ) -> FrozenSet[AIIntervention]:
    """
    Normalize intervention selections to a frozenset of AIIntervention.

    Accepts either an iterable of kinds (enum members or their string
    values) or a mapping of kind name to an on/off flag.

    Raises
    ------
    ValueError
        If a name is not a known intervention kind
    """
    if interventions is None:
        return frozenset()
    if isinstance(interventions, Mapping):
        names = [name for name, active in interventions.items() if active]
    else:
        names = list(interventions)
    selected = set()
    for name in names:
        try:
            selected.add(AIIntervention(name))
        except ValueError:
            known = ", ".join(kind.value for kind in AIIntervention)
            raise ValueError(
                f"Unknown AI intervention '{name}'. Known: {known}") from None
    return frozenset(selected)


@log_call
def effects_for(intervention: AIIntervention,
                disease: Optional[str] = None) -> Dict[str, float]:
    """Base effects of ``intervention`` overlaid by the disease's overrides."""
    effects = dict(BASE_EFFECTS[intervention])
    effects.update(DISEASE_EFFECTS.get(disease or "", {}).get(intervention, {}))
    return effects


@log_call
def scale_effect(effect: float, magnitude: float, uptake: float,
                 multiplicative: bool = False) -> float:
    """
    Scale a raw effect by magnitude and uptake.

    A multiplier keeps its direction: 0.85 at half uptake becomes 0.925,
    1.25 at half uptake becomes 1.125. Additive effects scale linearly.
    """
    if multiplicative:
        return 1.0 + (effect - 1.0) * magnitude * uptake
    return effect * magnitude * uptake


@log_call
def effect_key(intervention: AIIntervention, name: str) -> str:
    """Key of an effect in an effect-magnitude table, e.g. ``chw_mu_0``."""
    return f"{intervention.value}_{name}"


@log_call
def apply_ai_interventions(
    params: ParameterSet,
    interventions: Optional[InterventionsLike],
    disease: Optional[str] = None,
    uptake: Optional[UptakeParameters] = None,
    is_urban: bool = True,
    effect_magnitudes: Optional[Mapping[str, float]] = None,
) -> ParameterSet:
    """
    Apply the selected AI interventions to a parameter set.

    Parameters
    ----------
    params : ParameterSet
        Parameters with health-system and country effects already applied
    interventions : iterable or mapping
        Active intervention kinds, see :func:`parse_interventions`
    disease : str, optional
        Disease id selecting disease-specific effect overrides
    uptake : UptakeParameters, optional
        Uptake settings; defaults to :class:`UptakeParameters()`
    is_urban : bool, default=True
        Selects the urban or rural uptake multiplier
    effect_magnitudes : mapping, optional
        Per-effect scale keyed by :func:`effect_key`; missing keys mean 1

    Returns
    -------
    ParameterSet
        Copy with the effects, AI costs and self-care flag applied. Values
        are not clamped; the rate resolver validates the result.
    """
    selected = parse_interventions(interventions)
    if not selected:
        return params
    uptake = uptake or UptakeParameters()
    magnitudes = effect_magnitudes or {}

    values = {name: getattr(params, name)
              for name in ADDITIVE_EFFECTS | MULTIPLICATIVE_EFFECTS
              | ASSIGNED_EFFECTS}
    fixed_cost = params.ai_fixed_cost
    variable_cost = params.ai_variable_cost
    deferred: Dict[str, float] = {}
    self_care_uptake = 0.0

    for intervention in INTERVENTION_ORDER:
        if intervention not in selected:
            continue
        reach = uptake.effective_uptake(intervention, is_urban)
        for name, effect in effects_for(intervention, disease).items():
            magnitude = magnitudes.get(effect_key(intervention, name), 1.0)
            if name in ADDITIVE_EFFECTS:
                values[name] += scale_effect(effect, magnitude, reach)
            elif name in MULTIPLICATIVE_EFFECTS:
                values[name] *= scale_effect(effect, magnitude, reach, True)
            elif name == "queue_prevention_rate":
                values[name] = max(values[name],
                                   scale_effect(effect, magnitude, reach))
            elif name in ASSIGNED_EFFECTS:
                values[name] = scale_effect(effect, magnitude, reach)
            elif name in DEFERRED_EFFECTS:
                deferred[name] = effect * magnitude
        cost = INTERVENTION_COSTS[intervention]
        fixed_cost += cost.fixed
        variable_cost += cost.variable * reach
        if intervention is AIIntervention.SELF_CARE:
            self_care_uptake = reach

    if AIIntervention.SELF_CARE in selected:
        # Only would-be informal care users can be kept home by the app.
        informal_usage = (1.0 - values["phi0"]) * (
            1.0 - params.informal_care_ratio)
        values["visit_reduction"] = (deferred.get("visit_reduction", 0.0)
                                     * informal_usage * self_care_uptake)
        values["direct_routing_improvement"] = (
            deferred.get("direct_routing_improvement", 0.0)
            * self_care_uptake)
        values["self_care_active"] = True

    return params.with_updates(ai_fixed_cost=fixed_cost,
                               ai_variable_cost=variable_cost, **values)
