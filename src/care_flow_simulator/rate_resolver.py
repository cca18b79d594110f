"""
Resolution of the effective per-run parameter set.

The resolver layers, in order: the base ParameterSet, the health-system
preset's direct values, the disease's clinical rates, caller overrides,
the health-system alpha/beta/gamma multipliers, country adjustments and
finally AI intervention effects. The result is validated once and handed
to the engines, which never re-apply any of these effects.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, FrozenSet, Mapping, Optional, Union

from utils.logging import log_call

from .countries import adjust_for_country, get_country_profile
from .diseases import DISEASE_PROFILES, DiseaseProfile, get_disease_profile
from .exceptions import InvalidParameter
from .health_systems import HealthSystemProfile, get_health_system
from .interventions import (
    AIIntervention,
    InterventionsLike,
    UptakeParameters,
    apply_ai_interventions,
    parse_interventions,
)
from .parameters import HealthSystemMultipliers, ParameterSet, validate_parameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionContext:
    """
    Scenario settings shared by every disease of one run.

    ``multipliers`` replaces the preset's multipliers when given; with no
    preset and no multipliers the identity multipliers apply.
    """

    health_system: Optional[Union[str, HealthSystemProfile]] = None
    multipliers: Optional[HealthSystemMultipliers] = None
    interventions: FrozenSet[AIIntervention] = frozenset()
    country: Optional[str] = None
    is_urban: bool = True
    uptake: UptakeParameters = field(default_factory=UptakeParameters)
    effect_magnitudes: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    @log_call
    def build(cls, health_system: Optional[Union[str, HealthSystemProfile]] = None,
              interventions: Optional[InterventionsLike] = None,
              **kwargs: Any) -> "ResolutionContext":
        """Construct a context, normalizing intervention selections."""
        return cls(health_system=health_system,
                   interventions=parse_interventions(interventions), **kwargs)

    @log_call
    def without_interventions(self) -> "ResolutionContext":
        """The matching baseline context: same setting, no AI."""
        return replace(self, interventions=frozenset())


@log_call
def apply_health_system_multipliers(params: ParameterSet,
                                    multipliers: HealthSystemMultipliers
                                    ) -> ParameterSet:
    """Scale resolution, mortality and referral rates once by the multipliers."""
    m = multipliers
    return params.with_updates(
        mu_i=params.mu_i * m.mu_i,
        mu_0=params.mu_0 * m.mu_l0,
        mu_1=params.mu_1 * m.mu_l1,
        mu_2=params.mu_2 * m.mu_l2,
        mu_3=params.mu_3 * m.mu_l3,
        delta_u=params.delta_u * m.delta_u,
        delta_i=params.delta_i * m.delta_i,
        delta_0=params.delta_0 * m.delta_l0,
        delta_1=params.delta_1 * m.delta_l1,
        delta_2=params.delta_2 * m.delta_l2,
        delta_3=params.delta_3 * m.delta_l3,
        rho_0=params.rho_0 * m.rho_l0,
        rho_1=params.rho_1 * m.rho_l1,
        rho_2=params.rho_2 * m.rho_l2,
    )


def _lookup(getter, key, field_name):
    try:
        return getter(key)
    except KeyError as exc:
        raise InvalidParameter(str(exc.args[0]), field_name) from None


@log_call
def resolve_parameters(
    base: ParameterSet,
    context: Optional[ResolutionContext] = None,
    disease: Optional[Union[str, DiseaseProfile]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ParameterSet:
    """
    Build the fully resolved ParameterSet for one disease run.

    Parameters
    ----------
    base : ParameterSet
        Starting values; population, congestion and economic settings
        normally come from here
    context : ResolutionContext, optional
        Health system, country and AI settings of the scenario
    disease : str or DiseaseProfile, optional
        Disease whose clinical rates replace the base rates
    overrides : mapping, optional
        Field values applied after the disease rates and before any
        multiplier

    Returns
    -------
    ParameterSet
        Validated parameters with every effect applied exactly once

    Raises
    ------
    InvalidParameter
        If an identifier is unknown, an override names no field, or the
        resolved rates violate a range or competing-exit constraint
    """
    context = context or ResolutionContext()
    params = base

    preset = context.health_system
    if isinstance(preset, str):
        preset = _lookup(get_health_system, preset, "health_system")
    if preset is not None:
        params = params.with_updates(**preset.direct_parameters())

    profile = disease
    if isinstance(profile, str):
        profile = _lookup(get_disease_profile, profile, "disease")
    if profile is not None:
        params = params.with_updates(**profile.clinical_parameters())

    if overrides:
        params = params.with_updates(**dict(overrides))

    multipliers = context.multipliers
    if multipliers is None and preset is not None:
        multipliers = preset.multipliers
    if multipliers is not None and not multipliers.is_identity():
        params = apply_health_system_multipliers(params, multipliers)

    disease_id = disease if isinstance(disease, str) else next(
        (key for key, entry in DISEASE_PROFILES.items() if entry == profile),
        None)
    if context.country:
        _lookup(get_country_profile, context.country, "country")
        params = adjust_for_country(params, context.country,
                                    context.is_urban, disease_id)

    params = apply_ai_interventions(
        params,
        context.interventions,
        disease=disease_id,
        uptake=context.uptake,
        is_urban=context.is_urban,
        effect_magnitudes=context.effect_magnitudes,
    )

    try:
        validate_parameters(params)
    except InvalidParameter as exc:
        logger.error("Resolved parameters for %s are invalid: %s",
                     disease_id or "custom run", exc)
        raise
    return params
