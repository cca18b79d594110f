"""
Tests for layered parameter resolution.
"""

import logging

import pytest

from care_flow_simulator import (
    AIIntervention,
    DISEASE_PROFILES,
    HealthSystemMultipliers,
    InvalidParameter,
    ParameterSet,
    ResolutionContext,
    resolve_parameters,
)


@pytest.fixture
def malaria_clinical():
    return DISEASE_PROFILES["malaria"].clinical_parameters()


class TestResolutionOrder:
    """Each layer is applied once and in order."""

    def test_bare_base_is_returned(self):
        base = ParameterSet()
        assert resolve_parameters(base) == base

    def test_preset_direct_values(self):
        params = resolve_parameters(
            ParameterSet(), ResolutionContext(health_system="weak_rural_system"))
        assert params.phi0 == 0.30
        assert params.sigma_i == 0.10
        assert params.life_expectancy == 55
        assert params.per_diem_costs.l0 == 8

    def test_disease_clinical_rates(self, malaria_clinical):
        params = resolve_parameters(ParameterSet(), disease="malaria")
        assert params.mu_0 == malaria_clinical["mu_0"]
        assert params.mu_3 == 0.95
        assert params.competition_sensitivity == 1.2
        assert params.incidence_rate == 0.20

    def test_multipliers_applied_once(self, malaria_clinical):
        params = resolve_parameters(
            ParameterSet(), ResolutionContext(health_system="weak_rural_system"),
            "malaria")
        assert params.mu_0 == pytest.approx(malaria_clinical["mu_0"] * 0.5)
        assert params.delta_1 == pytest.approx(
            malaria_clinical["delta_1"] * 2.0)
        assert params.rho_2 == pytest.approx(malaria_clinical["rho_2"] * 0.5)

    def test_overrides_precede_multipliers(self):
        params = resolve_parameters(
            ParameterSet(), ResolutionContext(health_system="weak_rural_system"),
            "malaria", overrides={"mu_0": 0.4})
        assert params.mu_0 == pytest.approx(0.2)

    def test_explicit_multipliers_replace_preset(self, malaria_clinical):
        context = ResolutionContext(
            health_system="weak_rural_system",
            multipliers=HealthSystemMultipliers(mu_l0=0.9))
        params = resolve_parameters(ParameterSet(), context, "malaria")
        assert params.mu_0 == pytest.approx(malaria_clinical["mu_0"] * 0.9)
        assert params.mu_1 == pytest.approx(malaria_clinical["mu_1"])

    def test_profile_object_matches_id(self, malaria_context):
        by_id = resolve_parameters(ParameterSet(), malaria_context, "malaria")
        by_profile = resolve_parameters(ParameterSet(), malaria_context,
                                        DISEASE_PROFILES["malaria"])
        assert by_id == by_profile

    def test_country_applied(self):
        context = ResolutionContext(health_system="moderate_urban_system",
                                    country="kenya")
        params = resolve_parameters(ParameterSet(), context, "malaria")
        assert params.incidence_rate == pytest.approx(0.20 * 1.1)

    def test_ai_applied_last(self, malaria_params, malaria_ai_context):
        params = resolve_parameters(ParameterSet(), malaria_ai_context,
                                    "malaria")
        assert params.mu_0 > malaria_params.mu_0
        assert params.mu_1 > malaria_params.mu_1
        assert params.ai_fixed_cost == 150000 + 300000

    def test_base_population_kept(self, malaria_context):
        params = resolve_parameters(ParameterSet(population=1000.0),
                                    malaria_context, "malaria")
        assert params.population == 1000.0


class TestResolutionErrors:

    @pytest.mark.parametrize("context,disease,field", [
        (ResolutionContext(health_system="utopia"), None, "health_system"),
        (ResolutionContext(), "scurvy", "disease"),
        (ResolutionContext(country="atlantis"), "malaria", "country"),
    ])
    def test_unknown_identifiers(self, context, disease, field):
        with pytest.raises(InvalidParameter) as exc_info:
            resolve_parameters(ParameterSet(), context, disease)
        assert exc_info.value.field == field

    def test_unknown_override(self):
        with pytest.raises(InvalidParameter):
            resolve_parameters(ParameterSet(), overrides={"bogus": 1.0})

    def test_invalid_override_value(self):
        with pytest.raises(InvalidParameter) as exc_info:
            resolve_parameters(ParameterSet(), overrides={"phi0": 1.5})
        assert exc_info.value.field == "phi0"

    def test_ai_on_saturated_level_rejected(self):
        # Malaria's L0 exits sum to one, so any net CHW gain overshoots
        context = ResolutionContext.build(
            health_system="moderate_urban_system", interventions=["chw"])
        with pytest.raises(InvalidParameter) as exc_info:
            resolve_parameters(ParameterSet(), context, "malaria")
        assert exc_info.value.field == "mu_0"

    def test_ai_pushing_rates_out_of_range(self, caplog):
        context = ResolutionContext.build(
            health_system="high_income_system",
            interventions=["triage", "self_care"])
        with caplog.at_level(logging.ERROR):
            with pytest.raises(InvalidParameter) as exc_info:
                resolve_parameters(ParameterSet(), context)
        assert exc_info.value.field == "phi0"
        assert any(record.levelno == logging.ERROR
                   for record in caplog.records)


class TestResolutionContext:

    def test_build_from_flags(self):
        context = ResolutionContext.build(
            health_system="moderate_urban_system",
            interventions={"chw": True, "triage": False}, is_urban=False)
        assert context.interventions == {AIIntervention.CHW}
        assert not context.is_urban

    def test_without_interventions(self, malaria_ai_context):
        baseline = malaria_ai_context.without_interventions()
        assert baseline.interventions == frozenset()
        assert baseline.health_system == malaria_ai_context.health_system
