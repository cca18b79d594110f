"""
Tests for multi-disease aggregation and the simulate entry point.
"""

import logging
from types import SimpleNamespace

import pandas as pd
import pytest

from care_flow_simulator import (
    AggregateResult,
    DISEASE_PROFILES,
    IcerStatus,
    InvalidParameter,
    MissingBaseline,
    MultiDiseaseAggregator,
    NegativeStock,
    ParameterSet,
    ResolutionContext,
    simulate,
)
from care_flow_simulator.aggregator import CUSTOM_DISEASE


def fake_result(deaths, dalys=0.0, cost=0.0):
    return SimpleNamespace(cumulative_deaths=deaths, dalys=dalys,
                           total_cost=cost)


class TestAggregateResult:

    def test_sums_outcomes(self):
        result = AggregateResult.from_results({
            "a": fake_result(10.0, dalys=1.0, cost=100.0),
            "b": fake_result(15.0, dalys=2.0, cost=50.0),
        })
        assert result.cumulative_deaths == 25.0
        assert result.dalys == 3.0
        assert result.total_cost == 150.0
        assert not result.partial

    def test_failures_mark_partial(self):
        result = AggregateResult.from_results(
            {"a": fake_result(10.0)}, failures={"b": "boom"})
        assert result.partial
        assert result.cumulative_deaths == 10.0


class TestMultiDiseaseAggregator:

    def test_failure_isolated(self, monkeypatch, caplog):
        def run_disease(self, disease):
            if disease == "bad":
                raise InvalidParameter("mu_0 out of range", "mu_0")
            if disease == "unstable":
                raise NegativeStock("L1", 7, -3.0)
            return fake_result(10.0 if disease == "a" else 15.0)

        monkeypatch.setattr(MultiDiseaseAggregator, "run_disease",
                            run_disease)
        aggregator = MultiDiseaseAggregator(ParameterSet())
        with caplog.at_level(logging.WARNING):
            result = aggregator.run(["a", "bad", "b", "unstable"])

        assert result.cumulative_deaths == 25.0
        assert result.partial
        assert set(result.failures) == {"bad", "unstable"}
        assert set(result.disease_results) == {"a", "b"}
        assert "excluded" in caplog.text

    def test_duplicates_run_once(self, monkeypatch):
        calls = []

        def run_disease(self, disease):
            calls.append(disease)
            return fake_result(1.0)

        monkeypatch.setattr(MultiDiseaseAggregator, "run_disease",
                            run_disease)
        MultiDiseaseAggregator(ParameterSet()).run(["a", "a", "b"])
        assert calls == ["a", "b"]

    def test_custom_run(self, scenario_params, baseline_result):
        result = MultiDiseaseAggregator(scenario_params).run()
        assert list(result.disease_results) == [CUSTOM_DISEASE]
        assert result.cumulative_deaths == pytest.approx(
            baseline_result.cumulative_deaths)

    def test_custom_run_raises(self):
        with pytest.raises(InvalidParameter):
            MultiDiseaseAggregator(ParameterSet(phi0=1.5)).run()

    def test_unknown_disease_reported(self, malaria_context):
        result = MultiDiseaseAggregator(
            ParameterSet(), malaria_context).run(["malaria", "scurvy"])
        assert result.partial
        assert "scurvy" in result.failures
        assert "malaria" in result.disease_results


class TestSimulate:

    def test_totals_are_sums(self, malaria_context):
        result = simulate(ParameterSet(), ["malaria", "diarrhea"],
                          context=malaria_context)
        per_disease = result.disease_results.values()
        assert result.cumulative_deaths == pytest.approx(
            sum(r.cumulative_deaths for r in per_disease))
        assert result.dalys == pytest.approx(sum(r.dalys for r in per_disease))
        assert result.total_cost == pytest.approx(
            sum(r.total_cost for r in per_disease))

    def test_diseases_are_independent(self, malaria_context):
        together = simulate(ParameterSet(), ["malaria", "diarrhea"],
                            context=malaria_context)
        alone = simulate(ParameterSet(), ["malaria"], context=malaria_context)
        assert (together.disease_results["malaria"]
                == alone.disease_results["malaria"])

    def test_pure(self, malaria_ai_context):
        first = simulate(ParameterSet(system_congestion=0.6), ["malaria"],
                         context=malaria_ai_context)
        second = simulate(ParameterSet(system_congestion=0.6), ["malaria"],
                          context=malaria_ai_context)
        assert first == second

    def test_weeks(self, malaria_context):
        result = simulate(ParameterSet(), ["malaria"], weeks=8,
                          context=malaria_context)
        assert len(result.disease_results["malaria"].series) == 8

    def test_icer_against_baseline(self, malaria_context, malaria_ai_context):
        baseline = simulate(ParameterSet(), ["malaria", "diarrhea"],
                            context=malaria_context)
        result = simulate(ParameterSet(), ["malaria", "diarrhea"],
                          context=malaria_ai_context, baseline=baseline)

        assert result.icer is not None
        assert result.icer.dalys_averted == pytest.approx(
            baseline.dalys - result.dalys)
        for name in ("malaria", "diarrhea"):
            assert result.disease_results[name].icer is not None
        frame = result.summary_frame()
        assert set(frame.index) == {"malaria", "diarrhea"}
        assert frame.loc["malaria", "icer_status"] in {
            status.value for status in IcerStatus}

    def test_with_icer_without_baseline(self, malaria_context):
        result = simulate(ParameterSet(), ["malaria"], context=malaria_context)
        with pytest.warns(MissingBaseline):
            assert result.with_icer(None).icer is None

    def test_summary_frame_lists_failures(self, malaria_context):
        result = simulate(ParameterSet(), ["malaria", "scurvy"],
                          context=malaria_context)
        frame = result.summary_frame()
        assert frame.loc["scurvy", "error"]
        assert pd.isna(frame.loc["malaria", "error"])


@pytest.mark.integration
@pytest.mark.parametrize("congestion", [0.0, 0.7])
def test_full_catalogue_full_bundle(congestion):
    context = ResolutionContext.build(
        health_system="weak_rural_system",
        interventions=["triage", "chw", "diagnostic", "bed_management",
                       "hospital_decision", "self_care"])
    result = simulate(ParameterSet(system_congestion=congestion),
                      sorted(DISEASE_PROFILES), context=context)
    assert not result.partial, result.failures
    for disease_result in result.disease_results.values():
        for state in disease_result.series:
            assert abs(state.population_total()
                       - state.cumulative_new) <= 1e-6
