"""
Tests for the weekly compartment update.

Covers conservation of patients, monotone absorbing compartments, the
queue-free behaviour at zero congestion and the invariant checks.
"""

import math

import numpy as np
import pytest

from care_flow_simulator import (
    CompartmentEngine,
    NegativeStock,
    NumericInstability,
    ParameterSet,
    SingleDiseaseSimulator,
    resolve_parameters,
)


def reference_run(p, weeks):
    """Queue-free reference model written straight from the flow equations."""
    u = i = r = d = 0.0
    levels = [0.0, 0.0, 0.0, 0.0]
    mu = [p.mu_0, p.mu_1, p.mu_2, p.mu_3]
    delta = [p.delta_0, p.delta_1, p.delta_2, p.delta_3]
    rho = [p.rho_0, p.rho_1, p.rho_2, 0.0]
    for _ in range(weeks):
        new = p.incidence_rate * p.population / 52
        formal = p.phi0 * new
        non_formal = new - formal
        informal = (1 - p.informal_care_ratio) * non_formal
        untreated = non_formal - informal

        transfer = p.sigma_i * i
        resolved = p.mu_u * u + p.mu_i * i + sum(
            m * x for m, x in zip(mu, levels))
        deaths = p.delta_u * u + p.delta_i * i + sum(
            dl * x for dl, x in zip(delta, levels))
        inflow = [formal + transfer] + [
            rho[k] * levels[k] for k in range(3)]

        u = u * (1 - p.mu_u - p.delta_u) + untreated
        i = i * (1 - p.sigma_i - p.mu_i - p.delta_i) + informal
        levels = [levels[k] * (1 - mu[k] - delta[k] - rho[k]) + inflow[k]
                  for k in range(4)]
        r += resolved
        d += deaths
    return {"U": u, "I": i, "L0": levels[0], "L1": levels[1],
            "L2": levels[2], "L3": levels[3], "R": r, "D": d}


class TestFirstWeek:
    """Hand-checked values for the reference scenario."""

    def test_week_one_split(self, scenario_params):
        engine = CompartmentEngine(scenario_params)
        state = engine.step(engine.initial_state())

        assert state.week == 1
        assert state.cumulative_new == pytest.approx(1153.846, abs=1e-3)
        assert engine.last_flows.formal_new == pytest.approx(692.308,
                                                             abs=1e-3)
        assert state.l0 == pytest.approx(692.308, abs=1e-3)
        assert state.u == pytest.approx(138.462, abs=1e-3)
        assert state.i == pytest.approx(323.077, abs=1e-3)
        assert state.l1 == state.l2 == state.l3 == 0.0
        assert state.r == 0.0 and state.d == 0.0

    def test_days_use_previous_state(self, scenario_params):
        """Patient days of week t come from the stock at the end of t-1."""
        engine = CompartmentEngine(scenario_params)
        week1 = engine.step(engine.initial_state())
        week2 = engine.step(week1)

        assert week1.patient_days.total() == 0.0
        assert week2.patient_days.l0 == pytest.approx(week1.l0)
        assert week2.patient_days.informal == pytest.approx(week1.i)

    def test_days_add_bare_stock(self):
        """One unit per patient per week, not seven."""
        engine = CompartmentEngine(ParameterSet())
        week1 = engine.step(engine.initial_state())
        week2 = engine.step(week1)
        week3 = engine.step(week2)

        assert week1.l0 == pytest.approx(519.23, abs=0.01)
        assert week2.patient_days.l0 == pytest.approx(519.23, abs=0.01)
        assert week3.patient_days.l0 == pytest.approx(week1.l0 + week2.l0)

    def test_days_shortened_by_ai(self, scenario_params):
        params = scenario_params.with_updates(resolution_boost=0.2,
                                              length_of_stay_reduction=0.35)
        engine = CompartmentEngine(params)
        week1 = engine.step(engine.initial_state())
        week2 = engine.step(week1)
        assert week2.patient_days.l0 == pytest.approx(week1.l0 * 0.9)

    def test_episodes_touched(self, scenario_params):
        engine = CompartmentEngine(scenario_params)
        week1 = engine.step(engine.initial_state())
        assert week1.episodes_touched == pytest.approx(
            engine.last_flows.formal_new)


class TestConservation:
    """Every new case is in exactly one compartment."""

    @pytest.mark.parametrize("congestion", [0.0, 0.3, 0.5, 0.8, 1.5])
    def test_population_conserved(self, scenario_params, congestion):
        params = scenario_params.with_updates(system_congestion=congestion)
        series = SingleDiseaseSimulator(params).run_series()
        for state in series:
            assert abs(state.population_total()
                       - state.cumulative_new) <= 1e-6

    def test_conserved_with_ai(self, malaria_ai_context):
        params = resolve_parameters(
            ParameterSet(system_congestion=0.7), malaria_ai_context, "malaria")
        for state in SingleDiseaseSimulator(params).run_series():
            assert abs(state.population_total()
                       - state.cumulative_new) <= 1e-6

    def test_conserved_with_self_care_effects(self, scenario_params):
        params = scenario_params.with_updates(
            system_congestion=0.9, visit_reduction=0.1,
            direct_routing_improvement=0.3, self_care_active=True,
            queue_prevention_rate=0.4)
        for state in SingleDiseaseSimulator(params).run_series():
            assert abs(state.population_total()
                       - state.cumulative_new) <= 1e-6

    def test_absorbing_compartments_monotone(self, congested_result):
        r = np.array([s.r for s in congested_result.series])
        d = np.array([s.d for s in congested_result.series])
        assert np.all(np.diff(r) >= 0.0)
        assert np.all(np.diff(d) >= 0.0)

    def test_stocks_non_negative(self, congested_result):
        for state in congested_result.series:
            assert min(state.u, state.i, *state.levels(),
                       *state.queues.sizes()) >= 0.0


class TestZeroCongestion:
    """With no congestion the queue subsystem is inert."""

    def test_matches_queue_free_reference(self, scenario_params,
                                          baseline_result):
        expected = reference_run(scenario_params, 52)
        actual = baseline_result.final_state().as_record()
        for name, value in expected.items():
            assert actual[name] == pytest.approx(value, rel=1e-9, abs=1e-9)

    def test_queues_stay_empty(self, baseline_result):
        for state in baseline_result.series:
            assert state.queues.total() == 0.0
        assert baseline_result.queue_related_deaths == 0.0

    def test_congestion_builds_queues(self, congested_result):
        assert congested_result.final_state().queues.total() > 0.0
        assert congested_result.queue_related_deaths > 0.0


class TestCongestedFlows:

    def test_deterred_arrivals_go_untreated(self, scenario_params):
        params = scenario_params.with_updates(system_congestion=0.8)
        engine = CompartmentEngine(params)
        engine.step(engine.initial_state())
        flows = engine.last_flows

        assert flows.deterred == pytest.approx(flows.new_cases * 0.15)
        assert flows.untreated_new == pytest.approx(
            (flows.new_cases - flows.deterred) * 0.4 * 0.3 + flows.deterred)

    def test_avoided_visits_resolve(self, scenario_params):
        params = scenario_params.with_updates(visit_reduction=0.1)
        engine = CompartmentEngine(params)
        state = engine.step(engine.initial_state())
        assert state.r == pytest.approx(0.1 * params.weekly_new_cases())

    @pytest.mark.parametrize("congestion,expected", [
        (0.4, 0.0),
        (0.5, 0.0),
        (0.8, 0.2),
        (5.0, 1.0),
    ])
    def test_direct_routing_share(self, scenario_params, congestion,
                                  expected):
        params = scenario_params.with_updates(
            system_congestion=congestion, direct_routing_improvement=0.25)
        share = CompartmentEngine(params).direct_routing_share()
        assert share == pytest.approx(expected)

    def test_direct_routing_skips_l0(self, scenario_params):
        params = scenario_params.with_updates(
            system_congestion=0.8, direct_routing_improvement=0.25)
        engine = CompartmentEngine(params)
        engine.step(engine.initial_state())
        flows = engine.last_flows
        routed = flows.formal_new * 0.2
        assert flows.direct_l1 == pytest.approx(routed * 0.6)
        assert flows.direct_l2 == pytest.approx(routed * 0.4)


class TestInvariantChecks:

    def test_negative_stock_raised(self, scenario_params):
        params = scenario_params.with_updates(mu_0=2.0)
        engine = CompartmentEngine(params)
        state = engine.step(engine.initial_state())
        with pytest.raises(NegativeStock) as exc_info:
            engine.step(state)
        assert exc_info.value.compartment == "L0"
        assert exc_info.value.week == 2

    def test_nan_raised(self, scenario_params):
        params = scenario_params.with_updates(incidence_rate=math.nan)
        engine = CompartmentEngine(params)
        with pytest.raises(NumericInstability) as exc_info:
            engine.step(engine.initial_state())
        assert exc_info.value.week == 1
