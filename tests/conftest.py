"""
Shared test fixtures.

This module provides shared fixtures so the common scenarios are resolved
and simulated once per session instead of once per test.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
# Make the fixtures package importable as ``fixtures``
sys.path.insert(0, os.path.dirname(__file__))

from care_flow_simulator import (  # noqa: E402
    AIIntervention,
    ParameterSet,
    ResolutionContext,
    SingleDiseaseSimulator,
    resolve_parameters,
)


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: whole-catalogue runs (slow)")


@pytest.fixture(scope="session")
def scenario_params():
    """Base parameters of the reference scenario (lambda=0.2, phi0=0.6, r=0.3)."""
    return ParameterSet(
        incidence_rate=0.2,
        population=300000,
        phi0=0.6,
        informal_care_ratio=0.3,
    )


@pytest.fixture(scope="session")
def congested_params(scenario_params):
    """Reference scenario on a heavily congested system."""
    return scenario_params.with_updates(system_congestion=0.8)


@pytest.fixture(scope="session")
def baseline_result(scenario_params):
    return SingleDiseaseSimulator(scenario_params).run()


@pytest.fixture(scope="session")
def congested_result(congested_params):
    return SingleDiseaseSimulator(congested_params).run()


@pytest.fixture(scope="session")
def malaria_context():
    return ResolutionContext(health_system="weak_rural_system")


@pytest.fixture(scope="session")
def malaria_ai_context():
    """Provider-facing AI where malaria's saturated levels have headroom."""
    return ResolutionContext(
        health_system="weak_rural_system",
        interventions=frozenset({AIIntervention.CHW,
                                 AIIntervention.DIAGNOSTIC}),
    )


@pytest.fixture(scope="session")
def malaria_params(malaria_context):
    return resolve_parameters(ParameterSet(), malaria_context, "malaria")
