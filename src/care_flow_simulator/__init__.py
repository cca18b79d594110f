"""
Care Flow Simulator

Weekly compartmental simulation of patient flow through informal care and
four formal care levels, with congestion-driven admission queues, AI
intervention effects and cost / DALY / ICER outcomes.
"""

__version__ = "0.1.0"

from .parameters import (
    LEVELS,
    HealthSystemMultipliers,
    Level,
    ParameterSet,
    PerDiemCosts,
    validate_parameters,
)
from .exceptions import (
    InvalidParameter,
    MissingBaseline,
    NegativeStock,
    NumericInstability,
    SimulationError,
)
from .diseases import (
    DISEASE_PROFILES,
    DiseaseProfile,
    available_diseases,
    get_disease_profile,
)
from .health_systems import (
    HEALTH_SYSTEMS,
    HealthSystemProfile,
    available_health_systems,
    get_health_system,
)
from .countries import (
    COUNTRY_PROFILES,
    CountryProfile,
    adjust_for_country,
    available_countries,
)
from .interventions import (
    AIIntervention,
    UptakeParameters,
    apply_ai_interventions,
    parse_interventions,
)
from .rate_resolver import ResolutionContext, resolve_parameters
from .capacity import CapacityModel
from .queue_engine import QueueEngine, QueueStep
from .compartment_engine import CompartmentEngine
from .outcomes import IcerResult, IcerStatus, OutcomeCalculator, compute_icer
from .simulator import DiseaseResult, SingleDiseaseSimulator
from .aggregator import AggregateResult, MultiDiseaseAggregator, simulate

__all__ = [
    # Parameters
    'LEVELS',
    'HealthSystemMultipliers',
    'Level',
    'ParameterSet',
    'PerDiemCosts',
    'validate_parameters',
    # Errors
    'InvalidParameter',
    'MissingBaseline',
    'NegativeStock',
    'NumericInstability',
    'SimulationError',
    # Catalogues
    'DISEASE_PROFILES',
    'DiseaseProfile',
    'available_diseases',
    'get_disease_profile',
    'HEALTH_SYSTEMS',
    'HealthSystemProfile',
    'available_health_systems',
    'get_health_system',
    'COUNTRY_PROFILES',
    'CountryProfile',
    'adjust_for_country',
    'available_countries',
    # AI interventions
    'AIIntervention',
    'UptakeParameters',
    'apply_ai_interventions',
    'parse_interventions',
    # Engines
    'ResolutionContext',
    'resolve_parameters',
    'CapacityModel',
    'QueueEngine',
    'QueueStep',
    'CompartmentEngine',
    'SingleDiseaseSimulator',
    'DiseaseResult',
    'MultiDiseaseAggregator',
    'AggregateResult',
    'simulate',
    # Outcomes
    'OutcomeCalculator',
    'IcerResult',
    'IcerStatus',
    'compute_icer',
]
