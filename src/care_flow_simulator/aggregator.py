"""
Independent multi-disease runs and their sum.

Diseases share the scenario (health system, congestion, country and AI
settings) but not compartments: each disease runs on its own and only the
terminal outcomes are added up. A disease whose parameters are invalid or
whose run breaks an invariant is reported in ``failures`` without stopping
the others.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Mapping, Optional

import pandas as pd

from utils.logging import log_call

from .exceptions import InvalidParameter, SimulationError
from .outcomes import IcerResult, OutcomeCalculator
from .parameters import WEEKS_PER_YEAR, ParameterSet
from .rate_resolver import ResolutionContext, resolve_parameters
from .simulator import DiseaseResult, SingleDiseaseSimulator

logger = logging.getLogger(__name__)

CUSTOM_DISEASE = "custom"


@dataclass(frozen=True)
class AggregateResult:
    """
    Summed outcomes of one multi-disease run.

    Weekly series are not summed; they stay on the per-disease results in
    ``disease_results``.
    """

    disease_results: Dict[str, DiseaseResult]
    cumulative_deaths: float
    dalys: float
    total_cost: float
    failures: Dict[str, str] = field(default_factory=dict)
    partial: bool = False
    icer: Optional[IcerResult] = None

    @classmethod
    @log_call
    def from_results(cls, results: Mapping[str, DiseaseResult],
                     failures: Optional[Mapping[str, str]] = None
                     ) -> "AggregateResult":
        failures = dict(failures or {})
        return cls(
            disease_results=dict(results),
            cumulative_deaths=sum(r.cumulative_deaths
                                  for r in results.values()),
            dalys=sum(r.dalys for r in results.values()),
            total_cost=sum(r.total_cost for r in results.values()),
            failures=failures,
            partial=bool(failures),
        )

    @log_call
    def with_icer(self, baseline: Optional["AggregateResult"]
                  ) -> "AggregateResult":
        """
        Attach the ICER against ``baseline`` to the aggregate and to every
        disease that also ran in the baseline.
        """
        icer = OutcomeCalculator.compute_icer(self, baseline)
        if baseline is None:
            return replace(self, icer=icer)
        diseases = {
            name: (result.with_icer(baseline.disease_results[name])
                   if name in baseline.disease_results else result)
            for name, result in self.disease_results.items()
        }
        return replace(self, disease_results=diseases, icer=icer)

    @log_call
    def summary_frame(self) -> pd.DataFrame:
        """One row per disease with terminal outcomes, failures included."""
        rows = []
        for name, result in self.disease_results.items():
            rows.append({
                "disease": name,
                "cumulative_deaths": result.cumulative_deaths,
                "cumulative_resolved": result.cumulative_resolved,
                "dalys": result.dalys,
                "total_cost": result.total_cost,
                "average_time_to_resolution":
                    result.average_time_to_resolution,
                "queue_related_deaths": result.queue_related_deaths,
                "icer_status": result.icer.status.value if result.icer else None,
                "icer": result.icer.value if result.icer else None,
                "error": None,
            })
        for name, message in self.failures.items():
            rows.append({"disease": name, "error": message})
        columns = ["disease", "cumulative_deaths", "cumulative_resolved",
                   "dalys", "total_cost", "average_time_to_resolution",
                   "queue_related_deaths", "icer_status", "icer", "error"]
        return pd.DataFrame(rows, columns=columns).set_index("disease")


class MultiDiseaseAggregator:
    """
    Resolve, run and sum one or more diseases under a shared scenario.

    Parameters
    ----------
    parameters : ParameterSet
        Base parameters shared by every disease
    context : ResolutionContext, optional
        Health system, country and AI settings
    overrides : mapping, optional
        Field overrides applied to every disease
    weeks : int, default=52
        Simulation horizon
    """

    def __init__(self, parameters: ParameterSet,
                 context: Optional[ResolutionContext] = None,
                 overrides: Optional[Mapping[str, Any]] = None,
                 weeks: int = WEEKS_PER_YEAR):
        self.parameters = parameters
        self.context = context or ResolutionContext()
        self.overrides = dict(overrides or {})
        self.weeks = weeks

    @log_call
    def run_disease(self, disease: Optional[str]) -> DiseaseResult:
        """Resolve and simulate a single disease; errors propagate."""
        params = resolve_parameters(self.parameters, self.context, disease,
                                    self.overrides)
        return SingleDiseaseSimulator(params, disease or CUSTOM_DISEASE,
                                      self.weeks).run()

    @log_call
    def run(self, diseases: Optional[Iterable[str]] = None) -> AggregateResult:
        """
        Run every disease in ``diseases`` and sum their outcomes.

        With ``diseases=None`` a single run uses the base parameters as
        given; its errors are raised to the caller. In a disease list,
        failures are isolated and the result is marked partial.
        """
        if diseases is None:
            result = self.run_disease(None)
            return AggregateResult.from_results({CUSTOM_DISEASE: result})

        results: Dict[str, DiseaseResult] = {}
        failures: Dict[str, str] = {}
        for disease in dict.fromkeys(diseases):
            try:
                results[disease] = self.run_disease(disease)
            except (InvalidParameter, SimulationError) as exc:
                logger.warning("Disease %s failed and is excluded: %s",
                               disease, exc)
                failures[disease] = str(exc)
        return AggregateResult.from_results(results, failures)


@log_call
def simulate(parameters: ParameterSet,
             diseases: Optional[Iterable[str]] = None,
             weeks: int = WEEKS_PER_YEAR,
             context: Optional[ResolutionContext] = None,
             overrides: Optional[Mapping[str, Any]] = None,
             baseline: Optional[AggregateResult] = None) -> AggregateResult:
    """
    Run a scenario and return its aggregate outcomes.

    The call is pure: identical inputs give identical results and nothing
    is carried over between calls. When ``baseline`` is given the ICER
    against it is attached to the result.
    """
    aggregator = MultiDiseaseAggregator(parameters, context, overrides, weeks)
    result = aggregator.run(diseases)
    if baseline is not None:
        result = result.with_icer(baseline)
    return result
