from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from omegaconf import DictConfig, OmegaConf

from care_flow_simulator.aggregator import AggregateResult, simulate
from care_flow_simulator.interventions import UptakeParameters
from care_flow_simulator.parameters import ParameterSet
from care_flow_simulator.rate_resolver import ResolutionContext
from utils.logging import log_call


@dataclass
class TemporalEngine:
    """Runs the weekly simulation described by a composed scenario config."""

    cfg: DictConfig

    @log_call
    def build_parameters(self) -> ParameterSet:
        sim = self.cfg.simulation
        return ParameterSet(
            population=float(sim.population),
            discount_rate=float(sim.discount_rate),
            system_congestion=float(self.cfg.system_congestion),
        )

    @log_call
    def build_context(self, with_interventions: bool = True
                      ) -> ResolutionContext:
        interventions = self.cfg.interventions
        flags: Dict[str, bool] = {}
        if with_interventions:
            flags = {name: bool(value) for name, value in interventions.items()
                     if name != "uptake"}
        uptake = OmegaConf.to_container(interventions.uptake, resolve=True)
        return ResolutionContext.build(
            health_system=self.cfg.health_system.name,
            interventions=flags,
            country=self.cfg.country,
            is_urban=bool(self.cfg.is_urban),
            uptake=UptakeParameters(**uptake),
        )

    @log_call
    def overrides(self) -> Dict[str, float]:
        return dict(OmegaConf.to_container(self.cfg.parameter_overrides,
                                           resolve=True))

    @log_call
    def run(self, baseline: Optional[AggregateResult] = None,
            with_interventions: bool = True) -> AggregateResult:
        """Simulate every configured disease; attach an ICER if given a baseline."""
        return simulate(
            self.build_parameters(),
            diseases=list(self.cfg.diseases),
            weeks=int(self.cfg.simulation.weeks),
            context=self.build_context(with_interventions),
            overrides=self.overrides(),
            baseline=baseline,
        )

    @log_call
    def compare(self) -> Tuple[AggregateResult, AggregateResult]:
        """Baseline (no AI) and intervention runs of the same scenario."""
        baseline = self.run(with_interventions=False)
        return baseline, self.run(baseline=baseline)
