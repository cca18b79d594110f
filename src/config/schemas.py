from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class SimulationConfig:
    weeks: int = 52
    population: float = 300000.0
    discount_rate: float = 0.0


@dataclass
class HealthSystemConfig:
    name: str = "moderate_urban_system"


@dataclass
class UptakeConfig:
    global_uptake: float = 1.0
    urban_multiplier: float = 1.2
    rural_multiplier: float = 0.7


@dataclass
class InterventionsConfig:
    triage: bool = False
    chw: bool = False
    diagnostic: bool = False
    bed_management: bool = False
    hospital_decision: bool = False
    self_care: bool = False
    uptake: UptakeConfig = field(default_factory=UptakeConfig)


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: str = "scenario_comparison.log"


@dataclass
class OutputConfig:
    output_dir: str = "outputs"
    save_weekly_series: bool = False


@dataclass
class ScenarioConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    health_system: HealthSystemConfig = field(
        default_factory=HealthSystemConfig)
    interventions: InterventionsConfig = field(
        default_factory=InterventionsConfig)
    diseases: List[str] = field(default_factory=lambda: ["malaria"])
    country: Optional[str] = None
    is_urban: bool = True
    system_congestion: float = 0.0
    parameter_overrides: Dict[str, float] = field(default_factory=dict)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
