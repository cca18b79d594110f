from omegaconf import DictConfig

from care_flow_simulator.countries import COUNTRY_PROFILES
from care_flow_simulator.diseases import DISEASE_PROFILES
from care_flow_simulator.health_systems import HEALTH_SYSTEMS
from utils.logging import log_call


@log_call
def validate_config(cfg: DictConfig) -> None:
    """Simple validation for scenario configs."""

    if cfg.simulation.population <= 0:
        raise ValueError("population must be positive")
    if cfg.simulation.weeks <= 0:
        raise ValueError("weeks must be positive")
    if not cfg.diseases:
        raise ValueError("at least one disease must be selected")
    unknown = [d for d in cfg.diseases if d not in DISEASE_PROFILES]
    if unknown:
        raise ValueError(f"unknown disease(s): {', '.join(unknown)}")
    if cfg.health_system.name not in HEALTH_SYSTEMS:
        raise ValueError(
            f"unknown health system '{cfg.health_system.name}'")
    if cfg.country is not None and cfg.country not in COUNTRY_PROFILES:
        raise ValueError(f"unknown country '{cfg.country}'")
    if cfg.system_congestion < 0:
        raise ValueError("system_congestion must be non-negative")
