"""
Health-system strength presets.

A preset sets system-wide care-seeking behaviour, life expectancy and
per-diem costs directly, and carries per-level multipliers that scale the
disease-specific clinical rates.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from utils.logging import log_call

from .parameters import HealthSystemMultipliers, PerDiemCosts


@dataclass(frozen=True)
class HealthSystemProfile:
    name: str
    phi0: float
    sigma_i: float
    informal_care_ratio: float
    life_expectancy: float
    per_diem_costs: PerDiemCosts
    multipliers: HealthSystemMultipliers = field(
        default_factory=HealthSystemMultipliers)

    @log_call
    def direct_parameters(self) -> Dict[str, Any]:
        """ParameterSet fields this preset sets outright."""
        return {
            "phi0": self.phi0,
            "sigma_i": self.sigma_i,
            "informal_care_ratio": self.informal_care_ratio,
            "life_expectancy": self.life_expectancy,
            "per_diem_costs": self.per_diem_costs,
        }


HEALTH_SYSTEMS: Dict[str, HealthSystemProfile] = {
    "moderate_urban_system": HealthSystemProfile(
        name="Moderate urban system",
        phi0=0.65, sigma_i=0.25, informal_care_ratio=0.15,
        life_expectancy=70,
        per_diem_costs=PerDiemCosts(
            informal=12, l0=20, l1=40, l2=120, l3=250),
    ),
    "weak_rural_system": HealthSystemProfile(
        name="Weak rural system",
        phi0=0.30, sigma_i=0.10, informal_care_ratio=0.40,
        life_expectancy=55,
        per_diem_costs=PerDiemCosts(informal=5, l0=8, l1=20, l2=80, l3=200),
        multipliers=HealthSystemMultipliers(
            mu_i=0.6, mu_l0=0.5, mu_l1=0.5, mu_l2=0.6, mu_l3=0.7,
            delta_u=1.5, delta_i=1.8, delta_l0=2.0, delta_l1=2.0,
            delta_l2=1.8, delta_l3=1.5,
            rho_l0=0.7, rho_l1=0.6, rho_l2=0.5,
        ),
    ),
    "strong_urban_system_lmic": HealthSystemProfile(
        name="Strong urban system (LMIC)",
        phi0=0.80, sigma_i=0.35, informal_care_ratio=0.10,
        life_expectancy=75,
        per_diem_costs=PerDiemCosts(
            informal=15, l0=25, l1=50, l2=180, l3=350),
        multipliers=HealthSystemMultipliers(
            mu_i=1.2, mu_l0=1.3, mu_l1=1.3, mu_l2=1.2, mu_l3=1.1,
            delta_u=0.8, delta_i=0.7, delta_l0=0.6, delta_l1=0.6,
            delta_l2=0.7, delta_l3=0.8,
            rho_l0=1.1, rho_l1=1.1, rho_l2=1.1,
        ),
    ),
    "fragile_conflict_system": HealthSystemProfile(
        name="Fragile / conflict-affected system",
        phi0=0.20, sigma_i=0.08, informal_care_ratio=0.60,
        life_expectancy=50,
        per_diem_costs=PerDiemCosts(
            informal=4, l0=20, l1=40, l2=150, l3=400),
        multipliers=HealthSystemMultipliers(
            mu_i=0.4, mu_l0=0.3, mu_l1=0.4, mu_l2=0.5, mu_l3=0.6,
            delta_u=2.5, delta_i=2.3, delta_l0=2.0, delta_l1=2.0,
            delta_l2=1.7, delta_l3=1.5,
            rho_l0=0.4, rho_l1=0.3, rho_l2=0.2,
        ),
    ),
    "high_income_system": HealthSystemProfile(
        name="High-income system",
        phi0=0.90, sigma_i=0.70, informal_care_ratio=0.05,
        life_expectancy=82,
        per_diem_costs=PerDiemCosts(
            informal=30, l0=100, l1=250, l2=1000, l3=2500),
        multipliers=HealthSystemMultipliers(
            mu_i=1.5, mu_l0=1.6, mu_l1=1.7, mu_l2=1.6, mu_l3=1.5,
            delta_u=0.5, delta_i=0.4, delta_l0=0.3, delta_l1=0.3,
            delta_l2=0.4, delta_l3=0.5,
            rho_l0=1.2, rho_l1=1.2, rho_l2=1.2,
        ),
    ),
    "rwanda_health_system": HealthSystemProfile(
        name="Rwanda health system",
        phi0=0.92, sigma_i=0.65, informal_care_ratio=0.02,
        life_expectancy=68,
        per_diem_costs=PerDiemCosts(informal=8, l0=10, l1=20, l2=80, l3=160),
        multipliers=HealthSystemMultipliers(
            mu_i=0.8, mu_l0=0.35, mu_l1=0.3, mu_l2=0.35, mu_l3=0.6,
            delta_u=1.1, delta_i=1.2, delta_l0=1.4, delta_l1=1.6,
            delta_l2=1.5, delta_l3=1.2,
            rho_l0=0.6, rho_l1=0.5, rho_l2=0.6,
        ),
    ),
}


@log_call
def get_health_system(name: str) -> HealthSystemProfile:
    try:
        return HEALTH_SYSTEMS[name]
    except KeyError:
        raise KeyError(
            f"Unknown health system '{name}'. "
            f"Known: {', '.join(sorted(HEALTH_SYSTEMS))}"
        ) from None


@log_call
def available_health_systems() -> List[str]:
    return sorted(HEALTH_SYSTEMS)
