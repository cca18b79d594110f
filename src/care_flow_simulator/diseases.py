"""
Disease catalogue.

Each profile carries the clinical weekly rates of one condition plus its
congestion sensitivity and queue behaviour. Clinical rates are weekly
probabilities and are substituted into a ParameterSet unchanged, except
where the quoted exits of one compartment overshoot one.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from utils.logging import log_call

from .parameters import COMPETING_EXITS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiseaseProfile:
    """Clinical and queueing characteristics of one disease."""

    name: str
    incidence_rate: float
    disability_weight: float
    mean_age_of_onset: float
    mu_i: float
    mu_u: float
    mu_0: float
    mu_1: float
    mu_2: float
    mu_3: float
    delta_i: float
    delta_u: float
    delta_0: float
    delta_1: float
    delta_2: float
    delta_3: float
    rho_0: float
    rho_1: float
    rho_2: float
    competition_sensitivity: float = 1.0
    queue_abandonment_rate: float = 0.05
    queue_bypass_rate: float = 0.10
    queue_clearance_rate: float = 0.30

    @log_call
    def clinical_parameters(self) -> Dict[str, Any]:
        """
        ParameterSet fields contributed by this disease.

        Rates are substituted as quoted. A compartment whose quoted exits
        add up to more than one is rescaled proportionally so they sum to
        exactly one; the informal compartment's transfer to formal care
        belongs to the health system and is not part of that sum.
        """
        values: Dict[str, Any] = {
            "incidence_rate": self.incidence_rate,
            "disability_weight": self.disability_weight,
            "mean_age_of_onset": self.mean_age_of_onset,
            "competition_sensitivity": self.competition_sensitivity,
            "queue_abandonment_rate": self.queue_abandonment_rate,
            "queue_bypass_rate": self.queue_bypass_rate,
            "queue_clearance_rate": self.queue_clearance_rate,
        }
        for compartment, names in COMPETING_EXITS.items():
            exits = {n: getattr(self, n) for n in names if n != "sigma_i"}
            total = sum(exits.values())
            if total > 1.0:
                logger.debug("%s: exits from %s quoted at %.4g, rescaled to 1",
                             self.name, compartment, total)
                exits = {n: rate / total for n, rate in exits.items()}
            values.update(exits)
        return values


DISEASE_PROFILES: Dict[str, DiseaseProfile] = {
    "congestive_heart_failure": DiseaseProfile(
        name="Congestive heart failure",
        incidence_rate=0.002, disability_weight=0.42, mean_age_of_onset=67,
        mu_i=0.01, mu_u=0.004, mu_0=0.03, mu_1=0.35, mu_2=0.55, mu_3=0.75,
        delta_i=0.08, delta_u=0.09, delta_0=0.04, delta_1=0.025,
        delta_2=0.015, delta_3=0.01,
        rho_0=0.70, rho_1=0.55, rho_2=0.35,
        competition_sensitivity=1.3,
        queue_abandonment_rate=0.02, queue_bypass_rate=0.03,
        queue_clearance_rate=0.20,
    ),
    "tuberculosis": DiseaseProfile(
        name="Tuberculosis",
        incidence_rate=0.003, disability_weight=0.333, mean_age_of_onset=35,
        mu_i=0.02, mu_u=0.005, mu_0=0.03, mu_1=0.04, mu_2=0.05, mu_3=0.06,
        delta_i=0.0035, delta_u=0.004, delta_0=0.0025, delta_1=0.002,
        delta_2=0.0015, delta_3=0.001,
        rho_0=0.85, rho_1=0.45, rho_2=0.30,
        competition_sensitivity=0.9,
        queue_abandonment_rate=0.04, queue_bypass_rate=0.05,
        queue_clearance_rate=0.25,
    ),
    "childhood_pneumonia": DiseaseProfile(
        name="Childhood pneumonia",
        incidence_rate=0.05, disability_weight=0.28, mean_age_of_onset=3,
        mu_i=0.10, mu_u=0.06, mu_0=0.70, mu_1=0.80, mu_2=0.85, mu_3=0.90,
        delta_i=0.045, delta_u=0.05, delta_0=0.02, delta_1=0.015,
        delta_2=0.01, delta_3=0.008,
        rho_0=0.60, rho_1=0.30, rho_2=0.20,
        competition_sensitivity=1.5,
        queue_abandonment_rate=0.03, queue_bypass_rate=0.08,
        queue_clearance_rate=0.25,
    ),
    "malaria": DiseaseProfile(
        name="Malaria",
        incidence_rate=0.20, disability_weight=0.186, mean_age_of_onset=7,
        mu_i=0.15, mu_u=0.08, mu_0=0.75, mu_1=0.80, mu_2=0.90, mu_3=0.95,
        delta_i=0.025, delta_u=0.03, delta_0=0.005, delta_1=0.003,
        delta_2=0.002, delta_3=0.0015,
        rho_0=0.25, rho_1=0.20, rho_2=0.10,
        competition_sensitivity=1.2,
        queue_abandonment_rate=0.06, queue_bypass_rate=0.15,
        queue_clearance_rate=0.40,
    ),
    "fever": DiseaseProfile(
        name="Fever",
        incidence_rate=0.60, disability_weight=0.10, mean_age_of_onset=15,
        mu_i=0.30, mu_u=0.25, mu_0=0.55, mu_1=0.70, mu_2=0.80, mu_3=0.90,
        delta_i=0.012, delta_u=0.015, delta_0=0.008, delta_1=0.005,
        delta_2=0.003, delta_3=0.002,
        rho_0=0.30, rho_1=0.20, rho_2=0.10,
        competition_sensitivity=1.0,
        queue_abandonment_rate=0.12, queue_bypass_rate=0.25,
        queue_clearance_rate=0.45,
    ),
    "diarrhea": DiseaseProfile(
        name="Diarrhea",
        incidence_rate=0.30, disability_weight=0.15, mean_age_of_onset=2,
        mu_i=0.35, mu_u=0.20, mu_0=0.85, mu_1=0.90, mu_2=0.80, mu_3=0.85,
        delta_i=0.02, delta_u=0.025, delta_0=0.003, delta_1=0.002,
        delta_2=0.0015, delta_3=0.001,
        rho_0=0.50, rho_1=0.30, rho_2=0.10,
        competition_sensitivity=1.4,
        queue_abandonment_rate=0.08, queue_bypass_rate=0.18,
        queue_clearance_rate=0.40,
    ),
    "anemia": DiseaseProfile(
        name="Anemia",
        incidence_rate=0.05, disability_weight=0.06, mean_age_of_onset=15,
        mu_i=0.05, mu_u=0.01, mu_0=0.15, mu_1=0.20, mu_2=0.25, mu_3=0.30,
        delta_i=0.0005, delta_u=0.001, delta_0=0.0003, delta_1=0.0002,
        delta_2=0.001, delta_3=0.0008,
        rho_0=0.40, rho_1=0.30, rho_2=0.15,
        competition_sensitivity=0.8,
        queue_abandonment_rate=0.10, queue_bypass_rate=0.12,
        queue_clearance_rate=0.35,
    ),
    "hiv_management_chronic": DiseaseProfile(
        name="HIV chronic management",
        incidence_rate=0.01, disability_weight=0.078, mean_age_of_onset=30,
        mu_i=0.0, mu_u=0.0, mu_0=0.05, mu_1=0.10, mu_2=0.12, mu_3=0.15,
        delta_i=0.0065, delta_u=0.007, delta_0=0.004, delta_1=0.002,
        delta_2=0.0015, delta_3=0.001,
        rho_0=0.90, rho_1=0.18, rho_2=0.50,
        competition_sensitivity=0.7,
        queue_abandonment_rate=0.02, queue_bypass_rate=0.02,
        queue_clearance_rate=0.30,
    ),
    "high_risk_pregnancy_low_anc": DiseaseProfile(
        name="High-risk pregnancy, low antenatal care",
        incidence_rate=0.02, disability_weight=0.30, mean_age_of_onset=28,
        mu_i=0.01, mu_u=0.005, mu_0=0.02, mu_1=0.10, mu_2=0.50, mu_3=0.60,
        delta_i=0.015, delta_u=0.02, delta_0=0.01, delta_1=0.005,
        delta_2=0.002, delta_3=0.001,
        rho_0=0.90, rho_1=0.70, rho_2=0.40,
        competition_sensitivity=2.0,
        queue_abandonment_rate=0.01, queue_bypass_rate=0.02,
        queue_clearance_rate=0.15,
    ),
    "urti": DiseaseProfile(
        name="Upper respiratory tract infection",
        incidence_rate=0.80, disability_weight=0.01, mean_age_of_onset=10,
        mu_i=0.70, mu_u=0.65, mu_0=0.75, mu_1=0.80, mu_2=0.85, mu_3=0.90,
        delta_i=0.00001, delta_u=0.00002, delta_0=0.00001, delta_1=0.000005,
        delta_2=0.000001, delta_3=0.000001,
        rho_0=0.05, rho_1=0.02, rho_2=0.01,
        competition_sensitivity=0.6,
        queue_abandonment_rate=0.15, queue_bypass_rate=0.20,
        queue_clearance_rate=0.50,
    ),
    "hiv_opportunistic": DiseaseProfile(
        name="HIV opportunistic infections",
        incidence_rate=0.005, disability_weight=0.582, mean_age_of_onset=32,
        mu_i=0.0, mu_u=0.0, mu_0=0.08, mu_1=0.30, mu_2=0.55, mu_3=0.70,
        delta_i=0.002, delta_u=0.002, delta_0=0.0015, delta_1=0.0001,
        delta_2=0.0005, delta_3=0.02,
        rho_0=0.90, rho_1=0.60, rho_2=0.50,
        competition_sensitivity=1.6,
        queue_abandonment_rate=0.01, queue_bypass_rate=0.01,
        queue_clearance_rate=0.15,
    ),
}


@log_call
def get_disease_profile(disease_id: str) -> DiseaseProfile:
    """Look up a catalogue entry; raises KeyError for unknown ids."""
    try:
        return DISEASE_PROFILES[disease_id]
    except KeyError:
        raise KeyError(
            f"Unknown disease '{disease_id}'. "
            f"Known: {', '.join(sorted(DISEASE_PROFILES))}"
        ) from None


@log_call
def available_diseases() -> List[str]:
    return sorted(DISEASE_PROFILES)
