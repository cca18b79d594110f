"""
Country-specific parameter adjustments.

Adjusts a ParameterSet for a country's disease burden, its rural access
gap, its health infrastructure and workforce, and for disease programmes
that are known to perform above the national baseline.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from utils.logging import log_call

from .parameters import ParameterSet


@dataclass(frozen=True)
class CountryProfile:
    country: str
    country_code: str
    region: str
    urban_population_pct: float
    gdp_per_capita_usd: float
    health_expenditure_per_capita_usd: float
    physician_density_per_1000: float
    hospital_beds_per_1000: float
    chw_bonus: float = 0.0

    @log_call
    def infrastructure_multiplier(self) -> float:
        """Resolution multiplier from bed density, in [0.8, 1.0]."""
        bed_ratio = self.hospital_beds_per_1000 / 1.5
        return 0.8 + 0.2 * min(bed_ratio, 1.0)

    @log_call
    def workforce_multiplier(self) -> float:
        """Resolution multiplier from physician density plus CHW programmes."""
        physician_ratio = self.physician_density_per_1000 / 1.0
        return min(1.1, 0.8 + 0.3 * min(physician_ratio, 1.0) + self.chw_bonus)


@dataclass(frozen=True)
class DiseaseBurden:
    incidence: float
    mortality: float
    care_seeking: float


COUNTRY_PROFILES: Dict[str, CountryProfile] = {
    "nigeria": CountryProfile(
        country="Nigeria", country_code="NGA", region="West Africa",
        urban_population_pct=0.52, gdp_per_capita_usd=2097,
        health_expenditure_per_capita_usd=71,
        physician_density_per_1000=0.4, hospital_beds_per_1000=0.5,
        chw_bonus=0.10,
    ),
    "kenya": CountryProfile(
        country="Kenya", country_code="KEN", region="East Africa",
        urban_population_pct=0.28, gdp_per_capita_usd=1879,
        health_expenditure_per_capita_usd=88,
        physician_density_per_1000=0.2, hospital_beds_per_1000=1.4,
        chw_bonus=0.15,
    ),
    "south_africa": CountryProfile(
        country="South Africa", country_code="ZAF", region="Southern Africa",
        urban_population_pct=0.67, gdp_per_capita_usd=6994,
        health_expenditure_per_capita_usd=499,
        physician_density_per_1000=0.9, hospital_beds_per_1000=2.3,
        chw_bonus=0.10,
    ),
}

# (incidence, mortality, care seeking) multipliers per country and disease
_BURDENS: Dict[str, Dict[str, Tuple[float, float, float]]] = {
    "nigeria": {
        "tuberculosis": (0.8, 0.9, 0.7),
        "malaria": (1.5, 1.3, 0.8),
        "childhood_pneumonia": (1.8, 1.6, 0.6),
        "diarrhea": (1.7, 1.5, 0.65),
        "hiv_management_chronic": (0.6, 0.8, 0.8),
        "hiv_opportunistic": (0.6, 0.9, 0.7),
        "fever": (1.4, 1.3, 0.6),
        "urti": (1.3, 1.1, 0.7),
        "anemia": (1.4, 1.2, 0.7),
        "high_risk_pregnancy_low_anc": (1.6, 1.5, 0.5),
        "congestive_heart_failure": (1.2, 1.3, 0.6),
    },
    "kenya": {
        "tuberculosis": (1.5, 1.4, 0.85),
        "malaria": (1.1, 1.0, 0.9),
        "childhood_pneumonia": (1.2, 1.1, 0.8),
        "diarrhea": (1.1, 1.0, 0.8),
        "hiv_management_chronic": (1.8, 1.5, 0.9),
        "hiv_opportunistic": (2.0, 1.6, 0.85),
        "fever": (1.2, 1.1, 0.8),
        "urti": (1.1, 1.0, 0.85),
        "anemia": (1.2, 1.1, 0.8),
        "high_risk_pregnancy_low_anc": (1.3, 1.2, 0.7),
        "congestive_heart_failure": (1.3, 1.2, 0.7),
    },
    "south_africa": {
        "tuberculosis": (2.2, 1.8, 0.9),
        "hiv_management_chronic": (2.5, 1.6, 0.95),
        "hiv_opportunistic": (3.0, 2.0, 0.9),
        "childhood_pneumonia": (1.3, 1.2, 0.85),
        "diarrhea": (1.0, 0.9, 0.9),
        "malaria": (0.3, 0.8, 0.95),
        "congestive_heart_failure": (1.8, 1.4, 0.8),
        "anemia": (1.5, 1.1, 0.8),
        "high_risk_pregnancy_low_anc": (1.4, 1.3, 0.85),
        "urti": (1.1, 1.0, 0.9),
        "fever": (1.2, 1.1, 0.85),
    },
}

_RURAL_MULTIPLIERS: Dict[str, Dict[str, float]] = {
    "nigeria": {
        "phi0": 0.6, "sigma_i": 0.5, "informal_care_ratio": 1.6,
        "mu_0": 0.7, "mu_1": 0.6, "mu_2": 0.7, "mu_3": 0.75,
        "delta_u": 1.3, "delta_i": 1.3, "delta_0": 1.2, "delta_1": 1.2,
        "delta_2": 1.15, "delta_3": 1.1,
        "rho_0": 0.6, "rho_1": 0.5, "rho_2": 0.4,
    },
    "kenya": {
        "phi0": 0.7, "sigma_i": 0.6, "informal_care_ratio": 1.5,
        "mu_0": 0.8, "mu_1": 0.7, "mu_2": 0.75, "mu_3": 0.8,
        "delta_u": 1.3, "delta_i": 1.3, "delta_0": 1.2, "delta_1": 1.2,
        "delta_2": 1.15, "delta_3": 1.1,
        "rho_0": 0.7, "rho_1": 0.6, "rho_2": 0.5,
    },
    "south_africa": {
        "phi0": 0.6, "sigma_i": 0.5, "informal_care_ratio": 1.4,
        "mu_0": 0.7, "mu_1": 0.6, "mu_2": 0.7, "mu_3": 0.75,
        "delta_u": 1.3, "delta_i": 1.4, "delta_0": 1.25, "delta_1": 1.3,
        "delta_2": 1.2, "delta_3": 1.15,
        "rho_0": 0.6, "rho_1": 0.5, "rho_2": 0.4,
    },
}

# Rural multipliers are bounded so a rural setting never collapses a level.
_RURAL_FLOORS = {"mu_0": 0.5, "mu_1": 0.4, "mu_2": 0.5, "mu_3": 0.6,
                 "rho_0": 0.4, "rho_1": 0.4, "rho_2": 0.4}
_RURAL_CAPS = {"delta_u": 1.5, "delta_i": 1.5, "delta_0": 1.4,
               "delta_1": 1.4, "delta_2": 1.3, "delta_3": 1.2}

_HIV = ("hiv_management_chronic", "hiv_opportunistic")
_MORTALITY_FIELDS = ("delta_u", "delta_i", "delta_0", "delta_1", "delta_2",
                     "delta_3")


@log_call
def get_country_profile(country_code: str) -> CountryProfile:
    try:
        return COUNTRY_PROFILES[country_code]
    except KeyError:
        raise KeyError(
            f"Country profile not found for '{country_code}'. "
            f"Known: {', '.join(sorted(COUNTRY_PROFILES))}"
        ) from None


@log_call
def available_countries() -> List[str]:
    return sorted(COUNTRY_PROFILES)


@log_call
def disease_burden(country_code: str, disease: Optional[str]) -> Optional[DiseaseBurden]:
    entry = _BURDENS.get(country_code, {}).get(disease or "")
    if entry is None:
        return None
    return DiseaseBurden(*entry)


def _rural_multipliers(country_code: str, disease: Optional[str]) -> Dict[str, float]:
    multipliers = dict(_RURAL_MULTIPLIERS.get(country_code,
                                              _RURAL_MULTIPLIERS["nigeria"]))
    if country_code == "kenya" and disease == "tuberculosis":
        multipliers.update(mu_0=0.9, mu_1=0.85, rho_0=0.85)
    if country_code == "south_africa" and disease in _HIV:
        multipliers.update(phi0=0.8, mu_1=0.8, delta_u=1.2)
    if disease == "high_risk_pregnancy_low_anc":
        multipliers["rho_0"] = min(0.9, multipliers["rho_0"] * 1.3)
        multipliers["rho_1"] = min(0.9, multipliers["rho_1"] * 1.3)
    return multipliers


def _vertical_programme_effects(values: Dict[str, float], country_code: str,
                                disease: Optional[str], is_urban: bool) -> None:
    if country_code == "kenya" and disease == "tuberculosis":
        values["mu_0"] *= 1.2
        values["mu_1"] *= 1.3
        values["phi0"] = max(values["phi0"], 0.5)
    if country_code == "south_africa" and disease in _HIV:
        values["mu_1"] *= 1.4
        values["mu_2"] *= 1.3
        values["delta_u"] *= 0.7
        values["phi0"] = max(values["phi0"], 0.7)
    if country_code == "nigeria" and disease == "malaria":
        values["mu_0"] *= 1.3
        values["phi0"] = max(values["phi0"], 0.4)
    if disease == "high_risk_pregnancy_low_anc":
        values["rho_0"] *= 1.5
        values["rho_1"] *= 1.4
        if not is_urban:
            values["phi0"] = max(values["phi0"], 0.35)


@log_call
def adjust_for_country(params: ParameterSet, country_code: str,
                       is_urban: bool = True,
                       disease: Optional[str] = None) -> ParameterSet:
    """
    Apply country burden, rural access, capacity and programme effects.

    Parameters
    ----------
    params : ParameterSet
        Parameters with disease and health-system values already merged
    country_code : str
        Key of :data:`COUNTRY_PROFILES`
    is_urban : bool, default=True
        Rural settings receive the country's rural multipliers
    disease : str, optional
        Disease id used to look up burden and programme effects

    Returns
    -------
    ParameterSet
        Adjusted copy; the input is not modified
    """
    country = get_country_profile(country_code)
    names = ("incidence_rate", "phi0", "sigma_i", "informal_care_ratio",
             "mu_0", "mu_1", "mu_2", "mu_3", "rho_0", "rho_1", "rho_2"
             ) + _MORTALITY_FIELDS
    values = {n: getattr(params, n) for n in names}

    burden = disease_burden(country_code, disease)
    if burden is not None:
        values["incidence_rate"] *= burden.incidence
        for name in _MORTALITY_FIELDS:
            values[name] *= burden.mortality
        values["phi0"] *= burden.care_seeking

    if not is_urban:
        rural = _rural_multipliers(country_code, disease)
        for name, multiplier in rural.items():
            if name in _RURAL_FLOORS:
                multiplier = max(_RURAL_FLOORS[name], multiplier)
            elif name in _RURAL_CAPS:
                multiplier = min(_RURAL_CAPS[name], multiplier)
            values[name] *= multiplier

    capacity = (country.infrastructure_multiplier()
                * country.workforce_multiplier())
    for name in ("mu_0", "mu_1", "mu_2", "mu_3"):
        values[name] *= capacity

    _vertical_programme_effects(values, country_code, disease, is_urban)
    return params.with_updates(**values)
