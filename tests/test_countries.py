"""
Tests for country adjustments.
"""

import unittest

import pytest

from care_flow_simulator import (
    ParameterSet,
    adjust_for_country,
    available_countries,
)
from care_flow_simulator.countries import (
    disease_burden,
    get_country_profile,
)


class TestCountryProfile(unittest.TestCase):
    """Test cases for capacity multipliers."""

    def test_available(self):
        self.assertEqual(available_countries(),
                         ["kenya", "nigeria", "south_africa"])

    def test_unknown_country(self):
        with self.assertRaises(KeyError):
            get_country_profile("atlantis")

    def test_infrastructure_multiplier(self):
        nigeria = get_country_profile("nigeria")
        self.assertAlmostEqual(nigeria.infrastructure_multiplier(),
                               0.8 + 0.2 * 0.5 / 1.5)
        # Bed density above the reference saturates at 1
        self.assertEqual(
            get_country_profile("south_africa").infrastructure_multiplier(),
            1.0)

    def test_workforce_multiplier_capped(self):
        south_africa = get_country_profile("south_africa")
        self.assertEqual(south_africa.workforce_multiplier(), 1.1)

    def test_burden_lookup(self):
        self.assertIsNone(disease_burden("nigeria", None))
        burden = disease_burden("kenya", "tuberculosis")
        self.assertEqual(burden.incidence, 1.5)


class TestAdjustForCountry:

    @pytest.fixture
    def params(self):
        return ParameterSet(phi0=0.6)

    def test_capacity_scales_resolution(self, params):
        kenya = get_country_profile("kenya")
        factor = (kenya.infrastructure_multiplier()
                  * kenya.workforce_multiplier())
        adjusted = adjust_for_country(params, "kenya")
        assert adjusted.mu_2 == pytest.approx(params.mu_2 * factor)
        assert adjusted.phi0 == params.phi0

    def test_burden_applied(self, params):
        adjusted = adjust_for_country(params, "south_africa",
                                      disease="congestive_heart_failure")
        assert adjusted.incidence_rate == pytest.approx(
            params.incidence_rate * 1.8)
        assert adjusted.delta_u == pytest.approx(params.delta_u * 1.4)
        assert adjusted.phi0 == pytest.approx(0.6 * 0.8)

    def test_rural_setting(self, params):
        urban = adjust_for_country(params, "nigeria", is_urban=True)
        rural = adjust_for_country(params, "nigeria", is_urban=False)
        assert rural.phi0 == pytest.approx(urban.phi0 * 0.6)
        assert rural.delta_i == pytest.approx(urban.delta_i * 1.3)
        assert rural.mu_1 < urban.mu_1

    def test_vertical_programme(self, params):
        plain = adjust_for_country(params, "kenya", disease="malaria")
        tb = adjust_for_country(params, "kenya", disease="tuberculosis")
        assert tb.mu_1 > plain.mu_1
        assert tb.phi0 >= 0.5

    def test_input_not_modified(self, params):
        adjust_for_country(params, "nigeria", is_urban=False,
                           disease="malaria")
        assert params == ParameterSet(phi0=0.6)
