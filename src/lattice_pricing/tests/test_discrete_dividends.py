"""Tests for discrete proportional dividends on the trinomial tree."""

import datetime as dt

import numpy as np
import pytest

from lattice_pricing.enums import DayCountConvention, OptionType
from lattice_pricing.exceptions import ValidationError
from lattice_pricing.market_environment import DividendSchedule
from lattice_pricing.tests.helpers import SpotRecordingOptionFunction, fixed_lattice
from lattice_pricing.valuation import (
    AmericanVanillaOptionFunction,
    EuropeanVanillaOptionFunction,
    bsm_price,
)


class TestDividendSchedule:
    def test_empty(self):
        schedule = DividendSchedule.empty()
        assert len(schedule) == 0
        assert not schedule
        assert schedule.modified_spot(100.0) == 100.0
        assert schedule.multiplier_before(10.0) == 1.0

    def test_modified_spot_ignores_timing(self):
        schedule = DividendSchedule(yields=(0.1, 0.2), times=(0.3, 5.0))
        assert np.isclose(schedule.modified_spot(100.0), 100.0 * 0.9 * 0.8)

    def test_multiplier_counts_strictly_earlier_dividends(self):
        schedule = DividendSchedule(yields=(0.1, 0.2), times=(0.3, 0.5))
        assert schedule.multiplier_before(0.3) == 1.0
        assert np.isclose(schedule.multiplier_before(0.5), 0.9)
        assert np.isclose(schedule.multiplier_before(0.51), 0.9 * 0.8)

    def test_values_coerced_to_float_tuples(self):
        schedule = DividendSchedule(yields=[0.01, 0.02], times=np.array([0.25, 0.75]))
        assert schedule.yields == (0.01, 0.02)
        assert schedule.times == (0.25, 0.75)

    @pytest.mark.parametrize(
        "yields, times",
        [
            ((0.01, 0.02), (0.5,)),
            ((1.0,), (0.5,)),
            ((-0.01,), (0.5,)),
            ((0.01,), (-0.1,)),
            ((float("nan"),), (0.5,)),
            ((0.01,), (float("inf"),)),
        ],
    )
    def test_invalid_schedule_raises(self, yields, times):
        with pytest.raises(ValidationError):
            DividendSchedule(yields=yields, times=times)

    def test_non_numeric_raises(self):
        with pytest.raises(ValidationError, match="numeric"):
            DividendSchedule(yields=("a",), times=(0.5,))

    def test_from_dates(self):
        pricing_date = dt.datetime(2025, 1, 1)
        schedule = DividendSchedule.from_dates(
            pricing_date,
            [(dt.datetime(2025, 7, 2), 0.02), (dt.datetime(2025, 10, 1), 0.01)],
        )
        assert schedule.yields == (0.02, 0.01)
        assert np.isclose(schedule.times[0], 182.0 / 365.0)
        assert np.isclose(schedule.times[1], 273.0 / 365.0)

    def test_from_dates_day_count(self):
        pricing_date = dt.datetime(2025, 1, 1)
        schedule = DividendSchedule.from_dates(
            pricing_date,
            [(dt.datetime(2025, 7, 2), 0.02)],
            day_count_convention=DayCountConvention.ACT_360,
        )
        assert np.isclose(schedule.times[0], 182.0 / 360.0)

    def test_from_dates_rejects_past_ex_date(self):
        with pytest.raises(ValidationError, match="before pricing date"):
            DividendSchedule.from_dates(
                dt.datetime(2025, 1, 1), [(dt.datetime(2024, 12, 1), 0.02)]
            )


class TestDividendBookkeeping:
    """Spot handed to the option function at each layer."""

    def test_spot_per_layer(self, tree):
        lattice = fixed_lattice(1.1, 1.0, 1.0 / 1.1, 0.25, 0.5, 0.25)
        function = SpotRecordingOptionFunction(num_steps=4, time_to_expiry=1.0)
        dividends = DividendSchedule(yields=(0.1, 0.2), times=(0.3, 0.5))

        tree.price(function, lattice, 100.0, 0.2, 0.05, dividends=dividends)

        assert np.isclose(function.expiry_spot, 100.0 * 0.9 * 0.8)
        assert function.spots[0] == 100.0
        assert function.spots[1] == 100.0
        # ex-date exactly on the layer time is not yet deducted
        assert np.isclose(function.spots[2], 90.0)
        assert np.isclose(function.spots[3], 72.0)

    def test_discrete_schedule_uses_rate_as_drift(self, tree):
        seen = []

        class _Lattice:
            def get_parameters_trinomial(self, volatility, drift, dt):
                seen.append(drift)
                return fixed_lattice(1.1, 1.0, 1.0 / 1.1, 0.25, 0.5, 0.25).params

        function = SpotRecordingOptionFunction(num_steps=2)
        tree.price(function, _Lattice(), 100.0, 0.2, 0.05, dividend_rate=0.02)
        tree.price(
            function, _Lattice(), 100.0, 0.2, 0.05, dividends=DividendSchedule((0.02,), (0.5,))
        )
        assert seen == [pytest.approx(0.03), 0.05]


class TestDiscreteDividendPricing:
    def test_empty_schedule_equals_flat_zero_yield(self, tree, crr_lattice, euro_call):
        flat = tree.price(euro_call, crr_lattice, 100.0, 0.2, 0.05, dividend_rate=0.0)
        discrete = tree.price(
            euro_call, crr_lattice, 100.0, 0.2, 0.05, dividends=DividendSchedule.empty()
        )
        assert discrete == flat

        flat_greeks = tree.price_with_greeks(euro_call, crr_lattice, 100.0, 0.2, 0.05, 0.0)
        discrete_greeks = tree.price_with_greeks(
            euro_call, crr_lattice, 100.0, 0.2, 0.05, dividends=DividendSchedule.empty()
        )
        assert discrete_greeks == flat_greeks

    def test_european_equals_tree_on_net_spot(self, tree, crr_lattice, euro_call):
        dividends = DividendSchedule(yields=(0.03,), times=(0.5,))
        with_div = tree.price(euro_call, crr_lattice, 100.0, 0.2, 0.05, dividends=dividends)
        net_spot = tree.price(euro_call, crr_lattice, 100.0 * (1 - 0.03), 0.2, 0.05)
        assert np.isclose(with_div, net_spot, rtol=1e-12)

    @pytest.mark.parametrize("option_type", [OptionType.CALL, OptionType.PUT])
    def test_european_matches_bsm_on_net_spot(self, tree, crr_lattice, option_type):
        function = EuropeanVanillaOptionFunction(
            strike=100.0, time_to_expiry=1.0, option_type=option_type, num_steps=500
        )
        dividends = DividendSchedule(yields=(0.02, 0.02), times=(0.25, 0.75))
        pv = tree.price(function, crr_lattice, 100.0, 0.2, 0.05, dividends=dividends)
        expected = bsm_price(100.0 * 0.98 * 0.98, 100.0, 1.0, 0.2, 0.05, option_type)
        assert np.isclose(pv, expected, rtol=5e-3)

    def test_dividends_reduce_call_raise_put(self, tree, crr_lattice, euro_call, euro_put):
        dividends = DividendSchedule(yields=(0.02,), times=(0.5,))
        assert tree.price(euro_call, crr_lattice, 100.0, 0.2, 0.05, dividends=dividends) < tree.price(
            euro_call, crr_lattice, 100.0, 0.2, 0.05
        )
        assert tree.price(euro_put, crr_lattice, 100.0, 0.2, 0.05, dividends=dividends) > tree.price(
            euro_put, crr_lattice, 100.0, 0.2, 0.05
        )

    def test_american_put_with_dividends_at_least_european(self, tree, crr_lattice, euro_put):
        am_put = AmericanVanillaOptionFunction(
            strike=100.0, time_to_expiry=1.0, option_type=OptionType.PUT, num_steps=200
        )
        dividends = DividendSchedule(yields=(0.03, 0.03), times=(0.3, 0.8))
        eu_pv = tree.price(euro_put, crr_lattice, 100.0, 0.2, 0.05, dividends=dividends)
        am_pv = tree.price(am_put, crr_lattice, 100.0, 0.2, 0.05, dividends=dividends)
        assert am_pv >= eu_pv

    def test_greeks_with_discrete_dividends(self, tree, crr_lattice, euro_call):
        dividends = DividendSchedule(yields=(0.02,), times=(0.5,))
        result = tree.price_with_greeks(euro_call, crr_lattice, 100.0, 0.2, 0.05, dividends=dividends)
        pv = tree.price(euro_call, crr_lattice, 100.0, 0.2, 0.05, dividends=dividends)
        assert result.value == pv
        assert result.vega > 0.0
        assert result.rho > 0.0
        assert 0.0 < result.delta < 1.0
