"""Shared pytest fixtures for lattice_pricing tests."""

import pytest

from lattice_pricing.enums import OptionType
from lattice_pricing.valuation import (
    CoxRossRubinsteinLatticeSpecification,
    EuropeanVanillaOptionFunction,
    TrinomialTree,
)


# ---------------------------------------------------------------------------
# Scalar constants
# ---------------------------------------------------------------------------

STRIKE = 100.0
TIME_TO_EXPIRY = 1.0
NUM_STEPS = 200


# ---------------------------------------------------------------------------
# Engine / lattice
# ---------------------------------------------------------------------------


@pytest.fixture()
def tree() -> TrinomialTree:
    return TrinomialTree()


@pytest.fixture()
def crr_lattice() -> CoxRossRubinsteinLatticeSpecification:
    return CoxRossRubinsteinLatticeSpecification()


# ---------------------------------------------------------------------------
# Option functions
# ---------------------------------------------------------------------------


@pytest.fixture()
def euro_call() -> EuropeanVanillaOptionFunction:
    return EuropeanVanillaOptionFunction(
        strike=STRIKE,
        time_to_expiry=TIME_TO_EXPIRY,
        option_type=OptionType.CALL,
        num_steps=NUM_STEPS,
    )


@pytest.fixture()
def euro_put() -> EuropeanVanillaOptionFunction:
    return EuropeanVanillaOptionFunction(
        strike=STRIKE,
        time_to_expiry=TIME_TO_EXPIRY,
        option_type=OptionType.PUT,
        num_steps=NUM_STEPS,
    )
