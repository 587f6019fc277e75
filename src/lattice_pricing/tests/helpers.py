"""Minimal collaborators used to exercise the trinomial engine in isolation."""

from dataclasses import dataclass

import numpy as np

from lattice_pricing.valuation import LatticeParameters


@dataclass(frozen=True)
class FixedLatticeSpecification:
    """Lattice specification returning the same parameters for any input."""

    params: LatticeParameters

    def get_parameters_trinomial(self, volatility, drift, dt):
        return self.params


def fixed_lattice(up, middle, down, p_up, p_mid, p_down) -> FixedLatticeSpecification:
    return FixedLatticeSpecification(LatticeParameters(up, middle, down, p_up, p_mid, p_down))


@dataclass
class PassThroughOptionFunction:
    """Identity payoff on the lattice states and a plain discounted expectation."""

    num_steps: int
    time_to_expiry: float = 1.0

    def payoff_at_expiry(self, spot, down_factor, middle_factor):
        ratio = middle_factor / down_factor
        n = self.num_steps
        return spot * down_factor**n * ratio ** np.arange(2 * n + 1)

    def payoff_at_expiry_from_states(self, state_values):
        return np.asarray(state_values, dtype=float)

    def next_option_values(
        self,
        discount,
        up_probability,
        middle_probability,
        down_probability,
        values,
        spot,
        down_factor,
        middle_factor,
        layer,
    ):
        return discount * (
            up_probability * values[2:]
            + middle_probability * values[1:-1]
            + down_probability * values[:-2]
        )

    def next_option_values_from_data(self, discount, probabilities, state_values, values, layer):
        return discount * (
            probabilities[:, 2] * values[2:]
            + probabilities[:, 1] * values[1:-1]
            + probabilities[:, 0] * values[:-2]
        )


@dataclass
class SpotRecordingOptionFunction(PassThroughOptionFunction):
    """Pass-through function that records the spot handed over at every layer."""

    def __post_init__(self):
        self.expiry_spot = None
        self.spots = {}

    def payoff_at_expiry(self, spot, down_factor, middle_factor):
        self.expiry_spot = spot
        return PassThroughOptionFunction.payoff_at_expiry(self, spot, down_factor, middle_factor)

    def next_option_values(self, discount, *args):
        spot, layer = args[4], args[-1]
        self.spots[layer] = spot
        return PassThroughOptionFunction.next_option_values(self, discount, *args)
