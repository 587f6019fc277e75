"""Lattice specifications for recombining trinomial trees.

A lattice specification maps (volatility, drift, time step) to the six numbers
that define one step of a trinomial lattice: the up, middle and down factors
and the corresponding risk-neutral probabilities.

Node ``j`` of layer ``i`` sits at ``spot * down**i * (middle / down)**j``, so
any specification must keep ``up * down == middle**2`` for the tree to
recombine.
"""

from __future__ import annotations
from typing import NamedTuple
import numpy as np
from ..exceptions import ValidationError


__all__ = [
    "LatticeParameters",
    "CoxRossRubinsteinLatticeSpecification",
    "TrigeorgisLatticeSpecification",
    "EqualProbabilitiesLatticeSpecification",
]


class LatticeParameters(NamedTuple):
    """One-step parameters of a trinomial lattice, in their fixed order."""

    up_factor: float
    middle_factor: float
    down_factor: float
    up_probability: float
    middle_probability: float
    down_probability: float


def _check_inputs(volatility: float, dt: float) -> None:
    if not np.isfinite(volatility) or volatility <= 0.0:
        raise ValidationError(f"volatility must be positive and finite, got {volatility}")
    if not np.isfinite(dt) or dt <= 0.0:
        raise ValidationError(f"dt must be positive and finite, got {dt}")


class CoxRossRubinsteinLatticeSpecification:
    """Cox-Ross-Rubinstein trinomial lattice.

    Space step ``dx = sigma * sqrt(2 dt)`` with a flat middle branch. The
    probabilities are the squared CRR binomial probabilities over half a step:

    .. math::

        p_u = \\left(\\frac{e^{\\mu \\Delta t/2} - e^{-\\Delta x/2}}
                           {e^{\\Delta x/2} - e^{-\\Delta x/2}}\\right)^2, \\quad
        p_d = \\left(\\frac{e^{\\Delta x/2} - e^{\\mu \\Delta t/2}}
                           {e^{\\Delta x/2} - e^{-\\Delta x/2}}\\right)^2
    """

    def get_parameters_trinomial(
        self, volatility: float, drift: float, dt: float
    ) -> LatticeParameters:
        _check_inputs(volatility, dt)
        dx = volatility * np.sqrt(2.0 * dt)
        growth = np.exp(0.5 * drift * dt)
        half_up = np.exp(0.5 * dx)
        half_down = np.exp(-0.5 * dx)
        up_probability = ((growth - half_down) / (half_up - half_down)) ** 2
        down_probability = ((half_up - growth) / (half_up - half_down)) ** 2
        return LatticeParameters(
            up_factor=float(np.exp(dx)),
            middle_factor=1.0,
            down_factor=float(np.exp(-dx)),
            up_probability=float(up_probability),
            middle_probability=float(1.0 - up_probability - down_probability),
            down_probability=float(down_probability),
        )


class TrigeorgisLatticeSpecification:
    """Trigeorgis log-transformed trinomial lattice.

    Matches the first two moments of the log-price increment
    ``nu = drift - sigma^2 / 2`` on a grid with ``dx = sigma * sqrt(3 dt)``.
    """

    def get_parameters_trinomial(
        self, volatility: float, drift: float, dt: float
    ) -> LatticeParameters:
        _check_inputs(volatility, dt)
        dx = volatility * np.sqrt(3.0 * dt)
        nu = drift - 0.5 * volatility**2
        second_moment = (volatility**2 * dt + nu**2 * dt**2) / dx**2
        first_moment = nu * dt / dx
        return LatticeParameters(
            up_factor=float(np.exp(dx)),
            middle_factor=1.0,
            down_factor=float(np.exp(-dx)),
            up_probability=float(0.5 * (second_moment + first_moment)),
            middle_probability=float(1.0 - second_moment),
            down_probability=float(0.5 * (second_moment - first_moment)),
        )


class EqualProbabilitiesLatticeSpecification:
    """Trinomial lattice with all three transition probabilities equal to 1/3.

    The drift is carried by the middle factor ``exp((drift - sigma^2/2) dt)``
    and the variance by ``dx = sigma * sqrt(1.5 dt)`` around it.
    """

    def get_parameters_trinomial(
        self, volatility: float, drift: float, dt: float
    ) -> LatticeParameters:
        _check_inputs(volatility, dt)
        dx = volatility * np.sqrt(1.5 * dt)
        middle_factor = np.exp((drift - 0.5 * volatility**2) * dt)
        third = 1.0 / 3.0
        return LatticeParameters(
            up_factor=float(middle_factor * np.exp(dx)),
            middle_factor=float(middle_factor),
            down_factor=float(middle_factor * np.exp(-dx)),
            up_probability=third,
            middle_probability=third,
            down_probability=third,
        )
