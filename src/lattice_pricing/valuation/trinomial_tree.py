"""Valuation of options by backward induction on a recombining trinomial tree.

The tree is either described by a lattice specification together with
constant market inputs (volatility, interest rate, flat dividend yield or a
schedule of discrete proportional dividends), or given as precomputed
per-layer data for non-uniform trees. The option itself is described by an
option function that supplies the payoff at expiry and the one-step backward
update.

Both descriptions are turned into a per-layer source that feeds a single
induction loop.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol
import logging
import numpy as np
from ..exceptions import (
    ArbitrageViolationError,
    ConfigurationError,
    NumericalError,
    ValidationError,
)
from ..market_environment import DividendSchedule
from ..utils import log_timing
from .lattice import LatticeParameters
from .params import TrinomialTreeParams

logger = logging.getLogger(__name__)

__all__ = [
    "LatticeSpecification",
    "OptionFunction",
    "TrinomialTreeData",
    "ValueDerivatives",
    "TrinomialTree",
]

# Calendar days per year used to quote theta per day.
DAYS_PER_YEAR = 365.0


class LatticeSpecification(Protocol):
    def get_parameters_trinomial(
        self, volatility: float, drift: float, dt: float
    ) -> LatticeParameters: ...


class OptionFunction(Protocol):
    @property
    def num_steps(self) -> int: ...

    @property
    def time_to_expiry(self) -> float: ...

    def payoff_at_expiry(
        self, spot: float, down_factor: float, middle_factor: float
    ) -> np.ndarray: ...

    def payoff_at_expiry_from_states(self, state_values: np.ndarray) -> np.ndarray: ...

    def next_option_values(
        self,
        discount: float,
        up_probability: float,
        middle_probability: float,
        down_probability: float,
        values: np.ndarray,
        spot: float,
        down_factor: float,
        middle_factor: float,
        layer: int,
    ) -> np.ndarray: ...

    def next_option_values_from_data(
        self,
        discount: float,
        probabilities: np.ndarray,
        state_values: np.ndarray,
        values: np.ndarray,
        layer: int,
    ) -> np.ndarray: ...


class TrinomialTreeData(Protocol):
    @property
    def num_steps(self) -> int: ...

    def state_value_at_layer(self, layer: int) -> np.ndarray: ...

    def discount_factor_at_layer(self, layer: int) -> float: ...

    def probability_at_layer(self, layer: int) -> np.ndarray: ...


@dataclass(frozen=True, slots=True)
class ValueDerivatives:
    """Present value and its sensitivities at time zero.

    Sensitivities that cannot be computed for a given tree description are 0.0.
    Theta is quoted per calendar day; vega and rho per unit change of
    volatility and interest rate.
    """

    value: float
    delta: float = 0.0
    vega: float = 0.0
    rho: float = 0.0
    theta: float = 0.0
    gamma: float = 0.0

    @property
    def derivatives(self) -> np.ndarray:
        """Sensitivities in the order (delta, vega, rho, theta, gamma)."""
        return np.array([self.delta, self.vega, self.rho, self.theta, self.gamma], dtype=float)


class _ConstantLatticeSource:
    """Per-layer data derived from one set of lattice parameters."""

    def __init__(
        self,
        function: OptionFunction,
        params: LatticeParameters,
        *,
        spot: float,
        discount: float,
        dt: float,
        dividends: DividendSchedule,
    ) -> None:
        self.function = function
        self.params = params
        self.spot = spot
        self.discount = discount
        self.dt = dt
        self.dividends = dividends
        self.num_steps = function.num_steps

    def expiry_values(self) -> np.ndarray:
        seed_spot = self.dividends.modified_spot(self.spot)
        return self.function.payoff_at_expiry(
            seed_spot, self.params.down_factor, self.params.middle_factor
        )

    def step(self, values: np.ndarray, layer: int) -> np.ndarray:
        multiplier = self.dividends.multiplier_before(layer * self.dt)
        p = self.params
        return self.function.next_option_values(
            self.discount,
            p.up_probability,
            p.middle_probability,
            p.down_probability,
            values,
            self.spot * multiplier,
            p.down_factor,
            p.middle_factor,
            layer,
        )

    def layer_one_states(self) -> np.ndarray:
        # Undivided spot: assumes no dividend goes ex at the first step.
        return np.array(
            [self.spot * self.params.down_factor, self.spot, self.spot * self.params.up_factor]
        )


class _TreeDataSource:
    """Per-layer data read from a precomputed tree."""

    def __init__(self, function: OptionFunction, data: TrinomialTreeData) -> None:
        self.function = function
        self.data = data
        self.num_steps = data.num_steps

    def expiry_values(self) -> np.ndarray:
        return self.function.payoff_at_expiry_from_states(
            self.data.state_value_at_layer(self.num_steps)
        )

    def step(self, values: np.ndarray, layer: int) -> np.ndarray:
        return self.function.next_option_values_from_data(
            self.data.discount_factor_at_layer(layer),
            self.data.probability_at_layer(layer),
            self.data.state_value_at_layer(layer),
            values,
            layer,
        )

    def layer_one_states(self) -> np.ndarray:
        return np.asarray(self.data.state_value_at_layer(1), dtype=float)


def _induct(source, capture_layer_one: bool = False) -> tuple[float, np.ndarray | None]:
    """Run backward induction from expiry to the root.

    Returns the root value and, when requested and the tree has at least two
    steps, the three option values of layer 1.
    """
    values = np.asarray(source.expiry_values(), dtype=float)
    layer_one = None
    for i in range(source.num_steps - 1, -1, -1):
        values = np.asarray(source.step(values, i), dtype=float)
        if capture_layer_one and i == 1:
            layer_one = values
    return float(values[0]), layer_one


def _local_greeks(values: np.ndarray, states: np.ndarray) -> tuple[float, float, float]:
    """Delta, gamma and middle value from the three nodes of layer 1.

    .. math::

        d_1 = \\frac{v_2 - v_1}{s_2 - s_1}, \\quad
        d_2 = \\frac{v_1 - v_0}{s_1 - s_0}, \\quad
        \\Delta = \\frac{d_1 + d_2}{2}, \\quad
        \\Gamma = \\frac{d_1 - d_2}{(s_2 - s_0)/2}
    """
    v0, v1, v2 = (float(v) for v in values[:3])
    s0, s1, s2 = (float(s) for s in states[:3])
    if not s0 < s1 < s2:
        raise NumericalError(
            f"layer-1 states must be strictly increasing, got {s0!r}, {s1!r}, {s2!r}"
        )
    d1 = (v2 - v1) / (s2 - s1)
    d2 = (v1 - v0) / (s1 - s0)
    delta = 0.5 * (d1 + d2)
    gamma = (d1 - d2) / (0.5 * (s2 - s0))
    return delta, gamma, v1


class TrinomialTree:
    """Option pricing on a recombining trinomial tree.

    The lattice is defined either by a lattice specification and constant
    market inputs (``price``, ``price_with_greeks``) or by precomputed tree data
    (``price_from_data``, ``price_with_greeks_from_data``). The option is
    defined by an option function.

    The engine keeps no state between calls; ``params`` is immutable.
    """

    def __init__(self, params: TrinomialTreeParams | None = None) -> None:
        if params is None:
            params = TrinomialTreeParams()
        if not isinstance(params, TrinomialTreeParams):
            raise ConfigurationError(
                f"params must be TrinomialTreeParams, got {type(params).__name__}"
            )
        self.params = params

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _check_probabilities(self, params: LatticeParameters) -> None:
        if not params.up_probability > 0.0:
            raise ArbitrageViolationError(
                f"up_probability should be greater than 0, got {params.up_probability}"
            )
        if not params.up_probability < 1.0:
            raise ArbitrageViolationError(
                f"up_probability should be smaller than 1, got {params.up_probability}"
            )
        if not params.middle_probability > 0.0:
            raise ArbitrageViolationError(
                f"middle_probability should be greater than 0, got {params.middle_probability}"
            )
        if not params.middle_probability < 1.0:
            raise ArbitrageViolationError(
                f"middle_probability should be smaller than 1, got {params.middle_probability}"
            )
        if not params.down_probability > 0.0:
            raise ArbitrageViolationError(
                f"down_probability should be greater than 0, got {params.down_probability}"
            )
        tolerance = self.params.probability_tolerance
        if tolerance is not None:
            total = params.up_probability + params.middle_probability + params.down_probability
            if abs(total - 1.0) > tolerance:
                raise ArbitrageViolationError(
                    f"transition probabilities should sum to 1, got {total!r}"
                )

    def _constant_source(
        self,
        function: OptionFunction,
        lattice: LatticeSpecification,
        spot: float,
        volatility: float,
        interest_rate: float,
        dividend_rate: float,
        dividends: DividendSchedule | None,
    ) -> _ConstantLatticeSource:
        if dividends is None:
            dividends = DividendSchedule.empty()
        elif not isinstance(dividends, DividendSchedule):
            raise ConfigurationError(
                f"dividends must be a DividendSchedule, got {type(dividends).__name__}"
            )
        if len(dividends) > 0 and dividend_rate != 0.0:
            raise ValidationError(
                "Provide either a continuous dividend_rate or discrete dividends, not both."
            )

        if not np.isfinite(spot) or spot <= 0.0:
            raise ValidationError(f"spot must be positive and finite, got {spot}")
        num_steps = function.num_steps
        if num_steps < 1:
            raise ValidationError(f"num_steps must be >= 1, got {num_steps}")
        dt = function.time_to_expiry / num_steps
        discount = float(np.exp(-interest_rate * dt))
        # Discrete dividends act on the spot, not on the drift.
        drift = interest_rate if len(dividends) > 0 else interest_rate - dividend_rate
        params = LatticeParameters(*lattice.get_parameters_trinomial(volatility, drift, dt))
        self._check_probabilities(params)

        logger.debug(
            "Trinomial tree num_steps=%d dt=%.6g discount=%.10f dividends=%d params=%s",
            num_steps,
            dt,
            discount,
            len(dividends),
            params,
        )
        return _ConstantLatticeSource(
            function,
            params,
            spot=float(spot),
            discount=discount,
            dt=dt,
            dividends=dividends,
        )

    @staticmethod
    def _data_source(function: OptionFunction, data: TrinomialTreeData) -> _TreeDataSource:
        if data.num_steps != function.num_steps:
            raise ConfigurationError(
                "mismatch in number of steps: option function has "
                f"{function.num_steps}, tree data has {data.num_steps}"
            )
        logger.debug("Trinomial tree from data num_steps=%d", data.num_steps)
        return _TreeDataSource(function, data)

    # ------------------------------------------------------------------
    # Constant lattice
    # ------------------------------------------------------------------

    def price(
        self,
        function: OptionFunction,
        lattice: LatticeSpecification,
        spot: float,
        volatility: float,
        interest_rate: float,
        dividend_rate: float = 0.0,
        dividends: DividendSchedule | None = None,
    ) -> float:
        """Price an option under a lattice specification and constant market inputs.

        Parameters
        ==========
        function:
            the option
        lattice:
            the lattice specification
        spot:
            spot of the underlying
        volatility:
            volatility, constant over the life of the option
        interest_rate:
            continuously compounded interest rate
        dividend_rate:
            continuous dividend yield; must be 0 when ``dividends`` is non-empty
        dividends:
            discrete proportional dividends. The expiry layer is seeded with the
            spot net of every dividend; at step ``i`` the spot handed to the
            option function is net of the dividends gone ex strictly before
            ``i * dt``.

        Returns
        =======
        float
            option price

        Raises
        ======
        ArbitrageViolationError
            a lattice probability lies outside its bounds ("should be greater
            than 0" / "should be smaller than 1"), or, with
            ``params.probability_tolerance`` set (the default), the three
            probabilities do not sum to 1 ("should sum to 1") even though each
            is inside its bounds. Pass ``probability_tolerance=None`` to keep
            only the bounds check.
        ValidationError
            non-positive spot, ``num_steps < 1``, or both a flat dividend
            yield and discrete dividends.
        """
        source = self._constant_source(
            function, lattice, spot, volatility, interest_rate, dividend_rate, dividends
        )
        with log_timing(logger, "Trinomial price", self.params.log_timings):
            pv, _ = _induct(source)
        return pv

    def price_with_greeks(
        self,
        function: OptionFunction,
        lattice: LatticeSpecification,
        spot: float,
        volatility: float,
        interest_rate: float,
        dividend_rate: float = 0.0,
        dividends: DividendSchedule | None = None,
    ) -> ValueDerivatives:
        """Price an option and compute delta, gamma, theta, vega and rho.

        Delta and gamma come from the three nodes of layer 1, theta from the
        middle node of layer 1 against the root value:

        .. math::

            \\Theta = \\frac{f_1 - f_0}{365 \\, \\Delta t}

        Vega and rho are forward differences of ``price`` with the volatility,
        respectively the interest rate, bumped by ``params.bump``.

        The layer-1 extraction uses the undivided spot, i.e. it assumes that no
        dividend goes ex at the first step.
        """
        source = self._constant_source(
            function, lattice, spot, volatility, interest_rate, dividend_rate, dividends
        )
        with log_timing(logger, "Trinomial price_with_greeks", self.params.log_timings):
            pv, layer_one = _induct(source, capture_layer_one=True)

            delta = gamma = middle_value = 0.0
            if layer_one is not None:
                delta, gamma, middle_value = _local_greeks(layer_one, source.layer_one_states())
            theta = (middle_value - pv) / source.dt / DAYS_PER_YEAR

            bump = self.params.bump
            bumped_vol = self.price(
                function, lattice, spot, volatility + bump, interest_rate, dividend_rate, dividends
            )
            bumped_rate = self.price(
                function, lattice, spot, volatility, interest_rate + bump, dividend_rate, dividends
            )

        logger.debug(
            "Trinomial bumps pv=%.10f bumped_vol=%.10f bumped_rate=%.10f",
            pv,
            bumped_vol,
            bumped_rate,
        )
        return ValueDerivatives(
            value=pv,
            delta=delta,
            vega=(bumped_vol - pv) / bump,
            rho=(bumped_rate - pv) / bump,
            theta=theta,
            gamma=gamma,
        )

    # ------------------------------------------------------------------
    # Precomputed tree data
    # ------------------------------------------------------------------

    def price_from_data(self, function: OptionFunction, data: TrinomialTreeData) -> float:
        """Price an option on a precomputed, possibly non-uniform, trinomial tree."""
        source = self._data_source(function, data)
        with log_timing(logger, "Trinomial price_from_data", self.params.log_timings):
            pv, _ = _induct(source)
        return pv

    def price_with_greeks_from_data(
        self, function: OptionFunction, data: TrinomialTreeData
    ) -> ValueDerivatives:
        """Price an option on precomputed tree data together with its spot delta.

        Delta is read off the state values of layer 1. The inputs that produced
        the tree are not known here, so vega, rho, theta and gamma are 0.0.
        """
        source = self._data_source(function, data)
        with log_timing(logger, "Trinomial price_with_greeks_from_data", self.params.log_timings):
            pv, layer_one = _induct(source, capture_layer_one=True)
        delta = 0.0
        if layer_one is not None:
            delta, _, _ = _local_greeks(layer_one, source.layer_one_states())
        return ValueDerivatives(value=pv, delta=delta)
