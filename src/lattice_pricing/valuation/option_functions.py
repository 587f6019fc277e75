"""Vanilla option functions for trinomial tree valuation.

An option function owns everything product-specific in a lattice valuation:
its step count and expiry, the payoff at expiry and the one-step backward
update (discounted expectation, optionally overridden by early exercise).

Node ordering follows the engine: index 0 is the lowest state of a layer.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar
import datetime as dt
import numpy as np
from ..enums import DayCountConvention, ExerciseType, OptionType
from ..exceptions import ConfigurationError, ValidationError
from ..utils import calculate_year_fraction


__all__ = [
    "EuropeanVanillaOptionFunction",
    "AmericanVanillaOptionFunction",
]


@dataclass(frozen=True, slots=True)
class _VanillaOptionFunction:
    """Shared state and payoff logic for vanilla calls and puts."""

    strike: float
    time_to_expiry: float
    option_type: OptionType
    num_steps: int

    exercise_type: ClassVar[ExerciseType]

    def __post_init__(self) -> None:
        if not isinstance(self.option_type, OptionType):
            raise ConfigurationError(
                f"option_type must be OptionType enum, got {type(self.option_type).__name__}"
            )
        try:
            strike = float(self.strike)
            time_to_expiry = float(self.time_to_expiry)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("strike and time_to_expiry must be numeric") from exc
        if not np.isfinite(strike) or strike < 0.0:
            raise ValidationError("strike must be finite and >= 0")
        if not np.isfinite(time_to_expiry) or time_to_expiry <= 0.0:
            raise ValidationError("time_to_expiry must be positive and finite")
        if int(self.num_steps) != self.num_steps or self.num_steps < 1:
            raise ValidationError(f"num_steps must be a positive integer, got {self.num_steps}")
        object.__setattr__(self, "strike", strike)
        object.__setattr__(self, "time_to_expiry", time_to_expiry)
        object.__setattr__(self, "num_steps", int(self.num_steps))

    @classmethod
    def from_dates(
        cls,
        *,
        strike: float,
        pricing_date: dt.datetime,
        maturity: dt.datetime,
        option_type: OptionType,
        num_steps: int,
        day_count_convention: DayCountConvention = DayCountConvention.ACT_365F,
    ) -> _VanillaOptionFunction:
        """Create the option function with expiry measured between two dates."""
        if maturity <= pricing_date:
            raise ValidationError("Option maturity must be after pricing_date.")
        time_to_expiry = calculate_year_fraction(pricing_date, maturity, day_count_convention)
        return cls(
            strike=strike,
            time_to_expiry=time_to_expiry,
            option_type=option_type,
            num_steps=num_steps,
        )

    def _intrinsic(self, states: np.ndarray) -> np.ndarray:
        if self.option_type is OptionType.CALL:
            return np.maximum(states - self.strike, 0.0)
        return np.maximum(self.strike - states, 0.0)

    @staticmethod
    def _layer_states(spot: float, down_factor: float, middle_factor: float, layer: int) -> np.ndarray:
        """Underlying levels of the ``2*layer + 1`` nodes of a layer, lowest first."""
        ratio = middle_factor / down_factor
        return spot * down_factor**layer * ratio ** np.arange(2 * layer + 1)

    def payoff_at_expiry(self, spot: float, down_factor: float, middle_factor: float) -> np.ndarray:
        states = self._layer_states(spot, down_factor, middle_factor, self.num_steps)
        return self._intrinsic(states)

    def payoff_at_expiry_from_states(self, state_values: np.ndarray) -> np.ndarray:
        return self._intrinsic(np.asarray(state_values, dtype=float))

    @staticmethod
    def _continuation(
        discount: float,
        up_probability: float | np.ndarray,
        middle_probability: float | np.ndarray,
        down_probability: float | np.ndarray,
        values: np.ndarray,
    ) -> np.ndarray:
        return discount * (
            up_probability * values[2:]
            + middle_probability * values[1:-1]
            + down_probability * values[:-2]
        )


class EuropeanVanillaOptionFunction(_VanillaOptionFunction):
    """European call or put: exercise at expiry only."""

    exercise_type = ExerciseType.EUROPEAN

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
    ) -> np.ndarray:
        return self._continuation(
            discount, up_probability, middle_probability, down_probability, values
        )

    def next_option_values_from_data(
        self,
        discount: float,
        probabilities: np.ndarray,
        state_values: np.ndarray,
        values: np.ndarray,
        layer: int,
    ) -> np.ndarray:
        return self._continuation(
            discount, probabilities[:, 2], probabilities[:, 1], probabilities[:, 0], values
        )


class AmericanVanillaOptionFunction(_VanillaOptionFunction):
    """American call or put: the holder may exercise at every node."""

    exercise_type = ExerciseType.AMERICAN

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
    ) -> np.ndarray:
        continuation = self._continuation(
            discount, up_probability, middle_probability, down_probability, values
        )
        states = self._layer_states(spot, down_factor, middle_factor, layer)
        return np.maximum(continuation, self._intrinsic(states))

    def next_option_values_from_data(
        self,
        discount: float,
        probabilities: np.ndarray,
        state_values: np.ndarray,
        values: np.ndarray,
        layer: int,
    ) -> np.ndarray:
        continuation = self._continuation(
            discount, probabilities[:, 2], probabilities[:, 1], probabilities[:, 0], values
        )
        return np.maximum(continuation, self._intrinsic(np.asarray(state_values, dtype=float)))
