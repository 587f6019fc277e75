"""Precomputed data for recombining trinomial trees.

Non-uniform trees (implied or local-volatility trees, term-structure
calibrated lattices) cannot be summarised by six constant numbers. Their
per-layer discount factors, transition probabilities and state values are
stored here and read back layer by layer by the pricing engine.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import numpy as np
from ..exceptions import ArbitrageViolationError, ValidationError

logger = logging.getLogger(__name__)

__all__ = ["RecombiningTrinomialTreeData"]


@dataclass(frozen=True, slots=True)
class RecombiningTrinomialTreeData:
    """Per-layer data of a recombining trinomial tree with ``num_steps`` steps.

    Attributes
    ==========
    state_values:
        ``num_steps + 1`` arrays; layer ``i`` holds the ``2*i + 1`` underlying
        levels, lowest first.
    transition_probabilities:
        ``num_steps`` arrays; layer ``i`` has shape ``(2*i + 1, 3)`` and row ``j``
        holds the (down, middle, up) probabilities out of node ``j``.
    discount_factors:
        ``num_steps`` one-step discount factors; entry ``i`` discounts from
        layer ``i + 1`` back to layer ``i``.
    time:
        Optional ``num_steps + 1`` layer times in years.
    """

    state_values: tuple[np.ndarray, ...]
    transition_probabilities: tuple[np.ndarray, ...]
    discount_factors: np.ndarray
    time: np.ndarray | None = None

    def __post_init__(self) -> None:
        states = tuple(np.asarray(s, dtype=float) for s in self.state_values)
        probabilities = tuple(np.asarray(p, dtype=float) for p in self.transition_probabilities)
        discount_factors = np.asarray(self.discount_factors, dtype=float)

        num_steps = len(probabilities)
        if len(states) != num_steps + 1:
            raise ValidationError(
                f"state_values must have {num_steps + 1} layers for {num_steps} steps, "
                f"got {len(states)}"
            )
        if discount_factors.shape != (num_steps,):
            raise ValidationError(
                f"discount_factors must have shape ({num_steps},), got {discount_factors.shape}"
            )
        for i, layer in enumerate(states):
            if layer.shape != (2 * i + 1,):
                raise ValidationError(
                    f"state_values layer {i} must have {2 * i + 1} nodes, got shape {layer.shape}"
                )
        for i, layer in enumerate(probabilities):
            if layer.shape != (2 * i + 1, 3):
                raise ValidationError(
                    f"transition_probabilities layer {i} must have shape ({2 * i + 1}, 3), "
                    f"got {layer.shape}"
                )
        if not all(np.all(np.isfinite(layer)) for layer in states + probabilities):
            raise ValidationError("tree data must be finite")
        if not np.all(np.isfinite(discount_factors)) or np.any(discount_factors <= 0.0):
            raise ValidationError("discount_factors must be positive and finite")
        if any(np.any(layer < 0.0) for layer in probabilities):
            raise ArbitrageViolationError("transition probabilities must be non-negative")

        object.__setattr__(self, "state_values", states)
        object.__setattr__(self, "transition_probabilities", probabilities)
        object.__setattr__(self, "discount_factors", discount_factors)

        if self.time is not None:
            time = np.asarray(self.time, dtype=float)
            if time.shape != (num_steps + 1,):
                raise ValidationError(
                    f"time must have shape ({num_steps + 1},), got {time.shape}"
                )
            if np.any(np.diff(time) <= 0.0):
                raise ValidationError("time must be strictly increasing")
            object.__setattr__(self, "time", time)

    @property
    def num_steps(self) -> int:
        return len(self.transition_probabilities)

    def state_value_at_layer(self, layer: int) -> np.ndarray:
        return self.state_values[layer]

    def probability_at_layer(self, layer: int) -> np.ndarray:
        return self.transition_probabilities[layer]

    def discount_factor_at_layer(self, layer: int) -> float:
        return float(self.discount_factors[layer])

    @classmethod
    def from_lattice(
        cls,
        lattice,
        *,
        spot: float,
        volatility: float,
        interest_rate: float,
        time_to_expiry: float,
        num_steps: int,
        dividend_rate: float = 0.0,
    ) -> RecombiningTrinomialTreeData:
        """Lay out a uniform tree from a lattice specification and flat market inputs.

        The resulting data reproduces, node for node, the lattice the engine
        derives internally from the same inputs.
        """
        if num_steps < 1:
            raise ValidationError(f"num_steps must be >= 1, got {num_steps}")
        if time_to_expiry <= 0.0:
            raise ValidationError("time_to_expiry must be positive")

        dt = time_to_expiry / num_steps
        params = lattice.get_parameters_trinomial(volatility, interest_rate - dividend_rate, dt)
        logger.debug("Uniform trinomial tree num_steps=%d params=%s", num_steps, params)

        ratio = params.middle_factor / params.down_factor
        states = [
            spot * params.down_factor**i * ratio ** np.arange(2 * i + 1)
            for i in range(num_steps + 1)
        ]
        row = np.array(
            [params.down_probability, params.middle_probability, params.up_probability],
            dtype=float,
        )
        probabilities = [np.tile(row, (2 * i + 1, 1)) for i in range(num_steps)]
        discount_factors = np.full(num_steps, np.exp(-interest_rate * dt))
        time = dt * np.arange(num_steps + 1)
        return cls(
            state_values=tuple(states),
            transition_probabilities=tuple(probabilities),
            discount_factors=discount_factors,
            time=time,
        )
