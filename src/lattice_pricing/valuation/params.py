"""Parameter classes for trinomial tree valuation.

The engine is configured once through an immutable parameter object; pricing
calls themselves never mutate it.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class TrinomialTreeParams:
    """Parameters for trinomial tree option valuation.

    Attributes
    ==========
    bump:
        Absolute bump applied to volatility (vega) and interest rate (rho) in the
        forward-difference bump-and-reprice. Default: 1.0e-6.
    probability_tolerance:
        Maximum allowed ``|p_up + p_mid + p_down - 1|`` for lattice parameters
        derived from a lattice specification. None disables the check.
        Default: 1e-10.
    log_timings:
        Emit DEBUG timings for each pricing call. Default: False.
    """

    bump: float = 1.0e-6
    probability_tolerance: float | None = 1e-10
    log_timings: bool = False

    def __post_init__(self):
        if not np.isfinite(self.bump) or self.bump <= 0.0:
            raise ValueError(f"bump must be positive and finite, got {self.bump}")
        if self.probability_tolerance is not None and not (self.probability_tolerance >= 0.0):
            raise ValueError(
                f"probability_tolerance must be >= 0 or None, got {self.probability_tolerance}"
            )
