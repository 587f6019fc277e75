"""Market inputs shared by the lattice valuation engines."""

from __future__ import annotations
from typing import Sequence
from dataclasses import dataclass
import datetime as dt
import numpy as np
from .enums import DayCountConvention
from .exceptions import ValidationError
from .utils import calculate_year_fraction


@dataclass(frozen=True, slots=True)
class DividendSchedule:
    """Discrete proportional dividends paid by the underlying.

    Each dividend ``j`` removes the fraction ``yields[j]`` of the spot when it
    goes ex at ``times[j]`` (a year fraction measured from the valuation date).

    Parameters
    ----------
    yields : Sequence[float]
        Dividend yields, each in ``[0, 1)``.
    times : Sequence[float]
        Ex-dividend times in years, each ``>= 0``. Same length as ``yields``.
    """

    yields: tuple[float, ...]
    times: tuple[float, ...]

    def __post_init__(self) -> None:
        try:
            yields = tuple(float(y) for y in self.yields)
            times = tuple(float(t) for t in self.times)
        except (TypeError, ValueError) as exc:
            raise ValidationError("dividend yields and times must be numeric") from exc

        if len(yields) != len(times):
            raise ValidationError(
                f"dividend yields ({len(yields)}) and times ({len(times)}) must have the same length"
            )
        if not (np.all(np.isfinite(yields)) and np.all(np.isfinite(times))):
            raise ValidationError("dividend yields and times must be finite")
        if any(y < 0.0 or y >= 1.0 for y in yields):
            raise ValidationError("dividend yields must be in [0, 1)")
        if any(t < 0.0 for t in times):
            raise ValidationError("dividend times must be >= 0")

        object.__setattr__(self, "yields", yields)
        object.__setattr__(self, "times", times)

    @classmethod
    def empty(cls) -> DividendSchedule:
        return cls(yields=(), times=())

    @classmethod
    def from_dates(
        cls,
        pricing_date: dt.datetime,
        dividends: Sequence[tuple[dt.datetime, float]],
        day_count_convention: DayCountConvention = DayCountConvention.ACT_365F,
    ) -> DividendSchedule:
        """Build a schedule from ``(ex_date, yield)`` pairs."""
        for ex_date, _ in dividends:
            if ex_date < pricing_date:
                raise ValidationError(
                    f"ex-dividend date {ex_date:%Y-%m-%d} is before pricing date "
                    f"{pricing_date:%Y-%m-%d}"
                )
        times = [calculate_year_fraction(pricing_date, d, day_count_convention) for d, _ in dividends]
        yields = [y for _, y in dividends]
        return cls(yields=tuple(yields), times=tuple(times))

    def __len__(self) -> int:
        return len(self.yields)

    def modified_spot(self, spot: float) -> float:
        """Spot net of every scheduled dividend, whatever its ex-date."""
        modified = float(spot)
        for y in self.yields:
            modified *= 1.0 - y
        return modified

    def multiplier_before(self, t: float) -> float:
        """Product of ``(1 - yield)`` over dividends gone ex strictly before ``t``."""
        multiplier = 1.0
        for y, ex_time in zip(self.yields, self.times):
            if t > ex_time:
                multiplier *= 1.0 - y
        return multiplier
