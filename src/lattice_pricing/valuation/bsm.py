"""Black-Scholes-Merton closed form for European options with continuous dividend yield.

Serves as the analytical benchmark for trinomial tree prices and Greeks. Units
follow the tree engine: vega and rho per unit change of volatility and rate,
theta per calendar day.
"""

from __future__ import annotations
from typing import NamedTuple
import numpy as np
from scipy.stats import norm
from ..enums import OptionType
from ..exceptions import ValidationError

__all__ = [
    "bsm_price",
    "bsm_delta",
    "bsm_gamma",
    "bsm_vega",
    "bsm_theta",
    "bsm_rho",
]


class _BSMInputs(NamedTuple):
    """Pre-computed inputs shared across all BSM Greek calculations."""

    spot: float
    strike: float
    volatility: float
    time_to_expiry: float
    rate: float
    dividend_rate: float
    df_r: float
    df_q: float
    d1: float
    d2: float


def _bsm_inputs(
    spot: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    rate: float,
    dividend_rate: float,
) -> _BSMInputs:
    if time_to_expiry <= 0:
        raise ValidationError("time_to_expiry must be positive")
    if volatility <= 0:
        raise ValidationError("volatility must be positive")
    if spot <= 0 or strike <= 0:
        raise ValidationError("spot and strike must be positive")

    df_r = float(np.exp(-rate * time_to_expiry))
    df_q = float(np.exp(-dividend_rate * time_to_expiry))
    sqrt_t = np.sqrt(time_to_expiry)
    d1 = (np.log(spot / strike) + (rate - dividend_rate + 0.5 * volatility**2) * time_to_expiry) / (
        volatility * sqrt_t
    )
    d2 = d1 - volatility * sqrt_t
    return _BSMInputs(
        spot=float(spot),
        strike=float(strike),
        volatility=float(volatility),
        time_to_expiry=float(time_to_expiry),
        rate=float(rate),
        dividend_rate=float(dividend_rate),
        df_r=df_r,
        df_q=df_q,
        d1=float(d1),
        d2=float(d2),
    )


def bsm_price(
    spot: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    rate: float,
    option_type: OptionType,
    dividend_rate: float = 0.0,
) -> float:
    """European option value under Black-Scholes-Merton."""
    inp = _bsm_inputs(spot, strike, time_to_expiry, volatility, rate, dividend_rate)
    if option_type is OptionType.CALL:
        value = inp.spot * inp.df_q * norm.cdf(inp.d1) - inp.strike * inp.df_r * norm.cdf(inp.d2)
    else:
        value = inp.strike * inp.df_r * norm.cdf(-inp.d2) - inp.spot * inp.df_q * norm.cdf(-inp.d1)
    return float(value)


def bsm_delta(
    spot: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    rate: float,
    option_type: OptionType,
    dividend_rate: float = 0.0,
) -> float:
    """delta = df_q * N(d1) for calls, df_q * (N(d1) - 1) for puts."""
    inp = _bsm_inputs(spot, strike, time_to_expiry, volatility, rate, dividend_rate)
    if option_type is OptionType.CALL:
        return float(inp.df_q * norm.cdf(inp.d1))
    return float(inp.df_q * (norm.cdf(inp.d1) - 1.0))


def bsm_gamma(
    spot: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    rate: float,
    dividend_rate: float = 0.0,
) -> float:
    inp = _bsm_inputs(spot, strike, time_to_expiry, volatility, rate, dividend_rate)
    return float(
        inp.df_q * norm.pdf(inp.d1) / (inp.spot * inp.volatility * np.sqrt(inp.time_to_expiry))
    )


def bsm_vega(
    spot: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    rate: float,
    dividend_rate: float = 0.0,
) -> float:
    """Vega per unit change of volatility (not per volatility point)."""
    inp = _bsm_inputs(spot, strike, time_to_expiry, volatility, rate, dividend_rate)
    return float(inp.spot * inp.df_q * norm.pdf(inp.d1) * np.sqrt(inp.time_to_expiry))


def bsm_theta(
    spot: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    rate: float,
    option_type: OptionType,
    dividend_rate: float = 0.0,
) -> float:
    """Theta per calendar day.

    For call:
        theta = -(S * N'(d1) * sigma * e^(-qT)) / (2 * sqrt(T))
                - r * K * e^(-rT) * N(d2)
                + q * S * e^(-qT) * N(d1)

    For put:
        theta = -(S * N'(d1) * sigma * e^(-qT)) / (2 * sqrt(T))
                + r * K * e^(-rT) * N(-d2)
                - q * S * e^(-qT) * N(-d1)
    """
    inp = _bsm_inputs(spot, strike, time_to_expiry, volatility, rate, dividend_rate)
    term1 = -(
        inp.spot * inp.df_q * norm.pdf(inp.d1) * inp.volatility / (2 * np.sqrt(inp.time_to_expiry))
    )
    if option_type is OptionType.CALL:
        term2 = -inp.rate * inp.strike * inp.df_r * norm.cdf(inp.d2)
        term3 = inp.dividend_rate * inp.spot * inp.df_q * norm.cdf(inp.d1)
    else:
        term2 = inp.rate * inp.strike * inp.df_r * norm.cdf(-inp.d2)
        term3 = -inp.dividend_rate * inp.spot * inp.df_q * norm.cdf(-inp.d1)
    return float((term1 + term2 + term3) / 365)


def bsm_rho(
    spot: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    rate: float,
    option_type: OptionType,
    dividend_rate: float = 0.0,
) -> float:
    """Rho per unit change of the interest rate."""
    inp = _bsm_inputs(spot, strike, time_to_expiry, volatility, rate, dividend_rate)
    if option_type is OptionType.CALL:
        return float(inp.strike * inp.time_to_expiry * inp.df_r * norm.cdf(inp.d2))
    return float(-inp.strike * inp.time_to_expiry * inp.df_r * norm.cdf(-inp.d2))
