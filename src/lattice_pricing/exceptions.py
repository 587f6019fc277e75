"""Custom exception hierarchy for the lattice_pricing library.

All library-specific exceptions inherit from :class:`LatticePricingError`,
enabling callers to catch *any* library error with a single ``except`` clause::

    try:
        pv = TrinomialTree().price(function, lattice, spot, vol, rate)
    except LatticePricingError as exc:
        log.error("Library error: %s", exc)
"""

from __future__ import annotations


class LatticePricingError(Exception):
    """Base exception for all library errors."""


# ── Input validation ────────────────────────────────────────────────


class ValidationError(LatticePricingError):
    """Invalid input values (out-of-range, non-finite, mutually exclusive inputs, etc.)."""


class ConfigurationError(LatticePricingError):
    """Collaborators wired together inconsistently (e.g. mismatched step counts)."""


# ── Numerical issues ────────────────────────────────────────────────


class NumericalError(LatticePricingError):
    """Base for errors arising from numerical computation."""


class ArbitrageViolationError(NumericalError):
    """Lattice parameters imply an arbitrage (e.g. transition probability outside (0, 1))."""
