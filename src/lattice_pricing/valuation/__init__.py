"""Option valuation on recombining trinomial trees.

Public API
----------
Engine:
    TrinomialTree: Backward-induction pricer with tree and bump-and-reprice Greeks
    ValueDerivatives: Present value with delta, vega, rho, theta and gamma
    TrinomialTreeParams: Engine configuration

Lattice specifications:
    LatticeParameters: One-step factors and probabilities
    CoxRossRubinsteinLatticeSpecification
    TrigeorgisLatticeSpecification
    EqualProbabilitiesLatticeSpecification

Option functions:
    EuropeanVanillaOptionFunction
    AmericanVanillaOptionFunction

Tree data:
    RecombiningTrinomialTreeData: Precomputed per-layer data for non-uniform trees
"""

from .trinomial_tree import (
    LatticeSpecification,
    OptionFunction,
    TrinomialTree,
    TrinomialTreeData,
    ValueDerivatives,
)
from .params import TrinomialTreeParams
from .lattice import (
    LatticeParameters,
    CoxRossRubinsteinLatticeSpecification,
    TrigeorgisLatticeSpecification,
    EqualProbabilitiesLatticeSpecification,
)
from .option_functions import (
    EuropeanVanillaOptionFunction,
    AmericanVanillaOptionFunction,
)
from .tree_data import RecombiningTrinomialTreeData
from .bsm import bsm_price, bsm_delta, bsm_gamma, bsm_vega, bsm_theta, bsm_rho

__all__ = [
    # Engine
    "TrinomialTree",
    "ValueDerivatives",
    "TrinomialTreeParams",
    # Collaborator protocols
    "LatticeSpecification",
    "OptionFunction",
    "TrinomialTreeData",
    # Lattice specifications
    "LatticeParameters",
    "CoxRossRubinsteinLatticeSpecification",
    "TrigeorgisLatticeSpecification",
    "EqualProbabilitiesLatticeSpecification",
    # Option functions
    "EuropeanVanillaOptionFunction",
    "AmericanVanillaOptionFunction",
    # Tree data
    "RecombiningTrinomialTreeData",
    # Black-Scholes-Merton benchmark
    "bsm_price",
    "bsm_delta",
    "bsm_gamma",
    "bsm_vega",
    "bsm_theta",
    "bsm_rho",
]
