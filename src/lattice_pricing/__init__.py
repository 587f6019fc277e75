from .market_environment import DividendSchedule
from .valuation import (
    TrinomialTree,
    TrinomialTreeParams,
    ValueDerivatives,
    RecombiningTrinomialTreeData,
)


__all__ = [
    "DividendSchedule",
    "TrinomialTree",
    "TrinomialTreeParams",
    "ValueDerivatives",
    "RecombiningTrinomialTreeData",
]
