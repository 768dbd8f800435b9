"""
Pool-side state read by the TWAP oracle
"""

from .pair import PairObservation, PairReader, SimulatedPair, current_cumulative_prices

__all__ = [
    "PairObservation",
    "PairReader",
    "SimulatedPair",
    "current_cumulative_prices",
]
