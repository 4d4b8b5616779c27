"""Neighborhood functions for the ring SOM."""

from typing import Callable, Dict

import numpy as np

from .config import NeighborhoodKind, resolve_neighborhood
from .geometry import NeuronSet, distances_to


class NeighborhoodCalculator:
    """
    Influence weights of a winning neuron on the rest of the ring

    Every function takes ``(ring_size, neurons, sigma, winner, targets)`` with
    ``targets`` an integer array and returns one weight per target. The weight
    of the winner itself is always exactly 1.0.
    """

    @staticmethod
    def gaussian(
        ring_size: int,
        neurons: NeuronSet,
        sigma: float,
        winner: int,
        targets: np.ndarray,
    ) -> np.ndarray:
        """Gaussian kernel over the spatial distance to the winner."""
        points = neurons.points
        winner_point = points[winner]
        d = distances_to(points[targets], winner_point["x"], winner_point["y"])
        weights = np.exp(-(d**2) / sigma**2)
        # Coincident neurons stay at 1.0 even when sigma has underflowed
        return np.where((targets == winner) | (d == 0), 1.0, weights)

    @staticmethod
    def elastic(
        ring_size: int,
        neurons: NeuronSet,
        sigma: float,
        winner: int,
        targets: np.ndarray,
    ) -> np.ndarray:
        """Gaussian over the circular index distance along the ring."""
        offset = np.abs(targets - winner)
        d = np.minimum(offset, ring_size - offset).astype(np.float64)
        weights = np.exp(-(d**2) / sigma**2)
        return np.where(targets == winner, 1.0, weights)


_NEIGHBORHOOD_FUNCTIONS: Dict[NeighborhoodKind, Callable] = {
    NeighborhoodKind.GAUSSIAN: NeighborhoodCalculator.gaussian,
    NeighborhoodKind.ELASTIC: NeighborhoodCalculator.elastic,
}


def get_neighborhood_function(kind) -> Callable:
    """Look up the vectorized weight function for a neighborhood kind"""
    return _NEIGHBORHOOD_FUNCTIONS[resolve_neighborhood(kind)]


def weights(
    kind,
    ring_size: int,
    neurons: NeuronSet,
    sigma: float,
    winner: int,
    targets,
) -> np.ndarray:
    targets = np.asarray(targets, dtype=np.intp)
    return get_neighborhood_function(kind)(ring_size, neurons, sigma, winner, targets)


def weight(
    kind,
    ring_size: int,
    neurons: NeuronSet,
    sigma: float,
    winner: int,
    target: int,
) -> float:
    """Weight of a single target neuron, in (0, 1]"""
    return float(weights(kind, ring_size, neurons, sigma, winner, [target])[0])
