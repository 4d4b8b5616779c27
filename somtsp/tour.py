"""
Reading a tour off a trained ring and scoring it
"""

from dataclasses import dataclass
from typing import List, Sequence

from .errors import EmptyInputError
from .geometry import City, NeuronSet, distance


@dataclass(frozen=True)
class TourResult:
    """Ordered tour, its open-path length and the ring it was read from"""

    tour: List[City]
    length: float
    neurons: NeuronSet

    @property
    def names(self) -> List[str]:
        return [city.name for city in self.tour]

    def to_dict(self) -> dict:
        return {
            "tour": [
                {"name": city.name, "x": city.x, "y": city.y} for city in self.tour
            ],
            "length": self.length,
            "neurons": self.neurons.to_list(),
        }


def assign_cities(cities: Sequence[City], neurons: NeuronSet) -> List[int]:
    """Index of the nearest neuron for every city, lowest index on ties"""
    return [neurons.nearest(city.x, city.y) for city in cities]


def extract_tour(cities: Sequence[City], neurons: NeuronSet) -> List[City]:
    """
    Order cities by the ring index of their nearest neuron

    The sort is stable: cities sharing a neuron keep their input order.

    Raises:
        EmptyInputError: if there are no cities or no neurons
    """
    if not cities:
        raise EmptyInputError("Cannot extract a tour from an empty city set")
    if len(neurons) == 0:
        raise EmptyInputError("Cannot extract a tour from an empty neuron set")

    assignment = assign_cities(cities, neurons)
    order = sorted(range(len(cities)), key=lambda i: assignment[i])
    return [cities[i] for i in order]


def tour_length(tour: Sequence[City]) -> float:
    """
    Sum of distances between consecutive cities

    The tour is scored as an open path: there is no edge from the last city
    back to the first.
    """
    total = 0.0
    for current, following in zip(tour, tour[1:]):
        total += distance(current, following)
    return total
