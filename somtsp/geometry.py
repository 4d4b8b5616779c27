"""Geometry primitives: cities, neurons and Euclidean distances."""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from .errors import EmptyInputError

# Neuron positions are stored as a structured array so that coordinates are
# addressed by name instead of by column position.
POINT_DTYPE = np.dtype([("x", np.float64), ("y", np.float64)])


@dataclass(frozen=True)
class City:
    """A labeled point to visit. Names are display labels, not keys."""

    name: str
    x: float
    y: float


@dataclass(frozen=True)
class Neuron:
    """Snapshot of one neuron's position on the ring"""

    index: int
    x: float
    y: float


def norm(dx: float, dy: float) -> float:
    """Calculate the Euclidean norm of a 2-D displacement."""
    return float(np.sqrt(dx * dx + dy * dy))


def distance(p, q) -> float:
    """Calculate the Euclidean distance between two objects with x and y."""
    return norm(p.x - q.x, p.y - q.y)


def distances_to(points: np.ndarray, x: float, y: float) -> np.ndarray:
    """Calculate distances from every point of a structured array to (x, y)."""
    dx = points["x"] - x
    dy = points["y"] - y
    return np.sqrt(dx * dx + dy * dy)


class NeuronSet:
    """
    Ordered ring of neurons

    Index ``len - 1`` is adjacent to index ``0``. Positions are mutated in place
    by the trainer and frozen (made read-only) once training returns.
    """

    def __init__(self, points: np.ndarray):
        if points.dtype != POINT_DTYPE:
            raise TypeError(f"Expected dtype {POINT_DTYPE}, got {points.dtype}")
        self._points = points

    @classmethod
    def from_positions(cls, positions: Iterable[Tuple[float, float]]) -> "NeuronSet":
        """Build a neuron set from explicit (x, y) pairs"""
        points = np.array([tuple(p) for p in positions], dtype=POINT_DTYPE)
        return cls(points)

    @classmethod
    def random(
        cls, cities: Sequence[City], size: int, rng: np.random.RandomState
    ) -> "NeuronSet":
        """
        Place ``size`` neurons uniformly inside the bounding box of the cities

        x and y are drawn independently, per neuron and per coordinate.
        """
        if not cities:
            raise EmptyInputError("Cannot initialize neurons without cities")

        xs = np.array([city.x for city in cities], dtype=np.float64)
        ys = np.array([city.y for city in cities], dtype=np.float64)

        points = np.empty(size, dtype=POINT_DTYPE)
        points["x"] = rng.uniform(xs.min(), xs.max(), size)
        points["y"] = rng.uniform(ys.min(), ys.max(), size)
        return cls(points)

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> Neuron:
        if index < 0:
            index += len(self)
        point = self._points[index]
        return Neuron(index=index, x=float(point["x"]), y=float(point["y"]))

    def __iter__(self) -> Iterator[Neuron]:
        for index in range(len(self)):
            yield self[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, NeuronSet):
            return NotImplemented
        return np.array_equal(self.positions(), other.positions())

    def __repr__(self) -> str:
        return f"NeuronSet(size={len(self)}, frozen={self.frozen})"

    @property
    def points(self) -> np.ndarray:
        """Structured array with named fields ``x`` and ``y``"""
        return self._points

    @property
    def frozen(self) -> bool:
        return not self._points.flags.writeable

    def positions(self) -> np.ndarray:
        """Return a (size, 2) float array copy of the neuron coordinates"""
        return np.column_stack([self._points["x"], self._points["y"]])

    def to_list(self) -> List[List[float]]:
        return self.positions().tolist()

    def nearest(self, x: float, y: float) -> int:
        """
        Index of the neuron closest to (x, y)

        Ties resolve to the lowest index, both during training and when a tour
        is read off the trained ring.
        """
        if len(self._points) == 0:
            raise EmptyInputError("Neuron set is empty")
        return int(np.argmin(distances_to(self._points, x, y)))

    def pull(self, indices, x: float, y: float, rates) -> None:
        """Move the given neurons towards (x, y): n += rate * (p - n)"""
        xs = self._points["x"]
        ys = self._points["y"]
        xs[indices] += rates * (x - xs[indices])
        ys[indices] += rates * (y - ys[indices])

    def copy(self) -> "NeuronSet":
        """Writable copy, regardless of whether this set is frozen"""
        return NeuronSet(self._points.copy())

    def freeze(self) -> "NeuronSet":
        self._points.flags.writeable = False
        return self
