"""
Pytest configuration and fixtures for ring SOM tests
"""

import pytest
import numpy as np
from somtsp import City, NeighborhoodKind, RingSOM, RingSOMConfig


@pytest.fixture
def square_cities():
    """Corners of a 10x10 square, listed in cyclic order"""
    return [
        City("A", 0.0, 0.0),
        City("B", 0.0, 10.0),
        City("C", 10.0, 10.0),
        City("D", 10.0, 0.0),
    ]


@pytest.fixture
def irregular_cities():
    """Four points whose open path changes length under rotation"""
    return [
        City("P0", 0.0, 0.0),
        City("P1", 3.0, 0.0),
        City("P2", 3.0, 4.0),
        City("P3", 0.0, 10.0),
    ]


@pytest.fixture
def random_cities():
    """Thirty cities scattered over a 100x100 box"""
    rng = np.random.RandomState(42)
    points = rng.uniform(0, 100, size=(30, 2))
    return [City(f"C{i}", float(x), float(y)) for i, (x, y) in enumerate(points)]


@pytest.fixture
def small_config():
    """Small ring configuration for quick tests"""
    return RingSOMConfig(
        n_neurons=20,
        n_iterations=10,
        neighborhood=NeighborhoodKind.ELASTIC,
        initial_alpha=0.8,
        alpha_decay=0.95,
        initial_sigma=3.0,
        sigma_decay=0.9,
        seed=42,
    )


@pytest.fixture
def trained_som(small_config, random_cities):
    """Pre-trained ring SOM for testing"""
    som = RingSOM(small_config, verbose=False)
    som.fit(random_cities)
    return som


@pytest.fixture
def all_neighborhoods():
    return [NeighborhoodKind.GAUSSIAN, NeighborhoodKind.ELASTIC]
