"""
Example usage of the ring SOM TSP package
"""

import os
import shutil

import numpy as np

from somtsp import (
    City,
    NeighborhoodKind,
    RingSOM,
    RingSOMConfig,
    run_sweep,
    summarize_sweep,
)


def random_cities(n_cities: int, seed: int = 42):
    rng = np.random.RandomState(seed)
    points = rng.uniform(0, 100, size=(n_cities, 2))
    return [
        City(name=f"C{i}", x=float(x), y=float(y)) for i, (x, y) in enumerate(points)
    ]


def run_examples():
    """Run examples of ring SOM usage"""

    cities = random_cities(30)

    # Example 1: Elastic band with plots
    print("Example 1: Elastic band ring with visualization")
    config = RingSOMConfig(
        n_neurons=60,
        n_iterations=150,
        neighborhood=NeighborhoodKind.ELASTIC,
        initial_alpha=0.8,
        alpha_decay=0.99,
        initial_sigma=10.0,
        sigma_decay=0.97,
        seed=42,
    )
    som = RingSOM(config)
    result = som.solve(cities)
    print(f"Tour: {' -> '.join(result.names)}")
    print(f"Tour length: {result.length:.2f}")

    som.plot_tour(show_plot=False).plot_training_progress(show_plot=False)

    # Example 2: Persistence
    print("\nExample 2: Save and reload")
    som.save("ring_som.pkl")
    loaded = RingSOM.load("ring_som.pkl")
    print(f"Reloaded tour length: {loaded.tour_length():.2f}")

    # Example 3: Gaussian kernel on the same cities
    print("\nExample 3: Gaussian kernel")
    gaussian = RingSOM(
        RingSOMConfig(
            n_neurons=60,
            n_iterations=150,
            neighborhood=NeighborhoodKind.GAUSSIAN,
            initial_sigma=20.0,
            seed=42,
        ),
        verbose=False,
    )
    print(f"Tour length: {gaussian.solve(cities).length:.2f}")

    # Example 4: Sweep
    print("\nExample 4: Hyperparameter sweep")
    frame = run_sweep(
        cities,
        {
            "n_neurons": [30, 60],
            "neighborhood": ["gaussian", "elastic"],
        },
        repeats=3,
        base_config=RingSOMConfig(n_iterations=100),
        seed=42,
    )
    print(summarize_sweep(frame).to_string(index=False))

    # Clean up
    if os.path.exists("models"):
        shutil.rmtree("models")


if __name__ == "__main__":
    run_examples()
