"""
Core ring SOM implementation
"""

import numpy as np
import pickle
import os
from dataclasses import dataclass
from pathlib import Path
from datetime import datetime
from typing import Optional, List, Dict, Sequence
import structlog
from tqdm import tqdm

from .config import (
    RingSOMConfig,
    resolve_neighborhood,
    validate_hyperparameters,
)
from .callbacks import Callback, CheckpointCallback, HistoryCallback
from .errors import EmptyInputError
from .geometry import City, NeuronSet
from .neighborhood import get_neighborhood_function
from .tour import TourResult, extract_tour, tour_length
from .visualization import TourVisualizer

logger = structlog.get_logger(__name__)


def ensure_models_dir(filepath: str) -> str:
    """Ensure models directory exists and return full path"""
    if not os.path.isabs(filepath):
        models_dir = Path("models")
        models_dir.mkdir(exist_ok=True)
        return str(models_dir / filepath)
    return filepath


@dataclass
class TrainingState:
    """Annealed parameters, owned by a single call to train()"""

    alpha: float
    sigma: float
    iteration: int = 0

    def decay(self, beta: float, eta: float) -> None:
        self.sigma *= beta
        self.alpha *= eta
        self.iteration += 1


def _present_city(
    neurons: NeuronSet,
    city: City,
    neighborhood_fn,
    state: TrainingState,
) -> float:
    """
    Competition and cooperation for one city; returns squared winner distance

    Neurons are updated in ascending index order, so the ones below the winner
    are weighted against the winner's position before it moves and the ones
    above it against the position after.
    """
    size = len(neurons)
    winner = neurons.nearest(city.x, city.y)
    winner_neuron = neurons[winner]
    error = (city.x - winner_neuron.x) ** 2 + (city.y - winner_neuron.y) ** 2

    before = np.arange(0, winner, dtype=np.intp)
    after = np.arange(winner + 1, size, dtype=np.intp)

    if len(before):
        h = neighborhood_fn(size, neurons, state.sigma, winner, before)
        neurons.pull(before, city.x, city.y, state.alpha * h)
    neurons.pull(np.array([winner], dtype=np.intp), city.x, city.y, state.alpha)
    if len(after):
        h = neighborhood_fn(size, neurons, state.sigma, winner, after)
        neurons.pull(after, city.x, city.y, state.alpha * h)

    return error


def train(
    cities: Sequence[City],
    neuron_count: int,
    neighborhood,
    alpha0: float,
    beta: float,
    sigma0: float,
    eta: float,
    max_iterations: int,
    *,
    seed: Optional[int] = None,
    rng: Optional[np.random.RandomState] = None,
    callbacks: Optional[List[Callback]] = None,
    verbose: bool = False,
) -> NeuronSet:
    """
    Train a ring of neurons on the cities

    Args:
        cities: Cities to approximate
        neuron_count: Number of neurons I on the ring
        neighborhood: NeighborhoodKind (or its string value)
        alpha0: Initial learning rate, in (0, 1]
        beta: Sigma decay factor per pass, in (0, 1]
        sigma0: Initial neighborhood radius, > 0
        eta: Alpha decay factor per pass, in (0, 1]
        max_iterations: Number of full passes over the cities, >= 0
        seed: Seed for a fresh RandomState (ignored when rng is given)
        rng: Random generator used for initialization and shuffling
        callbacks: Callback objects notified during training
        verbose: Whether to show a progress bar

    Returns:
        The trained, read-only NeuronSet

    Raises:
        InvalidArgumentError: if a hyperparameter is out of range
        EmptyInputError: if no cities are given
    """
    kind = resolve_neighborhood(neighborhood)
    validate_hyperparameters(neuron_count, alpha0, beta, sigma0, eta, max_iterations)
    cities = list(cities)
    if not cities:
        raise EmptyInputError("Cannot train on an empty city set")

    if rng is None:
        rng = np.random.RandomState(seed)
    callbacks = callbacks or []
    neighborhood_fn = get_neighborhood_function(kind)

    neurons = NeuronSet.random(cities, neuron_count, rng)
    state = TrainingState(alpha=alpha0, sigma=sigma0)

    for callback in callbacks:
        callback.on_training_begin(neurons)

    iterator = range(max_iterations)
    if verbose:
        iterator = tqdm(iterator, desc=f"Training ring SOM ({kind.value})")

    for t in iterator:
        for callback in callbacks:
            callback.on_iteration_begin(t, state)

        total_error = 0.0
        # Sigma may underflow after many passes; the map then simply freezes
        with np.errstate(divide="ignore", invalid="ignore", under="ignore"):
            for index in rng.permutation(len(cities)):
                total_error += _present_city(
                    neurons, cities[index], neighborhood_fn, state
                )

        metrics = {
            "qe": total_error / len(cities),
            "alpha": state.alpha,
            "sigma": state.sigma,
        }

        if verbose:
            iterator.set_postfix(
                {
                    "QE": f"{metrics['qe']:.4f}",
                    "σ": f"{state.sigma:.3f}",
                    "α": f"{state.alpha:.4f}",
                }
            )

        for callback in callbacks:
            callback.on_iteration_end(t, neurons, state, metrics)

        state.decay(beta, eta)

    for callback in callbacks:
        callback.on_training_end(neurons)

    logger.debug(
        "Ring SOM training finished",
        neighborhood=kind.value,
        neurons=neuron_count,
        cities=len(cities),
        iterations=state.iteration,
        final_alpha=state.alpha,
        final_sigma=state.sigma,
    )

    return neurons.freeze()


class RingSOM:
    """
    Ring-shaped Self-Organizing Map that solves TSP instances

    Wraps train(), extract_tour() and tour_length() with configuration,
    training history, persistence and plotting.
    """

    def __init__(self, config: RingSOMConfig, verbose: bool = True):
        """
        Initialize the map with a configuration

        Args:
            config: RingSOMConfig with all hyperparameters
            verbose: Whether to print training progress
        """
        self.config = config.validate()
        self.verbose = verbose

        # One generator per model so repeated fits stay reproducible
        self.rng = np.random.RandomState(config.seed)

        self.neurons: Optional[NeuronSet] = None
        self.cities: List[City] = []

        self.metadata = {
            "creation_time": datetime.now().isoformat(),
            "training_history": [],
            "total_iterations": 0,
            "n_cities": 0,
            "config": config.to_dict(),
        }

    def fit(
        self, cities: Sequence[City], callbacks: Optional[List[Callback]] = None
    ) -> "RingSOM":
        """
        Train a fresh ring on the cities

        Args:
            cities: Cities to approximate
            callbacks: List of callback objects

        Returns:
            self for method chaining
        """
        cities = list(cities)
        history = HistoryCallback()
        callbacks = list(callbacks or [])
        callbacks.append(history)
        if self.config.checkpoint_interval:
            callbacks.append(
                CheckpointCallback(
                    self.config.checkpoint_dir, self.config.checkpoint_interval
                )
            )

        self.neurons = train(
            cities,
            self.config.n_neurons,
            self.config.neighborhood,
            self.config.initial_alpha,
            self.config.sigma_decay,
            self.config.initial_sigma,
            self.config.alpha_decay,
            self.config.n_iterations,
            rng=self.rng,
            callbacks=callbacks,
            verbose=self.verbose,
        )
        self.cities = cities

        self.metadata["training_history"] = history.history
        self.metadata["total_iterations"] += self.config.n_iterations
        self.metadata["n_cities"] = len(cities)
        self.metadata["last_training"] = datetime.now().isoformat()

        return self

    def _check_trained(self):
        """Check if the map has been trained, raise informative error if not"""
        if self.neurons is None:
            raise RuntimeError("RingSOM has not been trained yet. Call fit() first.")

    def tour(self, cities: Optional[Sequence[City]] = None) -> List[City]:
        """Visiting order of the given cities (training cities by default)"""
        self._check_trained()
        cities = self.cities if cities is None else list(cities)
        return extract_tour(cities, self.neurons)

    def tour_length(self, cities: Optional[Sequence[City]] = None) -> float:
        return tour_length(self.tour(cities))

    def solve(self, cities: Sequence[City]) -> TourResult:
        """Train on the cities and return the tour read off the ring"""
        self.fit(cities)
        tour = self.tour()
        return TourResult(tour=tour, length=tour_length(tour), neurons=self.neurons)

    def get_neurons(self) -> np.ndarray:
        """Get neuron positions as a (n_neurons, 2) array"""
        self._check_trained()
        return self.neurons.positions()

    def quantization_error(self, cities: Optional[Sequence[City]] = None) -> float:
        """Mean squared distance from each city to its nearest neuron"""
        self._check_trained()
        cities = self.cities if cities is None else list(cities)
        if not cities:
            raise EmptyInputError("No cities to measure")
        errors = []
        for city in cities:
            neuron = self.neurons[self.neurons.nearest(city.x, city.y)]
            errors.append((city.x - neuron.x) ** 2 + (city.y - neuron.y) ** 2)
        return float(np.mean(errors))

    def save(self, filepath: str):
        """Save trained model to file"""
        full_path = ensure_models_dir(filepath)

        save_data = {
            "config": self.config.to_dict(),
            "neurons": None if self.neurons is None else self.neurons.positions(),
            "cities": [(city.name, city.x, city.y) for city in self.cities],
            "metadata": self.metadata,
        }

        try:
            with open(full_path, "wb") as f:
                pickle.dump(save_data, f)

            if self.verbose:
                print(f"Model saved to {full_path}")
        except (IOError, OSError) as e:
            raise IOError(f"Failed to save model to {full_path}: {e}")

    @classmethod
    def load(cls, filepath: str) -> "RingSOM":
        """Load trained model from file"""
        full_path = ensure_models_dir(filepath)

        try:
            with open(full_path, "rb") as f:
                save_data = pickle.load(f)
        except (IOError, OSError) as e:
            raise IOError(f"Failed to load model from {full_path}: {e}")

        config = RingSOMConfig.from_dict(save_data["config"])
        som = cls(config, verbose=False)
        if save_data["neurons"] is not None:
            som.neurons = NeuronSet.from_positions(save_data["neurons"]).freeze()
        som.cities = [City(name, x, y) for name, x, y in save_data["cities"]]
        som.metadata = save_data["metadata"]

        return som

    def get_info(self) -> Dict:
        """Get comprehensive information about the map"""
        info = {
            "config": self.config.to_dict(),
            "metadata": self.metadata,
            "n_neurons": self.config.n_neurons,
            "neighborhood": self.config.neighborhood.value,
            "n_cities": self.metadata["n_cities"],
            "total_iterations": self.metadata["total_iterations"],
            "trained": self.neurons is not None,
        }
        if self.neurons is not None and self.cities:
            info["tour_length"] = self.tour_length()
        return info

    def plot_tour(self, show_plot=True, save_path="tour.png"):
        """Plot the cities, the trained ring and the extracted tour"""
        self._check_trained()
        TourVisualizer.plot_tour(
            self.cities,
            self.tour(),
            self.neurons,
            show_plot=show_plot,
            save_path=save_path,
            verbose=self.verbose,
        )
        return self

    def plot_training_progress(self, show_plot=True, save_path="training_progress.png"):
        """Plot quantization error and the annealing schedule"""
        TourVisualizer.plot_training_progress(
            self.metadata["training_history"],
            show_plot=show_plot,
            save_path=save_path,
            verbose=self.verbose,
        )
        return self
