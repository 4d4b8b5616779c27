"""
Callback system for monitoring ring SOM training
"""

import os
from abc import ABC, abstractmethod
from typing import Dict, List, TYPE_CHECKING

import numpy as np
import structlog

if TYPE_CHECKING:
    from .core import TrainingState
    from .geometry import NeuronSet

logger = structlog.get_logger(__name__)


class Callback(ABC):
    """Abstract base class for callbacks"""

    @abstractmethod
    def on_training_begin(self, neurons: "NeuronSet") -> None:
        pass

    @abstractmethod
    def on_iteration_begin(self, iteration: int, state: "TrainingState") -> None:
        pass

    @abstractmethod
    def on_iteration_end(
        self,
        iteration: int,
        neurons: "NeuronSet",
        state: "TrainingState",
        metrics: Dict,
    ) -> None:
        pass

    @abstractmethod
    def on_training_end(self, neurons: "NeuronSet") -> None:
        pass


class HistoryCallback(Callback):
    """Record the annealing schedule and quantization error of every pass"""

    def __init__(self):
        self.history: List[Dict] = []

    def on_training_begin(self, neurons: "NeuronSet") -> None:
        self.history = []

    def on_iteration_begin(self, iteration: int, state: "TrainingState") -> None:
        pass

    def on_iteration_end(
        self,
        iteration: int,
        neurons: "NeuronSet",
        state: "TrainingState",
        metrics: Dict,
    ) -> None:
        # alpha and sigma are the values used during this pass
        self.history.append(
            {
                "iteration": iteration,
                "metrics": dict(metrics),
                "alpha": metrics["alpha"],
                "sigma": metrics["sigma"],
            }
        )

    def on_training_end(self, neurons: "NeuronSet") -> None:
        pass


class CheckpointCallback(Callback):
    """Save neuron positions as .npy files during training"""

    def __init__(self, checkpoint_dir: str, interval: int = 100):
        self.checkpoint_dir = checkpoint_dir
        self.interval = interval
        os.makedirs(checkpoint_dir, exist_ok=True)

    def on_training_begin(self, neurons: "NeuronSet") -> None:
        pass

    def on_iteration_begin(self, iteration: int, state: "TrainingState") -> None:
        pass

    def on_iteration_end(
        self,
        iteration: int,
        neurons: "NeuronSet",
        state: "TrainingState",
        metrics: Dict,
    ) -> None:
        if iteration % self.interval == 0:
            checkpoint_path = os.path.join(
                self.checkpoint_dir, f"neurons_iteration_{iteration}.npy"
            )
            self._save(checkpoint_path, neurons)

    def on_training_end(self, neurons: "NeuronSet") -> None:
        self._save(os.path.join(self.checkpoint_dir, "final_neurons.npy"), neurons)

    def _save(self, path: str, neurons: "NeuronSet") -> None:
        try:
            np.save(path, neurons.positions())
        except (IOError, OSError) as e:
            logger.warning("Failed to save checkpoint", path=path, error=str(e))
