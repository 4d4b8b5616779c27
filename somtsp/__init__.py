"""
Ring Self-Organizing Map (SOM) TSP Package

Approximate Traveling Salesman tours over 2-D points by training a closed
ring of neurons with a Gaussian-kernel or elastic-band neighborhood.
"""

from .core import RingSOM, TrainingState, train
from .config import RingSOMConfig, NeighborhoodKind
from .errors import RingSOMError, InvalidArgumentError, EmptyInputError
from .geometry import City, Neuron, NeuronSet, norm, distance
from .neighborhood import NeighborhoodCalculator, weight, weights
from .tour import TourResult, assign_cities, extract_tour, tour_length
from .callbacks import Callback, CheckpointCallback, HistoryCallback
from .datasets import load_cities, cities_from_records
from .experiment import run_experiment, run_sweep, summarize_sweep
from .observability import (
    setup_logging,
    trace_operation,
    get_metrics,
    get_health_status,
    log_training_metrics,
    log_tour_metrics,
    update_stored_runs_count,
    RequestTracingMiddleware,
)

__version__ = "0.1.0"

__all__ = [
    "RingSOM",
    "TrainingState",
    "train",
    "RingSOMConfig",
    "NeighborhoodKind",
    "RingSOMError",
    "InvalidArgumentError",
    "EmptyInputError",
    "City",
    "Neuron",
    "NeuronSet",
    "norm",
    "distance",
    "NeighborhoodCalculator",
    "weight",
    "weights",
    "TourResult",
    "assign_cities",
    "extract_tour",
    "tour_length",
    "Callback",
    "CheckpointCallback",
    "HistoryCallback",
    "load_cities",
    "cities_from_records",
    "run_experiment",
    "run_sweep",
    "summarize_sweep",
    "setup_logging",
    "trace_operation",
    "get_metrics",
    "get_health_status",
    "log_training_metrics",
    "log_tour_metrics",
    "update_stored_runs_count",
    "RequestTracingMiddleware",
]
