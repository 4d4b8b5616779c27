"""
Configuration classes and enums for the ring SOM
"""

from enum import Enum
from dataclasses import dataclass, asdict
from numbers import Integral, Real
from typing import Optional, Dict

from .errors import InvalidArgumentError


class NeighborhoodKind(Enum):
    """Neighborhood functions available to the trainer"""

    GAUSSIAN = "gaussian"  # spatial proximity to the winner
    ELASTIC = "elastic"  # circular index distance along the ring


def resolve_neighborhood(value) -> NeighborhoodKind:
    """Accept a NeighborhoodKind or its string value"""
    if isinstance(value, NeighborhoodKind):
        return value
    try:
        return NeighborhoodKind(value)
    except ValueError:
        choices = ", ".join(kind.value for kind in NeighborhoodKind)
        raise InvalidArgumentError(
            f"Unknown neighborhood function {value!r}, expected one of: {choices}"
        )


def validate_hyperparameters(
    neuron_count,
    alpha0,
    beta,
    sigma0,
    eta,
    max_iterations,
) -> None:
    """Raise InvalidArgumentError unless every hyperparameter is in range"""
    if isinstance(neuron_count, bool) or not isinstance(neuron_count, Integral):
        raise InvalidArgumentError(
            f"Neuron count must be an integer, got {neuron_count!r}"
        )
    if neuron_count < 1:
        raise InvalidArgumentError(f"Neuron count must be >= 1, got {neuron_count}")

    if isinstance(max_iterations, bool) or not isinstance(max_iterations, Integral):
        raise InvalidArgumentError(
            f"Iteration count must be an integer, got {max_iterations!r}"
        )
    if max_iterations < 0:
        raise InvalidArgumentError(
            f"Iteration count must be >= 0, got {max_iterations}"
        )

    # (name, value, upper bound inclusive or None)
    rates = [
        ("alpha0", alpha0, 1.0),
        ("beta", beta, 1.0),
        ("eta", eta, 1.0),
        ("sigma0", sigma0, None),
    ]
    for name, value, upper in rates:
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidArgumentError(f"{name} must be a number, got {value!r}")
        if not value > 0:
            raise InvalidArgumentError(f"{name} must be > 0, got {value}")
        if upper is not None and value > upper:
            raise InvalidArgumentError(f"{name} must be <= {upper}, got {value}")


@dataclass
class RingSOMConfig:
    """Centralized hyperparameters for a single ring SOM run"""

    n_neurons: int = 100
    n_iterations: int = 100
    neighborhood: NeighborhoodKind = NeighborhoodKind.ELASTIC

    # Annealing: alpha *= alpha_decay and sigma *= sigma_decay after each pass
    initial_alpha: float = 0.8
    alpha_decay: float = 0.99  # eta
    initial_sigma: float = 10.0
    sigma_decay: float = 0.97  # beta

    # Reproducibility
    seed: Optional[int] = None

    # Persistence
    checkpoint_interval: Optional[int] = None
    checkpoint_dir: str = "checkpoints"

    def __post_init__(self):
        self.neighborhood = resolve_neighborhood(self.neighborhood)

    def validate(self) -> "RingSOMConfig":
        validate_hyperparameters(
            self.n_neurons,
            self.initial_alpha,
            self.sigma_decay,
            self.initial_sigma,
            self.alpha_decay,
            self.n_iterations,
        )
        interval = self.checkpoint_interval
        if interval is None:
            return self
        if isinstance(interval, bool) or not isinstance(interval, Integral):
            raise InvalidArgumentError(
                f"Checkpoint interval must be an integer, got {interval!r}"
            )
        if interval < 1:
            raise InvalidArgumentError(
                f"Checkpoint interval must be >= 1, got {self.checkpoint_interval}"
            )
        return self

    def to_dict(self) -> Dict:
        """Convert config to dictionary for serialization"""
        config_dict = asdict(self)
        for key, value in config_dict.items():
            if isinstance(value, Enum):
                config_dict[key] = value.value
        return config_dict

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "RingSOMConfig":
        """Create config from dictionary"""
        return cls(**config_dict)
