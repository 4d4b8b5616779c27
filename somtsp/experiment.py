"""
Run driver and hyperparameter sweeps
"""

import itertools
import time
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import structlog

from .config import RingSOMConfig
from .errors import InvalidArgumentError
from .geometry import City
from .tour import TourResult, extract_tour, tour_length
from .core import train

logger = structlog.get_logger(__name__)

# Fields of RingSOMConfig that a sweep grid may vary
SWEEPABLE_FIELDS = (
    "n_neurons",
    "n_iterations",
    "neighborhood",
    "initial_alpha",
    "alpha_decay",
    "initial_sigma",
    "sigma_decay",
)


def run_experiment(cities: Sequence[City], config: RingSOMConfig) -> Dict[str, Any]:
    """Train, extract and score one tour; returns the result and its timing"""
    config.validate()
    start_time = time.time()
    neurons = train(
        cities,
        config.n_neurons,
        config.neighborhood,
        config.initial_alpha,
        config.sigma_decay,
        config.initial_sigma,
        config.alpha_decay,
        config.n_iterations,
        seed=config.seed,
    )
    tour = extract_tour(cities, neurons)
    result = TourResult(tour=tour, length=tour_length(tour), neurons=neurons)
    return {"result": result, "duration_seconds": time.time() - start_time}


def expand_grid(grid: Dict[str, Sequence]) -> List[Dict[str, Any]]:
    """Every combination of the grid values, in key order"""
    unknown = set(grid) - set(SWEEPABLE_FIELDS)
    if unknown:
        raise InvalidArgumentError(f"Cannot sweep over {sorted(unknown)}")
    keys = list(grid)
    return [dict(zip(keys, values)) for values in itertools.product(*grid.values())]


def run_sweep(
    cities: Sequence[City],
    grid: Dict[str, Sequence],
    repeats: int = 1,
    base_config: Optional[RingSOMConfig] = None,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """
    Run every grid combination ``repeats`` times

    Runs are independent: each one gets its own seed drawn from a generator
    seeded with ``seed``, so a sweep is reproducible as a whole.

    Returns:
        DataFrame with one row per run: the swept parameters, ``repeat``,
        ``seed``, ``tour_length``, ``duration_seconds`` and ``tour``
    """
    if repeats < 1:
        raise InvalidArgumentError(f"Repeats must be >= 1, got {repeats}")

    base_config = base_config or RingSOMConfig()
    combinations = expand_grid(grid)
    seeds = np.random.RandomState(seed).randint(
        0, 2**31 - 1, size=len(combinations) * repeats
    )

    rows = []
    for i, params in enumerate(combinations):
        for repeat in range(repeats):
            run_seed = int(seeds[i * repeats + repeat])
            config = replace(base_config, seed=run_seed, **params).validate()
            outcome = run_experiment(cities, config)
            result = outcome["result"]

            row = {key: config.to_dict()[key] for key in params}
            row.update(
                {
                    "repeat": repeat,
                    "seed": run_seed,
                    "tour_length": result.length,
                    "duration_seconds": outcome["duration_seconds"],
                    "tour": result.names,
                }
            )
            rows.append(row)

        logger.info(
            "Sweep combination finished",
            combination=i + 1,
            total=len(combinations),
            **{key: str(value) for key, value in params.items()},
        )

    return pd.DataFrame(rows)


def summarize_sweep(frame: pd.DataFrame) -> pd.DataFrame:
    """Aggregate tour length and duration per swept parameter combination"""
    params = [column for column in frame.columns if column in SWEEPABLE_FIELDS]
    aggregations = {
        "tour_length": ["mean", "std", "min", "max", "count"],
        "duration_seconds": ["mean"],
    }
    if not params:
        return frame.agg(aggregations)

    summary = frame.groupby(params).agg(aggregations)
    summary.columns = ["_".join(column) for column in summary.columns]
    return summary.reset_index().sort_values("tour_length_mean", ignore_index=True)
