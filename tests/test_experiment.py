"""
Tests for the run driver and hyperparameter sweeps
"""

import pytest
import numpy as np
import pandas as pd

from somtsp import (
    InvalidArgumentError,
    NeighborhoodKind,
    RingSOMConfig,
    run_experiment,
    run_sweep,
    summarize_sweep,
    tour_length,
)
from somtsp.experiment import expand_grid


@pytest.fixture
def base_config():
    return RingSOMConfig(
        n_neurons=12,
        n_iterations=5,
        initial_alpha=0.8,
        alpha_decay=0.9,
        initial_sigma=2.0,
        sigma_decay=0.9,
    )


@pytest.mark.unit
class TestExpandGrid:
    """Tests for grid expansion"""

    def test_cartesian_product(self):
        combos = expand_grid({"n_neurons": [5, 10], "initial_sigma": [1.0, 2.0, 3.0]})
        assert len(combos) == 6
        assert combos[0] == {"n_neurons": 5, "initial_sigma": 1.0}
        assert combos[-1] == {"n_neurons": 10, "initial_sigma": 3.0}

    def test_empty_grid_is_single_run(self):
        assert expand_grid({}) == [{}]

    def test_unknown_field(self):
        with pytest.raises(InvalidArgumentError, match="Cannot sweep"):
            expand_grid({"checkpoint_dir": ["a", "b"]})


@pytest.mark.integration
class TestRunExperiment:
    """Tests for a single run"""

    def test_result(self, random_cities, base_config):
        outcome = run_experiment(random_cities, base_config)
        result = outcome["result"]

        assert len(result.tour) == len(random_cities)
        assert result.length == pytest.approx(tour_length(result.tour))
        assert outcome["duration_seconds"] >= 0

    def test_seeded_run_is_reproducible(self, random_cities, base_config):
        base_config.seed = 8
        first = run_experiment(random_cities, base_config)["result"]
        second = run_experiment(random_cities, base_config)["result"]
        assert first.names == second.names
        assert first.length == second.length

    def test_invalid_config(self, random_cities):
        with pytest.raises(InvalidArgumentError):
            run_experiment(random_cities, RingSOMConfig(initial_sigma=-1.0))


@pytest.mark.integration
@pytest.mark.slow
class TestRunSweep:
    """Tests for sweeps over the grid"""

    def test_one_row_per_run(self, random_cities, base_config):
        grid = {"neighborhood": ["gaussian", "elastic"], "initial_sigma": [1.0, 3.0]}
        frame = run_sweep(random_cities, grid, repeats=2, base_config=base_config, seed=0)

        assert isinstance(frame, pd.DataFrame)
        assert len(frame) == 8
        for column in ["neighborhood", "initial_sigma", "repeat", "seed", "tour_length", "tour"]:
            assert column in frame.columns
        assert set(frame["neighborhood"]) == {"gaussian", "elastic"}
        assert all(len(tour) == len(random_cities) for tour in frame["tour"])

    def test_runs_get_distinct_seeds(self, random_cities, base_config):
        frame = run_sweep(
            random_cities, {"n_neurons": [10]}, repeats=4, base_config=base_config, seed=1
        )
        assert frame["seed"].nunique() == 4

    def test_sweep_is_reproducible(self, random_cities, base_config):
        grid = {"neighborhood": [NeighborhoodKind.ELASTIC], "n_neurons": [8, 16]}
        first = run_sweep(random_cities, grid, repeats=2, base_config=base_config, seed=5)
        second = run_sweep(random_cities, grid, repeats=2, base_config=base_config, seed=5)

        np.testing.assert_array_equal(first["seed"], second["seed"])
        np.testing.assert_array_equal(first["tour_length"], second["tour_length"])

    def test_invalid_repeats(self, random_cities):
        with pytest.raises(InvalidArgumentError, match="Repeats"):
            run_sweep(random_cities, {"n_neurons": [10]}, repeats=0)

    def test_invalid_grid_value(self, random_cities, base_config):
        with pytest.raises(InvalidArgumentError):
            run_sweep(random_cities, {"initial_alpha": [2.0]}, base_config=base_config)


@pytest.mark.unit
class TestSummarizeSweep:
    """Tests for sweep aggregation"""

    def test_summary(self):
        frame = pd.DataFrame(
            {
                "neighborhood": ["gaussian", "gaussian", "elastic", "elastic"],
                "repeat": [0, 1, 0, 1],
                "seed": [1, 2, 3, 4],
                "tour_length": [10.0, 14.0, 6.0, 8.0],
                "duration_seconds": [0.5, 0.5, 1.0, 2.0],
                "tour": [[], [], [], []],
            }
        )
        summary = summarize_sweep(frame)

        assert list(summary["neighborhood"]) == ["elastic", "gaussian"]
        assert list(summary["tour_length_mean"]) == [7.0, 12.0]
        assert list(summary["tour_length_min"]) == [6.0, 10.0]
        assert list(summary["tour_length_max"]) == [8.0, 14.0]
        assert list(summary["tour_length_count"]) == [2, 2]
        assert list(summary["duration_seconds_mean"]) == [1.5, 0.5]
