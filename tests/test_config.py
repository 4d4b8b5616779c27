"""
Tests for configuration classes and enums
"""

import pytest
from somtsp import InvalidArgumentError
from somtsp.config import NeighborhoodKind, RingSOMConfig, validate_hyperparameters


@pytest.mark.unit
class TestEnums:
    """Test enum classes"""

    @pytest.mark.unit
    def test_neighborhood_values(self):
        assert NeighborhoodKind.GAUSSIAN.value == "gaussian"
        assert NeighborhoodKind.ELASTIC.value == "elastic"
        assert len(NeighborhoodKind) == 2


@pytest.mark.unit
class TestRingSOMConfig:
    """Test RingSOMConfig class"""

    @pytest.mark.unit
    def test_default_values(self):
        config = RingSOMConfig()
        assert config.n_neurons == 100
        assert config.n_iterations == 100
        assert config.neighborhood == NeighborhoodKind.ELASTIC
        assert config.initial_alpha == 0.8
        assert config.alpha_decay == 0.99
        assert config.initial_sigma == 10.0
        assert config.sigma_decay == 0.97
        assert config.seed is None
        assert config.checkpoint_interval is None

    @pytest.mark.unit
    def test_string_neighborhood_is_converted(self):
        config = RingSOMConfig(neighborhood="gaussian")
        assert config.neighborhood == NeighborhoodKind.GAUSSIAN

    @pytest.mark.unit
    def test_unknown_neighborhood(self):
        with pytest.raises(InvalidArgumentError):
            RingSOMConfig(neighborhood="hexagonal")

    @pytest.mark.unit
    def test_to_dict_conversion(self):
        config = RingSOMConfig(n_neurons=8, neighborhood=NeighborhoodKind.GAUSSIAN)
        config_dict = config.to_dict()

        assert config_dict["n_neurons"] == 8
        assert config_dict["neighborhood"] == "gaussian"

    @pytest.mark.unit
    def test_round_trip_conversion(self):
        original = RingSOMConfig(
            n_neurons=12,
            n_iterations=7,
            neighborhood=NeighborhoodKind.GAUSSIAN,
            initial_sigma=2.5,
            seed=9,
        )
        restored = RingSOMConfig.from_dict(original.to_dict())
        assert restored == original

    @pytest.mark.unit
    @pytest.mark.parametrize("interval", [True, 1.5, 2.0, "5"])
    def test_checkpoint_interval_must_be_integer(self, interval):
        config = RingSOMConfig(checkpoint_interval=interval)
        with pytest.raises(InvalidArgumentError, match="integer"):
            config.validate()

    @pytest.mark.unit
    def test_checkpoint_interval_accepts_integer(self):
        assert RingSOMConfig(checkpoint_interval=3).validate().checkpoint_interval == 3

    @pytest.mark.unit
    def test_validate_returns_config(self):
        config = RingSOMConfig()
        assert config.validate() is config

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "overrides",
        [
            {"n_neurons": 0},
            {"n_iterations": -1},
            {"initial_alpha": 0.0},
            {"initial_alpha": 1.5},
            {"alpha_decay": 0.0},
            {"alpha_decay": 1.01},
            {"sigma_decay": -0.5},
            {"sigma_decay": 2.0},
            {"initial_sigma": 0.0},
            {"checkpoint_interval": 0},
        ],
    )
    def test_validate_rejects_out_of_range(self, overrides):
        config = RingSOMConfig(**overrides)
        with pytest.raises(InvalidArgumentError):
            config.validate()


@pytest.mark.unit
class TestValidateHyperparameters:
    """Test the shared hyperparameter check"""

    @pytest.mark.unit
    def test_accepts_boundaries(self):
        validate_hyperparameters(1, 1.0, 1.0, 1e-9, 1.0, 0)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "args, message",
        [
            ((2.5, 0.5, 0.5, 1.0, 0.5, 1), "integer"),
            ((True, 0.5, 0.5, 1.0, 0.5, 1), "integer"),
            ((2, 0.5, 0.5, 1.0, 0.5, 1.0), "integer"),
            ((2, "0.5", 0.5, 1.0, 0.5, 1), "number"),
            ((2, float("nan"), 0.5, 1.0, 0.5, 1), "alpha0"),
            ((2, 0.5, 0.5, -1.0, 0.5, 1), "sigma0"),
            ((2, 0.5, 0.5, 1.0, 1.5, 1), "eta"),
            ((2, 0.5, 0.0, 1.0, 0.5, 1), "beta"),
        ],
    )
    def test_rejects(self, args, message):
        with pytest.raises(InvalidArgumentError, match=message):
            validate_hyperparameters(*args)

    @pytest.mark.unit
    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            validate_hyperparameters(0, 0.5, 0.5, 1.0, 0.5, 1)
