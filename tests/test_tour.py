"""
Tests for tour extraction and tour length
"""

import math

import pytest
import numpy as np
from somtsp import (
    City,
    EmptyInputError,
    NeuronSet,
    TourResult,
    assign_cities,
    extract_tour,
    tour_length,
)


@pytest.mark.unit
class TestTourLength:
    """Test open-path tour length"""

    @pytest.mark.unit
    def test_empty_and_single_city(self):
        assert tour_length([]) == 0.0
        assert tour_length([City("a", 5.0, 5.0)]) == 0.0

    @pytest.mark.unit
    def test_two_cities(self):
        assert tour_length([City("a", 0, 0), City("b", 3, 4)]) == 5.0

    @pytest.mark.unit
    def test_no_closing_edge(self, square_cities):
        # Three sides of the square, not four
        assert tour_length(square_cities) == pytest.approx(30.0)

    @pytest.mark.unit
    def test_crossing_order_is_longer(self, square_cities):
        a, b, c, d = square_cities
        assert tour_length([a, c, b, d]) == pytest.approx(10.0 + 20.0 * math.sqrt(2))
        assert tour_length([a, b, d, c]) == pytest.approx(20.0 + 10.0 * math.sqrt(2))

    @pytest.mark.unit
    def test_reversal_invariant(self, irregular_cities, random_cities):
        for cities in (irregular_cities, random_cities):
            assert tour_length(cities[::-1]) == pytest.approx(tour_length(cities))

    @pytest.mark.unit
    def test_rotation_changes_length(self, irregular_cities):
        rotated = irregular_cities[1:] + irregular_cities[:1]
        assert tour_length(irregular_cities) == pytest.approx(7.0 + math.sqrt(45.0))
        assert tour_length(rotated) == pytest.approx(14.0 + math.sqrt(45.0))
        assert tour_length(rotated) != pytest.approx(tour_length(irregular_cities))


@pytest.mark.unit
class TestExtractTour:
    """Test reading a tour off a ring"""

    @pytest.mark.unit
    def test_cities_follow_neuron_order(self, square_cities):
        a, b, c, d = square_cities
        neurons = NeuronSet.from_positions([(10, 1), (9, 9), (0, 9), (1, 0)])
        assert assign_cities(square_cities, neurons) == [3, 2, 1, 0]
        assert extract_tour(square_cities, neurons) == [d, c, b, a]

    @pytest.mark.unit
    def test_shared_neuron_keeps_input_order(self):
        first = City("first", 4.0, 0.0)
        second = City("second", 6.0, 0.0)
        third = City("third", 0.0, 50.0)
        neurons = NeuronSet.from_positions([(0, 50), (5, 0)])

        tour = extract_tour([first, third, second], neurons)
        assert [city.name for city in tour] == ["third", "first", "second"]

        tour = extract_tour([second, third, first], neurons)
        assert [city.name for city in tour] == ["third", "second", "first"]

    @pytest.mark.unit
    def test_equidistant_city_goes_to_lowest_index(self):
        city = City("middle", 5.0, 0.0)
        other = City("other", 0.0, 0.0)
        neurons = NeuronSet.from_positions([(0, 0), (10, 0), (0, 0)])
        assert assign_cities([city, other], neurons) == [0, 0]

    @pytest.mark.unit
    @pytest.mark.parametrize("n_neurons", [1, 2, 5, 30, 100])
    def test_tour_is_permutation(self, random_cities, n_neurons):
        rng = np.random.RandomState(n_neurons)
        neurons = NeuronSet.random(random_cities, n_neurons, rng)
        tour = extract_tour(random_cities, neurons)

        assert len(tour) == len(random_cities)
        assert sorted(c.name for c in tour) == sorted(c.name for c in random_cities)

    @pytest.mark.unit
    def test_duplicate_names_are_kept(self):
        cities = [City("x", 0, 0), City("x", 1, 1), City("x", 2, 2)]
        neurons = NeuronSet.from_positions([(2, 2), (0, 0)])
        tour = extract_tour(cities, neurons)
        assert len(tour) == 3
        assert tour[0] == City("x", 1, 1)

    @pytest.mark.unit
    def test_extract_does_not_mutate_inputs(self, square_cities):
        neurons = NeuronSet.from_positions([(0, 0), (10, 10)])
        before = list(square_cities)
        positions = neurons.positions()
        extract_tour(square_cities, neurons)
        assert square_cities == before
        np.testing.assert_array_equal(neurons.positions(), positions)

    @pytest.mark.unit
    def test_empty_inputs(self, square_cities):
        with pytest.raises(EmptyInputError):
            extract_tour([], NeuronSet.from_positions([(0, 0)]))
        with pytest.raises(EmptyInputError):
            extract_tour(square_cities, NeuronSet.from_positions([]))


@pytest.mark.unit
class TestTourResult:
    """Test the tour result record"""

    @pytest.mark.unit
    def test_to_dict(self, square_cities):
        neurons = NeuronSet.from_positions([(0, 0), (10, 10)])
        result = TourResult(tour=square_cities, length=30.0, neurons=neurons)

        data = result.to_dict()
        assert result.names == ["A", "B", "C", "D"]
        assert data["length"] == 30.0
        assert data["tour"][2] == {"name": "C", "x": 10.0, "y": 10.0}
        assert data["neurons"] == [[0.0, 0.0], [10.0, 10.0]]
