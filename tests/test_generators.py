"""
Test Suite for Generators

Tests the leaf generators:
- RandomVariateSource (normal, uniform, poisson)
- CategoricalPatternBuilder (each, times, length_out)
"""

import logging

import pytest
import numpy as np

from tabsim.exceptions import InvalidParameter
from tabsim.generators import (
    CategoricalPatternBuilder,
    DistributionKind,
    RandomVariateSource,
    draw,
    rep,
    rnorm,
    rpois,
    runif,
)
from tabsim.utils import set_seed


class TestRandomVariateSource:
    """Test distribution draws"""

    @pytest.fixture
    def source(self):
        return RandomVariateSource(np.random.default_rng(42))

    def test_scalar_count_returns_exact_length(self, source):
        values = source.draw(5, "normal", mean=0, sd=1)

        assert len(values) == 5
        assert values.dtype.kind == "f"

    def test_vector_count_uses_its_length(self, source):
        values = source.draw([2, 10, 10], "normal", mean=[0, 5, 20], sd=[1, 5, 20])

        assert len(values) == 3

    def test_draw_matching_ignores_template_values(self, source):
        values = source.draw_matching([100, 200], DistributionKind.UNIFORM)

        assert len(values) == 2

    def test_short_parameters_are_recycled(self, source):
        values = source.draw_n(5, "normal", mean=[1, 2], sd=0)

        assert values.tolist() == [1.0, 2.0, 1.0, 2.0, 1.0]

    def test_uneven_recycling_wraps_per_position(self, source):
        values = source.draw_n(7, "uniform", min=[1, 2, 3], max=[1, 2, 3])

        assert values.tolist() == [1.0, 2.0, 3.0, 1.0, 2.0, 3.0, 1.0]

    def test_degenerate_normal_returns_mean(self, source):
        values = source.draw_n(4, "normal", mean=3.5, sd=0)

        assert np.all(values == 3.5)

    def test_degenerate_uniform_returns_bound(self, source):
        values = source.draw_n(4, "uniform", min=-2, max=-2)

        assert np.all(values == -2)

    def test_uniform_within_bounds(self, source):
        values = source.draw_n(200, "uniform", min=10, max=11)

        assert values.min() >= 10
        assert values.max() <= 11

    def test_poisson_draws_non_negative_integers(self, source):
        values = source.draw_n(500, "poisson", lam=[0.5, 4, 12])

        assert values.dtype.kind == "i"
        assert (values >= 0).all()

    def test_poisson_accepts_lambda_keyword_via_mapping(self, source):
        values = source.draw_n(3, "poisson", **{"lambda": 2})

        assert len(values) == 3

    def test_poisson_zero_rate_gives_zeros(self, source):
        values = source.draw_n(5, "poisson", lam=0)

        assert values.tolist() == [0, 0, 0, 0, 0]

    def test_zero_count_returns_empty(self, source):
        assert len(source.draw_n(0, "normal")) == 0

    def test_uniform_defaults_to_unit_interval(self, source):
        values = source.draw_n(1000, "uniform")

        assert values.min() >= 0
        assert values.max() <= 1

    @pytest.mark.parametrize("params", [
        {"sd": -1},
        {"mean": [0, 1], "sd": [1, -0.5]},
    ])
    def test_negative_sd_rejected(self, source, params):
        with pytest.raises(InvalidParameter):
            source.draw_n(4, "normal", **params)

    def test_negative_lambda_rejected(self, source):
        with pytest.raises(InvalidParameter):
            source.draw_n(3, "poisson", lam=-1)

    def test_missing_lambda_rejected(self, source):
        with pytest.raises(InvalidParameter, match="lambda"):
            source.draw_n(3, "poisson")

    def test_uniform_min_above_max_rejected(self, source):
        with pytest.raises(InvalidParameter):
            source.draw_n(3, "uniform", min=5, max=1)

    def test_unknown_parameter_rejected(self, source):
        with pytest.raises(InvalidParameter, match="Unknown parameter"):
            source.draw_n(3, "normal", scale=2)

    def test_unknown_distribution_rejected(self, source):
        with pytest.raises(InvalidParameter, match="Unknown distribution"):
            source.draw_n(3, "gamma")

    @pytest.mark.parametrize("count", [-1, 2.5, True, "3"])
    def test_bad_count_rejected(self, source, count):
        with pytest.raises(InvalidParameter):
            source.draw(count, "normal")

    def test_empty_parameter_sequence_rejected(self, source):
        with pytest.raises(InvalidParameter):
            source.draw_n(3, "normal", mean=[])

    def test_nan_parameter_rejected(self, source):
        with pytest.raises(InvalidParameter):
            source.draw_n(3, "normal", mean=float("nan"))


class TestSeeding:
    """Test reproducibility of draws"""

    def test_shared_seed_reproduces_draw_sequence(self):
        set_seed(2024)
        first = [rnorm(5), runif(3, 0, 10), rpois(4, 3)]

        set_seed(2024)
        second = [rnorm(5), runif(3, 0, 10), rpois(4, 3)]

        for a, b in zip(first, second):
            assert np.array_equal(a, b)

    def test_injected_generators_are_independent_of_shared_state(self):
        a = draw(6, "normal", rng=np.random.default_rng(7))
        set_seed(1)
        rnorm(10)
        b = draw(6, "normal", rng=np.random.default_rng(7))

        assert np.array_equal(a, b)

    def test_draws_advance_the_generator(self):
        set_seed(3)
        first = rnorm(4)
        second = rnorm(4)

        assert not np.array_equal(first, second)


class TestCategoricalPatternBuilder:
    """Test label repetition modes"""

    @pytest.fixture
    def builder(self):
        return CategoricalPatternBuilder()

    def test_plain_returns_labels(self, builder):
        assert builder.build(["a", "b", "c"]) == ["a", "b", "c"]

    def test_each(self, builder):
        assert builder.build(["a", "b"], each=3) == ["a", "a", "a", "b", "b", "b"]

    def test_times_scalar(self, builder):
        assert builder.build(["a", "b"], times=3) == ["a", "b", "a", "b", "a", "b"]

    def test_times_vector_allows_unbalanced_groups(self, builder):
        assert builder.build(["a", "b"], times=[2, 4]) == ["a", "a", "b", "b", "b", "b"]

    def test_single_element_times_vector_acts_as_scalar(self, builder):
        assert builder.build(["a", "b"], times=[2]) == ["a", "b", "a", "b"]

    def test_length_out_extends(self, builder):
        assert builder.build(["a", "b"], length_out=5) == ["a", "b", "a", "b", "a"]

    def test_length_out_truncates(self, builder):
        assert builder.build(["a", "b", "c"], length_out=2) == ["a", "b"]

    def test_each_and_times(self, builder):
        assert builder.build(["a", "b"], each=2, times=2) == [
            "a", "a", "b", "b", "a", "a", "b", "b"
        ]

    def test_each_and_length_out(self, builder):
        assert builder.build(["a", "b"], each=2, length_out=7) == [
            "a", "a", "b", "b", "a", "a", "b"
        ]

    def test_length_out_overrides_times(self, builder, caplog):
        with caplog.at_level(logging.WARNING, logger="tabsim.generators.categorical"):
            result = builder.build(["a", "b"], times=3, length_out=5)

        assert result == builder.build(["a", "b"], length_out=5)
        assert "times is ignored" in caplog.text

    def test_non_string_labels_preserved(self, builder):
        assert builder.build([1, 2], each=2) == [1, 1, 2, 2]

    def test_every_label_belongs_to_base_set(self, builder):
        result = builder.build(["x", "y", "z"], each=2, length_out=11)

        assert len(result) == 11
        assert set(result) <= {"x", "y", "z"}

    def test_vector_times_with_each_rejected(self, builder):
        with pytest.raises(InvalidParameter):
            builder.build(["a", "b"], each=2, times=[1, 2])

    def test_vector_times_length_mismatch_rejected(self, builder):
        with pytest.raises(InvalidParameter, match="length"):
            builder.build(["a", "b", "c"], times=[1, 2])

    @pytest.mark.parametrize("kwargs", [
        {"each": 0},
        {"times": -1},
        {"length_out": 0},
        {"times": [1, 0]},
        {"each": 1.5},
    ])
    def test_non_positive_options_rejected(self, builder, kwargs):
        with pytest.raises(InvalidParameter):
            builder.build(["a", "b"], **kwargs)

    def test_empty_labels_rejected(self, builder):
        with pytest.raises(InvalidParameter):
            builder.build([], each=2)

    def test_rep_wrapper(self):
        assert rep(["lo", "hi"], times=[1, 2]) == ["lo", "hi", "hi"]
