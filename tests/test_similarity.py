"""Tests for src/similarity.py."""

import numpy as np
import pytest

from src.cluster import Cluster
from src.errors import ArgumentError, NumericError
from src.histogram import intersection
from src.perceptron import Perceptron
from src.pgm import PGMImage
from src.similarity import (
    MEASURES,
    HistogramIntersection,
    InverseSquareDiff,
    PartitionIntersection,
    PerceptronEnsemble,
    make_strategy,
)


def _two_tone(name: str, dark_rows: int, size: int = 128) -> PGMImage:
    pixels = np.full((size, size), 255)
    pixels[:dark_rows, :] = 0
    return PGMImage(name, pixels)


class TestHistogramIntersection:
    def test_matches_intersection_of_normalized_histograms(self):
        a = Cluster(_two_tone("class0_a.pgm", 10))
        b = Cluster(_two_tone("class0_b.pgm", 50))
        expected = intersection(a.normalized_histogram, b.normalized_histogram)
        assert HistogramIntersection().score(a, b) == expected
        # 1 - |10 - 50| / 128
        assert expected == pytest.approx(1 - 40 / 128)


class TestPartitionIntersection:
    def test_identical_clusters_score_one(self):
        a = Cluster(_two_tone("class0_a.pgm", 20))
        b = Cluster(_two_tone("class0_b.pgm", 20))
        assert PartitionIntersection(4).score(a, b) == pytest.approx(1.0)
        assert PartitionIntersection(9).score(a, b) == pytest.approx(1.0)

    def test_is_sensitive_to_layout(self):
        top = np.full((128, 128), 255)
        top[:64, :] = 0
        bottom = np.full((128, 128), 255)
        bottom[64:, :] = 0
        a = Cluster(PGMImage("class0_t.pgm", top))
        b = Cluster(PGMImage("class0_b.pgm", bottom))
        # same global histogram, opposite halves
        assert HistogramIntersection().score(a, b) == pytest.approx(1.0)
        assert PartitionIntersection(4).score(a, b) == 0.0

    def test_uses_refreshed_average_after_merge(self):
        a = Cluster(_two_tone("class0_a.pgm", 0))
        b = Cluster(_two_tone("class0_b.pgm", 0))
        strategy = PartitionIntersection(4)
        assert strategy.score(a, b) == pytest.approx(1.0)

        a.merge(Cluster(_two_tone("class0_c.pgm", 128)))
        # average image is now uniformly 127 -> no overlap with 255
        assert strategy.score(a, b) == 0.0

    def test_empty_cell_raises_numeric_error(self):
        a = Cluster(PGMImage("tiny1.pgm", np.zeros((1, 1))))
        b = Cluster(PGMImage("tiny2.pgm", np.zeros((1, 1))))
        with pytest.raises(NumericError):
            PartitionIntersection(4).score(a, b)

    def test_names(self):
        assert PartitionIntersection(4).name == "quarter"
        assert PartitionIntersection(9).name == "ninth"


class TestInverseSquareDiff:
    def test_identical_is_one(self):
        a = Cluster(_two_tone("a.pgm", 5))
        b = Cluster(_two_tone("b.pgm", 5))
        assert InverseSquareDiff().score(a, b) == 1.0

    def test_known_value(self):
        a = Cluster(PGMImage("a.pgm", np.array([[0, 0], [0, 0]])))
        b = Cluster(PGMImage("b.pgm", np.array([[1, 0], [0, 2]])))
        assert InverseSquareDiff().score(a, b) == pytest.approx(1 / 6)

    def test_dimension_mismatch_raises(self):
        a = Cluster(PGMImage("a.pgm", np.zeros((2, 2))))
        b = Cluster(PGMImage("b.pgm", np.zeros((3, 3))))
        with pytest.raises(ArgumentError):
            InverseSquareDiff().score(a, b)


class TestPerceptronEnsemble:
    @pytest.fixture
    def ensemble(self):
        training = [_two_tone("class0_t.pgm", 32), _two_tone("class1_t.pgm", 96)]
        return PerceptronEnsemble.from_training_images(training)

    def test_one_perceptron_per_class(self, ensemble):
        assert [p.target_class for p in ensemble.perceptrons] == [0, 1]

    def test_closer_histograms_score_higher(self, ensemble):
        a = Cluster(_two_tone("a.pgm", 32))
        near = Cluster(_two_tone("b.pgm", 40))
        far = Cluster(_two_tone("c.pgm", 96))
        assert ensemble.score(a, near) > ensemble.score(a, far) > 0.0

    def test_matches_formula(self, ensemble):
        a = Cluster(_two_tone("a.pgm", 32))
        b = Cluster(_two_tone("b.pgm", 64))
        expected = sum(
            1.0 / (p.score(a.normalized_histogram) - p.score(b.normalized_histogram)) ** 2
            for p in ensemble.perceptrons
        )
        assert ensemble.score(a, b) == pytest.approx(expected)

    def test_zero_differential_raises(self, ensemble):
        a = Cluster(_two_tone("a.pgm", 50))
        b = Cluster(_two_tone("b.pgm", 50))
        with pytest.raises(NumericError, match="differential is zero"):
            ensemble.score(a, b)

    def test_requires_perceptrons(self):
        with pytest.raises(ArgumentError):
            PerceptronEnsemble([])

    def test_accepts_pretrained_models(self):
        training = [_two_tone("class0_t.pgm", 32), _two_tone("class1_t.pgm", 96)]
        ensemble = PerceptronEnsemble([Perceptron(training, 1)])
        assert len(ensemble.perceptrons) == 1


class TestMakeStrategy:
    def test_every_measure_builds(self):
        training = [_two_tone("class0_t.pgm", 32), _two_tone("class1_t.pgm", 96)]
        for measure in MEASURES:
            assert make_strategy(measure, training).name == measure

    def test_unknown_measure_raises(self):
        with pytest.raises(ArgumentError, match="Unknown similarity measure 'euclid'"):
            make_strategy("euclid")

    def test_perceptron_requires_training_images(self):
        with pytest.raises(ArgumentError, match="requires training images"):
            make_strategy("perceptron")
