"""Tests for src/cluster.py."""

import numpy as np
import pytest

from src.cluster import Cluster
from src.errors import ArgumentError, ClusterAbsorbedError
from src.pgm import PGMImage


def _constant_image(name: str, value: int, size: int = 128) -> PGMImage:
    return PGMImage(name, np.full((size, size), value))


class TestMerge:
    def test_identical_constant_images(self):
        a = Cluster(_constant_image("class0_a.pgm", 128))
        b = Cluster(_constant_image("class0_b.pgm", 128))
        a.merge(b)

        expected = np.zeros(64, dtype=np.int64)
        expected[32] = 2 * 128 * 128
        np.testing.assert_array_equal(a.histogram, expected)

    def test_sizes_add_and_histograms_sum(self):
        rng = np.random.default_rng(3)
        x = Cluster(PGMImage("x1.pgm", rng.integers(0, 256, size=(16, 16))))
        x.merge(Cluster(PGMImage("x2.pgm", rng.integers(0, 256, size=(16, 16)))))
        y = Cluster(PGMImage("y1.pgm", rng.integers(0, 256, size=(16, 16))))
        for i in range(2):
            y.merge(Cluster(PGMImage(f"y{i + 2}.pgm", rng.integers(0, 256, size=(16, 16)))))

        expected = x.histogram + y.histogram
        x.merge(y)

        assert x.size == 5
        np.testing.assert_array_equal(x.histogram, expected)
        assert x.normalized_histogram.sum() == pytest.approx(1.0)

    def test_average_image_truncates_each_merge(self):
        a = Cluster(_constant_image("a.pgm", 0, size=2))
        a.merge(Cluster(_constant_image("b.pgm", 255, size=2)))
        assert (a.average_image == 127).all()

        a.merge(Cluster(_constant_image("c.pgm", 255, size=2)))
        # (127 * 2 + 255 * 1) // 3
        assert (a.average_image == 169).all()

    def test_absorbed_cluster_is_unusable(self):
        a = Cluster(_constant_image("a.pgm", 1, size=2))
        b = Cluster(_constant_image("b.pgm", 2, size=2))
        a.merge(b)
        assert b.absorbed
        assert len(b) == 0
        with pytest.raises(ClusterAbsorbedError):
            _ = b.images
        with pytest.raises(ClusterAbsorbedError):
            a.merge(b)

    def test_merge_into_self_raises(self):
        a = Cluster(_constant_image("a.pgm", 1, size=2))
        with pytest.raises(ArgumentError):
            a.merge(a)

    def test_image_histogram_not_mutated(self):
        img = _constant_image("a.pgm", 8, size=4)
        a = Cluster(img)
        a.merge(Cluster(_constant_image("b.pgm", 8, size=4)))
        assert img.histogram[2] == 16


class TestAddImage:
    def test_updates_histogram_only(self):
        a = Cluster(_constant_image("a.pgm", 0, size=4))
        norm_before = a.normalized_histogram.copy()
        avg_before = a.average_image.copy()

        a.add_image(_constant_image("b.pgm", 255, size=4))

        assert a.size == 2
        assert a.histogram[0] == 16
        assert a.histogram[63] == 16
        np.testing.assert_array_equal(a.normalized_histogram, norm_before)
        np.testing.assert_array_equal(a.average_image, avg_before)


class TestSubHistograms:
    def test_cached_per_partition_count(self):
        a = Cluster(_constant_image("a.pgm", 40, size=8))
        first = a.sub_histograms(4)
        assert a.sub_histograms(4) is first
        assert len(a.sub_histograms(9)) == 9
        assert a.sub_histograms(4) is not first

    def test_recomputed_after_merge(self):
        a = Cluster(_constant_image("a.pgm", 0, size=8))
        before = a.sub_histograms(4)
        assert before[0][0] == 16

        a.merge(Cluster(_constant_image("b.pgm", 200, size=8)))
        after = a.sub_histograms(4)
        # average pixel is 100 -> bin 25
        assert after[0][25] == 16
        assert after[0][0] == 0


class TestAggregatesAreReadOnly:
    def test_average_image_cannot_be_mutated(self):
        cluster = Cluster(_constant_image("class0_a.pgm", 10))
        cluster.sub_histograms(4)
        with pytest.raises(ValueError):
            cluster.average_image[0, 0] = 200
        assert cluster.average_image[0, 0] == 10

    def test_normalized_histogram_cannot_be_mutated(self):
        cluster = Cluster(_constant_image("class0_a.pgm", 10))
        with pytest.raises(ValueError):
            cluster.normalized_histogram[2] = 0.0
        assert cluster.normalized_histogram[2] == 1.0

    def test_merge_still_updates_after_read(self):
        a = Cluster(_constant_image("class0_a.pgm", 10))
        view = a.average_image
        a.merge(Cluster(_constant_image("class0_b.pgm", 30)))
        assert not a.average_image.flags.writeable
        assert a.average_image[0, 0] == 20
        assert view[0, 0] == 10


class TestFormatting:
    def test_str_sorts_members(self):
        a = Cluster(_constant_image("example2.pgm", 0, size=2))
        a.merge(Cluster(_constant_image("example1.pgm", 0, size=2)))
        assert str(a) == "example1.pgm example2.pgm"
