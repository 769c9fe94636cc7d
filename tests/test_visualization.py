"""Tests for src/visualization.py."""

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402

from src.cluster import Cluster  # noqa: E402
from src.pgm import PGMImage  # noqa: E402
from src.visualization import (  # noqa: E402
    plot_cluster_averages,
    plot_cluster_histograms,
    plot_purity,
)


@pytest.fixture
def clusters():
    a = Cluster(PGMImage("class0_a.pgm", np.full((8, 8), 10)))
    a.merge(Cluster(PGMImage("class1_a.pgm", np.full((8, 8), 30))))
    b = Cluster(PGMImage("class1_b.pgm", np.full((8, 8), 200)))
    return [a, b]


class TestPlots:
    def test_cluster_averages_one_panel_per_cluster(self, clusters):
        fig = plot_cluster_averages(clusters)
        titled = [ax for ax in fig.axes if ax.get_title()]
        assert [ax.get_title() for ax in titled] == ["Cluster 0 (n=2)", "Cluster 1 (n=1)"]
        plt.close(fig)

    def test_cluster_histograms_one_line_per_cluster(self, clusters):
        fig = plot_cluster_histograms(clusters)
        assert len(fig.axes[0].get_lines()) == 2
        plt.close(fig)

    def test_purity_bars(self, clusters):
        fig = plot_purity(clusters)
        heights = [patch.get_height() for patch in fig.axes[0].patches]
        assert heights == pytest.approx([0.5, 1.0])
        plt.close(fig)
