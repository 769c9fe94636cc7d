"""
visualization.py - matplotlib helpers for inspecting a clustering.

All plot functions follow a consistent style and return the Figure so
callers can save or display it as needed.
"""

import logging
import math
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np

from src.cluster import Cluster
from src.histogram import BIN_COUNT, INTERVAL_SIZE
from src.quality import class_counts, dominant_class

logger = logging.getLogger(__name__)

# Consistent figure style across all plots
plt.rcParams.update({"figure.dpi": 100, "axes.titlesize": 11})


def plot_cluster_averages(clusters: Sequence[Cluster], max_columns: int = 4) -> plt.Figure:
    """
    Show the average image of every cluster in a grid.

    Parameters
    ----------
    clusters : sequence of Cluster
        Final clusters, in engine order.
    max_columns : int
        Maximum number of subplots per row.

    Returns
    -------
    plt.Figure
    """
    n = len(clusters)
    cols = max(1, min(max_columns, n))
    rows = max(1, math.ceil(n / cols))
    fig, axes = plt.subplots(rows, cols, figsize=(3 * cols, 3 * rows), squeeze=False)

    for idx, ax in enumerate(axes.flat):
        ax.axis("off")
        if idx >= n:
            continue
        cluster = clusters[idx]
        ax.imshow(cluster.average_image, cmap="gray", vmin=0, vmax=BIN_COUNT * INTERVAL_SIZE - 1)
        ax.set_title(f"Cluster {idx} (n={cluster.size})")

    fig.suptitle("Cluster average images")
    fig.tight_layout()
    return fig


def plot_cluster_histograms(clusters: Sequence[Cluster]) -> plt.Figure:
    """
    Overlay the normalised cumulative histogram of every cluster.

    Returns
    -------
    plt.Figure
    """
    fig, ax = plt.subplots(figsize=(10, 5))
    bins = np.arange(BIN_COUNT) * INTERVAL_SIZE

    for idx, cluster in enumerate(clusters):
        ax.plot(bins, cluster.normalized_histogram, label=f"Cluster {idx}")

    ax.set_xlabel("Intensity")
    ax.set_ylabel("Fraction of pixels")
    ax.set_title("Normalised cluster histograms")
    ax.legend()
    ax.grid(True, linestyle="--", alpha=0.6)
    fig.tight_layout()
    return fig


def plot_purity(clusters: Sequence[Cluster]) -> plt.Figure:
    """
    Bar chart of each cluster's dominant-class share.

    Requires every member image to carry a class label in its filename.

    Returns
    -------
    plt.Figure
    """
    shares = []
    labels = []
    for idx, cluster in enumerate(clusters):
        label, count = dominant_class(cluster)
        shares.append(count / cluster.size)
        labels.append(f"{idx}\n(class {label}, {len(class_counts(cluster))} cls)")

    fig, ax = plt.subplots(figsize=(max(6, len(clusters)), 4))
    ax.bar(range(len(clusters)), shares, color=plt.cm.tab10(np.linspace(0, 0.5, len(clusters))))
    ax.set_xticks(range(len(clusters)))
    ax.set_xticklabels(labels, fontsize=8)
    ax.set_ylim(0, 1.05)
    ax.set_ylabel("Dominant class share")
    ax.set_title("Per-cluster purity")
    fig.tight_layout()
    return fig
