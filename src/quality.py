"""
quality.py - Scoring a partition against ground-truth class labels.

PURITY
------
For every cluster take the number of images belonging to its most common
class, add those counts up, and divide by the total number of images:

    purity = sum_k max_c |cluster_k ∩ class_c| / N

Purity is 1.0 exactly when every cluster holds a single class.  It does
not penalise many small clusters (N singletons always score 1.0), so
compare runs only at the same target cluster count.

The counting is done with scikit-learn's contingency matrix: rows are
classes, columns are clusters, and purity is the sum of column maxima.
"""

import logging
from collections import Counter
from typing import Sequence

import numpy as np
from sklearn.metrics.cluster import contingency_matrix

from src.cluster import Cluster
from src.errors import ArgumentError

logger = logging.getLogger(__name__)


def class_counts(cluster: Cluster) -> Counter:
    """Number of member images per class label."""
    return Counter(img.class_label for img in cluster.images)


def dominant_class(cluster: Cluster) -> tuple[int, int]:
    """
    Most frequent class in *cluster* and its count.

    Ties go to the class encountered first among the member images.
    """
    label, count = class_counts(cluster).most_common(1)[0]
    return label, count


def cluster_purity(clusters: Sequence[Cluster]) -> float:
    """
    Fraction of images that belong to their cluster's dominant class.

    Raises
    ------
    ArgumentError
        If there are no images to score.
    ArgumentError
        If an image filename carries no valid class label.
    """
    labels_true: list[int] = []
    labels_pred: list[int] = []
    for k, cluster in enumerate(clusters):
        for img in cluster.images:
            labels_true.append(img.class_label)
            labels_pred.append(k)

    if not labels_true:
        raise ArgumentError("Cannot compute purity of an empty clustering")

    matrix = contingency_matrix(labels_true, labels_pred)
    purity = float(np.sum(np.amax(matrix, axis=0)) / len(labels_true))
    logger.info(
        "Purity over %d clusters / %d images: %.6f",
        len(clusters), len(labels_true), purity,
    )
    return purity
