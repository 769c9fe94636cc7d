"""
similarity.py - Interchangeable cluster similarity measures.

Every measure answers one question: how alike are two clusters?  The
answer is a float where *higher means more similar*; the clustering
engine merges whichever pair scores highest and does not care how the
score was produced.

MEASURES
--------
agglomerative   Histogram intersection of the two clusters' normalised
                cumulative histograms.  Ignores spatial layout.

quarter/ninth   Split each cluster's average image into a 2x2 (or 3x3)
                grid, intersect the normalised histograms cell by cell
                and average.  Sensitive to *where* intensities occur.

inverse_square  1 / (sum of squared pixel differences + 1) between the
                two average images.  A direct pixel comparison.

perceptron      For each one-vs-rest perceptron c:
                    1 / (score_c(A) - score_c(B))^2
                summed over c.  Clusters the trained models cannot tell
                apart score highest.

KNOWN FAILURE MODE
------------------
The perceptron measure is undefined when some perceptron gives both
clusters exactly the same score (for instance two clusters with
identical histograms).  That case raises NumericError rather than being
replaced by an arbitrary large value.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from src.cluster import Cluster
from src.errors import ArgumentError, NumericError
from src.histogram import intersection, normalize, sum_squared_difference
from src.perceptron import Perceptron, train_one_vs_rest
from src.pgm import PGMImage

logger = logging.getLogger(__name__)


class SimilarityStrategy(ABC):
    """Scores a pair of clusters; higher is more similar."""

    name: str = ""

    @abstractmethod
    def score(self, a: Cluster, b: Cluster) -> float:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class HistogramIntersection(SimilarityStrategy):
    """Intersection of whole-cluster normalised histograms."""

    name = "agglomerative"

    def score(self, a: Cluster, b: Cluster) -> float:
        return intersection(a.normalized_histogram, b.normalized_histogram)


class PartitionIntersection(SimilarityStrategy):
    """
    Mean histogram intersection over a grid of cells of the average images.

    Parameters
    ----------
    num_partitions : int
        Number of grid cells; 4 gives quarters, 9 gives ninths.
    """

    def __init__(self, num_partitions: int = 4):
        if num_partitions < 1:
            raise ArgumentError(f"num_partitions must be >= 1, got {num_partitions}")
        self.num_partitions = num_partitions

    @property
    def name(self) -> str:
        return {4: "quarter", 9: "ninth"}.get(self.num_partitions, f"partition{self.num_partitions}")

    def score(self, a: Cluster, b: Cluster) -> float:
        cells_a = a.sub_histograms(self.num_partitions)
        cells_b = b.sub_histograms(self.num_partitions)
        total = sum(
            intersection(normalize(ha), normalize(hb))
            for ha, hb in zip(cells_a, cells_b)
        )
        return total / len(cells_a)

    def __repr__(self) -> str:
        return f"PartitionIntersection(num_partitions={self.num_partitions})"


class InverseSquareDiff(SimilarityStrategy):
    """``1 / (SSD(avg_a, avg_b) + 1)`` over the clusters' average images."""

    name = "inverse_square"

    def score(self, a: Cluster, b: Cluster) -> float:
        return 1.0 / (sum_squared_difference(a.average_image, b.average_image) + 1.0)


class PerceptronEnsemble(SimilarityStrategy):
    """
    Sum over perceptrons of the inverse squared score gap.

    Build it either from already-trained perceptrons or, more commonly,
    with :meth:`from_training_images`, which trains one perceptron per
    class seen in the training set.
    """

    name = "perceptron"

    def __init__(self, perceptrons: Sequence[Perceptron]):
        if not perceptrons:
            raise ArgumentError("At least one perceptron is required")
        self.perceptrons = list(perceptrons)

    @classmethod
    def from_training_images(
        cls,
        training_images: Sequence[PGMImage],
        epochs: Optional[int] = None,
    ) -> "PerceptronEnsemble":
        perceptrons = train_one_vs_rest(training_images, epochs=epochs)
        logger.info(
            "Trained %d perceptrons on %d training images",
            len(perceptrons), len(training_images),
        )
        return cls(perceptrons)

    def score(self, a: Cluster, b: Cluster) -> float:
        """
        Raises
        ------
        NumericError
            If any perceptron scores the two clusters identically.
        """
        hist_a = a.normalized_histogram
        hist_b = b.normalized_histogram
        similarity = 0.0
        for p in self.perceptrons:
            diff = p.score(hist_a) - p.score(hist_b)
            if diff == 0.0:
                raise NumericError(
                    f"Perceptron score differential is zero for class {p.target_class} "
                    f"between clusters [{a}] and [{b}]"
                )
            similarity += 1.0 / (diff * diff)
        return similarity

    def __repr__(self) -> str:
        return f"PerceptronEnsemble(classes={[p.target_class for p in self.perceptrons]})"


# ---------------------------------------------------------------------------
# Measure registry
# ---------------------------------------------------------------------------

MEASURES: tuple[str, ...] = ("agglomerative", "quarter", "ninth", "inverse_square", "perceptron")


def make_strategy(
    measure: str,
    training_images: Optional[Sequence[PGMImage]] = None,
) -> SimilarityStrategy:
    """
    Build the strategy registered under *measure*.

    Raises
    ------
    ArgumentError
        For an unknown measure, or ``perceptron`` without training images.
    """
    if measure == "agglomerative":
        return HistogramIntersection()
    if measure == "quarter":
        return PartitionIntersection(4)
    if measure == "ninth":
        return PartitionIntersection(9)
    if measure == "inverse_square":
        return InverseSquareDiff()
    if measure == "perceptron":
        if not training_images:
            raise ArgumentError("The perceptron measure requires training images")
        return PerceptronEnsemble.from_training_images(training_images)
    raise ArgumentError(
        f"Unknown similarity measure '{measure}'. Choose from: {list(MEASURES)}"
    )
