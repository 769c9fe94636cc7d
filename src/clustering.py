"""
clustering.py - Greedy agglomerative clustering of grayscale images.

Every image starts in its own cluster.  Each round the engine scores
every unordered pair of live clusters with the selected similarity
measure, merges the best pair, and repeats until the requested number
of clusters remains.

ALGORITHM
---------
    clusters = [Cluster(img) for img in images]
    while len(clusters) > target:
        best = argmax over i < j of score(clusters[i], clusters[j])
        clusters[i].merge(clusters[j]); del clusters[j]

Pairs are scanned row by row (i ascending, then j ascending) and a pair
only replaces the current best when it scores *strictly* higher, so ties
go to the first pair encountered.  Given the same inputs in the same
order the result is fully deterministic.

COST
----
One round costs O(n^2) similarity evaluations and there are n - target
rounds, so a full run is O(n^3) in the worst case.  That is fine for the
tens-to-hundreds of images this toolkit is aimed at.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from src.cluster import Cluster
from src.errors import ArgumentError
from src.pgm import PGMImage
from src.similarity import SimilarityStrategy, make_strategy

logger = logging.getLogger(__name__)


@dataclass
class MergeStep:
    """Record of one merge round."""
    kept: int          # index of the surviving cluster before the merge
    absorbed: int      # index of the cluster that was removed
    score: float


class ClusteringEngine:
    """
    Drives merge rounds until the target cluster count is reached.

    Example:
        >>> engine = ClusteringEngine(images, 4, HistogramIntersection())
        >>> engine.run()
        >>> print(engine)      # one line per cluster
    """

    def __init__(
        self,
        images: Sequence[PGMImage],
        target_num_clusters: int,
        strategy: SimilarityStrategy,
    ):
        """
        Args:
            images: Images to cluster; each becomes a singleton cluster.
            target_num_clusters: Number of clusters to stop at.
            strategy: Similarity measure used to rank pairs.

        Raises:
            ArgumentError: If target_num_clusters is not in [1, len(images)].
        """
        if target_num_clusters < 1 or target_num_clusters > len(images):
            raise ArgumentError(
                f"Number of clusters must be between 1 and {len(images)}"
            )
        self.target_num_clusters = target_num_clusters
        self.strategy = strategy
        self._clusters: list[Cluster] = [Cluster(img) for img in images]
        self.history: list[MergeStep] = []

    @property
    def clusters(self) -> list[Cluster]:
        return list(self._clusters)

    @property
    def is_terminal(self) -> bool:
        return len(self._clusters) <= self.target_num_clusters

    def _find_best_pair(self) -> Optional[tuple[int, int, float]]:
        best: Optional[tuple[int, int]] = None
        best_score = -math.inf
        n = len(self._clusters)
        for i in range(n):
            for j in range(i + 1, n):
                similarity = self.strategy.score(self._clusters[i], self._clusters[j])
                if similarity > best_score:
                    best_score = similarity
                    best = (i, j)
        if best is None:
            return None
        return best[0], best[1], best_score

    def step(self) -> Optional[MergeStep]:
        """
        Perform one merge round.

        Returns
        -------
        MergeStep or None
            The merge performed, or None if no pair could be merged.
        """
        found = self._find_best_pair()
        if found is None:
            return None

        i, j, score = found
        self._clusters[i].merge(self._clusters[j])
        del self._clusters[j]

        merge = MergeStep(kept=i, absorbed=j, score=score)
        self.history.append(merge)
        logger.debug(
            "Round %d: merged cluster %d into %d (score=%.6f), %d clusters left",
            len(self.history), j, i, score, len(self._clusters),
        )
        return merge

    def run(self) -> list[Cluster]:
        """Merge until the target count is reached; returns the clusters."""
        while not self.is_terminal:
            if self.step() is None:
                break

        logger.info(
            "Clustering complete: measure=%s, %d clusters after %d merges",
            self.strategy.name, len(self._clusters), len(self.history),
        )
        return self.clusters

    def __str__(self) -> str:
        return "\n".join(str(c) for c in self._clusters)


def cluster_images(
    images: Sequence[PGMImage],
    target_num_clusters: int,
    measure: str = "agglomerative",
    training_images: Optional[Sequence[PGMImage]] = None,
) -> ClusteringEngine:
    """
    Cluster *images* with a named similarity measure.

    Parameters
    ----------
    images : sequence of PGMImage
        Images to cluster.
    target_num_clusters : int
        Number of clusters wanted, between 1 and ``len(images)``.
    measure : str
        One of ``src.similarity.MEASURES``.
    training_images : sequence of PGMImage, optional
        Labelled images for the ``perceptron`` measure.

    Returns
    -------
    ClusteringEngine
        The finished engine; ``engine.clusters`` holds the partition.
    """
    # Validate the target before spending time on perceptron training.
    if target_num_clusters < 1 or target_num_clusters > len(images):
        raise ArgumentError(
            f"Number of clusters must be between 1 and {len(images)}"
        )
    strategy = make_strategy(measure, training_images)
    engine = ClusteringEngine(images, target_num_clusters, strategy)
    engine.run()
    return engine
