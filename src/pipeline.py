"""
pipeline.py - End-to-end clustering run.

Loads a training list and a test list of PGM files, builds the chosen
similarity measure (training perceptrons if needed), clusters the test
images down to the requested count and, optionally, scores the result
against the class labels encoded in the filenames.

All argument checks happen before any image is clustered so that a bad
invocation fails in milliseconds rather than after minutes of merging.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from src.clustering import ClusteringEngine, cluster_images
from src.config import CONFIG
from src.errors import ArgumentError
from src.pairwise import SimilarPair, find_most_similar_pairs, format_pairs
from src.pgm import load_image_list
from src.quality import cluster_purity

logger = logging.getLogger(__name__)

LIST_EXTENSION = ".txt"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class ClusteringReport:
    """Outcome of one clustering run."""
    measure: str
    num_training_images: int
    num_test_images: int
    engine: ClusteringEngine
    purity: Optional[float] = None
    pairs: list[SimilarPair] = field(default_factory=list)
    elapsed_s: float = 0.0

    def partition(self) -> str:
        """One line per cluster, member names sorted, engine order."""
        return str(self.engine)

    def summary(self) -> str:
        lines = [
            "=" * 50,
            "CLUSTERING SUMMARY",
            "=" * 50,
            f"Measure              : {self.measure}",
            f"Training images      : {self.num_training_images}",
            f"Test images          : {self.num_test_images}",
            f"Clusters             : {len(self.engine.clusters)}",
            f"Merge rounds         : {len(self.engine.history)}",
            f"Total time           : {self.elapsed_s:.2f}s",
        ]
        if self.purity is not None:
            lines.append(f"Purity               : {self.purity:.6f}")
        if self.pairs:
            lines.append("\nMost similar pairs:")
            lines.append(format_pairs(self.pairs).rstrip("\n"))
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Argument validation
# ---------------------------------------------------------------------------

def validate_list_paths(training_list: str, test_list: str) -> None:
    """Both file lists must be ``.txt`` files."""
    if not training_list.endswith(LIST_EXTENSION) or not test_list.endswith(LIST_EXTENSION):
        raise ArgumentError(
            f"<training_files.txt> <test_files.txt> must be non-empty files with "
            f"extension '{LIST_EXTENSION}' Given:\n{training_list} {test_list}"
        )


# ---------------------------------------------------------------------------
# Core pipeline
# ---------------------------------------------------------------------------

def run_clustering(
    training_list: str,
    test_list: str,
    num_clusters: int,
    measure: Optional[str] = None,
    compute_quality: bool = False,
    pairwise: bool = False,
) -> ClusteringReport:
    """
    Cluster the images named in *test_list*.

    Parameters
    ----------
    training_list : str
        ``.txt`` list of labelled training images (used by ``perceptron``).
    test_list : str
        ``.txt`` list of images to cluster.
    num_clusters : int
        Target cluster count, between 1 and the number of test images.
    measure : str, optional
        Similarity measure name.  Defaults to config value.
    compute_quality : bool
        Score the partition's purity against filename class labels.
    pairwise : bool
        Also compute each test image's most similar other image.

    Returns
    -------
    ClusteringReport
    """
    measure = measure or CONFIG["clustering"]["default_measure"]
    validate_list_paths(training_list, test_list)

    start = time.time()
    training_images = load_image_list(training_list)
    test_images = load_image_list(test_list)

    logger.info(
        "Starting clustering: measure=%s, %d training / %d test images, target=%d",
        measure, len(training_images), len(test_images), num_clusters,
    )
    engine = cluster_images(
        test_images,
        num_clusters,
        measure=measure,
        training_images=training_images,
    )

    report = ClusteringReport(
        measure=measure,
        num_training_images=len(training_images),
        num_test_images=len(test_images),
        engine=engine,
    )
    if compute_quality:
        report.purity = cluster_purity(engine.clusters)
    if pairwise:
        report.pairs = find_most_similar_pairs(test_images)

    report.elapsed_s = time.time() - start
    logger.info(report.summary())
    return report
