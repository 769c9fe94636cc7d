"""
cluster.py - A growing group of images and its cached aggregates.

A Cluster starts with exactly one image and only ever grows.  To keep
similarity evaluation cheap it maintains, incrementally:

- the cumulative histogram   : bin-wise sum of every member's histogram
- the normalised histogram   : cumulative histogram / its total
- the average image          : per-pixel mean of the members, as integers
- sub-histograms (optional)  : histograms of an N-cell grid over the
                               average image, cached per cell count

OWNERSHIP
---------
``a.merge(b)`` moves every image out of ``b`` and into ``a``.  After the
call ``b`` is empty and marked absorbed: any further access raises
ClusterAbsorbedError.  The caller must drop ``b`` from its cluster list.

AVERAGE IMAGE ROUNDING
----------------------
Each merge blends the two averages with weights equal to their image
counts and truncates the result to an integer:

    avg[p] = (avg_a[p] * n_a + avg_b[p] * n_b) // (n_a + n_b)

Truncation happens once per merge, so a long chain of merges can drift
slightly below the exact mean.  Output partitions depend on this order.
"""

import logging
from typing import Optional

import numpy as np

from src.errors import ArgumentError, ClusterAbsorbedError
from src.histogram import extract_sub_histograms, normalize
from src.pgm import PGMImage

logger = logging.getLogger(__name__)


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.setflags(write=False)
    return view


class Cluster:
    """Non-empty set of images with incrementally maintained aggregates."""

    def __init__(self, image: PGMImage):
        self._images: list[PGMImage] = [image]
        self._histogram = image.histogram.astype(np.int64)      # copy
        self._average_image = image.pixels.astype(np.int64)     # copy
        self._normalized_histogram = normalize(self._histogram)
        self._absorbed = False

        # sub-histogram cache: (partition count, histograms) or None
        self._sub_histograms: Optional[tuple[int, list[np.ndarray]]] = None

    def _check_alive(self) -> None:
        if self._absorbed:
            raise ClusterAbsorbedError("Cluster has been merged into another cluster")

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_image(self, image: PGMImage) -> None:
        """
        Append *image* and add its histogram to the cumulative histogram.

        The average image and normalised histogram are left untouched.
        """
        self._check_alive()
        self._images.append(image)
        self._histogram += image.histogram

    def merge(self, other: "Cluster") -> None:
        """
        Absorb *other* into this cluster.

        Raises
        ------
        ArgumentError
            If *other* is this cluster.
        ClusterAbsorbedError
            If either cluster was already absorbed.
        """
        self._check_alive()
        other._check_alive()
        if other is self:
            raise ArgumentError("Cannot merge a cluster into itself")

        n_self = len(self._images)
        n_other = len(other._images)

        self._images.extend(other._images)
        self._histogram += other._histogram
        self._normalized_histogram = normalize(self._histogram)
        self._average_image = (
            self._average_image * n_self + other._average_image * n_other
        ) // (n_self + n_other)
        self._sub_histograms = None

        other._images = []
        other._sub_histograms = None
        other._absorbed = True

        logger.debug("Merged cluster of %d into cluster of %d", n_other, n_self)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def images(self) -> list[PGMImage]:
        self._check_alive()
        return list(self._images)

    @property
    def size(self) -> int:
        self._check_alive()
        return len(self._images)

    @property
    def histogram(self) -> np.ndarray:
        self._check_alive()
        return self._histogram.copy()

    @property
    def normalized_histogram(self) -> np.ndarray:
        self._check_alive()
        return _read_only(self._normalized_histogram)

    @property
    def average_image(self) -> np.ndarray:
        self._check_alive()
        return _read_only(self._average_image)

    @property
    def absorbed(self) -> bool:
        return self._absorbed

    def sub_histograms(self, num_partitions: int) -> list[np.ndarray]:
        """
        Histograms of a ``num_partitions``-cell grid over the average image.

        Cached; recomputed when the average image has changed since the
        last call or when a different cell count is requested.
        """
        self._check_alive()
        if self._sub_histograms is None or self._sub_histograms[0] != num_partitions:
            self._sub_histograms = (
                num_partitions,
                extract_sub_histograms(self._average_image, num_partitions),
            )
        return self._sub_histograms[1]

    def __len__(self) -> int:
        return len(self._images)

    def __str__(self) -> str:
        return " ".join(sorted(img.filename for img in self._images))

    def __repr__(self) -> str:
        return f"Cluster({self})"
