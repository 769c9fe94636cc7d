"""
pairwise.py - Nearest neighbour of every image by histogram intersection.

A quick look at a data set before clustering it: for each image, which
other image has the most similar intensity histogram?  Pairs are often
asymmetric (A's best match is B while B's best match is C).
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from src.errors import ArgumentError
from src.histogram import intersection
from src.pgm import PGMImage

logger = logging.getLogger(__name__)


@dataclass
class SimilarPair:
    image: PGMImage
    match: PGMImage
    score: float

    def __str__(self) -> str:
        return f"{self.image} {self.match} {self.score:.6f}"


def most_similar_image(image: PGMImage, candidates: Sequence[PGMImage]) -> Optional[SimilarPair]:
    """Best match for *image* among *candidates*, skipping *image* itself."""
    best: Optional[SimilarPair] = None
    best_score = -math.inf
    for other in candidates:
        if other is image:
            continue
        score = intersection(image.normalized_histogram, other.normalized_histogram)
        if score > best_score:
            best_score = score
            best = SimilarPair(image=image, match=other, score=score)
    return best


def find_most_similar_pairs(images: Sequence[PGMImage]) -> list[SimilarPair]:
    """
    Most similar other image for each image, in input order.

    Raises
    ------
    ArgumentError
        If fewer than two images are given.
    """
    if len(images) < 2:
        raise ArgumentError(f"At least 2 images are required, got {len(images)}")

    pairs = [most_similar_image(img, images) for img in images]
    logger.debug("Computed %d nearest-neighbour pairs", len(pairs))
    return pairs


def format_pairs(pairs: Sequence[SimilarPair]) -> str:
    """One ``<image> <match> <score>`` line per pair."""
    return "".join(f"{p}\n" for p in pairs)
