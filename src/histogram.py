"""
histogram.py - Intensity histograms and the arithmetic built on them.

Every image and every cluster is summarised by a fixed-length intensity
histogram.  With the default configuration there are 64 bins, each
covering 4 consecutive grey levels:

    bin = pixel_value // 4        (0..255  ->  0..63)

The raw histogram holds integer counts and always sums to the number of
pixels it was built from.  Similarity measures work on the *normalised*
histogram (counts divided by their total) so that regions of different
size can be compared.

Histogram intersection
----------------------
For two normalised histograms a and b:

    intersection(a, b) = sum_i min(a_i, b_i)

The result lies in [0, 1]; 1.0 means the histograms are identical and
0.0 means they share no non-empty bin.
"""

import math

import numpy as np

from src.config import CONFIG
from src.errors import ArgumentError, NumericError


BIN_COUNT: int = CONFIG["histogram"]["bin_count"]
INTERVAL_SIZE: int = CONFIG["histogram"]["interval_size"]


# ---------------------------------------------------------------------------
# Histogram builder
# ---------------------------------------------------------------------------

def build_histogram(pixels) -> np.ndarray:
    """
    Count pixel intensities into ``BIN_COUNT`` bins.

    Parameters
    ----------
    pixels : array-like
        2-D grid of integer intensities in ``[0, BIN_COUNT * INTERVAL_SIZE)``.
        An empty grid yields an all-zero histogram.

    Returns
    -------
    np.ndarray
        Integer array of length ``BIN_COUNT``.
    """
    values = np.asarray(pixels, dtype=np.int64).ravel()
    if values.size and (values.min() < 0 or values.max() >= BIN_COUNT * INTERVAL_SIZE):
        raise ArgumentError(
            f"Pixel values must lie in [0, {BIN_COUNT * INTERVAL_SIZE - 1}], "
            f"found range [{values.min()}, {values.max()}]"
        )
    return np.bincount(values // INTERVAL_SIZE, minlength=BIN_COUNT).astype(np.int64)


def extract_sub_histograms(pixels, num_partitions: int) -> list[np.ndarray]:
    """
    Split a pixel grid into a square grid of cells and histogram each cell.

    The grid side is ``G = ceil(sqrt(num_partitions))``; every cell is
    ``height // G`` rows by ``width // G`` columns, so trailing rows and
    columns that do not fill a whole cell are ignored.  Cell ``i`` sits at
    grid row ``i // G`` and column ``i % G``.

    Parameters
    ----------
    pixels : array-like
        2-D grid of intensities.
    num_partitions : int
        Number of cells to return (4 for quarters, 9 for ninths).

    Returns
    -------
    list[np.ndarray]
        ``num_partitions`` histograms in row-major cell order.
    """
    if num_partitions < 1:
        raise ArgumentError(f"num_partitions must be >= 1, got {num_partitions}")

    grid = np.asarray(pixels)
    grid_side = math.ceil(math.sqrt(num_partitions))
    cell_height = grid.shape[0] // grid_side
    cell_width = grid.shape[1] // grid_side

    histograms = []
    for i in range(num_partitions):
        row, col = divmod(i, grid_side)
        top, left = row * cell_height, col * cell_width
        cell = grid[top:top + cell_height, left:left + cell_width]
        histograms.append(build_histogram(cell))
    return histograms


# ---------------------------------------------------------------------------
# Histogram math
# ---------------------------------------------------------------------------

def normalize(histogram) -> np.ndarray:
    """
    Divide every bin by the histogram total.

    Raises
    ------
    NumericError
        If the histogram sums to zero.
    """
    counts = np.asarray(histogram, dtype=np.float64)
    total = counts.sum()
    if total == 0:
        raise NumericError("Cannot normalize histogram with sum zero")
    return counts / total


def _check_same_length(a: np.ndarray, b: np.ndarray) -> None:
    if a.shape != b.shape:
        raise ArgumentError("Histograms must have the same length")


def intersection(a, b) -> float:
    """Sum of the element-wise minimum of two histograms."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    _check_same_length(a, b)
    return float(np.minimum(a, b).sum())


def dot_product(a, b) -> float:
    """Sum of the element-wise product of two histograms."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    _check_same_length(a, b)
    return float(np.dot(a, b))


def sum_squared_difference(pixels_a, pixels_b) -> float:
    """
    Pixel-by-pixel sum of squared differences between two equal-size grids.

    Raises
    ------
    ArgumentError
        If the grids differ in shape.
    """
    a = np.asarray(pixels_a, dtype=np.float64)
    b = np.asarray(pixels_b, dtype=np.float64)
    if a.shape != b.shape:
        raise ArgumentError(
            f"Image dimensions do not match: {a.shape} vs {b.shape}"
        )
    diff = a - b
    return float(np.sum(diff * diff))
