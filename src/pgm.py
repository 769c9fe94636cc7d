"""
pgm.py - Plain-text PGM (P2) image reader.

The clustering toolkit works on 128x128 8-bit grayscale images stored in
the ASCII flavour of the Netpbm grey map format:

    P2
    # optional comment lines
    128 128
    255
    <128 * 128 whitespace-separated integers>

Anything else (binary P5, other sizes, other max values, stray tokens)
is rejected with a PGMParseError naming the file and the offending value.

Class labels
------------
Ground-truth labels are encoded in the filename: the character at
position 5 (``class3_12.pgm`` -> 3) must be a decimal digit.  Labels are
only needed for perceptron training and purity scoring, so they are
derived lazily and an unlabelled image can still be clustered.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Optional

import numpy as np

from src.config import CONFIG
from src.errors import ArgumentError, PGMParseError
from src.histogram import build_histogram, normalize

logger = logging.getLogger(__name__)

MAGIC_NUMBER = "P2"
REQUIRED_WIDTH: int = CONFIG["image"]["width"]
REQUIRED_HEIGHT: int = CONFIG["image"]["height"]
MAX_PIXEL_VALUE: int = CONFIG["image"]["max_value"]
CLASS_INDEX: int = CONFIG["image"]["class_index"]


@dataclass(frozen=True, eq=False)
class PGMImage:
    """
    One grayscale image.  Immutable once constructed.

    Images compare by identity: two files with identical pixels are still
    two distinct members of a cluster.
    """
    filename: str
    pixels: np.ndarray = field(repr=False)

    def __post_init__(self):
        pixels = np.array(self.pixels, dtype=np.int64)
        if pixels.ndim != 2:
            raise ArgumentError(
                f"Pixels of '{self.filename}' must be a 2-D grid, got shape {pixels.shape}"
            )
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @cached_property
    def histogram(self) -> np.ndarray:
        hist = build_histogram(self.pixels)
        hist.setflags(write=False)
        return hist

    @cached_property
    def normalized_histogram(self) -> np.ndarray:
        norm = normalize(self.histogram)
        norm.setflags(write=False)
        return norm

    @cached_property
    def class_label(self) -> int:
        """Digit at ``CLASS_INDEX`` in the filename."""
        name = self.filename
        if len(name) <= CLASS_INDEX or name[CLASS_INDEX] not in "0123456789":
            raise ArgumentError(f"Invalid class label format in file '{name}'")
        return int(name[CLASS_INDEX])

    def __str__(self) -> str:
        return self.filename


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _tokenize(text: str) -> list[str]:
    """Split PGM text into tokens, dropping '#' comments to end of line."""
    tokens: list[str] = []
    for line in text.splitlines():
        tokens.extend(line.split("#", 1)[0].split())
    return tokens


_INT_TOKEN = re.compile(r"[+-]?[0-9]+")


def _is_int(token: str) -> bool:
    """ASCII decimal integer with optional sign; no underscores or other digits."""
    return _INT_TOKEN.fullmatch(token) is not None


def _header_int(tokens: list[str], index: int) -> Optional[int]:
    if index < len(tokens) and _is_int(tokens[index]):
        return int(tokens[index])
    return None


def parse_pgm(text: str, filename: str) -> PGMImage:
    """
    Parse the contents of a P2 file.

    Parameters
    ----------
    text : str
        Full file contents.
    filename : str
        Base name used as the image identifier and in error messages.

    Returns
    -------
    PGMImage

    Raises
    ------
    PGMParseError
        On any header or pixel-data violation.
    """
    if not text:
        raise PGMParseError(f"File '{filename}' cannot be empty")

    tokens = _tokenize(text)
    header_error = PGMParseError(
        f"Invalid header format in file '{filename}' (width, height), or missing tokens"
    )

    if not tokens:
        raise header_error
    magic = tokens[0]
    if magic != MAGIC_NUMBER:
        raise PGMParseError(f"'{filename}' must start with '{MAGIC_NUMBER}'\nFound: {magic}")

    width, height = _header_int(tokens, 1), _header_int(tokens, 2)
    if width is None or height is None:
        raise header_error
    if width != REQUIRED_WIDTH or height != REQUIRED_HEIGHT:
        raise PGMParseError(
            f"'{filename}' dimensions must be {REQUIRED_WIDTH}x{REQUIRED_HEIGHT} "
            f"Found: {width}x{height}"
        )

    max_value = _header_int(tokens, 3)
    if max_value is None:
        raise header_error
    if max_value != MAX_PIXEL_VALUE:
        raise PGMParseError(
            f"'{filename}' maximum pixel value must be {MAX_PIXEL_VALUE} Found: {max_value}"
        )

    n_pixels = width * height
    body = tokens[4:]
    values = []
    for i in range(n_pixels):
        if i >= len(body) or not _is_int(body[i]):
            raise PGMParseError(
                f"'{filename}' contains invalid pixel data, pixels missing or non-integers detected"
            )
        value = int(body[i])
        if value < 0 or value > MAX_PIXEL_VALUE:
            raise PGMParseError(
                f"Pixel in '{filename}' out of range (0-{MAX_PIXEL_VALUE}): {value}"
            )
        values.append(value)

    if len(body) > n_pixels and _is_int(body[n_pixels]):
        raise PGMParseError(f"'{filename}' contains too many pixel values")

    pixels = np.array(values, dtype=np.int64).reshape(height, width)
    return PGMImage(filename=filename, pixels=pixels)


def read_pgm(path: str) -> PGMImage:
    """
    Read and validate a P2 file from disk.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    PGMParseError
        If the file is malformed.
    """
    # latin-1 maps every byte, so binary P5 data still reaches the magic check
    with open(path, "r", encoding="latin-1") as f:
        text = f.read()
    image = parse_pgm(text, os.path.basename(path))
    logger.debug("Loaded %s (%dx%d)", path, image.width, image.height)
    return image


def write_pgm(path: str, pixels, comment: str = "") -> None:
    """Write a 2-D intensity grid as a P2 file, one image row per line."""
    grid = np.asarray(pixels, dtype=np.int64)
    height, width = grid.shape
    with open(path, "w") as f:
        f.write(f"{MAGIC_NUMBER}\n")
        if comment:
            f.write(f"# {comment}\n")
        f.write(f"{width} {height}\n{MAX_PIXEL_VALUE}\n")
        for row in grid:
            f.write(" ".join(str(v) for v in row))
            f.write("\n")


# ---------------------------------------------------------------------------
# File lists
# ---------------------------------------------------------------------------

def load_image_list(list_path: str, min_images: Optional[int] = None) -> list[PGMImage]:
    """
    Load every image named in a text file, one path per line.

    Blank lines are skipped and surrounding whitespace is trimmed.  Paths
    are resolved relative to the current working directory.

    Parameters
    ----------
    list_path : str
        Path to the ``.txt`` file list.
    min_images : int, optional
        Minimum number of images required.  Defaults to the config value.

    Returns
    -------
    list[PGMImage]
        Images in file order.

    Raises
    ------
    FileNotFoundError
        If the list or any listed image does not exist.
    PGMParseError
        If any listed image is malformed.
    ArgumentError
        If fewer than *min_images* images are listed.
    """
    if min_images is None:
        min_images = CONFIG["clustering"]["min_images"]

    images: list[PGMImage] = []
    with open(list_path, "r") as f:
        for line in f:
            image_path = line.strip()
            if not image_path:
                continue
            images.append(read_pgm(image_path))

    if len(images) < min_images:
        raise ArgumentError(
            f"At least {min_images} images expected in '{os.path.basename(list_path)}'"
        )

    logger.info("Loaded %d images from %s", len(images), list_path)
    return images
