"""
perceptron.py - One-vs-rest linear scorer over normalised histograms.

Each Perceptron learns a weight per histogram bin plus a bias so that

    score(x) = w . x + b

is close to +1 for images of its target class and close to -1 for
everything else.

TRAINING RULE
-------------
This is a delta-rule (least-mean-squares) update, *not* the classic
thresholded perceptron step.  For every sample, in order, for a fixed
number of epochs:

    d     = +1 if sample.class_label == target else -1
    error = d - score(x)
    w    += error * x
    b    += error

The weights move on every sample, including ones that are already on
the correct side of zero.  Training happens exactly once, inside the
constructor; afterwards the model is read-only.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from src.config import CONFIG
from src.errors import ModelError
from src.histogram import BIN_COUNT, dot_product
from src.pgm import PGMImage

logger = logging.getLogger(__name__)

NUM_EPOCHS: int = CONFIG["perceptron"]["epochs"]


class Perceptron:
    """
    Binary linear scorer for one target class, trained at construction.

    Example:
        >>> model = Perceptron(training_images, target_class=1)
        >>> model.score(image.normalized_histogram)
    """

    def __init__(
        self,
        training_samples: Sequence[PGMImage],
        target_class: int,
        epochs: Optional[int] = None,
    ):
        """
        Args:
            training_samples: Labelled images, visited in the given order.
            target_class: Class scored as +1; every other class is -1.
            epochs: Number of passes over the samples. Defaults to config.

        Raises:
            ModelError: If no sample carries ``target_class``.
        """
        self.target_class = target_class
        self._weights = np.zeros(BIN_COUNT, dtype=np.float64)
        self._bias = 0.0

        if not any(img.class_label == target_class for img in training_samples):
            raise ModelError("Target class label not found in provided samples")

        self._train(training_samples, NUM_EPOCHS if epochs is None else epochs)

    def _train(self, samples: Sequence[PGMImage], epochs: int) -> None:
        for _ in range(epochs):
            for sample in samples:
                x = sample.normalized_histogram
                d = 1.0 if sample.class_label == self.target_class else -1.0
                error = d - self.score(x)
                self._weights += error * x
                self._bias += error

        logger.debug(
            "Trained perceptron for class %d: %d samples x %d epochs, bias=%.6f",
            self.target_class, len(samples), epochs, self._bias,
        )

    @property
    def weights(self) -> np.ndarray:
        """Copy of the learned per-bin weights."""
        return self._weights.copy()

    @property
    def bias(self) -> float:
        return self._bias

    def score(self, normalized_histogram) -> float:
        """Linear score ``w . x + b`` for a normalised histogram."""
        return dot_product(self._weights, normalized_histogram) + self._bias

    def __str__(self) -> str:
        return "".join(f"{v:.6f} " for v in [*self._weights, self._bias])


def train_one_vs_rest(
    training_samples: Sequence[PGMImage],
    epochs: Optional[int] = None,
) -> list[Perceptron]:
    """
    Train one Perceptron per distinct class label, in first-seen order.
    """
    classes: list[int] = []
    for img in training_samples:
        if img.class_label not in classes:
            classes.append(img.class_label)

    if len(classes) < 2:
        logger.warning(
            "Only %d class found in %d training samples; "
            "one-vs-rest scores will carry little information.",
            len(classes), len(training_samples),
        )

    return [Perceptron(training_samples, c, epochs=epochs) for c in classes]
