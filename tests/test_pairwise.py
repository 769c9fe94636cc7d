"""Tests for src/pairwise.py."""

import numpy as np
import pytest

from src.errors import ArgumentError
from src.pairwise import find_most_similar_pairs, format_pairs
from src.pgm import PGMImage


def _two_tone(name: str, dark_rows: int) -> PGMImage:
    pixels = np.full((128, 128), 255)
    pixels[:dark_rows, :] = 0
    return PGMImage(name, pixels)


class TestMostSimilarPairs:
    def test_two_images_pair_with_each_other(self):
        a = _two_tone("example1.pgm", 0)
        b = _two_tone("example2.pgm", 4)
        pairs = find_most_similar_pairs([a, b])
        assert format_pairs(pairs) == (
            "example1.pgm example2.pgm 0.968750\n"
            "example2.pgm example1.pgm 0.968750\n"
        )

    def test_pairs_can_be_asymmetric(self):
        images = [_two_tone("a.pgm", 0), _two_tone("b.pgm", 4), _two_tone("c.pgm", 64)]
        pairs = find_most_similar_pairs(images)
        assert [(p.image.filename, p.match.filename) for p in pairs] == [
            ("a.pgm", "b.pgm"),
            ("b.pgm", "a.pgm"),
            ("c.pgm", "b.pgm"),
        ]

    def test_duplicate_pixels_still_match_other_image(self):
        a = _two_tone("a.pgm", 10)
        b = _two_tone("b.pgm", 10)
        pairs = find_most_similar_pairs([a, b])
        assert pairs[0].match is b
        assert pairs[0].score == pytest.approx(1.0)

    def test_requires_two_images(self):
        with pytest.raises(ArgumentError):
            find_most_similar_pairs([_two_tone("a.pgm", 0)])
