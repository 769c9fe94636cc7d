"""
generate_sample_data.py - Create synthetic PGM files for an end-to-end demo.

Writes labelled 128x128 P2 images to data/ plus a train.txt and test.txt
list, so you can run the clustering without a real image set.

Usage
-----
    python scripts/generate_sample_data.py

After running, try:
    python scripts/run_clustering.py data/train.txt data/test.txt 3 --quality
"""

import os
import sys

import numpy as np

# Make sure repo root is on the path when run as a script
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _REPO_ROOT)

from src.config import CONFIG  # noqa: E402
from src.pgm import write_pgm  # noqa: E402

OUTPUT_FOLDER = os.path.join(_REPO_ROOT, "data")
SIZE = CONFIG["image"]["width"]


# ---------------------------------------------------------------------------
# Synthetic class profiles: distinct intensity and layout per class
# ---------------------------------------------------------------------------
_CLASS_PROFILES = {
    # class: (background mean, noise std, square value, note)
    0: (40, 10, 200, "dark background, bright centre square"),
    1: (190, 15, 30, "bright background, dark centre square"),
    2: (110, 40, 110, "mid-grey noise, no structure"),
}


def _make_pixels(label: int, seed: int) -> np.ndarray:
    """Noisy background plus an optional square, clipped to 0..255."""
    background, std, square, _ = _CLASS_PROFILES[label]
    rng = np.random.default_rng(seed)
    pixels = rng.normal(background, std, size=(SIZE, SIZE))

    # Jitter the square position so images of one class are not identical
    offset = int(rng.integers(0, SIZE // 8))
    lo = SIZE // 4 + offset
    hi = lo + SIZE // 3
    pixels[lo:hi, lo:hi] = square

    return pixels.clip(0, 255).astype(np.int64)


def generate(
    output_folder: str = OUTPUT_FOLDER,
    train_per_class: int = 5,
    test_per_class: int = 4,
) -> tuple[str, str]:
    """
    Generate training and test images into *output_folder*.

    Returns
    -------
    tuple[str, str]
        Paths of the written train.txt and test.txt lists.
    """
    os.makedirs(output_folder, exist_ok=True)
    lists = {"train": [], "test": []}
    seed = 42

    for split, per_class in (("train", train_per_class), ("test", test_per_class)):
        for label, profile in _CLASS_PROFILES.items():
            for i in range(per_class):
                seed += 1
                # Class digit sits at filename index 5: "class<d>_..."
                name = f"class{label}_{split}{i:02d}.pgm"
                path = os.path.join(output_folder, name)
                write_pgm(path, _make_pixels(label, seed), comment=profile[3])
                lists[split].append(path)

    list_paths = []
    for split, paths in lists.items():
        list_path = os.path.join(output_folder, f"{split}.txt")
        with open(list_path, "w") as f:
            f.write("\n".join(paths) + "\n")
        list_paths.append(list_path)
        print(f"  {split:5s}: {len(paths)} images -> {list_path}")

    return list_paths[0], list_paths[1]


if __name__ == "__main__":
    print(f"Writing synthetic PGM files to: {OUTPUT_FOLDER}")
    print("-" * 60)
    train, test = generate()
    print("-" * 60)
    print("Done.  Cluster them with:")
    print(f"  python scripts/run_clustering.py {train} {test} 3 --quality")
