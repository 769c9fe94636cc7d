"""
run_full_pipeline.py - End-to-end clustering demonstration.

Generates synthetic labelled PGM data (if data/ has no lists yet),
clusters the test images with every similarity measure, compares their
purity, saves visualisations to reports/, and prints a final summary.

Usage
-----
    python scripts/run_full_pipeline.py
"""

import logging
import os
import sys

# Ensure repo root is on sys.path regardless of launch directory
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _REPO_ROOT)

import matplotlib
matplotlib.use("Agg")  # non-interactive backend, no display needed

from scripts.generate_sample_data import generate  # noqa: E402
from src.config import CONFIG  # noqa: E402
from src.errors import NumericError  # noqa: E402
from src.pipeline import run_clustering  # noqa: E402
from src.similarity import MEASURES  # noqa: E402
from src.visualization import (  # noqa: E402
    plot_cluster_averages,
    plot_cluster_histograms,
    plot_purity,
)

logging.basicConfig(
    level=logging.INFO,
    format=CONFIG["logging"]["format"],
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
DATA_FOLDER = os.path.join(_REPO_ROOT, "data")
REPORTS_FOLDER = os.path.join(_REPO_ROOT, "reports")
TRAIN_LIST = os.path.join(DATA_FOLDER, "train.txt")
TEST_LIST = os.path.join(DATA_FOLDER, "test.txt")
NUM_CLUSTERS = 3


def _ensure_sample_data() -> None:
    """Generate synthetic data if the file lists are missing."""
    if os.path.exists(TRAIN_LIST) and os.path.exists(TEST_LIST):
        logger.info("Found file lists in %s — skipping generation.", DATA_FOLDER)
        return

    logger.info("No file lists in %s — generating samples…", DATA_FOLDER)
    generate(DATA_FOLDER)


def main() -> None:
    os.makedirs(REPORTS_FOLDER, exist_ok=True)

    # ── Step 1: Ensure sample data exists ──────────────────────────────────
    print("=" * 60)
    print("STEP 1 — Prepare input data")
    print("=" * 60)
    _ensure_sample_data()
    print(f"  Training list : {TRAIN_LIST}")
    print(f"  Test list     : {TEST_LIST}")
    print()

    # ── Step 2: Cluster with every measure ─────────────────────────────────
    print("=" * 60)
    print(f"STEP 2 — Cluster test images into {NUM_CLUSTERS} groups")
    print("=" * 60)
    reports = {}
    for measure in MEASURES:
        try:
            report = run_clustering(
                TRAIN_LIST, TEST_LIST, NUM_CLUSTERS,
                measure=measure, compute_quality=True,
            )
        except NumericError as exc:
            # Identical perceptron scores are a known, reported failure.
            print(f"  {measure:15s}: failed — {exc}")
            continue
        reports[measure] = report
        print(f"  {measure:15s}: purity={report.purity:.3f}  time={report.elapsed_s:.2f}s")
        for line in report.partition().splitlines():
            print(f"      {line}")
    print()

    # ── Step 3: Save visualisations for the best measure ───────────────────
    print("=" * 60)
    print("STEP 3 — Saving visualisations to reports/")
    print("=" * 60)
    if not reports:
        print("  No measure completed; nothing to plot.")
        return

    best = max(reports, key=lambda m: reports[m].purity)
    clusters = reports[best].engine.clusters
    print(f"  Best measure : {best}")

    for name, fig in (
        ("cluster_averages.png", plot_cluster_averages(clusters)),
        ("cluster_histograms.png", plot_cluster_histograms(clusters)),
        ("cluster_purity.png", plot_purity(clusters)),
    ):
        path = os.path.join(REPORTS_FOLDER, name)
        fig.savefig(path, dpi=100, bbox_inches="tight")
        print(f"  Saved: {path}")
    print()

    # ── Done ───────────────────────────────────────────────────────────────
    print("=" * 60)
    print("ALL PIPELINE STAGES COMPLETED SUCCESSFULLY")
    print("=" * 60)


if __name__ == "__main__":
    main()
