"""
run_clustering.py - Command line entry point.

Clusters the images in a test list and prints one line per cluster, each
listing its members' filenames in sorted order.

Usage
-----
    python scripts/run_clustering.py train.txt test.txt 3
    python scripts/run_clustering.py train.txt test.txt 3 --measure quarter --quality
    python scripts/run_clustering.py train.txt test.txt 3 --plot reports/clusters.png

Each list file holds one PGM path per line.  The training list is only
used by the ``perceptron`` measure (the default) but must always be given.
"""

import argparse
import logging
import os
import sys

# Ensure repo root is on sys.path regardless of launch directory
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _REPO_ROOT)

from src.config import CONFIG, load_config  # noqa: E402
from src.errors import (  # noqa: E402
    ArgumentError,
    ModelError,
    NumericError,
    PGMParseError,
)
from src.pairwise import format_pairs  # noqa: E402
from src.pipeline import run_clustering  # noqa: E402
from src.similarity import MEASURES  # noqa: E402

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Cluster 128x128 PGM images by intensity-histogram similarity.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("training_list", help="Text file listing training PGM paths (.txt)")
    parser.add_argument("test_list", help="Text file listing PGM paths to cluster (.txt)")
    parser.add_argument("num_clusters", type=int, help="Target number of clusters")
    parser.add_argument("--measure", choices=MEASURES,
                        default=CONFIG["clustering"]["default_measure"],
                        help="Similarity measure (default: %(default)s)")
    parser.add_argument("--quality", action="store_true",
                        help="Print cluster purity against filename class labels")
    parser.add_argument("--pairwise", action="store_true",
                        help="Print each test image's most similar other image")
    parser.add_argument("--plot", metavar="PATH",
                        help="Save a figure of the cluster average images to PATH")
    parser.add_argument("--config", metavar="PATH",
                        help="Read logging settings from an alternative config.yaml")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log progress at INFO level")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    log_cfg = load_config(args.config)["logging"] if args.config else CONFIG["logging"]
    logging.basicConfig(
        level=logging.INFO if args.verbose else log_cfg["level"],
        format=log_cfg["format"],
    )

    try:
        report = run_clustering(
            args.training_list,
            args.test_list,
            args.num_clusters,
            measure=args.measure,
            compute_quality=args.quality,
            pairwise=args.pairwise,
        )
    except FileNotFoundError as exc:
        print(f"ERROR! File Not Found:\n{exc}", file=sys.stderr)
        return 1
    except PGMParseError as exc:
        print(f"ERROR! File Parse:\n{exc}", file=sys.stderr)
        return 1
    except NumericError as exc:
        print(f"ERROR! Arithmetic:\n{exc}", file=sys.stderr)
        return 1
    except (ArgumentError, ModelError) as exc:
        print(f"ERROR! Illegal Argument:\n{exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.debug("Unexpected failure", exc_info=True)
        print(f"ERROR! An Unexpected Error Occurred: {exc}", file=sys.stderr)
        return 1

    print(report.partition())
    if report.purity is not None:
        print(f"Purity: {report.purity:.6f}")
    if report.pairs:
        print(format_pairs(report.pairs), end="")

    if args.plot:
        import matplotlib
        matplotlib.use("Agg")  # non-interactive backend, no display needed
        from src.visualization import plot_cluster_averages

        os.makedirs(os.path.dirname(os.path.abspath(args.plot)), exist_ok=True)
        fig = plot_cluster_averages(report.engine.clusters)
        fig.savefig(args.plot, dpi=100, bbox_inches="tight")
        logger.info("Saved cluster figure to %s", args.plot)

    return 0


if __name__ == "__main__":
    sys.exit(main())
