"""
errors.py - Exception taxonomy for the clustering toolkit.

Every failure the toolkit can raise belongs to one of four kinds, so a
caller (the command line runner, or a notebook) can decide whether to
abort the whole run or report and carry on:

- parse errors    : a PGM file is malformed
- argument errors : bad counts, extensions, labels or list sizes
- numeric errors  : a computation is undefined (zero-sum histogram,
                    identical perceptron scores)
- model errors    : a perceptron cannot be trained for the requested class

The classes also derive from the matching built-in exception so that
``except ValueError`` style handling keeps working.
"""


class ClusteringError(Exception):
    """Base class for every error raised by this package."""


class PGMParseError(ClusteringError, ValueError):
    """A PGM file could not be parsed or failed validation."""


class ArgumentError(ClusteringError, ValueError):
    """An argument or configuration value is out of its allowed range."""


class NumericError(ClusteringError, ArithmeticError):
    """A numeric operation is undefined for the given input."""


class ModelError(ClusteringError, ValueError):
    """A model cannot be built from the supplied training samples."""


class ClusterAbsorbedError(ClusteringError, RuntimeError):
    """A cluster was used after being merged into another cluster."""
