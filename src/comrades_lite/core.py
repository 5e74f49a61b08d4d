"""
Core constants, configuration and error types for comrades_lite.

This module provides the hyb column schema and the settings shared by the
matrix and graph builders.
"""

# Positional fields of a hyb record. Segment A is fields 4-9, segment B 10-15.
HYB_COLUMNS = [
    "read_id",
    "read_seq",
    "dg",
    "name_a",
    "qstart_a",
    "qend_a",
    "start_a",
    "end_a",
    "score_a",
    "name_b",
    "qstart_b",
    "qend_b",
    "start_b",
    "end_b",
    "score_b",
]

# Per-segment fields, in hyb order, without the slot suffix
SEGMENT_FIELDS = ["name", "qstart", "qend", "start", "end", "score"]

COORDINATE_COLUMNS = ["start_a", "end_a", "start_b", "end_b"]

# Above this many cells, representation="auto" builds scipy.sparse matrices.
# 25M int64 cells is ~200MB dense.
DENSE_CELL_LIMIT = 25_000_000

MATRIX_REPRESENTATIONS = ("auto", "dense", "sparse")

ADJACENCY_MODES = ("none", "nucleotide", "perc")

CANONICAL_POLICIES = ("position", "position_both", "identity")

# Orientation of identity-policy reads with both arms on the RNA
TIE_BREAKS = ("first", "position")


class CoordinateError(ValueError):
    """Raised for inverted or malformed interval coordinates."""


class EmptySubsetError(ValueError):
    """Raised when a selection yields no records but at least one is required."""


class SampleSizeError(ValueError):
    """Raised when subsampling asks for more rows than a sample holds."""


def segment_columns(slot):
    """Column names of one segment slot ('a' or 'b'), in hyb order."""
    return [f"{field}_{slot}" for field in SEGMENT_FIELDS]


def use_sparse(n_cells, representation="auto"):
    """
    Decide whether a matrix with ``n_cells`` cells should be stored sparse.

    Args:
        n_cells: Number of cells of the full square matrix
        representation: 'auto', 'dense' or 'sparse'

    Returns:
        True for a scipy.sparse matrix, False for a dense numpy array
    """
    if representation not in MATRIX_REPRESENTATIONS:
        raise ValueError(
            f"representation must be one of {MATRIX_REPRESENTATIONS}, got '{representation}'"
        )
    if representation == "auto":
        return n_cells > DENSE_CELL_LIMIT
    return representation == "sparse"
