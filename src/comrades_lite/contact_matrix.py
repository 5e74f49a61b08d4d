"""
Contact matrices of intra-RNA duplexes for comrades_lite.

Each duplex is drawn as a line through an ``M x M`` count matrix, where ``M``
is the largest coordinate observed: the left arm is walked forwards while
the right arm is walked backwards, matching the antiparallel pairing of the
two arms. Position ``(x, y)`` therefore counts reads pairing nucleotide
``x`` of the left arm with nucleotide ``y`` of the right arm.

Memory is the limiting resource: a dense matrix holds ``M**2`` cells, so
long RNAs (tens of thousands of nucleotides) should use the sparse
representation, chosen automatically above ``core.DENSE_CELL_LIMIT`` cells.
"""

import numpy as np
import pandas as pd
from typing import Dict, Optional, Tuple, Union
from scipy import sparse
from scipy.interpolate import RegularGridInterpolator

from .core import COORDINATE_COLUMNS, CoordinateError, use_sparse
from .hyb_utils import select_rna, require_rows


class ContactMatrix:
    """
    Square count matrix over 1-based RNA coordinates.

    Indexing is 1-based like the coordinates themselves: ``cm[x, y]`` is
    the count for left-arm position ``x`` and right-arm position ``y``.

    Args:
        counts: ``M x M`` numpy array or scipy.sparse matrix
        rna: RNA the matrix describes
        sample_id: Sample the matrix was built from

    Example:
        >>> cm = get_contact_matrix(records, "18S")
        >>> cm[5, 10]
        2
    """

    def __init__(self, counts, rna: str, sample_id=None):
        if counts.shape[0] != counts.shape[1]:
            raise ValueError(f"Contact matrix must be square, got {counts.shape}")
        self.counts = counts
        self.rna = rna
        self.sample_id = sample_id

    @property
    def shape(self) -> Tuple[int, int]:
        return self.counts.shape

    @property
    def size(self) -> int:
        return self.counts.shape[0]

    @property
    def is_sparse(self) -> bool:
        return sparse.issparse(self.counts)

    def _check_position(self, pos: int) -> int:
        if pos < 1 or pos > self.size:
            raise IndexError(f"Position {pos} outside 1..{self.size}")
        return pos - 1

    def __getitem__(self, key):
        x, y = key
        return int(self.counts[self._check_position(x), self._check_position(y)])

    def toarray(self) -> np.ndarray:
        if self.is_sparse:
            return self.counts.toarray()
        return np.array(self.counts)

    def region(self, x_start: int, x_end: int, y_start: int, y_end: int) -> np.ndarray:
        """Dense sub-matrix for inclusive 1-based windows on both axes."""
        sub = self.counts[self._check_position(x_start):self._check_position(x_end) + 1,
                          self._check_position(y_start):self._check_position(y_end) + 1]
        return sub.toarray() if sparse.issparse(sub) else np.array(sub)

    def row_sums(self) -> np.ndarray:
        """Reads covering each left-arm position."""
        return np.asarray(self.counts.sum(axis=1)).ravel()

    def col_sums(self) -> np.ndarray:
        """Reads covering each right-arm position."""
        return np.asarray(self.counts.sum(axis=0)).ravel()

    def total(self) -> int:
        return int(self.counts.sum())

    def to_frame(self) -> pd.DataFrame:
        """Dense DataFrame labelled with 1-based positions."""
        labels = np.arange(1, self.size + 1)
        return pd.DataFrame(self.toarray(), index=labels, columns=labels)

    def nonzero(self) -> pd.DataFrame:
        """Sparse listing of occupied cells with columns x, y, count."""
        coo = sparse.coo_matrix(self.counts)
        df = pd.DataFrame({"x": coo.row + 1, "y": coo.col + 1, "count": coo.data})
        df = df[df["count"] != 0]
        return df.sort_values(["x", "y"]).reset_index(drop=True)

    def __repr__(self):
        kind = "sparse" if self.is_sparse else "dense"
        return f"ContactMatrix(rna={self.rna!r}, sample_id={self.sample_id!r}, size={self.size}, {kind})"


def _rasterize(coords: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Cells visited by each duplex.

    ``coords`` rows are (start_a, end_a, start_b, end_b). The left arm runs
    start_a..end_a and the right arm end_b..start_b; the two walks are
    paired index by index and stop at the shorter arm, so the tail of the
    longer arm is not drawn.
    """
    start_a, end_a, start_b, end_b = coords.T
    n = np.minimum(end_a - start_a + 1, end_b - start_b + 1)
    step = np.arange(n.sum()) - np.repeat(np.cumsum(n) - n, n)
    xs = np.repeat(start_a, n) + step
    ys = np.repeat(end_b, n) - step
    return xs, ys


def get_contact_matrix(records: pd.DataFrame, rna: str, size: Optional[int] = None,
                       representation: str = "auto", sample_id=None) -> ContactMatrix:
    """
    Build the contact matrix of one sample for one RNA.

    Only reads with both arms on ``rna`` are used, duplicate rows removed.

    Args:
        records: Hyb table (raw or canonical) of one sample
        rna: RNA of interest
        size: Matrix dimension; defaults to the largest coordinate of the
            selected reads. Pass the RNA length (see
            ``hyb_utils.get_reference_length``) to cover the whole transcript
        representation: 'auto', 'dense' or 'sparse'
        sample_id: Sample label stored on the matrix and used in messages

    Returns:
        ContactMatrix of shape ``(size, size)``

    Raises:
        EmptySubsetError: If no read has both arms on ``rna``
        CoordinateError: If an arm is inverted, a coordinate is below 1 or
            ``size`` is smaller than the largest coordinate
    """
    subset = select_rna(records, rna, both=True).drop_duplicates()
    require_rows(subset, sample_id, f"Contact matrix selection on {rna}")

    coords = subset[COORDINATE_COLUMNS].to_numpy(dtype=np.int64)
    read_ids = subset["read_id"].to_numpy()

    bad = (coords < 1).any(axis=1) | (coords[:, 1] < coords[:, 0]) | (coords[:, 3] < coords[:, 2])
    if bad.any():
        raise CoordinateError(
            f"Sample '{sample_id}': {int(bad.sum())} reads with inverted arms or "
            f"coordinates below 1: {list(read_ids[bad][:10])}"
        )

    max_coord = int(coords.max())
    if size is None:
        size = max_coord
    elif size < max_coord:
        raise CoordinateError(
            f"Sample '{sample_id}': matrix size {size} is smaller than the largest "
            f"coordinate {max_coord} on {rna}"
        )

    xs, ys = _rasterize(coords)
    if use_sparse(size * size, representation):
        counts = sparse.coo_matrix(
            (np.ones(len(xs), dtype=np.int64), (xs - 1, ys - 1)), shape=(size, size)
        ).tocsr()
    else:
        counts = np.zeros((size, size), dtype=np.int64)
        np.add.at(counts, (xs - 1, ys - 1), 1)

    return ContactMatrix(counts, rna=rna, sample_id=sample_id)


def get_matrices(hyb_dict: Dict[str, pd.DataFrame], rna: str, size: Optional[int] = None,
                 representation: str = "auto") -> Dict[str, ContactMatrix]:
    """
    Build one contact matrix per sample.

    Args:
        hyb_dict: Dictionary mapping sample id to hyb table
        rna: RNA of interest
        size: Common matrix dimension; defaults to each sample's largest coordinate
        representation: 'auto', 'dense' or 'sparse'

    Returns:
        Dictionary mapping sample id to ContactMatrix
    """
    return {
        sample_id: get_contact_matrix(df, rna, size=size, representation=representation,
                                      sample_id=sample_id)
        for sample_id, df in hyb_dict.items()
    }


def line_traces(matrices: Dict[str, ContactMatrix], row_or_col: str = "row") -> pd.DataFrame:
    """
    Per-position coverage profile of each sample.

    Args:
        matrices: Dictionary mapping sample id to ContactMatrix
        row_or_col: 'row' sums over the right arm (left-arm coverage),
            'col' sums over the left arm (right-arm coverage)

    Returns:
        Long DataFrame with columns ``sample``, ``pos`` (1-based) and ``chimeras``
    """
    if row_or_col not in ("row", "col"):
        raise ValueError(f"row_or_col must be 'row' or 'col', got '{row_or_col}'")

    frames = []
    for sample_id, cm in matrices.items():
        sums = cm.row_sums() if row_or_col == "row" else cm.col_sums()
        frames.append(pd.DataFrame({
            "sample": sample_id,
            "pos": np.arange(1, len(sums) + 1),
            "chimeras": sums,
        }))
    if not frames:
        return pd.DataFrame(columns=["sample", "pos", "chimeras"])
    return pd.concat(frames, ignore_index=True)


def resize_matrix(matrix: Union[ContactMatrix, np.ndarray], shape: Tuple[int, int]) -> np.ndarray:
    """
    Resize a matrix by bilinear interpolation, e.g. to shrink it for display.

    The corners of the new grid map onto the corners of the old one and the
    positions in between are spaced evenly.

    Args:
        matrix: ContactMatrix or 2-D array
        shape: Target (rows, cols)

    Returns:
        Float array of the requested shape
    """
    values = matrix.toarray() if isinstance(matrix, ContactMatrix) else np.asarray(matrix)
    if values.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got {values.ndim} dimensions")
    if min(values.shape) < 2 or min(shape) < 1:
        raise ValueError(f"Cannot resize a {values.shape} matrix to {shape}")

    old_rows, old_cols = values.shape
    interpolator = RegularGridInterpolator(
        (np.arange(old_rows), np.arange(old_cols)), values.astype(float), method="linear"
    )
    new_rows = np.linspace(0, old_rows - 1, shape[0])
    new_cols = np.linspace(0, old_cols - 1, shape[1])
    grid = np.stack(np.meshgrid(new_rows, new_cols, indexing="ij"), axis=-1)
    return interpolator(grid)
