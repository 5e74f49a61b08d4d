"""
Overlap-based adjacency matrices for clustering duplex gaps.

Intervals that overlap are connected, and the connection is weighted by how
similar the two intervals are. The matrix is the input of whichever graph
clustering is applied next (see ``clusters.cluster_adjacency``).

Modes:
    none        every overlapping pair gets weight 1
    nucleotide  ``cutoff - (max(width_i, width_j) - overlap)``, kept when
                ``0 <= weight <= cutoff``
    perc        ``1 - overlap / max_width``, kept when ``weight >= cutoff``;
                ``max_width`` is the widest interval of the whole collection,
                not of the pair
"""

import numpy as np
import pandas as pd
from typing import Union
from dataclasses import dataclass
from scipy import sparse

from .core import ADJACENCY_MODES, use_sparse
from .intervals import IntervalCollection, find_overlaps, intersect_widths


@dataclass
class AdjacencyMatrix:
    """
    Weighted overlap graph over the intervals of one collection.

    Attributes:
        matrix: ``n x n`` symmetric weights (numpy array or scipy.sparse CSR),
            row/column ``i`` is interval ``i`` of the collection
        pairs: Retained pairs with columns query, subject, overlap, weight
        names: Interval names, aligned with the matrix rows
        mode: Weighting mode used
        cutoff: Cutoff used
    """
    matrix: Union[np.ndarray, sparse.csr_matrix]
    pairs: pd.DataFrame
    names: np.ndarray
    mode: str
    cutoff: float

    is_empty = False

    @property
    def n_intervals(self) -> int:
        return self.matrix.shape[0]

    @property
    def is_sparse(self) -> bool:
        return sparse.issparse(self.matrix)

    def toarray(self) -> np.ndarray:
        return self.matrix.toarray() if self.is_sparse else np.array(self.matrix)

    def to_frame(self) -> pd.DataFrame:
        """Dense DataFrame labelled with interval names."""
        return pd.DataFrame(self.toarray(), index=self.names, columns=self.names)


@dataclass
class EmptyAdjacency:
    """
    Result of an adjacency build in which no pair passed the cutoff.

    Attributes:
        names: Interval names of the collection
        mode: Weighting mode used
        cutoff: Cutoff used
    """
    names: np.ndarray
    mode: str
    cutoff: float

    is_empty = True

    @property
    def n_intervals(self) -> int:
        return len(self.names)


AdjacencyResult = Union[AdjacencyMatrix, EmptyAdjacency]


def _pair_table(query, subject, overlap, weight) -> pd.DataFrame:
    return pd.DataFrame({
        "query": query.astype(np.int64),
        "subject": subject.astype(np.int64),
        "overlap": overlap.astype(np.int64),
        "weight": weight,
    })


def score_overlaps(collection: IntervalCollection, mode: str, cutoff: float) -> pd.DataFrame:
    """
    Find overlapping pairs and weight them.

    Args:
        collection: Intervals to compare, typically the gap collection
        mode: One of 'none', 'nucleotide', 'perc'
        cutoff: Mode-specific cutoff, ignored by 'none'

    Returns:
        DataFrame of retained pairs with columns query, subject, overlap, weight.
        'none' lists both orders of each pair, the other modes list each
        unordered pair once with ``query < subject``.
    """
    if mode not in ADJACENCY_MODES:
        raise ValueError(f"mode must be one of {ADJACENCY_MODES}, got '{mode}'")

    query, subject = find_overlaps(collection, drop_redundant=(mode != "none"))
    starts, ends, widths = collection.starts, collection.ends, collection.widths
    overlap = intersect_widths(starts[query], ends[query], starts[subject], ends[subject])

    if mode == "none":
        return _pair_table(query, subject, overlap, np.ones(len(query)))

    if mode == "nucleotide":
        weight = cutoff - (np.maximum(widths[query], widths[subject]) - overlap)
        keep = (weight >= 0) & (weight <= cutoff)
    else:
        max_width = widths.max() if len(widths) else 0
        if max_width < 1:
            return _pair_table(query[:0], subject[:0], overlap[:0], np.array([], dtype=float))
        weight = 1 - overlap / max_width
        # Boundary is inclusive; absorb float noise such as 1 - 0.1 vs 0.9
        keep = (weight >= cutoff) | np.isclose(weight, cutoff, rtol=0, atol=1e-12)

    return _pair_table(query[keep], subject[keep], overlap[keep], weight[keep])


def get_adjacency_matrix(collection: IntervalCollection, mode: str = "nucleotide",
                         cutoff: float = 5, representation: str = "auto") -> AdjacencyResult:
    """
    Build the weighted adjacency matrix of a collection.

    Args:
        collection: Intervals to compare, typically ``HybIntervals.gap``
        mode: One of 'none', 'nucleotide', 'perc'
        cutoff: Maximum nucleotide difference ('nucleotide') or minimum
            weight ('perc'); ignored by 'none'
        representation: 'auto', 'dense' or 'sparse'

    Returns:
        AdjacencyMatrix, or EmptyAdjacency when 'perc' retains no pair

    Example:
        >>> adj = get_adjacency_matrix(intervals["gap"], "nucleotide", 5)
        >>> if not adj.is_empty:
        ...     membership = cluster_adjacency(adj)
    """
    pairs = score_overlaps(collection, mode, cutoff)
    n = len(collection)

    if mode == "perc" and len(pairs) == 0:
        return EmptyAdjacency(names=collection.names.copy(), mode=mode, cutoff=cutoff)

    rows = pairs["query"].to_numpy()
    cols = pairs["subject"].to_numpy()
    weights = pairs["weight"].to_numpy(dtype=float)
    if mode != "none":
        rows, cols = np.concatenate([rows, cols]), np.concatenate([cols, rows])
        weights = np.concatenate([weights, weights])

    if use_sparse(n * n, representation):
        matrix = sparse.csr_matrix((weights, (rows, cols)), shape=(n, n))
    else:
        matrix = np.zeros((n, n), dtype=float)
        matrix[rows, cols] = weights

    return AdjacencyMatrix(matrix=matrix, pairs=pairs, names=collection.names.copy(),
                           mode=mode, cutoff=cutoff)
