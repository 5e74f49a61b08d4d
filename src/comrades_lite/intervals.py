"""
Interval model for comrades_lite.

This module provides a minimal GRanges-like representation of 1-based,
end-inclusive intervals on a single reference sequence, together with the
overlap search used by the adjacency builder.
"""

import numpy as np
import pandas as pd
from typing import List, Optional, Sequence, Tuple, Union
from dataclasses import dataclass

from .core import CoordinateError


@dataclass(frozen=True)
class Interval:
    """
    A single 1-based, end-inclusive interval.

    Attributes:
        start: First covered position
        end: Last covered position (``end < start`` marks an inverted interval)
    """
    start: int
    end: int

    @property
    def width(self) -> int:
        return self.end - self.start + 1

    @property
    def is_inverted(self) -> bool:
        return self.end < self.start

    def intersect_width(self, other: "Interval") -> int:
        """Number of positions shared with ``other`` (0 if disjoint)."""
        return max(0, min(self.end, other.end) - max(self.start, other.start) + 1)

    def overlaps(self, other: "Interval") -> bool:
        return self.intersect_width(other) > 0


@dataclass
class IntervalCollection:
    """
    Ordered intervals on one reference sequence.

    Intervals stay index-aligned with the record table they were derived
    from, so position ``i`` of every collection built from the same table
    refers to the same read.

    Attributes:
        seqname: Reference sequence name shared by all intervals
        starts: Start coordinates (1-based)
        ends: End coordinates (1-based, inclusive)
        names: Per-interval labels, usually read ids
        mcols: Optional per-interval metadata columns
    """
    seqname: str
    starts: np.ndarray
    ends: np.ndarray
    names: Optional[np.ndarray] = None
    mcols: Optional[pd.DataFrame] = None

    def __post_init__(self):
        self.starts = np.asarray(self.starts, dtype=np.int64)
        self.ends = np.asarray(self.ends, dtype=np.int64)
        if self.starts.shape != self.ends.shape:
            raise ValueError(
                f"starts and ends differ in length: {len(self.starts)} vs {len(self.ends)}"
            )
        if self.names is None:
            self.names = np.array([str(i) for i in range(len(self.starts))], dtype=object)
        else:
            self.names = np.asarray(self.names, dtype=object)
        if len(self.names) != len(self.starts):
            raise ValueError("names must have one entry per interval")
        if self.mcols is not None:
            if len(self.mcols) != len(self.starts):
                raise ValueError("mcols must have one row per interval")
            self.mcols = self.mcols.reset_index(drop=True)

    def __len__(self):
        return len(self.starts)

    def __getitem__(self, key):
        if isinstance(key, (int, np.integer)):
            return Interval(int(self.starts[key]), int(self.ends[key]))
        if isinstance(key, slice):
            key = np.arange(len(self))[key]
        return self.take(key)

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    @property
    def widths(self) -> np.ndarray:
        return self.ends - self.starts + 1

    def inverted(self) -> np.ndarray:
        """Boolean mask of intervals with ``end < start``."""
        return self.ends < self.starts

    def take(self, indices: Union[Sequence[int], np.ndarray]) -> "IntervalCollection":
        """Return a new collection holding ``indices`` in the given order."""
        indices = np.asarray(indices)
        if indices.dtype == bool:
            indices = np.flatnonzero(indices)
        indices = indices.astype(np.int64)
        mcols = None
        if self.mcols is not None:
            mcols = self.mcols.iloc[indices].reset_index(drop=True)
        return IntervalCollection(
            seqname=self.seqname,
            starts=self.starts[indices],
            ends=self.ends[indices],
            names=self.names[indices],
            mcols=mcols,
        )

    def with_mcols(self, **columns) -> "IntervalCollection":
        """Return a copy with extra metadata columns (scalars are broadcast)."""
        mcols = self.mcols.copy() if self.mcols is not None else pd.DataFrame(index=range(len(self)))
        for name, values in columns.items():
            mcols[name] = values
        return IntervalCollection(self.seqname, self.starts.copy(), self.ends.copy(),
                                  self.names.copy(), mcols)

    def validate(self, label: str = "") -> None:
        """
        Check that no interval is inverted.

        Raises:
            CoordinateError: Listing the names of inverted intervals
        """
        bad = self.inverted()
        if bad.any():
            where = f" in {label}" if label else ""
            offenders = list(self.names[bad][:10])
            raise CoordinateError(
                f"Found {int(bad.sum())} inverted intervals{where} (end < start): {offenders}"
            )

    def to_frame(self) -> pd.DataFrame:
        """Tabular view with seqnames, start, end, width, name and any mcols."""
        df = pd.DataFrame({
            "seqnames": self.seqname,
            "start": self.starts,
            "end": self.ends,
            "width": self.widths,
            "name": self.names,
        })
        if self.mcols is not None:
            df = pd.concat([df, self.mcols], axis=1)
        return df

    @classmethod
    def concat(cls, collections: List["IntervalCollection"],
               seqname: Optional[str] = None) -> "IntervalCollection":
        """Concatenate collections on the same reference sequence."""
        if not collections:
            return cls(seqname=seqname or "", starts=[], ends=[], names=[])
        seqnames = {c.seqname for c in collections}
        if len(seqnames) > 1:
            raise ValueError(f"Cannot combine intervals from several sequences: {sorted(seqnames)}")
        mcols = None
        if any(c.mcols is not None for c in collections):
            mcols = pd.concat(
                [c.mcols if c.mcols is not None else pd.DataFrame(index=range(len(c)))
                 for c in collections],
                ignore_index=True,
            )
        return cls(
            seqname=seqname or collections[0].seqname,
            starts=np.concatenate([c.starts for c in collections]),
            ends=np.concatenate([c.ends for c in collections]),
            names=np.concatenate([c.names for c in collections]),
            mcols=mcols,
        )


def intersect_widths(starts_x, ends_x, starts_y, ends_y) -> np.ndarray:
    """Parallel intersection widths, clipped at 0."""
    widths = np.minimum(ends_x, ends_y) - np.maximum(starts_x, starts_y) + 1
    return np.clip(widths, 0, None)


def find_overlaps(collection: IntervalCollection, drop_redundant: bool = False) -> Tuple[np.ndarray, np.ndarray]:
    """
    Find all pairs of distinct intervals sharing at least one position.

    Intervals are swept in start order; every interval after ``i`` whose
    start does not pass ``end_i`` overlaps it. Inverted intervals are never
    reported.

    Args:
        collection: Intervals to search
        drop_redundant: If True report each unordered pair once as
            ``(min, max)``; otherwise report both ``(i, j)`` and ``(j, i)``

    Returns:
        Tuple of (query_hits, subject_hits) index arrays, sorted by query then subject
    """
    valid = np.flatnonzero(~collection.inverted())
    if len(valid) < 2:
        empty = np.array([], dtype=np.int64)
        return empty, empty

    starts = collection.starts[valid]
    ends = collection.ends[valid]
    order = np.argsort(starts, kind="stable")
    sorted_starts = starts[order]
    sorted_ends = ends[order]

    # Last sorted position whose start is still inside each interval
    stop = np.searchsorted(sorted_starts, sorted_ends, side="right")
    counts = np.maximum(stop - np.arange(len(order)) - 1, 0)
    first = np.repeat(np.arange(len(order)), counts)
    offsets = np.arange(counts.sum()) - np.repeat(np.cumsum(counts) - counts, counts)
    second = first + 1 + offsets

    query = valid[order[first]]
    subject = valid[order[second]]
    lo = np.minimum(query, subject)
    hi = np.maximum(query, subject)

    if not drop_redundant:
        lo, hi = np.concatenate([lo, hi]), np.concatenate([hi, lo])

    sort = np.lexsort((hi, lo))
    return lo[sort].astype(np.int64), hi[sort].astype(np.int64)
