"""
Interval collections derived from canonical hyb records.

Each sample yields three index-aligned collections: the left arms, the
right arms and the gaps between them.
"""

import warnings
import pandas as pd
from typing import Dict
from dataclasses import dataclass

from .hyb_utils import select_rna
from .intervals import IntervalCollection


@dataclass
class HybIntervals:
    """
    Left arm, right arm and gap intervals of one sample.

    Position ``i`` of each collection refers to row ``i`` of the canonical
    records. Collections can also be looked up by name, e.g. ``hi["gap"]``.
    """
    left: IntervalCollection
    right: IntervalCollection
    gap: IntervalCollection

    def __getitem__(self, key: str) -> IntervalCollection:
        if key not in ("left", "right", "gap"):
            raise KeyError(key)
        return getattr(self, key)

    def __len__(self):
        return len(self.left)


def hyb_to_intervals(records: pd.DataFrame, rna: str, strict: bool = False,
                     sample_id=None, both: bool = False) -> HybIntervals:
    """
    Build left, right and gap collections from canonical records.

    The gap of read ``i`` runs from the end of its left arm to the start of
    its right arm. When the arms overlap the gap is inverted (end < start).

    All three collections are placed on ``rna``. Records canonicalized with
    the 'position' or 'identity' policy may have one arm on another RNA;
    that arm is still placed on ``rna`` and its gap then spans two
    molecules. Pass ``both=True`` to keep only reads with both arms on
    ``rna``, in which case the collections are aligned with that subset.

    Args:
        records: Canonical records of one sample
        rna: Reference sequence name for the collections
        strict: Raise on inverted arms or gaps instead of passing them through
        sample_id: Sample label used in messages
        both: Keep only reads with both arms on ``rna``

    Returns:
        HybIntervals with ``left``, ``right`` and ``gap``

    Raises:
        CoordinateError: If ``strict`` and any arm or gap is inverted
    """
    if both:
        records = select_rna(records, rna, both=True)

    names = records["read_id"].to_numpy()
    left = IntervalCollection(rna, records["start_a"].to_numpy(), records["end_a"].to_numpy(), names)
    right = IntervalCollection(rna, records["start_b"].to_numpy(), records["end_b"].to_numpy(), names)
    gap = IntervalCollection(rna, left.ends.copy(), right.starts.copy(), names)

    prefix = f"sample '{sample_id}' " if sample_id is not None else ""
    if strict:
        left.validate(label=f"{prefix}left arms")
        right.validate(label=f"{prefix}right arms")
        gap.validate(label=f"{prefix}gaps")
    else:
        n_arms = int((left.inverted() | right.inverted()).sum())
        if n_arms:
            warnings.warn(f"{n_arms} reads with inverted arms in {prefix}records; kept unchanged")
        n_inverted = int(gap.inverted().sum())
        if n_inverted:
            warnings.warn(
                f"{n_inverted} inverted intervals in {prefix}gaps (right arm starts before left arm ends); "
                "kept unchanged"
            )

    return HybIntervals(left=left, right=right, gap=gap)


def hyb_list_to_intervals(hyb_dict: Dict[str, pd.DataFrame], rna: str,
                          strict: bool = False, both: bool = False) -> Dict[str, HybIntervals]:
    """
    Apply ``hyb_to_intervals`` to every sample.

    Args:
        hyb_dict: Dictionary mapping sample id to canonical records
        rna: Reference sequence name
        strict: Raise on inverted arms or gaps
        both: Keep only reads with both arms on ``rna``

    Returns:
        Dictionary mapping sample id to HybIntervals
    """
    return {
        sample_id: hyb_to_intervals(records, rna, strict=strict, sample_id=sample_id, both=both)
        for sample_id, records in hyb_dict.items()
    }
