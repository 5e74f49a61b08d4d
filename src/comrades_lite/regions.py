"""
Region queries on canonical hyb records.
"""

import pandas as pd
from typing import Dict

from .core import EmptySubsetError


def arm_in_window(starts: pd.Series, ends: pd.Series, window_start, window_end) -> pd.Series:
    """
    Arms touching an open window.

    An arm qualifies when its start or its end lies strictly inside
    ``(window_start, window_end)``, or when it spans the whole window.
    """
    return (
        ((starts > window_start) & (starts < window_end))
        | ((ends > window_start) & (ends < window_end))
        | ((ends > window_end) & (starts < window_start))
    )


def get_region(records: pd.DataFrame, ls, le, rs, re) -> pd.DataFrame:
    """
    Reads of one sample whose left arm touches ``(ls, le)`` and right arm ``(rs, re)``.

    Args:
        records: Canonical records of one sample
        ls, le: Left arm window
        rs, re: Right arm window

    Returns:
        New DataFrame with the matching rows, original order and index kept
    """
    left = arm_in_window(records["start_a"], records["end_a"], ls, le)
    right = arm_in_window(records["start_b"], records["end_b"], rs, re)
    return records[left & right].copy()


def get_chimeras_from_region(hyb_dict: Dict[str, pd.DataFrame], ls, le, rs, re,
                             require_nonempty: bool = False) -> Dict[str, pd.DataFrame]:
    """
    Find the reads supporting a duplex region in every sample.

    Args:
        hyb_dict: Dictionary mapping sample id to canonical records
        ls, le: Left arm window
        rs, re: Right arm window
        require_nonempty: Raise when a sample has no supporting read

    Returns:
        Dictionary with the same keys holding the supporting reads

    Raises:
        EmptySubsetError: If ``require_nonempty`` and a sample has no match
    """
    regions = {}
    for sample_id, records in hyb_dict.items():
        found = get_region(records, ls, le, rs, re)
        if len(found) == 0 and require_nonempty:
            raise EmptySubsetError(
                f"No reads in sample '{sample_id}' support region "
                f"left ({ls}, {le}) right ({rs}, {re})"
            )
        regions[sample_id] = found
    return regions
