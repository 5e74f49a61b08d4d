"""
Duplex orientation canonicalization for comrades_lite.

Hyb records list the two arms of a duplex in read order. Before arms can be
compared across reads they are reassigned to fixed left/right slots: slot
``a`` becomes the left arm and slot ``b`` the right arm.

Policies:
    position       keep reads touching the RNA; the arm starting first is left
    position_both  as ``position`` but both arms must lie on the RNA
    identity       keep reads touching the RNA; the arm on the RNA is left
"""

import warnings
import pandas as pd
from typing import Dict

from .core import CANONICAL_POLICIES, TIE_BREAKS, EmptySubsetError, segment_columns


def swap_segments(df: pd.DataFrame, mask) -> pd.DataFrame:
    """
    Exchange segment ``a`` and segment ``b`` on the rows selected by ``mask``.

    Whole segments move together (name, read coordinates, reference
    coordinates, score). The input is left untouched.
    """
    out = df.copy()
    for col_a, col_b in zip(segment_columns("a"), segment_columns("b")):
        out[col_a] = df[col_a].where(~mask, df[col_b])
        out[col_b] = df[col_b].where(~mask, df[col_a])
    return out


def canonicalize_records(df: pd.DataFrame, rna: str, policy: str = "position",
                         tie_break: str = "first") -> pd.DataFrame:
    """
    Canonicalize the records of one sample.

    Args:
        df: Hyb table of one sample
        rna: Reference RNA name
        policy: One of 'position', 'position_both', 'identity'
        tie_break: For 'identity', how to orient reads with both arms on
            ``rna``: 'first' keeps segment ``a`` on the left, 'position'
            puts the arm starting first on the left

    Returns:
        New DataFrame of canonical records, input row order kept, index reset
    """
    if policy not in CANONICAL_POLICIES:
        raise ValueError(f"Unknown canonicalization policy: {policy}")
    if tie_break not in TIE_BREAKS:
        raise ValueError(f"tie_break must be one of {TIE_BREAKS}, got '{tie_break}'")

    on_a = df["name_a"].astype(str) == rna
    on_b = df["name_b"].astype(str) == rna

    if policy == "position_both":
        keep = on_a & on_b
    else:
        keep = on_a | on_b
    selected = df[keep]
    on_a, on_b = on_a[keep], on_b[keep]

    # Equal starts stay as they are
    later_a = selected["start_a"] > selected["start_b"]
    if policy == "identity":
        swap = ~on_a
        if tie_break == "position":
            swap = swap | (on_a & on_b & later_a)
    else:
        swap = later_a

    return swap_segments(selected, swap).reset_index(drop=True)


def swap_hybs(hyb_dict: Dict[str, pd.DataFrame], rna: str, policy: str = "position",
              tie_break: str = "first", require_nonempty: bool = False) -> Dict[str, pd.DataFrame]:
    """
    Canonicalize every sample of a hyb dictionary.

    Args:
        hyb_dict: Dictionary mapping sample id to hyb table
        rna: Reference RNA name
        policy: One of 'position', 'position_both', 'identity'
        tie_break: See ``canonicalize_records``
        require_nonempty: Raise instead of warning when a sample keeps no reads

    Returns:
        Dictionary with the same keys holding canonical records

    Raises:
        EmptySubsetError: If ``require_nonempty`` and a sample keeps no reads

    Example:
        >>> swapped = swap_hybs(hyb_dict, "18S", policy="identity")
    """
    swapped = {}
    for sample_id, df in hyb_dict.items():
        records = canonicalize_records(df, rna, policy=policy, tie_break=tie_break)
        if len(records) == 0:
            message = f"Canonicalization ({policy}) kept no reads on {rna} for sample '{sample_id}'"
            if require_nonempty:
                raise EmptySubsetError(message)
            warnings.warn(message)
        swapped[sample_id] = records
    return swapped
