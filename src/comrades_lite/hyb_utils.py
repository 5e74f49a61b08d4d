"""
Hyb table reading and handling utilities for comrades_lite.

This module provides functions for reading chimeric-read records from hyb
files, validating them, selecting the reads of one RNA and subsampling
samples to a common size.
"""

import os
import warnings
import numpy as np
import pandas as pd
from typing import Dict, Optional, Union
from pyfaidx import Fasta

from .core import (
    HYB_COLUMNS,
    COORDINATE_COLUMNS,
    EmptySubsetError,
    SampleSizeError,
)


def read_hyb_file(path):
    """
    Read a hyb file into a pandas DataFrame.

    Args:
        path: Path to a tab-separated ``*hybrids.hyb`` file without header

    Returns:
        DataFrame with the 15 columns of ``core.HYB_COLUMNS``, duplicate rows removed

    Raises:
        ValueError: If the file does not have 15 fields per line or has
            non-numeric coordinates
    """
    df = pd.read_csv(path, sep="\t", header=None)

    if df.shape[1] != len(HYB_COLUMNS):
        raise ValueError(
            f"Hyb file '{path}' must have {len(HYB_COLUMNS)} columns, found {df.shape[1]}"
        )
    df.columns = HYB_COLUMNS
    for col in ["read_id", "name_a", "name_b"]:
        df[col] = df[col].astype(str)

    validate_hyb_table(df, label=os.path.basename(path))
    return df.drop_duplicates().reset_index(drop=True)


def read_hyb_files(directory, pattern="hybrids.hyb", verbose=False) -> Dict[str, pd.DataFrame]:
    """
    Read every hyb file in a directory.

    Args:
        directory: Directory containing the hyb files
        pattern: File name suffix selecting the files to read
        verbose: Print the name and row count of each file read

    Returns:
        Dictionary mapping sample id (file name without ``pattern`` and a
        trailing ``_`` or ``.``) to its DataFrame, in file name order
    """
    file_names = sorted(f for f in os.listdir(directory) if f.endswith(pattern))
    if not file_names:
        warnings.warn(f"No files ending in '{pattern}' found in {directory}")

    hyb_dict = {}
    for file_name in file_names:
        if verbose:
            print(f"Reading {file_name}")
        sample_id = file_name[: -len(pattern)].rstrip("_.") or file_name
        hyb_dict[sample_id] = read_hyb_file(os.path.join(directory, file_name))
        if verbose:
            print(f"  {len(hyb_dict[sample_id])} unique chimeric reads")
    return hyb_dict


def validate_hyb_table(df: pd.DataFrame, label: str = "") -> None:
    """
    Check that a DataFrame follows the hyb column schema.

    Args:
        df: Table to check
        label: Sample or file name used in error messages

    Raises:
        ValueError: If columns are missing or coordinates are not numeric
    """
    where = f" ({label})" if label else ""
    missing = [col for col in HYB_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Hyb table{where} is missing columns {missing}")

    for col in COORDINATE_COLUMNS:
        if not pd.api.types.is_integer_dtype(df[col]):
            raise ValueError(
                f"Coordinate column '{col}'{where} must be integer, got {df[col].dtype}"
            )


def select_rna(df: pd.DataFrame, rna: str, both: bool = True) -> pd.DataFrame:
    """
    Return the records of one RNA.

    Args:
        df: Hyb table
        rna: Reference RNA name
        both: Require both segments on ``rna`` (True) or at least one (False)

    Returns:
        New DataFrame with the matching rows, original order kept
    """
    on_a = df["name_a"].astype(str) == rna
    on_b = df["name_b"].astype(str) == rna
    mask = (on_a & on_b) if both else (on_a | on_b)
    return df[mask].copy()


def subset_hyb_list(hyb_dict: Dict[str, pd.DataFrame], rna: str, number: int,
                    seed: Optional[int] = None) -> Dict[str, pd.DataFrame]:
    """
    Randomly subsample each sample to the same number of intra-RNA reads.

    Only rows with both segments on ``rna`` are considered, which makes
    libraries of different depth directly comparable.

    Args:
        hyb_dict: Dictionary mapping sample id to hyb table
        rna: RNA of interest
        number: Number of reads to draw per sample, without replacement
        seed: Seed for the random generator, for reproducible subsets

    Returns:
        Dictionary with the same keys holding the sampled tables

    Raises:
        SampleSizeError: If a sample holds fewer than ``number`` reads
    """
    rng = np.random.default_rng(seed)
    subsets = {}
    for sample_id, df in hyb_dict.items():
        rna_df = select_rna(df, rna, both=True)
        if number > len(rna_df):
            raise SampleSizeError(
                f"Sample '{sample_id}' has {len(rna_df)} reads on {rna}, "
                f"cannot sample {number}"
            )
        rows = rng.choice(len(rna_df), size=number, replace=False)
        subsets[sample_id] = rna_df.iloc[rows].reset_index(drop=True)
    return subsets


def require_rows(df: pd.DataFrame, sample_id, what: str) -> None:
    """Raise EmptySubsetError if ``df`` has no rows."""
    if len(df) == 0:
        raise EmptySubsetError(f"{what} returned no records for sample '{sample_id}'")


def _load_reference(reference_fn: Union[str, Dict, Fasta]) -> Union[Dict, Fasta]:
    """Load reference sequences from file or return as-is if already loaded."""
    if isinstance(reference_fn, str):
        if not os.path.isfile(reference_fn):
            raise FileNotFoundError(f"Reference FASTA not found: {reference_fn}")
        return Fasta(reference_fn)
    return reference_fn


def get_reference_length(reference_fn: Union[str, Dict, Fasta], rna: str) -> int:
    """
    Length of one reference RNA.

    Args:
        reference_fn: FASTA path, ``pyfaidx.Fasta`` or dict of name -> sequence
        rna: Sequence name

    Returns:
        Number of nucleotides of ``rna``

    Raises:
        KeyError: If ``rna`` is not in the reference
    """
    reference = _load_reference(reference_fn)
    if rna not in reference:
        raise KeyError(f"RNA '{rna}' not found in reference")
    return len(reference[rna])
