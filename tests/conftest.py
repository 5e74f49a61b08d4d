"""
Shared fixtures for comrades_lite tests.
"""

import os
import pandas as pd
import pytest

from comrades_lite.core import HYB_COLUMNS

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")


def build_hyb(rows):
    """
    Build a hyb table from short rows.

    Each row is ``(read_id, name_a, start_a, end_a, name_b, start_b, end_b)``;
    read coordinates, scores and the read sequence are filled in.
    """
    records = []
    for i, (read_id, name_a, start_a, end_a, name_b, start_b, end_b) in enumerate(rows):
        records.append([
            read_id, "ACGU" * 5, -10.0 - i,
            name_a, 1, 10, start_a, end_a, 1e-5 * (i + 1),
            name_b, 11, 20, start_b, end_b, 2e-5 * (i + 1),
        ])
    df = pd.DataFrame(records, columns=HYB_COLUMNS)
    for col in ["start_a", "end_a", "start_b", "end_b", "qstart_a", "qend_a", "qstart_b", "qend_b"]:
        df[col] = df[col].astype("int64")
    return df


@pytest.fixture
def make_hyb():
    """Factory fixture returning ``build_hyb``."""
    return build_hyb


@pytest.fixture
def data_dir():
    return DATA_DIR
