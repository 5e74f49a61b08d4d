"""
Tests for contact matrix rasterization, resizing and line traces.
"""

import numpy as np
import pandas as pd
import pytest
from scipy import sparse

import comrades_lite.core as core
from comrades_lite.core import CoordinateError, EmptySubsetError
from comrades_lite.contact_matrix import (
    ContactMatrix,
    get_contact_matrix,
    get_matrices,
    line_traces,
    resize_matrix,
)
from comrades_lite.hyb_utils import get_reference_length


class TestRasterization:
    """Test how duplexes are drawn into the matrix."""

    def test_single_base_arms(self, make_hyb):
        records = make_hyb([
            ("r1", "18S", 5, 5, "18S", 10, 10),
            ("r2", "18S", 5, 5, "18S", 10, 10),
        ])
        cm = get_contact_matrix(records, "18S")

        assert cm.shape == (10, 10)
        assert cm[5, 10] == 2
        assert cm.total() == 2
        expected = np.zeros((10, 10), dtype=int)
        expected[4, 9] = 2
        assert np.array_equal(cm.toarray(), expected)

    def test_antiparallel_line(self, make_hyb):
        records = make_hyb([("r1", "18S", 1, 3, "18S", 8, 10)])
        cm = get_contact_matrix(records, "18S")

        assert cm[1, 10] == 1
        assert cm[2, 9] == 1
        assert cm[3, 8] == 1
        assert cm.total() == 3

    def test_longer_arm_truncated(self, make_hyb):
        records = make_hyb([("r1", "18S", 1, 5, "18S", 8, 9)])
        cm = get_contact_matrix(records, "18S")

        assert cm.nonzero()[["x", "y"]].values.tolist() == [[1, 9], [2, 8]]
        assert cm.total() == 2

    def test_duplicates_removed(self, make_hyb):
        records = make_hyb([("r1", "18S", 1, 3, "18S", 8, 10)])
        doubled = pd.concat([records, records], ignore_index=True)
        cm = get_contact_matrix(doubled, "18S")
        assert cm.total() == 3

    def test_only_intra_rna_reads(self, make_hyb):
        records = make_hyb([
            ("r1", "18S", 1, 3, "18S", 8, 10),
            ("r2", "18S", 1, 3, "28S", 80, 100),
        ])
        cm = get_contact_matrix(records, "18S")
        assert cm.size == 10
        assert cm.total() == 3

    def test_size_override(self, make_hyb):
        records = make_hyb([("r1", "18S", 1, 3, "18S", 8, 10)])
        cm = get_contact_matrix(records, "18S", size=40)
        assert cm.shape == (40, 40)
        assert cm[2, 9] == 1

    def test_size_from_reference(self, make_hyb):
        records = make_hyb([("r1", "18S", 1, 3, "18S", 8, 10)])
        size = get_reference_length({"18S": "ACGU" * 5}, "18S")
        cm = get_contact_matrix(records, "18S", size=size)
        assert cm.size == 20

    def test_size_too_small(self, make_hyb):
        records = make_hyb([("r1", "18S", 1, 3, "18S", 8, 10)])
        with pytest.raises(CoordinateError, match="smaller"):
            get_contact_matrix(records, "18S", size=9)

    def test_inverted_arm(self, make_hyb):
        records = make_hyb([("bad_read", "18S", 5, 1, "18S", 8, 10)])
        with pytest.raises(CoordinateError, match="bad_read"):
            get_contact_matrix(records, "18S", sample_id="control")

    def test_non_positive_coordinate(self, make_hyb):
        records = make_hyb([("zero_read", "18S", 0, 3, "18S", 8, 10)])
        with pytest.raises(CoordinateError, match="zero_read"):
            get_contact_matrix(records, "18S")

    def test_no_intra_rna_reads(self, make_hyb):
        records = make_hyb([("r1", "18S", 1, 3, "28S", 8, 10)])
        with pytest.raises(EmptySubsetError, match="control"):
            get_contact_matrix(records, "18S", sample_id="control")


class TestRepresentation:
    """Test dense and sparse storage."""

    @pytest.fixture(autouse=True)
    def _records(self, make_hyb):
        self.records = make_hyb([
            ("r1", "18S", 1, 30, "18S", 60, 95),
            ("r2", "18S", 10, 20, "18S", 70, 80),
            ("r3", "18S", 15, 40, "18S", 50, 75),
        ])

    def test_sparse_matches_dense(self):
        dense = get_contact_matrix(self.records, "18S", representation="dense")
        sparse_cm = get_contact_matrix(self.records, "18S", representation="sparse")

        assert not dense.is_sparse
        assert sparse_cm.is_sparse
        assert sparse.issparse(sparse_cm.counts)
        assert np.array_equal(dense.toarray(), sparse_cm.toarray())
        assert dense[10, 80] == sparse_cm[10, 80]
        assert np.array_equal(dense.row_sums(), sparse_cm.row_sums())
        assert np.array_equal(dense.region(10, 20, 70, 80), sparse_cm.region(10, 20, 70, 80))

    def test_auto_switches_above_limit(self, monkeypatch):
        assert not get_contact_matrix(self.records, "18S").is_sparse
        monkeypatch.setattr(core, "DENSE_CELL_LIMIT", 100)
        assert get_contact_matrix(self.records, "18S").is_sparse

    def test_unknown_representation(self):
        with pytest.raises(ValueError):
            get_contact_matrix(self.records, "18S", representation="csr")


class TestContactMatrixAccess:
    """Test the ContactMatrix accessors."""

    def setup_method(self):
        counts = np.zeros((4, 4), dtype=int)
        counts[0, 3] = 2
        counts[1, 2] = 1
        counts[3, 3] = 5
        self.cm = ContactMatrix(counts, rna="18S", sample_id="control")

    def test_one_based_indexing(self):
        assert self.cm[1, 4] == 2
        assert self.cm[4, 4] == 5
        with pytest.raises(IndexError):
            self.cm[0, 1]
        with pytest.raises(IndexError):
            self.cm[1, 5]

    def test_sums(self):
        assert self.cm.row_sums().tolist() == [2, 1, 0, 5]
        assert self.cm.col_sums().tolist() == [0, 0, 1, 7]

    def test_region_is_inclusive(self):
        assert self.cm.region(1, 2, 3, 4).tolist() == [[0, 2], [1, 0]]

    def test_to_frame_labels(self):
        df = self.cm.to_frame()
        assert list(df.index) == [1, 2, 3, 4]
        assert df.loc[1, 4] == 2

    def test_nonzero(self):
        cells = self.cm.nonzero()
        assert cells.values.tolist() == [[1, 4, 2], [2, 3, 1], [4, 4, 5]]

    def test_rejects_non_square(self):
        with pytest.raises(ValueError):
            ContactMatrix(np.zeros((2, 3)), rna="18S")


def test_get_matrices_and_line_traces(make_hyb):
    hyb_dict = {
        "control": make_hyb([("c1", "18S", 1, 3, "18S", 8, 10)]),
        "treated": make_hyb([("t1", "18S", 2, 2, "18S", 5, 5)]),
    }
    matrices = get_matrices(hyb_dict, "18S", size=10)
    assert list(matrices.keys()) == ["control", "treated"]
    assert matrices["treated"].sample_id == "treated"

    rows = line_traces(matrices, "row")
    assert list(rows.columns) == ["sample", "pos", "chimeras"]
    assert len(rows) == 20
    control = rows[rows["sample"] == "control"]
    assert control["chimeras"].tolist() == [1, 1, 1, 0, 0, 0, 0, 0, 0, 0]

    cols = line_traces(matrices, "col")
    treated = cols[cols["sample"] == "treated"].set_index("pos")["chimeras"]
    assert treated[5] == 1
    assert treated.sum() == 1

    with pytest.raises(ValueError):
        line_traces(matrices, "diag")


class TestResizeMatrix:
    """Test bilinear resizing."""

    def test_corners_preserved(self):
        values = np.arange(16, dtype=float).reshape(4, 4)
        resized = resize_matrix(values, (7, 7))
        assert resized.shape == (7, 7)
        assert resized[0, 0] == pytest.approx(0)
        assert resized[-1, -1] == pytest.approx(15)
        assert resized[0, -1] == pytest.approx(3)

    def test_linear_midpoints(self):
        values = np.array([[0.0, 2.0], [4.0, 6.0]])
        resized = resize_matrix(values, (3, 3))
        assert resized[1, 1] == pytest.approx(3.0)
        assert resized[0, 1] == pytest.approx(1.0)

    def test_shrink_contact_matrix(self, make_hyb):
        records = make_hyb([("r1", "18S", 1, 50, "18S", 51, 100)])
        cm = get_contact_matrix(records, "18S")
        small = resize_matrix(cm, (10, 10))
        assert small.shape == (10, 10)
        assert small.min() >= 0

    def test_invalid_input(self):
        with pytest.raises(ValueError):
            resize_matrix(np.zeros(5), (2, 2))
        with pytest.raises(ValueError):
            resize_matrix(np.zeros((1, 5)), (2, 2))
