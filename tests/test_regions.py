"""
Tests for region queries.
"""

import pandas as pd
import pytest

from comrades_lite.core import EmptySubsetError
from comrades_lite.regions import arm_in_window, get_region, get_chimeras_from_region


@pytest.fixture
def hyb_dict(make_hyb):
    return {
        "control": make_hyb([
            ("c1", "18S", 50, 60, "18S", 200, 210),    # both ends inside
            ("c2", "18S", 55, 70, "18S", 190, 195),    # left starts on the boundary
            ("c3", "18S", 10, 100, "18S", 185, 230),   # both arms span the windows
            ("c4", "18S", 300, 310, "18S", 400, 410),  # elsewhere
        ]),
        "treated": make_hyb([
            ("t1", "18S", 40, 54, "18S", 215, 250),
            ("t2", "18S", 0, 55, "18S", 100, 190),     # ends exactly on both boundaries
        ]),
    }


def test_region_example(hyb_dict):
    regions = get_chimeras_from_region(hyb_dict, 0, 55, 190, 220)

    assert list(regions.keys()) == ["control", "treated"]
    assert regions["control"]["read_id"].tolist() == ["c1", "c3"]
    assert regions["treated"]["read_id"].tolist() == ["t1"]


def test_window_boundaries_are_exclusive():
    starts = pd.Series([55, 0, 10, 30, 56])
    ends = pd.Series([70, 55, 60, 40, 60])
    inside = arm_in_window(starts, ends, 0, 55)
    # 55..70 starts on the edge, 0..55 covers exactly the window
    assert inside.tolist() == [False, False, True, True, False]


def test_spanning_arm():
    starts = pd.Series([5, 10])
    ends = pd.Series([100, 50])
    assert arm_in_window(starts, ends, 10, 50).tolist() == [True, False]


def test_original_index_kept(hyb_dict):
    found = get_region(hyb_dict["control"], 0, 55, 190, 220)
    assert list(found.index) == [0, 2]
    found.loc[0, "dg"] = 0.0
    assert hyb_dict["control"].loc[0, "dg"] != 0.0


def test_query_is_idempotent(hyb_dict):
    once = get_chimeras_from_region(hyb_dict, 0, 55, 190, 220)
    twice = get_chimeras_from_region(once, 0, 55, 190, 220)
    for sample_id in once:
        pd.testing.assert_frame_equal(once[sample_id], twice[sample_id])


def test_empty_sample(hyb_dict):
    regions = get_chimeras_from_region(hyb_dict, 500, 600, 700, 800)
    assert all(len(df) == 0 for df in regions.values())
    assert list(regions["control"].columns) == list(hyb_dict["control"].columns)

    with pytest.raises(EmptySubsetError, match="control"):
        get_chimeras_from_region(hyb_dict, 500, 600, 700, 800, require_nonempty=True)
