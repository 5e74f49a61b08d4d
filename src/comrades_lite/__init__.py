"""
comrades_lite: A module for analysing RNA-RNA duplexes from chimeric reads
(COMRADES and similar proximity-ligation data in hyb format).

This package provides functionality for:
- Reading, subsampling and canonicalizing hyb records
- Contact matrices of intra-RNA duplexes
- Overlap graphs of duplex gaps and cluster extraction
- Region queries
"""

# Import core components
from .core import (
    HYB_COLUMNS,
    CoordinateError,
    EmptySubsetError,
    SampleSizeError,
)

# Import interval model
from .intervals import Interval, IntervalCollection, find_overlaps

# Import hyb reading utilities
from .hyb_utils import (
    read_hyb_file,
    read_hyb_files,
    validate_hyb_table,
    select_rna,
    subset_hyb_list,
    get_reference_length,
)

# Import canonicalization
from .canonicalize import swap_hybs, canonicalize_records

# Import interval collection builders
from .granges import HybIntervals, hyb_to_intervals, hyb_list_to_intervals

# Import contact matrix functions
from .contact_matrix import (
    ContactMatrix,
    get_contact_matrix,
    get_matrices,
    line_traces,
    resize_matrix,
)

# Import adjacency functions
from .adjacency import AdjacencyMatrix, EmptyAdjacency, score_overlaps, get_adjacency_matrix

# Import clustering functions
from .clusters import cluster_adjacency, cluster_sizes, top_clusters, extract_clusters

# Import region queries
from .regions import get_chimeras_from_region

# Version
__version__ = "0.1.0"
# Package metadata
__description__ = (
    "A module for contact matrices, overlap graphs and region queries of RNA-RNA duplexes"
)
