"""
Cluster assignment and extraction for comrades_lite.

Clustering itself is pluggable: any function turning an adjacency matrix
into a membership (interval index -> cluster id) can be used.
``cluster_adjacency`` provides networkx-based defaults. ``extract_clusters``
then pulls the arms of the reads in selected clusters out of the left and
right collections, tagged with their cluster and side.
"""

import warnings
import numpy as np
import pandas as pd
import networkx as nx
from typing import Callable, Dict, Iterable, List, Mapping, Sequence, Union

from .adjacency import AdjacencyMatrix, EmptyAdjacency
from .intervals import IntervalCollection

Membership = Union[Mapping[int, int], pd.Series, Sequence[int]]

CLUSTER_METHODS = ("louvain", "greedy_modularity", "connected_components")


def adjacency_to_graph(adjacency: Union[AdjacencyMatrix, EmptyAdjacency]) -> nx.Graph:
    """
    Undirected weighted graph with one node per interval.

    Intervals without any retained pair become isolated nodes.
    """
    graph = nx.Graph()
    graph.add_nodes_from(range(adjacency.n_intervals))
    if not adjacency.is_empty:
        pairs = adjacency.pairs
        graph.add_weighted_edges_from(
            zip(pairs["query"].astype(int), pairs["subject"].astype(int), pairs["weight"].astype(float))
        )
    return graph


def _communities(graph: nx.Graph, method, seed=None) -> List[set]:
    if callable(method):
        return [set(c) for c in method(graph)]
    if method not in CLUSTER_METHODS:
        raise ValueError(f"method must be one of {CLUSTER_METHODS} or a callable, got '{method}'")

    # Modularity is undefined without edge weight
    if method == "connected_components" or graph.size(weight="weight") == 0:
        return [set(c) for c in nx.connected_components(graph)]
    if method == "louvain":
        return [set(c) for c in nx.community.louvain_communities(graph, weight="weight", seed=seed)]
    return [set(c) for c in nx.community.greedy_modularity_communities(graph, weight="weight")]


def cluster_adjacency(adjacency: Union[AdjacencyMatrix, EmptyAdjacency],
                      method: Union[str, Callable[[nx.Graph], Iterable]] = "louvain",
                      seed=None) -> Dict[int, int]:
    """
    Cluster the intervals of an adjacency matrix.

    Args:
        adjacency: Result of ``get_adjacency_matrix``
        method: 'louvain', 'greedy_modularity', 'connected_components', or a
            callable taking a networkx graph and returning node sets
        seed: Random seed for 'louvain'

    Returns:
        Dictionary mapping interval index to cluster id. Ids start at 1 and
        are ordered by decreasing cluster size (ties by smallest member).
        Graphs with no edge weight fall back to connected components, so an
        EmptyAdjacency puts every interval in its own cluster.
    """
    graph = adjacency_to_graph(adjacency)
    communities = _communities(graph, method, seed=seed)
    communities = sorted((c for c in communities if c), key=lambda c: (-len(c), min(c)))

    membership = {}
    for cluster_id, members in enumerate(communities, start=1):
        for node in members:
            membership[int(node)] = cluster_id

    missing = set(graph.nodes) - set(membership)
    if missing:
        raise ValueError(f"Clustering left {len(missing)} intervals unassigned")
    return membership


def _as_membership(membership: Membership) -> pd.Series:
    if isinstance(membership, pd.Series):
        series = membership
    elif isinstance(membership, Mapping):
        series = pd.Series(dict(membership))
    else:
        series = pd.Series(list(membership))
    try:
        series.index = series.index.astype(np.int64)
    except (TypeError, ValueError):
        raise ValueError("Membership keys must be integer interval indices")
    return series


def cluster_sizes(membership: Membership) -> pd.Series:
    """Number of intervals per cluster, largest first."""
    counts = _as_membership(membership).value_counts()
    order = sorted(counts.index, key=lambda c: (-counts[c], c))
    return counts.loc[order]


def top_clusters(membership: Membership, n: int = 10) -> list:
    """Ids of the ``n`` largest clusters, largest first."""
    return list(cluster_sizes(membership).index[:n])


def extract_clusters(left: IntervalCollection, right: IntervalCollection,
                     membership: Membership, clusters: Iterable) -> IntervalCollection:
    """
    Collect the arms of the reads belonging to selected clusters.

    Clusters are processed in the order given; for each, the left arms of
    its reads come first, then the right arms, each in ascending read index
    and listed once.

    Args:
        left: Left arm collection of the sample
        right: Right arm collection, index-aligned with ``left``
        membership: Interval index -> cluster id (dict, Series or sequence)
        clusters: Cluster ids to keep, in output order

    Returns:
        IntervalCollection with ``mcols`` columns ``cluster`` and ``side``

    Raises:
        IndexError: If a membership index is outside the collections
    """
    if len(left) != len(right):
        raise ValueError(f"left and right collections differ in length: {len(left)} vs {len(right)}")

    membership = _as_membership(membership)
    indices = membership.index.to_numpy()
    if len(indices) and (indices.min() < 0 or indices.max() >= len(left)):
        raise IndexError(f"Membership refers to intervals outside 0..{len(left) - 1}")

    pieces = []
    for cluster in clusters:
        members = np.unique(indices[membership.to_numpy() == cluster])
        if len(members) == 0:
            warnings.warn(f"Cluster {cluster} has no members")
        pieces.append(left.take(members).with_mcols(cluster=cluster, side="left"))
        pieces.append(right.take(members).with_mcols(cluster=cluster, side="right"))

    return IntervalCollection.concat(pieces, seqname=left.seqname)
