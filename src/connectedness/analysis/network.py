"""
Network topology analysis module.

Provides connectedness indicators (DCI, CIO, CIOO) and node centralities
for directed causal adjacency matrices.
"""

from dataclasses import dataclass, fields
from typing import Sequence, Tuple
import logging

import numpy as np
import networkx as nx

from ..core.constants import (
    KATZ_MAX_ALPHA,
    KATZ_SPECTRAL_FACTOR,
    EIGENVECTOR_MAX_ITER,
    DEGENERATE_TOLERANCE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class CentralityMeasures:
    """Node-level measures of one network, each aligned to firm order."""
    betweenness: np.ndarray
    closeness: np.ndarray
    degree_centrality: np.ndarray
    eigenvector: np.ndarray
    katz: np.ndarray
    clustering: np.ndarray
    degrees: np.ndarray
    degrees_in: np.ndarray
    degrees_out: np.ndarray

    @classmethod
    def empty(cls, n: int) -> 'CentralityMeasures':
        """NaN-filled placeholder for n firms."""
        return cls(**{f.name: np.full(n, np.nan) for f in fields(cls)})

    def as_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


class NetworkAnalyzer:
    """
    Directed causal network analyzer.

    Implements:
    - Dynamic Causality Index and In+Out connection indicators
    - Betweenness and closeness centrality (directed shortest paths)
    - Degree, eigenvector centrality and clustering (underlying undirected graph)
    - Katz centrality (directed walks)
    """

    @staticmethod
    def off_diagonal(am: np.ndarray) -> np.ndarray:
        """Binary float copy of an adjacency matrix with zero diagonal."""
        am = np.asarray(am)
        if am.ndim != 2 or am.shape[0] != am.shape[1]:
            raise ValueError(f"Adjacency matrix must be square, got shape {am.shape}")
        binary = (am != 0).astype(float)
        np.fill_diagonal(binary, 0.0)
        return binary

    @staticmethod
    def to_digraph(am: np.ndarray) -> nx.DiGraph:
        """
        Convert an adjacency matrix to a NetworkX directed graph.

        Args:
            am: N x N adjacency matrix, (i, j) = edge i -> j

        Returns:
            DiGraph with nodes 0..N-1
        """
        return nx.from_numpy_array(NetworkAnalyzer.off_diagonal(am), create_using=nx.DiGraph)

    @staticmethod
    def group_labels(n: int, group_delimiters: Sequence[int]) -> np.ndarray:
        """
        Map each firm to its group index.

        Delimiter d closes a group after the d-th firm (1-based).

        Args:
            n: Number of firms
            group_delimiters: Increasing group delimiters

        Returns:
            Array of group indices, one per firm
        """
        return np.searchsorted(np.asarray(group_delimiters, dtype=int), np.arange(n), side='right')

    @staticmethod
    def compute_indicators(
        am: np.ndarray,
        group_delimiters: Sequence[int] = (),
    ) -> Tuple[float, float, float]:
        """
        Compute connectedness indicators of a directed network.

        DCI is the edge density. CIO averages each firm's In+Out connections
        over the 2(N-1) possible ones. CIOO does the same counting only
        connections with firms of other groups, over 2(N - group size).

        Args:
            am: N x N adjacency matrix
            group_delimiters: Group delimiters (empty: CIOO is 0)

        Returns:
            Tuple of (dci, cio, cioo)
        """
        binary = NetworkAnalyzer.off_diagonal(am)
        n = binary.shape[0]

        dci = float(binary.sum() / (n * (n - 1)))

        degrees_in = binary.sum(axis=0)
        degrees_out = binary.sum(axis=1)
        cio = float(np.mean((degrees_in + degrees_out) / (2.0 * (n - 1))))

        if len(group_delimiters) == 0:
            return dci, cio, 0.0

        labels = NetworkAnalyzer.group_labels(n, group_delimiters)
        cross = binary * (labels[:, None] != labels[None, :])
        cross_io = cross.sum(axis=0) + cross.sum(axis=1)

        sizes = np.bincount(labels)[labels]
        possible = 2.0 * (n - sizes)
        ratio = np.divide(cross_io, possible, out=np.zeros(n), where=possible > 0)
        cioo = float(np.mean(ratio))

        return dci, cio, cioo

    @classmethod
    def compute_centralities(cls, am: np.ndarray) -> CentralityMeasures:
        """
        Compute node centralities of a directed network.

        Isolated nodes get 0 for every measure.

        Args:
            am: N x N adjacency matrix

        Returns:
            CentralityMeasures
        """
        binary = cls.off_diagonal(am)
        n = binary.shape[0]

        degrees_in = binary.sum(axis=0)
        degrees_out = binary.sum(axis=1)
        undirected = ((binary + binary.T) > 0).astype(float)

        digraph = nx.from_numpy_array(binary, create_using=nx.DiGraph)
        graph = nx.from_numpy_array(undirected)

        measures = CentralityMeasures(
            betweenness=cls._betweenness(digraph, n),
            closeness=cls._closeness(digraph, n),
            degree_centrality=cls._degree_centrality(graph, n),
            eigenvector=cls._eigenvector(graph, n),
            katz=cls._katz(digraph, n),
            clustering=cls._clustering(graph, n),
            degrees=degrees_in + degrees_out,
            degrees_in=degrees_in,
            degrees_out=degrees_out,
        )

        return CentralityMeasures(**{
            name: np.nan_to_num(np.asarray(values, dtype=float), nan=0.0, posinf=0.0, neginf=0.0)
            for name, values in measures.as_dict().items()
        })

    @staticmethod
    def _betweenness(digraph: nx.DiGraph, n: int) -> np.ndarray:
        """Directed betweenness normalized by (N-1)(N-2)."""
        bc = nx.betweenness_centrality(digraph, normalized=True)
        return np.array([bc[i] for i in range(n)])

    @staticmethod
    def _closeness(digraph: nx.DiGraph, n: int) -> np.ndarray:
        """Inverse mean outward distance over reachable nodes."""
        # NetworkX measures incoming distance on directed graphs
        cc = nx.closeness_centrality(digraph.reverse(copy=False), wf_improved=False)
        return np.array([cc[i] for i in range(n)])

    @staticmethod
    def _degree_centrality(graph: nx.Graph, n: int) -> np.ndarray:
        """
        Distinct neighbours in the underlying undirected graph over N-1.

        A reciprocal pair i <-> j counts as one neighbour, so the measure
        stays within [0, 1] and equals 1 on a complete graph. It is not
        (in + out) / (N-1), which double counts reciprocal edges.
        """
        dc = nx.degree_centrality(graph)
        return np.array([dc[i] for i in range(n)])

    @staticmethod
    def _eigenvector(graph: nx.Graph, n: int) -> np.ndarray:
        """Dominant eigenvector of the symmetrized adjacency, summing to 1."""
        active = [i for i in range(n) if graph.degree(i) > 0]
        if not active:
            return np.zeros(n)

        # Power iteration; the numpy variant rejects disconnected graphs
        ec = nx.eigenvector_centrality(graph.subgraph(active), max_iter=EIGENVECTOR_MAX_ITER)
        values = np.array([ec.get(i, 0.0) for i in range(n)])
        return values / values.sum()

    @staticmethod
    def _katz(digraph: nx.DiGraph, n: int) -> np.ndarray:
        """
        Katz centrality from incoming walks, summing to 1.

        x = sum_{k>=1} alpha^k (A^T)^k 1, with alpha below 1 / rho(A).
        """
        degrees_in = np.array([digraph.in_degree(i) for i in range(n)])
        if degrees_in.sum() == 0:
            return np.zeros(n)

        rho = float(np.max(np.abs(nx.adjacency_spectrum(digraph))))
        if rho > DEGENERATE_TOLERANCE:
            alpha = min(KATZ_MAX_ALPHA, KATZ_SPECTRAL_FACTOR / rho)
        else:
            alpha = KATZ_MAX_ALPHA

        # beta = 1 counts the empty walk, which is removed below
        kz = nx.katz_centrality_numpy(digraph, alpha=alpha, beta=1.0, normalized=False)
        kc = np.array([kz[i] for i in range(n)]) - 1.0
        kc = np.clip(kc, 0.0, None)
        kc[degrees_in == 0] = 0.0
        return kc / kc.sum()

    @staticmethod
    def _clustering(graph: nx.Graph, n: int) -> np.ndarray:
        """Local clustering coefficient of the underlying undirected graph."""
        clc = nx.clustering(graph)
        return np.array([clc[i] for i in range(n)])
