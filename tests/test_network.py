"""Tests for network analysis module."""

import pytest
import numpy as np
import networkx as nx

from connectedness.analysis.network import NetworkAnalyzer, CentralityMeasures


def complete(n):
    am = np.ones((n, n), dtype=int)
    np.fill_diagonal(am, 0)
    return am


class TestIndicators:
    """Tests for DCI, CIO and CIOO."""

    def test_disconnected(self):
        """Test an edgeless network has zero indicators."""
        dci, cio, cioo = NetworkAnalyzer.compute_indicators(np.zeros((5, 5)), (2,))

        assert (dci, cio, cioo) == (0.0, 0.0, 0.0)

    def test_fully_connected(self):
        """Test a complete network has unit indicators."""
        dci, cio, cioo = NetworkAnalyzer.compute_indicators(complete(4), (2,))

        assert dci == pytest.approx(1.0)
        assert cio == pytest.approx(1.0)
        assert cioo == pytest.approx(1.0)

    def test_cioo_with_groups(self):
        """Test only cross-group connections count towards CIOO."""
        am = np.zeros((4, 4), dtype=int)
        am[0, 1] = 1  # within group
        am[0, 2] = 1  # across groups

        dci, cio, cioo = NetworkAnalyzer.compute_indicators(am, (2,))

        assert dci == pytest.approx(2 / 12)
        assert cio == pytest.approx(1 / 6)
        assert cioo == pytest.approx(0.125)

    def test_cioo_without_groups(self):
        """Test CIOO is zero when firms are not grouped."""
        _, _, cioo = NetworkAnalyzer.compute_indicators(complete(4))

        assert cioo == 0.0

    def test_diagonal_ignored(self):
        """Test self-loops never count as edges."""
        dci, _, _ = NetworkAnalyzer.compute_indicators(np.eye(3))

        assert dci == 0.0

    def test_group_labels(self):
        """Test delimiter d closes a group after the d-th firm."""
        labels = NetworkAnalyzer.group_labels(5, (2, 4))

        np.testing.assert_array_equal(labels, [0, 0, 1, 1, 2])

    def test_non_square(self):
        """Test non-square matrices are rejected."""
        with pytest.raises(ValueError):
            NetworkAnalyzer.compute_indicators(np.zeros((2, 3)))


class TestCentralities:
    """Tests for node centralities."""

    def test_disconnected(self):
        """Test every measure is zero on an edgeless network."""
        measures = NetworkAnalyzer.compute_centralities(np.zeros((4, 4)))

        assert isinstance(measures, CentralityMeasures)
        for name, values in measures.as_dict().items():
            assert values.shape == (4,), name
            assert np.all(values == 0.0), name

    def test_fully_connected(self):
        """Test a complete network gives uniform centralities."""
        m = NetworkAnalyzer.compute_centralities(complete(4))

        np.testing.assert_allclose(m.degree_centrality, 1.0)
        np.testing.assert_allclose(m.closeness, 1.0)
        np.testing.assert_allclose(m.betweenness, 0.0)
        np.testing.assert_allclose(m.clustering, 1.0)
        np.testing.assert_allclose(m.eigenvector, 0.25)
        np.testing.assert_allclose(m.katz, 0.25)
        np.testing.assert_allclose(m.degrees_in, 3.0)
        np.testing.assert_allclose(m.degrees_out, 3.0)
        np.testing.assert_allclose(m.degrees, 6.0)

    def test_isolated_node(self):
        """Test an isolated node scores zero and nothing is NaN."""
        am = np.zeros((5, 5), dtype=int)
        am[0, 1] = am[0, 2] = am[0, 3] = 1

        m = NetworkAnalyzer.compute_centralities(am)

        for name, values in m.as_dict().items():
            assert np.all(np.isfinite(values)), name
            assert values[4] == 0.0, name

        assert m.eigenvector.sum() == pytest.approx(1.0)
        assert m.katz.sum() == pytest.approx(1.0)

    def test_star_out(self):
        """Test directed measures of a node that only sends edges."""
        am = np.zeros((4, 4), dtype=int)
        am[0, 1] = am[0, 2] = am[0, 3] = 1

        m = NetworkAnalyzer.compute_centralities(am)

        assert m.closeness[0] == pytest.approx(1.0)
        assert m.closeness[1] == 0.0
        assert m.katz[0] == 0.0
        np.testing.assert_allclose(m.katz[1:], 1 / 3)
        assert m.degree_centrality[0] == pytest.approx(1.0)
        assert m.eigenvector[0] > m.eigenvector[1]

    def test_chain_betweenness(self):
        """Test the middle of a directed chain lies on the only long path."""
        am = np.zeros((3, 3), dtype=int)
        am[0, 1] = am[1, 2] = 1

        m = NetworkAnalyzer.compute_centralities(am)

        np.testing.assert_allclose(m.betweenness, [0.0, 0.5, 0.0])

    def test_katz_prefers_reachable_nodes(self):
        """Test nodes reached by longer walks score higher."""
        am = np.zeros((3, 3), dtype=int)
        am[0, 1] = am[1, 2] = 1

        m = NetworkAnalyzer.compute_centralities(am)

        assert m.katz[0] == 0.0
        assert m.katz[2] > m.katz[1] > 0.0
        assert m.katz.sum() == pytest.approx(1.0)

    def test_katz_chain_values(self):
        """Test Katz on a chain counts incoming walks with alpha capped at 0.1."""
        am = np.zeros((3, 3), dtype=int)
        am[0, 1] = am[1, 2] = 1

        m = NetworkAnalyzer.compute_centralities(am)

        # node 1 is reached by one walk of length 1, node 2 by walks of length 1 and 2
        np.testing.assert_allclose(m.katz, np.array([0.0, 0.1, 0.11]) / 0.21)

    def test_eigenvector_disjoint_pairs(self):
        """Test disconnected components get a finite eigenvector summing to 1."""
        am = np.zeros((4, 4), dtype=int)
        am[0, 1] = am[1, 0] = 1
        am[2, 3] = am[3, 2] = 1

        m = NetworkAnalyzer.compute_centralities(am)

        np.testing.assert_allclose(m.eigenvector, 0.25, atol=1e-6)

    def test_eigenvector_two_nodes(self):
        """Test a single reciprocal pair shares the eigenvector equally."""
        m = NetworkAnalyzer.compute_centralities(np.array([[0, 1], [1, 0]]))

        np.testing.assert_allclose(m.eigenvector, 0.5, atol=1e-6)
        np.testing.assert_allclose(m.katz, 0.5)

    def test_degree_centrality_reciprocal_pair(self):
        """Test a reciprocal pair counts as one neighbour in degree centrality."""
        am = np.zeros((3, 3), dtype=int)
        am[0, 1] = am[1, 0] = 1

        m = NetworkAnalyzer.compute_centralities(am)

        assert m.degrees[0] == 2.0
        np.testing.assert_allclose(m.degree_centrality, [0.5, 0.5, 0.0])

    def test_matches_networkx_clustering(self):
        """Test clustering agrees with NetworkX on the undirected graph."""
        rng = np.random.RandomState(3)
        am = (rng.rand(8, 8) < 0.3).astype(int)
        np.fill_diagonal(am, 0)

        m = NetworkAnalyzer.compute_centralities(am)
        G = nx.from_numpy_array(((am + am.T) > 0).astype(int))
        expected = [nx.clustering(G)[i] for i in range(8)]

        np.testing.assert_allclose(m.clustering, expected)

    def test_empty_placeholder(self):
        """Test the NaN placeholder has one entry per firm."""
        m = CentralityMeasures.empty(3)

        assert np.all(np.isnan(m.katz))
        assert len(m.as_dict()) == 9


class TestToDigraph:
    """Tests for graph conversion."""

    def test_edge_direction(self):
        """Test entry (i, j) becomes edge i -> j."""
        am = np.zeros((3, 3), dtype=int)
        am[2, 0] = 1

        G = NetworkAnalyzer.to_digraph(am)

        assert list(G.edges()) == [(2, 0)]
        assert G.number_of_nodes() == 3
