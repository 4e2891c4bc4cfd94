"""Tests for aggregation of window results."""

import pytest
import numpy as np

from connectedness.analysis.aggregator import average_adjacency, finalize
from connectedness.analysis.network import NetworkAnalyzer
from connectedness.analysis.results import ConnectednessDataset, WindowResult
from connectedness.core.exceptions import AnalysisError, IncompleteResultsError
from connectedness.data.loader import ReturnPanel


def window_result(am):
    am = np.asarray(am, dtype=int)
    dci, cio, cioo = NetworkAnalyzer.compute_indicators(am)
    return WindowResult(
        adjacency=am,
        dci=dci,
        cio=cio,
        cioo=cioo,
        centralities=NetworkAnalyzer.compute_centralities(am),
    )


@pytest.fixture
def two_firm_dataset():
    """Empty dataset with 2 firms and 4 windows of 21 observations."""
    panel = ReturnPanel.from_array(np.random.RandomState(0).randn(24, 2))
    return ConnectednessDataset.initialize(panel, bw=21, sst=0.05, rp=False, k=0.06)


@pytest.fixture
def two_firm_results():
    """Edge 0 -> 1 in one window, 1 -> 0 in three."""
    return [
        window_result([[0, 1], [0, 0]]),
        window_result([[0, 0], [1, 0]]),
        window_result([[0, 0], [1, 0]]),
        window_result([[0, 0], [1, 0]]),
    ]


class TestAverageAdjacency:
    """Tests for the thresholded average network."""

    def test_threshold_is_inclusive(self):
        """Test entries equal to the grand mean are kept."""
        matrices = [
            np.array([[0, 1], [0, 0]]),
            np.array([[0, 0], [1, 0]]),
            np.array([[0, 0], [1, 0]]),
            np.array([[0, 0], [1, 0]]),
        ]

        am, threshold = average_adjacency(matrices)

        assert threshold == pytest.approx(0.25)
        np.testing.assert_array_equal(am, [[0, 1], [1, 0]])

    def test_below_threshold_dropped(self):
        """Test rare edges fall out of the average network."""
        matrices = [np.array([[0, 1, 1], [0, 0, 1], [0, 0, 0]])] * 3
        matrices.append(np.array([[0, 0, 0], [1, 0, 0], [0, 0, 0]]))

        am, threshold = average_adjacency(matrices)

        # mean has 0.75 on three entries and 0.25 on one, grand mean 0.277...
        assert threshold == pytest.approx((3 * 0.75 + 0.25) / 9)
        np.testing.assert_array_equal(am, [[0, 1, 1], [0, 0, 1], [0, 0, 0]])

    def test_no_edges(self):
        """Test entries equal to a zero threshold are still connected."""
        am, threshold = average_adjacency([np.zeros((3, 3))] * 4)

        assert threshold == 0.0
        np.testing.assert_array_equal(am, [[0, 1, 1], [1, 0, 1], [1, 1, 0]])

    def test_no_edges_finalized(self):
        """Test an edgeless sample finalizes to a complete average network."""
        panel = ReturnPanel.from_array(np.random.RandomState(0).randn(24, 3))
        dataset = ConnectednessDataset.initialize(panel, 21, 0.05, False, 0.06)
        results = [window_result(np.zeros((3, 3)))] * 4

        dataset = finalize(dataset, results)

        assert dataset.average_threshold == 0.0
        assert dataset.average_adjacency.sum() == 6
        np.testing.assert_allclose(dataset.average_centralities.degree_centrality, 1.0)
        np.testing.assert_allclose(dataset.average_centralities.katz, 1 / 3)
        assert not np.isnan(dataset.indicators).any()

    def test_binary_with_zero_diagonal(self):
        """Test the average network is binary with no self-loops."""
        rng = np.random.RandomState(5)
        matrices = []
        for _ in range(10):
            am = (rng.rand(6, 6) < 0.4).astype(int)
            np.fill_diagonal(am, 0)
            matrices.append(am)

        am, _ = average_adjacency(matrices)

        assert set(np.unique(am)) <= {0, 1}
        assert np.all(np.diag(am) == 0)


class TestFinalize:
    """Tests for finalize."""

    def test_fills_dataset(self, two_firm_dataset, two_firm_results):
        """Test every series and the average network are filled in."""
        dataset = finalize(two_firm_dataset, two_firm_results)

        assert dataset.is_complete
        assert not np.isnan(dataset.indicators).any()
        np.testing.assert_allclose(dataset.indicators[:, 0], 0.5)
        np.testing.assert_array_equal(dataset.degrees_out[:, 1], [0, 1, 1, 1])
        np.testing.assert_array_equal(dataset.average_adjacency, [[0, 1], [1, 0]])
        assert dataset.average_threshold == pytest.approx(0.25)
        np.testing.assert_allclose(dataset.average_centralities.degree_centrality, 1.0)

    def test_missing_slot(self, two_firm_dataset, two_firm_results):
        """Test finalization refuses incomplete results."""
        results = list(two_firm_results)
        results[2] = None

        with pytest.raises(IncompleteResultsError) as exc_info:
            finalize(two_firm_dataset, results)

        assert exc_info.value.missing == [2]

    def test_too_few_results(self, two_firm_dataset, two_firm_results):
        """Test missing trailing windows are reported."""
        with pytest.raises(IncompleteResultsError) as exc_info:
            finalize(two_firm_dataset, two_firm_results[:3])

        assert exc_info.value.missing == [3]

    def test_too_many_results(self, two_firm_dataset, two_firm_results):
        """Test surplus results are rejected."""
        with pytest.raises(AnalysisError):
            finalize(two_firm_dataset, two_firm_results + two_firm_results[:1])

    def test_deterministic(self, two_firm_results):
        """Test repeated finalization of the same results is identical."""
        panel = ReturnPanel.from_array(np.random.RandomState(0).randn(24, 2))
        datasets = [
            finalize(ConnectednessDataset.initialize(panel, 21, 0.05, False, 0.06), two_firm_results)
            for _ in range(2)
        ]

        np.testing.assert_array_equal(datasets[0].indicators, datasets[1].indicators)
        np.testing.assert_array_equal(datasets[0].katz, datasets[1].katz)
        np.testing.assert_array_equal(datasets[0].average_adjacency, datasets[1].average_adjacency)
