"""
Aggregation of per-window results.

Folds window results into the dataset's time series and derives the
thresholded average network.
"""

from typing import Optional, Sequence, Tuple
import logging

import numpy as np

from ..core.constants import CENTRALITY_FIELDS
from ..core.exceptions import AnalysisError, IncompleteResultsError
from .network import NetworkAnalyzer
from .results import ConnectednessDataset, WindowResult

logger = logging.getLogger(__name__)


def average_adjacency(matrices: Sequence[np.ndarray]) -> Tuple[np.ndarray, float]:
    """
    Binarize the element-wise mean of adjacency matrices.

    Entries at or above the grand mean of the averaged matrix become 1,
    the others 0. The comparison is inclusive, so when no window has any
    edge every off-diagonal entry equals the zero threshold and is kept.

    Args:
        matrices: Window adjacency matrices (each N x N)

    Returns:
        Tuple of (binary N x N matrix with zero diagonal, threshold)
    """
    stacked = np.stack([np.asarray(am, dtype=float) for am in matrices])
    mean = np.mean(stacked, axis=0)
    threshold = float(np.mean(mean))

    binary = (mean >= threshold).astype(int)

    np.fill_diagonal(binary, 0)
    return binary, threshold


def finalize(
    dataset: ConnectednessDataset,
    results: Sequence[Optional[WindowResult]],
) -> ConnectednessDataset:
    """
    Fill the dataset from window-ordered results.

    Args:
        dataset: Dataset created by ConnectednessDataset.initialize
        results: One WindowResult per window, in window order

    Returns:
        The filled dataset

    Raises:
        IncompleteResultsError: If any window result is missing
    """
    t = dataset.t
    results = list(results)

    if len(results) > t:
        raise AnalysisError(f"Received {len(results)} window results for {t} windows")

    missing = [i for i in range(t) if i >= len(results) or results[i] is None]
    if missing:
        raise IncompleteResultsError(t, missing)

    for i, result in enumerate(results):
        dataset.adjacency_matrices[i] = result.adjacency
        for name in CENTRALITY_FIELDS.values():
            getattr(dataset, name)[i, :] = getattr(result.centralities, name)
        dataset.indicators[i, :] = result.indicators

    am, threshold = average_adjacency(dataset.adjacency_matrices)
    dataset.average_adjacency = am
    dataset.average_threshold = threshold
    dataset.average_centralities = NetworkAnalyzer.compute_centralities(am)

    logger.info(
        f"Average network: {int(am.sum())} edges over {t} windows "
        f"(threshold {threshold:.4f})"
    )

    return dataset
