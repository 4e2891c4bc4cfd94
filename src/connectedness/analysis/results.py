"""
Result containers for the connectedness engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from ..core.constants import (
    CENTRALITY_FIELDS,
    LABELS_CENTRALITIES,
    LABELS_INDICATORS,
)
from ..data.loader import ReturnPanel
from .network import CentralityMeasures


@dataclass(frozen=True, eq=False)
class WindowResult:
    """Causal network and its measures for one rolling window."""
    adjacency: np.ndarray
    dci: float
    cio: float
    cioo: float
    centralities: CentralityMeasures

    @property
    def indicators(self) -> Tuple[float, float, float]:
        return (self.dci, self.cio, self.cioo)


@dataclass(eq=False)
class ConnectednessDataset:
    """
    Aggregate connectedness results.

    Time series are T x N matrices (one row per window, aligned to firm
    order); ``indicators`` is T x 3 (DCI, CIO, CIOO). Everything is NaN
    until the aggregator fills it in.
    """
    firms: List[str]
    dates: pd.Index
    bw: int
    sst: float
    rp: bool
    k: float
    group_delimiters: Tuple[int, ...] = ()
    group_names: Tuple[str, ...] = ()
    created: datetime = field(default_factory=datetime.now)

    adjacency_matrices: List[Optional[np.ndarray]] = field(default_factory=list)
    betweenness: Optional[np.ndarray] = None
    closeness: Optional[np.ndarray] = None
    degree_centrality: Optional[np.ndarray] = None
    eigenvector: Optional[np.ndarray] = None
    katz: Optional[np.ndarray] = None
    clustering: Optional[np.ndarray] = None
    degrees: Optional[np.ndarray] = None
    degrees_in: Optional[np.ndarray] = None
    degrees_out: Optional[np.ndarray] = None
    indicators: Optional[np.ndarray] = None

    average_adjacency: Optional[np.ndarray] = None
    average_threshold: float = float('nan')
    average_centralities: Optional[CentralityMeasures] = None

    @classmethod
    def initialize(
        cls,
        panel: ReturnPanel,
        bw: int,
        sst: float,
        rp: bool,
        k: float,
    ) -> 'ConnectednessDataset':
        """
        Create an empty dataset sized for the panel's rolling windows.

        Args:
            panel: Return panel
            bw: Window length
            sst: Significance threshold
            rp: Robust p-values flag
            k: Causality strength threshold

        Returns:
            NaN-filled ConnectednessDataset
        """
        n = panel.n
        t = panel.t - bw + 1

        dataset = cls(
            firms=panel.firms,
            dates=panel.dates[bw - 1:],
            bw=bw,
            sst=sst,
            rp=rp,
            k=k,
            group_delimiters=panel.group_delimiters,
            group_names=panel.group_names,
        )

        dataset.adjacency_matrices = [None] * t
        for name in CENTRALITY_FIELDS.values():
            setattr(dataset, name, np.full((t, n), np.nan))
        dataset.indicators = np.full((t, len(LABELS_INDICATORS)), np.nan)
        dataset.average_adjacency = np.full((n, n), np.nan)
        dataset.average_centralities = CentralityMeasures.empty(n)

        return dataset

    def __repr__(self) -> str:
        return (
            f"ConnectednessDataset(firms={self.n}, windows={self.t}, bw={self.bw}, "
            f"sst={self.sst:g}, k={self.k:g}, rp={self.rp})"
        )

    @property
    def n(self) -> int:
        return len(self.firms)

    @property
    def t(self) -> int:
        return len(self.adjacency_matrices)

    @property
    def groups(self) -> int:
        return len(self.group_delimiters) + 1 if self.group_delimiters else 0

    @property
    def label(self) -> str:
        """Parameter suffix used in sheet and plot titles."""
        if self.rp:
            return f" (SST={self.sst:g}, K={self.k:g}, R)"
        return f" (SST={self.sst:g}, K={self.k:g})"

    @property
    def is_complete(self) -> bool:
        return all(am is not None for am in self.adjacency_matrices)

    # -------------------------------------------------------------------------
    # pandas views
    # -------------------------------------------------------------------------

    def indicators_frame(self) -> pd.DataFrame:
        """DCI, CIO and CIOO per window, indexed by window end date."""
        return pd.DataFrame(self.indicators, index=self.dates, columns=LABELS_INDICATORS)

    def centrality_frame(self, name: str) -> pd.DataFrame:
        """
        Time series of one measure as a windows x firms frame.

        Args:
            name: Label (e.g. 'Katz Centrality') or attribute name (e.g. 'katz')

        Returns:
            DataFrame indexed by window end date
        """
        attribute = CENTRALITY_FIELDS.get(name, name)
        if attribute not in CENTRALITY_FIELDS.values():
            raise KeyError(f"Unknown centrality measure: {name}")
        return pd.DataFrame(getattr(self, attribute), index=self.dates, columns=self.firms)

    def average_adjacency_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.average_adjacency, index=self.firms, columns=self.firms)

    def average_centralities_frame(self) -> pd.DataFrame:
        """Six average centralities, one row per firm."""
        data = {
            label: getattr(self.average_centralities, CENTRALITY_FIELDS[label])
            for label in LABELS_CENTRALITIES
        }
        frame = pd.DataFrame(data, index=self.firms)
        frame.index.name = 'Firms'
        return frame
