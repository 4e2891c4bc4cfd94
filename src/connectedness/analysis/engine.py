"""
Connectedness engine.

Runs the rolling-window pipeline: windows -> causal networks and their
measures (concurrently) -> aggregated dataset.
"""

from functools import partial
from typing import Optional, Sequence, Tuple
import logging

import numpy as np

from ..core.config import AnalysisConfig, Config, ExecutionConfig
from ..core.constants import (
    DEFAULT_BANDWIDTH,
    DEFAULT_SST,
    DEFAULT_ROBUST,
    DEFAULT_K,
    DEFAULT_LAGS,
)
from ..data.loader import ReturnPanel
from ..utils.logging import LogContext
from .aggregator import finalize
from .causality import CausalGraphBuilder
from .network import NetworkAnalyzer
from .results import ConnectednessDataset, WindowResult
from .scheduler import ProgressSink, StopQuery, WindowTaskScheduler
from .windows import extract_rolling_windows

logger = logging.getLogger(__name__)


def process_window(
    window: np.ndarray,
    sst: float,
    rp: bool,
    k: float,
    lags: int,
    group_delimiters: Sequence[int],
) -> WindowResult:
    """
    Build the causal network of one window and measure it.

    Args:
        window: Returns (bw x N)
        sst: Significance threshold
        rp: Robust p-values flag
        k: Causality strength threshold
        lags: Regression lag order
        group_delimiters: Firm group delimiters

    Returns:
        WindowResult
    """
    am = CausalGraphBuilder(sst=sst, rp=rp, k=k, lags=lags).build(window)
    dci, cio, cioo = NetworkAnalyzer.compute_indicators(am, group_delimiters)
    centralities = NetworkAnalyzer.compute_centralities(am)
    return WindowResult(adjacency=am, dci=dci, cio=cio, cioo=cioo, centralities=centralities)


class ConnectednessEngine:
    """
    Rolling-window causal connectedness calculator.

    Example:
        engine = ConnectednessEngine(ConfigLoader.load_or_default())
        dataset, stopped = engine.compute(panel, progress=print)
    """

    def __init__(self, config: Config):
        """
        Initialize engine.

        Args:
            config: Configuration object

        Raises:
            ConfigValidationError: If analysis parameters are out of range
        """
        config.validate()
        self.config = config
        self.analysis = config.analysis
        self.scheduler = WindowTaskScheduler(
            max_workers=config.execution.max_workers,
            use_processes=config.execution.use_processes,
        )

    def compute(
        self,
        panel,
        progress: Optional[ProgressSink] = None,
        should_stop: Optional[StopQuery] = None,
    ) -> Tuple[Optional[ConnectednessDataset], bool]:
        """
        Compute connectedness measures over all rolling windows.

        Args:
            panel: ReturnPanel, DataFrame or T x N array of returns
            progress: Receives completion fractions in [0, 1]
            should_stop: Polled between results; True stops the run

        Returns:
            Tuple of (dataset, stopped). The dataset is None when stopped.

        Raises:
            InvalidWindowError: If the window is longer than the panel
            TaskFailureError: If any window task fails
        """
        panel = ReturnPanel.coerce(panel)
        a = self.analysis

        windows = extract_rolling_windows(panel.values, a.bw)
        dataset = ConnectednessDataset.initialize(panel, a.bw, a.sst, a.rp, a.k)

        task = partial(
            process_window,
            sst=a.sst,
            rp=a.rp,
            k=a.k,
            lags=a.lags,
            group_delimiters=panel.group_delimiters,
        )

        logger.info(
            f"Connectedness: {panel.n} firms, {len(windows)} windows of {a.bw} "
            f"observations{dataset.label}"
        )

        with LogContext(logger, "Calculating connectedness measures", windows=len(windows), firms=panel.n):
            results = self.scheduler.run(task, windows, progress=progress, should_stop=should_stop)

        if results is None:
            logger.warning("Connectedness calculation stopped before completion")
            return None, True

        with LogContext(logger, "Finalizing connectedness measures"):
            dataset = finalize(dataset, results)

        if progress is not None:
            progress(1.0)

        return dataset, False


def compute(
    panel,
    bw: int = DEFAULT_BANDWIDTH,
    sst: float = DEFAULT_SST,
    rp: bool = DEFAULT_ROBUST,
    k: float = DEFAULT_K,
    *,
    lags: int = DEFAULT_LAGS,
    group_delimiters: Optional[Sequence[int]] = None,
    progress: Optional[ProgressSink] = None,
    should_stop: Optional[StopQuery] = None,
    max_workers: Optional[int] = None,
    use_processes: bool = False,
) -> Tuple[Optional[ConnectednessDataset], bool]:
    """
    Compute connectedness measures with explicit parameters.

    Args:
        panel: ReturnPanel, DataFrame or T x N array of returns
        bw: Rolling window length in [21, 252]
        sst: Significance threshold in (0, 0.1]
        rp: Robust p-values flag
        k: Causality strength threshold in (0, 0.2]
        lags: Regression lag order
        group_delimiters: Overrides the panel's group delimiters
        progress: Receives completion fractions in [0, 1]
        should_stop: Polled between results; True stops the run
        max_workers: Pool size
        use_processes: Use a process pool instead of threads

    Returns:
        Tuple of (dataset, stopped). The dataset is None when stopped.
    """
    config = Config(
        analysis=AnalysisConfig(bw=bw, sst=sst, rp=rp, k=k, lags=lags),
        execution=ExecutionConfig(max_workers=max_workers, use_processes=use_processes),
    )
    engine = ConnectednessEngine(config)
    return engine.compute(
        ReturnPanel.coerce(panel, group_delimiters),
        progress=progress,
        should_stop=should_stop,
    )
