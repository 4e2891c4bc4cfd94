"""Analysis module - Rolling windows, causal networks, metrics, scheduling and aggregation"""

from .windows import RollingWindows, extract_rolling_windows
from .causality import CausalGraphBuilder, PairTest
from .network import NetworkAnalyzer, CentralityMeasures
from .results import WindowResult, ConnectednessDataset
from .scheduler import WindowTaskScheduler, CancellationToken, RunState
from .aggregator import finalize, average_adjacency
from .engine import ConnectednessEngine, compute, process_window

__all__ = [
    "RollingWindows",
    "extract_rolling_windows",
    "CausalGraphBuilder",
    "PairTest",
    "NetworkAnalyzer",
    "CentralityMeasures",
    "WindowResult",
    "ConnectednessDataset",
    "WindowTaskScheduler",
    "CancellationToken",
    "RunState",
    "finalize",
    "average_adjacency",
    "ConnectednessEngine",
    "compute",
    "process_window",
]
