"""
Causal Connectedness - Rolling-Window Granger Causality Networks

A Python package for measuring how strongly a panel of firms is causally
interconnected over time: pairwise Granger tests per rolling window, the
resulting directed networks, their indicators and centralities, and an
average network over the whole sample.
"""

from .core.constants import VERSION as __version__
__author__ = "Causal Connectedness Team"

from .core.config import Config, ConfigLoader
from .core.exceptions import ConnectednessError
from .data.loader import ReturnPanel
from .analysis.engine import ConnectednessEngine, compute

__all__ = [
    "Config",
    "ConfigLoader",
    "ConnectednessError",
    "ReturnPanel",
    "ConnectednessEngine",
    "compute",
    "__version__",
]
