"""Report module - Result export, report generation and visualization"""

from .writer import ResultWriter
from .generator import ReportGenerator
from .visualizer import Visualizer

__all__ = [
    "ResultWriter",
    "ReportGenerator",
    "Visualizer",
]
