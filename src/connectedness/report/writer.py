"""
Result export module.

Writes the connectedness dataset to an Excel workbook.
"""

from pathlib import Path
import logging

import pandas as pd

from ..core.constants import (
    SHEET_INDICATORS,
    SHEET_AVERAGE_ADJACENCY,
    SHEET_AVERAGE_CENTRALITIES,
)
from ..core.exceptions import ConnectednessError, IncompleteResultsError
from ..analysis.results import ConnectednessDataset

logger = logging.getLogger(__name__)


class ResultWriter:
    """
    Excel result writer.

    Produces three sheets: indicators per window, the average adjacency
    matrix, and the average centrality measures.
    """

    EXTENSION = '.xlsx'

    @classmethod
    def normalize_path(cls, path: Path) -> Path:
        """Append the .xlsx extension when missing."""
        path = Path(path)
        if path.suffix.lower() != cls.EXTENSION:
            path = path.with_name(path.name + cls.EXTENSION)
        return path

    def write(self, dataset: ConnectednessDataset, path: Path) -> Path:
        """
        Write the dataset to an Excel workbook, replacing any existing file.

        Args:
            dataset: Finalized dataset
            path: Output file path

        Returns:
            Path of the written workbook
        """
        if not dataset.is_complete:
            missing = [i for i, am in enumerate(dataset.adjacency_matrices) if am is None]
            raise IncompleteResultsError(dataset.t, missing)

        path = self.normalize_path(path)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if path.exists():
                path.unlink()
        except OSError as e:
            raise ConnectednessError(
                "A system I/O error occurred while writing the results.", str(e)
            ) from e

        indicators = dataset.indicators_frame()
        indicators.index.name = 'Date'

        adjacency = dataset.average_adjacency_frame()
        adjacency.index.name = 'Firms'

        centralities = dataset.average_centralities_frame()

        with pd.ExcelWriter(path, engine='openpyxl') as writer:
            indicators.to_excel(writer, sheet_name=SHEET_INDICATORS)
            adjacency.to_excel(writer, sheet_name=SHEET_AVERAGE_ADJACENCY)
            centralities.to_excel(writer, sheet_name=SHEET_AVERAGE_CENTRALITIES)

        logger.info(f"Results written: {path}")
        return path
