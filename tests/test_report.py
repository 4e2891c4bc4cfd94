"""Tests for result export, text reports and plots."""

from datetime import datetime

import pytest
import numpy as np
import pandas as pd

from connectedness.core.config import Config
from connectedness.core.exceptions import IncompleteResultsError
from connectedness.analysis.results import ConnectednessDataset
from connectedness.data.loader import ReturnPanel
from connectedness.report.generator import ReportGenerator
from connectedness.report.visualizer import Visualizer
from connectedness.report.writer import ResultWriter


class TestResultWriter:
    """Tests for ResultWriter."""

    def test_writes_three_sheets(self, tmp_path, small_dataset):
        """Test the workbook holds indicators, average network and centralities."""
        path = ResultWriter().write(small_dataset, tmp_path / "results.xlsx")

        sheets = pd.read_excel(path, sheet_name=None, index_col=0)

        assert list(sheets) == [
            "Indicators",
            "Average Adjacency Matrix",
            "Average Centrality Measures",
        ]
        assert list(sheets["Indicators"].columns) == ["DCI", "CIO", "CIOO"]
        assert len(sheets["Indicators"]) == small_dataset.t
        np.testing.assert_array_equal(sheets["Average Adjacency Matrix"].values,
                                      small_dataset.average_adjacency)
        assert sheets["Average Centrality Measures"].index.name == "Firms"
        assert len(sheets["Average Centrality Measures"].columns) == 6

    def test_appends_extension(self, tmp_path, small_dataset):
        """Test a missing .xlsx extension is added."""
        path = ResultWriter().write(small_dataset, tmp_path / "out" / "results")

        assert path.name == "results.xlsx"
        assert path.exists()

    def test_overwrites_existing(self, tmp_path, small_dataset):
        """Test an existing workbook is replaced."""
        target = tmp_path / "results.xlsx"
        target.write_text("stale")

        ResultWriter().write(small_dataset, target)

        assert len(pd.read_excel(target, sheet_name=None)) == 3

    def test_incomplete_dataset(self, tmp_path):
        """Test an unfinalized dataset is not written."""
        panel = ReturnPanel.from_array(np.random.RandomState(0).randn(24, 2))
        dataset = ConnectednessDataset.initialize(panel, 21, 0.05, False, 0.06)

        with pytest.raises(IncompleteResultsError):
            ResultWriter().write(dataset, tmp_path / "results.xlsx")


class TestReportGenerator:
    """Tests for ReportGenerator."""

    def test_generate(self, small_dataset):
        """Test the report covers every section."""
        report = ReportGenerator(Config()).generate(small_dataset, datetime(2024, 3, 1, 9, 30))

        assert "CONNECTEDNESS REPORT" in report
        assert "2024-03-01 09:30" in report
        assert "DYNAMIC CAUSALITY INDEX" in report
        assert "CIOO" in report
        assert "Katz Centrality" in report
        assert f"/{small_dataset.t} windows" in report

    def test_summary(self, small_dataset):
        """Test the brief summary names the top hub."""
        summary = ReportGenerator(Config()).generate_summary(small_dataset)

        assert "Top Hub:" in summary
        assert "DCI:" in summary


class TestVisualizer:
    """Tests for Visualizer."""

    def test_create_all(self, tmp_path, small_dataset):
        """Test every analysis plot is written."""
        config = Config()
        config.visualization.figsize = (8, 6)
        config.visualization.dpi = 40

        paths = Visualizer(config).create_all(small_dataset, tmp_path, prefix="test")

        assert [p.name for p in paths] == [
            "test_indicators.png",
            "test_network.png",
            "test_adjacency.png",
            "test_centralities.png",
        ]
        assert all(p.exists() and p.stat().st_size > 0 for p in paths)
