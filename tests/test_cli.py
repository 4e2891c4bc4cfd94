"""Tests for the command line interface."""

import pandas as pd

from connectedness.cli import main


class TestCli:
    """Tests for CLI commands."""

    def test_version(self, capsys):
        """Test --version prints the package version."""
        assert main(["--version"]) == 0
        assert "1.0.0" in capsys.readouterr().out

    def test_run(self, tmp_path, returns_csv):
        """Test a full run writes results and report."""
        output = tmp_path / "out"

        code = main(["run", "-d", str(returns_csv), "-o", str(output), "--bw", "21", "-q"])

        assert code == 0
        sheets = pd.read_excel(output / "connectedness_results.xlsx", sheet_name=None)
        assert len(sheets) == 3
        assert (output / "connectedness_report.txt").exists()

    def test_run_invalid_parameters(self, tmp_path, returns_csv):
        """Test out-of-range overrides fail with exit code 1."""
        code = main(["run", "-d", str(returns_csv), "-o", str(tmp_path), "--sst", "0.5", "-q"])

        assert code == 1

    def test_run_window_too_long(self, tmp_path, returns_csv):
        """Test a window longer than the panel fails with exit code 1."""
        code = main(["run", "-d", str(returns_csv), "-o", str(tmp_path), "--bw", "60", "-q"])

        assert code == 1

    def test_validate_config(self, temp_config_file, capsys):
        """Test validate-config accepts a valid file."""
        assert main(["validate-config", str(temp_config_file)]) == 0
        assert "valid" in capsys.readouterr().out

    def test_validate_config_invalid(self, tmp_path):
        """Test validate-config reports invalid files."""
        path = tmp_path / "bad.yaml"
        path.write_text("analysis:\n  bw: 5\n")

        assert main(["validate-config", str(path)]) == 1
