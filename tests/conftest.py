"""Pytest configuration and fixtures."""

import pytest
import pandas as pd
import numpy as np

from connectedness.analysis.engine import compute
from connectedness.data.loader import ReturnPanel


def lead_lag_returns(n_obs: int, n_firms: int, seed: int = 42, beta: float = 0.8) -> pd.DataFrame:
    """Random returns where F1 leads F2 by one observation."""
    np.random.seed(seed)
    dates = pd.date_range("2023-01-02", periods=n_obs, freq="B")
    firms = [f"F{i + 1}" for i in range(n_firms)]

    data = np.random.randn(n_obs, n_firms) * 0.01
    data[1:, 1] = beta * data[:-1, 0] + 0.2 * data[1:, 1]

    return pd.DataFrame(data, index=dates, columns=firms)


@pytest.fixture
def sample_returns():
    """10 firms x 300 observations with an injected F1 -> F2 lead."""
    return lead_lag_returns(300, 10)


@pytest.fixture
def small_returns():
    """4 firms x 40 observations with an injected F1 -> F2 lead."""
    return lead_lag_returns(40, 4, seed=7)


@pytest.fixture(scope="module")
def small_dataset():
    """Finalized dataset for 4 firms in two groups, 20 windows of 21 observations."""
    panel = ReturnPanel(
        lead_lag_returns(40, 4, seed=7),
        group_delimiters=(2,),
        group_names=("EQUITY", "CREDIT"),
    )
    dataset, stopped = compute(panel, bw=21, max_workers=2)
    assert not stopped
    return dataset


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary."""
    return {
        "groups": {
            "BANKS": ["F1", "F2", "F3"],
            "INSURERS": ["F4", "F5"],
        },
        "analysis": {
            "bw": 126,
            "sst": 0.05,
            "rp": True,
            "k": 0.08,
        },
        "execution": {
            "max_workers": 2,
        },
        "data": {
            "kind": "returns",
        },
    }


@pytest.fixture
def temp_config_file(tmp_path, sample_config_dict):
    """Create temporary config file."""
    import yaml

    config_path = tmp_path / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config_dict, f)

    return config_path


@pytest.fixture
def returns_csv(tmp_path, small_returns):
    """Small return panel written as CSV with a Date column."""
    path = tmp_path / "returns.csv"
    small_returns.rename_axis("Date").reset_index().to_csv(path, index=False)
    return path
