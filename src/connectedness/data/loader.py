"""
Data loading module for the connectedness engine.

Handles loading and preprocessing of firm return panels from CSV or Excel files.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple, Optional, Sequence
from pathlib import Path
import logging

import pandas as pd
import numpy as np

from ..core.config import Config
from ..core.constants import MIN_FIRMS, MIN_OBSERVATIONS
from ..core.exceptions import (
    DataLoadError,
    InvalidFormatError,
    MissingColumnError,
    InsufficientDataError,
)

logger = logging.getLogger(__name__)

OTHER_GROUP = 'OTHER'


@dataclass(frozen=True, eq=False)
class ReturnPanel:
    """
    Immutable panel of firm returns.

    Rows are time points, columns are firms. Group delimiters follow the
    convention that delimiter ``d`` closes a group after the ``d``-th firm
    (1-based), so ``len(group_delimiters) + 1`` groups exist whenever any
    delimiter is given.
    """
    returns: pd.DataFrame
    group_delimiters: Tuple[int, ...] = ()
    group_names: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.returns.ndim != 2:
            raise InvalidFormatError("<panel>", "2-dimensional return matrix",
                                     f"got {self.returns.ndim} dimensions")

        if self.n < MIN_FIRMS:
            raise InsufficientDataError(MIN_FIRMS, self.n, "a connectedness network (firms)")

        delimiters = tuple(int(d) for d in self.group_delimiters)
        if any(b <= a for a, b in zip(delimiters, delimiters[1:])):
            raise DataLoadError("Group delimiters must be strictly increasing",
                                f"Delimiters: {list(delimiters)}")
        if delimiters and (delimiters[0] < 1 or delimiters[-1] >= self.n):
            raise DataLoadError("Group delimiters must lie in [1, N-1]",
                                f"Delimiters: {list(delimiters)}, N: {self.n}")
        if self.group_names and len(self.group_names) != len(delimiters) + 1:
            raise DataLoadError("Group names do not match group delimiters",
                                f"{len(self.group_names)} names for {len(delimiters) + 1} groups")

        object.__setattr__(self, 'group_delimiters', delimiters)
        object.__setattr__(self, 'group_names', tuple(self.group_names))

    def __repr__(self) -> str:
        return f"ReturnPanel(firms={self.n}, observations={self.t}, groups={self.groups})"

    @property
    def firms(self) -> List[str]:
        return [str(c) for c in self.returns.columns]

    @property
    def n(self) -> int:
        return self.returns.shape[1]

    @property
    def t(self) -> int:
        return self.returns.shape[0]

    @property
    def groups(self) -> int:
        """Number of firm groups (0 when firms are not partitioned)."""
        return len(self.group_delimiters) + 1 if self.group_delimiters else 0

    @property
    def dates(self) -> pd.Index:
        return self.returns.index

    @property
    def values(self) -> np.ndarray:
        """Read-only float matrix of returns (T x N)."""
        values = np.array(self.returns.to_numpy(dtype=float), copy=True)
        values.setflags(write=False)
        return values

    @classmethod
    def from_array(
        cls,
        data: np.ndarray,
        firms: Optional[Sequence[str]] = None,
        dates: Optional[Sequence] = None,
        group_delimiters: Sequence[int] = (),
        group_names: Sequence[str] = (),
    ) -> 'ReturnPanel':
        """
        Build a panel from a raw T x N matrix.

        Args:
            data: Return matrix (rows = time points, columns = firms)
            firms: Optional firm names (default: F1..FN)
            dates: Optional row index
            group_delimiters: Optional group delimiters
            group_names: Optional group names

        Returns:
            ReturnPanel
        """
        data = np.asarray(data, dtype=float)
        if data.ndim != 2:
            raise InvalidFormatError("<array>", "2-dimensional return matrix",
                                     f"got {data.ndim} dimensions")
        if firms is None:
            firms = [f'F{i + 1}' for i in range(data.shape[1])]
        frame = pd.DataFrame(data, columns=list(firms), index=dates)
        return cls(frame, tuple(group_delimiters), tuple(group_names))

    @classmethod
    def coerce(cls, panel, group_delimiters: Optional[Sequence[int]] = None) -> 'ReturnPanel':
        """
        Convert a DataFrame, array or panel into a ReturnPanel.

        Args:
            panel: ReturnPanel, DataFrame or array-like
            group_delimiters: Overrides the panel's delimiters when given

        Returns:
            ReturnPanel
        """
        if isinstance(panel, ReturnPanel):
            if group_delimiters is None:
                return panel
            return cls(panel.returns, tuple(group_delimiters))

        delimiters = tuple(group_delimiters) if group_delimiters is not None else ()
        if isinstance(panel, pd.DataFrame):
            return cls(panel.astype(float), delimiters)
        return cls.from_array(np.asarray(panel, dtype=float), group_delimiters=delimiters)


def order_by_groups(
    firms: Sequence[str],
    groups: Dict[str, List[str]],
) -> Tuple[List[str], Tuple[int, ...], Tuple[str, ...]]:
    """
    Order firms so each group is contiguous and derive the group delimiters.

    Firms that belong to no configured group are collected in a trailing
    'OTHER' group.

    Args:
        firms: Firm names in panel order
        groups: Group name -> firm names

    Returns:
        Tuple of (ordered firms, delimiters, group names)
    """
    if not groups:
        return list(firms), (), ()

    available = set(firms)
    placed = set()
    blocks: List[Tuple[str, List[str]]] = []

    for name, members in groups.items():
        present = [f for f in members if f in available and f not in placed]
        missing = [f for f in members if f not in available]
        if missing:
            logger.warning(f"Group {name}: firms not found in data: {', '.join(missing)}")
        if present:
            placed.update(present)
            blocks.append((name, present))

    others = [f for f in firms if f not in placed]
    if others:
        blocks.append((OTHER_GROUP, others))

    ordered = [f for _, members in blocks for f in members]
    if len(blocks) < 2:
        return ordered, (), ()

    sizes = np.cumsum([len(members) for _, members in blocks])
    delimiters = tuple(int(s) for s in sizes[:-1])
    names = tuple(name for name, _ in blocks)

    return ordered, delimiters, names


class PanelLoader:
    """
    Return panel loader.

    Reads a table with one date column and one column per firm, converts
    prices to log returns when configured, and orders firms by group.
    """

    def __init__(self, filepath: Path, config: Config):
        """
        Initialize data loader.

        Args:
            filepath: Path to a CSV or Excel file
            config: Configuration object
        """
        self.filepath = Path(filepath)
        self.config = config
        self._panel: Optional[ReturnPanel] = None

    @property
    def panel(self) -> ReturnPanel:
        """Get loaded panel, loading if necessary."""
        if self._panel is None:
            self._panel = self.load()
        return self._panel

    def load(self) -> ReturnPanel:
        """
        Load and preprocess the return panel.

        Returns:
            ReturnPanel with firms ordered by group
        """
        raw = self._read_table()
        data = self._parse_dates(raw)

        if self.config.data.kind == 'prices':
            returns = self._calculate_returns(data)
        else:
            returns = data

        returns = returns.replace([np.inf, -np.inf], np.nan).dropna()

        if len(returns) < MIN_OBSERVATIONS:
            raise InsufficientDataError(MIN_OBSERVATIONS, len(returns), "data loading")

        firms, delimiters, names = order_by_groups(list(returns.columns), self.config.groups)
        returns = returns[firms]

        self._panel = ReturnPanel(returns, delimiters, names)

        logger.info(
            f"Loaded panel: {self._panel.n} firms, {self._panel.t} observations, "
            f"{self._panel.groups} groups"
        )
        return self._panel

    def _read_table(self) -> pd.DataFrame:
        """
        Read the raw table from disk.

        Returns:
            Raw DataFrame

        Raises:
            DataLoadError: If file cannot be read
        """
        logger.info(f"Loading data from {self.filepath}")

        if not self.filepath.exists():
            raise DataLoadError(
                f"Data file not found: {self.filepath}",
                "Please provide a valid path to a CSV or Excel return panel"
            )

        suffix = self.filepath.suffix.lower()
        try:
            if suffix == '.csv':
                df = pd.read_csv(self.filepath)
            elif suffix in ('.xlsx', '.xls'):
                df = pd.read_excel(self.filepath)
            else:
                raise InvalidFormatError(str(self.filepath), "CSV or Excel file",
                                         f"unsupported extension '{suffix}'")
        except DataLoadError:
            raise
        except PermissionError:
            raise DataLoadError(
                f"Cannot read file: {self.filepath}",
                "File may be open in another application"
            )
        except Exception as e:
            raise DataLoadError(f"Failed to read data file: {e}") from e

        logger.debug(f"Read {len(df)} rows, {len(df.columns)} columns")
        return df

    def _parse_dates(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Index the table by its date column and coerce firm columns to numbers.

        Args:
            df: Raw DataFrame

        Returns:
            DataFrame with date index and numeric firm columns
        """
        date_column = self.config.data.date_column
        if date_column not in df.columns:
            raise MissingColumnError(date_column, list(df.columns))

        try:
            dates = pd.to_datetime(df[date_column])
        except Exception as e:
            raise InvalidFormatError(
                str(self.filepath),
                f"'{date_column}' column should be parseable as datetime",
                f"Failed to parse dates: {e}"
            )

        data = df.drop(columns=[date_column]).apply(pd.to_numeric, errors='coerce')
        data.index = pd.DatetimeIndex(dates, name=date_column)
        data = data.sort_index()

        empty = [c for c in data.columns if data[c].isna().all()]
        if empty:
            logger.warning(f"Dropping non-numeric columns: {', '.join(map(str, empty))}")
            data = data.drop(columns=empty)

        if data.shape[1] < MIN_FIRMS:
            raise InsufficientDataError(MIN_FIRMS, data.shape[1], "data loading (firms)")

        return data

    @staticmethod
    def _calculate_returns(prices: pd.DataFrame) -> pd.DataFrame:
        """
        Calculate log returns from prices.

        Args:
            prices: Price DataFrame

        Returns:
            Returns DataFrame
        """
        if (prices <= 0).any().any():
            raise InvalidFormatError("<prices>", "strictly positive prices",
                                     "found zero or negative prices")
        return np.log(prices / prices.shift(1))
