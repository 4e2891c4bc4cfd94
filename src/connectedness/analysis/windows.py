"""
Rolling window extraction.

Slices a T_total x N return matrix into T_total - bw + 1 overlapping windows.
"""

from collections.abc import Sequence
from typing import Iterator, Union

import numpy as np
import pandas as pd

from ..core.exceptions import InvalidWindowError


class RollingWindows(Sequence):
    """
    Lazy, restartable sequence of overlapping windows.

    Window ``k`` (0-based) covers rows ``k .. k + bw - 1``. Items are
    read-only views into the underlying matrix, so iterating twice yields
    the same windows without copying the panel.
    """

    def __init__(self, data: np.ndarray, bw: int):
        self._data = data
        self.bw = bw

    def __len__(self) -> int:
        return self._data.shape[0] - self.bw + 1

    def __getitem__(self, index: int) -> np.ndarray:
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError(f"window index {index} out of range")
        return self._data[index:index + self.bw]

    def __iter__(self) -> Iterator[np.ndarray]:
        for index in range(len(self)):
            yield self[index]

    def __repr__(self) -> str:
        return f"RollingWindows(count={len(self)}, bw={self.bw}, firms={self._data.shape[1]})"

    def end_index(self, index: int) -> int:
        """Row index (0-based) of the last observation in window ``index``."""
        return index + self.bw - 1


def extract_rolling_windows(returns: Union[np.ndarray, pd.DataFrame], bw: int) -> RollingWindows:
    """
    Partition a return matrix into overlapping rolling windows.

    Args:
        returns: Return matrix (T_total x N)
        bw: Window length

    Returns:
        RollingWindows with T_total - bw + 1 windows

    Raises:
        InvalidWindowError: If bw exceeds the number of observations
    """
    if isinstance(returns, pd.DataFrame):
        data = returns.to_numpy(dtype=float)
    else:
        data = np.asarray(returns, dtype=float)

    if data.ndim != 2:
        raise ValueError(f"Return matrix must be 2-dimensional, got {data.ndim}")

    if bw < 1 or bw > data.shape[0]:
        raise InvalidWindowError(bw, data.shape[0])

    data = data.view()
    data.setflags(write=False)
    return RollingWindows(data, int(bw))
