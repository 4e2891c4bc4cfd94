"""
Granger causality network construction.

Builds a directed adjacency matrix from one rolling window by running a
pairwise linear Granger-causality test for every ordered pair of firms.
"""

from dataclasses import dataclass
import logging

import numpy as np
import statsmodels.api as sm

from ..core.config import Config
from ..core.constants import (
    DEFAULT_SST,
    DEFAULT_ROBUST,
    DEFAULT_K,
    DEFAULT_LAGS,
    DEGENERATE_TOLERANCE,
)
from ..core.exceptions import DegenerateInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PairTest:
    """Granger test outcome for one ordered pair (cause -> effect)."""
    statistic: float
    p_value: float
    strength: float


class CausalGraphBuilder:
    """
    Pairwise Granger causality tester.

    For a cause ``x`` and an effect ``y`` (both standardized within the
    window) the unrestricted model is

        y(t) = c + sum_l a_l y(t-l) + sum_l b_l x(t-l) + e(t)

    and the null hypothesis ``b_1 = ... = b_L = 0`` is tested with an
    F statistic. With robust p-values the coefficient covariance is
    Newey-West HAC and the test becomes a robust Wald F test.

    The strength score is the Euclidean norm of the ``b`` coefficients,
    which for a single lag is the absolute standardized coefficient.
    """

    def __init__(
        self,
        sst: float = DEFAULT_SST,
        rp: bool = DEFAULT_ROBUST,
        k: float = DEFAULT_K,
        lags: int = DEFAULT_LAGS,
    ):
        """
        Initialize causality tester.

        Args:
            sst: Statistical significance threshold
            rp: Use robust (HAC) p-values
            k: Minimum causality strength for an edge
            lags: Number of lags in each regression
        """
        self.sst = sst
        self.rp = rp
        self.k = k
        self.lags = lags

    @classmethod
    def from_config(cls, config: Config) -> 'CausalGraphBuilder':
        a = config.analysis
        return cls(sst=a.sst, rp=a.rp, k=a.k, lags=a.lags)

    @staticmethod
    def hac_maxlags(n: int) -> int:
        """Newey-West bandwidth rule: floor(4 * (n / 100) ^ (2 / 9))."""
        return int(np.floor(4.0 * (n / 100.0) ** (2.0 / 9.0)))

    @staticmethod
    def lag_matrix(series: np.ndarray, lags: int) -> np.ndarray:
        """
        Stack lagged copies of a series.

        Args:
            series: Series of length T
            lags: Number of lags L

        Returns:
            (T - L) x L matrix whose column l-1 holds series(t - l)
        """
        n = len(series) - lags
        return np.column_stack([series[lags - lag:lags - lag + n] for lag in range(1, lags + 1)])

    def test_pair(self, cause: np.ndarray, effect: np.ndarray) -> PairTest:
        """
        Test whether ``cause`` Granger-causes ``effect``.

        Args:
            cause: Candidate causal series
            effect: Series being explained

        Returns:
            PairTest with F statistic, p-value and strength

        Raises:
            DegenerateInputError: If the regression cannot be estimated
        """
        cause = np.asarray(cause, dtype=float)
        effect = np.asarray(effect, dtype=float)

        if cause.shape != effect.shape or cause.ndim != 1:
            raise ValueError("cause and effect must be 1-dimensional series of equal length")

        if not (np.all(np.isfinite(cause)) and np.all(np.isfinite(effect))):
            raise DegenerateInputError("non-finite observations")

        lags = self.lags
        n = len(effect) - lags
        n_params = 1 + 2 * lags
        if n <= n_params:
            raise DegenerateInputError(f"{n} usable observations for {n_params} parameters")

        sd_cause = cause.std()
        sd_effect = effect.std()
        if sd_cause < DEGENERATE_TOLERANCE or sd_effect < DEGENERATE_TOLERANCE:
            raise DegenerateInputError("constant series")

        x = (cause - cause.mean()) / sd_cause
        y = (effect - effect.mean()) / sd_effect

        endog = y[lags:]
        exog = np.column_stack([np.ones(n), self.lag_matrix(y, lags), self.lag_matrix(x, lags)])

        if np.linalg.matrix_rank(exog) < n_params:
            raise DegenerateInputError("singular design matrix")

        model = sm.OLS(endog, exog)
        if self.rp:
            fit = model.fit(cov_type='HAC', cov_kwds={'maxlags': self.hac_maxlags(n)})
        else:
            fit = model.fit()

        if fit.ssr <= DEGENERATE_TOLERANCE * n:
            raise DegenerateInputError("perfect fit")

        restriction = np.zeros((lags, n_params))
        restriction[:, 1 + lags:] = np.eye(lags)
        test = fit.f_test(restriction)

        statistic = float(np.squeeze(test.fvalue))
        p_value = float(np.squeeze(test.pvalue))
        if not np.isfinite(p_value):
            raise DegenerateInputError("non-finite p-value")

        strength = float(np.linalg.norm(fit.params[1 + lags:]))

        return PairTest(statistic=statistic, p_value=p_value, strength=strength)

    def build(self, window: np.ndarray) -> np.ndarray:
        """
        Build the directed causal adjacency matrix for one window.

        Entry (i, j) is 1 when firm i Granger-causes firm j with p-value
        below ``sst`` and strength at least ``k``.

        Args:
            window: Window of returns (bw x N)

        Returns:
            N x N integer adjacency matrix with zero diagonal
        """
        window = np.asarray(window, dtype=float)
        n = window.shape[1]
        am = np.zeros((n, n), dtype=int)
        degenerate = 0

        for i in range(n):
            for j in range(n):
                if i == j:
                    continue

                try:
                    result = self.test_pair(window[:, i], window[:, j])
                except DegenerateInputError as e:
                    degenerate += 1
                    logger.debug(f"Pair {i}->{j} treated as non-causal: {e}")
                    continue

                if result.p_value < self.sst and result.strength >= self.k:
                    am[i, j] = 1

        if degenerate:
            logger.debug(f"{degenerate}/{n * (n - 1)} pairs had degenerate input")

        np.fill_diagonal(am, 0)
        return am
