"""
Configuration management for the connectedness engine.

Provides dataclass-based configuration with YAML loading and validation.
"""

from dataclasses import dataclass, field
from numbers import Integral, Real
from typing import Dict, List, Optional, Any, Tuple
from pathlib import Path
import yaml
import logging

from .exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
)
from .constants import (
    DEFAULT_BANDWIDTH,
    MIN_BANDWIDTH,
    MAX_BANDWIDTH,
    DEFAULT_SST,
    MAX_SST,
    DEFAULT_ROBUST,
    DEFAULT_K,
    MAX_K,
    DEFAULT_LAGS,
    DEFAULT_DATE_COLUMN,
    DATA_KINDS,
    DEFAULT_FIGSIZE,
    DEFAULT_DPI,
    COLORS,
    DEFAULT_RESULTS_PREFIX,
    DEFAULT_REPORT_PREFIX,
    DEFAULT_PLOTS_PREFIX,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Config Dataclasses
# =============================================================================

@dataclass
class AnalysisConfig:
    """Connectedness parameters configuration."""
    bw: int = DEFAULT_BANDWIDTH
    sst: float = DEFAULT_SST
    rp: bool = DEFAULT_ROBUST
    k: float = DEFAULT_K
    lags: int = DEFAULT_LAGS
    analyze: bool = False


@dataclass
class ExecutionConfig:
    """Window task execution configuration."""
    max_workers: Optional[int] = None
    use_processes: bool = False


@dataclass
class DataConfig:
    """Input panel configuration."""
    kind: str = 'returns'
    date_column: str = DEFAULT_DATE_COLUMN


@dataclass
class VisualizationConfig:
    """Visualization configuration."""
    figsize: Tuple[int, int] = DEFAULT_FIGSIZE
    dpi: int = DEFAULT_DPI
    colors: Dict[str, str] = field(default_factory=lambda: COLORS.copy())


@dataclass
class OutputConfig:
    """Output configuration."""
    results_prefix: str = DEFAULT_RESULTS_PREFIX
    report_prefix: str = DEFAULT_REPORT_PREFIX
    plots_prefix: str = DEFAULT_PLOTS_PREFIX
    save_results: bool = True
    save_report: bool = True


@dataclass
class Config:
    """Main configuration container."""

    # Group name -> firms, in panel order
    groups: Dict[str, List[str]] = field(default_factory=dict)

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    data: DataConfig = field(default_factory=DataConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @property
    def has_groups(self) -> bool:
        """Check if firms are partitioned into groups."""
        return bool(self.groups)

    def validate(self) -> None:
        """
        Validate analysis parameters.

        Raises:
            ConfigValidationError: If any parameter is out of range
        """
        a = self.analysis
        errors = validate_parameters(a.bw, a.sst, a.rp, a.k, a.lags, a.analyze)
        if errors:
            raise ConfigValidationError(errors)


# =============================================================================
# Parameter Validation
# =============================================================================

def validate_parameters(
    bw: Any,
    sst: Any,
    rp: Any,
    k: Any,
    lags: Any = DEFAULT_LAGS,
    analyze: Any = False,
) -> List[str]:
    """
    Check connectedness tunables against their admissible ranges.

    Args:
        bw: Rolling window length, integer in [21, 252]
        sst: Significance threshold in (0, 0.1]
        rp: Robust p-values flag
        k: Causality strength threshold in (0, 0.2]
        lags: Lag order of the causality regressions, positive integer
        analyze: Analysis plots flag

    Returns:
        List of error messages (empty if all parameters are valid)
    """
    errors = []

    if isinstance(bw, bool) or not isinstance(bw, Integral):
        errors.append(f"'bw' must be an integer, got {bw!r}")
    elif not MIN_BANDWIDTH <= bw <= MAX_BANDWIDTH:
        errors.append(f"'bw' must be in [{MIN_BANDWIDTH}, {MAX_BANDWIDTH}], got {bw}")

    if isinstance(sst, bool) or not isinstance(sst, Real):
        errors.append(f"'sst' must be a number, got {sst!r}")
    elif not 0.0 < sst <= MAX_SST:
        errors.append(f"'sst' must be in (0, {MAX_SST}], got {sst}")

    if not isinstance(rp, bool):
        errors.append(f"'rp' must be a boolean, got {rp!r}")

    if isinstance(k, bool) or not isinstance(k, Real):
        errors.append(f"'k' must be a number, got {k!r}")
    elif not 0.0 < k <= MAX_K:
        errors.append(f"'k' must be in (0, {MAX_K}], got {k}")

    if isinstance(lags, bool) or not isinstance(lags, Integral) or lags < 1:
        errors.append(f"'lags' must be a positive integer, got {lags!r}")

    if not isinstance(analyze, bool):
        errors.append(f"'analyze' must be a boolean, got {analyze!r}")

    return errors


# =============================================================================
# Config Loader
# =============================================================================

class ConfigLoader:
    """Configuration file loader and validator."""

    SECTIONS = ['groups', 'analysis', 'execution', 'data', 'visualization', 'output']

    @classmethod
    def load(cls, path: Path) -> Config:
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML config file

        Returns:
            Config object

        Raises:
            ConfigNotFoundError: If file doesn't exist
            ConfigValidationError: If validation fails
        """
        path = Path(path)
        if not path.exists():
            raise ConfigNotFoundError(str(path))

        logger.info(f"Loading configuration from {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML: {e}")

        if raw_config is None:
            raw_config = {}

        cls.validate(raw_config)
        return cls._build_config(raw_config)

    @classmethod
    def load_or_default(cls, path: Optional[Path] = None) -> Config:
        """
        Load config from path, falling back to default if not found.

        Args:
            path: Optional path to config file

        Returns:
            Config object (from file or default)
        """
        if path:
            try:
                return cls.load(path)
            except ConfigNotFoundError:
                logger.warning(f"Config not found at {path}, using default")

        # Try default locations
        default_paths = [
            Path('config/config.yaml'),
            Path('./config.yaml'),
        ]

        for p in default_paths:
            if p.exists():
                logger.info(f"Found config at {p}")
                return cls.load(p)

        logger.info("Using default configuration")
        return cls.get_default()

    @classmethod
    def validate(cls, raw_config: Any) -> None:
        """
        Validate raw configuration dictionary.

        Args:
            raw_config: Dictionary from YAML

        Raises:
            ConfigValidationError: If validation fails
        """
        if not isinstance(raw_config, dict):
            raise ConfigValidationError(["Configuration root must be a dictionary"])

        errors = []

        unknown = [key for key in raw_config if key not in cls.SECTIONS]
        for key in unknown:
            errors.append(f"Unknown section: '{key}'")

        for section in cls.SECTIONS[1:]:
            if section in raw_config and not isinstance(raw_config[section], dict):
                errors.append(f"'{section}' must be a dictionary")

        # Validate groups structure
        groups = raw_config.get('groups', {})
        if not isinstance(groups, dict):
            errors.append("'groups' must be a dictionary")
        else:
            seen = set()
            for name, firms in groups.items():
                if not isinstance(firms, list) or not firms:
                    errors.append(f"Group '{name}' must be a non-empty list of firms")
                    continue
                for firm in firms:
                    if firm in seen:
                        errors.append(f"Firm '{firm}' appears in more than one group")
                    seen.add(firm)

        analysis = raw_config.get('analysis', {})
        if isinstance(analysis, dict):
            errors.extend(validate_parameters(
                analysis.get('bw', DEFAULT_BANDWIDTH),
                analysis.get('sst', DEFAULT_SST),
                analysis.get('rp', DEFAULT_ROBUST),
                analysis.get('k', DEFAULT_K),
                analysis.get('lags', DEFAULT_LAGS),
                analysis.get('analyze', False),
            ))

        execution = raw_config.get('execution', {})
        if isinstance(execution, dict):
            workers = execution.get('max_workers')
            if workers is not None and (isinstance(workers, bool)
                                        or not isinstance(workers, int) or workers < 1):
                errors.append(f"'max_workers' must be a positive integer, got {workers!r}")

        data = raw_config.get('data', {})
        if isinstance(data, dict) and data.get('kind', 'returns') not in DATA_KINDS:
            errors.append(f"'kind' must be one of {DATA_KINDS}, got {data.get('kind')!r}")

        if errors:
            raise ConfigValidationError(errors)

    @classmethod
    def _build_config(cls, raw: dict) -> Config:
        """Build Config object from raw dictionary."""
        return Config(
            groups={str(name): list(firms) for name, firms in raw.get('groups', {}).items()},
            analysis=cls._build_analysis_config(raw.get('analysis', {})),
            execution=cls._build_execution_config(raw.get('execution', {})),
            data=cls._build_data_config(raw.get('data', {})),
            visualization=cls._build_viz_config(raw.get('visualization', {})),
            output=cls._build_output_config(raw.get('output', {})),
        )

    @classmethod
    def _build_analysis_config(cls, raw: dict) -> AnalysisConfig:
        """Build AnalysisConfig from raw dict."""
        return AnalysisConfig(
            bw=raw.get('bw', DEFAULT_BANDWIDTH),
            sst=raw.get('sst', DEFAULT_SST),
            rp=raw.get('rp', DEFAULT_ROBUST),
            k=raw.get('k', DEFAULT_K),
            lags=raw.get('lags', DEFAULT_LAGS),
            analyze=raw.get('analyze', False),
        )

    @classmethod
    def _build_execution_config(cls, raw: dict) -> ExecutionConfig:
        """Build ExecutionConfig from raw dict."""
        return ExecutionConfig(
            max_workers=raw.get('max_workers'),
            use_processes=raw.get('use_processes', False),
        )

    @classmethod
    def _build_data_config(cls, raw: dict) -> DataConfig:
        """Build DataConfig from raw dict."""
        return DataConfig(
            kind=raw.get('kind', 'returns'),
            date_column=raw.get('date_column', DEFAULT_DATE_COLUMN),
        )

    @classmethod
    def _build_viz_config(cls, raw: dict) -> VisualizationConfig:
        """Build VisualizationConfig from raw dict."""
        figsize = raw.get('figsize', DEFAULT_FIGSIZE)
        if isinstance(figsize, list):
            figsize = tuple(figsize)

        colors = COLORS.copy()
        if 'colors' in raw:
            colors.update(raw['colors'])

        return VisualizationConfig(
            figsize=figsize,
            dpi=raw.get('dpi', DEFAULT_DPI),
            colors=colors,
        )

    @classmethod
    def _build_output_config(cls, raw: dict) -> OutputConfig:
        """Build OutputConfig from raw dict."""
        return OutputConfig(
            results_prefix=raw.get('results_prefix', DEFAULT_RESULTS_PREFIX),
            report_prefix=raw.get('report_prefix', DEFAULT_REPORT_PREFIX),
            plots_prefix=raw.get('plots_prefix', DEFAULT_PLOTS_PREFIX),
            save_results=raw.get('save_results', True),
            save_report=raw.get('save_report', True),
        )

    @classmethod
    def get_default(cls) -> Config:
        """Get default configuration."""
        return Config()
