"""
Constants for the connectedness engine.

All magic numbers and hardcoded values should be defined here.
This makes the codebase more maintainable and configurable.
"""

from typing import Dict, List

# =============================================================================
# Version Info
# =============================================================================

VERSION = "1.0.0"
VERSION_NAME = "Causal Connectedness Network"

# =============================================================================
# Rolling Window Constants
# =============================================================================

DEFAULT_BANDWIDTH = 252
MIN_BANDWIDTH = 21
MAX_BANDWIDTH = 252

# At least two firms are needed for a directed pair
MIN_FIRMS = 2

# =============================================================================
# Granger Causality Constants
# =============================================================================

DEFAULT_SST = 0.05       # Statistical significance threshold
MAX_SST = 0.10
DEFAULT_ROBUST = False   # Newey-West HAC p-values
DEFAULT_K = 0.06         # Causality strength threshold
MAX_K = 0.20
DEFAULT_LAGS = 1

# Below this standard deviation a series is treated as constant
DEGENERATE_TOLERANCE = 1e-12

# =============================================================================
# Centrality Constants
# =============================================================================

# Katz decay: alpha = min(KATZ_MAX_ALPHA, KATZ_SPECTRAL_FACTOR / rho(A))
KATZ_MAX_ALPHA = 0.10
KATZ_SPECTRAL_FACTOR = 0.90

# Power iteration budget for eigenvector centrality
EIGENVECTOR_MAX_ITER = 5000

# =============================================================================
# Labels
# =============================================================================

LABELS_CENTRALITIES: List[str] = [
    'Betweenness Centrality',
    'Closeness Centrality',
    'Degree Centrality',
    'Eigenvector Centrality',
    'Katz Centrality',
    'Clustering Coefficient',
]

LABELS_INDICATORS: List[str] = ['DCI', 'CIO', 'CIOO']

# Dataset attribute holding each series, in export order
CENTRALITY_FIELDS: Dict[str, str] = {
    'Betweenness Centrality': 'betweenness',
    'Closeness Centrality': 'closeness',
    'Degree Centrality': 'degree_centrality',
    'Eigenvector Centrality': 'eigenvector',
    'Katz Centrality': 'katz',
    'Clustering Coefficient': 'clustering',
    'Degree': 'degrees',
    'In-Degree': 'degrees_in',
    'Out-Degree': 'degrees_out',
}

SHEET_INDICATORS = 'Indicators'
SHEET_AVERAGE_ADJACENCY = 'Average Adjacency Matrix'
SHEET_AVERAGE_CENTRALITIES = 'Average Centrality Measures'

# =============================================================================
# Data Loading Constants
# =============================================================================

DEFAULT_DATE_COLUMN = 'Date'
DATA_KINDS: List[str] = ['returns', 'prices']
MIN_OBSERVATIONS = MIN_BANDWIDTH

# =============================================================================
# Visualization Colors (Dark Theme - GitHub Style)
# =============================================================================

COLORS: Dict[str, str] = {
    'bg': '#0d1117',
    'panel': '#161b22',
    'text': '#e6edf3',
    'grid': '#30363d',
    'danger': '#f85149',
    'warning': '#d29922',
    'safe': '#3fb950',
    'accent': '#58a6ff',
    'light': '#a5d6ff',
}

# Cycled across firm groups
GROUP_PALETTE: List[str] = [
    '#58a6ff',  # Blue
    '#3fb950',  # Green
    '#f85149',  # Red
    '#d29922',  # Gold
    '#f78166',  # Orange
    '#a5d6ff',  # Light Blue
    '#bc8cff',  # Purple
    '#8b949e',  # Gray
]

DEFAULT_FIGSIZE = (20, 12)
DEFAULT_DPI = 150

# =============================================================================
# File Output Constants
# =============================================================================

DEFAULT_RESULTS_PREFIX = "connectedness_results"
DEFAULT_REPORT_PREFIX = "connectedness_report"
DEFAULT_PLOTS_PREFIX = "connectedness"
