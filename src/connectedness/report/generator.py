"""
Report generation module.

Generates text-based connectedness reports.
"""

from datetime import datetime
from typing import Optional
import logging

import numpy as np

from ..core.config import Config
from ..core.constants import LABELS_CENTRALITIES
from ..analysis.results import ConnectednessDataset

logger = logging.getLogger(__name__)

RULE = "━" * 82


class ReportGenerator:
    """
    Text report generator.

    Summarizes the latest indicators, how often the causality index exceeded
    its threshold, the densest windows and the most central firms of the
    average network.
    """

    def __init__(self, config: Config, top_n: int = 5):
        """
        Initialize report generator.

        Args:
            config: Configuration object
            top_n: Number of firms listed per centrality
        """
        self.config = config
        self.top_n = top_n

    @staticmethod
    def _section(title: str) -> str:
        return f"\n{RULE}\n{title}\n{RULE}\n"

    def generate(self, dataset: ConnectednessDataset, date: Optional[datetime] = None) -> str:
        """
        Generate connectedness report.

        Args:
            dataset: Finalized dataset
            date: Report date (default: now)

        Returns:
            Formatted report string
        """
        date = date or datetime.now()
        indicators = dataset.indicators_frame()
        dci = indicators['DCI']
        last = indicators.iloc[-1]

        report = f"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                       CONNECTEDNESS REPORT                                     ║
║                       {date.strftime('%Y-%m-%d %H:%M')}                                       ║
╚═══════════════════════════════════════════════════════════════════════════════╝
"""
        report += self._section(f"PARAMETERS{dataset.label}")
        report += f"Firms:             {dataset.n}\n"
        report += f"Groups:            {dataset.groups}\n"
        report += f"Window Length:     {dataset.bw}\n"
        report += f"Windows:           {dataset.t}\n"

        report += self._section("LATEST WINDOW")
        report += f"Window End:        {indicators.index[-1]}\n"
        report += f"DCI:               {last['DCI']:.4f}\n"
        report += f"CIO:               {last['CIO']:.4f}\n"
        if dataset.groups > 0:
            report += f"CIOO:              {last['CIOO']:.4f}\n"

        exceeded = int((dci >= dataset.k).sum())
        report += self._section("DYNAMIC CAUSALITY INDEX")
        report += f"Mean DCI:          {dci.mean():.4f}\n"
        report += f"Max DCI:           {dci.max():.4f} ({dci.idxmax()})\n"
        report += f"DCI >= K:          {exceeded}/{dataset.t} windows ({exceeded / dataset.t * 100:.1f}%)\n"

        report += "\nDensest windows:\n"
        for when, value in dci.sort_values(ascending=False).head(self.top_n).items():
            bar = '█' * int(value * 40)
            report += f"  {str(when):<20} {value:.4f}  {bar}\n"

        am = dataset.average_adjacency
        report += self._section("AVERAGE NETWORK")
        report += f"Edges:             {int(am.sum())} of {dataset.n * (dataset.n - 1)}\n"
        report += f"Threshold:         {dataset.average_threshold:.4f}\n"

        centralities = dataset.average_centralities_frame()
        for label in LABELS_CENTRALITIES:
            ranked = centralities[label].sort_values(ascending=False).head(self.top_n)
            report += f"\n{label}:\n"
            for i, (firm, value) in enumerate(ranked.items(), 1):
                report += f"  #{i}  {firm:<12}  {value:.4f}\n"

        report += self._section("MOST CAUSAL FIRMS (mean out-degree)")
        out_degree = np.nanmean(dataset.degrees_out, axis=0)
        for i in np.argsort(-out_degree, kind='stable')[:self.top_n]:
            report += f"  {dataset.firms[i]:<12}  {out_degree[i]:.2f}\n"

        report += RULE + "\n"
        return report

    def generate_summary(self, dataset: ConnectednessDataset) -> str:
        """
        Generate brief summary.

        Args:
            dataset: Finalized dataset

        Returns:
            Brief summary string
        """
        last = dataset.indicators_frame().iloc[-1]
        hub = dataset.average_centralities_frame()['Betweenness Centrality'].idxmax()
        return f"""
[{dataset.dates[-1]}] Connectedness Summary
─────────────────────────────────
DCI: {last['DCI']:.4f}   CIO: {last['CIO']:.4f}
Top Hub: {hub}
Average Network Edges: {int(dataset.average_adjacency.sum())}
─────────────────────────────────
"""
