"""
Visualization module.

Generates analysis images for a connectedness dataset: indicator series,
the average causal network, its adjacency matrix and centrality series.
"""

from typing import List, Optional
from pathlib import Path
import logging

import numpy as np
import networkx as nx
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.colors import ListedColormap

from ..core.config import Config
from ..core.constants import GROUP_PALETTE, LABELS_CENTRALITIES, CENTRALITY_FIELDS
from ..analysis.network import NetworkAnalyzer
from ..analysis.results import ConnectednessDataset

logger = logging.getLogger(__name__)


class Visualizer:
    """
    Connectedness visualizer.

    Creates:
    - Indicators (DCI, CIO, CIOO)
    - Average network graph
    - Average adjacency matrix
    - Centrality series (cross-sectional mean per window)
    """

    def __init__(self, config: Config):
        """
        Initialize visualizer.

        Args:
            config: Configuration object
        """
        self.config = config
        self.viz = config.visualization
        self.colors = self.viz.colors

    def _style(self, ax, title: str) -> None:
        ax.set_facecolor(self.colors['panel'])
        ax.set_title(title, fontsize=12, fontweight='bold', color=self.colors['text'])
        ax.tick_params(colors=self.colors['text'])
        for spine in ax.spines.values():
            spine.set_color(self.colors['grid'])

    def _save(self, fig, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(
            output_path,
            dpi=self.viz.dpi,
            facecolor=self.colors['bg'],
            bbox_inches='tight'
        )
        plt.close(fig)
        logger.info(f"Plot saved: {output_path}")
        return output_path

    def _group_colors(self, dataset: ConnectednessDataset) -> List[str]:
        labels = NetworkAnalyzer.group_labels(dataset.n, dataset.group_delimiters)
        return [GROUP_PALETTE[g % len(GROUP_PALETTE)] for g in labels]

    def plot_indicators(self, dataset: ConnectednessDataset, output_path: Path) -> Path:
        """
        Plot DCI, CIO and CIOO over the rolling windows.

        DCI is drawn against the K threshold; CIOO is omitted without groups.
        """
        indicators = dataset.indicators_frame()
        columns = ['DCI', 'CIO', 'CIOO'] if dataset.groups > 0 else ['DCI', 'CIO']

        fig, axes = plt.subplots(
            len(columns), 1, figsize=self.viz.figsize, sharex=True,
            facecolor=self.colors['bg']
        )

        for ax, column in zip(np.atleast_1d(axes), columns):
            series = indicators[column]
            ax.fill_between(series.index, 0, series, color=self.colors['accent'], alpha=0.3)
            ax.plot(series.index, series, color=self.colors['accent'], lw=1.5)
            if column == 'DCI':
                ax.axhline(dataset.k, color=self.colors['danger'], ls='--', lw=1, alpha=0.7)
                ax.fill_between(
                    series.index, dataset.k, series,
                    where=series >= dataset.k, color=self.colors['danger'], alpha=0.3
                )
            ax.set_ylim(0, max(1e-6, float(np.nanmax(series.values)) * 1.1))
            ax.set_ylabel(column, color=self.colors['text'])
            self._style(ax, column)

        fig.suptitle(
            f'INDICATORS{dataset.label}',
            fontsize=16, fontweight='bold', color='white'
        )
        return self._save(fig, output_path)

    def plot_network(self, dataset: ConnectednessDataset, output_path: Path) -> Path:
        """Draw the average causal network, node size by betweenness."""
        fig, ax = plt.subplots(figsize=self.viz.figsize, facecolor=self.colors['bg'])
        self._style(ax, f'AVERAGE NETWORK{dataset.label}')

        G = NetworkAnalyzer.to_digraph(dataset.average_adjacency)
        G = nx.relabel_nodes(G, dict(enumerate(dataset.firms)))
        bt = dataset.average_centralities.betweenness

        pos = nx.circular_layout(G)
        node_colors = self._group_colors(dataset)
        node_sizes = [400 + b * 6000 for b in bt]

        nx.draw_networkx_edges(
            G, pos, ax=ax, edge_color=self.colors['grid'], width=1.2, alpha=0.8,
            arrows=True, arrowsize=12, node_size=node_sizes
        )
        nx.draw_networkx_nodes(
            G, pos, ax=ax, node_color=node_colors, node_size=node_sizes,
            alpha=0.9, edgecolors='white', linewidths=2
        )
        nx.draw_networkx_labels(G, pos, ax=ax, font_size=9, font_color='white', font_weight='bold')
        ax.axis('off')

        if dataset.groups > 0:
            legend = [
                mpatches.Patch(facecolor=GROUP_PALETTE[i % len(GROUP_PALETTE)], label=name)
                for i, name in enumerate(dataset.group_names)
            ]
            ax.legend(handles=legend, loc='lower left', fontsize=8,
                      facecolor=self.colors['panel'], labelcolor=self.colors['text'])

        return self._save(fig, output_path)

    def plot_adjacency_matrix(self, dataset: ConnectednessDataset, output_path: Path) -> Path:
        """Draw the average adjacency matrix with group boundaries."""
        fig, ax = plt.subplots(figsize=self.viz.figsize, facecolor=self.colors['bg'])
        self._style(ax, f'AVERAGE ADJACENCY MATRIX{dataset.label}')

        cmap = ListedColormap([self.colors['panel'], self.colors['accent']])
        ax.imshow(dataset.average_adjacency, cmap=cmap, vmin=0, vmax=1, interpolation='nearest')

        ticks = range(dataset.n)
        ax.set_xticks(ticks)
        ax.set_xticklabels(dataset.firms, rotation=90, fontsize=8, color=self.colors['text'])
        ax.set_yticks(ticks)
        ax.set_yticklabels(dataset.firms, fontsize=8, color=self.colors['text'])

        for d in dataset.group_delimiters:
            ax.axhline(d - 0.5, color=self.colors['warning'], lw=1.5)
            ax.axvline(d - 0.5, color=self.colors['warning'], lw=1.5)

        return self._save(fig, output_path)

    def plot_centralities(self, dataset: ConnectednessDataset, output_path: Path) -> Path:
        """Plot the cross-sectional mean of each centrality per window."""
        fig, axes = plt.subplots(3, 2, figsize=self.viz.figsize, sharex=True, facecolor=self.colors['bg'])

        for ax, label in zip(axes.flat, LABELS_CENTRALITIES):
            values = getattr(dataset, CENTRALITY_FIELDS[label])
            mean = values.mean(axis=1)
            lo = values.min(axis=1)
            hi = values.max(axis=1)
            ax.fill_between(dataset.dates, lo, hi, color=self.colors['light'], alpha=0.2)
            ax.plot(dataset.dates, mean, color=self.colors['safe'], lw=1.5)
            self._style(ax, label.upper())

        fig.suptitle(
            f'CENTRALITY MEASURES{dataset.label}',
            fontsize=16, fontweight='bold', color='white'
        )
        return self._save(fig, output_path)

    def create_all(
        self,
        dataset: ConnectednessDataset,
        output_dir: Path,
        prefix: Optional[str] = None
    ) -> List[Path]:
        """
        Create every analysis plot.

        Args:
            dataset: Finalized dataset
            output_dir: Output directory
            prefix: File name prefix (default: configured plots prefix)

        Returns:
            Paths of the saved images
        """
        output_dir = Path(output_dir)
        prefix = prefix or self.config.output.plots_prefix

        logger.info(f"Creating analysis plots in {output_dir}")

        return [
            self.plot_indicators(dataset, output_dir / f"{prefix}_indicators.png"),
            self.plot_network(dataset, output_dir / f"{prefix}_network.png"),
            self.plot_adjacency_matrix(dataset, output_dir / f"{prefix}_adjacency.png"),
            self.plot_centralities(dataset, output_dir / f"{prefix}_centralities.png"),
        ]
