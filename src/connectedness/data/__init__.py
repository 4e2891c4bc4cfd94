"""Data module - Return panel loading and preprocessing"""

from .loader import PanelLoader, ReturnPanel, order_by_groups

__all__ = [
    "PanelLoader",
    "ReturnPanel",
    "order_by_groups",
]
