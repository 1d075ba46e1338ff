"""Curvas: soccer-score ticket allocation and settlement."""

__version__ = "0.1.0"
