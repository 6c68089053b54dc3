"""Notebook helpers (ipywidgets)."""

from .progress import ProgressBar

__all__ = ["ProgressBar"]
