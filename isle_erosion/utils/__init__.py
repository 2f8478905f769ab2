"""Rendering helpers."""

from .grid_visualizer import render_island

__all__ = ["render_island"]
