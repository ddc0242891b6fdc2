"""Rendering facade for the X01 scorekeeper."""

from .board import ScoreboardRenderer, ScoreboardTheme

__all__ = ["ScoreboardRenderer", "ScoreboardTheme"]
