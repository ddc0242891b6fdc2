"""Service layer for the X01 scorekeeper."""

from .stats import GameStats, PlayerStats, average, collect_game_stats, format_average, format_stats_message

__all__ = [
    "GameStats",
    "PlayerStats",
    "average",
    "collect_game_stats",
    "format_average",
    "format_stats_message",
]
