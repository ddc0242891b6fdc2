"""Scoring statistics and the end-of-leg summary."""

from __future__ import annotations

import html
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..state.models import Player

if TYPE_CHECKING:
    from ..state.game_state import X01Game

TON = 100
MAXIMUM = 180


def average(player: Player) -> float:
    """Per-visit average; a bust scores zero but still counts as a visit."""

    if not player.turns:
        return 0.0
    scored = sum(turn.entered for turn in player.turns if not turn.is_bust)
    return scored / len(player.turns)


def format_average(value: float) -> str:
    return f"{value:.1f}"


@dataclass(slots=True)
class PlayerStats:
    name: str
    visits: int
    busts: int
    average: float
    best_visit: int
    tons: int
    maximums: int
    remaining: int


@dataclass(slots=True)
class GameStats:
    """Snapshot of a leg used for the final announcement."""

    winner_name: Optional[str]
    checkout: Optional[int]
    total_visits: int
    duration_seconds: int
    duration_text: str
    players: List[PlayerStats]


def _format_duration(seconds: int) -> str:
    seconds = max(seconds, 0)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h{minutes:02d}m{seconds:02d}s"
    if minutes:
        return f"{minutes}m{seconds:02d}s"
    return f"{seconds}s"


def _collect_player_stats(player: Player) -> PlayerStats:
    scored = [turn.entered for turn in player.turns if not turn.is_bust]
    return PlayerStats(
        name=player.display_name,
        visits=len(player.turns),
        busts=sum(1 for turn in player.turns if turn.is_bust),
        average=average(player),
        best_visit=max(scored, default=0),
        tons=sum(1 for value in scored if TON <= value < MAXIMUM),
        maximums=sum(1 for value in scored if value == MAXIMUM),
        remaining=player.remaining,
    )


def collect_game_stats(game: "X01Game", *, now: datetime | None = None) -> GameStats:
    """Aggregate per-player figures for the scoreboard and final summary."""

    moment = now or datetime.now(timezone.utc)
    duration_seconds = 0
    if game.started_at:
        duration_seconds = int(max((moment - game.started_at).total_seconds(), 0))
    winner = game.winner
    checkout = winner.turns[0].before if winner and winner.turns else None
    players = [_collect_player_stats(player) for player in game.players]
    return GameStats(
        winner_name=winner.display_name if winner else None,
        checkout=checkout,
        total_visits=sum(item.visits for item in players),
        duration_seconds=duration_seconds,
        duration_text=_format_duration(duration_seconds),
        players=players,
    )


def _format_player_line(item: PlayerStats) -> str:
    parts = [
        f"<b>{html.escape(item.name)}</b>",
        f"Ø {format_average(item.average)}",
        f"{item.visits} visits",
    ]
    if item.busts:
        parts.append(f"{item.busts} bust{'s' if item.busts != 1 else ''}")
    if item.best_visit:
        parts.append(f"best {item.best_visit}")
    if item.tons:
        parts.append(f"{item.tons}× 100+")
    if item.maximums:
        parts.append(f"{item.maximums}× 180")
    return " · ".join(parts)


def format_stats_message(stats: GameStats) -> str:
    """Render the end-of-leg summary as Telegram HTML."""

    lines = ["📈 <b>Leg stats</b>"]
    if stats.winner_name:
        lines.append(f"🏆 Winner: <b>{html.escape(stats.winner_name)}</b>")
    if stats.checkout is not None:
        lines.append(f"🎯 Checkout: {stats.checkout}")
    lines.append(f"🕐 Duration: {stats.duration_text}")
    lines.append(f"🧮 Visits: {stats.total_visits}")
    lines.extend(_format_player_line(item) for item in stats.players)
    return "\n".join(lines)


def rank_players(players: Sequence[Player]) -> List[Player]:
    """Order players by remaining score, lowest first (stable for ties)."""

    return sorted(players, key=lambda player: player.remaining)


__all__ = [
    "GameStats",
    "PlayerStats",
    "average",
    "collect_game_stats",
    "format_average",
    "format_stats_message",
    "rank_players",
]
