"""Rendering helpers for the X01 scoreboard."""

from __future__ import annotations

import html
import io
from dataclasses import dataclass
from typing import Iterable

from PIL import Image, ImageDraw, ImageFont

from ..services.stats import average, format_average, rank_players
from ..state.game_state import X01Game
from ..state.models import Player


@dataclass(slots=True)
class ScoreboardTheme:
    """Colours and fonts used by the PNG scoreboard."""

    background: str = "#101418"
    panel: str = "#1d232a"
    active_panel: str = "#f4f1ea"
    primary_text: str = "#f4f1ea"
    active_text: str = "#101418"
    muted_text: str = "#8d99a6"
    accent: str = "#d62828"


class ScoreboardRenderer:
    """Render Telegram HTML scoreboards and Pillow images."""

    BOARD_WIDTH = 1024
    HEADER_HEIGHT = 120
    TILE_HEIGHT = 150
    FOOTER_HEIGHT = 110
    REGULAR_FONTS = (
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    )
    BOLD_FONTS = (
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    )

    def __init__(self, theme: ScoreboardTheme | None = None) -> None:
        self.theme = theme or ScoreboardTheme()
        self._font_cache: dict[tuple[int, bool], ImageFont.ImageFont] = {}

    # Text -------------------------------------------------------------
    def render_setup(self, game: X01Game) -> str:
        """Summarise the roster and settings shown before a leg starts."""

        lines = [
            "🎯 <b>X01 setup</b>",
            f"Start: <b>{game.start_score}</b> · Out: <b>{game.out_rule.label}</b>",
            "",
            "<b>Players</b>",
        ]
        if game.players:
            for number, player in enumerate(game.players, start=1):
                name = html.escape(player.display_name) or "<i>(no name)</i>"
                lines.append(f"{number}. {name}")
        else:
            lines.append("No players yet. Use /addplayer.")
        if not game.can_start:
            lines.append("")
            lines.append("Every player needs a name before the game can start.")
        return "\n".join(lines)

    def render_scoreboard(self, game: X01Game) -> str:
        """Return the in-game board: scores, averages, checkout and input."""

        title = f"🎯 <b>{game.start_score}</b> · {game.out_rule.label} out"
        lines = [title, ""]
        for index, player in enumerate(game.players):
            marker = "▶️" if index == game.current_player_index and game.phase.is_in_game else "▫️"
            lines.append(
                f"{marker} {html.escape(player.display_name)}: <b>{player.remaining}</b>"
                f" (Ø {format_average(average(player))})"
            )
        lines.append("")
        winner = game.winner
        if winner is not None:
            lines.append(f"🏆 <b>{html.escape(winner.display_name)}</b> wins the leg!")
            return "\n".join(lines)
        segments = game.finish_segments()
        if segments:
            lines.append(f"Checkout: {' · '.join(segments)}")
        lines.append(f"Score: <code>{game.score_input or '—'}</code>")
        return "\n".join(lines)

    def render_history(self, player: Player, limit: int = 5) -> str:
        """Return the most recent visits of a player."""

        turns = player.turns[:limit]
        entries: Iterable[str] = (
            f"• {turn.entered} → {turn.after}" + (" (bust)" if turn.is_bust else "")
            for turn in turns
        )
        return "\n".join(entries) if turns else "No visits yet."

    def render_standings(self, game: X01Game) -> str:
        lines = ["<b>Standings</b>"]
        for position, player in enumerate(rank_players(game.players), start=1):
            lines.append(f"{position}. {html.escape(player.display_name)}: {player.remaining}")
        return "\n".join(lines)

    # Image ------------------------------------------------------------
    def render_board_image(self, game: X01Game) -> io.BytesIO:
        """Render the scoreboard as a PNG stored in an in-memory buffer."""

        rows = max(len(game.players), 1)
        height = self.HEADER_HEIGHT + rows * self.TILE_HEIGHT + self.FOOTER_HEIGHT
        image = Image.new("RGB", (self.BOARD_WIDTH, height), color=self.theme.background)
        draw = ImageDraw.Draw(image)
        self._draw_header(draw, game)
        for index, player in enumerate(game.players):
            active = index == game.current_player_index and not game.phase.is_setup
            self._draw_tile(draw, index, player, active=active)
        self._draw_footer(draw, game, height)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        buffer.seek(0)
        return buffer

    def _draw_header(self, draw: ImageDraw.ImageDraw, game: X01Game) -> None:
        title = f"{game.start_score} · {game.out_rule.label.upper()} OUT"
        font = self._get_font(56, bold=True)
        title_width = draw.textlength(title, font=font)
        y = (self.HEADER_HEIGHT - self._font_height(font)) / 2
        draw.text(((self.BOARD_WIDTH - title_width) / 2, y), title, font=font, fill=self.theme.primary_text)

    def _draw_tile(self, draw: ImageDraw.ImageDraw, index: int, player: Player, *, active: bool) -> None:
        margin = 24
        top = self.HEADER_HEIGHT + index * self.TILE_HEIGHT
        rect = (margin, top + 8, self.BOARD_WIDTH - margin, top + self.TILE_HEIGHT - 8)
        fill = self.theme.active_panel if active else self.theme.panel
        text_fill = self.theme.active_text if active else self.theme.primary_text
        draw.rounded_rectangle(rect, radius=24, fill=fill)
        name_font = self._get_font(40, bold=True)
        avg_font = self._get_font(30)
        score_font = self._get_font(88, bold=True)
        draw.text((margin + 28, top + 30), player.display_name or "—", font=name_font, fill=text_fill)
        draw.text(
            (margin + 28, top + 84),
            f"Ø {format_average(average(player))}",
            font=avg_font,
            fill=self.theme.muted_text,
        )
        score = str(player.remaining)
        score_width = draw.textlength(score, font=score_font)
        score_y = top + (self.TILE_HEIGHT - self._font_height(score_font)) / 2 - 8
        draw.text(
            (self.BOARD_WIDTH - margin - 28 - score_width, score_y),
            score,
            font=score_font,
            fill=text_fill,
        )

    def _draw_footer(self, draw: ImageDraw.ImageDraw, game: X01Game, height: int) -> None:
        winner = game.winner
        if winner is not None:
            text = f"Winner: {winner.display_name}"
        else:
            text = " · ".join(game.finish_segments()) if game.phase.is_in_game else ""
        if not text:
            return
        font = self._get_font(44, bold=True)
        text_width = draw.textlength(text, font=font)
        y = height - self.FOOTER_HEIGHT + (self.FOOTER_HEIGHT - self._font_height(font)) / 2
        draw.text(((self.BOARD_WIDTH - text_width) / 2, y), text, font=font, fill=self.theme.accent)

    def _get_font(self, size: int, *, bold: bool = False) -> ImageFont.ImageFont:
        key = (size, bold)
        cached = self._font_cache.get(key)
        if cached:
            return cached
        candidates = self.BOLD_FONTS if bold else self.REGULAR_FONTS
        for path in candidates:
            try:
                font = ImageFont.truetype(path, size=size)
                self._font_cache[key] = font
                return font
            except OSError:
                continue
        fallback = ImageFont.load_default()
        self._font_cache[key] = fallback
        return fallback

    def _font_height(self, font: ImageFont.ImageFont) -> int:
        bbox = font.getbbox("0")
        return int(bbox[3] - bbox[1])
