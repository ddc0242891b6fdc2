"""State management primitives for the X01 scorekeeper."""

from .models import GameAction, OutRule, Phase, PhaseKind, Player, Turn

__all__ = ["GameAction", "OutRule", "Phase", "PhaseKind", "Player", "Turn"]
