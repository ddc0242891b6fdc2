"""Pure rule functions: visit evaluation and checkout suggestions."""

from .checkout import DOUBLE_OUT_FINISHES, MASTER_OUT_FINISHES, finish_segments
from .evaluator import MAX_VISIT_SCORE, TurnOutcome, evaluate, is_valid_entry, is_valid_finish

__all__ = [
    "DOUBLE_OUT_FINISHES",
    "MASTER_OUT_FINISHES",
    "MAX_VISIT_SCORE",
    "TurnOutcome",
    "evaluate",
    "finish_segments",
    "is_valid_entry",
    "is_valid_finish",
]
