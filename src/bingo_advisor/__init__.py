"""Bingo move advisor using tiered line heuristics and random rollouts."""

from .board import BingoBoard
from .config import EngineConfig, load_config
from .evaluator import Recommendation, Tier, recommend, score_cell
from .lines import Line, LineKind, all_lines, completed_lines
from .rollout import estimate_success_frequency, exact_success_frequency
from .session import BingoSession, Snapshot, TurnPhase

__version__ = "0.1.0"
__all__ = [
    "BingoBoard",
    "EngineConfig",
    "load_config",
    "Recommendation",
    "Tier",
    "recommend",
    "score_cell",
    "Line",
    "LineKind",
    "all_lines",
    "completed_lines",
    "estimate_success_frequency",
    "exact_success_frequency",
    "BingoSession",
    "Snapshot",
    "TurnPhase",
]
