"""Application package: game startup and task orchestration."""

from .game import Game

__all__ = ["Game"]
