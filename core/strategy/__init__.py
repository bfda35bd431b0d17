"""Basic strategy tables and the training engine."""

from core.strategy.basic import PlayerAction, StrategyCode, resolve_action
from core.strategy.loader import FileStrategySource, HttpStrategySource
from core.strategy.service import StrategyService
from core.strategy.table import StrategyTable
from core.strategy.training import ActionValidation, TrainingFilter, TrainingScenario

__all__ = [
    "PlayerAction",
    "StrategyCode",
    "resolve_action",
    "FileStrategySource",
    "HttpStrategySource",
    "StrategyService",
    "StrategyTable",
    "ActionValidation",
    "TrainingFilter",
    "TrainingScenario",
]
