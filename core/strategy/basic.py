"""Player actions and strategy table action codes."""

from dataclasses import dataclass
from enum import Enum


class PlayerAction(Enum):
    """Possible player actions."""

    HIT = "hit"
    STAND = "stand"
    DOUBLE = "double"
    SPLIT = "split"

    def __str__(self) -> str:
        return self.value.title()


class StrategyCode(Enum):
    """Action codes used by strategy tables."""

    HIT = "H"
    STAND = "S"
    DOUBLE = "D"
    DOUBLE_OR_HIT = "Dh"  # Double if allowed, else hit
    DOUBLE_OR_STAND = "Ds"  # Double if allowed, else stand
    SPLIT = "P"
    SPLIT_OR_HIT = "Ph"  # Split if allowed, else hit
    SPLIT_OR_STAND = "Ps"  # Split if allowed, else stand

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ActionMapping:
    """Primary action of a code and what to do when it is not allowed."""

    primary: PlayerAction
    fallback: PlayerAction | None = None


STRATEGY_ACTION_MAP: dict[StrategyCode, ActionMapping] = {
    StrategyCode.HIT: ActionMapping(PlayerAction.HIT),
    StrategyCode.STAND: ActionMapping(PlayerAction.STAND),
    StrategyCode.DOUBLE: ActionMapping(PlayerAction.DOUBLE),
    StrategyCode.DOUBLE_OR_HIT: ActionMapping(PlayerAction.DOUBLE, PlayerAction.HIT),
    StrategyCode.DOUBLE_OR_STAND: ActionMapping(PlayerAction.DOUBLE, PlayerAction.STAND),
    StrategyCode.SPLIT: ActionMapping(PlayerAction.SPLIT),
    StrategyCode.SPLIT_OR_HIT: ActionMapping(PlayerAction.SPLIT, PlayerAction.HIT),
    StrategyCode.SPLIT_OR_STAND: ActionMapping(PlayerAction.SPLIT, PlayerAction.STAND),
}

ACTION_EXPLANATIONS: dict[StrategyCode, str] = {
    StrategyCode.HIT: "Hit - take another card",
    StrategyCode.STAND: "Stand - take no more cards",
    StrategyCode.DOUBLE: "Double down - double the bet and take exactly one card",
    StrategyCode.DOUBLE_OR_HIT: "Double if allowed, otherwise hit",
    StrategyCode.DOUBLE_OR_STAND: "Double if allowed, otherwise stand",
    StrategyCode.SPLIT: "Split - play the pair as two hands",
    StrategyCode.SPLIT_OR_HIT: "Split if allowed, otherwise hit",
    StrategyCode.SPLIT_OR_STAND: "Split if allowed, otherwise stand",
}

ACTION_LABELS: dict[PlayerAction, str] = {
    PlayerAction.HIT: "Hit (take a card)",
    PlayerAction.STAND: "Stand (keep the hand)",
    PlayerAction.DOUBLE: "Double (double the bet)",
    PlayerAction.SPLIT: "Split (split the pair)",
}


def resolve_action(code: StrategyCode, can_double: bool, can_split: bool) -> PlayerAction:
    """
    Resolve a table code to the action to take.

    Codes without a fallback (D, P) fall back to hitting when their
    primary action is not allowed.
    """
    mapping = STRATEGY_ACTION_MAP[code]

    if mapping.primary == PlayerAction.SPLIT:
        if can_split:
            return PlayerAction.SPLIT
        return mapping.fallback or PlayerAction.HIT

    if mapping.primary == PlayerAction.DOUBLE:
        if can_double:
            return PlayerAction.DOUBLE
        return mapping.fallback or PlayerAction.HIT

    return mapping.primary
