"""Game phase enumeration."""

from enum import Enum


class GamePhase(Enum):
    """
    Round state machine phases.

    Flow: BETTING → DEALING → PLAYER_TURN → DEALER_TURN → SETTLEMENT → GAME_OVER
    """

    # Waiting for a bet
    BETTING = "betting"

    # Cards being dealt
    DEALING = "dealing"

    # Player making decisions
    PLAYER_TURN = "player-turn"

    # Dealer plays out the hand
    DEALER_TURN = "dealer-turn"

    # Determining winners and payouts
    SETTLEMENT = "settlement"

    # Round complete, results on display
    GAME_OVER = "game-over"

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


class GameMode(Enum):
    """Play for chips or drill basic strategy."""

    PLAY = "play"
    TRAINING = "training"


class TrainingPhase(Enum):
    """
    Trainer cycle, separate from the round phases.

    Flow: IDLE → SCENARIO_SHOWN → ANSWERED → (next scenario) SCENARIO_SHOWN
    """

    # Trainer off, or no scenario matched the filter
    IDLE = "idle"

    # Waiting for an answer
    SCENARIO_SHOWN = "scenario-shown"

    # Feedback on display until the next scenario
    ANSWERED = "answered"


# Valid phase transitions
VALID_TRANSITIONS: dict[GamePhase, list[GamePhase]] = {
    GamePhase.BETTING: [GamePhase.DEALING],
    GamePhase.DEALING: [GamePhase.PLAYER_TURN, GamePhase.SETTLEMENT],  # SETTLEMENT on a natural
    GamePhase.PLAYER_TURN: [GamePhase.DEALER_TURN],
    GamePhase.DEALER_TURN: [GamePhase.SETTLEMENT],
    GamePhase.SETTLEMENT: [GamePhase.GAME_OVER],
    GamePhase.GAME_OVER: [GamePhase.BETTING],
}


def is_valid_transition(from_phase: GamePhase, to_phase: GamePhase) -> bool:
    """
    Check if a phase transition is valid.

    Args:
        from_phase: Current phase
        to_phase: Desired phase

    Returns:
        True if the transition is allowed
    """
    return to_phase in VALID_TRANSITIONS.get(from_phase, [])
