"""Exceptions raised by the blackjack core."""


class BlackjackError(Exception):
    """Base class for all core errors."""


class EmptyDeckError(BlackjackError):
    """Raised when drawing from an exhausted deck."""


class HandClosedError(BlackjackError):
    """Raised when a card is added to a standing or busted hand."""


class InvalidSplitError(BlackjackError):
    """Raised when a hand that cannot be split is split."""


class InvalidDoubleError(BlackjackError):
    """Raised when a hand that cannot be doubled is doubled."""


class StrategyLoadError(BlackjackError):
    """Raised when the strategy table cannot be fetched or parsed."""


class StrategyNotLoadedError(StrategyLoadError):
    """Raised when the strategy table is used before it has been loaded."""


class StatsFormatError(BlackjackError):
    """Raised when persisted training stats are malformed."""
