"""Strategy lookups and training scenario generation."""

import asyncio
import logging
from random import Random

from pydantic import ValidationError

from core.cards import DEALER_CODES, Card, Rank, Suit, rank_for_code, rank_for_value
from core.errors import StrategyLoadError, StrategyNotLoadedError
from core.hand import HandAnalysis, HandType
from core.strategy.basic import (
    ACTION_EXPLANATIONS,
    ACTION_LABELS,
    PlayerAction,
    StrategyCode,
    resolve_action,
)
from core.strategy.loader import StrategySource, default_strategy_source
from core.strategy.table import StrategyTable
from core.strategy.training import ActionValidation, TrainingFilter, TrainingScenario

logger = logging.getLogger(__name__)


class StrategyService:
    """
    Loads a basic strategy table and answers questions about it.

    The table is fetched once per service. Concurrent ``load_strategy``
    callers share a single in-flight load and see the same outcome; a
    failed load is forgotten so the next call can try again.
    """

    def __init__(
        self,
        source: StrategySource | None = None,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            source: Where to read the table from (packaged JSON by default)
            rng: Random number generator for scenario generation
        """
        self._source = source or default_strategy_source()
        self._rng = rng or Random()
        self._table: StrategyTable | None = None
        self._load_task: asyncio.Task[StrategyTable] | None = None
        self._error: str | None = None

    @property
    def is_loaded(self) -> bool:
        """Check if the table is available."""
        return self._table is not None

    @property
    def error(self) -> str | None:
        """Message of the last failed load, if any."""
        return self._error

    @property
    def table(self) -> StrategyTable:
        """The loaded table."""
        if self._table is None:
            raise StrategyNotLoadedError("Strategy table has not been loaded")
        return self._table

    async def load_strategy(self) -> StrategyTable:
        """
        Load the strategy table, at most once at a time.

        Raises:
            StrategyLoadError: If the source fails or the document is malformed
        """
        if self._table is not None:
            return self._table

        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._fetch())

        # Shielded so a cancelled caller does not cancel the shared load
        return await asyncio.shield(self._load_task)

    async def _fetch(self) -> StrategyTable:
        try:
            document = await self._source()
            table = StrategyTable.model_validate(document)
        except StrategyLoadError as exc:
            self._fail(str(exc))
            raise
        except ValidationError as exc:
            self._fail(f"Malformed strategy table: {exc}")
            raise StrategyLoadError(f"Malformed strategy table: {exc}") from exc
        except Exception as exc:
            self._fail(f"{type(exc).__name__}: {exc}")
            raise StrategyLoadError(str(exc)) from exc

        self._table = table
        self._error = None
        logger.info(
            "Strategy table loaded: %s",
            table.strategy_name or repr(self._source),
        )
        return table

    def _fail(self, message: str) -> None:
        self._error = f"Failed to load strategy: {message}"
        self._load_task = None
        logger.error(self._error)

    def get_recommended_action(
        self,
        hand_analysis: HandAnalysis,
        dealer_up_card: Card,
        can_double: bool = True,
        can_split: bool = True,
    ) -> PlayerAction | None:
        """
        Get the table's action for a classified hand.

        Args:
            hand_analysis: Classification of the player's hand
            dealer_up_card: The dealer's visible card
            can_double: Whether doubling is allowed
            can_split: Whether splitting is allowed

        Returns:
            The recommended action, or None if the table has no entry
        """
        code = self.table.lookup(hand_analysis, dealer_up_card.strategy_code)
        if code is None:
            logger.debug(
                "No strategy entry for %s vs %s",
                hand_analysis,
                dealer_up_card.strategy_code,
            )
            return None
        return resolve_action(code, can_double, can_split)

    def get_action_explanation(self, code: StrategyCode) -> str:
        """Describe a table code."""
        return ACTION_EXPLANATIONS.get(code, "Unknown action")

    def generate_training_scenario(self, filter: TrainingFilter) -> TrainingScenario | None:
        """
        Generate a random two-card hand and dealer up-card.

        Args:
            filter: Which hand classifications may be drawn

        Returns:
            The scenario, or None if every type is filtered out or the
            table lacks the drawn entry
        """
        table = self.table

        available = filter.enabled_types
        if not available:
            return None

        hand_type = self._rng.choice(available)
        dealer_code = self._rng.choice(DEALER_CODES)

        if hand_type == HandType.HARD:
            totals = table.hard_totals(5, 17)
            if not totals:
                return None
            total = self._rng.choice(totals)
            row = table.hard_row(total)
            player_cards = self._create_hard_hand(total)
            can_split = False
        elif hand_type == HandType.SOFT:
            keys = [
                k for k in table.soft_hands
                if len(k) == 2 and k.startswith("A") and k != "AA"
            ]
            if not keys:
                return None
            soft_key = self._rng.choice(keys)
            row = table.soft_hands[soft_key]
            player_cards = self._create_soft_hand(soft_key)
            can_split = False
        else:
            ranks = list(table.pair_splitting)
            if not ranks:
                return None
            pair_rank = self._rng.choice(ranks)
            row = table.pair_splitting[pair_rank]
            player_cards = self._create_pair_hand(pair_rank)
            can_split = True

        code = row.get(dealer_code) if row is not None else None  # type: ignore[call-overload]
        if code is None:
            logger.debug("No strategy entry for %s vs %s", hand_type, dealer_code)
            return None

        return TrainingScenario(
            player_cards=player_cards,
            dealer_up_card=self._create_card(rank_for_code(dealer_code, self._rng)),
            correct_action=resolve_action(code, True, can_split),
            hand_type=hand_type,
            explanation=self.get_action_explanation(code),
            strategy_code=code,
        )

    def validate_action(
        self,
        player_action: PlayerAction,
        hand_analysis: HandAnalysis,
        dealer_up_card: Card,
        can_double: bool = True,
        can_split: bool = True,
    ) -> ActionValidation:
        """Check ``player_action`` against a freshly computed recommendation."""
        correct_action = self.get_recommended_action(
            hand_analysis,
            dealer_up_card,
            can_double,
            can_split,
        )

        if correct_action is None:
            return ActionValidation(
                is_correct=False,
                correct_action=player_action,
                explanation="Strategy could not be determined",
            )

        is_correct = player_action == correct_action
        if is_correct:
            explanation = "Correct! That is the optimal play."
        else:
            explanation = f"The optimal play is: {ACTION_LABELS[correct_action]}"

        return ActionValidation(is_correct, correct_action, explanation)

    def _create_card(self, rank: Rank) -> Card:
        return Card(rank, self._rng.choice(list(Suit)))

    def _create_hard_hand(self, total: int) -> tuple[Card, ...]:
        """Two ace-free, non-pair cards summing to ``total``."""
        splits = [
            (first, total - first)
            for first in range(2, 11)
            if 2 <= total - first <= 10 and first != total - first
        ]
        if not splits:
            raise ValueError(f"No two-card hard hand totals {total}")

        first, second = self._rng.choice(splits)
        return (
            self._create_card(rank_for_value(first, self._rng)),
            self._create_card(rank_for_value(second, self._rng)),
        )

    def _create_soft_hand(self, soft_key: str) -> tuple[Card, ...]:
        """An ace plus the card named by a key like 'A7'."""
        other = rank_for_code(soft_key[1:], self._rng)
        return (self._create_card(Rank.ACE), self._create_card(other))

    def _create_pair_hand(self, pair_rank: str) -> tuple[Card, ...]:
        """Two cards of one rank in different suits."""
        rank = rank_for_code(pair_rank, self._rng)
        first_suit, second_suit = self._rng.sample(list(Suit), 2)
        return (Card(rank, first_suit), Card(rank, second_suit))
