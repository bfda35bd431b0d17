"""Strategy table document model."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

from core.hand import HandAnalysis, HandType
from core.strategy.basic import StrategyCode

DealerCode = Literal["2", "3", "4", "5", "6", "7", "8", "9", "T", "A"]

DealerRow = dict[DealerCode, StrategyCode]


def hard_key_total(key: str) -> int | None:
    """Return the total a hard-hand key stands for ('12' → 12, '17+' → 17)."""
    try:
        return int(key.rstrip("+"))
    except ValueError:
        return None


class StrategyTable(BaseModel):
    """
    A basic strategy table as published in ``blackjack_strategy.json``.

    Each sub-table maps a hand key to a row of dealer up-card codes. String
    entries next to the rows (sub-table descriptions) are dropped.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    strategy_name: str = ""
    description: str = ""
    actions: dict[str, str] = {}
    hard_hands: dict[str, DealerRow]
    soft_hands: dict[str, DealerRow]
    pair_splitting: dict[str, DealerRow]
    dealer_upcard: dict[str, str] = {}
    notes: dict[str, str] = {}

    @field_validator("hard_hands", "soft_hands", "pair_splitting", mode="before")
    @classmethod
    def _drop_descriptions(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if not isinstance(v, str)}
        return value

    def hard_row(self, total: int) -> DealerRow | None:
        """Row for a hard total, honoring open-ended keys like '17+'."""
        row = self.hard_hands.get(str(total))
        if row is not None:
            return row
        for key, candidate in self.hard_hands.items():
            floor = hard_key_total(key)
            if key.endswith("+") and floor is not None and total >= floor:
                return candidate
        return None

    def lookup(self, analysis: HandAnalysis, dealer_code: str) -> StrategyCode | None:
        """
        Find the table code for a classified hand against a dealer up-card.

        Returns:
            The action code, or None if the table has no entry
        """
        row: DealerRow | None = None

        if analysis.type == HandType.PAIR:
            if analysis.pair_rank:
                row = self.pair_splitting.get(analysis.pair_rank)
        elif analysis.type == HandType.SOFT:
            if analysis.soft_card:
                row = self.soft_hands.get(f"A{analysis.soft_card}")
        else:
            row = self.hard_row(analysis.value)

        if row is None:
            return None
        return row.get(dealer_code)  # type: ignore[call-overload]

    def hard_totals(self, low: int = 5, high: int = 17) -> list[int]:
        """Distinct hard totals in ``[low, high]`` the table has rows for."""
        totals = {hard_key_total(key) for key in self.hard_hands}
        return sorted(t for t in totals if t is not None and low <= t <= high)
