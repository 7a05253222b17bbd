"""Validation schema for Binokel rules configuration."""

from __future__ import annotations

from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .bidding import BID_INCREMENT, MIN_BID
from .deck import DABB_SIZE, DECK_SIZE, HAND_SIZES
from .melds import MELD_BASE_POINTS, MELD_TRUMP_BONUS, MeldType

MELD_NAMES = tuple(meld_type.value for meld_type in MeldType)


def _validate_meld_name(value: str) -> str:
    normalized = value.lower()
    if normalized not in MELD_NAMES:
        raise ValueError(f"Unknown meld: {value!r}")
    return normalized


class ScoringConfig(BaseModel):
    going_out_bonus: int = Field(40, ge=0, description="Points every opposing side adds when the bid winner goes out.")
    failed_bid_multiplier: int = Field(2, ge=1, description="A failed bid scores minus this multiple of the bid.")
    trick_rounding: Literal["nearest_ten", "none"] = Field(
        "nearest_ten",
        description="How raw trick points are rounded before scoring.",
    )
    dabb_counts_for_bid_winner: bool = Field(
        False,
        description="Whether the discarded dabb cards add to the bid winner's trick points.",
    )


class RuleSet(BaseModel):
    min_bid: int = Field(MIN_BID, gt=0, description="Lowest opening bid.")
    bid_increment: int = Field(BID_INCREMENT, gt=0, description="Every raise must be a multiple of this step.")
    target_score: int = Field(1000, gt=0, description="Cumulative score that ends the game.")
    hand_sizes: dict[int, int] = Field(default_factory=lambda: dict(HAND_SIZES))
    dabb_size: int = Field(DABB_SIZE, ge=0)
    meld_points: dict[str, int] = Field(
        default_factory=lambda: {meld_type.value: points for meld_type, points in MELD_BASE_POINTS.items()}
    )
    trump_bonus: dict[str, int] = Field(
        default_factory=lambda: {meld_type.value: points for meld_type, points in MELD_TRUMP_BONUS.items()}
    )
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    @field_validator("hand_sizes")
    @classmethod
    def validate_hand_sizes(cls, value: dict[int, int]) -> dict[int, int]:
        if not value:
            raise ValueError("Hand size mapping cannot be empty.")
        for player_count, size in value.items():
            if player_count not in HAND_SIZES:
                raise ValueError(f"Unsupported player count: {player_count}")
            if size <= 0:
                raise ValueError(f"Hand size for {player_count} players must be positive.")
        return value

    @field_validator("meld_points")
    @classmethod
    def validate_meld_points(cls, value: dict[str, int]) -> dict[str, int]:
        normalized = {_validate_meld_name(name): points for name, points in value.items()}
        missing = set(MELD_NAMES) - set(normalized)
        if missing:
            raise ValueError(f"Meld points missing for: {sorted(missing)}")
        for name, points in normalized.items():
            if points <= 0:
                raise ValueError(f"Meld points for {name} must be positive.")
        return normalized

    @field_validator("trump_bonus")
    @classmethod
    def validate_trump_bonus(cls, value: dict[str, int]) -> dict[str, int]:
        normalized = {_validate_meld_name(name): points for name, points in value.items()}
        for name, points in normalized.items():
            if points < 0:
                raise ValueError(f"Trump bonus for {name} cannot be negative.")
        return normalized

    @model_validator(mode="after")
    def check_deck_layout(self) -> "RuleSet":
        for player_count, size in self.hand_sizes.items():
            if player_count * size + self.dabb_size != DECK_SIZE:
                raise ValueError(
                    f"{player_count} hands of {size} plus a dabb of {self.dabb_size} do not make {DECK_SIZE} cards."
                )
        return self

    def meld_base_points(self) -> dict[MeldType, int]:
        return {MeldType(name): points for name, points in self.meld_points.items()}

    def meld_trump_bonus(self) -> dict[MeldType, int]:
        return {MeldType(name): points for name, points in self.trump_bonus.items()}

    def hand_size(self, player_count: int) -> int:
        return self.hand_sizes[player_count]


DEFAULT_RULES = RuleSet()


def load_rules(payload: Optional[Mapping[str, Any]] = None) -> RuleSet:
    """Validate a rules mapping; missing keys fall back to the standard rules."""
    if not payload:
        return DEFAULT_RULES
    return RuleSet.model_validate(dict(payload))
