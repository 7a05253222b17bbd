"""Bidding rules: turn order and bid validity."""

from __future__ import annotations

from typing import AbstractSet, Optional

MIN_BID = 150
BID_INCREMENT = 10


def get_first_bidder(dealer: int, player_count: int) -> int:
    """The player immediately after the dealer opens the bidding."""
    return (dealer + 1) % player_count


def get_next_bidder(current: int, player_count: int, passed: AbstractSet[int]) -> Optional[int]:
    """Return the next player still in the auction, or None if everyone has passed."""
    for offset in range(1, player_count + 1):
        candidate = (current + offset) % player_count
        if candidate not in passed:
            return candidate
    return None


def get_min_bid(current_bid: int, *, min_bid: int = MIN_BID, increment: int = BID_INCREMENT) -> int:
    if current_bid == 0:
        return min_bid
    return current_bid + increment


def is_valid_bid(
    amount: int,
    current_bid: int,
    *,
    min_bid: int = MIN_BID,
    increment: int = BID_INCREMENT,
) -> bool:
    """A bid must reach the minimum for the auction and sit on the increment grid."""
    if amount < get_min_bid(current_bid, min_bid=min_bid, increment=increment):
        return False
    return (amount - min_bid) % increment == 0


def can_pass(current_bid: int) -> bool:
    """Passing is only possible once someone has opened the bidding."""
    return current_bid > 0


def active_bidders(player_count: int, passed: AbstractSet[int]) -> list[int]:
    return [index for index in range(player_count) if index not in passed]


def is_bidding_complete(player_count: int, passed: AbstractSet[int]) -> bool:
    return len(active_bidders(player_count, passed)) <= 1


def get_bidding_winner(player_count: int, passed: AbstractSet[int]) -> Optional[int]:
    remaining = active_bidders(player_count, passed)
    if len(remaining) == 1:
        return remaining[0]
    return None
