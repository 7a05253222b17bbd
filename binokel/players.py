"""Players, teams and the ``Side`` scoring unit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

TEAM_PLAYER_COUNT = 4
TEAMS = (0, 1)


@dataclass(frozen=True)
class Player:
    player_index: int
    nickname: str
    player_id: str = ""
    team: Optional[int] = None
    connected: bool = True


@dataclass(frozen=True)
class PlayerSide:
    """An individual player scoring on their own (2 and 3 player games)."""

    index: int

    def __str__(self) -> str:
        return f"player-{self.index}"


@dataclass(frozen=True)
class TeamSide:
    """A two-player team (4 player games)."""

    team: int

    def __str__(self) -> str:
        return f"team-{self.team}"


Side = Union[PlayerSide, TeamSide]


def uses_teams(player_count: int) -> bool:
    return player_count == TEAM_PLAYER_COUNT


def default_team(player_index: int) -> int:
    # Partners sit across from each other.
    return player_index % 2


def team_of(players: Sequence[Player], player_index: int) -> int:
    for player in players:
        if player.player_index == player_index and player.team is not None:
            return player.team
    return default_team(player_index)


def side_of(player_count: int, players: Sequence[Player], player_index: int) -> Side:
    if uses_teams(player_count):
        return TeamSide(team_of(players, player_index))
    return PlayerSide(player_index)


def all_sides(player_count: int) -> list[Side]:
    """Every side of a game in seat order."""
    if uses_teams(player_count):
        return [TeamSide(team) for team in TEAMS]
    return [PlayerSide(index) for index in range(player_count)]


def members_of(side: Side, player_count: int, players: Sequence[Player]) -> list[int]:
    if isinstance(side, PlayerSide):
        return [side.index]
    return [index for index in range(player_count) if team_of(players, index) == side.team]


def side_key(side: Side) -> str:
    return str(side)


def parse_side(key: str) -> Side:
    kind, _, value = key.partition("-")
    if kind == "player":
        return PlayerSide(int(value))
    if kind == "team":
        return TeamSide(int(value))
    raise ValueError(f"Unknown side key: {key!r}")


def replace_player(players: Iterable[Player], updated: Player) -> tuple[Player, ...]:
    """Return players with ``updated`` in its seat, appended when new, ordered by index."""
    others = [player for player in players if player.player_index != updated.player_index]
    return tuple(sorted([*others, updated], key=lambda p: p.player_index))
