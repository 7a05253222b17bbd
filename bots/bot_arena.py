"""Simple bot arena for Binokel: AI-vs-AI matches with action and time caps."""

from __future__ import annotations

import argparse
import logging
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from binokel.deck import SUPPORTED_PLAYER_COUNTS
from binokel.errors import GameError
from binokel.events import GameEvent
from binokel.export import format_event_log
from binokel.players import side_key
from binokel.rules_schema import RuleSet
from binokel.service import GameService
from binokel.state import GamePhase

from .base import BotStrategy
from .baseline_greedy import GreedyBot
from .random_bot import RandomBot

logger = logging.getLogger(__name__)

BOT_REGISTRY: Dict[str, type[BotStrategy]] = {
    "greedy": GreedyBot,
    "random": RandomBot,
}

BOT_NAMES = ("Alice", "Bob", "Charlie", "Diana")


@dataclass
class MatchResult:
    session_id: str
    events: List[GameEvent]
    rounds: int
    winner: Optional[str]
    scores: Dict[str, int]
    action_count: int
    duration: float
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ArenaSummary:
    results: List[MatchResult] = field(default_factory=list)

    @property
    def wins(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for result in self.results:
            if result.winner is not None:
                counts[result.winner] = counts.get(result.winner, 0) + 1
        return counts

    @property
    def failures(self) -> List[MatchResult]:
        return [result for result in self.results if not result.ok]


def run_match(
    bots: Sequence[BotStrategy],
    *,
    target_score: int = 1000,
    seed: Optional[int] = None,
    max_actions: int = 5000,
    timeout: float = 60.0,
    session_id: Optional[str] = None,
) -> MatchResult:
    """Play one game between ``bots`` (2 to 4 of them) until someone reaches the target."""
    rules = RuleSet(target_score=target_score)
    service = GameService(rules=rules)
    session = service.create_session(len(bots), session_id=session_id or f"sim-{uuid.uuid4().hex[:8]}", seed=seed)
    sid = session.session_id
    started = time.monotonic()
    error: Optional[str] = None
    actions = 0
    try:
        for index, bot in enumerate(bots):
            service.add_ai_player(sid, bot, nickname=BOT_NAMES[index])
        session.start()
        actions = service.run_ai_turns(sid, max_actions=max_actions, deadline=started + timeout)
    except (GameError, RuntimeError, TimeoutError) as exc:
        error = f"{type(exc).__name__}: {exc}"
        logger.warning("match %s aborted: %s", sid, error)
    finally:
        service.close_session(sid)

    state = session.state
    if error is None and state.phase is not GamePhase.FINISHED:
        error = f"Match stopped in phase {state.phase}"
    return MatchResult(
        session_id=sid,
        events=list(session.events),
        rounds=state.round,
        winner=side_key(state.winner) if state.winner is not None else None,
        scores={side_key(side): score for side, score in state.total_scores.items()},
        action_count=actions,
        duration=time.monotonic() - started,
        error=error,
    )


def run_arena(
    bot_names: Sequence[str],
    *,
    games: int = 1,
    target_score: int = 1000,
    seed: int = 0,
    max_actions: int = 5000,
    timeout: float = 60.0,
) -> ArenaSummary:
    summary = ArenaSummary()
    for game in range(games):
        game_seed = seed + game
        bots = [BOT_REGISTRY[name](seed=game_seed * 10 + index) for index, name in enumerate(bot_names)]
        result = run_match(bots, target_score=target_score, seed=game_seed, max_actions=max_actions, timeout=timeout)
        summary.results.append(result)
        logger.info("game %d: winner=%s rounds=%d actions=%d", game + 1, result.winner, result.rounds, result.action_count)
    return summary


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run AI-vs-AI Binokel matches.")
    parser.add_argument("--bots", nargs="+", default=["greedy", "greedy"], choices=BOT_REGISTRY.keys())
    parser.add_argument("--games", type=int, default=1, help="Number of games to play.")
    parser.add_argument("--target", type=int, default=1000, help="Score that ends a game.")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--max-actions", type=int, default=5000)
    parser.add_argument("--timeout", type=float, default=60.0, help="Seconds per game.")
    parser.add_argument("--export-dir", type=Path, default=None, help="Write event logs of failed games here.")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    if len(args.bots) not in SUPPORTED_PLAYER_COUNTS:
        parser.error("Binokel needs 2 to 4 players.")
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    summary = run_arena(
        args.bots,
        games=args.games,
        target_score=args.target,
        seed=args.seed,
        max_actions=args.max_actions,
        timeout=args.timeout,
    )

    print(f"Games played: {len(summary.results)}")
    print(f"Wins: {summary.wins}")
    print(f"Failures: {len(summary.failures)}/{len(summary.results)}")
    if args.export_dir is not None:
        args.export_dir.mkdir(parents=True, exist_ok=True)
        for result in summary.failures:
            path = args.export_dir / f"{result.session_id}.log"
            path.write_text(format_event_log(result.events, session_id=result.session_id))
            print(f"Wrote {path}")


if __name__ == "__main__":
    main()
