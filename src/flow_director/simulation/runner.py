"""
Session simulation: synthetic player vs. director-driven opponent.

Each match alternates turns until the game ends or a side has no move.
Every player turn is reported through `observe_turn`; the finished match
is reported through `observe_game` with closeness and comeback derived
from how the player's evaluation moved during the match.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, List

from flow_director.api import FlowDirector
from flow_director.core.types import Beat, GameResult, Plan, TurnSummary
from flow_director.games.game_base import GameBase
from flow_director.simulation.synthetic import SyntheticPlayer

logger = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 200


@dataclass
class MatchRecord:
    """Outcome of one simulated match."""
    player_won: bool
    close_game: bool
    comeback: bool
    turns: int
    player_mistakes: int
    beat: Beat

    def to_result(self) -> GameResult:
        return GameResult(self.player_won, self.close_game, self.comeback)


@dataclass
class SessionReport:
    """Everything a simulated session produced."""
    records: List[MatchRecord] = field(default_factory=list)
    plans: List[Plan] = field(default_factory=list)
    beats: Counter = field(default_factory=Counter)

    @property
    def games(self) -> int:
        return len(self.records)

    @property
    def win_rate(self) -> float:
        if not self.records:
            return 0.0
        return sum(r.player_won for r in self.records) / len(self.records)


def play_match(
    director: FlowDirector,
    game: GameBase,
    player: SyntheticPlayer,
    human_id: int = 1,
    max_turns: int = DEFAULT_MAX_TURNS,
) -> MatchRecord:
    """
    Play one match to completion and report it to the director.

    Args:
        director: Session director; its plan drives the opponent
        game: Fresh game in its starting position (mutated)
        player: Synthetic human
        human_id: Seat the synthetic player occupies
        max_turns: Safety cap on total moves

    Returns:
        MatchRecord for the finished match
    """
    beat = director.current_beat
    evaluations: List[float] = []
    mistakes = 0
    turns = 0

    while not game.is_over() and turns < max_turns:
        if game.current_player() == human_id:
            if len(game.valid_moves()) == 0:
                break
            move, mistake = player.choose_move(game, director.current_plan)
            game.apply_move(move, validated=True)
            mistakes += int(mistake)
            director.observe_turn(
                TurnSummary(turn_ms=player.turn_ms(), actions_taken=1, mistakes=int(mistake))
            )
        else:
            move = director.pick_action(game)
            if move is None:
                break
            game.apply_move(move, validated=True)

        turns += 1
        evaluations.append(game.evaluate(human_id))

    player_won = game.winner() == human_id
    low = min(evaluations, default=0.0)
    high = max(evaluations, default=0.0)
    record = MatchRecord(
        player_won=player_won,
        close_game=low < 0.0 < high,
        comeback=player_won and low < 0.0,
        turns=turns,
        player_mistakes=mistakes,
        beat=beat,
    )
    director.observe_game(record.to_result())
    return record


def run_session(
    director: FlowDirector,
    game_factory: Callable[[FlowDirector], GameBase],
    player: SyntheticPlayer,
    games: int,
    on_match: Callable[[int, MatchRecord, Plan], None] | None = None,
) -> SessionReport:
    """
    Play `games` matches, alternating which seat the player takes.

    Args:
        director: Session director
        game_factory: Builds each match's starting position (may read the director)
        player: Synthetic human
        games: Number of matches
        on_match: Optional callback(index, record, plan_after) per match

    Returns:
        SessionReport
    """
    report = SessionReport()
    for i in range(games):
        game = game_factory(director)
        human_id = 1 if i % 2 == 0 else 2
        record = play_match(director, game, player, human_id=human_id)

        plan = director.current_plan
        report.records.append(record)
        report.plans.append(plan)
        report.beats[record.beat] += 1
        if on_match is not None:
            on_match(i, record, plan)

    logger.info(
        "Simulated %d games: win rate %.2f, beats %s",
        report.games, report.win_rate, {b.value: n for b, n in report.beats.items()},
    )
    return report
