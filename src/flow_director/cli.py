"""
Command-line interface: simulate a director session against a synthetic player.
"""

import argparse
import json
import logging

from flow_director.core.sampling import Mulberry32
from flow_director.core.types import Plan
from flow_director.simulation import MatchRecord, SyntheticPlayer, run_session
from flow_director.storage import SessionStore
from flow_director.utils.config import GAMES, SESSION_DB, DirectorConfig
from flow_director.utils.factory import create_director, create_game


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simulate an adaptive difficulty session"
    )
    parser.add_argument(
        "--game", "-g",
        choices=list(GAMES.keys()),
        default="wythoff",
        help="Game to simulate (default: wythoff)",
    )
    parser.add_argument(
        "--games", "-n",
        type=int,
        default=30,
        help="Matches to play (default: 30)",
    )
    parser.add_argument(
        "--true-skill", "-s",
        type=float,
        default=0.6,
        help="Synthetic player's true skill in [0, 1] (default: 0.6)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for director and synthetic player (default: random)",
    )
    parser.add_argument(
        "--target-win-rate",
        type=float,
        default=DirectorConfig.target_win_rate,
        help=f"Target player win rate (default: {DirectorConfig.target_win_rate})",
    )
    parser.add_argument(
        "--fatigue-rate",
        type=float,
        default=0.0,
        help="Per-turn slowdown of the synthetic player (default: 0)",
    )
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help=f"Session database; enables resume/save (e.g. {SESSION_DB})",
    )
    parser.add_argument(
        "--session",
        type=str,
        default="default",
        help="Session ID inside --db (default: default)",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the final diagnostic snapshot as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging",
    )
    return parser.parse_args()


def _print_match(index: int, record: MatchRecord, plan: Plan) -> None:
    outcome = "WIN " if record.player_won else "LOSS"
    flags = "".join(
        tag for tag, on in (("C", record.close_game), ("B", record.comeback)) if on
    )
    print(
        f"#{index + 1:3d} {outcome} {flags:2s} beat={record.beat.value:9s} "
        f"-> next {plan.beat.value:9s} diff={plan.difficulty:.2f} depth={plan.search_depth} "
        f"rand={plan.randomness:.2f} pace={plan.pacing_ms}ms assist={plan.assist_mode.value}"
    )


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Both reference games are one action per turn
    config = DirectorConfig(
        target_win_rate=args.target_win_rate,
        actions_per_turn_target=1,
        seed=args.seed,
    )

    store = SessionStore(args.db) if args.db else None
    try:
        director = store.load(args.session) if store else None
        if director is None:
            director = create_director(config)

        start_rng = Mulberry32(director.config.seed ^ 0x5F3759DF)
        player = SyntheticPlayer(
            args.true_skill,
            seed=director.config.seed,
            fatigue_rate=args.fatigue_rate,
        )

        print(
            f"Simulating {args.games} {args.game} games "
            f"(true skill {args.true_skill:.2f}, seed {director.config.seed})"
        )
        report = run_session(
            director,
            lambda d: create_game(args.game, d.player.snapshot().skill, start_rng),
            player,
            args.games,
            on_match=_print_match,
        )

        snap = director.player.snapshot()
        print("\n" + "=" * 40)
        print(
            f"Win rate {report.win_rate:.2f} (target {director.config.target_win_rate:.2f}), "
            f"skill {snap.skill:.3f} ± {snap.skill_variance:.3f}, "
            f"fatigue {snap.fatigue:.2f}, flow {snap.flow:.2f}"
        )
        print("Beats: " + ", ".join(f"{b.value}={n}" for b, n in report.beats.most_common()))

        if args.dump:
            print(json.dumps(director.snapshot(), indent=2))

        if store:
            store.save(args.session, director)
    finally:
        if store:
            store.close()


if __name__ == "__main__":
    main()
