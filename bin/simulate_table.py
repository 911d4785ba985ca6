"""Play seeded Shanghai hands to the end and print the outcomes.

Every seat follows the same simple policy: declare a win whenever the
engine allows it, otherwise discard the most recently acquired tile and
pass on every other claim.

Table settings come from SHANGHAI_* environment variables.

Usage:
    uv run python bin/simulate_table.py
    uv run python bin/simulate_table.py --seed <128 hex chars> --hands 5
    uv run python bin/simulate_table.py --quiet
"""

from __future__ import annotations

import argparse
import logging
import sys

from shanghai.config import TableEnvSettings
from shanghai.logic.engine import TableEngine
from shanghai.logic.enums import ClaimRung, RoundPhase
from shanghai.logic.exceptions import UnsupportedSettingsError
from shanghai.logic.rng import validate_seed_hex
from shared.logging import setup_logging

MAX_COMMANDS_PER_HAND = 2000


def _step(engine: TableEngine) -> None:
    state = engine.state
    seat = state.current_seat

    if state.phase == RoundPhase.DRAW:
        engine.draw(seat)
        return

    if state.phase == RoundPhase.DISCARD:
        if state.last_drawn_tile is not None and engine.declare_win(seat).accepted:
            return
        engine.discard(seat, len(state.players[seat].tiles) - 1)
        return

    claim = state.pending_claim
    if claim is None:
        return
    for claimant in sorted(claim.win_seats):
        if ClaimRung.WIN in claim.undecided_rungs(claimant):
            engine.declare_win(claimant)
            return
    for other in range(len(state.players)):
        if claim.undecided_rungs(other):
            engine.pass_claim(other)
            return


def play_hand(engine: TableEngine) -> int:
    """Drive the table until the hand ends. Returns the number of commands issued."""
    commands = 0
    while engine.state.phase != RoundPhase.END:
        if commands >= MAX_COMMANDS_PER_HAND:
            raise RuntimeError(f"hand did not finish within {MAX_COMMANDS_PER_HAND} commands")
        _step(engine)
        commands += 1
    return commands


def _print_outcome(engine: TableEngine, hand_index: int, commands: int) -> None:
    snapshot = engine.snapshot()
    print(f"Hand {hand_index}: {commands} commands, {snapshot.wall_count} tiles left in the wall")
    if snapshot.result is None:
        print("  exhaustive draw, no winner")
        return
    for winner in snapshot.result.winners:
        print(f"  seat {winner.seat} wins with {winner.label} ({winner.win_mode.value})")
    if snapshot.settlement is not None:
        for score in snapshot.settlement.scores:
            print(f"  seat {score.seat}: {score.tier.value} for {score.score}")
        print(f"  deltas: {list(snapshot.settlement.deltas)}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate seeded Shanghai hands")
    parser.add_argument("--seed", help="table seed as hex (default: random)")
    parser.add_argument(
        "-n",
        "--hands",
        type=int,
        default=1,
        help="number of hands to play at the table (default: 1)",
    )
    parser.add_argument("--quiet", action="store_true", help="only log warnings and errors")
    args = parser.parse_args()

    if args.hands < 1:
        print("Hands must be at least 1", file=sys.stderr)
        sys.exit(1)

    if args.seed is not None:
        try:
            validate_seed_hex(args.seed)
        except (TypeError, ValueError) as e:
            print(f"Invalid seed: {e}", file=sys.stderr)
            sys.exit(1)

    env = TableEnvSettings()
    setup_logging(env.log_dir, level=logging.WARNING if args.quiet else None)

    try:
        engine = TableEngine("simulation", env.to_game_settings(), seed=args.seed)
    except UnsupportedSettingsError as e:
        print(f"Unsupported table settings: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Seed: {engine.state.seed}")
    for hand_index in range(args.hands):
        if hand_index > 0:
            engine.reset_table()
        commands = play_hand(engine)
        _print_outcome(engine, hand_index, commands)


if __name__ == "__main__":
    main()
