#!/usr/bin/env python3
"""Play Hyperspace tic-tac-toe against the computer via the console, with optional logging & replay."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from hyperspace import Difficulty, GlobalPosition, HyperspaceGame, Player, load_config
from hyperspace.core import HyperspaceError
from hyperspace.env import render_boards
from hyperspace.game import DRAW, POWER_UP_DESCRIPTIONS, GameState, PowerUpType


def build_game(config_path: Optional[str], difficulty: str) -> HyperspaceGame:
    config = load_config(config_path) if config_path else None
    return HyperspaceGame(config, difficulty=difficulty)


def parse_position(tokens: List[str]) -> GlobalPosition:
    if len(tokens) != 4 or not all(token.lstrip("-").isdigit() for token in tokens):
        raise ValueError("Expected four integers: board x y z")
    board_id, x, y, z = (int(token) for token in tokens)
    return GlobalPosition(board_id, x, y, z)


def print_help(game: HyperspaceGame) -> None:
    print("Commands:")
    print("  b x y z                 place your piece")
    print("  undo                    rewind the last two moves")
    for kind in PowerUpType:
        cost = game.power_up_cost(kind)
        print(f"  {kind.cost_key:<8} [cells]      {POWER_UP_DESCRIPTIONS[kind]} ({cost} credits)")
    print("  q                       quit")


def prompt_human_turn(game: HyperspaceGame, state: GameState) -> GameState:
    while True:
        raw = input("> ").strip()
        if not raw:
            continue
        if raw.lower() in {"q", "quit", "exit"}:
            print("Quitting.")
            sys.exit(0)
        if raw.lower() in {"h", "help", "?"}:
            print_help(game)
            continue
        tokens = raw.split()
        command = tokens[0].lower()
        try:
            if command == "undo":
                return game.undo(state)
            if command in {kind.cost_key for kind in PowerUpType}:
                kind = PowerUpType[command.upper()]
                cells = tokens[1:]
                first = parse_position(cells[:4]) if len(cells) >= 4 else None
                second = parse_position(cells[4:8]) if len(cells) >= 8 else None
                state = game.use_power_up(state, kind, first, second)
                if kind is PowerUpType.PEEK and state.peek is not None:
                    print(f"AI target: B{state.peek.board_id + 1} L{state.peek.z + 1} {state.peek.coords}")
                if state.is_game_over:
                    return state
                print(f"Credits: {state.wallet}")
                continue
            return game.apply_move(state, parse_position(tokens))
        except (HyperspaceError, ValueError) as exc:
            print(f"Rejected: {exc}")


def history_log(state: GameState) -> List[Dict]:
    return [
        {
            "move_index": index,
            "actor": "ai" if move.player is Player.O and not state.testing_mode else "human",
            "player": move.player.name,
            "board": move.board_id,
            "position": list(move.position),
        }
        for index, move in enumerate(state.history)
    ]


def save_log(log: Dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(log, ensure_ascii=False, indent=2))
    print(f"Saved log to {path}.")


def describe_result(state: GameState) -> str:
    if state.winner == DRAW:
        return "draw"
    if isinstance(state.winner, Player):
        return state.winner.name
    return "ongoing"


def replay_logged_game(log_path: Path, *, verbose: bool = True, config_path: Optional[str] = None) -> Dict[str, object]:
    data = json.loads(log_path.read_text())
    moves = data.get("moves", [])
    metadata = data.get("metadata", {})
    game = build_game(config_path, metadata.get("difficulty", Difficulty.ELITE.value))
    # Logged O moves are re-applied by hand, so the replay runs in testing mode.
    state = game.new_state(testing_mode=True)
    if verbose:
        print("Replaying logged game.")
        print(render_boards(state, game.registry.boards))
    for entry in moves:
        position = GlobalPosition(entry["board"], *entry["position"])
        state.current_player = Player[entry.get("player", state.current_player.name)]
        state = game.apply_move(state, position, timestamp=0.0)
        if verbose:
            print(f"{entry.get('actor', 'unknown')} ({entry.get('player', '?')}): {position}")
            print(render_boards(state, game.registry.boards))
    summary = {
        "result": describe_result(state),
        "moves": len(moves),
        "boards": [board.tolist() for board in state.boards],
        "scores": {player.name: points for player, points in state.scores.items()},
    }
    if verbose:
        print("Replay finished.")
        print(f"Result: {summary['result']}")
    return summary


def play_interactive(args: argparse.Namespace) -> None:
    game = build_game(args.config, args.difficulty)
    state = game.new_state(testing_mode=args.testing_mode)
    print_help(game)
    if state.testing_mode:
        print("Testing mode: the AI is off and you place both X and O.")

    while not state.is_game_over:
        print("\nCurrent boards:")
        print(render_boards(state, game.registry.boards))
        print(f"Turn: {state.current_player.name}  Credits: {state.wallet}  Score: {state.scores[Player.X]}")

        if state.current_player is Player.X or state.testing_mode:
            state = prompt_human_turn(game, state)
        else:
            state = game.ai_move(state)
            move = state.history[-1]
            print(f"AI ({state.difficulty.value}) plays board {move.board_id} at {move.position}")

    print("\nFinal boards:")
    print(render_boards(state, game.registry.boards))
    if state.winner == DRAW:
        print("Stalemate.")
    else:
        print(f"P_{state.winner.name} dominates!")

    if args.log_file:
        metadata = {
            "difficulty": state.difficulty.value,
            "testing_mode": state.testing_mode,
            "config": args.config,
            "result": describe_result(state),
        }
        save_log({"metadata": metadata, "moves": history_log(state)}, Path(args.log_file))


def main() -> None:
    parser = argparse.ArgumentParser(description="Play Hyperspace tic-tac-toe in the console against the AI.")
    parser.add_argument("--difficulty", choices=[d.value for d in Difficulty], default=Difficulty.ELITE.value)
    parser.add_argument("--config", type=str, default=None, help="YAML board/scoring config")
    parser.add_argument("--testing-mode", action="store_true", help="Turn the AI off and enter O moves by hand")
    parser.add_argument("--log-file", type=str)
    parser.add_argument("--replay-log", type=str, help="Replay a logged game and exit")
    parser.add_argument("--replay-quiet", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if args.replay_log:
        replay_logged_game(Path(args.replay_log), verbose=not args.replay_quiet, config_path=args.config)
        return

    play_interactive(args)


if __name__ == "__main__":
    main()
