import argparse
import json
from pathlib import Path

from hyperspace.game import HyperspaceGame
from scripts.play_vs_ai import play_interactive, replay_logged_game


def create_sample_log(path: Path) -> None:
    moves = [
        {"move_index": 0, "actor": "human", "player": "X", "board": 0, "position": [0, 0, 0]},
        {"move_index": 1, "actor": "ai", "player": "O", "board": 1, "position": [1, 1, 1]},
    ]
    log = {"metadata": {"difficulty": "Rookie"}, "moves": moves}
    path.write_text(json.dumps(log))


def test_replay_logged_game(tmp_path):
    log_path = tmp_path / "game.json"
    create_sample_log(log_path)
    summary = replay_logged_game(log_path, verbose=False)

    assert summary["moves"] == 2
    assert summary["result"] == "ongoing"
    boards = summary["boards"]
    assert boards[0][0][0][0] == 1
    assert boards[1][1][1][1] == 2


def test_testing_mode_prompts_for_both_players(tmp_path, monkeypatch):
    answers = iter(["0 0 0 0", "1 1 0 0", "0 0 1 0", "1 1 1 0", "0 0 2 0", "1 1 2 0", "0 0 3 0"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

    def no_ai(self, state, **kwargs):
        raise AssertionError("the AI must stay off in testing mode")

    monkeypatch.setattr(HyperspaceGame, "ai_move", no_ai)
    log_path = tmp_path / "testing.json"
    args = argparse.Namespace(config=None, difficulty="Elite", testing_mode=True, log_file=str(log_path))

    play_interactive(args)

    log = json.loads(log_path.read_text())
    assert log["metadata"]["result"] == "X"
    assert log["metadata"]["testing_mode"] is True
    assert [move["player"] for move in log["moves"]] == ["X", "O"] * 3 + ["X"]
    assert all(move["actor"] == "human" for move in log["moves"])
