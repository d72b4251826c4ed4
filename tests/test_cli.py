import csv
import logging

import pytest

from solver import solver_cli
from starting_word.eval import evaluate_first_guesses
from wordtree.search import CandidateSearch
from wordtree.tree_io import load_tree

from conftest import WORDS, write_lines


@pytest.fixture
def dict_path(tmp_path):
    return write_lines(tmp_path / "words.txt", WORDS)


@pytest.fixture
def tree_path(tmp_path, dict_path):
    out = tmp_path / "tree.json.gz"
    assert solver_cli.main(["graph", str(out), str(dict_path), "--no-progress"]) == 0
    return out


def _feed(monkeypatch, answers):
    it = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(it))


def test_graph_writes_a_loadable_tree(tree_path):
    tree = load_tree(tree_path)
    assert sorted({n.word for n in tree.walk()}) == sorted(WORDS)


def test_stats_report(tree_path, tmp_path, capsys):
    out_csv = tmp_path / "hist.csv"
    assert solver_cli.main(["stats", str(tree_path), "--out", str(out_csv)]) == 0
    printed = capsys.readouterr().out
    assert "Fail count: 0" in printed
    assert "Attempt/word count: 1/1." in printed
    with open(out_csv, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert sum(int(r["words"]) for r in rows) == len(WORDS)


def test_interactive_solved_after_bad_mask(tree_path, monkeypatch, capsys):
    _feed(monkeypatch, ["gx", "yyyyy"])
    assert solver_cli.main(["interactive", str(tree_path)]) == 0
    printed = capsys.readouterr().out
    assert "is incorrect" in printed
    assert "Solved!" in printed


def test_interactive_quit(tree_path, monkeypatch, capsys):
    _feed(monkeypatch, ["q"])
    assert solver_cli.main(["interactive", str(tree_path)]) == 0
    assert "bye!" in capsys.readouterr().out


def test_live_with_first_word(dict_path, monkeypatch, capsys):
    _feed(monkeypatch, ["yyyyy"])
    assert solver_cli.main(["live", str(dict_path), "--first", "crane", "--no-progress"]) == 0
    assert "Guess: crane" in capsys.readouterr().out


def test_missing_tree_file(tmp_path):
    assert solver_cli.main(["stats", str(tmp_path / "nope.json.gz")]) == 1


def test_first_guess_scores(vocab):
    words = vocab.words()
    results = evaluate_first_guesses(words)
    assert len(results) == len(words)
    metrics = [r["metric"] for r in results]
    assert metrics == sorted(metrics)
    best = CandidateSearch().select_guess(words, words)
    assert results[0]["metric"] == CandidateSearch().metric(words, best)


@pytest.mark.parametrize("bad", ["sl,ate", "sl\tate"])
def test_bad_dictionary_is_reported(tmp_path, bad):
    words = write_lines(tmp_path / "words.txt", ["crane", bad, "trace"])
    out = tmp_path / "tree.json.gz"
    assert solver_cli.main(["graph", str(out), str(words), "--no-progress"]) == 1
    assert not out.exists()


def test_setup_logger_adds_one_handler():
    root = logging.getLogger()
    level = root.level
    try:
        solver_cli.setup_logger()
        solver_cli.setup_logger(verbose=True)
        ours = [h for h in root.handlers if h.get_name() == solver_cli.LOG_HANDLER]
        assert len(ours) == 1
        assert root.level == logging.DEBUG
    finally:
        for h in [h for h in root.handlers if h.get_name() == solver_cli.LOG_HANDLER]:
            root.removeHandler(h)
        root.setLevel(level)
