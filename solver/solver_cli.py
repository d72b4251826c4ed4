"""
solver/solver_cli.py

Command-line front end for decision-tree Wordle solving.

Commands:
  graph OUT DICT [DICT ...]   build the navigation tree out of the dictionaries
  stats TREE                  replay every word against the tree, show attempts
  interactive TREE            play a game guided by the tree
  live DICT [DICT ...]        play without a tree: search each guess on the fly

Dictionaries are UTF-8 files with one lowercase word per line (or CSV files
with a `word` column). Duplicates are allowed but ignored. With several
dictionaries every word is a possible answer, but only words present in all of
them are used as guesses.

Feedback masks use one letter per position:
  g - not present, w - wrong place, y - correct place   (0/1/2 also accepted)

Run:
  python -m solver.solver_cli graph tree.json.gz words.txt
  python -m solver.solver_cli stats tree.json.gz
  python -m solver.solver_cli interactive tree.json.gz

Shortcuts:
  quit / q / exit  -> exit
"""
from __future__ import annotations

import argparse
import csv
import logging
import sys
import time
from typing import List, Optional

from wordtree.alphabet import Word
from wordtree.constraints import ConstraintState
from wordtree.errors import InvalidMask, NoCandidatesLeft, SolverError
from wordtree.feedback import Evaluation
from wordtree.sampler import WordSampler
from wordtree.search import CandidateSearch
from wordtree.stats import collect_stats
from wordtree.tree import DecisionTree, TreeBuilder, tree_words
from wordtree.tree_io import load_tree, save_tree
from wordtree.vocab import WordVocab, load_dictionaries

logger = logging.getLogger(__name__)

QUIT = {"q", "quit", "exit"}
LOG_HANDLER = "wordtree-cli"


def setup_logger(verbose: bool = False) -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if any(h.get_name() == LOG_HANDLER for h in root.handlers):
        return root
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(LOG_HANDLER)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    return root


def _ask_mask(guess: str) -> Optional[Evaluation]:
    """Prompt until a valid mask is entered; None means the player quit."""
    while True:
        entered = input(
            "Enter state (e.g. gwwgy, g - not present, w - wrong place, "
            f"y - correct place; {'y' * len(guess)} when solved): "
        ).strip()
        if entered.lower() in QUIT:
            return None
        try:
            ev = Evaluation.from_mask(entered, guess)
        except InvalidMask as e:
            print(f"Input `{entered}` is incorrect, please repeat ({e}).")
            continue
        print(f"Entered state: {guess} {ev.to_mask()}")
        return ev


# -------------------------
# Commands
# -------------------------

def cmd_graph(args: argparse.Namespace) -> int:
    global_vocab, attack_vocab = load_dictionaries(args.dictionaries)
    print(f"Alphabet: {global_vocab.alphabet} ({len(global_vocab.alphabet)} letters).")
    print(f"Loaded {len(global_vocab)} global words and {len(attack_vocab)} attack words.")

    opening: List[Word] = [global_vocab.alphabet.word(w.lower()) for w in args.opening]
    search = CandidateSearch(workers=args.workers, progress=args.progress)
    builder = TreeBuilder(
        attack_vocab.words(), search=search, opening=opening, dual_depth=args.dual_depth
    )

    t0 = time.perf_counter()
    tree = builder.build(global_vocab.words())
    dt = time.perf_counter() - t0
    save_tree(tree, args.out)
    print(f"Built {len(tree)} nodes (depth {tree.depth()}) in {dt:.2f}s; first guess: {tree.word}")
    print(f"Wrote tree to {args.out}")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    tree = load_tree(args.tree)
    words = tree_words(tree)
    if args.sample is not None:
        words = WordSampler(WordVocab(words), seed=args.seed).sample_texts(args.sample)
    print(f"Collecting stats over {len(words)} words...", flush=True)

    t0 = time.perf_counter()
    stats = collect_stats(tree, words, max_attempts=args.max_attempts, progress=args.progress)
    dt = time.perf_counter() - t0

    print(f"Fail count: {stats.fail_count}, Max attempts: {stats.max_attempts}.")
    if stats.fails:
        print(f"Fail words: {', '.join(stats.fails)}.")
    for attempts, count in stats.attempts.items():
        print(f"Attempt/word count: {attempts}/{count}.")
    print(f"Mean attempts: {stats.mean_attempts:.3f}")
    print(f"Time Elapsed: {dt:.2f}s")

    if args.out:
        with open(args.out, "w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=["attempts", "words"])
            w.writeheader()
            w.writerows(stats.rows())
        print(f"Wrote histogram to {args.out}")
    return 0


def _play_tree(tree: DecisionTree, max_attempts: int) -> None:
    node = tree
    attempt = 0
    while attempt < max_attempts:
        attempt += 1
        print(f"Attempt: {attempt}, Guess: {node.word}.")
        ev = _ask_mask(node.word)
        if ev is None:
            print("bye!")
            return
        if ev.is_solved:
            print("Solved!")
            return
        try:
            node = node.child(ev.pack())
        except NoCandidatesLeft:
            print("No words left. It means that one of the previous mask was entered incorrectly.")
            return
        if node.is_leaf:
            print(f"The word is: {node.word}.")
            return
    print(f"No luck within {max_attempts} attempts.")


def cmd_interactive(args: argparse.Namespace) -> int:
    tree = load_tree(args.tree)
    print("\nDecision-tree helper: after EACH guess, type the feedback the game showed.")
    print("Type 'quit' to exit.\n")
    _play_tree(tree, args.max_attempts)
    return 0


def cmd_live(args: argparse.Namespace) -> int:
    global_vocab, attack_vocab = load_dictionaries(args.dictionaries)
    attack = attack_vocab.words()
    candidates = global_vocab.words()
    search = CandidateSearch(workers=args.workers, progress=args.progress)

    if args.first:
        guess = global_vocab.alphabet.word(args.first.lower())
    else:
        print("Computing the first guess...", flush=True)
        guess = search.select_guess(candidates, attack)

    for attempt in range(1, args.max_attempts + 1):
        print(f"There are {len(candidates)} words left.")
        if len(candidates) <= 10:
            print("Words left:", ", ".join(w.text for w in candidates))
        print(f"Attempt: {attempt}, Guess: {guess}.")
        ev = _ask_mask(guess.text)
        if ev is None:
            print("bye!")
            return 0
        if ev.is_solved:
            print("Solved!")
            return 0

        state = ConstraintState(guess, ev)
        candidates = [w for w in candidates if state.matches(w)]
        try:
            guess = search.select_guess(candidates, attack)
        except SolverError:
            print("No candidates left. It means that one of the previous mask was entered incorrectly.")
            return 0
    print(f"No luck within {args.max_attempts} attempts.")
    return 0


# -------------------------
# Entry point
# -------------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Decision-tree solver for Wordle-style games")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    g = sub.add_parser("graph", help="Make the navigation tree out of dictionaries")
    g.add_argument("out", help="Output tree file (gzip JSON)")
    g.add_argument("dictionaries", nargs="+", help="Dictionary files")
    g.add_argument("--dual-depth", type=int, default=0, help="Levels that guess in distinct-letter pairs")
    g.add_argument("--opening", nargs="*", default=[], help="Forced guesses for the first levels")
    g.add_argument("--workers", type=int, default=1, help="Processes used to score guesses")
    g.add_argument(
        "--progress",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Show progress during the search (use --no-progress to disable)",
    )
    g.set_defaults(func=cmd_graph)

    s = sub.add_parser("stats", help="Collect and show stats of a tree")
    s.add_argument("tree", help="Tree file made by `graph`")
    s.add_argument("--max-attempts", type=int, default=6, help="Games above this count as fails")
    s.add_argument("--sample", type=int, default=None, help="Replay only K random words")
    s.add_argument("--seed", type=int, default=0, help="RNG seed for --sample")
    s.add_argument("--out", default=None, help="Write the attempts histogram to this CSV")
    s.add_argument("--progress", action=argparse.BooleanOptionalAction, default=False)
    s.set_defaults(func=cmd_stats)

    i = sub.add_parser("interactive", help="Play guided by a tree")
    i.add_argument("tree", help="Tree file made by `graph`")
    i.add_argument("--max-attempts", type=int, default=6)
    i.set_defaults(func=cmd_interactive)

    lv = sub.add_parser("live", help="Play searching each guess on the fly")
    lv.add_argument("dictionaries", nargs="+", help="Dictionary files")
    lv.add_argument("--first", default=None, help="First guess (skips the initial search)")
    lv.add_argument("--max-attempts", type=int, default=6)
    lv.add_argument("--workers", type=int, default=1)
    lv.add_argument("--progress", action=argparse.BooleanOptionalAction, default=True)
    lv.set_defaults(func=cmd_live)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(args.verbose)
    try:
        return args.func(args)
    except (SolverError, FileNotFoundError, KeyError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
