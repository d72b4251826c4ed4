"""
starting_word/eval.py

Score candidate first guesses by how well they split the answer set.

Metrics per guess:
- metric: sum of squared bucket sizes times bucket size, the number the tree
  builder minimizes (lower is better)
- exp_remaining: expected remaining candidates after the first feedback
- entropy: information gain (higher is better)
- worst_case: size of the largest bucket (lower is better)
- partitions: number of distinct feedback patterns induced

Usage:
  python -m starting_word.eval --dict words.txt [--dict more.txt] [--top 20] [--out results.csv]
  python -m starting_word.eval --dict words.txt --best
  python -m starting_word.eval --dict words.txt --metric crane
"""

from __future__ import annotations

import argparse
import csv
import logging
import time
from collections import defaultdict
from math import log2
from typing import Dict, Iterable, List, Sequence, Tuple

from tqdm import tqdm

from wordtree.alphabet import Word
from wordtree.errors import EmptyCandidateSet, SolverError
from wordtree.feedback import pack_evaluation
from wordtree.search import CandidateSearch
from wordtree.vocab import load_dictionaries

logger = logging.getLogger(__name__)


def _pattern_histogram(guess: Word, targets: Iterable[Word]) -> Dict[int, int]:
    """
    For a given guess, compute a histogram over feedback patterns across all targets.
    Returns a dict: pattern_code -> count
    """
    counts: Dict[int, int] = defaultdict(int)
    for t in targets:
        counts[pack_evaluation(t, guess)] += 1
    return counts


def _metrics_from_counts(counts: Dict[int, int], total: int) -> Tuple[int, float, float, int, int]:
    """
    Given a histogram of bucket counts and the total number of targets,
    compute (metric, exp_remaining, entropy, worst_case, partitions).
    """
    if total <= 0:
        raise ValueError("total must be positive")
    # every target in a bucket of size c leaves c words: c targets * c**2
    metric = sum(c ** 3 for c in counts.values())
    exp_remaining = sum(c * c for c in counts.values()) / total
    entropy = 0.0
    for c in counts.values():
        p = c / total
        if p > 0.0:
            entropy -= p * log2(p)
    worst_case = max(counts.values()) if counts else 0
    partitions = len(counts)
    return metric, exp_remaining, entropy, worst_case, partitions


def evaluate_first_guesses(
    answers: Sequence[Word],
    guesses: Sequence[Word] | None = None,
    *,
    progress: bool = False,
) -> List[Dict[str, float]]:
    """
    Evaluate each candidate first guess against the full answer set.

    Parameters
    ----------
    answers : sequence of Word
        The set of possible targets.
    guesses : sequence of Word | None
        Candidate guesses to score. If None, uses `answers`.
    progress : bool
        If True, shows a tqdm progress bar.

    Returns
    -------
    list[dict]
        Sorted list (best first) of records with keys:
        'guess', 'metric', 'exp_remaining', 'entropy', 'worst_case', 'partitions'
    """
    if not answers:
        raise EmptyCandidateSet("answers must be non-empty")
    pool = guesses if guesses is not None else answers
    N = len(answers)

    results: List[Dict[str, float]] = []
    for g in tqdm(pool, desc="Scoring first guesses", unit="word", disable=not progress):
        counts = _pattern_histogram(g, answers)
        metric, exp_remaining, entropy, worst_case, partitions = _metrics_from_counts(counts, N)
        results.append(
            {
                "guess": g.text,
                "metric": int(metric),
                "exp_remaining": float(exp_remaining),
                "entropy": float(entropy),
                "worst_case": int(worst_case),
                "partitions": int(partitions),
            }
        )

    # Sort: primary = metric asc, secondary = worst_case asc, tertiary = -entropy desc
    results.sort(key=lambda r: (r["metric"], r["worst_case"], -r["entropy"]))
    return results


def _print_top(results: List[Dict[str, float]], k: int = 20) -> None:
    print(f"\nTop {k} starting words by metric:")
    print(f"{'rank':>4}  {'guess':<8}  {'metric':>10}  {'exp_rem':>8}  {'entropy':>8}  {'worst':>5}  {'parts':>6}")
    for idx, r in enumerate(results[:k], start=1):
        print(
            f"{idx:>4}  {r['guess']:<8}  {int(r['metric']):>10}  {r['exp_remaining']:>8.2f}  {r['entropy']:>8.3f}  {int(r['worst_case']):>5}  {int(r['partitions']):>6}"
        )


def _write_csv(results: List[Dict[str, float]], path: str) -> None:
    fieldnames = ["guess", "metric", "exp_remaining", "entropy", "worst_case", "partitions"]
    with open(path, mode="w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row in results:
            writer.writerow(row)


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Score first guesses over one or more dictionaries")
    ap.add_argument("--dict", dest="dicts", action="append", required=True, help="Dictionary file (repeatable)")
    ap.add_argument("--top", type=int, default=20, help="Rows to print")
    ap.add_argument("--out", default=None, help="Write every scored guess to this CSV")
    ap.add_argument("--best", action="store_true", help="Only run the tree builder's guess search")
    ap.add_argument("--metric", default=None, metavar="WORD", help="Only print the metric of WORD")
    ap.add_argument("--workers", type=int, default=1, help="Processes for --best")
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        global_vocab, attack_vocab = load_dictionaries(args.dicts)
        answers = global_vocab.words()
        guesses = attack_vocab.words()

        if args.metric:
            word = global_vocab.alphabet.word(args.metric.lower())
            metric = CandidateSearch().metric(answers, word)
            print(f"{word}: metric {metric}, mean remaining {metric / len(answers):.2f}")
            return 0

        if args.best:
            t0 = time.perf_counter()
            search = CandidateSearch(workers=args.workers, progress=True)
            word = search.select_guess(answers, guesses)
            dt = time.perf_counter() - t0
            print(f"Best first guess: {word} (metric {search.metric(answers, word)}), {dt:.2f}s")
            return 0
    except SolverError as e:
        logger.error("%s", e)
        return 1

    print(f"Scoring {len(guesses)} guesses against {len(answers)} answers...", flush=True)
    t0 = time.perf_counter()
    results = evaluate_first_guesses(answers, guesses, progress=True)
    dt = time.perf_counter() - t0
    print(f"Done in {dt:.2f}s", flush=True)
    _print_top(results, k=args.top)
    if args.out:
        _write_csv(results, args.out)
        print(f"Wrote results to {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
