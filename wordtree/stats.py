"""
stats.py

How well a decision tree plays.

- `collect_stats` replays every word as the hidden word and counts attempts.
- `chain_histogram` reads the same numbers straight off the tree's
  root-to-leaf chains, without replaying anything.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from tqdm import tqdm

from wordtree.errors import NoCandidatesLeft
from wordtree.feedback import pack_evaluation
from wordtree.tree import DecisionTree, tree_words

logger = logging.getLogger(__name__)


@dataclass
class GameStats:
    attempts: Dict[int, int] = field(default_factory=dict)
    fails: List[str] = field(default_factory=list)
    max_attempts: int = 0
    total: int = 0

    @property
    def fail_count(self) -> int:
        return len(self.fails)

    @property
    def mean_attempts(self) -> float:
        if not self.total:
            return float("nan")
        return sum(k * v for k, v in self.attempts.items()) / self.total

    def rows(self) -> List[Dict[str, int]]:
        return [{"attempts": k, "words": v} for k, v in sorted(self.attempts.items())]


def play_hidden_word(tree: DecisionTree, hidden: str) -> int:
    """Number of guesses the tree needs to find `hidden`."""
    node = tree
    attempts = 1
    while node.word != hidden:
        if node.is_leaf:
            raise NoCandidatesLeft(f"{hidden!r} cannot be reached in the tree")
        node = node.child(pack_evaluation(hidden, node.word))
        attempts += 1
    return attempts


def collect_stats(
    tree: DecisionTree,
    words: Optional[Iterable[str]] = None,
    *,
    max_attempts: int = 6,
    progress: bool = False,
) -> GameStats:
    """
    Replay each of `words` (all words of the tree by default) as the hidden
    word. Games that take more than `max_attempts` guesses count as fails.
    """
    words = tree_words(tree) if words is None else list(words)
    counts: Counter = Counter()
    stats = GameStats()
    for w in tqdm(words, desc="Replaying", unit="word", disable=not progress, leave=False):
        n = play_hidden_word(tree, w)
        counts[n] += 1
        if n > max_attempts:
            stats.fails.append(w)
        stats.max_attempts = max(stats.max_attempts, n)
    stats.attempts = dict(sorted(counts.items()))
    stats.total = len(words)
    logger.debug("replayed %d words, %d fails", stats.total, stats.fail_count)
    return stats


def chain_histogram(tree: DecisionTree) -> Dict[int, int]:
    """
    Attempts histogram from root-to-leaf chains.

    A chain ends with its answer; the attempt count is the position where that
    word is first guessed (it may have been guessed before reaching the leaf).
    """
    counts: Counter = Counter()
    chain: List[str] = []

    def visit(node: DecisionTree) -> None:
        chain.append(node.word)
        if node.is_leaf:
            counts[chain.index(node.word) + 1] += 1
        for child in node.edges.values():
            visit(child)
        chain.pop()

    visit(tree)
    return dict(sorted(counts.items()))
