"""
tree.py

Decision trees: every node names the word to guess next and maps each packed
feedback code to the subtree for the words that produce it.

- `TreeBuilder` grows a tree over a candidate set with `CandidateSearch`.
- `validate_tree` checks a tree (typically one just loaded from disk) before
  anything navigates it.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from wordtree.alphabet import Word, check_compatible
from wordtree.errors import (
    EmptyAttackPool,
    EmptyCandidateSet,
    InvalidTreeFormat,
    NoCandidatesLeft,
)
from wordtree.feedback import Evaluation, code_count, pack_evaluation
from wordtree.search import CandidateSearch

logger = logging.getLogger(__name__)

MAX_WORD_LENGTH = 19


@dataclass(frozen=True)
class DecisionTree:
    word: str
    edges: Mapping[int, "DecisionTree"] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # freeze the edge map so the tree can be shared between readers
        object.__setattr__(self, "edges", MappingProxyType(dict(self.edges)))

    @property
    def is_leaf(self) -> bool:
        return not self.edges

    def child(self, code: int) -> "DecisionTree":
        """Subtree for feedback `code`; NoCandidatesLeft if no word gives it."""
        node = self.edges.get(code)
        if node is not None:
            return node
        if isinstance(code, int) and 0 <= code < code_count(len(self.word)):
            feedback = repr(Evaluation.unpack(code, self.word).to_mask())
        else:
            feedback = f"code {code!r}"
        raise NoCandidatesLeft(
            f"no words left after {self.word!r} with feedback {feedback}; "
            "one of the previous masks was probably entered incorrectly"
        )

    def walk(self) -> Iterator["DecisionTree"]:
        """Pre-order traversal of every node."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.edges.values())))

    def depth(self) -> int:
        if not self.edges:
            return 1
        return 1 + max(child.depth() for child in self.edges.values())

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())


def partition(candidates: Sequence[Word], guess: Word) -> Dict[int, List[Word]]:
    """Group `candidates` by the packed feedback `guess` would get from each."""
    groups: Dict[int, List[Word]] = defaultdict(list)
    for hidden in candidates:
        groups[pack_evaluation(hidden, guess)].append(hidden)
    return dict(groups)


class TreeBuilder:
    """
    Recursive decision-tree generator.

    Parameters
    ----------
    attack_pool : sequence of Word
        Words the tree may guess.
    search : CandidateSearch, optional
        Guess selection; a default sequential search if omitted.
    opening : sequence of Word, default=()
        Forced guesses for the first levels (opening[d] is used at depth d
        whenever more than one candidate remains).
    dual_depth : int, default=0
        Number of top levels that pick guesses in pairs with
        `select_guess_pair`.
    """

    def __init__(
        self,
        attack_pool: Sequence[Word],
        *,
        search: Optional[CandidateSearch] = None,
        opening: Sequence[Word] = (),
        dual_depth: int = 0,
    ) -> None:
        if dual_depth < 0:
            raise ValueError("dual_depth must not be negative")
        self.attack_pool = list(attack_pool)
        self.search = search or CandidateSearch()
        self.opening = list(opening)
        self.dual_depth = int(dual_depth)

    def build(self, candidates: Sequence[Word]) -> DecisionTree:
        # candidates must be distinct: two equal words can never be split apart
        candidates = list(dict.fromkeys(candidates))
        if not candidates:
            raise EmptyCandidateSet("the global dictionary must not be empty")
        if not self.attack_pool:
            raise EmptyAttackPool("the attack dictionary must not be empty")
        length = len(candidates[0])
        alphabet = candidates[0].alphabet
        check_compatible(candidates, length, alphabet)
        check_compatible(self.attack_pool, length, alphabet)
        check_compatible(self.opening, length, alphabet)

        logger.info(
            "building tree over %d candidates with %d attack words",
            len(candidates), len(self.attack_pool),
        )
        tree = self._make(candidates, 0)
        logger.info("tree built: %d nodes, depth %d", len(tree), tree.depth())
        return tree

    # -------------------------
    # Recursion
    # -------------------------
    def _make(self, candidates: List[Word], depth: int) -> DecisionTree:
        if depth < self.dual_depth and len(candidates) > 1:
            node = self._make_dual(candidates, depth)
            if node is not None:
                return node
        guess = self._choose(candidates, depth)
        groups = partition(candidates, guess)
        if len(groups) == 1 and len(candidates) > 1:
            logger.warning(
                "guess %s does not split %d candidates; choosing among the candidates",
                guess, len(candidates),
            )
            guess = self.search.select_guess(candidates, candidates)
            groups = partition(candidates, guess)
        return self._node(guess, groups, depth + 1)

    def _choose(self, candidates: List[Word], depth: int) -> Word:
        if depth < len(self.opening) and len(candidates) > 1:
            return self.opening[depth]
        return self.search.select_guess(candidates, self.attack_pool)

    def _node(self, guess: Word, groups: Dict[int, List[Word]], depth: int) -> DecisionTree:
        if len(groups) == 1:
            return DecisionTree(guess.text)
        edges = {code: self._make(words, depth) for code, words in sorted(groups.items())}
        return DecisionTree(guess.text, edges)

    def _make_dual(self, candidates: List[Word], depth: int) -> Optional[DecisionTree]:
        """
        Guess two words in a row: the second guess becomes a synthetic node
        under every first-guess partition it can still split.

        Returns None when no usable pair exists; the caller falls back to a
        single guess.
        """
        if depth < len(self.opening):
            return None
        try:
            first, second = self.search.select_guess_pair(candidates, self.attack_pool)
        except EmptyAttackPool:
            logger.debug("no distinct-letter pair available at depth %d", depth)
            return None
        groups = partition(candidates, first)
        if len(groups) == 1:
            return None

        edges: Dict[int, DecisionTree] = {}
        for code, words in sorted(groups.items()):
            if len(words) <= 1:
                edges[code] = self._make(words, depth + 1)
                continue
            sub_groups = partition(words, second)
            if len(sub_groups) == 1:
                edges[code] = self._make(words, depth + 1)
            else:
                edges[code] = self._node(second, sub_groups, depth + 2)
        return DecisionTree(first.text, edges)


# -----------------------------
# Validation
# -----------------------------

def validate_tree(tree: DecisionTree) -> int:
    """
    Check a tree before trusting it; returns the word length.

    Raises InvalidTreeFormat when a word length is outside 1..19 or differs
    from the root's, when an edge key is not an int code in [0, 3**L), or when
    a code does not survive unpack/pack against its node's word.
    """
    if not isinstance(tree, DecisionTree) or not isinstance(tree.word, str):
        raise InvalidTreeFormat("tree root is not a decision tree node")
    length = len(tree.word)
    if length < 1 or length > MAX_WORD_LENGTH:
        raise InvalidTreeFormat(f"expected word length range is 1..{MAX_WORD_LENGTH}, got {length}")
    limit = code_count(length)

    for node in tree.walk():
        if not isinstance(node.word, str) or len(node.word) != length:
            raise InvalidTreeFormat("not all the words of the tree have the same length")
        for code in node.edges:
            if isinstance(code, bool) or not isinstance(code, int):
                raise InvalidTreeFormat(f"edge key {code!r} is not an integer code")
            if code < 0 or code >= limit:
                raise InvalidTreeFormat(
                    f"edge code {code} outside [0, {limit}) under {node.word!r}"
                )
            if Evaluation.unpack(code, node.word).pack() != code:
                raise InvalidTreeFormat(
                    f"edge code {code} is not a feedback {node.word!r} can receive"
                )
    return length


def tree_words(tree: DecisionTree) -> List[str]:
    """Sorted distinct words that appear anywhere in the tree."""
    return sorted({node.word for node in tree.walk()})
