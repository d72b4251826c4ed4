"""
search.py

Pick the guess that splits a candidate set most aggressively.

Metric per guess (lower is better)
----------------------------------
For every hidden word h in the candidate set, let n_h be how many candidates
are still consistent after guessing g and seeing the feedback h would give.
The metric is sum(n_h ** 2) over h, accumulated one hidden word at a time
(each word adds 1 + 3 + 5 + ... + (2 n_h - 1)). Small, even partitions win.

Because the running sum only grows, a guess is abandoned as soon as it
exceeds the best complete metric seen so far.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from wordtree.alphabet import Word, check_compatible
from wordtree.constraints import ConstraintState, letter_matrix
from wordtree.errors import EmptyAttackPool, EmptyCandidateSet, NoCandidatesLeft
from wordtree.feedback import pack_evaluation

logger = logging.getLogger(__name__)

Option = Tuple[Word, ...]


# -----------------------------
# Scoring core (module-level so worker processes can pickle it)
# -----------------------------

def option_metric(
    option: Option,
    candidates: Sequence[Word],
    matrix: np.ndarray,
    bound: float = math.inf,
) -> int:
    """
    Metric of guessing every word of `option` (one word, or a pair).

    Stops early and returns the partial sum once it exceeds `bound`.
    """
    metric = 0
    # the state, hence its match count, depends only on the feedback codes
    known: Dict[Tuple[int, ...], int] = {}
    for hidden in candidates:
        key = tuple(pack_evaluation(hidden, g) for g in option)
        n = known.get(key)
        if n is None:
            ok = np.ones(matrix.shape[0], dtype=bool)
            for g in option:
                ok &= ConstraintState.from_hidden(g, hidden).match_array(matrix)
            n = int(np.count_nonzero(ok))
            known[key] = n
        metric += n * n
        if metric > bound:
            break
    return metric


def _score_chunk(
    options: Sequence[Option], start: int, candidates: Sequence[Word], prune: bool
) -> Tuple[float, int]:
    """Best (metric, absolute index) within one slice of the option list."""
    matrix = letter_matrix(candidates)
    best_metric: float = math.inf
    best_index = -1
    for offset, option in enumerate(options):
        bound = best_metric if prune else math.inf
        metric = option_metric(option, candidates, matrix, bound)
        if metric < best_metric:
            best_metric, best_index = metric, start + offset
    return best_metric, best_index


# -----------------------------
# Letter masks for the pair search
# -----------------------------

def letter_mask(word: Word) -> int:
    mask = 0
    for li in word.letters:
        mask |= 1 << li
    return mask


def distinct_letter_pairs(attack_pool: Sequence[Word]) -> List[Option]:
    """
    All pairs (i < j) of attack words that together use 2 * L distinct letters.

    Words that repeat a letter are skipped outright.
    """
    if not attack_pool:
        return []
    length = len(attack_pool[0])
    masks = [letter_mask(w) for w in attack_pool]
    unique = [i for i, m in enumerate(masks) if bin(m).count("1") == length]
    pairs: List[Option] = []
    for a, i in enumerate(unique):
        for j in unique[a + 1:]:
            if masks[i] & masks[j] == 0:
                pairs.append((attack_pool[i], attack_pool[j]))
    return pairs


class CandidateSearch:
    """
    Guess selection over a candidate set and an attack pool.

    Parameters
    ----------
    workers : int, default=1
        Number of processes used to score options. 1 keeps everything in the
        calling process.
    progress : bool, default=False
        Show a tqdm progress bar (with ETA) while scoring.
    prune : bool, default=True
        Abandon an option once its running metric exceeds the best so far.
        Turning it off never changes the selected guess, only the runtime.
    """

    def __init__(self, *, workers: int = 1, progress: bool = False, prune: bool = True) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.workers = int(workers)
        self.progress = bool(progress)
        self.prune = bool(prune)

    # -------------------------
    # Public API
    # -------------------------
    def select_guess(self, candidates: Sequence[Word], attack_pool: Sequence[Word]) -> Word:
        if not candidates:
            raise EmptyCandidateSet("no candidate words to choose from")
        if len(candidates) == 1:
            return candidates[0]
        if not attack_pool:
            raise EmptyAttackPool("no attack words")
        self._validate(candidates, attack_pool)

        options: List[Option] = [(w,) for w in attack_pool]
        (guess,), metric = self._search(options, candidates, "Scoring guesses")
        logger.debug(
            "guess %s, metric %d, %d candidates, %d attack words",
            guess, metric, len(candidates), len(attack_pool),
        )
        return guess

    def select_guess_pair(
        self, candidates: Sequence[Word], attack_pool: Sequence[Word]
    ) -> Tuple[Word, Word]:
        """
        Best pair of guesses scored by their joint partition.

        Only pairs whose letters are all distinct are considered, which keeps
        the search far below |attack_pool|**2 options.
        """
        if not candidates:
            raise NoCandidatesLeft("no candidate words left")
        if len(candidates) == 1:
            return candidates[0], candidates[0]
        if not attack_pool:
            raise EmptyAttackPool("no attack words")
        self._validate(candidates, attack_pool)

        options = distinct_letter_pairs(attack_pool)
        if not options:
            raise EmptyAttackPool("no pair of attack words uses only distinct letters")
        (first, second), metric = self._search(options, candidates, "Scoring guess pairs")
        logger.debug(
            "guess pair %s + %s, metric %d, %d candidates, %d pairs",
            first, second, metric, len(candidates), len(options),
        )
        return first, second

    def metric(self, candidates: Sequence[Word], guess: Word) -> int:
        """Full (unpruned) metric of a single guess."""
        if not candidates:
            raise EmptyCandidateSet("no candidate words to score against")
        self._validate(candidates, [guess])
        return option_metric((guess,), candidates, letter_matrix(candidates))

    # -------------------------
    # Helpers
    # -------------------------
    @staticmethod
    def _validate(candidates: Sequence[Word], attack_pool: Sequence[Word]) -> None:
        length = len(candidates[0])
        alphabet = candidates[0].alphabet
        check_compatible(candidates, length, alphabet)
        check_compatible(attack_pool, length, alphabet)

    def _search(
        self, options: List[Option], candidates: Sequence[Word], desc: str
    ) -> Tuple[Option, int]:
        if self.workers > 1 and len(options) > self.workers:
            metric, index = self._search_parallel(options, candidates, desc)
        else:
            metric, index = self._search_sequential(options, candidates, desc)
        return options[index], int(metric)

    def _search_sequential(
        self, options: List[Option], candidates: Sequence[Word], desc: str
    ) -> Tuple[float, int]:
        matrix = letter_matrix(candidates)
        best_metric: float = math.inf
        best_index = 0
        bar = tqdm(options, desc=desc, unit="opt", disable=not self.progress, leave=False)
        for i, option in enumerate(bar):
            bound = best_metric if self.prune else math.inf
            metric = option_metric(option, candidates, matrix, bound)
            if metric < best_metric:
                best_metric, best_index = metric, i
        return best_metric, best_index

    def _search_parallel(
        self, options: List[Option], candidates: Sequence[Word], desc: str
    ) -> Tuple[float, int]:
        # several chunks per worker so a slow chunk does not idle the pool
        chunk_count = self.workers * 4
        size = max(1, math.ceil(len(options) / chunk_count))
        results: List[Tuple[float, int]] = []
        with ProcessPoolExecutor(max_workers=self.workers) as executor:
            futures = [
                executor.submit(_score_chunk, options[s:s + size], s, list(candidates), self.prune)
                for s in range(0, len(options), size)
            ]
            bar = tqdm(
                as_completed(futures), total=len(futures), desc=desc, unit="chunk",
                disable=not self.progress, leave=False,
            )
            for future in bar:
                results.append(future.result())
        # ties go to the earliest option, as in the sequential scan
        return min(r for r in results if r[1] >= 0)


def select_guess(
    candidates: Sequence[Word],
    attack_pool: Sequence[Word],
    search: Optional[CandidateSearch] = None,
) -> Word:
    return (search or CandidateSearch()).select_guess(candidates, attack_pool)


def select_guess_pair(
    candidates: Sequence[Word],
    attack_pool: Sequence[Word],
    search: Optional[CandidateSearch] = None,
) -> Tuple[Word, Word]:
    return (search or CandidateSearch()).select_guess_pair(candidates, attack_pool)
