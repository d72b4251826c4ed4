"""
constraints.py

Turns a guess and its feedback into letter-count bounds and per-slot identity
constraints, and filters candidate words against them.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

from wordtree.alphabet import Word
from wordtree.errors import AlphabetMismatch, WordLengthMismatch
from wordtree.feedback import Evaluation, Mark


class ConstraintState:
    """
    Everything one (guess, evaluation) pair says about the hidden word.

    - Slot i must hold guess[i] when it was marked CORRECT, and must not hold
      guess[i] otherwise.
    - Each guess letter needs at least as many occurrences as it received
      PRESENT/CORRECT marks. If any of its occurrences was marked ABSENT the
      bound is exact: no more occurrences than that.
    """

    def __init__(self, guess: Word, evaluation: Evaluation):
        if len(evaluation) != len(guess):
            raise WordLengthMismatch(
                f"guess has {len(guess)} letters but the evaluation has {len(evaluation)}"
            )
        self.guess = guess
        self.evaluation = evaluation
        self.word_length = len(guess)
        self.alphabet_size = len(guess.alphabet)

        # Pass 1: slot-level constraints and per-letter green+yellow counts
        self.position_letters: Tuple[int, ...] = guess.letters
        self.position_correct: Tuple[bool, ...] = tuple(m == Mark.CORRECT for m in evaluation)
        self.min_counts = [0] * self.alphabet_size
        self.exact = [False] * self.alphabet_size
        for li, mark in zip(guess.letters, evaluation):
            if mark == Mark.ABSENT:
                self.exact[li] = True
            else:
                self.min_counts[li] += 1

        # Pass 2: only letters of the guess carry a bound
        self.bounded_letters: Tuple[int, ...] = tuple(sorted(set(guess.letters)))

        # reusable scratch buffer for matches()
        self._counts = [0] * self.alphabet_size

    @classmethod
    def from_hidden(cls, guess: Word, hidden: Word) -> "ConstraintState":
        return cls(guess, Evaluation.from_words(hidden, guess))

    @classmethod
    def from_mask(cls, guess: Word, mask: str) -> "ConstraintState":
        return cls(guess, Evaluation.from_mask(mask, guess))

    def matches(self, word: Word) -> bool:
        if len(word) != self.word_length:
            raise WordLengthMismatch(
                f"word {word.text!r} has {len(word)} letters, expected {self.word_length}"
            )
        if word.alphabet is not self.guess.alphabet and word.alphabet != self.guess.alphabet:
            raise AlphabetMismatch(f"word {word.text!r} uses a different alphabet than the guess")
        letters = word.letters
        for i, li in enumerate(letters):
            if (li == self.position_letters[i]) != self.position_correct[i]:
                return False

        counts = self._counts
        for li in letters:
            counts[li] += 1
        ok = True
        for li in self.bounded_letters:
            c = counts[li]
            if c < self.min_counts[li] or (self.exact[li] and c != self.min_counts[li]):
                ok = False
                break
        for li in letters:
            counts[li] = 0
        return ok

    def match_array(self, letters: np.ndarray) -> np.ndarray:
        """
        Vectorized `matches` over an (n, L) integer matrix of letter indices.

        Returns a boolean array of length n.
        """
        if letters.ndim != 2 or letters.shape[1] != self.word_length:
            raise WordLengthMismatch(
                f"expected an (n, {self.word_length}) letter matrix, got {letters.shape}"
            )
        ok = np.ones(letters.shape[0], dtype=bool)
        for i, (li, correct) in enumerate(zip(self.position_letters, self.position_correct)):
            same = letters[:, i] == li
            ok &= same if correct else ~same
        for li in self.bounded_letters:
            counts = np.count_nonzero(letters == li, axis=1)
            if self.exact[li]:
                ok &= counts == self.min_counts[li]
            elif self.min_counts[li]:
                ok &= counts >= self.min_counts[li]
        return ok

    def __repr__(self) -> str:
        return f"ConstraintState({self.guess.text!r}, {self.evaluation.to_mask()!r})"


def letter_matrix(words: Sequence[Word]) -> np.ndarray:
    """Stack words into an (n, L) int matrix for `ConstraintState.match_array`."""
    if not words:
        return np.zeros((0, 0), dtype=np.int32)
    return np.array([w.letters for w in words], dtype=np.int32)


def filter_candidates(
    words: Iterable[Word], history: List[Tuple[Word, Evaluation]]
) -> List[Word]:
    """
    Keep only candidates that match *all* (guess, evaluation) pairs in history.
    """
    states = [ConstraintState(guess, ev) for guess, ev in history]
    return [w for w in words if all(s.matches(w) for s in states)]
