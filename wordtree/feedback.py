"""
Feedback utilities.

A guess compared against a hidden word yields one mark per position:

- ABSENT  (0, mask symbol `g`)  letter not present OR over-used relative to hidden counts
- PRESENT (1, mask symbol `w`)  letter present but in a different position
- CORRECT (2, mask symbol `y`)  letter matches the hidden word at that position

The marks of a word of length L pack into a base-3 integer in [0, 3**L),
most significant digit first.
"""

from __future__ import annotations

from collections import Counter
from enum import IntEnum
from typing import Iterator, Sequence, Tuple

from wordtree.alphabet import Word
from wordtree.errors import AlphabetMismatch, InvalidMask, WordLengthMismatch


class Mark(IntEnum):
    ABSENT = 0
    PRESENT = 1
    CORRECT = 2


BASE = len(Mark)

MASK_SYMBOLS = {
    "g": Mark.ABSENT,
    "w": Mark.PRESENT,
    "y": Mark.CORRECT,
    "0": Mark.ABSENT,
    "1": Mark.PRESENT,
    "2": Mark.CORRECT,
}

SYMBOL_BY_MARK = {Mark.ABSENT: "g", Mark.PRESENT: "w", Mark.CORRECT: "y"}


def score_pattern(guess: Sequence, target: Sequence) -> list[int]:
    """
    Compute the per-position feedback for `guess` against `target`.

    Both arguments may be strings or sequences of letter indices (e.g. `Word`).

    Returns
    -------
    list[int]
        A list of length len(guess) with values in {0, 1, 2}.

    Duplicate handling (two-pass rule)
    ----------------------------------
    1) Mark greens and count the target letters that were not matched in place.
    2) Walk left to right; a non-green position is yellow while its letter still
       has unmatched occurrences left in the target, consuming one each time.
    """
    if len(guess) != len(target):
        raise WordLengthMismatch(
            f"guess and target lengths differ: {len(guess)} != {len(target)}"
        )

    pattern: list[int] = [0] * len(guess)
    remaining: Counter = Counter()

    # Pass 1: greens, and availability of everything that is not green
    for i, (g, t) in enumerate(zip(guess, target)):
        if g == t:
            pattern[i] = 2
        else:
            remaining[t] += 1

    # Pass 2: yellows where counts allow (else gray)
    for i, g in enumerate(guess):
        if pattern[i] == 0 and remaining[g] > 0:
            pattern[i] = 1
            remaining[g] -= 1

    return pattern


def pattern_to_int(pattern: Sequence[int]) -> int:
    """
    Encode a trit pattern [p0, p1, ...] (each in {0,1,2}) into a single integer.

    value = value * 3 + p for each element in order, so p0 is the most
    significant digit.
    """
    if not isinstance(pattern, (list, tuple)):
        raise TypeError("pattern must be a list or tuple of integers in {0,1,2}")
    if not pattern:
        raise ValueError("pattern must not be empty")
    value = 0
    for p in pattern:
        if not isinstance(p, int) or p not in (0, 1, 2):
            raise ValueError("pattern elements must be integers in {0,1,2}")
        value = value * BASE + p
    return value


def int_to_pattern(code: int, length: int) -> list[int]:
    """Inverse of `pattern_to_int` for a word of `length` letters."""
    if length <= 0:
        raise ValueError("length must be positive")
    if code < 0 or code >= BASE ** length:
        raise ValueError(f"code {code} out of range for length {length}")
    digits: list[int] = []
    for _ in range(length):
        digits.append(code % BASE)
        code //= BASE
    digits.reverse()
    return digits


def _check_operands(hidden: Sequence, guess: Sequence) -> None:
    """Both operands must be text, or both `Word`s of one alphabet."""
    hidden_is_word = isinstance(hidden, Word)
    if hidden_is_word != isinstance(guess, Word):
        raise AlphabetMismatch("cannot compare a Word with plain text")
    if hidden_is_word and hidden.alphabet is not guess.alphabet and hidden.alphabet != guess.alphabet:
        raise AlphabetMismatch("hidden word and guess use different alphabets")


def normalize(marks: Sequence[int], guess: Sequence) -> Tuple[Mark, ...]:
    """
    Put human or unpacked marks into the form a real comparison produces.

    Counts how many positions of each letter were marked PRESENT, then hands
    those PRESENT marks back out to the leftmost non-CORRECT occurrences of the
    letter; the remaining non-CORRECT occurrences become ABSENT.
    """
    if len(marks) != len(guess):
        raise WordLengthMismatch(
            f"guess has {len(guess)} letters but {len(marks)} marks were given"
        )
    presence: Counter = Counter(
        letter for letter, mark in zip(guess, marks) if mark == Mark.PRESENT
    )
    out: list[Mark] = []
    for letter, mark in zip(guess, marks):
        if mark == Mark.CORRECT:
            out.append(Mark.CORRECT)
        elif presence[letter] > 0:
            out.append(Mark.PRESENT)
            presence[letter] -= 1
        else:
            out.append(Mark.ABSENT)
    return tuple(out)


class Evaluation:
    """Immutable sequence of marks produced by comparing a guess with a word."""

    __slots__ = ("_marks",)

    def __init__(self, marks: Sequence[int]) -> None:
        if not marks:
            raise ValueError("an evaluation needs at least one mark")
        self._marks: Tuple[Mark, ...] = tuple(Mark(m) for m in marks)

    # -------------------------
    # Construction
    # -------------------------
    @classmethod
    def from_words(cls, hidden: Sequence, guess: Sequence) -> "Evaluation":
        _check_operands(hidden, guess)
        return cls(score_pattern(guess, hidden))

    @classmethod
    def unpack(cls, code: int, guess: Sequence) -> "Evaluation":
        """Rebuild the evaluation `code` encodes for `guess`."""
        return cls(normalize(int_to_pattern(code, len(guess)), guess))

    @classmethod
    def from_mask(cls, mask: str, guess: Sequence) -> "Evaluation":
        """
        Parse user feedback such as `gwggy` for `guess`.

        Raises InvalidMask on a wrong length or an unknown symbol.
        """
        if not isinstance(mask, str):
            raise InvalidMask("mask must be a string")
        mask = mask.strip().lower()
        if len(mask) != len(guess):
            raise InvalidMask(
                f"the mask must contain exactly {len(guess)} characters, got {len(mask)}"
            )
        try:
            marks = [MASK_SYMBOLS[ch] for ch in mask]
        except KeyError:
            raise InvalidMask(
                f"mask {mask!r} contains an unacceptable character; "
                "expecting only `g`, `w`, `y` (or 0, 1, 2)"
            ) from None
        return cls(normalize(marks, guess))

    @classmethod
    def solved(cls, length: int) -> "Evaluation":
        return cls([Mark.CORRECT] * length)

    # -------------------------
    # Encoding
    # -------------------------
    def pack(self) -> int:
        value = 0
        for m in self._marks:
            value = value * BASE + int(m)
        return value

    def to_mask(self) -> str:
        return "".join(SYMBOL_BY_MARK[m] for m in self._marks)

    def to_pattern(self) -> list[int]:
        return [int(m) for m in self._marks]

    @property
    def marks(self) -> Tuple[Mark, ...]:
        return self._marks

    @property
    def is_solved(self) -> bool:
        return all(m == Mark.CORRECT for m in self._marks)

    # -------------------------
    # Sequence protocol
    # -------------------------
    def __len__(self) -> int:
        return len(self._marks)

    def __getitem__(self, idx: int) -> Mark:
        return self._marks[idx]

    def __iter__(self) -> Iterator[Mark]:
        return iter(self._marks)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Evaluation):
            return NotImplemented
        return self._marks == other._marks

    def __hash__(self) -> int:
        return hash(self._marks)

    def __repr__(self) -> str:
        return f"Evaluation({self.to_mask()!r})"


def evaluate(hidden: Sequence, guess: Sequence) -> Evaluation:
    """Compare `guess` against `hidden`; see `score_pattern` for the rules."""
    return Evaluation.from_words(hidden, guess)


def pack_evaluation(hidden: Sequence, guess: Sequence) -> int:
    """Packed code of `evaluate(hidden, guess)` without building the object."""
    _check_operands(hidden, guess)
    value = 0
    for p in score_pattern(guess, hidden):
        value = value * BASE + p
    return value


def code_count(length: int) -> int:
    """Number of distinct codes for words of `length` letters."""
    return BASE ** length


if __name__ == "__main__":
    # Quick sanity checks
    assert score_pattern("crane", "crane") == [2, 2, 2, 2, 2]
    assert score_pattern("allot", "total") == [1, 1, 0, 1, 1]
    assert score_pattern("abbey", "cabin") == [1, 0, 2, 0, 0]
    assert score_pattern("press", "spree") == [1, 1, 1, 1, 0]
    assert evaluate("канон", "калан").to_mask() == "yyggy"
    assert pattern_to_int([2, 2, 2, 2, 2]) == 242
    assert pattern_to_int([0, 0, 0, 0, 0]) == 0
    print("feedback.py sanity checks passed.")
