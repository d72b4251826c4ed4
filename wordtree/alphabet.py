"""
alphabet.py

Dense integer codes for the letters of a corpus, and fixed-length words
expressed in those codes.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence, Tuple

from wordtree.errors import AlphabetMismatch, WordLengthMismatch


class Alphabet:
    """Bijection between the distinct characters of a corpus and 0..N-1."""

    __slots__ = ("_chars", "_index")

    def __init__(self, chars: Sequence[str]) -> None:
        chars = tuple(chars)
        if any(not isinstance(c, str) or len(c) != 1 for c in chars):
            raise TypeError("alphabet entries must be single characters")
        if len(set(chars)) != len(chars):
            raise ValueError("alphabet characters must be distinct")
        self._chars: Tuple[str, ...] = chars
        self._index = {c: i for i, c in enumerate(chars)}

    @classmethod
    def from_words(cls, words: Iterable[str]) -> "Alphabet":
        """Collect every character used in `words`, sorted by code point."""
        seen = set()
        for w in words:
            seen.update(w)
        return cls(sorted(seen))

    # ---------- Basic protocol ----------

    def __len__(self) -> int:
        return len(self._chars)

    def __iter__(self) -> Iterator[str]:
        return iter(self._chars)

    def __contains__(self, ch: object) -> bool:
        return ch in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Alphabet):
            return NotImplemented
        return self._chars == other._chars

    def __hash__(self) -> int:
        return hash(self._chars)

    def __str__(self) -> str:
        return "".join(self._chars)

    def __repr__(self) -> str:
        return f"Alphabet({str(self)!r})"

    # ---------- Conversion ----------

    def index_of(self, ch: str) -> int:
        try:
            return self._index[ch]
        except KeyError:
            raise AlphabetMismatch(f"alphabet has no character {ch!r}") from None

    def char_at(self, idx: int) -> str:
        if idx < 0 or idx >= len(self._chars):
            raise AlphabetMismatch(f"letter index out of range: {idx}")
        return self._chars[idx]

    def encode(self, text: str) -> Tuple[int, ...]:
        return tuple(self.index_of(c) for c in text)

    def decode(self, letters: Iterable[int]) -> str:
        return "".join(self.char_at(i) for i in letters)

    def word(self, text: str) -> "Word":
        return Word(self.encode(text), self)


class Word:
    """
    Immutable word of letter indices bound to one alphabet.

    Words compare and sort by their letters. Because alphabets are sorted by
    code point, the ordering matches the ordering of the underlying text.
    """

    __slots__ = ("_letters", "_alphabet", "_text")

    def __init__(self, letters: Sequence[int], alphabet: Alphabet) -> None:
        letters = tuple(letters)
        if not letters:
            raise WordLengthMismatch("words must contain at least one letter")
        size = len(alphabet)
        for idx in letters:
            if idx < 0 or idx >= size:
                raise AlphabetMismatch(f"letter index out of range: {idx}")
        self._letters: Tuple[int, ...] = letters
        self._alphabet = alphabet
        self._text = alphabet.decode(letters)

    @classmethod
    def from_text(cls, text: str, alphabet: Alphabet) -> "Word":
        return cls(alphabet.encode(text), alphabet)

    @property
    def letters(self) -> Tuple[int, ...]:
        return self._letters

    @property
    def alphabet(self) -> Alphabet:
        return self._alphabet

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._letters)

    def __getitem__(self, idx: int) -> int:
        return self._letters[idx]

    def __iter__(self) -> Iterator[int]:
        return iter(self._letters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Word):
            return NotImplemented
        return self._letters == other._letters and self._alphabet == other._alphabet

    def __lt__(self, other: "Word") -> bool:
        if not isinstance(other, Word):
            return NotImplemented
        return self._letters < other._letters

    def __hash__(self) -> int:
        return hash(self._letters)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Word({self._text!r})"

    def __getstate__(self):
        return self._letters, self._alphabet

    def __setstate__(self, state) -> None:
        letters, alphabet = state
        self._letters = letters
        self._alphabet = alphabet
        self._text = alphabet.decode(letters)


def check_compatible(words: Iterable[Word], length: int, alphabet: Alphabet) -> None:
    """Raise unless every word has `length` letters from `alphabet`."""
    for w in words:
        if len(w) != length:
            raise WordLengthMismatch(
                f"word {w.text!r} has {len(w)} letters, expected {length}"
            )
        if w.alphabet != alphabet:
            raise AlphabetMismatch(f"word {w.text!r} uses a different alphabet")
