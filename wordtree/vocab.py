from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import pandas as pd

from wordtree.alphabet import Alphabet, Word
from wordtree.errors import (
    EmptyAttackPool,
    EmptyCandidateSet,
    InvalidDictionary,
    WordLengthMismatch,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class WordVocab:
    def __init__(self, words: List[str], alphabet: Optional[Alphabet] = None) -> None:
        if not isinstance(words, list):
            raise TypeError("`words` must be a list of strings")
        if not words:
            raise EmptyCandidateSet("no words provided")
        if not all(isinstance(w, str) for w in words):
            raise TypeError("all items in `words` must be str")

        # Enforce uniqueness (first occurrence policy is handled by read_word_list)
        if len(set(words)) != len(words):
            raise ValueError("duplicate words detected; input to WordVocab must be deduplicated")

        length = len(words[0])
        for w in words:
            if len(w) != length:
                raise WordLengthMismatch(
                    f"not all the words have the same length: {w!r} has {len(w)}, expected {length}"
                )

        self._alphabet = alphabet if alphabet is not None else Alphabet.from_words(words)
        self._texts: List[str] = list(words)
        self._words: List[Word] = [self._alphabet.word(w) for w in words]
        self._index = {w: i for i, w in enumerate(self._texts)}

    # ---------- Construction helpers ----------

    @classmethod
    def from_file(cls, path: PathLike, *, alphabet: Optional[Alphabet] = None) -> "WordVocab":
        return cls(read_word_list(path), alphabet)

    # ---------- Basic protocol ----------

    def __len__(self) -> int:
        """Number of words in the vocabulary."""
        return len(self._words)

    @property
    def alphabet(self) -> Alphabet:
        return self._alphabet

    @property
    def word_length(self) -> int:
        return len(self._texts[0])

    def words(self) -> List[Word]:
        """Return a copy of the internal word list (to avoid external mutation)."""
        return list(self._words)

    def texts(self) -> List[str]:
        return list(self._texts)

    def contains(self, word: str) -> bool:
        """Return True iff `word` exists in the vocabulary (case-sensitive)."""
        return word in self._index

    def index_of(self, word: str) -> int:
        """Return the index for `word`; raise KeyError if unknown."""
        try:
            return self._index[word]
        except KeyError:
            raise KeyError(f"unknown word: {word}") from None

    def word_at(self, idx: int) -> Word:
        """Return the word at position `idx`; raise IndexError if out of bounds."""
        if idx < 0 or idx >= len(self._words):
            raise IndexError(f"index out of range: {idx}")
        return self._words[idx]

    def lookup(self, word: str) -> Word:
        return self.word_at(self.index_of(word))


def read_word_list(path: PathLike, column: str = "word") -> List[str]:
    """
    Read a dictionary file into a deduplicated list of lowercase words.

    Parameters
    ----------
    path : str or Path
        Either a plain UTF-8 file with one word per line, or a `.csv` file
        with a header row.
    column : str, default="word"
        Column holding the words when `path` is a CSV.

    Raises
    ------
    FileNotFoundError, KeyError
    InvalidDictionary
        If a line of a plain word list holds a tab, or a CSV is malformed.
    """
    path = Path(path)
    try:
        if path.suffix.lower() == ".csv":
            df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
            if column not in df.columns:
                raise KeyError(f"column '{column}' not found in {path}")
        else:
            # one field per line: commas and quotes belong to the word
            df = pd.read_csv(
                path,
                sep="\t",
                header=None,
                names=[column],
                quoting=csv.QUOTE_NONE,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding="utf-8",
            )
            # extra fields on the first line turn into an implicit index
            if not isinstance(df.index, pd.RangeIndex):
                raise InvalidDictionary(f"{path} has more than one field on a line")
    except pd.errors.EmptyDataError:
        logger.warning("The dictionary `%s` is empty.", path)
        return []
    except pd.errors.ParserError as e:
        raise InvalidDictionary(f"cannot parse the dictionary {path}: {e}") from e
    raw = df[column]

    clean: List[str] = []
    seen = set()
    duplicates = 0
    for val in raw.astype(str).str.strip().str.lower():
        if not val:
            continue
        if val in seen:
            duplicates += 1
            continue
        seen.add(val)
        clean.append(val)

    if duplicates:
        logger.warning("The dictionary `%s` contains %d duplicates.", path, duplicates)
    return clean


def load_dictionaries(paths: Iterable[PathLike]) -> Tuple[WordVocab, WordVocab]:
    """
    Load one or more dictionaries.

    Returns (global_vocab, attack_vocab): the sorted union of all words (the
    hidden-word candidates) and the sorted intersection of all files (the words
    the solver may guess). Both share the alphabet of the union.
    """
    union: set = set()
    intersection: Optional[set] = None
    for p in paths:
        words = set(read_word_list(p))
        union |= words
        intersection = words if intersection is None else intersection & words

    if not union:
        raise EmptyCandidateSet("the global dictionary doesn't contain words")
    if not intersection:
        raise EmptyAttackPool("the attack dictionary doesn't contain words")

    global_vocab = WordVocab(sorted(union))
    attack_vocab = WordVocab(sorted(intersection), global_vocab.alphabet)
    logger.info(
        "loaded %d global words and %d attack words; alphabet %s (%d letters)",
        len(global_vocab), len(attack_vocab), global_vocab.alphabet, len(global_vocab.alphabet),
    )
    return global_vocab, attack_vocab
